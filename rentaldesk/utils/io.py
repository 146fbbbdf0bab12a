"""File I/O utilities for uploads."""
from loguru import logger

from rentaldesk.exceptions import RentalDeskError
from rentaldesk.models.attachment import LocalFile


class FileAccessError(RentalDeskError):
    """Raised when a local file chosen for upload cannot be read."""
    pass


def read_upload(local_file: LocalFile) -> bytes:
    """
    Read the content of a file chosen for upload.

    :param local_file: File picked by the user
    :return: Raw file content
    :raises FileAccessError: If the file cannot be read
    """
    try:
        with open(local_file.path, 'rb') as f:
            content = f.read()
    except PermissionError as e:
        raise FileAccessError(f"Permission denied reading '{local_file.path}': {e}") from e
    except OSError as e:
        raise FileAccessError(f"Failed to read '{local_file.path}': {e}") from e
    logger.debug(f"Read {len(content)} bytes from {local_file.path}")
    return content

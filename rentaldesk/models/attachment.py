from __future__ import annotations

import os
from enum import Enum

from pydantic import BaseModel, ConfigDict

from rentaldesk.models.document import Document, mime_type_for


class Origin(str, Enum):
    NEW = 'new'
    EXISTING = 'existing'


class LocalFile(BaseModel):
    """
    A file chosen locally for upload. Frozen, so two selections of the same file
    compare and hash equal.
    """
    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    mime_type: str = ''
    size: int = 0

    @classmethod
    def from_path(cls, path: str) -> LocalFile:
        """
        Build a local file from a filesystem path.

        :param path: Path to an existing file
        :return: The local file with name, MIME type and size filled in
        :raises FileNotFoundError: If the path does not exist
        """
        path = os.path.abspath(os.path.expanduser(path))
        if not os.path.isfile(path):
            raise FileNotFoundError(f"No such file: '{path}'")
        name = os.path.basename(path)
        return cls(path=path, name=name, mime_type=mime_type_for(name), size=os.path.getsize(path))


class Attachment(BaseModel):
    """
    One file shown in an uploader, either newly chosen or already persisted.

    ``location`` is a transient local reference for new files and the storage
    path for existing ones.
    """
    name: str = ''
    mime_hint: str = ''
    size_bytes: int = 0
    location: str
    origin: Origin
    local_file: LocalFile | None = None

    @property
    def is_new(self) -> bool:
        return self.origin == Origin.NEW

    @classmethod
    def from_document(cls, document: Document) -> Attachment:
        return cls(
            name=document.name,
            mime_hint=document.type,
            size_bytes=document.size,
            location=document.url,
            origin=Origin.EXISTING,
        )

    @classmethod
    def from_local_file(cls, local_file: LocalFile, reference: str) -> Attachment:
        return cls(
            name=local_file.name,
            mime_hint=local_file.mime_type,
            size_bytes=local_file.size,
            location=reference,
            origin=Origin.NEW,
            local_file=local_file,
        )

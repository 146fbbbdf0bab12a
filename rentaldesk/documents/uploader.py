from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence

from loguru import logger

from rentaldesk.documents import registry
from rentaldesk.documents.preview import Preview, build_preview
from rentaldesk.documents.registry import DocumentState, LocalReferences
from rentaldesk.exceptions import RentalDeskError, ValidationError
from rentaldesk.models.attachment import Attachment, LocalFile
from rentaldesk.models.document import Document
from rentaldesk.notifications import LogNotifier, Notifier

NewFilesCallback = Callable[[list[LocalFile]], None]
RemoteRemover = Callable[[Attachment], Awaitable[None]]


class Uploader:
    """
    Interactive document list of one form.

    Persisted documents are removed through ``remove_existing`` when given. Without
    a remover the removal stays pending until the parent record is saved.
    """

    def __init__(
        self,
        existing: Sequence[Document],
        server_origin: str,
        new_files: Sequence[LocalFile] = (),
        on_new_files_change: NewFilesCallback | None = None,
        remove_existing: RemoteRemover | None = None,
        notifier: Notifier | None = None,
        read_only: bool = False,
        multiple: bool = True,
        references: LocalReferences | None = None
    ):
        """
        :param existing: Persisted documents of the parent record
        :param server_origin: Origin used to build preview URLs
        :param new_files: Files already chosen locally
        :param on_new_files_change: Called with the full list whenever local files change
        :param remove_existing: Async callable deleting one persisted document remotely
        :param notifier: Where removal failures are reported
        :param read_only: Hide add and remove controls
        :param multiple: Allow several attachments; otherwise a new file replaces the rest on display
        :param references: Shared transient reference pool
        """
        self.state = DocumentState(existing=tuple(existing), new_files=tuple(new_files))
        self.server_origin = server_origin
        self.on_new_files_change = on_new_files_change
        self.remove_existing = remove_existing
        self.notifier = notifier or LogNotifier()
        self.read_only = read_only
        self.multiple = multiple
        self.references = references if references is not None else LocalReferences()

    @property
    def can_add(self) -> bool:
        return not self.read_only

    @property
    def can_remove(self) -> bool:
        return not self.read_only

    @property
    def new_files(self) -> list[LocalFile]:
        return list(self.state.new_files)

    def items(self) -> list[Attachment]:
        return registry.displayed(self.state, self.multiple, self.references)

    def reset(self, existing: Sequence[Document]) -> None:
        """Replace the persisted documents, e.g. with the ones returned by a save."""
        self._drop_new_files()
        self.state = DocumentState(existing=tuple(existing))

    def add(self, files: Sequence[LocalFile]) -> None:
        """
        Add locally chosen files.

        :param files: Files picked by the user
        :raises ValidationError: If the uploader is read-only
        """
        if self.read_only:
            raise ValidationError("Documents are read-only")
        if not files:
            return
        if self.multiple:
            new_files = list(self.state.new_files)
            new_files.extend(f for f in files if f not in new_files)
        else:
            self._drop_new_files()
            new_files = [files[0]]
        self._set_new_files(new_files)

    async def remove(self, attachment: Attachment) -> bool:
        """
        Remove one attachment.

        :param attachment: Attachment taken from :meth:`items`
        :return: False when the backend refused the removal
        :raises ValidationError: If the uploader is read-only
        """
        if self.read_only:
            raise ValidationError("Documents are read-only")

        if attachment.is_new:
            self.state = registry.remove(attachment, self.state, self.references)
            self._notify_new_files()
            return True

        self.state = registry.remove(attachment, self.state)
        if self.remove_existing is None:
            logger.debug(f'Staged removal of {attachment.location}')
            return True

        try:
            await self.remove_existing(attachment)
        except RentalDeskError as e:
            logger.warning(f'Failed to remove document {attachment.name}: {e}')
            self.state = registry.restore(self.state, attachment)
            self.notifier.error(f'Failed to remove document {attachment.name}.')
            return False

        self.state = registry.confirm_removal(self.state, attachment)
        return True

    def preview(self, attachment: Attachment) -> Preview:
        return build_preview(attachment, self.server_origin)

    def close(self) -> None:
        """Release the references of files that were never uploaded."""
        self._drop_new_files()

    def _set_new_files(self, new_files: list[LocalFile]) -> None:
        self.state = self.state.model_copy(update={'new_files': tuple(new_files)})
        self._notify_new_files()

    def _notify_new_files(self) -> None:
        if self.on_new_files_change:
            self.on_new_files_change(list(self.state.new_files))

    def _drop_new_files(self) -> None:
        for local_file in self.state.new_files:
            self.references.release(local_file)

"""
Attachment bookkeeping shared by every parent record.

The displayed list for a record is always the persisted documents not pending
deletion, followed by the files chosen locally and not yet uploaded.
"""
from __future__ import annotations

import uuid
from collections.abc import Sequence

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from rentaldesk.models.attachment import Attachment, LocalFile, Origin
from rentaldesk.models.document import Document

LOCAL_REFERENCE_PREFIX = 'blob:rentaldesk/'
TRANSIENT_SCHEMES = ('blob:', 'data:')


def is_transient(location: str) -> bool:
    """True for session-only references that must never be sent to the backend."""
    return bool(location) and location.startswith(TRANSIENT_SCHEMES)


class LocalReferences:
    """
    Issues transient references for locally chosen files.

    References are memoised by file value, so rendering the same selection twice
    yields the same reference instead of a new one per pass.
    """

    def __init__(self) -> None:
        self._by_file: dict[LocalFile, str] = {}
        self._by_reference: dict[str, LocalFile] = {}

    def __len__(self) -> int:
        return len(self._by_reference)

    def __contains__(self, reference: object) -> bool:
        return reference in self._by_reference

    def acquire(self, local_file: LocalFile) -> str:
        reference = self._by_file.get(local_file)
        if reference is None:
            reference = f'{LOCAL_REFERENCE_PREFIX}{uuid.uuid4().hex}'
            self._by_file[local_file] = reference
            self._by_reference[reference] = local_file
        return reference

    def resolve(self, reference: str) -> LocalFile | None:
        return self._by_reference.get(reference)

    def revoke(self, reference: str) -> None:
        local_file = self._by_reference.pop(reference, None)
        if local_file is not None:
            self._by_file.pop(local_file, None)

    def release(self, local_file: LocalFile) -> None:
        reference = self._by_file.pop(local_file, None)
        if reference is not None:
            self._by_reference.pop(reference, None)

    def revoke_all(self) -> None:
        if self._by_reference:
            logger.debug(f'Revoking {len(self._by_reference)} local references')
        self._by_file.clear()
        self._by_reference.clear()


class DocumentState(BaseModel):
    """Documents of one parent record while it is being edited."""
    model_config = ConfigDict(frozen=True)

    existing: tuple[Document, ...] = ()
    new_files: tuple[LocalFile, ...] = ()
    pending_delete: frozenset[str] = Field(default_factory=frozenset)

    @classmethod
    def from_documents(cls, documents: Sequence[Document]) -> DocumentState:
        return cls(existing=tuple(documents))

    @property
    def kept(self) -> list[Document]:
        """Persisted documents that are not pending deletion."""
        return [doc for doc in self.existing if doc.url not in self.pending_delete]

    @property
    def pending(self) -> list[Document]:
        return [doc for doc in self.existing if doc.url in self.pending_delete]


def _unique_by_location(attachments: list[Attachment]) -> list[Attachment]:
    seen: set[str] = set()
    unique = []
    for attachment in attachments:
        if attachment.location in seen:
            continue
        seen.add(attachment.location)
        unique.append(attachment)
    return unique


def merge(
    existing: Sequence[Document],
    new_files: Sequence[LocalFile],
    multiple: bool,
    references: LocalReferences
) -> list[Attachment]:
    """
    Build the list of attachments to display.

    :param existing: Persisted documents of the parent record
    :param new_files: Files chosen locally, not yet uploaded
    :param multiple: False when a new file replaces the persisted ones on display
    :param references: Source of transient references for the new files
    :return: Existing attachments followed by new ones, in the order supplied
    """
    persisted = _unique_by_location([Attachment.from_document(doc) for doc in existing])
    chosen = _unique_by_location([
        Attachment.from_local_file(local_file, references.acquire(local_file))
        for local_file in new_files
    ])
    if multiple:
        return persisted + chosen
    # Single mode only hides the persisted attachments; they are not deleted.
    return chosen[:1] if chosen else persisted


def displayed(state: DocumentState, multiple: bool, references: LocalReferences) -> list[Attachment]:
    return merge(state.kept, state.new_files, multiple, references)


def remove(attachment: Attachment, state: DocumentState, references: LocalReferences | None = None) -> DocumentState:
    """
    Remove an attachment from the draft.

    New files are dropped right away and their reference is revoked. Persisted
    documents are only staged for deletion; the caller confirms or restores them
    once the backend has answered.
    """
    if attachment.origin == Origin.NEW:
        local_file = attachment.local_file
        if references is not None:
            local_file = references.resolve(attachment.location) or local_file
            references.revoke(attachment.location)
        return state.model_copy(update={
            'new_files': tuple(f for f in state.new_files if f != local_file),
        })
    return state.model_copy(update={
        'pending_delete': state.pending_delete | {attachment.location},
    })


def confirm_removal(state: DocumentState, attachment: Attachment) -> DocumentState:
    return state.model_copy(update={
        'existing': tuple(doc for doc in state.existing if doc.url != attachment.location),
        'pending_delete': state.pending_delete - {attachment.location},
    })


def restore(state: DocumentState, attachment: Attachment) -> DocumentState:
    return state.model_copy(update={
        'pending_delete': state.pending_delete - {attachment.location},
    })

from __future__ import annotations

from functools import partial
from typing import Any

from loguru import logger

from rentaldesk.api.entity_api import EntityApi
from rentaldesk.documents.registry import LocalReferences
from rentaldesk.documents.uploader import Uploader
from rentaldesk.exceptions import RentalDeskError, ValidationError
from rentaldesk.models.attachment import Attachment
from rentaldesk.models.document import Document
from rentaldesk.models.record import Record
from rentaldesk.notifications import LogNotifier, Notifier
from rentaldesk.schemas import DocumentRemoval, FieldKind
from rentaldesk.services.form_draft import FormDraft

FORM_HAS_ERRORS = 'Please correct the highlighted fields.'


class EntityPanel:
    """
    List, search, detail and edit workflow for one entity.

    Saves are applied to the cached list as soon as the backend accepts them and
    the list is marked stale until :meth:`refresh` reconciles it with the server.
    """

    def __init__(
        self,
        api: EntityApi,
        server_origin: str,
        notifier: Notifier | None = None,
        references: LocalReferences | None = None
    ):
        """
        :param api: API of the entity collection
        :param server_origin: Origin used to build document preview URLs
        :param notifier: Where outcomes are reported
        :param references: Transient reference pool shared by the uploaders
        """
        self.api = api
        self.schema = api.schema
        self.server_origin = server_origin
        self.notifier = notifier or LogNotifier()
        self.references = references if references is not None else LocalReferences()
        self.records: list[Record] = []
        self.reference_labels: dict[str, dict[str, str]] = {}
        self.load_error: str | None = None
        self.loaded = False
        self.stale = False
        self.selected: Record | None = None
        self.draft: FormDraft | None = None

    async def load(self) -> list[Record]:
        """
        Fetch the whole collection.

        On failure the panel keeps whatever it had and exposes ``load_error``.
        """
        try:
            self.records = await self.api.list()
        except RentalDeskError as e:
            logger.error(f'Failed to load {self.schema.key}: {e}')
            self.load_error = str(e)
            self.notifier.error(f'Failed to load {self.schema.title.lower()}.')
            return self.records
        self.load_error = None
        self.loaded = True
        self.stale = False
        logger.debug(f'Loaded {len(self.records)} {self.schema.key}')
        return self.records

    async def refresh(self) -> list[Record]:
        """Reconcile the cached list with the server after local patches."""
        try:
            records = await self.api.list()
        except RentalDeskError as e:
            logger.warning(f'Could not refresh {self.schema.key}, keeping local copy: {e}')
            return self.records
        self.records = records
        self.stale = False
        self.load_error = None
        if self.selected:
            self.selected = self.get_record(self.selected.id)
        return self.records

    def get_record(self, record_id: str) -> Record | None:
        return next((record for record in self.records if record.id == record_id), None)

    def display_value(self, record: Record, name: str) -> str:
        """Value of a field for display, with references shown by label."""
        value = record.wire_values().get(name)
        if value is None:
            return ''
        field_spec = next((field_spec for field_spec in self.schema.fields if field_spec.name == name), None)
        if field_spec is not None and field_spec.kind == FieldKind.REFERENCE:
            return self.reference_labels.get(field_spec.reference or '', {}).get(str(value), str(value))
        if isinstance(value, bool):
            return 'Yes' if value else 'No'
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    def visible(self, search: str = '', **filters: Any) -> list[Record]:
        """
        Records matching a free-text search and exact-match filters.

        :param search: Case-insensitive text looked up in the searchable fields
        :param filters: Field name to required value; empty values are ignored
        """
        needle = search.strip().lower()
        active = {name: str(value) for name, value in filters.items() if value not in (None, '')}
        matches = []
        for record in self.records:
            wire = record.wire_values()
            if any(value not in (str(wire.get(name)), self.display_value(record, name))
                   for name, value in active.items()):
                continue
            if needle:
                haystack = [self.display_value(record, name) for name in self.schema.search_fields]
                haystack.append(record.label)
                if not any(needle in text.lower() for text in haystack):
                    continue
            matches.append(record)
        return matches

    def select(self, record_id: str) -> Record:
        """
        :raises KeyError: If the record is not in the cached list
        """
        record = self.get_record(record_id)
        if record is None:
            raise KeyError(f'{self.schema.key} {record_id} is not loaded')
        self.selected = record
        return record

    def _uploader(self, record: Record | None) -> Uploader:
        remover = None
        if record is not None and self.schema.document_removal != DocumentRemoval.STAGED:
            remover = partial(self.remove_document, record.id)
        return Uploader(
            record.documents if record else [],
            self.server_origin,
            remove_existing=remover,
            notifier=self.notifier,
            multiple=self.schema.multiple_documents,
            references=self.references,
        )

    def open_create(self) -> FormDraft:
        self.close()
        self.draft = FormDraft.for_create(self.schema, uploader=self._uploader(None))
        return self.draft

    def open_edit(self, record_id: str | None = None) -> FormDraft:
        """
        Open the edit form of a record, by default the selected one.

        :raises KeyError: If no record is selected or the id is unknown
        """
        record = self.select(record_id) if record_id else self.selected
        if record is None:
            raise KeyError(f'No {self.schema.key} record selected')
        self.close()
        self.draft = FormDraft.for_edit(self.schema, record, uploader=self._uploader(record))
        return self.draft

    def _patch(self, record: Record) -> None:
        for index, current in enumerate(self.records):
            if current.id == record.id:
                self.records[index] = record
                break
        else:
            self.records.append(record)
        self.stale = True
        if self.selected is not None and self.selected.id == record.id:
            self.selected = record

    async def submit(self) -> Record | None:
        """
        Validate and save the open form.

        Nothing is sent while a field is invalid. On failure the form stays open
        with its values so the user can retry.

        :return: The saved record, or None when nothing was saved
        :raises ValidationError: If no form is open
        """
        draft = self.draft
        if draft is None:
            raise ValidationError('No form is open')

        try:
            payload = draft.to_payload()
        except ValidationError as e:
            logger.debug(f'{self.schema.key} form blocked: {e.errors}')
            self.notifier.error(FORM_HAS_ERRORS)
            return None

        uploader = draft.uploader or self._uploader(draft.record)
        try:
            if draft.record is None:
                record = await self.api.create(payload, uploader.new_files)
            else:
                record = await self.api.update(
                    draft.record.id,
                    payload,
                    uploader.new_files,
                    keep=uploader.state.kept,
                    to_delete=uploader.state.pending
                )
        except RentalDeskError as e:
            logger.error(f'Failed to save {self.schema.key}: {e}')
            self.notifier.error(f'Failed to save: {e}')
            return None

        self._patch(record)
        self.notifier.success('Created successfully.' if draft.is_new else 'Updated successfully.')
        self.close()
        return record

    async def delete(self, record_id: str) -> bool:
        try:
            await self.api.delete(record_id)
        except RentalDeskError as e:
            logger.error(f'Failed to delete {self.schema.key} {record_id}: {e}')
            self.notifier.error(f'Failed to delete: {e}')
            return False
        self.records = [record for record in self.records if record.id != record_id]
        self.stale = True
        if self.selected is not None and self.selected.id == record_id:
            self.selected = None
        self.notifier.success('Deleted successfully.')
        return True

    async def remove_document(self, record_id: str, attachment: Attachment) -> None:
        """
        Delete a persisted document right away and drop it from the cached record.

        Errors propagate so the uploader can restore the document.
        """
        document = Document(
            name=attachment.name,
            type=attachment.mime_hint,
            size=attachment.size_bytes,
            url=attachment.location
        )
        await self.api.delete_document(record_id, document)
        record = self.get_record(record_id)
        if record is not None:
            documents = [doc for doc in record.documents if doc.url != attachment.location]
            self._patch(record.model_copy(update={'documents': documents}))
        self.notifier.success(f'Document {attachment.name} removed.')

    def close(self) -> None:
        """Discard the open form, if any."""
        if self.draft is not None:
            self.draft.close()
            self.draft = None

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from rentaldesk.api.base_api import BaseApi
from rentaldesk.client import Client, UploadFile
from rentaldesk.exceptions import APIError, ConfigurationError
from rentaldesk.models.attachment import LocalFile
from rentaldesk.models.document import Document
from rentaldesk.models.record import Record
from rentaldesk.schemas import DocumentRemoval, EntitySchema
from rentaldesk.utils.io import read_upload
from rentaldesk.utils.validation import validate_id


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class EntityApi(BaseApi):
    """
    CRUD access to one entity collection of the rental backend.

    Create and update are sent as multipart forms so new documents travel with
    the record fields.
    """

    def __init__(self, client: Client, schema: EntitySchema) -> None:
        super().__init__(client)
        self.schema = schema

    def _parse(self, data: Any) -> Record:
        if not isinstance(data, dict):
            raise APIError(f'Unexpected {self.schema.key} payload: {data!r}')
        return self.schema.model(**data)

    def _parse_list(self, data: Any) -> list[Record]:
        if isinstance(data, dict):
            data = data.get(self.schema.key, data.get('data', []))
        if not isinstance(data, list):
            raise APIError(f'Unexpected {self.schema.key} list payload: {data!r}')
        return [self._parse(item) for item in data]

    def _form(self, payload: dict[str, Any]) -> dict[str, str]:
        return {key: _form_value(value) for key, value in payload.items() if value is not None}

    def _files(self, files: Sequence[LocalFile]) -> list[UploadFile]:
        return [
            (self.schema.upload_field, (local_file.name, read_upload(local_file), local_file.mime_type))
            for local_file in files
        ]

    async def list(self, params: dict[str, Any] | None = None) -> list[Record]:
        """
        Gets every record of the collection.

        :param params: Optional query parameters
        :return: Records in the order the backend returned them
        """
        json_response = await self._client.get(self.schema.endpoint, query_params=params)
        return self._parse_list(json_response)

    async def get(self, record_id: str) -> Record:
        validate_id(record_id)
        json_response = await self._client.get(f'{self.schema.endpoint}/{record_id}')
        return self._parse(json_response)

    async def create(self, payload: dict[str, Any], files: Sequence[LocalFile] = ()) -> Record:
        """
        Creates a record.

        :param payload: Field values keyed by their API names
        :param files: Local files to upload with the record
        :return: The created record, as stored by the backend
        :raises FileAccessError: If a file cannot be read
        """
        json_response = await self._client.post(
            self.schema.endpoint,
            form=self._form(payload),
            files=self._files(files)
        )
        return self._parse(json_response)

    async def update(
        self,
        record_id: str,
        payload: dict[str, Any],
        files: Sequence[LocalFile] = (),
        keep: Sequence[Document] = (),
        to_delete: Sequence[Document] = ()
    ) -> Record:
        """
        Updates a record.

        :param record_id: Id of the record to update
        :param payload: Field values keyed by their API names
        :param files: Local files to upload and append to the record's documents
        :param keep: Persisted documents the record keeps
        :param to_delete: Persisted documents to delete with this save; only sent
            for entities whose documents are removed on save
        :return: The updated record
        """
        validate_id(record_id)
        form = self._form(payload)
        form['existingDocuments'] = json.dumps([doc.model_dump(mode='json') for doc in keep])
        if self.schema.document_removal == DocumentRemoval.STAGED:
            form['documentsToDelete'] = json.dumps([doc.url for doc in to_delete])

        json_response = await self._client.put(
            f'{self.schema.endpoint}/{record_id}',
            form=form,
            files=self._files(files)
        )
        return self._parse(json_response)

    async def delete(self, record_id: str) -> dict:
        validate_id(record_id)
        return await self._client.delete(f'{self.schema.endpoint}/{record_id}')

    async def delete_document(self, record_id: str, document: Document) -> dict:
        """
        Deletes one persisted document of a record right away.

        :param record_id: Id of the parent record
        :param document: Document to delete
        :return: API response
        :raises ConfigurationError: For entities whose documents are removed on save
        """
        validate_id(record_id)
        if self.schema.document_removal == DocumentRemoval.BY_NAME:
            data = {'documentName': document.name}
        elif self.schema.document_removal == DocumentRemoval.BY_URL:
            data = {'documentUrl': document.url}
        else:
            raise ConfigurationError(f'{self.schema.title} documents are removed when the record is saved')
        return await self._client.delete(f'{self.schema.endpoint}/{record_id}/documents', data=data)

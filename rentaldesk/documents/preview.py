"""Decide how an attachment is rendered and where it can be fetched from."""
from __future__ import annotations

from enum import Enum

import httpx
from pydantic import BaseModel

from rentaldesk.documents.registry import is_transient
from rentaldesk.models.attachment import Attachment
from rentaldesk.models.document import file_extension, file_name_from_path

IMAGE_EXTENSIONS = frozenset({'jpg', 'jpeg', 'png', 'gif', 'bmp', 'webp'})
PDF_MIME_TYPE = 'application/pdf'
PREVIEW_UNAVAILABLE = 'Preview unavailable for this file type.'


class PreviewKind(str, Enum):
    IMAGE = 'image'
    PDF = 'pdf'
    GENERIC = 'generic'


class Preview(BaseModel):
    name: str
    kind: PreviewKind
    url: str
    message: str | None = None

    @property
    def available(self) -> bool:
        return self.kind != PreviewKind.GENERIC


def classify(attachment: Attachment) -> PreviewKind:
    mime = (attachment.mime_hint or '').lower()
    extension = file_extension(attachment.name)
    if mime.startswith('image/') or extension in IMAGE_EXTENSIONS:
        return PreviewKind.IMAGE
    if mime == PDF_MIME_TYPE or extension == 'pdf':
        return PreviewKind.PDF
    return PreviewKind.GENERIC


def server_origin(api_base_url: str) -> str:
    """Scheme, host and port of the API base URL, e.g. ``http://localhost:5000``."""
    url = httpx.URL(api_base_url)
    return f'{url.scheme}://{url.netloc.decode("ascii")}'


def resolve_url(attachment: Attachment, origin: str) -> str:
    """
    Derive a servable URL for an attachment.

    Persisted attachments carry the backend's filesystem path, so only the stored
    file name is trusted and served from ``/uploads``.

    :param attachment: Attachment to resolve
    :param origin: Server origin, see :func:`server_origin`
    :return: URL usable to fetch the file
    """
    location = attachment.location or ''
    if is_transient(location):
        return location
    origin = origin.rstrip('/')
    filename = file_name_from_path(location)
    if filename:
        return f'{origin}/uploads/{filename}'
    path = location.replace('\\', '/').lstrip('/')
    return f'{origin}/{path}'


def build_preview(attachment: Attachment, origin: str) -> Preview:
    kind = classify(attachment)
    return Preview(
        name=attachment.name,
        kind=kind,
        url=resolve_url(attachment, origin),
        message=PREVIEW_UNAVAILABLE if kind == PreviewKind.GENERIC else None,
    )

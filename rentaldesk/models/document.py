from __future__ import annotations

import mimetypes
import re
from typing import Any

from pydantic import BaseModel

DEFAULT_MIME_TYPE = 'application/octet-stream'

MIME_TYPES_BY_EXTENSION = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'gif': 'image/gif',
    'bmp': 'image/bmp',
    'webp': 'image/webp',
    'pdf': 'application/pdf',
}

_PATH_SEPARATORS = re.compile(r'[\\/]')


def file_name_from_path(path: str) -> str:
    """Last segment of a storage path, splitting on both ``/`` and ``\\``."""
    return _PATH_SEPARATORS.split(path or '')[-1]


def file_extension(name: str) -> str:
    """Lower-cased extension of a file name, or '' when there is none."""
    if not name or '.' not in name:
        return ''
    return name.rsplit('.', 1)[-1].lower()


def mime_type_for(name: str) -> str:
    known = MIME_TYPES_BY_EXTENSION.get(file_extension(name))
    if known:
        return known
    guessed, _ = mimetypes.guess_type(name or '')
    return (guessed or DEFAULT_MIME_TYPE).lower()


class Document(BaseModel):
    """
    A document persisted on a parent record, as the backend returns it.

    ``url`` is the backend's storage path, usually an absolute server filesystem path.
    """
    name: str = ''
    type: str = ''
    size: int = 0
    url: str

    @classmethod
    def from_path(cls, path: str) -> Document:
        """Rebuild a document from a bare storage path; the size is unknown."""
        name = file_name_from_path(path)
        return cls(name=name, type=mime_type_for(name), size=0, url=path)

    @classmethod
    def coerce(cls, value: Any) -> Document:
        if isinstance(value, Document):
            return value
        if isinstance(value, str):
            return cls.from_path(value)
        document = cls(**value)
        if not document.name:
            document.name = file_name_from_path(document.url)
        if not document.type:
            document.type = mime_type_for(document.name)
        return document

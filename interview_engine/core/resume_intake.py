"""
Resume intake collaborators.

Text extraction and contact parsing happen in an external ResumeParser;
this module defines that seam, the accepted formats and the blob stores
that keep the uploaded bytes.
"""

import logging
import re
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field

from interview_engine.models.candidate import RequiredProfileField

logger = logging.getLogger(__name__)

RESUME_STORAGE_PREFIX = "resume:"
PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
SUPPORTED_RESUME_TYPES: dict[str, str] = {
    "pdf": PDF_MIME_TYPE,
    "docx": DOCX_MIME_TYPE,
}


def build_resume_storage_key(resume_id: str) -> str:
    return f"{RESUME_STORAGE_PREFIX}{resume_id}"


def detect_resume_type(file_name: str, mime_type: str | None) -> str | None:
    """Return the canonical MIME type for a PDF/DOCX upload, else None."""
    extension = Path(file_name).suffix.lower().lstrip(".")
    if extension in SUPPORTED_RESUME_TYPES:
        return SUPPORTED_RESUME_TYPES[extension]
    if mime_type in SUPPORTED_RESUME_TYPES.values():
        return mime_type
    return None


class ParsedResume(BaseModel):
    """Contact fields a parser extracted from a resume."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    missing_fields: list[RequiredProfileField] = Field(default_factory=list)


class ResumeParser(Protocol):
    """Turns resume bytes into profile fields; raises ParseError on failure."""

    async def parse(self, data: bytes, mime_hint: str) -> ParsedResume: ...


class BlobStore(Protocol):
    """Keyed byte storage for uploaded resumes."""

    def put(self, key: str, data: bytes) -> None: ...

    def get(self, key: str) -> bytes | None: ...

    def delete(self, key: str) -> None: ...


class InMemoryBlobStore:
    """Process-local blob store."""

    def __init__(self):
        self._blobs: dict[str, bytes] = {}

    def put(self, key: str, data: bytes) -> None:
        self._blobs[key] = bytes(data)

    def get(self, key: str) -> bytes | None:
        return self._blobs.get(key)

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._blobs


class LocalBlobStore:
    """Blob store backed by one file per key in a directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / re.sub(r"[^A-Za-z0-9._-]", "_", key)

    def put(self, key: str, data: bytes) -> None:
        self._path(key).write_bytes(data)
        logger.debug(f"Stored blob {key} ({len(data)} bytes)")

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        return path.read_bytes() if path.exists() else None

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
        logger.debug(f"Deleted blob {key}")

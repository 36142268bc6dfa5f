"""
Versioned JSON persistence for the active session and the archive.
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError

from interview_engine.models.candidate import CandidateArchiveRecord, CandidateProfile
from interview_engine.models.interview import InterviewSession

logger = logging.getLogger(__name__)

STATE_DOCUMENT_VERSION = 1


class StateDocument(BaseModel):
    """
    Everything that survives a restart.

    Missing fields load as their initial-state defaults; unknown fields
    are ignored.
    """

    version: int = STATE_DOCUMENT_VERSION
    profile: CandidateProfile | None = None
    session: InterviewSession | None = None
    candidates: list[CandidateArchiveRecord] = Field(default_factory=list)


class JsonStateRepository:
    """Stores one StateDocument as a JSON file, replaced atomically on save."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> StateDocument | None:
        if not self.path.exists():
            return None

        try:
            document = StateDocument.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (SchemaError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return None

        if document.version > STATE_DOCUMENT_VERSION:
            logger.warning(
                f"State file {self.path} has version {document.version}, "
                f"newer than supported {STATE_DOCUMENT_VERSION}; ignoring it"
            )
            return None
        return document

    def save(self, document: StateDocument) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = document.model_dump_json(indent=2)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

"""
Candidate profile and archive models for Interview Engine
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from interview_engine.models.interview import AnswerRecord, ChatMessage, InterviewSummary
from interview_engine.models.question import InterviewQuestion


class RequiredProfileField(str, Enum):
    """Profile fields that must be present before an interview can start."""

    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"


class ResumeFileMeta(BaseModel):
    """Metadata for an uploaded resume; the bytes live in the blob store."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    file_name: str
    mime_type: str = "application/octet-stream"
    size_bytes: int = Field(default=0, ge=0)
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    storage_key: str = ""


class CandidateProfile(BaseModel):
    """Who is being interviewed."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: str = "Full Stack Engineer"
    resume: ResumeFileMeta | None = None
    missing_fields: list[RequiredProfileField] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields


class CandidateArchiveRecord(BaseModel):
    """Immutable snapshot of one completed interview, keyed by candidate id."""

    model_config = ConfigDict(frozen=True)

    id: str
    profile: CandidateProfile
    session_id: str
    completed_at: datetime
    final_score: float
    summary: InterviewSummary
    questions: list[InterviewQuestion] = Field(default_factory=list)
    answers: list[AnswerRecord] = Field(default_factory=list)
    chat: list[ChatMessage] = Field(default_factory=list)

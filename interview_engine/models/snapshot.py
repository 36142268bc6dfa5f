"""
Read-only session view handed to presentation layers.
"""

from pydantic import BaseModel, Field

from interview_engine.models.candidate import CandidateProfile
from interview_engine.models.interview import (
    ChatMessage,
    InterviewSummary,
    QuestionTimerState,
    SessionStage,
)
from interview_engine.models.question import InterviewQuestion


class SessionSnapshot(BaseModel):
    """What a UI needs to render the active session."""

    stage: SessionStage
    session_id: str | None = None
    profile: CandidateProfile | None = None
    current_question: InterviewQuestion | None = None
    question_number: int | None = None
    draft_answer: str = ""
    total_questions: int = 0
    timers: dict[str, QuestionTimerState] = Field(default_factory=dict)
    chat: list[ChatMessage] = Field(default_factory=list)
    scores: dict[str, float | None] = Field(default_factory=dict)
    summary: InterviewSummary | None = None

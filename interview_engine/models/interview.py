"""
Interview session and state models for Interview Engine
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from interview_engine.models.question import InterviewQuestion


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStage(str, Enum):
    """Interview session lifecycle stages."""

    RESUME_UPLOAD = "resume-upload"
    PROFILE_COMPLETION = "profile-completion"
    READY_TO_START = "ready-to-start"
    QUESTIONING = "questioning"
    PAUSED = "paused"
    COMPLETED = "completed"


class ChatSender(str, Enum):
    """Who wrote a transcript entry."""

    SYSTEM = "system"
    ASSISTANT = "assistant"
    CANDIDATE = "candidate"


class ChatMessage(BaseModel):
    """One transcript entry."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    sender: ChatSender
    body: str
    created_at: datetime = Field(default_factory=utc_now)
    metadata: dict[str, Any] = Field(default_factory=dict)


class QuestionTimerState(BaseModel):
    """Countdown state for one question."""

    question_id: str
    remaining_seconds: int = Field(default=0, ge=0)
    is_running: bool = False
    started_at: datetime | None = None
    last_tick_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        """A timer that ran down to zero and stopped."""
        return self.remaining_seconds == 0 and not self.is_running


class AnswerRecord(BaseModel):
    """A scored answer. Never changes once written."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    answer: str
    started_at: datetime
    submitted_at: datetime
    elapsed_seconds: int = Field(..., ge=0)
    auto_submitted: bool = False
    score: float | None = Field(default=None, ge=0, le=10)
    feedback: str | None = None


class InterviewSummary(BaseModel):
    """Final verdict for a completed session."""

    final_score: float = Field(..., ge=0, le=10)
    summary_text: str
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class InterviewSession(BaseModel):
    """
    Complete interview session state.

    Every field carries a default so a partially persisted document
    rehydrates into the initial state for whatever is missing.
    """

    # Identification
    id: str = Field(default_factory=lambda: uuid4().hex)
    candidate_id: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # State
    stage: SessionStage = SessionStage.RESUME_UPLOAD
    current_question_id: str | None = None

    # Plan
    questions: dict[str, InterviewQuestion] = Field(default_factory=dict)
    question_order: list[str] = Field(default_factory=list)

    # Progress
    answers: dict[str, AnswerRecord] = Field(default_factory=dict)
    timers: dict[str, QuestionTimerState] = Field(default_factory=dict)
    submitted_question_ids: set[str] = Field(
        default_factory=set,
        description="Questions for which a submission has begun (one-shot marker)"
    )
    draft_answers: dict[str, str] = Field(
        default_factory=dict,
        description="In-progress answer text per question, submitted if the timer expires"
    )
    chat: list[ChatMessage] = Field(default_factory=list)
    summary: InterviewSummary | None = None

    def get_current_question(self) -> InterviewQuestion | None:
        """Get the current active question."""
        if self.current_question_id is None:
            return None
        return self.questions.get(self.current_question_id)

    def get_current_timer(self) -> QuestionTimerState | None:
        if self.current_question_id is None:
            return None
        return self.timers.get(self.current_question_id)

    def question_number(self, question_id: str | None = None) -> int | None:
        """1-based position of a question in the plan."""
        question_id = question_id or self.current_question_id
        if question_id not in self.question_order:
            return None
        return self.question_order.index(question_id) + 1

    def ordered_questions(self) -> list[InterviewQuestion]:
        return [self.questions[qid] for qid in self.question_order if qid in self.questions]

    def ordered_answers(self) -> list[AnswerRecord]:
        return [self.answers[qid] for qid in self.question_order if qid in self.answers]

    def running_timers(self) -> list[QuestionTimerState]:
        return [timer for timer in self.timers.values() if timer.is_running]


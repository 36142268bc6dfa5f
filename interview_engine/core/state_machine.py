"""
Session State Machine - pure transitions for the interview lifecycle.

Every transition is a function of (session, event) that returns a new
session; the input session is never modified. Side effects (AI calls,
storage, scheduling) live in the orchestrator layer that feeds events in.

Stages:
    resume-upload → profile-completion → ready-to-start → questioning → completed
                                                              ↕
                                                            paused

Reset is not a transition: the orchestrator discards the session instead.
"""

import logging
from datetime import datetime
from typing import Callable

from pydantic import BaseModel, Field

from interview_engine.core.errors import StateError
from interview_engine.core.timer_engine import TimerEngine
from interview_engine.models.candidate import CandidateProfile
from interview_engine.models.interview import (
    AnswerRecord,
    ChatMessage,
    ChatSender,
    InterviewSession,
    InterviewSummary,
    QuestionTimerState,
    SessionStage,
)
from interview_engine.models.question import InterviewQuestion

logger = logging.getLogger(__name__)


# ============================================================================
# EVENTS
# ============================================================================

class SessionEvent(BaseModel):
    """Base event; `at` is when the change happened."""

    at: datetime


class ProfileCompleted(SessionEvent):
    """No required profile field is missing any more."""


class QuestionsPlanned(SessionEvent):
    questions: list[InterviewQuestion]


class InterviewStarted(SessionEvent):
    intro: ChatMessage


class QuestionActivated(SessionEvent):
    question_id: str


class TimerTicked(SessionEvent):
    """One scheduler tick against the active question's countdown."""


class DraftSaved(SessionEvent):
    """Candidate's in-progress text for the active question."""

    question_id: str
    text: str


class SubmissionStarted(SessionEvent):
    question_id: str


class SubmissionAbandoned(SessionEvent):
    """A submission that began but never recorded an answer (e.g. the process stopped)."""

    question_id: str


class MessageAppended(SessionEvent):
    message: ChatMessage


class AnswerRecorded(SessionEvent):
    record: AnswerRecord


class InterviewCompleted(SessionEvent):
    """The final answer was recorded."""


class SummaryAttached(SessionEvent):
    summary: InterviewSummary
    message: ChatMessage | None = None


class InterviewPaused(SessionEvent):
    """Candidate paused mid-question."""


class InterviewResumed(SessionEvent):
    """Candidate resumed a paused question."""


# ============================================================================
# STATE MACHINE
# ============================================================================

class SessionStateMachine:
    """
    Owns stage, current-question pointer, transcript, answers and summary.

    Use `initialize` to create a session and `apply` for every change.
    """

    # Stage only moves forward; paused is a side loop off questioning
    VALID_TRANSITIONS: dict[SessionStage, list[SessionStage]] = {
        SessionStage.RESUME_UPLOAD: [SessionStage.PROFILE_COMPLETION, SessionStage.READY_TO_START],
        SessionStage.PROFILE_COMPLETION: [SessionStage.READY_TO_START],
        SessionStage.READY_TO_START: [SessionStage.QUESTIONING],
        SessionStage.QUESTIONING: [SessionStage.QUESTIONING, SessionStage.PAUSED, SessionStage.COMPLETED],
        SessionStage.PAUSED: [SessionStage.QUESTIONING],
        SessionStage.COMPLETED: [],  # Terminal state
    }

    @classmethod
    def can_transition(cls, current: SessionStage, target: SessionStage) -> bool:
        return target in cls.VALID_TRANSITIONS.get(current, [])

    @classmethod
    def initialize(cls, profile: CandidateProfile, now: datetime) -> InterviewSession:
        """Create a session for a freshly ingested profile."""
        session = InterviewSession(
            candidate_id=profile.id,
            created_at=now,
            updated_at=now,
        )
        target = (
            SessionStage.PROFILE_COMPLETION if profile.missing_fields
            else SessionStage.READY_TO_START
        )
        cls._move_to(session, target)
        return session

    @classmethod
    def apply(cls, session: InterviewSession, event: SessionEvent) -> InterviewSession:
        """Return the session that results from applying an event."""
        handler = _HANDLERS.get(type(event))
        if handler is None:
            raise StateError(f"Unsupported session event: {type(event).__name__}")

        updated = session.model_copy(deep=True)
        handler(updated, event)
        updated.updated_at = event.at
        return updated

    # =========================================================================
    # HELPERS
    # =========================================================================

    @classmethod
    def _move_to(cls, session: InterviewSession, target: SessionStage) -> None:
        old_stage = session.stage
        if not cls.can_transition(old_stage, target):
            raise StateError(
                f"Invalid transition from {old_stage.value} to {target.value}",
                details={"valid": [s.value for s in cls.VALID_TRANSITIONS.get(old_stage, [])]},
            )
        session.stage = target
        if old_stage != target:
            logger.info(f"Session {session.id}: {old_stage.value} → {target.value}")

    @staticmethod
    def _require_stage(session: InterviewSession, *stages: SessionStage) -> None:
        if session.stage not in stages:
            raise StateError(
                f"Not allowed while session is {session.stage.value}",
                details={"expected": [s.value for s in stages]},
            )

    @staticmethod
    def _require_active(session: InterviewSession, question_id: str) -> None:
        if session.current_question_id != question_id:
            raise StateError(
                f"Question {question_id} is not the active question",
                details={"active": session.current_question_id},
            )

    @staticmethod
    def _stop_running_timers(session: InterviewSession) -> None:
        for question_id, timer in session.timers.items():
            if timer.is_running:
                session.timers[question_id] = TimerEngine.freeze(timer)


# ============================================================================
# EVENT HANDLERS (operate on a private copy)
# ============================================================================

def _on_profile_completed(session: InterviewSession, event: ProfileCompleted) -> None:
    if session.stage == SessionStage.PROFILE_COMPLETION:
        SessionStateMachine._move_to(session, SessionStage.READY_TO_START)


def _on_questions_planned(session: InterviewSession, event: QuestionsPlanned) -> None:
    SessionStateMachine._require_stage(session, SessionStage.READY_TO_START)
    if session.question_order:
        raise StateError("Question order is already fixed for this session")
    if not event.questions:
        raise StateError("Cannot plan an interview without questions")

    for question in event.questions:
        if question.id in session.questions:
            raise StateError(f"Duplicate question id in plan: {question.id}")
        session.questions[question.id] = question
        session.question_order.append(question.id)
        session.timers[question.id] = QuestionTimerState(
            question_id=question.id,
            remaining_seconds=question.time_limit_seconds,
        )


def _on_interview_started(session: InterviewSession, event: InterviewStarted) -> None:
    SessionStateMachine._require_stage(session, SessionStage.READY_TO_START)
    if session.current_question_id is not None:
        raise StateError("A question is already active")
    if not session.question_order:
        raise StateError("No questions planned for this session")
    SessionStateMachine._move_to(session, SessionStage.QUESTIONING)
    session.chat.append(event.intro)


def _on_question_activated(session: InterviewSession, event: QuestionActivated) -> None:
    SessionStateMachine._require_stage(session, SessionStage.QUESTIONING)
    question = session.questions.get(event.question_id)
    if question is None or event.question_id not in session.question_order:
        raise StateError(f"Unknown question: {event.question_id}")
    if event.question_id in session.answers:
        raise StateError(f"Question {event.question_id} was already answered")

    # The pointer only moves forward through the fixed order
    target_index = session.question_order.index(event.question_id)
    if session.current_question_id is not None:
        current_index = session.question_order.index(session.current_question_id)
        if target_index <= current_index:
            raise StateError("Questions can only be activated in order")

    SessionStateMachine._stop_running_timers(session)
    SessionStateMachine._move_to(session, SessionStage.QUESTIONING)
    session.current_question_id = question.id
    session.timers[question.id] = TimerEngine.activate(question, event.at)
    session.chat.append(ChatMessage(
        sender=ChatSender.ASSISTANT,
        body=f"Question {target_index + 1}: {question.prompt}",
        created_at=event.at,
        metadata={
            "type": "question",
            "question_id": question.id,
            "difficulty": question.difficulty.value,
            "guidance": question.guidance,
        },
    ))


def _on_timer_ticked(session: InterviewSession, event: TimerTicked) -> None:
    if session.stage != SessionStage.QUESTIONING:
        return
    timer = session.get_current_timer()
    if timer is None or not timer.is_running:
        return
    session.timers[timer.question_id] = TimerEngine.tick(timer, event.at)


def _on_submission_started(session: InterviewSession, event: SubmissionStarted) -> None:
    SessionStateMachine._require_stage(session, SessionStage.QUESTIONING)
    SessionStateMachine._require_active(session, event.question_id)
    if event.question_id in session.submitted_question_ids or event.question_id in session.answers:
        raise StateError(f"An answer was already submitted for question {event.question_id}")

    session.submitted_question_ids.add(event.question_id)
    timer = session.timers.get(event.question_id)
    if timer is not None:
        session.timers[event.question_id] = TimerEngine.freeze(timer)


def _on_draft_saved(session: InterviewSession, event: DraftSaved) -> None:
    SessionStateMachine._require_stage(session, SessionStage.QUESTIONING, SessionStage.PAUSED)
    SessionStateMachine._require_active(session, event.question_id)
    if event.question_id in session.submitted_question_ids or event.question_id in session.answers:
        raise StateError(f"An answer was already submitted for question {event.question_id}")
    session.draft_answers[event.question_id] = event.text


def _on_submission_abandoned(session: InterviewSession, event: SubmissionAbandoned) -> None:
    question_id = event.question_id
    if question_id not in session.submitted_question_ids or question_id in session.answers:
        return
    session.submitted_question_ids.discard(question_id)

    # The candidate turn is written again when the answer is resubmitted
    session.chat = [
        message for message in session.chat
        if not (message.sender == ChatSender.CANDIDATE and message.metadata.get("question_id") == question_id)
    ]
    timer = session.timers.get(question_id)
    if timer is not None:
        session.timers[question_id] = TimerEngine.expire(timer)


def _on_message_appended(session: InterviewSession, event: MessageAppended) -> None:
    session.chat.append(event.message)


def _on_answer_recorded(session: InterviewSession, event: AnswerRecorded) -> None:
    question_id = event.record.question_id
    SessionStateMachine._require_stage(session, SessionStage.QUESTIONING)
    if question_id not in session.questions:
        raise StateError(f"Unknown question: {question_id}")
    if question_id in session.answers:
        raise StateError(f"Answer for question {question_id} is already recorded")
    session.answers[question_id] = event.record
    session.submitted_question_ids.add(question_id)
    session.draft_answers.pop(question_id, None)


def _on_interview_completed(session: InterviewSession, event: InterviewCompleted) -> None:
    SessionStateMachine._require_stage(session, SessionStage.QUESTIONING)
    SessionStateMachine._stop_running_timers(session)
    SessionStateMachine._move_to(session, SessionStage.COMPLETED)
    session.current_question_id = None


def _on_summary_attached(session: InterviewSession, event: SummaryAttached) -> None:
    SessionStateMachine._require_stage(session, SessionStage.COMPLETED)
    if session.summary is not None:
        raise StateError("Summary is already set for this session")
    session.summary = event.summary
    if event.message is not None:
        session.chat.append(event.message)


def _on_paused(session: InterviewSession, event: InterviewPaused) -> None:
    SessionStateMachine._require_stage(session, SessionStage.QUESTIONING)
    if session.current_question_id in session.submitted_question_ids:
        raise StateError("Cannot pause while an answer is being submitted")
    SessionStateMachine._move_to(session, SessionStage.PAUSED)
    SessionStateMachine._stop_running_timers(session)


def _on_resumed(session: InterviewSession, event: InterviewResumed) -> None:
    SessionStateMachine._require_stage(session, SessionStage.PAUSED)
    SessionStateMachine._move_to(session, SessionStage.QUESTIONING)
    timer = session.get_current_timer()
    if timer is not None:
        session.timers[timer.question_id] = TimerEngine.resume(timer, event.at)


_HANDLERS: dict[type, Callable[[InterviewSession, SessionEvent], None]] = {
    ProfileCompleted: _on_profile_completed,
    QuestionsPlanned: _on_questions_planned,
    InterviewStarted: _on_interview_started,
    QuestionActivated: _on_question_activated,
    TimerTicked: _on_timer_ticked,
    DraftSaved: _on_draft_saved,
    SubmissionStarted: _on_submission_started,
    SubmissionAbandoned: _on_submission_abandoned,
    MessageAppended: _on_message_appended,
    AnswerRecorded: _on_answer_recorded,
    InterviewCompleted: _on_interview_completed,
    SummaryAttached: _on_summary_attached,
    InterviewPaused: _on_paused,
    InterviewResumed: _on_resumed,
}

"""
Answer Pipeline for Interview Engine

Runs one submission through explicit stages:
    validate → freeze timer → record transcript → evaluate →
    persist answer → advance or finalize

Only the evaluate stage (and finalize's summary) awaits an external call.
All session changes go through the session context's state machine.
"""

import logging
from enum import Enum

from pydantic import BaseModel

from interview_engine.core.archive_builder import ArchiveBuilder
from interview_engine.core.errors import StateError, ValidationError
from interview_engine.core.evaluation_engine import EvaluationEngine
from interview_engine.core.question_sequencer import QuestionSequencer
from interview_engine.core.session_context import SessionContext
from interview_engine.core.state_machine import (
    AnswerRecorded,
    InterviewCompleted,
    MessageAppended,
    QuestionActivated,
    SubmissionStarted,
)
from interview_engine.core.timer_engine import Clock, TimerEngine, system_clock
from interview_engine.models.candidate import CandidateArchiveRecord
from interview_engine.models.evaluation import EvaluationResult
from interview_engine.models.interview import (
    AnswerRecord,
    ChatMessage,
    ChatSender,
    SessionStage,
)
from interview_engine.models.question import InterviewQuestion

logger = logging.getLogger(__name__)


AUTO_SUBMIT_PLACEHOLDER = "(No response captured before the timer expired.)"


class SubmissionAction(str, Enum):
    """What happened after a submission."""

    CONTINUE = "continue"
    COMPLETED = "completed"
    DISCARDED = "discarded"  # Session was reset mid-flight


class SubmissionResult(BaseModel):
    """Outcome of one submission."""

    action: SubmissionAction
    question_id: str
    score: float | None = None
    feedback: str | None = None
    next_question_id: str | None = None
    archive_record: CandidateArchiveRecord | None = None


class AnswerPipeline:
    """
    Orchestrates submit → evaluate → record → advance-or-finalize.

    At most one AnswerRecord per question: the submission marker is set in
    the freeze stage, before anything is awaited.
    """

    def __init__(
        self,
        evaluation_engine: EvaluationEngine,
        sequencer: QuestionSequencer,
        archive_builder: ArchiveBuilder,
        clock: Clock = system_clock,
    ):
        self.evaluation_engine = evaluation_engine
        self.sequencer = sequencer
        self.archive_builder = archive_builder
        self.clock = clock

    async def submit(
        self,
        context: SessionContext,
        raw_answer: str,
        auto_submitted: bool = False,
        expected_question_id: str | None = None,
    ) -> SubmissionResult:
        """
        Submit an answer for the active question.

        Args:
            context: Active session context
            raw_answer: Answer text as typed
            auto_submitted: True when the timer expired
            expected_question_id: Question the caller believes is active

        Raises:
            StateError: No active question, or it was already submitted
            ValidationError: Manual submission with a blank answer
        """
        question = self._validate(context, raw_answer, auto_submitted, expected_question_id)
        answer = raw_answer.strip()

        record_base = self._freeze_timer(context, question)
        self._record_candidate_turn(context, question, answer, auto_submitted)

        evaluation = await self.evaluation_engine.evaluate(question, answer, context.session.chat)
        if context.discarded:
            logger.info(f"Session was reset while evaluating question {question.id}, discarding result")
            return SubmissionResult(action=SubmissionAction.DISCARDED, question_id=question.id)

        self._persist_answer(context, question, answer, auto_submitted, evaluation, **record_base)
        return await self._advance_or_finalize(context, question, evaluation)

    # =========================================================================
    # STAGES
    # =========================================================================

    def _validate(
        self,
        context: SessionContext,
        raw_answer: str,
        auto_submitted: bool,
        expected_question_id: str | None,
    ) -> InterviewQuestion:
        session = context.require_session()
        question = session.get_current_question()
        if session.stage != SessionStage.QUESTIONING or question is None:
            raise StateError("There's no active question to submit.")
        if expected_question_id is not None and expected_question_id != question.id:
            raise StateError(
                "That question is no longer active.",
                details={"active": question.id, "submitted_for": expected_question_id},
            )
        if question.id in session.submitted_question_ids or question.id in session.answers:
            raise StateError(f"An answer was already submitted for question {question.id}")
        if not auto_submitted and not raw_answer.strip():
            raise ValidationError("Please add a response before submitting.")
        return question

    def _freeze_timer(self, context: SessionContext, question: InterviewQuestion) -> dict:
        """Stop the countdown and claim the question; returns timing for the record."""
        now = self.clock()
        session = context.apply(SubmissionStarted(at=now, question_id=question.id))
        timer = session.timers.get(question.id)
        return {
            "started_at": (timer.started_at if timer and timer.started_at else now),
            "submitted_at": now,
            "elapsed_seconds": TimerEngine.elapsed_for_answer(timer, question.time_limit_seconds),
        }

    def _record_candidate_turn(
        self,
        context: SessionContext,
        question: InterviewQuestion,
        answer: str,
        auto_submitted: bool,
    ) -> None:
        now = self.clock()
        context.apply(MessageAppended(at=now, message=ChatMessage(
            sender=ChatSender.CANDIDATE,
            body=answer or AUTO_SUBMIT_PLACEHOLDER,
            created_at=now,
            metadata={
                "question_id": question.id,
                "auto_submitted": auto_submitted,
                "raw_answer": answer,
            },
        )))

    def _persist_answer(
        self,
        context: SessionContext,
        question: InterviewQuestion,
        answer: str,
        auto_submitted: bool,
        evaluation: EvaluationResult,
        started_at,
        submitted_at,
        elapsed_seconds: int,
    ) -> None:
        record = AnswerRecord(
            question_id=question.id,
            answer=answer,
            started_at=started_at,
            submitted_at=submitted_at,
            elapsed_seconds=elapsed_seconds,
            auto_submitted=auto_submitted,
            score=evaluation.score,
            feedback=evaluation.feedback,
        )
        now = self.clock()
        context.apply(AnswerRecorded(at=now, record=record))
        context.apply(MessageAppended(at=now, message=ChatMessage(
            sender=ChatSender.ASSISTANT,
            body=f"Score: {round(evaluation.score, 1):g}/10\n{evaluation.feedback}",
            created_at=now,
            metadata={"type": "feedback", "question_id": question.id, "score": evaluation.score},
        )))
        logger.info(
            f"Recorded answer for question {question.id}: score={evaluation.score:.1f} "
            f"elapsed={elapsed_seconds}s auto={auto_submitted}"
        )

    async def _advance_or_finalize(
        self,
        context: SessionContext,
        question: InterviewQuestion,
        evaluation: EvaluationResult,
    ) -> SubmissionResult:
        next_id = self.sequencer.next_question_id(context.require_session(), question.id)
        if next_id is not None:
            context.apply(QuestionActivated(at=self.clock(), question_id=next_id))
            return SubmissionResult(
                action=SubmissionAction.CONTINUE,
                question_id=question.id,
                score=evaluation.score,
                feedback=evaluation.feedback,
                next_question_id=next_id,
            )

        context.apply(InterviewCompleted(at=self.clock()))
        record = await self.archive_builder.finalize(context)
        if record is None:
            return SubmissionResult(action=SubmissionAction.DISCARDED, question_id=question.id)
        return SubmissionResult(
            action=SubmissionAction.COMPLETED,
            question_id=question.id,
            score=evaluation.score,
            feedback=evaluation.feedback,
            archive_record=record,
        )

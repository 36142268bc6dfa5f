"""
Archive Builder for Interview Engine

Reduces a completed session into an immutable archive record:
- Summary from the AI service, or the offline summary
- One completion transcript message with the rounded final score
- Upsert into the candidate archive keyed by candidate id
"""

import logging
from typing import Any

from interview_engine.core.candidate_archive import CandidateArchive
from interview_engine.core.errors import StateError
from interview_engine.core.session_context import SessionContext
from interview_engine.core.state_machine import SummaryAttached
from interview_engine.core.timer_engine import Clock, system_clock
from interview_engine.models.candidate import CandidateArchiveRecord, CandidateProfile
from interview_engine.models.evaluation import SummaryDraft
from interview_engine.models.interview import (
    AnswerRecord,
    ChatMessage,
    ChatSender,
    InterviewSession,
    InterviewSummary,
    SessionStage,
)

logger = logging.getLogger(__name__)


MISSING_SCORE = 5.0
FALLBACK_SUMMARY_TEXT = (
    "Solid performance overall. Strengthen your depth in system design and "
    "clarify trade-off reasoning when possible."
)
FALLBACK_STRENGTHS = ["Good communication", "Solid practical experience"]
FALLBACK_IMPROVEMENTS = ["Provide more metrics", "Discuss alternative approaches"]


def fallback_summary(answers: list[AnswerRecord]) -> InterviewSummary:
    """Mean of recorded scores (5 for unscored answers), clamped to [0, 10]."""
    if answers:
        scores = [record.score if record.score is not None else MISSING_SCORE for record in answers]
        average = sum(scores) / len(scores)
    else:
        average = MISSING_SCORE

    return InterviewSummary(
        final_score=max(0.0, min(10.0, average)),
        summary_text=FALLBACK_SUMMARY_TEXT,
        strengths=list(FALLBACK_STRENGTHS),
        improvements=list(FALLBACK_IMPROVEMENTS),
    )


def merge_summary(draft: SummaryDraft, base: InterviewSummary) -> InterviewSummary:
    """Fill anything the AI left out from the offline summary."""
    return InterviewSummary(
        final_score=draft.final_score if draft.final_score is not None else base.final_score,
        summary_text=draft.summary_text or base.summary_text,
        strengths=draft.strengths or base.strengths,
        improvements=draft.improvements or base.improvements,
    )


class ArchiveBuilder:
    """
    Finalizes completed sessions into the candidate archive.

    `finalize` is idempotent: the summary is attached once, and a repeat
    call re-upserts the same record instead of adding a second one.
    """

    def __init__(
        self,
        archive: CandidateArchive,
        ai_service: Any = None,
        clock: Clock = system_clock,
    ):
        self.archive = archive
        self.ai_service = ai_service
        self.clock = clock

    async def finalize(self, context: SessionContext) -> CandidateArchiveRecord | None:
        """
        Summarize, attach the summary and archive the session.

        Returns:
            The archived record, or None if the session was reset while
            the summary was being produced
        """
        session = context.require_session()
        profile = context.require_profile()
        if session.stage != SessionStage.COMPLETED:
            raise StateError("Only completed sessions can be finalized")

        if session.summary is None:
            summary = await self._summarize(profile, session)
            if context.discarded:
                logger.info(f"Session {session.id} was reset during summary, discarding result")
                return None

            now = self.clock()
            context.apply(SummaryAttached(
                at=now,
                summary=summary,
                message=ChatMessage(
                    sender=ChatSender.ASSISTANT,
                    body=(
                        f"Thanks {profile.name or 'there'}! That's the end of the interview. "
                        f"Your overall score is {summary.final_score:.1f}/10."
                    ),
                    created_at=now,
                    metadata={"type": "completion"},
                ),
            ))

        record = self.build_record(profile, context.require_session())
        self.archive.upsert(record)
        return record

    async def _summarize(self, profile: CandidateProfile, session: InterviewSession) -> InterviewSummary:
        questions = session.ordered_questions()
        answers = session.ordered_answers()
        base = fallback_summary(answers)

        if self.ai_service is None:
            logger.warning(f"No AI service, using fallback summary for session {session.id}")
            return base

        try:
            draft = await self.ai_service.summarize(profile, questions, answers)
            if draft is None:
                logger.warning(f"AI summary unavailable, using fallback for session {session.id}")
                return base
            return merge_summary(draft, base)
        except Exception as e:
            logger.warning(f"Interview summary failed, using fallback: {e}")
            return base

    def build_record(
        self,
        profile: CandidateProfile,
        session: InterviewSession,
    ) -> CandidateArchiveRecord:
        """Value copy of the session; shares no containers with it."""
        if session.summary is None:
            raise StateError("Cannot archive a session without a summary")

        snapshot = session.model_copy(deep=True)
        return CandidateArchiveRecord(
            id=profile.id,
            profile=profile.model_copy(deep=True),
            session_id=snapshot.id,
            completed_at=self.clock(),
            final_score=snapshot.summary.final_score,
            summary=snapshot.summary,
            questions=snapshot.ordered_questions(),
            answers=snapshot.ordered_answers(),
            chat=snapshot.chat,
        )

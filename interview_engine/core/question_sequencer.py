"""
Question Sequencer for Interview Engine

Resolves the ordered question plan for a session. Asks the AI for a plan
and falls back to a fixed per-difficulty question bank when the AI is
unavailable or returns nothing usable.
"""

import logging
from uuid import uuid4

from interview_engine.models.candidate import CandidateProfile
from interview_engine.models.evaluation import QuestionDraft
from interview_engine.models.interview import InterviewSession
from interview_engine.models.question import (
    InterviewConfiguration,
    InterviewQuestion,
    QuestionDifficulty,
)

logger = logging.getLogger(__name__)


FALLBACK_QUESTION_BANK: dict[QuestionDifficulty, list[str]] = {
    QuestionDifficulty.EASY: [
        "Explain the difference between let, const, and var in JavaScript.",
        "What does the Virtual DOM do in React?",
    ],
    QuestionDifficulty.MEDIUM: [
        "How would you design a REST API endpoint for updating user profiles?",
        "Describe how you would implement server-side rendering in a React + Node.js stack.",
    ],
    QuestionDifficulty.HARD: [
        "Walk through scaling a Node.js app to handle 100k concurrent users.",
        "Design a deployment pipeline for a monorepo with front-end and back-end services.",
    ],
}

FALLBACK_CATEGORIES: dict[QuestionDifficulty, str] = {
    QuestionDifficulty.EASY: "fundamentals",
    QuestionDifficulty.MEDIUM: "architecture",
    QuestionDifficulty.HARD: "scaling",
}

FALLBACK_GUIDANCE = "Provide a concise, concrete answer with relevant examples."
DEFAULT_PROMPT = "Describe a recent project you worked on."
DEFAULT_GUIDANCE = "Share concrete details and trade-offs you considered."


class QuestionSequencer:
    """
    Builds the question plan and walks it forward.

    The plan order is fixed at generation time; `next_question_id` only
    ever looks forward from the current question.
    """

    def __init__(
        self,
        ai_service=None,  # InterviewAI
        question_bank: dict[QuestionDifficulty, list[str]] | None = None,
    ):
        self.ai_service = ai_service
        self.question_bank = question_bank or FALLBACK_QUESTION_BANK

    async def build_plan(
        self,
        profile: CandidateProfile,
        config: InterviewConfiguration,
    ) -> list[InterviewQuestion]:
        """
        Resolve the ordered question list for a session.

        Returns:
            AI-generated questions, or the deterministic fallback plan
        """
        drafts: list[QuestionDraft] | None = None
        if self.ai_service is not None:
            try:
                drafts = await self.ai_service.generate_questions(profile, config)
            except Exception as e:
                logger.warning(f"Question generation failed: {e}")
                drafts = None

        if not drafts:
            logger.warning("Using fallback question plan")
            return self.fallback_questions(config)

        logger.info(f"Generated {len(drafts)} questions with AI")
        return self.normalize_drafts(drafts, config)

    def fallback_questions(self, config: InterviewConfiguration) -> list[InterviewQuestion]:
        """One bank entry per difficulty_pattern slot, drawn at `position mod bank size`."""
        questions = []
        for position, difficulty in enumerate(config.difficulty_pattern):
            bank = self.question_bank[difficulty]
            questions.append(InterviewQuestion(
                id=uuid4().hex,
                prompt=bank[position % len(bank)],
                difficulty=difficulty,
                category=FALLBACK_CATEGORIES.get(difficulty, "general"),
                time_limit_seconds=config.time_limit_for(difficulty),
                guidance=FALLBACK_GUIDANCE,
            ))
        return questions

    def normalize_drafts(
        self,
        drafts: list[QuestionDraft],
        config: InterviewConfiguration,
    ) -> list[InterviewQuestion]:
        """Fill draft gaps from configuration; explicit time limits win."""
        questions = []
        seen_ids: set[str] = set()
        for position, draft in enumerate(drafts):
            difficulty = draft.difficulty or config.difficulty_at(position)
            question_id = draft.id if draft.id and draft.id not in seen_ids else uuid4().hex
            seen_ids.add(question_id)
            questions.append(InterviewQuestion(
                id=question_id,
                prompt=draft.prompt or DEFAULT_PROMPT,
                difficulty=difficulty,
                category=draft.category or "general",
                time_limit_seconds=draft.time_limit_seconds or config.time_limit_for(difficulty),
                guidance=draft.guidance or DEFAULT_GUIDANCE,
            ))
        return questions

    @staticmethod
    def next_question_id(session: InterviewSession, question_id: str | None = None) -> str | None:
        """The question after `question_id` (default: current) in the fixed order."""
        question_id = question_id or session.current_question_id
        order = session.question_order
        if question_id is None:
            return order[0] if order else None
        if question_id not in order:
            return None
        index = order.index(question_id)
        return order[index + 1] if index + 1 < len(order) else None

"""
Evaluation Engine for Interview Engine

Scores a single answer. Uses the AI service when it answers, otherwise the
offline heuristic evaluator, so scoring never blocks interview progress.
"""

import logging
from typing import Any

from interview_engine.models.evaluation import EvaluationResult
from interview_engine.models.interview import ChatMessage
from interview_engine.models.question import InterviewQuestion, QuestionDifficulty

logger = logging.getLogger(__name__)


OFFLINE_FEEDBACK = (
    "Using offline evaluator: good effort. Make sure to ground your answer with "
    "concrete examples and cover both implementation details and trade-offs."
)
NO_ANSWER_FEEDBACK = "No answer was provided for this question."

BASE_SCORES: dict[QuestionDifficulty, float] = {
    QuestionDifficulty.EASY: 4.0,
    QuestionDifficulty.MEDIUM: 5.0,
    QuestionDifficulty.HARD: 6.0,
}
DEFAULT_KEYWORDS = ["react", "node", "api", "architecture", "performance"]
LENGTH_FOR_FULL_CREDIT = 400
LENGTH_WEIGHT = 3.0


def heuristic_score(
    answer: str,
    difficulty: QuestionDifficulty,
    keywords: list[str] | None = None,
) -> float:
    """
    Offline score for an answer, clamped to [0, 10].

    base (by difficulty) + one point per keyword present + up to 3 points
    for length. A blank answer always scores exactly 1.
    """
    if not answer.strip():
        return 1.0

    lowered = answer.lower()
    keyword_boost = sum(1 for keyword in (keywords or DEFAULT_KEYWORDS) if keyword.lower() in lowered)
    length_factor = min(1.0, len(answer) / LENGTH_FOR_FULL_CREDIT)
    score = BASE_SCORES[difficulty] + keyword_boost + length_factor * LENGTH_WEIGHT
    return max(0.0, min(10.0, score))


class EvaluationEngine:
    """
    Central evaluation component for interview answers.

    Responsibilities:
    - Ask the AI service for a score
    - Fall back to the heuristic evaluator on no response or failure
    """

    def __init__(self, ai_service: Any = None, keywords: list[str] | None = None):
        """
        Initialize evaluation engine.

        Args:
            ai_service: AI collaborator implementing evaluate_answer
            keywords: Domain keywords recognized by the offline evaluator
        """
        self.ai_service = ai_service
        self.keywords = keywords or DEFAULT_KEYWORDS

    async def evaluate(
        self,
        question: InterviewQuestion,
        answer: str,
        transcript: list[ChatMessage],
    ) -> EvaluationResult:
        """
        Evaluate a single answer.

        Blank answers are never sent to the AI: they score exactly 1.

        Args:
            question: The question that was answered
            answer: Trimmed answer text
            transcript: Full transcript including the candidate's turn

        Returns:
            EvaluationResult (AI or fallback)
        """
        if not answer.strip():
            return EvaluationResult(score=1.0, feedback=NO_ANSWER_FEEDBACK)

        if self.ai_service is not None:
            try:
                result = await self.ai_service.evaluate_answer(question, answer, transcript)
            except Exception as e:
                logger.warning(f"AI evaluation failed for question {question.id}: {e}")
                result = None
            if result is not None:
                return result

        logger.warning(f"Using offline evaluator for question {question.id}")
        return self.fallback_evaluation(question, answer)

    def fallback_evaluation(self, question: InterviewQuestion, answer: str) -> EvaluationResult:
        return EvaluationResult(
            score=heuristic_score(answer, question.difficulty, self.keywords),
            feedback=OFFLINE_FEEDBACK,
        )

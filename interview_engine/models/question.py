"""
Question models for Interview Engine
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class QuestionDifficulty(str, Enum):
    """Question difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class InterviewQuestion(BaseModel):
    """A single interview question in a session plan."""

    id: str = Field(..., description="Unique question ID")
    prompt: str = Field(..., description="The question text")
    difficulty: QuestionDifficulty = QuestionDifficulty.EASY
    category: str = "general"
    time_limit_seconds: int = Field(..., ge=1, description="Countdown length")
    guidance: str | None = Field(
        default=None,
        description="What a strong answer should cover"
    )


class InterviewConfiguration(BaseModel):
    """
    Shape of a session's question plan.

    One question is planned per difficulty_pattern entry, so total_questions
    must equal the pattern length.
    """

    total_questions: int = Field(default=6, ge=1)
    difficulty_pattern: list[QuestionDifficulty] = Field(
        default_factory=lambda: [
            QuestionDifficulty.EASY,
            QuestionDifficulty.EASY,
            QuestionDifficulty.MEDIUM,
            QuestionDifficulty.MEDIUM,
            QuestionDifficulty.HARD,
            QuestionDifficulty.HARD,
        ]
    )
    timer_by_difficulty: dict[QuestionDifficulty, int] = Field(
        default_factory=lambda: {
            QuestionDifficulty.EASY: 20,
            QuestionDifficulty.MEDIUM: 60,
            QuestionDifficulty.HARD: 120,
        }
    )

    @model_validator(mode="after")
    def _check_plan(self) -> "InterviewConfiguration":
        if not self.difficulty_pattern:
            raise ValueError("difficulty_pattern must not be empty")
        if self.total_questions != len(self.difficulty_pattern):
            raise ValueError(
                f"total_questions ({self.total_questions}) must match the "
                f"difficulty_pattern length ({len(self.difficulty_pattern)})"
            )
        missing = set(self.difficulty_pattern) - set(self.timer_by_difficulty)
        if missing:
            raise ValueError(f"No timer configured for: {sorted(d.value for d in missing)}")
        return self

    def difficulty_at(self, position: int) -> QuestionDifficulty:
        """Difficulty for a plan position; the pattern repeats past its end."""
        return self.difficulty_pattern[position % len(self.difficulty_pattern)]

    def time_limit_for(self, difficulty: QuestionDifficulty) -> int:
        return self.timer_by_difficulty[difficulty]


DEFAULT_INTERVIEW_CONFIGURATION = InterviewConfiguration()

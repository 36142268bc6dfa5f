"""
AI result models for Interview Engine

Shapes the AI service must return. Anything that fails validation is
treated as "no response" and replaced by the deterministic fallback.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from interview_engine.models.question import QuestionDifficulty


class QuestionDraft(BaseModel):
    """A question as proposed by the AI; gaps are filled from configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    prompt: str | None = None
    difficulty: QuestionDifficulty | None = None
    category: str | None = None
    time_limit_seconds: int | None = Field(default=None, ge=1, alias="timeLimitSeconds")
    guidance: str | None = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class EvaluationResult(BaseModel):
    """Score and feedback for one answer."""

    score: float = Field(..., ge=0, le=10)
    feedback: str = "Thanks for your answer."


class SummaryDraft(BaseModel):
    """AI summary; missing parts are filled from the offline summary."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    final_score: float | None = Field(default=None, ge=0, le=10, alias="finalScore")
    summary_text: str | None = Field(default=None, alias="summaryText")
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)

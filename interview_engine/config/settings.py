"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from interview_engine.models.question import InterviewConfiguration, QuestionDifficulty


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "Interview Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Gemini (generateContent REST API)
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_model: str = ""
    gemini_fallback_models_str: str = Field(
        default="gemini-2.5-flash-lite,gemini-2.5-flash,gemini-1.5-flash-latest,gemini-1.5-flash",
        validation_alias="gemini_fallback_models",
    )

    # AI request policy (owned by the AI client, never by the session core)
    ai_timeout_seconds: float = 30.0
    ai_max_attempts: int = Field(default=3, ge=1)
    ai_retry_base_delay_seconds: float = 0.5
    ai_retry_jitter_seconds: float = 0.2
    ai_retry_statuses_str: str = Field(
        default="429,500,502,503,504",
        validation_alias="ai_retry_statuses",
    )

    # Interview plan (total_questions defaults to the pattern length)
    total_questions: int | None = Field(default=None, ge=1)
    difficulty_pattern_str: str = Field(
        default="easy,easy,medium,medium,hard,hard",
        validation_alias="difficulty_pattern",
    )
    easy_time_limit_seconds: int = Field(default=20, ge=1)
    medium_time_limit_seconds: int = Field(default=60, ge=1)
    hard_time_limit_seconds: int = Field(default=120, ge=1)
    default_candidate_role: str = "Full Stack Engineer"

    # Offline evaluator keywords (one point each when present in an answer)
    evaluation_keywords_str: str = Field(
        default="react,node,api,architecture,performance",
        validation_alias="evaluation_keywords",
    )

    # Timer scheduling
    tick_interval_seconds: float = 1.0

    # Resume handling
    max_resume_bytes: int = 10 * 1024 * 1024
    resume_storage_dir: str = ""  # Empty keeps resumes in memory

    # Persistence
    state_file: str = ""  # Empty disables persistence

    # CORS - stored as comma-separated string in env
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias="cors_origins",
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return _split_csv(self.cors_origins_str)

    @computed_field
    @property
    def gemini_models(self) -> list[str]:
        """Preferred model first, then fallbacks, without duplicates."""
        candidates = [self.gemini_model.strip(), *_split_csv(self.gemini_fallback_models_str)]
        return list(dict.fromkeys(model for model in candidates if model))

    @computed_field
    @property
    def ai_retry_statuses(self) -> list[int]:
        """HTTP statuses the AI client retries."""
        return [int(status) for status in _split_csv(self.ai_retry_statuses_str)]

    @computed_field
    @property
    def difficulty_pattern(self) -> list[QuestionDifficulty]:
        """Ordered difficulty plan for a session."""
        return [QuestionDifficulty(value.lower()) for value in _split_csv(self.difficulty_pattern_str)]

    @computed_field
    @property
    def evaluation_keywords(self) -> list[str]:
        """Domain keywords recognized by the offline evaluator."""
        return [keyword.lower() for keyword in _split_csv(self.evaluation_keywords_str)]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_interview_configuration(settings: Settings | None = None) -> InterviewConfiguration:
    """Build the question plan configuration from settings."""
    settings = settings or get_settings()
    return InterviewConfiguration(
        total_questions=settings.total_questions or len(settings.difficulty_pattern),
        difficulty_pattern=settings.difficulty_pattern,
        timer_by_difficulty={
            QuestionDifficulty.EASY: settings.easy_time_limit_seconds,
            QuestionDifficulty.MEDIUM: settings.medium_time_limit_seconds,
            QuestionDifficulty.HARD: settings.hard_time_limit_seconds,
        },
    )

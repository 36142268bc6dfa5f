"""Configuration for Interview Engine."""

from interview_engine.config.settings import (
    Settings,
    get_interview_configuration,
    get_settings,
)

__all__ = ["Settings", "get_settings", "get_interview_configuration"]

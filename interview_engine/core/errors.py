"""
Error types surfaced by the interview core.
"""

from typing import Any


class InterviewError(Exception):
    """
    Base class for interview engine errors.

    Attributes:
        code: Stable error identifier (e.g. 'STATE_ERROR')
        message: Human readable message
        details: Extra debugging information
    """

    code = "INTERVIEW_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(f"[{self.code}] {message}")


class ValidationError(InterviewError):
    """Caller input was rejected; the session is left unmodified."""

    code = "VALIDATION_ERROR"


class StateError(InterviewError):
    """The action is not legal in the current session state."""

    code = "STATE_ERROR"


class ParseError(InterviewError):
    """A resume could not be turned into profile fields."""

    code = "PARSE_ERROR"


class TransientServiceError(InterviewError):
    """An AI call failed, timed out or answered with unusable data."""

    code = "TRANSIENT_SERVICE_ERROR"

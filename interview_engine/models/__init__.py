"""
Data models and schemas for Interview Engine

Contains Pydantic models for:
- Interview sessions, timers and transcript
- Questions and plan configuration
- Candidate profiles and archive records
"""

from interview_engine.models.question import (
    DEFAULT_INTERVIEW_CONFIGURATION,
    InterviewConfiguration,
    InterviewQuestion,
    QuestionDifficulty,
)
from interview_engine.models.interview import (
    AnswerRecord,
    ChatMessage,
    ChatSender,
    InterviewSession,
    InterviewSummary,
    QuestionTimerState,
    SessionStage,
)
from interview_engine.models.candidate import (
    CandidateArchiveRecord,
    CandidateProfile,
    RequiredProfileField,
    ResumeFileMeta,
)
from interview_engine.models.snapshot import SessionSnapshot
from interview_engine.models.evaluation import (
    EvaluationResult,
    QuestionDraft,
    SummaryDraft,
)

__all__ = [
    # Question
    "InterviewQuestion",
    "InterviewConfiguration",
    "QuestionDifficulty",
    "DEFAULT_INTERVIEW_CONFIGURATION",
    # Session
    "InterviewSession",
    "SessionStage",
    "ChatMessage",
    "ChatSender",
    "QuestionTimerState",
    "AnswerRecord",
    "InterviewSummary",
    "SessionSnapshot",
    # Candidate
    "CandidateProfile",
    "CandidateArchiveRecord",
    "RequiredProfileField",
    "ResumeFileMeta",
    # AI results
    "QuestionDraft",
    "EvaluationResult",
    "SummaryDraft",
]

"""
Core business logic modules for Interview Engine

Contains:
- Interview Orchestrator: Action surface for the single active session
- Session State Machine: Pure stage transitions
- Timer Engine: Drift-corrected countdowns and the tick scheduler
- Question Sequencer: AI question plan with deterministic fallback
- Evaluation Engine: AI scoring with heuristic fallback
- Answer Pipeline / Archive Builder: Submission and finalization
"""

from interview_engine.core.ai_service import AIService, InterviewAI
from interview_engine.core.answer_pipeline import AnswerPipeline, SubmissionAction, SubmissionResult
from interview_engine.core.archive_builder import ArchiveBuilder
from interview_engine.core.candidate_archive import CandidateArchive, CandidateSortKey, SortDirection
from interview_engine.core.errors import (
    InterviewError,
    ParseError,
    StateError,
    TransientServiceError,
    ValidationError,
)
from interview_engine.core.evaluation_engine import EvaluationEngine
from interview_engine.core.interview_orchestrator import InterviewOrchestrator
from interview_engine.core.persistence import JsonStateRepository, StateDocument
from interview_engine.core.question_sequencer import QuestionSequencer
from interview_engine.core.session_context import SessionContext
from interview_engine.core.state_machine import SessionStateMachine
from interview_engine.core.timer_engine import TimerEngine, TimerScheduler

__all__ = [
    "AIService",
    "InterviewAI",
    "AnswerPipeline",
    "SubmissionAction",
    "SubmissionResult",
    "ArchiveBuilder",
    "CandidateArchive",
    "CandidateSortKey",
    "SortDirection",
    "InterviewError",
    "ParseError",
    "StateError",
    "TransientServiceError",
    "ValidationError",
    "EvaluationEngine",
    "InterviewOrchestrator",
    "JsonStateRepository",
    "StateDocument",
    "QuestionSequencer",
    "SessionContext",
    "SessionStateMachine",
    "TimerEngine",
    "TimerScheduler",
]

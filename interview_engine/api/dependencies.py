"""
API Dependencies

Builds the orchestrator from settings and hands it to endpoints.
The application owns the instance on `app.state`; there is no module-level
singleton.
"""

import logging

from fastapi import HTTPException, Request

from interview_engine.config.settings import Settings, get_interview_configuration
from interview_engine.core.ai_service import AIService
from interview_engine.core.errors import InterviewError, ParseError, StateError, ValidationError
from interview_engine.core.interview_orchestrator import InterviewOrchestrator
from interview_engine.core.persistence import JsonStateRepository
from interview_engine.core.resume_intake import InMemoryBlobStore, LocalBlobStore, ResumeParser

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: Settings,
    resume_parser: ResumeParser | None = None,
) -> InterviewOrchestrator:
    """
    Wire an orchestrator from application settings.

    Persistence and on-disk resume storage are enabled only when their
    settings are non-empty.
    """
    blob_store = (
        LocalBlobStore(settings.resume_storage_dir) if settings.resume_storage_dir
        else InMemoryBlobStore()
    )
    repository = JsonStateRepository(settings.state_file) if settings.state_file else None

    orchestrator = InterviewOrchestrator(
        ai_service=AIService(settings),
        config=get_interview_configuration(settings),
        blob_store=blob_store,
        resume_parser=resume_parser,
        repository=repository,
        evaluation_keywords=settings.evaluation_keywords,
        max_resume_bytes=settings.max_resume_bytes,
        default_role=settings.default_candidate_role,
    )
    if orchestrator.restore():
        logger.info(f"Restored interview state from {settings.state_file}")
    return orchestrator


def get_orchestrator(request: Request) -> InterviewOrchestrator:
    """Get the application's interview orchestrator."""
    return request.app.state.orchestrator


def to_http_error(error: InterviewError) -> HTTPException:
    """Map an engine error to its HTTP status."""
    if isinstance(error, (ValidationError, ParseError)):
        status_code = 422
    elif isinstance(error, StateError):
        status_code = 409
    else:
        status_code = 500
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message, "details": error.details},
    )

"""
Session API endpoints

Handles the active interview session:
- Profile ingestion (JSON or resume upload) and completion
- Beginning, pausing and resuming the interview
- Saving drafts, submitting answers and driving the countdown
- Resetting back to resume upload
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from interview_engine.api.dependencies import get_orchestrator, to_http_error
from interview_engine.core.answer_pipeline import SubmissionResult
from interview_engine.core.errors import InterviewError
from interview_engine.core.interview_orchestrator import InterviewOrchestrator
from interview_engine.models.candidate import CandidateProfile, RequiredProfileField
from interview_engine.models.snapshot import SessionSnapshot

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class ProfileRequest(BaseModel):
    """Request model for starting a session from typed-in details."""
    candidate_id: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: str | None = None


class ProfileFieldRequest(BaseModel):
    """Request model for filling in one missing profile field."""
    field: RequiredProfileField
    value: str


class AnswerRequest(BaseModel):
    """Request model for submitting an answer."""
    answer: str
    question_id: str | None = None


class DraftRequest(BaseModel):
    """Request model for saving the in-progress answer."""
    answer: str
    question_id: str | None = None


class SubmitAnswerResponse(BaseModel):
    """Response after submitting an answer."""
    result: SubmissionResult
    snapshot: SessionSnapshot


class TickResponse(BaseModel):
    """Response after a manual timer tick."""
    auto_submitted: bool
    result: SubmissionResult | None = None
    snapshot: SessionSnapshot


# ============================================================================
# REST ENDPOINTS
# ============================================================================

@router.get("", response_model=SessionSnapshot)
async def get_session(
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionSnapshot:
    """Get the active session snapshot."""
    return orchestrator.snapshot()


@router.post("/profile", response_model=SessionSnapshot)
async def create_profile(
    request: ProfileRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionSnapshot:
    """
    Start a new session from candidate details.

    Fields that are missing or invalid move the session to profile completion.
    """
    fields = {
        "name": request.name,
        "email": request.email,
        "phone": request.phone,
        "role": request.role or orchestrator.default_role,
    }
    if request.candidate_id:
        fields["id"] = request.candidate_id
    profile = CandidateProfile(**fields)
    try:
        return await orchestrator.ingest_profile(profile)
    except InterviewError as e:
        raise to_http_error(e)


@router.patch("/profile", response_model=SessionSnapshot)
async def update_profile(
    request: ProfileFieldRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionSnapshot:
    """Fill in a missing profile field."""
    try:
        return await orchestrator.update_profile_field(request.field, request.value)
    except InterviewError as e:
        raise to_http_error(e)


@router.post("/resume", response_model=SessionSnapshot)
async def upload_resume(
    file: UploadFile = File(...),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionSnapshot:
    """Start a new session from an uploaded PDF or DOCX resume."""
    if orchestrator.resume_parser is None:
        raise HTTPException(status_code=503, detail="Resume parsing is not configured")

    data = await file.read()
    try:
        return await orchestrator.ingest_resume(data, file.filename or "resume", file.content_type)
    except InterviewError as e:
        raise to_http_error(e)


@router.post("/begin", response_model=SessionSnapshot)
async def begin_interview(
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionSnapshot:
    """
    Begin the interview.

    Reports the current status instead of failing when the interview is
    already running or finished.
    """
    try:
        return await orchestrator.begin_interview()
    except InterviewError as e:
        raise to_http_error(e)


@router.post("/answer", response_model=SubmitAnswerResponse)
async def submit_answer(
    request: AnswerRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SubmitAnswerResponse:
    """Submit an answer to the active question."""
    try:
        result = await orchestrator.submit_answer(request.answer, question_id=request.question_id)
    except InterviewError as e:
        raise to_http_error(e)
    return SubmitAnswerResponse(result=result, snapshot=orchestrator.snapshot())


@router.put("/draft", response_model=SessionSnapshot)
async def save_draft(
    request: DraftRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionSnapshot:
    """Save the answer being typed; it is submitted if the timer expires."""
    try:
        return await orchestrator.save_draft(request.answer, question_id=request.question_id)
    except InterviewError as e:
        raise to_http_error(e)


@router.post("/tick", response_model=TickResponse)
async def tick_timer(
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> TickResponse:
    """Advance the active countdown once; auto-submits on expiry."""
    try:
        result = await orchestrator.tick_timer()
    except InterviewError as e:
        raise to_http_error(e)
    return TickResponse(
        auto_submitted=result is not None,
        result=result,
        snapshot=orchestrator.snapshot(),
    )


@router.post("/pause", response_model=SessionSnapshot)
async def pause_interview(
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionSnapshot:
    try:
        return await orchestrator.pause_interview()
    except InterviewError as e:
        raise to_http_error(e)


@router.post("/resume-interview", response_model=SessionSnapshot)
async def resume_interview(
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionSnapshot:
    try:
        return await orchestrator.resume_interview()
    except InterviewError as e:
        raise to_http_error(e)


@router.post("/reset", response_model=SessionSnapshot)
async def reset_session(
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionSnapshot:
    """Discard the active session and go back to resume upload."""
    return await orchestrator.reset_session()

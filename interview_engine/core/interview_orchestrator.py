"""
Interview Orchestrator - action surface for the interview lifecycle.

This is the central coordinator. It owns the explicit SessionContext,
feeds events into the pure state machine and runs the side-effecting
steps (AI calls, resume storage, persistence) around them.

Every mutating action runs under the context's lock. A user action that
arrives while another is mid-flight is refused; a timer tick is skipped.
"""

import logging
from uuid import uuid4

from interview_engine.core.answer_pipeline import AnswerPipeline, SubmissionResult
from interview_engine.core.archive_builder import ArchiveBuilder
from interview_engine.core.candidate_archive import (
    CandidateArchive,
    CandidateSortKey,
    SortDirection,
)
from interview_engine.core.errors import StateError, ValidationError
from interview_engine.core.evaluation_engine import EvaluationEngine
from interview_engine.core.persistence import JsonStateRepository, StateDocument
from interview_engine.core.profile_validation import (
    find_missing_fields,
    normalize_profile,
    sanitize_field,
)
from interview_engine.core.question_sequencer import QuestionSequencer
from interview_engine.core.resume_intake import (
    BlobStore,
    InMemoryBlobStore,
    ResumeParser,
    build_resume_storage_key,
    detect_resume_type,
)
from interview_engine.core.session_context import SessionContext
from interview_engine.core.state_machine import (
    DraftSaved,
    InterviewPaused,
    InterviewResumed,
    InterviewStarted,
    ProfileCompleted,
    QuestionActivated,
    QuestionsPlanned,
    SessionStateMachine,
    SubmissionAbandoned,
    TimerTicked,
)
from interview_engine.core.timer_engine import Clock, system_clock
from interview_engine.models.candidate import (
    CandidateArchiveRecord,
    CandidateProfile,
    RequiredProfileField,
    ResumeFileMeta,
)
from interview_engine.models.interview import (
    ChatMessage,
    ChatSender,
    InterviewSession,
    SessionStage,
)
from interview_engine.models.question import (
    DEFAULT_INTERVIEW_CONFIGURATION,
    InterviewConfiguration,
)
from interview_engine.models.snapshot import SessionSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESUME_BYTES = 10 * 1024 * 1024


class InterviewOrchestrator:
    """
    Manages the single active interview session.

    Actions:
        ingest_profile / ingest_resume → update_profile_field →
        begin_interview → save_draft* → submit_answer | tick_timer → (completed)
        pause_interview / resume_interview, reset_session at any time

    The orchestrator coordinates between:
    - QuestionSequencer (question plan)
    - AnswerPipeline (evaluation, recording, advancing)
    - ArchiveBuilder (summary and archive)
    - ResumeParser / BlobStore (resume intake)
    - JsonStateRepository (optional persistence)
    """

    def __init__(
        self,
        ai_service=None,  # InterviewAI
        config: InterviewConfiguration | None = None,
        archive: CandidateArchive | None = None,
        blob_store: BlobStore | None = None,
        resume_parser: ResumeParser | None = None,
        repository: JsonStateRepository | None = None,
        clock: Clock = system_clock,
        evaluation_keywords: list[str] | None = None,
        max_resume_bytes: int = DEFAULT_MAX_RESUME_BYTES,
        default_role: str = "Full Stack Engineer",
    ):
        """
        Initialize the orchestrator with component dependencies.

        Args:
            ai_service: AI collaborator for generation, evaluation and summary
            config: Question plan configuration
            archive: Archive of completed interviews
            blob_store: Storage for uploaded resume bytes
            resume_parser: Extracts profile fields from resumes
            repository: Persists session and archive between restarts
            clock: Time source (timezone-aware datetimes)
        """
        self.ai_service = ai_service
        self.config = config or DEFAULT_INTERVIEW_CONFIGURATION
        self.archive = archive if archive is not None else CandidateArchive()
        self.blob_store = blob_store if blob_store is not None else InMemoryBlobStore()
        self.resume_parser = resume_parser
        self.repository = repository
        self.clock = clock
        self.max_resume_bytes = max_resume_bytes
        self.default_role = default_role

        self.sequencer = QuestionSequencer(ai_service)
        self.archive_builder = ArchiveBuilder(self.archive, ai_service, clock)
        self.pipeline = AnswerPipeline(
            evaluation_engine=EvaluationEngine(ai_service, evaluation_keywords),
            sequencer=self.sequencer,
            archive_builder=self.archive_builder,
            clock=clock,
        )

        self._context = SessionContext()

    @property
    def context(self) -> SessionContext:
        return self._context

    @property
    def session(self) -> InterviewSession | None:
        return self._context.session

    # =========================================================================
    # READ SURFACE
    # =========================================================================

    def snapshot(self) -> SessionSnapshot:
        """Read-only view of the active session."""
        context = self._context
        session = context.session
        if session is None:
            return SessionSnapshot(stage=SessionStage.RESUME_UPLOAD, profile=context.profile)

        view = session.model_copy(deep=True)
        return SessionSnapshot(
            stage=view.stage,
            session_id=view.id,
            profile=context.profile.model_copy(deep=True) if context.profile else None,
            current_question=view.get_current_question(),
            question_number=view.question_number(),
            draft_answer=view.draft_answers.get(view.current_question_id or "", ""),
            total_questions=len(view.question_order),
            timers=view.timers,
            chat=view.chat,
            scores={qid: record.score for qid, record in view.answers.items()},
            summary=view.summary,
        )

    def list_candidates(
        self,
        sort_key: CandidateSortKey = CandidateSortKey.SCORE,
        direction: SortDirection = SortDirection.DESC,
        query: str = "",
    ) -> list[CandidateArchiveRecord]:
        return self.archive.list_records(sort_key, direction, query)

    def get_candidate(self, candidate_id: str) -> CandidateArchiveRecord | None:
        return self.archive.get(candidate_id)

    def remove_candidate(self, candidate_id: str) -> bool:
        removed = self.archive.remove(candidate_id)
        if removed:
            self._persist()
        return removed

    # =========================================================================
    # PROFILE INGESTION
    # =========================================================================

    async def ingest_profile(self, profile: CandidateProfile) -> SessionSnapshot:
        """
        Start a new session for a candidate profile.

        Refused while a non-completed session exists; reset first.
        """
        context = self._context
        if context.session is not None and context.session.stage != SessionStage.COMPLETED:
            raise StateError("An interview is already in progress. Reset the session first.")
        self._ensure_idle(context)

        profile = normalize_profile(profile)
        session = SessionStateMachine.initialize(profile, self.clock())

        context.discard()
        self._context = SessionContext(profile=profile, session=session)
        logger.info(
            f"Created interview session {session.id} for candidate {profile.id} "
            f"(missing: {[f.value for f in profile.missing_fields]})"
        )
        self._persist()
        return self.snapshot()

    async def ingest_resume(
        self,
        data: bytes,
        file_name: str,
        mime_type: str | None = None,
    ) -> SessionSnapshot:
        """
        Parse a resume, store its bytes and start a session from it.

        Raises:
            ValidationError: File too large or not PDF/DOCX
            ParseError: The parser could not read the resume
        """
        if len(data) > self.max_resume_bytes:
            raise ValidationError("File is too large. Please upload a resume under 10 MB.")
        resume_type = detect_resume_type(file_name, mime_type)
        if resume_type is None:
            raise ValidationError("Unsupported file type. Please upload a PDF or DOCX resume.")
        if self.resume_parser is None:
            raise StateError("Resume parsing is not configured.")

        context = self._context
        if context.session is not None and context.session.stage != SessionStage.COMPLETED:
            raise StateError("An interview is already in progress. Reset the session first.")

        parsed = await self.resume_parser.parse(data, resume_type)

        resume_id = uuid4().hex
        storage_key = build_resume_storage_key(resume_id)
        self.blob_store.put(storage_key, data)

        profile = CandidateProfile(
            name=parsed.name,
            email=parsed.email,
            phone=parsed.phone,
            role=self.default_role,
            resume=ResumeFileMeta(
                id=resume_id,
                file_name=file_name,
                mime_type=mime_type or resume_type,
                size_bytes=len(data),
                uploaded_at=self.clock(),
                storage_key=storage_key,
            ),
        )
        try:
            return await self.ingest_profile(profile)
        except StateError:
            self.blob_store.delete(storage_key)
            raise

    async def update_profile_field(self, field: RequiredProfileField, value: str) -> SessionSnapshot:
        """Fill in a missing profile field; completes the profile when nothing is missing."""
        context = self._context
        session = context.require_session()
        profile = context.require_profile()
        if session.stage not in (SessionStage.PROFILE_COMPLETION, SessionStage.READY_TO_START):
            raise StateError(f"Profile cannot be edited while session is {session.stage.value}")
        self._ensure_idle(context)

        field = RequiredProfileField(field)
        cleaned = sanitize_field(field, value)
        updated = profile.model_copy(update={field.value: cleaned or None})
        updated = updated.model_copy(update={"missing_fields": find_missing_fields(updated)})
        context.profile = updated

        if not updated.missing_fields:
            context.apply(ProfileCompleted(at=self.clock()))
        self._persist()
        return self.snapshot()

    # =========================================================================
    # INTERVIEW FLOW
    # =========================================================================

    async def begin_interview(self) -> SessionSnapshot:
        """
        Plan the questions and ask the first one.

        A no-op that reports status when the interview is already running,
        paused or finished.
        """
        context = self._context
        session = context.require_session()
        profile = context.require_profile()

        if session.stage in (SessionStage.QUESTIONING, SessionStage.PAUSED, SessionStage.COMPLETED):
            logger.info(f"Begin ignored: session {session.id} is {session.stage.value}")
            return self.snapshot()
        if session.stage != SessionStage.READY_TO_START or not profile.is_complete:
            raise StateError(
                "Please confirm the missing details to continue the interview.",
                details={"missing": [f.value for f in profile.missing_fields]},
            )
        self._ensure_idle(context)

        async with context.lock:
            questions = await self.sequencer.build_plan(profile, self.config)
            if context.discarded:
                logger.info(f"Session {session.id} was reset during question planning, discarding plan")
                return self.snapshot()

            now = self.clock()
            context.apply(QuestionsPlanned(at=now, questions=questions))
            context.apply(InterviewStarted(at=now, intro=ChatMessage(
                sender=ChatSender.SYSTEM,
                body=(
                    f"Interview started for {profile.name or 'candidate'}. You'll have limited "
                    "time for each question. Answer as clearly and concisely as you can!"
                ),
                created_at=now,
                metadata={"type": "start"},
            )))
            context.apply(QuestionActivated(at=now, question_id=questions[0].id))

        self._persist()
        return self.snapshot()

    async def submit_answer(
        self,
        answer: str,
        auto_submitted: bool = False,
        question_id: str | None = None,
    ) -> SubmissionResult:
        """Submit an answer for the active question."""
        context = self._context
        self._ensure_idle(context)
        async with context.lock:
            result = await self.pipeline.submit(
                context,
                answer,
                auto_submitted=auto_submitted,
                expected_question_id=question_id,
            )
        self._persist()
        return result

    async def tick_timer(self) -> SubmissionResult | None:
        """
        Advance the active countdown by one scheduler tick.

        When the countdown reaches zero with no answer, submits the saved
        draft once on the candidate's behalf and returns that result.
        """
        context = self._context
        session = context.session
        if context.discarded or session is None or session.stage != SessionStage.QUESTIONING:
            return None
        if context.is_busy:
            return None

        async with context.lock:
            session = context.apply(TimerTicked(at=self.clock()))
            timer = session.get_current_timer()
            if timer is not None:
                logger.debug(f"Tick: {timer.remaining_seconds}s left on question {timer.question_id}")
            question_id = self._expired_unanswered_question(session)
            if question_id is None:
                return None

            logger.info(f"Time expired for question {question_id}, auto-submitting")
            draft = session.draft_answers.get(question_id, "")
            result = await self.pipeline.submit(context, draft, auto_submitted=True)

        self._persist()
        return result

    async def save_draft(self, text: str, question_id: str | None = None) -> SessionSnapshot:
        """
        Record the candidate's in-progress answer for the active question.

        The latest draft is what gets submitted if the timer runs out.
        """
        context = self._context
        session = context.require_session()
        self._ensure_idle(context)
        context.apply(DraftSaved(
            at=self.clock(),
            question_id=question_id or session.current_question_id or "",
            text=text,
        ))
        self._persist()
        return self.snapshot()

    async def pause_interview(self) -> SessionSnapshot:
        context = self._context
        context.require_session()
        self._ensure_idle(context)
        context.apply(InterviewPaused(at=self.clock()))
        self._persist()
        return self.snapshot()

    async def resume_interview(self) -> SessionSnapshot:
        context = self._context
        context.require_session()
        self._ensure_idle(context)
        context.apply(InterviewResumed(at=self.clock()))
        self._persist()
        return self.snapshot()

    async def reset_session(self) -> SessionSnapshot:
        """
        Discard all session state and go back to resume upload.

        Any in-flight AI result for the old session is dropped when it
        returns. The resume blob is deleted unless an archived record still
        references it.
        """
        context = self._context
        resume = context.profile.resume if context.profile else None

        context.discard()
        self._context = SessionContext()

        if resume is not None and not self.archive.references_resume(resume.id):
            self.blob_store.delete(resume.storage_key or build_resume_storage_key(resume.id))

        logger.info(
            f"Session reset (discarded {context.session.id if context.session else 'no session'})"
        )
        self._persist()
        return self.snapshot()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def restore(self) -> bool:
        """Load persisted state, if any. Returns True when something was restored."""
        if self.repository is None:
            return False
        document = self.repository.load()
        if document is None:
            return False

        for record in document.candidates:
            self.archive.upsert(record)
        if document.session is not None and document.profile is not None:
            session = self._release_abandoned_submissions(document.session)
            self._context.discard()
            self._context = SessionContext(profile=document.profile, session=session)
            logger.info(f"Restored session {document.session.id} ({document.session.stage.value})")
        return True

    def _persist(self) -> None:
        if self.repository is None:
            return
        context = self._context
        if context.is_busy:
            # The action holding the lock saves once it finishes
            logger.debug("Skipping persist while an action is in flight")
            return
        try:
            self.repository.save(StateDocument(
                profile=context.profile,
                session=context.session,
                candidates=self.archive.all_records(),
            ))
        except OSError as e:
            logger.error(f"Failed to persist interview state: {e}")

    async def close(self) -> None:
        """Release the AI client."""
        self._context.discard()
        close = getattr(self.ai_service, "close", None)
        if close is not None:
            await close()

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    @staticmethod
    def _ensure_idle(context: SessionContext) -> None:
        if context.is_busy:
            raise StateError("Another action is still in progress. Please wait.")

    def _release_abandoned_submissions(self, session: InterviewSession) -> InterviewSession:
        """
        Clear submissions that started but never recorded an answer.

        Their timers are left expired, so the next tick submits the saved
        draft (or the placeholder) exactly once.
        """
        for question_id in sorted(session.submitted_question_ids - set(session.answers)):
            logger.warning(f"Releasing unfinished submission for question {question_id}")
            session = SessionStateMachine.apply(
                session, SubmissionAbandoned(at=self.clock(), question_id=question_id)
            )
        return session

    @staticmethod
    def _expired_unanswered_question(session: InterviewSession) -> str | None:
        timer = session.get_current_timer()
        if timer is None or not timer.is_expired:
            return None
        question_id = timer.question_id
        if question_id in session.answers or question_id in session.submitted_question_ids:
            return None
        return question_id

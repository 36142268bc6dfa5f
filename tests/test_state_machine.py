from datetime import datetime, timedelta, timezone

import pytest

from interview_engine.core.errors import StateError
from interview_engine.core.state_machine import (
    AnswerRecorded,
    DraftSaved,
    InterviewCompleted,
    InterviewPaused,
    InterviewResumed,
    InterviewStarted,
    ProfileCompleted,
    QuestionActivated,
    QuestionsPlanned,
    MessageAppended,
    SessionStateMachine,
    SubmissionAbandoned,
    SubmissionStarted,
    SummaryAttached,
    TimerTicked,
)
from interview_engine.models import (
    AnswerRecord,
    CandidateProfile,
    ChatMessage,
    ChatSender,
    InterviewQuestion,
    InterviewSummary,
    QuestionDifficulty,
    RequiredProfileField,
    SessionStage,
)

T0 = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


def _questions() -> list[InterviewQuestion]:
    return [
        InterviewQuestion(id="q1", prompt="What is a closure?", difficulty=QuestionDifficulty.EASY, time_limit_seconds=20),
        InterviewQuestion(id="q2", prompt="Scale a Node.js app.", difficulty=QuestionDifficulty.HARD, time_limit_seconds=120),
    ]


def _intro() -> ChatMessage:
    return ChatMessage(sender=ChatSender.SYSTEM, body="Interview started", created_at=T0)


def _questioning_session():
    profile = CandidateProfile(name="Ada", email="ada@example.com", phone="5551234567")
    session = SessionStateMachine.initialize(profile, T0)
    session = SessionStateMachine.apply(session, QuestionsPlanned(at=T0, questions=_questions()))
    session = SessionStateMachine.apply(session, InterviewStarted(at=T0, intro=_intro()))
    return SessionStateMachine.apply(session, QuestionActivated(at=T0, question_id="q1"))


def _record(question_id: str, score: float = 6.0) -> AnswerRecord:
    return AnswerRecord(
        question_id=question_id,
        answer="answer",
        started_at=T0,
        submitted_at=T0 + timedelta(seconds=5),
        elapsed_seconds=5,
        score=score,
        feedback="ok",
    )


def test_initialize_routes_incomplete_profiles_to_profile_completion() -> None:
    incomplete = CandidateProfile(name="Ada", missing_fields=[RequiredProfileField.EMAIL])
    complete = CandidateProfile(name="Ada", email="ada@example.com", phone="5551234567")

    assert SessionStateMachine.initialize(incomplete, T0).stage == SessionStage.PROFILE_COMPLETION
    assert SessionStateMachine.initialize(complete, T0).stage == SessionStage.READY_TO_START


def test_profile_completed_moves_to_ready() -> None:
    session = SessionStateMachine.initialize(
        CandidateProfile(missing_fields=[RequiredProfileField.NAME]), T0
    )

    updated = SessionStateMachine.apply(session, ProfileCompleted(at=T0))

    assert updated.stage == SessionStage.READY_TO_START
    assert session.stage == SessionStage.PROFILE_COMPLETION


def test_activation_starts_one_timer_and_asks_the_question() -> None:
    session = _questioning_session()

    assert session.stage == SessionStage.QUESTIONING
    assert session.current_question_id == "q1"
    assert [t.question_id for t in session.running_timers()] == ["q1"]
    assert session.chat[-1].body == "Question 1: What is a closure?"


def test_question_order_is_fixed_once_planned() -> None:
    session = _questioning_session()

    with pytest.raises(StateError):
        SessionStateMachine.apply(session, QuestionsPlanned(at=T0, questions=_questions()))


def test_activation_only_moves_forward() -> None:
    session = _questioning_session()
    session = SessionStateMachine.apply(session, QuestionActivated(at=T0, question_id="q2"))

    with pytest.raises(StateError):
        SessionStateMachine.apply(session, QuestionActivated(at=T0, question_id="q1"))
    assert [t.question_id for t in session.running_timers()] == ["q2"]


def test_second_submission_for_a_question_is_rejected() -> None:
    session = _questioning_session()
    session = SessionStateMachine.apply(session, SubmissionStarted(at=T0, question_id="q1"))

    assert not session.timers["q1"].is_running
    with pytest.raises(StateError):
        SessionStateMachine.apply(session, SubmissionStarted(at=T0, question_id="q1"))


def test_draft_is_kept_until_the_answer_is_recorded() -> None:
    session = _questioning_session()
    session = SessionStateMachine.apply(session, DraftSaved(at=T0, question_id="q1", text="Closures keep"))
    session = SessionStateMachine.apply(session, DraftSaved(at=T0, question_id="q1", text="Closures keep scope"))

    assert session.draft_answers == {"q1": "Closures keep scope"}
    with pytest.raises(StateError):
        SessionStateMachine.apply(session, DraftSaved(at=T0, question_id="q2", text="Too early"))

    session = SessionStateMachine.apply(session, AnswerRecorded(at=T0, record=_record("q1")))
    assert session.draft_answers == {}
    with pytest.raises(StateError):
        SessionStateMachine.apply(session, DraftSaved(at=T0, question_id="q1", text="Late edit"))


def test_abandoned_submission_is_released_with_an_expired_timer() -> None:
    session = _questioning_session()
    session = SessionStateMachine.apply(session, SubmissionStarted(at=T0, question_id="q1"))
    session = SessionStateMachine.apply(session, MessageAppended(at=T0, message=ChatMessage(
        sender=ChatSender.CANDIDATE,
        body="Half an answer",
        created_at=T0,
        metadata={"question_id": "q1"},
    )))

    released = SessionStateMachine.apply(session, SubmissionAbandoned(at=T0, question_id="q1"))

    assert released.submitted_question_ids == set()
    assert released.timers["q1"].is_expired
    assert all(m.sender != ChatSender.CANDIDATE for m in released.chat)
    resubmitted = SessionStateMachine.apply(released, SubmissionStarted(at=T0, question_id="q1"))
    assert resubmitted.submitted_question_ids == {"q1"}


def test_answers_are_write_once() -> None:
    session = _questioning_session()
    session = SessionStateMachine.apply(session, AnswerRecorded(at=T0, record=_record("q1")))

    with pytest.raises(StateError):
        SessionStateMachine.apply(session, AnswerRecorded(at=T0, record=_record("q1", score=9.0)))
    assert session.answers["q1"].score == 6.0


def test_tick_ignored_outside_questioning() -> None:
    session = SessionStateMachine.apply(_questioning_session(), InterviewPaused(at=T0))

    ticked = SessionStateMachine.apply(session, TimerTicked(at=T0 + timedelta(seconds=10)))

    assert ticked.timers["q1"].remaining_seconds == 20


def test_pause_and_resume_round_trip() -> None:
    session = _questioning_session()
    paused = SessionStateMachine.apply(session, InterviewPaused(at=T0 + timedelta(seconds=3)))
    resumed = SessionStateMachine.apply(paused, InterviewResumed(at=T0 + timedelta(seconds=30)))

    assert paused.stage == SessionStage.PAUSED
    assert not paused.running_timers()
    assert resumed.stage == SessionStage.QUESTIONING
    assert resumed.timers["q1"].is_running
    assert resumed.timers["q1"].last_tick_at == T0 + timedelta(seconds=30)


def test_summary_only_once_and_only_when_completed() -> None:
    summary = InterviewSummary(final_score=7.0, summary_text="Good")
    session = _questioning_session()

    with pytest.raises(StateError):
        SessionStateMachine.apply(session, SummaryAttached(at=T0, summary=summary))

    session = SessionStateMachine.apply(session, InterviewCompleted(at=T0))
    session = SessionStateMachine.apply(session, SummaryAttached(at=T0, summary=summary))

    assert session.stage == SessionStage.COMPLETED
    assert session.current_question_id is None
    assert not session.running_timers()
    with pytest.raises(StateError):
        SessionStateMachine.apply(session, SummaryAttached(at=T0, summary=summary))


def test_completed_is_terminal() -> None:
    session = SessionStateMachine.apply(_questioning_session(), InterviewCompleted(at=T0))

    assert not SessionStateMachine.can_transition(session.stage, SessionStage.QUESTIONING)
    with pytest.raises(StateError):
        SessionStateMachine.apply(session, InterviewPaused(at=T0))

import asyncio

import pytest

from conftest import StubAI, complete_profile

from interview_engine.core.answer_pipeline import AUTO_SUBMIT_PLACEHOLDER, SubmissionAction
from interview_engine.core.errors import StateError, ValidationError
from interview_engine.models import (
    ChatSender,
    EvaluationResult,
    InterviewConfiguration,
    QuestionDifficulty,
    SessionStage,
)

MEDIUM_CONFIG = InterviewConfiguration(
    total_questions=2,
    difficulty_pattern=[QuestionDifficulty.MEDIUM, QuestionDifficulty.MEDIUM],
    timer_by_difficulty={QuestionDifficulty.MEDIUM: 60},
)


async def _started(orchestrator):
    await orchestrator.ingest_profile(complete_profile())
    await orchestrator.begin_interview()
    return orchestrator.session.current_question_id


def test_manual_submission_records_elapsed_time(make_orchestrator, clock, scored_ai) -> None:
    orchestrator = make_orchestrator(ai=scored_ai, config=MEDIUM_CONFIG)

    async def scenario():
        question_id = await _started(orchestrator)
        clock.advance(15)
        await orchestrator.tick_timer()
        assert orchestrator.session.timers[question_id].remaining_seconds == 45
        result = await orchestrator.submit_answer("I would use an API gateway.")
        return question_id, result

    question_id, result = asyncio.run(scenario())

    record = orchestrator.session.answers[question_id]
    assert record.elapsed_seconds == 15
    assert record.score == 8.0
    assert not record.auto_submitted
    assert result.action == SubmissionAction.CONTINUE
    assert result.next_question_id == orchestrator.session.current_question_id
    feedback = [m for m in orchestrator.session.chat if m.metadata.get("type") == "feedback"]
    assert feedback[0].body == "Score: 8/10\nClear and concrete."


def test_blank_manual_answer_is_rejected_without_changes(make_orchestrator) -> None:
    orchestrator = make_orchestrator()

    async def scenario():
        await _started(orchestrator)
        before = orchestrator.session
        with pytest.raises(ValidationError):
            await orchestrator.submit_answer("   ")
        return before

    before = asyncio.run(scenario())

    assert orchestrator.session == before
    assert orchestrator.session.get_current_timer().is_running


def test_submit_without_active_question_is_state_error(make_orchestrator) -> None:
    orchestrator = make_orchestrator()

    async def scenario():
        await orchestrator.ingest_profile(complete_profile())
        with pytest.raises(StateError):
            await orchestrator.submit_answer("hello")

    asyncio.run(scenario())

    assert orchestrator.session.stage == SessionStage.READY_TO_START


def test_stale_question_id_is_rejected(make_orchestrator) -> None:
    orchestrator = make_orchestrator()

    async def scenario():
        first = await _started(orchestrator)
        await orchestrator.submit_answer("First answer")
        with pytest.raises(StateError):
            await orchestrator.submit_answer("Late retry", question_id=first)

    asyncio.run(scenario())

    assert len(orchestrator.session.answers) == 1


def test_tick_and_submit_race_yields_one_record(make_orchestrator, clock) -> None:
    ai = StubAI(evaluation=EvaluationResult(score=7.0))
    orchestrator = make_orchestrator(ai=ai)

    async def scenario():
        question_id = await _started(orchestrator)
        ai.evaluate_gate = asyncio.Event()

        pending = asyncio.create_task(orchestrator.submit_answer("Closures capture scope."))
        for _ in range(3):
            await asyncio.sleep(0)

        clock.advance(30)
        assert await orchestrator.tick_timer() is None
        with pytest.raises(StateError):
            await orchestrator.submit_answer("Second try")

        ai.evaluate_gate.set()
        await pending
        return question_id

    question_id = asyncio.run(scenario())

    session = orchestrator.session
    assert list(session.answers) == [question_id]
    assert ai.calls.count("evaluate") == 1
    candidate_turns = [m for m in session.chat if m.sender == ChatSender.CANDIDATE]
    assert len(candidate_turns) == 1


def test_timer_expiry_auto_submits_once(make_orchestrator, clock) -> None:
    orchestrator = make_orchestrator(ai=StubAI(evaluation=EvaluationResult(score=9.0)))

    async def scenario():
        question_id = await _started(orchestrator)
        clock.advance(25)
        result = await orchestrator.tick_timer()
        clock.advance(1)
        second = await orchestrator.tick_timer()
        return question_id, result, second

    question_id, result, second = asyncio.run(scenario())

    record = orchestrator.session.answers[question_id]
    assert result is not None and result.question_id == question_id
    assert second is None
    assert record.auto_submitted
    assert record.answer == ""
    assert record.score == 1.0
    assert record.elapsed_seconds == 20
    assert len(orchestrator.session.answers) == 1
    candidate_turn = next(m for m in orchestrator.session.chat if m.sender == ChatSender.CANDIDATE)
    assert candidate_turn.body == AUTO_SUBMIT_PLACEHOLDER


def test_timer_expiry_submits_saved_draft(make_orchestrator, clock, scored_ai) -> None:
    orchestrator = make_orchestrator(ai=scored_ai)

    async def scenario():
        question_id = await _started(orchestrator)
        await orchestrator.save_draft("Closures keep")
        snapshot = await orchestrator.save_draft("  Closures keep their enclosing scope  ")
        clock.advance(25)
        result = await orchestrator.tick_timer()
        return question_id, snapshot, result

    question_id, snapshot, result = asyncio.run(scenario())

    record = orchestrator.session.answers[question_id]
    assert snapshot.draft_answer == "  Closures keep their enclosing scope  "
    assert result.score == 8.0
    assert record.auto_submitted
    assert record.answer == "Closures keep their enclosing scope"
    assert orchestrator.session.draft_answers == {}
    candidate_turn = next(m for m in orchestrator.session.chat if m.sender == ChatSender.CANDIDATE)
    assert candidate_turn.body == "Closures keep their enclosing scope"


def test_blank_draft_falls_back_to_placeholder(make_orchestrator, clock, scored_ai) -> None:
    orchestrator = make_orchestrator(ai=scored_ai)

    async def scenario():
        question_id = await _started(orchestrator)
        await orchestrator.save_draft("   ")
        clock.advance(25)
        await orchestrator.tick_timer()
        return question_id

    question_id = asyncio.run(scenario())

    record = orchestrator.session.answers[question_id]
    assert record.answer == ""
    assert record.score == 1.0
    candidate_turn = next(m for m in orchestrator.session.chat if m.sender == ChatSender.CANDIDATE)
    assert candidate_turn.body == AUTO_SUBMIT_PLACEHOLDER


def test_draft_for_inactive_question_is_state_error(make_orchestrator) -> None:
    orchestrator = make_orchestrator()

    async def scenario():
        with pytest.raises(StateError):
            await orchestrator.save_draft("Too early")
        await _started(orchestrator)
        with pytest.raises(StateError):
            await orchestrator.save_draft("Wrong question", question_id="not-a-question")

    asyncio.run(scenario())

    assert orchestrator.session.draft_answers == {}


def test_ticks_during_auto_submission_are_skipped(make_orchestrator, clock) -> None:
    ai = StubAI()
    orchestrator = make_orchestrator(ai=ai)

    async def scenario():
        await _started(orchestrator)
        ai.summary_gate = asyncio.Event()
        await orchestrator.submit_answer("First answer")

        clock.advance(200)
        pending = asyncio.create_task(orchestrator.tick_timer())
        for _ in range(3):
            await asyncio.sleep(0)
        for _ in range(3):
            clock.advance(1)
            assert await orchestrator.tick_timer() is None

        ai.summary_gate.set()
        return await pending

    result = asyncio.run(scenario())

    assert result.action == SubmissionAction.COMPLETED
    assert len(orchestrator.session.answers) == 2
    assert ai.calls.count("summarize") == 1

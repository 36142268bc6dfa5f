import asyncio
from datetime import datetime, timedelta, timezone

from interview_engine.core.timer_engine import TimerEngine, TimerScheduler
from interview_engine.models import InterviewQuestion, QuestionDifficulty

T0 = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


def _question(limit: int = 60) -> InterviewQuestion:
    return InterviewQuestion(id="q1", prompt="Explain closures.", difficulty=QuestionDifficulty.MEDIUM, time_limit_seconds=limit)


def test_activate_starts_full_countdown() -> None:
    timer = TimerEngine.activate(_question(60), T0)

    assert timer.remaining_seconds == 60
    assert timer.is_running
    assert timer.started_at == T0
    assert timer.last_tick_at == T0


def test_tick_consumes_whole_wall_clock_gap() -> None:
    timer = TimerEngine.activate(_question(60), T0)

    late = TimerEngine.tick(timer, T0 + timedelta(seconds=5.7))

    assert late.remaining_seconds == 55
    assert late.last_tick_at == T0 + timedelta(seconds=5.7)
    assert timer.remaining_seconds == 60


def test_tick_charges_at_least_one_second() -> None:
    timer = TimerEngine.activate(_question(60), T0)

    early = TimerEngine.tick(timer, T0 + timedelta(milliseconds=200))

    assert early.remaining_seconds == 59


def test_tick_stops_at_zero_and_stays_terminal() -> None:
    timer = TimerEngine.activate(_question(20), T0)

    expired = TimerEngine.tick(timer, T0 + timedelta(seconds=45))
    again = TimerEngine.tick(expired, T0 + timedelta(seconds=50))
    resumed = TimerEngine.resume(expired, T0 + timedelta(seconds=51))

    assert expired.remaining_seconds == 0
    assert not expired.is_running
    assert expired.is_expired
    assert again == expired
    assert not resumed.is_running


def test_freeze_and_resume_preserve_remaining_time() -> None:
    timer = TimerEngine.tick(TimerEngine.activate(_question(60), T0), T0 + timedelta(seconds=10))
    frozen = TimerEngine.freeze(timer)

    resumed = TimerEngine.resume(frozen, T0 + timedelta(seconds=300))
    after = TimerEngine.tick(resumed, T0 + timedelta(seconds=302))

    assert frozen.remaining_seconds == 50 and not frozen.is_running
    assert resumed.is_running and resumed.last_tick_at == T0 + timedelta(seconds=300)
    assert after.remaining_seconds == 48


def test_elapsed_for_answer_is_clamped_to_limit() -> None:
    timer = TimerEngine.activate(_question(60), T0).model_copy(update={"remaining_seconds": 45})

    assert TimerEngine.elapsed_for_answer(timer, 60) == 15
    assert TimerEngine.elapsed_for_answer(timer, 10) == 0
    assert TimerEngine.elapsed_for_answer(None, 60) == 0


def test_scheduler_calls_back_until_stopped() -> None:
    calls = []

    async def tick():
        calls.append(1)
        if len(calls) == 2:
            raise RuntimeError("tick blew up")

    async def scenario():
        scheduler = TimerScheduler(tick, interval_seconds=0.01)
        scheduler.start()
        while len(calls) < 3:
            await asyncio.sleep(0.01)
        await scheduler.stop()
        return scheduler

    scheduler = asyncio.run(scenario())

    assert len(calls) >= 3
    assert not scheduler.is_running

"""
Timer Engine - per-question countdown with drift correction.

The countdown is pure arithmetic over timestamps. Scheduling the ~1 Hz tick
is a separate concern handled by TimerScheduler, which only calls back into
the orchestrator.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Awaitable, Callable

from interview_engine.models.interview import QuestionTimerState
from interview_engine.models.question import InterviewQuestion

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Default wall clock (UTC, timezone-aware)."""
    return datetime.now(timezone.utc)


class TimerEngine:
    """
    Pure countdown operations on QuestionTimerState.

    Every method returns a new timer state and never mutates its input.
    """

    @staticmethod
    def activate(question: InterviewQuestion, now: datetime) -> QuestionTimerState:
        """Start a fresh countdown for a question."""
        return QuestionTimerState(
            question_id=question.id,
            remaining_seconds=question.time_limit_seconds,
            is_running=True,
            started_at=now,
            last_tick_at=now,
        )

    @staticmethod
    def elapsed_since_last_tick(timer: QuestionTimerState, now: datetime) -> int:
        """
        Whole seconds to charge for a tick.

        Floors at one second but otherwise consumes the entire gap since the
        last tick, so a late or coalesced tick catches the countdown up.
        """
        reference = timer.last_tick_at or timer.started_at or now
        gap = math.floor((now - reference).total_seconds())
        return max(1, gap)

    @classmethod
    def tick(cls, timer: QuestionTimerState, now: datetime) -> QuestionTimerState:
        """Advance a running countdown. Stopped timers are returned unchanged."""
        if not timer.is_running:
            return timer

        elapsed = cls.elapsed_since_last_tick(timer, now)
        remaining = max(0, timer.remaining_seconds - elapsed)
        return timer.model_copy(update={
            "remaining_seconds": remaining,
            "last_tick_at": now,
            "is_running": remaining > 0,
        })

    @staticmethod
    def freeze(timer: QuestionTimerState) -> QuestionTimerState:
        """Stop the countdown, keeping whatever time is left."""
        return timer.model_copy(update={"is_running": False})

    @staticmethod
    def expire(timer: QuestionTimerState) -> QuestionTimerState:
        """Stop the countdown at zero so the next tick treats it as expired."""
        return timer.model_copy(update={"remaining_seconds": 0, "is_running": False})

    @staticmethod
    def resume(timer: QuestionTimerState, now: datetime) -> QuestionTimerState:
        """Restart a frozen countdown. Expired timers stay terminal."""
        if timer.is_running or timer.remaining_seconds == 0:
            return timer
        return timer.model_copy(update={"is_running": True, "last_tick_at": now})

    @staticmethod
    def elapsed_for_answer(timer: QuestionTimerState | None, time_limit_seconds: int) -> int:
        """Seconds used on a question, clamped to [0, time limit]."""
        if timer is None:
            return 0
        used = time_limit_seconds - max(0, timer.remaining_seconds)
        return max(0, min(time_limit_seconds, used))


class TimerScheduler:
    """
    Drives a tick callback at a fixed interval on the running event loop.

    Failures raised by the callback are logged and the loop keeps going.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[object]],
        interval_seconds: float = 1.0,
    ):
        self.callback = callback
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="interview-timer")
        logger.info(f"Timer scheduler started ({self.interval_seconds}s interval)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Timer scheduler stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.callback()
            except Exception as e:
                logger.error(f"Timer tick failed: {e}")

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from interview_engine.core.interview_orchestrator import InterviewOrchestrator
from interview_engine.core.resume_intake import InMemoryBlobStore, ParsedResume
from interview_engine.core.errors import ParseError
from interview_engine.models import (
    CandidateProfile,
    EvaluationResult,
    InterviewConfiguration,
    QuestionDifficulty,
)


class FakeClock:
    """Controllable wall clock; call it like `system_clock`."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class StubAI:
    """
    In-process AI collaborator.

    Returns None (AI unavailable) unless a response is configured. Setting a
    gate makes the matching call wait until the gate is released.
    """

    def __init__(self, questions=None, evaluation=None, summary=None, error: Exception | None = None):
        self.questions = questions
        self.evaluation = evaluation
        self.summary = summary
        self.error = error
        self.evaluate_gate: asyncio.Event | None = None
        self.summary_gate: asyncio.Event | None = None
        self.calls: list[str] = []

    async def generate_questions(self, profile, config):
        self.calls.append("generate")
        if self.error:
            raise self.error
        return self.questions

    async def evaluate_answer(self, question, answer, transcript):
        self.calls.append("evaluate")
        if self.evaluate_gate is not None:
            await self.evaluate_gate.wait()
        if self.error:
            raise self.error
        return self.evaluation

    async def summarize(self, profile, questions, answers):
        self.calls.append("summarize")
        if self.summary_gate is not None:
            await self.summary_gate.wait()
        if self.error:
            raise self.error
        return self.summary


class StubResumeParser:
    def __init__(self, parsed: ParsedResume | None = None):
        self.parsed = parsed
        self.calls = 0

    async def parse(self, data: bytes, mime_hint: str) -> ParsedResume:
        self.calls += 1
        if self.parsed is None:
            raise ParseError("Could not read resume text")
        return self.parsed


TWO_QUESTION_CONFIG = InterviewConfiguration(
    total_questions=2,
    difficulty_pattern=[QuestionDifficulty.EASY, QuestionDifficulty.HARD],
    timer_by_difficulty={
        QuestionDifficulty.EASY: 20,
        QuestionDifficulty.MEDIUM: 60,
        QuestionDifficulty.HARD: 120,
    },
)


def complete_profile(**overrides) -> CandidateProfile:
    fields = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "555-123-4567",
        "role": "Full Stack Engineer",
    }
    fields.update(overrides)
    return CandidateProfile(**fields)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stub_ai():
    return StubAI()


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def make_orchestrator(clock, blob_store):
    def _make(ai=None, config=TWO_QUESTION_CONFIG, **kwargs) -> InterviewOrchestrator:
        return InterviewOrchestrator(
            ai_service=ai,
            config=config,
            blob_store=blob_store,
            clock=clock,
            **kwargs,
        )

    return _make


@pytest.fixture
def scored_ai():
    return StubAI(evaluation=EvaluationResult(score=8.0, feedback="Clear and concrete."))

import asyncio

import pytest
from pydantic import ValidationError as SchemaError

from conftest import StubAI, complete_profile

from interview_engine.core.question_sequencer import FALLBACK_QUESTION_BANK, QuestionSequencer
from interview_engine.models import (
    DEFAULT_INTERVIEW_CONFIGURATION,
    InterviewConfiguration,
    InterviewSession,
    QuestionDifficulty,
    QuestionDraft,
)


def test_fallback_plan_cycles_bank_indices() -> None:
    sequencer = QuestionSequencer()

    questions = sequencer.fallback_questions(DEFAULT_INTERVIEW_CONFIGURATION)

    indices = [FALLBACK_QUESTION_BANK[q.difficulty].index(q.prompt) for q in questions]
    assert indices == [0, 1, 0, 1, 0, 1]
    assert [q.difficulty for q in questions] == DEFAULT_INTERVIEW_CONFIGURATION.difficulty_pattern
    assert [q.time_limit_seconds for q in questions] == [20, 20, 60, 60, 120, 120]
    assert len({q.id for q in questions}) == 6


def test_build_plan_falls_back_when_ai_unavailable() -> None:
    sequencer = QuestionSequencer(StubAI(questions=None))

    questions = asyncio.run(sequencer.build_plan(complete_profile(), DEFAULT_INTERVIEW_CONFIGURATION))

    assert len(questions) == 6
    assert questions[0].prompt == FALLBACK_QUESTION_BANK[QuestionDifficulty.EASY][0]


def test_build_plan_falls_back_when_ai_raises() -> None:
    sequencer = QuestionSequencer(StubAI(error=RuntimeError("boom")))

    questions = asyncio.run(sequencer.build_plan(complete_profile(), DEFAULT_INTERVIEW_CONFIGURATION))

    assert len(questions) == 6


def test_build_plan_normalizes_ai_drafts() -> None:
    drafts = [
        QuestionDraft(id="a", prompt="Explain event loops.", difficulty="EASY"),
        QuestionDraft(id="a", prompt="Design a cache.", timeLimitSeconds=90),
        QuestionDraft(),
    ]
    sequencer = QuestionSequencer(StubAI(questions=drafts))

    questions = asyncio.run(sequencer.build_plan(complete_profile(), DEFAULT_INTERVIEW_CONFIGURATION))

    assert questions[0].id == "a"
    assert questions[0].time_limit_seconds == 20
    assert questions[1].id != "a"
    assert questions[1].difficulty == QuestionDifficulty.EASY
    assert questions[1].time_limit_seconds == 90
    assert questions[2].difficulty == QuestionDifficulty.MEDIUM
    assert questions[2].prompt


def test_next_question_id_walks_forward() -> None:
    session = InterviewSession(question_order=["q1", "q2"], current_question_id="q1")

    assert QuestionSequencer.next_question_id(session) == "q2"
    assert QuestionSequencer.next_question_id(session, "q2") is None
    assert QuestionSequencer.next_question_id(InterviewSession(question_order=["q1"])) == "q1"


def test_plan_has_one_question_per_pattern_entry() -> None:
    config = InterviewConfiguration(
        total_questions=3,
        difficulty_pattern=[QuestionDifficulty.HARD, QuestionDifficulty.EASY, QuestionDifficulty.HARD],
    )

    questions = QuestionSequencer().fallback_questions(config)

    assert [q.difficulty for q in questions] == config.difficulty_pattern

    with pytest.raises(SchemaError):
        InterviewConfiguration(total_questions=2)

"""
Shared fixtures for the practice engine tests.
"""

import random
from datetime import timedelta
from typing import Optional

import pytest

from englishtutor.ai.oracle import RubricScoringOracle
from englishtutor.config import Settings
from englishtutor.domain.memory_repository import MemoryPracticeStore
from englishtutor.domain.model import (
    Attempt,
    Difficulty,
    Question,
    QuestionKind,
    ReadingBody,
    SubQuestion,
    utcnow,
)
from englishtutor.exams.registry import DEFAULT_PROFILES, ExamServiceRegistry
from englishtutor.exams.service import PracticeService

TEST_USER_ID = "test-user-1"


def make_question(
    exam_type: str = "ielts",
    skill: str = "reading",
    kind: QuestionKind = QuestionKind.MULTIPLE_CHOICE,
    difficulty: Difficulty = Difficulty.EASY,
    correct_answer: Optional[str] = "B",
    age_minutes: int = 0,
    **kwargs
) -> Question:
    """A stored question, ``age_minutes`` older than now."""
    kwargs.setdefault("options", ["A", "B", "C", "D"])
    return Question.create(
        exam_type=exam_type,
        skill=skill,
        kind=kind,
        difficulty=difficulty,
        content=kwargs.pop("content", "Which option is correct?"),
        correct_answer=correct_answer,
        created_at=utcnow() - timedelta(minutes=age_minutes),
        **kwargs
    )


def make_passage_question(exam_type: str = "ielts", skill: str = "reading",
                          answers=("A", "B", "C", "D", "A", "B", "C", "D", "A", "B")) -> Question:
    """A reading question with one sub-question per answer key."""
    return Question.create(
        exam_type=exam_type,
        skill=skill,
        kind=QuestionKind.MULTIPLE_CHOICE,
        difficulty=Difficulty.MEDIUM,
        content="Read the passage and answer the questions.",
        body=ReadingBody(
            passage="A short passage.",
            sub_questions=[
                SubQuestion(id=str(i + 1), prompt=f"Question {i + 1}", correct_answer=answer,
                            options=["A", "B", "C", "D"])
                for i, answer in enumerate(answers)
            ],
        ),
    )


def make_attempt(
    question_id: str = "q",
    exam_type: str = "ielts",
    skill: str = "reading",
    is_correct: Optional[bool] = True,
    score: float = 1.0,
    max_score: float = 1.0,
    difficulty: Difficulty = Difficulty.EASY,
    minutes_ago: int = 0,
    user_id: str = TEST_USER_ID
) -> Attempt:
    return Attempt(
        id=f"attempt-{question_id}-{minutes_ago}",
        user_id=user_id,
        question_id=question_id,
        exam_type=exam_type,
        skill=skill,
        answer="B",
        score=score,
        raw_score=score,
        is_correct=is_correct,
        feedback="",
        suggestions="",
        difficulty=difficulty,
        max_score=max_score,
        submitted_at=utcnow() - timedelta(minutes=minutes_ago),
    )


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, AI_TIMEOUT_SECONDS=0.2)


@pytest.fixture
def store():
    """Memory store with the exam catalog loaded."""
    return MemoryPracticeStore(exam_types=[profile.to_exam_type() for profile in DEFAULT_PROFILES])


@pytest.fixture
def registry(store, test_settings):
    return ExamServiceRegistry(store, RubricScoringOracle(), config=test_settings, rng=random.Random(7))


@pytest.fixture
def service(registry, store):
    return PracticeService(registry, store)

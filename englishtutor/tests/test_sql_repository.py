"""
Tests for the SQL practice store on a temporary SQLite database.
"""

import random
from contextlib import asynccontextmanager

import pytest

from englishtutor.ai.oracle import RubricScoringOracle
from englishtutor.database import SqlPracticeStore, close_database, get_session_factory, initialize_database
from englishtutor.domain.model import Difficulty, Evaluation, utcnow
from englishtutor.exams import IELTS_PROFILE, ExamServiceRegistry, PracticeService
from englishtutor.tests.conftest import TEST_USER_ID, make_attempt, make_passage_question, make_question


@asynccontextmanager
async def sql_store(tmp_path):
    await initialize_database(f"sqlite+aiosqlite:///{tmp_path / 'practice.db'}")
    try:
        yield SqlPracticeStore(get_session_factory())
    finally:
        await close_database()


def evaluation(score: float, max_score: float = 9.0, is_correct=None) -> Evaluation:
    return Evaluation(is_correct=is_correct, score=score, raw_score=score, max_score=max_score,
                      feedback="", suggestions="")


@pytest.mark.asyncio
async def test_exam_catalog_round_trip(tmp_path):
    async with sql_store(tmp_path) as store:
        await store.save_exam_type(IELTS_PROFILE.to_exam_type())

        exam_type = await store.get_exam_type("IELTS")

        assert exam_type.name == "IELTS"
        assert exam_type.scale.max_score == 9
        assert exam_type.scale.increment == 0.5
        assert exam_type.skill_codes == ["reading", "listening", "writing", "speaking"]
        assert await store.get_exam_type("gre") is None


@pytest.mark.asyncio
async def test_saving_exam_type_again_replaces_skills(tmp_path):
    async with sql_store(tmp_path) as store:
        exam_type = IELTS_PROFILE.to_exam_type()
        await store.save_exam_type(exam_type)
        exam_type.name = "IELTS Academic"
        exam_type.skills[3].is_active = False
        await store.save_exam_type(exam_type)

        loaded = await store.get_exam_type("ielts")

        assert loaded.name == "IELTS Academic"
        assert len(loaded.skills) == 4
        assert (await store.get_skill("ielts", "speaking")).is_active is False


@pytest.mark.asyncio
async def test_question_round_trip(tmp_path):
    async with sql_store(tmp_path) as store:
        question = make_passage_question()
        question.metadata = {"question_type": "detail"}
        await store.save_question(question)

        loaded = await store.get_question(question.id)

        assert loaded.content == question.content
        assert loaded.body == question.body
        assert loaded.metadata == {"question_type": "detail"}
        assert loaded.difficulty == Difficulty.MEDIUM
        assert loaded.created_at == question.created_at
        assert await store.get_question("missing") is None


@pytest.mark.asyncio
async def test_find_question_newest_first_with_exclusions(tmp_path):
    async with sql_store(tmp_path) as store:
        older = await store.save_question(make_question("toefl", age_minutes=10))
        newer = await store.save_question(make_question("toefl", age_minutes=1))
        hard = await store.save_question(make_question("toefl", difficulty=Difficulty.HARD, age_minutes=30))

        assert (await store.find_question("toefl", "reading")).id == newer.id
        assert (await store.find_question("toefl", "reading", exclude_ids=[newer.id])).id == older.id
        assert (await store.find_question("toefl", "reading", Difficulty.HARD)).id == hard.id
        assert await store.find_question("toefl", "reading", Difficulty.MEDIUM) is None
        assert await store.find_question("toefl", "reading", exclude_ids=[older.id, newer.id, hard.id]) is None


@pytest.mark.asyncio
async def test_recent_attempts(tmp_path):
    async with sql_store(tmp_path) as store:
        for minutes_ago in (5, 1, 3):
            await store.add_attempt(make_attempt(f"q{minutes_ago}", minutes_ago=minutes_ago))
        await store.add_attempt(make_attempt("w", skill="writing", is_correct=None, score=6.5, max_score=9.0))
        await store.add_attempt(make_attempt("other", user_id="someone-else"))

        reading = await store.recent_attempts(TEST_USER_ID, "ielts", "reading", limit=2)
        everything = await store.recent_attempts(TEST_USER_ID, "ielts")

        assert [attempt.question_id for attempt in reading] == ["q1", "q3"]
        assert len(everything) == 4
        writing = everything[0]
        assert writing.is_correct is None
        assert writing.fraction == pytest.approx(6.5 / 9)


@pytest.mark.asyncio
async def test_apply_progress_inserts_then_increments(tmp_path):
    async with sql_store(tmp_path) as store:
        first = await store.apply_progress(TEST_USER_ID, "ielts", "writing", evaluation(6.0), at=utcnow())
        second = await store.apply_progress(TEST_USER_ID, "ielts", "writing", evaluation(8.0), at=utcnow())
        await store.apply_progress(TEST_USER_ID, "ielts", "reading", evaluation(1.0, 1.0, True), at=utcnow())

        assert (first.total_questions, first.average_score, first.best_score) == (1, 6.0, 6.0)
        assert second.total_questions == 2
        assert second.earned_points == 14.0
        assert second.max_points == 18.0
        assert second.average_score == 7.0
        assert second.best_score == 8.0
        assert second.correct_answers == 0

        rows = await store.list_progress(TEST_USER_ID, "ielts")
        assert [row.skill for row in rows] == ["writing", "reading"]
        assert (await store.get_progress(TEST_USER_ID, "ielts", "reading")).correct_answers == 1


@pytest.mark.asyncio
async def test_best_score_keeps_maximum(tmp_path):
    async with sql_store(tmp_path) as store:
        await store.apply_progress(TEST_USER_ID, "ielts", "speaking", evaluation(7.5), at=utcnow())
        progress = await store.apply_progress(TEST_USER_ID, "ielts", "speaking", evaluation(5.0),
                                              at=utcnow())

        assert progress.best_score == 7.5
        assert progress.average_score == 6.25


@pytest.mark.asyncio
async def test_practice_flow_on_sql_store(tmp_path):
    async with sql_store(tmp_path) as store:
        registry = ExamServiceRegistry(store, RubricScoringOracle(), rng=random.Random(1))
        await registry.seed_catalog()
        service = PracticeService(registry, store)

        question = await service.get_next_question(TEST_USER_ID, "yds", "vocabulary")
        result = await service.submit_answer(TEST_USER_ID, question.id, question.correct_answer)
        report = await service.get_progress_report(TEST_USER_ID, "yds", "vocabulary")

        assert result.evaluation.is_correct is True
        assert report["summary"]["total_questions"] == 1
        assert report["summary"]["correct_answers"] == 1
        assert (await service.get_next_question(TEST_USER_ID, "yds", "vocabulary")).id != question.id

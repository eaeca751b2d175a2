"""
Tests for the exam service registry and the practice service.
"""

import json
from unittest.mock import AsyncMock

import pytest

from englishtutor.common.exceptions import (
    ConfigurationError,
    EvaluationUnavailable,
    NotFoundError,
    ValidationError,
)
from englishtutor.domain.model import Difficulty, QuestionKind, WritingBody
from englishtutor.exams import ExamServiceRegistry, PracticeService
from englishtutor.tests.conftest import TEST_USER_ID, make_passage_question, make_question


class TestRegistry:
    def test_lookup_is_case_insensitive(self, registry):
        assert registry.get("IELTS").code == "ielts"
        assert registry.get(" yds ").profile.name == "YDS"

    def test_unknown_exam(self, registry):
        with pytest.raises(ConfigurationError):
            registry.get("cambridge")
        assert not registry.is_valid_exam_type("cambridge")

    def test_supported_exam_types(self, registry):
        assert registry.supported_exam_types() == ["ielts", "toefl", "yds"]

    def test_bundles_share_the_converter(self, registry):
        bundle = registry.get("toefl")
        assert bundle.evaluator.converter is bundle.converter
        assert bundle.aggregator.converter is bundle.converter

    def test_windows_come_from_settings(self, registry, test_settings):
        selector = registry.get("ielts").selector
        assert selector.recent_window == test_settings.RECENT_EXCLUSION_WINDOW
        assert registry.get("ielts").evaluator.timeout == test_settings.AI_TIMEOUT_SECONDS

    @pytest.mark.asyncio
    async def test_seed_catalog(self, test_settings):
        from englishtutor.domain.memory_repository import MemoryPracticeStore

        store = MemoryPracticeStore()
        saved = await ExamServiceRegistry(store, config=test_settings).seed_catalog()

        assert [exam_type.code for exam_type in saved] == ["ielts", "toefl", "yds"]
        skill = await store.get_skill("yds", "vocabulary")
        assert skill.max_score == 100


class TestPracticeService:
    @pytest.mark.asyncio
    async def test_list_exam_types(self, service):
        exam_types = await service.list_exam_types()

        assert [exam_type.code for exam_type in exam_types] == ["ielts", "toefl", "yds"]
        assert exam_types[1].skill_codes == ["reading", "listening", "writing", "speaking"]

    @pytest.mark.asyncio
    async def test_next_question_parses_difficulty(self, service, store):
        hard = await store.save_question(make_question("toefl", difficulty=Difficulty.HARD))

        question = await service.get_next_question(TEST_USER_ID, "TOEFL", "reading", "Hard")

        assert question.id == hard.id

    @pytest.mark.asyncio
    async def test_next_question_rejects_unknown_difficulty(self, service):
        with pytest.raises(ValidationError):
            await service.get_next_question(TEST_USER_ID, "toefl", "reading", "extreme")

    @pytest.mark.asyncio
    async def test_submit_objective_answer(self, service, store):
        question = await store.save_question(make_question("toefl", correct_answer="B"))

        result = await service.submit_answer(TEST_USER_ID, question.id, "A", time_spent=42)

        assert result.evaluation.is_correct is False
        assert result.correct_answer == "B"
        assert result.progress_updated is True
        assert result.attempt.time_spent == 42
        assert store.get_all_attempts() == [result.attempt]
        progress = await store.get_progress(TEST_USER_ID, "toefl", "reading")
        assert (progress.total_questions, progress.correct_answers, progress.earned_points,
                progress.average_score, progress.best_score) == (1, 0, 0.0, 0.0, 0.0)

    @pytest.mark.asyncio
    async def test_submit_multi_part_answer_is_stored_as_json(self, service, store):
        question = await store.save_question(make_passage_question("yds", "reading", answers=("A", "B")))

        result = await service.submit_answer(TEST_USER_ID, question.id, ["A", "B"])

        assert result.evaluation.score == 100
        assert json.loads(result.attempt.answer) == ["A", "B"]
        assert result.correct_answer == ["A", "B"]
        assert result.to_dict()["attempt"]["max_score"] == 100

    @pytest.mark.asyncio
    async def test_submitted_question_is_not_served_again(self, service, store):
        first = await store.save_question(make_question("toefl", age_minutes=1))
        second = await store.save_question(make_question("toefl", age_minutes=2))

        await service.submit_answer(TEST_USER_ID, first.id, "B")
        question = await service.get_next_question(TEST_USER_ID, "toefl", "reading")

        assert question.id == second.id

    @pytest.mark.asyncio
    async def test_submit_essay_with_rubric_scorer(self, service, store):
        question = await store.save_question(make_question(
            "ielts", "writing", kind=QuestionKind.ESSAY, correct_answer=None, options=None,
            body=WritingBody(task=2, task_type="opinion", min_words=250),
        ))
        essay = ("Many people believe that children learn values at home. However, schools also play a part. "
                 "Therefore parents and teachers should work together.")

        result = await service.submit_answer(TEST_USER_ID, question.id, essay)

        assert result.evaluation.is_correct is None
        assert 0 <= result.evaluation.score <= 9
        assert result.evaluation.score * 2 == int(result.evaluation.score * 2)
        assert result.evaluation.feedback.startswith("Word count:")

    @pytest.mark.asyncio
    async def test_unknown_question(self, service):
        with pytest.raises(NotFoundError):
            await service.submit_answer(TEST_USER_ID, "missing", "A")

    @pytest.mark.asyncio
    async def test_failed_evaluation_records_nothing(self, store, test_settings):
        oracle = AsyncMock()
        oracle.score.side_effect = RuntimeError("upstream down")
        service = PracticeService(ExamServiceRegistry(store, oracle, config=test_settings), store)
        question = await store.save_question(make_question(
            "toefl", "writing", kind=QuestionKind.ESSAY, correct_answer=None, options=None,
        ))

        with pytest.raises(EvaluationUnavailable):
            await service.submit_answer(TEST_USER_ID, question.id, "An essay.")

        assert store.get_all_attempts() == []
        assert await store.get_progress(TEST_USER_ID, "toefl", "writing") is None

    @pytest.mark.asyncio
    async def test_progress_failure_keeps_the_attempt(self, service, store, monkeypatch):
        question = await store.save_question(make_question("toefl", correct_answer="B"))
        monkeypatch.setattr(store, "apply_progress", AsyncMock(side_effect=RuntimeError("locked")))

        result = await service.submit_answer(TEST_USER_ID, question.id, "B")

        assert result.progress_updated is False
        assert store.get_all_attempts() == [result.attempt]

    @pytest.mark.asyncio
    async def test_progress_report(self, service, store):
        question = await store.save_question(make_question("toefl", correct_answer="B"))
        await service.submit_answer(TEST_USER_ID, question.id, "B")
        report = await service.get_progress_report(TEST_USER_ID, "toefl")

        assert report["summary"]["total_questions"] == 1
        assert report["summary"]["correct_answers"] == 1
        assert report["skills"]["reading"]["percentage"] == 100.0

    @pytest.mark.asyncio
    async def test_progress_report_unknown_exam(self, service):
        with pytest.raises(ConfigurationError):
            await service.get_progress_report(TEST_USER_ID, "gre")

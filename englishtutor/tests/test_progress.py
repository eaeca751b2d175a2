"""
Tests for progress folding, trends, weak areas and progress reports.
"""

from unittest.mock import AsyncMock

import pytest

from englishtutor.domain.model import Evaluation, Progress
from englishtutor.exams import IELTS_PROFILE, YDS_PROFILE, ProgressAggregator, ScoreConverter, Trend
from englishtutor.tests.conftest import TEST_USER_ID, make_attempt


def evaluation(score: float, max_score: float = 9.0, is_correct=None) -> Evaluation:
    return Evaluation(is_correct=is_correct, score=score, raw_score=score, max_score=max_score,
                      feedback="", suggestions="")


def aggregator_for(profile, store):
    return ProgressAggregator(profile, ScoreConverter(profile), store)


def history(scores, max_score=9.0, skill="reading"):
    """Attempts for ``scores`` given oldest first, returned newest first."""
    count = len(scores)
    return [make_attempt(question_id=f"q{i}", skill=skill, is_correct=None, score=score, max_score=max_score,
                         minutes_ago=count - i)
            for i, score in enumerate(scores)][::-1]


class TestFold:
    def test_first_attempt_row(self):
        progress = Progress.first(TEST_USER_ID, "ielts", "reading", evaluation(0.0, 1.0, is_correct=False))

        assert (progress.total_questions, progress.correct_answers, progress.earned_points,
                progress.average_score, progress.best_score) == (1, 0, 0.0, 0.0, 0.0)
        assert progress.total_points == 1.0

    def test_fold_accumulates(self):
        progress = Progress(TEST_USER_ID, "ielts", "writing")

        progress = ProgressAggregator.fold(progress, evaluation(7.0))
        progress = ProgressAggregator.fold(progress, evaluation(5.0))

        assert progress.total_questions == 2
        assert progress.correct_answers == 0
        assert progress.earned_points == 12.0
        assert progress.max_points == 18.0
        assert progress.average_score == 6.0
        assert progress.best_score == 7.0
        assert progress.percentage == pytest.approx(66.67, abs=0.01)

    def test_fold_counts_correct_answers(self):
        progress = Progress.first(TEST_USER_ID, "yds", "grammar", evaluation(1.0, 1.0, is_correct=True))

        progress = ProgressAggregator.fold(progress, evaluation(0.0, 1.0, is_correct=False))

        assert progress.correct_answers == 1
        assert progress.average_score == 0.5

    def test_fold_does_not_mutate(self):
        progress = Progress(TEST_USER_ID, "ielts", "reading")

        ProgressAggregator.fold(progress, evaluation(9.0))

        assert progress.total_questions == 0


class TestTrend:
    def test_improving(self, store):
        assert aggregator_for(IELTS_PROFILE, store).trend(history([4, 4, 4, 6, 6, 6]), "reading") == Trend.IMPROVING

    def test_declining(self, store):
        assert aggregator_for(IELTS_PROFILE, store).trend(history([7, 7, 7, 5, 5, 5]), "reading") == Trend.DECLINING

    def test_small_change_is_stable(self, store):
        assert aggregator_for(IELTS_PROFILE, store).trend(history([6, 6, 6, 6, 6.5]), "reading") == Trend.STABLE

    def test_too_few_attempts(self, store):
        assert aggregator_for(IELTS_PROFILE, store).trend(history([1, 9, 9, 9]), "reading") == Trend.STABLE

    def test_scores_are_compared_on_the_skill_scale(self, store):
        attempts = history([0, 0, 0, 1, 1, 1], max_score=1.0)

        assert aggregator_for(YDS_PROFILE, store).trend(attempts, "reading") == Trend.IMPROVING


class TestWeakAreas:
    def test_skill_below_passing_too_often(self, store):
        attempts = history([3, 3, 3, 3, 8, 8, 8, 8, 8, 8])

        assert aggregator_for(IELTS_PROFILE, store).weak_areas(attempts, "reading") == ["Reading comprehension"]

    def test_thirty_percent_is_not_weak(self, store):
        attempts = history([3, 3, 3, 8, 8, 8, 8, 8, 8, 8])

        assert aggregator_for(IELTS_PROFILE, store).weak_areas(attempts, "reading") == []

    def test_no_history(self, store):
        assert aggregator_for(IELTS_PROFILE, store).weak_areas([], "writing") == []


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_writes_progress(self, store):
        aggregator = aggregator_for(IELTS_PROFILE, store)

        assert await aggregator.update(TEST_USER_ID, "writing", evaluation(6.5))
        assert await aggregator.update(TEST_USER_ID, "writing", evaluation(7.5))

        progress = await store.get_progress(TEST_USER_ID, "ielts", "writing")
        assert progress.total_questions == 2
        assert progress.average_score == 7.0
        assert progress.best_score == 7.5

    @pytest.mark.asyncio
    async def test_update_failure_is_reported_not_raised(self):
        store = AsyncMock()
        store.apply_progress.side_effect = RuntimeError("disk full")
        aggregator = aggregator_for(IELTS_PROFILE, store)

        assert await aggregator.update(TEST_USER_ID, "writing", evaluation(6.5)) is False


class TestReport:
    @pytest.mark.asyncio
    async def test_summary_estimates_overall_band(self, store):
        aggregator = aggregator_for(IELTS_PROFILE, store)
        await aggregator.update(TEST_USER_ID, "reading", evaluation(7.0))
        await aggregator.update(TEST_USER_ID, "listening", evaluation(6.0))
        for attempt in history([7.0]) + history([6.0], skill="listening"):
            await store.add_attempt(attempt)

        report = await aggregator.report(TEST_USER_ID)

        assert report["exam_type"] == "ielts"
        assert len(report["progress"]) == 2
        assert set(report["skills"]) == {"reading", "listening", "writing", "speaking"}
        assert report["skills"]["reading"]["attempts"] == 1
        assert report["skills"]["writing"]["attempts"] == 0
        assert report["skills"]["reading"]["trend"] == "stable"
        summary = report["summary"]
        assert summary["total_questions"] == 2
        assert summary["best_score"] == 7.0
        assert summary["overall_score"] == 6.5
        assert summary["descriptor"] == "Competent user"
        assert summary["is_passing"] is True
        assert "weights" not in summary

    @pytest.mark.asyncio
    async def test_report_for_one_skill(self, store):
        aggregator = aggregator_for(IELTS_PROFILE, store)
        await aggregator.update(TEST_USER_ID, "reading", evaluation(7.0))
        await aggregator.update(TEST_USER_ID, "listening", evaluation(6.0))

        report = await aggregator.report(TEST_USER_ID, "Reading")

        assert list(report["skills"]) == ["reading"]
        assert [row["skill"] for row in report["progress"]] == ["reading"]
        assert report["summary"]["overall_score"] == 7.0

    @pytest.mark.asyncio
    async def test_empty_report(self, store):
        report = await aggregator_for(YDS_PROFILE, store).report("new-user")

        assert report["progress"] == []
        assert report["weak_areas"] == []
        assert report["summary"]["overall_score"] is None
        assert report["summary"]["weights"] == {"reading": 0.40, "listening": 0.20, "grammar": 0.25,
                                                "vocabulary": 0.15}

    @pytest.mark.asyncio
    async def test_weak_areas_collected(self, store):
        for attempt in history([20, 30, 40, 90, 95], max_score=100.0, skill="grammar"):
            attempt.exam_type = "yds"
            await store.add_attempt(attempt)

        report = await aggregator_for(YDS_PROFILE, store).report(TEST_USER_ID)

        assert report["weak_areas"] == ["Zaman uyumu", "Cümle yapısı", "Modal fiiller"]
        assert report["skills"]["grammar"]["recent_attempts"] == 5

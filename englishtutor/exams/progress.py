"""
Progress Aggregation

Folds evaluations into per-skill progress rows and builds progress
reports with trends, weak areas and an estimated overall exam score.
"""

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from englishtutor.common.exceptions import AggregationFailure
from englishtutor.common.logger import app_logger
from englishtutor.domain.model import Attempt, Evaluation, Progress, utcnow
from englishtutor.domain.repository import PracticeStore
from .profiles import ExamProfile, OverallRule
from .scoring import ScoreConverter

logger = app_logger.getChild("exams.progress")


class Trend(enum.Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class ProgressAggregator:
    """Maintains and reports progress for one exam type."""

    def __init__(
        self,
        profile: ExamProfile,
        converter: ScoreConverter,
        store: PracticeStore,
        trend_window: int = 10,
        min_trend_attempts: int = 5,
        weak_area_share: float = 0.3
    ):
        """
        Initialize the aggregator.

        Args:
            profile: Exam profile
            converter: Score converter for the same profile
            store: Practice store
            trend_window: Number of recent attempts a report looks at
            min_trend_attempts: Fewer recent attempts than this report a stable trend
            weak_area_share: Share of recent attempts below passing that marks a weak skill
        """
        self.profile = profile
        self.converter = converter
        self.store = store
        self.trend_window = trend_window
        self.min_trend_attempts = min_trend_attempts
        self.weak_area_share = weak_area_share

    @staticmethod
    def fold(progress: Progress, evaluation: Evaluation, at: Optional[datetime] = None) -> Progress:
        """Pure fold of one evaluation into a progress row."""
        return progress.folded(evaluation, at)

    async def update(self, user_id: str, skill_code: str, evaluation: Evaluation,
                     at: Optional[datetime] = None) -> bool:
        """
        Fold an evaluation into the user's progress for a skill.

        Failures are logged and reported through the return value; the
        attempt they belong to stays recorded.

        Returns:
            True if the progress row was updated
        """
        try:
            await self.store.apply_progress(user_id, self.profile.code, skill_code, evaluation, at or utcnow())
        except Exception as e:
            failure = AggregationFailure(user_id, self.profile.code, skill_code, e)
            logger.warning(failure.message, exc_info=True)
            return False
        return True

    def _scaled(self, attempt: Attempt, skill_max: float) -> float:
        fraction = attempt.fraction
        return attempt.score if fraction is None else fraction * skill_max

    def trend(self, attempts: List[Attempt], skill_code: str) -> Trend:
        """
        Direction of recent scores.

        Args:
            attempts: Recent attempts, newest first
            skill_code: Skill the attempts belong to

        Returns:
            IMPROVING or DECLINING when the newest three attempts average more
            than the exam's trend delta above or below the oldest three
        """
        if len(attempts) < self.min_trend_attempts:
            return Trend.STABLE

        skill_max = self.profile.skill(skill_code).max_score
        scores = [self._scaled(attempt, skill_max) for attempt in reversed(attempts)]
        earlier = sum(scores[:3]) / 3
        later = sum(scores[-3:]) / 3

        if later - earlier > self.profile.trend_delta:
            return Trend.IMPROVING
        if earlier - later > self.profile.trend_delta:
            return Trend.DECLINING
        return Trend.STABLE

    def weak_areas(self, attempts: List[Attempt], skill_code: str) -> List[str]:
        """Weak-area labels of a skill when too many recent attempts fall below passing."""
        graded = [attempt.fraction for attempt in attempts if attempt.fraction is not None]
        if not graded:
            return []
        below = sum(1 for fraction in graded if fraction < self.profile.passing_fraction)
        if below / len(graded) > self.weak_area_share:
            return list(self.profile.skill(skill_code).weak_areas)
        return []

    async def report(self, user_id: str, skill_code: Optional[str] = None) -> Dict[str, Any]:
        """
        Build a progress report.

        Args:
            user_id: User ID
            skill_code: Limit the report to one skill

        Returns:
            Dictionary with the progress rows, per-skill details and a summary
        """
        exam_code = self.profile.code
        skill_codes = [self.profile.skill(skill_code).code] if skill_code else self.profile.skill_codes
        rows = await self.store.list_progress(user_id, exam_code, skill_code and skill_codes[0])
        by_skill = {row.skill: row for row in rows}

        details = {}
        weak_areas: List[str] = []
        for code in skill_codes:
            recent = await self.store.recent_attempts(user_id, exam_code, code, limit=self.trend_window)
            row = by_skill.get(code)
            skill_weak_areas = self.weak_areas(recent, code)
            weak_areas.extend(skill_weak_areas)
            details[code] = {
                "attempts": row.total_questions if row else 0,
                "recent_attempts": len(recent),
                "trend": self.trend(recent, code).value,
                "weak_areas": skill_weak_areas,
                "percentage": round(row.percentage, 1) if row else 0.0,
            }

        return {
            "user_id": user_id,
            "exam_type": exam_code,
            "progress": [row.to_dict() for row in rows],
            "skills": details,
            "weak_areas": weak_areas,
            "summary": self._summary(rows),
        }

    def _summary(self, rows: List[Progress]) -> Dict[str, Any]:
        summary: Dict[str, Any] = {
            "total_questions": sum(row.total_questions for row in rows),
            "correct_answers": sum(row.correct_answers for row in rows),
            "average_score": round(sum(row.average_score for row in rows) / len(rows), 2) if rows else 0.0,
            "best_score": max((row.best_score for row in rows), default=0.0),
            "overall_score": None,
            "descriptor": None,
            "is_passing": False,
        }

        skill_scores = {
            row.skill: row.percentage / 100 * self.profile.skill(row.skill).max_score
            for row in rows
            if self.profile.has_skill(row.skill) and row.max_points > 0
        }
        if skill_scores:
            overall = self.converter.overall(skill_scores)
            summary["overall_score"] = overall
            summary["descriptor"] = self.converter.describe(overall)
            summary["is_passing"] = self.converter.is_passing(overall)

        if self.profile.overall_rule is OverallRule.WEIGHTED:
            summary["weights"] = dict(self.profile.skill_weights)
        return summary

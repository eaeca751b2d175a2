"""
Score Conversion

Maps raw correctness and criterion scores onto an exam's reporting scale
and combines skill scores into an overall exam score.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from englishtutor.common.logger import app_logger
from .profiles import ExamProfile, OverallRule

logger = app_logger.getChild("exams.scoring")


def round_half_up(value: float, increment: float) -> float:
    """
    Round ``value`` to the nearest multiple of ``increment``, ties away from zero.

    Args:
        value: Value to round
        increment: Rounding step, e.g. 0.5 for IELTS bands

    Returns:
        The rounded value
    """
    step = Decimal(str(increment))
    steps = (Decimal(str(value)) / step).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return float(steps * step)


class ScoreConverter:
    """Converts scores for a single exam profile."""

    def __init__(self, profile: ExamProfile):
        self.profile = profile
        self.scale = profile.scale

    def round_score(self, value: float) -> float:
        """Round to the exam's increment (IELTS 0.5, TOEFL and YDS 1)."""
        return round_half_up(value, self.scale.increment)

    def clamp(self, value: float, skill_code: Optional[str] = None) -> float:
        """Clamp into the exam scale, or into [scale min, skill max] when a skill is given."""
        upper = self.scale.max_score
        if skill_code is not None:
            upper = min(upper, self.profile.skill(skill_code).max_score)
        return max(self.scale.min_score, min(upper, value))

    def to_scale(self, skill_code: str, raw_correct: float, total_possible: float) -> float:
        """
        Convert a correct count into the skill's reporting scale.

        Skills with a step table bucket the percentage correct; other
        skills scale the percentage proportionally onto the skill maximum.

        Args:
            skill_code: Skill code
            raw_correct: Number of correct items
            total_possible: Number of items

        Returns:
            The scaled score, always within the scale
        """
        skill = self.profile.skill(skill_code)
        if total_possible <= 0:
            return self.scale.min_score

        raw_correct = max(0.0, min(float(raw_correct), float(total_possible)))
        percentage = raw_correct / total_possible * 100

        if skill.step_table:
            for threshold, score in skill.step_table:
                if percentage >= threshold:
                    return self.clamp(score, skill_code)
            return self.clamp(skill.step_floor, skill_code)

        return self.clamp(self.round_score(percentage / 100 * skill.max_score), skill_code)

    def overall(self, skill_scores: Dict[str, float]) -> float:
        """
        Combine per-skill scores into the overall exam score.

        IELTS averages the skill bands, TOEFL sums the section scores and
        YDS takes a weighted mean over the skills present.

        Args:
            skill_scores: Score per skill code, each on that skill's scale

        Returns:
            The rounded overall score within the exam scale
        """
        scores = {code: value for code, value in skill_scores.items() if value is not None}
        if not scores:
            return self.scale.min_score

        rule = self.profile.overall_rule
        if rule is OverallRule.MEAN:
            combined = sum(scores.values()) / len(scores)
        elif rule is OverallRule.SUM:
            combined = sum(self.clamp(value, code) for code, value in scores.items())
        elif rule is OverallRule.WEIGHTED:
            weighted = 0.0
            total_weight = 0.0
            for code, value in scores.items():
                weight = self.profile.skill_weights.get(code, 0.0)
                weighted += value * weight
                total_weight += weight
            if total_weight <= 0:
                logger.warning(f"No weighted skills among {sorted(scores)} for {self.profile.code}")
                return self.scale.min_score
            combined = weighted / total_weight
        else:
            raise ValueError(f"Unsupported overall rule: {rule}")

        return self.clamp(self.round_score(combined))

    def describe(self, score: float) -> str:
        """Band descriptor for an overall score."""
        for threshold, label in self.profile.descriptors:
            if score >= threshold:
                return label
        return self.profile.descriptors[-1][1] if self.profile.descriptors else ""

    def is_passing(self, score: float) -> bool:
        return score >= self.scale.passing_score

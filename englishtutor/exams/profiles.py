"""
Exam Profiles

An ExamProfile carries everything that differs between exams (scale,
skills, conversion tables, feedback texts, content pools and the rule
for combining skill scores) so that one selector, one evaluator and one
converter class serve every exam.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from englishtutor.common.exceptions import ConfigurationError
from englishtutor.domain.model import (
    Difficulty,
    EvaluationKind,
    ExamType,
    ScoringScale,
    Skill,
)


class OverallRule(enum.Enum):
    """How skill scores combine into an overall exam score."""
    MEAN = "mean"
    SUM = "sum"
    WEIGHTED = "weighted"


class FeedbackTier(enum.IntEnum):
    NEEDS_IMPROVEMENT = 0
    GOOD = 1
    EXCELLENT = 2


# Pool entries are keyed by difficulty value; this key serves every difficulty.
ANY_DIFFICULTY = "any"


@dataclass
class SkillProfile:
    """
    Per-skill scoring and content data.

    Attributes:
        code: Skill code
        name: Display name
        max_score: Highest score for the skill
        evaluation_kind: How answers are graded
        time_limit: Section time limit in seconds
        step_table: (minimum percentage, score) pairs in descending order;
            None converts proportionally to ``max_score``
        step_floor: Score below the lowest step
        criteria: Criterion names scored by the oracle
        criterion_suggestions: Suggestion lines per criterion scoring below passing
        rubric: Rubric text handed to the oracle
        min_words: Default minimum word count for written answers
        feedback: Feedback templates per FeedbackTier
        suggestions: Suggestion templates per FeedbackTier
        incorrect_suggestion: Suggestion for a wrong single objective answer
        weak_areas: Labels reported when the skill is a weak area
        content_pool: Question templates keyed by difficulty value or ANY_DIFFICULTY
    """
    code: str
    name: str
    max_score: float
    evaluation_kind: EvaluationKind
    time_limit: int
    step_table: Optional[Sequence[Tuple[float, float]]] = None
    step_floor: float = 0.0
    criteria: Sequence[str] = ()
    criterion_suggestions: Dict[str, Sequence[str]] = field(default_factory=dict)
    rubric: str = ""
    min_words: int = 0
    feedback: Sequence[str] = ()
    suggestions: Sequence[str] = ()
    incorrect_suggestion: str = ""
    weak_areas: Sequence[str] = ()
    content_pool: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    def pool_for(self, difficulty: Difficulty) -> List[Dict[str, Any]]:
        """Templates usable at ``difficulty``."""
        return list(self.content_pool.get(difficulty.value, [])) + list(self.content_pool.get(ANY_DIFFICULTY, []))

    @property
    def has_content_pool(self) -> bool:
        return any(self.content_pool.values())

    def to_skill(self) -> Skill:
        return Skill(
            code=self.code,
            name=self.name,
            max_score=self.max_score,
            evaluation_kind=self.evaluation_kind,
            time_limit=self.time_limit,
        )


@dataclass
class ExamProfile:
    """
    Everything exam-specific the shared engine classes need.

    Attributes:
        code: Exam type code
        name: Display name
        scale: Reporting scale of the overall score
        skills: Ordered skill profiles
        overall_rule: How skill scores combine
        skill_weights: Weights for OverallRule.WEIGHTED
        descriptors: (minimum score, label) pairs in descending order
        excellent_fraction: Fraction of a skill's maximum for the top feedback tier
        correct_feedback: Feedback for a correct single objective answer
        incorrect_feedback: Feedback template for a wrong one, with ``{answer}``
        correct_suggestion: Suggestion for a correct single objective answer
        short_answer_warning: Template prefixed to feedback for answers under the word minimum
        trend_delta: Score difference (on the skill scale) that counts as a trend
    """
    code: str
    name: str
    scale: ScoringScale
    skills: List[SkillProfile]
    overall_rule: OverallRule
    skill_weights: Dict[str, float] = field(default_factory=dict)
    descriptors: Sequence[Tuple[float, str]] = ()
    excellent_fraction: float = 0.8
    correct_feedback: str = "Correct! Well done."
    incorrect_feedback: str = "Incorrect. The correct answer is: {answer}"
    correct_suggestion: str = "Keep up the good work!"
    short_answer_warning: str = "Word count: {count}/{minimum}. Write more to fully address the task."
    trend_delta: float = 1.0
    description: str = ""

    def skill(self, code: str) -> SkillProfile:
        """
        Look up a skill profile.

        Raises:
            ConfigurationError: If the skill is not registered for this exam
        """
        normalized = (code or "").strip().lower()
        for skill in self.skills:
            if skill.code == normalized:
                return skill
        raise ConfigurationError(f"Skill '{code}' is not registered for exam '{self.code}'", config_key=code)

    def has_skill(self, code: str) -> bool:
        return any(skill.code == (code or "").strip().lower() for skill in self.skills)

    @property
    def skill_codes(self) -> List[str]:
        return [skill.code for skill in self.skills]

    @property
    def passing_fraction(self) -> float:
        return self.scale.passing_score / self.scale.max_score

    def tier(self, fraction: float) -> FeedbackTier:
        """Feedback tier for a score expressed as a fraction of the skill maximum."""
        if fraction >= self.excellent_fraction:
            return FeedbackTier.EXCELLENT
        if fraction >= self.passing_fraction:
            return FeedbackTier.GOOD
        return FeedbackTier.NEEDS_IMPROVEMENT

    def to_exam_type(self) -> ExamType:
        return ExamType(
            code=self.code,
            name=self.name,
            scale=self.scale,
            skills=[skill.to_skill() for skill in self.skills],
            description=self.description,
        )

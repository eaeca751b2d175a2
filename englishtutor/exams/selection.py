"""
Question Selection

Picks the next practice question for a user: recent questions are
excluded, difficulty adapts to recent accuracy, and exams with content
pools synthesize a question when the store has nothing suitable.
"""

import random
from typing import Any, Dict, List, Optional, Sequence

from englishtutor.common.exceptions import NotFoundError
from englishtutor.common.logger import app_logger
from englishtutor.domain.model import (
    Attempt,
    Difficulty,
    Question,
    QuestionKind,
    body_from_dict,
)
from englishtutor.domain.repository import PracticeStore
from .profiles import ExamProfile, SkillProfile

logger = app_logger.getChild("exams.selection")

STEP_UP_ACCURACY = 0.8
STEP_DOWN_ACCURACY = 0.4


def counts_as_correct(attempt: Attempt, passing_fraction: float) -> bool:
    """Attempts graded without correctness count as correct at or above the passing fraction."""
    if attempt.is_correct is not None:
        return attempt.is_correct
    fraction = attempt.fraction
    return fraction is not None and fraction >= passing_fraction


def adapt_difficulty(
    attempts: Sequence[Attempt],
    current: Difficulty = Difficulty.EASY,
    passing_fraction: float = 0.6,
    min_attempts: int = 3
) -> Difficulty:
    """
    One-step difficulty ratchet over recent attempts.

    Args:
        attempts: The most recent attempts (the adaptive window)
        current: The user's last-known difficulty
        passing_fraction: Score fraction that counts an ungraded attempt as correct
        min_attempts: Fewer attempts than this keep ``current``

    Returns:
        ``current`` stepped up when accuracy is above 0.8, stepped down
        when below 0.4, otherwise unchanged
    """
    if len(attempts) < min_attempts:
        return current

    correct = sum(1 for attempt in attempts if counts_as_correct(attempt, passing_fraction))
    accuracy = correct / len(attempts)

    if accuracy > STEP_UP_ACCURACY:
        return current.step_up()
    if accuracy < STEP_DOWN_ACCURACY:
        return current.step_down()
    return current


class QuestionSelector:
    """Selects questions for one exam type."""

    def __init__(
        self,
        profile: ExamProfile,
        store: PracticeStore,
        rng: Optional[random.Random] = None,
        recent_window: int = 10,
        adaptive_window: int = 5,
        min_attempts: int = 3
    ):
        """
        Initialize the selector.

        Args:
            profile: Exam profile
            store: Practice store
            rng: Random source for template choice (seed it for reproducible synthesis)
            recent_window: Number of recent questions excluded from selection
            adaptive_window: Number of recent attempts used for adaptive difficulty
            min_attempts: Minimum attempts before difficulty adapts
        """
        self.profile = profile
        self.store = store
        self.rng = rng or random.Random()
        self.recent_window = recent_window
        self.adaptive_window = adaptive_window
        self.min_attempts = min_attempts

    async def next(
        self,
        user_id: str,
        skill_code: str,
        difficulty: Optional[Difficulty] = None
    ) -> Optional[Question]:
        """
        Select the next question for a user.

        Args:
            user_id: User ID
            skill_code: Skill code within this exam
            difficulty: Requested difficulty, or None to adapt to recent performance

        Returns:
            A question, or None when no content exists for the skill

        Raises:
            NotFoundError: If the skill is unknown or inactive for this exam
        """
        exam_code = self.profile.code
        skill_code = (skill_code or "").strip().lower()
        skill = await self.store.get_skill(exam_code, skill_code)
        if skill is None or not skill.is_active:
            raise NotFoundError("Skill", f"{exam_code}/{skill_code}")

        history = await self.store.recent_attempts(
            user_id, exam_code, skill_code, limit=max(self.recent_window, self.adaptive_window)
        )
        exclude_ids = {attempt.question_id for attempt in history[:self.recent_window]}

        if difficulty is None:
            difficulty = self.target_difficulty(history[:self.adaptive_window])

        question = await self.store.find_question(exam_code, skill_code, difficulty, exclude_ids)
        if question is None:
            question = await self.store.find_question(exam_code, skill_code, None, exclude_ids)
        if question is None:
            question = await self._synthesize(skill_code, difficulty)

        if question is None:
            logger.info(f"No questions available for {exam_code}/{skill_code} (user {user_id})")
        return question

    def target_difficulty(self, recent: List[Attempt]) -> Difficulty:
        """Adaptive difficulty from the newest-first adaptive window."""
        current = recent[0].difficulty if recent else Difficulty.EASY
        return adapt_difficulty(
            recent,
            current=current,
            passing_fraction=self.profile.passing_fraction,
            min_attempts=self.min_attempts,
        )

    async def _synthesize(self, skill_code: str, difficulty: Difficulty) -> Optional[Question]:
        skill = self.profile.skill(skill_code)
        templates = skill.pool_for(difficulty)
        if not templates:
            return None

        question = build_question(self.profile.code, skill, difficulty, self.rng.choice(templates))
        await self.store.save_question(question)
        logger.info(
            f"Synthesized {self.profile.code}/{skill_code} question {question.id} at {difficulty.value}"
        )
        return question


def build_question(exam_code: str, skill: SkillProfile, difficulty: Difficulty,
                   template: Dict[str, Any]) -> Question:
    """Instantiate a content-pool template as a new question."""
    return Question.create(
        exam_type=exam_code,
        skill=skill.code,
        kind=QuestionKind(template["kind"]),
        difficulty=difficulty,
        content=template["content"],
        title=template.get("title", ""),
        instructions=template.get("instructions", ""),
        correct_answer=template.get("correct_answer"),
        options=template.get("options"),
        time_limit=template.get("time_limit", skill.time_limit),
        points=template.get("points", 1),
        body=body_from_dict(template.get("body")),
        metadata=dict(template.get("metadata") or {}, synthesized=True),
    )

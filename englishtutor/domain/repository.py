"""
Practice Store Module

This module defines the store interface the practice engine reads and
writes through: the exam catalog, questions, the append-only attempt log
and per-skill progress rows.
"""

import abc
from datetime import datetime
from typing import Iterable, List, Optional

from .model import Attempt, Difficulty, Evaluation, ExamType, Progress, Question, Skill


class PracticeStore(abc.ABC):
    """
    Abstract base class for practice stores.

    Implementations must make ``apply_progress`` atomic with respect to
    concurrent submissions for the same (user, exam type, skill).
    """

    @abc.abstractmethod
    async def save_exam_type(self, exam_type: ExamType) -> ExamType:
        """
        Create or replace an exam type and its skills.

        Args:
            exam_type: The exam type to save

        Returns:
            The saved exam type
        """
        pass

    @abc.abstractmethod
    async def get_exam_type(self, code: str) -> Optional[ExamType]:
        """
        Get an exam type by code.

        Args:
            code: Exam type code

        Returns:
            The exam type if found, None otherwise
        """
        pass

    async def get_skill(self, exam_code: str, skill_code: str) -> Optional[Skill]:
        """
        Get a skill of an exam type.

        Args:
            exam_code: Exam type code
            skill_code: Skill code

        Returns:
            The skill if both exist, None otherwise
        """
        exam_type = await self.get_exam_type(exam_code)
        if exam_type is None:
            return None
        return exam_type.skill(skill_code)

    @abc.abstractmethod
    async def save_question(self, question: Question) -> Question:
        """
        Save a question.

        Args:
            question: The question to save

        Returns:
            The saved question
        """
        pass

    @abc.abstractmethod
    async def get_question(self, question_id: str) -> Optional[Question]:
        """
        Get a question by its ID.

        Args:
            question_id: The ID of the question to retrieve

        Returns:
            The question if found, None otherwise
        """
        pass

    @abc.abstractmethod
    async def find_question(
        self,
        exam_code: str,
        skill_code: str,
        difficulty: Optional[Difficulty] = None,
        exclude_ids: Iterable[str] = ()
    ) -> Optional[Question]:
        """
        Find the newest question for an (exam type, skill).

        Args:
            exam_code: Exam type code
            skill_code: Skill code
            difficulty: Required difficulty, or None for any difficulty
            exclude_ids: Question IDs that must not be returned

        Returns:
            The most recently created matching question, or None
        """
        pass

    @abc.abstractmethod
    async def add_attempt(self, attempt: Attempt) -> Attempt:
        """
        Append an attempt to the log.

        Args:
            attempt: The attempt to store

        Returns:
            The stored attempt
        """
        pass

    @abc.abstractmethod
    async def recent_attempts(
        self,
        user_id: str,
        exam_code: str,
        skill_code: Optional[str] = None,
        limit: int = 10
    ) -> List[Attempt]:
        """
        Get a user's most recent attempts, newest first.

        Args:
            user_id: User ID
            exam_code: Exam type code
            skill_code: Skill code, or None for every skill of the exam
            limit: Maximum number of attempts to return

        Returns:
            Attempts ordered by submission time, newest first
        """
        pass

    @abc.abstractmethod
    async def get_progress(self, user_id: str, exam_code: str, skill_code: str) -> Optional[Progress]:
        """Get the progress row for (user, exam type, skill), if any."""
        pass

    @abc.abstractmethod
    async def list_progress(
        self,
        user_id: str,
        exam_code: str,
        skill_code: Optional[str] = None
    ) -> List[Progress]:
        """Get a user's progress rows for an exam type, optionally a single skill."""
        pass

    @abc.abstractmethod
    async def apply_progress(
        self,
        user_id: str,
        exam_code: str,
        skill_code: str,
        evaluation: Evaluation,
        at: datetime
    ) -> Progress:
        """
        Atomically fold an evaluation into a progress row.

        Creates the row on a user's first attempt for the skill.

        Args:
            user_id: User ID
            exam_code: Exam type code
            skill_code: Skill code
            evaluation: The evaluation to fold in
            at: Activity timestamp

        Returns:
            The updated progress row
        """
        pass

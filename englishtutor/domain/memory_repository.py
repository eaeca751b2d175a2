"""
Memory Practice Store Module

This module provides an in-memory implementation of the PracticeStore
interface for development and testing purposes.
"""

import itertools
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .model import Attempt, Difficulty, Evaluation, ExamType, Progress, Question
from .repository import PracticeStore


class MemoryPracticeStore(PracticeStore):
    """
    In-memory implementation of the PracticeStore.

    Progress updates never await between read and write, so each one is
    atomic on a single event loop.
    """

    def __init__(self, questions: Optional[List[Question]] = None,
                 exam_types: Optional[List[ExamType]] = None):
        """
        Initialize the store with optional initial data.

        Args:
            questions: Questions to preload
            exam_types: Exam types to preload
        """
        self._exam_types: Dict[str, ExamType] = {}
        self._questions: Dict[str, Question] = {}
        self._question_order: Dict[str, int] = {}
        self._attempts: List[Attempt] = []
        self._progress: Dict[Tuple[str, str, str], Progress] = {}
        self._sequence = itertools.count()

        for exam_type in exam_types or []:
            self._exam_types[exam_type.code] = exam_type
        for question in questions or []:
            self._put_question(question)

    def _put_question(self, question: Question) -> None:
        if question.id not in self._question_order:
            self._question_order[question.id] = next(self._sequence)
        self._questions[question.id] = question

    async def save_exam_type(self, exam_type: ExamType) -> ExamType:
        self._exam_types[exam_type.code] = exam_type
        return exam_type

    async def get_exam_type(self, code: str) -> Optional[ExamType]:
        return self._exam_types.get(code.strip().lower())

    async def save_question(self, question: Question) -> Question:
        self._put_question(question)
        return question

    async def get_question(self, question_id: str) -> Optional[Question]:
        return self._questions.get(question_id)

    async def find_question(
        self,
        exam_code: str,
        skill_code: str,
        difficulty: Optional[Difficulty] = None,
        exclude_ids: Iterable[str] = ()
    ) -> Optional[Question]:
        excluded = set(exclude_ids)
        candidates = [
            question for question in self._questions.values()
            if question.exam_type == exam_code
            and question.skill == skill_code
            and (difficulty is None or question.difficulty == difficulty)
            and question.id not in excluded
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda q: (q.created_at, self._question_order[q.id]))

    async def add_attempt(self, attempt: Attempt) -> Attempt:
        self._attempts.append(attempt)
        return attempt

    async def recent_attempts(
        self,
        user_id: str,
        exam_code: str,
        skill_code: Optional[str] = None,
        limit: int = 10
    ) -> List[Attempt]:
        # Iterating the log backwards keeps insertion order as the tie-breaker.
        matching = [
            attempt for attempt in reversed(self._attempts)
            if attempt.user_id == user_id
            and attempt.exam_type == exam_code
            and (skill_code is None or attempt.skill == skill_code)
        ]
        matching.sort(key=lambda a: a.submitted_at, reverse=True)
        return matching[:limit]

    async def get_progress(self, user_id: str, exam_code: str, skill_code: str) -> Optional[Progress]:
        return self._progress.get((user_id, exam_code, skill_code))

    async def list_progress(
        self,
        user_id: str,
        exam_code: str,
        skill_code: Optional[str] = None
    ) -> List[Progress]:
        return [
            progress for (user, exam, skill), progress in self._progress.items()
            if user == user_id and exam == exam_code and (skill_code is None or skill == skill_code)
        ]

    async def apply_progress(
        self,
        user_id: str,
        exam_code: str,
        skill_code: str,
        evaluation: Evaluation,
        at: datetime
    ) -> Progress:
        key = (user_id, exam_code, skill_code)
        current = self._progress.get(key)
        if current is None:
            updated = Progress.first(user_id, exam_code, skill_code, evaluation, at)
        else:
            updated = current.folded(evaluation, at)
        self._progress[key] = updated
        return updated

    def get_all_attempts(self) -> List[Attempt]:
        """
        Get every stored attempt in submission order.

        Specific to the memory implementation.
        """
        return list(self._attempts)

"""
SQL Practice Store Module

This module implements the PracticeStore interface on SQLAlchemy's
async ORM.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from englishtutor.common.exceptions import DatabaseError
from englishtutor.common.logger import app_logger
from englishtutor.domain.model import Attempt, Difficulty, Evaluation, ExamType, Progress, Question
from englishtutor.domain.repository import PracticeStore
from .models import AttemptRow, ExamSkillRow, ExamTypeRow, ProgressRow, QuestionRow

logger = app_logger.getChild("database.repository")

PROGRESS_INSERT_RETRIES = 1


class SqlPracticeStore(PracticeStore):
    """
    SQLAlchemy implementation of the PracticeStore.

    Progress is folded with a single ``UPDATE ... SET col = col + x``
    statement; the first attempt inserts the row and, on losing an insert
    race to a concurrent submission, retries as an update.
    """

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize the store.

        Args:
            session_factory: Factory producing AsyncSession instances
        """
        self._session_factory = session_factory

    async def save_exam_type(self, exam_type: ExamType) -> ExamType:
        try:
            async with self._session_factory() as session, session.begin():
                exists = await session.scalar(select(ExamTypeRow.code).where(ExamTypeRow.code == exam_type.code))
                if exists is None:
                    session.add(ExamTypeRow.from_domain(exam_type))
                else:
                    # Skills are replaced wholesale; the old rows go before the new ones are added.
                    await session.execute(
                        delete(ExamSkillRow).where(ExamSkillRow.exam_type_code == exam_type.code)
                    )
                    await session.execute(
                        update(ExamTypeRow)
                        .where(ExamTypeRow.code == exam_type.code)
                        .values(
                            name=exam_type.name,
                            description=exam_type.description,
                            min_score=exam_type.scale.min_score,
                            max_score=exam_type.scale.max_score,
                            score_increment=exam_type.scale.increment,
                            passing_score=exam_type.scale.passing_score,
                            is_active=exam_type.is_active,
                        )
                    )
                    for position, skill in enumerate(exam_type.skills):
                        row = ExamSkillRow.from_domain(skill, position)
                        row.exam_type_code = exam_type.code
                        session.add(row)
            return exam_type
        except SQLAlchemyError as e:
            logger.error(f"Error saving exam type {exam_type.code}: {e}")
            raise DatabaseError(f"Failed to save exam type {exam_type.code}", e)

    async def get_exam_type(self, code: str) -> Optional[ExamType]:
        try:
            async with self._session_factory() as session:
                row = await session.get(ExamTypeRow, code.strip().lower())
                return row.to_domain() if row else None
        except SQLAlchemyError as e:
            logger.error(f"Error getting exam type {code}: {e}")
            raise DatabaseError(f"Failed to get exam type {code}", e)

    async def save_question(self, question: Question) -> Question:
        try:
            async with self._session_factory() as session, session.begin():
                await session.merge(QuestionRow.from_domain(question))
            return question
        except SQLAlchemyError as e:
            logger.error(f"Error saving question {question.id}: {e}")
            raise DatabaseError(f"Failed to save question {question.id}", e)

    async def get_question(self, question_id: str) -> Optional[Question]:
        try:
            async with self._session_factory() as session:
                row = await session.get(QuestionRow, question_id)
                return row.to_domain() if row else None
        except SQLAlchemyError as e:
            logger.error(f"Error getting question {question_id}: {e}")
            raise DatabaseError(f"Failed to get question {question_id}", e)

    async def find_question(
        self,
        exam_code: str,
        skill_code: str,
        difficulty: Optional[Difficulty] = None,
        exclude_ids: Iterable[str] = ()
    ) -> Optional[Question]:
        query = select(QuestionRow).where(QuestionRow.exam_type == exam_code, QuestionRow.skill == skill_code)
        if difficulty is not None:
            query = query.where(QuestionRow.difficulty == difficulty.value)
        excluded = list(exclude_ids)
        if excluded:
            query = query.where(QuestionRow.id.notin_(excluded))
        query = query.order_by(QuestionRow.created_at.desc(), QuestionRow.id.desc()).limit(1)

        try:
            async with self._session_factory() as session:
                row = (await session.execute(query)).scalars().first()
                return row.to_domain() if row else None
        except SQLAlchemyError as e:
            logger.error(f"Error finding question for {exam_code}/{skill_code}: {e}")
            raise DatabaseError(f"Failed to find question for {exam_code}/{skill_code}", e)

    async def add_attempt(self, attempt: Attempt) -> Attempt:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(AttemptRow.from_domain(attempt))
            return attempt
        except SQLAlchemyError as e:
            logger.error(f"Error adding attempt {attempt.id}: {e}")
            raise DatabaseError(f"Failed to add attempt {attempt.id}", e)

    async def recent_attempts(
        self,
        user_id: str,
        exam_code: str,
        skill_code: Optional[str] = None,
        limit: int = 10
    ) -> List[Attempt]:
        query = select(AttemptRow).where(AttemptRow.user_id == user_id, AttemptRow.exam_type == exam_code)
        if skill_code is not None:
            query = query.where(AttemptRow.skill == skill_code)
        query = query.order_by(AttemptRow.submitted_at.desc(), AttemptRow.id.desc()).limit(limit)

        try:
            async with self._session_factory() as session:
                rows = (await session.execute(query)).scalars().all()
                return [row.to_domain() for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error getting recent attempts for user {user_id}: {e}")
            raise DatabaseError(f"Failed to get recent attempts for user {user_id}", e)

    def _progress_query(self, user_id: str, exam_code: str, skill_code: Optional[str] = None):
        query = select(ProgressRow).where(ProgressRow.user_id == user_id, ProgressRow.exam_type == exam_code)
        if skill_code is not None:
            query = query.where(ProgressRow.skill == skill_code)
        return query

    async def get_progress(self, user_id: str, exam_code: str, skill_code: str) -> Optional[Progress]:
        try:
            async with self._session_factory() as session:
                row = (await session.execute(self._progress_query(user_id, exam_code, skill_code))).scalars().first()
                return row.to_domain() if row else None
        except SQLAlchemyError as e:
            logger.error(f"Error getting progress for user {user_id}: {e}")
            raise DatabaseError(f"Failed to get progress for user {user_id}", e)

    async def list_progress(
        self,
        user_id: str,
        exam_code: str,
        skill_code: Optional[str] = None
    ) -> List[Progress]:
        query = self._progress_query(user_id, exam_code, skill_code).order_by(ProgressRow.id)
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(query)).scalars().all()
                return [row.to_domain() for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error listing progress for user {user_id}: {e}")
            raise DatabaseError(f"Failed to list progress for user {user_id}", e)

    async def apply_progress(
        self,
        user_id: str,
        exam_code: str,
        skill_code: str,
        evaluation: Evaluation,
        at: datetime
    ) -> Progress:
        key = (
            ProgressRow.user_id == user_id,
            ProgressRow.exam_type == exam_code,
            ProgressRow.skill == skill_code,
        )
        # Right-hand sides read the row's values from before the update.
        increment = (
            update(ProgressRow)
            .where(*key)
            .values(
                total_questions=ProgressRow.total_questions + 1,
                correct_answers=ProgressRow.correct_answers + (1 if evaluation.is_correct else 0),
                total_points=ProgressRow.total_points + 1,
                earned_points=ProgressRow.earned_points + evaluation.score,
                max_points=ProgressRow.max_points + evaluation.max_score,
                average_score=(ProgressRow.earned_points + evaluation.score) / (ProgressRow.total_points + 1),
                best_score=case((ProgressRow.best_score < evaluation.score, evaluation.score),
                                else_=ProgressRow.best_score),
                last_activity=at,
            )
            .execution_options(synchronize_session=False)
        )

        for attempt in range(PROGRESS_INSERT_RETRIES + 1):
            try:
                async with self._session_factory() as session, session.begin():
                    result = await session.execute(increment)
                    if result.rowcount == 0:
                        row = ProgressRow.from_domain(
                            Progress.first(user_id, exam_code, skill_code, evaluation, at)
                        )
                        session.add(row)
                        await session.flush()
                    else:
                        row = (await session.execute(select(ProgressRow).where(*key))).scalars().one()
                    return row.to_domain()
            except IntegrityError as e:
                if attempt == PROGRESS_INSERT_RETRIES:
                    logger.error(f"Progress insert for user {user_id} kept conflicting: {e}")
                    raise DatabaseError(f"Failed to update progress for user {user_id}", e)
                logger.info(f"Concurrent first attempt for {user_id} on {exam_code}/{skill_code}, retrying")
            except SQLAlchemyError as e:
                logger.error(f"Error updating progress for user {user_id}: {e}")
                raise DatabaseError(f"Failed to update progress for user {user_id}", e)

        raise DatabaseError(f"Failed to update progress for user {user_id}")

"""
Practice Service

The entry point the HTTP layer calls: serves questions, records
submissions and builds progress reports.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from englishtutor.common.exceptions import NotFoundError
from englishtutor.common.logger import app_logger, with_context
from englishtutor.domain.model import Attempt, Difficulty, Evaluation, ExamType, Question
from englishtutor.domain.repository import PracticeStore
from .evaluation import Answer
from .registry import ExamServiceRegistry

logger = app_logger.getChild("exams.service")


@dataclass
class SubmissionResult:
    """Outcome of one submission."""
    attempt: Attempt
    evaluation: Evaluation
    correct_answer: Any
    progress_updated: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'attempt': self.attempt.to_dict(),
            'evaluation': self.evaluation.to_dict(),
            'correct_answer': self.correct_answer,
            'progress_updated': self.progress_updated,
        }


class PracticeService:
    """Coordinates selection, evaluation and progress across exam types."""

    def __init__(self, registry: ExamServiceRegistry, store: PracticeStore):
        self.registry = registry
        self.store = store

    async def list_exam_types(self) -> List[ExamType]:
        exam_types = []
        for code in self.registry.supported_exam_types():
            exam_type = await self.store.get_exam_type(code)
            exam_types.append(exam_type or self.registry.get(code).profile.to_exam_type())
        return exam_types

    async def get_next_question(
        self,
        user_id: str,
        exam_code: str,
        skill_code: str,
        difficulty: Optional[Union[str, Difficulty]] = None
    ) -> Optional[Question]:
        """
        Get the next question for a user.

        Returns:
            The question, or None when no question is available

        Raises:
            ConfigurationError: If the exam type is not supported
            NotFoundError: If the skill does not exist for the exam
            ValidationError: If the difficulty is not recognised
        """
        bundle = self.registry.get(exam_code)
        return await bundle.selector.next(user_id, skill_code, Difficulty.parse(difficulty))

    async def get_question(self, question_id: str) -> Question:
        question = await self.store.get_question(question_id)
        if question is None:
            raise NotFoundError("Question", question_id)
        return question

    async def submit_answer(
        self,
        user_id: str,
        question_id: str,
        answer: Answer,
        audio_ref: Optional[str] = None,
        time_spent: int = 0
    ) -> SubmissionResult:
        """
        Evaluate and record an answer.

        Nothing is stored when evaluation fails. A progress update failure
        does not fail the submission; ``progress_updated`` reports it.

        Args:
            user_id: User ID
            question_id: ID of the question answered
            answer: Answer text, or sub-answers for multi-part questions
            audio_ref: Recording of a spoken answer
            time_spent: Seconds spent on the question

        Returns:
            The recorded attempt, its evaluation and the answer key

        Raises:
            NotFoundError: If the question does not exist
            ConfigurationError: If the question's exam type or skill is not supported
            ValidationError: If the answer is malformed
            EvaluationUnavailable: If the answer could not be scored
        """
        question = await self.get_question(question_id)
        bundle = self.registry.get(question.exam_type)
        skill = bundle.profile.skill(question.skill)
        log = with_context(logger, user=user_id, exam=bundle.code, skill=skill.code)

        evaluation = await bundle.evaluator.evaluate(question, answer, audio_ref)

        stored_answer = answer if isinstance(answer, str) else json.dumps(list(answer))
        attempt = Attempt.record(user_id, question, stored_answer, evaluation,
                                 audio_ref=audio_ref, time_spent=time_spent)
        await self.store.add_attempt(attempt)
        updated = await bundle.aggregator.update(user_id, skill.code, evaluation, at=attempt.submitted_at)

        log.info(f"Recorded attempt {attempt.id} on question {question.id}: score {evaluation.score}")
        return SubmissionResult(
            attempt=attempt,
            evaluation=evaluation,
            correct_answer=question.answer_key(),
            progress_updated=updated,
        )

    async def get_progress_report(self, user_id: str, exam_code: str,
                                  skill_code: Optional[str] = None) -> Dict[str, Any]:
        """
        Build a user's progress report for an exam type.

        Raises:
            ConfigurationError: If the exam type or skill is not supported
        """
        return await self.registry.get(exam_code).aggregator.report(user_id, skill_code)

"""
Answer Evaluation

Grades one answer to one question. Objective questions are matched
locally; written and spoken answers are delegated to a scoring oracle
under a hard timeout.
"""

import asyncio
import json
from typing import Any, Awaitable, Dict, List, Optional, Sequence, TypeVar, Union

from englishtutor.ai.oracle import OracleScore, Rubric, ScoringOracle, TranscriptionOracle
from englishtutor.ai.prompts import build_prompt
from englishtutor.common.exceptions import ConfigurationError, EvaluationUnavailable, ValidationError
from englishtutor.common.logger import app_logger, log_execution_time
from englishtutor.domain.model import (
    Evaluation,
    Question,
    QuestionKind,
    SpeakingBody,
    WritingBody,
)
from .profiles import ExamProfile, SkillProfile
from .scoring import ScoreConverter

logger = app_logger.getChild("exams.evaluation")

T = TypeVar("T")

Answer = Union[str, Sequence[Any]]


def normalize(value: Any) -> str:
    return str(value).strip().lower()


def word_count(text: str) -> int:
    return len(text.split())


def parse_multi_part_answer(answer: Answer) -> List[Any]:
    """
    Read sub-answers from a list or a JSON array string.

    Raises:
        ValidationError: If the answer is not a list of sub-answers
    """
    if isinstance(answer, (list, tuple)):
        return list(answer)
    try:
        parsed = json.loads(answer)
    except (TypeError, json.JSONDecodeError):
        raise ValidationError("Multi-part answers must be a JSON array", {"answer": answer})
    if not isinstance(parsed, list):
        raise ValidationError("Multi-part answers must be a JSON array", {"answer": answer})
    return parsed


def _consume_result(task: "asyncio.Future") -> None:
    # Calls abandoned after a timeout or cancellation still finish; read their outcome.
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"Abandoned oracle call failed: {task.exception()}")


class AnswerEvaluator:
    """Evaluates answers for one exam type."""

    def __init__(
        self,
        profile: ExamProfile,
        converter: ScoreConverter,
        scoring_oracle: Optional[ScoringOracle] = None,
        transcriber: Optional[TranscriptionOracle] = None,
        timeout: float = 30.0
    ):
        """
        Initialize the evaluator.

        Args:
            profile: Exam profile
            converter: Score converter for the same profile
            scoring_oracle: Judge for written and spoken answers
            transcriber: Speech-to-text for recorded answers
            timeout: Seconds allowed for each oracle call
        """
        self.profile = profile
        self.converter = converter
        self.scoring_oracle = scoring_oracle
        self.transcriber = transcriber
        self.timeout = timeout

    @log_execution_time(logger)
    async def evaluate(self, question: Question, answer: Answer, audio_ref: Optional[str] = None) -> Evaluation:
        """
        Evaluate an answer.

        Args:
            question: The question answered
            answer: The answer text, or a list / JSON array of sub-answers for multi-part questions
            audio_ref: Recording of a spoken answer, transcribed before scoring

        Returns:
            The evaluation

        Raises:
            ConfigurationError: If the question belongs to another exam or lacks an answer key
            ValidationError: If the answer is malformed or empty
            EvaluationUnavailable: If the oracle timed out or failed
        """
        if question.exam_type != self.profile.code:
            raise ConfigurationError(
                f"Question {question.id} belongs to '{question.exam_type}', not '{self.profile.code}'",
                config_key="exam_type",
            )
        skill = self.profile.skill(question.skill)

        if question.is_multi_part:
            return self._evaluate_multi_part(question, skill, answer)
        if question.kind.is_objective:
            return self._evaluate_single(question, skill, answer)
        return await self._evaluate_delegated(question, skill, answer, audio_ref)

    def _answer_key(self, question: Question, key: Optional[str], item: Optional[str] = None) -> str:
        if key is None or not str(key).strip():
            where = f"sub-question {item} of question {question.id}" if item else f"question {question.id}"
            logger.error(f"No correct answer configured for {where}")
            raise ConfigurationError(f"No correct answer configured for {where}", config_key="correct_answer")
        return str(key)

    def _evaluate_single(self, question: Question, skill: SkillProfile, answer: Answer) -> Evaluation:
        key = self._answer_key(question, question.correct_answer)
        # Rounded to the exam increment, at least one step.
        points = max(self.converter.round_score(question.points), self.converter.scale.increment)
        points = self.converter.clamp(points, skill.code)
        is_correct = normalize(answer) == normalize(key)
        score = points if is_correct else self.converter.scale.min_score

        return Evaluation(
            is_correct=is_correct,
            score=score,
            raw_score=score,
            max_score=points,
            feedback=self.profile.correct_feedback if is_correct
            else self.profile.incorrect_feedback.format(answer=key),
            suggestions=self.profile.correct_suggestion if is_correct else skill.incorrect_suggestion,
        )

    def _evaluate_multi_part(self, question: Question, skill: SkillProfile, answer: Answer) -> Evaluation:
        given = parse_multi_part_answer(answer)
        details = []
        for index, sub_question in enumerate(question.sub_questions):
            key = self._answer_key(question, sub_question.correct_answer, sub_question.id)
            response = given[index] if index < len(given) else None
            details.append({
                "id": sub_question.id,
                "answer": response,
                "correct_answer": key,
                "is_correct": response is not None and normalize(response) == normalize(key),
                "explanation": sub_question.explanation,
            })

        total = len(details)
        correct = sum(1 for item in details if item["is_correct"])
        score = self.converter.to_scale(skill.code, correct, total)
        max_score = self.converter.clamp(skill.max_score, skill.code)
        percentage = correct / total * 100
        tier = self.profile.tier(score / max_score if max_score else 0.0)
        values = {"correct": correct, "total": total, "percentage": percentage, "skill": skill.name.lower()}

        return Evaluation(
            is_correct=correct == total,
            score=score,
            raw_score=float(correct),
            max_score=max_score,
            feedback=skill.feedback[tier].format(**values) if skill.feedback else "",
            suggestions=skill.suggestions[tier].format(**values) if skill.suggestions else "",
            criteria_scores={
                "accuracy": round(correct / total * skill.max_score, 2),
                "comprehension": score,
            },
            details=details,
        )

    def _minimum_words(self, question: Question, skill: SkillProfile) -> int:
        body = question.body
        if isinstance(body, (WritingBody, SpeakingBody)) and body.min_words:
            return body.min_words
        return int(question.metadata.get("min_words") or skill.min_words)

    async def _evaluate_delegated(self, question: Question, skill: SkillProfile, answer: Answer,
                                  audio_ref: Optional[str]) -> Evaluation:
        transcription = None
        text = answer if isinstance(answer, str) else " ".join(str(part) for part in answer or [])
        if question.kind is QuestionKind.SPEAKING and audio_ref:
            if self.transcriber is None:
                raise EvaluationUnavailable("no transcription service is configured")
            transcription = await self._call_oracle(self.transcriber.transcribe(audio_ref), "transcription")
            text = transcription

        if not text or not text.strip():
            raise ValidationError("Answer must not be empty", {"question_id": question.id})
        if self.scoring_oracle is None:
            raise EvaluationUnavailable("no scoring service is configured")

        minimum = self._minimum_words(question, skill)
        rubric = Rubric(text=skill.rubric, criteria=tuple(skill.criteria), max_score=skill.max_score,
                        min_words=minimum)
        prompt = build_prompt(self.profile.code, self.profile.name, skill.code, skill.name, question, text, rubric)
        result = await self._call_oracle(self.scoring_oracle.score(prompt, text, rubric), "scoring")

        criteria = self._criteria_scores(skill, result)
        if criteria:
            raw = sum(criteria.values()) / len(criteria)
        else:
            raw = result.overall_score
        score = self.converter.clamp(self.converter.round_score(raw), skill.code)
        tier = self.profile.tier(score / skill.max_score)

        feedback = result.feedback.strip() or (skill.feedback[tier] if skill.feedback else "")
        count = word_count(text)
        if minimum and count < minimum:
            feedback = f"{self.profile.short_answer_warning.format(count=count, minimum=minimum)}\n\n{feedback}"

        return Evaluation(
            is_correct=None,
            score=score,
            raw_score=round(raw, 2),
            max_score=skill.max_score,
            feedback=feedback,
            suggestions=result.suggestions.strip() or self._suggestions(skill, tier, criteria),
            criteria_scores=criteria or None,
            transcription=transcription,
        )

    def _criteria_scores(self, skill: SkillProfile, result: OracleScore) -> Dict[str, float]:
        scores = {}
        for criterion in skill.criteria:
            if criterion in result.criteria_scores:
                scores[criterion] = self.converter.clamp(float(result.criteria_scores[criterion]), skill.code)
        return scores

    def _suggestions(self, skill: SkillProfile, tier: int, criteria: Dict[str, float]) -> str:
        lines = [skill.suggestions[tier]] if skill.suggestions else []
        threshold = self.profile.passing_fraction * skill.max_score
        for criterion, value in criteria.items():
            if value < threshold:
                lines.extend(f"• {line}" for line in skill.criterion_suggestions.get(criterion, ()))
        return "\n".join(lines)

    async def _call_oracle(self, call: Awaitable[T], purpose: str) -> T:
        task = asyncio.ensure_future(call)
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"{self.profile.code} {purpose} timed out after {self.timeout}s")
            raise EvaluationUnavailable(f"{purpose} timed out", e)
        except Exception as e:
            logger.warning(f"{self.profile.code} {purpose} failed: {e}")
            raise EvaluationUnavailable(f"{purpose} failed", e)
        finally:
            # Still running after a timeout or caller cancellation.
            if not task.done():
                task.add_done_callback(_consume_result)

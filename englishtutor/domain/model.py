"""
Practice Domain Model Module

This module defines the core domain entities of the practice engine:
the exam catalog (exam types, skills, scoring scales), questions with
their typed bodies, evaluations, attempts and per-skill progress.
"""

import enum
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any, Union

from englishtutor.common.exceptions import ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Difficulty(enum.Enum):
    """Difficulty level of a question, ordered easy < medium < hard."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_ORDER.index(self)

    def step_up(self) -> 'Difficulty':
        """Next harder level, capped at HARD."""
        return _DIFFICULTY_ORDER[min(self.rank + 1, len(_DIFFICULTY_ORDER) - 1)]

    def step_down(self) -> 'Difficulty':
        """Next easier level, capped at EASY."""
        return _DIFFICULTY_ORDER[max(self.rank - 1, 0)]

    @classmethod
    def parse(cls, value: Union[str, 'Difficulty', None]) -> Optional['Difficulty']:
        """
        Parse a difficulty from user input.

        Args:
            value: A Difficulty, its name or value in any case, or None

        Returns:
            The matching Difficulty, or None when value is None

        Raises:
            ValidationError: If the value names no difficulty
        """
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown difficulty '{value}'", {"difficulty": value})


_DIFFICULTY_ORDER = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]


class QuestionKind(enum.Enum):
    """Kind of question, which decides how an answer is evaluated."""
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    FILL_BLANK = "fill_blank"
    MATCHING = "matching"
    ORDERING = "ordering"
    ESSAY = "essay"
    SPEAKING = "speaking"

    @property
    def is_objective(self) -> bool:
        return self not in (QuestionKind.ESSAY, QuestionKind.SPEAKING)


class EvaluationKind(enum.Enum):
    """How answers for a skill are graded."""
    OBJECTIVE = "objective"
    SUBJECTIVE = "subjective"
    AI_DELEGATED = "ai_delegated"


@dataclass(frozen=True)
class ScoringScale:
    """Reporting scale of an exam: bounds, increment and passing threshold."""
    min_score: float
    max_score: float
    increment: float
    passing_score: float

    def clamp(self, value: float) -> float:
        return max(self.min_score, min(self.max_score, value))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'min': self.min_score,
            'max': self.max_score,
            'increment': self.increment,
            'passing': self.passing_score,
        }


@dataclass
class Skill:
    """
    One testable competency within an exam.

    Attributes:
        code: Code unique within the exam type (e.g. "reading")
        name: Display name
        max_score: Highest score reportable for the skill
        evaluation_kind: How answers for this skill are graded
        time_limit: Default time limit in seconds for the whole section
        is_active: Inactive skills cannot be practiced
    """
    code: str
    name: str
    max_score: float
    evaluation_kind: EvaluationKind
    time_limit: int
    is_active: bool = True
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'name': self.name,
            'max_score': self.max_score,
            'evaluation_kind': self.evaluation_kind.value,
            'time_limit': self.time_limit,
            'is_active': self.is_active,
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Skill':
        return cls(
            code=data['code'],
            name=data.get('name', data['code'].title()),
            max_score=float(data['max_score']),
            evaluation_kind=EvaluationKind(data.get('evaluation_kind', EvaluationKind.OBJECTIVE.value)),
            time_limit=int(data.get('time_limit', 300)),
            is_active=data.get('is_active', True),
            description=data.get('description', ''),
        )


@dataclass
class ExamType:
    """An exam (IELTS, TOEFL, YDS) with its scale and ordered skills."""
    code: str
    name: str
    scale: ScoringScale
    skills: List[Skill] = field(default_factory=list)
    description: str = ""
    is_active: bool = True

    def skill(self, code: str) -> Optional[Skill]:
        code = code.strip().lower()
        return next((skill for skill in self.skills if skill.code == code), None)

    @property
    def skill_codes(self) -> List[str]:
        return [skill.code for skill in self.skills]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'name': self.name,
            'description': self.description,
            'scale': self.scale.to_dict(),
            'skills': [skill.to_dict() for skill in self.skills],
            'is_active': self.is_active,
        }


@dataclass
class SubQuestion:
    """A single item embedded in a reading passage or listening script."""
    id: str
    prompt: str
    correct_answer: str
    options: Optional[List[str]] = None
    explanation: Optional[str] = None

    def to_dict(self, include_answer: bool = True) -> Dict[str, Any]:
        data = {'id': self.id, 'prompt': self.prompt, 'options': self.options}
        if include_answer:
            data['correct_answer'] = self.correct_answer
            data['explanation'] = self.explanation
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SubQuestion':
        return cls(
            id=str(data['id']),
            prompt=data.get('prompt') or data.get('question', ''),
            correct_answer=data.get('correct_answer', data.get('correctAnswer')),
            options=data.get('options'),
            explanation=data.get('explanation'),
        )


@dataclass
class ReadingBody:
    """A passage followed by objective sub-questions."""
    passage: str
    sub_questions: List[SubQuestion]
    passage_type: str = "academic"
    topic: Optional[str] = None

    kind = "reading"

    def to_dict(self, include_answer: bool = True) -> Dict[str, Any]:
        return {
            'kind': self.kind,
            'passage': self.passage,
            'passage_type': self.passage_type,
            'topic': self.topic,
            'sub_questions': [q.to_dict(include_answer) for q in self.sub_questions],
        }


@dataclass
class ListeningBody:
    """An audio script (and optional recording) followed by objective sub-questions."""
    audio_script: str
    sub_questions: List[SubQuestion]
    audio_ref: Optional[str] = None
    section: Optional[int] = None
    context: Optional[str] = None

    kind = "listening"

    def to_dict(self, include_answer: bool = True) -> Dict[str, Any]:
        data = {
            'kind': self.kind,
            'audio_ref': self.audio_ref,
            'section': self.section,
            'context': self.context,
            'sub_questions': [q.to_dict(include_answer) for q in self.sub_questions],
        }
        # The script is the answer key for listening.
        if include_answer:
            data['audio_script'] = self.audio_script
        return data


@dataclass
class WritingBody:
    task: int
    task_type: str
    min_words: int

    kind = "writing"

    def to_dict(self, include_answer: bool = True) -> Dict[str, Any]:
        return {'kind': self.kind, 'task': self.task, 'task_type': self.task_type, 'min_words': self.min_words}


@dataclass
class SpeakingBody:
    part: int
    topic: str
    prompts: List[str]
    preparation_time: int = 0
    speaking_time: int = 120
    min_words: int = 0

    kind = "speaking"

    def to_dict(self, include_answer: bool = True) -> Dict[str, Any]:
        return {
            'kind': self.kind,
            'part': self.part,
            'topic': self.topic,
            'prompts': list(self.prompts),
            'preparation_time': self.preparation_time,
            'speaking_time': self.speaking_time,
            'min_words': self.min_words,
        }


QuestionBody = Union[ReadingBody, ListeningBody, WritingBody, SpeakingBody]


def body_from_dict(data: Optional[Dict[str, Any]]) -> Optional[QuestionBody]:
    """
    Rebuild a typed question body from its dictionary form.

    Args:
        data: Output of a body's ``to_dict`` or None

    Returns:
        The typed body, or None when data is empty

    Raises:
        ValidationError: If the body kind is unknown or a required field is missing
    """
    if not data:
        return None
    kind = data.get('kind')
    try:
        return _build_body(kind, data)
    except KeyError as e:
        raise ValidationError(f"Question body of kind '{kind}' is missing {e}", {"body": data})


def _build_body(kind: Optional[str], data: Dict[str, Any]) -> QuestionBody:
    if kind == ReadingBody.kind:
        return ReadingBody(
            passage=data['passage'],
            sub_questions=[SubQuestion.from_dict(q) for q in data.get('sub_questions', [])],
            passage_type=data.get('passage_type', 'academic'),
            topic=data.get('topic'),
        )
    if kind == ListeningBody.kind:
        return ListeningBody(
            audio_script=data.get('audio_script', ''),
            sub_questions=[SubQuestion.from_dict(q) for q in data.get('sub_questions', [])],
            audio_ref=data.get('audio_ref'),
            section=data.get('section'),
            context=data.get('context'),
        )
    if kind == WritingBody.kind:
        return WritingBody(task=int(data['task']), task_type=data.get('task_type', ''),
                           min_words=int(data.get('min_words', 0)))
    if kind == SpeakingBody.kind:
        return SpeakingBody(
            part=int(data['part']),
            topic=data.get('topic', ''),
            prompts=list(data.get('prompts', [])),
            preparation_time=int(data.get('preparation_time', 0)),
            speaking_time=int(data.get('speaking_time', 120)),
            min_words=int(data.get('min_words', 0)),
        )
    raise ValidationError(f"Unknown question body kind '{kind}'")


@dataclass
class Question:
    """
    A practice question for one (exam type, skill) pair.

    Attributes:
        id: Unique identifier
        exam_type: Exam type code
        skill: Skill code within the exam type
        kind: How the question is answered
        difficulty: Difficulty level
        content: Question text, passage or prompt shown to the user
        title: Short display title
        instructions: Answering instructions
        correct_answer: Answer key for single objective questions
        options: Answer options for choice questions
        time_limit: Time limit in seconds
        points: Point value awarded on a correct objective answer
        body: Typed body for passages, scripts, writing tasks and speaking parts
        metadata: Free-form authoring metadata (question type, grammar area, ...)
        created_at: Creation timestamp
    """
    id: str
    exam_type: str
    skill: str
    kind: QuestionKind
    difficulty: Difficulty
    content: str
    title: str = ""
    instructions: str = ""
    correct_answer: Optional[str] = None
    options: Optional[List[str]] = None
    time_limit: int = 60
    points: float = 1
    body: Optional[QuestionBody] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if not self.content or not self.content.strip():
            raise ValidationError("Question content must not be empty", {"question_id": self.id})
        if self.points <= 0:
            raise ValidationError("Question points must be positive", {"question_id": self.id})
        if self.time_limit <= 0:
            raise ValidationError("Question time limit must be positive", {"question_id": self.id})

    @classmethod
    def create(cls, exam_type: str, skill: str, kind: QuestionKind, difficulty: Difficulty,
               content: str, **kwargs) -> 'Question':
        """
        Create a new question with a generated ID.

        Args:
            exam_type: Exam type code
            skill: Skill code
            kind: Question kind
            difficulty: Difficulty level
            content: Question text
            **kwargs: Any other Question field

        Returns:
            A new Question instance
        """
        return cls(id=str(uuid.uuid4()), exam_type=exam_type, skill=skill, kind=kind,
                   difficulty=difficulty, content=content, **kwargs)

    @property
    def sub_questions(self) -> List[SubQuestion]:
        if isinstance(self.body, (ReadingBody, ListeningBody)):
            return self.body.sub_questions
        return []

    @property
    def is_multi_part(self) -> bool:
        return bool(self.sub_questions)

    @property
    def audio_ref(self) -> Optional[str]:
        if isinstance(self.body, ListeningBody):
            return self.body.audio_ref
        return None

    def answer_key(self) -> Any:
        """The answer revealed to the user after a submission."""
        if self.is_multi_part:
            return [q.correct_answer for q in self.sub_questions]
        return self.correct_answer

    def to_dict(self, include_answer: bool = True) -> Dict[str, Any]:
        """
        Convert the question to a dictionary.

        Args:
            include_answer: Whether to include answer keys (False when serving to users)

        Returns:
            Dictionary representation of the question
        """
        data = {
            'id': self.id,
            'exam_type': self.exam_type,
            'skill': self.skill,
            'kind': self.kind.value,
            'difficulty': self.difficulty.value,
            'title': self.title,
            'content': self.content,
            'instructions': self.instructions,
            'options': self.options,
            'time_limit': self.time_limit,
            'points': self.points,
            'body': self.body.to_dict(include_answer) if self.body else None,
            'metadata': self.metadata,
            'created_at': self.created_at.isoformat(),
        }
        if include_answer:
            data['correct_answer'] = self.correct_answer
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Question':
        created_at = data.get('created_at')
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            id=data.get('id') or str(uuid.uuid4()),
            exam_type=data['exam_type'],
            skill=data['skill'],
            kind=QuestionKind(data['kind']),
            difficulty=Difficulty(data.get('difficulty', Difficulty.MEDIUM.value)),
            content=data['content'],
            title=data.get('title', ''),
            instructions=data.get('instructions', ''),
            correct_answer=data.get('correct_answer'),
            options=data.get('options'),
            time_limit=int(data.get('time_limit', 60)),
            points=data.get('points', 1),
            body=body_from_dict(data.get('body')),
            metadata=data.get('metadata') or {},
            created_at=created_at or utcnow(),
        )


@dataclass
class Evaluation:
    """
    Result of scoring one answer.

    ``score`` is on the exam's reporting scale; ``raw_score`` is the
    unconverted value (correct count, points or oracle overall);
    ``max_score`` is the highest ``score`` the question could have earned.
    """
    is_correct: Optional[bool]
    score: float
    raw_score: float
    max_score: float
    feedback: str
    suggestions: str
    criteria_scores: Optional[Dict[str, float]] = None
    transcription: Optional[str] = None
    details: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_correct': self.is_correct,
            'score': self.score,
            'raw_score': self.raw_score,
            'max_score': self.max_score,
            'feedback': self.feedback,
            'suggestions': self.suggestions,
            'criteria_scores': self.criteria_scores,
            'transcription': self.transcription,
            'details': self.details,
        }


@dataclass
class Attempt:
    """An immutable record of one submission."""
    id: str
    user_id: str
    question_id: str
    exam_type: str
    skill: str
    answer: str
    score: float
    raw_score: float
    is_correct: Optional[bool]
    feedback: str
    suggestions: str
    difficulty: Difficulty
    max_score: float = 0.0
    criteria_scores: Optional[Dict[str, float]] = None
    audio_ref: Optional[str] = None
    time_spent: int = 0
    submitted_at: datetime = field(default_factory=utcnow)

    @property
    def fraction(self) -> Optional[float]:
        """Score as a fraction of the maximum attainable, when known."""
        if self.max_score <= 0:
            return None
        return self.score / self.max_score

    @classmethod
    def record(cls, user_id: str, question: Question, answer: str, evaluation: Evaluation,
               audio_ref: Optional[str] = None, time_spent: int = 0) -> 'Attempt':
        """Build the attempt for ``evaluation`` of ``answer`` to ``question``."""
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            question_id=question.id,
            exam_type=question.exam_type,
            skill=question.skill,
            answer=answer,
            score=evaluation.score,
            raw_score=evaluation.raw_score,
            is_correct=evaluation.is_correct,
            feedback=evaluation.feedback,
            suggestions=evaluation.suggestions,
            difficulty=question.difficulty,
            max_score=evaluation.max_score,
            criteria_scores=evaluation.criteria_scores,
            audio_ref=audio_ref,
            time_spent=time_spent,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'question_id': self.question_id,
            'exam_type': self.exam_type,
            'skill': self.skill,
            'answer': self.answer,
            'score': self.score,
            'raw_score': self.raw_score,
            'is_correct': self.is_correct,
            'feedback': self.feedback,
            'suggestions': self.suggestions,
            'difficulty': self.difficulty.value,
            'max_score': self.max_score,
            'criteria_scores': self.criteria_scores,
            'audio_ref': self.audio_ref,
            'time_spent': self.time_spent,
            'submitted_at': self.submitted_at.isoformat(),
        }


@dataclass
class Progress:
    """
    Running counters for one (user, exam type, skill).

    ``total_points`` grows by one per attempt, so ``average_score`` is the
    mean score per attempt; ``max_points`` sums each evaluation's
    ``max_score`` and supports percentage-of-maximum reporting.
    """
    user_id: str
    exam_type: str
    skill: str
    total_questions: int = 0
    correct_answers: int = 0
    total_points: float = 0.0
    earned_points: float = 0.0
    max_points: float = 0.0
    average_score: float = 0.0
    best_score: float = 0.0
    last_activity: datetime = field(default_factory=utcnow)

    @classmethod
    def first(cls, user_id: str, exam_type: str, skill: str, evaluation: Evaluation,
              at: Optional[datetime] = None) -> 'Progress':
        """Progress row created by a user's first attempt on a skill."""
        return cls(
            user_id=user_id,
            exam_type=exam_type,
            skill=skill,
            total_questions=1,
            correct_answers=1 if evaluation.is_correct else 0,
            total_points=1.0,
            earned_points=evaluation.score,
            max_points=evaluation.max_score,
            average_score=evaluation.score,
            best_score=evaluation.score,
            last_activity=at or utcnow(),
        )

    def folded(self, evaluation: Evaluation, at: Optional[datetime] = None) -> 'Progress':
        """Return a copy with ``evaluation`` folded into the counters."""
        total_points = self.total_points + 1
        earned_points = self.earned_points + evaluation.score
        return replace(
            self,
            total_questions=self.total_questions + 1,
            correct_answers=self.correct_answers + (1 if evaluation.is_correct else 0),
            total_points=total_points,
            earned_points=earned_points,
            max_points=self.max_points + evaluation.max_score,
            average_score=earned_points / total_points,
            best_score=max(self.best_score, evaluation.score),
            last_activity=at or utcnow(),
        )

    @property
    def percentage(self) -> float:
        """Earned points as a percentage of the maximum attainable."""
        if self.max_points <= 0:
            return 0.0
        return self.earned_points / self.max_points * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'exam_type': self.exam_type,
            'skill': self.skill,
            'total_questions': self.total_questions,
            'correct_answers': self.correct_answers,
            'total_points': self.total_points,
            'earned_points': self.earned_points,
            'max_points': self.max_points,
            'average_score': self.average_score,
            'best_score': self.best_score,
            'last_activity': self.last_activity.isoformat(),
        }

"""
SQLAlchemy ORM models for the practice store.

Tables:
- exam_type: exam catalog
- exam_skill: skills of each exam type
- question: practice questions with typed JSON bodies
- question_attempt: append-only submission log
- user_exam_progress: per (user, exam type, skill) counters
"""

from typing import Any, Dict

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, JSON, String, Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.schema import UniqueConstraint

from englishtutor.domain.model import (
    Attempt,
    Difficulty,
    EvaluationKind,
    ExamType,
    Progress,
    Question,
    QuestionKind,
    ScoringScale,
    Skill,
    body_from_dict,
    utcnow,
)
from .base import ModelBase, as_utc


class ExamTypeRow(ModelBase):
    """Exam type with its reporting scale."""
    __tablename__ = "exam_type"

    code = Column(String(20), primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    min_score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False)
    score_increment = Column(Float, nullable=False)
    passing_score = Column(Float, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    skills = relationship("ExamSkillRow", back_populates="exam_type", order_by="ExamSkillRow.position",
                          cascade="all, delete-orphan", lazy="selectin")

    @classmethod
    def from_domain(cls, exam_type: ExamType) -> "ExamTypeRow":
        return cls(
            code=exam_type.code,
            name=exam_type.name,
            description=exam_type.description,
            min_score=exam_type.scale.min_score,
            max_score=exam_type.scale.max_score,
            score_increment=exam_type.scale.increment,
            passing_score=exam_type.scale.passing_score,
            is_active=exam_type.is_active,
            skills=[ExamSkillRow.from_domain(skill, position) for position, skill in enumerate(exam_type.skills)],
        )

    def to_domain(self) -> ExamType:
        return ExamType(
            code=self.code,
            name=self.name,
            description=self.description or "",
            scale=ScoringScale(
                min_score=self.min_score,
                max_score=self.max_score,
                increment=self.score_increment,
                passing_score=self.passing_score,
            ),
            skills=[row.to_domain() for row in self.skills],
            is_active=self.is_active,
        )


class ExamSkillRow(ModelBase):
    """A skill of an exam type."""
    __tablename__ = "exam_skill"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exam_type_code = Column(String(20), ForeignKey("exam_type.code", ondelete="CASCADE"), nullable=False)
    code = Column(String(30), nullable=False)
    name = Column(String(100), nullable=False)
    max_score = Column(Float, nullable=False)
    evaluation_kind = Column(String(20), nullable=False)
    time_limit = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    description = Column(Text, nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)

    exam_type = relationship("ExamTypeRow", back_populates="skills")

    __table_args__ = (
        UniqueConstraint("exam_type_code", "code"),
    )

    @classmethod
    def from_domain(cls, skill: Skill, position: int = 0) -> "ExamSkillRow":
        return cls(
            code=skill.code,
            name=skill.name,
            max_score=skill.max_score,
            evaluation_kind=skill.evaluation_kind.value,
            time_limit=skill.time_limit,
            is_active=skill.is_active,
            description=skill.description,
            position=position,
        )

    def to_domain(self) -> Skill:
        return Skill(
            code=self.code,
            name=self.name,
            max_score=self.max_score,
            evaluation_kind=EvaluationKind(self.evaluation_kind),
            time_limit=self.time_limit,
            is_active=self.is_active,
            description=self.description or "",
        )


class QuestionRow(ModelBase):
    """A practice question."""
    __tablename__ = "question"

    id = Column(String(36), primary_key=True)
    exam_type = Column(String(20), ForeignKey("exam_type.code"), nullable=False)
    skill = Column(String(30), nullable=False)
    kind = Column(String(30), nullable=False)
    difficulty = Column(String(10), nullable=False)
    title = Column(String(255), nullable=False, default="")
    content = Column(Text, nullable=False)
    instructions = Column(Text, nullable=False, default="")
    correct_answer = Column(Text, nullable=True)
    options = Column(JSON, nullable=True)
    time_limit = Column(Integer, nullable=False, default=60)
    points = Column(Float, nullable=False, default=1)
    body = Column(JSON, nullable=True)
    question_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_question_lookup", exam_type, skill, difficulty, created_at),
    )

    @classmethod
    def from_domain(cls, question: Question) -> "QuestionRow":
        return cls(
            id=question.id,
            exam_type=question.exam_type,
            skill=question.skill,
            kind=question.kind.value,
            difficulty=question.difficulty.value,
            title=question.title,
            content=question.content,
            instructions=question.instructions,
            correct_answer=question.correct_answer,
            options=question.options,
            time_limit=question.time_limit,
            points=question.points,
            body=question.body.to_dict() if question.body else None,
            question_metadata=question.metadata or None,
            created_at=question.created_at,
        )

    def to_domain(self) -> Question:
        return Question(
            id=self.id,
            exam_type=self.exam_type,
            skill=self.skill,
            kind=QuestionKind(self.kind),
            difficulty=Difficulty(self.difficulty),
            title=self.title or "",
            content=self.content,
            instructions=self.instructions or "",
            correct_answer=self.correct_answer,
            options=self.options,
            time_limit=self.time_limit,
            points=self.points,
            body=body_from_dict(self.body),
            metadata=dict(self.question_metadata or {}),
            created_at=as_utc(self.created_at),
        )


class AttemptRow(ModelBase):
    """One submission."""
    __tablename__ = "question_attempt"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(255), nullable=False)
    question_id = Column(String(36), ForeignKey("question.id"), nullable=False)
    exam_type = Column(String(20), nullable=False)
    skill = Column(String(30), nullable=False)
    answer = Column(Text, nullable=False)
    score = Column(Float, nullable=False)
    raw_score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False, default=0)
    is_correct = Column(Boolean, nullable=True)
    feedback = Column(Text, nullable=False, default="")
    suggestions = Column(Text, nullable=False, default="")
    difficulty = Column(String(10), nullable=False)
    criteria_scores = Column(JSON, nullable=True)
    audio_ref = Column(Text, nullable=True)
    time_spent = Column(Integer, nullable=False, default=0)
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_attempt_user_recent", user_id, exam_type, skill, submitted_at),
    )

    @classmethod
    def from_domain(cls, attempt: Attempt) -> "AttemptRow":
        return cls(
            id=attempt.id,
            user_id=attempt.user_id,
            question_id=attempt.question_id,
            exam_type=attempt.exam_type,
            skill=attempt.skill,
            answer=attempt.answer,
            score=attempt.score,
            raw_score=attempt.raw_score,
            max_score=attempt.max_score,
            is_correct=attempt.is_correct,
            feedback=attempt.feedback,
            suggestions=attempt.suggestions,
            difficulty=attempt.difficulty.value,
            criteria_scores=attempt.criteria_scores,
            audio_ref=attempt.audio_ref,
            time_spent=attempt.time_spent,
            submitted_at=attempt.submitted_at,
        )

    def to_domain(self) -> Attempt:
        return Attempt(
            id=self.id,
            user_id=self.user_id,
            question_id=self.question_id,
            exam_type=self.exam_type,
            skill=self.skill,
            answer=self.answer,
            score=self.score,
            raw_score=self.raw_score,
            max_score=self.max_score,
            is_correct=self.is_correct,
            feedback=self.feedback or "",
            suggestions=self.suggestions or "",
            difficulty=Difficulty(self.difficulty),
            criteria_scores=self.criteria_scores,
            audio_ref=self.audio_ref,
            time_spent=self.time_spent,
            submitted_at=as_utc(self.submitted_at),
        )


class ProgressRow(ModelBase):
    """Running counters for one (user, exam type, skill)."""
    __tablename__ = "user_exam_progress"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    exam_type = Column(String(20), nullable=False)
    skill = Column(String(30), nullable=False)
    total_questions = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    total_points = Column(Float, nullable=False, default=0)
    earned_points = Column(Float, nullable=False, default=0)
    max_points = Column(Float, nullable=False, default=0)
    average_score = Column(Float, nullable=False, default=0)
    best_score = Column(Float, nullable=False, default=0)
    last_activity = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "exam_type", "skill"),
    )

    @classmethod
    def from_domain(cls, progress: Progress) -> "ProgressRow":
        data: Dict[str, Any] = {
            key: getattr(progress, key)
            for key in (
                "user_id", "exam_type", "skill", "total_questions", "correct_answers", "total_points",
                "earned_points", "max_points", "average_score", "best_score", "last_activity",
            )
        }
        return cls(**data)

    def to_domain(self) -> Progress:
        return Progress(
            user_id=self.user_id,
            exam_type=self.exam_type,
            skill=self.skill,
            total_questions=self.total_questions,
            correct_answers=self.correct_answers,
            total_points=self.total_points,
            earned_points=self.earned_points,
            max_points=self.max_points,
            average_score=self.average_score,
            best_score=self.best_score,
            last_activity=as_utc(self.last_activity),
        )

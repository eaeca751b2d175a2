"""
Practice domain module.

This module contains the domain model and the store interface for exam
types, questions, attempts and progress.
"""

from .model import (
    Attempt,
    Difficulty,
    Evaluation,
    EvaluationKind,
    ExamType,
    ListeningBody,
    Progress,
    Question,
    QuestionKind,
    ReadingBody,
    ScoringScale,
    Skill,
    SpeakingBody,
    SubQuestion,
    WritingBody,
)
from .repository import PracticeStore
from .memory_repository import MemoryPracticeStore

__all__ = [
    'Attempt',
    'Difficulty',
    'Evaluation',
    'EvaluationKind',
    'ExamType',
    'ListeningBody',
    'Progress',
    'Question',
    'QuestionKind',
    'ReadingBody',
    'ScoringScale',
    'Skill',
    'SpeakingBody',
    'SubQuestion',
    'WritingBody',
    'PracticeStore',
    'MemoryPracticeStore',
]

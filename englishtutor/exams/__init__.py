"""
Exam practice engine: exam profiles, question selection, answer
evaluation, score conversion and progress aggregation.
"""

from .profiles import ExamProfile, FeedbackTier, OverallRule, SkillProfile
from .ielts import IELTS_PROFILE
from .toefl import TOEFL_PROFILE
from .yds import YDS_PROFILE
from .scoring import ScoreConverter
from .selection import QuestionSelector, adapt_difficulty
from .evaluation import AnswerEvaluator
from .progress import ProgressAggregator, Trend
from .registry import ExamServiceBundle, ExamServiceRegistry
from .service import PracticeService, SubmissionResult

__all__ = [
    "ExamProfile",
    "FeedbackTier",
    "OverallRule",
    "SkillProfile",
    "IELTS_PROFILE",
    "TOEFL_PROFILE",
    "YDS_PROFILE",
    "ScoreConverter",
    "QuestionSelector",
    "adapt_difficulty",
    "AnswerEvaluator",
    "ProgressAggregator",
    "Trend",
    "ExamServiceBundle",
    "ExamServiceRegistry",
    "PracticeService",
    "SubmissionResult",
]

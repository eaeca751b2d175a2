"""
TOEFL iBT exam profile. TOEFL practice is served from stored questions only.
"""

from englishtutor.domain.model import EvaluationKind, ScoringScale
from .profiles import ExamProfile, OverallRule, SkillProfile

TOEFL_SCALE = ScoringScale(min_score=0, max_score=120, increment=1, passing_score=80)

SKILL_MAX = 30

# Percentage correct -> section score (0-30) for reading and listening.
SECTION_STEP_TABLE = (
    (90, 30),
    (80, 28),
    (70, 25),
    (60, 22),
    (50, 19),
    (40, 15),
    (30, 11),
    (25, 8),
)

WRITING_RUBRIC = (
    "Development: ideas are relevant, well elaborated and supported with explanations, examples or details.\n"
    "Organization: the response is well organized with clear progression and appropriate transitions.\n"
    "Language Use: consistent facility with syntactic variety, appropriate word choice and idiomaticity.\n"
    "Each criterion is scored 0-30."
)

SPEAKING_RUBRIC = (
    "Delivery: speech is clear, fluid and sustained with good pronunciation and pacing.\n"
    "Language Use: effective use of grammar and vocabulary with a range of structures.\n"
    "Topic Development: the response is sustained and sufficient, with clear relationships between ideas.\n"
    "Each criterion is scored 0-30."
)

_OBJECTIVE_FEEDBACK = (
    "Your {skill} score needs improvement. You answered {correct}/{total} correctly ({percentage:.1f}%).",
    "Good {skill} performance. You answered {correct}/{total} correctly ({percentage:.1f}%).",
    "Excellent {skill} performance! You answered {correct}/{total} correctly ({percentage:.1f}%).",
)


TOEFL_PROFILE = ExamProfile(
    code="toefl",
    name="TOEFL iBT",
    description="Test of English as a Foreign Language, internet-based test",
    scale=TOEFL_SCALE,
    overall_rule=OverallRule.SUM,
    descriptors=(
        (100, "Advanced proficiency"),
        (80, "High-intermediate proficiency"),
        (60, "Intermediate proficiency"),
        (40, "Low-intermediate proficiency"),
        (0, "Basic proficiency"),
    ),
    trend_delta=1.0,
    skills=[
        SkillProfile(
            code="reading",
            name="Reading",
            max_score=SKILL_MAX,
            evaluation_kind=EvaluationKind.OBJECTIVE,
            time_limit=3240,
            step_table=SECTION_STEP_TABLE,
            step_floor=5,
            feedback=_OBJECTIVE_FEEDBACK,
            suggestions=(
                "Practice identifying the main idea and key details of academic passages.",
                "Work on inference and vocabulary-in-context questions.",
                "Keep practicing with full-length passages under timed conditions.",
            ),
            incorrect_suggestion="Review the passage carefully and try to identify key information.",
            weak_areas=("Reading comprehension",),
        ),
        SkillProfile(
            code="listening",
            name="Listening",
            max_score=SKILL_MAX,
            evaluation_kind=EvaluationKind.OBJECTIVE,
            time_limit=2460,
            step_table=SECTION_STEP_TABLE,
            step_floor=5,
            feedback=_OBJECTIVE_FEEDBACK,
            suggestions=(
                "Practice note-taking while listening to short lectures and conversations.",
                "Focus on the speaker's purpose and attitude as well as details.",
                "Keep practicing with longer academic lectures.",
            ),
            incorrect_suggestion="Review the audio carefully and try to identify key information.",
            weak_areas=("Listening comprehension",),
        ),
        SkillProfile(
            code="writing",
            name="Writing",
            max_score=SKILL_MAX,
            evaluation_kind=EvaluationKind.AI_DELEGATED,
            time_limit=3000,
            criteria=("development", "organization", "languageUse"),
            rubric=WRITING_RUBRIC,
            min_words=100,
            feedback=(
                "Basic writing with limited development. Focus on improving organization and expanding "
                "language use.",
                "Good writing with adequate development. Some areas for improvement in organization and "
                "language complexity.",
                "Excellent writing with clear development and sophisticated language use. Your response "
                "demonstrates strong organizational skills.",
            ),
            suggestions=(
                "Practice organizing your ideas with clear introduction, body, and conclusion. Use more varied "
                "vocabulary and sentence structures.",
                "Work on developing your ideas more fully and using more sophisticated language. Ensure smooth "
                "transitions between ideas.",
                "Excellent work! Continue practicing to maintain consistency in your high-level performance.",
            ),
            weak_areas=("Idea development", "Organization"),
        ),
        SkillProfile(
            code="speaking",
            name="Speaking",
            max_score=SKILL_MAX,
            evaluation_kind=EvaluationKind.AI_DELEGATED,
            time_limit=1200,
            criteria=("delivery", "languageUse", "topicDevelopment"),
            rubric=SPEAKING_RUBRIC,
            feedback=(
                "Basic speech with frequent pauses. Work on improving delivery and expanding topic development.",
                "Generally clear speech with some hesitation. Good topic development with occasional language "
                "errors.",
                "Clear and fluent speech with good delivery and topic development. Your pronunciation is "
                "generally clear.",
            ),
            suggestions=(
                "Practice speaking regularly to improve fluency and pronunciation. Focus on developing your ideas "
                "more completely.",
                "Work on reducing hesitation and using more precise vocabulary. Develop your responses more "
                "thoroughly.",
                "Great fluency and topic development! Keep practicing to maintain this level.",
            ),
            weak_areas=("Delivery", "Topic development"),
        ),
    ],
)

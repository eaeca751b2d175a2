#!/usr/bin/env python3
"""
Database seeding script.

Creates the tables, writes the exam catalog and stores sample questions:
every content-pool template of IELTS and YDS plus a small TOEFL set.
"""

import asyncio
import sys

from englishtutor.common.logger import app_logger
from englishtutor.config import settings
from englishtutor.database import SqlPracticeStore, close_database, get_session_factory, initialize_database
from englishtutor.domain.model import Difficulty, Question, QuestionKind, SpeakingBody, WritingBody
from englishtutor.exams import ExamServiceRegistry
from englishtutor.exams.profiles import ANY_DIFFICULTY
from englishtutor.exams.selection import build_question

logger = app_logger.getChild("scripts.seed_db")

TOEFL_READING_PASSAGE = (
    "The Industrial Revolution, which began in Britain in the late 18th century, marked a fundamental shift "
    "in human society. This period saw the transition from manual labor and handicrafts to mechanized "
    "manufacturing. The invention of the steam engine by James Watt in 1769 was particularly significant, as "
    "it provided a reliable source of power that was not dependent on natural forces like wind or water.\n\n"
    "The revolution had profound social and economic consequences. Urban centers grew rapidly as people moved "
    "from rural areas to work in factories. This urbanization led to new social problems, including "
    "overcrowding, pollution, and poor working conditions. However, it also resulted in increased productivity "
    "and economic growth.\n\n"
    "Question: What can be inferred about the steam engine's impact on manufacturing?"
)


def toefl_questions():
    return [
        Question.create(
            exam_type="toefl",
            skill="reading",
            kind=QuestionKind.MULTIPLE_CHOICE,
            difficulty=Difficulty.HARD,
            title="TOEFL Reading - Academic Passage",
            content=TOEFL_READING_PASSAGE,
            instructions="Select the best answer.",
            options=[
                "A) It made manufacturing completely independent of natural resources",
                "B) It provided more consistent power than natural forces",
                "C) It eliminated the need for manual labor entirely",
                "D) It was only useful in urban areas",
            ],
            correct_answer="B",
            time_limit=420,
            metadata={"passage_type": "historical", "skill_focus": "inference"},
        ),
        Question.create(
            exam_type="toefl",
            skill="writing",
            kind=QuestionKind.ESSAY,
            difficulty=Difficulty.MEDIUM,
            title="TOEFL Independent Writing",
            content="Do you agree or disagree with the following statement? It is better to have broad "
                    "knowledge of many academic subjects than to specialize in one specific subject. "
                    "Use specific reasons and examples to support your answer.",
            instructions="Write at least 300 words.",
            time_limit=1800,
            points=30,
            body=WritingBody(task=2, task_type="independent", min_words=300),
            metadata={"task_type": "independent"},
        ),
        Question.create(
            exam_type="toefl",
            skill="speaking",
            kind=QuestionKind.SPEAKING,
            difficulty=Difficulty.MEDIUM,
            title="TOEFL Speaking Task 1 - Personal Preference",
            content="Some people prefer to work in a team environment, while others prefer to work "
                    "independently. Which do you prefer and why? Use specific reasons and examples to support "
                    "your answer.",
            instructions="You have 15 seconds to prepare and 45 seconds to speak.",
            points=30,
            body=SpeakingBody(part=1, topic="Work preferences", prompts=[], preparation_time=15, speaking_time=45),
            metadata={"task_type": "independent"},
        ),
    ]


async def seed(database_url: str) -> int:
    """Seed the database and return the number of questions stored."""
    await initialize_database(database_url, echo=settings.SQL_ECHO)
    try:
        store = SqlPracticeStore(get_session_factory())
        registry = ExamServiceRegistry(store)
        await registry.seed_catalog()

        questions = toefl_questions()
        for code in registry.supported_exam_types():
            profile = registry.get(code).profile
            for skill in profile.skills:
                for key, templates in skill.content_pool.items():
                    difficulty = Difficulty.MEDIUM if key == ANY_DIFFICULTY else Difficulty(key)
                    questions.extend(build_question(code, skill, difficulty, template) for template in templates)

        for question in questions:
            await store.save_question(question)
        logger.info(f"Seeded {len(questions)} questions into {database_url[:10]}...")
        return len(questions)
    finally:
        await close_database()


def main() -> None:
    database_url = sys.argv[1] if len(sys.argv) > 1 else settings.DATABASE_URL
    try:
        asyncio.run(seed(database_url))
    except Exception as e:
        logger.error(f"Error seeding database: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

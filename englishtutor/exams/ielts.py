"""
IELTS exam profile: band scale, conversion tables, feedback and content pools.
"""

from englishtutor.domain.model import EvaluationKind, ScoringScale
from .profiles import ANY_DIFFICULTY, ExamProfile, OverallRule, SkillProfile

IELTS_SCALE = ScoringScale(min_score=0, max_score=9, increment=0.5, passing_score=6.0)

# Percentage correct -> band, shared by reading and listening.
BAND_STEP_TABLE = (
    (90, 9.0),
    (80, 8.0),
    (70, 7.0),
    (60, 6.0),
    (50, 5.0),
    (40, 4.0),
)

WRITING_RUBRIC = (
    "Task Achievement: addresses all parts of the task with relevant, extended ideas.\n"
    "Coherence & Cohesion: logical organisation, clear progression, effective paragraphing and linking.\n"
    "Lexical Resource: range and precision of vocabulary, collocation and spelling.\n"
    "Grammatical Range & Accuracy: variety of structures and control of grammar and punctuation.\n"
    "Each criterion is scored 0-9 in 0.5 steps."
)

SPEAKING_RUBRIC = (
    "Fluency & Coherence: speaks at length without noticeable effort, with coherent linking.\n"
    "Lexical Resource: flexible, precise vocabulary including less common items.\n"
    "Grammatical Range & Accuracy: mix of simple and complex structures with few errors.\n"
    "Pronunciation: intelligible, with effective stress and intonation.\n"
    "Each criterion is scored 0-9 in 0.5 steps."
)

EXERCISE_PASSAGE = (
    "The benefits of regular exercise are well-documented. Physical activity helps maintain a "
    "healthy weight, strengthens muscles and bones, and improves cardiovascular health. Regular "
    "exercise also has mental health benefits, including reduced stress and improved mood. Studies "
    "show that people who exercise regularly have lower rates of depression and anxiety. "
    "Additionally, exercise can improve cognitive function and memory, making it beneficial for "
    "people of all ages."
)

CLIMATE_PASSAGE = (
    "Climate change represents one of the most significant challenges facing humanity in the 21st "
    "century. The scientific consensus indicates that human activities, particularly the burning of "
    "fossil fuels, are the primary drivers of recent climate change. Rising global temperatures have "
    "led to melting ice caps, rising sea levels, and more frequent extreme weather events. These "
    "changes have far-reaching consequences for ecosystems, agriculture, and human societies worldwide."
)

QUANTUM_PASSAGE = (
    "The paradigm shift in quantum computing has profound implications for cryptography and "
    "information security. Quantum algorithms such as Shor's algorithm threaten the security of "
    "current encryption methods, while quantum key distribution offers unprecedented security "
    "guarantees. The development of quantum-resistant cryptographic protocols has become a priority "
    "for governments and organizations worldwide, as the advent of practical quantum computers could "
    "render current security infrastructure obsolete."
)

READING_POOL = {
    "easy": [
        {
            "kind": "multiple_choice",
            "title": "IELTS Reading - General Interest",
            "content": EXERCISE_PASSAGE,
            "instructions": "Choose the correct letter, A, B, C or D.",
            "time_limit": 1200,
            "points": 13,
            "body": {
                "kind": "reading",
                "passage": EXERCISE_PASSAGE,
                "passage_type": "general_interest",
                "topic": "Health and Fitness",
                "sub_questions": [
                    {
                        "id": "1",
                        "prompt": "What is the main topic of the passage?",
                        "options": ["A) Health benefits", "B) Exercise routines", "C) Medical research",
                                    "D) Lifestyle changes"],
                        "correct_answer": "A",
                        "explanation": "The passage primarily discusses the benefits of regular exercise.",
                    },
                    {
                        "id": "2",
                        "prompt": "According to the passage, exercise can improve which of the following?",
                        "options": ["A) Only physical health", "B) Only mental health",
                                    "C) Both physical and mental health", "D) Neither physical nor mental health"],
                        "correct_answer": "C",
                        "explanation": "The passage mentions both physical and mental health benefits.",
                    },
                ],
            },
            "metadata": {"question_type": "multiple_choice"},
        }
    ],
    "medium": [
        {
            "kind": "multiple_choice",
            "title": "IELTS Reading - Academic",
            "content": CLIMATE_PASSAGE,
            "instructions": "Choose the correct letter, A, B, C or D.",
            "time_limit": 1200,
            "points": 13,
            "body": {
                "kind": "reading",
                "passage": CLIMATE_PASSAGE,
                "passage_type": "academic",
                "topic": "Environmental Science",
                "sub_questions": [
                    {
                        "id": "1",
                        "prompt": "What does the passage identify as the primary driver of recent climate change?",
                        "options": ["A) Natural cycles", "B) Human activities", "C) Volcanic eruptions",
                                    "D) Solar radiation"],
                        "correct_answer": "B",
                        "explanation": "Human activities, particularly burning fossil fuels, are named as primary drivers.",
                    },
                    {
                        "id": "2",
                        "prompt": "Which consequence of rising temperatures is NOT mentioned?",
                        "options": ["A) Melting ice caps", "B) Rising sea levels", "C) Extreme weather events",
                                    "D) Volcanic activity"],
                        "correct_answer": "D",
                        "explanation": "Volcanic activity is not mentioned in the passage.",
                    },
                ],
            },
            "metadata": {"question_type": "multiple_choice"},
        }
    ],
    "hard": [
        {
            "kind": "multiple_choice",
            "title": "IELTS Reading - Academic Complex",
            "content": QUANTUM_PASSAGE,
            "instructions": "Choose the correct letter, A, B, C or D.",
            "time_limit": 1200,
            "points": 13,
            "body": {
                "kind": "reading",
                "passage": QUANTUM_PASSAGE,
                "passage_type": "academic_complex",
                "topic": "Technology and Science",
                "sub_questions": [
                    {
                        "id": "1",
                        "prompt": "According to the passage, what threatens current encryption methods?",
                        "options": ["A) Quantum key distribution", "B) Shor's algorithm",
                                    "C) Quantum-resistant protocols", "D) Government regulation"],
                        "correct_answer": "B",
                        "explanation": "Shor's algorithm is named as a threat to current encryption.",
                    },
                    {
                        "id": "2",
                        "prompt": "Why have quantum-resistant protocols become a priority?",
                        "options": ["A) They are cheaper to run", "B) Practical quantum computers could make current security obsolete",
                                    "C) Classical computers are getting slower", "D) Encryption is no longer required"],
                        "correct_answer": "B",
                        "explanation": "The passage links the priority to the advent of practical quantum computers.",
                    },
                ],
            },
            "metadata": {"question_type": "multiple_choice"},
        }
    ],
}

_LISTENING_INSTRUCTIONS = {
    1: "You will hear a conversation between two people. Answer the questions as you listen.",
    2: "You will hear a monologue. Answer the questions as you listen.",
    3: "You will hear a conversation between up to four people. Answer the questions as you listen.",
    4: "You will hear a lecture or talk. Answer the questions as you listen.",
}

_LISTENING_SECTIONS = [
    (1, "Hotel booking conversation",
     "Good morning. I'd like to book a room for next weekend. Do you have any availability? Yes, we do have "
     "rooms available. What type of room would you prefer? I'd like a single room with a view if possible. "
     "Let me check our system. Yes, I can offer you a single room on the fifth floor with a city view.",
     [("What is the main purpose of this conversation?", "booking a room"),
      ("What type of room does the customer want?", "single room")]),
    (2, "University orientation monologue",
     "Welcome to the university orientation. Today we'll cover the main facilities available to students. "
     "The library is open 24 hours during exam periods and until 10 PM during regular terms. The sports center "
     "offers various activities including swimming, tennis, and fitness classes. Student services are located "
     "in the main building and can help with accommodation, financial aid, and academic support.",
     [("Until what time is the library open during regular terms?", "10 PM"),
      ("Where are student services located?", "main building")]),
    (3, "Academic discussion",
     "Student A: I'm having trouble with my research project. The data I collected doesn't seem to support my "
     "hypothesis. Student B: That's actually quite common in research. Have you considered alternative "
     "explanations for your findings? Student A: Not really. I was so focused on proving my original idea. "
     "Student B: Sometimes unexpected results can lead to more interesting discoveries.",
     [("What problem does Student A have?", "data does not support hypothesis"),
      ("What does Student B suggest considering?", "alternative explanations")]),
    (4, "Academic lecture",
     "Today's lecture focuses on the impact of climate change on marine ecosystems. Rising ocean temperatures "
     "have led to coral bleaching events worldwide. Additionally, ocean acidification, caused by increased CO2 "
     "absorption, affects the ability of marine organisms to build shells and skeletons. These changes have "
     "cascading effects throughout the marine food chain.",
     [("What has rising ocean temperature led to?", "coral bleaching"),
      ("What causes ocean acidification?", "increased CO2 absorption")]),
]

LISTENING_POOL = {
    ANY_DIFFICULTY: [
        {
            "kind": "fill_blank",
            "title": f"IELTS Listening - Section {section}",
            "content": script,
            "instructions": _LISTENING_INSTRUCTIONS[section],
            "time_limit": 450,
            "points": 10,
            "body": {
                "kind": "listening",
                "audio_script": script,
                "audio_ref": f"/audio/ielts/listening/section{section}_sample.mp3",
                "section": section,
                "context": context,
                "sub_questions": [
                    {"id": str(index), "prompt": prompt, "correct_answer": answer}
                    for index, (prompt, answer) in enumerate(items, start=1)
                ],
            },
            "metadata": {"section": section},
        }
        for section, context, script, items in _LISTENING_SECTIONS
    ]
}

_TASK1_PROMPTS = {
    "easy": ("chart", "The chart below shows the percentage of households in owned and rented accommodation in "
                      "England and Wales between 1918 and 2011. Summarize the information by selecting and "
                      "reporting the main features, and make comparisons where relevant."),
    "medium": ("process", "The diagram below shows the process of recycling plastic bottles. Summarize the "
                          "information by selecting and reporting the main features, and make comparisons where "
                          "relevant."),
    "hard": ("maps", "The maps below show the development of a coastal town between 1950 and 2020. Summarize the "
                     "information by selecting and reporting the main features, and make comparisons where relevant."),
}

_TASK2_PROMPTS = {
    "easy": ("opinion", "Some people think that parents should teach children how to be good members of society. "
                        "Others, however, believe that school is the place to learn this. Discuss both these views "
                        "and give your own opinion."),
    "medium": ("problem_solution", "In many countries, the amount of crime is increasing. What do you think are the "
                                   "main causes of crime? How can we deal with those causes?"),
    "hard": ("discussion", "Some people believe that technological progress has made our lives more complex and "
                           "stressful, while others argue that it has made life easier and more convenient. Discuss "
                           "both views and give your own opinion."),
}


def _writing_template(task: int, task_type: str, prompt: str) -> dict:
    min_words = 150 if task == 1 else 250
    return {
        "kind": "essay",
        "title": f"IELTS Writing Task {task}",
        "content": prompt,
        "instructions": f"Write at least {min_words} words.",
        "time_limit": 1200 if task == 1 else 2400,
        "points": 33 if task == 1 else 67,
        "body": {"kind": "writing", "task": task, "task_type": task_type, "min_words": min_words},
    }


WRITING_POOL = {
    difficulty: [
        _writing_template(1, *_TASK1_PROMPTS[difficulty]),
        _writing_template(2, *_TASK2_PROMPTS[difficulty]),
    ]
    for difficulty in ("easy", "medium", "hard")
}

SPEAKING_POOL = {
    ANY_DIFFICULTY: [
        {
            "kind": "speaking",
            "title": "IELTS Speaking Part 1",
            "content": "Work or Studies",
            "instructions": "The examiner will ask you questions about yourself, your home, work or studies "
                            "and other familiar topics.",
            "time_limit": 300,
            "points": 33,
            "body": {
                "kind": "speaking",
                "part": 1,
                "topic": "Work or Studies",
                "prompts": [
                    "Do you work or are you a student?",
                    "What do you like most about your work/studies?",
                    "What are your plans for the future?",
                    "Do you enjoy your work/studies? Why?",
                    "What did you study at school/university?",
                ],
                "preparation_time": 0,
                "speaking_time": 300,
            },
        },
        {
            "kind": "speaking",
            "title": "IELTS Speaking Part 2",
            "content": "Describe a memorable journey you have taken",
            "instructions": "You will have 1 minute to prepare and then speak for 1-2 minutes.",
            "time_limit": 180,
            "points": 33,
            "body": {
                "kind": "speaking",
                "part": 2,
                "topic": "Describe a memorable journey you have taken",
                "prompts": [
                    "Where did you go?",
                    "When did you take this journey?",
                    "Who did you go with?",
                    "Why was it memorable?",
                ],
                "preparation_time": 60,
                "speaking_time": 120,
            },
        },
        {
            "kind": "speaking",
            "title": "IELTS Speaking Part 3",
            "content": "Travel and Tourism",
            "instructions": "The examiner will ask you more abstract questions related to the topic in Part 2.",
            "time_limit": 300,
            "points": 33,
            "body": {
                "kind": "speaking",
                "part": 3,
                "topic": "Travel and Tourism",
                "prompts": [
                    "How has travel changed in recent years?",
                    "What are the benefits of international travel?",
                    "Do you think tourism has negative effects on local communities?",
                    "How might travel change in the future?",
                    "What role does technology play in modern travel?",
                ],
                "preparation_time": 0,
                "speaking_time": 300,
            },
        },
    ]
}


IELTS_PROFILE = ExamProfile(
    code="ielts",
    name="IELTS",
    description="International English Language Testing System",
    scale=IELTS_SCALE,
    overall_rule=OverallRule.MEAN,
    descriptors=(
        (8.5, "Very good user"),
        (7.5, "Good user"),
        (6.5, "Competent user"),
        (5.5, "Modest user"),
        (4.5, "Limited user"),
        (0, "Extremely limited user"),
    ),
    excellent_fraction=7.0 / 9.0,
    trend_delta=0.5,
    short_answer_warning="Word count: {count}/{minimum} - You need to write more to fully address the task.",
    skills=[
        SkillProfile(
            code="reading",
            name="Reading",
            max_score=9,
            evaluation_kind=EvaluationKind.OBJECTIVE,
            time_limit=3600,
            step_table=BAND_STEP_TABLE,
            step_floor=3.0,
            feedback=(
                "Your reading needs improvement. You answered {correct}/{total} correctly ({percentage:.1f}%). "
                "Focus on understanding main ideas and scanning for specific information.",
                "Good reading performance. You got {correct}/{total} questions right ({percentage:.1f}%). "
                "You show solid comprehension skills but could improve on detail recognition.",
                "Excellent reading comprehension! You answered {correct}/{total} questions correctly "
                "({percentage:.1f}%). Your understanding of the passage and ability to locate specific "
                "information is very good.",
            ),
            suggestions=(
                "Focus on basic reading strategies: skimming for main ideas, scanning for details, and "
                "understanding question types. Build your academic vocabulary.",
                "Good progress! Work on identifying keywords in questions and scanning techniques. Practice with "
                "more complex academic vocabulary.",
                "Excellent work! Continue practicing with academic texts to maintain this high level. Focus on "
                "time management during the actual test.",
            ),
            incorrect_suggestion="Review the passage carefully and try to identify key information.",
            weak_areas=("Reading comprehension",),
            content_pool=READING_POOL,
        ),
        SkillProfile(
            code="listening",
            name="Listening",
            max_score=9,
            evaluation_kind=EvaluationKind.OBJECTIVE,
            time_limit=1800,
            step_table=BAND_STEP_TABLE,
            step_floor=3.0,
            feedback=(
                "Your listening needs work. You answered {correct}/{total} correctly ({percentage:.1f}%). "
                "Practice with different accents and focus on key information.",
                "Solid listening performance with {correct}/{total} correct answers ({percentage:.1f}%). You "
                "understand main ideas well but could improve on catching specific details.",
                "Great listening skills! You got {correct}/{total} answers correct ({percentage:.1f}%). You can "
                "follow conversations and lectures effectively.",
            ),
            suggestions=(
                "Focus on basic listening skills: identifying main ideas, listening for specific information, "
                "and familiarizing yourself with different question types.",
                "Good listening foundation. Work on predicting answers and listening for specific information. "
                "Practice with academic lectures and conversations.",
                "Excellent listening! Continue exposure to various English accents and academic content. "
                "Practice note-taking during longer passages.",
            ),
            incorrect_suggestion="Listen to the recording again and focus on key information.",
            weak_areas=("Listening for detail",),
            content_pool=LISTENING_POOL,
        ),
        SkillProfile(
            code="writing",
            name="Writing",
            max_score=9,
            evaluation_kind=EvaluationKind.AI_DELEGATED,
            time_limit=3600,
            criteria=("taskAchievement", "coherenceCohesion", "lexicalResource", "grammaticalRange"),
            criterion_suggestions={
                "taskAchievement": ("Address all parts of the task more fully",
                                    "Provide more relevant examples and explanations"),
                "coherenceCohesion": ("Use more linking words and phrases",
                                      "Organize ideas more clearly with better paragraphing"),
                "lexicalResource": ("Use a wider range of vocabulary",
                                    "Work on word choice accuracy and collocation"),
                "grammaticalRange": ("Use more complex sentence structures",
                                     "Improve grammatical accuracy"),
            },
            rubric=WRITING_RUBRIC,
            min_words=150,
            feedback=(
                "Basic response with limited development. Focus on expanding your ideas, improving language "
                "accuracy, and better task achievement.",
                "Adequate response that addresses the task. Some areas for improvement in vocabulary range, "
                "grammatical accuracy, and idea development.",
                "Strong writing with clear ideas and good language control. Your response addresses the task "
                "effectively with appropriate examples and explanations.",
            ),
            suggestions=(
                "Plan each paragraph around one main idea and support it with an example.",
                "Continue practicing to maintain your good performance!",
                "Continue practicing to maintain your good performance!",
            ),
            weak_areas=("Task achievement", "Coherence and cohesion"),
            content_pool=WRITING_POOL,
        ),
        SkillProfile(
            code="speaking",
            name="Speaking",
            max_score=9,
            evaluation_kind=EvaluationKind.AI_DELEGATED,
            time_limit=900,
            criteria=("fluencyCoherence", "lexicalResource", "grammaticalRange", "pronunciation"),
            criterion_suggestions={
                "fluencyCoherence": ("Practice speaking regularly to improve fluency",
                                     "Work on connecting ideas more smoothly"),
                "lexicalResource": ("Expand your vocabulary range",
                                    "Practice using more precise and varied expressions"),
                "grammaticalRange": ("Use more complex grammatical structures",
                                     "Focus on accuracy in basic grammar"),
                "pronunciation": ("Work on clear pronunciation of individual sounds",
                                  "Practice word stress and intonation patterns"),
            },
            rubric=SPEAKING_RUBRIC,
            feedback=(
                "Basic speaking level with frequent pauses and limited vocabulary. Focus on building fluency and "
                "expanding your range of expressions.",
                "Good speaking ability with generally clear communication. Some hesitation and minor errors, but "
                "your message is understood effectively.",
                "Excellent speaking performance! You communicate fluently with good pronunciation and natural "
                "language use. Your ideas are well-developed and clearly expressed.",
            ),
            suggestions=(
                "Record yourself answering practice questions and listen back for pauses and errors.",
                "Great speaking! Keep practicing to maintain this level.",
                "Great speaking! Keep practicing to maintain this level.",
            ),
            weak_areas=("Fluency", "Pronunciation"),
            content_pool=SPEAKING_POOL,
        ),
    ],
)

"""
Evaluation prompt builders for the language-model scoring oracle.
"""

import json
from typing import Sequence, Union

from englishtutor.domain.model import Question, SpeakingBody, WritingBody
from .oracle import Rubric

_IELTS_WRITING_TASKS = {
    1: "This is a Task 1 (report/letter) question. Analyze and describe the data or information presented.",
    2: "This is a Task 2 (essay) question. Present a clear argument and support it with ideas.",
}

_IELTS_SPEAKING_PARTS = {
    1: "This is a Part 1 (introduction and interview) response regarding familiar topics.",
    2: "This is a Part 2 (long turn) response where the candidate spoke about a topic for 1-2 minutes.",
    3: "This is a Part 3 (discussion) response, which involves a two-way discussion of abstract ideas.",
}

_TOEFL_TASKS = {
    "writing": {
        "independent": "This is an Independent Writing task, requiring an essay expressing and supporting "
                       "an opinion on a topic.",
        "integrated": "This is an Integrated Writing task, where the candidate had to summarize and synthesize "
                      "information from a reading passage and a listening lecture.",
    },
    "speaking": {
        "independent": "This is an Independent Speaking task, requiring the candidate to speak about a familiar "
                       "topic or express a personal opinion.",
        "integrated": "This is an Integrated Speaking task, requiring the candidate to synthesize information "
                      "from reading and listening sources and then speak about it.",
    },
}


def response_format(rubric: Rubric) -> str:
    """JSON shape the model must answer with."""
    schema = {
        "overallScore": f"number (0-{rubric.max_score:g})",
        "criteriaScores": {criterion: f"number (0-{rubric.max_score:g})" for criterion in rubric.criteria},
        "feedback": "string",
        "suggestions": "string",
    }
    return (
        "Respond with a single JSON object of the following shape and nothing else:\n"
        f"{json.dumps(schema, indent=2)}"
    )


def _assemble(intro: str, question_label: str, question_text: str, answer_label: str,
              answer_text: str, rubric: Rubric, closing: str = "") -> str:
    sections = [
        intro,
        f"**{question_label}:**\n{question_text}",
        f"**{answer_label}:**\n{answer_text}",
        f"**Rubric:**\n{rubric.text}",
        response_format(rubric),
    ]
    if closing:
        sections.append(closing)
    return "\n\n".join(sections)


def ielts_writing_prompt(answer_text: str, task: int, question_text: str, rubric: Rubric) -> str:
    intro = (
        f"You are an expert IELTS examiner. Evaluate the following IELTS Writing Task {task} response "
        f"based on the provided rubric. {_IELTS_WRITING_TASKS.get(task, _IELTS_WRITING_TASKS[2])} "
        "Band scores run from 0 to 9 in 0.5 increments."
    )
    return _assemble(intro, "Question", question_text, "Candidate's Response", answer_text, rubric)


def ielts_speaking_prompt(transcription: str, part: int, prompts: Union[str, Sequence[str]],
                          rubric: Rubric) -> str:
    if not isinstance(prompts, str):
        prompts = "\n- ".join(prompts)
    intro = (
        f"You are an expert IELTS examiner. Evaluate the following IELTS Speaking Part {part} response "
        f"based on the provided rubric. {_IELTS_SPEAKING_PARTS.get(part, _IELTS_SPEAKING_PARTS[1])}"
    )
    return _assemble(intro, "Question/Topic", prompts, "Candidate's Transcribed Response", transcription,
                     rubric, "Consider the nuances of spoken English.")


def toefl_prompt(skill_code: str, answer_text: str, task_type: str, question_text: str, rubric: Rubric) -> str:
    kinds = _TOEFL_TASKS[skill_code]
    noun = "response" if skill_code == "writing" else "speech response"
    intro = (
        f"You are an expert TOEFL rater. Evaluate the following {noun} based on the provided TOEFL "
        f"{skill_code.capitalize()} rubric. {kinds.get(task_type, kinds['independent'])}"
    )
    answer_label = "Candidate's Response" if skill_code == "writing" else "Candidate's Transcribed Response"
    return _assemble(intro, "Question/Prompt", question_text, answer_label, answer_text, rubric)


def generic_prompt(exam_name: str, skill_name: str, answer_text: str, question_text: str, rubric: Rubric) -> str:
    intro = f"You are an experienced {exam_name} examiner. Evaluate the following {skill_name.lower()} response."
    return _assemble(intro, "Question", question_text, "Candidate's Response", answer_text, rubric)


def build_prompt(exam_code: str, exam_name: str, skill_code: str, skill_name: str,
                 question: Question, answer_text: str, rubric: Rubric) -> str:
    """
    Build the evaluation prompt for a written or spoken answer.

    Args:
        exam_code: Exam type code
        exam_name: Exam display name
        skill_code: Skill code
        skill_name: Skill display name
        question: The question answered
        answer_text: Written answer or transcription
        rubric: Rubric to score against

    Returns:
        The prompt text
    """
    body = question.body
    if exam_code == "ielts" and skill_code == "writing":
        task = body.task if isinstance(body, WritingBody) else 2
        return ielts_writing_prompt(answer_text, task, question.content, rubric)
    if exam_code == "ielts" and skill_code == "speaking":
        if isinstance(body, SpeakingBody):
            return ielts_speaking_prompt(answer_text, body.part, [question.content] + list(body.prompts), rubric)
        return ielts_speaking_prompt(answer_text, 1, question.content, rubric)
    if exam_code == "toefl" and skill_code in _TOEFL_TASKS:
        task_type = question.metadata.get("task_type") or (
            body.task_type if isinstance(body, WritingBody) else "independent"
        )
        return toefl_prompt(skill_code, answer_text, task_type, question.content, rubric)
    return generic_prompt(exam_name, skill_name, answer_text, question.content, rubric)

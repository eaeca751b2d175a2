"""
Tests for the scoring and transcription oracles and the evaluation prompts.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from englishtutor import build_scoring_oracle, build_transcriber
from englishtutor.ai import (
    GoogleSpeechTranscriber,
    OpenAIScoringOracle,
    OracleScore,
    Rubric,
    RubricScoringOracle,
    build_prompt,
)
from englishtutor.ai.oracle import text_features
from englishtutor.common.exceptions import OracleError
from englishtutor.config import Settings
from englishtutor.domain.model import QuestionKind, SpeakingBody, WritingBody
from englishtutor.tests.conftest import make_question

WRITING_RUBRIC = Rubric(
    text="Task Achievement, Coherence & Cohesion, Lexical Resource, Grammatical Range & Accuracy",
    criteria=("taskAchievement", "coherenceCohesion", "lexicalResource", "grammaticalRange"),
    max_score=9,
    min_words=250,
)

ESSAY = (
    "Many people argue that parents are responsible for teaching children how to behave. However, schools "
    "also shape the values of young people, because children spend much of their day in classrooms. "
    "Furthermore, teachers can show pupils how to cooperate with others. Therefore, I believe that parents "
    "and schools should share this important task."
)


class TestRubricScoringOracle:
    @pytest.mark.asyncio
    async def test_scores_every_criterion_within_scale(self):
        result = await RubricScoringOracle().score("prompt", ESSAY, WRITING_RUBRIC)

        assert set(result.criteria_scores) == set(WRITING_RUBRIC.criteria)
        assert all(0 <= value <= 9 for value in result.criteria_scores.values())
        assert result.overall_score == pytest.approx(
            sum(result.criteria_scores.values()) / 4, abs=0.01)

    @pytest.mark.asyncio
    async def test_is_deterministic(self):
        oracle = RubricScoringOracle()

        first = await oracle.score("prompt", ESSAY, WRITING_RUBRIC)
        second = await oracle.score("another prompt", ESSAY, WRITING_RUBRIC)

        assert first == second

    @pytest.mark.asyncio
    async def test_longer_answers_score_higher_on_task(self):
        oracle = RubricScoringOracle()

        short = await oracle.score("prompt", "Parents should teach children.", WRITING_RUBRIC)
        full = await oracle.score("prompt", " ".join([ESSAY] * 5), WRITING_RUBRIC)

        assert full.criteria_scores["taskAchievement"] > short.criteria_scores["taskAchievement"]

    def test_features_of_empty_text(self):
        assert text_features("", 100) == {"length": 0.0, "variety": 0.0, "structure": 0.0, "linking": 0.0}

    def test_linking_words_are_counted(self):
        plain = text_features("I like tea. I like cake.", 0)
        linked = text_features("I like tea. However, I also like cake.", 0)

        assert linked["linking"] > plain["linking"]


class TestPrompts:
    def test_ielts_writing_prompt(self):
        question = make_question(skill="writing", kind=QuestionKind.ESSAY, correct_answer=None,
                                 content="Discuss both views.", body=WritingBody(task=1, task_type="chart",
                                                                                 min_words=150))

        prompt = build_prompt("ielts", "IELTS", "writing", "Writing", question, ESSAY, WRITING_RUBRIC)

        assert "IELTS Writing Task 1" in prompt
        assert "Discuss both views." in prompt
        assert ESSAY in prompt
        assert '"taskAchievement"' in prompt

    def test_ielts_speaking_prompt_lists_cues(self):
        question = make_question(skill="speaking", kind=QuestionKind.SPEAKING, correct_answer=None,
                                 content="Describe a teacher.",
                                 body=SpeakingBody(part=2, topic="People", prompts=["Who was it?"]))

        prompt = build_prompt("ielts", "IELTS", "speaking", "Speaking", question, "My teacher...", WRITING_RUBRIC)

        assert "Speaking Part 2" in prompt
        assert "Who was it?" in prompt
        assert "Transcribed Response" in prompt

    def test_toefl_task_type_from_metadata(self):
        question = make_question("toefl", "writing", kind=QuestionKind.ESSAY, correct_answer=None,
                                 metadata={"task_type": "integrated"})

        prompt = build_prompt("toefl", "TOEFL iBT", "writing", "Writing", question, ESSAY, WRITING_RUBRIC)

        assert "Integrated Writing task" in prompt

    def test_generic_prompt(self):
        question = make_question("yds", "grammar", kind=QuestionKind.ESSAY, correct_answer=None)

        prompt = build_prompt("yds", "YDS", "grammar", "Dilbilgisi", question, "answer", WRITING_RUBRIC)

        assert prompt.startswith("You are an experienced YDS examiner")


def completion(content):
    return {"choices": [{"message": {"content": content}}]}


class TestOpenAIScoringOracle:
    @pytest.mark.asyncio
    async def test_parses_json_evaluation(self):
        oracle = OpenAIScoringOracle(api_key="test-key")
        oracle._post = AsyncMock(return_value=completion(json.dumps({
            "overallScore": 6.5,
            "criteriaScores": {"taskAchievement": 6, "coherenceCohesion": 7},
            "feedback": "Well organised.",
            "suggestions": "Vary your vocabulary.",
        })))

        result = await oracle.score("prompt", ESSAY, WRITING_RUBRIC)

        assert result == OracleScore(overall_score=6.5, criteria_scores={"taskAchievement": 6.0,
                                                                         "coherenceCohesion": 7.0},
                                     feedback="Well organised.", suggestions="Vary your vocabulary.")
        path, payload = oracle._post.await_args.args
        assert path == "/chat/completions"
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["messages"][0]["content"] == "prompt"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        completion("not json"),
        completion(""),
        completion(json.dumps({"overallScore": "high"})),
        {"choices": []},
    ])
    async def test_unusable_responses(self, response):
        oracle = OpenAIScoringOracle(api_key="test-key")
        oracle._post = AsyncMock(return_value=response)

        with pytest.raises(OracleError):
            await oracle.score("prompt", ESSAY, WRITING_RUBRIC)

    @pytest.mark.asyncio
    async def test_close_without_session(self):
        oracle = OpenAIScoringOracle(api_key="test-key")

        await oracle.close()

        assert oracle._session is None


def fake_session(status=200, payload=None, text=""):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    response.text = AsyncMock(return_value=text)
    session = MagicMock()
    session.post.return_value.__aenter__.return_value = response
    return session


class TestGoogleSpeechTranscriber:
    def test_audio_payload(self):
        assert GoogleSpeechTranscriber.audio_payload("gs://bucket/a.mp3") == {"uri": "gs://bucket/a.mp3"}
        assert GoogleSpeechTranscriber.audio_payload("SUQzBAAAAA==") == {"content": "SUQzBAAAAA=="}

    @pytest.mark.asyncio
    async def test_joins_results(self):
        transcriber = GoogleSpeechTranscriber(api_key="test-key")
        session = fake_session(payload={"results": [
            {"alternatives": [{"transcript": "I grew up in a small town."}]},
            {"alternatives": [{"transcript": "It was very quiet."}]},
        ]})
        transcriber._get_session = AsyncMock(return_value=session)

        text = await transcriber.transcribe("gs://bucket/answer.mp3")

        assert text == "I grew up in a small town.\nIt was very quiet."
        kwargs = session.post.call_args.kwargs
        assert kwargs["params"] == {"key": "test-key"}
        assert kwargs["json"]["audio"] == {"uri": "gs://bucket/answer.mp3"}
        assert kwargs["json"]["config"]["languageCode"] == "en-US"

    @pytest.mark.asyncio
    async def test_no_results(self):
        transcriber = GoogleSpeechTranscriber(api_key="test-key")
        transcriber._get_session = AsyncMock(return_value=fake_session(payload={}))

        with pytest.raises(OracleError):
            await transcriber.transcribe("gs://bucket/silence.mp3")

    @pytest.mark.asyncio
    async def test_http_error(self):
        transcriber = GoogleSpeechTranscriber(api_key="test-key")
        transcriber._get_session = AsyncMock(return_value=fake_session(status=403, text="forbidden"))

        with pytest.raises(OracleError) as exc_info:
            await transcriber.transcribe("gs://bucket/answer.mp3")

        assert exc_info.value.status_code == 403


class TestOracleSelection:
    def test_rubric_scorer_by_default(self):
        assert build_scoring_oracle(Settings(_env_file=None, AI_PROVIDER="rubric")).name == "rubric"

    def test_openai_needs_a_key(self):
        config = Settings(_env_file=None, AI_PROVIDER="openai", OPENAI_API_KEY=None)
        assert build_scoring_oracle(config).name == "rubric"

    def test_openai_with_key(self):
        config = Settings(_env_file=None, AI_PROVIDER="openai", OPENAI_API_KEY="sk-test", AI_TIMEOUT_SECONDS=5)
        oracle = build_scoring_oracle(config)

        assert oracle.name == "openai"
        assert oracle.timeout == 5

    def test_transcriber_needs_a_key(self):
        assert build_transcriber(Settings(_env_file=None, GOOGLE_SPEECH_API_KEY=None)) is None
        assert build_transcriber(Settings(_env_file=None, GOOGLE_SPEECH_API_KEY="g-key")).name == "google_speech"

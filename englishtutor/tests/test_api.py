"""
API tests for the practice routes, run against an in-memory store.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from englishtutor import create_app
from englishtutor.ai.oracle import RubricScoringOracle
from englishtutor.domain.memory_repository import MemoryPracticeStore
from englishtutor.domain.model import QuestionKind
from englishtutor.tests.conftest import TEST_USER_ID, make_passage_question, make_question

HEADERS = {"X-User-Id": TEST_USER_ID}


def save(store, question):
    return asyncio.run(store.save_question(question))


@pytest.fixture
def app_store():
    return MemoryPracticeStore()


@pytest.fixture
def client(app_store, test_settings):
    app = create_app(config=test_settings, store=app_store, scoring_oracle=RubricScoringOracle())
    with TestClient(app) as client:
        yield client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_exam_types(client):
    response = client.get("/api/v1/exam-types")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert [exam["code"] for exam in body["data"]] == ["ielts", "toefl", "yds"]


def test_get_exam_type(client):
    response = client.get("/api/v1/exam-types/TOEFL")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["scale"] == {"min": 0, "max": 120, "increment": 1, "passing": 80}
    assert [skill["code"] for skill in data["skills"]] == ["reading", "listening", "writing", "speaking"]


def test_unknown_exam_type(client):
    response = client.get("/api/v1/exam-types/gre")

    assert response.status_code == 500
    assert response.json()["code"] == "ConfigurationError"


def test_next_question_hides_answer(client, app_store):
    question = save(app_store, make_passage_question("yds", "reading", answers=("A", "B")))

    response = client.get("/api/v1/questions/yds/reading/next", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == question.id
    assert "correct_answer" not in data
    assert all("correct_answer" not in item for item in data["body"]["sub_questions"])


def test_next_question_synthesized(client):
    response = client.get("/api/v1/questions/ielts/speaking/next", params={"difficulty": "hard"}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["data"]["metadata"]["synthesized"] is True


def test_no_more_questions(client):
    response = client.get("/api/v1/questions/toefl/writing/next", headers=HEADERS)

    assert response.status_code == 404
    assert response.json()["code"] == "no_questions"


def test_unknown_skill(client):
    response = client.get("/api/v1/questions/toefl/grammar/next", headers=HEADERS)

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_invalid_difficulty(client):
    response = client.get("/api/v1/questions/toefl/reading/next", params={"difficulty": "extreme"}, headers=HEADERS)

    assert response.status_code == 422


def test_user_header_is_required(client):
    response = client.get("/api/v1/questions/toefl/reading/next")

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_get_question(client, app_store):
    question = save(app_store, make_question("toefl", correct_answer="C"))

    response = client.get(f"/api/v1/questions/{question.id}")

    assert response.status_code == 200
    assert "correct_answer" not in response.json()["data"]
    assert client.get("/api/v1/questions/missing").status_code == 404


def test_submit_answer(client, app_store):
    question = save(app_store, make_question("toefl", correct_answer="C"))

    response = client.post(f"/api/v1/questions/{question.id}/answer", json={"answer": "c", "time_spent": 30},
                           headers=HEADERS)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["evaluation"]["is_correct"] is True
    assert data["correct_answer"] == "C"
    assert data["attempt"]["user_id"] == TEST_USER_ID
    assert data["progress_updated"] is True


def test_submit_multi_part_answer(client, app_store):
    question = save(app_store, make_passage_question("yds", "reading", answers=("A", "B", "C", "D")))

    response = client.post(f"/api/v1/questions/{question.id}/answer", json={"answer": ["A", "B", "C", "A"]},
                           headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["data"]["evaluation"]["score"] == 75


def test_submit_answer_validation(client, app_store):
    question = save(app_store, make_question("toefl"))

    missing = client.post(f"/api/v1/questions/{question.id}/answer", json={}, headers=HEADERS)
    negative = client.post(f"/api/v1/questions/{question.id}/answer", json={"answer": "B", "time_spent": -1},
                           headers=HEADERS)

    assert missing.status_code == 422
    assert negative.status_code == 422


def test_submit_empty_essay(client, app_store):
    question = save(app_store, make_question("ielts", "writing", kind=QuestionKind.ESSAY, correct_answer=None,
                                             options=None))

    response = client.post(f"/api/v1/questions/{question.id}/answer", json={"answer": "  "}, headers=HEADERS)

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_submit_unknown_question(client):
    response = client.post("/api/v1/questions/missing/answer", json={"answer": "A"}, headers=HEADERS)

    assert response.status_code == 404


def test_evaluation_unavailable(test_settings):
    store = MemoryPracticeStore()
    oracle = AsyncMock()
    oracle.name = "mock"
    oracle.score.side_effect = RuntimeError("upstream down")
    question = save(store, make_question("ielts", "writing", kind=QuestionKind.ESSAY, correct_answer=None,
                                         options=None))

    with TestClient(create_app(config=test_settings, store=store, scoring_oracle=oracle)) as client:
        response = client.post(f"/api/v1/questions/{question.id}/answer", json={"answer": "My essay."},
                               headers=HEADERS)

    assert response.status_code == 503
    body = response.json()
    assert body["code"] == "evaluation_unavailable"
    assert "try again" in body["message"]
    assert store.get_all_attempts() == []
    oracle.close.assert_awaited_once()


def test_progress_report(client, app_store):
    question = save(app_store, make_question("toefl", correct_answer="C"))
    client.post(f"/api/v1/questions/{question.id}/answer", json={"answer": "C"}, headers=HEADERS)

    response = client.get("/api/v1/progress/toefl", params={"skill": "reading"}, headers=HEADERS)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user_id"] == TEST_USER_ID
    assert data["summary"]["total_questions"] == 1
    assert list(data["skills"]) == ["reading"]

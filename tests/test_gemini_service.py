import json

import pytest
from httpx import AsyncClient

from conftest import auth
from learnhub.exceptions import NotFound, ServiceUnavailable, UpstreamError, ValidationError
from learnhub.services.gemini_service import GeminiService, gemini_service

CONTENT = "Photosynthesis converts light energy into chemical energy stored in glucose."


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate_content(self, prompt, generation_config=None):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return FakeResponse(self.text)


def payload(*questions):
    return json.dumps({"questions": list(questions)})


MC_QUESTION = {
    "type": "multiple_choice",
    "question_text": "What does photosynthesis produce?",
    "options": ["Glucose", "Salt", "Iron", "Helium"],
    "correct_answer": "Glucose",
    "points": 2,
}
TF_QUESTION = {
    "type": "true_false",
    "question_text": "Photosynthesis needs light.",
    "correct_answer": "True",
}


@pytest.fixture
def service():
    service = GeminiService(api_key="")
    assert not service.configured
    return service


def test_generate_requires_configuration(service):
    with pytest.raises(ServiceUnavailable) as exc_info:
        service.generate_questions(CONTENT)

    assert exc_info.value.code == "ai_not_configured"


def test_generate_rejects_short_content(service):
    service.model = FakeModel(payload(MC_QUESTION))

    with pytest.raises(ValidationError):
        service.generate_questions("too short")


def test_generate_parses_and_validates(service):
    service.model = FakeModel("```json\n" + payload(
        MC_QUESTION,
        TF_QUESTION,
        {"type": "multiple_choice", "question_text": "Two options?", "options": ["a", "b"], "correct_answer": "a"},
        {"type": "true_false", "question_text": "Maybe?", "correct_answer": "Maybe"},
        {"type": "essay", "question_text": "Discuss.", "correct_answer": "..."},
        {"type": "fill_blank", "question_text": "Plants make _____.", "correct_answer": "glucose", "points": -1},
        "not a dict",
    ) + "\n```")

    questions = service.generate_questions(CONTENT, count=3, types=["multiple_choice", "true_false"])

    assert [question["type"] for question in questions] == ["multiple_choice", "true_false", "fill_blank"]
    assert questions[0]["points"] == 2
    assert questions[1]["points"] == 1
    assert questions[1]["options"] is None
    assert questions[2]["points"] == 1
    assert "generate 3 quiz questions" in service.model.prompts[0]


@pytest.mark.parametrize("text", ["", "not json", json.dumps({"items": []}), json.dumps([1])])
def test_generate_rejects_bad_payloads(service, text):
    service.model = FakeModel(text)

    with pytest.raises(UpstreamError):
        service.generate_questions(CONTENT)


def test_generate_wraps_request_errors(service):
    service.model = FakeModel(error=RuntimeError("quota exceeded"))

    with pytest.raises(UpstreamError) as exc_info:
        service.generate_questions(CONTENT)

    assert exc_info.value.code == "ai_error"


def test_build_course_content_uses_text_units(session, service, course):
    content = service.build_course_content(session, course.id)

    assert content.startswith("Capitals\n")
    assert "Mountains\nMountains form" in content
    assert "Rivers" not in content


def test_build_course_content_unknown_course(session, service):
    import uuid

    with pytest.raises(NotFound):
        service.build_course_content(session, uuid.uuid4())


@pytest.fixture
def fake_model(monkeypatch):
    model = FakeModel(payload(MC_QUESTION, TF_QUESTION))
    monkeypatch.setattr(gemini_service, "model", model)
    return model


@pytest.mark.asyncio
async def test_generate_endpoint_uses_course_content(client: AsyncClient, session, instructor, course, fake_model):
    response = await client.post(
        "/api/ai/generate-questions",
        json={"course_id": str(course.id), "count": 2},
        headers=auth(session, instructor),
    )

    assert response.status_code == 200
    assert response.json()["count"] == 2
    assert response.json()["questions"][0]["correct_answer"] == "Glucose"
    assert "Capital cities" in fake_model.prompts[0]


@pytest.mark.asyncio
async def test_generate_endpoint_is_staff_only(client: AsyncClient, session, learner, course, fake_model):
    response = await client.post(
        "/api/ai/generate-questions",
        json={"course_id": str(course.id), "content": CONTENT},
        headers=auth(session, learner),
    )

    assert response.status_code == 403
    assert fake_model.prompts == []


@pytest.mark.asyncio
async def test_generate_endpoint_without_configuration(client: AsyncClient, session, admin, course, monkeypatch):
    monkeypatch.setattr(gemini_service, "model", None)

    response = await client.post(
        "/api/ai/generate-questions",
        json={"course_id": str(course.id), "content": CONTENT},
        headers=auth(session, admin),
    )

    assert response.status_code == 503
    assert response.json()["error"] == "ai_not_configured"

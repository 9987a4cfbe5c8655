import json
import threading
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from learnos.config import Settings
from learnos.errors import GenerationCancelled, GenerationError, GenerationTimeout
from learnos.generation import (
    COMBINED_SCHEMA, QUIZ_ONLY_SCHEMA, STUDY_PLAN_SCHEMA,
    CancelToken, GeminiClient, GenerationKind, call_with_deadline,
)

GUIDE_PAYLOAD = {
    "studyGuide": {
        "title": "Cells",
        "summary": "Cells are the unit of life.",
        "keyConcepts": [{"concept": "Membrane", "explanation": "Boundary", "visualAid": "|in|out|"}],
    },
    "quiz": [
        {"question": "Cells have a ___.", "type": "fill-in-blank", "answer": "membrane", "explanation": "They do."},
    ],
}

PLAN_PAYLOAD = {
    "title": "Cell Biology",
    "totalEstimatedTime": "2 days",
    "sessions": [{"day": 1, "topic": "Membranes", "objectives": ["Describe"], "estimatedTime": "1 hour"}],
}


def _client(payload=None, text=None, side_effect=None, timeout=5.0):
    genai_client = MagicMock()
    if side_effect is not None:
        genai_client.models.generate_content.side_effect = side_effect
    else:
        body = text if text is not None else json.dumps(payload)
        genai_client.models.generate_content.return_value = SimpleNamespace(text=body)
    settings = Settings(api_key="test", model="gemini-test", timeout=timeout, quiz_length=3)
    return GeminiClient(settings, client=genai_client), genai_client


def test_generate_study_guide_and_quiz():
    client, genai_client = _client(GUIDE_PAYLOAD)
    guide, quiz = client.generate_study_guide_and_quiz("cells text")
    assert guide.title == "Cells"
    assert guide.key_concepts[0].visual_aid == "|in|out|"
    assert quiz[0].question_type == "fill-in-blank"
    kwargs = genai_client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert "cells text" in kwargs["contents"]
    assert "3-question quiz" in kwargs["contents"]
    assert kwargs["config"]["response_schema"] is COMBINED_SCHEMA
    assert kwargs["config"]["response_mime_type"] == "application/json"
    assert kwargs["config"]["temperature"] == 0.7


def test_generate_quiz():
    client, genai_client = _client({"quiz": GUIDE_PAYLOAD["quiz"]})
    quiz = client.generate_quiz("cells text")
    assert len(quiz) == 1
    config = genai_client.models.generate_content.call_args.kwargs["config"]
    assert config["response_schema"] is QUIZ_ONLY_SCHEMA
    assert config["temperature"] == 0.8


def test_generate_study_plan():
    client, genai_client = _client(PLAN_PAYLOAD)
    plan = client.generate_study_plan("cells text")
    assert plan.title == "Cell Biology"
    assert plan.sessions[0].day == 1
    config = genai_client.models.generate_content.call_args.kwargs["config"]
    assert config["response_schema"] is STUDY_PLAN_SCHEMA
    assert config["temperature"] == 0.5


def test_generate_dispatches_on_kind():
    client, _ = _client(PLAN_PAYLOAD)
    assert client.generate(GenerationKind.STUDY_PLAN, "x").title == "Cell Biology"


def test_service_error_becomes_generation_error():
    client, _ = _client(side_effect=RuntimeError("503 unavailable"))
    with pytest.raises(GenerationError, match="Failed to communicate with the AI model."):
        client.generate_study_guide_and_quiz("x")


def test_bad_json_becomes_generation_error():
    client, _ = _client(text="{not json")
    with pytest.raises(GenerationError, match="generate a quiz"):
        client.generate_quiz("x")


def test_empty_response_becomes_generation_error():
    client, _ = _client(text="")
    with pytest.raises(GenerationError, match="generate a study plan"):
        client.generate_study_plan("x")


def test_wrong_shape_becomes_generation_error():
    client, _ = _client({"quiz": "not a list"})
    with pytest.raises(GenerationError):
        client.generate_quiz("x")


def test_call_with_deadline_returns_result():
    assert call_with_deadline(lambda: 42, timeout=1.0) == 42


def test_call_with_deadline_propagates_errors():
    def boom():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        call_with_deadline(boom, timeout=1.0)


def test_call_with_deadline_times_out():
    release = threading.Event()
    try:
        with pytest.raises(GenerationTimeout):
            call_with_deadline(lambda: release.wait(5), timeout=0.2)
    finally:
        release.set()


def test_call_with_deadline_cancelled():
    release = threading.Event()
    token = CancelToken()
    token.cancel()
    try:
        with pytest.raises(GenerationCancelled):
            call_with_deadline(lambda: release.wait(5), timeout=5.0, token=token)
    finally:
        release.set()


def test_timeout_surfaces_as_generation_error():
    release = threading.Event()
    client, _ = _client(side_effect=lambda **kwargs: release.wait(5), timeout=0.2)
    try:
        with pytest.raises(GenerationTimeout):
            client.generate_quiz("x")
    finally:
        release.set()


def test_cancel_token():
    token = CancelToken()
    assert not token.cancelled
    token.cancel()
    assert token.cancelled

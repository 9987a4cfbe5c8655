"""Content generation through the Gemini API.

Each request pairs a fixed prompt with a JSON response schema, runs under a
deadline and can be cancelled through a :class:`CancelToken`.
"""
import enum
import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from google import genai
from google.genai import types

from learnos.config import Settings
from learnos.errors import GenerationCancelled, GenerationError, GenerationTimeout
from learnos.models import QUESTION_TYPES, QuizQuestion, StudyGuide, StudyPlan

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1


class GenerationKind(enum.Enum):
    GUIDE_AND_QUIZ = "guide+quiz"
    QUIZ_ONLY = "quiz-only"
    STUDY_PLAN = "study-plan"


STUDY_GUIDE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {
            "type": "STRING",
            "description": "A concise, engaging title for the study material.",
        },
        "summary": {
            "type": "STRING",
            "description": "A detailed summary (3-5 paragraphs) of the provided text, suitable for a student.",
        },
        "keyConcepts": {
            "type": "ARRAY",
            "description": "A list of the most important concepts, terms, or ideas from the text.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "concept": {"type": "STRING", "description": "The name of the key concept."},
                    "explanation": {
                        "type": "STRING",
                        "description": "A clear and simple explanation of the concept.",
                    },
                    "visualAid": {
                        "type": "STRING",
                        "description": (
                            "A simple, text-based visual aid or diagram (using ASCII characters like "
                            "->, [], (), --, |) to help visualize the concept. Should be concise and "
                            "fit in a small text box."
                        ),
                    },
                },
                "required": ["concept", "explanation", "visualAid"],
            },
        },
    },
    "required": ["title", "summary", "keyConcepts"],
}

QUIZ_SCHEMA = {
    "type": "ARRAY",
    "description": "A list of diverse quiz questions based on the text.",
    "items": {
        "type": "OBJECT",
        "properties": {
            "question": {"type": "STRING", "description": "The question text."},
            "type": {
                "type": "STRING",
                "enum": list(QUESTION_TYPES),
                "description": "The type of the question.",
            },
            "options": {
                "type": "ARRAY",
                "description": (
                    "An array of possible answers for multiple-choice questions. "
                    "Should not be present for other types."
                ),
                "items": {"type": "STRING"},
            },
            "answer": {
                "type": "STRING",
                "description": (
                    "The correct answer. For true-false, it should be 'True' or 'False'. "
                    "For fill-in-blank, it is the word(s) to be filled in."
                ),
            },
            "explanation": {
                "type": "STRING",
                "description": "A brief explanation for why the answer is correct.",
            },
        },
        "required": ["question", "type", "answer", "explanation"],
    },
}

COMBINED_SCHEMA = {
    "type": "OBJECT",
    "properties": {"studyGuide": STUDY_GUIDE_SCHEMA, "quiz": QUIZ_SCHEMA},
    "required": ["studyGuide", "quiz"],
}

QUIZ_ONLY_SCHEMA = {
    "type": "OBJECT",
    "properties": {"quiz": QUIZ_SCHEMA},
    "required": ["quiz"],
}

STUDY_PLAN_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {
            "type": "STRING",
            "description": "A suitable title for the study plan based on the material.",
        },
        "totalEstimatedTime": {
            "type": "STRING",
            "description": "An overall estimated time to complete the study plan (e.g., '3 days', '1 week').",
        },
        "sessions": {
            "type": "ARRAY",
            "description": "A list of structured study sessions, broken down into manageable chunks.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "day": {
                        "type": "INTEGER",
                        "description": "The sequential day number for the study session (e.g., 1, 2, 3).",
                    },
                    "topic": {
                        "type": "STRING",
                        "description": "The main topic or chapter for this study session.",
                    },
                    "objectives": {
                        "type": "ARRAY",
                        "description": "A list of 2-4 specific, actionable learning objectives for this session.",
                        "items": {"type": "STRING"},
                    },
                    "estimatedTime": {
                        "type": "STRING",
                        "description": "Estimated time for this specific session (e.g., '45 minutes', '1.5 hours').",
                    },
                },
                "required": ["day", "topic", "objectives", "estimatedTime"],
            },
        },
    },
    "required": ["title", "totalEstimatedTime", "sessions"],
}

GUIDE_AND_QUIZ_PROMPT = """Based on the following study material, generate a comprehensive study guide and a {count}-question quiz. The study guide must include a title, a summary, and key concepts. For EACH key concept, provide an explanation AND a simple text-based visual aid (like an ASCII diagram) to help visualize it. The quiz should include a mix of multiple-choice, true-false, and fill-in-the-blank questions.

Study Material:
---
{material}
---
"""

QUIZ_PROMPT = """Based on the following study material, generate a {count}-question quiz. The quiz should include a mix of multiple-choice, true-false, and fill-in-the-blank questions.

Study Material:
---
{material}
---
"""

STUDY_PLAN_PROMPT = """Analyze the following text content and create a personalized, structured study plan. The plan should break down the material into manageable daily sessions. For each session, define a clear topic, a few specific learning objectives, and an estimated time for completion. The overall goal is to create a realistic and effective study schedule for a student.

Study Material:
---
{material}
---
"""


class CancelToken:
    """Shared flag used to abandon an in-flight request."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def call_with_deadline(fn, timeout: float, token: CancelToken | None = None):
    """Run ``fn()`` in a worker thread and wait at most ``timeout`` seconds.

    Raises GenerationTimeout when the deadline passes and GenerationCancelled
    when the token is cancelled or the wait is interrupted with Ctrl-C. The
    worker is abandoned in both cases; its eventual result is discarded.
    """
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(fn)
    deadline = time.monotonic() + timeout
    try:
        while True:
            if token is not None and token.cancelled:
                future.cancel()
                raise GenerationCancelled("The request was cancelled.")
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                future.cancel()
                raise GenerationTimeout(f"The AI model did not respond within {timeout:g} seconds.")
            try:
                return future.result(timeout=min(POLL_INTERVAL, remaining))
            except FutureTimeoutError:
                continue
    except KeyboardInterrupt:
        future.cancel()
        raise GenerationCancelled("The request was cancelled.") from None
    finally:
        executor.shutdown(wait=False)


def _parse_quiz(items) -> list[QuizQuestion]:
    if not isinstance(items, list):
        raise ValueError("quiz is not a list")
    return [QuizQuestion.from_dict(q) for q in items]


class GeminiClient:
    """Binding to the hosted model for the three generation kinds."""

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self._client = client

    @property
    def client(self):
        # Built on first use so a missing API key surfaces as a failed request.
        if self._client is None:
            self._client = genai.Client(
                api_key=self.settings.api_key,
                http_options=types.HttpOptions(timeout=int(self.settings.timeout * 1000)),
            )
        return self._client

    def _request(self, prompt: str, schema: dict, temperature: float, token: CancelToken | None):
        def call():
            return self.client.models.generate_content(
                model=self.settings.model,
                contents=prompt,
                config={
                    "response_mime_type": "application/json",
                    "response_schema": schema,
                    "temperature": temperature,
                },
            )

        response = call_with_deadline(call, self.settings.timeout, token)
        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise ValueError("Empty response from the AI model")
        return json.loads(text)

    def generate_study_guide_and_quiz(self, material: str, token: CancelToken | None = None):
        prompt = GUIDE_AND_QUIZ_PROMPT.format(count=self.settings.quiz_length, material=material)
        try:
            data = self._request(prompt, COMBINED_SCHEMA, 0.7, token)
            return StudyGuide.from_dict(data["studyGuide"]), _parse_quiz(data["quiz"])
        except GenerationError:
            raise
        except Exception as e:
            logger.error("Error generating content with Gemini: %s", e)
            raise GenerationError("Failed to communicate with the AI model.") from e

    def generate_quiz(self, material: str, token: CancelToken | None = None) -> list[QuizQuestion]:
        prompt = QUIZ_PROMPT.format(count=self.settings.quiz_length, material=material)
        try:
            data = self._request(prompt, QUIZ_ONLY_SCHEMA, 0.8, token)
            return _parse_quiz(data["quiz"])
        except GenerationError:
            raise
        except Exception as e:
            logger.error("Error generating quiz with Gemini: %s", e)
            raise GenerationError("Failed to communicate with the AI model to generate a quiz.") from e

    def generate_study_plan(self, material: str, token: CancelToken | None = None) -> StudyPlan:
        prompt = STUDY_PLAN_PROMPT.format(material=material)
        try:
            data = self._request(prompt, STUDY_PLAN_SCHEMA, 0.5, token)
            return StudyPlan.from_dict(data)
        except GenerationError:
            raise
        except Exception as e:
            logger.error("Error generating study plan with Gemini: %s", e)
            raise GenerationError("Failed to communicate with the AI model to generate a study plan.") from e

    def generate(self, kind: GenerationKind, material: str, token: CancelToken | None = None):
        if kind is GenerationKind.GUIDE_AND_QUIZ:
            return self.generate_study_guide_and_quiz(material, token)
        if kind is GenerationKind.QUIZ_ONLY:
            return self.generate_quiz(material, token)
        return self.generate_study_plan(material, token)

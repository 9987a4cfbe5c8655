import pytest

from learnos.errors import GenerationError
from learnos.models import KeyConcept, QuizQuestion, StudyGuide, StudyPlan, StudyPlanSession


class FakeClient:
    """Stand-in for GeminiClient that records every call."""

    def __init__(self, guide=None, quiz=None, plan=None, error=None):
        self.guide = guide
        self.quiz = quiz or []
        self.plan = plan
        self.error = error
        self.calls = []

    def _maybe_fail(self):
        if self.error is not None:
            raise GenerationError(self.error)

    def generate_study_guide_and_quiz(self, material, token=None):
        self.calls.append(("guide+quiz", material))
        self._maybe_fail()
        return self.guide, list(self.quiz)

    def generate_quiz(self, material, token=None):
        self.calls.append(("quiz-only", material))
        self._maybe_fail()
        return list(self.quiz)

    def generate_study_plan(self, material, token=None):
        self.calls.append(("study-plan", material))
        self._maybe_fail()
        return self.plan


@pytest.fixture
def sample_guide():
    return StudyGuide(
        title="The Krebs Cycle",
        summary="The **Krebs cycle** releases stored energy.",
        key_concepts=(
            KeyConcept(concept="Acetyl-CoA", explanation="Fuel for the cycle.", visual_aid="[Acetyl-CoA] -> (Cycle)"),
            KeyConcept(concept="NADH", explanation="Carries electrons.", visual_aid=""),
        ),
    )


@pytest.fixture
def sample_quiz():
    return [
        QuizQuestion(
            question="Which city is the capital of France?",
            question_type="multiple-choice",
            answer="Paris",
            explanation="Paris is the capital.",
            options=("London", "Paris", "Rome"),
        ),
        QuizQuestion(
            question="The Krebs cycle occurs in the mitochondrion.",
            question_type="true-false",
            answer="True",
            explanation="It runs in the mitochondrial matrix.",
        ),
    ]


@pytest.fixture
def sample_plan():
    return StudyPlan(
        title="Quantum Computing Basics",
        total_estimated_time="2 days",
        sessions=(
            StudyPlanSession(day=1, topic="Qubits", objectives=("Define a qubit",), estimated_time="45 minutes"),
            StudyPlanSession(day=2, topic="Circuits", objectives=("Draw a circuit", "Explain gates"), estimated_time="1 hour"),
        ),
    )


@pytest.fixture
def fake_client(sample_guide, sample_quiz, sample_plan):
    return FakeClient(guide=sample_guide, quiz=sample_quiz, plan=sample_plan)

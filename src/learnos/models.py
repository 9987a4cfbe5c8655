"""Data classes for the study domain model.

The ``from_dict`` constructors read the camelCase shape returned by the
generation service. Only the shared guide has a ``to_dict``, for the share token.
"""
from dataclasses import dataclass, field
from typing import Optional

MULTIPLE_CHOICE = "multiple-choice"
TRUE_FALSE = "true-false"
FILL_IN_BLANK = "fill-in-blank"
QUESTION_TYPES = (MULTIPLE_CHOICE, TRUE_FALSE, FILL_IN_BLANK)

BLANK_MARKER = "___"
BLANK_DISPLAY = "_______"


@dataclass(frozen=True)
class KeyConcept:
    concept: str
    explanation: str
    visual_aid: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "KeyConcept":
        return cls(
            concept=str(data.get("concept", "")),
            explanation=str(data.get("explanation", "")),
            visual_aid=str(data.get("visualAid") or ""),
        )

    def to_dict(self) -> dict:
        return {"concept": self.concept, "explanation": self.explanation, "visualAid": self.visual_aid}


@dataclass(frozen=True)
class StudyGuide:
    title: str
    summary: str
    key_concepts: tuple = ()

    @classmethod
    def from_dict(cls, data: dict) -> "StudyGuide":
        # Only mappings become concepts; anything else in the list is dropped.
        concepts = tuple(
            KeyConcept.from_dict(c) for c in data.get("keyConcepts") or [] if isinstance(c, dict)
        )
        return cls(title=str(data["title"]), summary=str(data["summary"]), key_concepts=concepts)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "summary": self.summary,
            "keyConcepts": [c.to_dict() for c in self.key_concepts],
        }


@dataclass(frozen=True)
class QuizQuestion:
    question: str
    question_type: str
    answer: str
    explanation: str = ""
    options: Optional[tuple] = None

    @classmethod
    def from_dict(cls, data: dict) -> "QuizQuestion":
        question_type = data.get("type", FILL_IN_BLANK)
        if question_type not in QUESTION_TYPES:
            raise ValueError(f"Unknown question type: {question_type!r}")
        options = data.get("options")
        return cls(
            question=str(data["question"]),
            question_type=question_type,
            answer=str(data["answer"]),
            explanation=str(data.get("explanation", "")),
            options=tuple(str(o) for o in options) if options else None,
        )

    def display_text(self) -> str:
        """Question text with the blank marker made visible."""
        return self.question.replace(BLANK_MARKER, BLANK_DISPLAY)


@dataclass(frozen=True)
class QuizResult:
    study_guide_title: str
    score: int
    total: int
    date: str  # ISO-8601
    user_answers: dict = field(default_factory=dict)
    quiz: tuple = ()

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return self.score / self.total * 100


@dataclass(frozen=True)
class StudyPlanSession:
    day: int
    topic: str
    objectives: tuple = ()
    estimated_time: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "StudyPlanSession":
        return cls(
            day=int(data["day"]),
            topic=str(data["topic"]),
            objectives=tuple(str(o) for o in data.get("objectives") or []),
            estimated_time=str(data.get("estimatedTime", "")),
        )


@dataclass(frozen=True)
class StudyPlan:
    title: str
    total_estimated_time: str
    sessions: tuple = ()

    @classmethod
    def from_dict(cls, data: dict) -> "StudyPlan":
        return cls(
            title=str(data["title"]),
            total_estimated_time=str(data.get("totalEstimatedTime", "")),
            sessions=tuple(StudyPlanSession.from_dict(s) for s in data.get("sessions") or []),
        )


@dataclass(frozen=True)
class SharedData:
    guide: StudyGuide
    material: str

    @classmethod
    def from_dict(cls, data: dict) -> "SharedData":
        return cls(guide=StudyGuide.from_dict(data["guide"]), material=data["material"])

    def to_dict(self) -> dict:
        return {"guide": self.guide.to_dict(), "material": self.material}


def is_shared_data(obj) -> bool:
    """Shallow shape check for a decoded share payload.

    Key concept entries are not inspected.
    """
    if not isinstance(obj, dict):
        return False
    guide = obj.get("guide")
    return (
        isinstance(guide, dict)
        and isinstance(guide.get("title"), str)
        and isinstance(guide.get("summary"), str)
        and isinstance(guide.get("keyConcepts"), list)
        and isinstance(obj.get("material"), str)
    )

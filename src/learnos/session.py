"""Session state machine.

``StudySession`` owns the application state. Every transition replaces the
current ``SessionState`` snapshot with a new immutable one and notifies
subscribers; nothing outside this module mutates state directly.
"""
import enum
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from learnos.errors import GenerationError, MaterialRequiredError, ShareTokenError
from learnos.generation import CancelToken
from learnos.models import QuizResult, StudyGuide, StudyPlan
from learnos.progress import ProgressLog
from learnos.sharing import build_share_url, decode_token, split_share_fragment

logger = logging.getLogger(__name__)

QUIZ_NEEDS_MATERIAL = "Cannot generate quiz without the original study material."
PLAN_NEEDS_TEXT = "Please provide some text to generate a study plan from."


class View(enum.Enum):
    DASHBOARD = "dashboard"
    OCR_PLANNER = "ocr-planner"
    STUDY = "study"
    PROGRESS = "progress"


class Phase(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionState:
    view: View = View.DASHBOARD
    phase: Phase = Phase.IDLE
    guide: StudyGuide | None = None
    quiz: tuple | None = None
    material: str = ""
    error: str | None = None
    history: tuple = ()
    plan_phase: Phase = Phase.IDLE
    plan: StudyPlan | None = None
    plan_error: str | None = None
    location: str = ""

    @property
    def loading(self) -> bool:
        return self.phase is Phase.LOADING or self.plan_phase is Phase.LOADING


class StudySession:
    """Single source of truth for the current screen and loaded data.

    ``client`` is anything with ``generate_study_guide_and_quiz``,
    ``generate_quiz`` and ``generate_study_plan`` methods taking the material
    and an optional cancel token.
    """

    def __init__(self, client, origin: str = "https://learnos.app", path: str = "/"):
        self._client = client
        self._origin = origin
        self._path = path
        self._log = ProgressLog()
        self._listeners = []
        self._token: CancelToken | None = None
        self._state = SessionState(location=f"{origin}{path}")

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def progress(self) -> ProgressLog:
        return self._log

    def subscribe(self, listener):
        """Call ``listener(state)`` on every transition. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, **changes) -> SessionState:
        state = replace(self._state, **changes)
        if state.view is View.STUDY and not (state.guide and state.material):
            state = replace(state, view=View.DASHBOARD)
        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return state

    def _begin_request(self) -> CancelToken:
        self._token = CancelToken()
        return self._token

    def cancel(self) -> None:
        if self._token is not None:
            self._token.cancel()

    # Navigation

    def set_view(self, view: View) -> SessionState:
        return self._transition(view=view)

    # Guide + quiz flow

    def start_session(self, material: str) -> SessionState:
        if not material.strip():
            return self._state
        self._transition(
            view=View.DASHBOARD, phase=Phase.LOADING,
            guide=None, quiz=None, material="", error=None,
        )
        token = self._begin_request()
        try:
            guide, quiz = self._client.generate_study_guide_and_quiz(material, token)
        except GenerationError as e:
            logger.error("Study guide generation failed: %s", e)
            return self._transition(
                view=View.DASHBOARD, phase=Phase.FAILED,
                error=f"Failed to generate study guide: {e}",
            )
        finally:
            self._token = None
        return self._transition(
            view=View.STUDY, phase=Phase.READY,
            guide=guide, quiz=tuple(quiz), material=material,
        )

    def generate_quiz_only(self) -> SessionState:
        if not self._state.material:
            logger.warning(QUIZ_NEEDS_MATERIAL)
            return self._transition(error=QUIZ_NEEDS_MATERIAL)
        self._transition(phase=Phase.LOADING, error=None)
        token = self._begin_request()
        try:
            quiz = self._client.generate_quiz(self._state.material, token)
        except GenerationError as e:
            logger.error("Quiz generation failed: %s", e)
            return self._transition(phase=Phase.FAILED, error=f"Failed to generate quiz: {e}")
        finally:
            self._token = None
        return self._transition(phase=Phase.READY, quiz=tuple(quiz))

    def complete_quiz(self, score: int, total: int, answers: dict) -> SessionState:
        state = self._state
        if not state.guide or not state.quiz:
            return state
        result = QuizResult(
            study_guide_title=state.guide.title,
            score=score,
            total=total,
            date=datetime.now(timezone.utc).isoformat(),
            user_answers=dict(answers),
            quiz=state.quiz,
        )
        self._log.record(result)
        return self._transition(history=self._log.results, view=View.PROGRESS)

    def average_score(self) -> float | None:
        return self._log.average_score()

    # Share links

    def share_url(self) -> str | None:
        state = self._state
        if state.guide is None:
            return None
        return build_share_url(state.guide, state.material, self._origin, self._path)

    def open_location(self, location: str) -> SessionState:
        """Adopt a shared guide from ``location`` if it carries one.

        The share fragment is always stripped from the stored location. A bad
        token is logged and otherwise ignored.
        """
        token, stripped = split_share_fragment(location)
        if token is None:
            return self._transition(location=location)
        try:
            shared = decode_token(token)
        except ShareTokenError as e:
            logger.warning("Failed to parse shared data from link: %s", e)
            return self._transition(location=stripped)
        return self._transition(
            location=stripped, view=View.STUDY, phase=Phase.READY,
            guide=shared.guide, material=shared.material, quiz=None, error=None,
        )

    # Study plan flow

    def generate_plan(self, text: str) -> SessionState:
        if not text.strip():
            return self._transition(plan_error=PLAN_NEEDS_TEXT)
        self._transition(plan_phase=Phase.LOADING, plan=None, plan_error=None)
        token = self._begin_request()
        try:
            plan = self._client.generate_study_plan(text, token)
        except GenerationError as e:
            logger.error("Study plan generation failed: %s", e)
            return self._transition(plan_phase=Phase.FAILED, plan_error=f"Failed to generate study plan: {e}")
        finally:
            self._token = None
        return self._transition(plan_phase=Phase.READY, plan=plan)

    def reset_plan(self) -> SessionState:
        return self._transition(plan_phase=Phase.IDLE, plan=None, plan_error=None)


def require_material(material: str) -> str:
    if not material.strip():
        raise MaterialRequiredError("Please paste some study material first.")
    return material

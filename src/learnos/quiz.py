"""Quiz runtime: navigation, answer collection and scoring."""
from learnos.models import MULTIPLE_CHOICE, TRUE_FALSE, QuizQuestion

TRUE_FALSE_OPTIONS = ("True", "False")


def answer_matches(answer: str | None, expected: str) -> bool:
    # Case-insensitive exact match; whitespace is significant.
    return answer is not None and answer.lower() == expected.lower()


def score_answers(questions, answers: dict) -> int:
    """Number of questions whose recorded answer matches. Unanswered counts as wrong."""
    return sum(1 for i, q in enumerate(questions) if answer_matches(answers.get(i), q.answer))


def resolve_answer(question: QuizQuestion, raw: str) -> str:
    """Map terminal input onto an answer for ``question``.

    A number picks a multiple-choice option and ``t``/``f`` pick True/False;
    anything else is taken as typed.
    """
    if question.question_type == MULTIPLE_CHOICE and question.options and raw.isdigit():
        choice = int(raw)
        if 1 <= choice <= len(question.options):
            return question.options[choice - 1]
    if question.question_type == TRUE_FALSE:
        lowered = raw.lower()
        if lowered in ("t", "true"):
            return "True"
        if lowered in ("f", "false"):
            return "False"
    return raw


class QuizRunner:
    """Walks a fixed list of questions and collects one answer per index."""

    def __init__(self, questions):
        if not questions:
            raise ValueError("A quiz needs at least one question")
        self.questions = tuple(questions)
        self.index = 0
        self.submitted = False
        self._answers: dict[int, str] = {}

    @property
    def current(self) -> QuizQuestion:
        return self.questions[self.index]

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == len(self.questions) - 1

    @property
    def answers(self) -> dict[int, str]:
        return dict(self._answers)

    def next(self) -> None:
        if not self.is_last:
            self.index += 1

    def back(self) -> None:
        if not self.is_first:
            self.index -= 1

    def select_answer(self, answer: str) -> None:
        if self.submitted:
            return
        self._answers[self.index] = answer

    def is_correct(self, index: int) -> bool:
        return answer_matches(self._answers.get(index), self.questions[index].answer)

    @property
    def score(self) -> int:
        return score_answers(self.questions, self._answers)

    def submit(self) -> tuple[int, int, dict[int, str]]:
        self.submitted = True
        return self.score, self.total, self.answers

"""In-memory quiz history and score statistics."""
from learnos.models import QuizResult


def score_label(percentage: float) -> str:
    if percentage >= 80:
        return "GREAT"
    elif percentage >= 50:
        return "FAIR"
    return "NEEDS WORK"


def score_color(percentage: float) -> str:
    if percentage >= 80:
        return "green"
    elif percentage >= 50:
        return "yellow"
    return "red"


class ProgressLog:
    """Most-recent-first list of quiz results, kept for the life of the process."""

    def __init__(self, results=()):
        self._results = tuple(results)

    def record(self, result: QuizResult) -> None:
        self._results = (result,) + self._results

    @property
    def results(self) -> tuple:
        return self._results

    def __len__(self) -> int:
        return len(self._results)

    def average_score(self) -> float | None:
        """Mean percentage across quizzes, or None when nothing has been taken."""
        if not self._results:
            return None
        total = sum(r.percentage for r in self._results)
        return round(total / len(self._results), 1)


def format_average(average: float | None) -> str:
    if average is None:
        return "N/A"
    return f"{average:.0f}%"

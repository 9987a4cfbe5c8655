from learnos.models import QuizResult
from learnos.progress import ProgressLog, format_average, score_color, score_label


def _result(title, score, total=4):
    return QuizResult(study_guide_title=title, score=score, total=total, date="2024-05-01T10:00:00+00:00")


def test_record_prepends():
    log = ProgressLog()
    a, b = _result("A", 1), _result("B", 2)
    log.record(a)
    log.record(b)
    assert log.results == (b, a)
    assert len(log) == 2


def test_average_none_when_empty():
    log = ProgressLog()
    assert log.average_score() is None
    assert format_average(log.average_score()) == "N/A"


def test_average_of_percentages():
    log = ProgressLog([_result("A", 4), _result("B", 2)])
    assert log.average_score() == 75.0
    assert format_average(log.average_score()) == "75%"


def test_average_with_zero_total_result():
    log = ProgressLog([_result("A", 0, total=0)])
    assert log.average_score() == 0.0


def test_score_color():
    assert score_color(85) == "green"
    assert score_color(80) == "green"
    assert score_color(50) == "yellow"
    assert score_color(49.9) == "red"


def test_score_label():
    assert score_label(90) == "GREAT"
    assert score_label(60) == "FAIR"
    assert score_label(10) == "NEEDS WORK"

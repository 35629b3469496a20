from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.quiz.models import LearningItem, ProgressRecord, SessionResult
from src.quiz.stats import accuracy_trends, mastery_by_region, summarize_history


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _result(correct: int, incorrect: int, days_ago: float, best_streak: int = 0) -> SessionResult:
    return SessionResult(
        correct_count=correct,
        incorrect_count=incorrect,
        best_streak=best_streak,
        finished_at=NOW - timedelta(days=days_ago),
    )


def test_summarize_history_totals_and_recent_window() -> None:
    results = [_result(3, 2, index, best_streak=index % 5) for index in range(12)]

    stats = summarize_history(results)

    assert stats.total_sessions == 12
    assert stats.total_correct == 36
    assert stats.total_incorrect == 24
    assert stats.best_streak == 4
    assert len(stats.recent) == 10
    assert stats.recent[0] is results[0]


def test_summarize_empty_history() -> None:
    stats = summarize_history([])

    assert stats.total_sessions == 0
    assert stats.recent == []


def test_accuracy_trends_per_window() -> None:
    results = [_result(8, 2, 1), _result(5, 5, 10), _result(0, 10, 60)]

    trends = accuracy_trends(results, now=NOW)

    assert trends.week == 80
    assert trends.month == 65
    assert trends.all_time == 43


def test_accuracy_trends_without_sessions() -> None:
    trends = accuracy_trends([_result(1, 1, 45)], now=NOW)

    assert trends.week is None
    assert trends.month is None
    assert trends.all_time == 50


def test_mastery_by_region_counts_buckets() -> None:
    items = [
        LearningItem(id="fr", primary_term="Paris", secondary_term="France", region="Europe"),
        LearningItem(id="de", primary_term="Berlin", secondary_term="Germany", region="Europe"),
        LearningItem(id="it", primary_term="Rome", secondary_term="Italy", region="Europe"),
        LearningItem(id="jp", primary_term="Tokyo", secondary_term="Japan", region="Asia"),
    ]
    progress = {
        "fr": ProgressRecord(times_shown=5, correct_count=5, interval=30),
        "de": ProgressRecord(times_shown=3, correct_count=3, interval=15),
        "jp": ProgressRecord(times_shown=1, correct_count=0, incorrect_count=1, interval=1),
    }

    overview = mastery_by_region(items, progress)

    europe = overview["Europe"]
    assert (europe.total, europe.new, europe.learning, europe.review, europe.mastered) == (3, 1, 0, 1, 1)
    assert europe.mastery_percent == 67
    assert overview["Asia"].learning == 1
    assert overview["Asia"].mastery_percent == 0

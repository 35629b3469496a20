"""Aggregated learner statistics built from progress records and session history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from src.quiz.models import Bucket, LearningItem, ProgressRecord, SessionResult


RECENT_SESSIONS = 10


@dataclass(slots=True)
class LearnerStats:
    """Lifetime totals plus the most recent sessions."""

    total_sessions: int = 0
    total_correct: int = 0
    total_incorrect: int = 0
    best_streak: int = 0
    recent: List[SessionResult] = field(default_factory=list)


@dataclass(slots=True)
class AccuracyTrends:
    week: Optional[int]
    month: Optional[int]
    all_time: Optional[int]


@dataclass(slots=True)
class BucketCounts:
    total: int = 0
    new: int = 0
    learning: int = 0
    review: int = 0
    mastered: int = 0

    def add(self, bucket: Bucket) -> None:
        self.total += 1
        setattr(self, bucket.value, getattr(self, bucket.value) + 1)

    @property
    def mastery_percent(self) -> int:
        if not self.total:
            return 0
        return round((self.review + self.mastered) / self.total * 100)


def summarize_history(results: Sequence[SessionResult]) -> LearnerStats:
    """Fold session results (newest first) into lifetime totals."""
    stats = LearnerStats()
    for result in results:
        stats.total_sessions += 1
        stats.total_correct += result.correct_count
        stats.total_incorrect += result.incorrect_count
        stats.best_streak = max(stats.best_streak, result.best_streak)
    stats.recent = list(results[:RECENT_SESSIONS])
    return stats


def _accuracy_percent(results: Iterable[SessionResult]) -> Optional[int]:
    results = list(results)
    if not results:
        return None
    correct = sum(result.correct_count for result in results)
    answered = sum(result.answered for result in results)
    if not answered:
        return 0
    return round(correct / answered * 100)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def accuracy_trends(results: Sequence[SessionResult], now: datetime | None = None) -> AccuracyTrends:
    """Accuracy over the last 7 days, the last 30 days and all time, in percent."""
    if now is None:
        now = datetime.now(timezone.utc)
    now = _aware(now)
    week_start = now - timedelta(days=7)
    month_start = now - timedelta(days=30)

    return AccuracyTrends(
        week=_accuracy_percent(r for r in results if _aware(r.finished_at) >= week_start),
        month=_accuracy_percent(r for r in results if _aware(r.finished_at) >= month_start),
        all_time=_accuracy_percent(results),
    )


def mastery_by_region(
    items: Iterable[LearningItem],
    progress: Mapping[str, ProgressRecord],
) -> Dict[str, BucketCounts]:
    """Count catalog items per bucket for each region."""
    regions: Dict[str, BucketCounts] = {}
    for item in items:
        counts = regions.setdefault(item.region, BucketCounts())
        record = progress.get(item.id)
        counts.add(record.bucket if record is not None else Bucket.NEW)
    return regions

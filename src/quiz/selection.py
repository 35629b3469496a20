"""Question selection for standard, practice and improve sessions."""

from __future__ import annotations

import math
import random
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from src.quiz.models import (
    Bucket,
    LearningItem,
    PresentationMode,
    ProgressRecord,
    SessionQuestion,
)


REVIEW_SHARE = 0.7
URGENCY_EASE_CEILING = 3.0
YOUNG_ITEM_REPETITIONS = 3
YOUNG_ITEM_BOOST = 1.5

_SECONDS_PER_DAY = 24 * 60 * 60

Progress = Mapping[str, ProgressRecord]


def _unique_items(items: Iterable[LearningItem]) -> List[LearningItem]:
    seen: set[str] = set()
    unique: List[LearningItem] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def _as_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def days_overdue(record: ProgressRecord, now: datetime) -> float:
    """Fractional days since the item became due; negative when not yet due."""
    if record.next_review is None:
        return 0.0
    delta = _as_aware(now) - _as_aware(record.next_review)
    return delta.total_seconds() / _SECONDS_PER_DAY


def urgency_score(record: ProgressRecord, now: datetime) -> float:
    """Priority of a review item: overdue items with low ease come first."""
    urgency = max(0.0, days_overdue(record, now)) * (URGENCY_EASE_CEILING - record.ease_factor)
    if record.repetitions < YOUNG_ITEM_REPETITIONS:
        urgency *= YOUNG_ITEM_BOOST
    return urgency


def difficulty_score(record: ProgressRecord) -> float:
    """Lower means harder; callers only pass records that were shown at least once."""
    return record.ease_factor * (record.correct_count / record.times_shown)


def _shuffled(values: Sequence, rng) -> list:
    shuffled = list(values)
    rng.shuffle(shuffled)
    return shuffled


def _to_questions(
    items: Iterable[LearningItem],
    progress: Progress,
    mode: PresentationMode,
) -> List[SessionQuestion]:
    return [SessionQuestion.from_item(item, progress.get(item.id), mode) for item in items]


def select_session_batch(
    items: Iterable[LearningItem],
    progress: Progress,
    count: int,
    mode: PresentationMode,
    *,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> List[SessionQuestion]:
    """Blend the most urgent reviews with newly introduced items.

    Roughly 70% of the batch is drawn from items already seen (most urgent
    first) and the rest from unseen items in random order. When one pool runs
    dry the other fills the gap, unseen items first. The final batch is
    shuffled so presentation order does not reveal priority.
    """
    rng = rng or random
    if now is None:
        now = datetime.now(timezone.utc)
    if count <= 0:
        return []

    review_pool: List[Tuple[LearningItem, float]] = []
    new_pool: List[LearningItem] = []
    for item in _unique_items(items):
        record = progress.get(item.id)
        if record is None or record.bucket is Bucket.NEW:
            new_pool.append(item)
        else:
            review_pool.append((item, urgency_score(record, now)))

    # Shuffle before the stable sort so equal urgencies break ties randomly.
    review_pool = _shuffled(review_pool, rng)
    review_pool.sort(key=lambda entry: entry[1], reverse=True)
    reviews = [item for item, _ in review_pool]
    new_items = _shuffled(new_pool, rng)

    review_take = min(math.ceil(count * REVIEW_SHARE), len(reviews))
    new_take = min(count - review_take, len(new_items))

    shortfall = count - review_take - new_take
    if shortfall > 0:
        extra_new = min(shortfall, len(new_items) - new_take)
        new_take += extra_new
        shortfall -= extra_new
    if shortfall > 0:
        review_take += min(shortfall, len(reviews) - review_take)

    selected = reviews[:review_take] + new_items[:new_take]
    return _to_questions(_shuffled(selected, rng), progress, mode)


def select_practice_batch(
    items: Iterable[LearningItem],
    progress: Progress,
    count: int,
    mode: PresentationMode,
    *,
    rng: Optional[random.Random] = None,
) -> List[SessionQuestion]:
    """Pick the attempted items with the lowest ease-weighted accuracy."""
    rng = rng or random
    if count <= 0:
        return []

    attempted = [
        (item, progress[item.id])
        for item in _unique_items(items)
        if item.id in progress and progress[item.id].times_shown > 0
    ]
    attempted.sort(key=lambda entry: difficulty_score(entry[1]))
    selected = [item for item, _ in attempted[:count]]
    return _to_questions(_shuffled(selected, rng), progress, mode)


def select_improve_batch(
    items: Iterable[LearningItem],
    progress: Progress,
    count: int,
    mode: PresentationMode,
    *,
    rng: Optional[random.Random] = None,
) -> List[SessionQuestion]:
    """Pick the items missed most often, then by highest miss rate."""
    rng = rng or random
    if count <= 0:
        return []

    missed = [
        (item, progress[item.id])
        for item in _unique_items(items)
        if item.id in progress and progress[item.id].incorrect_count > 0
    ]
    missed.sort(
        key=lambda entry: (
            entry[1].incorrect_count,
            entry[1].incorrect_count / entry[1].times_shown if entry[1].times_shown else 1.0,
        ),
        reverse=True,
    )
    selected = [item for item, _ in missed[:count]]
    return _to_questions(_shuffled(selected, rng), progress, mode)

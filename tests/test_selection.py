from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Dict, List

import pytest

from src.quiz.models import Bucket, LearningItem, PresentationMode, ProgressRecord
from src.quiz.selection import (
    select_improve_batch,
    select_practice_batch,
    select_session_batch,
    urgency_score,
)


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _items(prefix: str, count: int, region: str = "Europe") -> List[LearningItem]:
    return [
        LearningItem(
            id=f"{prefix}{index}",
            primary_term=f"Capital {prefix}{index}",
            secondary_term=f"Country {prefix}{index}",
            region=region,
        )
        for index in range(count)
    ]


def _seen(days_overdue: float = 0.0, **overrides) -> ProgressRecord:
    values = dict(
        times_shown=2,
        correct_count=1,
        incorrect_count=1,
        interval=1,
        repetitions=1,
        last_shown=NOW - timedelta(days=2),
        next_review=NOW - timedelta(days=days_overdue),
    )
    values.update(overrides)
    return ProgressRecord(**values)


def test_session_batch_mixes_reviews_and_new_items() -> None:
    reviewed = _items("r", 10)
    fresh = _items("n", 10)
    progress = {item.id: _seen(1.0) for item in reviewed}

    batch = select_session_batch(
        reviewed + fresh, progress, 10, PresentationMode.FORWARD, now=NOW, rng=random.Random(3)
    )

    ids = [question.item_id for question in batch]
    assert len(ids) == 10
    assert len(set(ids)) == 10
    assert sum(1 for item_id in ids if item_id.startswith("r")) == 7
    assert sum(1 for item_id in ids if item_id.startswith("n")) == 3


def test_session_batch_prefers_most_urgent_reviews() -> None:
    reviewed = _items("r", 8)
    fresh = _items("n", 5)
    progress: Dict[str, ProgressRecord] = {item.id: _seen(-3.0) for item in reviewed}
    overdue = {"r1", "r4", "r6"}
    for item_id in overdue:
        progress[item_id] = _seen(5.0, ease_factor=1.8)

    batch = select_session_batch(
        reviewed + fresh, progress, 4, PresentationMode.FORWARD, now=NOW, rng=random.Random(11)
    )

    review_ids = {question.item_id for question in batch if question.item_id.startswith("r")}
    assert review_ids == overdue
    assert len(batch) == 4


def test_session_batch_tops_up_from_new_items_when_reviews_run_out() -> None:
    reviewed = _items("r", 2)
    fresh = _items("n", 10)
    progress = {item.id: _seen(1.0) for item in reviewed}

    batch = select_session_batch(
        reviewed + fresh, progress, 10, PresentationMode.FORWARD, now=NOW, rng=random.Random(5)
    )

    ids = {question.item_id for question in batch}
    assert len(batch) == 10
    assert {"r0", "r1"} <= ids


def test_session_batch_tops_up_from_reviews_when_nothing_is_new() -> None:
    reviewed = _items("r", 12)
    progress = {item.id: _seen(1.0) for item in reviewed}

    batch = select_session_batch(reviewed, progress, 10, PresentationMode.FORWARD, now=NOW, rng=random.Random(5))

    assert len(batch) == 10


def test_session_batch_never_exceeds_count_or_repeats_items() -> None:
    items = _items("x", 3)
    duplicated = items + items

    batch = select_session_batch(duplicated, {}, 10, PresentationMode.FORWARD, now=NOW, rng=random.Random(1))
    assert sorted(question.item_id for question in batch) == ["x0", "x1", "x2"]

    assert select_session_batch(items, {}, 0, PresentationMode.FORWARD, now=NOW) == []


def test_session_batch_is_deterministic_with_a_seeded_rng() -> None:
    items = _items("x", 20)
    progress = {item.id: _seen(float(index % 4)) for index, item in enumerate(items[:12])}

    first = select_session_batch(items, progress, 8, PresentationMode.FORWARD, now=NOW, rng=random.Random(42))
    second = select_session_batch(items, progress, 8, PresentationMode.FORWARD, now=NOW, rng=random.Random(42))

    assert [question.item_id for question in first] == [question.item_id for question in second]


def test_questions_share_the_batch_mode_and_snapshot_bucket() -> None:
    items = _items("x", 2)
    progress = {"x0": _seen(1.0, interval=10)}

    forward = select_session_batch(items, progress, 2, PresentationMode.FORWARD, now=NOW, rng=random.Random(2))
    reverse = select_session_batch(items, progress, 2, PresentationMode.REVERSE, now=NOW, rng=random.Random(2))

    by_id = {question.item_id: question for question in forward}
    assert {question.mode for question in forward} == {PresentationMode.FORWARD}
    assert by_id["x0"].prompt == "Country x0"
    assert by_id["x0"].accepted_answers == ("Capital x0",)
    assert by_id["x0"].bucket is Bucket.REVIEW
    assert by_id["x1"].bucket is Bucket.NEW

    reverse_by_id = {question.item_id: question for question in reverse}
    assert {question.mode for question in reverse} == {PresentationMode.REVERSE}
    assert reverse_by_id["x1"].prompt == "Capital x1"
    assert reverse_by_id["x1"].accepted_answers == ("Country x1",)


def test_urgency_score() -> None:
    young = _seen(2.0, ease_factor=2.5, repetitions=1)
    settled = _seen(2.0, ease_factor=2.5, repetitions=3)
    not_due = _seen(-1.0, ease_factor=1.3, repetitions=0)

    assert urgency_score(young, NOW) == pytest.approx(1.5)
    assert urgency_score(settled, NOW) == pytest.approx(1.0)
    assert urgency_score(not_due, NOW) == 0.0


def test_practice_batch_excludes_unseen_items() -> None:
    items = _items("x", 5)
    progress = {
        "x1": _seen(times_shown=3, correct_count=1),
        "x3": _seen(times_shown=4, correct_count=4),
        "x4": ProgressRecord(),
    }

    batch = select_practice_batch(items, progress, 10, PresentationMode.FORWARD, rng=random.Random(0))

    assert {question.item_id for question in batch} == {"x1", "x3"}


def test_practice_batch_picks_lowest_difficulty_scores() -> None:
    items = _items("x", 4)
    progress = {
        "x0": _seen(times_shown=4, correct_count=4, ease_factor=2.5),
        "x1": _seen(times_shown=4, correct_count=1, ease_factor=2.5),
        "x2": _seen(times_shown=4, correct_count=2, ease_factor=1.3),
        "x3": _seen(times_shown=4, correct_count=3, ease_factor=2.5),
    }

    batch = select_practice_batch(items, progress, 2, PresentationMode.REVERSE, rng=random.Random(0))

    assert {question.item_id for question in batch} == {"x1", "x2"}
    assert {question.mode for question in batch} == {PresentationMode.REVERSE}


def test_practice_batch_is_empty_without_history() -> None:
    assert select_practice_batch(_items("x", 3), {}, 10, PresentationMode.FORWARD) == []


def test_improve_batch_orders_by_misses_then_miss_rate() -> None:
    items = _items("x", 5)
    progress = {
        "x0": _seen(times_shown=10, correct_count=5, incorrect_count=5),
        "x1": _seen(times_shown=6, correct_count=1, incorrect_count=5),
        "x2": _seen(times_shown=1, correct_count=0, incorrect_count=1),
        "x3": _seen(times_shown=3, correct_count=0, incorrect_count=3),
        "x4": _seen(times_shown=3, correct_count=3, incorrect_count=0),
    }

    top_two = select_improve_batch(items, progress, 2, PresentationMode.FORWARD, rng=random.Random(0))
    top_three = select_improve_batch(items, progress, 3, PresentationMode.FORWARD, rng=random.Random(0))
    everything = select_improve_batch(items, progress, 10, PresentationMode.FORWARD, rng=random.Random(0))

    assert {question.item_id for question in top_two} == {"x0", "x1"}
    assert {question.item_id for question in top_three} == {"x0", "x1", "x3"}
    assert "x4" not in {question.item_id for question in everything}
    assert len(everything) == 4


def test_improve_batch_is_empty_without_mistakes() -> None:
    items = _items("x", 2)
    progress = {"x0": _seen(times_shown=2, correct_count=2, incorrect_count=0)}

    assert select_improve_batch(items, progress, 10, PresentationMode.FORWARD) == []

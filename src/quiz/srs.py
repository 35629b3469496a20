"""Spaced-repetition scheduling for quiz items."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

from src.quiz.models import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR, ProgressRecord


# Answers are only marked right or wrong, so every correct answer counts as a
# "good recall" on the SM-2 0-5 quality scale.
CORRECT_QUALITY = 4
FAILURE_EASE_PENALTY = 0.2


def _ease_adjustment(quality: int) -> float:
    return 0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02)


def record_outcome(
    record: Optional[ProgressRecord],
    is_correct: bool,
    *,
    now: datetime | None = None,
) -> ProgressRecord:
    """Return the item's progress after one more answer, using a simplified SM-2 algorithm.

    The input record is left untouched. A missing record is treated as an
    item that has never been shown.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if record is None:
        record = ProgressRecord()

    easiness_factor = record.ease_factor or DEFAULT_EASE_FACTOR
    repetitions = record.repetitions or 0
    interval = record.interval or 1

    if is_correct:
        if repetitions == 0:
            interval = 1
        elif repetitions == 1:
            interval = 6
        else:
            interval = round(interval * easiness_factor)
        repetitions += 1
        easiness_factor += _ease_adjustment(CORRECT_QUALITY)
    else:
        # A miss is a flat penalty, not the quality formula.
        repetitions = 0
        interval = 1
        easiness_factor -= FAILURE_EASE_PENALTY

    easiness_factor = max(MIN_EASE_FACTOR, easiness_factor)

    return replace(
        record,
        times_shown=record.times_shown + 1,
        correct_count=record.correct_count + (1 if is_correct else 0),
        incorrect_count=record.incorrect_count + (0 if is_correct else 1),
        ease_factor=easiness_factor,
        interval=interval,
        repetitions=repetitions,
        last_shown=now,
        next_review=now + timedelta(days=interval),
    )

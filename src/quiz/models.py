"""Domain types shared by the quiz engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3

# Interval thresholds (days) separating the mastery buckets.
LEARNING_THRESHOLD_DAYS = 7
REVIEW_THRESHOLD_DAYS = 21

# Pseudo-region that covers the whole catalog.
WORLD_REGION = "World"


class Bucket(str, Enum):
    """Coarse mastery classification derived from the review interval."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    MASTERED = "mastered"


class PresentationMode(str, Enum):
    """Which term is shown as the prompt and which one is expected back."""

    FORWARD = "forward"
    REVERSE = "reverse"


class SessionKind(str, Enum):
    STANDARD = "standard"
    PRACTICE = "practice"
    IMPROVE = "improve"


def bucket_for(times_shown: int, interval: int) -> Bucket:
    """Classify an item from how often it was shown and its current interval."""
    if not times_shown:
        return Bucket.NEW

    interval = interval or 1
    if interval < LEARNING_THRESHOLD_DAYS:
        return Bucket.LEARNING
    if interval < REVIEW_THRESHOLD_DAYS:
        return Bucket.REVIEW
    return Bucket.MASTERED


@dataclass(frozen=True, slots=True)
class LearningItem:
    """Static catalog entry; the primary term is the capital, the secondary the country."""

    id: str
    primary_term: str
    secondary_term: str
    region: str
    primary_alternatives: Tuple[str, ...] = ()
    secondary_alternatives: Tuple[str, ...] = ()
    has_multiple_valid_primaries: bool = False

    @property
    def primary_answers(self) -> Tuple[str, ...]:
        return (self.primary_term, *self.primary_alternatives)

    @property
    def secondary_answers(self) -> Tuple[str, ...]:
        return (self.secondary_term, *self.secondary_alternatives)


@dataclass(slots=True)
class ProgressRecord:
    """Per-item learning history and SM-2 scheduling state."""

    times_shown: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 1
    repetitions: int = 0
    last_shown: Optional[datetime] = None
    next_review: Optional[datetime] = None

    @property
    def bucket(self) -> Bucket:
        return bucket_for(self.times_shown, self.interval)

    @property
    def accuracy(self) -> float:
        if not self.times_shown:
            return 0.0
        return self.correct_count / self.times_shown


@dataclass(slots=True)
class SessionQuestion:
    """Display-ready projection of a catalog item for one quiz session."""

    item_id: str
    mode: PresentationMode
    prompt: str
    accepted_answers: Tuple[str, ...]
    region: str
    has_multiple_valid_primaries: bool
    bucket: Bucket

    @classmethod
    def from_item(
        cls,
        item: LearningItem,
        record: Optional[ProgressRecord],
        mode: PresentationMode,
    ) -> "SessionQuestion":
        if mode is PresentationMode.FORWARD:
            prompt = item.secondary_term
            answers = item.primary_answers
        else:
            prompt = item.primary_term
            answers = item.secondary_answers
        bucket = record.bucket if record is not None else Bucket.NEW
        return cls(
            item_id=item.id,
            mode=mode,
            prompt=prompt,
            accepted_answers=answers,
            region=item.region,
            has_multiple_valid_primaries=item.has_multiple_valid_primaries,
            bucket=bucket,
        )

    @property
    def expected_answer(self) -> str:
        return self.accepted_answers[0]


@dataclass(slots=True)
class SessionResult:
    """Summary of a finished quiz session."""

    correct_count: int
    incorrect_count: int
    best_streak: int
    finished_at: datetime
    hints_used: int = 0
    kind: SessionKind = SessionKind.STANDARD

    @property
    def answered(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def accuracy(self) -> float:
        if not self.answered:
            return 0.0
        return self.correct_count / self.answered


@dataclass(slots=True)
class AnswerRecord:
    """One submitted answer inside a running session."""

    question: SessionQuestion
    user_answer: str
    is_correct: bool
    hints_used: int = 0
    streak_at_time: int = 0
    answered_at: Optional[datetime] = None
    matched_answer: Optional[str] = None


@dataclass(slots=True, frozen=True)
class QuizPreferences:
    """Region and mode of the last standard session the learner started."""

    region: str = WORLD_REGION
    mode: PresentationMode = PresentationMode.FORWARD

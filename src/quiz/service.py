"""Quiz sessions: question selection, answer checking and progress bookkeeping."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from src.quiz.catalog import WORLD_REGION, available_regions, items_for_region
from src.quiz.hints import hint_score_multiplier
from src.quiz.matching import AnswerMatch, match_answer
from src.quiz.models import (
    AnswerRecord,
    LearningItem,
    PresentationMode,
    ProgressRecord,
    QuizPreferences,
    SessionKind,
    SessionQuestion,
    SessionResult,
)
from src.quiz.selection import (
    select_improve_batch,
    select_practice_batch,
    select_session_batch,
)
from src.quiz.srs import record_outcome
from src.quiz.stats import BucketCounts, LearnerStats, mastery_by_region, summarize_history
from src.quiz.store import PreferenceStore, ProgressStore, SessionHistoryStore


LOGGER = logging.getLogger(__name__)

DEFAULT_SESSION_SIZE = 10


@dataclass(slots=True)
class QuizSession:
    """State of one running quiz: the batch of questions and the answers so far."""

    kind: SessionKind
    mode: PresentationMode
    region: str
    questions: List[SessionQuestion]
    answers: List[AnswerRecord] = field(default_factory=list)
    current_streak: int = 0
    best_streak: int = 0

    @property
    def current_index(self) -> int:
        return len(self.answers)

    @property
    def current_question(self) -> Optional[SessionQuestion]:
        if self.is_finished:
            return None
        return self.questions[self.current_index]

    @property
    def is_finished(self) -> bool:
        return self.current_index >= len(self.questions)

    @property
    def correct_count(self) -> int:
        return sum(1 for answer in self.answers if answer.is_correct)

    @property
    def incorrect_count(self) -> int:
        return len(self.answers) - self.correct_count

    @property
    def hints_used(self) -> int:
        return sum(answer.hints_used for answer in self.answers)


@dataclass(slots=True)
class AnswerOutcome:
    """What happened when an answer was submitted."""

    is_correct: bool
    expected_answer: str
    record: ProgressRecord
    score: float
    match: Optional[AnswerMatch] = None
    session_result: Optional[SessionResult] = None


class QuizService:
    """Coordinates the catalog, the selector, the scheduler and the storage collaborators."""

    def __init__(
        self,
        catalog: Sequence[LearningItem],
        progress_store: ProgressStore,
        history_store: Optional[SessionHistoryStore] = None,
        *,
        preference_store: Optional[PreferenceStore] = None,
        session_size: int = DEFAULT_SESSION_SIZE,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._catalog = list(catalog)
        self._catalog_ids = {item.id for item in self._catalog}
        self._progress_store = progress_store
        self._history_store = history_store
        self._preference_store = preference_store
        self._session_size = session_size
        self._rng = rng or random.Random()

    @property
    def catalog(self) -> List[LearningItem]:
        return list(self._catalog)

    @property
    def regions(self) -> List[str]:
        return available_regions(self._catalog)

    async def start_session(
        self,
        region: str = WORLD_REGION,
        mode: PresentationMode = PresentationMode.FORWARD,
        kind: SessionKind = SessionKind.STANDARD,
        *,
        now: Optional[datetime] = None,
    ) -> Optional[QuizSession]:
        """Build a new session, or return ``None`` when the mode has nothing to offer."""
        progress = await self._progress_store.get()

        if kind is SessionKind.STANDARD:
            pool = items_for_region(self._catalog, region)
            questions = select_session_batch(
                pool, progress, self._session_size, mode, now=now, rng=self._rng
            )
            if self._preference_store is not None:
                await self._preference_store.set(QuizPreferences(region=region, mode=mode))
        elif kind is SessionKind.PRACTICE:
            questions = select_practice_batch(
                self._catalog, progress, self._session_size, mode, rng=self._rng
            )
        else:
            questions = select_improve_batch(
                self._catalog, progress, self._session_size, mode, rng=self._rng
            )

        if not questions:
            LOGGER.info("No questions available for a %s session in %s.", kind.value, region)
            return None

        LOGGER.debug(
            "Starting %s session in %s with %d questions (%s).",
            kind.value,
            region,
            len(questions),
            mode.value,
        )
        return QuizSession(kind=kind, mode=mode, region=region, questions=questions)

    async def record_outcome(
        self,
        item_id: str,
        is_correct: bool,
        *,
        now: Optional[datetime] = None,
    ) -> ProgressRecord:
        """Apply one answer outcome to the stored progress of ``item_id``."""
        if item_id not in self._catalog_ids:
            LOGGER.warning("Recording an outcome for unknown item %s.", item_id)

        progress = await self._progress_store.get()
        updated = record_outcome(progress.get(item_id), is_correct, now=now)
        progress[item_id] = updated
        await self._progress_store.set(progress)

        LOGGER.debug(
            "Item %s answered %s: interval=%d ease=%.2f bucket=%s.",
            item_id,
            "correctly" if is_correct else "incorrectly",
            updated.interval,
            updated.ease_factor,
            updated.bucket.value,
        )
        return updated

    async def submit_answer(
        self,
        session: QuizSession,
        user_answer: str,
        *,
        hints_used: int = 0,
        now: Optional[datetime] = None,
    ) -> AnswerOutcome:
        """Check the answer to the current question and advance the session."""
        question = session.current_question
        if question is None:
            raise RuntimeError("The quiz session is already finished.")
        if now is None:
            now = datetime.now(timezone.utc)
        hints_used = max(0, hints_used)

        match = match_answer(user_answer, question.accepted_answers)
        is_correct = match is not None

        if is_correct:
            session.current_streak += 1
            session.best_streak = max(session.best_streak, session.current_streak)
        else:
            session.current_streak = 0

        session.answers.append(
            AnswerRecord(
                question=question,
                user_answer=user_answer,
                is_correct=is_correct,
                hints_used=hints_used,
                streak_at_time=session.current_streak,
                answered_at=now,
                matched_answer=match.accepted_answer if match else None,
            )
        )

        record = await self.record_outcome(question.item_id, is_correct, now=now)

        session_result: Optional[SessionResult] = None
        if session.is_finished:
            session_result = await self._finish_session(session, now)

        return AnswerOutcome(
            is_correct=is_correct,
            expected_answer=question.expected_answer,
            record=record,
            score=hint_score_multiplier(hints_used) if is_correct else 0.0,
            match=match,
            session_result=session_result,
        )

    async def _finish_session(self, session: QuizSession, now: datetime) -> SessionResult:
        result = SessionResult(
            correct_count=session.correct_count,
            incorrect_count=session.incorrect_count,
            best_streak=session.best_streak,
            finished_at=now,
            hints_used=session.hints_used,
            kind=session.kind,
        )
        if self._history_store is not None:
            await self._history_store.append(result)
        LOGGER.info(
            "Finished %s session: %d/%d correct, best streak %d.",
            session.kind.value,
            result.correct_count,
            result.answered,
            result.best_streak,
        )
        return result

    async def reset_progress(self) -> None:
        """Wipe every stored progress record."""
        await self._progress_store.set({})
        LOGGER.info("Progress has been reset.")

    async def last_preferences(self) -> QuizPreferences:
        """Region and mode of the last standard session, limited to regions still in the catalog."""
        if self._preference_store is None:
            return QuizPreferences()
        preferences = await self._preference_store.get()
        if preferences.region not in self.regions:
            LOGGER.info("Stored region %s is no longer available.", preferences.region)
            return QuizPreferences(mode=preferences.mode)
        return preferences

    async def learner_stats(self) -> LearnerStats:
        if self._history_store is None:
            return LearnerStats()
        return summarize_history(await self._history_store.list_results())

    async def mastery_overview(self) -> Dict[str, BucketCounts]:
        progress = await self._progress_store.get()
        return mastery_by_region(self._catalog, progress)

"""Storage collaborators used by the quiz service."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Protocol

from src.quiz.models import ProgressRecord, QuizPreferences, SessionResult


class ProgressStore(Protocol):
    """Durable per-item progress keyed by catalog id."""

    async def get(self) -> Dict[str, ProgressRecord]:
        ...

    async def set(self, records: Mapping[str, ProgressRecord]) -> None:
        ...


class SessionHistoryStore(Protocol):
    """Finished session summaries, newest first."""

    async def append(self, result: SessionResult) -> None:
        ...

    async def list_results(self, limit: Optional[int] = None) -> List[SessionResult]:
        ...


class PreferenceStore(Protocol):
    """Region and mode of the last standard session."""

    async def get(self) -> QuizPreferences:
        ...

    async def set(self, preferences: QuizPreferences) -> None:
        ...


def _copy_records(records: Mapping[str, ProgressRecord]) -> Dict[str, ProgressRecord]:
    return {item_id: replace(record) for item_id, record in records.items()}


class InMemoryProgressStore:
    """Process-local store; hands out copies so callers cannot mutate it by accident."""

    def __init__(self, records: Optional[Mapping[str, ProgressRecord]] = None) -> None:
        self._records: Dict[str, ProgressRecord] = _copy_records(records or {})

    async def get(self) -> Dict[str, ProgressRecord]:
        return _copy_records(self._records)

    async def set(self, records: Mapping[str, ProgressRecord]) -> None:
        self._records = _copy_records(records)


class InMemorySessionHistory:
    def __init__(self) -> None:
        self._results: List[SessionResult] = []

    async def append(self, result: SessionResult) -> None:
        self._results.insert(0, replace(result))

    async def list_results(self, limit: Optional[int] = None) -> List[SessionResult]:
        results = self._results if limit is None else self._results[:limit]
        return [replace(result) for result in results]


class InMemoryPreferenceStore:
    def __init__(self, preferences: Optional[QuizPreferences] = None) -> None:
        self._preferences = preferences or QuizPreferences()

    async def get(self) -> QuizPreferences:
        return self._preferences

    async def set(self, preferences: QuizPreferences) -> None:
        self._preferences = preferences

"""Persistence of per-item learning progress."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.quiz.models import ProgressRecord

from . import ProgressEntry


LOGGER = logging.getLogger(__name__)


def _ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops timezone information; stored values are always UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _to_record(entry: ProgressEntry) -> ProgressRecord:
    return ProgressRecord(
        times_shown=entry.times_shown,
        correct_count=entry.correct_count,
        incorrect_count=entry.incorrect_count,
        ease_factor=entry.ease_factor,
        interval=entry.interval,
        repetitions=entry.repetitions,
        last_shown=_ensure_utc(entry.last_shown),
        next_review=_ensure_utc(entry.next_review),
    )


def _apply_record(entry: ProgressEntry, record: ProgressRecord) -> None:
    entry.times_shown = record.times_shown
    entry.correct_count = record.correct_count
    entry.incorrect_count = record.incorrect_count
    entry.ease_factor = record.ease_factor
    entry.interval = record.interval
    entry.repetitions = record.repetitions
    entry.last_shown = record.last_shown
    entry.next_review = record.next_review


async def load_progress_records(session: AsyncSession, learner_id: str) -> Dict[str, ProgressRecord]:
    """Return every stored progress record of a learner keyed by item id."""
    stmt = select(ProgressEntry).where(ProgressEntry.learner_id == learner_id)
    result = await session.execute(stmt)
    return {entry.item_id: _to_record(entry) for entry in result.scalars()}


async def replace_progress_records(
    session: AsyncSession,
    learner_id: str,
    records: Mapping[str, ProgressRecord],
    now: Optional[datetime] = None,
    *,
    prune: bool = True,
) -> None:
    """Make the stored progress of a learner equal to ``records``.

    With ``prune=False`` the given records are upserted and rows missing from
    ``records`` are kept.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    stmt = select(ProgressEntry).where(ProgressEntry.learner_id == learner_id)
    result = await session.execute(stmt)
    existing = {entry.item_id: entry for entry in result.scalars()}

    for item_id, record in records.items():
        entry = existing.pop(item_id, None)
        if entry is None:
            entry = ProgressEntry(learner_id=learner_id, item_id=item_id, created_at=now)
            session.add(entry)
        _apply_record(entry, record)
        entry.updated_at = now

    if prune:
        for stale in existing.values():
            await session.delete(stale)

    await session.flush()


async def clear_learner_progress(session: AsyncSession, learner_id: str) -> None:
    """Bulk-delete all progress of a learner."""
    stmt = (
        delete(ProgressEntry)
        .where(ProgressEntry.learner_id == learner_id)
        .execution_options(synchronize_session=False)
    )
    await session.execute(stmt)


class SqlProgressStore:
    """Progress store backed by the ``progress_records`` table.

    Database errors are logged and swallowed: reads fall back to the last
    snapshot that loaded successfully and failed writes leave the stored data
    unchanged. Until a read has succeeded the snapshot may be incomplete, so
    writes only upsert and never delete rows.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], learner_id: str) -> None:
        self._session_factory = session_factory
        self._learner_id = learner_id
        self._last_snapshot: Dict[str, ProgressRecord] = {}
        self._snapshot_valid = False

    async def get(self) -> Dict[str, ProgressRecord]:
        try:
            async with self._session_factory() as session:
                records = await load_progress_records(session, self._learner_id)
        except SQLAlchemyError:
            LOGGER.exception("Failed to load progress for learner %s.", self._learner_id)
            self._snapshot_valid = False
            return dict(self._last_snapshot)

        self._last_snapshot = records
        self._snapshot_valid = True
        return dict(records)

    async def set(self, records: Mapping[str, ProgressRecord]) -> None:
        prune = self._snapshot_valid
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    if not records:
                        await clear_learner_progress(session, self._learner_id)
                    else:
                        await replace_progress_records(session, self._learner_id, records, prune=prune)
        except SQLAlchemyError:
            LOGGER.exception("Failed to save progress for learner %s.", self._learner_id)
            return

        if not records:
            self._last_snapshot = {}
            self._snapshot_valid = True
        elif prune:
            self._last_snapshot = dict(records)
        else:
            LOGGER.debug(
                "Progress for learner %s was upserted without a complete snapshot.",
                self._learner_id,
            )
            self._last_snapshot.update(records)

"""Persistence of finished quiz session summaries."""

from __future__ import annotations

import logging
from datetime import timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.quiz.models import SessionKind, SessionResult

from . import SessionResultEntry


LOGGER = logging.getLogger(__name__)


def _to_result(entry: SessionResultEntry) -> SessionResult:
    finished_at = entry.finished_at
    if finished_at.tzinfo is None:
        finished_at = finished_at.replace(tzinfo=timezone.utc)
    return SessionResult(
        correct_count=entry.correct_count,
        incorrect_count=entry.incorrect_count,
        best_streak=entry.best_streak,
        finished_at=finished_at,
        hints_used=entry.hints_used,
        kind=SessionKind(entry.kind),
    )


async def add_session_result(session: AsyncSession, learner_id: str, result: SessionResult) -> None:
    session.add(
        SessionResultEntry(
            learner_id=learner_id,
            kind=result.kind.value,
            correct_count=result.correct_count,
            incorrect_count=result.incorrect_count,
            best_streak=result.best_streak,
            hints_used=result.hints_used,
            finished_at=result.finished_at,
        )
    )
    await session.flush()


async def list_session_results(
    session: AsyncSession,
    learner_id: str,
    limit: Optional[int] = None,
) -> List[SessionResult]:
    """Return a learner's session results, newest first."""
    stmt = (
        select(SessionResultEntry)
        .where(SessionResultEntry.learner_id == learner_id)
        .order_by(SessionResultEntry.finished_at.desc(), SessionResultEntry.id.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return [_to_result(entry) for entry in result.scalars()]


class SqlSessionHistory:
    """Session history backed by the ``session_results`` table; errors are logged, not raised."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], learner_id: str) -> None:
        self._session_factory = session_factory
        self._learner_id = learner_id

    async def append(self, result: SessionResult) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await add_session_result(session, self._learner_id, result)
        except SQLAlchemyError:
            LOGGER.exception("Failed to save a session result for learner %s.", self._learner_id)

    async def list_results(self, limit: Optional[int] = None) -> List[SessionResult]:
        try:
            async with self._session_factory() as session:
                return await list_session_results(session, self._learner_id, limit)
        except SQLAlchemyError:
            LOGGER.exception("Failed to load session history for learner %s.", self._learner_id)
            return []

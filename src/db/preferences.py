"""Persistence of the learner's last-used region and mode."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.quiz.models import PresentationMode, QuizPreferences

from . import LearnerPreferenceEntry


LOGGER = logging.getLogger(__name__)


async def load_preferences(session: AsyncSession, learner_id: str) -> QuizPreferences:
    """Return the stored preferences of a learner, or the defaults."""
    entry = await session.get(LearnerPreferenceEntry, learner_id)
    if entry is None:
        return QuizPreferences()
    try:
        mode = PresentationMode(entry.last_mode)
    except ValueError:
        LOGGER.warning("Ignoring unknown stored mode %r for learner %s.", entry.last_mode, learner_id)
        mode = PresentationMode.FORWARD
    return QuizPreferences(region=entry.last_region, mode=mode)


async def save_preferences(session: AsyncSession, learner_id: str, preferences: QuizPreferences) -> None:
    entry = await session.get(LearnerPreferenceEntry, learner_id)
    if entry is None:
        entry = LearnerPreferenceEntry(learner_id=learner_id)
        session.add(entry)
    entry.last_region = preferences.region
    entry.last_mode = preferences.mode.value
    await session.flush()


class SqlPreferenceStore:
    """Preferences backed by the ``learner_preferences`` table; errors are logged, not raised."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], learner_id: str) -> None:
        self._session_factory = session_factory
        self._learner_id = learner_id

    async def get(self) -> QuizPreferences:
        try:
            async with self._session_factory() as session:
                return await load_preferences(session, self._learner_id)
        except SQLAlchemyError:
            LOGGER.exception("Failed to load preferences for learner %s.", self._learner_id)
            return QuizPreferences()

    async def set(self, preferences: QuizPreferences) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await save_preferences(session, self._learner_id, preferences)
        except SQLAlchemyError:
            LOGGER.exception("Failed to save preferences for learner %s.", self._learner_id)

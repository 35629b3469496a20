from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from src.db import LearnerPreferenceEntry
from src.db.preferences import SqlPreferenceStore
from src.quiz.models import PresentationMode, QuizPreferences


@pytest.mark.asyncio
async def test_preferences_default_until_saved(session_factory) -> None:
    store = SqlPreferenceStore(session_factory, "anna")

    assert await store.get() == QuizPreferences()

    await store.set(QuizPreferences("Europe", PresentationMode.REVERSE))
    await store.set(QuizPreferences("Asia", PresentationMode.REVERSE))

    assert await store.get() == QuizPreferences("Asia", PresentationMode.REVERSE)
    assert await SqlPreferenceStore(session_factory, "nikos").get() == QuizPreferences()


@pytest.mark.asyncio
async def test_unknown_stored_mode_falls_back_to_forward(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            session.add(LearnerPreferenceEntry(learner_id="anna", last_region="Europe", last_mode="sideways"))

    assert await SqlPreferenceStore(session_factory, "anna").get() == QuizPreferences("Europe")


@pytest.mark.asyncio
async def test_preference_store_swallows_database_errors() -> None:
    def broken_factory():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    store = SqlPreferenceStore(broken_factory, "anna")

    await store.set(QuizPreferences("Asia"))
    assert await store.get() == QuizPreferences()

"""Bootstrap logic for wiring the quiz engine to its collaborators."""

from __future__ import annotations

import logging
import random
from typing import Optional

from src.app.settings import AppSettings
from src.db import get_session_factory, run_migrations_if_needed
from src.db.history import SqlSessionHistory
from src.db.preferences import SqlPreferenceStore
from src.db.progress import SqlProgressStore
from src.quiz.catalog import load_catalog
from src.quiz.service import QuizService
from src.quiz.store import InMemoryPreferenceStore, InMemoryProgressStore, InMemorySessionHistory


LOGGER = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


def build_quiz_service(settings: AppSettings, *, rng: Optional[random.Random] = None) -> QuizService:
    """Create a quiz service backed by the configured stores.

    Migrations run synchronously here, so call this before entering an
    event loop.
    """
    _configure_logging(settings.log_level)
    LOGGER.info("%s is starting in %s mode.", settings.app_name, settings.app_env)

    catalog = load_catalog(settings.catalog_path)

    if settings.store_backend == "sql":
        try:
            run_migrations_if_needed()
        except Exception:
            LOGGER.exception("Database migrations failed. Aborting startup.")
            raise
        session_factory = get_session_factory()
        progress_store = SqlProgressStore(session_factory, settings.learner_id)
        history_store = SqlSessionHistory(session_factory, settings.learner_id)
        preference_store = SqlPreferenceStore(session_factory, settings.learner_id)
    else:
        LOGGER.warning("Using in-memory storage; progress will be lost on exit.")
        progress_store = InMemoryProgressStore()
        history_store = InMemorySessionHistory()
        preference_store = InMemoryPreferenceStore()

    return QuizService(
        catalog,
        progress_store,
        history_store,
        preference_store=preference_store,
        session_size=settings.session_size,
        rng=rng,
    )

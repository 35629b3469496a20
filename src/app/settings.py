"""Configuration helpers for the Capital Quiz engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from src.quiz.catalog import DEFAULT_CATALOG_PATH


DEFAULT_SESSION_SIZE = 10
MAX_SESSION_SIZE = 50
STORE_BACKENDS = ("sql", "memory")


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    catalog_path: Path
    session_size: int
    store_backend: str
    learner_id: str

    @classmethod
    def from_env(cls) -> AppSettings:
        """Construct settings directly from environment variables."""
        app_name = os.getenv("APP_NAME", "Capital Quiz")
        app_env = os.getenv("APP_ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        catalog_path = Path(os.getenv("QUIZ_CATALOG_PATH", str(DEFAULT_CATALOG_PATH)))

        try:
            session_size = int(os.getenv("QUIZ_SESSION_SIZE", str(DEFAULT_SESSION_SIZE)))
        except ValueError as exc:
            raise RuntimeError("QUIZ_SESSION_SIZE must be an integer.") from exc
        if session_size < 1 or session_size > MAX_SESSION_SIZE:
            raise RuntimeError(f"QUIZ_SESSION_SIZE must be between 1 and {MAX_SESSION_SIZE}.")

        store_backend = os.getenv("QUIZ_STORE", "sql").strip().lower()
        if store_backend not in STORE_BACKENDS:
            raise RuntimeError(f"QUIZ_STORE must be one of: {', '.join(STORE_BACKENDS)}.")

        if store_backend == "sql" and not os.getenv("DATABASE_URL"):
            raise RuntimeError("DATABASE_URL environment variable is required when QUIZ_STORE is 'sql'.")

        learner_id = os.getenv("QUIZ_LEARNER_ID", "default").strip()
        if not learner_id or len(learner_id) > 64:
            raise RuntimeError("QUIZ_LEARNER_ID must be a non-empty string of at most 64 characters.")

        return cls(
            app_name=app_name,
            app_env=app_env,
            log_level=log_level,
            catalog_path=catalog_path,
            session_size=session_size,
            store_backend=store_backend,
            learner_id=learner_id,
        )

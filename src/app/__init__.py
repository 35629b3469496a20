"""Application bootstrap helpers for the Capital Quiz engine."""

from .runtime import build_quiz_service
from .settings import AppSettings

__all__ = ["build_quiz_service", "AppSettings"]

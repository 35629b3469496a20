"""Spaced-repetition quiz engine for the Capital Quiz."""

from .matching import matches
from .normalization import normalize
from .service import QuizService, QuizSession
from .srs import record_outcome

__all__ = ["QuizService", "QuizSession", "matches", "normalize", "record_outcome"]

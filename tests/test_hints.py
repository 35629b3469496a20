from __future__ import annotations

import pytest

from src.quiz.hints import MAX_HINT_LEVEL, get_hint, hint_score_multiplier


def test_hints_reveal_progressively() -> None:
    assert get_hint("Paris", 1) == 'Starts with "P"'
    assert get_hint("Paris", 2) == "P____"
    assert get_hint("Paris", 3) == "PAR__"


def test_hints_keep_separators_and_reveal_half_of_long_answers() -> None:
    assert get_hint(" Port-au-Prince ", 2) == "P___-__-______"
    assert get_hint("Port-au-Prince", 3) == "PORT-AU-P_____"
    assert get_hint("N'Djamena", 2) == "N'_______"


@pytest.mark.parametrize(("answer", "level"), [("Paris", 0), ("Paris", 4), ("", 1), (None, 1), ("   ", 2)])
def test_unavailable_hints_are_empty(answer, level) -> None:
    assert get_hint(answer, level) == ""


@pytest.mark.parametrize(
    ("hints_used", "multiplier"),
    [(0, 1.0), (1, 0.5), (2, 0.25), (3, 0.1), (7, 0.1), (-1, 1.0)],
)
def test_hint_score_multiplier(hints_used: int, multiplier: float) -> None:
    assert hint_score_multiplier(hints_used) == multiplier


def test_max_hint_level() -> None:
    assert MAX_HINT_LEVEL == 3

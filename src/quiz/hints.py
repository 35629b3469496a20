"""Progressive hints for typed answers and the score penalty they carry."""

from __future__ import annotations

import math


MAX_HINT_LEVEL = 3

_KEPT_CHARACTERS = {" ", "-", "'"}
_HINT_MULTIPLIERS = {0: 1.0, 1: 0.5, 2: 0.25, 3: 0.1}


def _reveal(answer: str, reveal_count: int) -> str:
    """Show the first ``reveal_count`` letters upper-cased and blank out the rest."""
    result = []
    letter_index = 0
    for char in answer:
        if char in _KEPT_CHARACTERS:
            result.append(char)
            continue
        result.append(char.upper() if letter_index < reveal_count else "_")
        letter_index += 1
    return "".join(result)


def get_hint(answer: object, level: int) -> str:
    """Return the hint text for ``answer`` at ``level`` (1-3); empty for anything else."""
    if not isinstance(answer, str) or not answer.strip():
        return ""

    clean_answer = answer.strip()
    if level == 1:
        return f'Starts with "{clean_answer[0].upper()}"'
    if level == 2:
        return _reveal(clean_answer, 1)
    if level == 3:
        return _reveal(clean_answer, max(3, math.ceil(len(clean_answer) / 2)))
    return ""


def hint_score_multiplier(hints_used: int) -> float:
    if hints_used > MAX_HINT_LEVEL:
        return _HINT_MULTIPLIERS[MAX_HINT_LEVEL]
    return _HINT_MULTIPLIERS.get(hints_used, 1.0)

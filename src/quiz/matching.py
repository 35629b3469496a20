"""Tolerant answer validation for typed quiz responses."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from src.quiz.normalization import normalize


# Plausible ASCII renderings for characters that NFD decomposition leaves intact
# or that learners commonly spell out.
TRANSLITERATIONS: Dict[str, Tuple[str, ...]] = {
    "ü": ("ue", "u"),
    "ö": ("oe", "o"),
    "ä": ("ae", "a"),
    "ø": ("o", "oe"),
    "å": ("a", "aa"),
    "æ": ("ae", "a"),
    "ß": ("ss", "s"),
    "ñ": ("n", "ny"),
    "ç": ("c", "s"),
    "ð": ("d", "th"),
    "þ": ("th",),
    "ł": ("l",),
    "ń": ("n",),
    "ś": ("s",),
    "ź": ("z",),
    "ż": ("z",),
}

# Historical and alternate spellings that are accepted for each other.
KNOWN_ALIASES: Tuple[Tuple[str, ...], ...] = (
    ("kyiv", "kiev"),
    ("beijing", "peking"),
    ("mumbai", "bombay"),
    ("kolkata", "calcutta"),
    ("chennai", "madras"),
    ("myanmar", "burma"),
    ("eswatini", "swaziland"),
    ("czechia", "czech republic"),
    ("timor-leste", "east timor"),
    ("cabo verde", "cape verde"),
)

_ALIAS_CLASSES: Tuple[FrozenSet[str], ...] = tuple(
    frozenset(normalize(name) for name in names) for names in KNOWN_ALIASES
)


class MatchKind(str, Enum):
    """Which check accepted an answer."""

    EXACT = "exact"
    ALIAS = "alias"
    COMPOUND = "compound"
    TRANSLITERATION = "transliteration"
    EDIT_DISTANCE = "edit_distance"


@dataclass(slots=True)
class AnswerMatch:
    kind: MatchKind
    accepted_answer: str
    distance: int = 0


def edit_tolerance(length: int) -> int:
    """Return how many edits are forgiven for a string of ``length`` characters."""
    if length < 5:
        return 0
    if length < 8:
        return 1
    if length < 12:
        return 2
    return 3


def levenshtein_distance(first: str, second: str) -> int:
    """Minimum number of single-character insertions, deletions and substitutions."""
    rows = len(second) + 1
    cols = len(first) + 1
    matrix: List[List[int]] = [[0] * cols for _ in range(rows)]

    for i in range(rows):
        matrix[i][0] = i
    for j in range(cols):
        matrix[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            if second[i - 1] == first[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = min(
                    matrix[i - 1][j - 1] + 1,
                    matrix[i][j - 1] + 1,
                    matrix[i - 1][j] + 1,
                )

    return matrix[rows - 1][cols - 1]


def is_known_alias(first: str, second: str) -> bool:
    """True when both normalised names belong to the same alias group."""
    return any(first in group and second in group for group in _ALIAS_CLASSES)


def is_compound_reorder(first: str, second: str) -> bool:
    """Two-word names match when the same words appear in either order."""
    first_words = [word for word in first.split(" ") if word]
    second_words = [word for word in second.split(" ") if word]
    if len(first_words) != 2 or len(second_words) != 2:
        return False

    direct = first_words[0] == second_words[0] and first_words[1] == second_words[1]
    swapped = first_words[0] == second_words[1] and first_words[1] == second_words[0]
    return direct or swapped


def transliterated_forms(answer: str) -> List[str]:
    """Return the answer plus one rewrite per table character and rendering."""
    lowered = unicodedata.normalize("NFC", answer).lower()
    forms = [answer]
    for char, replacements in TRANSLITERATIONS.items():
        if char not in lowered:
            continue
        for replacement in replacements:
            forms.append(lowered.replace(char, replacement))
    return forms


def _iter_answers(accepted_answers: Iterable[object]) -> Iterable[str]:
    for answer in accepted_answers:
        if isinstance(answer, str):
            yield answer


def match_answer(user_input: object, accepted_answers: Sequence[object]) -> Optional[AnswerMatch]:
    """Return how ``user_input`` matched one of ``accepted_answers``, or ``None``."""
    if not isinstance(user_input, str) or not accepted_answers:
        return None

    normalized_input = normalize(user_input)

    for answer in _iter_answers(accepted_answers):
        normalized_answer = normalize(answer)

        if normalized_input == normalized_answer:
            return AnswerMatch(MatchKind.EXACT, answer)

        if not normalized_input or not normalized_answer:
            continue

        if is_known_alias(normalized_input, normalized_answer):
            return AnswerMatch(MatchKind.ALIAS, answer)

        if is_compound_reorder(normalized_input, normalized_answer):
            return AnswerMatch(MatchKind.COMPOUND, answer)

        for form in transliterated_forms(answer):
            if normalize(form) == normalized_input:
                return AnswerMatch(MatchKind.TRANSLITERATION, answer)

        longest = max(len(normalized_input), len(normalized_answer))
        distance = levenshtein_distance(normalized_input, normalized_answer)
        if distance <= edit_tolerance(longest):
            return AnswerMatch(MatchKind.EDIT_DISTANCE, answer, distance)

    return None


def matches(user_input: object, accepted_answers: Sequence[object]) -> bool:
    """Check whether the user's answer is close enough to any accepted answer."""
    return match_answer(user_input, accepted_answers) is not None

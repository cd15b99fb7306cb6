"""Distractor synthesis for multiple-choice questions.

Numeric answers get neighbours at fixed offsets scaled to the answer's
precision, or to its magnitude for large values. Textual answers reuse
the wrong options already supplied and then draw from a fixed pool.
"""

from __future__ import annotations

import math
from itertools import islice
from typing import TYPE_CHECKING

from learnhub.formatting.numbers import answers_match, decimal_places, format_number, parse_number

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

OPTION_COUNT = 4

# Offsets in units of the answer's last decimal place, closest misses first
NUMERIC_OFFSETS: tuple[int, ...] = (-2, 2, 4, -1, 1, 3)

# Offsets are never finer than 4 decimals or a thousandth of the answer
MAX_PLACES = 4
MAGNITUDE_DIVISOR = 1000

# Numeric candidates tried before falling back to the text pool
MAX_NUMERIC_CANDIDATES = 40

TEXT_POOL: tuple[str, ...] = (
    "None of these",
    "Not enough information",
    "All of these",
    "It cannot be determined",
    "Something else",
)


def _numeric_offsets() -> Iterator[int]:
    yield from NUMERIC_OFFSETS
    step = max(abs(o) for o in NUMERIC_OFFSETS) + 1
    while True:
        yield step
        yield -step
        step += 1


def _numeric_unit(value: float, places: int) -> float:
    unit = 10.0 ** -places
    scale = abs(value) / MAGNITUDE_DIVISOR
    if scale > unit:
        unit = 10.0 ** math.ceil(math.log10(scale))
    return unit


def _numeric_candidates(answer: str) -> Iterator[str]:
    value = parse_number(answer)
    if value is None:
        return
    places = min(decimal_places(answer) if "/" not in answer else 2, MAX_PLACES)
    unit = _numeric_unit(value, places)
    for offset in islice(_numeric_offsets(), MAX_NUMERIC_CANDIDATES):
        candidate = value + offset * unit
        if not math.isfinite(candidate) or (value >= 0 and candidate < 0):
            continue
        yield format_number(round(candidate, places), places if places else None)


def synthesize_distractors(answer: str, count: int, exclude: Sequence[str] = ()) -> list[str]:
    """Create ``count`` wrong answers for ``answer``.

    Args:
        answer: The canonical answer.
        count: Number of distractors wanted.
        exclude: Values that must not be returned (existing options).

    Returns:
        Distinct distractors, none matching the answer or ``exclude``.

    Example:
        >>> synthesize_distractors("7", 3)
        ['5', '9', '11']
        >>> synthesize_distractors("0.5", 2)
        ['0.3', '0.7']
    """
    if count <= 0:
        return []
    taken = [answer, *exclude]
    result: list[str] = []

    def accept(candidate: str) -> bool:
        if any(answers_match(candidate, t) for t in taken):
            return False
        taken.append(candidate)
        result.append(candidate)
        return len(result) >= count

    for candidate in _numeric_candidates(answer):
        if accept(candidate):
            return result
    for candidate in TEXT_POOL:
        if accept(candidate):
            return result
    n = 1
    while len(result) < count:
        accept(f"Option {n}")
        n += 1
    return result


def build_options(answer: str, existing: Sequence[str] | None, count: int = OPTION_COUNT) -> list[str]:
    """Build exactly ``count`` options containing the answer once.

    Existing wrong options are kept first, then synthesized distractors
    fill the gap. The answer is placed last; callers shuffle.

    Example:
        >>> build_options("7", ["7", "9"])
        ['9', '5', '11', '7']
    """
    wrong: list[str] = []
    for option in existing or []:
        text = str(option).strip()
        if not text or answers_match(text, answer) or any(answers_match(text, w) for w in wrong):
            continue
        wrong.append(text)
    wrong = wrong[: count - 1]
    wrong.extend(synthesize_distractors(answer, count - 1 - len(wrong), exclude=wrong))
    return [*wrong, answer]

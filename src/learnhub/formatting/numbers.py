"""Answer arithmetic for generated questions.

Helpers to read numbers out of answers, detect simple arithmetic in
question text and compare answers. None of these functions raise on bad
input; they return None or False instead.

Example:
    >>> calculate_answer("What is 12 + 7?")
    19.0
    >>> answers_match("19", "19.0")
    True
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

_NUMBER = r"(\d+(?:\.\d+)?)"
_SYMBOLIC = re.compile(_NUMBER + r"\s*([+\-−×x*÷/])\s*" + _NUMBER)
_WORDED = (
    (re.compile(r"sum\s+of\s+" + _NUMBER + r"\s+and\s+" + _NUMBER, re.IGNORECASE), "+"),
    (re.compile(r"difference\s+between\s+" + _NUMBER + r"\s+and\s+" + _NUMBER, re.IGNORECASE), "-"),
    (re.compile(r"product\s+of\s+" + _NUMBER + r"\s+and\s+" + _NUMBER, re.IGNORECASE), "*"),
    (re.compile(r"quotient\s+of\s+" + _NUMBER + r"\s+and\s+" + _NUMBER, re.IGNORECASE), "/"),
)
_OPERATORS = {"+": "+", "-": "-", "−": "-", "×": "*", "x": "*", "*": "*", "÷": "/", "/": "/"}
_FRACTION = re.compile(r"^(-?\d+)\s*/\s*(\d+)$")

TOLERANCE = 1e-6


@dataclass(frozen=True)
class Expression:
    """A binary arithmetic expression found in question text.

    Attributes:
        left: Left operand.
        operator: Normalized operator, one of + - * /.
        right: Right operand.
        text: The matched text as it appears in the question.
    """

    left: float
    operator: str
    right: float
    text: str

    def evaluate(self) -> float | None:
        """Evaluate the expression; None for division by zero."""
        if self.operator == "+":
            return self.left + self.right
        if self.operator == "-":
            return self.left - self.right
        if self.operator == "*":
            return self.left * self.right
        if self.right == 0:
            return None
        return self.left / self.right


def parse_number(text: object) -> float | None:
    """Parse a number from an answer string.

    Accepts thousands separators, a leading currency sign, a trailing
    period and simple fractions such as "3/4".

    Example:
        >>> parse_number("$1,250")
        1250.0
        >>> parse_number("3/4")
        0.75
        >>> parse_number("seven") is None
        True
    """
    if isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return float(text) if math.isfinite(text) else None
    if not isinstance(text, str):
        return None
    cleaned = text.strip().replace(",", "").lstrip("$").rstrip(".").strip()
    if not cleaned:
        return None
    fraction = _FRACTION.match(cleaned)
    if fraction:
        denominator = int(fraction.group(2))
        if denominator == 0:
            return None
        return int(fraction.group(1)) / denominator
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def decimal_places(text: str) -> int:
    """Count the digits after the decimal point of a numeric string."""
    cleaned = text.strip().rstrip(".")
    if "." not in cleaned:
        return 0
    return len(cleaned.rsplit(".", 1)[1].rstrip())


def format_number(value: float, decimals: int | None = None) -> str:
    """Format a number the way answers are written.

    Integral values lose their ".0"; other values keep at most four
    decimals unless ``decimals`` is given.

    Example:
        >>> format_number(8.0)
        '8'
        >>> format_number(2.5)
        '2.5'
        >>> format_number(3.0, decimals=2)
        '3.00'
    """
    if decimals is not None and decimals > 0:
        return f"{value:.{decimals}f}"
    if decimals == 0 or float(value).is_integer():
        return str(int(round(value)))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def extract_expression(text: str) -> Expression | None:
    """Find the first binary arithmetic expression in question text.

    Symbolic forms ("12 + 7", "6 × 3", "20 ÷ 4") are tried before worded
    ones ("sum of 12 and 7", "difference between 9 and 4").
    """
    if not isinstance(text, str):
        return None
    match = _SYMBOLIC.search(text)
    if match:
        return Expression(
            left=float(match.group(1)),
            operator=_OPERATORS[match.group(2)],
            right=float(match.group(3)),
            text=match.group(0),
        )
    for pattern, operator in _WORDED:
        match = pattern.search(text)
        if match:
            return Expression(
                left=float(match.group(1)),
                operator=operator,
                right=float(match.group(2)),
                text=match.group(0),
            )
    return None


def calculate_answer(text: str) -> float | None:
    """Compute the answer of the first arithmetic expression in the text.

    Returns:
        The value, or None when no expression is found or it cannot be evaluated.
    """
    expression = extract_expression(text)
    if expression is None:
        return None
    return expression.evaluate()


def normalize_text(text: str) -> str:
    """Lower-case and collapse whitespace and trailing punctuation."""
    return " ".join(str(text).lower().split()).strip(" .!?")


def answers_match(left: object, right: object, tolerance: float = TOLERANCE) -> bool:
    """Compare two answers numerically when possible, else as normalized text.

    Example:
        >>> answers_match("8", " 8.0 ")
        True
        >>> answers_match("Blue", "blue.")
        True
    """
    a = parse_number(left)
    b = parse_number(right)
    if a is not None and b is not None:
        return abs(a - b) <= tolerance * max(1.0, abs(a), abs(b))
    if left is None or right is None:
        return False
    return normalize_text(str(left)) == normalize_text(str(right))

"""Answer checking for generated questions.

This module provides the validation step that gives every generated
item its confidence figure.
"""

from __future__ import annotations

import logging
import re

from learnhub.formatting.numbers import answers_match, calculate_answer, extract_expression, format_number
from learnhub.generators.models import RawQuestion

logger = logging.getLogger(__name__)

CONFIRMED_CONFIDENCE = 0.95
CORRECTED_CONFIDENCE = 0.5
UNVERIFIED_CONFIDENCE = 0.8

_NUMBER = re.compile(r"\d+(?:\.\d+)?")


class AnswerChecker:
    """Checks generated answers against the arithmetic in the question.

    A question is checkable when it contains one arithmetic expression and
    no numbers outside it. For checkable questions:
    - a matching answer is confirmed
    - a contradicting answer is replaced by the computed one, at low confidence

    Other questions keep their own confidence, or a default.

    Example:
        >>> checker = AnswerChecker()
        >>> checker.check(RawQuestion(question="What is 5 + 3?", answer="9")).answer
        '8'
    """

    def __init__(
        self,
        confirmed: float = CONFIRMED_CONFIDENCE,
        corrected: float = CORRECTED_CONFIDENCE,
        unverified: float = UNVERIFIED_CONFIDENCE,
    ) -> None:
        """Initialize AnswerChecker.

        Args:
            confirmed: Confidence of an answer the check confirms.
            corrected: Confidence of an answer the check had to correct.
            unverified: Confidence of an item that cannot be checked and
                carries no confidence of its own.
        """
        self.confirmed = confirmed
        self.corrected = corrected
        self.unverified = unverified

    def expected_answer(self, question: str) -> float | None:
        """Compute the answer of a checkable question, else None."""
        expression = extract_expression(question)
        if expression is None:
            return None
        outside = question.replace(expression.text, " ", 1)
        if _NUMBER.search(outside):
            return None
        return calculate_answer(expression.text)

    def check(self, item: RawQuestion) -> RawQuestion:
        """Return the item with its confidence set, correcting a wrong answer."""
        expected = self.expected_answer(item.question)
        if expected is None:
            confidence = item.confidence if item.confidence is not None else self.unverified
            return item.model_copy(update={"confidence": confidence})

        if answers_match(item.answer, expected):
            return item.model_copy(update={"confidence": self.confirmed})

        corrected = format_number(expected)
        logger.warning(f"Corrected generated answer {item.answer!r} -> {corrected!r} for: {item.question!r}")
        return item.model_copy(update={"answer": corrected, "confidence": self.corrected, "statement": None})

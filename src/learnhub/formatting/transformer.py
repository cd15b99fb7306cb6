"""Format transformer.

Renders a generated question into one of the four presentation formats.
Rendering always starts from the question's ``stem`` and
``canonical_answer``, which never change, so applying the same format
again gives an equivalent question.
"""

from __future__ import annotations

import logging
import random
import re

from learnhub.core.types import GeneratedQuestion, QuestionFormat
from learnhub.formatting.distractors import build_options, synthesize_distractors
from learnhub.formatting.numbers import Expression, answers_match, extract_expression, format_number

logger = logging.getLogger(__name__)

BLANK = "_____"
TRUE = "True"
FALSE = "False"

_BLANK_RUN = re.compile(r"_{2,}")
_OPERATOR_SYMBOLS = {"+": "+", "-": "−", "*": "×", "/": "÷"}


def apply_format(
    question: GeneratedQuestion,
    question_format: QuestionFormat | str,
    *,
    rng: random.Random | None = None,
) -> GeneratedQuestion:
    """Render a question in the requested format.

    Args:
        question: The question to render.
        question_format: Target format.
        rng: Random source for option order and true/false claims.

    Returns:
        A new question with presentation fields set for the format.

    Example:
        >>> mc = apply_format(question, QuestionFormat.MULTIPLE_CHOICE, rng=random.Random(1))
        >>> len(mc.options)
        4
    """
    target = QuestionFormat(question_format)
    rng = rng or random.Random()

    if target is QuestionFormat.MULTIPLE_CHOICE:
        return _multiple_choice(question, rng)
    if target is QuestionFormat.TRUE_FALSE:
        return _true_false(question, rng)
    if target is QuestionFormat.FILL_IN_BLANK:
        return question.model_copy(
            update={
                "question": fill_blank(question.stem, question.canonical_answer),
                "answer": question.canonical_answer,
                "options": None,
                "statement": None,
                "format": target,
            }
        )
    return question.model_copy(
        update={
            "question": question.stem,
            "answer": question.canonical_answer,
            "options": None,
            "statement": None,
            "format": target,
        }
    )


def _multiple_choice(question: GeneratedQuestion, rng: random.Random) -> GeneratedQuestion:
    existing = question.options if question.format in (None, QuestionFormat.MULTIPLE_CHOICE) else None
    options = build_options(question.canonical_answer, existing)
    rng.shuffle(options)
    return question.model_copy(
        update={
            "question": question.stem,
            "answer": question.canonical_answer,
            "options": options,
            "statement": None,
            "format": QuestionFormat.MULTIPLE_CHOICE,
        }
    )


def _true_false(question: GeneratedQuestion, rng: random.Random) -> GeneratedQuestion:
    statement = question.statement
    if not statement:
        claimed = question.canonical_answer
        if rng.random() >= 0.5:
            claimed = synthesize_distractors(question.canonical_answer, 1)[0]
        statement = f"The answer is {claimed}."
    is_true = answers_match(claimed_value(statement), question.canonical_answer)
    return question.model_copy(
        update={
            "question": f"True or False: {question.stem} {statement}",
            "answer": TRUE if is_true else FALSE,
            "options": [TRUE, FALSE],
            "statement": statement,
            "format": QuestionFormat.TRUE_FALSE,
        }
    )


def claimed_value(statement: str) -> str:
    """Extract the value a true/false statement claims.

    Example:
        >>> claimed_value("5 + 3 = 9")
        '9'
        >>> claimed_value("The answer is 8.")
        '8'
    """
    text = statement.strip()
    if "=" in text:
        text = text.rsplit("=", 1)[1]
    elif " is " in text.lower():
        text = text[text.lower().rindex(" is ") + 4 :]
    return text.strip().rstrip(".!?").strip()


def fill_blank(stem: str, answer: str) -> str:
    """Insert a blank marker into the question text.

    An existing run of underscores is normalized to the marker. Otherwise
    the answer token is blanked out, or a detected expression is rewritten
    as ``expr = _____``, or ``Answer: _____`` is appended.

    Example:
        >>> fill_blank("What is 5 + 3?", "8")
        '5 + 3 = _____'
        >>> fill_blank("The capital of France is Paris.", "Paris")
        'The capital of France is _____.'
    """
    if _BLANK_RUN.search(stem):
        return _BLANK_RUN.sub(BLANK, stem)

    expression = extract_expression(stem)
    token = answer.strip()
    if token:
        pattern = re.compile(r"(?<![\w.])" + re.escape(token) + r"(?![\w]|\.\d)", re.IGNORECASE)
        match = pattern.search(stem)
        # An operand equal to the answer is not the answer's position
        if match and not _inside_expression(match.start(), stem, expression):
            return stem[: match.start()] + BLANK + stem[match.end() :]

    if expression is not None:
        if expression.text[:1].isdigit():
            text = expression.text
        else:
            symbol = _OPERATOR_SYMBOLS[expression.operator]
            text = f"{format_number(expression.left)} {symbol} {format_number(expression.right)}"
        return f"{text} = {BLANK}"

    logger.debug(f"No blank position found, appending marker to: {stem!r}")
    return f"{stem.rstrip()} Answer: {BLANK}"


def _inside_expression(position: int, stem: str, expression: Expression | None) -> bool:
    if expression is None:
        return False
    start = stem.find(expression.text)
    return start != -1 and start <= position < start + len(expression.text)

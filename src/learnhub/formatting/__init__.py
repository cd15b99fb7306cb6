"""Formatting module for learnhub.

This module renders generated questions into presentation formats and
provides the answer arithmetic used to build options and blanks.
"""

from __future__ import annotations

from learnhub.formatting.distractors import build_options, synthesize_distractors
from learnhub.formatting.numbers import (
    Expression,
    answers_match,
    calculate_answer,
    extract_expression,
    format_number,
    parse_number,
)
from learnhub.formatting.transformer import BLANK, apply_format, claimed_value, fill_blank

__all__ = [
    "BLANK",
    "Expression",
    "answers_match",
    "apply_format",
    "build_options",
    "calculate_answer",
    "claimed_value",
    "extract_expression",
    "fill_blank",
    "format_number",
    "parse_number",
    "synthesize_distractors",
]

"""JSON parsing utilities for question generation.

This module provides utilities for parsing questions from LLM responses,
which may contain extra text around the JSON content.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from learnhub.generators.models import RawQuestion

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def parse_json_array(text: str) -> list[Any]:
    """Parse a JSON array from an LLM response.

    Handles code fences, arrays embedded in surrounding text, an object
    wrapping the array under "questions", and a missing closing bracket.

    Args:
        text: The LLM response text.

    Returns:
        Parsed list of items, or an empty list if parsing fails.

    Example:
        >>> parse_json_array('[{"question": "Q1", "answer": "1"}]')
        [{'question': 'Q1', 'answer': '1'}]
        >>> parse_json_array('Here you go:\\n```json\\n[1, 2]\\n```')
        [1, 2]
    """
    text = text.strip()
    fenced = _FENCE.search(text)
    if fenced:
        text = fenced.group(1).strip()

    result = _loads(text)
    if isinstance(result, dict) and isinstance(result.get("questions"), list):
        return list(result["questions"])
    if isinstance(result, list):
        return result

    match = re.search(r"\[.*\]", text, re.DOTALL)
    if match:
        result = _loads(match.group())
        if isinstance(result, list):
            return result

    # Truncated output: close the array
    start_idx = text.find("[")
    if start_idx != -1:
        array_text = text[start_idx:].rstrip().rstrip(",")
        for suffix in ["]", "}]", '"}]']:
            result = _loads(array_text + suffix)
            if isinstance(result, list):
                return result

    return []


def parse_raw_questions(items: list[Any]) -> list[RawQuestion]:
    """Convert parsed items into raw questions, dropping malformed ones.

    Items repeating an earlier question text are dropped too.
    """
    questions: list[RawQuestion] = []
    seen: set[str] = set()
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            question = RawQuestion.model_validate(item)
        except ValidationError as e:
            logger.debug(f"Dropping malformed generated item: {e.error_count()} error(s)")
            continue
        key = " ".join(question.question.lower().split())
        if key in seen:
            continue
        seen.add(key)
        questions.append(question)
    return questions

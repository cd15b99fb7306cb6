"""Request validation.

``validate_request`` checks every invariant of a generation request and
returns a tagged result, ``Valid`` or ``Invalid``, holding all violations
found. It never raises for a bad request; callers decide what to do with
an ``Invalid`` result.

Example:
    >>> result = validate_request(request)
    >>> if isinstance(result, Invalid):
    ...     raise RequestValidationError(result.violations)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from learnhub.core import taxonomy
from learnhub.core.types import GenerationRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """A violated request constraint.

    Attributes:
        field: Name of the offending field (snake_case).
        message: Human-readable description of the violation.
    """

    field: str
    message: str


@dataclass(frozen=True)
class Valid:
    """A request that satisfied every invariant."""

    request: GenerationRequest


@dataclass(frozen=True)
class Invalid:
    """A request that violated one or more invariants."""

    violations: list[Violation] = field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]


ValidationResult = Union[Valid, Invalid]


def validate_request(request: GenerationRequest, *, strict_options: bool = False) -> ValidationResult:
    """Check every invariant of a generation request.

    Args:
        request: The request to check.
        strict_options: Also require interests and motivators to come from
            the fixed option lists.

    Returns:
        Valid(request) when no invariant is violated, else Invalid with
        every violation found.
    """
    violations = _check(request.model_dump(), strict_options=strict_options)
    if violations:
        logger.debug(f"Request rejected with {len(violations)} violation(s)")
        return Invalid(violations)
    return Valid(request)


def parse_request(data: Mapping[str, Any], *, strict_options: bool = False) -> ValidationResult:
    """Build and validate a request from loosely-typed data.

    Accepts camelCase or snake_case keys. Type errors reported by the model
    are returned as violations alongside the invariant checks on the fields
    that did parse.

    Args:
        data: Request body, e.g. decoded JSON.
        strict_options: See ``validate_request``.

    Returns:
        Valid or Invalid, as for ``validate_request``.
    """
    try:
        request = GenerationRequest.model_validate(dict(data))
    except ValidationError as e:
        violations: list[Violation] = []
        failed: set[str] = set()
        for error in e.errors():
            loc = error.get("loc") or ("request",)
            name = to_snake(str(loc[0]))
            failed.add(name)
            violations.append(Violation(field=name, message=f"{_label(name)}: {error['msg']}"))
        remaining = {to_snake(str(k)): v for k, v in data.items() if to_snake(str(k)) not in failed}
        for name, info in GenerationRequest.model_fields.items():
            if name not in remaining and name not in failed and not info.is_required():
                remaining[name] = info.get_default(call_default_factory=True)
        violations.extend(_check(remaining, strict_options=strict_options))
        return Invalid(violations)
    return validate_request(request, strict_options=strict_options)


def _label(name: str) -> str:
    return name.replace("_", " ").capitalize()


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _check(values: Mapping[str, Any], *, strict_options: bool) -> list[Violation]:
    """Collect violations; keys missing from ``values`` are not checked."""
    violations: list[Violation] = []

    def add(name: str, message: str) -> None:
        violations.append(Violation(field=name, message=message))

    if "subject" in values and not str(values["subject"] or "").strip():
        add("subject", "Subject is required")

    if "category" in values and not str(values["category"] or "").strip():
        add("category", "Category is required")

    if "grade_level" in values:
        grade = _as_int(values["grade_level"])
        if grade is None or not taxonomy.MIN_GRADE <= grade <= taxonomy.MAX_GRADE:
            add("grade_level", f"Grade level must be between {taxonomy.MIN_GRADE} and {taxonomy.MAX_GRADE}")

    if "question_types" in values:
        types = list(values["question_types"] or [])
        if len(types) < taxonomy.MIN_QUESTION_TYPES:
            add("question_types", "At least one question type is required")
        elif len(types) > taxonomy.MAX_QUESTION_TYPES:
            add("question_types", f"Maximum {taxonomy.MAX_QUESTION_TYPES} question types allowed")
        if any(not isinstance(t, str) or not t.strip() for t in types):
            add("question_types", "Question types must be non-empty strings")
        else:
            duplicates = sorted({t for t in types if types.count(t) > 1}, key=types.index)
            if duplicates:
                add("question_types", f"Duplicate question types: {', '.join(duplicates)}")

    if "number_of_questions" in values:
        number = _as_int(values["number_of_questions"])
        if number is None or number < 1:
            add("number_of_questions", "Number of questions must be at least 1")

    if "interests" in values:
        interests = list(values["interests"] or [])
        if len(interests) < taxonomy.MIN_INTERESTS:
            add("interests", "At least one interest is required")
        elif len(interests) > taxonomy.MAX_INTERESTS:
            add("interests", f"Maximum {taxonomy.MAX_INTERESTS} interests allowed")
        if strict_options:
            unknown = _unknown_options(interests, taxonomy.INTEREST_OPTIONS)
            if unknown:
                add("interests", f"Unknown interests: {', '.join(unknown)}")

    if "motivators" in values:
        motivators = list(values["motivators"] or [])
        if len(motivators) > taxonomy.MAX_MOTIVATORS:
            add("motivators", f"Maximum {taxonomy.MAX_MOTIVATORS} motivators allowed")
        if strict_options:
            unknown = _unknown_options(motivators, taxonomy.MOTIVATOR_OPTIONS)
            if unknown:
                add("motivators", f"Unknown motivators: {', '.join(unknown)}")

    return violations


def _unknown_options(values: list[Any], options: tuple[str, ...]) -> list[str]:
    allowed = {o.lower() for o in options}
    return [str(v) for v in values if str(v).strip().lower() not in allowed]

"""Educational taxonomy and request limits.

Fixed option lists shared by request validation, personalization and the
generators: categories, interest and motivator options, and the sub-type
catalogue used to steer generation for each main question type.
"""

from __future__ import annotations

# Request limits
MIN_QUESTION_TYPES = 1
MAX_QUESTION_TYPES = 5
MIN_INTERESTS = 1
MAX_INTERESTS = 5
MAX_MOTIVATORS = 3
MIN_GRADE = 1
MAX_GRADE = 12

STANDARD_SUBJECTS: frozenset[str] = frozenset({"mathematics", "english", "science"})

CATEGORY_DESCRIPTIONS: dict[str, str] = {
    "number-operations": "whole-number operations: addition, subtraction, multiplication and division",
    "algebraic-thinking": "expressions, unknowns and simple equations",
    "geometry-spatial": "shapes, angles, position and spatial reasoning",
    "measurement-data": "units of measure, reading scales and interpreting data",
    "fractions-decimals": "parts of a whole, fractions, decimals and their operations",
    "problem-solving": "multi-step word problems drawing on several skills",
    "patterns-relationships": "number sequences, rules and function tables",
    "financial-literacy": "money, budgeting, prices and simple interest",
}

CATEGORIES: tuple[str, ...] = tuple(CATEGORY_DESCRIPTIONS)

INTEREST_OPTIONS: tuple[str, ...] = (
    "Sports",
    "Technology",
    "Arts",
    "Music",
    "Nature",
    "Animals",
    "Space",
    "History",
    "Science",
    "Reading",
    "Gaming",
    "Cooking",
    "Travel",
    "Movies",
    "Fashion",
    "Cars",
    "Photography",
)

MOTIVATOR_OPTIONS: tuple[str, ...] = (
    "Competition",
    "Achievement",
    "Exploration",
    "Creativity",
    "Social Learning",
    "Personal Growth",
    "Problem Solving",
    "Recognition",
)

# Main type -> available sub-types
SUBTYPES: dict[str, tuple[str, ...]] = {
    "ADDITION": (
        "basic_addition",
        "whole_number_addition",
        "decimal_addition",
        "fraction_addition",
        "word_problem_addition",
    ),
    "SUBTRACTION": (
        "basic_subtraction",
        "whole_number_subtraction",
        "decimal_subtraction",
        "fraction_subtraction",
        "word_problem_subtraction",
    ),
    "MULTIPLICATION": (
        "basic_multiplication",
        "whole_number_multiplication",
        "decimal_multiplication",
        "fraction_multiplication",
        "word_problem_multiplication",
    ),
    "DIVISION": (
        "basic_division",
        "whole_number_division",
        "division_with_remainders",
        "long_division",
        "decimal_division",
        "fraction_division",
        "word_problem_division",
    ),
    "PATTERN_RECOGNITION": (
        "number_pattern",
        "sequence_pattern",
        "shape_pattern",
        "function_table",
        "algebraic_pattern",
    ),
}

# Grade -> main type -> recommended sub-types. Grades above 5 use the full catalogue.
GRADE_SUBTYPES: dict[int, dict[str, tuple[str, ...]]] = {
    1: {
        "ADDITION": ("basic_addition",),
        "SUBTRACTION": ("basic_subtraction",),
        "MULTIPLICATION": (),
        "DIVISION": (),
        "PATTERN_RECOGNITION": ("number_pattern", "shape_pattern"),
    },
    2: {
        "ADDITION": ("basic_addition", "whole_number_addition"),
        "SUBTRACTION": ("basic_subtraction", "whole_number_subtraction"),
        "MULTIPLICATION": ("basic_multiplication",),
        "DIVISION": ("basic_division",),
        "PATTERN_RECOGNITION": ("number_pattern", "sequence_pattern"),
    },
    3: {
        "ADDITION": ("basic_addition", "whole_number_addition", "word_problem_addition"),
        "SUBTRACTION": ("basic_subtraction", "whole_number_subtraction", "word_problem_subtraction"),
        "MULTIPLICATION": ("basic_multiplication", "whole_number_multiplication"),
        "DIVISION": ("basic_division", "division_with_remainders"),
        "PATTERN_RECOGNITION": ("number_pattern", "sequence_pattern", "function_table"),
    },
    4: {
        "ADDITION": ("whole_number_addition", "decimal_addition", "word_problem_addition"),
        "SUBTRACTION": ("whole_number_subtraction", "decimal_subtraction", "word_problem_subtraction"),
        "MULTIPLICATION": ("whole_number_multiplication", "decimal_multiplication", "word_problem_multiplication"),
        "DIVISION": ("division_with_remainders", "long_division", "decimal_division"),
        "PATTERN_RECOGNITION": ("number_pattern", "sequence_pattern", "function_table"),
    },
    5: {
        "ADDITION": ("decimal_addition", "fraction_addition", "word_problem_addition"),
        "SUBTRACTION": ("decimal_subtraction", "fraction_subtraction", "word_problem_subtraction"),
        "MULTIPLICATION": ("decimal_multiplication", "fraction_multiplication", "word_problem_multiplication"),
        "DIVISION": ("long_division", "decimal_division", "fraction_division", "word_problem_division"),
        "PATTERN_RECOGNITION": ("sequence_pattern", "function_table", "algebraic_pattern"),
    },
}

# Common aliases for main types
_TYPE_ALIASES: dict[str, str] = {
    "PATTERN": "PATTERN_RECOGNITION",
    "PATTERNS": "PATTERN_RECOGNITION",
    "NUMBER_PATTERNS": "PATTERN_RECOGNITION",
}


def normalize_type(question_type: str) -> str:
    """Normalize a question type identifier to its upper snake-case form.

    Args:
        question_type: Type identifier as supplied by the caller.

    Returns:
        The canonical identifier, e.g. "word problems" -> "WORD_PROBLEMS".
    """
    key = question_type.strip().upper().replace("-", "_").replace(" ", "_")
    return _TYPE_ALIASES.get(key, key)


def main_type_for(question_type: str) -> str | None:
    """Return the main arithmetic type a question type belongs to, if any.

    Fine-grained identifiers such as "DECIMAL_ADDITION" resolve to "ADDITION".
    """
    key = normalize_type(question_type)
    if key in SUBTYPES:
        return key
    lowered = key.lower()
    for main, subtypes in SUBTYPES.items():
        if lowered in subtypes:
            return main
    for main in SUBTYPES:
        if main in key:
            return main
    return None


def subtypes_for_grade(question_type: str, grade: int) -> tuple[str, ...]:
    """Get the sub-types recommended for a question type and grade.

    Falls back to the full catalogue when the grade has no recommendation,
    and to an empty tuple for types outside the catalogue.
    """
    main = main_type_for(question_type)
    if main is None:
        return ()
    recommended = GRADE_SUBTYPES.get(grade, {}).get(main)
    if recommended:
        return recommended
    return SUBTYPES[main]


def describe_category(category: str) -> str:
    """Return a readable description of a category for generation prompts."""
    description = CATEGORY_DESCRIPTIONS.get(category.strip().lower())
    if description is None:
        return category
    return f"{category} ({description})"


def is_standard_subject(subject: str) -> bool:
    """Check whether a subject is one of the standard curriculum subjects."""
    return subject.strip().lower() in STANDARD_SUBJECTS

"""Template question generator for learnhub.

Produces arithmetic and pattern questions from templates, with numbers
sized for the grade and difficulty and word problems themed on the
student's interests. Used as the per-type fallback and for offline runs.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from learnhub.core.taxonomy import main_type_for
from learnhub.core.types import DifficultyLevel
from learnhub.formatting.numbers import format_number
from learnhub.generators.models import RawQuestion
from learnhub.personalization.mapper import DEFAULT_THEME, Theme

if TYPE_CHECKING:
    from collections.abc import Callable

    from learnhub.generators.models import GenerationContext

DEFAULT_CONFIDENCE = 0.7

NAMES: tuple[str, ...] = ("Aroha", "Liam", "Mia", "Noah", "Ava", "Tane", "Zoe", "Leo")

_DIFFICULTY_CAP: dict[DifficultyLevel, int] = {
    DifficultyLevel.EASY: 10,
    DifficultyLevel.MEDIUM: 50,
    DifficultyLevel.HARD: 100,
}

_FACTOR_CAP: dict[DifficultyLevel, int] = {
    DifficultyLevel.EASY: 5,
    DifficultyLevel.MEDIUM: 10,
    DifficultyLevel.HARD: 12,
}


def _grade_multiplier(grade: int) -> int:
    if grade <= 2:
        return 1
    if grade <= 5:
        return 2
    if grade <= 8:
        return 5
    return 10


def number_range(grade: int, difficulty: DifficultyLevel) -> tuple[int, int]:
    """Return the operand range for additive questions.

    Example:
        >>> number_range(1, DifficultyLevel.EASY)
        (1, 10)
        >>> number_range(4, DifficultyLevel.HARD)
        (10, 200)
    """
    cap = _DIFFICULTY_CAP[difficulty] * _grade_multiplier(grade)
    low = 1 if difficulty is DifficultyLevel.EASY else max(2, cap // 20)
    return low, cap


def factor_cap(grade: int, difficulty: DifficultyLevel) -> int:
    """Return the largest factor used in multiplication and division."""
    return max(2, _FACTOR_CAP[difficulty] + (grade // 3 if grade > 5 else 0))


class TemplateQuestionGenerator:
    """Generates questions from built-in templates.

    Output depends only on the context and the random source, so a seeded
    generator is deterministic. Every item is marked as fallback content.

    Attributes:
        confidence: Confidence given to every generated item.

    Example:
        >>> generator = TemplateQuestionGenerator(random.Random(7))
        >>> questions = await generator.generate(context, count=3)
        >>> all(q.is_fallback for q in questions)
        True
    """

    def __init__(self, rng: random.Random | None = None, confidence: float = DEFAULT_CONFIDENCE) -> None:
        """Initialize TemplateQuestionGenerator.

        Args:
            rng: Random source; a fresh unseeded one when omitted.
            confidence: Confidence given to generated items.
        """
        self.rng = rng or random.Random()
        self.confidence = confidence
        self._builders: dict[str, Callable[[GenerationContext, Theme, str, bool], tuple[str, float, str]]] = {
            "ADDITION": self._addition,
            "SUBTRACTION": self._subtraction,
            "MULTIPLICATION": self._multiplication,
            "DIVISION": self._division,
            "PATTERN_RECOGNITION": self._pattern,
        }

    async def generate(self, context: GenerationContext, count: int) -> list[RawQuestion]:
        """Generate ``count`` questions for the context's type."""
        return self.generate_sync(context, count)

    def generate_sync(self, context: GenerationContext, count: int) -> list[RawQuestion]:
        """Synchronous form of ``generate``."""
        main = main_type_for(context.question_type)
        cycle = [main] if main is not None else ["ADDITION", "SUBTRACTION", "MULTIPLICATION", "DIVISION"]
        themes = context.personalization.themes or (DEFAULT_THEME,)
        hints = [context.personalization.style_hint, *context.personalization.motivator_hooks[:1]]
        hints.append("Break the problem into smaller steps.")

        questions: list[RawQuestion] = []
        seen: set[str] = set()
        attempts = 0
        while len(questions) < count:
            kind = cycle[attempts % len(cycle)]
            theme = themes[len(questions) % len(themes)]
            name = self.rng.choice(NAMES)
            word_problem = attempts % 2 == 1
            attempts += 1

            stem, answer, working = self._builders[kind](context, theme, name, word_problem)
            # Small number ranges run out of distinct stems; allow repeats after a while
            if stem in seen and attempts <= count * 10:
                continue
            seen.add(stem)
            questions.append(
                RawQuestion(
                    question=stem,
                    answer=format_number(answer),
                    explanation=working if context.include_explanations else None,
                    hints=hints,
                    confidence=self.confidence,
                    is_fallback=True,
                )
            )
        return questions

    def _addition(self, context: GenerationContext, theme: Theme, name: str, word: bool) -> tuple[str, float, str]:
        low, high = number_range(context.grade, context.difficulty)
        a, b = self.rng.randint(low, high), self.rng.randint(low, high)
        working = f"{a} + {b} = {a + b}"
        if word:
            stem = (
                f"{name} has {a} {theme.items} {theme.setting} and gets {b} more. "
                f"How many {theme.items} does {name} have now?"
            )
            return stem, a + b, working
        return f"What is {a} + {b}?", a + b, working

    def _subtraction(self, context: GenerationContext, theme: Theme, name: str, word: bool) -> tuple[str, float, str]:
        low, high = number_range(context.grade, context.difficulty)
        a, b = self.rng.randint(low, high), self.rng.randint(low, high)
        a, b = max(a, b), min(a, b)
        working = f"{a} − {b} = {a - b}"
        if word:
            stem = (
                f"{name} has {a} {theme.items} {theme.setting} and gives away {b}. "
                f"How many {theme.items} are left?"
            )
            return stem, a - b, working
        return f"What is {a} − {b}?", a - b, working

    def _multiplication(self, context: GenerationContext, theme: Theme, name: str, word: bool) -> tuple[str, float, str]:
        cap = factor_cap(context.grade, context.difficulty)
        a, b = self.rng.randint(2, cap), self.rng.randint(2, cap)
        working = f"{a} × {b} = {a * b}"
        if word:
            stem = f"{name} fills {a} boxes {theme.setting} with {b} {theme.items} each. How many {theme.items} is that?"
            return stem, a * b, working
        return f"What is {a} × {b}?", a * b, working

    def _division(self, context: GenerationContext, theme: Theme, name: str, word: bool) -> tuple[str, float, str]:
        cap = factor_cap(context.grade, context.difficulty)
        divisor, quotient = self.rng.randint(2, cap), self.rng.randint(1, cap)
        dividend = divisor * quotient
        working = f"{dividend} ÷ {divisor} = {quotient}"
        if word:
            stem = (
                f"{name} shares {dividend} {theme.items} {theme.setting} equally among {divisor} friends. "
                f"How many {theme.items} does each friend get?"
            )
            return stem, quotient, working
        return f"What is {dividend} ÷ {divisor}?", quotient, working

    def _pattern(self, context: GenerationContext, theme: Theme, name: str, word: bool) -> tuple[str, float, str]:
        low, high = number_range(context.grade, context.difficulty)
        start = self.rng.randint(low, max(low, high // 2))
        step = self.rng.randint(2, max(2, factor_cap(context.grade, context.difficulty)))
        terms = [start + step * i for i in range(4)]
        answer = start + step * 4
        shown = ", ".join(str(t) for t in terms)
        working = f"The pattern adds {step} each time: {terms[-1]} + {step} = {answer}"
        if word:
            stem = f"{name} counts {theme.items} {theme.setting}: {shown}, ... What number comes next?"
            return stem, answer, working
        return f"What number comes next in the pattern {shown}, ...?", answer, working

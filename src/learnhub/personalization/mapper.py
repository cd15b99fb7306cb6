"""Personalization mapper.

Folds a student's persona (learning style, interests and motivators)
into generation parameters, a readable summary and a personalization
score in [0.5, 1.0].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from learnhub.core.types import LearningStyle, PersonalizationApplied

if TYPE_CHECKING:
    from collections.abc import Sequence

    from learnhub.core.types import GenerationRequest

BASE_SCORE = 0.5
STYLE_WEIGHT = 0.1
INTEREST_WEIGHT = 0.3
MOTIVATOR_WEIGHT = 0.1
MAX_SCORED_INTERESTS = 5
MAX_SCORED_MOTIVATORS = 3

DEFAULT_STYLE = LearningStyle.VISUAL

STYLE_HINTS: dict[LearningStyle, str] = {
    LearningStyle.VISUAL: "Try drawing this out or making a diagram.",
    LearningStyle.AUDITORY: "Try reading this problem out loud.",
    LearningStyle.KINESTHETIC: "Try using physical objects to model this.",
    LearningStyle.READING_WRITING: "Try writing out each step.",
}

MOTIVATOR_HOOKS: dict[str, str] = {
    "competition": "Beat your previous score!",
    "achievement": "Solve this to reach the next level!",
    "exploration": "Discover what the numbers reveal.",
    "creativity": "Find your own way to the answer.",
    "social learning": "Explain your answer to a friend.",
    "personal growth": "Notice how much you have improved.",
    "problem solving": "Crack this puzzle step by step.",
    "recognition": "Show everyone what you can do!",
}


@dataclass(frozen=True)
class Theme:
    """A word-problem setting for an interest."""

    setting: str
    items: str


INTEREST_THEMES: dict[str, Theme] = {
    "sports": Theme("at the sports club", "balls"),
    "technology": Theme("in the robotics lab", "circuit boards"),
    "arts": Theme("in the art studio", "paintbrushes"),
    "music": Theme("in the school band", "music sheets"),
    "nature": Theme("on a nature walk", "leaves"),
    "animals": Theme("at the animal shelter", "puppies"),
    "space": Theme("at the space centre", "rockets"),
    "history": Theme("at the museum", "old coins"),
    "science": Theme("in the science lab", "test tubes"),
    "reading": Theme("at the library", "books"),
    "gaming": Theme("in a video game", "gems"),
    "cooking": Theme("in the kitchen", "cupcakes"),
    "travel": Theme("on a road trip", "postcards"),
    "movies": Theme("at the cinema", "tickets"),
    "fashion": Theme("at the fashion show", "scarves"),
    "cars": Theme("at the car show", "toy cars"),
    "photography": Theme("on a photo walk", "photos"),
}

DEFAULT_THEME = Theme("at school", "stickers")


def theme_for(interest: str) -> Theme:
    """Return the word-problem theme for an interest."""
    return INTEREST_THEMES.get(interest.strip().lower(), DEFAULT_THEME)


@dataclass(frozen=True)
class PersonalizationParams:
    """Persona-derived parameters passed to the question generators.

    Attributes:
        learning_style: Preferred learning style.
        style_hint: Hint line matching the learning style.
        interests: Interests in request order.
        themes: Word-problem themes, one per interest.
        motivator_hooks: One framing line per motivator.
    """

    learning_style: LearningStyle = DEFAULT_STYLE
    style_hint: str = STYLE_HINTS[DEFAULT_STYLE]
    interests: tuple[str, ...] = ()
    themes: tuple[Theme, ...] = ()
    motivator_hooks: tuple[str, ...] = ()


class PersonalizationMapper:
    """Maps a persona to generation parameters, a summary and a score.

    Example:
        >>> mapper = PersonalizationMapper()
        >>> summary, score = mapper.summarize(LearningStyle.AUDITORY, ["Sports", "Music"], ["Competition"])
        >>> score
        0.7533
    """

    def score(self, learning_style: LearningStyle, interests: Sequence[str], motivators: Sequence[str]) -> float:
        """Compute the personalization score.

        Non-decreasing in the number of interests and motivators, and
        always within [0.5, 1.0].
        """
        score = BASE_SCORE
        if LearningStyle(learning_style) is not DEFAULT_STYLE:
            score += STYLE_WEIGHT
        score += INTEREST_WEIGHT * min(len(interests), MAX_SCORED_INTERESTS) / MAX_SCORED_INTERESTS
        score += MOTIVATOR_WEIGHT * min(len(motivators), MAX_SCORED_MOTIVATORS) / MAX_SCORED_MOTIVATORS
        return round(min(max(score, BASE_SCORE), 1.0), 4)

    def summarize(
        self,
        learning_style: LearningStyle,
        interests: Sequence[str],
        motivators: Sequence[str],
    ) -> tuple[str, float]:
        """Summarize the persona for display and audit.

        Args:
            learning_style: Preferred learning style.
            interests: Student interests.
            motivators: Student motivators.

        Returns:
            A readable summary and the personalization score.
        """
        style = LearningStyle(learning_style).value.replace("_", "/")
        primary = ", ".join(interests[:3]) if interests else "general topics"
        article = "an" if style[0] in "aeiou" else "a"
        summary = f"Questions personalized for {article} {style} learner with interests in {primary}"
        if motivators:
            summary += f", motivated by {', '.join(motivators)}"
        return summary + ".", self.score(learning_style, interests, motivators)

    def to_params(
        self,
        learning_style: LearningStyle,
        interests: Sequence[str],
        motivators: Sequence[str],
    ) -> PersonalizationParams:
        """Build the generator parameters for a persona."""
        style = LearningStyle(learning_style)
        return PersonalizationParams(
            learning_style=style,
            style_hint=STYLE_HINTS[style],
            interests=tuple(interests),
            themes=tuple(theme_for(i) for i in interests),
            motivator_hooks=tuple(_hook_for(m) for m in motivators),
        )

    def applied(self, request: GenerationRequest) -> PersonalizationApplied:
        """Describe the persona applied to a request's response."""
        summary, _ = self.summarize(request.learning_style, request.interests, request.motivators)
        return PersonalizationApplied(
            interests=list(request.interests),
            motivators=list(request.motivators),
            learning_style=request.learning_style.value,
            summary=summary,
        )


def _hook_for(motivator: str) -> str:
    return MOTIVATOR_HOOKS.get(motivator.strip().lower(), f"Keep {motivator.strip().lower()} in mind as you solve it.")

"""Base protocol for question generators.

This module defines the protocol that all per-type question generators
must implement.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from learnhub.generators.models import GenerationContext, RawQuestion


@runtime_checkable
class QuestionGeneratorProtocol(Protocol):
    """Protocol for per-type question generators.

    Any question generator must implement this protocol to be used by the
    generation orchestrator, either as the primary or the fallback generator.

    Example:
        >>> class OneQuestion:
        ...     async def generate(self, context: GenerationContext, count: int) -> list[RawQuestion]:
        ...         return [RawQuestion(question="What is 2 + 2?", answer="4")] * count
        ...
        >>> assert isinstance(OneQuestion(), QuestionGeneratorProtocol)
    """

    async def generate(self, context: GenerationContext, count: int) -> list[RawQuestion]:
        """Generate raw questions for one question type.

        Args:
            context: Everything known about the type being generated.
            count: Number of questions wanted.

        Returns:
            Up to ``count`` raw questions; may return fewer.

        Raises:
            GenerationError: If no usable question could be produced.
        """
        ...

"""LLM-backed question generator for learnhub.

This module generates questions for one question type by prompting an
LLM for a JSON array and checking each returned answer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from learnhub.core.exceptions import GenerationError, LLMConnectionError
from learnhub.generators.parsing import parse_json_array, parse_raw_questions
from learnhub.generators.prompts import build_additional_prompt, build_generation_prompt
from learnhub.generators.validators import AnswerChecker

if TYPE_CHECKING:
    from learnhub.core.protocols import LLMProtocol
    from learnhub.generators.models import GenerationContext, RawQuestion

logger = logging.getLogger(__name__)


class LLMQuestionGenerator:
    """Generates questions for one type using an LLM.

    Asks once for the whole batch and, when the model returns fewer usable
    items than requested, once more for the missing ones. Every item is
    passed through the answer checker, which sets its confidence.

    Attributes:
        llm: The LLM provider for generation.
        checker: Answer checker setting item confidence.

    Example:
        >>> async with OllamaLLM() as llm:
        ...     generator = LLMQuestionGenerator(llm)
        ...     questions = await generator.generate(context, count=5)
    """

    def __init__(self, llm: LLMProtocol, checker: AnswerChecker | None = None) -> None:
        """Initialize LLMQuestionGenerator.

        Args:
            llm: The LLM provider implementing LLMProtocol.
            checker: Optional answer checker.
        """
        self.llm = llm
        self.checker = checker or AnswerChecker()

    async def generate(self, context: GenerationContext, count: int) -> list[RawQuestion]:
        """Generate up to ``count`` checked questions for the context's type.

        Args:
            context: The generation context.
            count: Number of questions wanted.

        Returns:
            Between 1 and ``count`` checked questions.

        Raises:
            GenerationError: If the LLM fails or returns nothing usable.
        """
        if count <= 0:
            return []

        try:
            response = await self.llm.generate(build_generation_prompt(context, count))
        except LLMConnectionError as e:
            msg = f"Failed to generate {context.question_type} questions: {e}"
            raise GenerationError(msg) from e
        items = parse_raw_questions(parse_json_array(response))

        missing = count - len(items)
        if missing > 0:
            logger.debug(f"{context.question_type}: got {len(items)}/{count} items, asking for {missing} more")
            existing = [item.question for item in items]
            try:
                response = await self.llm.generate(build_additional_prompt(context, missing, existing))
                items = parse_raw_questions([*[i.model_dump() for i in items], *parse_json_array(response)])
            except LLMConnectionError as e:
                logger.warning(f"{context.question_type}: follow-up generation failed: {e}")

        if not items:
            msg = f"LLM returned no usable {context.question_type} questions"
            raise GenerationError(msg)

        return [self.checker.check(item) for item in items[:count]]

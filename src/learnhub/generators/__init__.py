"""Generators module for learnhub.

This module provides per-type question generation: an LLM-backed
generator with answer checking, and a template generator used as the
fallback and for offline runs.
"""

from __future__ import annotations

from learnhub.generators.base import QuestionGeneratorProtocol
from learnhub.generators.llm import LLMQuestionGenerator
from learnhub.generators.models import GenerationContext, RawQuestion
from learnhub.generators.parsing import parse_json_array, parse_raw_questions
from learnhub.generators.templates import TemplateQuestionGenerator
from learnhub.generators.validators import AnswerChecker

__all__ = [
    "AnswerChecker",
    "GenerationContext",
    "LLMQuestionGenerator",
    "QuestionGeneratorProtocol",
    "RawQuestion",
    "TemplateQuestionGenerator",
    "parse_json_array",
    "parse_raw_questions",
]

"""Prompts for LLM question generation.

This module contains the prompt templates used by the LLM-backed
question generator and helpers to fill them from a generation context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from learnhub.generators.models import GenerationContext

# Prompt for generating questions of one type
QUESTION_GENERATION_PROMPT = """You are an expert {subject} teacher writing practice questions for a grade {grade} student.

Write {num_questions} {difficulty} questions of type {question_type}.

Category: {category}
{subtypes}{focus}
Student profile:
- Learning style: {learning_style}. {style_hint}
- Interests: {interests}. Set word problems in these contexts where it fits.
{motivators}
Reference content: {relevance}

Requirements:
- Every question must have exactly one correct answer
- Numeric answers must be written as plain numbers (e.g. "12" or "2.5")
- Use numbers appropriate for grade {grade}
- {explanations}

Example output:
[{{"question": "Mia has 5 balls at the sports club and gets 3 more. How many balls does she have now?", "answer": "8", "explanation": "5 + 3 = 8"}}]

Return a JSON array of objects with "question", "answer", "explanation" and optionally "options" and "hints".
Return the JSON array only, nothing else."""

# Prompt for topping up a short batch
ADDITIONAL_QUESTIONS_PROMPT = """{base_prompt}

You already wrote these questions; do not repeat them:
{existing}

Write {num_questions} more."""


def _relevance_description(context: GenerationContext) -> str:
    signal = context.relevance
    if signal is None or signal.is_fallback:
        return "not available; follow the curriculum for this grade."
    return (
        f"{signal.candidate_count} similar reference questions found "
        f"({signal.above_threshold_count} highly relevant); match their style and level."
    )


def build_generation_prompt(context: GenerationContext, num_questions: int) -> str:
    """Fill the generation prompt for a context.

    Args:
        context: The generation context.
        num_questions: Number of questions to ask for.

    Returns:
        The prompt text.
    """
    params = context.personalization
    subtypes = f"Sub-types to cover: {', '.join(context.subtypes)}\n" if context.subtypes else ""
    focus = f"Focus areas: {', '.join(context.focus_areas)}\n" if context.focus_areas else ""
    motivators = (
        f"- Motivators: frame questions with lines like: {' '.join(params.motivator_hooks)}\n"
        if params.motivator_hooks
        else ""
    )
    explanations = (
        "Include a short worked explanation for each answer"
        if context.include_explanations
        else "Leave the explanation empty"
    )
    return QUESTION_GENERATION_PROMPT.format(
        subject=context.subject,
        grade=context.grade,
        num_questions=num_questions,
        difficulty=context.difficulty.value,
        question_type=context.question_type,
        category=context.category_description or context.category,
        subtypes=subtypes,
        focus=focus,
        learning_style=params.learning_style.value.replace("_", "/"),
        style_hint=params.style_hint,
        interests=", ".join(params.interests) or "general topics",
        motivators=motivators,
        relevance=_relevance_description(context),
        explanations=explanations,
    )


def build_additional_prompt(context: GenerationContext, num_questions: int, existing: list[str]) -> str:
    """Fill the prompt asking for more questions than a first batch returned."""
    return ADDITIONAL_QUESTIONS_PROMPT.format(
        base_prompt=build_generation_prompt(context, num_questions),
        existing="\n".join(f"- {q}" for q in existing),
        num_questions=num_questions,
    )

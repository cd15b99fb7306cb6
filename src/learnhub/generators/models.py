"""Data models for per-type question generation.

This module contains the models exchanged between the orchestrator and
the question generators.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from learnhub.core.types import DifficultyLevel, RelevanceSignal
from learnhub.personalization.mapper import PersonalizationParams


class RawQuestion(BaseModel):
    """A question as produced by a generator, before formatting.

    Attributes:
        question: The question text.
        answer: The correct answer.
        options: Answer options, if the generator supplied any.
        statement: A claim to judge, for true/false presentation.
        explanation: Optional worked explanation.
        hints: Optional hints.
        confidence: Validation confidence, None when not yet checked.
        is_fallback: Whether the item came from the fallback generator.
    """

    model_config = {"frozen": True}

    question: str = Field(..., min_length=1, description="The question text")
    answer: str = Field(..., min_length=1, description="The correct answer")
    options: list[str] | None = Field(default=None, description="Answer options")
    statement: str | None = Field(default=None, description="Claim for true/false")
    explanation: str | None = Field(default=None, description="Worked explanation")
    hints: list[str] = Field(default_factory=list, description="Hints")
    confidence: float | None = Field(default=None, ge=0.0, le=1.0, description="Validation confidence")
    is_fallback: bool = Field(default=False, description="Produced by the fallback generator")

    @field_validator("question", "answer", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_options(cls, value: object) -> object:
        if isinstance(value, list):
            return [str(v).strip() for v in value if str(v).strip()]
        return value


class GenerationContext(BaseModel):
    """Everything a generator knows about the type being generated.

    Attributes:
        question_type: Type identifier to generate.
        subtypes: Sub-types recommended for the type and grade.
        category: Category identifier.
        category_description: Readable category description for prompts.
        subject: Subject identifier.
        difficulty: Requested difficulty.
        grade: Grade of the student.
        relevance: Relevance signal retrieved for the type.
        personalization: Persona-derived parameters.
        focus_areas: Topics to emphasize.
        include_explanations: Whether to produce worked explanations.
    """

    model_config = {"frozen": True}

    question_type: str
    subtypes: tuple[str, ...] = ()
    category: str
    category_description: str = ""
    subject: str = "mathematics"
    difficulty: DifficultyLevel
    grade: int = Field(..., ge=1, le=12)
    relevance: RelevanceSignal | None = None
    personalization: PersonalizationParams = Field(default_factory=PersonalizationParams)
    focus_areas: list[str] = Field(default_factory=list)
    include_explanations: bool = True

"""Core type definitions for learnhub.

This module defines the data structures that flow through a generation
call: the request, the generated questions, relevance signals and the
response with its quality metrics.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _normalize_enum_value(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip().lower().replace("-", "_").replace(" ", "_").replace("/", "_")


class _LenientEnum(str, Enum):
    """String enum accepting any case and hyphen/underscore spelling."""

    @classmethod
    def _missing_(cls, value: object) -> Any:
        key = _normalize_enum_value(value)
        for member in cls:
            if member.value == key or member.name.lower() == key:
                return member
        return None


class QuestionFormat(_LenientEnum):
    """Presentation format of a generated question."""

    MULTIPLE_CHOICE = "multiple_choice"
    SHORT_ANSWER = "short_answer"
    TRUE_FALSE = "true_false"
    FILL_IN_BLANK = "fill_in_blank"


class DifficultyLevel(_LenientEnum):
    """Difficulty of the requested questions."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class LearningStyle(_LenientEnum):
    """Preferred learning style of the student."""

    VISUAL = "visual"
    AUDITORY = "auditory"
    KINESTHETIC = "kinesthetic"
    READING_WRITING = "reading_writing"


class ClusterStatus(_LenientEnum):
    """Health status reported by the search backend."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    UNREACHABLE = "unreachable"

    @property
    def is_usable(self) -> bool:
        """Whether the cluster can serve searches."""
        return self in (ClusterStatus.GREEN, ClusterStatus.YELLOW)


_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CallerIdentity(BaseModel):
    """An already-authenticated caller.

    Authentication happens upstream; the engine only uses the identity
    for logging and audit.

    Attributes:
        user_id: Identifier of the calling user.
        email: Email of the calling user.
        role: Role of the caller (student, admin, ...).
        grade: Grade of the student, if known.
    """

    model_config = _CAMEL

    user_id: str = Field(..., validation_alias=AliasChoices("userId", "user_id", "id"))
    email: str | None = Field(default=None)
    role: str = Field(default="student")
    grade: int | None = Field(default=None)


class GenerationRequest(BaseModel):
    """A request for a personalized multi-type question set.

    The model only checks field types. Range and size invariants are
    checked by ``validate_request`` so that every violation is reported.

    Attributes:
        subject: Subject identifier, e.g. "mathematics".
        category: Category identifier from the taxonomy.
        grade_level: Grade of the student, 1 to 12.
        question_types: Ordered type identifiers; order drives distribution.
        question_format: Target presentation format.
        difficulty_level: Requested difficulty.
        number_of_questions: Total questions across all types.
        learning_style: Preferred learning style.
        interests: Student interests used to theme questions.
        motivators: Student motivators used to frame questions.
        focus_areas: Optional topics to emphasize.
        include_explanations: Whether to ask for worked explanations.

    Example:
        >>> request = GenerationRequest(
        ...     subject="mathematics",
        ...     category="number-operations",
        ...     grade_level=3,
        ...     question_types=["ADDITION", "SUBTRACTION"],
        ...     question_format="multiple_choice",
        ...     difficulty_level="easy",
        ...     number_of_questions=10,
        ...     interests=["Sports"],
        ... )
    """

    model_config = _CAMEL

    subject: str = Field(default="mathematics", description="Subject identifier")
    category: str = Field(default="", description="Category identifier")
    grade_level: int = Field(..., description="Grade of the student")
    question_types: list[str] = Field(default_factory=list, description="Ordered type identifiers")
    question_format: QuestionFormat = Field(default=QuestionFormat.MULTIPLE_CHOICE)
    difficulty_level: DifficultyLevel = Field(default=DifficultyLevel.MEDIUM)
    number_of_questions: int = Field(..., description="Total number of questions")
    learning_style: LearningStyle = Field(default=LearningStyle.VISUAL)
    interests: list[str] = Field(default_factory=list)
    motivators: list[str] = Field(default_factory=list)
    focus_areas: list[str] = Field(default_factory=list)
    include_explanations: bool = Field(default=True)


class GeneratedQuestion(BaseModel):
    """A single generated question.

    ``stem`` and ``canonical_answer`` never change after generation. The
    presentation fields (question, answer, options, statement) are derived
    from them by the format transformer.

    Attributes:
        id: Unique identifier of the question.
        stem: The question as generated, without format framing.
        question: The question text as presented to the student.
        canonical_answer: The correct answer to the stem.
        answer: The correct answer in the presented format.
        options: Answer options, None for formats without options.
        statement: The claim evaluated by a true/false question.
        question_type: Type identifier the question was generated for.
        format: Applied presentation format, None before formatting.
        relevance_score: Relevance of the type's reference content.
        confidence: Validation confidence of the generated item.
        explanation: Optional worked explanation.
        hints: Optional hints.
        is_fallback: Whether the item came from the fallback generator.
    """

    model_config = _CAMEL

    id: str = Field(..., description="Unique identifier")
    stem: str = Field(..., description="Question as generated")
    question: str = Field(..., description="Question as presented")
    canonical_answer: str = Field(..., description="Correct answer to the stem")
    answer: str = Field(..., description="Correct answer in the presented format")
    options: list[str] | None = Field(default=None)
    statement: str | None = Field(default=None)
    question_type: str = Field(..., description="Source type identifier")
    format: QuestionFormat | None = Field(default=None)
    relevance_score: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    explanation: str | None = Field(default=None)
    hints: list[str] = Field(default_factory=list)
    is_fallback: bool = Field(default=False)


class RelevanceSignal(BaseModel):
    """Relevance of stored reference content for one type lookup.

    Attributes:
        score: Aggregate relevance in [0, 1].
        top_score: Best candidate score.
        candidate_count: Number of candidates returned.
        above_threshold_count: Candidates at or above the relevance threshold.
        sources: Identifiers of the returned candidates.
        is_fallback: Whether the score was computed locally.
        source: Provenance marker, "opensearch" or "fallback".
        reason: Why the fallback was used, if it was.
    """

    model_config = _CAMEL

    score: float = Field(..., ge=0.0, le=1.0)
    top_score: float = Field(default=0.0, ge=0.0, le=1.0)
    candidate_count: int = Field(default=0, ge=0)
    above_threshold_count: int = Field(default=0, ge=0)
    sources: list[str] = Field(default_factory=list)
    is_fallback: bool = Field(default=False)
    source: str = Field(default="opensearch")
    reason: str | None = Field(default=None)


class QualityMetrics(BaseModel):
    """Aggregate quality figures of a generation call, each in [0, 1]."""

    model_config = _CAMEL

    vector_relevance_score: float = Field(..., ge=0.0, le=1.0)
    agentic_validation_score: float = Field(..., ge=0.0, le=1.0)
    personalization_score: float = Field(..., ge=0.0, le=1.0)


class PersonalizationApplied(BaseModel):
    """The persona applied to a generation call."""

    model_config = _CAMEL

    interests: list[str] = Field(default_factory=list)
    motivators: list[str] = Field(default_factory=list)
    learning_style: str = Field(...)
    summary: str = Field(default="")


class GenerationResponse(BaseModel):
    """Result of a generation call.

    Attributes:
        session_id: Identifier of the generation session.
        questions: Formatted questions, grouped by type in request order.
        type_distribution: Questions assigned to each type, in request order.
        category_context: Category the questions were generated for.
        personalization_applied: Persona used for the questions.
        total_questions: Number of questions returned.
        quality_metrics: Aggregate quality figures.
        warnings: Scoped warnings for degraded types.
        relevance_signals: Relevance signal per generated type.
        created_at: Creation timestamp (UTC).
    """

    model_config = _CAMEL

    session_id: str
    questions: list[GeneratedQuestion]
    type_distribution: dict[str, int]
    category_context: str
    personalization_applied: PersonalizationApplied
    total_questions: int
    quality_metrics: QualityMetrics
    warnings: list[str] = Field(default_factory=list)
    relevance_signals: dict[str, RelevanceSignal] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def questions_for(self, question_type: str) -> list[GeneratedQuestion]:
        """Return the questions generated for one type."""
        return [q for q in self.questions if q.question_type == question_type]

    def to_payload(self) -> dict[str, Any]:
        """Dump the response as JSON-ready data with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class SearchQuery(BaseModel):
    """A relevance lookup sent to the search backend.

    Attributes:
        question_type: Type identifier to match.
        category: Category identifier to match.
        difficulty: Difficulty to match.
        grade: Grade the candidates must be written for.
        size: Maximum number of candidates.
    """

    model_config = {"frozen": True}

    question_type: str
    category: str
    difficulty: DifficultyLevel
    grade: int
    size: int = Field(default=10, ge=1)


class SearchHit(BaseModel):
    """A reference question returned by the search backend."""

    model_config = {"frozen": True}

    id: str = Field(..., description="Identifier of the stored question")
    score: float = Field(..., ge=0.0, le=1.0, description="Normalized relevance score")


class ClusterHealth(BaseModel):
    """Cluster health reported by the search backend."""

    model_config = {"frozen": True}

    status: ClusterStatus
    cluster_name: str | None = None

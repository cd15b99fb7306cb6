"""Generation orchestrator for learnhub.

This module coordinates a generation call: request validation, the
distribution of questions across types, per-type generation with
relevance retrieval and formatting, and the aggregation of quality
metrics into the response.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from learnhub.core.config import OrchestratorConfig
from learnhub.core.distribution import active_types, distribute
from learnhub.core.exceptions import GenerationTimeoutError, RequestValidationError
from learnhub.core.taxonomy import describe_category, subtypes_for_grade
from learnhub.core.types import GeneratedQuestion, GenerationResponse, QualityMetrics
from learnhub.core.validation import Invalid, parse_request, validate_request
from learnhub.formatting.transformer import apply_format
from learnhub.generators.models import GenerationContext
from learnhub.generators.templates import TemplateQuestionGenerator
from learnhub.generators.validators import UNVERIFIED_CONFIDENCE
from learnhub.personalization.mapper import PersonalizationMapper
from learnhub.relevance.retriever import RelevanceRetriever

if TYPE_CHECKING:
    from collections.abc import Mapping

    from learnhub.core.distribution import TypeDistribution
    from learnhub.core.types import CallerIdentity, GenerationRequest, RelevanceSignal
    from learnhub.generators.base import QuestionGeneratorProtocol
    from learnhub.generators.models import RawQuestion
    from learnhub.personalization.mapper import PersonalizationParams

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    """Create a generation session identifier.

    Example:
        >>> new_session_id()
        'ai_session_1760745600000_3f9a1c2be'
    """
    return f"ai_session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


@dataclass
class TypeOutcome:
    """Result of generating one question type.

    Attributes:
        question_type: The generated type.
        questions: Formatted questions, exactly the assigned count.
        signal: Relevance signal retrieved for the type.
        warnings: Scoped warnings when the type degraded.
    """

    question_type: str
    questions: list[GeneratedQuestion]
    signal: RelevanceSignal
    warnings: list[str] = field(default_factory=list)


def _mean(values: list[float]) -> float:
    return round(sum(values) / len(values), 4) if values else 0.0


class GenerationOrchestrator:
    """Coordinates multi-type question generation.

    Types are generated concurrently and independently; results are
    collected in request order. A failing type degrades to fallback
    content with a warning while the other types complete. Only invalid
    requests and caller timeouts or cancellations fail the whole call.

    Attributes:
        generator: Primary per-type question generator.
        retriever: Relevance retriever.
        fallback_generator: Generator used when the primary one falls short.
        mapper: Personalization mapper.
        config: Orchestrator configuration.

    Example:
        >>> async with OllamaLLM() as llm:
        ...     orchestrator = GenerationOrchestrator(
        ...         LLMQuestionGenerator(llm),
        ...         RelevanceRetriever(OpenSearchBackend()),
        ...     )
        ...     response = await orchestrator.generate(request)
        >>> response.total_questions
        10
    """

    def __init__(
        self,
        generator: QuestionGeneratorProtocol,
        retriever: RelevanceRetriever | None = None,
        *,
        config: OrchestratorConfig | None = None,
        fallback_generator: QuestionGeneratorProtocol | None = None,
        mapper: PersonalizationMapper | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            generator: Primary per-type question generator.
            retriever: Relevance retriever. Without one every type gets the
                fallback relevance signal.
            config: Orchestrator configuration.
            fallback_generator: Generator for degraded types. Defaults to
                templates sharing ``rng``.
            mapper: Personalization mapper.
            rng: Random source for option order and fallback content.
        """
        self.config = config or OrchestratorConfig()
        self._rng = rng or random.Random()
        self.generator = generator
        self.retriever = retriever or RelevanceRetriever()
        self._templates = TemplateQuestionGenerator(self._rng)
        self.fallback_generator = fallback_generator or self._templates
        self.mapper = mapper or PersonalizationMapper()

    async def generate(
        self,
        request: GenerationRequest,
        caller: CallerIdentity | None = None,
        *,
        timeout: float | None = None,
    ) -> GenerationResponse:
        """Generate a personalized multi-type question set.

        Args:
            request: The generation request.
            caller: Authenticated caller, used for logging.
            timeout: Caller-level timeout in seconds; overrides the
                configured one.

        Returns:
            The response with exactly ``number_of_questions`` questions.

        Raises:
            RequestValidationError: If the request violates any invariant.
                Raised before any generation work starts.
            GenerationTimeoutError: If the call exceeds the timeout. No
                partial response is returned.
        """
        result = validate_request(request, strict_options=self.config.strict_options)
        if isinstance(result, Invalid):
            logger.info(f"Rejected generation request: {'; '.join(result.messages)}")
            raise RequestValidationError(result.violations)
        return await self._run_bounded(result.request, caller, timeout)

    async def generate_from_payload(
        self,
        data: Mapping[str, Any],
        caller: CallerIdentity | None = None,
        *,
        timeout: float | None = None,
    ) -> GenerationResponse:
        """Parse a loosely-typed request body and generate.

        Raises:
            RequestValidationError: With every type error and invariant
                violation found in the payload.
        """
        result = parse_request(data, strict_options=self.config.strict_options)
        if isinstance(result, Invalid):
            raise RequestValidationError(result.violations)
        return await self._run_bounded(result.request, caller, timeout)

    async def _run_bounded(
        self,
        request: GenerationRequest,
        caller: CallerIdentity | None,
        timeout: float | None,
    ) -> GenerationResponse:
        limit = timeout if timeout is not None else self.config.timeout
        if limit is None:
            return await self._run(request, caller)
        try:
            return await asyncio.wait_for(self._run(request, caller), timeout=limit)
        except asyncio.TimeoutError as e:
            logger.warning(f"Generation timed out after {limit}s; discarding partial results")
            msg = f"Question generation timed out after {limit}s"
            raise GenerationTimeoutError(msg) from e

    async def _run(self, request: GenerationRequest, caller: CallerIdentity | None) -> GenerationResponse:
        session_id = new_session_id()
        distribution = distribute(request.number_of_questions, request.question_types)
        who = caller.user_id if caller is not None else "anonymous"
        logger.info(f"Session {session_id} for {who}: distribution {distribution}")

        params = self.mapper.to_params(request.learning_style, request.interests, request.motivators)
        outcomes = await asyncio.gather(
            *(self._generate_type(request, t, distribution[t], params) for t in active_types(distribution))
        )
        response = self._aggregate(session_id, request, distribution, list(outcomes))
        logger.info(
            f"Session {session_id} complete: {response.total_questions} questions, "
            f"{len(response.warnings)} warning(s)"
        )
        return response

    async def _generate_type(
        self,
        request: GenerationRequest,
        question_type: str,
        count: int,
        params: PersonalizationParams,
    ) -> TypeOutcome:
        signal = await self.retriever.retrieve(
            question_type,
            request.category,
            request.difficulty_level,
            request.grade_level,
            subject=request.subject,
        )
        context = GenerationContext(
            question_type=question_type,
            subtypes=subtypes_for_grade(question_type, request.grade_level),
            category=request.category,
            category_description=describe_category(request.category),
            subject=request.subject,
            difficulty=request.difficulty_level,
            grade=request.grade_level,
            relevance=signal,
            personalization=params,
            focus_areas=list(request.focus_areas),
            include_explanations=request.include_explanations,
        )

        warnings: list[str] = []
        try:
            raws = list(await self.generator.generate(context, count))[:count]
        except Exception as e:
            logger.warning(f"Generation failed for {question_type}, using fallback content: {e}")
            warnings.append(f"{question_type}: generation failed, {count} question(s) use fallback content")
            raws = []

        missing = count - len(raws)
        if missing > 0:
            if not warnings:
                logger.warning(f"{question_type}: generator returned {len(raws)}/{count}, topping up")
                warnings.append(f"{question_type}: {missing} of {count} question(s) use fallback content")
            raws.extend(await self._fallback_raws(context, missing))

        questions, broken = self._format_all(raws, question_type, signal, request)
        if broken:
            warnings.append(f"{question_type}: {broken} question(s) could not be formatted and use fallback content")
            replacements, _ = self._format_all(
                await self._fallback_raws(context, broken), question_type, signal, request
            )
            questions.extend(replacements)

        if len(questions) < count:
            warnings.append(f"{question_type}: only {len(questions)} of {count} question(s) could be produced")
        return TypeOutcome(question_type=question_type, questions=questions, signal=signal, warnings=warnings)

    async def _fallback_raws(self, context: GenerationContext, count: int) -> list[RawQuestion]:
        """Fallback content for ``count`` questions, built-in templates last."""
        generators = [self.fallback_generator]
        if self.fallback_generator is not self._templates:
            generators.append(self._templates)
        for generator in generators:
            try:
                return list(await generator.generate(context, count))[:count]
            except Exception as e:
                logger.warning(f"Fallback generation failed for {context.question_type}: {e}")
        return []

    def _format_all(
        self,
        raws: list[RawQuestion],
        question_type: str,
        signal: RelevanceSignal,
        request: GenerationRequest,
    ) -> tuple[list[GeneratedQuestion], int]:
        questions: list[GeneratedQuestion] = []
        broken = 0
        for raw in raws:
            try:
                question = self._to_question(raw, question_type, signal, request)
                questions.append(apply_format(question, request.question_format, rng=self._rng))
            except Exception as e:
                logger.warning(f"Could not format a {question_type} question: {e}")
                broken += 1
        return questions, broken

    def _to_question(
        self,
        raw: RawQuestion,
        question_type: str,
        signal: RelevanceSignal,
        request: GenerationRequest,
    ) -> GeneratedQuestion:
        return GeneratedQuestion(
            id=f"q_{uuid.uuid4().hex[:12]}",
            stem=raw.question,
            question=raw.question,
            canonical_answer=raw.answer,
            answer=raw.answer,
            options=raw.options,
            statement=raw.statement,
            question_type=question_type,
            relevance_score=signal.score,
            confidence=raw.confidence if raw.confidence is not None else UNVERIFIED_CONFIDENCE,
            explanation=raw.explanation if request.include_explanations else None,
            hints=list(raw.hints),
            is_fallback=raw.is_fallback,
        )

    def _aggregate(
        self,
        session_id: str,
        request: GenerationRequest,
        distribution: TypeDistribution,
        outcomes: list[TypeOutcome],
    ) -> GenerationResponse:
        questions = [q for outcome in outcomes for q in outcome.questions]
        warnings = [w for outcome in outcomes for w in outcome.warnings]
        _, personalization_score = self.mapper.summarize(request.learning_style, request.interests, request.motivators)

        metrics = QualityMetrics(
            vector_relevance_score=_mean([o.signal.score for o in outcomes]),
            # Mean per-item confidence reported by the generators
            agentic_validation_score=_mean([q.confidence for q in questions]),
            personalization_score=personalization_score,
        )
        return GenerationResponse(
            session_id=session_id,
            questions=questions,
            type_distribution=dict(distribution),
            category_context=request.category,
            personalization_applied=self.mapper.applied(request),
            total_questions=len(questions),
            quality_metrics=metrics,
            warnings=warnings,
            relevance_signals={o.question_type: o.signal for o in outcomes},
        )

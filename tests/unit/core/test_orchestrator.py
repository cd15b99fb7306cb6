"""Unit tests for the generation orchestrator."""

from __future__ import annotations

import asyncio
import random
import re
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from learnhub.adapters.search.opensearch import OpenSearchBackend
from learnhub.core.config import OrchestratorConfig, RelevanceConfig
from learnhub.core.exceptions import (
    GenerationCancelledError,
    GenerationError,
    GenerationTimeoutError,
    RequestValidationError,
)
from learnhub.core import orchestrator as orchestrator_module
from learnhub.core.orchestrator import GenerationOrchestrator, new_session_id
from learnhub.core.types import CallerIdentity, GenerationRequest, QuestionFormat
from learnhub.generators.models import GenerationContext, RawQuestion
from learnhub.generators.templates import TemplateQuestionGenerator
from learnhub.relevance.retriever import RelevanceRetriever

# =============================================================================
# Helpers
# =============================================================================


class ScriptedGenerator:
    """Generator returning numbered questions, with per-type failures and delays."""

    def __init__(
        self,
        fail_types: tuple[str, ...] = (),
        short_types: tuple[str, ...] = (),
        delays: dict[str, float] | None = None,
        confidence: float = 0.9,
    ) -> None:
        self.fail_types = fail_types
        self.short_types = short_types
        self.delays = delays or {}
        self.confidence = confidence
        self.calls: list[tuple[str, int]] = []
        self.contexts: list[GenerationContext] = []

    async def generate(self, context: GenerationContext, count: int) -> list[RawQuestion]:
        self.calls.append((context.question_type, count))
        self.contexts.append(context)
        delay = self.delays.get(context.question_type)
        if delay:
            await asyncio.sleep(delay)
        if context.question_type in self.fail_types:
            msg = f"Failed to generate {context.question_type} questions"
            raise GenerationError(msg)
        produced = count - 1 if context.question_type in self.short_types else count
        return [
            RawQuestion(
                question=f"{context.question_type} item {i}: what is {i} + 1?",
                answer=str(i + 1),
                explanation=f"{i} + 1 = {i + 1}",
                confidence=self.confidence,
            )
            for i in range(produced)
        ]


def make_request(**overrides: Any) -> GenerationRequest:
    data: dict[str, Any] = {
        "subject": "mathematics",
        "category": "number-operations",
        "grade_level": 3,
        "question_types": ["ADDITION", "SUBTRACTION"],
        "question_format": "multiple_choice",
        "difficulty_level": "easy",
        "number_of_questions": 10,
        "learning_style": "visual",
        "interests": ["Sports"],
        "motivators": [],
    }
    data.update(overrides)
    return GenerationRequest(**data)


def make_orchestrator(generator: Any, **kwargs: Any) -> GenerationOrchestrator:
    return GenerationOrchestrator(generator, rng=random.Random(11), **kwargs)


# =============================================================================
# Happy path
# =============================================================================


class TestGenerate:
    """Tests for GenerationOrchestrator.generate."""

    @pytest.mark.asyncio
    async def test_response_shape(self) -> None:
        """The response carries questions, distribution, persona and metrics."""
        generator = ScriptedGenerator()
        orchestrator = make_orchestrator(generator)
        caller = CallerIdentity.model_validate({"userId": "u_7", "role": "student", "grade": 3})

        response = await orchestrator.generate(make_request(), caller)

        assert response.total_questions == 10
        assert len(response.questions) == 10
        assert response.type_distribution == {"ADDITION": 5, "SUBTRACTION": 5}
        assert response.category_context == "number-operations"
        assert response.personalization_applied.interests == ["Sports"]
        assert response.personalization_applied.learning_style == "visual"
        assert response.quality_metrics.agentic_validation_score == 0.9
        assert response.quality_metrics.personalization_score == 0.56
        assert response.quality_metrics.vector_relevance_score == 0.8
        assert response.warnings == []
        assert re.fullmatch(r"ai_session_\d+_[0-9a-f]{9}", response.session_id)

    @pytest.mark.asyncio
    async def test_questions_formatted(self) -> None:
        """Every question is rendered in the requested format."""
        response = await make_orchestrator(ScriptedGenerator()).generate(make_request())

        for question in response.questions:
            assert question.format is QuestionFormat.MULTIPLE_CHOICE
            assert question.options is not None
            assert len(question.options) == 4
            assert question.options.count(question.answer) == 1

    @pytest.mark.asyncio
    async def test_fill_in_blank_format(self) -> None:
        """Other formats are applied to every question too."""
        request = make_request(question_format="fill_in_blank")

        response = await make_orchestrator(ScriptedGenerator()).generate(request)

        assert all(q.options is None and "_____" in q.question for q in response.questions)

    @pytest.mark.asyncio
    async def test_order_follows_request(self) -> None:
        """Questions are grouped in request order whatever finishes first."""
        generator = ScriptedGenerator(delays={"ADDITION": 0.05, "SUBTRACTION": 0.02, "DIVISION": 0.0})
        request = make_request(question_types=["ADDITION", "SUBTRACTION", "DIVISION"], number_of_questions=6)

        response = await make_orchestrator(generator).generate(request)

        assert [q.question_type for q in response.questions] == ["ADDITION"] * 2 + ["SUBTRACTION"] * 2 + ["DIVISION"] * 2
        assert list(response.relevance_signals) == ["ADDITION", "SUBTRACTION", "DIVISION"]

    @pytest.mark.asyncio
    async def test_types_run_concurrently(self) -> None:
        """Slow types overlap instead of running one after another."""
        delays = {t: 0.1 for t in ["ADDITION", "SUBTRACTION", "MULTIPLICATION", "DIVISION"]}
        request = make_request(question_types=list(delays), number_of_questions=8)
        loop = asyncio.get_running_loop()

        started = loop.time()
        await make_orchestrator(ScriptedGenerator(delays=delays)).generate(request)

        assert loop.time() - started < 0.35

    @pytest.mark.asyncio
    async def test_zero_count_type_skipped(self) -> None:
        """Types assigned no questions are never generated."""
        generator = ScriptedGenerator()
        request = make_request(question_types=["A", "B", "C", "D"], number_of_questions=3)

        response = await make_orchestrator(generator).generate(request)

        assert sorted(t for t, _ in generator.calls) == ["A", "B", "C"]
        assert response.type_distribution == {"A": 1, "B": 1, "C": 1, "D": 0}
        assert "D" not in response.relevance_signals
        assert response.total_questions == 3
        assert response.warnings == []

    @pytest.mark.asyncio
    async def test_context_passed_to_generator(self) -> None:
        """Generators receive grade sub-types, the category and the persona."""
        generator = ScriptedGenerator()
        request = make_request(question_types=["ADDITION"], number_of_questions=2, motivators=["Competition"])

        await make_orchestrator(generator).generate(request)

        context = generator.contexts[0]
        assert context.subtypes == ("basic_addition", "whole_number_addition", "word_problem_addition")
        assert context.category_description.startswith("number-operations (")
        assert context.personalization.motivator_hooks == ("Beat your previous score!",)
        assert context.relevance is not None and context.relevance.is_fallback

    @pytest.mark.asyncio
    async def test_explanations_dropped_when_not_requested(self) -> None:
        """Explanations are removed when the request turns them off."""
        request = make_request(include_explanations=False)

        response = await make_orchestrator(ScriptedGenerator()).generate(request)

        assert all(q.explanation is None for q in response.questions)

    @pytest.mark.asyncio
    async def test_generate_from_payload(self) -> None:
        """A camelCase request body is parsed and generated."""
        payload = {
            "category": "number-operations",
            "gradeLevel": 2,
            "questionTypes": ["ADDITION"],
            "questionFormat": "SHORT_ANSWER",
            "difficultyLevel": "easy",
            "numberOfQuestions": 3,
            "interests": ["Animals"],
        }

        response = await make_orchestrator(ScriptedGenerator()).generate_from_payload(payload)

        assert response.total_questions == 3
        assert all(q.options is None for q in response.questions)


# =============================================================================
# Validation
# =============================================================================


class TestValidationFailures:
    """Invalid requests fail before any generation work."""

    @pytest.mark.asyncio
    async def test_all_violations_and_no_work(self) -> None:
        """Every violation is reported and nothing is generated."""
        generator = MagicMock()
        generator.generate = AsyncMock()
        request = make_request(question_types=[], interests=["a", "b", "c", "d", "e", "f"])

        with pytest.raises(RequestValidationError) as exc_info:
            await make_orchestrator(generator).generate(request)

        assert "At least one question type is required" in exc_info.value.messages
        assert "Maximum 5 interests allowed" in exc_info.value.messages
        generator.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_payload(self) -> None:
        """Type errors in a request body are reported."""
        payload = {"gradeLevel": "third", "numberOfQuestions": 5, "questionTypes": ["ADDITION"], "interests": ["x"]}

        with pytest.raises(RequestValidationError) as exc_info:
            await make_orchestrator(ScriptedGenerator()).generate_from_payload(payload)

        assert [v.field for v in exc_info.value.violations][0] == "grade_level"

    @pytest.mark.asyncio
    async def test_strict_options(self) -> None:
        """Strict persona options reject unknown interests."""
        orchestrator = make_orchestrator(ScriptedGenerator(), config=OrchestratorConfig(strict_options=True))

        with pytest.raises(RequestValidationError, match="Unknown interests: Dinosaurs"):
            await orchestrator.generate(make_request(interests=["Dinosaurs"]))


# =============================================================================
# Degradation
# =============================================================================


class TestDegradation:
    """Per-type failures degrade only the affected type."""

    @pytest.mark.asyncio
    async def test_failing_type_uses_fallback(self) -> None:
        """A failing type gets fallback content and a scoped warning."""
        generator = ScriptedGenerator(fail_types=("SUBTRACTION",))

        response = await make_orchestrator(generator).generate(make_request())

        assert response.total_questions == 10
        assert all(not q.is_fallback for q in response.questions_for("ADDITION"))
        subtraction = response.questions_for("SUBTRACTION")
        assert len(subtraction) == 5
        assert all(q.is_fallback and q.confidence == 0.7 for q in subtraction)
        assert response.warnings == ["SUBTRACTION: generation failed, 5 question(s) use fallback content"]
        assert response.quality_metrics.agentic_validation_score == 0.8

    @pytest.mark.asyncio
    async def test_short_type_topped_up(self) -> None:
        """A short batch is topped up with fallback content."""
        generator = ScriptedGenerator(short_types=("ADDITION",))

        response = await make_orchestrator(generator).generate(make_request())

        addition = response.questions_for("ADDITION")
        assert len(addition) == 5
        assert sum(q.is_fallback for q in addition) == 1
        assert response.warnings == ["ADDITION: 1 of 5 question(s) use fallback content"]

    @pytest.mark.asyncio
    async def test_every_type_failing_still_completes(self) -> None:
        """Even with every type failing the call returns a full set."""
        generator = ScriptedGenerator(fail_types=("ADDITION", "SUBTRACTION"))

        response = await make_orchestrator(generator).generate(make_request())

        assert response.total_questions == 10
        assert len(response.warnings) == 2

    @pytest.mark.asyncio
    async def test_failing_fallback_generator_uses_templates(self) -> None:
        """When the fallback generator fails too, built-in templates fill the type."""
        generator = ScriptedGenerator(fail_types=("SUBTRACTION",))
        fallback = AsyncMock()
        fallback.generate.side_effect = RuntimeError("fallback store offline")

        response = await make_orchestrator(generator, fallback_generator=fallback).generate(make_request())

        assert response.total_questions == 10
        assert len(response.questions_for("ADDITION")) == 5
        subtraction = response.questions_for("SUBTRACTION")
        assert len(subtraction) == 5
        assert all(q.is_fallback for q in subtraction)
        assert response.warnings == ["SUBTRACTION: generation failed, 5 question(s) use fallback content"]
        fallback.generate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unformattable_item_replaced(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An item that cannot be formatted is replaced without failing other types."""
        original = orchestrator_module.apply_format

        def flaky_apply_format(question: Any, *args: Any, **kwargs: Any) -> Any:
            if question.stem.startswith("ADDITION item 2"):
                msg = "cannot render"
                raise ValueError(msg)
            return original(question, *args, **kwargs)

        monkeypatch.setattr(orchestrator_module, "apply_format", flaky_apply_format)

        response = await make_orchestrator(ScriptedGenerator()).generate(make_request())

        addition = response.questions_for("ADDITION")
        assert len(addition) == 5
        assert sum(q.is_fallback for q in addition) == 1
        assert len(response.questions_for("SUBTRACTION")) == 5
        assert response.warnings == ["ADDITION: 1 question(s) could not be formatted and use fallback content"]

    @pytest.mark.asyncio
    async def test_every_source_failing_reports_shortfall(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """If no content can be produced for a type, the call still completes with a warning."""
        generator = ScriptedGenerator(fail_types=("SUBTRACTION",))
        fallback = AsyncMock()
        fallback.generate.side_effect = RuntimeError("fallback store offline")
        orchestrator = make_orchestrator(generator, fallback_generator=fallback)
        monkeypatch.setattr(orchestrator._templates, "generate", AsyncMock(side_effect=RuntimeError("no templates")))

        response = await orchestrator.generate(make_request())

        assert len(response.questions_for("ADDITION")) == 5
        assert response.questions_for("SUBTRACTION") == []
        assert "SUBTRACTION: only 0 of 5 question(s) could be produced" in response.warnings

    @respx.mock
    @pytest.mark.asyncio
    async def test_search_backend_timing_out(self) -> None:
        """With every search call timing out the call completes on fallback relevance."""
        respx.get("http://localhost:9200/_cluster/health").mock(side_effect=httpx.ReadTimeout("timed out"))
        respx.post("http://localhost:9200/enhanced-math-questions/_search").mock(
            side_effect=httpx.ReadTimeout("timed out")
        )

        async with OpenSearchBackend() as backend:
            retriever = RelevanceRetriever(backend, RelevanceConfig(timeout=1.0))
            orchestrator = make_orchestrator(TemplateQuestionGenerator(random.Random(2)), retriever=retriever)
            response = await orchestrator.generate(make_request())

        assert response.total_questions == 10
        assert len(response.questions) == 10
        assert response.quality_metrics.vector_relevance_score <= 0.8
        assert all(s.is_fallback for s in response.relevance_signals.values())


# =============================================================================
# Timeouts and cancellation
# =============================================================================


class TestCancellation:
    """Caller timeouts and cancellation are terminal."""

    @pytest.mark.asyncio
    async def test_timeout_argument(self) -> None:
        """Exceeding the timeout raises GenerationTimeoutError."""
        generator = ScriptedGenerator(delays={"ADDITION": 1.0})

        with pytest.raises(GenerationTimeoutError) as exc_info:
            await make_orchestrator(generator).generate(make_request(), timeout=0.05)

        assert isinstance(exc_info.value, GenerationCancelledError)

    @pytest.mark.asyncio
    async def test_configured_timeout(self) -> None:
        """The configured timeout applies when no argument is given."""
        generator = ScriptedGenerator(delays={"SUBTRACTION": 1.0})
        orchestrator = make_orchestrator(generator, config=OrchestratorConfig(timeout=0.05))

        with pytest.raises(GenerationTimeoutError):
            await orchestrator.generate(make_request())

    @pytest.mark.asyncio
    async def test_caller_cancellation_propagates(self) -> None:
        """Cancelling the call cancels it without a partial response."""
        generator = ScriptedGenerator(delays={"ADDITION": 1.0, "SUBTRACTION": 1.0})
        task = asyncio.ensure_future(make_orchestrator(generator).generate(make_request()))
        await asyncio.sleep(0.02)

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestSessionId:
    """Tests for new_session_id."""

    def test_format_and_uniqueness(self) -> None:
        """Session ids follow the prefix format and do not repeat."""
        ids = {new_session_id() for _ in range(50)}

        assert len(ids) == 50
        assert all(re.fullmatch(r"ai_session_\d{13}_[0-9a-f]{9}", i) for i in ids)

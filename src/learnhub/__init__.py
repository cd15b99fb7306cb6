"""learnhub: personalized multi-type practice question generation."""

from __future__ import annotations

from learnhub.core.distribution import distribute
from learnhub.core.orchestrator import GenerationOrchestrator, TypeOutcome
from learnhub.core.types import GenerationRequest, GenerationResponse
from learnhub.core.validation import parse_request, validate_request
from learnhub.formatting.transformer import apply_format
from learnhub.generators.llm import LLMQuestionGenerator
from learnhub.generators.templates import TemplateQuestionGenerator
from learnhub.personalization.mapper import PersonalizationMapper
from learnhub.relevance.retriever import RelevanceRetriever

__version__ = "0.3.0"
__all__ = [
    # Orchestration
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationResponse",
    "TypeOutcome",
    # Pipeline stages
    "PersonalizationMapper",
    "RelevanceRetriever",
    "apply_format",
    "distribute",
    "parse_request",
    "validate_request",
    # Generators
    "LLMQuestionGenerator",
    "TemplateQuestionGenerator",
    # Version
    "__version__",
]

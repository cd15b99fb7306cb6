"""Core module for learnhub.

This module contains the fundamental types, protocols, exceptions,
configuration, validation and distribution used throughout the engine.
"""

from __future__ import annotations

from learnhub.core.config import OrchestratorConfig, RelevanceConfig, Settings
from learnhub.core.distribution import TypeDistribution, active_types, distribute
from learnhub.core.exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    GenerationCancelledError,
    GenerationError,
    GenerationTimeoutError,
    LearnHubError,
    LLMConnectionError,
    RequestValidationError,
)
from learnhub.core.protocols import LLMProtocol, SearchBackendProtocol
from learnhub.core.types import (
    CallerIdentity,
    ClusterHealth,
    ClusterStatus,
    DifficultyLevel,
    GeneratedQuestion,
    GenerationRequest,
    GenerationResponse,
    LearningStyle,
    PersonalizationApplied,
    QualityMetrics,
    QuestionFormat,
    RelevanceSignal,
    SearchHit,
    SearchQuery,
)
from learnhub.core.validation import Invalid, Valid, ValidationResult, Violation, parse_request, validate_request

__all__ = [
    "BackendUnavailableError",
    "CallerIdentity",
    "ClusterHealth",
    "ClusterStatus",
    "ConfigurationError",
    "DifficultyLevel",
    "GeneratedQuestion",
    "GenerationCancelledError",
    "GenerationError",
    "GenerationRequest",
    "GenerationResponse",
    "GenerationTimeoutError",
    "Invalid",
    "LLMConnectionError",
    "LLMProtocol",
    "LearnHubError",
    "LearningStyle",
    "OrchestratorConfig",
    "PersonalizationApplied",
    "QualityMetrics",
    "QuestionFormat",
    "RelevanceConfig",
    "RelevanceSignal",
    "RequestValidationError",
    "SearchBackendProtocol",
    "SearchHit",
    "SearchQuery",
    "Settings",
    "TypeDistribution",
    "Valid",
    "ValidationResult",
    "Violation",
    "active_types",
    "distribute",
    "parse_request",
    "validate_request",
]

"""Custom exceptions for learnhub.

This module defines the exception hierarchy used throughout the engine.
All exceptions inherit from LearnHubError for easy catching.

Only RequestValidationError and GenerationCancelledError are terminal for a
generation call. The others are raised at adapter boundaries and recovered
inside the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from learnhub.core.validation import Violation


class LearnHubError(Exception):
    """Base exception for all learnhub errors.

    Example:
        >>> try:
        ...     await orchestrator.generate(request)
        ... except LearnHubError as e:
        ...     print(f"learnhub error: {e}")
    """


class RequestValidationError(LearnHubError):
    """Raised when a generation request violates one or more invariants.

    Carries every violation found, not only the first one.

    Attributes:
        violations: The violated constraints, in check order.

    Example:
        >>> raise RequestValidationError([Violation(field="interests", message="Maximum 5 interests allowed")])
    """

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(v.message for v in self.violations) or "Invalid request")

    @property
    def messages(self) -> list[str]:
        """Human-readable messages for each violation."""
        return [v.message for v in self.violations]


class BackendUnavailableError(LearnHubError):
    """Raised when the search backend is unreachable, unhealthy or times out.

    Never surfaced to callers of the orchestrator; the relevance retriever
    converts it into a fallback signal.

    Example:
        >>> raise BackendUnavailableError("OpenSearch request timed out after 5.0s")
    """


class LLMConnectionError(LearnHubError):
    """Raised when connection to an LLM provider fails.

    Example:
        >>> raise LLMConnectionError("Failed to connect to Ollama at localhost:11434")
    """


class GenerationError(LearnHubError):
    """Raised when question generation for a single type fails.

    The orchestrator recovers from it by degrading that type's slice to
    fallback content.
    """


class GenerationCancelledError(LearnHubError):
    """Raised when a generation call is cancelled before all types complete.

    No partial response is returned.
    """


class GenerationTimeoutError(GenerationCancelledError):
    """Raised when a generation call exceeds its caller-level timeout."""


class ConfigurationError(LearnHubError):
    """Raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError("search timeout must be positive")
    """

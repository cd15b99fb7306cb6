"""Configuration management for learnhub.

Settings are read from environment variables with pydantic-settings. The
pipeline components never read Settings themselves: they receive plain
config objects at construction, built with ``from_settings``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from learnhub.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from typing_extensions import Self


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables with
    the LEARNHUB_ prefix.

    Example:
        >>> # export LEARNHUB_OPENSEARCH_URL=http://search:9200
        >>> # export LEARNHUB_SEARCH_TIMEOUT_SECONDS=3
        >>> settings = Settings()
        >>> settings.search_timeout_seconds
        3.0

    Environment Variables:
        LEARNHUB_OPENSEARCH_URL: Search backend URL (default: http://localhost:9200)
        LEARNHUB_OPENSEARCH_INDEX: Question index (default: enhanced-math-questions)
        LEARNHUB_OPENSEARCH_USERNAME: Basic auth user (optional)
        LEARNHUB_OPENSEARCH_PASSWORD: Basic auth password (optional)
        LEARNHUB_SEARCH_TIMEOUT_SECONDS: Search call timeout (default: 5.0)
        LEARNHUB_OLLAMA_BASE_URL: Ollama API URL (default: http://localhost:11434)
        LEARNHUB_OLLAMA_MODEL: Generation model (default: mistral)
        LEARNHUB_LOG_LEVEL: Logging level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_prefix="LEARNHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Search backend
    opensearch_url: str = Field(
        default="http://localhost:9200",
        description="Base URL of the OpenSearch cluster",
    )
    opensearch_index: str = Field(
        default="enhanced-math-questions",
        description="Index holding reference questions",
    )
    opensearch_username: str | None = Field(default=None, description="Optional basic auth user")
    opensearch_password: str | None = Field(default=None, description="Optional basic auth password")
    opensearch_verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    search_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for one relevance lookup in seconds",
    )
    health_cache_seconds: float = Field(
        default=5.0,
        ge=0,
        description="How long a cluster health result is reused",
    )
    relevance_threshold: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Candidates scoring at or above this count as relevant",
    )
    search_size: int = Field(default=10, ge=1, le=100, description="Candidates requested per lookup")

    # Ollama
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL for Ollama API",
    )
    ollama_model: str = Field(default="mistral", description="Model used for question generation")
    llm_timeout_seconds: float = Field(default=60.0, gt=0, description="Timeout for one LLM call")

    # Orchestration
    generation_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Caller-level timeout for a whole generation call",
    )
    strict_persona_options: bool = Field(
        default=False,
        description="Reject interests and motivators outside the fixed option lists",
    )

    # General
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )


@dataclass(frozen=True)
class RelevanceConfig:
    """Configuration for the relevance retriever.

    Attributes:
        timeout: Upper bound in seconds for one lookup (health + search).
        health_ttl: Seconds a cluster health result is reused.
        relevance_threshold: Score at or above which a candidate counts as relevant.
        search_size: Number of candidates requested.
        fallback_base: Base score of the fallback signal.
        fallback_boost: Boost per recognized subject/difficulty.
        fallback_cap: Upper bound of the fallback score.
        empty_result_score: Score when the backend answers with no candidates.
    """

    timeout: float = 5.0
    health_ttl: float = 5.0
    relevance_threshold: float = 0.7
    search_size: int = 10
    fallback_base: float = 0.7
    fallback_boost: float = 0.05
    fallback_cap: float = 0.8
    empty_result_score: float = 0.6

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            msg = f"relevance timeout must be positive, got {self.timeout}"
            raise ConfigurationError(msg)
        if not 0.0 <= self.fallback_base <= self.fallback_cap <= 1.0:
            msg = "fallback scores must satisfy 0 <= base <= cap <= 1"
            raise ConfigurationError(msg)

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        """Build a RelevanceConfig from application settings."""
        return cls(
            timeout=settings.search_timeout_seconds,
            health_ttl=settings.health_cache_seconds,
            relevance_threshold=settings.relevance_threshold,
            search_size=settings.search_size,
        )


@dataclass(frozen=True)
class OrchestratorConfig:
    """Configuration for the generation orchestrator.

    Attributes:
        timeout: Caller-level timeout in seconds for a whole call. None disables it.
        strict_options: Reject interests/motivators outside the fixed option lists.
    """

    timeout: float | None = None
    strict_options: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        """Build an OrchestratorConfig from application settings."""
        return cls(
            timeout=settings.generation_timeout_seconds,
            strict_options=settings.strict_persona_options,
        )

"""Relevance retrieval against the search backend.

``RelevanceRetriever.retrieve`` always returns a ``RelevanceSignal``. When
the backend is unhealthy, unreachable or too slow, the signal is computed
locally and marked as a fallback.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Union

from learnhub.core.config import RelevanceConfig
from learnhub.core.exceptions import BackendUnavailableError
from learnhub.core.taxonomy import is_standard_subject
from learnhub.core.types import DifficultyLevel, RelevanceSignal, SearchQuery
from learnhub.relevance.health import HealthCache

if TYPE_CHECKING:
    from learnhub.core.protocols import SearchBackendProtocol
    from learnhub.core.types import SearchHit

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = "fallback"
SEARCH_SOURCE = "opensearch"

LookupResult = Union[RelevanceSignal, BackendUnavailableError]


def fallback_signal(
    subject: str,
    difficulty: DifficultyLevel | str,
    config: RelevanceConfig | None = None,
    reason: str | None = None,
) -> RelevanceSignal:
    """Compute the local relevance signal used when the backend is unavailable.

    Starts from a conservative base and adds a small boost for a standard
    subject and for a standard difficulty, capped below a real signal's range.

    Example:
        >>> fallback_signal("mathematics", "easy").score
        0.8
        >>> fallback_signal("astronomy", "easy").score
        0.75
    """
    config = config or RelevanceConfig()
    score = config.fallback_base
    if is_standard_subject(subject):
        score += config.fallback_boost
    if _is_standard_difficulty(difficulty):
        score += config.fallback_boost
    return RelevanceSignal(
        score=round(min(score, config.fallback_cap), 4),
        is_fallback=True,
        source=FALLBACK_SOURCE,
        reason=reason,
    )


def _is_standard_difficulty(difficulty: DifficultyLevel | str) -> bool:
    try:
        DifficultyLevel(difficulty)
    except ValueError:
        return False
    return True


def aggregate_hits(hits: list[SearchHit], config: RelevanceConfig) -> RelevanceSignal:
    """Turn search candidates into a relevance signal.

    The score is the mean candidate score. An empty candidate set gets a
    fixed lower score.
    """
    if not hits:
        return RelevanceSignal(score=config.empty_result_score, source=SEARCH_SOURCE)
    scores = [hit.score for hit in hits]
    return RelevanceSignal(
        score=round(sum(scores) / len(scores), 4),
        top_score=max(scores),
        candidate_count=len(hits),
        above_threshold_count=sum(1 for s in scores if s >= config.relevance_threshold),
        sources=[hit.id for hit in hits],
        source=SEARCH_SOURCE,
    )


class RelevanceRetriever:
    """Retrieves relevance signals for question types.

    Attributes:
        config: Timeouts, thresholds and fallback scoring.

    Example:
        >>> retriever = RelevanceRetriever(OpenSearchBackend(url="http://localhost:9200"))
        >>> signal = await retriever.retrieve("ADDITION", "number-operations", DifficultyLevel.EASY, 3)
        >>> signal.is_fallback
        False
    """

    def __init__(
        self,
        backend: SearchBackendProtocol | None = None,
        config: RelevanceConfig | None = None,
        health_cache: HealthCache | None = None,
    ) -> None:
        """Initialize the retriever.

        Args:
            backend: Search backend. None always yields the fallback signal.
            config: Retrieval configuration.
            health_cache: Shared health cache; one is created when omitted.
        """
        self.config = config or RelevanceConfig()
        self._backend = backend
        self._health: HealthCache | None = None
        if backend is not None:
            self._health = health_cache or HealthCache(backend, ttl=self.config.health_ttl)

    @property
    def health_cache(self) -> HealthCache | None:
        return self._health

    async def retrieve(
        self,
        question_type: str,
        category: str,
        difficulty: DifficultyLevel,
        grade: int,
        subject: str = "mathematics",
    ) -> RelevanceSignal:
        """Retrieve the relevance signal for one type.

        Never raises for backend problems; they produce a fallback signal.

        Args:
            question_type: Type identifier to match.
            category: Category identifier to match.
            difficulty: Requested difficulty.
            grade: Grade of the student.
            subject: Subject, used for fallback scoring.

        Returns:
            A real or fallback relevance signal.
        """
        if self._backend is None or self._health is None:
            return fallback_signal(subject, difficulty, self.config, reason="no search backend configured")

        query = SearchQuery(
            question_type=question_type,
            category=category,
            difficulty=difficulty,
            grade=grade,
            size=self.config.search_size,
        )
        try:
            lookup = self._lookup(self._backend, self._health, query)
            result = await asyncio.wait_for(lookup, timeout=self.config.timeout)
        except asyncio.TimeoutError:
            result = BackendUnavailableError(f"relevance lookup timed out after {self.config.timeout}s")

        if isinstance(result, BackendUnavailableError):
            logger.warning(f"Using fallback relevance for {question_type}: {result}")
            return fallback_signal(subject, difficulty, self.config, reason=str(result))

        logger.debug(
            f"Relevance for {question_type}: {result.score:.3f} "
            f"({result.candidate_count} candidates, {result.above_threshold_count} above threshold)"
        )
        return result

    async def _lookup(self, backend: SearchBackendProtocol, health: HealthCache, query: SearchQuery) -> LookupResult:
        status = await health.status()
        if not status.is_usable:
            return BackendUnavailableError(f"search cluster status is {status.value}")

        try:
            hits = await backend.search(query)
            return aggregate_hits(hits, self.config)
        except BackendUnavailableError as e:
            health.invalidate()
            return e
        except Exception as e:
            health.invalidate()
            return BackendUnavailableError(f"search failed: {type(e).__name__}: {e}")

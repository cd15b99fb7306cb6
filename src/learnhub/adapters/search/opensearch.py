"""OpenSearch adapter for learnhub.

This module provides an async client for the OpenSearch REST API,
implementing the SearchBackendProtocol used by the relevance retriever.
"""

from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx
from typing_extensions import Self

from learnhub.core.exceptions import BackendUnavailableError
from learnhub.core.types import ClusterHealth, ClusterStatus, SearchHit

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from learnhub.core.config import Settings
    from learnhub.core.types import SearchQuery

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_URL = "http://localhost:9200"
DEFAULT_INDEX = "enhanced-math-questions"
DEFAULT_TIMEOUT = 5.0


class OpenSearchBackend:
    """Async client for the OpenSearch question index.

    Implements SearchBackendProtocol. Every failure (connection error,
    timeout, HTTP error status, malformed payload) is raised as
    BackendUnavailableError.

    Attributes:
        url: Base URL of the cluster.
        index: Index holding reference questions.
        timeout: Per-request timeout in seconds.
        verify_ssl: Whether TLS certificates are verified.

    Example:
        >>> async with OpenSearchBackend(url="http://localhost:9200") as backend:
        ...     health = await backend.health()
        ...     hits = await backend.search(query)
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        index: str = DEFAULT_INDEX,
        username: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
    ) -> None:
        """Initialize the OpenSearch client.

        Args:
            url: Base URL of the cluster. Defaults to localhost:9200.
            index: Index to search. Defaults to "enhanced-math-questions".
            username: Optional basic auth user.
            password: Optional basic auth password.
            timeout: Per-request timeout in seconds. Defaults to 5.0.
            verify_ssl: Verify TLS certificates. Defaults to True.
        """
        self.url = url.rstrip("/")
        self.index = index
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._auth = httpx.BasicAuth(username, password or "") if username else None
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenSearchBackend:
        """Create a backend from application settings."""
        return cls(
            url=settings.opensearch_url,
            index=settings.opensearch_index,
            username=settings.opensearch_username,
            password=settings.opensearch_password,
            timeout=settings.search_timeout_seconds,
            verify_ssl=settings.opensearch_verify_ssl,
        )

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.url,
            auth=self._auth,
            timeout=self.timeout,
            verify=self.verify_ssl,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> Self:
        """Enter async context manager, creating a reusable HTTP client."""
        self._client = self._new_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context manager, closing the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the managed client, or a temporary one in standalone mode."""
        if self._client is not None:
            yield self._client
        else:
            async with self._new_client() as client:
                yield client

    async def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            async with self._get_client() as client:
                response = await client.request(method, path, json=body)
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError as e:
            msg = f"Failed to connect to OpenSearch at {self.url}: {e}"
            raise BackendUnavailableError(msg) from e
        except httpx.TimeoutException as e:
            msg = f"OpenSearch request timed out after {self.timeout}s"
            raise BackendUnavailableError(msg) from e
        except httpx.HTTPStatusError as e:
            msg = f"OpenSearch request failed: {e.response.status_code} {e.response.reason_phrase}"
            raise BackendUnavailableError(msg) from e
        except (httpx.HTTPError, ValueError) as e:
            msg = f"Unexpected error calling OpenSearch: {e}"
            raise BackendUnavailableError(msg) from e

        if not isinstance(data, dict):
            msg = f"Malformed OpenSearch response for {path}"
            raise BackendUnavailableError(msg)
        return data

    async def health(self) -> ClusterHealth:
        """Report the cluster health.

        Returns:
            The reported status; unknown statuses are reported as red.

        Raises:
            BackendUnavailableError: If the cluster cannot be reached.
        """
        data = await self._request("GET", "/_cluster/health")
        try:
            status = ClusterStatus(data.get("status", "red"))
        except (TypeError, ValueError):
            status = ClusterStatus.RED
        cluster_name = data.get("cluster_name")
        return ClusterHealth(status=status, cluster_name=None if cluster_name is None else str(cluster_name))

    async def search(self, query: SearchQuery) -> list[SearchHit]:
        """Search the index for reference questions matching the query.

        Args:
            query: Type, category, difficulty and grade to match.

        Returns:
            Candidates, best first, with scores normalized into [0, 1].

        Raises:
            BackendUnavailableError: If the search fails.
        """
        data = await self._request("POST", f"/{self.index}/_search", build_search_body(query))
        hits_block = data.get("hits")
        if not isinstance(hits_block, dict):
            msg = "Malformed OpenSearch search response: missing hits"
            raise BackendUnavailableError(msg)
        hits = parse_hits(hits_block)
        logger.debug(f"OpenSearch returned {len(hits)} hits for {query.question_type}")
        return hits

    async def is_available(self) -> bool:
        """Check if the cluster is reachable and usable.

        Returns:
            True for a green or yellow cluster, False otherwise.
        """
        try:
            health = await self.health()
        except BackendUnavailableError:
            return False
        return health.status.is_usable


def build_search_body(query: SearchQuery) -> dict[str, Any]:
    """Build the search request body for a relevance lookup.

    The question type must match; category and difficulty raise the score;
    the grade is a hard filter.
    """
    return {
        "size": query.size,
        "_source": ["id", "type", "difficulty", "grade"],
        "query": {
            "bool": {
                "must": [{"match": {"type": query.question_type}}],
                "should": [
                    {"multi_match": {"query": query.category, "fields": ["fullText", "searchKeywords", "conceptName"]}},
                    {"match": {"difficulty": query.difficulty.value}},
                ],
                "filter": [{"term": {"grade": query.grade}}],
            }
        },
    }


def parse_hits(hits_block: dict[str, Any]) -> list[SearchHit]:
    """Parse the ``hits`` block of a search response.

    Scores above 1 are divided by the response ``max_score``.
    """
    raw_hits = hits_block.get("hits")
    if not isinstance(raw_hits, list):
        raw_hits = []
    max_score = hits_block.get("max_score") or 0.0
    try:
        max_score = float(max_score)
    except (TypeError, ValueError):
        max_score = 0.0
    if not math.isfinite(max_score):
        max_score = 0.0

    hits: list[SearchHit] = []
    for raw in raw_hits:
        if not isinstance(raw, dict):
            continue
        try:
            score = float(raw.get("_score") or 0.0)
        except (TypeError, ValueError):
            score = 0.0
        if not math.isfinite(score):
            score = 0.0
        if max_score > 1.0:
            score = score / max_score
        hits.append(SearchHit(id=str(raw.get("_id", "")), score=min(max(score, 0.0), 1.0)))
    return hits

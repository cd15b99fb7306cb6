"""Protocol definitions for learnhub.

This module defines the interfaces that adapters must
implement. Using protocols enables duck typing and loose coupling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from learnhub.core.types import ClusterHealth, SearchHit, SearchQuery


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for LLM providers.

    Any class implementing these methods can be used as an LLM provider,
    without needing to inherit from a base class.

    Attributes:
        is_local: Whether the LLM runs locally (no data leaves the network).

    Example:
        >>> class MyLLM:
        ...     is_local: bool = True
        ...
        ...     async def generate(self, prompt: str) -> str:
        ...         return "[]"
        ...
        >>> assert isinstance(MyLLM(), LLMProtocol)
    """

    is_local: bool

    async def generate(self, prompt: str) -> str:
        """Generate text from a prompt.

        Args:
            prompt: The input prompt for text generation.

        Returns:
            The generated text response.

        Raises:
            LLMConnectionError: If the LLM provider is unreachable.
        """
        ...


@runtime_checkable
class SearchBackendProtocol(Protocol):
    """Protocol for the search backend holding reference questions.

    Example:
        >>> class StaticBackend:
        ...     async def health(self) -> ClusterHealth:
        ...         return ClusterHealth(status=ClusterStatus.GREEN)
        ...
        ...     async def search(self, query: SearchQuery) -> list[SearchHit]:
        ...         return [SearchHit(id="q1", score=0.9)]
        ...
        >>> assert isinstance(StaticBackend(), SearchBackendProtocol)
    """

    async def health(self) -> ClusterHealth:
        """Report the cluster health.

        Raises:
            BackendUnavailableError: If the backend cannot be reached.
        """
        ...

    async def search(self, query: SearchQuery) -> list[SearchHit]:
        """Search for candidates matching the query, best first.

        Args:
            query: Type, category, difficulty and grade to match.

        Returns:
            Candidates with scores normalized into [0, 1].

        Raises:
            BackendUnavailableError: If the search fails for any reason.
        """
        ...

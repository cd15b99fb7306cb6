"""Ollama LLM adapter for learnhub.

This module provides an async client for the Ollama API, implementing
the LLMProtocol used by the LLM-backed question generator.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx
from typing_extensions import Self

from learnhub.core.exceptions import LLMConnectionError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from learnhub.core.config import Settings

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "mistral"
DEFAULT_TIMEOUT = 60.0
DEFAULT_TEMPERATURE = 0.7


class OllamaLLM:
    """Async client for the Ollama generate API.

    Can be used as a context manager to reuse one connection pool across
    the per-type generation calls of a request, or standalone.

    Attributes:
        base_url: Base URL for Ollama API.
        model: Model name for question generation.
        timeout: Request timeout in seconds.
        temperature: Sampling temperature passed to the model.
        is_local: Always True; Ollama runs on the local network.

    Example:
        >>> async with OllamaLLM(model="mistral") as llm:
        ...     generator = LLMQuestionGenerator(llm)
        ...     questions = await generator.generate(context, count=5)
    """

    is_local: bool = True

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        """Initialize OllamaLLM client.

        Args:
            base_url: Base URL for Ollama API. Defaults to localhost:11434.
            model: Model name for text generation. Defaults to "mistral".
            timeout: Request timeout in seconds. Defaults to 60.0.
            temperature: Sampling temperature. Defaults to 0.7.
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> OllamaLLM:
        """Create a client from application settings."""
        return cls(
            base_url=settings.ollama_base_url,
            model=settings.ollama_model,
            timeout=settings.llm_timeout_seconds,
        )

    async def __aenter__(self) -> Self:
        """Enter async context manager, creating a reusable HTTP client."""
        self._client = httpx.AsyncClient(timeout=self.timeout)
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
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                yield client

    async def generate(self, prompt: str) -> str:
        """Generate text from a prompt using Ollama.

        Args:
            prompt: The generation prompt.

        Returns:
            The generated text response.

        Raises:
            LLMConnectionError: If connection to Ollama fails or request errors.
        """
        url = f"{self.base_url}/api/generate"
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.temperature},
        }

        try:
            async with self._get_client() as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError as e:
            msg = f"Failed to connect to Ollama at {self.base_url}: {e}"
            raise LLMConnectionError(msg) from e
        except httpx.TimeoutException as e:
            msg = f"Request to Ollama timed out after {self.timeout}s: {e}"
            raise LLMConnectionError(msg) from e
        except httpx.HTTPStatusError as e:
            msg = f"Ollama API error: {e.response.status_code} - {e.response.text}"
            raise LLMConnectionError(msg) from e
        except (httpx.HTTPError, ValueError) as e:
            msg = f"Unexpected error calling Ollama: {e}"
            raise LLMConnectionError(msg) from e

        text = str(data.get("response", "")) if isinstance(data, dict) else ""
        logger.debug(f"Ollama {self.model} returned {len(text)} characters")
        return text

    async def is_available(self) -> bool:
        """Check if Ollama is reachable and the model is pulled.

        Returns:
            True if the model can be used, False otherwise.
        """
        url = f"{self.base_url}/api/tags"

        try:
            async with self._get_client() as client:
                response = await client.get(url)
                if response.status_code != 200:
                    return False
                models = response.json().get("models", [])
        except (httpx.HTTPError, ValueError):
            return False

        names = {str(m.get("name", "")) for m in models if isinstance(m, dict)}
        return any(name == self.model or name.split(":", 1)[0] == self.model for name in names)

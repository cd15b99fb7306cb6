"""Adapters module for learnhub.

This module provides adapters for external services:
- LLM providers (Ollama) used by the question generator
- Search backends (OpenSearch) used for relevance retrieval
"""

from __future__ import annotations

from learnhub.adapters.llm import OllamaLLM
from learnhub.adapters.search import OpenSearchBackend

__all__ = [
    "OllamaLLM",
    "OpenSearchBackend",
]

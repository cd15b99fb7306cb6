"""LLM adapters for learnhub."""

from __future__ import annotations

from learnhub.adapters.llm.ollama import OllamaLLM

__all__ = [
    "OllamaLLM",
]

"""Relevance module for learnhub.

This module retrieves relevance signals from the search backend and
computes the fallback signal used when the backend is unavailable.
"""

from __future__ import annotations

from learnhub.relevance.health import HealthCache, HealthStats
from learnhub.relevance.retriever import (
    FALLBACK_SOURCE,
    SEARCH_SOURCE,
    RelevanceRetriever,
    aggregate_hits,
    fallback_signal,
)

__all__ = [
    "FALLBACK_SOURCE",
    "SEARCH_SOURCE",
    "HealthCache",
    "HealthStats",
    "RelevanceRetriever",
    "aggregate_hits",
    "fallback_signal",
]

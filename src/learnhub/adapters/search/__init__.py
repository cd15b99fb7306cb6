"""Search backend adapters for learnhub."""

from __future__ import annotations

from learnhub.adapters.search.opensearch import OpenSearchBackend, build_search_body, parse_hits

__all__ = [
    "OpenSearchBackend",
    "build_search_body",
    "parse_hits",
]

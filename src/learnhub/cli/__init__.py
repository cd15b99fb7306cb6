"""CLI module for learnhub.

This module provides the command-line interface for the generation engine.
"""

from __future__ import annotations

from learnhub.cli.main import app

__all__ = ["app"]

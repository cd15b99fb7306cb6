"""Personalization module for learnhub.

This module maps a student's persona to generation parameters and
computes the personalization score of a response.
"""

from __future__ import annotations

from learnhub.personalization.mapper import (
    INTEREST_THEMES,
    MOTIVATOR_HOOKS,
    STYLE_HINTS,
    PersonalizationMapper,
    PersonalizationParams,
    Theme,
    theme_for,
)

__all__ = [
    "INTEREST_THEMES",
    "MOTIVATOR_HOOKS",
    "STYLE_HINTS",
    "PersonalizationMapper",
    "PersonalizationParams",
    "Theme",
    "theme_for",
]

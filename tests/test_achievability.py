from __future__ import annotations

import pytest

from src.gaps.achievability import (
    ACHIEVABILITY_BANDS,
    ACHIEVABILITY_COLORS,
    ACHIEVABILITY_LABELS,
    FALLBACK_ACHIEVABILITY,
    assess_achievability,
)
from src.gaps.types import AchievabilityCategory, GapCategory


@pytest.mark.parametrize(
    ("category", "gap_size", "tier", "months"),
    [
        (GapCategory.ACADEMIC, 0.15, AchievabilityCategory.EASY, 4),
        (GapCategory.ACADEMIC, 0.3, AchievabilityCategory.MODERATE, 8),
        (GapCategory.ACADEMIC, 0.6, AchievabilityCategory.LONG_TERM, 16),
        (GapCategory.ACADEMIC, 5, AchievabilityCategory.LONG_TERM, 6),
        (GapCategory.ACADEMIC, 20, AchievabilityCategory.LONG_TERM, 6),
        (GapCategory.ACADEMIC, 80, AchievabilityCategory.MODERATE, 3),
        (GapCategory.ACADEMIC, 250, AchievabilityCategory.LONG_TERM, 6),
        (GapCategory.EXPERIENCE, 1, AchievabilityCategory.MODERATE, 6),
        (GapCategory.EXPERIENCE, 30, AchievabilityCategory.EASY, 3),
        (GapCategory.EXPERIENCE, 75, AchievabilityCategory.MODERATE, 6),
        (GapCategory.EXPERIENCE, 120, AchievabilityCategory.LONG_TERM, 8),
        (GapCategory.EXPERIENCE, 400, AchievabilityCategory.LONG_TERM, 12),
        (GapCategory.MAJOR, 1, AchievabilityCategory.LONG_TERM, 12),
        (GapCategory.FINANCIAL, 1, AchievabilityCategory.LONG_TERM, 12),
        (GapCategory.SPECIAL, 1, AchievabilityCategory.LONG_TERM, 12),
        (GapCategory.DEMOGRAPHIC, 1, AchievabilityCategory.LONG_TERM, 12),
    ],
)
def test_assess_achievability_table(
    category: GapCategory,
    gap_size: float,
    tier: AchievabilityCategory,
    months: int,
) -> None:
    result = assess_achievability(category, gap_size)

    assert result.tier is tier
    assert result.timeline_months == months


def test_long_volunteer_gap_description_uses_uncapped_months() -> None:
    assert assess_achievability(GapCategory.EXPERIENCE, 120).description == "8 months (4 hours/week commitment)"
    assert assess_achievability(GapCategory.EXPERIENCE, 400).description == "25 months (4 hours/week commitment)"


def test_unknown_category_falls_back_to_moderate() -> None:
    assert assess_achievability("portfolio", 3) == FALLBACK_ACHIEVABILITY
    assert FALLBACK_ACHIEVABILITY.tier is AchievabilityCategory.MODERATE
    assert FALLBACK_ACHIEVABILITY.timeline_months == 6


def test_assess_achievability_accepts_category_values() -> None:
    assert assess_achievability("academic", 0.15) == assess_achievability(GapCategory.ACADEMIC, 0.15)


def test_achievability_tables_are_exhaustive() -> None:
    assert set(ACHIEVABILITY_BANDS) == set(GapCategory)
    assert set(ACHIEVABILITY_LABELS) == set(AchievabilityCategory)
    assert set(ACHIEVABILITY_COLORS) == set(AchievabilityCategory)

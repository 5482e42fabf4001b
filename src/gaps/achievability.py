from __future__ import annotations

import math
from dataclasses import dataclass

from src.gaps.types import AchievabilityCategory, GapCategory


@dataclass(frozen=True, slots=True)
class AchievabilityBand:
    """Gaps up to ``max_size`` fall in this band.

    When ``hours_per_week`` is set the timeline is derived from the gap size at that weekly
    commitment and ``months`` acts as the cap.
    """

    max_size: float
    tier: AchievabilityCategory
    months: int
    description: str
    hours_per_week: float | None = None


@dataclass(frozen=True, slots=True)
class Achievability:
    tier: AchievabilityCategory
    timeline_months: int
    description: str


_RETAKE = "2-3 months (1 retake with prep)"
_EXTENSIVE_PREP = "6+ months (extensive prep, multiple retakes)"
_NOT_ACTIONABLE = "Not typically actionable"

# Academic sizes are read as GPA points up to 4.0, ACT points up to 35, SAT points beyond.
ACHIEVABILITY_BANDS: dict[GapCategory, tuple[AchievabilityBand, ...]] = {
    GapCategory.ACADEMIC: (
        AchievabilityBand(0.2, AchievabilityCategory.EASY, 4, "1 semester (4 months)"),
        AchievabilityBand(0.5, AchievabilityCategory.MODERATE, 8, "2-3 semesters (8-12 months)"),
        AchievabilityBand(4.0, AchievabilityCategory.LONG_TERM, 16, "4+ semesters (16+ months)"),
        AchievabilityBand(35, AchievabilityCategory.LONG_TERM, 6, _EXTENSIVE_PREP),
        AchievabilityBand(100, AchievabilityCategory.MODERATE, 3, _RETAKE),
        AchievabilityBand(math.inf, AchievabilityCategory.LONG_TERM, 6, _EXTENSIVE_PREP),
    ),
    GapCategory.EXPERIENCE: (
        AchievabilityBand(10, AchievabilityCategory.MODERATE, 6, "3-6 months (requires election/appointment cycle)"),
        AchievabilityBand(50, AchievabilityCategory.EASY, 3, "1-3 months (4 hours/week commitment)"),
        AchievabilityBand(100, AchievabilityCategory.MODERATE, 6, "3-6 months (4 hours/week commitment)"),
        AchievabilityBand(
            math.inf, AchievabilityCategory.LONG_TERM, 12, "{months} months (4 hours/week commitment)", 4
        ),
    ),
    GapCategory.MAJOR: (
        AchievabilityBand(math.inf, AchievabilityCategory.LONG_TERM, 12, "12+ months (requires sustained commitment)"),
    ),
    GapCategory.FINANCIAL: (
        AchievabilityBand(math.inf, AchievabilityCategory.LONG_TERM, 12, "Varies (often outside student control)"),
    ),
    GapCategory.SPECIAL: (AchievabilityBand(math.inf, AchievabilityCategory.LONG_TERM, 12, _NOT_ACTIONABLE),),
    GapCategory.DEMOGRAPHIC: (AchievabilityBand(math.inf, AchievabilityCategory.LONG_TERM, 12, _NOT_ACTIONABLE),),
}

FALLBACK_ACHIEVABILITY = Achievability(AchievabilityCategory.MODERATE, 6, "3-6 months")

ACHIEVABILITY_LABELS: dict[AchievabilityCategory, str] = {
    AchievabilityCategory.EASY: "Easy to achieve (1-3 months)",
    AchievabilityCategory.MODERATE: "Moderate difficulty (3-6 months)",
    AchievabilityCategory.LONG_TERM: "Long-term goal (6-12+ months)",
}

ACHIEVABILITY_COLORS: dict[AchievabilityCategory, str] = {
    AchievabilityCategory.EASY: "green",
    AchievabilityCategory.MODERATE: "yellow",
    AchievabilityCategory.LONG_TERM: "orange",
}

if set(ACHIEVABILITY_BANDS) != set(GapCategory):
    raise RuntimeError("ACHIEVABILITY_BANDS must cover every gap category.")
for _table in (ACHIEVABILITY_LABELS, ACHIEVABILITY_COLORS):
    if set(_table) != set(AchievabilityCategory):
        raise RuntimeError("Achievability display tables must cover every achievability category.")


def _band_result(band: AchievabilityBand, gap_size: float) -> Achievability:
    if band.hours_per_week is None:
        return Achievability(band.tier, band.months, band.description)
    weeks = math.ceil(gap_size / band.hours_per_week)
    months = math.ceil(weeks / 4)
    return Achievability(band.tier, min(months, band.months), band.description.format(months=months))


def assess_achievability(category: GapCategory | str, gap_size: float) -> Achievability:
    """Pure lookup of difficulty tier and timeline for a gap of the given category and size."""
    try:
        bands = ACHIEVABILITY_BANDS[GapCategory(category)]
    except ValueError:
        return FALLBACK_ACHIEVABILITY
    for band in bands:
        if gap_size <= band.max_size:
            return _band_result(band, gap_size)
    return FALLBACK_ACHIEVABILITY

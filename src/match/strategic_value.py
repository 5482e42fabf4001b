from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.normalize.schema import Scholarship

STRATEGIC_VALUE_CAP = 10.0


class EffortLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class StrategicValueTier(str, Enum):
    BEST_BET = "BEST_BET"
    HIGH_VALUE = "HIGH_VALUE"
    MEDIUM_VALUE = "MEDIUM_VALUE"
    LOW_VALUE = "LOW_VALUE"


EFFORT_MULTIPLIERS: dict[EffortLevel, float] = {
    EffortLevel.LOW: 1.0,
    EffortLevel.MEDIUM: 0.7,
    EffortLevel.HIGH: 0.4,
}

# Expected hours of application work, (min, max).
TIME_INVESTMENT_HOURS: dict[EffortLevel, tuple[int, int]] = {
    EffortLevel.LOW: (2, 3),
    EffortLevel.MEDIUM: (4, 6),
    EffortLevel.HIGH: (8, 12),
}

STRATEGIC_THRESHOLDS: tuple[tuple[float, StrategicValueTier], ...] = (
    (5.0, StrategicValueTier.BEST_BET),
    (3.0, StrategicValueTier.HIGH_VALUE),
    (1.5, StrategicValueTier.MEDIUM_VALUE),
)


@dataclass(frozen=True, slots=True)
class StrategicTierInfo:
    label: str
    color: str
    icon: str
    recommendation: str


STRATEGIC_TIER_INFO: dict[StrategicValueTier, StrategicTierInfo] = {
    StrategicValueTier.BEST_BET: StrategicTierInfo(
        "Best Bet", "gold", "⭐", "Apply immediately - highest expected return per hour invested"
    ),
    StrategicValueTier.HIGH_VALUE: StrategicTierInfo(
        "High Value", "green", "✓", "Strong opportunity worth pursuing after best bets"
    ),
    StrategicValueTier.MEDIUM_VALUE: StrategicTierInfo(
        "Medium Value", "blue", "•", "Apply if time permits after higher priorities"
    ),
    StrategicValueTier.LOW_VALUE: StrategicTierInfo(
        "Low Value", "gray", "○", "Consider skipping unless special circumstances apply"
    ),
}

for _table in (EFFORT_MULTIPLIERS, TIME_INVESTMENT_HOURS):
    if set(_table) != set(EffortLevel):
        raise RuntimeError("Effort tables must cover every effort level.")
if set(STRATEGIC_TIER_INFO) != set(StrategicValueTier):
    raise RuntimeError("STRATEGIC_TIER_INFO must cover every strategic value tier.")


@dataclass(frozen=True, slots=True)
class EffortBreakdown:
    essays: int
    documents: int
    recommendations: int

    def to_dict(self) -> dict[str, int]:
        return {"essays": self.essays, "documents": self.documents, "recommendations": self.recommendations}


@dataclass(frozen=True, slots=True)
class EffortEstimate:
    level: EffortLevel
    breakdown: EffortBreakdown

    @property
    def multiplier(self) -> float:
        return EFFORT_MULTIPLIERS[self.level]

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level.value, "breakdown": self.breakdown.to_dict(), "multiplier": self.multiplier}


def estimate_effort_level(scholarship: Scholarship) -> EffortEstimate:
    essays = len(scholarship.essay_prompts)
    documents = len(scholarship.required_documents)
    recommendations = scholarship.recommendation_count

    if essays >= 3 or documents >= 5 or recommendations >= 2:
        level = EffortLevel.HIGH
    elif essays >= 2 or 3 <= documents <= 4 or recommendations >= 1:
        level = EffortLevel.MEDIUM
    else:
        level = EffortLevel.LOW
    return EffortEstimate(level=level, breakdown=EffortBreakdown(essays, documents, recommendations))


def calculate_strategic_value(
    award_amount: float,
    success_probability: float,
    effort_level: EffortLevel,
    *,
    match_score: float | None = None,
) -> float:
    """Effort-adjusted expected award in thousands, capped at 10.

    Passing ``match_score`` applies the optional boost of up to 10% for well-matched scholarships.
    """
    if award_amount <= 0 or success_probability <= 0:
        return 0.0
    expected_value = award_amount * success_probability / 100
    value = expected_value * EFFORT_MULTIPLIERS[effort_level] / 1000
    if match_score is not None:
        value *= 1 + match_score / 100 * 0.1
    return min(value, STRATEGIC_VALUE_CAP)


def classify_strategic_value(strategic_value: float) -> StrategicValueTier:
    for threshold, tier in STRATEGIC_THRESHOLDS:
        if strategic_value >= threshold:
            return tier
    return StrategicValueTier.LOW_VALUE

from __future__ import annotations

from enum import Enum

from src.normalize.numeric import round_half_up


class PriorityTier(str, Enum):
    MUST_APPLY = "MUST_APPLY"
    SHOULD_APPLY = "SHOULD_APPLY"
    HIGH_VALUE_REACH = "HIGH_VALUE_REACH"
    IF_TIME_PERMITS = "IF_TIME_PERMITS"


MUST_APPLY_MIN_MATCH = 90
MUST_APPLY_MIN_PROBABILITY = 70
MUST_APPLY_MIN_STRATEGIC_VALUE = 3.0
SHOULD_APPLY_MIN_MATCH = 75
SHOULD_APPLY_MIN_PROBABILITY = 40
HIGH_VALUE_REACH_MIN_AWARD = 10000
HIGH_VALUE_REACH_MAX_PROBABILITY = 25

PRIORITY_RATIONALE: dict[PriorityTier, str] = {
    PriorityTier.MUST_APPLY: "Exceptional match with high probability and strong ROI",
    PriorityTier.SHOULD_APPLY: "Strong match with competitive probability",
    PriorityTier.HIGH_VALUE_REACH: "High-value opportunity worth the calculated risk",
    PriorityTier.IF_TIME_PERMITS: "Decent match, apply if time allows",
}

if set(PRIORITY_RATIONALE) != set(PriorityTier):
    raise RuntimeError("PRIORITY_RATIONALE must cover every priority tier.")


def assign_priority_tier(
    match_score: float,
    success_probability: float,
    strategic_value: float,
    award_amount: float,
) -> PriorityTier:
    """Application priority from match score, success probability (percent), strategic value and award."""
    if (
        match_score >= MUST_APPLY_MIN_MATCH
        and success_probability >= MUST_APPLY_MIN_PROBABILITY
        and strategic_value >= MUST_APPLY_MIN_STRATEGIC_VALUE
    ):
        return PriorityTier.MUST_APPLY
    if match_score >= SHOULD_APPLY_MIN_MATCH and success_probability >= SHOULD_APPLY_MIN_PROBABILITY:
        return PriorityTier.SHOULD_APPLY
    if award_amount >= HIGH_VALUE_REACH_MIN_AWARD and success_probability < HIGH_VALUE_REACH_MAX_PROBABILITY:
        return PriorityTier.HIGH_VALUE_REACH
    return PriorityTier.IF_TIME_PERMITS


def priority_rationale(
    tier: PriorityTier,
    match_score: float,
    success_probability: float,
    strategic_value: float,
    award_amount: float,
) -> str:
    base = (
        f"{round_half_up(match_score)} match, ${award_amount:,.0f} award, "
        f"{round_half_up(success_probability)}% success probability"
    )
    if tier is PriorityTier.MUST_APPLY:
        base = f"{base}, {strategic_value:.1f} strategic value"
    return f"{tier.value}: {base} - {PRIORITY_RATIONALE[tier]}"

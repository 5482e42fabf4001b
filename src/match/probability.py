from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.normalize.numeric import clamp, round_half_up
from src.normalize.schema import Scholarship

DEFAULT_COMPETITION_FACTOR = 0.3
MIN_COMPETITION_FACTOR = 0.05
MAX_COMPETITION_FACTOR = 0.95
MAX_POOL_ESTIMATE = 0.8
MIN_PROBABILITY = 0.05
MAX_PROBABILITY = 0.95


class SuccessTier(str, Enum):
    STRONG_MATCH = "STRONG_MATCH"
    COMPETITIVE_MATCH = "COMPETITIVE_MATCH"
    REACH = "REACH"
    LONG_SHOT = "LONG_SHOT"


@dataclass(frozen=True, slots=True)
class TierInfo:
    label: str
    description: str
    color: str


TIER_THRESHOLDS: tuple[tuple[int, SuccessTier], ...] = (
    (70, SuccessTier.STRONG_MATCH),
    (40, SuccessTier.COMPETITIVE_MATCH),
    (10, SuccessTier.REACH),
)

TIER_INFO: dict[SuccessTier, TierInfo] = {
    SuccessTier.STRONG_MATCH: TierInfo("Strong Match", "Apply immediately, high confidence", "green"),
    SuccessTier.COMPETITIVE_MATCH: TierInfo("Competitive Match", "Solid opportunity, worth effort", "blue"),
    SuccessTier.REACH: TierInfo("Reach", "Long shot, but possible", "orange"),
    SuccessTier.LONG_SHOT: TierInfo("Long-Shot", "Very competitive, consider if high value", "red"),
}

if set(TIER_INFO) != set(SuccessTier):
    raise RuntimeError("TIER_INFO must cover every success tier.")


def calculate_competition_factor(scholarship: Scholarship) -> float:
    """Estimated acceptance rate: historical rate first, then applicant pool, then a default."""
    if scholarship.acceptance_rate is not None:
        return clamp(scholarship.acceptance_rate, MIN_COMPETITION_FACTOR, MAX_COMPETITION_FACTOR)
    if scholarship.applicant_pool_size is not None:
        if scholarship.applicant_pool_size <= 0:
            return DEFAULT_COMPETITION_FACTOR
        if scholarship.number_of_awards <= 0:
            return MIN_COMPETITION_FACTOR
        base_rate = min(MAX_POOL_ESTIMATE, scholarship.number_of_awards * 100 / scholarship.applicant_pool_size)
        return max(MIN_COMPETITION_FACTOR, base_rate)
    return DEFAULT_COMPETITION_FACTOR


def calculate_success_probability(match_score: float, strength_score: float, competition_factor: float) -> int:
    probability = match_score / 100 * competition_factor + (strength_score - 50) / 100
    return round_half_up(clamp(probability, MIN_PROBABILITY, MAX_PROBABILITY) * 100)


def classify_success_tier(probability: float) -> SuccessTier:
    for threshold, tier in TIER_THRESHOLDS:
        if probability >= threshold:
            return tier
    return SuccessTier.LONG_SHOT


def format_tier_display(probability: int, tier: SuccessTier) -> str:
    return f"{probability}% success probability - {TIER_INFO[tier].label}"

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from src.match.dimension_scorers import DIMENSION_SCORERS
from src.match.priority import PriorityTier, assign_priority_tier
from src.match.probability import (
    SuccessTier,
    calculate_competition_factor,
    calculate_success_probability,
    classify_success_tier,
)
from src.match.strategic_value import (
    EffortBreakdown,
    EffortLevel,
    StrategicValueTier,
    calculate_strategic_value,
    classify_strategic_value,
    estimate_effort_level,
)
from src.match.weights import MatchWeights, StrengthWeights
from src.normalize.numeric import round_half_up
from src.normalize.schema import Dimension, Scholarship, Student, StudentProfile
from src.profile.strength import calculate_strength_breakdown

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatchScore:
    scholarship_id: str
    overall_match_score: int
    academic_score: int
    demographic_score: int
    major_score: int
    experience_score: int
    financial_score: int
    special_score: int
    success_probability: int
    success_tier: SuccessTier
    competition_factor: float
    strategic_value: float
    application_effort: EffortLevel
    effort_breakdown: EffortBreakdown
    strategic_value_tier: StrategicValueTier
    priority_tier: PriorityTier

    def dimension_scores(self) -> dict[str, int]:
        return {
            Dimension.ACADEMIC.value: self.academic_score,
            Dimension.DEMOGRAPHIC.value: self.demographic_score,
            Dimension.MAJOR.value: self.major_score,
            Dimension.EXPERIENCE.value: self.experience_score,
            Dimension.FINANCIAL.value: self.financial_score,
            Dimension.SPECIAL.value: self.special_score,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "scholarship_id": self.scholarship_id,
            "overall_match_score": self.overall_match_score,
            **{f"{name}_score": score for name, score in self.dimension_scores().items()},
            "success_probability": self.success_probability,
            "success_tier": self.success_tier.value,
            "competition_factor": self.competition_factor,
            "strategic_value": self.strategic_value,
            "application_effort": self.application_effort.value,
            "effort_breakdown": self.effort_breakdown.to_dict(),
            "strategic_value_tier": self.strategic_value_tier.value,
            "priority_tier": self.priority_tier.value,
        }


def profile_strength(profile: StudentProfile, weights: StrengthWeights | None = None) -> int:
    if profile.strength_score is not None:
        return profile.strength_score
    return calculate_strength_breakdown(profile, weights).overall_score


def score_match(
    student: Student,
    scholarship: Scholarship,
    *,
    weights: MatchWeights | None = None,
    strength_weights: StrengthWeights | None = None,
    today: date | None = None,
) -> MatchScore:
    profile = student.require_profile()
    active = weights or MatchWeights.baseline()
    effective_today = today or date.today()
    criteria = scholarship.eligibility_criteria

    dimension_scores = {
        dimension: scorer(profile, getattr(criteria, dimension.value), today=effective_today)
        for dimension, scorer in DIMENSION_SCORERS.items()
    }
    weight_map = active.to_dict()
    overall = round_half_up(
        sum(score * weight_map[dimension.value] for dimension, score in dimension_scores.items())
    )

    competition_factor = calculate_competition_factor(scholarship)
    probability = calculate_success_probability(overall, profile_strength(profile, strength_weights), competition_factor)
    effort = estimate_effort_level(scholarship)
    strategic_value = calculate_strategic_value(scholarship.award_amount, probability, effort.level)

    logger.debug(
        "Scored %s for student %s: match=%s probability=%s",
        scholarship.scholarship_id,
        student.student_id,
        overall,
        probability,
    )
    return MatchScore(
        scholarship_id=scholarship.scholarship_id,
        overall_match_score=overall,
        academic_score=dimension_scores[Dimension.ACADEMIC],
        demographic_score=dimension_scores[Dimension.DEMOGRAPHIC],
        major_score=dimension_scores[Dimension.MAJOR],
        experience_score=dimension_scores[Dimension.EXPERIENCE],
        financial_score=dimension_scores[Dimension.FINANCIAL],
        special_score=dimension_scores[Dimension.SPECIAL],
        success_probability=probability,
        success_tier=classify_success_tier(probability),
        competition_factor=competition_factor,
        strategic_value=strategic_value,
        application_effort=effort.level,
        effort_breakdown=effort.breakdown,
        strategic_value_tier=classify_strategic_value(strategic_value),
        priority_tier=assign_priority_tier(overall, probability, strategic_value, scholarship.award_amount),
    )


def score_matches(
    student: Student,
    scholarships: Iterable[Scholarship],
    *,
    weights: MatchWeights | None = None,
    strength_weights: StrengthWeights | None = None,
    today: date | None = None,
) -> list[MatchScore]:
    scores = [
        score_match(student, scholarship, weights=weights, strength_weights=strength_weights, today=today)
        for scholarship in scholarships
    ]
    scores.sort(key=lambda item: (-item.strategic_value, -item.overall_match_score, item.scholarship_id))
    return scores

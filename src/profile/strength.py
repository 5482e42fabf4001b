from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from src.match.weights import StrengthWeights
from src.normalize.numeric import round_half_up
from src.normalize.schema import FinancialNeed, StudentProfile

logger = logging.getLogger(__name__)

SAT_RANGE = (400, 1600)
ACT_RANGE = (1, 36)
VOLUNTEER_TIERS = ((200, 30.0), (100, 20.0), (50, 10.0))
FAIR_VOLUNTEER_HOURS = 50
GOOD_VOLUNTEER_HOURS = 100
MAX_RECOMMENDATIONS = 5

NEED_POINTS: dict[FinancialNeed, int] = {
    FinancialNeed.LOW: 0,
    FinancialNeed.MODERATE: 10,
    FinancialNeed.HIGH: 20,
    FinancialNeed.VERY_HIGH: 30,
}

if set(NEED_POINTS) != set(FinancialNeed):
    raise RuntimeError("NEED_POINTS must cover every financial need level.")


@dataclass(frozen=True, slots=True)
class StrengthRecommendation:
    category: str
    message: str
    impact: int
    priority: int
    action_link: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "message": self.message,
            "impact": self.impact,
            "priority": self.priority,
            "action_link": self.action_link,
        }


@dataclass(frozen=True, slots=True)
class StrengthBreakdown:
    overall_score: int
    academic: int
    experience: int
    leadership: int
    demographics: int
    recommendations: tuple[StrengthRecommendation, ...] = field(default_factory=tuple)

    def dimensions(self) -> dict[str, int]:
        return {
            "academic": self.academic,
            "experience": self.experience,
            "leadership": self.leadership,
            "demographics": self.demographics,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            **self.dimensions(),
            "recommendations": [item.to_dict() for item in self.recommendations],
        }


def gpa_points(profile: StudentProfile) -> float:
    if profile.gpa is None or not profile.gpa_scale or profile.gpa_scale <= 0:
        return 0.0
    return profile.gpa / profile.gpa_scale * 40


def standardized_test_points(profile: StudentProfile) -> float:
    """Higher of normalized SAT and ACT, out of 30; out-of-range scores are ignored."""
    points = 0.0
    if profile.sat_score is not None and SAT_RANGE[0] <= profile.sat_score <= SAT_RANGE[1]:
        points = max(points, (profile.sat_score - SAT_RANGE[0]) / (SAT_RANGE[1] - SAT_RANGE[0]) * 30)
    if profile.act_score is not None and ACT_RANGE[0] <= profile.act_score <= ACT_RANGE[1]:
        points = max(points, (profile.act_score - ACT_RANGE[0]) / (ACT_RANGE[1] - ACT_RANGE[0]) * 30)
    return points


def class_rank_points(profile: StudentProfile) -> float:
    if profile.class_rank is None or not profile.class_size or profile.class_size <= 0:
        return 0.0
    return (1 - profile.class_rank / profile.class_size) * 20


def award_points(profile: StudentProfile) -> float:
    return float(min(len(profile.awards_honors) * 2, 10))


def volunteer_points(hours: float) -> float:
    for threshold, points in VOLUNTEER_TIERS:
        if hours >= threshold:
            return points
    if hours > 0:
        return hours / FAIR_VOLUNTEER_HOURS * 10
    return 0.0


def calculate_academic_score(profile: StudentProfile) -> int:
    score = gpa_points(profile) + standardized_test_points(profile) + class_rank_points(profile) + award_points(profile)
    return min(round_half_up(score), 100)


def calculate_experience_score(profile: StudentProfile) -> int:
    score = (
        min(len(profile.extracurriculars) * 8, 40)
        + volunteer_points(profile.volunteer_hours)
        + min(len(profile.work_experience) * 15, 30)
    )
    return min(round_half_up(score), 100)


def calculate_leadership_score(profile: StudentProfile) -> int:
    role_count = len(profile.leadership_roles)
    if role_count == 0:
        return 0
    if role_count == 1:
        return 50
    if role_count == 2:
        return 75
    return 100


def has_military_affiliation(profile: StudentProfile) -> bool:
    return bool(profile.military_affiliation) and profile.military_affiliation != "None"


def calculate_demographics_score(profile: StudentProfile) -> int:
    score = 0
    if profile.first_generation:
        score += 40
    if profile.financial_need is not None:
        score += NEED_POINTS[profile.financial_need]
    if has_military_affiliation(profile):
        score += 15
    if profile.disabilities:
        score += 15
    return min(score, 100)


def _weighted_score(dimensions: dict[str, int], weights: StrengthWeights) -> float:
    return sum(dimensions[name] * weight for name, weight in weights.to_dict().items())


def generate_recommendations(
    profile: StudentProfile,
    dimensions: dict[str, int],
    weights: StrengthWeights | None = None,
) -> list[StrengthRecommendation]:
    """Up to five improvement hints, highest priority first, then by impact."""
    active = weights or StrengthWeights.baseline()
    items: list[StrengthRecommendation] = []

    if dimensions["academic"] < 60:
        items.append(
            StrengthRecommendation(
                "Academic",
                "Focus on improving GPA and test scores to increase academic competitiveness",
                round_half_up((100 - dimensions["academic"]) * active.academic),
                1,
            )
        )
    if profile.sat_score is None and profile.act_score is None:
        items.append(
            StrengthRecommendation(
                "Academic",
                "Add SAT or ACT score to boost Academic score by up to 30 points",
                round_half_up(30 * active.academic),
                1,
                "/profile/academic",
            )
        )
    if profile.class_rank is None or profile.class_size is None:
        items.append(
            StrengthRecommendation(
                "Academic",
                "Add class rank to gain up to 20 additional points",
                round_half_up(20 * active.academic),
                2,
                "/profile/academic",
            )
        )

    if dimensions["experience"] < 60:
        items.append(
            StrengthRecommendation(
                "Experience",
                "Add more extracurricular activities and increase volunteer hours to 100+",
                round_half_up((100 - dimensions["experience"]) * active.experience),
                1,
                "/profile/experience",
            )
        )

    hours = profile.volunteer_hours
    if hours < GOOD_VOLUNTEER_HOURS:
        if hours < FAIR_VOLUNTEER_HOURS:
            potential_gain = (GOOD_VOLUNTEER_HOURS - hours) / GOOD_VOLUNTEER_HOURS * 20
        else:
            potential_gain = 10.0
        gain = round_half_up(potential_gain * active.experience)
        items.append(
            StrengthRecommendation(
                "Experience",
                f"Reach 100 volunteer hours to gain {gain} additional points",
                gain,
                2,
                "/profile/experience",
            )
        )

    if not profile.work_experience:
        items.append(
            StrengthRecommendation(
                "Experience",
                "Adding work experience can boost score by up to 30 points",
                round_half_up(30 * active.experience),
                2,
                "/profile/experience",
            )
        )

    if dimensions["leadership"] < 50:
        items.append(
            StrengthRecommendation(
                "Leadership",
                "Seek leadership positions in clubs, sports, or community organizations",
                round_half_up((100 - dimensions["leadership"]) * active.leadership),
                1,
                "/profile/experience",
            )
        )

    role_count = len(profile.leadership_roles)
    if role_count == 0:
        items.append(
            StrengthRecommendation(
                "Leadership",
                "Leadership roles can add up to 100 points to your strength score",
                round_half_up(100 * active.leadership),
                1,
                "/profile/experience",
            )
        )
    elif role_count in (1, 2):
        message = (
            "Adding 1 more leadership role increases score by 25 points"
            if role_count == 1
            else "Adding 1 more leadership role increases score to maximum (25 additional points)"
        )
        items.append(
            StrengthRecommendation(
                "Leadership",
                message,
                round_half_up(25 * active.leadership),
                2 if role_count == 1 else 3,
                "/profile/experience",
            )
        )

    if not profile.first_generation and not profile.military_affiliation and not profile.disabilities:
        items.append(
            StrengthRecommendation(
                "Demographics",
                "Many scholarships target first-generation students, military families, and students "
                "with disabilities. Make sure your profile accurately reflects your background.",
                0,
                3,
            )
        )

    items.sort(key=lambda item: (item.priority, -item.impact))
    return items[:MAX_RECOMMENDATIONS]


def calculate_strength_breakdown(
    profile: StudentProfile,
    weights: StrengthWeights | None = None,
) -> StrengthBreakdown:
    active = weights or StrengthWeights.baseline()
    dimensions = {
        "academic": calculate_academic_score(profile),
        "experience": calculate_experience_score(profile),
        "leadership": calculate_leadership_score(profile),
        "demographics": calculate_demographics_score(profile),
    }

    weighted = _weighted_score(dimensions, active)
    overall = round_half_up(weighted * (profile.completion_percentage or 0.0) / 100)
    logger.debug("Strength dimensions=%s completion=%s overall=%s", dimensions, profile.completion_percentage, overall)

    return StrengthBreakdown(
        overall_score=overall,
        academic=dimensions["academic"],
        experience=dimensions["experience"],
        leadership=dimensions["leadership"],
        demographics=dimensions["demographics"],
        recommendations=tuple(generate_recommendations(profile, dimensions, active)),
    )


def calculate_potential_score(profile: StudentProfile, weights: StrengthWeights | None = None) -> int:
    """Weighted strength the profile would reach at 100% completeness."""
    breakdown = calculate_strength_breakdown(profile, weights)
    return round_half_up(_weighted_score(breakdown.dimensions(), weights or StrengthWeights.baseline()))


def score_color(score: float) -> str:
    if score <= 50:
        return "red"
    if score <= 75:
        return "yellow"
    return "green"


def score_label(score: float) -> str:
    if score <= 50:
        return "Needs Improvement"
    if score <= 75:
        return "Good"
    return "Excellent"

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from datetime import date
from typing import Iterable, Sequence

from src.gaps.achievability import assess_achievability
from src.gaps.config import GapAnalysisConfig
from src.gaps.types import (
    ACHIEVABILITY_BUCKETS,
    ACHIEVABILITY_PRIORITY,
    AchievabilityCategory,
    Gap,
    GapCategory,
    ImpactSummary,
)
from src.match.eligibility import EligibilityFilter, FailedCriterion, filter_eligibility
from src.normalize.numeric import format_number, round_half_up
from src.normalize.schema import Scholarship, Student, StudentProfile

logger = logging.getLogger(__name__)


def format_currency(amount: float) -> str:
    return f"${round_half_up(amount):,}"


def impact_description(scholarships: int, funding: float, requirement: str) -> str:
    noun = "scholarship" if scholarships == 1 else "scholarships"
    return f"Achieving {requirement} would unlock {scholarships} {noun} worth {format_currency(funding)}"


def _numeric_gap(required: object, current: float | None) -> tuple[float, float, float]:
    target = float(required) if isinstance(required, (int, float)) else 0.0
    actual = float(current) if current is not None else 0.0
    return target, actual, round(max(0.0, target - actual), 2)


def _whole(value: float) -> float | int:
    return int(value) if float(value).is_integer() else value


def gap_from_failed_criterion(
    failed: FailedCriterion,
    profile: StudentProfile,
    scholarship: Scholarship,
) -> Gap | None:
    """Quantify one failed criterion, or ``None`` when it cannot be sized."""
    category = failed.dimension
    requirement: str
    if category is GapCategory.ACADEMIC and failed.criterion == "min_gpa":
        target, current, size = _numeric_gap(failed.required, profile.gpa)
        requirement = f"GPA {target:.1f}+"
    elif category is GapCategory.ACADEMIC and failed.criterion == "min_sat":
        target, current, size = _numeric_gap(failed.required, profile.sat_score)
        requirement = f"SAT {format_number(target)}+"
    elif category is GapCategory.ACADEMIC and failed.criterion == "min_act":
        target, current, size = _numeric_gap(failed.required, profile.act_score)
        requirement = f"ACT {format_number(target)}+"
    elif category is GapCategory.EXPERIENCE and failed.criterion == "min_volunteer_hours":
        target, current, size = _numeric_gap(failed.required, profile.volunteer_hours)
        requirement = f"{format_number(target)}+ volunteer hours"
    elif category is GapCategory.EXPERIENCE and failed.criterion == "leadership_required":
        current = float(len(profile.leadership_roles))
        target = 1.0
        size = 1.0 if current == 0 else 0.0
        requirement = "Leadership position"
    else:
        return None

    if size <= 0:
        return None

    achievability = assess_achievability(category, size)
    return Gap(
        category=category,
        requirement=requirement,
        current_value=_whole(current),
        target_value=_whole(target),
        gap_size=size,
        impact="",
        scholarships_affected=1,
        funding_blocked=scholarship.award_amount,
        achievability=achievability.tier,
        timeline_months=achievability.timeline_months,
        affected_scholarship_ids=(scholarship.scholarship_id,),
    )


class GapAnalyzer:
    """Finds reach scholarships and turns their actionable failed criteria into gaps."""

    def __init__(
        self,
        eligibility_filter: EligibilityFilter = filter_eligibility,
        config: GapAnalysisConfig | None = None,
    ) -> None:
        self.eligibility_filter = eligibility_filter
        self.config = config or GapAnalysisConfig.baseline()

    def find_reach_scholarships(
        self,
        student: Student,
        scholarships: Iterable[Scholarship],
        *,
        today: date | None = None,
    ) -> list[Scholarship]:
        high_value = sorted(
            (item for item in scholarships if item.award_amount >= self.config.reach_award_threshold),
            key=lambda item: (-item.award_amount, item.scholarship_id),
        )[: self.config.max_reach_scholarships]

        reach: list[Scholarship] = []
        for scholarship in high_value:
            result = self.eligibility_filter(student, scholarship, early_exit=False, today=today)
            if result.eligible:
                continue
            if any(failed.dimension is not GapCategory.DEMOGRAPHIC for failed in result.failed_criteria):
                reach.append(scholarship)

        logger.debug(
            "Reach scan for %s: %s high-value candidates, %s reach",
            student.student_id,
            len(high_value),
            len(reach),
        )
        return reach

    def compare_profile_to_requirements(
        self,
        student: Student,
        scholarship: Scholarship,
        *,
        today: date | None = None,
    ) -> list[Gap]:
        profile = student.require_profile()
        result = self.eligibility_filter(student, scholarship, early_exit=False, today=today)
        if result.eligible:
            return []

        gaps: list[Gap] = []
        for failed in result.failed_criteria:
            if failed.dimension is GapCategory.DEMOGRAPHIC:
                continue
            gap = gap_from_failed_criterion(failed, profile, scholarship)
            if gap is not None:
                gaps.append(gap)
        return gaps


def calculate_gap_impact(gap: Gap, reach_scholarships: Sequence[Scholarship]) -> Gap:
    """Back-fill scholarship count, blocked funding and the impact sentence for a gap."""
    affected = set(gap.affected_scholarship_ids)
    count = len(gap.affected_scholarship_ids)
    funding = sum(item.award_amount for item in reach_scholarships if item.scholarship_id in affected)
    return replace(
        gap,
        scholarships_affected=count,
        funding_blocked=funding,
        impact=impact_description(count, funding, gap.requirement),
    )


def aggregate_gaps(gaps: Iterable[Gap]) -> list[Gap]:
    """Merge gaps sharing (category, requirement, target value), keeping first-seen order."""
    merged: dict[tuple[object, ...], Gap] = {}
    for gap in gaps:
        existing = merged.get(gap.key)
        if existing is None:
            merged[gap.key] = gap
            continue
        count = existing.scholarships_affected + gap.scholarships_affected
        funding = existing.funding_blocked + gap.funding_blocked
        merged[gap.key] = replace(
            existing,
            scholarships_affected=count,
            funding_blocked=funding,
            affected_scholarship_ids=existing.affected_scholarship_ids + gap.affected_scholarship_ids,
            impact=impact_description(count, funding, existing.requirement),
        )
    return list(merged.values())


def impact_sort_key(gap: Gap) -> tuple[float, int, int]:
    return (-gap.funding_blocked, -gap.scholarships_affected, ACHIEVABILITY_PRIORITY[gap.achievability])


def prioritize_gaps_by_impact(gaps: Iterable[Gap]) -> list[Gap]:
    return sorted(gaps, key=impact_sort_key)


def calculate_impact_summary(gaps: Sequence[Gap]) -> ImpactSummary:
    unique_ids = {scholarship_id for gap in gaps for scholarship_id in gap.affected_scholarship_ids}
    # Sums per-gap funding; a scholarship blocked by several gaps is counted once per gap.
    potential_funding = sum(gap.funding_blocked for gap in gaps)
    average_award = round_half_up(potential_funding / len(unique_ids)) if unique_ids else 0

    tiers = Counter(gap.achievability for gap in gaps)
    return ImpactSummary(
        scholarships_unlockable=len(unique_ids),
        potential_funding=potential_funding,
        average_award=average_award,
        total_gaps=len(gaps),
        gaps_by_achievability={
            ACHIEVABILITY_BUCKETS[tier]: tiers.get(tier, 0) for tier in AchievabilityCategory
        },
    )

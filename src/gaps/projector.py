from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Iterable, Sequence

from src.gaps.types import (
    Gap,
    GapCategory,
    HypotheticalChanges,
    ProfileProjection,
    SimulatorResult,
    StrengthDelta,
)
from src.match.eligibility import EligibilityFilter, filter_eligibility, filter_scholarships
from src.match.weights import StrengthWeights
from src.normalize.schema import Scholarship, Student, StudentProfile
from src.profile.strength import StrengthBreakdown, calculate_strength_breakdown

logger = logging.getLogger(__name__)

GAP_LEADERSHIP_ROLE = {
    "title": "Club Officer",
    "organization": "School Club",
    "description": "Leadership position (projected)",
}


def hypothetical_leadership_role(index: int) -> dict[str, Any]:
    return {
        "title": f"Leadership Role {index + 1}",
        "organization": "Organization",
        "description": "Hypothetical leadership position",
    }


def hypothetical_extracurricular(index: int) -> dict[str, Any]:
    return {"name": f"Activity {index + 1}", "role": "Member", "description": "Hypothetical extracurricular"}


def _resize_entries(
    entries: Sequence[dict[str, Any]],
    target: int,
    factory: Callable[[int], dict[str, Any]],
) -> list[dict[str, Any]]:
    """Keep the first ``target`` entries, padding with synthetic ones when there are fewer."""
    resized = [dict(entry) for entry in entries[:target]]
    while len(resized) < target:
        resized.append(factory(len(resized)))
    return resized


def _clone(profile: StudentProfile) -> StudentProfile:
    return replace(
        profile,
        extracurriculars=[dict(entry) for entry in profile.extracurriculars],
        work_experience=[dict(entry) for entry in profile.work_experience],
        leadership_roles=[dict(entry) for entry in profile.leadership_roles],
        awards_honors=[dict(entry) for entry in profile.awards_honors],
    )


@dataclass(frozen=True, slots=True)
class _ProfileOutcome:
    breakdown: StrengthBreakdown
    matched: tuple[Scholarship, ...]

    @property
    def matched_ids(self) -> set[str]:
        return {item.scholarship_id for item in self.matched}

    @property
    def funding(self) -> float:
        return sum(item.award_amount for item in self.matched)


class ProfileProjector:
    """Applies gap closures or what-if values to a cloned profile and re-scores it."""

    def __init__(
        self,
        eligibility_filter: EligibilityFilter = filter_eligibility,
        strength_weights: StrengthWeights | None = None,
    ) -> None:
        self.eligibility_filter = eligibility_filter
        self.strength_weights = strength_weights or StrengthWeights.baseline()

    def apply_gap_improvements(self, profile: StudentProfile, gaps: Iterable[Gap]) -> StudentProfile:
        projected = _clone(profile)
        for gap in gaps:
            target = gap.target_value
            if gap.category is GapCategory.ACADEMIC:
                if "GPA" in gap.requirement:
                    projected.gpa = float(target)
                elif "SAT" in gap.requirement:
                    projected.sat_score = int(target)
                elif "ACT" in gap.requirement:
                    projected.act_score = int(target)
            elif gap.category is GapCategory.EXPERIENCE:
                if "volunteer" in gap.requirement:
                    projected.volunteer_hours = float(target)
                elif "Leadership" in gap.requirement:
                    projected.leadership_roles.append(dict(GAP_LEADERSHIP_ROLE))
        return projected

    def apply_hypothetical_changes(
        self,
        profile: StudentProfile,
        changes: HypotheticalChanges,
    ) -> StudentProfile:
        projected = _clone(profile)
        if changes.gpa is not None:
            projected.gpa = float(changes.gpa)
        if changes.sat_score is not None:
            projected.sat_score = int(changes.sat_score)
        if changes.act_score is not None:
            projected.act_score = int(changes.act_score)
        if changes.volunteer_hours is not None:
            projected.volunteer_hours = float(changes.volunteer_hours)

        if changes.leadership_count is not None or changes.has_leadership is not None:
            if changes.leadership_count is not None:
                target = int(changes.leadership_count)
            else:
                target = 1 if changes.has_leadership else 0
            projected.leadership_roles = _resize_entries(
                projected.leadership_roles, target, hypothetical_leadership_role
            )
        if changes.extracurricular_count is not None:
            projected.extracurriculars = _resize_entries(
                projected.extracurriculars, int(changes.extracurricular_count), hypothetical_extracurricular
            )
        return projected

    def _recompute(
        self,
        student: Student,
        profile: StudentProfile,
        catalog: Sequence[Scholarship],
        *,
        today: date | None,
    ) -> _ProfileOutcome:
        subject = student.with_profile(profile)
        matched = filter_scholarships(subject, catalog, today=today, eligibility_filter=self.eligibility_filter)
        return _ProfileOutcome(
            breakdown=calculate_strength_breakdown(profile, self.strength_weights),
            matched=tuple(matched),
        )

    def _before_after(
        self,
        student: Student,
        projected: StudentProfile,
        catalog: Sequence[Scholarship],
        *,
        today: date | None,
    ) -> tuple[_ProfileOutcome, _ProfileOutcome]:
        before = self._recompute(student, student.require_profile(), catalog, today=today)
        after = self._recompute(student, projected, catalog, today=today)
        return before, after

    def project_profile_strength(
        self,
        student: Student,
        gaps: Iterable[Gap],
        catalog: Sequence[Scholarship],
        *,
        today: date | None = None,
    ) -> ProfileProjection:
        projected = self.apply_gap_improvements(student.require_profile(), gaps)
        before, after = self._before_after(student, projected, catalog, today=today)
        projection = ProfileProjection(
            current=before.breakdown.overall_score,
            projected=after.breakdown.overall_score,
            current_breakdown=before.breakdown.dimensions(),
            projected_breakdown=after.breakdown.dimensions(),
            current_matches=len(before.matched),
            projected_matches=len(after.matched),
            current_funding_potential=before.funding,
            projected_funding_potential=after.funding,
        )
        logger.debug(
            "Projection for %s: strength %s -> %s, matches %s -> %s",
            student.student_id,
            projection.current,
            projection.projected,
            projection.current_matches,
            projection.projected_matches,
        )
        return projection

    def project_with_hypothetical_changes(
        self,
        student: Student,
        changes: HypotheticalChanges,
        catalog: Sequence[Scholarship],
        *,
        today: date | None = None,
    ) -> SimulatorResult:
        projected = self.apply_hypothetical_changes(student.require_profile(), changes)
        before, after = self._before_after(student, projected, catalog, today=today)
        before_ids = before.matched_ids
        unlocked = tuple(item.scholarship_id for item in after.matched if item.scholarship_id not in before_ids)
        return SimulatorResult(
            projected_strength=after.breakdown.overall_score,
            scholarships_unlocked=len(after.matched) - len(before.matched),
            funding_increase=after.funding - before.funding,
            dimensional_changes=StrengthDelta.between(before.breakdown.dimensions(), after.breakdown.dimensions()),
            unlocked_scholarship_ids=unlocked,
        )

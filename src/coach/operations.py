from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from src.gaps.analyzer import (
    GapAnalyzer,
    aggregate_gaps,
    calculate_gap_impact,
    calculate_impact_summary,
    prioritize_gaps_by_impact,
)
from src.gaps.config import GapAnalysisConfig
from src.gaps.history import compare_to_history
from src.gaps.projector import ProfileProjector
from src.gaps.roadmap import generate_roadmap
from src.gaps.types import GapAnalysisResult, HypotheticalChanges, SimulatorResult, as_utc
from src.match.eligibility import EligibilityFilter, EligibilityResult
from src.match.eligibility import filter_eligibility as _filter_eligibility
from src.match.match_score import MatchScore
from src.match.match_score import score_match as _score_match
from src.match.weights import MatchWeights, StrengthWeights
from src.normalize.schema import Scholarship, Student

logger = logging.getLogger(__name__)

__all__ = [
    "active_scholarships",
    "analyze_gaps",
    "compare_to_history",
    "filter_eligibility",
    "score_match",
    "simulate",
]


def active_scholarships(catalog: Iterable[Scholarship], today: date) -> list[Scholarship]:
    """Scholarships still open on ``today``; a missing deadline counts as open."""
    return [item for item in catalog if item.deadline is None or item.deadline >= today]


def score_match(
    student: Student,
    scholarship: Scholarship,
    *,
    weights: MatchWeights | None = None,
    strength_weights: StrengthWeights | None = None,
    today: date | None = None,
) -> MatchScore:
    return _score_match(
        student,
        scholarship,
        weights=weights,
        strength_weights=strength_weights,
        today=today,
    )


def filter_eligibility(
    student: Student,
    scholarship: Scholarship,
    *,
    early_exit: bool = True,
    today: date | None = None,
) -> EligibilityResult:
    return _filter_eligibility(student, scholarship, early_exit=early_exit, today=today)


def analyze_gaps(
    student: Student,
    catalog: Sequence[Scholarship],
    *,
    config: GapAnalysisConfig | None = None,
    strength_weights: StrengthWeights | None = None,
    today: date | None = None,
    analyzed_at: datetime | None = None,
    eligibility_filter: EligibilityFilter = _filter_eligibility,
) -> GapAnalysisResult:
    """Run the full gap pipeline for one student against a scholarship catalog.

    Reach scholarships are compared requirement by requirement, the resulting gaps are merged
    and ranked by blocked funding, turned into a roadmap, and closed on a cloned profile to
    project the before/after strength and match counts.
    """
    student.require_profile()
    effective_today = today or date.today()
    active_config = config or GapAnalysisConfig.baseline()
    scholarships = active_scholarships(catalog, effective_today)

    analyzer = GapAnalyzer(eligibility_filter=eligibility_filter, config=active_config)
    reach = analyzer.find_reach_scholarships(student, scholarships, today=effective_today)
    raw_gaps = [
        gap
        for scholarship in reach
        for gap in analyzer.compare_profile_to_requirements(student, scholarship, today=effective_today)
    ]
    aggregated = [calculate_gap_impact(gap, reach) for gap in aggregate_gaps(raw_gaps)]
    gaps = prioritize_gaps_by_impact(aggregated)

    roadmap = generate_roadmap(gaps, today=effective_today, config=active_config)
    projector = ProfileProjector(eligibility_filter=eligibility_filter, strength_weights=strength_weights)
    projection = projector.project_profile_strength(student, gaps, scholarships, today=effective_today)
    summary = calculate_impact_summary(gaps)

    logger.info(
        "Gap analysis for %s: %s active scholarships, %s reach, %s gaps, %s unlockable",
        student.student_id,
        len(scholarships),
        len(reach),
        len(gaps),
        summary.scholarships_unlockable,
    )
    return GapAnalysisResult(
        student_id=student.student_id,
        gaps=tuple(gaps),
        roadmap=roadmap,
        projection=projection,
        impact_summary=summary,
        analyzed_at=as_utc(analyzed_at) if analyzed_at is not None else datetime.now(timezone.utc),
    )


def simulate(
    student: Student,
    hypothetical_changes: HypotheticalChanges | Mapping[str, Any] | None,
    catalog: Sequence[Scholarship],
    *,
    strength_weights: StrengthWeights | None = None,
    today: date | None = None,
    eligibility_filter: EligibilityFilter = _filter_eligibility,
) -> SimulatorResult:
    if isinstance(hypothetical_changes, HypotheticalChanges):
        changes = hypothetical_changes
    else:
        changes = HypotheticalChanges.from_mapping(hypothetical_changes)
    effective_today = today or date.today()
    projector = ProfileProjector(eligibility_filter=eligibility_filter, strength_weights=strength_weights)
    return projector.project_with_hypothetical_changes(
        student,
        changes,
        active_scholarships(catalog, effective_today),
        today=effective_today,
    )

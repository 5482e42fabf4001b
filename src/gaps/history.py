from __future__ import annotations

import logging

from src.gaps.types import AnalysisSnapshot, GapAnalysisResult, ProgressComparison, as_utc

logger = logging.getLogger(__name__)


def compare_to_history(
    previous: AnalysisSnapshot | GapAnalysisResult,
    current: GapAnalysisResult,
) -> ProgressComparison:
    """Diff the current analysis against an earlier one for the same student.

    Gaps are matched on (category, requirement, target value); a gap whose target changed counts
    as both closed and emerging.
    """
    if isinstance(previous, GapAnalysisResult):
        previous = AnalysisSnapshot.from_result(previous)
    if previous.student_id != current.student_id:
        logger.warning(
            "Comparing analyses of different students: %s vs %s",
            previous.student_id,
            current.student_id,
        )

    current_keys = {gap.key for gap in current.gaps}
    previous_keys = {gap.key for gap in previous.gaps}
    closed = tuple(gap for gap in previous.gaps if gap.key not in current_keys)
    remaining = sum(1 for gap in previous.gaps if gap.key in current_keys)
    emerging = tuple(gap for gap in current.gaps if gap.key not in previous_keys)

    elapsed = as_utc(current.analyzed_at) - as_utc(previous.analyzed_at)
    return ProgressComparison(
        last_analysis_date=as_utc(previous.analyzed_at),
        days_since=max(0, elapsed.days),
        profile_strength_change=current.projection.current - previous.profile_strength_current,
        gaps_remaining=remaining,
        new_scholarships_unlocked=max(0, current.projection.current_matches - previous.current_matches),
        closed_gaps=closed,
        emerging_gaps=emerging,
    )

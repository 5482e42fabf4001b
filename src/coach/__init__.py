"""In-process entry points for matching, gap analysis and what-if simulation."""

from src.coach.operations import (
    active_scholarships,
    analyze_gaps,
    compare_to_history,
    filter_eligibility,
    score_match,
    simulate,
)

__all__ = [
    "active_scholarships",
    "analyze_gaps",
    "compare_to_history",
    "filter_eligibility",
    "score_match",
    "simulate",
]

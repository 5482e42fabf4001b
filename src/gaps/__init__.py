"""Gap analysis: reach scholarships, quantified gaps, roadmaps and profile projections."""

from src.gaps.achievability import assess_achievability
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
from src.gaps.types import (
    AchievabilityCategory,
    AnalysisSnapshot,
    Gap,
    GapAnalysisResult,
    GapCategory,
    HypotheticalChanges,
    ProfileProjection,
    ProgressComparison,
    Roadmap,
    SimulatorResult,
)

__all__ = [
    "AchievabilityCategory",
    "AnalysisSnapshot",
    "Gap",
    "GapAnalysisConfig",
    "GapAnalysisResult",
    "GapAnalyzer",
    "GapCategory",
    "HypotheticalChanges",
    "ProfileProjection",
    "ProfileProjector",
    "ProgressComparison",
    "Roadmap",
    "SimulatorResult",
    "aggregate_gaps",
    "assess_achievability",
    "calculate_gap_impact",
    "calculate_impact_summary",
    "compare_to_history",
    "generate_roadmap",
    "prioritize_gaps_by_impact",
]

from __future__ import annotations

from typing import Any

import pandas as pd

from src.gaps.achievability import ACHIEVABILITY_LABELS
from src.gaps.types import GapAnalysisResult, ProgressComparison, Recommendation, SimulatorResult
from src.match.match_score import MatchScore
from src.match.probability import format_tier_display
from src.match.strategic_value import STRATEGIC_TIER_INFO
from src.profile.strength import score_label

DIMENSION_SIGNALS = {
    "academic": "Strong academic fit",
    "major": "Major and career goals align",
    "demographic": "Demographic criteria met",
    "experience": "Experience matches what the sponsor wants",
    "financial": "Financial profile fits the award",
    "special": "Special circumstances match",
}


def format_amount(amount: Any) -> str:
    value = _coerce_float(amount)
    if value is None:
        return "Unknown"
    return f"${max(value, 0.0):,.0f}"


def format_signed(value: float, *, currency: bool = False) -> str:
    sign = "+" if value >= 0 else "-"
    if currency:
        return f"{sign}${abs(value):,.0f}"
    return f"{sign}{abs(value):g}"


def explain_match_score(match: MatchScore, *, max_signals: int = 3, min_score: int = 70) -> list[str]:
    ranked = sorted(match.dimension_scores().items(), key=lambda item: (-item[1], item[0]))
    signals = [DIMENSION_SIGNALS[name] for name, score in ranked if score >= min_score]
    if not signals:
        return ["Partial fit across dimensions"]
    return signals[:max_signals]


def reasons_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(item) for item in value if str(item).strip())
    return str(value)


def match_scores_frame(matches: list[MatchScore]) -> pd.DataFrame:
    rows = []
    for match in matches:
        rows.append(
            {
                "scholarship_id": match.scholarship_id,
                "overall_match_score": match.overall_match_score,
                "success": format_tier_display(match.success_probability, match.success_tier),
                "strategic_value": match.strategic_value,
                "strategic_tier": STRATEGIC_TIER_INFO[match.strategic_value_tier].label,
                "priority": match.priority_tier.value,
                "effort": match.application_effort.value,
                "signals": reasons_to_text(explain_match_score(match)),
            }
        )
    columns = [
        "scholarship_id",
        "overall_match_score",
        "success",
        "strategic_value",
        "strategic_tier",
        "priority",
        "effort",
        "signals",
    ]
    return pd.DataFrame(rows, columns=columns)


def _recommendation_lines(item: Recommendation) -> list[str]:
    gap = item.gap
    lines = [
        f"#### {gap.requirement}",
        "",
        f"- {gap.impact}",
        f"- Current: {gap.current_value} / Target: {gap.target_value}",
        f"- Timeline: {item.timeline} (target {item.target_date.isoformat()})",
        f"- {item.recommendation}",
    ]
    lines.extend(f"  - {step}" for step in item.action_steps)
    for resource in item.resources:
        lines.append(f"- Resource: [{resource.title}]({resource.url})")
    for dependency in item.dependencies:
        lines.append(f"- Note: {dependency}")
    lines.append("")
    return lines


def gap_analysis_markdown(result: GapAnalysisResult, *, comparison: ProgressComparison | None = None) -> str:
    projection = result.projection
    summary = result.impact_summary
    lines = [
        f"# Gap Analysis: {result.student_id}",
        "",
        f"- Analyzed at (UTC): {result.analyzed_at.isoformat()}",
        f"- Profile strength: {projection.current} ({score_label(projection.current)}) -> "
        f"{projection.projected} ({format_signed(projection.increase)})",
        f"- Matched scholarships: {projection.current_matches} -> {projection.projected_matches}",
        f"- Funding potential: {format_amount(projection.current_funding_potential)} -> "
        f"{format_amount(projection.projected_funding_potential)}",
        f"- Scholarships unlockable: {summary.scholarships_unlockable}",
        f"- Potential funding: {format_amount(summary.potential_funding)}",
        f"- Average award: {format_amount(summary.average_award)}",
        f"- Total timeline: {result.roadmap.total_timeline_months} months",
        "",
    ]

    if result.roadmap.diagnostics:
        lines.append("## Warnings")
        lines.append("")
        lines.extend(f"- {diagnostic.message}" for diagnostic in result.roadmap.diagnostics)
        lines.append("")

    if not result.gaps:
        lines.append("No actionable gaps found for high-value scholarships.")
        lines.append("")
    else:
        lines.append("## Gaps")
        lines.append("")
        lines.append("| requirement | category | current | target | scholarships | funding | achievability |")
        lines.append("|---|---|---:|---:|---:|---:|---|")
        for gap in result.gaps:
            lines.append(
                f"| {gap.requirement} | {gap.category.value} | {gap.current_value} | {gap.target_value} | "
                f"{gap.scholarships_affected} | {format_amount(gap.funding_blocked)} | "
                f"{ACHIEVABILITY_LABELS[gap.achievability]} |"
            )
        lines.append("")
        lines.append("## Roadmap")
        lines.append("")
        for title, bucket in (
            ("Easy wins", result.roadmap.easy),
            ("Moderate", result.roadmap.moderate),
            ("Long term", result.roadmap.long_term),
        ):
            if not bucket:
                continue
            lines.append(f"### {title}")
            lines.append("")
            for item in bucket:
                lines.extend(_recommendation_lines(item))

    if comparison is not None:
        lines.append("## Progress Since Last Analysis")
        lines.append("")
        lines.append(f"- Last analysis: {comparison.last_analysis_date.isoformat()} ({comparison.days_since} days ago)")
        lines.append(f"- Profile strength change: {format_signed(comparison.profile_strength_change)}")
        lines.append(f"- Gaps closed: {comparison.gaps_closed}")
        lines.append(f"- Gaps remaining: {comparison.gaps_remaining}")
        lines.append(f"- New gaps: {len(comparison.emerging_gaps)}")
        lines.append(f"- New scholarships unlocked: {comparison.new_scholarships_unlocked}")
        lines.append("")

    return "\n".join(lines)


def simulator_markdown(student_id: str, changes: dict[str, Any], result: SimulatorResult) -> str:
    lines = [
        f"# What-if Simulation: {student_id}",
        "",
        f"- Changes: {', '.join(f'{key}={value}' for key, value in sorted(changes.items())) or 'none'}",
        f"- Projected strength: {result.projected_strength}",
        f"- Scholarships unlocked: {format_signed(result.scholarships_unlocked)}",
        f"- Funding change: {format_signed(result.funding_increase, currency=True)}",
    ]
    for name, delta in result.dimensional_changes.to_dict().items():
        lines.append(f"- {name.capitalize()}: {format_signed(delta)}")
    if result.unlocked_scholarship_ids:
        lines.append(f"- Newly matched: {reasons_to_text(list(result.unlocked_scholarship_ids))}")
    return "\n".join(lines)


def _coerce_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(numeric):
        return None
    return numeric

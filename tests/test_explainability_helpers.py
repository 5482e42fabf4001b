from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone

from app.helpers import (
    explain_match_score,
    format_amount,
    format_signed,
    gap_analysis_markdown,
    match_scores_frame,
    reasons_to_text,
    simulator_markdown,
)
from src.coach import analyze_gaps, compare_to_history, score_match, simulate
from src.normalize.schema import Dimension, Scholarship, Student, StudentProfile

TODAY = date(2026, 2, 22)


def _scholarship(scholarship_id: str, award: float, **criteria: dict) -> Scholarship:
    return Scholarship.from_mapping(
        {
            "scholarship_id": scholarship_id,
            "award_amount": award,
            "eligibility_criteria": {dimension.value: criteria.get(dimension.value) for dimension in Dimension},
        }
    )


CATALOG = [
    _scholarship("gpa", 10000, academic={"min_gpa": 3.5}),
    _scholarship("lead", 8000, experience={"leadership_required": True}),
    _scholarship("open", 5000),
]


def _student(gpa: float = 3.2) -> Student:
    return Student(student_id="s-1", profile=StudentProfile(gpa=gpa, completion_percentage=100, strength_score=50))


def test_explain_match_score_is_stable_and_falls_back() -> None:
    match = score_match(_student(), CATALOG[2], today=TODAY)
    weak = replace(
        match,
        academic_score=10,
        demographic_score=10,
        major_score=10,
        experience_score=10,
        financial_score=10,
        special_score=10,
    )

    assert explain_match_score(match) == [
        "Strong academic fit",
        "Demographic criteria met",
        "Experience matches what the sponsor wants",
    ]
    assert explain_match_score(match, max_signals=1) == ["Strong academic fit"]
    assert explain_match_score(weak) == ["Partial fit across dimensions"]


def test_formatting_helpers() -> None:
    assert format_amount(None) == "Unknown"
    assert format_amount("n/a") == "Unknown"
    assert format_amount(float("nan")) == "Unknown"
    assert format_amount(2500) == "$2,500"
    assert format_signed(5) == "+5"
    assert format_signed(-3) == "-3"
    assert format_signed(1500.0, currency=True) == "+$1,500"
    assert format_signed(-200.0, currency=True) == "-$200"
    assert reasons_to_text(["a", " ", "b"]) == "a, b"
    assert reasons_to_text(None) == ""


def test_match_scores_frame_columns() -> None:
    matches = [score_match(_student(), item, today=TODAY) for item in CATALOG]

    frame = match_scores_frame(matches)

    assert list(frame["scholarship_id"]) == ["gpa", "lead", "open"]
    assert list(frame.columns) == [
        "scholarship_id",
        "overall_match_score",
        "success",
        "strategic_value",
        "strategic_tier",
        "priority",
        "effort",
        "signals",
    ]
    assert match_scores_frame([]).empty


def test_gap_analysis_markdown_sections() -> None:
    previous = analyze_gaps(
        _student(), CATALOG, today=TODAY, analyzed_at=datetime(2026, 1, 1, tzinfo=timezone.utc)
    )
    current = analyze_gaps(
        _student(3.6), CATALOG, today=TODAY, analyzed_at=datetime(2026, 2, 1, tzinfo=timezone.utc)
    )

    report = gap_analysis_markdown(previous)
    progress = gap_analysis_markdown(current, comparison=compare_to_history(previous, current))

    assert report.startswith("# Gap Analysis: s-1")
    assert "## Gaps" in report
    assert "| GPA 3.5+ | academic | 3.2 | 3.5 | 1 | $10,000 |" in report
    assert "## Roadmap" in report
    assert "- Resource: [Khan Academy SAT Prep (Free)]" not in report
    assert "- Note: Join clubs/organizations first before running for officer positions" in report
    assert "## Progress Since Last Analysis" not in report
    assert "## Progress Since Last Analysis" in progress
    assert "- Gaps closed: 1" in progress
    assert "(31 days ago)" in progress


def test_gap_analysis_markdown_without_gaps() -> None:
    result = analyze_gaps(_student(), [], today=TODAY, analyzed_at=datetime(2026, 1, 1, tzinfo=timezone.utc))

    assert "No actionable gaps found for high-value scholarships." in gap_analysis_markdown(result)


def test_simulator_markdown() -> None:
    result = simulate(_student(), {"gpa": 3.5}, CATALOG, today=TODAY)

    text = simulator_markdown("s-1", {"gpa": 3.5}, result)

    assert text.startswith("# What-if Simulation: s-1")
    assert "- Changes: gpa=3.5" in text
    assert "- Scholarships unlocked: +1" in text
    assert "- Funding change: +$10,000" in text
    assert "- Newly matched: gpa" in text

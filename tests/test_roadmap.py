from __future__ import annotations

import logging
from datetime import date

import pytest

from src.gaps.config import GapAnalysisConfig
from src.gaps.roadmap import (
    GENERIC_STEPS,
    calculate_total_timeline,
    generate_recommendation,
    generate_roadmap,
    target_date_for,
    timeline_description,
)
from src.gaps.types import AchievabilityCategory, Gap, GapCategory

TODAY = date(2026, 2, 22)


def _gap(
    category: GapCategory,
    requirement: str,
    current: float,
    target: float,
    *,
    achievability: AchievabilityCategory = AchievabilityCategory.MODERATE,
    months: int = 6,
    funding: float = 10000.0,
    count: int = 1,
) -> Gap:
    return Gap(
        category=category,
        requirement=requirement,
        current_value=current,
        target_value=target,
        gap_size=round(target - current, 2),
        impact="",
        scholarships_affected=count,
        funding_blocked=funding,
        achievability=achievability,
        timeline_months=months,
        affected_scholarship_ids=tuple(f"s{index}" for index in range(count)),
    )


def test_template_texts_fill_targets() -> None:
    gpa = generate_recommendation(_gap(GapCategory.ACADEMIC, "GPA 3.5+", 3.2, 3.5), today=TODAY)
    sat = generate_recommendation(_gap(GapCategory.ACADEMIC, "SAT 1300+", 1100, 1300), today=TODAY)
    act = generate_recommendation(_gap(GapCategory.ACADEMIC, "ACT 30+", 25, 30), today=TODAY)

    assert gpa.recommendation.startswith("Focus on improving your GPA to 3.5 through")
    assert sat.recommendation.startswith("Prepare for SAT retake with goal of 1300+")
    assert act.recommendation.startswith("Prepare for ACT retake with goal of 30+")
    assert sat.resources[0].url == "https://www.khanacademy.org/sat"
    assert sat.action_steps == act.action_steps


def test_volunteer_recommendation_counts_remaining_hours() -> None:
    small = generate_recommendation(_gap(GapCategory.EXPERIENCE, "100+ volunteer hours", 20, 100), today=TODAY)
    large = generate_recommendation(_gap(GapCategory.EXPERIENCE, "200+ volunteer hours", 50, 200), today=TODAY)

    assert small.recommendation.startswith("Complete 80 additional volunteer hours")
    assert small.dependencies == ()
    assert large.dependencies == ("Start with smaller volunteer commitment to find right fit",)


def test_leadership_recommendation_has_dependency() -> None:
    recommendation = generate_recommendation(
        _gap(GapCategory.EXPERIENCE, "Leadership position", 0, 1), today=TODAY
    )

    assert recommendation.recommendation.startswith("Seek leadership position")
    assert recommendation.dependencies == ("Join clubs/organizations first before running for officer positions",)


def test_unmatched_gap_gets_generic_recommendation() -> None:
    recommendation = generate_recommendation(_gap(GapCategory.FINANCIAL, "EFC under 5000", 0, 1), today=TODAY)

    assert recommendation.recommendation == (
        "Work toward achieving EFC under 5000 to unlock additional scholarship opportunities"
    )
    assert recommendation.action_steps[0] == "Research specific requirements for EFC under 5000"
    assert len(recommendation.action_steps) == len(GENERIC_STEPS)
    assert recommendation.resources == ()


@pytest.mark.parametrize(
    ("tier", "months", "expected"),
    [
        (AchievabilityCategory.EASY, 1, "1 month (Easy win - tackle first!)"),
        (AchievabilityCategory.EASY, 3, "3 months (Easy win - tackle first!)"),
        (AchievabilityCategory.MODERATE, 8, "8 months (Moderate effort required)"),
        (AchievabilityCategory.LONG_TERM, 16, "16+ months (Long-term commitment)"),
    ],
)
def test_timeline_description(tier: AchievabilityCategory, months: int, expected: str) -> None:
    assert timeline_description(tier, months) == expected


def test_target_date_adds_calendar_months() -> None:
    assert target_date_for(TODAY, 4) == date(2026, 6, 22)
    assert target_date_for(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert target_date_for(date(2026, 11, 15), 3) == date(2027, 2, 15)


def test_total_timeline_runs_short_tiers_in_parallel() -> None:
    easy = generate_recommendation(
        _gap(GapCategory.EXPERIENCE, "50+ volunteer hours", 20, 50, achievability=AchievabilityCategory.EASY, months=3),
        today=TODAY,
    )
    moderate = generate_recommendation(_gap(GapCategory.ACADEMIC, "GPA 3.5+", 3.2, 3.5, months=8), today=TODAY)
    long_term = generate_recommendation(
        _gap(GapCategory.ACADEMIC, "SAT 1400+", 1100, 1400, achievability=AchievabilityCategory.LONG_TERM, months=6),
        today=TODAY,
    )

    assert calculate_total_timeline([easy, moderate, long_term]) == 14
    assert calculate_total_timeline([easy, moderate]) == 8
    assert calculate_total_timeline([]) == 0


def test_generate_roadmap_buckets_and_sequences_by_impact() -> None:
    gaps = [
        _gap(GapCategory.ACADEMIC, "GPA 3.5+", 3.2, 3.5, months=8, funding=10000),
        _gap(
            GapCategory.EXPERIENCE,
            "50+ volunteer hours",
            20,
            50,
            achievability=AchievabilityCategory.EASY,
            months=3,
            funding=30000,
            count=2,
        ),
        _gap(
            GapCategory.ACADEMIC,
            "SAT 1400+",
            1100,
            1400,
            achievability=AchievabilityCategory.LONG_TERM,
            months=6,
            funding=20000,
        ),
    ]

    roadmap = generate_roadmap(gaps, today=TODAY)

    assert [item.gap.requirement for item in roadmap.easy] == ["50+ volunteer hours"]
    assert [item.gap.requirement for item in roadmap.moderate] == ["GPA 3.5+"]
    assert [item.gap.requirement for item in roadmap.long_term] == ["SAT 1400+"]
    assert [item.gap.requirement for item in roadmap.recommended_sequence] == [
        "50+ volunteer hours",
        "SAT 1400+",
        "GPA 3.5+",
    ]
    assert roadmap.total_timeline_months == 14
    assert roadmap.diagnostics == ()
    assert roadmap.easy[0].target_date == date(2026, 5, 22)


def test_generate_roadmap_flags_overloaded_plans(caplog: pytest.LogCaptureFixture) -> None:
    gaps = [
        _gap(
            GapCategory.ACADEMIC,
            f"SAT {1200 + index * 10}+",
            1000,
            1200 + index * 10,
            achievability=AchievabilityCategory.LONG_TERM,
        )
        for index in range(4)
    ]
    config = GapAnalysisConfig.from_mapping({"total_gap_warning_threshold": 3})

    with caplog.at_level(logging.WARNING, logger="src.gaps.roadmap"):
        roadmap = generate_roadmap(gaps, today=TODAY, config=config)

    assert [(item.code, item.count) for item in roadmap.diagnostics] == [
        ("too_many_long_term_goals", 4),
        ("too_many_gaps", 4),
    ]
    assert "4 long-term goals" in roadmap.diagnostics[0].message
    assert len(caplog.records) == 2


def test_empty_roadmap() -> None:
    roadmap = generate_roadmap([], today=TODAY)

    assert roadmap.total_timeline_months == 0
    assert roadmap.recommended_sequence == ()
    assert roadmap.to_dict()["easy"] == []

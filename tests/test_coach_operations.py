from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

import pytest

from src.coach import active_scholarships, analyze_gaps, filter_eligibility, score_match, simulate
from src.gaps.types import HypotheticalChanges
from src.normalize.schema import Dimension, Scholarship, Student, StudentProfile, ValidationError

TODAY = date(2026, 2, 22)
ANALYZED_AT = datetime(2026, 2, 22, 12, 0, tzinfo=timezone.utc)


def _scholarship(scholarship_id: str, award: float, deadline: str | None = None, **criteria: Any) -> Scholarship:
    return Scholarship.from_mapping(
        {
            "scholarship_id": scholarship_id,
            "award_amount": award,
            "deadline": deadline,
            "eligibility_criteria": {dimension.value: criteria.get(dimension.value) for dimension in Dimension},
        }
    )


def _student(**overrides: Any) -> Student:
    values: dict[str, Any] = {"gpa": 3.2, "state": "CA", "completion_percentage": 100}
    values.update(overrides)
    return Student(student_id="s-1", profile=StudentProfile(**values))


CATALOG = [
    _scholarship("gpa", 10000, "2026-05-01", academic={"min_gpa": 3.5}),
    _scholarship("lead", 8000, experience={"leadership_required": True}),
    _scholarship("expired", 50000, "2026-01-01", academic={"min_gpa": 3.5}),
    _scholarship("due-today", 2000, "2026-02-22"),
    _scholarship("open", 5000),
]


def test_active_scholarships_keep_open_and_undated() -> None:
    assert [item.scholarship_id for item in active_scholarships(CATALOG, TODAY)] == [
        "gpa",
        "lead",
        "due-today",
        "open",
    ]


def test_analyze_gaps_end_to_end() -> None:
    result = analyze_gaps(_student(), CATALOG, today=TODAY, analyzed_at=ANALYZED_AT)

    assert [gap.requirement for gap in result.gaps] == ["GPA 3.5+", "Leadership position"]
    assert [gap.funding_blocked for gap in result.gaps] == [10000, 8000]
    assert result.impact_summary.scholarships_unlockable == 2
    assert result.impact_summary.potential_funding == 18000
    assert result.projection.current_matches == 2
    assert result.projection.projected_matches == 4
    assert result.projection.additional_funding == 18000
    assert [item.gap.requirement for item in result.roadmap.recommended_sequence] == [
        "GPA 3.5+",
        "Leadership position",
    ]
    assert result.analyzed_at == ANALYZED_AT


def test_analyze_gaps_is_deterministic() -> None:
    first = analyze_gaps(_student(), CATALOG, today=TODAY, analyzed_at=ANALYZED_AT)
    second = analyze_gaps(_student(), list(reversed(CATALOG)), today=TODAY, analyzed_at=ANALYZED_AT)

    assert first.to_dict() == second.to_dict()


def test_analyze_gaps_with_nothing_active() -> None:
    expired_only = [item for item in CATALOG if item.scholarship_id == "expired"]

    for catalog in ([], expired_only):
        result = analyze_gaps(_student(), catalog, today=TODAY, analyzed_at=ANALYZED_AT)
        assert result.gaps == ()
        assert result.impact_summary.scholarships_unlockable == 0
        assert result.impact_summary.potential_funding == 0
        assert result.projection.current_matches == 0
        assert result.roadmap.total_timeline_months == 0


def test_analyze_gaps_requires_profile() -> None:
    with pytest.raises(ValidationError, match="has no profile"):
        analyze_gaps(Student(student_id="ghost", profile=None), CATALOG, today=TODAY)


def test_simulate_accepts_mapping_and_skips_expired() -> None:
    result = simulate(_student(), {"gpa": 3.5}, CATALOG, today=TODAY)

    assert result.unlocked_scholarship_ids == ("gpa",)
    assert result.scholarships_unlocked == 1
    assert result.funding_increase == 10000


def test_simulate_without_changes_is_neutral() -> None:
    result = simulate(_student(), None, CATALOG, today=TODAY)

    assert result.scholarships_unlocked == 0
    assert result.dimensional_changes.to_dict() == {
        "academic": 0,
        "experience": 0,
        "leadership": 0,
        "demographics": 0,
    }


@pytest.mark.parametrize(
    "changes",
    [
        {"gpa": 4.5},
        {"sat_score": 200},
        {"act_score": 37},
        {"volunteer_hours": -1},
        {"leadership_count": 11},
        {"gpa": float("nan")},
        {"has_leadership": "yes"},
        {"major": "Biology"},
    ],
)
def test_simulate_rejects_invalid_changes(changes: dict[str, Any]) -> None:
    with pytest.raises(ValidationError):
        simulate(_student(), changes, CATALOG, today=TODAY)


def test_hypothetical_changes_to_dict_drops_unset() -> None:
    assert HypotheticalChanges(gpa=3.9, has_leadership=True).to_dict() == {"gpa": 3.9, "has_leadership": True}


def test_operation_wrappers_delegate() -> None:
    student = _student(strength_score=50)

    assert filter_eligibility(student, CATALOG[0], today=TODAY).eligible is False
    assert filter_eligibility(student, CATALOG[-1], today=TODAY).eligible is True
    assert score_match(student, CATALOG[-1], today=TODAY).scholarship_id == "open"

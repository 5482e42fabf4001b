from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any

import pytest

from src.coach import analyze_gaps
from src.gaps.history import compare_to_history
from src.gaps.types import AnalysisSnapshot
from src.normalize.schema import Dimension, Scholarship, Student, StudentProfile

TODAY = date(2026, 2, 22)


def _scholarship(scholarship_id: str, award: float, **criteria: Any) -> Scholarship:
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


def _analysis(student_id: str = "s-1", *, gpa: float, at: datetime, catalog: list[Scholarship] = CATALOG) -> Any:
    student = Student(
        student_id=student_id,
        profile=StudentProfile(gpa=gpa, completion_percentage=100),
    )
    return analyze_gaps(student, catalog, today=TODAY, analyzed_at=at)


def test_closed_gap_and_new_matches() -> None:
    previous = _analysis(gpa=3.2, at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    current = _analysis(gpa=3.6, at=datetime(2026, 2, 15, tzinfo=timezone.utc))

    comparison = compare_to_history(previous, current)

    assert [gap.requirement for gap in comparison.closed_gaps] == ["GPA 3.5+"]
    assert comparison.gaps_closed == 1
    assert comparison.gaps_remaining == 1
    assert comparison.emerging_gaps == ()
    assert comparison.days_since == 45
    assert comparison.new_scholarships_unlocked == 1
    assert comparison.profile_strength_change == current.projection.current - previous.projection.current
    assert comparison.profile_strength_change > 0


def test_emerging_gaps_from_new_requirements() -> None:
    previous = _analysis(gpa=3.6, at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    current = _analysis(
        gpa=3.6,
        at=datetime(2026, 2, 1, tzinfo=timezone.utc),
        catalog=CATALOG + [_scholarship("sat", 12000, academic={"min_sat": 1300})],
    )

    comparison = compare_to_history(AnalysisSnapshot.from_result(previous), current)

    assert [gap.requirement for gap in comparison.emerging_gaps] == ["SAT 1300+"]
    assert comparison.closed_gaps == ()
    assert comparison.new_scholarships_unlocked == 0


def test_snapshot_round_trip_compares_like_the_result() -> None:
    previous = _analysis(gpa=3.2, at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    current = _analysis(gpa=3.6, at=datetime(2026, 2, 15, tzinfo=timezone.utc))
    restored = AnalysisSnapshot.from_dict(AnalysisSnapshot.from_result(previous).to_dict())

    assert compare_to_history(restored, current) == compare_to_history(previous, current)


def test_days_since_never_negative() -> None:
    previous = _analysis(gpa=3.2, at=datetime(2026, 3, 1, tzinfo=timezone.utc))
    current = _analysis(gpa=3.2, at=datetime(2026, 2, 1, tzinfo=timezone.utc))

    assert compare_to_history(previous, current).days_since == 0


def test_different_students_are_flagged(caplog: pytest.LogCaptureFixture) -> None:
    previous = _analysis("s-1", gpa=3.2, at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    current = _analysis("s-2", gpa=3.2, at=datetime(2026, 2, 1, tzinfo=timezone.utc))

    with caplog.at_level(logging.WARNING, logger="src.gaps.history"):
        comparison = compare_to_history(previous, current)

    assert "different students" in caplog.text
    assert comparison.gaps_remaining == 2


def test_naive_timestamps_are_treated_as_utc() -> None:
    previous = _analysis(gpa=3.2, at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    current = _analysis(gpa=3.2, at=datetime(2026, 2, 1))
    naive_current = replace(current, analyzed_at=datetime(2026, 2, 1))
    payload = AnalysisSnapshot.from_result(previous).to_dict()
    payload["analyzed_at"] = "2026-01-01T00:00:00"

    assert current.analyzed_at == datetime(2026, 2, 1, tzinfo=timezone.utc)
    assert compare_to_history(previous, current).days_since == 31
    assert compare_to_history(previous, naive_current).days_since == 31
    assert compare_to_history(AnalysisSnapshot.from_dict(payload), naive_current).days_since == 31

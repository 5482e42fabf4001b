from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from src.match.eligibility import (
    calculate_age,
    eligibility_frame,
    filter_eligibility,
    filter_scholarships,
    get_filter_statistics,
    parse_efc_max,
    work_experience_months,
)
from src.normalize.schema import Dimension, FinancialNeed, Scholarship, Student, StudentProfile, ValidationError

TODAY = date(2026, 2, 22)


def _scholarship(scholarship_id: str, award: float = 5000.0, **criteria: dict[str, Any]) -> Scholarship:
    sections = {dimension.value: criteria.get(dimension.value, {}) for dimension in Dimension}
    return Scholarship.from_mapping(
        {"scholarship_id": scholarship_id, "award_amount": award, "eligibility_criteria": sections}
    )


def _student(**profile: Any) -> Student:
    return Student(student_id="s-1", profile=StudentProfile(**profile), date_of_birth=date(2008, 6, 1))


def test_filter_eligibility_passes_when_criteria_are_empty() -> None:
    result = filter_eligibility(_student(gpa=3.0), _scholarship("open"), today=TODAY)

    assert result.eligible is True
    assert result.failed_criteria == ()


def test_filter_eligibility_collects_every_failure_without_early_exit() -> None:
    student = _student(gpa=3.2, sat_score=1100, state="CA", volunteer_hours=20)
    scholarship = _scholarship(
        "multi",
        academic={"min_gpa": 3.5, "min_sat": 1300},
        demographic={"required_state": ["TX"]},
        experience={"min_volunteer_hours": 100, "leadership_required": True},
    )

    early = filter_eligibility(student, scholarship, early_exit=True, today=TODAY)
    full = filter_eligibility(student, scholarship, early_exit=False, today=TODAY)

    assert [failed.criterion for failed in early.failed_criteria] == ["min_gpa", "min_sat"]
    assert [(failed.dimension, failed.criterion) for failed in full.failed_criteria] == [
        (Dimension.ACADEMIC, "min_gpa"),
        (Dimension.ACADEMIC, "min_sat"),
        (Dimension.DEMOGRAPHIC, "required_state"),
        (Dimension.EXPERIENCE, "min_volunteer_hours"),
        (Dimension.EXPERIENCE, "leadership_required"),
    ]
    assert full.failed_dimensions() == {Dimension.ACADEMIC, Dimension.DEMOGRAPHIC, Dimension.EXPERIENCE}
    assert full.failed_criteria[0].to_dict() == {
        "dimension": "academic",
        "criterion": "min_gpa",
        "required": 3.5,
        "actual": 3.2,
    }


def test_filter_eligibility_matches_text_case_insensitively() -> None:
    student = _student(state="ca", intended_major="computer science", citizenship="US Citizen")
    scholarship = _scholarship(
        "text",
        demographic={"required_state": ["CA"]},
        major={"eligible_majors": ["Computer Science"]},
        special={"citizenship_required": "us citizen"},
    )

    assert filter_eligibility(student, scholarship, today=TODAY).eligible is True


def test_filter_eligibility_treats_any_as_no_restriction() -> None:
    scholarship = _scholarship(
        "any",
        demographic={"required_gender": "Any"},
        special={"military_affiliation": "Any", "citizenship_required": "Any"},
    )

    assert filter_eligibility(_student(), scholarship, today=TODAY).eligible is True


def test_filter_eligibility_checks_age_from_date_of_birth() -> None:
    scholarship = _scholarship("age", demographic={"age_min": 18, "age_max": 24})
    minor = _student()
    no_dob = Student(student_id="s-2", profile=StudentProfile(), date_of_birth=None)

    minor_result = filter_eligibility(minor, scholarship, today=TODAY)
    missing_result = filter_eligibility(no_dob, scholarship, today=TODAY)

    assert [failed.criterion for failed in minor_result.failed_criteria] == ["age_min"]
    assert minor_result.failed_criteria[0].actual == 17
    assert [failed.criterion for failed in missing_result.failed_criteria] == ["age"]


def test_filter_eligibility_financial_and_special_rules() -> None:
    student = _student(
        financial_need=FinancialNeed.MODERATE,
        efc_range="0-8000",
        pell_grant_eligible=False,
        first_generation=False,
    )
    scholarship = _scholarship(
        "need",
        financial={
            "requires_financial_need": True,
            "max_efc": 5000,
            "pell_grant_required": True,
            "financial_need_level": "HIGH",
        },
        special={"first_generation_required": True, "disability_required": True},
    )

    result = filter_eligibility(student, scholarship, early_exit=False, today=TODAY)

    assert [failed.criterion for failed in result.failed_criteria] == [
        "max_efc",
        "pell_grant_required",
        "financial_need_level",
        "first_generation_required",
        "disability_required",
    ]


def test_filter_eligibility_work_experience_months_use_dates() -> None:
    student = _student(work_experience=[{"title": "Cashier", "start_date": "2025-06-01", "end_date": "2025-12-01"}])
    passes = _scholarship("work-ok", experience={"min_work_experience": 6})
    fails = _scholarship("work-short", experience={"min_work_experience": 12})

    assert filter_eligibility(student, passes, today=TODAY).eligible is True
    assert filter_eligibility(student, fails, today=TODAY).failed_criteria[0].actual == 6


def test_filter_eligibility_requires_a_profile() -> None:
    student = Student(student_id="ghost", profile=None)

    with pytest.raises(ValidationError, match="has no profile"):
        filter_eligibility(student, _scholarship("open"), today=TODAY)


def test_filter_scholarships_and_statistics() -> None:
    student = _student(gpa=3.4, state="CA")
    catalog = [
        _scholarship("open"),
        _scholarship("gpa", academic={"min_gpa": 3.8}),
        _scholarship("state", demographic={"required_state": ["NY"]}),
    ]

    eligible = filter_scholarships(student, catalog, today=TODAY)
    stats = get_filter_statistics(student, catalog, today=TODAY)

    assert [item.scholarship_id for item in eligible] == ["open"]
    assert stats["total_scholarships"] == 3
    assert stats["eligible_count"] == 1
    assert stats["rejected_count"] == 2
    assert stats["rejections_by_dimension"]["academic"] == 1
    assert stats["rejections_by_dimension"]["demographic"] == 1


def test_eligibility_frame_lists_reason_codes() -> None:
    student = _student(gpa=3.0)
    frame = eligibility_frame(
        student,
        [_scholarship("open"), _scholarship("gpa", academic={"min_gpa": 3.5})],
        today=TODAY,
    )

    assert list(frame["scholarship_id"]) == ["open", "gpa"]
    assert list(frame["eligible"]) == [True, False]
    assert frame.loc[1, "reasons"] == ["academic.min_gpa"]


def test_age_efc_and_work_helpers() -> None:
    assert calculate_age(date(2008, 2, 23), TODAY) == 17
    assert calculate_age(date(2008, 2, 22), TODAY) == 18
    assert parse_efc_max("0-5,000") == 5000
    assert parse_efc_max("10000+") == 999_999
    assert parse_efc_max(None) is None
    assert work_experience_months([{"start_date": "2025-12-01"}], TODAY) == 2
    assert work_experience_months([{"title": "no dates"}], TODAY) == 0

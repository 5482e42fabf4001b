from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterable, Sequence

import pandas as pd

from src.normalize.schema import (
    NO_RESTRICTION,
    AcademicCriteria,
    DemographicCriteria,
    Dimension,
    ExperienceCriteria,
    FinancialCriteria,
    FinancialNeed,
    MajorCriteria,
    Scholarship,
    SpecialCriteria,
    Student,
    StudentProfile,
    coerce_date,
    financial_need_priority,
)

logger = logging.getLogger(__name__)

UNBOUNDED_EFC = 999_999


@dataclass(frozen=True, slots=True)
class FailedCriterion:
    dimension: Dimension
    criterion: str
    required: Any
    actual: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "dimension": self.dimension.value,
            "criterion": self.criterion,
            "required": _jsonable(self.required),
            "actual": _jsonable(self.actual),
        }


@dataclass(frozen=True, slots=True)
class EligibilityResult:
    eligible: bool
    failed_criteria: tuple[FailedCriterion, ...] = field(default_factory=tuple)

    def failed_dimensions(self) -> set[Dimension]:
        return {failed.dimension for failed in self.failed_criteria}

    def to_dict(self) -> dict[str, Any]:
        return {
            "eligible": self.eligible,
            "failed_criteria": [failed.to_dict() for failed in self.failed_criteria],
        }


# Signature shared by every hard-filter implementation injected into the gap pipeline.
EligibilityFilter = Callable[..., EligibilityResult]


def _jsonable(value: Any) -> Any:
    if isinstance(value, (tuple, list)):
        return [_jsonable(item) for item in value]
    if isinstance(value, FinancialNeed):
        return value.value
    return value


def _normalize_text(value: Any) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip().lower()
    return normalized or None


def _normalize_list(values: Iterable[Any]) -> list[str]:
    return [item for item in (_normalize_text(value) for value in values) if item]


def _entry_name(entry: dict[str, Any]) -> str:
    return str(entry.get("name") or entry.get("activity") or entry.get("title") or "").strip()


def calculate_age(date_of_birth: date, today: date) -> int:
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def work_experience_months(entries: Sequence[dict[str, Any]], today: date) -> int:
    total = 0
    for entry in entries:
        start = coerce_date(entry.get("start_date"))
        if start is None:
            continue
        end = coerce_date(entry.get("end_date")) or today
        months = (end.year - start.year) * 12 + (end.month - start.month)
        total += max(0, months)
    return total


def parse_efc_max(efc_range: str | None) -> int | None:
    """Upper bound of an EFC range string: "0-5000" -> 5000, "10000+" -> unbounded."""
    if not efc_range:
        return None
    text = efc_range.replace(",", "").replace("$", "").strip()
    if "-" in text:
        upper = text.split("-", 1)[1].strip()
        return int(upper) if upper.isdigit() else None
    if "+" in text:
        return UNBOUNDED_EFC
    return int(text) if text.isdigit() else None


def _check_academic(
    profile: StudentProfile, criteria: AcademicCriteria, *, date_of_birth: date | None, today: date
) -> list[FailedCriterion]:
    failed: list[FailedCriterion] = []

    def fail(criterion: str, required: Any, actual: Any) -> None:
        failed.append(FailedCriterion(Dimension.ACADEMIC, criterion, required, actual))

    for name, minimum, maximum, actual in (
        ("gpa", criteria.min_gpa, criteria.max_gpa, profile.gpa),
        ("sat", criteria.min_sat, criteria.max_sat, profile.sat_score),
        ("act", criteria.min_act, criteria.max_act, profile.act_score),
    ):
        if minimum is not None and (actual is None or actual < minimum):
            fail(f"min_{name}", minimum, actual)
        if maximum is not None and actual is not None and actual > maximum:
            fail(f"max_{name}", maximum, actual)

    if criteria.class_rank_percentile is not None:
        if profile.class_rank and profile.class_size and profile.class_size > 0:
            percentile = profile.class_rank / profile.class_size * 100
            if percentile > criteria.class_rank_percentile:
                fail("class_rank_percentile", criteria.class_rank_percentile, percentile)
        else:
            fail("class_rank_percentile", criteria.class_rank_percentile, None)
    return failed


def _check_demographic(
    profile: StudentProfile, criteria: DemographicCriteria, *, date_of_birth: date | None, today: date
) -> list[FailedCriterion]:
    failed: list[FailedCriterion] = []

    def fail(criterion: str, required: Any, actual: Any) -> None:
        failed.append(FailedCriterion(Dimension.DEMOGRAPHIC, criterion, required, actual))

    if criteria.required_gender and criteria.required_gender != NO_RESTRICTION:
        if _normalize_text(profile.gender) != _normalize_text(criteria.required_gender):
            fail("required_gender", criteria.required_gender, profile.gender)

    if criteria.required_ethnicity:
        required = set(_normalize_list(criteria.required_ethnicity))
        if not required.intersection(_normalize_list(profile.ethnicity)):
            fail("required_ethnicity", criteria.required_ethnicity, profile.ethnicity)

    if criteria.age_min is not None or criteria.age_max is not None:
        if date_of_birth is None:
            bounds = f"{criteria.age_min if criteria.age_min is not None else 'any'}-" \
                f"{criteria.age_max if criteria.age_max is not None else 'any'}"
            fail("age", bounds, None)
        else:
            age = calculate_age(date_of_birth, today)
            if criteria.age_min is not None and age < criteria.age_min:
                fail("age_min", criteria.age_min, age)
            if criteria.age_max is not None and age > criteria.age_max:
                fail("age_max", criteria.age_max, age)

    if criteria.required_state and _normalize_text(profile.state) not in _normalize_list(criteria.required_state):
        fail("required_state", criteria.required_state, profile.state)

    if criteria.required_city and _normalize_text(profile.city) not in _normalize_list(criteria.required_city):
        fail("required_city", criteria.required_city, profile.city)
    return failed


def _check_major(
    profile: StudentProfile, criteria: MajorCriteria, *, date_of_birth: date | None, today: date
) -> list[FailedCriterion]:
    failed: list[FailedCriterion] = []
    major = _normalize_text(profile.intended_major)

    def fail(criterion: str, required: Any, actual: Any) -> None:
        failed.append(FailedCriterion(Dimension.MAJOR, criterion, required, actual))

    if criteria.eligible_majors and major not in _normalize_list(criteria.eligible_majors):
        fail("eligible_majors", criteria.eligible_majors, profile.intended_major)

    if criteria.excluded_majors and major is not None and major in _normalize_list(criteria.excluded_majors):
        fail("excluded_majors", f"Not in: {', '.join(criteria.excluded_majors)}", profile.intended_major)

    if criteria.required_field_of_study:
        if _normalize_text(profile.field_of_study) not in _normalize_list(criteria.required_field_of_study):
            fail("required_field_of_study", criteria.required_field_of_study, profile.field_of_study)

    if criteria.career_goals_keywords:
        goals = _normalize_text(profile.career_goals) or ""
        if not any(keyword in goals for keyword in _normalize_list(criteria.career_goals_keywords)):
            fail("career_goals_keywords", criteria.career_goals_keywords, profile.career_goals)
    return failed


def _check_experience(
    profile: StudentProfile, criteria: ExperienceCriteria, *, date_of_birth: date | None, today: date
) -> list[FailedCriterion]:
    failed: list[FailedCriterion] = []

    def fail(criterion: str, required: Any, actual: Any) -> None:
        failed.append(FailedCriterion(Dimension.EXPERIENCE, criterion, required, actual))

    if criteria.min_volunteer_hours is not None and profile.volunteer_hours < criteria.min_volunteer_hours:
        fail("min_volunteer_hours", criteria.min_volunteer_hours, profile.volunteer_hours)

    if criteria.leadership_required and not profile.leadership_roles:
        fail("leadership_required", True, False)

    if criteria.required_extracurriculars:
        activity_names = [name for name in (_entry_name(entry) for entry in profile.extracurriculars) if name]
        lowered = [name.lower() for name in activity_names]
        required = _normalize_list(criteria.required_extracurriculars)
        if not any(needle in name for needle in required for name in lowered):
            fail("required_extracurriculars", criteria.required_extracurriculars, activity_names)

    if criteria.min_work_experience is not None:
        months = work_experience_months(profile.work_experience, today)
        if months < criteria.min_work_experience:
            fail("min_work_experience", criteria.min_work_experience, months)

    if criteria.awards_honors_required and not profile.awards_honors:
        fail("awards_honors_required", True, False)
    return failed


def _check_financial(
    profile: StudentProfile, criteria: FinancialCriteria, *, date_of_birth: date | None, today: date
) -> list[FailedCriterion]:
    failed: list[FailedCriterion] = []

    def fail(criterion: str, required: Any, actual: Any) -> None:
        failed.append(FailedCriterion(Dimension.FINANCIAL, criterion, required, actual))

    if criteria.requires_financial_need:
        if profile.financial_need is None or profile.financial_need == FinancialNeed.LOW:
            fail("requires_financial_need", True, profile.financial_need)

    if criteria.max_efc is not None:
        efc_max = parse_efc_max(profile.efc_range)
        if efc_max is None or efc_max > criteria.max_efc:
            fail("max_efc", criteria.max_efc, efc_max)

    if criteria.pell_grant_required and not profile.pell_grant_eligible:
        fail("pell_grant_required", True, False)

    if criteria.financial_need_level is not None:
        required_priority = financial_need_priority(criteria.financial_need_level)
        if financial_need_priority(profile.financial_need) < required_priority:
            fail("financial_need_level", criteria.financial_need_level, profile.financial_need)
    return failed


def _check_special(
    profile: StudentProfile, criteria: SpecialCriteria, *, date_of_birth: date | None, today: date
) -> list[FailedCriterion]:
    failed: list[FailedCriterion] = []

    def fail(criterion: str, required: Any, actual: Any) -> None:
        failed.append(FailedCriterion(Dimension.SPECIAL, criterion, required, actual))

    if criteria.first_generation_required and not profile.first_generation:
        fail("first_generation_required", True, False)

    if criteria.military_affiliation and criteria.military_affiliation != NO_RESTRICTION:
        if _normalize_text(profile.military_affiliation) != _normalize_text(criteria.military_affiliation):
            fail("military_affiliation", criteria.military_affiliation, profile.military_affiliation)

    if criteria.citizenship_required and criteria.citizenship_required != NO_RESTRICTION:
        if _normalize_text(profile.citizenship) != _normalize_text(criteria.citizenship_required):
            fail("citizenship_required", criteria.citizenship_required, profile.citizenship)

    if criteria.disability_required and not _normalize_text(profile.disabilities):
        fail("disability_required", True, False)

    if criteria.other_requirements:
        logger.debug("Manual review requirements: %s", ", ".join(criteria.other_requirements))
    return failed


_DIMENSION_CHECKS: tuple[tuple[Dimension, Callable[..., list[FailedCriterion]]], ...] = (
    (Dimension.ACADEMIC, _check_academic),
    (Dimension.DEMOGRAPHIC, _check_demographic),
    (Dimension.MAJOR, _check_major),
    (Dimension.EXPERIENCE, _check_experience),
    (Dimension.FINANCIAL, _check_financial),
    (Dimension.SPECIAL, _check_special),
)

if {dimension for dimension, _ in _DIMENSION_CHECKS} != set(Dimension):
    raise RuntimeError("Every eligibility dimension needs a check.")


def filter_eligibility(
    student: Student,
    scholarship: Scholarship,
    *,
    early_exit: bool = True,
    today: date | None = None,
) -> EligibilityResult:
    """Hard pass/fail of one student against one scholarship, dimension by dimension.

    With ``early_exit`` the first failing dimension ends evaluation; otherwise every failing
    criterion across all six dimensions is collected.
    """
    profile = student.require_profile()
    effective_today = today or date.today()
    criteria = scholarship.eligibility_criteria

    failed: list[FailedCriterion] = []
    for dimension, check in _DIMENSION_CHECKS:
        dimension_failures = check(
            profile,
            getattr(criteria, dimension.value),
            date_of_birth=student.date_of_birth,
            today=effective_today,
        )
        if dimension_failures:
            failed.extend(dimension_failures)
            if early_exit:
                break
    return EligibilityResult(eligible=not failed, failed_criteria=tuple(failed))


def filter_scholarships(
    student: Student,
    scholarships: Iterable[Scholarship],
    *,
    today: date | None = None,
    eligibility_filter: EligibilityFilter = filter_eligibility,
) -> list[Scholarship]:
    eligible = [
        scholarship
        for scholarship in scholarships
        if eligibility_filter(student, scholarship, early_exit=True, today=today).eligible
    ]
    logger.debug("Hard filter kept %s scholarships for student %s", len(eligible), student.student_id)
    return eligible


def get_filter_statistics(
    student: Student,
    scholarships: Sequence[Scholarship],
    *,
    early_exit: bool = True,
    today: date | None = None,
) -> dict[str, Any]:
    rejections = {dimension.value: 0 for dimension in Dimension}
    eligible_count = 0
    for scholarship in scholarships:
        result = filter_eligibility(student, scholarship, early_exit=early_exit, today=today)
        if result.eligible:
            eligible_count += 1
            continue
        for failed in result.failed_criteria:
            rejections[failed.dimension.value] += 1

    return {
        "total_scholarships": len(scholarships),
        "eligible_count": eligible_count,
        "rejected_count": len(scholarships) - eligible_count,
        "rejections_by_dimension": rejections,
    }


def eligibility_frame(
    student: Student,
    scholarships: Sequence[Scholarship],
    *,
    today: date | None = None,
) -> pd.DataFrame:
    """One row per scholarship with its full failed-criterion list, for reporting."""
    rows: list[dict[str, Any]] = []
    for scholarship in scholarships:
        result = filter_eligibility(student, scholarship, early_exit=False, today=today)
        rows.append(
            {
                "scholarship_id": scholarship.scholarship_id,
                "name": scholarship.name,
                "award_amount": scholarship.award_amount,
                "eligible": result.eligible,
                "reasons": [f"{failed.dimension.value}.{failed.criterion}" for failed in result.failed_criteria],
                "failed_dimensions": sorted(dimension.value for dimension in result.failed_dimensions()),
            }
        )

    columns = ["scholarship_id", "name", "award_amount", "eligible", "reasons", "failed_dimensions"]
    return pd.DataFrame(rows, columns=columns)

from __future__ import annotations

from datetime import date
from typing import Callable, Sequence

from src.match.eligibility import parse_efc_max, work_experience_months
from src.normalize.numeric import round_half_up
from src.normalize.schema import (
    NO_RESTRICTION,
    AcademicCriteria,
    DemographicCriteria,
    Dimension,
    ExperienceCriteria,
    FinancialCriteria,
    MajorCriteria,
    SpecialCriteria,
    StudentProfile,
    financial_need_priority,
)

FULL_MATCH = 100

MAJOR_FAMILIES: dict[str, tuple[str, ...]] = {
    "stem": ("biology", "chemistry", "physics", "mathematics", "engineering", "computer science", "science"),
    "engineering": ("mechanical", "electrical", "civil", "chemical", "computer", "aerospace", "biomedical"),
    "business": ("business", "finance", "accounting", "economics", "marketing", "management"),
    "health": ("nursing", "medicine", "pharmacy", "public health", "healthcare", "medical"),
    "arts": ("art", "music", "theater", "dance", "design", "fine arts", "performing arts"),
    "humanities": ("english", "history", "philosophy", "literature", "languages", "liberal arts"),
}

RELATED_MILITARY: dict[str, tuple[str, ...]] = {
    "veteran": ("active duty",),
    "dependent": ("veteran", "active duty"),
}


def _lower(value: str | None) -> str:
    return (value or "").strip().lower()


def _percent_of(actual: float, required: float) -> int:
    if required <= 0:
        return FULL_MATCH
    return round_half_up(max(0.0, actual / required * 100))


def _weighted_mean(parts: Sequence[tuple[float, float]]) -> int:
    """Average of (score, weight) pairs, normalised by the weights actually present."""
    total_weight = sum(weight for _, weight in parts)
    if total_weight <= 0:
        return FULL_MATCH
    return round_half_up(sum(score * weight for score, weight in parts) / total_weight)


def _range_score(
    actual: float | None,
    minimum: float | None,
    maximum: float | None,
    overage_penalty: float,
) -> float:
    if actual is None:
        return 0.0
    if minimum is not None:
        return FULL_MATCH if actual >= minimum else _percent_of(actual, minimum)
    if maximum is not None and actual > maximum:
        return round_half_up(max(0.0, FULL_MATCH - (actual - maximum) * overage_penalty))
    return FULL_MATCH


def _class_rank_score(profile: StudentProfile, required_percentile: float) -> float:
    if profile.class_rank is None or not profile.class_size:
        return 0.0
    percentile = profile.class_rank / profile.class_size * 100
    if percentile <= required_percentile:
        return FULL_MATCH
    return _percent_of(required_percentile, percentile)


def score_academic(profile: StudentProfile, criteria: AcademicCriteria, *, today: date) -> int:
    has_gpa = criteria.min_gpa is not None or criteria.max_gpa is not None
    has_sat = criteria.min_sat is not None or criteria.max_sat is not None
    has_act = criteria.min_act is not None or criteria.max_act is not None
    gpa_score = _range_score(profile.gpa, criteria.min_gpa, criteria.max_gpa, 20)
    sat_score = _range_score(profile.sat_score, criteria.min_sat, criteria.max_sat, 0.1) if has_sat else 0
    act_score = _range_score(profile.act_score, criteria.min_act, criteria.max_act, 10) if has_act else 0

    if criteria.class_rank_percentile is not None:
        rank_score = _class_rank_score(profile, criteria.class_rank_percentile)
        if not (has_gpa or has_sat or has_act):
            return round_half_up(rank_score)
        # Rank replaces the separate test weights; only the stronger test counts.
        best_test = max(sat_score, act_score)
        if profile.gpa is not None:
            return round_half_up(gpa_score * 0.4 + rank_score * 0.3 + best_test * 0.3)
        return round_half_up(rank_score * 0.5 + best_test * 0.5)

    parts: list[tuple[float, float]] = []
    if has_gpa:
        parts.append((gpa_score, 0.4))
    if has_sat:
        parts.append((sat_score, 0.3))
    if has_act:
        parts.append((act_score, 0.3))
    return _weighted_mean(parts)


def _estimated_age(graduation_year: int, today: date) -> int:
    return today.year - (graduation_year - 18)


def score_demographic(profile: StudentProfile, criteria: DemographicCriteria, *, today: date) -> int:
    scores: list[float] = []
    if criteria.required_gender and criteria.required_gender != NO_RESTRICTION:
        scores.append(FULL_MATCH if _lower(profile.gender) == _lower(criteria.required_gender) else 0)
    if criteria.required_ethnicity:
        required = {_lower(item) for item in criteria.required_ethnicity}
        scores.append(FULL_MATCH if required.intersection(_lower(item) for item in profile.ethnicity) else 0)
    if criteria.required_state:
        scores.append(FULL_MATCH if _lower(profile.state) in {_lower(s) for s in criteria.required_state} else 0)
    if criteria.required_city:
        scores.append(FULL_MATCH if _lower(profile.city) in {_lower(c) for c in criteria.required_city} else 0)

    if criteria.age_min is not None or criteria.age_max is not None:
        if profile.graduation_year is None:
            scores.append(0)
        else:
            age = _estimated_age(profile.graduation_year, today)
            if criteria.age_min is not None and age < criteria.age_min:
                scores.append(_percent_of(age, criteria.age_min))
            elif criteria.age_max is not None and age > criteria.age_max:
                scores.append(round_half_up(max(0.0, FULL_MATCH - (age - criteria.age_max) * 10)))
            else:
                scores.append(FULL_MATCH)

    if not scores:
        return FULL_MATCH
    return round_half_up(sum(scores) / len(scores))


def _related_major(student_major: str, eligible_majors: Sequence[str]) -> bool:
    for family in MAJOR_FAMILIES.values():
        if any(member in student_major for member in family):
            return any(member in _lower(eligible) for eligible in eligible_majors for member in family)
    return False


def _eligible_major_score(major: str, eligible_majors: Sequence[str]) -> float:
    if not major:
        return 0
    lowered = [_lower(item) for item in eligible_majors]
    if major in lowered:
        return FULL_MATCH
    if any(major in item or item in major for item in lowered):
        return 75
    if _related_major(major, eligible_majors):
        return 50
    return 0


def _field_of_study_score(field: str, required_fields: Sequence[str]) -> float:
    if not field:
        return 0
    lowered = [_lower(item) for item in required_fields]
    if field in lowered:
        return FULL_MATCH
    if any(field in item or item in field for item in lowered):
        return 80
    return 0


def _career_goals_score(goals: str, keywords: Sequence[str]) -> float:
    if not goals:
        return 0
    matches = sum(1 for keyword in keywords if _lower(keyword) in goals)
    if matches == 0:
        return 0
    return round_half_up(min(FULL_MATCH, matches / len(keywords) * 100 * 1.2))


def score_major(profile: StudentProfile, criteria: MajorCriteria, *, today: date) -> int:
    major = _lower(profile.intended_major)
    if major and major in {_lower(item) for item in criteria.excluded_majors}:
        return 0

    parts: list[tuple[float, float]] = []
    if criteria.eligible_majors:
        parts.append((_eligible_major_score(major, criteria.eligible_majors), 0.5))
    if criteria.required_field_of_study:
        parts.append((_field_of_study_score(_lower(profile.field_of_study), criteria.required_field_of_study), 0.3))
    if criteria.career_goals_keywords:
        parts.append((_career_goals_score(_lower(profile.career_goals), criteria.career_goals_keywords), 0.2))
    return _weighted_mean(parts)


def _activity_match_score(profile: StudentProfile, required: Sequence[str]) -> float:
    names = [_lower(str(entry.get("name") or entry.get("activity") or "")) for entry in profile.extracurriculars]
    names = [name for name in names if name]
    if not names:
        return 0
    matched = sum(
        1 for item in required if any(_lower(item) in name or name in _lower(item) for name in names)
    )
    if matched == 0:
        return 0
    return round_half_up(min(FULL_MATCH, matched / len(required) * 100))


def score_experience(profile: StudentProfile, criteria: ExperienceCriteria, *, today: date) -> int:
    parts: list[tuple[float, float]] = []
    if criteria.min_volunteer_hours is not None:
        hours_score = (
            FULL_MATCH
            if profile.volunteer_hours >= criteria.min_volunteer_hours
            else _percent_of(profile.volunteer_hours, criteria.min_volunteer_hours)
        )
        parts.append((hours_score, 0.35))
    if criteria.leadership_required is not None:
        met = not criteria.leadership_required or bool(profile.leadership_roles)
        parts.append((FULL_MATCH if met else 0, 0.25))
    if criteria.required_extracurriculars:
        parts.append((_activity_match_score(profile, criteria.required_extracurriculars), 0.20))
    if criteria.min_work_experience is not None:
        months = work_experience_months(profile.work_experience, today)
        work_score = (
            FULL_MATCH if months >= criteria.min_work_experience else _percent_of(months, criteria.min_work_experience)
        )
        parts.append((work_score, 0.15))
    if criteria.awards_honors_required is not None:
        met = not criteria.awards_honors_required or bool(profile.awards_honors)
        parts.append((FULL_MATCH if met else 0, 0.05))
    return _weighted_mean(parts)


def _need_score(profile: StudentProfile, criteria: FinancialCriteria) -> float:
    if not criteria.requires_financial_need:
        return FULL_MATCH
    if profile.financial_need is None:
        return 0
    if criteria.financial_need_level is None:
        return FULL_MATCH
    student_level = financial_need_priority(profile.financial_need)
    required_level = financial_need_priority(criteria.financial_need_level)
    if student_level >= required_level:
        return FULL_MATCH
    return _percent_of(student_level, required_level)


def score_financial(profile: StudentProfile, criteria: FinancialCriteria, *, today: date) -> int:
    parts: list[tuple[float, float]] = []
    if criteria.requires_financial_need is not None:
        parts.append((_need_score(profile, criteria), 0.5))
    if criteria.pell_grant_required is not None:
        parts.append((FULL_MATCH if profile.pell_grant_eligible == criteria.pell_grant_required else 0, 0.3))
    if criteria.max_efc is not None:
        efc_max = parse_efc_max(profile.efc_range)
        if efc_max is None:
            efc_score: float = 0
        elif efc_max <= criteria.max_efc:
            efc_score = FULL_MATCH
        else:
            efc_score = _percent_of(criteria.max_efc, efc_max)
        parts.append((efc_score, 0.2))
    return _weighted_mean(parts)


def _military_score(student: str, required: str) -> float:
    if not student:
        return FULL_MATCH if required == "none" else 0
    if student == required:
        return FULL_MATCH
    if student in RELATED_MILITARY.get(required, ()):
        return 75
    return 0


def _citizenship_score(student: str, required: str) -> float:
    if not student:
        return 0
    if student == required:
        return FULL_MATCH
    if required == "permanent resident" and student == "us citizen":
        return FULL_MATCH
    if required == "us citizen" and student == "permanent resident":
        return 50
    return 0


def score_special(profile: StudentProfile, criteria: SpecialCriteria, *, today: date) -> int:
    scores: list[float] = []
    if criteria.first_generation_required is not None:
        scores.append(FULL_MATCH if profile.first_generation == criteria.first_generation_required else 0)
    if criteria.military_affiliation and criteria.military_affiliation != NO_RESTRICTION:
        scores.append(_military_score(_lower(profile.military_affiliation), _lower(criteria.military_affiliation)))
    if criteria.disability_required is not None:
        met = not criteria.disability_required or bool(_lower(profile.disabilities))
        scores.append(FULL_MATCH if met else 0)
    if criteria.citizenship_required and criteria.citizenship_required != NO_RESTRICTION:
        scores.append(_citizenship_score(_lower(profile.citizenship), _lower(criteria.citizenship_required)))

    if not scores:
        return FULL_MATCH
    return round_half_up(sum(scores) / len(scores))


DIMENSION_SCORERS: dict[Dimension, Callable[..., int]] = {
    Dimension.ACADEMIC: score_academic,
    Dimension.DEMOGRAPHIC: score_demographic,
    Dimension.MAJOR: score_major,
    Dimension.EXPERIENCE: score_experience,
    Dimension.FINANCIAL: score_financial,
    Dimension.SPECIAL: score_special,
}

if set(DIMENSION_SCORERS) != set(Dimension):
    raise RuntimeError("DIMENSION_SCORERS must cover every dimension.")

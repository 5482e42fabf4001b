from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional

from src.normalize.numeric import coerce_float


class ValidationError(ValueError):
    """Raised when an upstream profile or scholarship record is structurally malformed."""


class Dimension(str, Enum):
    ACADEMIC = "academic"
    DEMOGRAPHIC = "demographic"
    MAJOR = "major"
    EXPERIENCE = "experience"
    FINANCIAL = "financial"
    SPECIAL = "special"


class FinancialNeed(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


FINANCIAL_NEED_PRIORITY: dict[FinancialNeed, int] = {
    FinancialNeed.LOW: 1,
    FinancialNeed.MODERATE: 2,
    FinancialNeed.HIGH: 3,
    FinancialNeed.VERY_HIGH: 4,
}

NO_RESTRICTION = "Any"


def financial_need_priority(need: FinancialNeed | None) -> int:
    if need is None:
        return 0
    return FINANCIAL_NEED_PRIORITY[need]


def _coerce_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_int(value: Any) -> int | None:
    numeric = coerce_float(value)
    return int(numeric) if numeric is not None else None


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1", "y"}
    return bool(value)


def _coerce_optional_bool(value: Any) -> bool | None:
    if value is None:
        return None
    return _coerce_bool(value)


def coerce_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _coerce_text_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        text = _coerce_text(value)
        return (text,) if text else ()
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_coerce_text(item) for item in value]
        return tuple(item for item in items if item)
    return ()


def _coerce_entries(value: Any) -> list[dict[str, Any]]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [dict(value)]
    if isinstance(value, str):
        text = _coerce_text(value)
        return [{"name": text}] if text else []
    entries: list[dict[str, Any]] = []
    for item in value:
        if isinstance(item, Mapping):
            entries.append(dict(item))
        elif _coerce_text(item):
            entries.append({"name": _coerce_text(item)})
    return entries


def _coerce_need(value: Any) -> FinancialNeed | None:
    text = _coerce_text(value)
    if text is None:
        return None
    try:
        return FinancialNeed(text.upper().replace(" ", "_"))
    except ValueError:
        return None


@dataclass(slots=True)
class StudentProfile:
    """Academic, demographic, financial, experience and special-circumstance fields of one student."""

    gpa: float | None = None
    gpa_scale: float | None = 4.0
    sat_score: int | None = None
    act_score: int | None = None
    class_rank: int | None = None
    class_size: int | None = None
    graduation_year: int | None = None
    gender: str | None = None
    ethnicity: tuple[str, ...] = ()
    state: str | None = None
    city: str | None = None
    zip_code: str | None = None
    citizenship: str | None = None
    financial_need: FinancialNeed | None = None
    pell_grant_eligible: bool = False
    efc_range: str | None = None
    intended_major: str | None = None
    field_of_study: str | None = None
    career_goals: str | None = None
    extracurriculars: list[dict[str, Any]] = field(default_factory=list)
    volunteer_hours: float = 0.0
    work_experience: list[dict[str, Any]] = field(default_factory=list)
    leadership_roles: list[dict[str, Any]] = field(default_factory=list)
    awards_honors: list[dict[str, Any]] = field(default_factory=list)
    first_generation: bool = False
    military_affiliation: str | None = None
    disabilities: str | None = None
    completion_percentage: float = 0.0
    strength_score: int | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> StudentProfile:
        if payload is None:
            raise ValidationError("Student profile record is missing.")
        if not isinstance(payload, Mapping):
            raise ValidationError(f"Student profile must be a mapping, received {type(payload).__name__}.")
        values = payload
        gpa_scale = coerce_float(values.get("gpa_scale"))
        return cls(
            gpa=coerce_float(values.get("gpa")),
            gpa_scale=4.0 if gpa_scale is None else gpa_scale,
            sat_score=_coerce_int(values.get("sat_score")),
            act_score=_coerce_int(values.get("act_score")),
            class_rank=_coerce_int(values.get("class_rank")),
            class_size=_coerce_int(values.get("class_size")),
            graduation_year=_coerce_int(values.get("graduation_year")),
            gender=_coerce_text(values.get("gender")),
            ethnicity=_coerce_text_tuple(values.get("ethnicity")),
            state=_coerce_text(values.get("state")),
            city=_coerce_text(values.get("city")),
            zip_code=_coerce_text(values.get("zip_code")),
            citizenship=_coerce_text(values.get("citizenship")),
            financial_need=_coerce_need(values.get("financial_need")),
            pell_grant_eligible=_coerce_bool(values.get("pell_grant_eligible")),
            efc_range=_coerce_text(values.get("efc_range")),
            intended_major=_coerce_text(values.get("intended_major")),
            field_of_study=_coerce_text(values.get("field_of_study")),
            career_goals=_coerce_text(values.get("career_goals")),
            extracurriculars=_coerce_entries(values.get("extracurriculars")),
            volunteer_hours=coerce_float(values.get("volunteer_hours")) or 0.0,
            work_experience=_coerce_entries(values.get("work_experience")),
            leadership_roles=_coerce_entries(values.get("leadership_roles")),
            awards_honors=_coerce_entries(values.get("awards_honors")),
            first_generation=_coerce_bool(values.get("first_generation")),
            military_affiliation=_coerce_text(values.get("military_affiliation")),
            disabilities=_coerce_text(values.get("disabilities")),
            completion_percentage=coerce_float(values.get("completion_percentage")) or 0.0,
            strength_score=_coerce_int(values.get("strength_score")),
        )


@dataclass(slots=True)
class Student:
    student_id: str
    profile: StudentProfile | None
    date_of_birth: date | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> Student:
        student_id = _coerce_text(payload.get("student_id"))
        if student_id is None:
            raise ValidationError("Student record is missing 'student_id'.")
        raw_profile = payload.get("profile")
        return cls(
            student_id=student_id,
            profile=StudentProfile.from_mapping(raw_profile) if raw_profile is not None else None,
            date_of_birth=coerce_date(payload.get("date_of_birth")),
        )

    def require_profile(self) -> StudentProfile:
        if self.profile is None:
            raise ValidationError(f"Student {self.student_id} has no profile.")
        return self.profile

    def with_profile(self, profile: StudentProfile) -> Student:
        return Student(student_id=self.student_id, profile=profile, date_of_birth=self.date_of_birth)


@dataclass(frozen=True, slots=True)
class AcademicCriteria:
    min_gpa: Optional[float] = None
    max_gpa: Optional[float] = None
    min_sat: Optional[int] = None
    max_sat: Optional[int] = None
    min_act: Optional[int] = None
    max_act: Optional[int] = None
    class_rank_percentile: Optional[float] = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> AcademicCriteria:
        return cls(
            min_gpa=coerce_float(payload.get("min_gpa")),
            max_gpa=coerce_float(payload.get("max_gpa")),
            min_sat=_coerce_int(payload.get("min_sat")),
            max_sat=_coerce_int(payload.get("max_sat")),
            min_act=_coerce_int(payload.get("min_act")),
            max_act=_coerce_int(payload.get("max_act")),
            class_rank_percentile=coerce_float(payload.get("class_rank_percentile")),
        )


@dataclass(frozen=True, slots=True)
class DemographicCriteria:
    required_gender: Optional[str] = None
    required_ethnicity: tuple[str, ...] = ()
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    required_state: tuple[str, ...] = ()
    required_city: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> DemographicCriteria:
        return cls(
            required_gender=_coerce_text(payload.get("required_gender")),
            required_ethnicity=_coerce_text_tuple(payload.get("required_ethnicity")),
            age_min=_coerce_int(payload.get("age_min")),
            age_max=_coerce_int(payload.get("age_max")),
            required_state=_coerce_text_tuple(payload.get("required_state")),
            required_city=_coerce_text_tuple(payload.get("required_city")),
        )


@dataclass(frozen=True, slots=True)
class MajorCriteria:
    eligible_majors: tuple[str, ...] = ()
    excluded_majors: tuple[str, ...] = ()
    required_field_of_study: tuple[str, ...] = ()
    career_goals_keywords: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> MajorCriteria:
        return cls(
            eligible_majors=_coerce_text_tuple(payload.get("eligible_majors")),
            excluded_majors=_coerce_text_tuple(payload.get("excluded_majors")),
            required_field_of_study=_coerce_text_tuple(payload.get("required_field_of_study")),
            career_goals_keywords=_coerce_text_tuple(payload.get("career_goals_keywords")),
        )


@dataclass(frozen=True, slots=True)
class ExperienceCriteria:
    min_volunteer_hours: Optional[float] = None
    required_extracurriculars: tuple[str, ...] = ()
    leadership_required: Optional[bool] = None
    min_work_experience: Optional[float] = None
    awards_honors_required: Optional[bool] = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> ExperienceCriteria:
        return cls(
            min_volunteer_hours=coerce_float(payload.get("min_volunteer_hours")),
            required_extracurriculars=_coerce_text_tuple(payload.get("required_extracurriculars")),
            leadership_required=_coerce_optional_bool(payload.get("leadership_required")),
            min_work_experience=coerce_float(payload.get("min_work_experience")),
            awards_honors_required=_coerce_optional_bool(payload.get("awards_honors_required")),
        )


@dataclass(frozen=True, slots=True)
class FinancialCriteria:
    requires_financial_need: Optional[bool] = None
    max_efc: Optional[float] = None
    pell_grant_required: Optional[bool] = None
    financial_need_level: Optional[FinancialNeed] = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> FinancialCriteria:
        return cls(
            requires_financial_need=_coerce_optional_bool(payload.get("requires_financial_need")),
            max_efc=coerce_float(payload.get("max_efc")),
            pell_grant_required=_coerce_optional_bool(payload.get("pell_grant_required")),
            financial_need_level=_coerce_need(payload.get("financial_need_level")),
        )


@dataclass(frozen=True, slots=True)
class SpecialCriteria:
    first_generation_required: Optional[bool] = None
    military_affiliation: Optional[str] = None
    disability_required: Optional[bool] = None
    citizenship_required: Optional[str] = None
    other_requirements: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> SpecialCriteria:
        return cls(
            first_generation_required=_coerce_optional_bool(payload.get("first_generation_required")),
            military_affiliation=_coerce_text(payload.get("military_affiliation")),
            disability_required=_coerce_optional_bool(payload.get("disability_required")),
            citizenship_required=_coerce_text(payload.get("citizenship_required")),
            other_requirements=_coerce_text_tuple(payload.get("other_requirements")),
        )


_CRITERIA_TYPES: dict[Dimension, Any] = {
    Dimension.ACADEMIC: AcademicCriteria,
    Dimension.DEMOGRAPHIC: DemographicCriteria,
    Dimension.MAJOR: MajorCriteria,
    Dimension.EXPERIENCE: ExperienceCriteria,
    Dimension.FINANCIAL: FinancialCriteria,
    Dimension.SPECIAL: SpecialCriteria,
}


@dataclass(frozen=True, slots=True)
class EligibilityCriteria:
    """All six criteria dimensions; an empty dimension imposes no requirement."""

    academic: AcademicCriteria = field(default_factory=AcademicCriteria)
    demographic: DemographicCriteria = field(default_factory=DemographicCriteria)
    major: MajorCriteria = field(default_factory=MajorCriteria)
    experience: ExperienceCriteria = field(default_factory=ExperienceCriteria)
    financial: FinancialCriteria = field(default_factory=FinancialCriteria)
    special: SpecialCriteria = field(default_factory=SpecialCriteria)

    @classmethod
    def from_mapping(cls, payload: Any, *, scholarship_id: str = "<unknown>") -> EligibilityCriteria:
        if not isinstance(payload, Mapping):
            raise ValidationError(
                f"Scholarship {scholarship_id} eligibility criteria must be a mapping, "
                f"received {type(payload).__name__}."
            )
        missing = [dimension.value for dimension in Dimension if dimension.value not in payload]
        if missing:
            raise ValidationError(
                f"Scholarship {scholarship_id} eligibility criteria missing dimension(s): {', '.join(missing)}."
            )

        parsed: dict[str, Any] = {}
        for dimension, criteria_type in _CRITERIA_TYPES.items():
            section = payload.get(dimension.value)
            if section is None:
                section = {}
            if not isinstance(section, Mapping):
                raise ValidationError(
                    f"Scholarship {scholarship_id} '{dimension.value}' criteria must be a mapping."
                )
            parsed[dimension.value] = criteria_type.from_mapping(section)
        return cls(**parsed)


@dataclass(frozen=True, slots=True)
class Scholarship:
    scholarship_id: str
    name: str
    award_amount: float
    eligibility_criteria: EligibilityCriteria
    deadline: Optional[date] = None
    acceptance_rate: Optional[float] = None
    applicant_pool_size: Optional[int] = None
    number_of_awards: int = 1
    essay_prompts: tuple[str, ...] = ()
    required_documents: tuple[str, ...] = ()
    recommendation_count: int = 0

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> Scholarship:
        scholarship_id = _coerce_text(payload.get("scholarship_id"))
        if scholarship_id is None:
            raise ValidationError("Scholarship record is missing 'scholarship_id'.")
        if "eligibility_criteria" not in payload:
            raise ValidationError(f"Scholarship {scholarship_id} is missing 'eligibility_criteria'.")

        essay_prompts = payload.get("essay_prompts")
        if isinstance(essay_prompts, Mapping):
            essay_prompts = essay_prompts.get("prompts")
        number_of_awards = _coerce_int(payload.get("number_of_awards"))
        return cls(
            scholarship_id=scholarship_id,
            name=_coerce_text(payload.get("name")) or scholarship_id,
            award_amount=coerce_float(payload.get("award_amount")) or 0.0,
            eligibility_criteria=EligibilityCriteria.from_mapping(
                payload.get("eligibility_criteria"), scholarship_id=scholarship_id
            ),
            deadline=coerce_date(payload.get("deadline")),
            acceptance_rate=coerce_float(payload.get("acceptance_rate")),
            applicant_pool_size=_coerce_int(payload.get("applicant_pool_size")),
            number_of_awards=1 if number_of_awards is None else number_of_awards,
            essay_prompts=_coerce_text_tuple(essay_prompts),
            required_documents=_coerce_text_tuple(payload.get("required_documents")),
            recommendation_count=_coerce_int(payload.get("recommendation_count")) or 0,
        )

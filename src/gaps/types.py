from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Mapping

from src.normalize.schema import Dimension, ValidationError

# Gap categories are the eligibility dimensions.
GapCategory = Dimension

GapValue = float | int | str | bool | None


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AchievabilityCategory(str, Enum):
    EASY = "EASY"
    MODERATE = "MODERATE"
    LONG_TERM = "LONG_TERM"


ACHIEVABILITY_PRIORITY: dict[AchievabilityCategory, int] = {
    AchievabilityCategory.EASY: 1,
    AchievabilityCategory.MODERATE: 2,
    AchievabilityCategory.LONG_TERM: 3,
}

# Bucket name used in roadmap and summary payloads.
ACHIEVABILITY_BUCKETS: dict[AchievabilityCategory, str] = {
    AchievabilityCategory.EASY: "easy",
    AchievabilityCategory.MODERATE: "moderate",
    AchievabilityCategory.LONG_TERM: "long_term",
}

for _table in (ACHIEVABILITY_PRIORITY, ACHIEVABILITY_BUCKETS):
    if set(_table) != set(AchievabilityCategory):
        raise RuntimeError("Achievability tables must cover every achievability category.")


@dataclass(frozen=True, slots=True)
class Gap:
    """One unmet, quantified requirement and the reach scholarships it blocks."""

    category: GapCategory
    requirement: str
    current_value: GapValue
    target_value: GapValue
    gap_size: float
    impact: str
    scholarships_affected: int
    funding_blocked: float
    achievability: AchievabilityCategory
    timeline_months: int
    affected_scholarship_ids: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.affected_scholarship_ids:
            raise ValueError(f"Gap '{self.requirement}' must affect at least one scholarship.")

    @property
    def key(self) -> tuple[str, str, GapValue]:
        return (self.category.value, self.requirement, self.target_value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "requirement": self.requirement,
            "current_value": self.current_value,
            "target_value": self.target_value,
            "gap_size": self.gap_size,
            "impact": self.impact,
            "scholarships_affected": self.scholarships_affected,
            "funding_blocked": self.funding_blocked,
            "achievability": self.achievability.value,
            "timeline_months": self.timeline_months,
            "affected_scholarship_ids": list(self.affected_scholarship_ids),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Gap:
        return cls(
            category=GapCategory(payload["category"]),
            requirement=str(payload["requirement"]),
            current_value=payload.get("current_value"),
            target_value=payload.get("target_value"),
            gap_size=float(payload["gap_size"]),
            impact=str(payload.get("impact", "")),
            scholarships_affected=int(payload["scholarships_affected"]),
            funding_blocked=float(payload["funding_blocked"]),
            achievability=AchievabilityCategory(payload["achievability"]),
            timeline_months=int(payload["timeline_months"]),
            affected_scholarship_ids=tuple(str(item) for item in payload["affected_scholarship_ids"]),
        )


@dataclass(frozen=True, slots=True)
class ResourceLink:
    title: str
    url: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "url": self.url, "description": self.description}


@dataclass(frozen=True, slots=True)
class Recommendation:
    gap: Gap
    recommendation: str
    action_steps: tuple[str, ...]
    timeline: str
    target_date: date
    resources: tuple[ResourceLink, ...] = ()
    dependencies: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "gap": self.gap.to_dict(),
            "recommendation": self.recommendation,
            "action_steps": list(self.action_steps),
            "timeline": self.timeline,
            "target_date": self.target_date.isoformat(),
            "resources": [resource.to_dict() for resource in self.resources],
            "dependencies": list(self.dependencies),
        }


@dataclass(frozen=True, slots=True)
class RoadmapDiagnostic:
    code: str
    message: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "count": self.count}


@dataclass(frozen=True, slots=True)
class Roadmap:
    easy: tuple[Recommendation, ...]
    moderate: tuple[Recommendation, ...]
    long_term: tuple[Recommendation, ...]
    total_timeline_months: int
    recommended_sequence: tuple[Recommendation, ...]
    diagnostics: tuple[RoadmapDiagnostic, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "easy": [item.to_dict() for item in self.easy],
            "moderate": [item.to_dict() for item in self.moderate],
            "long_term": [item.to_dict() for item in self.long_term],
            "total_timeline_months": self.total_timeline_months,
            "recommended_sequence": [item.to_dict() for item in self.recommended_sequence],
            "diagnostics": [item.to_dict() for item in self.diagnostics],
        }


@dataclass(frozen=True, slots=True)
class StrengthDelta:
    academic: int = 0
    experience: int = 0
    leadership: int = 0
    demographics: int = 0

    @classmethod
    def between(cls, before: Mapping[str, int], after: Mapping[str, int]) -> StrengthDelta:
        return cls(**{item.name: after[item.name] - before[item.name] for item in fields(cls)})

    def to_dict(self) -> dict[str, int]:
        return {
            "academic": self.academic,
            "experience": self.experience,
            "leadership": self.leadership,
            "demographics": self.demographics,
        }


@dataclass(frozen=True, slots=True)
class ProfileProjection:
    current: int
    projected: int
    current_breakdown: dict[str, int]
    projected_breakdown: dict[str, int]
    current_matches: int
    projected_matches: int
    current_funding_potential: float
    projected_funding_potential: float

    @property
    def increase(self) -> int:
        return self.projected - self.current

    @property
    def additional_matches(self) -> int:
        return self.projected_matches - self.current_matches

    @property
    def additional_funding(self) -> float:
        return self.projected_funding_potential - self.current_funding_potential

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.current,
            "projected": self.projected,
            "increase": self.increase,
            "current_breakdown": dict(self.current_breakdown),
            "projected_breakdown": dict(self.projected_breakdown),
            "current_matches": self.current_matches,
            "projected_matches": self.projected_matches,
            "additional_matches": self.additional_matches,
            "current_funding_potential": self.current_funding_potential,
            "projected_funding_potential": self.projected_funding_potential,
            "additional_funding": self.additional_funding,
        }


@dataclass(frozen=True, slots=True)
class ImpactSummary:
    scholarships_unlockable: int
    potential_funding: float
    average_award: int
    total_gaps: int
    gaps_by_achievability: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "scholarships_unlockable": self.scholarships_unlockable,
            "potential_funding": self.potential_funding,
            "average_award": self.average_award,
            "total_gaps": self.total_gaps,
            "gaps_by_achievability": dict(self.gaps_by_achievability),
        }


@dataclass(frozen=True, slots=True)
class GapAnalysisResult:
    student_id: str
    gaps: tuple[Gap, ...]
    roadmap: Roadmap
    projection: ProfileProjection
    impact_summary: ImpactSummary
    analyzed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "gaps": [gap.to_dict() for gap in self.gaps],
            "roadmap": self.roadmap.to_dict(),
            "projection": self.projection.to_dict(),
            "impact_summary": self.impact_summary.to_dict(),
            "analyzed_at": self.analyzed_at.isoformat(),
        }


# Inclusive bounds accepted for each numeric what-if field.
HYPOTHETICAL_RANGES: dict[str, tuple[float, float]] = {
    "gpa": (0.0, 4.0),
    "sat_score": (400, 1600),
    "act_score": (1, 36),
    "volunteer_hours": (0, 5000),
    "leadership_count": (0, 10),
    "extracurricular_count": (0, 20),
}


@dataclass(frozen=True, slots=True)
class HypotheticalChanges:
    gpa: float | None = None
    sat_score: int | None = None
    act_score: int | None = None
    volunteer_hours: float | None = None
    has_leadership: bool | None = None
    leadership_count: int | None = None
    extracurricular_count: int | None = None

    def __post_init__(self) -> None:
        for field_name, (minimum, maximum) in HYPOTHETICAL_RANGES.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValidationError(f"Hypothetical '{field_name}' must be a finite number.")
            if value < minimum or value > maximum:
                raise ValidationError(
                    f"Hypothetical '{field_name}' must be between {minimum} and {maximum} (received {value})."
                )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> HypotheticalChanges:
        values = dict(payload or {})
        unknown = sorted(set(values) - {item.name for item in fields(cls)})
        if unknown:
            raise ValidationError(f"Unknown hypothetical change(s): {', '.join(unknown)}.")
        has_leadership = values.get("has_leadership")
        if has_leadership is not None and not isinstance(has_leadership, bool):
            raise ValidationError("Hypothetical 'has_leadership' must be a boolean.")
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self) if getattr(self, item.name) is not None}


@dataclass(frozen=True, slots=True)
class SimulatorResult:
    projected_strength: int
    scholarships_unlocked: int
    funding_increase: float
    dimensional_changes: StrengthDelta
    unlocked_scholarship_ids: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "projected_strength": self.projected_strength,
            "scholarships_unlocked": self.scholarships_unlocked,
            "funding_increase": self.funding_increase,
            "dimensional_changes": self.dimensional_changes.to_dict(),
            "unlocked_scholarship_ids": list(self.unlocked_scholarship_ids),
        }


@dataclass(frozen=True, slots=True)
class AnalysisSnapshot:
    """The persisted subset of a gap analysis needed for later progress comparison."""

    student_id: str
    analyzed_at: datetime
    gaps: tuple[Gap, ...]
    profile_strength_current: int
    profile_strength_projected: int
    current_matches: int
    scholarships_unlockable: int
    potential_funding: float

    @classmethod
    def from_result(cls, result: GapAnalysisResult) -> AnalysisSnapshot:
        return cls(
            student_id=result.student_id,
            analyzed_at=as_utc(result.analyzed_at),
            gaps=result.gaps,
            profile_strength_current=result.projection.current,
            profile_strength_projected=result.projection.projected,
            current_matches=result.projection.current_matches,
            scholarships_unlockable=result.impact_summary.scholarships_unlockable,
            potential_funding=result.impact_summary.potential_funding,
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> AnalysisSnapshot:
        return cls(
            student_id=str(payload["student_id"]),
            analyzed_at=as_utc(datetime.fromisoformat(str(payload["analyzed_at"]))),
            gaps=tuple(Gap.from_dict(item) for item in payload.get("gaps", [])),
            profile_strength_current=int(payload["profile_strength_current"]),
            profile_strength_projected=int(payload["profile_strength_projected"]),
            current_matches=int(payload.get("current_matches", 0)),
            scholarships_unlockable=int(payload.get("scholarships_unlockable", 0)),
            potential_funding=float(payload.get("potential_funding", 0.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "analyzed_at": self.analyzed_at.isoformat(),
            "gaps": [gap.to_dict() for gap in self.gaps],
            "profile_strength_current": self.profile_strength_current,
            "profile_strength_projected": self.profile_strength_projected,
            "current_matches": self.current_matches,
            "scholarships_unlockable": self.scholarships_unlockable,
            "potential_funding": self.potential_funding,
        }


@dataclass(frozen=True, slots=True)
class ProgressComparison:
    last_analysis_date: datetime
    days_since: int
    profile_strength_change: int
    gaps_remaining: int
    new_scholarships_unlocked: int
    closed_gaps: tuple[Gap, ...] = field(default_factory=tuple)
    emerging_gaps: tuple[Gap, ...] = field(default_factory=tuple)

    @property
    def gaps_closed(self) -> int:
        return len(self.closed_gaps)

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_analysis_date": self.last_analysis_date.isoformat(),
            "days_since": self.days_since,
            "profile_strength_change": self.profile_strength_change,
            "gaps_closed": self.gaps_closed,
            "gaps_remaining": self.gaps_remaining,
            "new_scholarships_unlocked": self.new_scholarships_unlocked,
            "closed_gaps": [gap.to_dict() for gap in self.closed_gaps],
            "emerging_gaps": [gap.to_dict() for gap in self.emerging_gaps],
        }

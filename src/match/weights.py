from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any, Mapping

WEIGHT_TOLERANCE = 1e-6


def _validate_weights(label: str, weights: Mapping[str, float]) -> None:
    for field_name, raw_value in weights.items():
        value = float(raw_value)
        if not math.isfinite(value):
            raise ValueError(f"{label} weight '{field_name}' must be finite.")
        if value < 0.0 or value > 1.0:
            raise ValueError(f"{label} weight '{field_name}' must be between 0.0 and 1.0.")

    total = sum(float(value) for value in weights.values())
    if not math.isclose(total, 1.0, abs_tol=WEIGHT_TOLERANCE):
        raise ValueError(
            f"{label} weights must sum to 1.0 "
            f"(received {total:.6f}, tolerance={WEIGHT_TOLERANCE})."
        )


@dataclass(frozen=True, slots=True)
class MatchWeights:
    """Relative weight of each eligibility dimension in the overall match score."""

    academic: float
    major: float
    demographic: float
    experience: float
    financial: float
    special: float

    def __post_init__(self) -> None:
        _validate_weights("Match", self.to_dict())

    @classmethod
    def baseline(cls) -> MatchWeights:
        return cls(academic=0.30, major=0.20, demographic=0.15, experience=0.15, financial=0.10, special=0.10)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> MatchWeights:
        values = payload or {}
        baseline = cls.baseline()
        return cls(
            **{
                field.name: float(values.get(field.name, getattr(baseline, field.name)))
                for field in fields(cls)
            }
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "academic": self.academic,
            "major": self.major,
            "demographic": self.demographic,
            "experience": self.experience,
            "financial": self.financial,
            "special": self.special,
        }


@dataclass(frozen=True, slots=True)
class StrengthWeights:
    academic: float
    experience: float
    leadership: float
    demographics: float

    def __post_init__(self) -> None:
        _validate_weights("Strength", self.to_dict())

    @classmethod
    def baseline(cls) -> StrengthWeights:
        return cls(academic=0.35, experience=0.25, leadership=0.25, demographics=0.15)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> StrengthWeights:
        values = payload or {}
        baseline = cls.baseline()
        return cls(
            academic=float(values.get("academic", baseline.academic)),
            experience=float(values.get("experience", baseline.experience)),
            leadership=float(values.get("leadership", baseline.leadership)),
            demographics=float(values.get("demographics", baseline.demographics)),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "academic": self.academic,
            "experience": self.experience,
            "leadership": self.leadership,
            "demographics": self.demographics,
        }

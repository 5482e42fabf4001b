from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class GapAnalysisConfig:
    reach_award_threshold: float
    max_reach_scholarships: int
    long_term_warning_threshold: int
    total_gap_warning_threshold: int

    def __post_init__(self) -> None:
        if not math.isfinite(float(self.reach_award_threshold)) or self.reach_award_threshold < 0:
            raise ValueError("Gap analysis 'reach_award_threshold' must be a finite, non-negative amount.")
        for field_name in ("max_reach_scholarships", "long_term_warning_threshold", "total_gap_warning_threshold"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Gap analysis '{field_name}' must be a non-negative integer.")

    @classmethod
    def baseline(cls) -> GapAnalysisConfig:
        return cls(
            reach_award_threshold=5000.0,
            max_reach_scholarships=200,
            long_term_warning_threshold=3,
            total_gap_warning_threshold=10,
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> GapAnalysisConfig:
        values = payload or {}
        baseline = cls.baseline()
        return cls(
            reach_award_threshold=float(values.get("reach_award_threshold", baseline.reach_award_threshold)),
            max_reach_scholarships=int(values.get("max_reach_scholarships", baseline.max_reach_scholarships)),
            long_term_warning_threshold=int(
                values.get("long_term_warning_threshold", baseline.long_term_warning_threshold)
            ),
            total_gap_warning_threshold=int(
                values.get("total_gap_warning_threshold", baseline.total_gap_warning_threshold)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "reach_award_threshold": self.reach_award_threshold,
            "max_reach_scholarships": self.max_reach_scholarships,
            "long_term_warning_threshold": self.long_term_warning_threshold,
            "total_gap_warning_threshold": self.total_gap_warning_threshold,
        }

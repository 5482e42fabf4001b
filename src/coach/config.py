from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from src.gaps.config import GapAnalysisConfig
from src.match.weights import MatchWeights, StrengthWeights

CONFIG_SECTIONS = ("match_weights", "strength_weights", "gap_analysis")


@dataclass(frozen=True, slots=True)
class CoachConfig:
    match_weights: MatchWeights
    strength_weights: StrengthWeights
    gap_analysis: GapAnalysisConfig

    @classmethod
    def baseline(cls) -> CoachConfig:
        return cls(
            match_weights=MatchWeights.baseline(),
            strength_weights=StrengthWeights.baseline(),
            gap_analysis=GapAnalysisConfig.baseline(),
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> CoachConfig:
        values = payload or {}
        unknown = sorted(set(values) - set(CONFIG_SECTIONS))
        if unknown:
            raise ValueError(f"Unknown config section(s): {', '.join(unknown)}.")
        return cls(
            match_weights=MatchWeights.from_mapping(values.get("match_weights")),
            strength_weights=StrengthWeights.from_mapping(values.get("strength_weights")),
            gap_analysis=GapAnalysisConfig.from_mapping(values.get("gap_analysis")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_weights": self.match_weights.to_dict(),
            "strength_weights": self.strength_weights.to_dict(),
            "gap_analysis": self.gap_analysis.to_dict(),
        }


def load_coach_config(path: Path | None) -> CoachConfig:
    if path is None:
        return CoachConfig.baseline()
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Config file '{path}' must contain a JSON object.")
    return CoachConfig.from_mapping(payload)

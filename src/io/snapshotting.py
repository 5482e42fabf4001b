from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

import numpy as np
import pandas as pd

from src.gaps.types import AnalysisSnapshot, GapAnalysisResult
from src.normalize.schema import Scholarship, Student, ValidationError

logger = logging.getLogger(__name__)

ANALYSIS_PREFIX = "gap_analysis_"
ANALYSIS_PATTERN = re.compile(
    r"^gap_analysis_(?P<student>.+)_(?P<stamp>\d{8}T\d{6})(?:_(?P<sequence>\d+))?\.json$"
)
ANALYSIS_STAMP_FORMAT = "%Y%m%dT%H%M%S"
DEFAULT_HISTORY_LIMIT = 10
CATALOG_SUFFIXES = (".parquet", ".json")


def _plain(value: Any) -> Any:
    """Convert pandas/numpy cell values into plain Python containers and scalars."""
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, np.ndarray)):
        return [_plain(item) for item in value]
    if isinstance(value, np.generic):
        value = value.item()
    if value is None:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def catalog_from_frame(df: pd.DataFrame) -> list[Scholarship]:
    catalog: list[Scholarship] = []
    for record in df.to_dict(orient="records"):
        catalog.append(Scholarship.from_mapping({key: _plain(value) for key, value in record.items()}))
    return catalog


def load_catalog(path: Path) -> list[Scholarship]:
    """Load a scholarship catalog snapshot written as parquet or as a JSON list of records."""
    if path.suffix not in CATALOG_SUFFIXES:
        raise ValueError(f"Unsupported catalog format '{path.suffix}'. Expected one of {CATALOG_SUFFIXES}.")
    if not path.exists():
        raise FileNotFoundError(f"Scholarship catalog not found at '{path}'.")

    if path.suffix == ".parquet":
        df = pd.read_parquet(path)
    else:
        df = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    catalog = catalog_from_frame(df)
    logger.info("Loaded %s scholarships from %s", len(catalog), path)
    return catalog


def load_student(path: Path) -> Student:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValidationError(f"Student record in '{path}' must be a JSON object.")
    return Student.from_mapping(payload)


def write_json_atomic(payload: dict[str, Any], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.parent / f"{output_path.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        temp_path.replace(output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()


def _analysis_path(history_dir: Path, student_id: str, analyzed_at: datetime) -> Path:
    """Next free snapshot path; analyses stamped within the same second get a ``_2``, ``_3``... suffix."""
    stem = f"{ANALYSIS_PREFIX}{student_id}_{analyzed_at.strftime(ANALYSIS_STAMP_FORMAT)}"
    output_path = history_dir / f"{stem}.json"
    sequence = 1
    while output_path.exists():
        sequence += 1
        output_path = history_dir / f"{stem}_{sequence}.json"
    return output_path


def write_analysis_snapshot(result: GapAnalysisResult, history_dir: Path) -> Path:
    snapshot = AnalysisSnapshot.from_result(result)
    output_path = _analysis_path(history_dir, snapshot.student_id, snapshot.analyzed_at)
    write_json_atomic(snapshot.to_dict(), output_path)
    logger.info("Stored gap analysis snapshot at %s", output_path)
    return output_path


def list_analysis_snapshots(
    history_dir: Path,
    student_id: str,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[Path]:
    """Snapshot paths for one student, newest first, at most ``limit`` of them."""
    snapshots: list[tuple[datetime, int, Path]] = []
    for candidate in history_dir.glob(f"{ANALYSIS_PREFIX}*.json"):
        match = ANALYSIS_PATTERN.match(candidate.name)
        if not match or match.group("student") != student_id:
            continue
        stamp = datetime.strptime(match.group("stamp"), ANALYSIS_STAMP_FORMAT)
        snapshots.append((stamp, int(match.group("sequence") or 1), candidate))

    snapshots.sort(key=lambda item: (item[0], item[1]), reverse=True)
    return [item[2] for item in snapshots[: max(0, limit)]]


def load_analysis_snapshot(path: Path) -> AnalysisSnapshot:
    return AnalysisSnapshot.from_dict(json.loads(path.read_text(encoding="utf-8")))


def load_latest_analysis_snapshot(history_dir: Path, student_id: str) -> AnalysisSnapshot | None:
    latest = list_analysis_snapshots(history_dir, student_id, limit=1)
    if not latest:
        return None
    return load_analysis_snapshot(latest[0])

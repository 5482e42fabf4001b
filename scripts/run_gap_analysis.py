from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import gap_analysis_markdown
from src.coach.config import load_coach_config
from src.coach.operations import analyze_gaps, compare_to_history
from src.io.snapshotting import (
    load_catalog,
    load_latest_analysis_snapshot,
    load_student,
    write_analysis_snapshot,
    write_json_atomic,
)

logger = logging.getLogger("run_gap_analysis")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run gap analysis for one student against a scholarship catalog.")
    parser.add_argument("--student", type=Path, required=True, help="Student JSON record.")
    parser.add_argument("--catalog", type=Path, required=True, help="Catalog snapshot (.parquet or .json).")
    parser.add_argument("--reports-dir", type=Path, default=ROOT_DIR / "reports")
    parser.add_argument("--history-dir", type=Path, default=ROOT_DIR / "data" / "history")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional JSON file with match_weights, strength_weights and gap_analysis sections.",
    )
    parser.add_argument(
        "--today",
        type=str,
        default=None,
        help="Evaluation date in YYYY-MM-DD format. Defaults to the current UTC date.",
    )
    parser.add_argument(
        "--save-history",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Store a snapshot for later progress comparison.",
    )
    return parser.parse_args(argv)


def _resolve_path(path: Path) -> Path:
    return path if path.is_absolute() else ROOT_DIR / path


def _coerce_today(value: str | None) -> date:
    if value is None:
        return datetime.now(tz=UTC).date()
    return date.fromisoformat(value)


def run_gap_analysis(
    *,
    student_path: Path,
    catalog_path: Path,
    reports_dir: Path,
    history_dir: Path,
    config_path: Path | None = None,
    today: date | None = None,
    analyzed_at: datetime | None = None,
    save_history: bool = True,
) -> dict[str, Path]:
    config = load_coach_config(config_path)
    student = load_student(student_path)
    catalog = load_catalog(catalog_path)
    effective_today = today or datetime.now(tz=UTC).date()

    previous = load_latest_analysis_snapshot(history_dir, student.student_id)
    result = analyze_gaps(
        student,
        catalog,
        config=config.gap_analysis,
        strength_weights=config.strength_weights,
        today=effective_today,
        analyzed_at=analyzed_at or datetime.now(tz=UTC),
    )
    comparison = compare_to_history(previous, result) if previous is not None else None
    if comparison is not None:
        logger.info(
            "Since %s (%s days): strength %+d, %s gaps closed, %s remaining, %s new",
            comparison.last_analysis_date.date().isoformat(),
            comparison.days_since,
            comparison.profile_strength_change,
            comparison.gaps_closed,
            comparison.gaps_remaining,
            len(comparison.emerging_gaps),
        )

    stamp = result.analyzed_at.strftime("%Y%m%dT%H%M%S")
    json_path = reports_dir / f"gap_analysis_{student.student_id}_{stamp}.json"
    markdown_path = reports_dir / f"gap_analysis_{student.student_id}_{stamp}.md"
    payload = result.to_dict()
    payload["config"] = config.to_dict()
    if comparison is not None:
        payload["progress"] = comparison.to_dict()
    write_json_atomic(payload, json_path)
    markdown_path.parent.mkdir(parents=True, exist_ok=True)
    markdown_path.write_text(gap_analysis_markdown(result, comparison=comparison), encoding="utf-8")

    paths = {"json": json_path, "markdown": markdown_path}
    if save_history:
        paths["history"] = write_analysis_snapshot(result, history_dir)
    return paths


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    paths = run_gap_analysis(
        student_path=_resolve_path(args.student),
        catalog_path=_resolve_path(args.catalog),
        reports_dir=_resolve_path(args.reports_dir),
        history_dir=_resolve_path(args.history_dir),
        config_path=_resolve_path(args.config) if args.config is not None else None,
        today=_coerce_today(args.today),
        save_history=args.save_history,
    )
    for label, path in paths.items():
        print(f"Wrote {label}: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

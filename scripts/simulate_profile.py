from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import simulator_markdown
from src.coach.config import load_coach_config
from src.coach.operations import simulate
from src.io.snapshotting import load_catalog, load_student

logger = logging.getLogger("simulate_profile")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Project a student's profile under hypothetical changes.")
    parser.add_argument("--student", type=Path, required=True, help="Student JSON record.")
    parser.add_argument("--catalog", type=Path, required=True, help="Catalog snapshot (.parquet or .json).")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--today", type=str, default=None, help="Evaluation date in YYYY-MM-DD format.")
    parser.add_argument("--gpa", type=float, default=None)
    parser.add_argument("--sat", type=int, default=None)
    parser.add_argument("--act", type=int, default=None)
    parser.add_argument("--volunteer-hours", type=float, default=None)
    parser.add_argument("--leadership-count", type=int, default=None)
    parser.add_argument("--extracurricular-count", type=int, default=None)
    return parser.parse_args(argv)


def changes_from_args(args: argparse.Namespace) -> dict[str, Any]:
    candidates = {
        "gpa": args.gpa,
        "sat_score": args.sat,
        "act_score": args.act,
        "volunteer_hours": args.volunteer_hours,
        "leadership_count": args.leadership_count,
        "extracurricular_count": args.extracurricular_count,
    }
    return {key: value for key, value in candidates.items() if value is not None}


def _resolve_path(path: Path) -> Path:
    return path if path.is_absolute() else ROOT_DIR / path


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    changes = changes_from_args(args)
    if not changes:
        logger.error("No hypothetical changes supplied; pass at least one of --gpa/--sat/--act/...")
        return 2

    config = load_coach_config(_resolve_path(args.config) if args.config is not None else None)
    student = load_student(_resolve_path(args.student))
    catalog = load_catalog(_resolve_path(args.catalog))
    today = date.fromisoformat(args.today) if args.today else datetime.now(tz=UTC).date()

    result = simulate(student, changes, catalog, strength_weights=config.strength_weights, today=today)
    print(simulator_markdown(student.student_id, changes, result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

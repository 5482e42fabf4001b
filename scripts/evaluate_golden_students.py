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

from app.helpers import format_amount, match_scores_frame
from src.coach.config import CoachConfig, load_coach_config
from src.coach.operations import active_scholarships, analyze_gaps
from src.eval.golden_students import EVAL_TODAY, GoldenStudent, get_golden_students
from src.eval.synthetic import generate_synthetic_catalog
from src.io.snapshotting import load_catalog, write_json_atomic
from src.match.eligibility import filter_scholarships
from src.match.match_score import score_matches
from src.normalize.schema import Scholarship

logger = logging.getLogger("evaluate_golden_students")

MAX_K = 5
# Fixed so repeated runs over the same catalog produce identical payloads.
EVAL_ANALYZED_AT = datetime(2026, 2, 22, 12, 0, tzinfo=UTC)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Regression run of the gap pipeline over golden student profiles.")
    parser.add_argument("--k", type=int, default=MAX_K, help=f"Top-K matches listed per profile. Defaults to {MAX_K}.")
    parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Catalog snapshot path. If omitted, a seeded synthetic catalog is generated.",
    )
    parser.add_argument("--n-scholarships", type=int, default=60)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--reports-dir", type=Path, default=ROOT_DIR / "reports")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional JSON file with match_weights, strength_weights and gap_analysis overrides.",
    )
    return parser.parse_args(argv)


def _resolve_path(path: Path) -> Path:
    return path if path.is_absolute() else ROOT_DIR / path


def _evaluate_student(
    golden: GoldenStudent,
    catalog: list[Scholarship],
    *,
    config: CoachConfig,
    k: int,
    today: date,
) -> dict[str, Any]:
    active = active_scholarships(catalog, today)
    eligible = filter_scholarships(golden.student, active, today=today)
    matches = score_matches(
        golden.student,
        eligible,
        weights=config.match_weights,
        strength_weights=config.strength_weights,
        today=today,
    )
    result = analyze_gaps(
        golden.student,
        catalog,
        config=config.gap_analysis,
        strength_weights=config.strength_weights,
        today=today,
        analyzed_at=EVAL_ANALYZED_AT,
    )
    return {
        "student_id": golden.student_id,
        "description": golden.description,
        "active_count": len(active),
        "eligible_count": len(eligible),
        "top_matches": [match.to_dict() for match in matches[:k]],
        "analysis": result.to_dict(),
    }


def _is_stable(first: list[dict[str, Any]], second: list[dict[str, Any]]) -> bool:
    return first == second


def _markdown_report(
    *,
    generated_at: str,
    catalog_label: str,
    catalog_count: int,
    config_path: Path | None,
    results: list[dict[str, Any]],
    stable: bool,
    k: int = MAX_K,
) -> str:
    lines = [
        "# Golden Student Gap Evaluation",
        "",
        f"- Generated at (UTC): {generated_at}",
        f"- Catalog: `{catalog_label}`",
        f"- Catalog records: {catalog_count}",
        f"- Golden profiles: {len(results)}",
        f"- Config: {'baseline defaults' if config_path is None else f'`{config_path}`'}",
        f"- Deterministic across runs: {stable}",
        "",
        "## Summary",
        "",
        "| student_id | eligible | gaps | unlockable | potential funding | strength | projected |",
        "|---|---:|---:|---:|---:|---:|---:|",
    ]
    for result in results:
        analysis = result["analysis"]
        summary = analysis["impact_summary"]
        projection = analysis["projection"]
        lines.append(
            f"| {result['student_id']} | {result['eligible_count']} | {summary['total_gaps']} | "
            f"{summary['scholarships_unlockable']} | {format_amount(summary['potential_funding'])} | "
            f"{projection['current']} | {projection['projected']} |"
        )
    lines.append("")

    for result in results:
        analysis = result["analysis"]
        lines.append(f"### {result['student_id']}")
        lines.append("")
        lines.append(f"- Description: {result['description']}")
        gaps = analysis["gaps"]
        if gaps:
            lines.append("- Top gaps:")
            for gap in gaps[:3]:
                lines.append(f"  - {gap['impact']} ({gap['achievability']})")
        else:
            lines.append("- No actionable gaps.")
        diagnostics = analysis["roadmap"]["diagnostics"]
        for diagnostic in diagnostics:
            lines.append(f"- Warning: {diagnostic['message']}")
        top = result["top_matches"][:k]
        if top:
            lines.append("")
            lines.append("| scholarship_id | match | success probability | strategic value |")
            lines.append("|---|---:|---:|---:|")
            for match in top:
                lines.append(
                    f"| {match['scholarship_id']} | {match['overall_match_score']} | "
                    f"{match['success_probability']}% | {match['strategic_value']:.2f} |"
                )
        lines.append("")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config_path = _resolve_path(args.config) if args.config is not None else None
    config = load_coach_config(config_path)

    if args.catalog is None:
        catalog = generate_synthetic_catalog(args.n_scholarships, seed=args.seed, today=EVAL_TODAY)
        catalog_label = f"synthetic(n={args.n_scholarships}, seed={args.seed})"
    else:
        catalog_path = _resolve_path(args.catalog)
        catalog = load_catalog(catalog_path)
        catalog_label = str(catalog_path)

    students = get_golden_students()
    run_one = [_evaluate_student(item, catalog, config=config, k=args.k, today=EVAL_TODAY) for item in students]
    run_two = [_evaluate_student(item, catalog, config=config, k=args.k, today=EVAL_TODAY) for item in students]
    stable = _is_stable(run_one, run_two)
    if not stable:
        logger.warning("Golden evaluation produced different payloads across identical runs.")

    generated_at = datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
    reports_dir = _resolve_path(args.reports_dir)
    write_json_atomic(
        {"generated_at": generated_at, "config": config.to_dict(), "stable": stable, "results": run_one},
        reports_dir / "golden_gap_eval.json",
    )
    markdown_path = reports_dir / "golden_gap_eval.md"
    markdown_path.parent.mkdir(parents=True, exist_ok=True)
    markdown_path.write_text(
        _markdown_report(
            generated_at=generated_at,
            catalog_label=catalog_label,
            catalog_count=len(catalog),
            config_path=config_path,
            results=run_one,
            stable=stable,
            k=args.k,
        ),
        encoding="utf-8",
    )
    print(f"Wrote report: {markdown_path}")
    return 0 if stable else 1


if __name__ == "__main__":
    raise SystemExit(main())

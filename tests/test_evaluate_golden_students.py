from __future__ import annotations

import json
from pathlib import Path

from scripts.evaluate_golden_students import _evaluate_student, _is_stable, _markdown_report, main
from src.coach.config import CoachConfig
from src.eval.golden_students import EVAL_TODAY, get_golden_students
from src.eval.synthetic import generate_synthetic_catalog


def _results(k: int = 3) -> list[dict]:
    catalog = generate_synthetic_catalog(40, seed=3)
    config = CoachConfig.baseline()
    return [
        _evaluate_student(golden, catalog, config=config, k=k, today=EVAL_TODAY) for golden in get_golden_students()
    ]


def test_evaluate_student_payload_is_repeatable() -> None:
    first = _results()
    second = _results()

    assert _is_stable(first, second)
    assert [item["student_id"] for item in first] == [golden.student_id for golden in get_golden_students()]
    for item in first:
        assert set(item) == {"student_id", "description", "active_count", "eligible_count", "top_matches", "analysis"}
        assert len(item["top_matches"]) <= 3
        assert item["eligible_count"] <= item["active_count"] <= 40
        values = [match["strategic_value"] for match in item["top_matches"]]
        assert values == sorted(values, reverse=True)


def test_markdown_report_includes_summary_and_profiles() -> None:
    results = _results(k=2)

    report = _markdown_report(
        generated_at="2026-02-22T12:00:00Z",
        catalog_label="synthetic(n=40, seed=3)",
        catalog_count=40,
        config_path=None,
        results=results,
        stable=True,
        k=2,
    )

    assert report.startswith("# Golden Student Gap Evaluation")
    assert "- Catalog: `synthetic(n=40, seed=3)`" in report
    assert "- Config: baseline defaults" in report
    assert "- Deterministic across runs: True" in report
    for item in results:
        assert f"### {item['student_id']}" in report
        assert f"| {item['student_id']} | {item['eligible_count']} |" in report


def test_main_writes_reports(tmp_path: Path) -> None:
    exit_code = main(["--reports-dir", str(tmp_path), "--n-scholarships", "20", "--seed", "5", "--k", "2"])

    payload = json.loads((tmp_path / "golden_gap_eval.json").read_text(encoding="utf-8"))

    assert exit_code == 0
    assert payload["stable"] is True
    assert len(payload["results"]) == 6
    assert payload["config"] == CoachConfig.baseline().to_dict()
    assert (tmp_path / "golden_gap_eval.md").read_text(encoding="utf-8").startswith("# Golden Student Gap Evaluation")

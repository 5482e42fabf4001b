from __future__ import annotations

import json
from datetime import UTC, date, datetime
from pathlib import Path

import pytest

from scripts.run_gap_analysis import parse_args, run_gap_analysis
from scripts.simulate_profile import changes_from_args
from scripts.simulate_profile import main as simulate_main
from scripts.simulate_profile import parse_args as parse_simulate_args

TODAY = date(2026, 2, 22)

CATALOG = [
    {
        "scholarship_id": "gpa",
        "award_amount": 10000,
        "deadline": "2026-05-01",
        "eligibility_criteria": {
            "academic": {"min_gpa": 3.5},
            "demographic": None,
            "major": None,
            "experience": None,
            "financial": None,
            "special": None,
        },
    },
    {
        "scholarship_id": "lead",
        "award_amount": 8000,
        "deadline": None,
        "eligibility_criteria": {
            "academic": None,
            "demographic": None,
            "major": None,
            "experience": {"leadership_required": True},
            "financial": None,
            "special": None,
        },
    },
    {
        "scholarship_id": "closed",
        "award_amount": 40000,
        "deadline": "2026-01-15",
        "eligibility_criteria": {
            "academic": {"min_sat": 1500},
            "demographic": None,
            "major": None,
            "experience": None,
            "financial": None,
            "special": None,
        },
    },
]


def _write_inputs(tmp_path: Path, gpa: float) -> tuple[Path, Path]:
    student_path = tmp_path / "student.json"
    student_path.write_text(
        json.dumps({"student_id": "s-1", "profile": {"gpa": gpa, "completion_percentage": 100}}),
        encoding="utf-8",
    )
    catalog_path = tmp_path / "catalog.json"
    catalog_path.write_text(json.dumps(CATALOG), encoding="utf-8")
    return student_path, catalog_path


def test_run_gap_analysis_writes_reports_and_tracks_progress(tmp_path: Path) -> None:
    student_path, catalog_path = _write_inputs(tmp_path, 3.2)
    reports_dir = tmp_path / "reports"
    history_dir = tmp_path / "history"

    first = run_gap_analysis(
        student_path=student_path,
        catalog_path=catalog_path,
        reports_dir=reports_dir,
        history_dir=history_dir,
        today=TODAY,
        analyzed_at=datetime(2026, 2, 1, tzinfo=UTC),
    )
    first_payload = json.loads(first["json"].read_text(encoding="utf-8"))

    assert first["json"].name == "gap_analysis_s-1_20260201T000000.json"
    assert [gap["requirement"] for gap in first_payload["gaps"]] == ["GPA 3.5+", "Leadership position"]
    assert "progress" not in first_payload
    assert first_payload["config"]["gap_analysis"]["reach_award_threshold"] == 5000.0
    assert first["markdown"].read_text(encoding="utf-8").startswith("# Gap Analysis: s-1")
    assert first["history"].exists()

    _write_inputs(tmp_path, 3.6)
    second = run_gap_analysis(
        student_path=student_path,
        catalog_path=catalog_path,
        reports_dir=reports_dir,
        history_dir=history_dir,
        today=TODAY,
        analyzed_at=datetime(2026, 2, 11, tzinfo=UTC),
    )
    progress = json.loads(second["json"].read_text(encoding="utf-8"))["progress"]

    assert progress["gaps_closed"] == 1
    assert progress["gaps_remaining"] == 1
    assert progress["days_since"] == 10
    assert progress["new_scholarships_unlocked"] == 1
    assert "## Progress Since Last Analysis" in second["markdown"].read_text(encoding="utf-8")
    assert len(list(history_dir.glob("gap_analysis_s-1_*.json"))) == 2


def test_run_gap_analysis_can_skip_history(tmp_path: Path) -> None:
    student_path, catalog_path = _write_inputs(tmp_path, 3.2)

    paths = run_gap_analysis(
        student_path=student_path,
        catalog_path=catalog_path,
        reports_dir=tmp_path / "reports",
        history_dir=tmp_path / "history",
        today=TODAY,
        save_history=False,
    )

    assert "history" not in paths
    assert not (tmp_path / "history").exists()


def test_parse_args_history_flag() -> None:
    args = parse_args(["--student", "s.json", "--catalog", "c.json", "--no-save-history", "--today", "2026-02-22"])

    assert args.save_history is False
    assert args.today == "2026-02-22"


def test_simulate_profile_changes_and_exit_codes(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    student_path, catalog_path = _write_inputs(tmp_path, 3.2)
    base = ["--student", str(student_path), "--catalog", str(catalog_path), "--today", "2026-02-22"]

    assert changes_from_args(parse_simulate_args(base + ["--gpa", "3.5", "--leadership-count", "1"])) == {
        "gpa": 3.5,
        "leadership_count": 1,
    }
    assert simulate_main(base) == 2
    assert simulate_main(base + ["--gpa", "3.5"]) == 0

    output = capsys.readouterr().out
    assert "# What-if Simulation: s-1" in output
    assert "- Newly matched: gpa" in output

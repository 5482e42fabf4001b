"""I/O utilities for catalogs, student records and gap-analysis history."""

from src.io.snapshotting import (
    list_analysis_snapshots,
    load_catalog,
    load_latest_analysis_snapshot,
    load_student,
    write_analysis_snapshot,
    write_json_atomic,
)

__all__ = [
    "list_analysis_snapshots",
    "load_catalog",
    "load_latest_analysis_snapshot",
    "load_student",
    "write_analysis_snapshot",
    "write_json_atomic",
]

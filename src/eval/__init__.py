"""Offline evaluation fixtures for golden student profiles."""

from src.eval.golden_students import EVAL_TODAY, GoldenStudent, get_golden_students
from src.eval.synthetic import generate_synthetic_catalog, generate_synthetic_catalog_records

__all__ = [
    "EVAL_TODAY",
    "GoldenStudent",
    "generate_synthetic_catalog",
    "generate_synthetic_catalog_records",
    "get_golden_students",
]

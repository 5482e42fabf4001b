from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Sequence

import numpy as np
import pandas as pd

from src.eval.golden_students import EVAL_TODAY
from src.normalize.schema import Scholarship

AWARD_AMOUNTS = (1000, 2500, 5000, 7500, 10000, 15000, 20000)
MIN_GPAS = (None, None, 3.0, 3.5, 3.8)
MIN_SATS = (None, None, None, 1200, 1300, 1400)
MIN_ACTS = (None, None, None, 26, 30)
MIN_VOLUNTEER_HOURS = (None, None, 50, 100, 200)
STATES = ("CA", "TX", "NY", "IL", "AZ", "NC", "FL", "WA")
MAJOR_GROUPS = (
    (),
    (),
    ("Computer Science", "Mathematics", "Mechanical Engineering"),
    ("Nursing", "Biology"),
    ("Business Administration", "Economics"),
    ("Psychology", "Education"),
)
DOCUMENT_POOL = ("Transcript", "Resume", "Financial Aid Form", "Portfolio", "Proof of Enrollment", "Photo ID")


def _pick(rng: np.random.RandomState, options: Sequence[Any]) -> Any:
    return options[int(rng.randint(0, len(options)))]


def generate_synthetic_catalog_records(
    n_scholarships: int = 60,
    seed: int = 0,
    today: date = EVAL_TODAY,
) -> list[dict[str, Any]]:
    """Deterministic scholarship records spanning open, reach and closed opportunities."""
    if n_scholarships < 1:
        raise ValueError("n_scholarships must be at least 1.")

    rng = np.random.RandomState(seed)
    records: list[dict[str, Any]] = []
    for index in range(n_scholarships):
        required_state = [_pick(rng, STATES)] if rng.rand() < 0.2 else []
        essays = int(rng.randint(0, 4))
        documents = list(DOCUMENT_POOL[: int(rng.randint(1, len(DOCUMENT_POOL) + 1))])
        records.append(
            {
                "scholarship_id": f"synthetic_{index:03d}",
                "name": f"Synthetic Scholarship {index + 1}",
                "award_amount": float(_pick(rng, AWARD_AMOUNTS)),
                "deadline": (today + timedelta(days=int(rng.randint(-30, 241)))).isoformat(),
                "acceptance_rate": round(float(rng.uniform(0.05, 0.6)), 2) if rng.rand() < 0.5 else None,
                "applicant_pool_size": int(rng.randint(50, 5001)),
                "number_of_awards": int(rng.randint(1, 11)),
                "essay_prompts": [f"Essay prompt {number + 1}" for number in range(essays)],
                "required_documents": documents,
                "recommendation_count": int(rng.randint(0, 3)),
                "eligibility_criteria": {
                    "academic": {
                        "min_gpa": _pick(rng, MIN_GPAS),
                        "min_sat": _pick(rng, MIN_SATS),
                        "min_act": _pick(rng, MIN_ACTS),
                    },
                    "demographic": {"required_state": required_state},
                    "major": {"eligible_majors": list(_pick(rng, MAJOR_GROUPS))},
                    "experience": {
                        "min_volunteer_hours": _pick(rng, MIN_VOLUNTEER_HOURS),
                        "leadership_required": bool(rng.rand() < 0.25),
                    },
                    "financial": {"requires_financial_need": bool(rng.rand() < 0.2)},
                    "special": {"first_generation_required": bool(rng.rand() < 0.1)},
                },
            }
        )
    return records


def generate_synthetic_catalog(
    n_scholarships: int = 60,
    seed: int = 0,
    today: date = EVAL_TODAY,
) -> list[Scholarship]:
    return [
        Scholarship.from_mapping(record)
        for record in generate_synthetic_catalog_records(n_scholarships, seed=seed, today=today)
    ]


def synthetic_catalog_frame(
    n_scholarships: int = 60,
    seed: int = 0,
    today: date = EVAL_TODAY,
) -> pd.DataFrame:
    return pd.DataFrame(generate_synthetic_catalog_records(n_scholarships, seed=seed, today=today))

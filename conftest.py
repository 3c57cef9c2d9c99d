"""
Pytest Configuration (conftest.py)
Puts the project root on the import path and provides shared dataset fixtures.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to Python path so imports like 'audit_module.src...' work
project_root = Path(__file__).parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from audit_module.src.dataset import Dataset  # noqa: E402


def make_loan_rows(n_male=70, n_female=30, male_approved=63, female_approved=18):
    """Gender / approved rows with exact positive rates (63/70 = 0.9, 18/30 = 0.6)."""
    rows = []
    for i in range(n_male):
        rows.append({"Gender": "Male", "Income": 50000 + 100 * i,
                     "Approved": 1 if i < male_approved else 0})
    for i in range(n_female):
        rows.append({"Gender": "Female", "Income": 48000 + 100 * i,
                     "Approved": 1 if i < female_approved else 0})
    return rows


@pytest.fixture
def loan_rows():
    return make_loan_rows()


@pytest.fixture
def loan_dataset(loan_rows):
    """100 records: 70 Male (approval 0.9), 30 Female (approval 0.6)."""
    return Dataset.from_records(loan_rows)


@pytest.fixture
def balanced_dataset():
    """Two equal groups with identical approval rates of 0.7."""
    rows = []
    for group in ("A", "B"):
        for i in range(50):
            rows.append({"gender": group, "approved": 1 if i < 35 else 0})
    return Dataset.from_records(rows)


@pytest.fixture
def intersectional_dataset():
    """Gender x race with scored outcomes."""
    np.random.seed(42)
    n = 200
    genders = np.random.choice(["Male", "Female"], n)
    races = np.random.choice(["White", "Black", "Asian"], n)
    scores = np.round(np.random.uniform(0, 1, n), 3)
    rows = [
        {"gender": g, "race": r, "prediction_score": s, "tenure": int(i % 17)}
        for i, (g, r, s) in enumerate(zip(genders, races, scores))
    ]
    return Dataset.from_records(rows)

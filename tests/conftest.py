import os
import sys

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

# Ensure src is importable
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

CLASSES = np.array(list("ABCDE"))
DENSE_FEATURES = ["roll_belt", "pitch_belt", "yaw_belt", "total_accel_belt"]
SPARSE_FEATURES = ["kurtosis_roll_belt", "max_roll_belt"]


def _identifier_block(n_rows: int, rng: np.random.Generator) -> dict:
    return {
        "X": np.arange(1, n_rows + 1),
        "user_name": rng.choice(["adelmo", "carlitos", "pedro"], n_rows),
        "raw_timestamp_part_1": 1323084231 + np.arange(n_rows),
        "raw_timestamp_part_2": rng.integers(0, 999999, n_rows),
        "cvtd_timestamp": ["05/12/2011 11:23"] * n_rows,
        "new_window": ["no"] * n_rows,
        "num_window": rng.integers(1, 800, n_rows),
    }


def make_raw_training(n_rows: int = 200, seed: int = 0) -> pd.DataFrame:
    """A small table shaped like pml-training.csv.

    ``roll_belt`` separates the classes; the other dense measurements are
    noise. ``pitch_belt`` has a few residual gaps, and the two sparse
    summary columns are almost entirely empty.
    """
    rng = np.random.default_rng(seed)
    labels = CLASSES[rng.integers(0, len(CLASSES), n_rows)]
    codes = np.searchsorted(CLASSES, labels)

    pitch = rng.normal(size=n_rows)
    pitch[rng.choice(n_rows, size=n_rows // 20, replace=False)] = np.nan

    kurtosis = np.full(n_rows, "", dtype=object)
    kurtosis[:2] = ["0.5", "#DIV/0!"]
    max_roll = np.full(n_rows, np.nan)
    max_roll[:3] = [1.0, 2.0, 3.0]

    data = _identifier_block(n_rows, rng)
    data.update(
        {
            "roll_belt": codes * 10.0 + rng.normal(scale=1.0, size=n_rows),
            "pitch_belt": pitch,
            "yaw_belt": rng.normal(size=n_rows),
            "total_accel_belt": rng.normal(size=n_rows),
            "kurtosis_roll_belt": kurtosis,
            "max_roll_belt": max_roll,
            "classe": labels,
        }
    )
    return pd.DataFrame(data)


def make_raw_scoring(n_rows: int = 20, seed: int = 1) -> pd.DataFrame:
    """A small table shaped like pml-testing.csv: no outcome, a problem_id."""
    rng = np.random.default_rng(seed)
    codes = np.arange(n_rows) % len(CLASSES)
    data = _identifier_block(n_rows, rng)
    data.update(
        {
            "roll_belt": codes * 10.0,
            "pitch_belt": rng.normal(size=n_rows),
            "yaw_belt": rng.normal(size=n_rows),
            "total_accel_belt": rng.normal(size=n_rows),
            "kurtosis_roll_belt": np.full(n_rows, np.nan),
            "max_roll_belt": np.full(n_rows, np.nan),
            "problem_id": np.arange(1, n_rows + 1),
        }
    )
    return pd.DataFrame(data)


@pytest.fixture
def raw_training():
    return make_raw_training()


@pytest.fixture
def raw_scoring():
    return make_raw_scoring()

import numpy as np
import pandas as pd
import pytest

from tumor_report.config import FEATURE_COLUMNS


def make_wdbc_frame(n_benign: int, n_malignant: int, seed: int = 0,
                    separation: float = 3.0) -> pd.DataFrame:
    """WDBC-shaped frame: id, diagnosis, 10 mean columns plus ignored extras."""
    rng = np.random.default_rng(seed)
    n = n_benign + n_malignant
    diagnosis = ["B"] * n_benign + ["M"] * n_malignant
    shift = np.array([separation if d == "M" else 0.0 for d in diagnosis])

    data = {"id": [842300 + i for i in range(n)], "diagnosis": diagnosis}
    for j, col in enumerate(FEATURE_COLUMNS):
        data[col] = 10.0 + j + shift + rng.normal(0.0, 1.0, n)
    data["radius_se"] = rng.random(n)
    data["radius_worst"] = rng.random(n) * 30
    return pd.DataFrame(data)


@pytest.fixture
def wdbc_frame():
    return make_wdbc_frame(n_benign=38, n_malignant=22, seed=7)


@pytest.fixture
def toy_frame():
    """Ten rows, six benign and four malignant."""
    return make_wdbc_frame(n_benign=6, n_malignant=4, seed=3)


@pytest.fixture
def write_csv(tmp_path):
    def _write(df: pd.DataFrame, name: str = "data.csv") -> str:
        path = tmp_path / name
        df.to_csv(path, index=False)
        return str(path)
    return _write


@pytest.fixture
def wdbc_csv(wdbc_frame, write_csv):
    return write_csv(wdbc_frame)


@pytest.fixture
def toy_csv(toy_frame, write_csv):
    return write_csv(toy_frame, "toy.csv")

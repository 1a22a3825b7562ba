from pathlib import Path

import numpy as np
import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def disable_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


def _write_csv(path: Path, rows: np.ndarray) -> Path:
    lines = [",".join(repr(float(v)) for v in row[:-1]) + f",{int(row[-1])}" for row in rows]
    path.write_text("\n".join(lines) + "\n")
    return path


def _separable_rows(n: int, seed: int) -> np.ndarray:
    """4 features, target = feature 0 >= 0, with one row at exactly 0.0."""
    rng = np.random.default_rng(seed)
    x = np.round(rng.normal(0.0, 2.0, size=(n, 4)), 3)
    x[3, 0] = 0.0
    y = (x[:, 0] >= 0).astype(float)
    return np.column_stack([x, y])


@pytest.fixture
def separable_rows() -> np.ndarray:
    return _separable_rows(200, seed=0)


@pytest.fixture
def separable_csvs(tmp_path: Path):
    """(train_csv, valid_csv) where the class is decided by feature 0 >= 0."""
    train = _write_csv(tmp_path / "train.csv", _separable_rows(200, seed=0))
    valid = _write_csv(tmp_path / "valid.csv", _separable_rows(100, seed=1))
    return train, valid

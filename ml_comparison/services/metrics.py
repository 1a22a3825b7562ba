"""
Accuracy, loss, and timing summaries for the benchmark.

This module implements:
- `accuracy_score`: share of rows whose rounded prediction equals the
  rounded target (works for 0/1 tree outputs and sigmoid probabilities).
- `mean_loss`: average of per-row loss values.
- `summarize_records`: per (samples_proportion, x_vars_proportion) means
  and standard deviations of timings and accuracy.

Notes
-----
- Empty inputs yield 0.0 rather than NaN.
- Rounding is half away from zero, so a prediction of exactly 0.5 counts
  as class 1.
"""

from typing import Iterable, Union

import numpy as np
import pandas as pd

RECORD_COLUMNS = ["samples_proportion", "x_vars_proportion", "train_time", "valid_time", "accuracy"]


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def accuracy_score(predictions: Union[np.ndarray, Iterable[float]], targets: Union[np.ndarray, Iterable[float]]) -> float:
    """Fraction of rows where ``round(prediction) == round(target)``.

    Args
    ----
    predictions:
        Model outputs, shape (N,) or (N, 1).
    targets:
        Binary targets (0/1), same length as ``predictions``.

    Returns
    -------
    float
        Accuracy in [0, 1]; 0.0 for empty inputs.

    Raises
    ------
    ValueError
        If the two inputs have different lengths.
    """
    pred = np.asarray(predictions, dtype=float).ravel()
    y = np.asarray(targets, dtype=float).ravel()
    if pred.size != y.size:
        raise ValueError(f"Length mismatch: {pred.size} predictions vs {y.size} targets")
    if pred.size == 0:
        return 0.0
    return float(np.mean(_round_half_up(pred) == _round_half_up(y)))


def mean_loss(losses: Union[np.ndarray, Iterable[float]]) -> float:
    """Average of per-row losses (0.0 when there are none)."""
    arr = np.asarray(losses, dtype=float).ravel()
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def summarize_records(df: pd.DataFrame) -> pd.DataFrame:
    """Aggregate repeated benchmark measurements.

    Args
    ----
    df:
        Benchmark rows with the columns of ``RECORD_COLUMNS``.

    Returns
    -------
    pd.DataFrame
        One row per (samples_proportion, x_vars_proportion) with
        ``runs``, ``train_time_mean``, ``train_time_std``,
        ``valid_time_mean``, ``valid_time_std`` and ``accuracy_mean``.
        Standard deviations of single runs are reported as 0.0.

    Raises
    ------
    ValueError
        If required columns are missing.
    """
    missing = [c for c in RECORD_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing benchmark columns: {missing}")

    grouped = df.groupby(["samples_proportion", "x_vars_proportion"], sort=True)
    summary = grouped.agg(
        runs=("train_time", "size"),
        train_time_mean=("train_time", "mean"),
        train_time_std=("train_time", "std"),
        valid_time_mean=("valid_time", "mean"),
        valid_time_std=("valid_time", "std"),
        accuracy_mean=("accuracy", "mean"),
    )
    return summary.fillna(0.0).reset_index()

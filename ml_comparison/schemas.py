"""
Schemas for benchmark requests and results.

`BenchmarkRecord` is the row the harness persists for every
(row fraction, feature count) measurement; the request models validate
what the API and CLI pass to the benchmark service.

Notes
-----
- ``samples_proportion`` is the "eighths" row selector (1..8).
- ``x_vars_proportion`` is the number of leading features used (1..n).
- Times are nanoseconds.
"""

from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

MAX_REPEATS = 1000


class BenchmarkRecord(BaseModel):
    """One measurement of a train/validate cycle.

    Attributes
    ----------
    samples_proportion : int
        Eighths of the rows used for training and timed validation.
    x_vars_proportion : int
        Features used by the model.
    train_time : int
        Nanoseconds spent in ``train``.
    valid_time : int
        Nanoseconds spent in the timed part of ``validate``.
    accuracy : float
        Validation accuracy over the full validation set.
    """
    samples_proportion: int
    x_vars_proportion: int
    train_time: int
    valid_time: int
    accuracy: float


class BenchmarkRequest(BaseModel):
    """Common request fields for a benchmark sweep.

    Attributes
    ----------
    train_csv, valid_csv:
        Dataset files (features followed by a 0/1 target, no header).
    n_x_vars:
        Feature columns in the files.
    repeats:
        Number of times the whole sweep is measured (at most ``MAX_REPEATS``).
    max_x_vars:
        Sweep features 1..max_x_vars (capped at ``n_x_vars``).
    eighths:
        Row fractions to measure; defaults to 1..8.
    """
    train_csv: str
    valid_csv: str
    n_x_vars: Annotated[int, Field(ge=1)] = 4
    repeats: Annotated[int, Field(ge=1, le=MAX_REPEATS)] = 1
    max_x_vars: Annotated[int, Field(ge=1)] = 4
    eighths: Optional[List[Annotated[int, Field(ge=1, le=8)]]] = None


class TreeBenchmarkRequest(BenchmarkRequest):
    """Decision tree sweep; no extra parameters."""


class NetworkBenchmarkRequest(BenchmarkRequest):
    """Neural network sweep.

    Attributes
    ----------
    learning_rate:
        SGD step size of both linear layers.
    epochs:
        Passes over the training rows per model.
    seed:
        Weight initialization seed (None for fresh entropy).
    """
    learning_rate: Annotated[float, Field(gt=0.0)] = 0.1
    epochs: Annotated[int, Field(ge=1)] = 5
    seed: Optional[int] = None


class BenchmarkResponse(BaseModel):
    records: List[BenchmarkRecord]


class SummaryRow(BaseModel):
    samples_proportion: int
    x_vars_proportion: int
    runs: int
    train_time_mean: float
    train_time_std: float
    valid_time_mean: float
    valid_time_std: float
    accuracy_mean: float

"""
Benchmark harness for the two learning engines.

For every repeat, feature count (1..max_x_vars) and row fraction (eighths),
a fresh model is built from the CSV files, trained, validated, and one
`BenchmarkRecord` is produced. Records can be turned into a DataFrame and
written as CSV with the header

    samples_proportion,x_vars_proportion,train_time,valid_time,accuracy

Notes
-----
- A fresh model per measurement keeps runs independent: the tree's index
  permutation and the network's weights never leak between records.
- Row fractions outside 1..7 use every row (see `calculate_rows_to_use`).
"""

from pathlib import Path
from typing import Iterable, List, Tuple, Union

import pandas as pd
from loguru import logger

from ..decision_tree import DecisionTreeModel
from ..neural_net import NeuralNetModel
from ..schemas import BenchmarkRecord, BenchmarkRequest, NetworkBenchmarkRequest, TreeBenchmarkRequest
from .metrics import RECORD_COLUMNS

ALL_EIGHTHS = list(range(1, 9))


def _sweep(request: BenchmarkRequest) -> Iterable[Tuple[int, int, int]]:
    """Yield (repeat, x_vars, eighths) in measurement order."""
    eighths = request.eighths or ALL_EIGHTHS
    max_x_vars = min(request.max_x_vars, request.n_x_vars)
    for repeat in range(request.repeats):
        for x_vars in range(1, max_x_vars + 1):
            for eighth in eighths:
                yield repeat, x_vars, eighth


def run_decision_tree_benchmark(request: TreeBenchmarkRequest) -> List[BenchmarkRecord]:
    """Measure decision tree training/validation over the sweep.

    Raises
    ------
    FileNotFoundError
        If a dataset file is missing.
    ValueError
        If a dataset file contains a malformed row.
    """
    records: List[BenchmarkRecord] = []
    for repeat, x_vars, eighth in _sweep(request):
        model = DecisionTreeModel(request.train_csv, request.valid_csv, n_x_vars=request.n_x_vars)
        train_time = model.train(eighth, x_vars)
        valid_time = model.validate(eighth)
        records.append(
            BenchmarkRecord(
                samples_proportion=eighth,
                x_vars_proportion=x_vars,
                train_time=train_time,
                valid_time=valid_time,
                accuracy=model.get_accuracy(),
            )
        )
        logger.debug(f"[Benchmark] tree repeat={repeat} x_vars={x_vars} eighths={eighth} -> {records[-1]}")

    logger.info(f"[Benchmark] decision tree: {len(records)} measurements")
    return records


def run_neural_network_benchmark(request: NetworkBenchmarkRequest) -> List[BenchmarkRecord]:
    """Measure neural network training/validation over the sweep.

    Each model is built for ``x_vars`` inputs and trained for
    ``request.epochs`` epochs at ``request.learning_rate``.

    Raises
    ------
    FileNotFoundError
        If a dataset file is missing.
    ValueError
        If a dataset file contains a malformed row.
    """
    records: List[BenchmarkRecord] = []
    for repeat, x_vars, eighth in _sweep(request):
        model = NeuralNetModel(
            request.train_csv,
            request.valid_csv,
            request.learning_rate,
            n_x_vars=request.n_x_vars,
            x_vars_to_use=x_vars,
            seed=request.seed,
        )
        train_time = model.train(eighth, request.epochs)
        valid_time = model.validate(eighth)
        records.append(
            BenchmarkRecord(
                samples_proportion=eighth,
                x_vars_proportion=x_vars,
                train_time=train_time,
                valid_time=valid_time,
                accuracy=model.get_accuracy(),
            )
        )
        logger.debug(f"[Benchmark] nn repeat={repeat} x_vars={x_vars} eighths={eighth} -> {records[-1]}")

    logger.info(f"[Benchmark] neural network: {len(records)} measurements")
    return records


def records_to_frame(records: Iterable[BenchmarkRecord]) -> pd.DataFrame:
    """Records as a DataFrame with the columns in output order."""
    return pd.DataFrame([r.model_dump() for r in records], columns=RECORD_COLUMNS)


def write_results(records: Iterable[BenchmarkRecord], path: Union[str, Path]) -> Path:
    """Write records to `path` as CSV, replacing any existing file."""
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    df = records_to_frame(records)
    df.to_csv(path, index=False)
    logger.info(f"[Benchmark] wrote {len(df)} rows to {path}")
    return path

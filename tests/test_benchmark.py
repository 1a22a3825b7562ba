import pandas as pd
import pytest

from ml_comparison.schemas import NetworkBenchmarkRequest, TreeBenchmarkRequest
from ml_comparison.services.benchmark import (
    records_to_frame,
    run_decision_tree_benchmark,
    run_neural_network_benchmark,
    write_results,
)
from ml_comparison.services.metrics import RECORD_COLUMNS


def test_tree_benchmark_sweep_order(separable_csvs):
    train_csv, valid_csv = separable_csvs
    request = TreeBenchmarkRequest(
        train_csv=str(train_csv), valid_csv=str(valid_csv), repeats=2, max_x_vars=2, eighths=[4, 8]
    )
    records = run_decision_tree_benchmark(request)

    assert [(r.x_vars_proportion, r.samples_proportion) for r in records] == [(1, 4), (1, 8), (2, 4), (2, 8)] * 2
    assert all(r.accuracy == 1.0 for r in records)
    assert all(r.train_time >= 0 and r.valid_time >= 0 for r in records)


def test_tree_benchmark_caps_features(separable_csvs):
    train_csv, valid_csv = separable_csvs
    request = TreeBenchmarkRequest(train_csv=str(train_csv), valid_csv=str(valid_csv), max_x_vars=9, eighths=[8])
    records = run_decision_tree_benchmark(request)
    assert [r.x_vars_proportion for r in records] == [1, 2, 3, 4]


def test_nn_benchmark(separable_csvs):
    train_csv, valid_csv = separable_csvs
    request = NetworkBenchmarkRequest(
        train_csv=str(train_csv), valid_csv=str(valid_csv), max_x_vars=2, eighths=[2, 8], epochs=1, seed=0
    )
    records = run_neural_network_benchmark(request)
    assert len(records) == 4
    assert all(0.0 <= r.accuracy <= 1.0 for r in records)


def test_missing_dataset(tmp_path):
    request = TreeBenchmarkRequest(train_csv=str(tmp_path / "a.csv"), valid_csv=str(tmp_path / "b.csv"))
    with pytest.raises(FileNotFoundError):
        run_decision_tree_benchmark(request)


def test_write_results(tmp_path, separable_csvs):
    train_csv, valid_csv = separable_csvs
    request = TreeBenchmarkRequest(train_csv=str(train_csv), valid_csv=str(valid_csv), max_x_vars=1, eighths=[8])
    records = run_decision_tree_benchmark(request)

    out = write_results(records, tmp_path / "out" / "tree.csv")
    lines = out.read_text().splitlines()
    assert lines[0] == ",".join(RECORD_COLUMNS)
    assert len(lines) == 2

    df = pd.read_csv(out)
    pd.testing.assert_frame_equal(df, records_to_frame(records), check_dtype=False)

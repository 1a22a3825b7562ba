import pandas as pd
import pytest

from ml_comparison.services.metrics import accuracy_score, mean_loss, summarize_records


def test_accuracy_rounds_predictions():
    assert accuracy_score([0.2, 0.7, 0.5, 0.49], [0, 1, 1, 0]) == 1.0
    assert accuracy_score([1, 0, 1, 1], [1, 1, 1, 0]) == 0.5


def test_accuracy_empty_and_mismatch():
    assert accuracy_score([], []) == 0.0
    with pytest.raises(ValueError):
        accuracy_score([1, 0], [1])


def test_mean_loss():
    assert mean_loss([0.1, 0.3]) == pytest.approx(0.2)
    assert mean_loss([]) == 0.0


def test_summarize_records():
    df = pd.DataFrame(
        {
            "samples_proportion": [1, 1, 2],
            "x_vars_proportion": [4, 4, 4],
            "train_time": [100, 300, 50],
            "valid_time": [10, 10, 5],
            "accuracy": [0.5, 1.0, 0.75],
        }
    )
    summary = summarize_records(df)
    first = summary.iloc[0]
    assert first["runs"] == 2
    assert first["train_time_mean"] == 200
    assert first["accuracy_mean"] == 0.75
    assert first["valid_time_std"] == 0.0
    # a single run has no spread
    assert summary.iloc[1]["train_time_std"] == 0.0


def test_summarize_records_requires_columns():
    with pytest.raises(ValueError):
        summarize_records(pd.DataFrame({"train_time": [1]}))

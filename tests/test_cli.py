import pandas as pd
from typer.testing import CliRunner

from ml_comparison.cli import APP_VERSION, app

runner = CliRunner()


def _config(tmp_path, train_csv, valid_csv):
    path = tmp_path / "bench.yml"
    path.write_text(
        "log:\n  level: WARNING\n"
        f"dataset:\n  train_csv: {train_csv}\n  valid_csv: {valid_csv}\n"
        f"tree:\n  output_csv: {tmp_path / 'tree.csv'}\n  repeats: 1\n  max_x_vars: 1\n"
        f"network:\n  output_csv: {tmp_path / 'nn.csv'}\n  repeats: 1\n  max_x_vars: 1\n  epochs: 1\n  seed: 0\n"
    )
    return path


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert APP_VERSION in result.output


def test_tree_command(tmp_path, separable_csvs):
    train_csv, valid_csv = separable_csvs
    config = _config(tmp_path, train_csv, valid_csv)
    out = tmp_path / "custom.csv"

    result = runner.invoke(app, ["tree", "--config", str(config), "--output", str(out)])
    assert result.exit_code == 0, result.output

    df = pd.read_csv(out)
    assert len(df) == 8
    assert sorted(df["samples_proportion"]) == list(range(1, 9))
    assert (df["accuracy"] == 1.0).all()


def test_run_command_writes_both_files(tmp_path, separable_csvs):
    train_csv, valid_csv = separable_csvs
    config = _config(tmp_path, train_csv, valid_csv)

    result = runner.invoke(app, ["run", "--config", str(config)])
    assert result.exit_code == 0, result.output
    assert len(pd.read_csv(tmp_path / "tree.csv")) == 8
    assert len(pd.read_csv(tmp_path / "nn.csv")) == 8


def test_missing_dataset_fails(tmp_path):
    config = _config(tmp_path, tmp_path / "none.csv", tmp_path / "none2.csv")
    result = runner.invoke(app, ["tree", "--config", str(config)])
    assert result.exit_code != 0

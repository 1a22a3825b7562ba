import pytest
from pydantic import ValidationError

from ml_comparison.config import AppConfig, project_root
from ml_comparison.schemas import MAX_REPEATS


def test_defaults_match_original_benchmark():
    cfg = AppConfig()
    assert cfg.dataset.n_x_vars == 4
    assert cfg.network.learning_rate == 0.1
    assert cfg.network.epochs == 5
    assert cfg.tree.repeats == 100


def test_load_yaml(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text("network:\n  epochs: 2\n  learning_rate: 0.05\ntree:\n  repeats: 3\n")
    cfg = AppConfig.load(path)
    assert cfg.network.epochs == 2
    assert cfg.network.learning_rate == 0.05
    assert cfg.tree.repeats == 3
    assert cfg.dataset.train_csv == "banknote_train.csv"


def test_missing_explicit_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load(tmp_path / "missing.yml")


def test_invalid_values_rejected(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text("network:\n  epochs: 0\n")
    with pytest.raises(ValidationError):
        AppConfig.load(path)


def test_env_overrides_log_level(tmp_path, monkeypatch):
    path = tmp_path / "c.yml"
    path.write_text("log:\n  level: INFO\n")
    monkeypatch.setenv("ML_COMPARISON_LOG_LEVEL", "DEBUG")
    assert AppConfig.load(path).log.level == "DEBUG"


def test_default_config_file_loads():
    cfg = AppConfig.load()
    assert cfg.network.output_csv == "deep_learning_results.csv"


def test_resolve_data_path_inside_root(tmp_path):
    cfg = AppConfig()
    cfg.dataset.data_dir = str(tmp_path)
    assert cfg.dataset.resolve_data_path("train.csv") == (tmp_path / "train.csv").resolve()
    assert cfg.dataset.resolve_data_path("sub/../train.csv") == (tmp_path / "train.csv").resolve()


@pytest.mark.parametrize("path", ["../escape.csv", "/etc/passwd"])
def test_resolve_data_path_rejects_escape(tmp_path, path):
    cfg = AppConfig()
    cfg.dataset.data_dir = str(tmp_path / "data")
    with pytest.raises(ValueError, match="outside the data directory"):
        cfg.dataset.resolve_data_path(path)


def test_relative_data_dir_is_under_project_root():
    cfg = AppConfig()
    assert cfg.dataset.data_root() == (project_root() / "data").resolve()


def test_repeats_bounded(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text(f"tree:\n  repeats: {MAX_REPEATS + 1}\n")
    with pytest.raises(ValidationError):
        AppConfig.load(path)

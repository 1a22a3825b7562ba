"""
Benchmark configuration.

Settings are pydantic models so that values loaded from YAML (or sent to
the API) are validated the same way. `AppConfig.load` reads
`config/base.yml` from the project root unless another path is given.
"""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field

from .schemas import MAX_REPEATS


def project_root() -> Path:
    """ml_comparison/config.py -> ml_comparison -> project root."""
    return Path(__file__).resolve().parents[1]


DEFAULT_CONFIG = project_root() / "config" / "base.yml"


class LogConfig(BaseModel):
    level: str = "INFO"
    dir: Optional[str] = None
    rotation: str = "1 day"
    retention: str = "30 days"


class DatasetConfig(BaseModel):
    # API requests may only read files under this directory (relative to the project root)
    data_dir: str = "data"
    train_csv: str = "banknote_train.csv"
    valid_csv: str = "banknote_valid.csv"
    n_x_vars: int = Field(default=4, ge=1)

    def data_root(self) -> Path:
        root = Path(self.data_dir)
        if not root.is_absolute():
            root = project_root() / root
        return root.resolve()

    def resolve_data_path(self, path: Union[str, Path]) -> Path:
        """Resolve `path` against `data_root()`.

        Raises:
            ValueError: If the resolved path (symlinks included) lies outside
                the data directory.
        """
        root = self.data_root()
        candidate = (root / path).resolve()
        if not candidate.is_relative_to(root):
            raise ValueError(f"Dataset path {path} is outside the data directory")
        return candidate


class TreeBenchmarkConfig(BaseModel):
    output_csv: str = "decision_tree_results.csv"
    repeats: int = Field(default=100, ge=1, le=MAX_REPEATS)
    max_x_vars: int = Field(default=4, ge=1)


class NetworkBenchmarkConfig(BaseModel):
    output_csv: str = "deep_learning_results.csv"
    repeats: int = Field(default=100, ge=1, le=MAX_REPEATS)
    max_x_vars: int = Field(default=4, ge=1)
    learning_rate: float = Field(default=0.1, gt=0.0)
    epochs: int = Field(default=5, ge=1)
    seed: Optional[int] = None


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    tree: TreeBenchmarkConfig = Field(default_factory=TreeBenchmarkConfig)
    network: NetworkBenchmarkConfig = Field(default_factory=NetworkBenchmarkConfig)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "AppConfig":
        """Load settings from YAML.

        With no `path`, `config/base.yml` is used if present, otherwise the
        defaults. `ML_COMPARISON_LOG_LEVEL` overrides the log level.

        Raises:
            FileNotFoundError: If an explicit `path` does not exist.
        """
        raw = {}
        if path is not None:
            path = Path(path)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {path}")
        elif DEFAULT_CONFIG.exists():
            path = DEFAULT_CONFIG

        if path is not None:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}

        level = os.getenv("ML_COMPARISON_LOG_LEVEL")
        if level:
            raw.setdefault("log", {})["level"] = level
        return cls(**raw)

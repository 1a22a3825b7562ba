"""
Tabular storage shared by both learning engines.

A `TabularDataset` holds fixed-width numeric rows loaded from a headerless
CSV file plus a separate array of row indices. The decision tree reorders
the index array while it partitions its training groups; the rows
themselves are never copied or moved.

- Loading:
    * `TabularDataset.load_data`: parse a comma-delimited file of numbers.
- Subsetting:
    * `calculate_rows_to_use`: row count for an "eighths" fraction selector.
    * `TabularDataset.indices_end` / `TabularDataset.rows`: prefix bounds.
"""

import math
from pathlib import Path
from typing import Iterator, Optional, Union

import numpy as np
import pandas as pd
from loguru import logger


def calculate_rows_to_use(total_divisions: int, divisions_to_use: int, total_rows: int) -> int:
    """Number of rows covered by `divisions_to_use` of `total_divisions` parts.

    Selectors outside `1..total_divisions - 1` fall back to every row.

    Examples:
        >>> calculate_rows_to_use(8, 4, 1000)
        500
        >>> calculate_rows_to_use(8, 9, 1000)
        1000
    """
    if divisions_to_use >= total_divisions or divisions_to_use <= 0:
        return int(total_rows)
    # half away from zero
    return int(math.floor(divisions_to_use / total_divisions * total_rows + 0.5))


class TabularDataset:
    """Fixed-width numeric rows plus a permutable index array.

    Args:
        n_x_vars: Number of independent variables per row.
        includes_y: Whether each row ends with a binary target column.
        csv_file: Optional file to load immediately.

    Attributes:
        data: Array of shape (n_rows, n_cols) holding the rows.
        indices: Integer array, always a permutation of `[0, n_rows)`.
    """
    def __init__(self, n_x_vars: int, includes_y: bool = True, csv_file: Optional[Union[str, Path]] = None) -> None:
        if n_x_vars <= 0:
            raise ValueError(f"n_x_vars must be positive, got {n_x_vars}")
        self.n_x_vars = int(n_x_vars)
        self.includes_y = includes_y
        self.n_cols = self.n_x_vars + (1 if includes_y else 0)

        self.data = np.empty((0, self.n_cols), dtype=float)
        self.indices = np.empty(0, dtype=np.int64)

        if csv_file is not None:
            self.load_data(csv_file)

    def __len__(self) -> int:
        return self.size()

    def __getitem__(self, i: int) -> np.ndarray:
        return self.data[i]

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.data)

    def at(self, i: int) -> np.ndarray:
        """Row `i` by absolute position (independent of the index order)."""
        return self.data[i]

    def size(self) -> int:
        return int(self.data.shape[0])

    def get_n_rows(self) -> int:
        return self.size()

    def get_n_cols(self) -> int:
        return self.n_cols

    def get_n_x_vars(self) -> int:
        return self.n_x_vars

    def target(self, i: int) -> float:
        """Target value of row `i`; only valid when `includes_y` is set."""
        assert self.includes_y, "dataset has no target column"
        return float(self.data[i, self.n_x_vars])

    def indices_end(self, rows_to_use: Optional[int] = None) -> int:
        """Bound into `indices` for a prefix of `rows_to_use` rows.

        Values outside `[0, size)` (or None) mean the whole index array.
        """
        n = self.size()
        if rows_to_use is not None and 0 <= rows_to_use < n:
            return int(rows_to_use)
        return n

    def rows(self, rows_to_use: Optional[int] = None) -> np.ndarray:
        """First `rows_to_use` rows in stored order (same bound rule as `indices_end`)."""
        return self.data[: self.indices_end(rows_to_use)]

    def reset_indices(self) -> None:
        """Restore the identity permutation."""
        self.indices = np.arange(self.size(), dtype=np.int64)

    def load_data(self, csv_file: Union[str, Path]) -> None:
        """Replace the contents with the rows of a headerless CSV file.

        Only the first `n_cols` fields of each line are used.

        Raises:
            FileNotFoundError: If `csv_file` does not exist.
            ValueError: If a line has too few fields or a non-numeric field.
                The previous contents are kept when this happens.
        """
        path = Path(csv_file)
        if not path.exists():
            raise FileNotFoundError(f"Dataset file not found: {path}")

        columns = list(range(self.n_cols))
        try:
            # fixed names + usecols: lines wider than n_cols are cut, not rejected
            raw = pd.read_csv(
                path,
                header=None,
                names=columns,
                usecols=columns,
                index_col=False,
                dtype=str,
                keep_default_na=False,
            )
        except pd.errors.EmptyDataError:
            raw = pd.DataFrame(columns=columns, dtype=str)
        except pd.errors.ParserError as e:
            raise ValueError(f"Malformed dataset file {path}") from e

        # Empty cells come back as "" and short lines as NaN; both are malformed.
        raw = raw.fillna("")
        table = raw.apply(pd.to_numeric, errors="coerce")
        bad = table.isna().any(axis=1)
        if bad.any():
            line = int(np.argmax(bad.to_numpy())) + 1
            raise ValueError(f"Malformed row in {path} at line {line}")

        self.data = table.to_numpy(dtype=float)
        self.reset_indices()
        logger.debug(f"Loaded {self.size()} rows x {self.n_cols} cols from {path}")

    @classmethod
    def from_array(cls, data: np.ndarray, n_x_vars: int, includes_y: bool = True) -> "TabularDataset":
        """Build a dataset from an in-memory array of shape (n_rows, n_cols)."""
        ds = cls(n_x_vars, includes_y=includes_y)
        arr = np.asarray(data, dtype=float)
        if arr.ndim != 2 or arr.shape[1] != ds.n_cols:
            raise ValueError(f"Expected shape (n, {ds.n_cols}), got {arr.shape}")
        ds.data = arr.copy()
        ds.reset_indices()
        return ds

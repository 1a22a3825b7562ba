"""
Binary-classification decision tree trained on an in-place partitioned
index array.

Every node owns a half-open range `[group_begin, group_end)` of the
training set's `indices`. Training a node either turns it into a leaf or
finds the Gini-minimising (feature, threshold) split, partitions its range
so the "low" rows come first, and trains two children on the two halves.
Sibling ranges never overlap, so the whole tree shares a single index array.

- `DecisionTreeNode`: induction and prediction for one (sub)tree.
- `DecisionTreeModel`: owns the training/validation sets and times
  `train` / `validate` for the benchmark harness.
"""

import time
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
from loguru import logger

from .tabular import TabularDataset, calculate_rows_to_use
from .services.metrics import accuracy_score

MAX_DEPTH = 6
MIN_GROUP_SIZE = 10
# a split must beat an even binary outcome to be accepted
GINI_BASELINE = 0.5


class DecisionTreeNode:
    """One node of the tree, trained on `indices[group_begin:group_end]`.

    Args:
        depth: Depth of this node (root is 0).
        group_begin: First position of the node's range in `training_set.indices`.
        group_end: One past the last position of the range.
        training_set: Dataset whose index array is partitioned during training.
        x_vars_to_use: Number of leading features considered for splits.

    Attributes:
        split_var, split_val: Split rule once trained as an internal node.
        class_prediction: 0/1 once trained as a leaf, -1 otherwise.
        left, right: Child nodes of an internal node.
    """
    def __init__(
        self,
        depth: int,
        group_begin: int,
        group_end: int,
        training_set: TabularDataset,
        x_vars_to_use: Optional[int] = None,
    ) -> None:
        self.depth = depth
        self.group_begin = group_begin
        self.group_end = group_end
        self.group_size = group_end - group_begin
        self.training_set = training_set
        n_x_vars = training_set.get_n_x_vars()
        self.x_vars_to_use = n_x_vars if x_vars_to_use is None else min(int(x_vars_to_use), n_x_vars)

        self.split_var = -1
        self.split_val = -1.0
        self.class_prediction = -1

        self.left: Optional["DecisionTreeNode"] = None
        self.right: Optional["DecisionTreeNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.class_prediction >= 0

    @property
    def is_trained(self) -> bool:
        return self.is_leaf or (self.left is not None and self.right is not None)

    def _group_rows(self) -> np.ndarray:
        """Rows of this node's range, in index order (a copy, not a view)."""
        idx = self.training_set.indices[self.group_begin:self.group_end]
        return self.training_set.data[idx]

    def train(self) -> None:
        """Become a leaf or split and recursively train both children."""
        if self.depth < MAX_DEPTH and self.group_size > MIN_GROUP_SIZE:
            self.get_best_split()
            split_point = self.split_group()
            if split_point == self.group_begin or split_point == self.group_end:
                self.become_leaf()
            else:
                self.left = DecisionTreeNode(
                    self.depth + 1, self.group_begin, split_point, self.training_set, self.x_vars_to_use
                )
                self.right = DecisionTreeNode(
                    self.depth + 1, split_point, self.group_end, self.training_set, self.x_vars_to_use
                )
                self.left.train()
                self.right.train()
        else:
            self.become_leaf()

    def predict(self, sample: Sequence[float]) -> int:
        """Class (0/1) for a sample whose leading fields are the features."""
        node = self
        while not node.is_leaf:
            if node.left is None or node.right is None:
                raise RuntimeError("DecisionTreeNode.predict called before training completed")
            node = node.left if sample[node.split_var] < node.split_val else node.right
        return node.class_prediction

    def calculate_gini_index(
        self, split_variable: int, split_value: float, rows: Optional[np.ndarray] = None
    ) -> float:
        """Weighted Gini impurity of splitting the group at `split_value`.

        Rows with `row[split_variable] >= split_value` form the high subgroup,
        the rest the low one. Each non-empty subgroup contributes
        `1 - p**2 - (1 - p)**2` weighted by its share of the group, where `p`
        is its positive-class rate; empty subgroups contribute nothing.

        Args:
            rows: The group's rows as gathered by `get_best_split`; gathered
                here when omitted.
        """
        if rows is None:
            rows = self._group_rows()
        y_col = self.training_set.get_n_x_vars()
        high = rows[:, split_variable] >= split_value
        targets = rows[:, y_col]

        sizes = (float(self.group_size - np.count_nonzero(high)), float(np.count_nonzero(high)))
        sums = (float(targets[~high].sum()), float(targets[high].sum()))

        low_share = sizes[0] / self.group_size
        shares = (low_share, 1 - low_share)

        gini_index = 0.0
        for subgroup in (0, 1):
            if sizes[subgroup] > 0:
                p_pos = sums[subgroup] / sizes[subgroup]
                p_neg = 1 - p_pos
                gini_index += (1 - (p_neg * p_neg + p_pos * p_pos)) * shares[subgroup]
        return gini_index

    def get_best_split(self) -> None:
        """Search every (row value, feature) pair of the group for the best split.

        Candidates are visited row by row, features in index order; only a
        strictly lower impurity replaces the current best, and the search
        stops at the first perfect (0.0) split. If nothing beats the baseline
        the split stays at feature 0 / value 0.
        """
        best_gini_index = GINI_BASELINE
        best_var, best_val = 0, 0.0

        # gathered once; every candidate is scored against the same rows
        rows = self._group_rows()
        for row in rows:
            for col in range(self.x_vars_to_use):
                current_val = float(row[col])
                current_gini_index = self.calculate_gini_index(col, current_val, rows)
                if current_gini_index < best_gini_index:
                    best_gini_index = current_gini_index
                    best_var, best_val = col, current_val
                    if best_gini_index == 0:
                        break
            else:
                continue
            break

        self.split_var = best_var
        self.split_val = best_val

    def split_group(self) -> int:
        """Stable in-place partition of the node's index range.

        Indices whose row has `row[split_var] < split_val` are moved to the
        front of `[group_begin, group_end)`; nothing outside the range is
        touched.

        Returns:
            Absolute position of the first index of the high subgroup.
        """
        indices = self.training_set.indices
        group = indices[self.group_begin:self.group_end]
        low = self.training_set.data[group, self.split_var] < self.split_val
        n_low = int(np.count_nonzero(low))
        indices[self.group_begin:self.group_end] = np.concatenate((group[low], group[~low]))
        return self.group_begin + n_low

    def become_leaf(self) -> None:
        """Majority vote over the group; ties go to class 0."""
        total = int(self._group_rows()[:, self.training_set.get_n_x_vars()].sum())
        self.class_prediction = 1 if total > self.group_size // 2 else 0
        logger.debug(
            f"leaf depth={self.depth} size={self.group_size} positives={total} -> {self.class_prediction}"
        )

    def n_leaves(self) -> int:
        if self.is_leaf:
            return 1
        return sum(child.n_leaves() for child in (self.left, self.right) if child is not None)

    def tree_depth(self) -> int:
        """Depth of the deepest leaf below (and including) this node."""
        if self.is_leaf or self.left is None or self.right is None:
            return self.depth
        return max(self.left.tree_depth(), self.right.tree_depth())


class DecisionTreeModel:
    """Decision tree classifier with timed training and validation.

    The model owns both datasets. Nodes only get read access to the training
    rows; the index permutation they reorder belongs to the current tree.

    Args:
        train_csv: Path of the training CSV (features then target).
        valid_csv: Path of the validation CSV.
        n_x_vars: Number of feature columns in both files.
    """
    def __init__(
        self,
        train_csv: Optional[Union[str, Path]] = None,
        valid_csv: Optional[Union[str, Path]] = None,
        n_x_vars: int = 4,
    ) -> None:
        self.n_x_vars = n_x_vars
        self.training_set = TabularDataset(n_x_vars, csv_file=train_csv)
        self.validation_set = TabularDataset(n_x_vars, csv_file=valid_csv)
        self.root_node: Optional[DecisionTreeNode] = None
        self.validation_accuracy = 0.0

    def get_accuracy(self) -> float:
        return self.validation_accuracy

    def load_training_set_file(self, csv_file: Union[str, Path]) -> None:
        self.training_set.load_data(csv_file)
        self.root_node = None

    def load_validation_set_file(self, csv_file: Union[str, Path]) -> None:
        self.validation_set.load_data(csv_file)

    def train(self, eighths_rows_to_use: int, x_vars_to_use: Optional[int] = None) -> int:
        """Grow a new tree on a fraction of the training rows.

        Args:
            eighths_rows_to_use: 1..7 eighths of the rows; anything else uses all rows.
            x_vars_to_use: Number of leading features to split on (defaults to all).

        Returns:
            Nanoseconds spent growing the tree.
        """
        rows_to_use = calculate_rows_to_use(8, eighths_rows_to_use, self.training_set.size())
        self.training_set.reset_indices()
        end = self.training_set.indices_end(rows_to_use)
        self.root_node = DecisionTreeNode(0, 0, end, self.training_set, x_vars_to_use)

        start = time.perf_counter_ns()
        self.root_node.train()
        elapsed = time.perf_counter_ns() - start

        logger.info(
            f"[DecisionTree] trained rows={end} x_vars={self.root_node.x_vars_to_use} "
            f"leaves={self.root_node.n_leaves()} depth={self.root_node.tree_depth()} time={elapsed}ns"
        )
        return elapsed

    def predict(self, sample: Sequence[float]) -> int:
        if self.root_node is None:
            raise RuntimeError("DecisionTreeModel.predict called before train()")
        return self.root_node.predict(sample)

    def validate(self, eighths_rows_to_use: int) -> int:
        """Time predictions on a fraction of the validation rows.

        Accuracy is recorded over the full validation set in a second,
        untimed pass and is available from `get_accuracy`.

        Returns:
            Nanoseconds spent on the timed prediction pass.
        """
        if self.root_node is None:
            raise RuntimeError("DecisionTreeModel.validate called before train()")
        root = self.root_node
        y_col = self.n_x_vars

        rows_to_use = calculate_rows_to_use(8, eighths_rows_to_use, self.validation_set.size())

        start = time.perf_counter_ns()
        total_correct = 0
        for sample in self.validation_set.rows(rows_to_use):
            total_correct += int(root.predict(sample) == sample[y_col])
        elapsed = time.perf_counter_ns() - start

        predictions = np.array([root.predict(sample) for sample in self.validation_set], dtype=float)
        self.validation_accuracy = accuracy_score(predictions, self.validation_set.data[:, y_col])

        logger.info(
            f"[DecisionTree] validated rows={rows_to_use} accuracy={self.validation_accuracy:.4f} time={elapsed}ns"
        )
        return elapsed

"""
Two-layer neural network for binary classification and its benchmark model.

- `NeuralNet`: Linear(n -> 8) -> shifted ReLU -> Linear(8 -> 1) -> Sigmoid.
- `NeuralNetDataset`: CSV rows as (GradMatrix features, float target) pairs.
- `NeuralNetModel`: per-row SGD training for a number of epochs, timed
  validation, accuracy and average MSE on the validation set.
- `gradient_check`: central-difference check of backprop gradients.
"""

import time
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np
from loguru import logger

from .layers import Linear, MSELoss, ReLU, Sigmoid, TrainableLayer
from .matrix import GradMatrix
from .tabular import TabularDataset, calculate_rows_to_use
from .services.metrics import accuracy_score, mean_loss

HIDDEN_UNITS = 8

Sample = Tuple[GradMatrix, float]


class NeuralNet(TrainableLayer):
    """Fixed two-layer network; both linear layers share one learning rate.

    Architecture:
        [Input] -> Linear(8) -> ReLU(-0.5 shift) -> Linear(1) -> Sigmoid
    """
    def __init__(self, input_cols: int, learning_rate: float, hidden_units: int = HIDDEN_UNITS, seed: Optional[int] = None) -> None:
        super().__init__(input_cols, 1, learning_rate)
        self.linear_layer_1 = Linear(input_cols, hidden_units, learning_rate, seed=seed)
        self.layer_1_relu_activation = ReLU(hidden_units)
        self.linear_layer_2 = Linear(hidden_units, 1, learning_rate, seed=seed)
        self.layer_2_sigmoid_activation = Sigmoid(1)

        self.linear_layer_1.kaiming_he_init()
        self.linear_layer_2.kaiming_he_init()

    def __call__(self, x: GradMatrix) -> GradMatrix:
        out = self.linear_layer_1(x)
        out = self.layer_1_relu_activation(out)
        out = self.linear_layer_2(out)
        return self.layer_2_sigmoid_activation(out)

    def backward(self) -> None:
        self.layer_2_sigmoid_activation.backward()
        self.linear_layer_2.backward()
        self.layer_1_relu_activation.backward()
        self.linear_layer_1.backward()

    def update(self) -> None:
        self.linear_layer_2.update()
        self.linear_layer_1.update()

    def set_lr(self, new_learning_rate: float) -> None:
        self.learning_rate = new_learning_rate
        self.linear_layer_1.set_lr(new_learning_rate)
        self.linear_layer_2.set_lr(new_learning_rate)

    def parameters(self) -> List[Linear]:
        """Trainable layers in forward order."""
        return [self.linear_layer_1, self.linear_layer_2]


class NeuralNetDataset:
    """Rows of a CSV file as network-ready samples.

    Args:
        n_x_vars: Feature columns in the file (the target follows them).
        x_vars_to_use: Leading features fed to the network (defaults to all).
        csv_file: Optional file to load immediately.
    """
    def __init__(self, n_x_vars: int, x_vars_to_use: Optional[int] = None, csv_file: Optional[Union[str, Path]] = None) -> None:
        self.n_x_vars = n_x_vars
        self.x_vars_to_use = n_x_vars if x_vars_to_use is None else int(x_vars_to_use)
        if not 1 <= self.x_vars_to_use <= n_x_vars:
            raise ValueError(f"x_vars_to_use must be in [1, {n_x_vars}], got {x_vars_to_use}")
        self.table = TabularDataset(n_x_vars)
        self.samples: List[Sample] = []
        if csv_file is not None:
            self.load_data(csv_file)

    def load_data(self, csv_file: Union[str, Path]) -> None:
        self.table.load_data(csv_file)
        self.samples = [
            (GradMatrix(1, self.x_vars_to_use, row[: self.x_vars_to_use]), float(row[self.n_x_vars]))
            for row in self.table
        ]

    def __len__(self) -> int:
        return len(self.samples)

    def __getitem__(self, i: int) -> Sample:
        return self.samples[i]

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    def size(self) -> int:
        return len(self.samples)

    def rows(self, rows_to_use: Optional[int] = None) -> List[Sample]:
        return self.samples[: self.table.indices_end(rows_to_use)]


class NeuralNetModel:
    """Neural network classifier with timed training and validation.

    Args:
        train_csv, valid_csv: Paths of the training/validation CSV files.
        learning_rate: SGD step size for both linear layers.
        n_x_vars: Feature columns in the files.
        x_vars_to_use: Leading features the network is built for.
        seed: Seed for weight initialization.
    """
    def __init__(
        self,
        train_csv: Optional[Union[str, Path]],
        valid_csv: Optional[Union[str, Path]],
        learning_rate: float,
        n_x_vars: int = 4,
        x_vars_to_use: Optional[int] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.training_set = NeuralNetDataset(n_x_vars, x_vars_to_use, train_csv)
        self.validation_set = NeuralNetDataset(n_x_vars, x_vars_to_use, valid_csv)
        self.neural_net = NeuralNet(self.training_set.x_vars_to_use, learning_rate, seed=seed)
        self.loss = MSELoss()

        self.validation_loss = 0.0
        self.validation_accuracy = 0.0

    def get_accuracy(self) -> float:
        return self.validation_accuracy

    def get_loss(self) -> float:
        return self.validation_loss

    def set_learning_rate(self, new_learning_rate: float) -> None:
        self.neural_net.set_lr(new_learning_rate)

    def get_learning_rate(self) -> float:
        return self.neural_net.get_lr()

    def load_training_set_file(self, csv_file: Union[str, Path]) -> None:
        self.training_set.load_data(csv_file)

    def load_validation_set_file(self, csv_file: Union[str, Path]) -> None:
        self.validation_set.load_data(csv_file)

    def train(self, eighths_rows_to_use: int, n_epochs: int) -> int:
        """Run `n_epochs` of per-row SGD over a fraction of the training rows.

        Rows are visited in file order, no shuffling and no batching:
        forward -> loss -> loss.backward -> net.backward -> net.update.

        Returns:
            Nanoseconds spent training.
        """
        rows_to_use = calculate_rows_to_use(8, eighths_rows_to_use, self.training_set.size())
        rows = self.training_set.rows(rows_to_use)

        start = time.perf_counter_ns()
        for epoch in range(n_epochs):
            for x, target in rows:
                self.loss(self.neural_net(x), target)
                self.loss.backward()
                self.neural_net.backward()
                self.neural_net.update()
        elapsed = time.perf_counter_ns() - start

        logger.info(
            f"[NeuralNet] trained rows={len(rows)} epochs={n_epochs} "
            f"lr={self.neural_net.get_lr()} time={elapsed}ns"
        )
        return elapsed

    def predict(self, x: GradMatrix) -> float:
        return float(self.neural_net(x)[0, 0])

    def validate(self, eighths_rows_to_use: int) -> int:
        """Time forward passes over a fraction of the validation rows.

        A second, untimed pass over the whole validation set records the
        average MSE loss and the accuracy (rounded prediction == rounded target).

        Returns:
            Nanoseconds spent on the timed pass.
        """
        rows_to_use = calculate_rows_to_use(8, eighths_rows_to_use, self.validation_set.size())
        rows = self.validation_set.rows(rows_to_use)

        start = time.perf_counter_ns()
        for x, _ in rows:
            self.neural_net(x)
        elapsed = time.perf_counter_ns() - start

        predictions = np.empty(self.validation_set.size(), dtype=float)
        targets = np.empty(self.validation_set.size(), dtype=float)
        losses = np.empty(self.validation_set.size(), dtype=float)
        for i, (x, target) in enumerate(self.validation_set):
            prediction = self.neural_net(x)
            losses[i] = self.loss(prediction, target)
            predictions[i] = prediction[0, 0]
            targets[i] = target

        self.validation_loss = mean_loss(losses)
        self.validation_accuracy = accuracy_score(predictions, targets)

        logger.info(
            f"[NeuralNet] validated rows={len(rows)} loss={self.validation_loss:.4f} "
            f"accuracy={self.validation_accuracy:.4f} time={elapsed}ns"
        )
        return elapsed


# ============================================
# Validation helper
# ============================================

def gradient_check(
    net: NeuralNet,
    x: GradMatrix,
    target: float,
    eps: float = 1e-5,
    num_checks: int = 10,
    seed: int = 0,
) -> Dict[str, float]:
    """Numerical gradient checking via central differences on random params.

    For randomly selected entries of every weight and bias matrix, perturb by
    ±eps and compare the numerical derivative of the MSE loss with the
    gradient left by backprop.

    Args:
        net: Network to check; its parameters are restored afterwards.
        x: Single input row.
        target: Target for the MSE loss.
        eps: Small step for finite differences.
        num_checks: How many entries per tensor to test.
        seed: RNG seed for reproducibility.

    Returns:
        {'max_rel_error': float, 'mean_rel_error': float}
    """
    rng = np.random.default_rng(seed)
    loss = MSELoss()

    # one backward pass to populate the parameter gradients
    loss(net(x), target)
    loss.backward()
    net.backward()

    rel_errors: List[float] = []
    for layer in net.parameters():
        for param in layer.parameters():
            analytic = param.grad.to_numpy()
            idx_i = rng.integers(0, param.n_rows, size=num_checks)
            idx_j = rng.integers(0, param.n_cols, size=num_checks)
            for i, j in zip(idx_i, idx_j):
                old = float(param[i, j])

                param[i, j] = old + eps
                loss_plus = loss(net(x), target)
                param[i, j] = old - eps
                loss_minus = loss(net(x), target)
                param[i, j] = old

                grad_num = (loss_plus - loss_minus) / (2.0 * eps)
                grad_backprop = float(analytic[i, j])
                rel = abs(grad_num - grad_backprop) / max(1e-8, abs(grad_num) + abs(grad_backprop))
                rel_errors.append(float(rel))

    return {
        "max_rel_error": float(np.max(rel_errors)),
        "mean_rel_error": float(np.mean(rel_errors)),
    }

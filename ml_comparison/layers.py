"""
Layer contracts and the concrete layers of the benchmark network.

Every layer is called on a single-row `GradMatrix`, keeps a reference to
it in a `ForwardRecord` together with its own freshly computed output,
and on `backward()` writes the input's gradient from the output's gradient
(which the next layer or the loss has already filled in).

- Contracts: `Layer`, `TrainableLayer` (adds a learning rate and `update`),
  `LossLayer`.
- Layers: `Linear`, `ReLU` (shifted by -0.5), `Sigmoid`.
- Loss: `MSELoss`.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .matrix import GradMatrix, Matrix


@dataclass
class ForwardRecord:
    """Input seen by the last forward call and the output it produced."""
    input_matrix: Optional[GradMatrix]
    output_matrix: GradMatrix


def _require_grad_input(x: Matrix, cols: int, layer: str) -> GradMatrix:
    if not isinstance(x, GradMatrix):
        raise TypeError(f"{layer} expects a GradMatrix input, got {type(x).__name__}")
    if x.shape != (1, cols):
        raise ValueError(f"{layer} expects input of shape (1, {cols}), got {x.shape}")
    return x


class Layer(ABC):
    """Forward/backward contract for a layer mapping (1, n_in) to (1, n_out)."""
    def __init__(self, input_size: int, output_size: int) -> None:
        self.input_size = input_size
        self.output_size = output_size
        self.forward_record = ForwardRecord(None, GradMatrix(1, output_size))

    @abstractmethod
    def __call__(self, x: GradMatrix) -> GradMatrix:
        """Compute and return the layer's output, recording `x`."""

    @abstractmethod
    def backward(self) -> None:
        """Set the recorded input's gradient from the output's gradient."""

    def _recorded_input(self) -> GradMatrix:
        x = self.forward_record.input_matrix
        if x is None:
            raise RuntimeError(f"{type(self).__name__}.backward called before a forward pass")
        return x


class TrainableLayer(Layer):
    """Layer with parameters updated by gradient descent."""
    def __init__(self, input_size: int, output_size: int, learning_rate: float = 0.0) -> None:
        super().__init__(input_size, output_size)
        self.learning_rate = learning_rate

    def get_lr(self) -> float:
        return self.learning_rate

    def set_lr(self, new_learning_rate: float) -> None:
        self.learning_rate = new_learning_rate

    @abstractmethod
    def update(self) -> None:
        """Apply one SGD step to every parameter."""


class LossLayer(ABC):
    """Scalar loss on a (1, 1) prediction and a plain target."""
    def __init__(self) -> None:
        self.input_matrix: Optional[GradMatrix] = None
        self.target = 0.0

    @abstractmethod
    def __call__(self, x: GradMatrix, target: float) -> float:
        """Return the loss, recording `x` and `target` for `backward`."""

    @abstractmethod
    def backward(self) -> None:
        """Set the recorded prediction's gradient."""


# -------------
# Core layers
# -------------

class Linear(TrainableLayer):
    """Fully-connected layer: x · W + b.

    Args:
        n_inputs: Input width.
        n_units: Number of units (output width).
        learning_rate: SGD step size used by `update`.
        seed: Seed for `kaiming_he_init`.

    Attributes:
        weights: GradMatrix (n_inputs, n_units).
        biases: GradMatrix (1, n_units).
    """
    def __init__(self, n_inputs: int, n_units: int, learning_rate: float = 0.0, seed: Optional[int] = None) -> None:
        super().__init__(n_inputs, n_units, learning_rate)
        self.seed = seed
        self.weights = GradMatrix(n_inputs, n_units)
        self.biases = GradMatrix(1, n_units)

    def kaiming_he_init(self) -> None:
        """Draw every weight from N(0, sqrt(2 / n_inputs)); biases stay zero."""
        rng = np.random.default_rng(self.seed)
        std = math.sqrt(2.0 / self.input_size)
        self.weights.data = rng.normal(0.0, std, size=self.weights.shape)

    def __call__(self, x: GradMatrix) -> GradMatrix:
        x = _require_grad_input(x, self.input_size, "Linear")
        self.forward_record.input_matrix = x
        self.forward_record.output_matrix.assign(x.dot(self.weights).add(self.biases))
        return self.forward_record.output_matrix

    def backward(self) -> None:
        x = self._recorded_input()
        out_grad = self.forward_record.output_matrix.grad
        x.set_grad(out_grad.dot_t(self.weights))
        self.weights.set_grad(x.t_dot(out_grad))
        # bias enters the output additively, so its gradient is the output's
        self.biases.set_grad(out_grad)

    def update(self) -> None:
        self.weights.sgd_step(self.learning_rate)
        self.biases.sgd_step(self.learning_rate)

    def parameters(self) -> List[GradMatrix]:
        return [self.weights, self.biases]


class ReLU(Layer):
    """ReLU shifted down by 0.5: x - 0.5 for x > 0, else -0.5."""
    def __init__(self, cols: int) -> None:
        super().__init__(cols, cols)

    def __call__(self, x: GradMatrix) -> GradMatrix:
        x = _require_grad_input(x, self.input_size, "ReLU")
        self.forward_record.input_matrix = x
        self.forward_record.output_matrix.data = np.where(x.data > 0, x.data - 0.5, -0.5)
        return self.forward_record.output_matrix

    def backward(self) -> None:
        x = self._recorded_input()
        out_grad = self.forward_record.output_matrix.grad.data
        x.grad.data = np.where(x.data > 0, out_grad, 0.0)


class Sigmoid(Layer):
    """Sigmoid activation σ(x) = 1 / (1 + exp(-x))."""
    def __init__(self, cols: int) -> None:
        super().__init__(cols, cols)

    @staticmethod
    def sigmoid(x: np.ndarray) -> np.ndarray:
        return 1.0 / (1.0 + np.exp(-x))

    def __call__(self, x: GradMatrix) -> GradMatrix:
        x = _require_grad_input(x, self.input_size, "Sigmoid")
        self.forward_record.input_matrix = x
        self.forward_record.output_matrix.data = self.sigmoid(x.data)
        return self.forward_record.output_matrix

    def backward(self) -> None:
        """Return grad_output * σ(x) * (1 - σ(x)) into the input's gradient."""
        x = self._recorded_input()
        s = self.sigmoid(x.data)
        x.grad.data = s * (1 - s) * self.forward_record.output_matrix.grad.data


# -------------
# Loss
# -------------

class MSELoss(LossLayer):
    """Squared error of a single prediction: (p - t)**2."""
    def __call__(self, x: GradMatrix, target: float) -> float:
        x = _require_grad_input(x, 1, "MSELoss")
        self.input_matrix = x
        self.target = float(target)
        err = float(x[0, 0]) - self.target
        return err * err

    def backward(self) -> None:
        if self.input_matrix is None:
            raise RuntimeError("MSELoss.backward called before a forward pass")
        self.input_matrix.grad[0, 0] = 2 * (float(self.input_matrix[0, 0]) - self.target)

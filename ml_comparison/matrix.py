"""
Fixed-shape dense matrices for the from-scratch neural network.

- `Matrix`: 2D float buffer whose shape is fixed at construction. Products
  (`dot`, `t_dot`, `dot_t`), sums (`add`, `add_inplace`) and `t()` return
  fresh matrices; shapes must match exactly, there is no broadcasting.
- `GradMatrix`: a `Matrix` carrying a same-shaped `grad` buffer that holds
  dLoss/dElement. Backward passes overwrite it; `sgd_step` consumes it.
"""

from typing import Optional, Tuple, Union

import numpy as np

ArrayLike = Union[np.ndarray, list, tuple]


class Matrix:
    """Dense matrix with a fixed number of rows and columns.

    Args:
        n_rows, n_cols: Shape of the matrix.
        data: Optional initial values; zeros when omitted.
    """
    def __init__(self, n_rows: int, n_cols: int, data: Optional[ArrayLike] = None) -> None:
        self.n_rows = int(n_rows)
        self.n_cols = int(n_cols)
        if data is None:
            self._data = np.zeros((self.n_rows, self.n_cols), dtype=float)
        else:
            self._data = self._checked(data)

    @classmethod
    def from_array(cls, data: ArrayLike) -> "Matrix":
        arr = np.atleast_2d(np.asarray(data, dtype=float))
        return cls(arr.shape[0], arr.shape[1], arr)

    def _checked(self, data: ArrayLike) -> np.ndarray:
        arr = np.array(data, dtype=float)
        if arr.ndim == 1 and self.n_rows == 1:
            arr = arr.reshape(1, -1)
        if arr.shape != self.shape:
            raise ValueError(f"Shape mismatch: expected {self.shape}, got {arr.shape}")
        return arr

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.n_rows, self.n_cols)

    @property
    def data(self) -> np.ndarray:
        return self._data

    @data.setter
    def data(self, values: ArrayLike) -> None:
        self._data = self._checked(values)

    def __getitem__(self, key):
        return self._data[key]

    def __setitem__(self, key, value) -> None:
        self._data[key] = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.n_rows}x{self.n_cols}, {self._data.tolist()})"

    def at(self, i: int) -> np.ndarray:
        """Row `i` as a view."""
        return self._data[i]

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()

    def copy(self) -> "Matrix":
        return Matrix(self.n_rows, self.n_cols, self._data)

    def assign(self, other: "Matrix") -> None:
        """Copy the values (not the gradients) of a same-shaped matrix."""
        self._require_shape(other, self.shape, "assign")
        self._data[...] = other.data

    @staticmethod
    def _require_shape(m: "Matrix", shape: Tuple[int, int], op: str) -> None:
        if m.shape != shape:
            raise ValueError(f"{op}: expected operand of shape {shape}, got {m.shape}")

    # -----------
    # Products
    # -----------

    def dot(self, rhs: "Matrix") -> "Matrix":
        """self · rhs, shape (n_rows, rhs.n_cols)."""
        if rhs.n_rows != self.n_cols:
            raise ValueError(f"dot: cannot multiply {self.shape} by {rhs.shape}")
        return Matrix(self.n_rows, rhs.n_cols, self._data @ rhs.data)

    def t_dot(self, rhs: "Matrix") -> "Matrix":
        """selfᵗ · rhs, without building the transpose."""
        if rhs.n_rows != self.n_rows:
            raise ValueError(f"t_dot: cannot multiply transpose of {self.shape} by {rhs.shape}")
        return Matrix(self.n_cols, rhs.n_cols, np.einsum("ki,kj->ij", self._data, rhs.data))

    def dot_t(self, rhs: "Matrix") -> "Matrix":
        """self · rhsᵗ, without building the transpose."""
        if rhs.n_cols != self.n_cols:
            raise ValueError(f"dot_t: cannot multiply {self.shape} by transpose of {rhs.shape}")
        return Matrix(self.n_rows, rhs.n_rows, np.einsum("ik,jk->ij", self._data, rhs.data))

    # ---------
    # Sums
    # ---------

    def add_inplace(self, rhs: "Matrix") -> None:
        self._require_shape(rhs, self.shape, "add_inplace")
        self._data += rhs.data

    def add(self, rhs: "Matrix") -> "Matrix":
        result = self.copy()
        result.add_inplace(rhs)
        return result

    def t(self) -> "Matrix":
        return Matrix(self.n_cols, self.n_rows, self._data.T)

    def allclose(self, other: "Matrix", atol: float = 1e-8) -> bool:
        return self.shape == other.shape and bool(np.allclose(self._data, other.data, atol=atol))


class GradMatrix(Matrix):
    """Matrix with an attached gradient buffer of the same shape.

    Attributes:
        grad: Partial derivatives of a scalar loss w.r.t. each element.
            Overwritten (never accumulated) by each backward pass.
    """
    def __init__(self, n_rows: int, n_cols: int, data: Optional[ArrayLike] = None) -> None:
        super().__init__(n_rows, n_cols, data)
        self.grad = Matrix(n_rows, n_cols)

    @classmethod
    def from_matrix(cls, m: Matrix) -> "GradMatrix":
        """Copy the values of `m`; gradients start at zero."""
        return cls(m.n_rows, m.n_cols, m.data)

    @classmethod
    def from_array(cls, data: ArrayLike) -> "GradMatrix":
        arr = np.atleast_2d(np.asarray(data, dtype=float))
        return cls(arr.shape[0], arr.shape[1], arr)

    def set_grad(self, grad: Matrix) -> None:
        self._require_shape(grad, self.shape, "set_grad")
        self.grad.data = grad.data

    def sgd_step(self, learning_rate: float) -> None:
        """One vanilla gradient-descent step: data -= learning_rate * grad."""
        self._data -= learning_rate * self.grad.data

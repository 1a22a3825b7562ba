import numpy as np
import pytest

from ml_comparison.matrix import GradMatrix, Matrix


@pytest.fixture
def a():
    return Matrix.from_array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])


@pytest.fixture
def b():
    return Matrix.from_array([[1.0, -1.0], [0.5, 2.0], [-3.0, 0.0]])


def test_default_is_zero():
    m = Matrix(2, 3)
    assert m.shape == (2, 3)
    np.testing.assert_array_equal(m.data, np.zeros((2, 3)))


def test_dot(a, b):
    result = a.dot(b)
    assert result.shape == (2, 2)
    np.testing.assert_allclose(result.data, a.data @ b.data)


def test_dot_shape_mismatch(a):
    with pytest.raises(ValueError):
        a.dot(a)


def test_transpose_of_product(a, b):
    assert a.dot(b).t().allclose(b.t().dot(a.t()))


def test_t_dot_matches_explicit_transpose(a):
    rhs = Matrix.from_array([[1.0], [2.0]])
    assert a.t_dot(rhs).allclose(a.t().dot(rhs))
    assert a.t_dot(rhs).shape == (3, 1)


def test_dot_t_matches_explicit_transpose(a):
    rhs = Matrix.from_array([[1.0, 0.0, 2.0]])
    assert a.dot_t(rhs).allclose(a.dot(rhs.t()))
    assert a.dot_t(rhs).shape == (2, 1)


def test_add_returns_new_matrix(a):
    other = Matrix.from_array(np.ones((2, 3)))
    result = a.add(other)
    np.testing.assert_allclose(result.data, a.data + 1)
    np.testing.assert_allclose(a.data, [[1, 2, 3], [4, 5, 6]])


def test_add_inplace(a):
    a.add_inplace(Matrix.from_array(np.full((2, 3), 2.0)))
    np.testing.assert_allclose(a.data, [[3, 4, 5], [6, 7, 8]])


def test_add_requires_exact_shape(a):
    with pytest.raises(ValueError):
        a.add(Matrix(1, 3))
    with pytest.raises(ValueError):
        a.add_inplace(Matrix(3, 2))


def test_data_assignment_keeps_shape(a):
    with pytest.raises(ValueError):
        a.data = np.zeros((3, 3))
    row = Matrix(1, 3)
    row.data = [1.0, 2.0, 3.0]
    assert row.shape == (1, 3)


def test_grad_matrix_from_matrix_copies_values_only(a):
    g = GradMatrix.from_matrix(a)
    assert g.grad.shape == a.shape
    np.testing.assert_array_equal(g.grad.data, np.zeros((2, 3)))
    g[0, 0] = 100.0
    assert a[0, 0] == 1.0


def test_sgd_step():
    g = GradMatrix.from_array([[1.0, 2.0]])
    g.grad.data = [[0.5, -1.0]]
    g.sgd_step(0.1)
    np.testing.assert_allclose(g.data, [[0.95, 2.1]])
    # gradients are left for the next backward pass to overwrite
    np.testing.assert_allclose(g.grad.data, [[0.5, -1.0]])


def test_set_grad_overwrites():
    g = GradMatrix(1, 2)
    g.set_grad(Matrix.from_array([[1.0, 1.0]]))
    g.set_grad(Matrix.from_array([[2.0, 3.0]]))
    np.testing.assert_allclose(g.grad.data, [[2.0, 3.0]])
    with pytest.raises(ValueError):
        g.set_grad(Matrix(2, 1))

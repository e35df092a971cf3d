import numpy as np
import pytest

from lumina.backend import BackendType, DeviceError
from lumina.cpu import CpuBackend


def test_device_info_reports_threads():
    info = CpuBackend(num_threads=4).device_info()
    assert info.name == "CPU (4 threads)"
    assert info.backend_type is BackendType.CPU
    assert info.compute_units == 4
    assert info.memory_bytes is None


def test_default_uses_at_least_one_thread():
    assert CpuBackend().num_threads >= 1


def test_parallel_matrix_fill_places_each_entry():
    def fill(i, j):
        return complex(i, j)

    m = CpuBackend(num_threads=3).parallel_matrix_fill(5, 4, fill)
    assert m.shape == (5, 4)
    for i in range(5):
        for j in range(4):
            assert m[i, j] == fill(i, j)


def test_parallel_matrix_fill_empty():
    m = CpuBackend(num_threads=2).parallel_matrix_fill(0, 3, lambda i, j: 1.0)
    assert m.shape == (0, 3)


def test_parallel_matrix_fill_bad_value_is_device_error():
    with pytest.raises(DeviceError):
        CpuBackend(num_threads=2).parallel_matrix_fill(2, 2, lambda i, j: "not a number")


def test_matvec_with_identity_returns_vector():
    v = np.array([1 + 2j, -3j, 0.5])
    result = CpuBackend(num_threads=1).matvec(np.eye(3, dtype=complex), v)
    np.testing.assert_allclose(result, v)


def test_dense_solve_satisfies_system():
    a = np.array([[1 + 1j, 2.0], [1j, 3 - 1j]])
    b = np.array([5 + 1j, 4 + 2j])
    x = CpuBackend(num_threads=1).dense_solve(a, b)
    np.testing.assert_allclose(a @ x, b, atol=1e-10)


def test_dense_solve_singular_is_device_error():
    with pytest.raises(DeviceError):
        CpuBackend(num_threads=1).dense_solve(np.zeros((2, 2)), np.ones(2))


def test_dense_solve_shape_mismatch_is_device_error():
    with pytest.raises(DeviceError):
        CpuBackend(num_threads=1).dense_solve(np.eye(3), np.ones(2))
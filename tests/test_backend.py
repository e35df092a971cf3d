import numpy as np
import pytest

from lumina.backend import (
    BackendType,
    BackendUnavailable,
    ComputeBackend,
    ComputeError,
    DeviceError,
    DeviceInfo,
    OutOfMemory,
)


class _MinimalBackend(ComputeBackend):
    def device_info(self):
        return DeviceInfo(name="minimal", backend_type=BackendType.GPU)

    def parallel_matrix_fill(self, rows, cols, fill_fn):
        return np.array(
            [[fill_fn(i, j) for j in range(cols)] for i in range(rows)], dtype=complex
        ).reshape(rows, cols)

    def matvec(self, matrix, vector):
        return np.asarray(matrix) @ np.asarray(vector)


def test_default_dense_solve_is_unavailable():
    backend = _MinimalBackend()
    with pytest.raises(BackendUnavailable) as info:
        ComputeBackend.dense_solve(
            backend, np.eye(2, dtype=complex), np.ones(2, dtype=complex)
        )
    assert str(info.value) == "Backend not available: Dense solve not implemented for this backend"


def test_default_dense_solve_error_is_a_compute_error():
    backend = _MinimalBackend()
    with pytest.raises(ComputeError) as info:
        ComputeBackend.dense_solve(
            backend, np.eye(3, dtype=complex), np.zeros(3, dtype=complex)
        )
    assert isinstance(info.value, BackendUnavailable)
    assert str(info.value) == "Backend not available: Dense solve not implemented for this backend"


def test_backend_interface_cannot_be_instantiated():
    with pytest.raises(TypeError):
        ComputeBackend()


@pytest.mark.parametrize(
    "err, message",
    [
        (BackendUnavailable("x"), "Backend not available: x"),
        (DeviceError("y"), "Device error: y"),
        (OutOfMemory(2, 1), "Out of memory: requested 2 bytes, available 1"),
    ],
)
def test_errors_share_a_base_class(err, message):
    assert isinstance(err, ComputeError)
    assert str(err) == message


def test_device_error_message():
    assert str(DeviceError("lost context")) == "Device error: lost context"


def test_out_of_memory_message_and_fields():
    err = OutOfMemory(requested=2048, available=1024)
    assert err.requested == 2048
    assert err.available == 1024
    assert str(err) == "Out of memory: requested 2048 bytes, available 1024"


def test_device_info_defaults_and_equality():
    info = _MinimalBackend().device_info()
    assert info.memory_bytes is None
    assert info.compute_units is None
    assert info == DeviceInfo("minimal", BackendType.GPU)
    assert info.backend_type is BackendType.GPU
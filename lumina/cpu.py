"""CPU compute backend using a thread pool."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

import numpy as np

from lumina.backend import BackendType, ComputeBackend, DeviceError, DeviceInfo


class CpuBackend(ComputeBackend):
    """Shared-memory backend; uses every available CPU unless told otherwise."""

    def __init__(self, num_threads: int | None = None) -> None:
        self.num_threads = num_threads if num_threads is not None else (os.cpu_count() or 1)

    def device_info(self) -> DeviceInfo:
        return DeviceInfo(
            name=f"CPU ({self.num_threads} threads)",
            backend_type=BackendType.CPU,
            memory_bytes=None,
            compute_units=self.num_threads,
        )

    def parallel_matrix_fill(
        self, rows: int, cols: int, fill_fn: Callable[[int, int], complex]
    ) -> np.ndarray:
        def fill_row(i: int) -> list[complex]:
            return [fill_fn(i, j) for j in range(cols)]

        with ThreadPoolExecutor(max_workers=max(1, self.num_threads)) as pool:
            data = list(pool.map(fill_row, range(rows)))
        try:
            return np.array(data, dtype=complex).reshape(rows, cols)
        except (TypeError, ValueError) as exc:
            raise DeviceError(str(exc)) from exc

    def matvec(self, matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
        return np.asarray(matrix, dtype=complex) @ np.asarray(vector, dtype=complex)

    def dense_solve(self, matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray:
        """Solve by LU decomposition with partial pivoting."""
        a = np.asarray(matrix, dtype=complex)
        b = np.asarray(rhs, dtype=complex).reshape(-1)
        if a.ndim != 2 or a.shape[0] != a.shape[1] or a.shape[0] != b.shape[0]:
            raise DeviceError(f"incompatible shapes {a.shape} and {b.shape}")
        try:
            return np.linalg.solve(a, b)
        except np.linalg.LinAlgError as exc:
            raise DeviceError(str(exc)) from exc
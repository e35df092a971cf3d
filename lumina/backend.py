"""Compute backend interface, device description and backend errors."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

import numpy as np


class ComputeError(Exception):
    """Base class for failures reported by a compute backend."""


class BackendUnavailable(ComputeError):
    """The requested backend or operation is not available."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Backend not available: {detail}")


class DeviceError(ComputeError):
    """The device failed while executing an operation."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Device error: {detail}")


class OutOfMemory(ComputeError):
    """The device could not provide the requested memory."""

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Out of memory: requested {requested} bytes, available {available}"
        )


class BackendType(enum.Enum):
    """The kind of execution environment."""

    CPU = "cpu"
    GPU = "gpu"
    DISTRIBUTED = "distributed"


@dataclass(frozen=True)
class DeviceInfo:
    """Capabilities of a compute backend."""

    name: str
    backend_type: BackendType
    memory_bytes: int | None = None
    compute_units: int | None = None


class ComputeBackend(ABC):
    """Device-specific execution of matrix fill, matrix-vector product and solve."""

    @abstractmethod
    def device_info(self) -> DeviceInfo:
        """Describe the device."""

    @abstractmethod
    def parallel_matrix_fill(
        self, rows: int, cols: int, fill_fn: Callable[[int, int], complex]
    ) -> np.ndarray:
        """Return a rows x cols complex matrix with entry (i, j) = fill_fn(i, j)."""

    @abstractmethod
    def matvec(self, matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
        """Return the complex product matrix @ vector."""

    def dense_solve(self, matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray:
        """Solve matrix @ x = rhs; backends without a dense solver raise BackendUnavailable."""
        raise BackendUnavailable("Dense solve not implemented for this backend")
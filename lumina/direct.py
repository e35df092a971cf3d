"""Direct LU solve of the CDA linear system, for small systems."""

from __future__ import annotations

import numpy as np

from lumina.solver import LinAlgError


def solve_direct(matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """Solve A x = b by LU decomposition with partial pivoting.

    Raises ValueError for mismatched shapes and LinAlgError for a singular matrix.
    """
    a = np.asarray(matrix, dtype=complex)
    b = np.asarray(rhs, dtype=complex).reshape(-1)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError("Matrix must be square")
    if a.shape[0] != b.shape[0]:
        raise ValueError("RHS length must match matrix dimension")
    if b.size == 0:
        return b.copy()
    try:
        return np.linalg.solve(a, b)
    except np.linalg.LinAlgError as exc:
        raise LinAlgError(str(exc)) from exc
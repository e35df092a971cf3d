"""Restarted GMRES(m) for large CDA systems."""

from __future__ import annotations

import numpy as np

from lumina.solver import ConvergenceFailure

_RESTART = 30
_TINY = 1e-30


def givens_rotation(a: complex, b: complex) -> tuple[float, complex]:
    """Return (c, s) with -conj(s) a + c b = 0 and |c a + s b| = sqrt(|a|^2 + |b|^2)."""
    if abs(b) < _TINY:
        return 1.0, 0j
    if abs(a) < _TINY:
        return 0.0, complex(b / abs(b))
    r = float(np.hypot(abs(a), abs(b)))
    c = abs(a) / r
    s = (a / abs(a)) * np.conj(b) / r
    return c, complex(s)


def _back_substitute(h: np.ndarray, g: np.ndarray, m: int) -> np.ndarray:
    y = np.zeros(m, dtype=complex)
    for i in reversed(range(m)):
        total = g[i] - h[i, i + 1 : m] @ y[i + 1 : m]
        if abs(h[i, i]) > _TINY:
            y[i] = total / h[i, i]
    return y


def solve_gmres(
    matrix: np.ndarray,
    rhs: np.ndarray,
    tolerance: float,
    max_iterations: int,
) -> np.ndarray:
    """Solve A x = b with restarted GMRES from a zero initial guess.

    Converges when ||b - A x|| < tolerance * ||b||. Raises ConvergenceFailure
    once ``max_iterations`` Arnoldi steps have been taken without converging.
    """
    a = np.asarray(matrix, dtype=complex)
    b = np.asarray(rhs, dtype=complex).reshape(-1)
    n = b.shape[0]
    restart_dim = min(_RESTART, n)

    x = np.zeros(n, dtype=complex)
    rhs_norm = float(np.linalg.norm(b))
    if rhs_norm < _TINY:
        return x

    abs_tol = tolerance * rhs_norm
    total_iters = 0

    while True:
        r = b - a @ x
        beta = float(np.linalg.norm(r))
        if beta < abs_tol:
            return x
        if total_iters >= max_iterations:
            raise ConvergenceFailure(max_iterations, beta / rhs_norm)

        basis = [r / beta]
        h = np.zeros((restart_dim + 1, restart_dim), dtype=complex)
        cs: list[float] = []
        sn: list[complex] = []
        g = np.zeros(restart_dim + 1, dtype=complex)
        g[0] = beta

        j = 0
        while j < restart_dim and total_iters < max_iterations:
            w = a @ basis[j]
            for i, v in enumerate(basis[: j + 1]):
                h_ij = np.vdot(v, w)
                h[i, j] = h_ij
                w = w - h_ij * v

            w_norm = float(np.linalg.norm(w))
            h[j + 1, j] = w_norm
            basis.append(w / w_norm if w_norm > _TINY else np.zeros(n, dtype=complex))

            for i, (c_i, s_i) in enumerate(zip(cs, sn)):
                upper, lower = h[i, j], h[i + 1, j]
                h[i, j] = c_i * upper + s_i * lower
                h[i + 1, j] = -np.conj(s_i) * upper + c_i * lower

            c, s = givens_rotation(h[j, j], h[j + 1, j])
            cs.append(c)
            sn.append(s)

            h[j, j] = c * h[j, j] + s * h[j + 1, j]
            h[j + 1, j] = 0.0
            g[j], g[j + 1] = c * g[j] + s * g[j + 1], -np.conj(s) * g[j] + c * g[j + 1]

            total_iters += 1
            j += 1
            if abs(g[j]) < abs_tol:
                break

        y = _back_substitute(h, g, j)
        for v, coeff in zip(basis[:j], y):
            x = x + coeff * v

        res_norm = float(np.linalg.norm(b - a @ x))
        if res_norm < abs_tol:
            return x
        if total_iters >= max_iterations:
            raise ConvergenceFailure(max_iterations, res_norm / rhs_norm)
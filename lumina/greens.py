"""Free-space dyadic Green's tensor, point and cell-averaged forms."""

from __future__ import annotations

import itertools
import math
from typing import Sequence

import numpy as np

_GL_NODES = (-math.sqrt(3.0 / 5.0), 0.0, math.sqrt(3.0 / 5.0))
_GL_WEIGHTS = (5.0 / 9.0, 8.0 / 9.0, 5.0 / 9.0)


def dyadic_greens_tensor(r1: Sequence[float], r2: Sequence[float], k: float) -> np.ndarray:
    """Return the 3x3 complex tensor G(r1, r2) for wavenumber ``k`` (nm^-1).

    Raises ValueError when the two points coincide.
    """
    disp = np.asarray(r1, dtype=float) - np.asarray(r2, dtype=float)
    r = float(np.sqrt(disp @ disp))
    if not r > 1e-15:
        raise ValueError("Self-interaction: r1 and r2 must not coincide")

    kr = k * r
    kr_sq = kr * kr
    ikr = 1j * kr
    prefactor = k * k * np.exp(ikr) / (4.0 * math.pi * r)

    a = 1.0 + (ikr - 1.0) / kr_sq
    b = (3.0 - 3.0 * ikr - kr_sq) / kr_sq
    r_hat = disp / r
    return prefactor * (a * np.eye(3, dtype=complex) + b * np.outer(r_hat, r_hat))


def dyadic_greens_tensor_filtered(
    r_obs: Sequence[float],
    r_src: Sequence[float],
    k: float,
    cell_size: float,
) -> np.ndarray:
    """Green's tensor averaged over the cubic source cell (3-point Gauss-Legendre).

    Pairs further apart than twice the cell size use the point-dipole tensor.
    """
    obs = np.asarray(r_obs, dtype=float)
    src = np.asarray(r_src, dtype=float)
    disp = obs - src
    if math.sqrt(float(disp @ disp)) > 2.0 * cell_size:
        return dyadic_greens_tensor(obs, src, k)

    half_d = cell_size / 2.0
    g_avg = np.zeros((3, 3), dtype=complex)
    total_weight = 0.0
    rule = list(zip(_GL_NODES, _GL_WEIGHTS))
    for (nx, wx), (ny, wy), (nz, wz) in itertools.product(rule, repeat=3):
        r_prime = src + half_d * np.array([nx, ny, nz])
        diff = obs - r_prime
        if float(diff @ diff) < 1e-20:
            continue
        weight = wx * wy * wz
        g_avg += weight * dyadic_greens_tensor(obs, r_prime, k)
        total_weight += weight

    if total_weight > 1e-30:
        g_avg /= total_weight
    return g_avg
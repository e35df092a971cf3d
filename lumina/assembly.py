"""Assembly of the 3N x 3N interaction matrix and incident-field vector."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from lumina.greens import dyadic_greens_tensor, dyadic_greens_tensor_filtered
from lumina.solver import LinAlgError
from lumina.types import Dipole, IncidentField


def invert_3x3(m: Sequence[complex] | np.ndarray) -> np.ndarray:
    """Invert a complex 3x3 matrix, given flat (row-major) or as 3x3.

    Returns the inverse as a 3x3 array. Raises LinAlgError if the determinant
    is numerically zero.
    """
    arr = np.asarray(m, dtype=complex).reshape(3, 3)
    (a, b, c), (d, e, f), (g, h, k) = arr

    det = a * (e * k - f * h) - b * (d * k - f * g) + c * (d * h - e * g)
    if not abs(det) > 1e-30:
        raise LinAlgError(f"Singular polarisability tensor (det = {abs(det):.2e})")

    cofactors = np.array(
        [
            [e * k - f * h, c * h - b * k, b * f - c * e],
            [f * g - d * k, a * k - c * g, c * d - a * f],
            [d * h - e * g, b * g - a * h, a * e - b * d],
        ],
        dtype=complex,
    )
    return cofactors / det


def assemble_interaction_matrix(
    dipoles: Sequence[Dipole],
    k: float,
    use_fcd: bool,
    cell_size: float,
) -> np.ndarray:
    """Build the matrix A with A p = E_inc.

    Diagonal 3x3 blocks hold the inverse polarisabilities; off-diagonal blocks
    hold -G(r_i, r_j), cell-averaged when ``use_fcd`` is set.
    """
    n = len(dipoles)
    matrix = np.zeros((3 * n, 3 * n), dtype=complex)

    for i, dip_i in enumerate(dipoles):
        rows = slice(3 * i, 3 * i + 3)
        matrix[rows, rows] = invert_3x3(dip_i.polarisability)
        for j, dip_j in enumerate(dipoles):
            if i == j:
                continue
            if use_fcd:
                g = dyadic_greens_tensor_filtered(dip_i.position, dip_j.position, k, cell_size)
            else:
                g = dyadic_greens_tensor(dip_i.position, dip_j.position, k)
            matrix[rows, 3 * j : 3 * j + 3] = -g

    return matrix


def build_incident_field_vector(
    dipoles: Sequence[Dipole],
    incident: IncidentField,
    k: float,
) -> np.ndarray:
    """Stack the incident field at every dipole into a vector of length 3N."""
    if not dipoles:
        return np.zeros(0, dtype=complex)
    return np.concatenate([incident.at_position(d.position, k) for d in dipoles]).astype(complex)
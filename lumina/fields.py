"""Near-field, far-field and circular-dichroism quantities from solved dipole moments."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from lumina.greens import dyadic_greens_tensor
from lumina.solver import NearFieldPlane
from lumina.types import Dipole, DipoleResponse, FarFieldMap, IncidentField, NearFieldMap


def field_at_point(
    obs_point: Sequence[float],
    dipoles: Sequence[Dipole],
    response: DipoleResponse,
    k: float,
    incident: IncidentField,
) -> np.ndarray:
    """Total electric field at ``obs_point``: incident plus all dipole contributions.

    Dipoles that coincide with the observation point are skipped.
    """
    obs = np.asarray(obs_point, dtype=float)
    e = incident.at_position(obs, k).astype(complex)
    for dipole, moment in zip(dipoles, response.moments):
        diff = obs - dipole.position
        if float(diff @ diff) < 1e-20:
            continue
        e = e + dyadic_greens_tensor(obs, dipole.position, k) @ moment
    return e


def _normalise(v: Sequence[float]) -> np.ndarray:
    vec = np.asarray(v, dtype=float)
    length = float(np.sqrt(vec @ vec))
    if length == 0.0:
        raise ValueError("cannot normalise a zero vector")
    return vec / length


def plane_basis(normal: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    """Orthonormal in-plane basis (u, v) with v = n x u for a plane with ``normal``."""
    n = _normalise(normal)
    seed = np.array([1.0, 0.0, 0.0]) if abs(n[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
    u = _normalise(seed - float(seed @ n) * n)
    v = np.cross(n, u)
    return u, v


def compute_near_field_map(
    dipoles: Sequence[Dipole],
    response: DipoleResponse,
    plane: NearFieldPlane,
    k: float,
    incident: IncidentField,
) -> NearFieldMap:
    """Sample |E|^2 on an nx x ny grid spanning the observation plane."""
    nx, ny = plane.nx, plane.ny
    u_hat, v_hat = plane_basis(plane.normal)
    centre = np.asarray(plane.centre, dtype=float)

    x_min, x_max = -plane.half_width, plane.half_width
    y_min, y_max = -plane.half_height, plane.half_height
    us = np.linspace(x_min, x_max, nx)
    vs = np.linspace(y_min, y_max, ny)

    positions = []
    intensities = []
    for v in vs:
        for u in us:
            obs = centre + u * u_hat + v * v_hat
            e = field_at_point(obs, dipoles, response, k, incident)
            positions.append(obs)
            intensities.append(float(np.sum(np.abs(e) ** 2)))

    extent = (
        centre[0] + x_min * u_hat[0] + y_min * v_hat[0],
        centre[0] + x_max * u_hat[0] + y_max * v_hat[0],
        centre[1] + x_min * u_hat[1] + y_min * v_hat[1],
        centre[1] + x_max * u_hat[1] + y_max * v_hat[1],
    )
    return NearFieldMap(
        positions=np.array(positions, dtype=float).reshape(-1, 3),
        field_intensity=np.array(intensities, dtype=float),
        nx=nx,
        ny=ny,
        extent=extent,
    )


def compute_far_field(
    dipoles: Sequence[Dipole],
    response: DipoleResponse,
    k: float,
    n_theta: int,
    n_phi: int,
) -> FarFieldMap:
    """Unnormalised differential scattering intensity on an n_theta x n_phi grid.

    theta spans [0, pi] inclusive, phi spans [0, 2 pi) exclusive; theta varies slowest.
    """
    thetas = math.pi * np.arange(n_theta) / max(n_theta - 1, 1)
    phis = 2.0 * math.pi * np.arange(n_phi) / n_phi if n_phi else np.zeros(0)
    theta_grid, phi_grid = np.meshgrid(thetas, phis, indexing="ij")
    theta_flat = theta_grid.reshape(-1)
    phi_flat = phi_grid.reshape(-1)

    rhat = np.stack(
        [
            np.sin(theta_flat) * np.cos(phi_flat),
            np.sin(theta_flat) * np.sin(phi_flat),
            np.cos(theta_flat),
        ],
        axis=1,
    )

    positions = np.array([d.position for d in dipoles], dtype=float).reshape(-1, 3)
    moments = np.asarray(response.moments, dtype=complex).reshape(-1, 3)[: len(positions)]

    phases = np.exp(-1j * k * (rhat @ positions.T))
    f = phases @ moments
    rdotf = np.sum(rhat * f, axis=1)
    ft = f - rdotf[:, None] * rhat
    intensity = np.sum(np.abs(ft) ** 2, axis=1)

    return FarFieldMap(
        wavelength_nm=response.wavelength_nm,
        theta=[float(t) for t in theta_flat],
        phi=[float(p) for p in phi_flat],
        intensity=[float(i) for i in intensity],
        n_theta=n_theta,
        n_phi=n_phi,
    )


def compute_circular_dichroism(
    response_x: DipoleResponse,
    response_y: DipoleResponse,
    k: float,
) -> float:
    """Delta C_ext = k * sum_i [Im(p_y under x-pol) - Im(p_x under y-pol)]."""
    n = response_x.moments.shape[0]
    py_under_x = response_x.moments[:, 1].imag
    px_under_y = response_y.moments[:n, 0].imag
    return float(k * np.sum(py_under_x - px_under_y))
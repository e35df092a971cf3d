"""Analytical Mie theory for a homogeneous sphere (Bohren & Huffman, 1983)."""

from __future__ import annotations

import cmath
import math
from typing import Callable, TypeVar

_T = TypeVar("_T", float, complex)


def mie_cross_sections(
    radius_nm: float,
    wavelength_nm: float,
    epsilon_sphere: complex,
    n_medium: float,
) -> tuple[float, float, float]:
    """Return the (extinction, scattering, absorption) cross-sections in nm^2."""
    k = 2.0 * math.pi * n_medium / wavelength_nm
    x = k * radius_nm

    m = cmath.sqrt(complex(epsilon_sphere)) / complex(n_medium)

    # Wiscombe's criterion for the number of terms
    n_max = max(math.ceil(x + 4.0 * x ** (1.0 / 3.0) + 2.0), 3)

    a_coeffs, b_coeffs = mie_coefficients(x, m, n_max)

    c_ext = 0.0
    c_sca = 0.0
    for order, (a_n, b_n) in enumerate(zip(a_coeffs, b_coeffs), start=1):
        weight = 2.0 * order + 1.0
        c_ext += weight * (a_n.real + b_n.real)
        c_sca += weight * (abs(a_n) ** 2 + abs(b_n) ** 2)

    prefactor = 2.0 * math.pi / (k * k)
    c_ext *= prefactor
    c_sca *= prefactor
    return c_ext, c_sca, c_ext - c_sca


def mie_coefficients(x: float, m: complex, n_max: int) -> tuple[list[complex], list[complex]]:
    """Mie coefficients a_n and b_n for orders 1..n_max.

    ``x`` is the size parameter and ``m`` the relative refractive index.
    """
    mx = complex(m) * x

    psi_mx = _upward(cmath.sin(mx), cmath.sin(mx) / mx - cmath.cos(mx), mx, n_max)
    dpsi_mx = _derivative(cmath.cos(mx), psi_mx, mx)

    psi_x = _upward(math.sin(x), math.sin(x) / x - math.cos(x), x, n_max)
    dpsi_x = _derivative(math.cos(x), psi_x, x)

    chi_x = _upward(-math.cos(x), -math.cos(x) / x - math.sin(x), x, n_max)
    xi_x = [complex(p, c) for p, c in zip(psi_x, chi_x)]
    dxi_x = _derivative(complex(math.cos(x), math.sin(x)), xi_x, complex(x))

    m = complex(m)
    a_coeffs: list[complex] = []
    b_coeffs: list[complex] = []
    for n in range(1, n_max + 1):
        psi_n_mx = psi_mx[n]
        dpsi_n_mx = dpsi_mx[n]
        psi_n_x = complex(psi_x[n])
        dpsi_n_x = complex(dpsi_x[n])
        xi_n_x = xi_x[n]
        dxi_n_x = dxi_x[n]

        a_num = m * psi_n_mx * dpsi_n_x - psi_n_x * dpsi_n_mx
        a_den = m * psi_n_mx * dxi_n_x - xi_n_x * dpsi_n_mx
        a_coeffs.append(a_num / a_den)

        b_num = psi_n_mx * dpsi_n_x - m * psi_n_x * dpsi_n_mx
        b_den = psi_n_mx * dxi_n_x - m * xi_n_x * dpsi_n_mx
        b_coeffs.append(b_num / b_den)

    return a_coeffs, b_coeffs


def _upward(first: _T, second: _T, z: _T, n_max: int) -> list[_T]:
    """Riccati-Bessel values of orders 0..n_max by upward recurrence."""
    values = [first]
    if n_max == 0:
        return values
    values.append(second)
    for n in range(1, n_max):
        values.append((2 * n + 1) / z * values[n] - values[n - 1])
    return values


def _derivative(first: _T, values: list[_T], z: _T) -> list[_T]:
    """Derivatives via f_n'(z) = f_{n-1}(z) - n/z f_n(z), with f_0' given."""
    return [first] + [values[n - 1] - n / z * values[n] for n in range(1, len(values))]
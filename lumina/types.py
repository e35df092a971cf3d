"""Core data structures shared by the solvers: dipoles, parameters and results."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import numpy as np


def _vector3(values: Sequence[float]) -> np.ndarray:
    vec = np.asarray(values, dtype=float).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vec.shape}")
    return vec


def _require(data: Mapping[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field `{key}`") from None


@dataclass(eq=False)
class Dipole:
    """A point dipole with a 3x3 complex polarisability tensor (nm^3)."""

    position: np.ndarray
    polarisability: np.ndarray

    def __post_init__(self) -> None:
        self.position = _vector3(self.position)
        self.polarisability = np.asarray(self.polarisability, dtype=complex).reshape(3, 3)

    @classmethod
    def isotropic(cls, position: Sequence[float], alpha: complex) -> "Dipole":
        """Create a dipole with scalar polarisability ``alpha``."""
        return cls(position, complex(alpha) * np.eye(3, dtype=complex))


@dataclass(eq=False)
class IncidentField:
    """A plane wave with unit propagation direction and polarisation."""

    direction: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    polarisation: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0]))
    amplitude: float = 1.0

    def __post_init__(self) -> None:
        self.direction = _vector3(self.direction)
        self.polarisation = _vector3(self.polarisation)
        self.amplitude = float(self.amplitude)

    def at_position(self, position: Sequence[float], k: float) -> np.ndarray:
        """Return E0 * e * exp(i k d.r) at ``position``."""
        kdotr = k * float(self.direction @ _vector3(position))
        phase = np.exp(1j * kdotr)
        return self.amplitude * phase * self.polarisation.astype(complex)


@dataclass
class SimulationParams:
    """Parameters defining a simulation run."""

    wavelength_range: tuple[float, float] = (400.0, 900.0)
    num_wavelengths: int = 100
    environment_n: float = 1.0
    solver_tolerance: float = 1e-6
    max_iterations: int = 1000


@dataclass
class CrossSections:
    """Optical cross-sections (nm^2) at one wavelength."""

    wavelength_nm: float
    extinction: float
    absorption: float
    scattering: float
    circular_dichroism: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "wavelength_nm": self.wavelength_nm,
            "extinction": self.extinction,
            "absorption": self.absorption,
            "scattering": self.scattering,
            "circular_dichroism": self.circular_dichroism,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CrossSections":
        cd = data.get("circular_dichroism")
        return cls(
            wavelength_nm=float(_require(data, "wavelength_nm")),
            extinction=float(_require(data, "extinction")),
            absorption=float(_require(data, "absorption")),
            scattering=float(_require(data, "scattering")),
            circular_dichroism=None if cd is None else float(cd),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> "CrossSections":
        return cls.from_dict(json.loads(text))


@dataclass
class FarFieldMap:
    """Far-field radiation pattern sampled on the unit sphere."""

    wavelength_nm: float
    theta: list[float]
    phi: list[float]
    intensity: list[float]
    n_theta: int
    n_phi: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "wavelength_nm": self.wavelength_nm,
            "theta": [float(v) for v in self.theta],
            "phi": [float(v) for v in self.phi],
            "intensity": [float(v) for v in self.intensity],
            "n_theta": self.n_theta,
            "n_phi": self.n_phi,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FarFieldMap":
        return cls(
            wavelength_nm=float(_require(data, "wavelength_nm")),
            theta=[float(v) for v in _require(data, "theta")],
            phi=[float(v) for v in _require(data, "phi")],
            intensity=[float(v) for v in _require(data, "intensity")],
            n_theta=int(_require(data, "n_theta")),
            n_phi=int(_require(data, "n_phi")),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> "FarFieldMap":
        return cls.from_dict(json.loads(text))


@dataclass(eq=False)
class DipoleResponse:
    """Solved dipole moments and local fields, each of shape (N, 3)."""

    wavelength_nm: float
    moments: np.ndarray
    local_fields: np.ndarray

    def __post_init__(self) -> None:
        self.moments = np.asarray(self.moments, dtype=complex).reshape(-1, 3)
        self.local_fields = np.asarray(self.local_fields, dtype=complex).reshape(-1, 3)


@dataclass(eq=False)
class NearFieldMap:
    """|E|^2 sampled on a 2D grid; extent is (x_min, x_max, y_min, y_max) in nm."""

    positions: np.ndarray
    field_intensity: np.ndarray
    nx: int
    ny: int
    extent: tuple[float, float, float, float]

    def __post_init__(self) -> None:
        self.positions = np.asarray(self.positions, dtype=float).reshape(-1, 3)
        self.field_intensity = np.asarray(self.field_intensity, dtype=float).reshape(-1)
        self.extent = tuple(float(v) for v in self.extent)


@dataclass
class SimulationResult:
    """Complete results from a simulation run."""

    spectra: list[CrossSections]
    dipole_responses: list[DipoleResponse] | None = None
    near_field_maps: list[NearFieldMap] | None = None


def clausius_mossotti(volume_nm3: float, epsilon: complex, epsilon_m: float) -> complex:
    """Clausius-Mossotti polarisability 3V(eps - eps_m)/(eps + 2 eps_m), in nm^3."""
    eps_m = complex(epsilon_m)
    return 3.0 * volume_nm3 * (epsilon - eps_m) / (epsilon + 2.0 * eps_m)


def radiative_correction(alpha_cm: complex, k: float) -> complex:
    """Draine radiative reaction correction: alpha / (1 - i k^3 alpha / (6 pi))."""
    correction = 1j * k**3 / (6.0 * math.pi)
    return alpha_cm / (1.0 - correction * alpha_cm)


_LDR_B1 = -1.8915316
_LDR_B2 = 0.1648469
_LDR_B3 = -1.7700004


def ldr_correction(
    alpha_cm: complex,
    k: float,
    d: float,
    epsilon: complex,
    propagation: Sequence[float],
    polarisation: Sequence[float],
) -> complex:
    """Lattice dispersion relation polarisability (Draine & Goodman 1993)."""
    s = float(np.sum((_vector3(polarisation) * _vector3(propagation)) ** 2))
    rad_reaction = 1j * k**3 / (6.0 * math.pi)
    lattice_term = (k * k / d) * (_LDR_B1 + _LDR_B2 * epsilon + _LDR_B3 * epsilon * s) / (
        4.0 * math.pi
    )
    inv_alpha = 1.0 / alpha_cm - rad_reaction - lattice_term
    return 1.0 / inv_alpha
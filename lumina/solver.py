"""Optical solver interface, solver errors and the near-field observation plane."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from lumina.types import (
    CrossSections,
    Dipole,
    DipoleResponse,
    FarFieldMap,
    NearFieldMap,
    SimulationParams,
)


class SolverError(Exception):
    """Base class for failures during an optical solve."""


class ConvergenceFailure(SolverError):
    """An iterative solver did not reach its tolerance."""

    def __init__(self, max_iter: int, residual: float) -> None:
        self.max_iter = max_iter
        self.residual = residual
        super().__init__(
            f"Solver failed to converge after {max_iter} iterations "
            f"(residual: {residual:.2e})"
        )


class InvalidGeometry(SolverError):
    """The dipole configuration cannot be solved."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid geometry: {detail}")


class LinAlgError(SolverError):
    """A linear algebra step failed."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Linear algebra error: {detail}")


class BackendFailure(SolverError):
    """The compute backend reported an error."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Compute backend error: {detail}")


@dataclass
class NearFieldPlane:
    """A rectangular observation plane centred at ``centre`` with the given normal."""

    centre: tuple[float, float, float]
    normal: tuple[float, float, float]
    half_width: float
    half_height: float
    nx: int
    ny: int

    def __post_init__(self) -> None:
        self.centre = tuple(float(v) for v in self.centre)
        self.normal = tuple(float(v) for v in self.normal)
        if len(self.centre) != 3 or len(self.normal) != 3:
            raise ValueError("centre and normal must be 3-vectors")


class OpticalSolver(ABC):
    """Interface shared by all optical simulation methods."""

    @abstractmethod
    def compute_cross_sections(
        self, dipoles: Sequence[Dipole], wavelength_nm: float, params: SimulationParams
    ) -> CrossSections:
        """Extinction, absorption and scattering at one wavelength."""

    @abstractmethod
    def solve_dipoles(
        self, dipoles: Sequence[Dipole], wavelength_nm: float, params: SimulationParams
    ) -> DipoleResponse:
        """Self-consistent dipole moments at one wavelength."""

    @abstractmethod
    def compute_near_field(
        self, dipoles: Sequence[Dipole], response: DipoleResponse, plane: NearFieldPlane
    ) -> NearFieldMap:
        """Near-field intensity on a 2D observation plane."""

    @abstractmethod
    def compute_far_field(
        self,
        dipoles: Sequence[Dipole],
        response: DipoleResponse,
        n_theta: int,
        n_phi: int,
    ) -> FarFieldMap:
        """Far-field radiation pattern on an n_theta x n_phi grid."""

    @abstractmethod
    def method_name(self) -> str:
        """Human-readable name of the method."""
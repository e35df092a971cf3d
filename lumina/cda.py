"""Coupled dipole approximation solver."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from lumina.assembly import (
    assemble_interaction_matrix,
    build_incident_field_vector,
    invert_3x3,
)
from lumina.direct import solve_direct
from lumina.fields import compute_far_field, compute_near_field_map
from lumina.iterative import solve_gmres
from lumina.solver import InvalidGeometry, NearFieldPlane, OpticalSolver
from lumina.types import (
    CrossSections,
    Dipole,
    DipoleResponse,
    FarFieldMap,
    IncidentField,
    NearFieldMap,
    SimulationParams,
)


@dataclass
class CdaSolver(OpticalSolver):
    """CDA solver: direct LU up to ``iterative_threshold`` dipoles, GMRES above.

    With ``use_fcd`` the Green's tensor is averaged over each source cell of
    side ``cell_size`` (nm) for near neighbours.
    """

    iterative_threshold: int = 1000
    incident_field: IncidentField = field(default_factory=IncidentField)
    use_fcd: bool = True
    cell_size: float = 3.0

    @classmethod
    def with_fcd(cls, iterative_threshold: int, use_fcd: bool, cell_size: float) -> "CdaSolver":
        return cls(iterative_threshold=iterative_threshold, use_fcd=use_fcd, cell_size=cell_size)

    @classmethod
    def with_incident(
        cls,
        iterative_threshold: int,
        use_fcd: bool,
        cell_size: float,
        incident_field: IncidentField,
    ) -> "CdaSolver":
        return cls(
            iterative_threshold=iterative_threshold,
            incident_field=incident_field,
            use_fcd=use_fcd,
            cell_size=cell_size,
        )

    @staticmethod
    def _wavenumber(wavelength_nm: float, n_medium: float) -> float:
        return 2.0 * math.pi * n_medium / wavelength_nm

    def compute_cross_sections(
        self, dipoles: Sequence[Dipole], wavelength_nm: float, params: SimulationParams
    ) -> CrossSections:
        response = self.solve_dipoles(dipoles, wavelength_nm, params)
        k = self._wavenumber(wavelength_nm, params.environment_n)
        e0_sq = self.incident_field.amplitude**2

        e_inc = np.array(
            [self.incident_field.at_position(d.position, k) for d in dipoles], dtype=complex
        )
        c_ext = k / e0_sq * float(np.sum((np.conj(e_inc) * response.moments).imag))

        k3 = k**3
        c_abs = 0.0
        for dipole, p in zip(dipoles, response.moments):
            inv_alpha = invert_3x3(dipole.polarisability)
            quad = p @ np.conj(inv_alpha) @ np.conj(p)
            c_abs += float(quad.imag) - (2.0 / 3.0) * k3 * float(np.sum(np.abs(p) ** 2))
        c_abs *= k / e0_sq

        return CrossSections(
            wavelength_nm=wavelength_nm,
            extinction=c_ext,
            absorption=c_abs,
            scattering=max(c_ext - c_abs, 0.0),
            circular_dichroism=None,
        )

    def solve_dipoles(
        self, dipoles: Sequence[Dipole], wavelength_nm: float, params: SimulationParams
    ) -> DipoleResponse:
        if not dipoles:
            raise InvalidGeometry("No dipoles provided")

        k = self._wavenumber(wavelength_nm, params.environment_n)
        n = len(dipoles)
        matrix = assemble_interaction_matrix(dipoles, k, self.use_fcd, self.cell_size)
        rhs = build_incident_field_vector(dipoles, self.incident_field, k)

        if n <= self.iterative_threshold:
            solution = solve_direct(matrix, rhs)
        else:
            solution = solve_gmres(matrix, rhs, params.solver_tolerance, params.max_iterations)

        moments = solution.reshape(n, 3)
        local_fields = np.array(
            [invert_3x3(d.polarisability) @ p for d, p in zip(dipoles, moments)],
            dtype=complex,
        )
        return DipoleResponse(
            wavelength_nm=wavelength_nm, moments=moments, local_fields=local_fields
        )

    def compute_near_field(
        self, dipoles: Sequence[Dipole], response: DipoleResponse, plane: NearFieldPlane
    ) -> NearFieldMap:
        k = self._wavenumber(response.wavelength_nm, 1.0)
        return compute_near_field_map(dipoles, response, plane, k, self.incident_field)

    def compute_far_field(
        self,
        dipoles: Sequence[Dipole],
        response: DipoleResponse,
        n_theta: int,
        n_phi: int,
    ) -> FarFieldMap:
        k = self._wavenumber(response.wavelength_nm, 1.0)
        return compute_far_field(dipoles, response, k, n_theta, n_phi)

    def method_name(self) -> str:
        return "Coupled Dipole Approximation (CDA)"
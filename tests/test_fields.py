import itertools
import math

import numpy as np
import pytest

from lumina.cda import CdaSolver
from lumina.fields import (
    compute_circular_dichroism,
    compute_far_field,
    compute_near_field_map,
    field_at_point,
    plane_basis,
)
from lumina.solver import NearFieldPlane
from lumina.types import (
    Dipole,
    DipoleResponse,
    IncidentField,
    SimulationParams,
    clausius_mossotti,
    radiative_correction,
)

GOLD_LIKE = complex(-2.0, 5.0)


def sphere_lattice(radius, spacing):
    n = int(radius // spacing)
    steps = range(-n, n + 1)
    return [
        (i * spacing, j * spacing, m * spacing)
        for i, j, m in itertools.product(steps, repeat=3)
        if (i * i + j * j + m * m) * spacing**2 <= radius**2
    ]


def sphere_dipoles(radius, spacing, wl, eps=GOLD_LIKE):
    k = 2.0 * math.pi / wl
    alpha = radiative_correction(clausius_mossotti(spacing**3, eps, 1.0), k)
    return [Dipole.isotropic(p, alpha) for p in sphere_lattice(radius, spacing)]


def default_params():
    return SimulationParams(
        wavelength_range=(400.0, 800.0),
        num_wavelengths=10,
        environment_n=1.0,
        solver_tolerance=1e-8,
        max_iterations=500,
    )


@pytest.fixture(scope="module")
def solved_sphere():
    dipoles = sphere_dipoles(10.0, 3.0, 520.0)
    solver = CdaSolver()
    response = solver.solve_dipoles(dipoles, 520.0, default_params())
    return dipoles, response, solver


def x_dipole_response():
    moments = np.zeros((1, 3), dtype=complex)
    moments[0, 0] = 1.0
    return DipoleResponse(500.0, moments, np.zeros((1, 3)))


def test_near_field_map_dimensions(solved_sphere):
    dipoles, response, solver = solved_sphere
    plane = NearFieldPlane((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), 20.0, 20.0, 15, 12)
    nf = compute_near_field_map(
        dipoles, response, plane, 2.0 * math.pi / 520.0, solver.incident_field
    )
    assert nf.nx == 15
    assert nf.ny == 12
    assert nf.positions.shape == (15 * 12, 3)
    assert nf.field_intensity.shape == (15 * 12,)


def test_near_field_intensity_is_nonnegative(solved_sphere):
    dipoles, response, solver = solved_sphere
    plane = NearFieldPlane((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), 30.0, 30.0, 10, 10)
    nf = compute_near_field_map(
        dipoles, response, plane, 2.0 * math.pi / 520.0, solver.incident_field
    )
    assert len(nf.field_intensity) == 100
    assert float(np.min(nf.field_intensity)) >= 0.0
    assert math.isfinite(float(np.max(nf.field_intensity)))


def test_near_field_nonzero_outside_particle(solved_sphere):
    dipoles, response, solver = solved_sphere
    plane = NearFieldPlane((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), 100.0, 100.0, 5, 5)
    nf = compute_near_field_map(
        dipoles, response, plane, 2.0 * math.pi / 520.0, solver.incident_field
    )
    assert np.count_nonzero(nf.field_intensity > 0.5) > 0


def test_near_field_extent_and_grid_for_z_normal():
    response = x_dipole_response()
    dipoles = [Dipole.isotropic((0.0, 0.0, 0.0), 1.0)]
    plane = NearFieldPlane((1.0, 2.0, 0.0), (0.0, 0.0, 1.0), 10.0, 5.0, 3, 2)
    nf = compute_near_field_map(dipoles, response, plane, 0.01, IncidentField())
    assert nf.extent == pytest.approx((-9.0, 11.0, -3.0, 7.0))
    np.testing.assert_allclose(nf.positions[0], [-9.0, -3.0, 0.0])
    np.testing.assert_allclose(nf.positions[2], [11.0, -3.0, 0.0])
    np.testing.assert_allclose(nf.positions[-1], [11.0, 7.0, 0.0])


def test_plane_basis_z_normal():
    u, v = plane_basis((0.0, 0.0, 2.0))
    np.testing.assert_allclose(u, [1.0, 0.0, 0.0])
    np.testing.assert_allclose(v, [0.0, 1.0, 0.0])


def test_plane_basis_x_normal_uses_y_seed():
    u, v = plane_basis((1.0, 0.0, 0.0))
    np.testing.assert_allclose(u, [0.0, 1.0, 0.0])
    np.testing.assert_allclose(v, [0.0, 0.0, 1.0])


@pytest.mark.parametrize("normal", [(1.0, 1.0, 1.0), (0.3, -2.0, 0.5), (0.95, 0.1, 0.0)])
def test_plane_basis_is_orthonormal(normal):
    u, v = plane_basis(normal)
    n = np.asarray(normal) / np.linalg.norm(normal)
    assert u @ u == pytest.approx(1.0)
    assert v @ v == pytest.approx(1.0)
    assert abs(u @ v) < 1e-12
    assert abs(u @ n) < 1e-12
    assert abs(v @ n) < 1e-12


def test_plane_basis_zero_normal_raises():
    with pytest.raises(ValueError):
        plane_basis((0.0, 0.0, 0.0))


def test_field_at_point_without_dipoles_is_incident():
    incident = IncidentField()
    response = DipoleResponse(500.0, np.zeros((0, 3)), np.zeros((0, 3)))
    point = (1.0, 2.0, 3.0)
    e = field_at_point(point, [], response, 0.02, incident)
    np.testing.assert_allclose(e, incident.at_position(point, 0.02))


def test_field_at_point_skips_coincident_dipole():
    incident = IncidentField()
    response = x_dipole_response()
    dipoles = [Dipole.isotropic((0.0, 0.0, 0.0), 1.0)]
    e = field_at_point((0.0, 0.0, 0.0), dipoles, response, 0.02, incident)
    np.testing.assert_allclose(e, [1.0, 0.0, 0.0])


def test_field_at_point_scattered_part_is_linear_in_moments():
    incident = IncidentField()
    dipoles = [Dipole.isotropic((0.0, 0.0, 0.0), 1.0), Dipole.isotropic((3.0, 0.0, 0.0), 1.0)]
    moments = np.array([[1.0 + 0.5j, 0.2, 0.0], [0.0, 1.0j, 0.3]])
    single = DipoleResponse(500.0, moments, np.zeros((2, 3)))
    double = DipoleResponse(500.0, 2.0 * moments, np.zeros((2, 3)))
    point = (5.0, 7.0, -2.0)
    k = 2.0 * math.pi / 500.0
    e_inc = incident.at_position(point, k)
    s1 = field_at_point(point, dipoles, single, k, incident) - e_inc
    s2 = field_at_point(point, dipoles, double, k, incident) - e_inc
    assert np.abs(s1).max() > 0.0
    np.testing.assert_allclose(s2, 2.0 * s1, rtol=1e-12)


def test_far_field_grid_dimensions():
    resp = CdaSolver.with_incident(1000, True, 3.0, IncidentField()).solve_dipoles(
        [Dipole.isotropic((0.0, 0.0, 0.0), complex(500.0, 50.0))], 500.0, default_params()
    )
    dipoles = [Dipole.isotropic((0.0, 0.0, 0.0), resp.moments[0, 0])]
    ff = compute_far_field(dipoles, resp, 2.0 * math.pi / 500.0, 18, 36)
    assert ff.n_theta == 18
    assert ff.n_phi == 36
    assert len(ff.theta) == 18 * 36
    assert len(ff.phi) == 18 * 36
    assert len(ff.intensity) == 18 * 36
    assert ff.wavelength_nm == 500.0


def test_far_field_intensity_nonnegative():
    resp = CdaSolver.with_incident(1000, True, 3.0, IncidentField()).solve_dipoles(
        [Dipole.isotropic((0.0, 0.0, 0.0), complex(500.0, 50.0))], 500.0, default_params()
    )
    dipoles = [Dipole.isotropic((0.0, 0.0, 0.0), complex(500.0, 50.0))]
    ff = compute_far_field(dipoles, resp, 2.0 * math.pi / 500.0, 18, 36)
    assert min(ff.intensity) >= 0.0


def test_far_field_angles_sampled():
    ff = compute_far_field(
        [Dipole.isotropic((0.0, 0.0, 0.0), 1.0)], x_dipole_response(), 0.01, 3, 4
    )
    assert ff.theta[:4] == pytest.approx([0.0] * 4)
    assert ff.theta[4] == pytest.approx(math.pi / 2)
    assert ff.theta[-1] == pytest.approx(math.pi)
    assert ff.phi[:4] == pytest.approx([0.0, math.pi / 2, math.pi, 3 * math.pi / 2])


def test_far_field_x_dipole_has_node_along_x():
    k = 2.0 * math.pi / 500.0
    ff = compute_far_field(
        [Dipole.isotropic((0.0, 0.0, 0.0), 1.0)], x_dipole_response(), k, 3, 4
    )
    assert ff.intensity[1 * 4 + 0] < 1e-20


def test_far_field_z_direction_has_maximum_for_x_dipole():
    k = 2.0 * math.pi / 500.0
    ff = compute_far_field(
        [Dipole.isotropic((0.0, 0.0, 0.0), 1.0)], x_dipole_response(), k, 3, 4
    )
    for ip in range(4):
        assert ff.intensity[ip] == pytest.approx(1.0, abs=1e-10)


def test_cd_isotropic_sphere_is_zero():
    wl = 500.0
    k = 2.0 * math.pi / wl
    dipoles = sphere_dipoles(6.0, 2.0, wl)
    params = default_params()
    inc_x = IncidentField((0.0, 0.0, 1.0), (1.0, 0.0, 0.0), 1.0)
    inc_y = IncidentField((0.0, 0.0, 1.0), (0.0, 1.0, 0.0), 1.0)
    resp_x = CdaSolver.with_incident(1000, True, 2.0, inc_x).solve_dipoles(dipoles, wl, params)
    resp_y = CdaSolver.with_incident(1000, True, 2.0, inc_y).solve_dipoles(dipoles, wl, params)
    cd = compute_circular_dichroism(resp_x, resp_y, k)
    assert abs(cd) < 1e-6


def test_cd_single_dipole_is_zero():
    wl = 500.0
    k = 2.0 * math.pi / wl
    dipole = Dipole.isotropic((0.0, 0.0, 0.0), complex(100.0, 10.0))
    params = default_params()
    inc_x = IncidentField((0.0, 0.0, 1.0), (1.0, 0.0, 0.0), 1.0)
    inc_y = IncidentField((0.0, 0.0, 1.0), (0.0, 1.0, 0.0), 1.0)
    resp_x = CdaSolver.with_incident(1000, True, 3.0, inc_x).solve_dipoles([dipole], wl, params)
    resp_y = CdaSolver.with_incident(1000, True, 3.0, inc_y).solve_dipoles([dipole], wl, params)
    cd = compute_circular_dichroism(resp_x, resp_y, k)
    assert math.isfinite(cd)
    assert abs(cd) < 1e-8


def test_cd_is_antisymmetric_in_its_responses():
    resp_a = DipoleResponse(500.0, [[0.1j, 2.0j, 0.0], [0.3, 0.7j, 1.0]], np.zeros((2, 3)))
    resp_b = DipoleResponse(500.0, [[0.5j, 0.2j, 0.0], [1.5j, 0.0, 0.0]], np.zeros((2, 3)))
    ab = compute_circular_dichroism(resp_a, resp_b, 0.02)
    ba = compute_circular_dichroism(resp_b, resp_a, 0.02)
    assert abs(ab) > 0.0
    assert ab == pytest.approx(-ba)
# lumina

A solver for the optical response of nanostructures using the coupled dipole
approximation (CDA). It models a particle as a set of polarisable point dipoles
that interact through the free-space dyadic Green's tensor. From this it
computes extinction, absorption and scattering cross-sections, near-field
intensity maps, far-field radiation patterns and circular dichroism. An
analytical Mie solution for homogeneous spheres is included for validation.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Quick start

Build a set of dipoles, give each one a polarisability, and solve:

```python
import math

from lumina.cda import CdaSolver
from lumina.mie import mie_cross_sections
from lumina.types import (
    Dipole,
    SimulationParams,
    clausius_mossotti,
    radiative_correction,
)

wavelength = 600.0           # nm
epsilon = complex(4.0, 0.5)  # dielectric function of the particle
n_medium = 1.0
spacing = 3.0                # dipole lattice spacing, nm

k = 2.0 * math.pi * n_medium / wavelength
alpha = radiative_correction(
    clausius_mossotti(spacing ** 3, epsilon, n_medium ** 2), k
)

positions = [
    (x * spacing, y * spacing, z * spacing)
    for x in range(-3, 4)
    for y in range(-3, 4)
    for z in range(-3, 4)
    if (x * x + y * y + z * z) * spacing ** 2 <= 10.0 ** 2
]
dipoles = [Dipole.isotropic(p, alpha) for p in positions]

solver = CdaSolver.with_fcd(1000, True, spacing)
params = SimulationParams(environment_n=n_medium)
cs = solver.compute_cross_sections(dipoles, wavelength, params)
print(cs.extinction, cs.absorption, cs.scattering)

mie_ext, mie_sca, mie_abs = mie_cross_sections(10.0, wavelength, epsilon, n_medium)
print(mie_ext)
```

`CdaSolver` solves systems with up to `iterative_threshold` dipoles (default
1000) directly by LU decomposition. It solves larger ones by restarted GMRES,
using `solver_tolerance` and `max_iterations` from `SimulationParams`. The
solver raises errors from `lumina.solver` in these cases:

- `ConvergenceFailure` when GMRES does not converge.
- `InvalidGeometry` when the dipole list is empty.
- `LinAlgError` when a polarisability tensor or the system matrix is singular.

With `use_fcd` set (the default), the Green's tensor between near neighbours
(closer than twice `cell_size`) is averaged over the source cell. Scattering
is reported as extinction minus absorption, clipped at zero.

`CrossSections` and `FarFieldMap` convert to and from dictionaries and JSON with
`to_dict`, `from_dict`, `to_json` and `from_json`.

## Fields

Once the dipole moments are solved, the field around the particle can be
sampled:

```python
from lumina.solver import NearFieldPlane

response = solver.solve_dipoles(dipoles, wavelength, params)

plane = NearFieldPlane(
    centre=(0.0, 0.0, 0.0),
    normal=(0.0, 0.0, 1.0),
    half_width=30.0,
    half_height=30.0,
    nx=40,
    ny=40,
)
near = solver.compute_near_field(dipoles, response, plane)
far = solver.compute_far_field(dipoles, response, 18, 36)
```

`CdaSolver.compute_near_field` and `CdaSolver.compute_far_field` take the
wavenumber for a medium of refractive index 1. For another medium, call
`lumina.fields.compute_near_field_map` and `lumina.fields.compute_far_field`
directly with the wavenumber you want.

`lumina.fields.compute_circular_dichroism` takes two responses, one solved
under x-polarised incidence and one under y-polarised incidence. Build each
solver with `CdaSolver.with_incident` and the matching `IncidentField`.

## Building blocks

- `lumina.types`: provides the polarisability prescriptions
  `clausius_mossotti`, `radiative_correction` (Draine radiative reaction) and
  `ldr_correction` (lattice dispersion relation).
- `lumina.greens`: provides `dyadic_greens_tensor` and its cell-averaged form
  `dyadic_greens_tensor_filtered`.
- `lumina.assembly`: builds the interaction matrix and the incident-field
  vector, and holds `invert_3x3`.
- `lumina.direct.solve_direct` and `lumina.iterative.solve_gmres`: the two
  linear solvers.
- `lumina.backend.ComputeBackend`: an interface for matrix fill, matrix-vector
  product and dense solve. `lumina.cpu.CpuBackend` implements it with a thread
  pool.

## Job configuration files

`lumina.config` reads TOML job descriptions into dataclasses:

```toml
[simulation]
wavelengths = { range = [400.0, 900.0], points = 51 }
environment_n = 1.33

[[geometry.object]]
name = "particle"
material = "Au_JC"
dipole_spacing = 2.0
type = "sphere"
radius = 10.0

[output]
directory = "./output"
save_json = true
```

```python
from lumina.config import load_config

job = load_config("job.toml")
print(job.simulation.wavelengths.values())
```

Wavelengths may instead be given as an explicit list with
`wavelengths = { values = [...] }`. An object carries either an inline `type`
with its parameters or a `geometry_file`. TOML that cannot be parsed, or that
lacks a required field, raises `lumina.config.ConfigError`.

## What the package does not do

- It has no command-line program.
- It does not run the jobs it reads: it only parses and checks the
  configuration.
- It does not turn shapes into dipole lattices. You supply the dipole
  positions yourself.
- It ships no tabulated material data. Material names such as `Au_JC` are kept
  as strings, and dielectric functions must be supplied by the caller.
- It writes no output files.
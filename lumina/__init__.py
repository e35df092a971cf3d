"""Coupled dipole approximation solver for the optical response of nanostructures."""

__version__ = "0.1.0"

__all__ = [
    "assembly",
    "backend",
    "cda",
    "config",
    "cpu",
    "direct",
    "fields",
    "greens",
    "iterative",
    "mie",
    "solver",
    "types",
]
[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lumina"
version = "0.1.0"
description = "Coupled dipole approximation solver for the optical response of nanostructures"
requires-python = ">=3.11"
dependencies = [
    "numpy",
]
keywords = [
    "coupled dipole approximation",
    "discrete dipole approximation",
    "plasmonics",
    "nanophotonics",
    "mie theory",
    "electromagnetics",
    "optics",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["lumina"]

[tool.hatch.build.targets.sdist]
include = [
    "lumina",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true

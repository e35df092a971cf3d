"""TOML job configuration for simulation runs."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

_MISSING = object()


class ConfigError(ValueError):
    """The job configuration is malformed."""


@dataclass
class WavelengthRange:
    """Evenly spaced wavelengths from range[0] to range[1] inclusive."""

    range: tuple[float, float]
    points: int

    def values(self) -> list[float]:
        start, end = self.range
        divisor = max(self.points - 1, 1)
        return [start + (end - start) * i / divisor for i in range(self.points)]


@dataclass
class WavelengthList:
    """An explicit list of wavelengths."""

    values_nm: list[float]

    def values(self) -> list[float]:
        return list(self.values_nm)


@dataclass
class SimulationConfig:
    wavelengths: WavelengthRange | WavelengthList
    environment_n: float = 1.0
    solver_tolerance: float = 1e-6
    max_iterations: int = 1000


@dataclass
class PrimitiveShape:
    """An inline primitive: its ``type`` and the remaining keys as parameters."""

    shape_type: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class FileShape:
    geometry_file: str


@dataclass
class ObjectConfig:
    name: str
    material: str
    dipole_spacing: float
    shape: PrimitiveShape | FileShape


@dataclass
class GeometryConfig:
    object: list[ObjectConfig]


@dataclass
class OutputConfig:
    directory: str = "./output"
    save_spectra: bool = True
    save_json: bool = False
    save_near_field: bool = False


@dataclass
class JobConfig:
    simulation: SimulationConfig
    geometry: GeometryConfig
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobConfig":
        """Build a job from parsed TOML data; raises ConfigError when it does not fit."""
        table = _table(data, "job")
        output_data = _get(table, "output", "job", None)
        return cls(
            simulation=_simulation(_get(table, "simulation", "job")),
            geometry=_geometry(_get(table, "geometry", "job")),
            output=OutputConfig() if output_data is None else _output(output_data),
        )


def parse_config(text: str) -> JobConfig:
    """Parse a job configuration from TOML text."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(str(exc)) from exc
    return JobConfig.from_dict(data)


def load_config(path: str | Path) -> JobConfig:
    """Read and parse a TOML job configuration file."""
    return parse_config(Path(path).read_text(encoding="utf-8"))


def _get(data: Mapping[str, Any], key: str, ctx: str, default: Any = _MISSING) -> Any:
    if key in data:
        return data[key]
    if default is _MISSING:
        raise ConfigError(f"{ctx}: missing field `{key}`")
    return default


def _table(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigError(f"{what}: expected a table")
    return value


def _float(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{what}: expected a number, got {value!r}")
    return float(value)


def _count(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{what}: expected a non-negative integer, got {value!r}")
    return value


def _bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{what}: expected a boolean, got {value!r}")
    return value


def _str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{what}: expected a string, got {value!r}")
    return value


def _wavelengths(value: Any) -> WavelengthRange | WavelengthList:
    ctx = "simulation.wavelengths"
    table = _table(value, ctx)
    try:
        bounds = _get(table, "range", ctx)
        if not isinstance(bounds, list) or len(bounds) != 2:
            raise ConfigError(f"{ctx}.range: expected two numbers")
        return WavelengthRange(
            range=(_float(bounds[0], f"{ctx}.range"), _float(bounds[1], f"{ctx}.range")),
            points=_count(_get(table, "points", ctx), f"{ctx}.points"),
        )
    except ConfigError:
        pass
    try:
        values = _get(table, "values", ctx)
        if not isinstance(values, list):
            raise ConfigError(f"{ctx}.values: expected a list")
        return WavelengthList([_float(v, f"{ctx}.values") for v in values])
    except ConfigError:
        pass
    raise ConfigError(f"{ctx}: expected `range` and `points`, or `values`")


def _simulation(value: Any) -> SimulationConfig:
    ctx = "simulation"
    table = _table(value, ctx)
    return SimulationConfig(
        wavelengths=_wavelengths(_get(table, "wavelengths", ctx)),
        environment_n=_float(_get(table, "environment_n", ctx, 1.0), "simulation.environment_n"),
        solver_tolerance=_float(
            _get(table, "solver_tolerance", ctx, 1e-6), "simulation.solver_tolerance"
        ),
        max_iterations=_count(
            _get(table, "max_iterations", ctx, 1000), "simulation.max_iterations"
        ),
    )


_OBJECT_KEYS = ("name", "material", "dipole_spacing")


def _shape(table: Mapping[str, Any], ctx: str) -> PrimitiveShape | FileShape:
    rest = {k: v for k, v in table.items() if k not in _OBJECT_KEYS}
    if isinstance(rest.get("type"), str):
        params = {k: v for k, v in rest.items() if k != "type"}
        return PrimitiveShape(shape_type=rest["type"], params=params)
    if isinstance(rest.get("geometry_file"), str):
        return FileShape(geometry_file=rest["geometry_file"])
    raise ConfigError(f"{ctx}: expected a shape `type` or a `geometry_file`")


def _object(value: Any, index: int) -> ObjectConfig:
    ctx = f"geometry.object[{index}]"
    table = _table(value, ctx)
    return ObjectConfig(
        name=_str(_get(table, "name", ctx), f"{ctx}.name"),
        material=_str(_get(table, "material", ctx), f"{ctx}.material"),
        dipole_spacing=_float(_get(table, "dipole_spacing", ctx), f"{ctx}.dipole_spacing"),
        shape=_shape(table, ctx),
    )


def _geometry(value: Any) -> GeometryConfig:
    table = _table(value, "geometry")
    objects = _get(table, "object", "geometry")
    if not isinstance(objects, list):
        raise ConfigError("geometry.object: expected an array of tables")
    return GeometryConfig(object=[_object(obj, i) for i, obj in enumerate(objects)])


def _output(value: Any) -> OutputConfig:
    ctx = "output"
    table = _table(value, ctx)
    return OutputConfig(
        directory=_str(_get(table, "directory", ctx, "./output"), "output.directory"),
        save_spectra=_bool(_get(table, "save_spectra", ctx, True), "output.save_spectra"),
        save_json=_bool(_get(table, "save_json", ctx, False), "output.save_json"),
        save_near_field=_bool(
            _get(table, "save_near_field", ctx, False), "output.save_near_field"
        ),
    )
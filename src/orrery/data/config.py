"""System configuration snapshots.

A :class:`SystemConfig` is an immutable description of everything the UI
controls: the star, the orbiting bodies, clock speed, what to draw and how
the camera behaves. Controls never edit a snapshot in place; they build a
new one with :meth:`SystemConfig.evolve` and hand it to the simulation.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from orrery.core.elements import InvalidParameterError, OrbitalElements, is_count, is_real
from orrery.utils.constants import (
    CAMERA_MODES,
    CAMERA_PRESETS,
    DEFAULT_SPEED,
    DEFAULT_SUN_EMISSION,
    DEFAULT_SUN_RADIUS,
    RING_SEGMENTS,
    TRAIL_MAX_ANGLE_DEG,
    TRAIL_SEGMENTS,
)

logger = logging.getLogger(__name__)


def _fail(message: str) -> InvalidParameterError:
    logger.error(message)
    return InvalidParameterError(message)


def _check_real(name: str, value: Any, minimum: float, inclusive: bool = True) -> None:
    if not is_real(value) or not math.isfinite(value):
        raise _fail(f"{name} must be a finite number, got {value!r}")
    if value < minimum or (not inclusive and value == minimum):
        op = ">=" if inclusive else ">"
        raise _fail(f"{name} must be {op} {minimum}, got {value!r}")


def _check_count(name: str, value: Any, minimum: int) -> None:
    if not is_count(value) or value < minimum:
        raise _fail(f"{name} must be an integer >= {minimum}, got {value!r}")


def _check_flag(name: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise _fail(f"{name} must be true or false, got {value!r}")


def _check_keys(cls, data: dict[str, Any], where: str) -> None:
    unknown = sorted(set(data) - {f.name for f in fields(cls)})
    if unknown:
        raise _fail(f"Unknown keys in {where}: {unknown}")


def _section(cls, data: dict[str, Any] | None, name: str):
    """Build a flat config dataclass from a mapping, rejecting unknown keys."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise _fail(f"Config section {name!r} must be a mapping, got {type(data).__name__}")
    _check_keys(cls, data, f"config section {name!r}")
    return cls(**data)


@dataclass(frozen=True)
class SunConfig:
    """The central star. Drawn at the origin; does not move."""

    radius: float = DEFAULT_SUN_RADIUS
    emission: float = DEFAULT_SUN_EMISSION

    def __post_init__(self) -> None:
        _check_real("sun radius", self.radius, 0.0, inclusive=False)
        _check_real("sun emission", self.emission, 0.0)


@dataclass(frozen=True)
class Body:
    """An orbiting body.

    Attributes:
        name: Label shown next to the body.
        radius: Display radius.
        color: Hex color string, e.g. ``"#CD5C5C"``.
        elements: Orbital elements driving its position and spin.
    """

    name: str
    radius: float
    color: str
    elements: OrbitalElements

    def __post_init__(self) -> None:
        _check_real(f"radius of body {self.name!r}", self.radius, 0.0, inclusive=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Body:
        """Build a body from ``{"name", "radius", "color", "elements": {...}}``.

        Raises:
            InvalidParameterError: If a field is missing or out of range.
        """
        try:
            return cls(
                name=str(data["name"]),
                radius=data["radius"],
                color=str(data.get("color", "#FFFFFF")),
                elements=OrbitalElements.from_dict(data["elements"]),
            )
        except InvalidParameterError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise _fail(f"Missing or invalid body field: {e}") from e


@dataclass(frozen=True)
class TimeConfig:
    speed: float = DEFAULT_SPEED
    paused: bool = False

    def __post_init__(self) -> None:
        _check_real("time speed", self.speed, 0.0)
        _check_flag("time paused", self.paused)


@dataclass(frozen=True)
class RenderConfig:
    """What to draw besides the bodies themselves."""

    show_orbits: bool = True
    show_trails: bool = False
    trail_segments: int = TRAIL_SEGMENTS
    trail_angle_deg: float = TRAIL_MAX_ANGLE_DEG
    trail_fade: bool = True
    ring_segments: int = RING_SEGMENTS

    def __post_init__(self) -> None:
        _check_flag("show_orbits", self.show_orbits)
        _check_flag("show_trails", self.show_trails)
        _check_flag("trail_fade", self.trail_fade)
        _check_count("trail_segments", self.trail_segments, 1)
        _check_count("ring_segments", self.ring_segments, 3)
        _check_real("trail_angle_deg", self.trail_angle_deg, 0.0)


@dataclass(frozen=True)
class CameraConfig:
    """Camera behaviour.

    Attributes:
        mode: ``"free"`` keeps the view centred on the star, ``"follow"``
            re-centres on ``follow_body`` every frame.
        follow_body: Index into :attr:`SystemConfig.bodies`.
        preset: Named eye position, see
            :data:`~orrery.utils.constants.CAMERA_PRESETS`.
    """

    mode: str = "free"
    follow_body: int = 0
    preset: str = "default"

    def __post_init__(self) -> None:
        if not isinstance(self.mode, str) or self.mode not in CAMERA_MODES:
            raise _fail(f"Unknown camera mode {self.mode!r}, expected one of {CAMERA_MODES}")
        if not isinstance(self.preset, str) or self.preset not in CAMERA_PRESETS:
            raise _fail(f"Unknown camera preset {self.preset!r}, expected one of {tuple(CAMERA_PRESETS)}")
        _check_count("follow_body", self.follow_body, 0)


@dataclass(frozen=True)
class SystemConfig:
    """Immutable snapshot of the whole simulation setup."""

    bodies: tuple[Body, ...]
    sun: SunConfig = field(default_factory=SunConfig)
    time: TimeConfig = field(default_factory=TimeConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)

    def __post_init__(self) -> None:
        # Lists from callers become tuples so the snapshot stays hashable.
        object.__setattr__(self, "bodies", tuple(self.bodies))

    def evolve(self, **changes: Any) -> SystemConfig:
        """Return a copy with top-level fields replaced.

        Nested sections can be replaced with a dict of their own field
        changes, e.g. ``config.evolve(time={"paused": True})``.

        Raises:
            InvalidParameterError: On unknown fields or out-of-range values.
        """
        _check_keys(SystemConfig, changes, "config update")
        resolved: dict[str, Any] = {}
        for name, value in changes.items():
            current = getattr(self, name)
            if isinstance(value, dict) and name != "bodies":
                _check_keys(type(current), value, f"config section {name!r}")
                value = replace(current, **value)
            resolved[name] = value
        return replace(self, **resolved)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form, suitable for :func:`json.dump`."""
        data = asdict(self)
        data["bodies"] = list(data["bodies"])
        return data


def default_config() -> SystemConfig:
    """The three-planet demo system."""
    return SystemConfig(
        bodies=(
            Body(
                name="Mercury",
                radius=0.4,
                color="#8C7853",
                elements=OrbitalElements(
                    semi_major_axis=8.0,
                    eccentricity=0.2,
                    orbital_period=12.0,
                    inclination_deg=15.0,
                    longitude_of_ascending_node_deg=0.0,
                    argument_of_periapsis_deg=0.0,
                    rotation_period=1.0,
                    axial_tilt_deg=23.5,
                ),
            ),
            Body(
                name="Venus",
                radius=0.9,
                color="#FFC649",
                elements=OrbitalElements(
                    semi_major_axis=12.0,
                    eccentricity=0.1,
                    orbital_period=20.0,
                    inclination_deg=-10.0,
                    longitude_of_ascending_node_deg=45.0,
                    argument_of_periapsis_deg=30.0,
                    rotation_period=1.5,
                    axial_tilt_deg=0.0,
                ),
            ),
            Body(
                name="Mars",
                radius=0.5,
                color="#CD5C5C",
                elements=OrbitalElements(
                    semi_major_axis=5.0,
                    eccentricity=0.4,
                    orbital_period=8.0,
                    inclination_deg=25.0,
                    longitude_of_ascending_node_deg=120.0,
                    argument_of_periapsis_deg=60.0,
                    rotation_period=0.8,
                    axial_tilt_deg=45.0,
                ),
            ),
        ),
    )


def config_from_dict(data: dict[str, Any]) -> SystemConfig:
    """Build a validated snapshot from a mapping.

    Sections that are absent fall back to their defaults. ``bodies`` is
    optional too; without it the demo bodies are used.

    Args:
        data: Mapping with optional ``sun``, ``bodies``, ``time``, ``render``
            and ``camera`` keys.

    Returns:
        A new :class:`SystemConfig`.

    Raises:
        InvalidParameterError: On unknown keys or out-of-range values.
    """
    if not isinstance(data, dict):
        raise _fail(f"Config must be a mapping, got {type(data).__name__}")
    unknown = sorted(set(data) - {f.name for f in fields(SystemConfig)})
    if unknown:
        raise _fail(f"Unknown config sections: {unknown}")

    if "bodies" in data:
        if not isinstance(data["bodies"], list):
            raise _fail("Config 'bodies' must be a list")
        bodies = tuple(Body.from_dict(b) for b in data["bodies"])
    else:
        bodies = default_config().bodies

    config = SystemConfig(
        bodies=bodies,
        sun=_section(SunConfig, data.get("sun"), "sun"),
        time=_section(TimeConfig, data.get("time"), "time"),
        render=_section(RenderConfig, data.get("render"), "render"),
        camera=_section(CameraConfig, data.get("camera"), "camera"),
    )
    logger.debug("Built config with %d bodies", len(config.bodies))
    return config


def load_config(path: str | Path) -> SystemConfig:
    """Load a snapshot from a JSON file.

    Raises:
        InvalidParameterError: If the file is not valid JSON or the config
            is invalid.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise _fail(f"Invalid JSON in {path}: {e}") from e
    logger.debug("Loaded config from %s", path)
    return config_from_dict(data)

"""Per-frame scene state for a renderer.

:class:`Simulation` owns a clock and the current config snapshot. Each call
to :meth:`Simulation.tick` advances the clock once and then evaluates every
body at that single time, so all bodies in a frame are spatially consistent.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from orrery.core.clock import SimulationClock
from orrery.core.elements import OrbitalElements
from orrery.core.kepler import KeplerSolver, position
from orrery.core.paths import TrailSample, orbit_ring, trail
from orrery.data.config import SystemConfig, default_config
from orrery.utils.constants import CAMERA_PRESETS, FIXED_POINT_MAX_ECCENTRICITY, TWO_PI

logger = logging.getLogger(__name__)


@dataclass
class BodyState:
    """Render state of one body in one frame.

    Attributes:
        name: Body name.
        position: [x, y, z] at the frame time.
        spin_angle: Rotation about the body's own axis, radians in [0, 2π).
        axial_tilt: Axial tilt in radians.
        ring: Closed orbit polyline, or None when orbits are hidden.
        trail: Trail samples newest first, empty when trails are hidden.
    """

    name: str
    position: NDArray[np.float64]  # shape (3,)
    spin_angle: float
    axial_tilt: float
    ring: NDArray[np.float64] | None = None  # shape (segments + 1, 3)
    trail: list[TrailSample] = field(default_factory=list)


@dataclass
class Frame:
    """Everything a renderer needs for one tick."""

    time: float
    bodies: tuple[BodyState, ...]
    camera_target: NDArray[np.float64]  # shape (3,)
    camera_position: tuple[float, float, float]


def spin_angle(time: float, elements: OrbitalElements) -> float:
    """Self-rotation angle in radians; zero for a body with no rotation period."""
    if elements.rotation_period == 0:
        return 0.0
    return (time / elements.rotation_period * TWO_PI) % TWO_PI


def camera_position(preset: str) -> tuple[float, float, float]:
    """Eye position for a named camera preset.

    Unknown names fall back to ``"default"``.
    """
    return CAMERA_PRESETS.get(preset, CAMERA_PRESETS["default"])


def camera_target(
    time: float,
    config: SystemConfig,
    solver: KeplerSolver = KeplerSolver.FIXED_POINT,
) -> NDArray[np.float64]:
    """Point the camera should look at.

    In ``"follow"`` mode this is the followed body's position at ``time``;
    otherwise, or if the index is out of range, the origin.
    """
    cam = config.camera
    if cam.mode == "follow" and cam.follow_body < len(config.bodies):
        return position(time, config.bodies[cam.follow_body].elements, solver)
    return np.zeros(3, dtype=np.float64)


class Simulation:
    """Frame builder tying a config snapshot to a clock.

    Args:
        config: Initial snapshot. Defaults to :func:`default_config`.
        clock: Clock to drive. A new one is created from ``config.time`` if
            omitted.
        solver: Eccentric-anomaly solver used for every evaluation.

    Example::

        sim = Simulation()
        frame = sim.tick(1 / 60)
        for body in frame.bodies:
            draw(body.name, body.position)
    """

    def __init__(
        self,
        config: SystemConfig | None = None,
        clock: SimulationClock | None = None,
        solver: KeplerSolver = KeplerSolver.FIXED_POINT,
    ) -> None:
        self.solver = solver
        self._config = config if config is not None else default_config()
        if clock is None:
            clock = SimulationClock(speed=self._config.time.speed, paused=self._config.time.paused)
        self.clock = clock
        self._sync_clock()
        self._check_solver_range()

    @property
    def config(self) -> SystemConfig:
        return self._config

    @property
    def time(self) -> float:
        return self.clock.time

    def _sync_clock(self) -> None:
        self.clock.speed = self._config.time.speed
        self.clock.paused = self._config.time.paused

    def _check_solver_range(self) -> None:
        if self.solver is not KeplerSolver.FIXED_POINT:
            return
        for body in self._config.bodies:
            if body.elements.eccentricity > FIXED_POINT_MAX_ECCENTRICITY:
                logger.warning(
                    "Body %s has eccentricity %.3f; fixed-point Kepler solver is inaccurate above %.1f",
                    body.name,
                    body.elements.eccentricity,
                    FIXED_POINT_MAX_ECCENTRICITY,
                )

    def update_config(self, config: SystemConfig | None = None, **changes) -> SystemConfig:
        """Swap in a new snapshot.

        Either pass a complete ``config`` or keyword changes forwarded to
        :meth:`SystemConfig.evolve`. The clock picks up the new speed and
        paused state; its time is kept.

        Returns:
            The snapshot now in use.
        """
        if config is None:
            config = self._config.evolve(**changes)
        elif changes:
            config = config.evolve(**changes)
        self._config = config
        self._sync_clock()
        self._check_solver_range()
        logger.debug("Config updated: %d bodies, speed=%.2f, paused=%s",
                     len(config.bodies), config.time.speed, config.time.paused)
        return config

    def toggle_pause(self) -> bool:
        """Pause or resume; returns the new paused state."""
        paused = not self.clock.paused
        self.update_config(time={"paused": paused})
        return paused

    def reset(self) -> None:
        """Return the clock to time zero."""
        self.clock.reset()

    def tick(self, delta_seconds: float) -> Frame:
        """Advance the clock once and build the frame for the new time.

        Raises:
            InvalidParameterError: If ``delta_seconds`` is negative or not
                finite.
        """
        self.clock.advance(delta_seconds)
        return self.frame()

    def frame(self) -> Frame:
        """Build the frame for the current time without advancing the clock."""
        t = self.clock.time
        config = self._config
        render = config.render

        states = []
        for body in config.bodies:
            el = body.elements
            states.append(
                BodyState(
                    name=body.name,
                    position=position(t, el, self.solver),
                    spin_angle=spin_angle(t, el),
                    axial_tilt=math.radians(el.axial_tilt_deg),
                    ring=orbit_ring(el, render.ring_segments, self.solver) if render.show_orbits else None,
                    trail=(
                        trail(t, el, render.trail_segments, render.trail_angle_deg, render.trail_fade, self.solver)
                        if render.show_trails
                        else []
                    ),
                )
            )

        return Frame(
            time=t,
            bodies=tuple(states),
            camera_target=camera_target(t, config, self.solver),
            camera_position=camera_position(config.camera.preset),
        )

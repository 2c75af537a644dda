"""Orbit rings and fading trails built on the position calculator."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.typing import NDArray

from orrery.core.elements import InvalidParameterError, OrbitalElements, is_count
from orrery.core.kepler import KeplerSolver, positions, positions_at_phase
from orrery.utils.constants import RING_SEGMENTS, TRAIL_MAX_ANGLE_DEG, TRAIL_SEGMENTS, TWO_PI

logger = logging.getLogger(__name__)


@dataclass
class TrailSample:
    """One point of a trail.

    Attributes:
        time: Simulation time the point was evaluated at.
        position: [x, y, z] at that time.
        opacity: 1.0 for the newest sample down to 0.0 for the oldest.
    """

    time: float
    position: NDArray[np.float64]  # shape (3,)
    opacity: float


@dataclass
class TrailSegment:
    """A drawable piece of trail between two consecutive samples."""

    start: NDArray[np.float64]  # shape (3,)
    end: NDArray[np.float64]  # shape (3,)
    opacity: float


def _check_count(name: str, value: int, minimum: int) -> None:
    if not is_count(value) or value < minimum:
        logger.error("Invalid %s: %r", name, value)
        raise InvalidParameterError(f"{name} must be an integer >= {minimum}, got {value!r}")


@lru_cache(maxsize=128)
def _cached_ring(elements: OrbitalElements, segments: int, solver: KeplerSolver) -> NDArray[np.float64]:
    phases = np.arange(segments + 1, dtype=np.float64) / segments
    ring = positions_at_phase(phases, elements, solver)
    ring.flags.writeable = False
    logger.debug("Built orbit ring with %d segments (a=%.3f)", segments, elements.semi_major_axis)
    return ring


def orbit_ring(
    elements: OrbitalElements,
    segments: int = RING_SEGMENTS,
    solver: KeplerSolver = KeplerSolver.FIXED_POINT,
) -> NDArray[np.float64]:
    """Closed polyline tracing one full orbit.

    Samples ``segments + 1`` evenly spaced orbital phases from 0 to 1, so the
    first and last points coincide. The ring depends only on the elements,
    never on the clock or its speed, and is cached per elements. The returned
    array is read-only.

    Args:
        elements: Orbital elements of the body.
        segments: Number of line segments in the ring.
        solver: Eccentric-anomaly solver.

    Returns:
        Array of shape (segments + 1, 3).

    Raises:
        InvalidParameterError: If ``segments`` is less than 3.
    """
    _check_count("segments", segments, 3)
    return _cached_ring(elements, segments, solver)


def trail(
    time: float,
    elements: OrbitalElements,
    segments: int = TRAIL_SEGMENTS,
    max_angle_deg: float = TRAIL_MAX_ANGLE_DEG,
    fade: bool = True,
    solver: KeplerSolver = KeplerSolver.FIXED_POINT,
) -> list[TrailSample]:
    """Sample the recent path of a body behind its current position.

    Sample ``i`` is taken ``i * angle_step * period / 2π`` time units in the
    past, where ``angle_step = max_angle / segments``. Samples that would fall
    before the simulation start (negative time) are dropped. Opacity falls
    linearly from 1.0 at the newest sample to 0.0 at the oldest kept one.

    Trails move with the clock, so they must be rebuilt every tick.

    Args:
        time: Current simulation time.
        elements: Orbital elements of the body.
        segments: Number of samples to take.
        max_angle_deg: Orbital phase covered by the trail, in degrees.
        fade: When False every sample has opacity 1.0.
        solver: Eccentric-anomaly solver.

    Returns:
        Trail samples ordered newest first.

    Raises:
        InvalidParameterError: On a bad sample count or look-back angle.
    """
    _check_count("segments", segments, 1)
    if not math.isfinite(time):
        logger.error("Non-finite simulation time: %r", time)
        raise InvalidParameterError(f"time must be finite, got {time!r}")
    if not math.isfinite(max_angle_deg) or max_angle_deg < 0:
        logger.error("Invalid trail angle: %r", max_angle_deg)
        raise InvalidParameterError(f"max_angle_deg must be >= 0, got {max_angle_deg!r}")

    angle_step = math.radians(max_angle_deg) / segments
    offsets = np.arange(segments, dtype=np.float64) * angle_step * elements.orbital_period / TWO_PI
    times = time - offsets
    times = times[times >= 0]
    if times.size == 0:
        return []

    points = positions(times, elements, solver)

    n = len(times)
    if fade and n > 1:
        opacities = 1.0 - np.arange(n, dtype=np.float64) / (n - 1)
    else:
        opacities = np.ones(n, dtype=np.float64)

    return [
        TrailSample(time=float(t), position=p, opacity=float(o))
        for t, p, o in zip(times, points, opacities)
    ]


def trail_segments(samples: list[TrailSample]) -> list[TrailSegment]:
    """Join consecutive trail samples into drawable segments.

    Each segment takes the mean opacity of its two endpoints. Segments are
    returned oldest first, the order a renderer draws them in.
    """
    ordered = samples[::-1]
    return [
        TrailSegment(start=a.position, end=b.position, opacity=(a.opacity + b.opacity) / 2.0)
        for a, b in zip(ordered, ordered[1:])
    ]

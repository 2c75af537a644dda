"""Default sampling counts, control limits and camera presets.

Distances and times are in scene units; angles in degrees unless noted.
"""

from __future__ import annotations

import math

TWO_PI: float = 2.0 * math.pi
"""Full revolution in radians."""

# --- Kepler solver ---
KEPLER_ITERATIONS: int = 5
"""Fixed-point iterations used to solve Kepler's equation."""

NEWTON_TOLERANCE: float = 1e-12
"""Convergence tolerance for the Newton eccentric-anomaly solver."""

NEWTON_MAX_ITERATIONS: int = 50
"""Iteration cap for the Newton eccentric-anomaly solver."""

FIXED_POINT_MAX_ECCENTRICITY: float = 0.8
"""Above this eccentricity the fixed-point solver is visibly inaccurate."""

# --- Orbit paths ---
RING_SEGMENTS: int = 64
"""Segments in an orbit-ring polyline (the ring has one extra closing point)."""

TRAIL_SEGMENTS: int = 60
"""Samples taken along a trail."""

TRAIL_MAX_ANGLE_DEG: float = 60.0
"""Orbital phase covered by a trail, newest to oldest sample."""

# --- Time controls ---
DEFAULT_SPEED: float = 1.0
"""Default simulation speed multiplier."""

# --- Camera ---
CAMERA_MODES: tuple[str, ...] = ("free", "follow")
"""Supported camera modes."""

CAMERA_PRESETS: dict[str, tuple[float, float, float]] = {
    "default": (15.0, 10.0, 15.0),
    "top": (0.0, 30.0, 0.0),
    "ecliptic": (20.0, 5.0, 15.0),
    "side": (25.0, 0.0, 0.0),
}
"""Eye position for each camera preset."""

# --- Sun ---
DEFAULT_SUN_RADIUS: float = 2.0
"""Display radius of the central star."""

DEFAULT_SUN_EMISSION: float = 1.0
"""Emission intensity of the central star."""

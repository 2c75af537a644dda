"""
orrery — Keplerian orbit evaluation for animated solar-system scenes.

Turns orbital elements and a simulation time into 3D positions, and
builds the per-frame data a renderer needs: closed orbit rings, fading
trails, body spin and a camera target.
"""

from __future__ import annotations

__version__ = "0.1.0-dev"

from orrery.core.elements import InvalidParameterError, OrbitalElements
from orrery.core.kepler import KeplerSolver, position, positions, true_anomaly
from orrery.core.paths import TrailSample, TrailSegment, orbit_ring, trail, trail_segments
from orrery.core.clock import SimulationClock
from orrery.core.scene import BodyState, Frame, Simulation
from orrery.data.config import Body, SystemConfig, config_from_dict, default_config, load_config

__all__ = [
    "__version__",
    "InvalidParameterError",
    "OrbitalElements",
    "KeplerSolver",
    "position",
    "positions",
    "true_anomaly",
    "TrailSample",
    "TrailSegment",
    "orbit_ring",
    "trail",
    "trail_segments",
    "SimulationClock",
    "BodyState",
    "Frame",
    "Simulation",
    "Body",
    "SystemConfig",
    "config_from_dict",
    "default_config",
    "load_config",
]

"""Keplerian position calculator.

Maps a simulation time and a set of orbital elements to a 3D Cartesian
position. Evaluation is stateless: the same ``(time, elements)`` always gives
the same point, which is what lets trails be rebuilt by sampling past times.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from functools import lru_cache

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.optimize import newton
from scipy.spatial.transform import Rotation

from orrery.core.elements import InvalidParameterError, OrbitalElements
from orrery.utils.constants import (
    FIXED_POINT_MAX_ECCENTRICITY,
    KEPLER_ITERATIONS,
    NEWTON_MAX_ITERATIONS,
    NEWTON_TOLERANCE,
    TWO_PI,
)

logger = logging.getLogger(__name__)


class KeplerSolver(Enum):
    """Methods for solving Kepler's equation for the eccentric anomaly."""

    FIXED_POINT = "fixed_point"
    NEWTON = "newton"


def _as_times(times: ArrayLike) -> NDArray[np.float64]:
    arr = np.asarray(times, dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        logger.error("Non-finite simulation time: %r", times)
        raise InvalidParameterError(f"time must be finite, got {times!r}")
    return arr


def mean_anomaly(time: ArrayLike, elements: OrbitalElements) -> NDArray[np.float64]:
    """Mean anomaly in radians, reduced to [0, 2π).

    Args:
        time: Simulation time(s).
        elements: Orbital elements of the body.

    Returns:
        Array with the same shape as ``time``.
    """
    t = _as_times(time)
    return np.mod((t / elements.orbital_period) * TWO_PI, TWO_PI)


def _kepler_residual(E, M, e):
    return E - e * np.sin(E) - M


def _kepler_derivative(E, M, e):
    return 1.0 - e * np.cos(E)


def eccentric_anomaly(
    mean_anom: ArrayLike,
    eccentricity: float,
    solver: KeplerSolver = KeplerSolver.FIXED_POINT,
) -> NDArray[np.float64]:
    """Solve Kepler's equation ``E = M + e sin E``.

    ``FIXED_POINT`` seeds at ``E = M`` and runs exactly
    :data:`~orrery.utils.constants.KEPLER_ITERATIONS` iterations with no
    convergence check. The cost is bounded and the result is reproducible,
    but accuracy drops for eccentricities above about 0.8. ``NEWTON``
    iterates to :data:`~orrery.utils.constants.NEWTON_TOLERANCE` instead.

    Args:
        mean_anom: Mean anomaly in radians.
        eccentricity: Orbital eccentricity in [0, 1).
        solver: Which solver to use.

    Returns:
        Eccentric anomaly in radians, same shape as ``mean_anom``.

    Raises:
        ValueError: If ``solver`` is not a known method.
    """
    M = np.asarray(mean_anom, dtype=np.float64)
    e = float(eccentricity)

    if solver is KeplerSolver.FIXED_POINT:
        E = M.copy()
        for _ in range(KEPLER_ITERATIONS):
            E = M + e * np.sin(E)
        return E

    if solver is KeplerSolver.NEWTON:
        if e == 0.0 or M.size == 0:
            return M.copy()
        # Starting at π always converges for high eccentricity.
        x0 = M if e < FIXED_POINT_MAX_ECCENTRICITY else np.full_like(M, math.pi)
        # scipy only vectorizes for more than one element
        if M.size == 1:
            E = newton(
                _kepler_residual,
                float(np.ravel(x0)[0]),
                fprime=_kepler_derivative,
                args=(float(np.ravel(M)[0]), e),
                tol=NEWTON_TOLERANCE,
                maxiter=NEWTON_MAX_ITERATIONS,
            )
            return np.float64(E) if M.ndim == 0 else np.full(M.shape, E, dtype=np.float64)
        return np.asarray(
            newton(
                _kepler_residual,
                np.array(x0, dtype=np.float64),
                fprime=_kepler_derivative,
                args=(M, e),
                tol=NEWTON_TOLERANCE,
                maxiter=NEWTON_MAX_ITERATIONS,
            ),
            dtype=np.float64,
        )

    raise ValueError(f"Unknown solver: {solver}")


def _true_from_eccentric(E: NDArray[np.float64], e: float) -> NDArray[np.float64]:
    return 2.0 * np.arctan2(
        math.sqrt(1.0 + e) * np.sin(E / 2.0),
        math.sqrt(1.0 - e) * np.cos(E / 2.0),
    )


def true_anomaly(
    time: ArrayLike,
    elements: OrbitalElements,
    solver: KeplerSolver = KeplerSolver.FIXED_POINT,
) -> NDArray[np.float64]:
    """True anomaly in radians at the given simulation time(s)."""
    E = eccentric_anomaly(mean_anomaly(time, elements), elements.eccentricity, solver)
    return _true_from_eccentric(E, elements.eccentricity)


@lru_cache(maxsize=256)
def orientation_matrix(
    inclination_deg: float,
    longitude_of_ascending_node_deg: float,
    argument_of_periapsis_deg: float,
) -> NDArray[np.float64]:
    """Rotation from the orbital plane into the reference frame.

    Composes ``R_z(Ω) · R_x(i) · R_z(ω)``. The returned array is read-only
    since it is shared between callers.
    """
    matrix = Rotation.from_euler(
        "ZXZ",
        [longitude_of_ascending_node_deg, inclination_deg, argument_of_periapsis_deg],
        degrees=True,
    ).as_matrix()
    matrix.flags.writeable = False
    return matrix


def _positions_from_mean_anomaly(
    M: NDArray[np.float64],
    elements: OrbitalElements,
    solver: KeplerSolver,
) -> NDArray[np.float64]:
    a = elements.semi_major_axis
    e = elements.eccentricity

    E = eccentric_anomaly(M, e, solver)
    nu = _true_from_eccentric(E, e)
    r = a * (1.0 - e * e) / (1.0 + e * np.cos(nu))

    # Orbital plane, periapsis along +x
    planar = np.stack([r * np.cos(nu), r * np.sin(nu), np.zeros_like(r)], axis=-1)

    R = orientation_matrix(
        elements.inclination_deg,
        elements.longitude_of_ascending_node_deg,
        elements.argument_of_periapsis_deg,
    )
    return planar @ R.T


def positions(
    times: ArrayLike,
    elements: OrbitalElements,
    solver: KeplerSolver = KeplerSolver.FIXED_POINT,
) -> NDArray[np.float64]:
    """Evaluate positions of one body at many times.

    Args:
        times: 1-D sequence of simulation times.
        elements: Orbital elements of the body.
        solver: Eccentric-anomaly solver.

    Returns:
        Array of shape (n, 3) with [x, y, z] per time.

    Raises:
        InvalidParameterError: If any time is NaN or infinite.
    """
    t = np.atleast_1d(_as_times(times))
    result = _positions_from_mean_anomaly(mean_anomaly(t, elements), elements, solver)
    logger.debug("Evaluated %d positions (a=%.3f, e=%.3f)", len(t), elements.semi_major_axis, elements.eccentricity)
    return result


def positions_at_phase(
    phases: ArrayLike,
    elements: OrbitalElements,
    solver: KeplerSolver = KeplerSolver.FIXED_POINT,
) -> NDArray[np.float64]:
    """Evaluate positions at fractions of one revolution.

    Phase 0 is periapsis, phase 1 is one full orbit later. The result does
    not depend on the orbital period or on any clock.

    Returns:
        Array of shape (n, 3).
    """
    p = np.atleast_1d(_as_times(phases))
    return _positions_from_mean_anomaly(np.mod(p * TWO_PI, TWO_PI), elements, solver)


def position(
    time: float,
    elements: OrbitalElements,
    solver: KeplerSolver = KeplerSolver.FIXED_POINT,
) -> NDArray[np.float64]:
    """Position of a body at a single simulation time.

    Args:
        time: Simulation time.
        elements: Orbital elements of the body.
        solver: Eccentric-anomaly solver.

    Returns:
        Array of shape (3,) with [x, y, z].

    Raises:
        InvalidParameterError: If ``time`` is NaN or infinite.

    Example::

        >>> el = OrbitalElements(semi_major_axis=10, eccentricity=0, orbital_period=100)
        >>> position(25, el).round(6)
        array([ 0., 10.,  0.])
    """
    return positions([time], elements, solver)[0]

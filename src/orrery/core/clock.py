"""Simulation clock driven by the render loop."""

from __future__ import annotations

import logging
import math

from orrery.core.elements import InvalidParameterError, is_real
from orrery.utils.constants import DEFAULT_SPEED

logger = logging.getLogger(__name__)


def _check_speed(speed: float) -> float:
    if not is_real(speed) or not math.isfinite(speed) or speed < 0:
        logger.error("Invalid clock speed: %r", speed)
        raise InvalidParameterError(f"speed must be finite and >= 0, got {speed!r}")
    return float(speed)


class SimulationClock:
    """Monotonic simulation time advanced once per rendered frame.

    Time only moves forward, by ``elapsed * speed`` on each call to
    :meth:`advance`, and stays put while paused. :meth:`reset` is the one way
    back to zero.

    Args:
        speed: Multiplier applied to elapsed wall-clock time.
        paused: When True, :meth:`advance` leaves the time unchanged.
    """

    def __init__(self, speed: float = DEFAULT_SPEED, paused: bool = False) -> None:
        self._speed = _check_speed(speed)
        self.paused = paused
        self._time = 0.0

    @property
    def time(self) -> float:
        """Current simulation time."""
        return self._time

    @property
    def speed(self) -> float:
        """Multiplier applied to elapsed wall-clock time."""
        return self._speed

    @speed.setter
    def speed(self, value: float) -> None:
        self._speed = _check_speed(value)

    def advance(self, delta_seconds: float) -> float:
        """Move the clock forward by ``delta_seconds * speed``.

        Args:
            delta_seconds: Wall-clock seconds since the previous frame.

        Returns:
            The simulation time after the update.

        Raises:
            InvalidParameterError: If the delta is negative or not finite.
        """
        if not is_real(delta_seconds) or not math.isfinite(delta_seconds) or delta_seconds < 0:
            logger.error("Invalid clock delta: %r", delta_seconds)
            raise InvalidParameterError(
                f"delta_seconds must be finite and >= 0, got {delta_seconds!r}"
            )
        if not self.paused:
            self._time += delta_seconds * self._speed
        return self._time

    def reset(self) -> None:
        """Set the simulation time back to zero."""
        logger.debug("Clock reset at t=%.3f", self._time)
        self._time = 0.0

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def toggle(self) -> bool:
        """Flip between paused and running; returns the new paused state."""
        self.paused = not self.paused
        return self.paused

    def __repr__(self) -> str:
        state = "paused" if self.paused else "running"
        return f"SimulationClock(time={self._time:.3f}, speed={self._speed}, {state})"

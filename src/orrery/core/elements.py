"""Keplerian orbital elements.

Elements are immutable and checked when they are built, so everything
downstream can evaluate them without guarding against NaN or infinite
coordinates.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, fields

import numpy as np

logger = logging.getLogger(__name__)


class InvalidParameterError(ValueError):
    """An orbital element, clock value or config field is out of range."""


def is_real(value) -> bool:
    """True for real numbers, numpy scalars included; False for bools."""
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def is_count(value) -> bool:
    """True for integers, numpy integers included; False for bools."""
    return isinstance(value, numbers.Integral) and not isinstance(value, (bool, np.bool_))


@dataclass(frozen=True)
class OrbitalElements:
    """Classical orbital elements of one body.

    Attributes:
        semi_major_axis: Mean orbital radius scale (> 0).
        eccentricity: Orbit shape, 0 for a circle (in [0, 1)).
        orbital_period: Time units per revolution (> 0).
        inclination_deg: Inclination in degrees.
        longitude_of_ascending_node_deg: Longitude of ascending node in degrees.
        argument_of_periapsis_deg: Argument of periapsis in degrees.
        rotation_period: Self-rotation period, display spin only.
        axial_tilt_deg: Axial tilt in degrees, display spin only.
    """

    semi_major_axis: float
    eccentricity: float
    orbital_period: float
    inclination_deg: float = 0.0
    longitude_of_ascending_node_deg: float = 0.0
    argument_of_periapsis_deg: float = 0.0
    rotation_period: float = 1.0
    axial_tilt_deg: float = 0.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not is_real(value):
                logger.error("Orbital element %s is not a number: %r", f.name, value)
                raise InvalidParameterError(f"{f.name} must be a number, got {value!r}")
            if not math.isfinite(value):
                logger.error("Orbital element %s is not finite: %r", f.name, value)
                raise InvalidParameterError(f"{f.name} must be finite, got {value!r}")

        if self.semi_major_axis <= 0:
            logger.error("Invalid semi-major axis: %r", self.semi_major_axis)
            raise InvalidParameterError(
                f"semi_major_axis must be > 0, got {self.semi_major_axis!r}"
            )
        if not 0.0 <= self.eccentricity < 1.0:
            logger.error("Invalid eccentricity: %r", self.eccentricity)
            raise InvalidParameterError(
                f"eccentricity must be in [0, 1), got {self.eccentricity!r}"
            )
        if self.orbital_period <= 0:
            logger.error("Invalid orbital period: %r", self.orbital_period)
            raise InvalidParameterError(
                f"orbital_period must be > 0, got {self.orbital_period!r}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> OrbitalElements:
        """Build elements from a mapping of field names to values.

        Unknown keys are rejected so typos in config files surface early.

        Raises:
            InvalidParameterError: On unknown keys or out-of-range values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.error("Unknown orbital element keys: %s", unknown)
            raise InvalidParameterError(f"Unknown orbital element keys: {unknown}")
        missing = sorted({"semi_major_axis", "eccentricity", "orbital_period"} - set(data))
        if missing:
            logger.error("Missing orbital element keys: %s", missing)
            raise InvalidParameterError(f"Missing orbital element keys: {missing}")
        return cls(**data)

    @property
    def periapsis(self) -> float:
        """Distance of closest approach, a(1 - e)."""
        return self.semi_major_axis * (1.0 - self.eccentricity)

    @property
    def apoapsis(self) -> float:
        """Farthest distance from the focus, a(1 + e)."""
        return self.semi_major_axis * (1.0 + self.eccentricity)

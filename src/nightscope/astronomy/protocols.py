"""Ephemeris provider protocol (interface)."""

from datetime import datetime
from typing import Protocol

from nightscope.astronomy.models import CelestialTarget


class Ephemeris(Protocol):
    """Source of Sun/Moon positions and lunar illumination."""

    def sun_position(self, time: datetime) -> CelestialTarget:
        """Get the Sun's apparent geocentric RA/Dec.

        Args:
            time: Instant (naive datetimes are UTC)

        Returns:
            Equatorial coordinates of the Sun
        """
        ...

    def moon_position(self, time: datetime) -> CelestialTarget:
        """Get the Moon's apparent geocentric RA/Dec.

        Args:
            time: Instant (naive datetimes are UTC)

        Returns:
            Equatorial coordinates of the Moon
        """
        ...

    def moon_illumination(self, time: datetime) -> tuple[float, float]:
        """Get the Moon's illuminated fraction and signed phase angle.

        Args:
            time: Instant (naive datetimes are UTC)

        Returns:
            Tuple of (fraction 0-1, phase angle in degrees, negative while
            waxing)
        """
        ...

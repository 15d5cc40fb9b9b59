"""Skyfield-backed ephemeris."""

import logging
from datetime import datetime
from pathlib import Path

from skyfield import almanac
from skyfield.api import load
from skyfield.timelib import Time

from nightscope.astronomy.models import CelestialTarget
from nightscope.core.exceptions import EphemerisError
from nightscope.core.utils import ensure_utc

logger = logging.getLogger(__name__)


class SkyfieldEphemeris:
    """Sun and Moon positions from the JPL DE421 ephemeris via Skyfield."""

    EPHEMERIS_FILE = "de421.bsp"

    def __init__(self, data_dir: Path | None = None):
        """Initialize the ephemeris.

        Args:
            data_dir: Directory to store ephemeris files (default: ~/.nightscope/data)
        """
        self.data_dir = data_dir or Path.home() / ".nightscope" / "data"
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self.ts = load.timescale()

        self._ephemeris = None
        self._sun = None
        self._moon = None
        self._earth = None

    def _load_ephemeris(self) -> None:
        """Lazily load (and on first use download) the ephemeris data."""
        if self._ephemeris is None:
            load.directory = str(self.data_dir)
            try:
                self._ephemeris = load(self.EPHEMERIS_FILE)
            except (OSError, ValueError) as e:
                raise EphemerisError(f"Failed to load {self.EPHEMERIS_FILE}: {e}") from e
            self._sun = self._ephemeris["sun"]
            self._moon = self._ephemeris["moon"]
            self._earth = self._ephemeris["earth"]
            logger.debug(f"Loaded ephemeris from {self.data_dir}")

    def _to_skyfield(self, dt: datetime) -> Time:
        return self.ts.from_datetime(ensure_utc(dt))

    def _radec(self, body, time: datetime) -> CelestialTarget:
        self._load_ephemeris()
        t = self._to_skyfield(time)
        ra, dec, _ = self._earth.at(t).observe(body).apparent().radec(epoch="date")
        return CelestialTarget(ra_hours=ra.hours, dec_deg=dec.degrees)

    def sun_position(self, time: datetime) -> CelestialTarget:
        self._load_ephemeris()
        return self._radec(self._sun, time)

    def moon_position(self, time: datetime) -> CelestialTarget:
        self._load_ephemeris()
        return self._radec(self._moon, time)

    def moon_illumination(self, time: datetime) -> tuple[float, float]:
        """Illuminated fraction and signed phase angle.

        The phase angle is the Moon-Sun ecliptic elongation shifted by 180
        degrees, so it runs from -180 (new) through 0 (full) to +180.
        """
        self._load_ephemeris()
        t = self._to_skyfield(time)
        fraction = float(almanac.fraction_illuminated(self._ephemeris, "moon", t))
        elongation = float(almanac.moon_phase(self._ephemeris, t).degrees)
        return fraction, elongation - 180.0

"""Observer-relative celestial geometry."""

import logging
from datetime import datetime, timedelta

from nightscope.astronomy.coordinates import to_horizontal
from nightscope.astronomy.models import (
    GALACTIC_CENTER,
    CelestialGeometry,
    CelestialTarget,
    HorizontalPosition,
    MoonPhase,
    MoonState,
    TwilightWindow,
)
from nightscope.astronomy.protocols import Ephemeris
from nightscope.astronomy.search import find_horizon_crossing
from nightscope.core.exceptions import EphemerisError
from nightscope.core.utils import ensure_utc
from nightscope.geo.models import GeoPoint

logger = logging.getLogger(__name__)

# Stand-in for the Sun reaching -18 degrees after sunset / before sunrise
TWILIGHT_OFFSET = timedelta(minutes=90)

# Failures that null out a single field instead of the whole result
_GEOMETRY_ERRORS = (EphemerisError, ArithmeticError, ValueError)


def moon_phase_name(fraction: float, phase_angle: float) -> MoonPhase:
    """Classify illuminated fraction into one of eight named bins.

    Args:
        fraction: Illuminated fraction 0-1
        phase_angle: Signed phase angle (negative while waxing)

    Returns:
        MoonPhase bin
    """
    waxing = phase_angle < 0
    if fraction < 0.03:
        return MoonPhase.NEW
    if fraction < 0.23:
        return MoonPhase.WAXING_CRESCENT if waxing else MoonPhase.WANING_CRESCENT
    if fraction < 0.27:
        return MoonPhase.FIRST_QUARTER
    if fraction < 0.48:
        return MoonPhase.WAXING_GIBBOUS if waxing else MoonPhase.WANING_GIBBOUS
    if fraction < 0.52:
        return MoonPhase.FULL
    if fraction < 0.73:
        return MoonPhase.WANING_GIBBOUS if waxing else MoonPhase.WAXING_GIBBOUS
    if fraction < 0.77:
        return MoonPhase.LAST_QUARTER
    return MoonPhase.WANING_CRESCENT if waxing else MoonPhase.WAXING_CRESCENT


class AstronomyCalculator:
    """Computes Moon, galactic center and twilight geometry for an observer."""

    def __init__(self, ephemeris: Ephemeris | None = None):
        """Initialize the calculator.

        Args:
            ephemeris: Sun/Moon position source (default: Skyfield DE421)
        """
        if ephemeris is None:
            from nightscope.astronomy.ephemeris import SkyfieldEphemeris

            ephemeris = SkyfieldEphemeris()
        self.ephemeris = ephemeris

    def get_position(
        self,
        target: CelestialTarget,
        observer: GeoPoint,
        time: datetime,
    ) -> HorizontalPosition:
        """Altitude/azimuth of a fixed target."""
        return to_horizontal(target, observer, time)

    def sun_altitude(self, observer: GeoPoint, time: datetime) -> float:
        sun = self.ephemeris.sun_position(time)
        return to_horizontal(sun, observer, time).altitude_deg

    def moon_altitude(self, observer: GeoPoint, time: datetime) -> float:
        moon = self.ephemeris.moon_position(time)
        return to_horizontal(moon, observer, time).altitude_deg

    def get_moon_state(self, observer: GeoPoint, time: datetime) -> MoonState:
        """Get Moon illumination, phase, position and next rise/set.

        Rise and set are searched over the 24 hours following time; when
        the Moon does not cross the horizon in that window they are None.

        Args:
            observer: Observer position
            time: Instant of observation

        Returns:
            MoonState
        """
        time = ensure_utc(time)
        fraction, phase_angle = self.ephemeris.moon_illumination(time)
        position = to_horizontal(self.ephemeris.moon_position(time), observer, time)

        def altitude(t: datetime) -> float:
            return self.moon_altitude(observer, t)

        return MoonState(
            illuminated_fraction_pct=round(min(max(fraction, 0.0), 1.0) * 100, 1),
            phase_angle=phase_angle,
            phase_name=moon_phase_name(fraction, phase_angle),
            altitude_deg=position.altitude_deg,
            azimuth_deg=position.azimuth_deg,
            rise_time=self._find_crossing(altitude, time, rising=True),
            set_time=self._find_crossing(altitude, time, rising=False),
        )

    def get_twilight_window(self, observer: GeoPoint, time: datetime) -> TwilightWindow:
        """Approximate the dark window of the night following time.

        Sunset is the first setting after time, sunrise the first rising
        after that sunset. Observation starts 90 minutes after sunset and
        ends 90 minutes before sunrise.

        Args:
            observer: Observer position
            time: Search start

        Returns:
            TwilightWindow, with None for any crossing that was not found
        """
        time = ensure_utc(time)

        def altitude(t: datetime) -> float:
            return self.sun_altitude(observer, t)

        sunset = self._find_crossing(altitude, time, rising=False)
        sunrise = self._find_crossing(altitude, sunset or time, rising=True)

        return TwilightWindow(
            sunset=sunset,
            sunrise=sunrise,
            observation_start=sunset + TWILIGHT_OFFSET if sunset else None,
            observation_end=sunrise - TWILIGHT_OFFSET if sunrise else None,
        )

    def get_geometry(self, observer: GeoPoint, time: datetime) -> CelestialGeometry:
        """Get the full celestial picture for an observer at an instant.

        Each part is computed independently; a failure in one leaves the
        corresponding field None without affecting the others.

        Args:
            observer: Observer position
            time: Instant of observation

        Returns:
            CelestialGeometry
        """
        time = ensure_utc(time)

        moon = None
        try:
            moon = self.get_moon_state(observer, time)
        except _GEOMETRY_ERRORS as e:
            logger.warning(f"Moon state unavailable for {observer}: {e}")

        galactic_center = None
        try:
            galactic_center = self.get_position(GALACTIC_CENTER, observer, time)
        except _GEOMETRY_ERRORS as e:
            logger.warning(f"Galactic center position unavailable for {observer}: {e}")

        try:
            twilight = self.get_twilight_window(observer, time)
        except _GEOMETRY_ERRORS as e:
            logger.warning(f"Twilight window unavailable for {observer}: {e}")
            twilight = TwilightWindow()

        return CelestialGeometry(
            observer=observer,
            time=time,
            moon=moon,
            galactic_center=galactic_center,
            twilight=twilight,
        )

    def observation_instant(self, observer: GeoPoint, time: datetime) -> datetime:
        """Representative moment of the coming night.

        One hour after the observation window opens, or twelve hours after
        time when the window could not be located.
        """
        time = ensure_utc(time)
        try:
            twilight = self.get_twilight_window(observer, time)
        except _GEOMETRY_ERRORS as e:
            logger.warning(f"Twilight window unavailable for {observer}: {e}")
            twilight = TwilightWindow()
        if twilight.observation_start is not None:
            return twilight.observation_start + timedelta(hours=1)
        return time + timedelta(hours=12)

    @staticmethod
    def _find_crossing(altitude, start: datetime, rising: bool) -> datetime | None:
        try:
            return find_horizon_crossing(altitude, start, rising=rising)
        except EphemerisError as e:
            logger.warning(f"Horizon search aborted: {e}")
            return None

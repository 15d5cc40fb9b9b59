"""Astronomy data models."""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from nightscope.geo.models import GeoPoint


class MoonPhase(str, Enum):
    """Named lunar phase bins."""

    NEW = "New Moon"
    WAXING_CRESCENT = "Waxing Crescent"
    FIRST_QUARTER = "First Quarter"
    WAXING_GIBBOUS = "Waxing Gibbous"
    FULL = "Full Moon"
    WANING_GIBBOUS = "Waning Gibbous"
    LAST_QUARTER = "Last Quarter"
    WANING_CRESCENT = "Waning Crescent"


class CelestialTarget(BaseModel):
    """Equatorial coordinates of a sky object."""

    model_config = ConfigDict(frozen=True)

    ra_hours: float = Field(description="Right ascension in hours")
    dec_deg: float = Field(ge=-90, le=90, description="Declination in degrees")


# Sagittarius A*: RA 17h 45m 40s, Dec -29d 00m 28s
GALACTIC_CENTER = CelestialTarget(
    ra_hours=17 + 45 / 60 + 40 / 3600,
    dec_deg=-(29 + 0 / 60 + 28 / 3600),
)


class HorizontalPosition(BaseModel):
    """Altitude/azimuth of a target as seen by an observer."""

    altitude_deg: float = Field(description="Altitude above horizon in degrees")
    azimuth_deg: float = Field(description="Azimuth in degrees (0=N, 90=E)")

    @property
    def is_above_horizon(self) -> bool:
        return self.altitude_deg > 0


class MoonState(BaseModel):
    """Moon illumination, phase and position for an observer."""

    illuminated_fraction_pct: float = Field(
        ge=0, le=100, description="Illuminated fraction of the disc, percent"
    )
    phase_angle: float = Field(
        description="Signed phase angle in degrees (negative while waxing)"
    )
    phase_name: MoonPhase = Field(description="Named phase bin")
    altitude_deg: float = Field(description="Moon altitude in degrees")
    azimuth_deg: float = Field(description="Moon azimuth in degrees")
    rise_time: datetime | None = Field(default=None, description="Next moonrise")
    set_time: datetime | None = Field(default=None, description="Next moonset")

    @property
    def is_up(self) -> bool:
        return self.altitude_deg > 0


class TwilightWindow(BaseModel):
    """Approximate dark-sky window for one night.

    The observation bounds are sunset + 90 min and sunrise - 90 min, a
    stand-in for the Sun crossing -18 degrees.
    """

    sunset: datetime | None = None
    sunrise: datetime | None = None
    observation_start: datetime | None = None
    observation_end: datetime | None = None
    approximate: bool = True

    @property
    def duration(self) -> timedelta | None:
        if self.observation_start is None or self.observation_end is None:
            return None
        return self.observation_end - self.observation_start

    def contains(self, time: datetime) -> bool:
        """Check whether a time falls inside the observation window."""
        if self.observation_start is None or self.observation_end is None:
            return False
        return self.observation_start <= time <= self.observation_end


class CelestialGeometry(BaseModel):
    """Everything the scorer needs from the sky at one instant."""

    observer: GeoPoint
    time: datetime
    moon: MoonState | None = None
    galactic_center: HorizontalPosition | None = None
    twilight: TwilightWindow = Field(default_factory=TwilightWindow)

    @property
    def is_galactic_center_visible(self) -> bool:
        return self.galactic_center is not None and self.galactic_center.is_above_horizon

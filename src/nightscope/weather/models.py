"""Weather data models.

These are the typed records every feed adapter must produce. Everything
downstream (cache, scorer) only ever sees these shapes, never raw payloads.
"""

import math
from datetime import date
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from nightscope.geo.models import GeoPoint
from nightscope.weather.derived import dew_point


class FeedKind(str, Enum):
    """External feeds kept warm by the weather cache."""

    POINT_OBSERVATION = "point_observation"
    CLOUD_GRID = "cloud_grid"


class SkyCondition(str, Enum):
    """Categorical sky state reported by the forecast feed."""

    CLEAR = "clear"
    PARTLY_CLOUDY = "partly_cloudy"
    OVERCAST = "overcast"

    @classmethod
    def from_code(cls, code: int | None) -> "SkyCondition | None":
        """Map a forecast SKY code (1 clear, 3 mostly cloudy, 4 overcast)."""
        if code is None:
            return None
        if code <= 1:
            return cls.CLEAR
        if code <= 3:
            return cls.PARTLY_CLOUDY
        return cls.OVERCAST

    @property
    def cloud_cover_pct(self) -> float:
        """Representative cloud cover for the category."""
        return {
            SkyCondition.CLEAR: 10.0,
            SkyCondition.PARTLY_CLOUDY: 50.0,
            SkyCondition.OVERCAST: 80.0,
        }[self]


class PointObservation(BaseModel):
    """Latest row of the point-observation feed. Any field may be unknown."""

    temperature_c: float | None = Field(default=None, description="Air temperature in Celsius")
    humidity_pct: float | None = Field(default=None, description="Relative humidity 0-100%")
    wind_speed_ms: float | None = Field(default=None, description="10 m wind speed in m/s")
    wind_direction_deg: float | None = Field(
        default=None, description="10 m wind direction in degrees"
    )
    pressure_hpa: float | None = Field(default=None, description="Surface pressure in hPa")
    precipitation_mm_1h: float | None = Field(
        default=None, description="Precipitation over the last hour in mm"
    )


class WeatherSnapshot(BaseModel):
    """Current conditions at one point, replaced wholesale on refresh."""

    model_config = ConfigDict(frozen=True)

    coord: GeoPoint
    timestamp: int = Field(description="Observation time, epoch seconds")
    source: str = Field(description="Feed identifier")
    cloud_cover_pct: float | None = Field(
        default=None, ge=0, le=100, description="Total cloud cover 0-100%"
    )
    humidity_pct: float | None = Field(default=None, description="Relative humidity 0-100%")
    temperature_c: float | None = Field(default=None, description="Temperature in Celsius")
    wind_speed_ms: float | None = Field(default=None, description="Wind speed in m/s")
    wind_direction_deg: float | None = Field(default=None, description="Wind direction")
    pressure_hpa: float | None = Field(default=None, description="Pressure in hPa")
    precipitation: float | None = Field(default=None, description="Precipitation in mm/h")
    dew_point_c: float | None = Field(default=None, description="Dew point in Celsius")

    @classmethod
    def from_observation(
        cls,
        observation: PointObservation,
        coord: GeoPoint,
        timestamp: int,
        source: str = "kma",
    ) -> "WeatherSnapshot":
        """Build a snapshot from a parsed point-feed row."""
        dew = None
        if observation.temperature_c is not None and observation.humidity_pct is not None:
            dew = dew_point(observation.temperature_c, observation.humidity_pct)
        return cls(
            coord=coord,
            timestamp=timestamp,
            source=source,
            humidity_pct=observation.humidity_pct,
            temperature_c=observation.temperature_c,
            wind_speed_ms=observation.wind_speed_ms,
            wind_direction_deg=observation.wind_direction_deg,
            pressure_hpa=observation.pressure_hpa,
            precipitation=observation.precipitation_mm_1h,
            dew_point_c=dew,
        )


class CloudGrid(BaseModel):
    """Satellite cloud-detection grid.

    values[y][x] holds cloud density (nominally 0-1), row-major with
    height rows of width cells. Row 0 sits at origin_lat, column 0 at
    origin_lng.
    """

    model_config = ConfigDict(frozen=True)

    date_time: str = Field(description="Product time, YYYYMMDDHHmm UTC")
    origin_lat: float = Field(description="Latitude of cell (0, 0)")
    origin_lng: float = Field(description="Longitude of cell (0, 0)")
    cell_size_km: float = Field(gt=0, description="Cell spacing in km")
    width: int = Field(ge=0, description="Number of columns")
    height: int = Field(ge=0, description="Number of rows")
    values: list[list[float]] = Field(description="Cloud density rows")

    KM_PER_DEGREE: ClassVar[float] = 111.0

    @model_validator(mode="after")
    def check_shape(self) -> "CloudGrid":
        if len(self.values) != self.height:
            raise ValueError(f"Expected {self.height} rows, got {len(self.values)}")
        for y, row in enumerate(self.values):
            if len(row) != self.width:
                raise ValueError(f"Row {y} has {len(row)} cells, expected {self.width}")
        return self

    def value_at(self, x: int, y: int) -> float | None:
        """Raw density of a cell, or None outside the grid."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return self.values[y][x]

    def index_for(self, lat: float, lng: float) -> tuple[int, int]:
        """Nearest cell for a location (may fall outside the grid).

        Uses a flat-earth approximation: 111 km per degree of latitude and
        111 km * cos(lat) per degree of longitude.
        """
        km_per_deg_lng = self.KM_PER_DEGREE * math.cos(math.radians(lat))
        dx = (lng - self.origin_lng) * km_per_deg_lng / self.cell_size_km
        dy = (lat - self.origin_lat) * self.KM_PER_DEGREE / self.cell_size_km
        return (round(dx), round(dy))

    def value_at_location(self, lat: float, lng: float) -> float | None:
        """Raw density at a location, or None outside the grid."""
        x, y = self.index_for(lat, lng)
        return self.value_at(x, y)

    def max_value(self) -> float:
        return max((max(row) for row in self.values if row), default=0.0)

    def cloud_cover_pct_at(self, lat: float, lng: float) -> float | None:
        """Cloud cover percentage at a location.

        Densities above 1 are normalized by the grid maximum before
        conversion to a percentage.

        Returns:
            0-100, or None when the location is outside the grid
        """
        value = self.value_at_location(lat, lng)
        if value is None:
            return None
        if value > 1:
            peak = self.max_value()
            if peak > 1:
                value = value / peak
        return round(min(100.0, max(0.0, value * 100)))


class ForecastPoint(BaseModel):
    """Night-time forecast values for one grid cell and date."""

    target_date: date = Field(description="Date the forecast is for")
    base_date: str = Field(description="Issue date, YYYYMMDD")
    base_time: str = Field(description="Issue time, HHMM")
    forecast_time: str | None = Field(
        default=None, description="Preferred night-time slot that matched, HHMM"
    )
    temperature_c: float | None = None
    humidity_pct: float | None = None
    sky_condition: SkyCondition | None = None
    wind_speed_ms: float | None = None
    precipitation_probability_pct: float | None = None

    @property
    def cloud_cover_pct(self) -> float | None:
        if self.sky_condition is None:
            return None
        return self.sky_condition.cloud_cover_pct


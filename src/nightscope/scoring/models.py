"""Scoring data models."""

from datetime import date, datetime
from enum import Enum, IntEnum

from pydantic import BaseModel, Field

from nightscope.astronomy.models import CelestialGeometry
from nightscope.geo.models import GeoPoint
from nightscope.weather.models import SkyCondition, WeatherSnapshot


class ScoringScheme(str, Enum):
    """Named weightings of the composite index."""

    FORECAST_WEIGHTED = "forecast_weighted"
    LOCATION_ONLY = "location_only"


class Grade(IntEnum):
    """Five-step observation grade."""

    UNOBSERVABLE = 1
    POOR = 2
    FAIR = 3
    GOOD = 4
    EXCELLENT = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()


class WeatherInputs(BaseModel):
    """Weather values handed to the scorer. Unknown values are None."""

    cloud_cover_pct: float | None = Field(default=None, description="Cloud cover 0-100%")
    sky_condition: SkyCondition | None = Field(
        default=None, description="Categorical sky state (forecasts)"
    )
    humidity_pct: float | None = Field(default=None, description="Relative humidity 0-100%")
    temperature_c: float | None = Field(default=None, description="Temperature in Celsius")
    wind_speed_ms: float | None = Field(default=None, description="Wind speed in m/s")
    visibility_m: float | None = Field(default=None, description="Visibility in meters")
    precipitation_probability_pct: float | None = Field(
        default=None, description="Chance of precipitation 0-100%"
    )


class GeometryInputs(BaseModel):
    """Celestial and site values handed to the scorer. Unknown values are None."""

    location: GeoPoint | None = Field(default=None, description="Observing site")
    moon_altitude_deg: float | None = Field(default=None, description="Moon altitude")
    moon_illumination_pct: float | None = Field(
        default=None, description="Moon illuminated fraction 0-100%"
    )


class ObservationScore(BaseModel):
    """Composite observation index with its component breakdown."""

    cloud_score: float = Field(ge=0, le=100)
    transparency_score: float = Field(ge=0, le=100)
    moon_score: float = Field(ge=0, le=100)
    light_pollution_score: float = Field(ge=0, le=100)
    humidity_score: float = Field(ge=0, le=100)
    composite_index: float = Field(ge=0, le=100, description="Overall index 0-100")
    grade: Grade
    scheme: ScoringScheme

    @property
    def label(self) -> str:
        return self.grade.label

    @property
    def rating_stars(self) -> float:
        """0-5 stars in half steps."""
        return round(self.composite_index / 20 * 2) / 2

    @property
    def rating_color(self) -> str:
        """Get a color for the grade (for Rich display)."""
        return {
            Grade.EXCELLENT: "bright_green",
            Grade.GOOD: "green",
            Grade.FAIR: "yellow",
            Grade.POOR: "orange1",
            Grade.UNOBSERVABLE: "red",
        }[self.grade]

    @property
    def summary(self) -> str:
        """Get a one-line verdict."""
        if self.grade == Grade.EXCELLENT:
            return "Excellent conditions! The Milky Way should be clearly visible."
        elif self.grade == Grade.GOOD:
            return "Good conditions. Bright stars and parts of the Milky Way are visible."
        elif self.grade == Grade.FAIR:
            if self.cloud_score < 50:
                return "Heavy cloud may make observation difficult."
            if self.moon_score < 50:
                return "Bright moonlight will wash out the Milky Way."
            return "Average observing conditions."
        elif self.grade == Grade.POOR:
            return "Poor conditions. Consider another night."
        else:
            return "Not suitable for observation. Wait for a clear night."

    def component_scores(self) -> dict[str, float]:
        """Subscores that contribute under this score's scheme."""
        if self.scheme == ScoringScheme.LOCATION_ONLY:
            return {
                "light_pollution": self.light_pollution_score,
                "cloud": self.cloud_score,
                "humidity": self.humidity_score,
            }
        return {
            "cloud": self.cloud_score,
            "moon": self.moon_score,
            "light_pollution": self.light_pollution_score,
            "transparency": self.transparency_score,
        }


class ConditionsReport(BaseModel):
    """Score for one location together with the inputs it was computed from."""

    location: GeoPoint
    time: datetime = Field(description="Instant the geometry was computed for")
    target_date: date | None = Field(default=None, description="Forecast night, if any")
    weather: WeatherInputs
    geometry: CelestialGeometry | None = None
    score: ObservationScore
    recommendations: list[str] = Field(default_factory=list)
    weather_source: str | None = Field(default=None, description="Where the weather came from")
    snapshot: WeatherSnapshot | None = Field(
        default=None, description="Point observation behind a real-time score"
    )

    @property
    def summary(self) -> str:
        """Get a one-line summary."""
        return (
            f"Index: {self.score.composite_index:.0f}/100 ({self.score.label}) "
            f"at {self.location}"
        )

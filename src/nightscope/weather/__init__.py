"""Weather feed records and adapters."""

from nightscope.weather.models import (
    CloudGrid,
    FeedKind,
    ForecastPoint,
    PointObservation,
    SkyCondition,
    WeatherSnapshot,
)

__all__ = [
    "CloudGrid",
    "FeedKind",
    "ForecastPoint",
    "PointObservation",
    "SkyCondition",
    "WeatherSnapshot",
]

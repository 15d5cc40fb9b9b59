"""Weather feed protocols (interfaces)."""

from datetime import date
from typing import Awaitable, Callable, Protocol, TypeVar

from nightscope.geo.models import GeoPoint, GridCoord
from nightscope.weather.models import CloudGrid, ForecastPoint, WeatherSnapshot

T = TypeVar("T")

# Zero-argument coroutine producing the latest value of one feed
FeedFetcher = Callable[[], Awaitable[T]]


class PointObservationProvider(Protocol):
    """Protocol for real-time point observation sources."""

    async def get_snapshot(self, location: GeoPoint) -> WeatherSnapshot:
        """Get the latest observation at a location.

        Args:
            location: Observation point

        Returns:
            Current conditions
        """
        ...


class CloudGridProvider(Protocol):
    """Protocol for satellite cloud grid sources."""

    async def get_cloud_grid(self) -> CloudGrid:
        """Get the latest cloud grid."""
        ...


class ForecastProvider(Protocol):
    """Protocol for gridded forecast sources."""

    async def get_forecast(self, grid: GridCoord, target_date: date) -> ForecastPoint:
        """Get the night-time forecast for a grid cell.

        Args:
            grid: Forecast grid cell
            target_date: Night to forecast

        Returns:
            Forecast values for that night
        """
        ...

"""Conditions service - orchestrates projection, geometry, weather and scoring."""

import logging
from datetime import date, datetime, time

from nightscope.astronomy.calculator import AstronomyCalculator
from nightscope.astronomy.models import CelestialGeometry
from nightscope.core.exceptions import WeatherAPIError
from nightscope.core.utils import ensure_utc, utc_now
from nightscope.geo.models import GeoPoint, GridCoord
from nightscope.geo.projection import GridProjector
from nightscope.scoring.components import estimate_forecast_visibility
from nightscope.scoring.engine import ObservationScorer
from nightscope.scoring.models import (
    ConditionsReport,
    GeometryInputs,
    ObservationScore,
    ScoringScheme,
    WeatherInputs,
)
from nightscope.storage.cache import CachedValue, WeatherFeedCache
from nightscope.weather.base import KST
from nightscope.weather.models import CloudGrid, FeedKind, WeatherSnapshot
from nightscope.weather.protocols import (
    CloudGridProvider,
    ForecastProvider,
    PointObservationProvider,
)

logger = logging.getLogger(__name__)

# Center of the peninsula, where the background point feed is sampled
DEFAULT_POINT = GeoPoint(lat=36.5, lng=127.5)

# Searching from local noon finds that evening's sunset
_FORECAST_SEARCH_START = time(12, 0, tzinfo=KST)


def geometry_inputs(
    geometry: CelestialGeometry | None, location: GeoPoint
) -> GeometryInputs:
    """Reduce celestial geometry to what the scorer uses."""
    if geometry is None or geometry.moon is None:
        return GeometryInputs(location=location)
    return GeometryInputs(
        location=location,
        moon_altitude_deg=geometry.moon.altitude_deg,
        moon_illumination_pct=geometry.moon.illuminated_fraction_pct,
    )


class ConditionsService:
    """Main service for observation conditions.

    Owns the weather feed cache. Lifecycle: construct, start(), serve
    requests, stop(), close().
    """

    def __init__(
        self,
        point_client: PointObservationProvider,
        cloud_client: CloudGridProvider,
        forecast_client: ForecastProvider | None = None,
        astronomy_calculator: AstronomyCalculator | None = None,
        scorer: ObservationScorer | None = None,
        projector: GridProjector | None = None,
        default_point: GeoPoint = DEFAULT_POINT,
        refresh_intervals: dict[FeedKind, float] | None = None,
        fetch_timeout: float = 30.0,
    ):
        """Initialize the conditions service.

        Args:
            point_client: Real-time point observation source
            cloud_client: Satellite cloud grid source
            forecast_client: Gridded forecast source (needed for forecast_score)
            astronomy_calculator: Celestial geometry calculator
            scorer: Observation scorer
            projector: Forecast grid projection
            default_point: Where the background point feed is sampled
            refresh_intervals: Refresh interval in seconds per feed
            fetch_timeout: Upper bound on a single feed fetch, in seconds
        """
        self.point_client = point_client
        self.cloud_client = cloud_client
        self.forecast_client = forecast_client
        self.astronomy = astronomy_calculator or AstronomyCalculator()
        self.scorer = scorer or ObservationScorer()
        self.projector = projector or GridProjector()
        self.default_point = default_point
        self.cache = WeatherFeedCache(
            {
                FeedKind.POINT_OBSERVATION: self._fetch_point,
                FeedKind.CLOUD_GRID: self._fetch_cloud_grid,
            },
            intervals=refresh_intervals,
            timeout=fetch_timeout,
        )

    async def _fetch_point(self) -> WeatherSnapshot:
        return await self.point_client.get_snapshot(self.default_point)

    async def _fetch_cloud_grid(self) -> CloudGrid:
        return await self.cloud_client.get_cloud_grid()

    # Lifecycle
    def start(self) -> None:
        """Start background refresh of the weather feeds."""
        self.cache.start()

    async def stop(self) -> None:
        """Stop background refresh."""
        await self.cache.stop()

    async def close(self) -> None:
        """Stop refreshing and close all clients."""
        await self.stop()
        for client in (self.point_client, self.cloud_client, self.forecast_client):
            close = getattr(client, "close", None)
            if close is not None:
                await close()

    # Projection
    def to_grid(self, lat: float, lng: float) -> GridCoord:
        return self.projector.to_grid(lat, lng)

    def to_latlng(self, nx: int, ny: int) -> GeoPoint:
        return self.projector.to_latlng(nx, ny)

    # Geometry
    def get_celestial_geometry(
        self, lat: float, lng: float, when: datetime | None = None
    ) -> CelestialGeometry:
        """Moon, galactic center and twilight for a location.

        Args:
            lat: Latitude
            lng: Longitude
            when: Instant (default: now)

        Returns:
            CelestialGeometry
        """
        return self.astronomy.get_geometry(GeoPoint(lat=lat, lng=lng), when or utc_now())

    # Weather
    def get_latest_weather(self, kind: FeedKind) -> CachedValue | None:
        """Latest cached value of a feed (no I/O)."""
        return self.cache.get(kind)

    async def force_refresh_all(self) -> dict[FeedKind, bool]:
        """Refresh every feed now and wait for all of them."""
        return await self.cache.refresh_all()

    async def _ensure_weather(self) -> None:
        """Populate empty feeds once before a one-off request."""
        if any(self.cache.get(kind) is None for kind in self.cache.kinds):
            await self.force_refresh_all()

    def cloud_cover_at(self, lat: float, lng: float) -> float | None:
        """Cloud cover from the cached satellite grid."""
        cached = self.cache.get(FeedKind.CLOUD_GRID)
        if cached is None:
            return None
        return cached.value.cloud_cover_pct_at(lat, lng)

    async def _snapshot_for(self, location: GeoPoint) -> WeatherSnapshot | None:
        cached = self.cache.get(FeedKind.POINT_OBSERVATION)
        if location == self.default_point and cached is not None:
            return cached.value
        try:
            return await self.point_client.get_snapshot(location)
        except WeatherAPIError as e:
            logger.warning(f"Point observation at {location} failed, using cached: {e}")
            return cached.value if cached is not None else None

    # Scoring
    def compute_observation_score(
        self,
        weather: WeatherInputs | None,
        geometry: GeometryInputs | None,
        scheme: ScoringScheme = ScoringScheme.FORECAST_WEIGHTED,
    ) -> ObservationScore:
        return self.scorer.score(weather, geometry, scheme)

    async def realtime_score(
        self,
        lat: float,
        lng: float,
        scheme: ScoringScheme = ScoringScheme.LOCATION_ONLY,
        when: datetime | None = None,
    ) -> ConditionsReport:
        """Score current conditions at a location.

        Cloud cover comes from the cached satellite grid, the rest from
        the point observation feed.

        Args:
            lat: Latitude
            lng: Longitude
            scheme: Composite weighting
            when: Instant for the geometry (default: now)

        Returns:
            ConditionsReport
        """
        location = GeoPoint(lat=lat, lng=lng)
        when = ensure_utc(when or utc_now())

        await self._ensure_weather()
        snapshot = await self._snapshot_for(location)
        cloud_cover = self.cloud_cover_at(lat, lng)

        if snapshot is not None and cloud_cover is not None:
            snapshot = snapshot.model_copy(update={"cloud_cover_pct": cloud_cover})

        weather = WeatherInputs(
            cloud_cover_pct=cloud_cover,
            humidity_pct=snapshot.humidity_pct if snapshot else None,
            temperature_c=snapshot.temperature_c if snapshot else None,
            wind_speed_ms=snapshot.wind_speed_ms if snapshot else None,
        )
        geometry = self.astronomy.get_geometry(location, when)
        inputs = geometry_inputs(geometry, location)
        score = self.compute_observation_score(weather, inputs, scheme)

        return ConditionsReport(
            location=location,
            time=when,
            weather=weather,
            geometry=geometry,
            score=score,
            recommendations=self.scorer.get_recommendations(score, weather, inputs),
            weather_source=snapshot.source if snapshot else None,
            snapshot=snapshot,
        )

    async def forecast_score(
        self,
        lat: float,
        lng: float,
        target_date: date,
    ) -> ConditionsReport:
        """Score the night of a given date from the gridded forecast.

        The Moon is evaluated one hour into that night's observation
        window. A failed forecast fetch scores with neutral weather.

        Args:
            lat: Latitude
            lng: Longitude
            target_date: Night to score

        Returns:
            ConditionsReport with the forecast-weighted scheme
        """
        location = GeoPoint(lat=lat, lng=lng)
        weather = WeatherInputs()
        source = None

        if self.forecast_client is None:
            logger.warning("No forecast client configured, scoring with neutral weather")
        else:
            try:
                forecast = await self.forecast_client.get_forecast(
                    self.to_grid(lat, lng), target_date
                )
                weather = WeatherInputs(
                    sky_condition=forecast.sky_condition,
                    humidity_pct=forecast.humidity_pct,
                    temperature_c=forecast.temperature_c,
                    wind_speed_ms=forecast.wind_speed_ms,
                    visibility_m=estimate_forecast_visibility(
                        forecast.humidity_pct, forecast.precipitation_probability_pct
                    ),
                    precipitation_probability_pct=forecast.precipitation_probability_pct,
                )
                source = f"forecast {forecast.base_date} {forecast.base_time}"
            except WeatherAPIError as e:
                logger.warning(f"Forecast for {location} on {target_date} failed: {e}")

        search_start = datetime.combine(target_date, _FORECAST_SEARCH_START)
        instant = self.astronomy.observation_instant(location, search_start)
        geometry = self.astronomy.get_geometry(location, instant)
        inputs = geometry_inputs(geometry, location)
        score = self.compute_observation_score(
            weather, inputs, ScoringScheme.FORECAST_WEIGHTED
        )

        return ConditionsReport(
            location=location,
            time=instant,
            target_date=target_date,
            weather=weather,
            geometry=geometry,
            score=score,
            recommendations=self.scorer.get_recommendations(score, weather, inputs),
            weather_source=source,
        )

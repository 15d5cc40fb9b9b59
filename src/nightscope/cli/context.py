"""CLI context management."""

from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from nightscope.astronomy.calculator import AstronomyCalculator
from nightscope.astronomy.ephemeris import SkyfieldEphemeris
from nightscope.core.exceptions import ConfigError
from nightscope.core.utils import validate_coordinates
from nightscope.display.renderer import DisplayRenderer
from nightscope.geo.models import GeoPoint
from nightscope.services.conditions import ConditionsService
from nightscope.storage.config import AUTH_KEY_ENV, ConfigManager
from nightscope.weather.kma_cloud import KmaCloudGridClient
from nightscope.weather.kma_forecast import KmaForecastClient
from nightscope.weather.kma_point import KmaPointClient
from nightscope.weather.models import FeedKind


@dataclass
class CliContext:
    """Context object passed to all CLI commands."""

    config: ConfigManager
    console: Console
    renderer: DisplayRenderer
    verbose: bool = False

    # Lazily initialized
    _service: ConditionsService | None = None
    _calculator: AstronomyCalculator | None = None

    @classmethod
    def create(
        cls,
        config_dir: Path | None = None,
        verbose: bool = False,
    ) -> "CliContext":
        """Create a new CLI context.

        Args:
            config_dir: Custom config directory
            verbose: Enable verbose output

        Returns:
            Initialized CliContext
        """
        config = ConfigManager(config_dir)
        console = Console()
        renderer = DisplayRenderer(console)

        return cls(
            config=config,
            console=console,
            renderer=renderer,
            verbose=verbose,
        )

    def resolve_location(
        self,
        name: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
    ) -> GeoPoint:
        """Pick the point a command should use.

        Explicit coordinates win, then a saved location name, then the
        default saved location, then the configured default coordinates.
        """
        if lat is not None and lng is not None:
            lat, lng = validate_coordinates(lat, lng)
            return GeoPoint(lat=lat, lng=lng)
        if lat is not None or lng is not None:
            raise ConfigError("Both --lat and --lng are required")
        if name:
            point = self.config.get_location(name)
            if point is None:
                raise ConfigError(f"Location '{name}' not found")
            return point
        default = self.config.get_default_location()
        if default is not None:
            return default[1]
        return self.config.default_point

    def get_calculator(self) -> AstronomyCalculator:
        """Get or create the astronomy calculator."""
        if self._calculator is None:
            self._calculator = AstronomyCalculator(
                SkyfieldEphemeris(self.config.ephemeris_dir)
            )
        return self._calculator

    def get_service(self) -> ConditionsService:
        """Get or create the conditions service (needs an API key)."""
        if self._service is None:
            auth_key = self.config.auth_key
            if not auth_key:
                raise ConfigError(
                    f"No KMA API key. Set {AUTH_KEY_ENV} or run "
                    "'nightscope config set auth_key <key>'."
                )
            timeout = self.config.fetch_timeout_seconds
            self._service = ConditionsService(
                point_client=KmaPointClient(auth_key, timeout=timeout),
                cloud_client=KmaCloudGridClient(auth_key, timeout=timeout),
                forecast_client=KmaForecastClient(auth_key, timeout=timeout),
                astronomy_calculator=self.get_calculator(),
                default_point=self.config.default_point,
                refresh_intervals={
                    FeedKind.POINT_OBSERVATION: self.config.point_refresh_seconds,
                    FeedKind.CLOUD_GRID: self.config.cloud_refresh_seconds,
                },
                fetch_timeout=timeout,
            )
        return self._service

    async def cleanup(self) -> None:
        """Clean up resources."""
        if self._service:
            await self._service.close()
            self._service = None

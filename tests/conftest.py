"""Pytest fixtures for Nightscope tests."""

from datetime import datetime, timezone

import pytest

from nightscope.astronomy.calculator import AstronomyCalculator
from nightscope.astronomy.models import CelestialTarget
from nightscope.geo.models import GeoPoint
from nightscope.scoring.models import GeometryInputs, WeatherInputs
from nightscope.weather.models import CloudGrid, WeatherSnapshot


class FakeEphemeris:
    """Ephemeris with fixed Sun/Moon coordinates and illumination.

    Fixed RA/Dec behaves like a star: it rises and sets once per sidereal
    day, which is all the horizon search needs.
    """

    def __init__(
        self,
        sun: CelestialTarget = CelestialTarget(ra_hours=6.0, dec_deg=0.0),
        moon: CelestialTarget = CelestialTarget(ra_hours=18.0, dec_deg=-10.0),
        fraction: float = 0.8,
        phase_angle: float = 30.0,
    ):
        self.sun = sun
        self.moon = moon
        self.fraction = fraction
        self.phase_angle = phase_angle
        self.calls = 0

    def sun_position(self, time: datetime) -> CelestialTarget:
        self.calls += 1
        return self.sun

    def moon_position(self, time: datetime) -> CelestialTarget:
        self.calls += 1
        return self.moon

    def moon_illumination(self, time: datetime) -> tuple[float, float]:
        return self.fraction, self.phase_angle


@pytest.fixture
def fake_ephemeris() -> FakeEphemeris:
    return FakeEphemeris()


@pytest.fixture
def calculator(fake_ephemeris: FakeEphemeris) -> AstronomyCalculator:
    return AstronomyCalculator(ephemeris=fake_ephemeris)


@pytest.fixture
def seoul() -> GeoPoint:
    """Seoul City Hall."""
    return GeoPoint(lat=37.5665, lng=126.978)


@pytest.fixture
def dark_site() -> GeoPoint:
    """Rural site outside every light-pollution box."""
    return GeoPoint(lat=35.5, lng=128.0)


@pytest.fixture
def fixed_time() -> datetime:
    return datetime(2025, 5, 28, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clear_weather() -> WeatherInputs:
    """Clear, dry night."""
    return WeatherInputs(
        cloud_cover_pct=10,
        humidity_pct=50,
        temperature_c=12.0,
        visibility_m=15_000,
    )


@pytest.fixture
def overcast_weather() -> WeatherInputs:
    """Overcast, humid night."""
    return WeatherInputs(
        cloud_cover_pct=95,
        humidity_pct=95,
        temperature_c=24.0,
        wind_speed_ms=12.0,
    )


@pytest.fixture
def moonless_geometry(dark_site: GeoPoint) -> GeometryInputs:
    return GeometryInputs(
        location=dark_site,
        moon_altitude_deg=-5.0,
        moon_illumination_pct=80.0,
    )


@pytest.fixture
def sample_snapshot(dark_site: GeoPoint) -> WeatherSnapshot:
    return WeatherSnapshot(
        coord=dark_site,
        timestamp=1748433600,
        source="kma_point",
        humidity_pct=55.0,
        temperature_c=14.2,
        wind_speed_ms=2.1,
    )


@pytest.fixture
def sample_grid() -> CloudGrid:
    """3x2 grid anchored at 35N 127E with 2 km cells."""
    return CloudGrid(
        date_time="202505281150",
        origin_lat=35.0,
        origin_lng=127.0,
        cell_size_km=2.0,
        width=3,
        height=2,
        values=[[0.0, 0.2, 0.4], [0.6, 0.8, 1.0]],
    )

"""Tests for Moon, galactic center and twilight geometry."""

from datetime import datetime, timedelta

import pytest

from nightscope.astronomy.calculator import (
    TWILIGHT_OFFSET,
    AstronomyCalculator,
    moon_phase_name,
)
from nightscope.astronomy.models import (
    CelestialGeometry,
    CelestialTarget,
    HorizontalPosition,
    MoonPhase,
)
from nightscope.core.exceptions import EphemerisError
from nightscope.geo.models import GeoPoint

from conftest import FakeEphemeris


class BrokenMoonEphemeris(FakeEphemeris):
    """Sun works, Moon does not."""

    def moon_position(self, time: datetime) -> CelestialTarget:
        raise EphemerisError("Moon ephemeris unavailable")


class TestMoonPhaseName:
    """Test phase bins."""

    @pytest.mark.parametrize(
        "fraction,phase_angle,expected",
        [
            (0.01, -170.0, MoonPhase.NEW),
            (0.10, -120.0, MoonPhase.WAXING_CRESCENT),
            (0.10, 120.0, MoonPhase.WANING_CRESCENT),
            (0.25, -90.0, MoonPhase.FIRST_QUARTER),
            (0.40, -60.0, MoonPhase.WAXING_GIBBOUS),
            (0.50, 0.0, MoonPhase.FULL),
            (0.60, -40.0, MoonPhase.WANING_GIBBOUS),
            (0.75, 30.0, MoonPhase.LAST_QUARTER),
        ],
    )
    def test_bins(self, fraction: float, phase_angle: float, expected: MoonPhase):
        assert moon_phase_name(fraction, phase_angle) == expected

    def test_boundaries(self):
        assert moon_phase_name(0.03, 10.0) == MoonPhase.WANING_CRESCENT
        assert moon_phase_name(0.27, -10.0) == MoonPhase.WAXING_GIBBOUS
        assert moon_phase_name(0.52, 10.0) == MoonPhase.WAXING_GIBBOUS


class TestMoonState:
    """Test Moon state assembly."""

    def test_illumination_and_phase(
        self, calculator: AstronomyCalculator, dark_site: GeoPoint, fixed_time: datetime
    ):
        moon = calculator.get_moon_state(dark_site, fixed_time)
        assert moon.illuminated_fraction_pct == pytest.approx(80.0)
        assert moon.phase_angle == 30.0
        assert moon.phase_name == moon_phase_name(0.8, 30.0)

    def test_rise_and_set_found(
        self, calculator: AstronomyCalculator, dark_site: GeoPoint, fixed_time: datetime
    ):
        """A fixed Dec -10 target rises and sets once a day at 35N."""
        moon = calculator.get_moon_state(dark_site, fixed_time)
        assert moon.rise_time is not None
        assert moon.set_time is not None
        for event in (moon.rise_time, moon.set_time):
            assert fixed_time < event <= fixed_time + timedelta(days=1)

    def test_altitude_at_rise_is_near_zero(
        self, calculator: AstronomyCalculator, dark_site: GeoPoint, fixed_time: datetime
    ):
        moon = calculator.get_moon_state(dark_site, fixed_time)
        assert calculator.moon_altitude(dark_site, moon.rise_time) == pytest.approx(0.0, abs=0.2)

    def test_circumpolar_moon_has_no_rise(self, dark_site: GeoPoint, fixed_time: datetime):
        ephemeris = FakeEphemeris(moon=CelestialTarget(ra_hours=0.0, dec_deg=80.0))
        moon = AstronomyCalculator(ephemeris=ephemeris).get_moon_state(dark_site, fixed_time)
        assert moon.is_up
        assert moon.rise_time is None
        assert moon.set_time is None

    def test_fraction_clamped(self, dark_site: GeoPoint, fixed_time: datetime):
        ephemeris = FakeEphemeris(fraction=1.2)
        moon = AstronomyCalculator(ephemeris=ephemeris).get_moon_state(dark_site, fixed_time)
        assert moon.illuminated_fraction_pct == 100.0


class TestTwilightWindow:
    """Test the approximate dark window."""

    def test_sunrise_follows_sunset(
        self, calculator: AstronomyCalculator, dark_site: GeoPoint, fixed_time: datetime
    ):
        twilight = calculator.get_twilight_window(dark_site, fixed_time)
        assert twilight.sunset is not None
        assert twilight.sunrise is not None
        assert twilight.sunrise > twilight.sunset

    def test_offsets(
        self, calculator: AstronomyCalculator, dark_site: GeoPoint, fixed_time: datetime
    ):
        twilight = calculator.get_twilight_window(dark_site, fixed_time)
        assert TWILIGHT_OFFSET == timedelta(minutes=90)
        assert twilight.observation_start == twilight.sunset + TWILIGHT_OFFSET
        assert twilight.observation_end == twilight.sunrise - TWILIGHT_OFFSET
        assert twilight.approximate

    def test_equatorial_sun_night_is_half_a_day(
        self, calculator: AstronomyCalculator, dark_site: GeoPoint, fixed_time: datetime
    ):
        """A Dec 0 Sun spends about 12 hours below the horizon."""
        twilight = calculator.get_twilight_window(dark_site, fixed_time)
        night = twilight.sunrise - twilight.sunset
        assert abs(night - timedelta(hours=12)) < timedelta(minutes=10)
        assert twilight.duration == night - 2 * TWILIGHT_OFFSET

    def test_polar_night_has_no_window(self, dark_site: GeoPoint, fixed_time: datetime):
        ephemeris = FakeEphemeris(sun=CelestialTarget(ra_hours=6.0, dec_deg=-80.0))
        twilight = AstronomyCalculator(ephemeris=ephemeris).get_twilight_window(
            dark_site, fixed_time
        )
        assert twilight.sunset is None
        assert twilight.sunrise is None
        assert twilight.observation_start is None
        assert twilight.duration is None
        assert not twilight.contains(fixed_time)


class TestGeometry:
    """Test the combined geometry."""

    def test_full_geometry(
        self, calculator: AstronomyCalculator, dark_site: GeoPoint, fixed_time: datetime
    ):
        geometry = calculator.get_geometry(dark_site, fixed_time)
        assert geometry.observer == dark_site
        assert geometry.time == fixed_time
        assert geometry.moon is not None
        assert geometry.galactic_center is not None
        assert geometry.twilight.sunset is not None

    def test_moon_failure_is_isolated(self, dark_site: GeoPoint, fixed_time: datetime):
        calculator = AstronomyCalculator(ephemeris=BrokenMoonEphemeris())
        geometry = calculator.get_geometry(dark_site, fixed_time)
        assert geometry.moon is None
        assert geometry.galactic_center is not None
        assert geometry.twilight.sunset is not None

    @pytest.mark.parametrize(
        "galactic_center,visible",
        [
            (HorizontalPosition(altitude_deg=25.0, azimuth_deg=160.0), True),
            (HorizontalPosition(altitude_deg=-10.0, azimuth_deg=120.0), False),
            (None, False),
        ],
    )
    def test_galactic_center_visibility(
        self,
        dark_site: GeoPoint,
        fixed_time: datetime,
        galactic_center: HorizontalPosition | None,
        visible: bool,
    ):
        geometry = CelestialGeometry(
            observer=dark_site, time=fixed_time, galactic_center=galactic_center
        )
        assert geometry.is_galactic_center_visible is visible

    def test_naive_time_treated_as_utc(self, calculator: AstronomyCalculator, dark_site: GeoPoint):
        geometry = calculator.get_geometry(dark_site, datetime(2025, 5, 28, 12, 0))
        assert geometry.time.utcoffset() == timedelta(0)


class TestObservationInstant:
    """Test the representative moment of the night."""

    def test_one_hour_into_window(
        self, calculator: AstronomyCalculator, dark_site: GeoPoint, fixed_time: datetime
    ):
        twilight = calculator.get_twilight_window(dark_site, fixed_time)
        instant = calculator.observation_instant(dark_site, fixed_time)
        assert instant == twilight.observation_start + timedelta(hours=1)

    def test_fallback_without_sunset(self, dark_site: GeoPoint, fixed_time: datetime):
        ephemeris = FakeEphemeris(sun=CelestialTarget(ra_hours=6.0, dec_deg=-80.0))
        calculator = AstronomyCalculator(ephemeris=ephemeris)
        assert calculator.observation_instant(dark_site, fixed_time) == fixed_time + timedelta(
            hours=12
        )

"""Sidereal time and equatorial -> horizontal coordinate transforms.

Low-precision formulas (no nutation, refraction or parallax), good to a
fraction of a degree, which is plenty for judging whether the galactic
core is up.
"""

import math
from datetime import datetime

from nightscope.astronomy.models import CelestialTarget, HorizontalPosition
from nightscope.core.utils import clamp, ensure_utc, wrap_degrees
from nightscope.geo.models import GeoPoint

J2000 = 2451545.0
UNIX_EPOCH_JD = 2440587.5

# Below this the azimuth formula divides by ~0 (pole or zenith)
_DEGENERATE_EPSILON = 1e-12


def julian_date(time: datetime) -> float:
    """Julian Date of an instant (naive datetimes are UTC)."""
    return ensure_utc(time).timestamp() / 86400.0 + UNIX_EPOCH_JD


def greenwich_mean_sidereal_time(time: datetime) -> float:
    """GMST in degrees, [0, 360)."""
    jd = julian_date(time)
    t = (jd - J2000) / 36525.0
    gmst = (
        280.46061837
        + 360.98564736629 * (jd - J2000)
        + t * t * (0.000387933 - t / 38710000.0)
    )
    return wrap_degrees(gmst)


def local_sidereal_time(time: datetime, longitude: float) -> float:
    """LST in degrees for an east-positive longitude, [0, 360)."""
    return wrap_degrees(greenwich_mean_sidereal_time(time) + longitude)


def hour_angle(target: CelestialTarget, observer: GeoPoint, time: datetime) -> float:
    """Hour angle of a target in degrees, [0, 360)."""
    return wrap_degrees(local_sidereal_time(time, observer.lng) - target.ra_hours * 15.0)


def to_horizontal(
    target: CelestialTarget,
    observer: GeoPoint,
    time: datetime,
) -> HorizontalPosition:
    """Convert equatorial coordinates to altitude/azimuth.

    Args:
        target: Right ascension / declination of the object
        observer: Observer position
        time: Instant of observation

    Returns:
        HorizontalPosition in degrees
    """
    ha = math.radians(hour_angle(target, observer, time))
    dec = math.radians(target.dec_deg)
    lat = math.radians(observer.lat)

    sin_alt = math.sin(dec) * math.sin(lat) + math.cos(dec) * math.cos(lat) * math.cos(ha)
    alt = math.asin(clamp(sin_alt, -1.0, 1.0))

    denominator = math.cos(lat) * math.cos(alt)
    if abs(denominator) < _DEGENERATE_EPSILON:
        azimuth = 0.0
    else:
        cos_az = (math.sin(dec) - math.sin(lat) * math.sin(alt)) / denominator
        azimuth = math.degrees(math.acos(clamp(cos_az, -1.0, 1.0)))
        if math.sin(ha) > 0:
            azimuth = 360.0 - azimuth

    return HorizontalPosition(altitude_deg=math.degrees(alt), azimuth_deg=azimuth)

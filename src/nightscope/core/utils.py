"""Common utilities."""

import math
from datetime import datetime, timezone

from nightscope.core.exceptions import InvalidLocationError


def validate_coordinates(lat: float, lng: float) -> tuple[float, float]:
    """Validate latitude/longitude supplied by a user.

    Args:
        lat: Latitude in degrees (-90 to 90)
        lng: Longitude in degrees (-180 to 180)

    Returns:
        Tuple of (latitude, longitude)

    Raises:
        InvalidLocationError: If coordinates are NaN or out of range
    """
    if math.isnan(lat) or not -90 <= lat <= 90:
        raise InvalidLocationError(lat=lat)
    if math.isnan(lng) or not -180 <= lng <= 180:
        raise InvalidLocationError(lng=lng)
    return (lat, lng)


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC, convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def wrap_degrees(angle: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = angle % 360.0
    # -1e-15 % 360 rounds to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def finite_or_none(value: float | None) -> float | None:
    """Return value unless it is None, NaN or infinite."""
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def linear_interpolate(
    value: float,
    in_min: float,
    in_max: float,
    out_min: float,
    out_max: float,
) -> float:
    """Linear interpolation from one range to another.

    Args:
        value: Input value
        in_min, in_max: Input range
        out_min, out_max: Output range

    Returns:
        Interpolated value in output range
    """
    if in_max == in_min:
        return out_min
    ratio = (value - in_min) / (in_max - in_min)
    return out_min + ratio * (out_max - out_min)

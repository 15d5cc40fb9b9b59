"""Core utilities and exceptions."""

from nightscope.core.exceptions import (
    ConfigError,
    EphemerisError,
    FeedParseError,
    InvalidLocationError,
    NightscopeError,
    WeatherAPIError,
)

__all__ = [
    "NightscopeError",
    "ConfigError",
    "WeatherAPIError",
    "FeedParseError",
    "EphemerisError",
    "InvalidLocationError",
]

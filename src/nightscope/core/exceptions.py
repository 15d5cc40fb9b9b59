"""Custom exception hierarchy for Nightscope."""


class NightscopeError(Exception):
    """Base exception for all Nightscope errors."""

    pass


class ConfigError(NightscopeError):
    """Configuration-related errors."""

    pass


class WeatherAPIError(NightscopeError):
    """Weather feed failures (HTTP errors, timeouts, bad result codes)."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message)


class FeedParseError(WeatherAPIError):
    """Feed responded, but the payload could not be parsed."""

    pass


class EphemerisError(NightscopeError):
    """Ephemeris data could not be loaded or evaluated."""

    pass


class InvalidLocationError(NightscopeError):
    """Invalid coordinates provided."""

    def __init__(self, lat: float | None = None, lng: float | None = None):
        self.lat = lat
        self.lng = lng
        message = "Invalid coordinates"
        if lat is not None:
            message += f" (latitude: {lat})"
        if lng is not None:
            message += f" (longitude: {lng})"
        super().__init__(message)

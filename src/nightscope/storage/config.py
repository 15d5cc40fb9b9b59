"""Configuration management using TOML."""

import os
import sys
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w
from pydantic import ValidationError

from nightscope.core.exceptions import ConfigError, InvalidLocationError
from nightscope.core.utils import validate_coordinates
from nightscope.geo.models import GeoPoint

AUTH_KEY_ENV = "KMA_SERVICE_KEY"

DEFAULT_SETTINGS: dict[str, Any] = {
    "point_refresh_minutes": 5,
    "cloud_refresh_minutes": 10,
    "fetch_timeout_seconds": 30,
    "default_latitude": 36.5,
    "default_longitude": 127.5,
}


class ConfigManager:
    """Manages user configuration stored in ~/.nightscope/."""

    DEFAULT_DIR = Path.home() / ".nightscope"
    CONFIG_FILENAME = "config.toml"

    def __init__(self, config_dir: Path | None = None):
        """Initialize config manager.

        Args:
            config_dir: Custom config directory (default: ~/.nightscope/)
        """
        self.config_dir = config_dir or self.DEFAULT_DIR
        self.config_file = self.config_dir / self.CONFIG_FILENAME
        self._config: dict[str, Any] = {}
        self._ensure_config_exists()
        self._load_config()

    def _ensure_config_exists(self) -> None:
        """Create config directory and default config if needed."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        if not self.config_file.exists():
            default_config = {
                "settings": dict(DEFAULT_SETTINGS),
                "locations": {},
            }
            self._write_config(default_config)

    def _load_config(self) -> None:
        """Load configuration from file."""
        try:
            with open(self.config_file, "rb") as f:
                self._config = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config: {e}") from e

    def _write_config(self, config: dict[str, Any] | None = None) -> None:
        """Write configuration to file."""
        if config is not None:
            self._config = config
        try:
            with open(self.config_file, "wb") as f:
                tomli_w.dump(self._config, f)
        except (OSError, TypeError) as e:
            raise ConfigError(f"Failed to write config: {e}") from e

    def _save(self) -> None:
        """Save current config to file."""
        self._write_config()

    # Settings
    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value, falling back to the built-in default."""
        if default is None:
            default = DEFAULT_SETTINGS.get(key)
        return self._config.get("settings", {}).get(key, default)

    def set_setting(self, key: str, value: Any) -> None:
        """Set a setting value."""
        if "settings" not in self._config:
            self._config["settings"] = {}
        self._config["settings"][key] = value
        self._save()

    def all_settings(self) -> dict[str, Any]:
        """Defaults overlaid with the stored settings."""
        return {**DEFAULT_SETTINGS, **self._config.get("settings", {})}

    @property
    def auth_key(self) -> str | None:
        """KMA API Hub key (the environment variable wins)."""
        return os.environ.get(AUTH_KEY_ENV) or self.get_setting("auth_key")

    @property
    def point_refresh_seconds(self) -> float:
        return float(self.get_setting("point_refresh_minutes")) * 60

    @property
    def cloud_refresh_seconds(self) -> float:
        return float(self.get_setting("cloud_refresh_minutes")) * 60

    @property
    def fetch_timeout_seconds(self) -> float:
        return float(self.get_setting("fetch_timeout_seconds"))

    @property
    def default_point(self) -> GeoPoint:
        """Point used when no location is given (center of the peninsula)."""
        try:
            lat, lng = validate_coordinates(
                float(self.get_setting("default_latitude")),
                float(self.get_setting("default_longitude")),
            )
            return GeoPoint(lat=lat, lng=lng)
        except (TypeError, ValueError, InvalidLocationError) as e:
            raise ConfigError(f"Invalid default coordinates: {e}") from e

    @property
    def ephemeris_dir(self) -> Path:
        """Directory holding the ephemeris file."""
        custom = self.get_setting("ephemeris_dir")
        if custom:
            return Path(custom).expanduser()
        return self.data_dir

    # Locations
    def get_default_location(self) -> tuple[str, GeoPoint] | None:
        """Get the default location as (name, point)."""
        locations = self._config.get("locations", {})
        default_name = self._config.get("default_location")
        if default_name and default_name in locations:
            return default_name, self.get_location(default_name)
        # Return first location if no default set
        if locations:
            first_name = next(iter(locations))
            return first_name, self.get_location(first_name)
        return None

    def set_default_location(self, name: str) -> None:
        """Set the default location by name."""
        if name not in self._config.get("locations", {}):
            raise ConfigError(f"Location '{name}' not found")
        self._config["default_location"] = name
        self._save()

    def get_location(self, name: str) -> GeoPoint | None:
        """Get a location by name."""
        locations = self._config.get("locations", {})
        if name not in locations:
            return None
        loc_data = locations[name]
        try:
            return GeoPoint(lat=loc_data["latitude"], lng=loc_data["longitude"])
        except (KeyError, ValidationError) as e:
            raise ConfigError(f"Location '{name}' is malformed: {e}") from e

    def get_all_locations(self) -> dict[str, GeoPoint]:
        """Get all saved locations."""
        return {name: self.get_location(name) for name in self._config.get("locations", {})}

    def add_location(
        self,
        name: str,
        latitude: float,
        longitude: float,
        set_default: bool = False,
    ) -> GeoPoint:
        """Add a new location.

        Args:
            name: Location name
            latitude: Latitude in degrees
            longitude: Longitude in degrees
            set_default: Whether to set this as the default location

        Returns:
            The stored point
        """
        try:
            validate_coordinates(latitude, longitude)
        except InvalidLocationError as e:
            raise ConfigError(f"Invalid coordinates for '{name}': {e}") from e
        point = GeoPoint(lat=latitude, lng=longitude)

        if "locations" not in self._config:
            self._config["locations"] = {}

        self._config["locations"][name] = {
            "latitude": latitude,
            "longitude": longitude,
        }

        if set_default or not self._config.get("default_location"):
            self._config["default_location"] = name

        self._save()
        return point

    def remove_location(self, name: str) -> bool:
        """Remove a location by name.

        Returns:
            True if location was removed, False if it didn't exist
        """
        if name not in self._config.get("locations", {}):
            return False

        del self._config["locations"][name]

        # Clear default if it was the removed location
        if self._config.get("default_location") == name:
            locations = self._config.get("locations", {})
            if locations:
                self._config["default_location"] = next(iter(locations))
            else:
                self._config.pop("default_location", None)

        self._save()
        return True

    @property
    def data_dir(self) -> Path:
        """Get the data directory for the ephemeris and logs."""
        data_dir = self.config_dir / "data"
        data_dir.mkdir(exist_ok=True)
        return data_dir

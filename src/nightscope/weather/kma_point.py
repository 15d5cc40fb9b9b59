"""KMA high-resolution point observation client.

The endpoint returns a whitespace/comma separated text table::

    #START7777
    # ... help text ...
    # tm, ta, hm, ws_10m, wd_10m, pa, rn_60m
    202501011200, -1.2, 45.0, 2.1, 270.0, 1021.3, 0.0
    #7777END

Only the last data row (the most recent sample) is used.
"""

import logging
import math
import re
from datetime import datetime, timedelta

from nightscope.core.exceptions import FeedParseError
from nightscope.core.utils import ensure_utc, utc_now
from nightscope.geo.models import GeoPoint
from nightscope.weather.base import KST, KmaClient
from nightscope.weather.models import PointObservation, WeatherSnapshot

logger = logging.getLogger(__name__)

_SPLIT = re.compile(r"[,\s]+")

# Values at or below this are "no data" markers (-99, -99.9, -999)
SENTINEL = -99.0

# Feed variable -> PointObservation field
VARIABLES = {
    "ta": "temperature_c",
    "hm": "humidity_pct",
    "ws_10m": "wind_speed_ms",
    "wd_10m": "wind_direction_deg",
    "pa": "pressure_hpa",
    "rn_60m": "precipitation_mm_1h",
}


def _parse_cell(raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value) or value <= SENTINEL:
        return None
    return value


def parse_point_table(text: str) -> PointObservation:
    """Parse the feed's text table into a PointObservation.

    Args:
        text: Raw response body

    Returns:
        PointObservation built from the last data row

    Raises:
        FeedParseError: If there is no header line or no data row
    """
    lines = [ln.strip() for ln in text.strip().splitlines()]

    header_idx = next((i for i, ln in enumerate(lines) if ln.startswith("# tm")), None)
    if header_idx is None:
        raise FeedParseError("No header line found", source="kma_point")

    header = [h for h in _SPLIT.split(lines[header_idx][1:].strip()) if h]
    rows = [ln for ln in lines[header_idx + 1:] if ln and not ln.startswith("#")]
    if not rows:
        raise FeedParseError("No data rows", source="kma_point")

    last_row = [cell for cell in _SPLIT.split(rows[-1]) if cell]
    values = {
        key: _parse_cell(last_row[idx]) if idx < len(last_row) else None
        for idx, key in enumerate(header)
    }

    return PointObservation(
        **{field: values.get(variable) for variable, field in VARIABLES.items()}
    )


class KmaPointClient(KmaClient):
    """Client for the KMA point observation (sfc_nc_var) endpoint."""

    BASE_URL = "https://apihub.kma.go.kr/api/typ01/url/sfc_nc_var.php"
    SOURCE = "kma_point"
    INTERVAL_MINUTES = 5

    @staticmethod
    def _format_time(dt: datetime) -> str:
        """YYYYMMDDHHmm in KST, minutes floored to the 5-minute sample grid."""
        local = ensure_utc(dt).astimezone(KST)
        minute = local.minute // 5 * 5
        return local.strftime("%Y%m%d%H") + f"{minute:02d}"

    def build_params(self, lat: float, lng: float, now: datetime | None = None) -> dict:
        """Query parameters for the last 30 minutes at a location."""
        now = now or utc_now()
        return {
            "tm1": self._format_time(now - timedelta(minutes=30)),
            "tm2": self._format_time(now),
            "lat": lat,
            "lon": lng,
            "obs": ",".join(VARIABLES),
            "itv": self.INTERVAL_MINUTES,
            "help": 1,
        }

    async def get_observation(
        self, lat: float, lng: float, now: datetime | None = None
    ) -> PointObservation:
        """Get the most recent observation at a location.

        Args:
            lat: Latitude
            lng: Longitude
            now: Reference time (default: current time)

        Returns:
            Latest PointObservation
        """
        response = await self._get(self.BASE_URL, self.build_params(lat, lng, now))
        logger.debug(f"Point feed returned {len(response.text)} bytes")
        return parse_point_table(response.text)

    async def get_snapshot(self, location: GeoPoint) -> WeatherSnapshot:
        """Get the latest observation as a WeatherSnapshot."""
        now = utc_now()
        observation = await self.get_observation(location.lat, location.lng, now)
        return WeatherSnapshot.from_observation(
            observation,
            coord=location,
            timestamp=int(now.timestamp()),
            source=self.SOURCE,
        )

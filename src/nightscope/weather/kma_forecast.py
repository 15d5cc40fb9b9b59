"""KMA short-range village forecast client.

The forecast is issued eight times a day (02, 05, ..., 23 KST) on the same
5 km grid used by GridProjector, as one item per (category, date, time).
"""

import logging
from datetime import date, datetime, timedelta

from nightscope.core.exceptions import FeedParseError
from nightscope.core.utils import ensure_utc, finite_or_none, utc_now
from nightscope.geo.models import GridCoord
from nightscope.weather.base import KST, KmaClient, response_items
from nightscope.weather.models import ForecastPoint, SkyCondition

logger = logging.getLogger(__name__)

ISSUE_HOURS = (2, 5, 8, 11, 14, 17, 20, 23)

# Night-time slots tried in order on the target date
NIGHT_SLOTS = ("2100", "0000", "0300", "1800")

# Forecast category -> ForecastPoint field
CATEGORIES = {
    "TMP": "temperature_c",
    "REH": "humidity_pct",
    "SKY": "sky_condition",
    "WSD": "wind_speed_ms",
    "POP": "precipitation_probability_pct",
}


def base_date_time(now: datetime | None = None) -> tuple[str, str]:
    """Latest forecast issue at or before now.

    Args:
        now: Reference time (default: current time)

    Returns:
        Tuple of (base_date YYYYMMDD, base_time HHMM) in KST
    """
    local = ensure_utc(now or utc_now()).astimezone(KST)
    if local.hour < ISSUE_HOURS[0]:
        local -= timedelta(days=1)
        hour = ISSUE_HOURS[-1]
    else:
        hour = max(h for h in ISSUE_HOURS if h <= local.hour)
    return local.strftime("%Y%m%d"), f"{hour:02d}00"


def _convert(category: str, raw) -> float | SkyCondition | None:
    value = finite_or_none(raw)
    if value is None:
        return None
    if category == "SKY":
        return SkyCondition.from_code(int(value))
    return value


def extract_forecast(
    items: list[dict],
    target_date: date,
    base_date: str,
    base_time: str,
) -> ForecastPoint:
    """Pick the night-time values for a date out of the forecast items.

    The first night slot with any data on the target date supplies what it
    has; categories still missing fall back to the first item on or after
    the target date.

    Args:
        items: Forecast items (category, fcstDate, fcstTime, fcstValue)
        target_date: Night to forecast
        base_date: Issue date of the items
        base_time: Issue time of the items

    Returns:
        ForecastPoint, with None for categories not found
    """
    target = target_date.strftime("%Y%m%d")
    relevant = [it for it in items if it.get("category") in CATEGORIES]

    values: dict[str, float | SkyCondition] = {}
    forecast_time = None

    for slot in NIGHT_SLOTS:
        at_slot = [
            it for it in relevant
            if it.get("fcstDate") == target and it.get("fcstTime") == slot
        ]
        if not at_slot:
            continue
        forecast_time = slot
        for it in at_slot:
            value = _convert(it["category"], it.get("fcstValue"))
            if value is not None:
                values.setdefault(CATEGORIES[it["category"]], value)
        break

    for it in relevant:
        field = CATEGORIES[it["category"]]
        if field in values or str(it.get("fcstDate", "")) < target:
            continue
        value = _convert(it["category"], it.get("fcstValue"))
        if value is not None:
            values[field] = value

    if forecast_time is None:
        logger.debug(f"No night slot for {target}, using first available values")

    return ForecastPoint(
        target_date=target_date,
        base_date=base_date,
        base_time=base_time,
        forecast_time=forecast_time,
        **values,
    )


class KmaForecastClient(KmaClient):
    """Client for the village forecast (getVilageFcst) endpoint."""

    BASE_URL = (
        "https://apihub.kma.go.kr/api/typ02/openApi/"
        "VilageFcstInfoService_2.0/getVilageFcst"
    )
    SOURCE = "kma_forecast"
    ROWS = 1000

    def build_params(self, grid: GridCoord, now: datetime | None = None) -> dict:
        base_date, base_time = base_date_time(now)
        return {
            "numOfRows": self.ROWS,
            "pageNo": 1,
            "dataType": "JSON",
            "base_date": base_date,
            "base_time": base_time,
            "nx": grid.nx,
            "ny": grid.ny,
        }

    async def get_forecast(
        self,
        grid: GridCoord,
        target_date: date,
        now: datetime | None = None,
    ) -> ForecastPoint:
        """Get the night-time forecast for a grid cell.

        Args:
            grid: Forecast grid cell
            target_date: Night to forecast
            now: Reference time for choosing the issue (default: current time)

        Returns:
            ForecastPoint

        Raises:
            WeatherAPIError: If the request fails or the payload is malformed
        """
        params = self.build_params(grid, now)
        data = await self._get_json(self.BASE_URL, params)
        items = response_items(data, source=self.SOURCE)
        logger.debug(
            f"Forecast {params['base_date']} {params['base_time']} for "
            f"({grid.nx}, {grid.ny}): {len(items)} items"
        )
        try:
            return extract_forecast(
                items, target_date, params["base_date"], params["base_time"]
            )
        except ValueError as e:
            raise FeedParseError(f"Invalid forecast values: {e}", source=self.SOURCE) from e

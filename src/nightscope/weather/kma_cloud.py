"""GK-2A satellite cloud-detection grid client."""

import logging
from datetime import datetime, timedelta

from pydantic import ValidationError

from nightscope.core.exceptions import FeedParseError
from nightscope.core.utils import ensure_utc, utc_now
from nightscope.weather.base import KmaClient, response_items
from nightscope.weather.models import CloudGrid

logger = logging.getLogger(__name__)

DEFAULT_GRID_KM = 2.0


def cloud_grid_datetime(now: datetime | None = None) -> str:
    """Product time to request: 30 minutes ago in UTC, floored to 10 minutes.

    The satellite product is published with a lag, so the most recent slot
    is usually not available yet.

    Args:
        now: Reference time (default: current time)

    Returns:
        YYYYMMDDHHmm string
    """
    target = ensure_utc(now or utc_now()) - timedelta(minutes=30)
    minute = target.minute // 10 * 10
    return target.strftime("%Y%m%d%H") + f"{minute:02d}"


def _parse_values(raw, count: int) -> list[float]:
    if isinstance(raw, str):
        cells = [c.strip() for c in raw.split(",")]
    elif isinstance(raw, list):
        cells = raw
    else:
        cells = []

    values = []
    for i in range(count):
        try:
            values.append(float(cells[i]))
        except (IndexError, TypeError, ValueError):
            values.append(0.0)
    return values


def parse_cloud_grid(data: dict) -> CloudGrid:
    """Build a CloudGrid from a decoded cloud-grid response.

    Args:
        data: JSON body with a successful result header

    Returns:
        CloudGrid with values reshaped row-major

    Raises:
        FeedParseError: If the payload has no item or bad dimensions
    """
    items = response_items(data, source="kma_cloud")
    if not items:
        raise FeedParseError("Cloud grid response has no items", source="kma_cloud")
    item = items[0]

    try:
        width = int(item["xdim"])
        height = int(item["ydim"])
        origin_lng = float(item["x0"])
        origin_lat = float(item["y0"])
        cell_size = float(item.get("gridKm") or DEFAULT_GRID_KM)
    except (KeyError, TypeError, ValueError) as e:
        raise FeedParseError(f"Bad cloud grid header: {e}", source="kma_cloud") from e

    if width < 0 or height < 0:
        raise FeedParseError(
            f"Negative grid dimensions {width}x{height}", source="kma_cloud"
        )

    flat = _parse_values(item.get("value"), width * height)
    rows = [flat[y * width:(y + 1) * width] for y in range(height)]

    try:
        return CloudGrid(
            date_time=str(item.get("dateTime", "")),
            origin_lat=origin_lat,
            origin_lng=origin_lng,
            cell_size_km=cell_size,
            width=width,
            height=height,
            values=rows,
        )
    except ValidationError as e:
        raise FeedParseError(f"Invalid cloud grid: {e}", source="kma_cloud") from e


class KmaCloudGridClient(KmaClient):
    """Client for the GK-2A cloud-detection (getGk2acldAll) endpoint."""

    BASE_URL = (
        "https://apihub.kma.go.kr/api/typ02/openApi/"
        "CloudSatlitInfoService/getGk2acldAll"
    )
    SOURCE = "kma_cloud"

    def build_params(self, now: datetime | None = None) -> dict:
        return {
            "pageNo": 1,
            "numOfRows": 999999,
            "dataType": "JSON",
            "resultType": "cld",
            "dateTime": cloud_grid_datetime(now),
        }

    async def get_cloud_grid(self, now: datetime | None = None) -> CloudGrid:
        """Get the latest published cloud grid.

        Args:
            now: Reference time (default: current time)

        Returns:
            CloudGrid
        """
        data = await self._get_json(self.BASE_URL, self.build_params(now))
        grid = parse_cloud_grid(data)
        logger.debug(f"Cloud grid {grid.date_time}: {grid.width}x{grid.height}")
        return grid

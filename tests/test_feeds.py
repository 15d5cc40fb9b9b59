"""Tests for the KMA feed clients, using httpx.MockTransport."""

import json
from datetime import date, datetime, timezone

import httpx
import pytest

from nightscope.core.exceptions import FeedParseError, WeatherAPIError
from nightscope.geo.models import GeoPoint, GridCoord
from nightscope.weather.base import KST, response_items
from nightscope.weather.kma_cloud import (
    KmaCloudGridClient,
    cloud_grid_datetime,
    parse_cloud_grid,
)
from nightscope.weather.kma_forecast import (
    KmaForecastClient,
    base_date_time,
    extract_forecast,
)
from nightscope.weather.kma_point import KmaPointClient, parse_point_table
from nightscope.weather.models import SkyCondition

POINT_TABLE = """#START7777
# sfc_nc_var: high-resolution point observation
# tm, ta, hm, ws_10m, wd_10m, pa, rn_60m
202505282100, 14.0, 60.0, 1.5, 200.0, 1012.0, 0.0
202505282105, 14.2, 55.0, 2.1, 210.0, 1012.1, -99.0
#7777END
"""


def kma_json(items=None, code: str = "00", message: str = "NORMAL_SERVICE") -> dict:
    body = {"items": {"item": items}} if items is not None else {}
    return {"response": {"header": {"resultCode": code, "resultMsg": message}, "body": body}}


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestPointTable:
    """Test the point-observation text table parser."""

    def test_uses_last_row(self):
        observation = parse_point_table(POINT_TABLE)
        assert observation.temperature_c == 14.2
        assert observation.humidity_pct == 55.0
        assert observation.wind_speed_ms == 2.1
        assert observation.wind_direction_deg == 210.0
        assert observation.pressure_hpa == 1012.1

    def test_sentinel_is_missing(self):
        assert parse_point_table(POINT_TABLE).precipitation_mm_1h is None

    def test_short_row(self):
        table = "# tm ta hm ws_10m\n202505282105 -3.5\n"
        observation = parse_point_table(table)
        assert observation.temperature_c == -3.5
        assert observation.humidity_pct is None
        assert observation.wind_speed_ms is None

    def test_no_header(self):
        with pytest.raises(FeedParseError):
            parse_point_table("202505282105, 14.2, 55.0\n")

    def test_no_rows(self):
        with pytest.raises(FeedParseError):
            parse_point_table("#START7777\n# tm, ta, hm\n#7777END\n")


class TestPointClient:
    """Test the point-observation client."""

    def test_params(self):
        client = KmaPointClient("key")
        params = client.build_params(37.5, 127.0, datetime(2025, 5, 28, 12, 7, tzinfo=timezone.utc))
        assert params["tm2"] == "202505282105"
        assert params["tm1"] == "202505282035"
        assert params["lat"] == 37.5
        assert params["lon"] == 127.0
        assert params["obs"] == "ta,hm,ws_10m,wd_10m,pa,rn_60m"

    async def test_get_snapshot(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, text=POINT_TABLE)

        location = GeoPoint(lat=37.5, lng=127.0)
        async with mock_client(handler) as http:
            snapshot = await KmaPointClient("secret", client=http).get_snapshot(location)

        assert seen["authKey"] == "secret"
        assert snapshot.coord == location
        assert snapshot.source == "kma_point"
        assert snapshot.temperature_c == 14.2
        assert snapshot.cloud_cover_pct is None
        assert snapshot.dew_point_c is not None
        assert snapshot.dew_point_c < snapshot.temperature_c

    async def test_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="internal error")

        async with mock_client(handler) as http:
            with pytest.raises(WeatherAPIError) as exc_info:
                await KmaPointClient("key", client=http).get_observation(37.5, 127.0)
        assert exc_info.value.source == "kma_point"

    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with mock_client(handler) as http:
            with pytest.raises(WeatherAPIError):
                await KmaPointClient("key", client=http).get_observation(37.5, 127.0)

    async def test_close_keeps_borrowed_client(self):
        http = mock_client(lambda request: httpx.Response(200, text=POINT_TABLE))
        client = KmaPointClient("key", client=http)
        await client.close()
        assert not http.is_closed
        await http.aclose()


class TestCloudGrid:
    """Test the satellite cloud-grid feed."""

    def test_datetime_lags_thirty_minutes(self):
        assert cloud_grid_datetime(datetime(2025, 5, 28, 12, 7, tzinfo=timezone.utc)) == (
            "202505281130"
        )

    def test_datetime_is_utc(self):
        local = datetime(2025, 5, 28, 21, 7, tzinfo=KST)
        assert cloud_grid_datetime(local) == "202505281130"

    def test_parse(self):
        data = kma_json(
            [
                {
                    "dateTime": "202505281130",
                    "xdim": "3",
                    "ydim": "2",
                    "x0": "127.0",
                    "y0": "35.0",
                    "gridKm": "2",
                    "value": "0,0.2,0.4,0.6,bad",
                }
            ]
        )
        grid = parse_cloud_grid(data)
        assert (grid.width, grid.height) == (3, 2)
        assert grid.origin_lat == 35.0
        assert grid.origin_lng == 127.0
        assert grid.values == [[0.0, 0.2, 0.4], [0.6, 0.0, 0.0]]

    def test_single_item_object(self):
        item = {"xdim": 1, "ydim": 1, "x0": 127, "y0": 35, "value": [0.5]}
        grid = parse_cloud_grid(kma_json(item))
        assert grid.values == [[0.5]]
        assert grid.cell_size_km == 2.0

    def test_no_items(self):
        with pytest.raises(FeedParseError):
            parse_cloud_grid(kma_json())

    def test_bad_header(self):
        with pytest.raises(FeedParseError):
            parse_cloud_grid(kma_json([{"xdim": "3"}]))

    def test_negative_dimensions(self):
        with pytest.raises(FeedParseError):
            parse_cloud_grid(kma_json([{"xdim": -1, "ydim": 2, "x0": 127, "y0": 35}]))

    async def test_client(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            item = {"dateTime": "202505281130", "xdim": 2, "ydim": 1, "x0": 127, "y0": 35,
                    "value": "0.1,0.9"}
            return httpx.Response(200, json=kma_json([item]))

        async with mock_client(handler) as http:
            grid = await KmaCloudGridClient("key", client=http).get_cloud_grid(
                datetime(2025, 5, 28, 12, 7, tzinfo=timezone.utc)
            )

        assert seen["dateTime"] == "202505281130"
        assert seen["resultType"] == "cld"
        assert grid.values == [[0.1, 0.9]]

    async def test_result_code_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=kma_json(code="03", message="NO_DATA"))

        async with mock_client(handler) as http:
            with pytest.raises(WeatherAPIError, match="NO_DATA"):
                await KmaCloudGridClient("key", client=http).get_cloud_grid()

    async def test_non_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<OpenAPI_ServiceResponse>")

        async with mock_client(handler) as http:
            with pytest.raises(FeedParseError):
                await KmaCloudGridClient("key", client=http).get_cloud_grid()


def forecast_item(category: str, fcst_date: str, fcst_time: str, value) -> dict:
    return {
        "category": category,
        "fcstDate": fcst_date,
        "fcstTime": fcst_time,
        "fcstValue": str(value),
    }


class TestBaseDateTime:
    """Test forecast issue selection."""

    @pytest.mark.parametrize(
        "local,expected",
        [
            (datetime(2025, 5, 28, 0, 30), ("20250527", "2300")),
            (datetime(2025, 5, 28, 1, 59), ("20250527", "2300")),
            (datetime(2025, 5, 28, 2, 0), ("20250528", "0200")),
            (datetime(2025, 5, 28, 14, 59), ("20250528", "1400")),
            (datetime(2025, 5, 28, 23, 30), ("20250528", "2300")),
        ],
    )
    def test_issue(self, local: datetime, expected: tuple[str, str]):
        assert base_date_time(local.replace(tzinfo=KST)) == expected

    def test_utc_input(self):
        # 15:30 UTC is 00:30 KST the next day
        assert base_date_time(datetime(2025, 5, 27, 15, 30, tzinfo=timezone.utc)) == (
            "20250527",
            "2300",
        )


class TestExtractForecast:
    """Test night-slot selection with per-category fallback."""

    ITEMS = [
        forecast_item("POP", "20250527", "2300", 80),
        forecast_item("TMP", "20250528", "2100", 16),
        forecast_item("REH", "20250528", "2100", 70),
        forecast_item("SKY", "20250528", "2100", 1),
        forecast_item("WSD", "20250528", "1800", 3.0),
        forecast_item("UUU", "20250528", "2100", 1.2),
        forecast_item("POP", "20250529", "0000", 20),
    ]

    def test_night_slot_values(self):
        point = extract_forecast(self.ITEMS, date(2025, 5, 28), "20250528", "1400")
        assert point.forecast_time == "2100"
        assert point.temperature_c == 16
        assert point.humidity_pct == 70
        assert point.sky_condition == SkyCondition.CLEAR
        assert point.cloud_cover_pct == 10

    def test_missing_categories_fall_back(self):
        point = extract_forecast(self.ITEMS, date(2025, 5, 28), "20250528", "1400")
        assert point.wind_speed_ms == 3.0
        # the 2025-05-27 item is before the target date
        assert point.precipitation_probability_pct == 20

    def test_slot_order(self):
        items = [
            forecast_item("TMP", "20250528", "1800", 20),
            forecast_item("TMP", "20250528", "0000", 12),
        ]
        point = extract_forecast(items, date(2025, 5, 28), "20250527", "2300")
        assert point.forecast_time == "0000"
        assert point.temperature_c == 12

    def test_no_night_slot(self):
        items = [forecast_item("SKY", "20250529", "0600", 4)]
        point = extract_forecast(items, date(2025, 5, 28), "20250528", "1400")
        assert point.forecast_time is None
        assert point.sky_condition == SkyCondition.OVERCAST

    def test_no_items(self):
        point = extract_forecast([], date(2025, 5, 28), "20250528", "1400")
        assert point.temperature_c is None
        assert point.cloud_cover_pct is None

    async def test_client(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, content=json.dumps(kma_json(self.ITEMS)))

        async with mock_client(handler) as http:
            point = await KmaForecastClient("key", client=http).get_forecast(
                GridCoord(nx=60, ny=127),
                date(2025, 5, 28),
                now=datetime(2025, 5, 28, 14, 30, tzinfo=KST),
            )

        assert seen["nx"] == "60"
        assert seen["ny"] == "127"
        assert seen["base_date"] == "20250528"
        assert seen["base_time"] == "1400"
        assert point.base_time == "1400"
        assert point.humidity_pct == 70

    async def test_malformed_items(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=kma_json(["x"]))

        async with mock_client(handler) as http:
            with pytest.raises(FeedParseError, match="Malformed items"):
                await KmaForecastClient("key", client=http).get_forecast(
                    GridCoord(nx=60, ny=127), date(2025, 5, 28)
                )

    async def test_missing_header(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"response": ["x"]})

        async with mock_client(handler) as http:
            with pytest.raises(FeedParseError, match="no result header"):
                await KmaForecastClient("key", client=http).get_forecast(
                    GridCoord(nx=60, ny=127), date(2025, 5, 28)
                )


class TestResponseItems:
    """Test item extraction from the JSON envelope."""

    def test_lone_object(self):
        assert response_items(kma_json({"a": 1})) == [{"a": 1}]

    @pytest.mark.parametrize("body", [{}, {"items": ""}, {"items": {"item": []}}])
    def test_empty(self, body: dict):
        assert response_items({"response": {"body": body}}) == []

    @pytest.mark.parametrize("items", [["x"], [{"a": 1}, 3], "abc", 7])
    def test_non_object_items(self, items):
        with pytest.raises(FeedParseError):
            response_items(kma_json(items), source="kma_forecast")

"""Tests for the offline CLI commands."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from nightscope.cli.main import cli
from nightscope.storage.config import AUTH_KEY_ENV


@pytest.fixture
def invoke(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(AUTH_KEY_ENV, raising=False)
    runner = CliRunner()

    def run(*args: str):
        return runner.invoke(cli, ["--config-dir", str(tmp_path), *args])

    return run


class TestGridCommands:
    """Test grid conversions."""

    def test_to_grid(self, invoke):
        result = invoke("grid", "to-grid", "37.5665", "126.978")
        assert result.exit_code == 0
        assert "60" in result.output
        assert "127" in result.output

    def test_to_latlng(self, invoke):
        result = invoke("grid", "to-latlng", "43", "136")
        assert result.exit_code == 0
        assert "38.0000" in result.output
        assert "126.0000" in result.output


class TestConfigCommands:
    """Test configuration commands."""

    def test_location_round_trip(self, invoke):
        added = invoke(
            "config", "location", "add", "--lat", "37.37", "--lng", "128.39", "--name", "anbandegi"
        )
        assert added.exit_code == 0

        listed = invoke("config", "location", "list")
        assert listed.exit_code == 0
        assert "anbandegi" in listed.output

        removed = invoke("config", "location", "remove", "anbandegi")
        assert removed.exit_code == 0
        assert "No locations" in invoke("config", "location", "list").output

    def test_invalid_location(self, invoke):
        result = invoke(
            "config", "location", "add", "--lat", "95", "--lng", "127", "--name", "bad"
        )
        assert result.exit_code == 1
        assert "Invalid coordinates" in result.output
        assert "No locations" in invoke("config", "location", "list").output

    def test_set_typed_value(self, invoke):
        assert invoke("config", "set", "cloud_refresh_minutes", "15").exit_code == 0
        assert "cloud_refresh_minutes: 15" in invoke("config", "show").output

    def test_set_bad_value(self, invoke):
        assert invoke("config", "set", "cloud_refresh_minutes", "soon").exit_code == 1

    def test_now_requires_api_key(self, invoke):
        result = invoke("now", "--lat", "35.5", "--lng", "128.0")
        assert result.exit_code == 1
        assert "No KMA API key" in result.output


class TestLocationOptions:
    """Test explicit --lat/--lng handling."""

    def test_sky_rejects_out_of_range(self, invoke):
        result = invoke("sky", "--lat", "95", "--lng", "127")
        assert result.exit_code == 1
        assert "Invalid coordinates" in result.output

    def test_sky_needs_both_coordinates(self, invoke):
        result = invoke("sky", "--lat", "37.0")
        assert result.exit_code == 1
        assert "Both --lat and --lng" in result.output

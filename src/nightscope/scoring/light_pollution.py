"""Coarse static light-pollution classification for South Korea.

A handful of bounding boxes stands in for a real sky-brightness map.
"""

from pydantic import BaseModel, Field

from nightscope.core.utils import finite_or_none


class LightPollutionClass(BaseModel):
    """Light-pollution estimate for a location."""

    score: float = Field(ge=0, le=100, description="0 (bright city) to 100 (dark sky)")
    bortle: int = Field(ge=1, le=9, description="Bortle-like darkness level")
    description: str


CAPITAL_REGION = LightPollutionClass(score=20, bortle=8, description="Capital region")
METROPOLITAN = LightPollutionClass(score=30, bortle=7, description="Metropolitan city")
POPULATED = LightPollutionClass(score=60, bortle=5, description="Small city / suburban")
RURAL = LightPollutionClass(score=90, bortle=2, description="Rural or mountain area")

# (lat_min, lat_max, lng_min, lng_max)
_CAPITAL_BOX = (37.0, 37.8, 126.5, 127.5)
_METRO_BOXES = {
    "Busan": (35.0, 35.3, 129.0, 129.3),
    "Daegu": (35.8, 36.0, 128.5, 128.7),
    "Gwangju": (35.1, 35.2, 126.8, 126.9),
}
_POPULATED_BAND = (36.0, 38.0, 126.0, 130.0)


def _inside(lat: float, lng: float, box: tuple[float, float, float, float]) -> bool:
    lat_min, lat_max, lng_min, lng_max = box
    return lat_min <= lat <= lat_max and lng_min <= lng <= lng_max


def classify_light_pollution(lat: float, lng: float) -> LightPollutionClass:
    """Classify a location's light pollution.

    Args:
        lat: Latitude
        lng: Longitude

    Returns:
        LightPollutionClass (RURAL for anything outside the known areas)
    """
    if _inside(lat, lng, _CAPITAL_BOX):
        return CAPITAL_REGION
    if any(_inside(lat, lng, box) for box in _METRO_BOXES.values()):
        return METROPOLITAN
    if _inside(lat, lng, _POPULATED_BAND):
        return POPULATED
    return RURAL


def calculate_light_pollution_score(lat: float | None, lng: float | None) -> float:
    """Light-pollution score 0-100, neutral 50 for an unknown location."""
    lat = finite_or_none(lat)
    lng = finite_or_none(lng)
    if lat is None or lng is None:
        return 50.0
    return classify_light_pollution(lat, lng).score

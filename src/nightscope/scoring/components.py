"""Individual scoring component functions.

Each function calculates a score from 0-100 for one factor. Higher scores
indicate better conditions for seeing the Milky Way. Every input may be
unknown (None), in which case a neutral value is used.
"""

from nightscope.core.utils import clamp, finite_or_none, linear_interpolate
from nightscope.weather.derived import absolute_humidity
from nightscope.weather.models import SkyCondition

NEUTRAL_SCORE = 50.0


def calculate_cloud_score(
    cloud_cover_pct: float | None,
    sky_condition: SkyCondition | None = None,
) -> float:
    """Calculate score based on cloud cover.

    A categorical sky condition is turned into a representative cover
    (clear 10%, partly cloudy 50%, overcast 80%) before scoring.

    Args:
        cloud_cover_pct: Total cloud cover 0-100%
        sky_condition: Categorical sky state, used if cover is unknown

    Returns:
        Score 0-100
    """
    cover = finite_or_none(cloud_cover_pct)
    if cover is None and sky_condition is not None:
        cover = sky_condition.cloud_cover_pct
    if cover is None:
        return NEUTRAL_SCORE
    return clamp(100 - cover, 0, 100)


def humidity_term(humidity_pct: float | None) -> float:
    """Transparency contribution of relative humidity."""
    humidity = finite_or_none(humidity_pct)
    if humidity is None:
        return NEUTRAL_SCORE
    if humidity <= 40:
        return 100.0
    elif humidity <= 60:
        return 80.0
    elif humidity <= 80:
        return 50.0
    else:
        return 20.0


def visibility_term(visibility_m: float) -> float:
    """Transparency contribution of horizontal visibility."""
    if visibility_m >= 10_000:
        return 100.0
    elif visibility_m >= 5_000:
        return 80.0
    elif visibility_m >= 1_000:
        return 40.0
    else:
        return 10.0


def wind_term(wind_speed_ms: float) -> float:
    """Transparency contribution of wind (steady air keeps haze stable)."""
    if wind_speed_ms <= 5:
        return 100.0
    elif wind_speed_ms <= 10:
        return linear_interpolate(wind_speed_ms, 5, 10, 80, 40)
    else:
        return 40.0


def estimate_forecast_visibility(
    humidity_pct: float | None,
    precipitation_probability_pct: float | None = None,
) -> float:
    """Estimate visibility in meters from forecast humidity and rain chance.

    The forecast feed has no visibility element.
    """
    visibility = 15_000.0
    humidity = finite_or_none(humidity_pct)
    if humidity is not None:
        if humidity > 80:
            visibility = 5_000.0
        elif humidity > 60:
            visibility = 10_000.0

    pop = finite_or_none(precipitation_probability_pct)
    if pop is not None and pop > 50:
        visibility = min(visibility, 3_000.0)
    return visibility


def estimate_realtime_visibility(humidity_pct: float | None) -> float:
    """Estimate visibility in meters from observed humidity alone."""
    humidity = finite_or_none(humidity_pct)
    if humidity is None:
        return 15_000.0
    if humidity > 90:
        return 2_000.0
    elif humidity > 80:
        return 5_000.0
    elif humidity > 70:
        return 8_000.0
    elif humidity > 60:
        return 12_000.0
    return 15_000.0


def calculate_transparency_score(
    humidity_pct: float | None,
    visibility_m: float | None = None,
    wind_speed_ms: float | None = None,
    precipitation_probability_pct: float | None = None,
) -> float:
    """Calculate score based on atmospheric transparency.

    With a known visibility, or no wind observation, the forecast path
    weighs humidity (30%) against visibility (70%). With an observed wind
    speed and no visibility, the real-time path weighs wind (30%) against
    a visibility guessed from humidity (70%).

    Args:
        humidity_pct: Relative humidity 0-100%
        visibility_m: Horizontal visibility in meters
        wind_speed_ms: Wind speed in m/s
        precipitation_probability_pct: Chance of precipitation 0-100%

    Returns:
        Score 0-100
    """
    visibility = finite_or_none(visibility_m)
    wind = finite_or_none(wind_speed_ms)

    if visibility is None and wind is not None:
        proxy = estimate_realtime_visibility(humidity_pct)
        score = wind_term(wind) * 0.3 + visibility_term(proxy) * 0.7
    else:
        if visibility is None:
            visibility = estimate_forecast_visibility(
                humidity_pct, precipitation_probability_pct
            )
        score = humidity_term(humidity_pct) * 0.3 + visibility_term(visibility) * 0.7

    return clamp(round(score, 1), 0, 100)


def calculate_moon_score(
    illumination_pct: float | None,
    moon_altitude_deg: float | None,
) -> float:
    """Calculate score based on moonlight.

    A Moon below the horizon does not matter, however full it is.
    Otherwise the score is the mean of a phase term (dark Moon = 100)
    and an altitude term (low Moon = 100, losing 2 points per degree).

    Args:
        illumination_pct: Illuminated fraction 0-100%
        moon_altitude_deg: Moon altitude in degrees

    Returns:
        Score 0-100
    """
    altitude = finite_or_none(moon_altitude_deg)
    if altitude is not None and altitude < 0:
        return 100.0

    illumination = finite_or_none(illumination_pct)
    if illumination is None:
        phase = NEUTRAL_SCORE
    else:
        phase = clamp(100 * (1 - clamp(illumination, 0, 100) / 100), 0, 100)

    if altitude is None:
        return phase

    altitude_score = max(0.0, 100 - altitude * 2)
    return clamp((phase + altitude_score) / 2, 0, 100)


def calculate_humidity_proxy_score(
    temperature_c: float | None,
    humidity_pct: float | None,
) -> float:
    """Calculate score from absolute humidity (water vapor in g/m3).

    Args:
        temperature_c: Air temperature in Celsius
        humidity_pct: Relative humidity 0-100%

    Returns:
        Score 0-100
    """
    temperature = finite_or_none(temperature_c)
    humidity = finite_or_none(humidity_pct)
    if temperature is None or humidity is None:
        return NEUTRAL_SCORE

    try:
        vapor = absolute_humidity(temperature, clamp(humidity, 0, 100))
    except ArithmeticError:
        return NEUTRAL_SCORE

    if vapor <= 5:
        return 100.0
    elif vapor <= 10:
        return 75.0
    elif vapor <= 15:
        return 50.0
    elif vapor <= 20:
        return 25.0
    return 0.0

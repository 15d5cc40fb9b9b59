"""Quantities derived from basic weather observations."""

import math


def dew_point(temperature_c: float, humidity_pct: float) -> float | None:
    """Dew point from temperature and relative humidity (Magnus formula).

    Args:
        temperature_c: Air temperature in Celsius
        humidity_pct: Relative humidity 0-100%

    Returns:
        Dew point in Celsius rounded to 0.1, or None outside the formula's
        range (humidity <= 0 or temperature outside -50..60 C)
    """
    if humidity_pct <= 0 or not -50 <= temperature_c <= 60:
        return None
    a = 17.62
    b = 243.12
    alpha = (a * temperature_c) / (b + temperature_c) + math.log(humidity_pct / 100.0)
    return round((b * alpha) / (a - alpha), 1)


def absolute_humidity(temperature_c: float, humidity_pct: float) -> float:
    """Water vapour density in g/m3.

    Saturation vapour pressure from the Tetens formula, scaled by relative
    humidity and converted with the ideal gas law.
    """
    saturation_hpa = 6.112 * math.exp((17.67 * temperature_c) / (temperature_c + 243.5))
    vapour_hpa = saturation_hpa * humidity_pct / 100.0
    return round(216.7 * vapour_hpa / (temperature_c + 273.15), 1)

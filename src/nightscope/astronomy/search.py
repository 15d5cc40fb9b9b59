"""Horizon-crossing search for rise/set times."""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable

logger = logging.getLogger(__name__)

AltitudeFunction = Callable[[datetime], float]


def find_horizon_crossing(
    altitude_at: AltitudeFunction,
    start: datetime,
    rising: bool,
    threshold: float = 0.0,
    window: timedelta = timedelta(days=1),
    step: timedelta = timedelta(minutes=10),
    tolerance: timedelta = timedelta(seconds=30),
    max_iterations: int = 40,
) -> datetime | None:
    """Find the first time after start when altitude crosses threshold.

    Scans the window at a fixed step looking for a sign change, then
    bisects the bracketing interval.

    Args:
        altitude_at: Function returning altitude in degrees at a time
        start: Beginning of the search window
        rising: True for an upward crossing, False for a downward one
        threshold: Altitude of the crossing in degrees
        window: Length of the search window
        step: Coarse scan step
        tolerance: Bisection stops once the bracket is this narrow
        max_iterations: Bisection iteration cap

    Returns:
        Time of the crossing, or None if there is none in the window or
        the altitude could not be evaluated
    """
    try:
        return _search(
            altitude_at, start, rising, threshold, window, step, tolerance, max_iterations
        )
    except (ArithmeticError, ValueError) as e:
        logger.warning(f"Horizon search failed: {e}")
        return None


def _search(
    altitude_at: AltitudeFunction,
    start: datetime,
    rising: bool,
    threshold: float,
    window: timedelta,
    step: timedelta,
    tolerance: timedelta,
    max_iterations: int,
) -> datetime | None:
    def offset(t: datetime) -> float:
        value = altitude_at(t) - threshold
        if not math.isfinite(value):
            raise ValueError(f"Non-finite altitude at {t.isoformat()}")
        return value

    def crosses(before: float, after: float) -> bool:
        if rising:
            return before < 0 <= after
        return before >= 0 > after

    end = start + window
    lo = start
    lo_value = offset(lo)
    while lo < end:
        hi = min(lo + step, end)
        hi_value = offset(hi)
        if crosses(lo_value, hi_value):
            return _bisect(offset, lo, hi, lo_value, tolerance, max_iterations)
        lo, lo_value = hi, hi_value

    return None


def _bisect(
    offset: Callable[[datetime], float],
    lo: datetime,
    hi: datetime,
    lo_value: float,
    tolerance: timedelta,
    max_iterations: int,
) -> datetime | None:
    for _ in range(max_iterations):
        if hi - lo <= tolerance:
            return lo + (hi - lo) / 2
        mid = lo + (hi - lo) / 2
        mid_value = offset(mid)
        if (mid_value < 0) == (lo_value < 0):
            lo, lo_value = mid, mid_value
        else:
            hi = mid

    logger.debug("Horizon search did not converge")
    return None

"""Celestial geometry: sidereal time, horizontal coordinates, Moon and twilight."""

from nightscope.astronomy.models import (
    GALACTIC_CENTER,
    CelestialGeometry,
    CelestialTarget,
    HorizontalPosition,
    MoonPhase,
    MoonState,
    TwilightWindow,
)

__all__ = [
    "GALACTIC_CENTER",
    "CelestialGeometry",
    "CelestialTarget",
    "HorizontalPosition",
    "MoonPhase",
    "MoonState",
    "TwilightWindow",
]

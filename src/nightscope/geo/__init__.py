"""Geographic coordinates and the meteorological grid projection."""

from nightscope.geo.models import GeoPoint, GridCoord
from nightscope.geo.projection import GridProjector, to_grid, to_latlng

__all__ = ["GeoPoint", "GridCoord", "GridProjector", "to_grid", "to_latlng"]

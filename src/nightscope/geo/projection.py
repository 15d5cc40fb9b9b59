"""Lambert Conformal Conic projection onto the 5 km forecast grid.

The national forecast feeds index their products by (nx, ny) cells of a
fixed Lambert Conformal Conic grid:

- standard parallels 30N and 60N
- projection origin 126E, 38N
- Earth radius 6371.00877 km, 5 km cells
- the origin sits at grid cell (43, 136)

Both directions are pure functions of their input. Coordinates outside the
grid's domain are not rejected; they simply map to cells outside it.
"""

import math

from nightscope.geo.models import GeoPoint, GridCoord

DEGRAD = math.pi / 180.0
RADDEG = 180.0 / math.pi


class GridProjector:
    """Bidirectional WGS84 <-> grid cell transform."""

    EARTH_RADIUS_KM = 6371.00877
    GRID_KM = 5.0
    STANDARD_PARALLEL_1 = 30.0
    STANDARD_PARALLEL_2 = 60.0
    ORIGIN_LNG = 126.0
    ORIGIN_LAT = 38.0
    ORIGIN_X = 43
    ORIGIN_Y = 136

    def __init__(self) -> None:
        self._re = self.EARTH_RADIUS_KM / self.GRID_KM
        slat1 = self.STANDARD_PARALLEL_1 * DEGRAD
        slat2 = self.STANDARD_PARALLEL_2 * DEGRAD
        olat = self.ORIGIN_LAT * DEGRAD
        self._olng = self.ORIGIN_LNG * DEGRAD

        # Cone constant
        sn = math.tan(math.pi * 0.25 + slat2 * 0.5) / math.tan(math.pi * 0.25 + slat1 * 0.5)
        self._sn = math.log(math.cos(slat1) / math.cos(slat2)) / math.log(sn)

        # Scale factor and origin radius
        sf = math.tan(math.pi * 0.25 + slat1 * 0.5)
        self._sf = (sf**self._sn) * math.cos(slat1) / self._sn
        self._ro = self._re * self._sf / math.tan(math.pi * 0.25 + olat * 0.5) ** self._sn

    @property
    def cone_constant(self) -> float:
        return self._sn

    def to_grid(self, lat: float, lng: float) -> GridCoord:
        """Project a latitude/longitude onto the nearest grid cell.

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees

        Returns:
            GridCoord of the containing cell
        """
        ra = self._re * self._sf / math.tan(math.pi * 0.25 + lat * DEGRAD * 0.5) ** self._sn

        theta = lng * DEGRAD - self._olng
        if theta > math.pi:
            theta -= 2.0 * math.pi
        if theta < -math.pi:
            theta += 2.0 * math.pi
        theta *= self._sn

        nx = math.floor(ra * math.sin(theta) + self.ORIGIN_X + 0.5)
        ny = math.floor(self._ro - ra * math.cos(theta) + self.ORIGIN_Y + 0.5)
        return GridCoord(nx=nx, ny=ny)

    def to_latlng(self, nx: int, ny: int) -> GeoPoint:
        """Return the latitude/longitude of a grid cell's center.

        Args:
            nx: Grid column
            ny: Grid row

        Returns:
            GeoPoint in degrees
        """
        xn = nx - self.ORIGIN_X
        yn = self._ro - ny + self.ORIGIN_Y
        ra = math.sqrt(xn * xn + yn * yn)
        if self._sn < 0.0:
            ra = -ra

        alat = 2.0 * math.atan((self._re * self._sf / ra) ** (1.0 / self._sn)) - math.pi * 0.5

        # atan2 is undefined on the axes; pick the limit explicitly
        if xn == 0.0:
            theta = 0.0
        elif yn == 0.0:
            theta = math.pi * 0.5
            if xn < 0.0:
                theta = -theta
        else:
            theta = math.atan2(xn, yn)
        alng = theta / self._sn + self._olng

        return GeoPoint(lat=alat * RADDEG, lng=alng * RADDEG)


_default_projector = GridProjector()


def to_grid(lat: float, lng: float) -> GridCoord:
    """Project with the shared default projector."""
    return _default_projector.to_grid(lat, lng)


def to_latlng(nx: int, ny: int) -> GeoPoint:
    """Inverse-project with the shared default projector."""
    return _default_projector.to_latlng(nx, ny)

"""Geographic data models."""

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GeoPoint(BaseModel):
    """A WGS84 position in degrees.

    No range check is applied: the grid projection accepts out-of-domain
    coordinates and still produces a numeric answer. NaN is rejected.
    """

    model_config = ConfigDict(frozen=True)

    lat: float = Field(description="Latitude in degrees")
    lng: float = Field(description="Longitude in degrees (east positive)")

    @field_validator("lat", "lng")
    @classmethod
    def reject_nan(cls, v: float) -> float:
        if math.isnan(v):
            raise ValueError("Coordinate must not be NaN")
        return v

    def __str__(self) -> str:
        lat_dir = "N" if self.lat >= 0 else "S"
        lng_dir = "E" if self.lng >= 0 else "W"
        return f"{abs(self.lat):.4f}{lat_dir}, {abs(self.lng):.4f}{lng_dir}"


class GridCoord(BaseModel):
    """Cell index on the 5 km Lambert Conformal Conic forecast grid."""

    model_config = ConfigDict(frozen=True)

    nx: int = Field(description="Grid column")
    ny: int = Field(description="Grid row")

    def as_tuple(self) -> tuple[int, int]:
        return (self.nx, self.ny)

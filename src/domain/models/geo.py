from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS84 position used for map previews."""

    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")

    @classmethod
    def from_lon_lat(cls, pair: Sequence[float]) -> "GeoPoint":
        # GeoJSON order; any trailing elevation is ignored.
        return cls(lat=float(pair[1]), lon=float(pair[0]))

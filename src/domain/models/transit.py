from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Route:
    """Public transit line metadata, as listed by the transit data provider."""

    route_id: str
    short_name: str = ""
    long_name: str = ""
    color: str | None = None  # hex without '#', per GTFS
    text_color: str | None = None  # hex without '#', per GTFS


@dataclass(frozen=True, slots=True)
class Pattern:
    """One directional variant of a route."""

    pattern_id: str
    headsign: str
    shape_id: str
    route_id: str
    direction_id: int | None = None


@dataclass(frozen=True, slots=True)
class Shape:
    """Polyline of a pattern's path.

    Coordinates are (lon, lat) pairs in GeoJSON order, kept exactly as received.
    """

    shape_id: str
    coordinates: tuple[tuple[float, float], ...] = ()

    @property
    def points(self) -> tuple[GeoPoint, ...]:
        return tuple(GeoPoint.from_lon_lat(c) for c in self.coordinates)

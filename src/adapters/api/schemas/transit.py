from __future__ import annotations

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class TransitRouteSchema(BaseModel):
    route_id: str
    short_name: str
    long_name: str
    color: str | None = None
    text_color: str | None = None


class PatternSchema(BaseModel):
    pattern_id: str
    headsign: str
    shape_id: str
    route_id: str
    direction_id: int | None = None


class PatternShapeSchema(BaseModel):
    route_id: str
    pattern_id: str
    shape_id: str
    points: list[GeoPointSchema]


class SavedExportSchema(BaseModel):
    filename: str
    mime_type: str
    size_bytes: int

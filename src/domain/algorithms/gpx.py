from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import Any, Sequence

from src.domain.exceptions.export import MissingData
from src.domain.models.gpx import GpxDocument
from src.domain.models.transit import Pattern, Route, Shape

GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"
GPX_SCHEMA_LOCATION = f"{GPX_NAMESPACE} {GPX_NAMESPACE}/gpx.xsd"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
DEFAULT_AUTHOR = "Carris Metropolitana"

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Path separators, characters reserved on common filesystems, and '&'.
_UNSAFE_FILENAME_CHARS = re.compile(r'[/\\:*?"<>|&\x00-\x1f\x7f]')
_WHITESPACE_RUN = re.compile(r"\s+")
# Anything outside the XML 1.0 Char production.
_XML_ILLEGAL_CHARS = re.compile(
    "[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def xml_text(value: str) -> str:
    """Drop characters that no XML 1.0 document may contain.

    ElementTree escapes markup characters but writes control characters as is.
    """

    return _XML_ILLEGAL_CHARS.sub("", value or "")


def format_coordinate(value: float) -> str:
    """Shortest decimal text that parses back to the same float.

    Never uses exponent notation, which xsd:decimal does not allow.
    """

    if isinstance(value, int):
        return str(value)
    return f"{Decimal(repr(value)):f}"


def _coordinate_pair(raw: Any, index: int) -> tuple[float, float]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence) or len(raw) < 2:
        raise MissingData(f"Coordinate #{index} is not a (lon, lat) pair: {raw!r}")

    lon, lat = raw[0], raw[1]
    for value in (lon, lat):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MissingData(f"Coordinate #{index} is not numeric: {raw!r}")
        if not math.isfinite(value):
            raise MissingData(f"Coordinate #{index} is not finite: {raw!r}")

    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
        raise MissingData(f"Coordinate #{index} is out of range: {raw!r}")
    return lon, lat


def _validated_coordinates(shape: Shape | None) -> list[tuple[float, float]]:
    if shape is None:
        raise MissingData("No shape loaded")
    coordinates = shape.coordinates
    if not coordinates:
        raise MissingData(f"Shape {shape.shape_id!r} has no coordinates")
    return [_coordinate_pair(raw, i) for i, raw in enumerate(coordinates)]


def _safe_filename_part(value: str) -> str:
    cleaned = _UNSAFE_FILENAME_CHARS.sub(" ", value or "")
    return _WHITESPACE_RUN.sub("-", cleaned.strip()).strip("-.")


def gpx_filename(route: Route, pattern: Pattern) -> str:
    """File name for an exported pattern, e.g. ``101-Norte-Sul.gpx``.

    Whitespace runs collapse to a single hyphen. Characters that could act as
    path separators or are reserved on common filesystems are dropped.
    """

    short_name = _safe_filename_part(route.short_name) or _safe_filename_part(
        route.route_id
    )
    headsign = _safe_filename_part(pattern.headsign) or _safe_filename_part(
        pattern.pattern_id
    )
    stem = "-".join(part for part in (short_name, headsign) if part) or "track"
    return f"{stem}.gpx"


def serialize(
    route: Route | None,
    pattern: Pattern | None,
    shape: Shape | None,
    *,
    author: str = DEFAULT_AUTHOR,
) -> GpxDocument:
    """Build a GPX 1.1 track document for one pattern of a route.

    Track points keep the shape's order exactly: nothing is reordered,
    deduplicated or simplified. Raises MissingData before producing any output
    if the inputs are missing, inconsistent or malformed.
    """

    if route is None or pattern is None:
        raise MissingData("Route and pattern are required")
    if pattern.route_id != route.route_id:
        raise MissingData(
            f"Pattern {pattern.pattern_id!r} belongs to route {pattern.route_id!r}, "
            f"not {route.route_id!r}"
        )
    coordinates = _validated_coordinates(shape)
    headsign = xml_text(pattern.headsign)
    author = xml_text(author)

    root = ET.Element(
        "gpx",
        {
            "version": "1.1",
            "creator": author,
            "xmlns": GPX_NAMESPACE,
            "xmlns:xsi": XSI_NAMESPACE,
            "xsi:schemaLocation": GPX_SCHEMA_LOCATION,
        },
    )

    metadata = ET.SubElement(root, "metadata")
    ET.SubElement(metadata, "name").text = headsign
    author_el = ET.SubElement(metadata, "author")
    ET.SubElement(author_el, "name").text = author

    trk = ET.SubElement(root, "trk")
    ET.SubElement(trk, "name").text = f"{xml_text(route.short_name)} - {headsign}"
    trkseg = ET.SubElement(trk, "trkseg")
    for lon, lat in coordinates:
        ET.SubElement(
            trkseg,
            "trkpt",
            {"lat": format_coordinate(lat), "lon": format_coordinate(lon)},
        )

    ET.indent(root, space="  ")
    content = _XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"

    return GpxDocument(content=content, filename=gpx_filename(route, pattern))

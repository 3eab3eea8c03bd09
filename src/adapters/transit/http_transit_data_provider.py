from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from src.adapters.http_headers import parse_headers
from src.app.ports.output import ITransitDataProvider
from src.domain.exceptions.export import FetchFailed
from src.domain.models.geo import GeoPoint
from src.domain.models.transit import Pattern, Route, Shape

_logger = logging.getLogger(__name__)

ApiMode = Literal["gtfs", "composed"]

DEFAULT_BASE_URL = "https://api.carrismetropolitana.pt"


@dataclass(slots=True)
class HttpTransitDataProvider(ITransitDataProvider):
    """Reads routes, patterns and shapes from the Carris Metropolitana API.

    Env vars:
      - TRANSIT_API_BASE_URL: API root (default https://api.carrismetropolitana.pt)
      - TRANSIT_API_MODE: endpoint style, 'gtfs' (default) or 'composed'
      - TRANSIT_API_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - TRANSIT_API_TIMEOUT_S: request timeout (default 10)

    Endpoint styles:
      - gtfs: /gtfs/routes, /gtfs/routes/{route_id}/patterns, /gtfs/shapes/{shape_id}
      - composed: /routes, /routes/{route_id} for the pattern ids, then one
        /patterns/{pattern_id} request per pattern, /shapes/{shape_id}
    """

    base_url: str | None = None
    mode: ApiMode | None = None
    headers_raw: str | None = None
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = os.getenv("TRANSIT_API_BASE_URL") or DEFAULT_BASE_URL
        self.base_url = self.base_url.rstrip("/")
        if self.mode is None:
            raw_mode = (os.getenv("TRANSIT_API_MODE") or "gtfs").strip().lower()
            if raw_mode not in ("gtfs", "composed"):
                raise ValueError(f"Unsupported TRANSIT_API_MODE: {raw_mode!r}")
            self.mode = raw_mode  # type: ignore[assignment]
        if self.headers_raw is None:
            self.headers_raw = os.getenv("TRANSIT_API_HEADERS")
        if os.getenv("TRANSIT_API_TIMEOUT_S"):
            self.timeout_s = float(os.environ["TRANSIT_API_TIMEOUT_S"])

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url or DEFAULT_BASE_URL,
            headers=parse_headers(self.headers_raw),
            timeout=self.timeout_s,
            transport=self.transport,
        )

    async def list_routes(self) -> tuple[Route, ...]:
        path = "/gtfs/routes" if self.mode == "gtfs" else "/routes"
        async with self._client() as client:
            payload = await _get_json(client, path)
        return _parse(payload, _parse_routes, what="routes")

    async def list_patterns(self, route_id: str) -> tuple[Pattern, ...]:
        async with self._client() as client:
            if self.mode == "gtfs":
                payload = await _get_json(client, f"/gtfs/routes/{route_id}/patterns")
                return _parse(
                    payload,
                    lambda p: _parse_patterns(p, route_id=route_id),
                    what=f"patterns of route {route_id}",
                )

            route_payload = await _get_json(client, f"/routes/{route_id}")
            pattern_ids = _parse(
                route_payload, _pattern_ids, what=f"route {route_id}"
            )
            # Any failed detail request aborts the whole batch.
            details = await asyncio.gather(
                *(_get_json(client, f"/patterns/{pid}") for pid in pattern_ids)
            )
        return _parse(
            details,
            lambda p: _parse_patterns(p, route_id=route_id),
            what=f"patterns of route {route_id}",
        )

    async def get_shape(self, shape_id: str) -> Shape:
        path = (
            f"/gtfs/shapes/{shape_id}" if self.mode == "gtfs" else f"/shapes/{shape_id}"
        )
        async with self._client() as client:
            payload = await _get_json(client, path)
        return _parse(
            payload,
            lambda p: _parse_shape(p, shape_id=shape_id),
            what=f"shape {shape_id}",
        )


async def _get_json(client: httpx.AsyncClient, path: str) -> Any:
    try:
        resp = await client.get(path)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPStatusError as exc:
        raise FetchFailed(
            f"GET {path} returned HTTP {exc.response.status_code}"
        ) from exc
    except httpx.HTTPError as exc:
        raise FetchFailed(f"GET {path} failed: {exc.__class__.__name__}") from exc
    except ValueError as exc:
        raise FetchFailed(f"GET {path} returned invalid JSON") from exc


def _parse(payload: Any, parser, *, what: str):
    try:
        return parser(payload)
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
        _logger.debug("Malformed %s payload: %r", what, payload)
        raise FetchFailed(f"Malformed {what} response") from exc


def _text(row: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return str(value).strip()
    return ""


def _parse_routes(payload: Any) -> tuple[Route, ...]:
    if not isinstance(payload, list):
        raise TypeError("expected a list of routes")
    routes: list[Route] = []
    for row in payload:
        route_id = _text(row, "route_id", "id")
        if not route_id:
            continue
        routes.append(
            Route(
                route_id=route_id,
                short_name=_text(row, "short_name", "route_short_name"),
                long_name=_text(row, "long_name", "route_long_name"),
                color=_text(row, "color", "route_color").lstrip("#") or None,
                text_color=_text(row, "text_color", "route_text_color").lstrip("#")
                or None,
            )
        )
    return tuple(routes)


def _pattern_ids(payload: Any) -> tuple[str, ...]:
    patterns = payload["patterns"]
    if not isinstance(patterns, list):
        raise TypeError("expected a list of pattern ids")
    return tuple(str(p) for p in patterns)


def _parse_patterns(payload: Any, *, route_id: str) -> tuple[Pattern, ...]:
    if not isinstance(payload, list):
        raise TypeError("expected a list of patterns")
    patterns: list[Pattern] = []
    for row in payload:
        pattern_id = _text(row, "pattern_id", "id")
        shape_id = _text(row, "shape_id")
        if not pattern_id or not shape_id:
            continue
        direction = row.get("direction_id", row.get("direction"))
        patterns.append(
            Pattern(
                pattern_id=pattern_id,
                headsign=_text(row, "headsign", "trip_headsign"),
                shape_id=shape_id,
                route_id=_text(row, "route_id") or route_id,
                direction_id=int(direction) if direction not in (None, "") else None,
            )
        )
    return tuple(patterns)


def _parse_shape(payload: Any, *, shape_id: str) -> Shape:
    geojson = payload.get("geojson") or payload
    raw = geojson["geometry"]["coordinates"]
    if not isinstance(raw, list):
        raise TypeError("expected a list of coordinates")
    coordinates = tuple((float(c[0]), float(c[1])) for c in raw)
    for pair in coordinates:
        # Out-of-range or NaN positions raise ValueError.
        GeoPoint.from_lon_lat(pair)
    return Shape(shape_id=shape_id, coordinates=coordinates)

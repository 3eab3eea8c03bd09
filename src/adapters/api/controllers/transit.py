from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from src.adapters.api.dependencies import get_file_saver, get_selection_session
from src.adapters.api.schemas.transit import (
    GeoPointSchema,
    PatternSchema,
    PatternShapeSchema,
    SavedExportSchema,
    TransitRouteSchema,
)
from src.adapters.files import DownloadFileSaver
from src.app.ports.output import IFileSaver
from src.app.services.selection_session import SelectionSession
from src.domain.exceptions.export import MissingData, PrerequisiteMissing
from src.domain.models.gpx import GpxDocument

router = APIRouter(prefix="/transit", tags=["transit"])


async def _select(
    session: SelectionSession, route_id: str, pattern_id: str | None = None
) -> None:
    """Walk the session through route (and pattern) selection or fail the request."""

    await session.load_routes()
    if session.state.error:
        raise HTTPException(status_code=502, detail=session.state.error)

    route = session.find_route(route_id)
    if route is None:
        raise HTTPException(status_code=404, detail=f"Route {route_id} not found")
    await session.select_route(route)
    if session.state.error:
        raise HTTPException(status_code=502, detail=session.state.error)
    if pattern_id is None:
        return

    pattern = session.find_pattern(pattern_id)
    if pattern is None:
        raise HTTPException(
            status_code=404,
            detail=f"Pattern {pattern_id} not found on route {route_id}",
        )
    await session.select_pattern(pattern)
    if session.state.error:
        raise HTTPException(status_code=502, detail=session.state.error)


def _export(session: SelectionSession, saver: IFileSaver) -> GpxDocument:
    try:
        return session.export(saver)
    except PrerequisiteMissing as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except MissingData as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/routes", response_model=list[TransitRouteSchema])
async def list_routes(
    session: SelectionSession = Depends(get_selection_session),
) -> list[TransitRouteSchema]:
    routes = await session.load_routes()
    if session.state.error:
        raise HTTPException(status_code=502, detail=session.state.error)
    return [
        TransitRouteSchema(
            route_id=r.route_id,
            short_name=r.short_name,
            long_name=r.long_name,
            color=r.color,
            text_color=r.text_color,
        )
        for r in routes
    ]


@router.get("/routes/{route_id}/patterns", response_model=list[PatternSchema])
async def list_patterns(
    route_id: str,
    session: SelectionSession = Depends(get_selection_session),
) -> list[PatternSchema]:
    await _select(session, route_id)
    return [
        PatternSchema(
            pattern_id=p.pattern_id,
            headsign=p.headsign,
            shape_id=p.shape_id,
            route_id=p.route_id,
            direction_id=p.direction_id,
        )
        for p in session.state.patterns
    ]


@router.get(
    "/routes/{route_id}/patterns/{pattern_id}/shape",
    response_model=PatternShapeSchema,
)
async def get_pattern_shape(
    route_id: str,
    pattern_id: str,
    session: SelectionSession = Depends(get_selection_session),
) -> PatternShapeSchema:
    await _select(session, route_id, pattern_id)
    shape = session.state.shape
    if shape is None:
        raise HTTPException(status_code=409, detail="Shape not loaded")
    try:
        points = shape.points
    except ValueError as exc:
        raise HTTPException(
            status_code=502, detail=f"Malformed shape {shape.shape_id}: {exc}"
        ) from exc
    return PatternShapeSchema(
        route_id=route_id,
        pattern_id=pattern_id,
        shape_id=shape.shape_id,
        points=[GeoPointSchema(lat=p.lat, lon=p.lon) for p in points],
    )


@router.get("/routes/{route_id}/patterns/{pattern_id}/gpx")
async def download_gpx(
    route_id: str,
    pattern_id: str,
    session: SelectionSession = Depends(get_selection_session),
) -> Response:
    await _select(session, route_id, pattern_id)
    download = DownloadFileSaver()
    _export(session, download)
    return Response(
        content=download.content,
        media_type=download.mime_type,
        headers={"Content-Disposition": download.content_disposition()},
    )


@router.post(
    "/routes/{route_id}/patterns/{pattern_id}/gpx/save",
    response_model=SavedExportSchema,
)
async def save_gpx(
    route_id: str,
    pattern_id: str,
    session: SelectionSession = Depends(get_selection_session),
    saver: IFileSaver = Depends(get_file_saver),
) -> SavedExportSchema:
    await _select(session, route_id, pattern_id)
    document = _export(session, saver)
    return SavedExportSchema(
        filename=document.filename,
        mime_type=document.mime_type,
        size_bytes=len(document.encode()),
    )

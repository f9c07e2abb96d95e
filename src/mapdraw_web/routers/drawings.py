"""Drawing API -- gestures, style, clusters, coordinate markers, import/export.

Positions in request bodies are ``[lat, lng]`` (map convention). Feature
listings and exports are GeoJSON, so their positions are ``[lng, lat]``.
Each gesture endpoint runs a complete gesture against the session's
DrawLifecycle, so the store is written before the response is sent.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response
from loguru import logger
from pydantic import BaseModel

from mapdraw import CorruptionError, DrawSession, DrawState, DrawStateError, GeometryKind, ValidationError
from mapdraw.features.exporters.geojson import export_geojson

router = APIRouter(prefix="/api/drawings", tags=["drawings"])


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class DrawRequest(BaseModel):
    """A completed draw gesture."""
    kind: str
    coordinates: list[float] | list[list[float]]
    radius: float | None = None


class Move(BaseModel):
    """New coordinates for the feature at ``index``."""
    index: int
    coordinates: list[float] | list[list[float]]


class EditRequest(BaseModel):
    moves: list[Move]


class DeleteRequest(BaseModel):
    """Indices to delete, or ``all`` for the clear-all button."""
    indices: list[int] = []
    all: bool = False


class StyleRequest(BaseModel):
    color: str


class StyleResponse(BaseModel):
    color: str
    weight: float
    opacity: float
    palette: dict[str, str]


class MarkerRequest(BaseModel):
    """Typed coordinate text, validated server-side."""
    latitude: str
    longitude: str


class ClusterResponse(BaseModel):
    count: int
    center: list[float]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_session(request: Request) -> DrawSession:
    """Get the draw session from app state."""
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Draw session not initialized")
    return session


def _coords(raw: list) -> tuple[float, float] | list[tuple[float, float]]:
    if raw and isinstance(raw[0], list):
        return [tuple(p[:2]) for p in raw]
    if len(raw) < 2:
        raise HTTPException(status_code=422, detail="position needs [lat, lng]")
    return tuple(raw[:2])


def _feature_at(session: DrawSession, index: int):
    features = session.registry.all()
    if not 0 <= index < len(features):
        raise HTTPException(status_code=404, detail=f"No feature at index {index}")
    return features[index]


def _style_response(session: DrawSession) -> StyleResponse:
    current = session.style.current()
    return StyleResponse(
        color=current.color,
        weight=current.weight,
        opacity=current.opacity,
        palette={entry.name: entry.value for entry in session.style.palette},
    )


# ---------------------------------------------------------------------------
# Features and gestures
# ---------------------------------------------------------------------------

@router.get("")
async def list_features(request: Request):
    """All drawn features as a GeoJSON FeatureCollection."""
    session = _get_session(request)
    return export_geojson(session.registry.all())


@router.get("/bounds")
async def feature_bounds(request: Request):
    """Bounding box of the drawn features, or null when there are none."""
    session = _get_session(request)
    box = session.registry.bounds()
    if box is None:
        return {"bounds": None}
    return {"bounds": [[box.south, box.west], [box.north, box.east]]}


@router.post("/draw", status_code=201)
async def draw_feature(body: DrawRequest, request: Request):
    """Commit a completed draw gesture."""
    session = _get_session(request)
    try:
        kind = GeometryKind(body.kind)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown kind: {body.kind}")

    lifecycle = session.lifecycle
    try:
        lifecycle.start_draw(kind)
    except DrawStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    try:
        coordinates = _coords(body.coordinates)
        feature = lifecycle.complete_draw(coordinates, radius=body.radius)
    except HTTPException:
        lifecycle.cancel_draw()
        raise
    except (ValueError, TypeError) as e:
        if lifecycle.state is DrawState.DRAWING:
            lifecycle.cancel_draw()
        raise HTTPException(status_code=422, detail=str(e))
    return export_geojson([feature])["features"][0]


@router.post("/edit")
async def edit_features(body: EditRequest, request: Request):
    """Apply one edit session: every move, then a single save."""
    session = _get_session(request)
    lifecycle = session.lifecycle
    try:
        lifecycle.start_edit()
    except DrawStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    try:
        for move in body.moves:
            lifecycle.move(_feature_at(session, move.index), _coords(move.coordinates))
    except HTTPException:
        lifecycle.cancel_edit()
        raise
    except (ValueError, TypeError) as e:
        lifecycle.cancel_edit()
        raise HTTPException(status_code=422, detail=str(e))
    except Exception:
        lifecycle.cancel_edit()
        raise
    moved = lifecycle.stop_edit()
    return {"moved": moved}


@router.post("/delete")
async def delete_features(body: DeleteRequest, request: Request):
    """Apply one delete session."""
    session = _get_session(request)
    lifecycle = session.lifecycle
    try:
        lifecycle.start_delete()
    except DrawStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    try:
        targets = [_feature_at(session, idx) for idx in body.indices]
    except HTTPException:
        lifecycle.cancel_delete()
        raise
    if body.all:
        lifecycle.mark_all_deleted()
    for feature in targets:
        lifecycle.mark_deleted(feature)
    removed = lifecycle.confirm_delete()
    return {"removed": len(removed)}


# ---------------------------------------------------------------------------
# Style and clusters
# ---------------------------------------------------------------------------

@router.get("/style", response_model=StyleResponse)
async def get_style(request: Request):
    return _style_response(_get_session(request))


@router.post("/style", response_model=StyleResponse)
async def select_style(body: StyleRequest, request: Request):
    """Select a palette name or colour for features drawn from now on."""
    session = _get_session(request)
    try:
        session.style.select(body.color)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _style_response(session)


@router.get("/clusters", response_model=list[ClusterResponse])
async def get_clusters(request: Request, zoom: int = Query(..., ge=0, le=22)):
    """Marker clusters at a zoom level."""
    session = _get_session(request)
    return [
        ClusterResponse(count=c.count, center=list(c.center))
        for c in session.clusters.clusters(zoom)
    ]


# ---------------------------------------------------------------------------
# Coordinate markers
# ---------------------------------------------------------------------------

@router.get("/markers")
async def list_markers(request: Request):
    session = _get_session(request)
    return export_geojson(session.markers.all())


@router.post("/markers", status_code=201)
async def add_marker(body: MarkerRequest, request: Request):
    """Place a coordinate marker from typed latitude/longitude text."""
    session = _get_session(request)
    session.coordinate_input.latitude = body.latitude
    session.coordinate_input.longitude = body.longitude
    try:
        marker = session.add_coordinate_marker()
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": str(e)})
    return export_geojson([marker])["features"][0]


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------

@router.post("/import")
async def import_features(request: Request):
    """Replace all drawn features with the GeoJSON document in the body."""
    session = _get_session(request)
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=422, detail=f"Import rejected: body is not UTF-8 ({e.reason})")
    try:
        features = session.import_document(text)
    except CorruptionError as e:
        raise HTTPException(status_code=422, detail=f"Import rejected: {e}")
    except DrawStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"imported": len(features)}


@router.get("/export")
async def export_features(request: Request):
    """Download the drawn features as a GeoJSON file."""
    session = _get_session(request)
    doc = session.export_document()
    logger.debug(f"Serving export {doc.filename} ({len(doc.content)} bytes)")
    return Response(
        content=doc.content,
        media_type=doc.media_type,
        headers={"Content-Disposition": f'attachment; filename="{doc.filename}"'},
    )

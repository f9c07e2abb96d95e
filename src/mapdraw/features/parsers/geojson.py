"""Parse GeoJSON (RFC 7946) back into drawn features.

The inverse of ``mapdraw.features.exporters.geojson``. Unlike a general
GeoJSON reader this parser is strict: a document it cannot restore
faithfully raises CorruptionError instead of being skipped feature by
feature, so the caller can leave its current state untouched.
Unknown properties are ignored.
"""

from __future__ import annotations

import json
import math
from numbers import Real

from mapdraw.errors import CorruptionError
from mapdraw.features.feature import DrawnFeature, GeometryKind, Style

_GEOMETRY_FOR_KIND = {
    GeometryKind.MARKER: "Point",
    GeometryKind.CIRCLE: "Point",
    GeometryKind.CIRCLE_MARKER: "Point",
    GeometryKind.POLYLINE: "LineString",
    GeometryKind.POLYGON: "Polygon",
    GeometryKind.RECTANGLE: "Polygon",
}


def decode_features(geojson_string: str) -> list[DrawnFeature]:
    """Parse a GeoJSON FeatureCollection string into features.

    Args:
        geojson_string: Raw GeoJSON content.

    Returns:
        Features in document order.

    Raises:
        CorruptionError: If the text is not JSON, not a FeatureCollection,
            or any feature cannot be restored (missing ``type`` tag,
            missing ``color``, missing radius on a circle, geometry that
            disagrees with its tag).
    """
    try:
        data = json.loads(geojson_string)
    except (ValueError, TypeError, RecursionError) as e:
        raise CorruptionError(f"not valid JSON: {e}") from e

    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise CorruptionError("expected a GeoJSON FeatureCollection")

    raw_features = data.get("features")
    if not isinstance(raw_features, list):
        raise CorruptionError("FeatureCollection.features must be a list")

    return [_parse_feature(raw, idx) for idx, raw in enumerate(raw_features)]


def _is_number(value: object) -> bool:
    """Finite real number; bools, NaN and Infinity are rejected."""
    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _parse_position(raw: object, idx: int) -> tuple[float, float]:
    """[lng, lat(, alt)] -> (lat, lng)."""
    if not isinstance(raw, list) or len(raw) < 2 or not all(_is_number(v) for v in raw[:2]):
        raise CorruptionError(f"feature {idx}: malformed position {raw!r}")
    return (float(raw[1]), float(raw[0]))


def _parse_coordinates(geom_type: str, coordinates: object, idx: int):
    if geom_type == "Point":
        return _parse_position(coordinates, idx)
    if geom_type == "LineString":
        if not isinstance(coordinates, list):
            raise CorruptionError(f"feature {idx}: LineString coordinates must be a list")
        return [_parse_position(p, idx) for p in coordinates]
    # Polygon: outer ring only, drawn shapes never carry holes
    if not isinstance(coordinates, list) or not coordinates or not isinstance(coordinates[0], list):
        raise CorruptionError(f"feature {idx}: Polygon coordinates must be a list of rings")
    return [_parse_position(p, idx) for p in coordinates[0]]


def _parse_style(properties: dict, idx: int) -> Style:
    color = properties.get("color")
    if not isinstance(color, str) or not color:
        raise CorruptionError(f"feature {idx}: missing color")
    extra = {}
    for key in ("weight", "opacity"):
        if key in properties:
            if not _is_number(properties[key]):
                raise CorruptionError(f"feature {idx}: {key} must be a number")
            extra[key] = float(properties[key])
    return Style(color=color, **extra)


def _parse_feature(raw: object, idx: int) -> DrawnFeature:
    """Parse a single GeoJSON Feature dict into a DrawnFeature."""
    if not isinstance(raw, dict):
        raise CorruptionError(f"feature {idx}: not an object")

    properties = raw.get("properties")
    if not isinstance(properties, dict):
        raise CorruptionError(f"feature {idx}: missing properties")

    tag = properties.get("type")
    if tag is None:
        raise CorruptionError(f"feature {idx}: missing type tag")
    try:
        kind = GeometryKind(tag)
    except ValueError:
        raise CorruptionError(f"feature {idx}: unknown type tag {tag!r}") from None

    geometry = raw.get("geometry")
    if not isinstance(geometry, dict):
        raise CorruptionError(f"feature {idx}: missing geometry")
    geom_type = geometry.get("type")
    if geom_type != _GEOMETRY_FOR_KIND[kind]:
        raise CorruptionError(
            f"feature {idx}: {kind.value} expects {_GEOMETRY_FOR_KIND[kind]} geometry, got {geom_type!r}"
        )

    radius = None
    if kind.has_radius:
        radius = properties.get("radius")
        if not _is_number(radius) or radius <= 0:
            raise CorruptionError(f"feature {idx}: {kind.value} requires a positive radius")

    coordinates = _parse_coordinates(geom_type, geometry.get("coordinates"), idx)
    style = _parse_style(properties, idx)

    try:
        return DrawnFeature(kind=kind, coordinates=coordinates, style=style, radius=radius)
    except ValueError as e:
        raise CorruptionError(f"feature {idx}: {e}") from e

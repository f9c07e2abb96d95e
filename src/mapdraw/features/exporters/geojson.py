"""Export drawn features to GeoJSON (RFC 7946).

GeoJSON has no notion of circles or of a shape's drawing tool, so each
feature's ``properties`` carries the ``type`` tag, its ``color`` and, for
circles, the ``radius``. Positions are flipped from (lat, lng) to
[lng, lat].
"""

from __future__ import annotations

import json
from typing import Iterable

from mapdraw.features.feature import DrawnFeature, GeometryKind


def export_geojson(features: Iterable[DrawnFeature]) -> dict:
    """Export features to a GeoJSON FeatureCollection dict.

    Args:
        features: Features in the order they should appear.

    Returns:
        Dict representing a valid GeoJSON FeatureCollection.
    """
    return {
        "type": "FeatureCollection",
        "features": [_feature_to_geojson(f) for f in features],
    }


def encode_features(features: Iterable[DrawnFeature]) -> str:
    """Encode features as GeoJSON text.

    Output is deterministic for a given input order, so re-saving an
    unchanged registry produces byte-identical text.
    """
    return json.dumps(export_geojson(features))


def _position(latlng) -> list[float]:
    return [latlng[1], latlng[0]]


def _geometry(feature: DrawnFeature) -> dict:
    if feature.kind.is_point:
        return {"type": "Point", "coordinates": _position(feature.coordinates)}
    ring = [_position(p) for p in feature.coordinates]
    if feature.kind is GeometryKind.POLYLINE:
        return {"type": "LineString", "coordinates": ring}
    ring.append(list(ring[0]))
    return {"type": "Polygon", "coordinates": [ring]}


def _feature_to_geojson(feature: DrawnFeature) -> dict:
    """Convert a DrawnFeature to a GeoJSON Feature dict."""
    properties: dict = {
        "type": feature.kind.value,
        "color": feature.style.color,
        "weight": feature.style.weight,
        "opacity": feature.style.opacity,
    }
    if feature.kind.has_radius:
        properties["radius"] = feature.radius
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": _geometry(feature),
    }

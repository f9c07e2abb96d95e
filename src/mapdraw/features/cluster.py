"""ClusterIndex -- render-time grouping of marker features.

Only GeometryKind.MARKER features are indexed. Membership mirrors the
FeatureRegistry through add/remove calls; the grouping itself is computed
on demand for a given zoom level, greedily in insertion order, the same
way Leaflet.markercluster aggregates markers that fall within a fixed
pixel radius of an existing cluster centre.

Projection is spherical Web Mercator with 256 px tiles.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from mapdraw.features.feature import Bounds, DrawnFeature, LatLng

_TILE_SIZE = 256
_MAX_LAT = 85.0511287798


def _project(position: LatLng, zoom: int) -> tuple[float, float]:
    """Project (lat, lng) to world pixel coordinates at ``zoom``."""
    lat = max(-_MAX_LAT, min(_MAX_LAT, position[0]))
    lng = position[1]
    scale = _TILE_SIZE * (2 ** zoom)
    x = (lng + 180.0) / 360.0 * scale
    sin_lat = math.sin(math.radians(lat))
    y = (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)) * scale
    return (x, y)


@dataclass
class Cluster:
    """A group of nearby markers at one zoom level."""
    members: list[DrawnFeature] = field(default_factory=list)
    _px: list[tuple[float, float]] = field(default_factory=list, repr=False)

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def center(self) -> LatLng:
        """Mean position of all members."""
        lat = sum(m.coordinates[0] for m in self.members) / len(self.members)
        lng = sum(m.coordinates[1] for m in self.members) / len(self.members)
        return (lat, lng)

    @property
    def bounds(self) -> Bounds:
        lats = [m.coordinates[0] for m in self.members]
        lngs = [m.coordinates[1] for m in self.members]
        return Bounds(min(lats), min(lngs), max(lats), max(lngs))

    def _pixel_center(self) -> tuple[float, float]:
        xs = [p[0] for p in self._px]
        ys = [p[1] for p in self._px]
        return (sum(xs) / len(xs), sum(ys) / len(ys))


class ClusterIndex:
    """Secondary index over marker features."""

    def __init__(self, radius_px: float = 80.0) -> None:
        self.radius_px = radius_px
        self._members: list[DrawnFeature] = []

    def add(self, feature: DrawnFeature) -> bool:
        """Index a feature if it is a marker.

        Returns:
            True if the feature is now indexed.
        """
        if not feature.clustered:
            return False
        if feature not in self:
            self._members.append(feature)
        return True

    def remove(self, feature: DrawnFeature) -> bool:
        for idx, existing in enumerate(self._members):
            if existing is feature:
                del self._members[idx]
                return True
        return False

    def clear(self) -> None:
        """Drop every grouped entry. The FeatureRegistry is untouched."""
        self._members.clear()

    def members(self) -> list[DrawnFeature]:
        return list(self._members)

    def clusters(self, zoom: int) -> list[Cluster]:
        """Group indexed markers for rendering at ``zoom``.

        A marker joins the first cluster whose pixel centre lies within
        ``radius_px``; otherwise it starts a new cluster. Markers are
        visited in insertion order, so the result is deterministic.
        """
        result: list[Cluster] = []
        for feature in self._members:
            px = _project(feature.coordinates, zoom)  # type: ignore[arg-type]
            target = None
            for cluster in result:
                cx, cy = cluster._pixel_center()
                if math.hypot(px[0] - cx, px[1] - cy) <= self.radius_px:
                    target = cluster
                    break
            if target is None:
                target = Cluster()
                result.append(target)
            target.members.append(feature)
            target._px.append(px)
        return result

    def __contains__(self, feature: object) -> bool:
        return any(existing is feature for existing in self._members)

    def __len__(self) -> int:
        return len(self._members)

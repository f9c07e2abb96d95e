"""DrawnFeature and its supporting value types.

Coordinates are stored in map convention: (lat, lng). The GeoJSON codec
flips them to [lng, lat] on the way out and back on the way in.

GeometryKind -- closed set of drawable shapes (the persisted ``type`` tag)
Style        -- frozen colour/weight/opacity captured at creation
Bounds       -- south/west/north/east bounding box
DrawnFeature -- one live shape owned by the FeatureRegistry
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

LatLng = tuple[float, float]
Coordinates = Union[LatLng, list[LatLng]]

# Meters per degree latitude (constant)
METERS_PER_DEG_LAT = 111_320.0


class GeometryKind(Enum):
    """Drawable shape kinds. Values are the wire tags in ``properties.type``."""
    MARKER = "marker"
    CIRCLE = "circle"
    CIRCLE_MARKER = "circlemarker"
    POLYGON = "polygon"
    POLYLINE = "polyline"
    RECTANGLE = "rectangle"

    @property
    def is_point(self) -> bool:
        return self in _POINT_KINDS

    @property
    def has_radius(self) -> bool:
        return self in _RADIUS_KINDS


_POINT_KINDS = frozenset({GeometryKind.MARKER, GeometryKind.CIRCLE, GeometryKind.CIRCLE_MARKER})
_RADIUS_KINDS = frozenset({GeometryKind.CIRCLE, GeometryKind.CIRCLE_MARKER})
_RING_KINDS = frozenset({GeometryKind.POLYGON, GeometryKind.RECTANGLE})


@dataclass(frozen=True)
class Style:
    """Immutable rendering style for one feature."""
    color: str
    weight: float = 4.0
    opacity: float = 0.65

    def __post_init__(self) -> None:
        object.__setattr__(self, "weight", float(self.weight))
        object.__setattr__(self, "opacity", float(self.opacity))


@dataclass(frozen=True)
class Bounds:
    """Geographic bounding box in degrees."""
    south: float
    west: float
    north: float
    east: float

    def extend(self, other: Bounds) -> Bounds:
        return Bounds(
            south=min(self.south, other.south),
            west=min(self.west, other.west),
            north=max(self.north, other.north),
            east=max(self.east, other.east),
        )

    @property
    def center(self) -> LatLng:
        return ((self.south + self.north) / 2.0, (self.west + self.east) / 2.0)


def _as_latlng(position) -> LatLng:
    try:
        lat, lng = position
        latlng = (float(lat), float(lng))
    except (TypeError, ValueError):
        raise ValueError(f"expected a (lat, lng) position, got {position!r}") from None
    if not all(math.isfinite(v) for v in latlng):
        raise ValueError(f"position must be finite, got {position!r}")
    return latlng


@dataclass(eq=False)
class DrawnFeature:
    """A single drawn shape.

    Identity is by reference: two features with identical geometry are
    still distinct entries in the registry.

    Attributes:
        kind: Geometry kind tag. Immutable.
        coordinates: ``(lat, lng)`` for Marker/Circle/CircleMarker, a list
            of ``(lat, lng)`` for Polygon/Polyline/Rectangle. Polygon and
            Rectangle rings are kept open (no repeated closing vertex).
            The only field that changes after creation (edit/drag).
        style: Style captured from the StyleSelector at creation. Immutable.
        radius: Metres for Circle, pixels for CircleMarker, None otherwise.
            Immutable.
    """

    kind: GeometryKind
    coordinates: Coordinates
    style: Style
    radius: float | None = None
    _frozen: bool = field(default=False, init=False, repr=False)

    _IMMUTABLE = ("kind", "style", "radius")

    def __post_init__(self) -> None:
        if not isinstance(self.kind, GeometryKind):
            raise ValueError(f"kind must be a GeometryKind, got {self.kind!r}")
        if self.kind.has_radius:
            try:
                radius = float(self.radius)
            except (TypeError, ValueError):
                radius = math.nan
            if not (math.isfinite(radius) and radius > 0):
                raise ValueError(f"{self.kind.value} requires a positive finite radius, got {self.radius!r}")
            self.radius = radius
        elif self.radius is not None:
            raise ValueError(f"{self.kind.value} does not carry a radius")
        self.coordinates = self._normalize(self.coordinates)
        self._frozen = True

    def __setattr__(self, name: str, value) -> None:
        if name in self._IMMUTABLE and getattr(self, "_frozen", False):
            raise AttributeError(f"DrawnFeature.{name} is fixed at creation")
        super().__setattr__(name, value)

    def _normalize(self, coordinates) -> Coordinates:
        if self.kind.is_point:
            return _as_latlng(coordinates)
        if not isinstance(coordinates, (list, tuple)):
            raise ValueError(f"{self.kind.value} expects a list of positions, got {coordinates!r}")
        positions = [_as_latlng(p) for p in coordinates]
        if self.kind in _RING_KINDS and len(positions) > 1 and positions[0] == positions[-1]:
            positions = positions[:-1]
        minimum = 3 if self.kind in _RING_KINDS else 2
        if len(positions) < minimum:
            raise ValueError(f"{self.kind.value} needs at least {minimum} positions, got {len(positions)}")
        return positions

    def move_to(self, coordinates: Coordinates) -> None:
        """Replace the coordinates in place (edit or drag)."""
        self.coordinates = self._normalize(coordinates)

    @property
    def clustered(self) -> bool:
        """Only plain markers take part in clustering."""
        return self.kind is GeometryKind.MARKER

    @property
    def positions(self) -> list[LatLng]:
        """All positions as a list, regardless of kind."""
        if self.kind.is_point:
            return [self.coordinates]  # type: ignore[list-item]
        return list(self.coordinates)  # type: ignore[arg-type]

    def bounds(self) -> Bounds:
        """Bounding box. Circles extend by their radius in metres."""
        lats = [p[0] for p in self.positions]
        lngs = [p[1] for p in self.positions]
        box = Bounds(min(lats), min(lngs), max(lats), max(lngs))
        if self.kind is GeometryKind.CIRCLE:
            lat, lng = self.coordinates  # type: ignore[misc]
            dlat = self.radius / METERS_PER_DEG_LAT
            cos_lat = max(math.cos(math.radians(lat)), 1e-12)
            dlng = self.radius / (METERS_PER_DEG_LAT * cos_lat)
            box = Bounds(lat - dlat, lng - dlng, lat + dlat, lng + dlng)
        return box

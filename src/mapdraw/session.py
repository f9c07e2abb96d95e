"""DrawSession -- one page's worth of drawing state.

Wires the registry, cluster index, style selector, coordinate input and
draw lifecycle to a PersistenceStore, and owns the operations that span
them: restoring both storage slots on load, standalone coordinate
markers, and GeoJSON import/export.

The optional ``binder`` is called once for every feature that appears on
the map (drawn, restored, imported, or placed by coordinates); it is where
a front end attaches click/drag handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from loguru import logger

from mapdraw.coords import CoordinateInput
from mapdraw.draw.lifecycle import DrawLifecycle, DrawState
from mapdraw.errors import CorruptionError, DrawStateError
from mapdraw.features.cluster import ClusterIndex
from mapdraw.features.exporters.geojson import encode_features
from mapdraw.features.feature import DrawnFeature, GeometryKind
from mapdraw.features.parsers.geojson import decode_features
from mapdraw.features.registry import FeatureRegistry
from mapdraw.storage import PersistenceStore, StorageKey
from mapdraw.style import StyleSelector

GEOJSON_MEDIA_TYPE = "application/geo+json"


@dataclass(frozen=True)
class ExportDocument:
    """A downloadable snapshot of the drawn features."""
    filename: str
    media_type: str
    content: str


class DrawSession:
    """Composition root for a drawing page."""

    def __init__(
        self,
        store: PersistenceStore,
        style: StyleSelector | None = None,
        binder: Callable[[DrawnFeature], None] | None = None,
        circle_marker_radius: float = 10.0,
        cluster_radius_px: float = 80.0,
        export_filename: str = "data.geojson",
    ) -> None:
        self.store = store
        self.style = style or StyleSelector()
        self.binder = binder
        self.export_filename = export_filename

        self.registry = FeatureRegistry()
        self.clusters = ClusterIndex(radius_px=cluster_radius_px)
        self.markers = FeatureRegistry()
        self.coordinate_input = CoordinateInput()
        self.lifecycle = DrawLifecycle(
            registry=self.registry,
            clusters=self.clusters,
            style=self.style,
            store=store,
            key=StorageKey.DRAW_ITEMS.value,
            coordinate_input=self.coordinate_input,
            circle_marker_radius=circle_marker_radius,
            on_created=self._bind,
        )

    def _bind(self, feature: DrawnFeature) -> None:
        if self.binder is not None:
            self.binder(feature)

    def _populate(self, features: list[DrawnFeature]) -> None:
        for feature in features:
            self.registry.add(feature)
            self.clusters.add(feature)
            self._bind(feature)

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    def restore(self) -> dict[str, int]:
        """Load both storage slots into memory.

        A slot holding corrupt text is skipped and logged; its registry
        stays empty and the stored text is left as it is.

        Returns:
            Number of features restored per slot.
        """
        restored = {StorageKey.DRAW_ITEMS.value: 0, StorageKey.COORDS_MARKERS.value: 0}

        text = self.store.get(StorageKey.DRAW_ITEMS.value)
        if text is not None:
            try:
                features = decode_features(text)
            except CorruptionError as e:
                logger.warning(f"Skipping restore of drawn features: {e}")
            else:
                self._populate(features)
                restored[StorageKey.DRAW_ITEMS.value] = len(features)

        text = self.store.get(StorageKey.COORDS_MARKERS.value)
        if text is not None:
            try:
                markers = decode_features(text)
                stray = [m for m in markers if m.kind is not GeometryKind.MARKER]
                if stray:
                    raise CorruptionError(f"{stray[0].kind.value} found in the marker slot")
            except CorruptionError as e:
                logger.warning(f"Skipping restore of coordinate markers: {e}")
            else:
                for marker in markers:
                    self.markers.add(marker)
                    self._bind(marker)
                restored[StorageKey.COORDS_MARKERS.value] = len(markers)

        logger.info(
            f"Restored {restored[StorageKey.DRAW_ITEMS.value]} drawn features, "
            f"{restored[StorageKey.COORDS_MARKERS.value]} coordinate markers"
        )
        return restored

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_document(self, text: str) -> list[DrawnFeature]:
        """Replace every drawn feature with the contents of a GeoJSON document.

        Raises:
            CorruptionError: The document could not be parsed. Nothing
                was changed.
            DrawStateError: A gesture is in progress.
        """
        if self.lifecycle.state is not DrawState.IDLE:
            raise DrawStateError(f"cannot import while {self.lifecycle.state.value}")
        try:
            features = decode_features(text)
        except CorruptionError as e:
            logger.warning(f"Import rejected: {e}")
            raise

        self.registry.clear()
        self.clusters.clear()
        self._populate(features)
        self.lifecycle.persist()
        logger.info(f"Imported {len(features)} features")
        return features

    def export_document(self) -> ExportDocument:
        content = encode_features(self.registry.all())
        logger.info(f"Exported {len(self.registry)} features as {self.export_filename}")
        return ExportDocument(
            filename=self.export_filename,
            media_type=GEOJSON_MEDIA_TYPE,
            content=content,
        )

    # ------------------------------------------------------------------
    # Coordinate markers
    # ------------------------------------------------------------------

    def persist_markers(self) -> str:
        text = encode_features(self.markers.all())
        try:
            self.store.set(StorageKey.COORDS_MARKERS.value, text)
        except OSError as e:
            logger.warning(f"Could not persist coordinate markers: {e}")
        return text

    def add_coordinate_marker(self) -> DrawnFeature:
        """Place a marker at the typed coordinates in the current colour.

        Raises:
            ValidationError: The latitude or longitude text is invalid.
                The input fields are left untouched.
        """
        lat, lng = self.coordinate_input.validated()
        marker = DrawnFeature(
            kind=GeometryKind.MARKER,
            coordinates=(lat, lng),
            style=self.style.current(),
        )
        self.markers.add(marker)
        self.persist_markers()
        self.coordinate_input.reset()
        self._bind(marker)
        logger.debug(f"Coordinate marker placed at {lat}, {lng}")
        return marker

    def drag_coordinate_marker(self, marker: DrawnFeature, lat: float, lng: float) -> None:
        """One drag frame: move in memory and mirror into the input fields."""
        if marker not in self.markers:
            raise KeyError("marker is not registered")
        marker.move_to((lat, lng))
        self.coordinate_input.show(lat, lng)

    def drop_coordinate_marker(self, marker: DrawnFeature) -> None:
        """Drag finished: persist the marker slot."""
        if marker not in self.markers:
            raise KeyError("marker is not registered")
        self.persist_markers()

    def select_coordinate_marker(self, marker: DrawnFeature) -> None:
        lat, lng = marker.coordinates  # type: ignore[misc]
        self.coordinate_input.show(lat, lng)

"""DrawLifecycle -- the gesture state machine behind the draw toolbar.

States and transitions:

    IDLE --start_draw--> DRAWING --complete_draw--> IDLE   (add + persist)
                                 --cancel_draw----> IDLE   (nothing kept)
    IDLE --start_edit--> EDITING --stop_edit------> IDLE   (persist once)
                                 --cancel_edit----> IDLE   (coords restored)
    IDLE --start_delete-> DELETING --confirm_delete-> IDLE (remove + persist)
                                   --cancel_delete--> IDLE

Every side effect runs in the same order: registry, then cluster index,
then the store write. The store write finishes before the call returns.
Intermediate drag frames (``move``) only touch memory and the display;
the write happens when the edit session ends.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from loguru import logger

from mapdraw.coords import CoordinateInput
from mapdraw.errors import DrawStateError
from mapdraw.features.cluster import ClusterIndex
from mapdraw.features.exporters.geojson import encode_features
from mapdraw.features.feature import Coordinates, DrawnFeature, GeometryKind
from mapdraw.features.registry import FeatureRegistry
from mapdraw.storage import PersistenceStore, StorageKey
from mapdraw.style import StyleSelector

FeatureCallback = Callable[[DrawnFeature], None]


class DrawState(Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    EDITING = "editing"
    DELETING = "deleting"


class DrawLifecycle:
    """Orchestrates draw/edit/delete gestures against the registry and store.

    Args:
        registry: Owner of all live drawn features.
        clusters: Marker cluster index mirrored from the registry.
        style: Source of the style frozen into new features.
        store: Durable store; written under ``key`` after each gesture.
        key: Storage slot for the drawn features.
        coordinate_input: Display fields reset by a background click.
        circle_marker_radius: Pixel radius for circle markers drawn
            without an explicit radius.
        on_created: Called with each new feature after it is persisted
            (binds interactivity).
        on_move: Called on every in-memory move during an edit session
            (live display updates).
    """

    def __init__(
        self,
        registry: FeatureRegistry,
        clusters: ClusterIndex,
        style: StyleSelector,
        store: PersistenceStore,
        key: str = StorageKey.DRAW_ITEMS.value,
        coordinate_input: CoordinateInput | None = None,
        circle_marker_radius: float = 10.0,
        on_created: FeatureCallback | None = None,
        on_move: FeatureCallback | None = None,
    ) -> None:
        self.registry = registry
        self.clusters = clusters
        self.style = style
        self.store = store
        self.key = key
        self.coordinate_input = coordinate_input
        self.circle_marker_radius = circle_marker_radius
        self.on_created = on_created
        self.on_move = on_move

        self._state = DrawState.IDLE
        self._pending_kind: GeometryKind | None = None
        self._originals: dict[int, tuple[DrawnFeature, Coordinates]] = {}
        self._marked: list[DrawnFeature] = []
        self._clear_all = False

    @property
    def state(self) -> DrawState:
        return self._state

    def _require(self, expected: DrawState, action: str) -> None:
        if self._state is not expected:
            raise DrawStateError(
                f"cannot {action} while {self._state.value} (expected {expected.value})"
            )

    def persist(self) -> str:
        """Encode the registry and write it to the store.

        A failed write is logged and the in-memory state is kept; the next
        gesture writes the full registry again.

        Returns:
            The encoded registry.
        """
        text = encode_features(self.registry.all())
        try:
            self.store.set(self.key, text)
        except OSError as e:
            logger.warning(f"Could not persist drawn features to '{self.key}': {e}")
            return text
        logger.debug(f"Persisted {len(self.registry)} drawn features to '{self.key}'")
        return text

    # ------------------------------------------------------------------
    # Draw
    # ------------------------------------------------------------------

    def start_draw(self, kind: GeometryKind) -> None:
        self._require(DrawState.IDLE, "start drawing")
        self._pending_kind = GeometryKind(kind)
        self._state = DrawState.DRAWING

    def complete_draw(self, coordinates: Coordinates, radius: float | None = None) -> DrawnFeature:
        """Finish the draw gesture and commit the new feature.

        The feature takes the selector's current style. If the geometry is
        invalid the gesture is abandoned (back to IDLE, nothing added) and
        the ValueError propagates.
        """
        self._require(DrawState.DRAWING, "complete a drawing")
        kind = self._pending_kind
        self._pending_kind = None
        self._state = DrawState.IDLE

        if kind is GeometryKind.CIRCLE_MARKER and radius is None:
            radius = self.circle_marker_radius
        feature = DrawnFeature(
            kind=kind,
            coordinates=coordinates,
            style=self.style.current(),
            radius=radius if kind.has_radius else None,
        )

        self.registry.add(feature)
        self.clusters.add(feature)
        self.persist()
        logger.debug(f"Drew {kind.value} ({feature.style.color})")
        if self.on_created is not None:
            self.on_created(feature)
        return feature

    def cancel_draw(self) -> None:
        self._require(DrawState.DRAWING, "cancel a drawing")
        self._pending_kind = None
        self._state = DrawState.IDLE

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    def start_edit(self) -> None:
        self._require(DrawState.IDLE, "start editing")
        self._originals.clear()
        self._state = DrawState.EDITING

    def move(self, feature: DrawnFeature, coordinates: Coordinates) -> None:
        """Apply one drag/resize frame in memory. Nothing is persisted."""
        self._require(DrawState.EDITING, "move a feature")
        if feature not in self.registry:
            raise KeyError("feature is not registered")
        self._originals.setdefault(id(feature), (feature, feature.coordinates))
        feature.move_to(coordinates)
        if self.on_move is not None:
            self.on_move(feature)

    def stop_edit(self) -> int:
        """End the edit session and persist once.

        Returns:
            Number of features that were moved during the session.
        """
        self._require(DrawState.EDITING, "stop editing")
        moved = len(self._originals)
        self._originals.clear()
        self._state = DrawState.IDLE
        self.persist()
        logger.debug(f"Edit session saved ({moved} moved)")
        return moved

    def cancel_edit(self) -> None:
        """End the edit session, restoring every feature's pre-edit position."""
        self._require(DrawState.EDITING, "cancel editing")
        for feature, coordinates in self._originals.values():
            feature.move_to(coordinates)
        self._originals.clear()
        self._state = DrawState.IDLE

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def start_delete(self) -> None:
        self._require(DrawState.IDLE, "start deleting")
        self._marked = []
        self._clear_all = False
        self._state = DrawState.DELETING

    def mark_deleted(self, feature: DrawnFeature) -> None:
        self._require(DrawState.DELETING, "mark a feature for deletion")
        if feature in self.registry and all(m is not feature for m in self._marked):
            self._marked.append(feature)

    def mark_all_deleted(self) -> None:
        """The toolbar's "clear all" button."""
        self._require(DrawState.DELETING, "clear all features")
        self._clear_all = True

    def confirm_delete(self) -> list[DrawnFeature]:
        """Apply the pending deletions and persist.

        Returns:
            The features that were removed.
        """
        self._require(DrawState.DELETING, "confirm deletion")
        if self._clear_all:
            removed = self.registry.all()
            self.registry.clear()
            self.clusters.clear()
        else:
            removed = []
            for feature in self._marked:
                if self.registry.remove(feature):
                    removed.append(feature)
                self.clusters.remove(feature)
        self._marked = []
        self._clear_all = False
        self._state = DrawState.IDLE
        self.persist()
        logger.debug(f"Deleted {len(removed)} drawn features")
        return removed

    def cancel_delete(self) -> None:
        self._require(DrawState.DELETING, "cancel deletion")
        self._marked = []
        self._clear_all = False
        self._state = DrawState.IDLE

    # ------------------------------------------------------------------
    # Map background
    # ------------------------------------------------------------------

    def background_click(self) -> None:
        """Plain map click: clears the coordinate display fields when idle."""
        if self._state is DrawState.IDLE and self.coordinate_input is not None:
            self.coordinate_input.reset()

"""FeatureRegistry -- ordered collection of live drawn features.

The registry is the authoritative in-memory state: every DrawnFeature on
the map is owned here, in insertion order.
"""

from __future__ import annotations

from typing import Iterator

from mapdraw.features.feature import Bounds, DrawnFeature


class FeatureRegistry:
    """Registry of active drawn features."""

    def __init__(self) -> None:
        self._features: list[DrawnFeature] = []

    def add(self, feature: DrawnFeature) -> DrawnFeature:
        """Append a feature. Adding the same instance twice is a no-op.

        Returns:
            The feature that was added.
        """
        if feature not in self:
            self._features.append(feature)
        return feature

    def remove(self, feature: DrawnFeature) -> bool:
        """Remove a feature by identity.

        Returns:
            True if the feature was removed, False if it wasn't registered.
        """
        for idx, existing in enumerate(self._features):
            if existing is feature:
                del self._features[idx]
                return True
        return False

    def clear(self) -> None:
        self._features.clear()

    def all(self) -> list[DrawnFeature]:
        """All features in insertion order (a copy)."""
        return list(self._features)

    def bounds(self) -> Bounds | None:
        """Bounding box over every feature, or None when empty."""
        box: Bounds | None = None
        for feature in self._features:
            fb = feature.bounds()
            box = fb if box is None else box.extend(fb)
        return box

    def __contains__(self, feature: object) -> bool:
        return any(existing is feature for existing in self._features)

    def __iter__(self) -> Iterator[DrawnFeature]:
        return iter(list(self._features))

    def __len__(self) -> int:
        return len(self._features)

"""Tests for FeatureRegistry -- add/remove/all/bounds/clear."""

import pytest
from mapdraw.features import DrawnFeature, FeatureRegistry, GeometryKind, Style


@pytest.fixture
def registry():
    return FeatureRegistry()


def _marker(lat, lng):
    return DrawnFeature(GeometryKind.MARKER, (lat, lng), Style(color="#019421"))


class TestFeatureRegistry:
    """Registry operations."""

    def test_add_preserves_insertion_order(self, registry):
        a, b, c = _marker(1, 1), _marker(2, 2), _marker(3, 3)
        for f in (a, b, c):
            registry.add(f)
        assert registry.all() == [a, b, c]
        assert len(registry) == 3

    def test_add_same_instance_twice(self, registry):
        """Re-adding the same feature does not duplicate it."""
        a = _marker(1, 1)
        registry.add(a)
        registry.add(a)
        assert len(registry) == 1

    def test_remove(self, registry):
        """Removing returns True; removing again returns False."""
        a = _marker(1, 1)
        registry.add(a)
        assert registry.remove(a) is True
        assert a not in registry
        assert registry.remove(a) is False

    def test_remove_unknown_is_noop(self, registry):
        a, stranger = _marker(1, 1), _marker(1, 1)
        registry.add(a)
        assert registry.remove(stranger) is False
        assert registry.all() == [a]

    def test_all_returns_copy(self, registry):
        registry.add(_marker(1, 1))
        registry.all().clear()
        assert len(registry) == 1

    def test_bounds_empty_is_none(self, registry):
        """An empty registry has no bounds rather than a degenerate box."""
        assert registry.bounds() is None

    def test_bounds_cover_all_features(self, registry):
        registry.add(_marker(10, 20))
        registry.add(DrawnFeature(
            GeometryKind.RECTANGLE,
            [(5, 25), (5, 30), (8, 30), (8, 25)],
            Style(color="#012394"),
        ))
        b = registry.bounds()
        assert (b.south, b.west, b.north, b.east) == (5, 20, 10, 30)

    def test_clear(self, registry):
        registry.add(_marker(1, 1))
        registry.clear()
        assert registry.all() == []

"""Tests for the GeoJSON exporter -- geometry mapping, metadata bag, determinism."""

import json
import pytest
from mapdraw.features import DrawnFeature, GeometryKind, Style, decode_features, encode_features, export_geojson


@pytest.fixture
def features():
    return [
        DrawnFeature(GeometryKind.MARKER, (48.5122, 32.2587), Style(color="#019421")),
        DrawnFeature(GeometryKind.CIRCLE, (48.51, 32.26), Style(color="#f70202"), radius=12.5),
        DrawnFeature(GeometryKind.CIRCLE_MARKER, (48.52, 32.27), Style(color="#f70202"), radius=10),
        DrawnFeature(GeometryKind.POLYLINE, [(48.5, 32.2), (48.6, 32.3)], Style(color="#012394")),
        DrawnFeature(
            GeometryKind.POLYGON,
            [(48.5122, 32.2587), (48.5139, 32.2599), (48.515, 32.25)],
            Style(color="#f5ec42", weight=2, opacity=1.0),
        ),
        DrawnFeature(
            GeometryKind.RECTANGLE,
            [(48.0, 32.0), (48.0, 33.0), (49.0, 33.0), (49.0, 32.0)],
            Style(color="#f70202"),
        ),
    ]


class TestGeoJSONExporter:
    """Export DrawnFeatures to GeoJSON."""

    def test_feature_collection(self, features):
        result = export_geojson(features)
        assert result["type"] == "FeatureCollection"
        assert len(result["features"]) == 6

    def test_order_preserved(self, features):
        result = export_geojson(features)
        tags = [f["properties"]["type"] for f in result["features"]]
        assert tags == ["marker", "circle", "circlemarker", "polyline", "polygon", "rectangle"]

    def test_point_is_lng_lat(self, features):
        """Positions are flipped to GeoJSON [lng, lat]."""
        marker = export_geojson(features)["features"][0]
        assert marker["geometry"] == {"type": "Point", "coordinates": [32.2587, 48.5122]}

    def test_circle_writes_radius(self, features):
        circle = export_geojson(features)["features"][1]
        assert circle["geometry"]["type"] == "Point"
        assert circle["properties"]["radius"] == 12.5
        assert circle["properties"]["color"] == "#f70202"

    def test_marker_never_writes_radius(self, features):
        marker = export_geojson(features)["features"][0]
        assert "radius" not in marker["properties"]

    def test_polyline_is_linestring(self, features):
        line = export_geojson(features)["features"][3]
        assert line["geometry"]["type"] == "LineString"
        assert line["geometry"]["coordinates"] == [[32.2, 48.5], [32.3, 48.6]]

    def test_polygon_ring_is_closed(self, features):
        """Polygon rings repeat the first vertex at the end."""
        polygon = export_geojson(features)["features"][4]
        ring = polygon["geometry"]["coordinates"][0]
        assert polygon["geometry"]["type"] == "Polygon"
        assert len(ring) == 4
        assert ring[0] == ring[-1]

    def test_rectangle_is_polygon_tagged_rectangle(self, features):
        rect = export_geojson(features)["features"][5]
        assert rect["geometry"]["type"] == "Polygon"
        assert rect["properties"]["type"] == "rectangle"

    def test_style_written(self, features):
        props = export_geojson(features)["features"][4]["properties"]
        assert props["weight"] == 2
        assert props["opacity"] == 1.0

    def test_encode_is_json(self, features):
        assert json.loads(encode_features(features))["type"] == "FeatureCollection"

    def test_encode_is_deterministic(self, features):
        """Encoding the same sequence twice yields identical text."""
        assert encode_features(features) == encode_features(features)

    def test_empty(self):
        assert export_geojson([]) == {"type": "FeatureCollection", "features": []}


class TestRoundTrip:
    """decode(encode(F)) reproduces kind, coordinates, colour and radius."""

    def test_roundtrip(self, features):
        restored = decode_features(encode_features(features))
        assert len(restored) == len(features)
        for original, copy in zip(features, restored):
            assert copy.kind is original.kind
            assert copy.style == original.style
            assert copy.radius == original.radius
            if original.kind.is_point:
                assert copy.coordinates == pytest.approx(original.coordinates)
            else:
                assert len(copy.coordinates) == len(original.coordinates)
                for a, b in zip(copy.coordinates, original.coordinates):
                    assert a == pytest.approx(b)

    def test_radius_12_5(self):
        circle = DrawnFeature(GeometryKind.CIRCLE, (1.0, 2.0), Style(color="#f70202"), radius=12.5)
        [copy] = decode_features(encode_features([circle]))
        assert copy.radius == 12.5

    def test_reencode_is_identical(self, features):
        """Re-encoding restored features reproduces the stored text."""
        text = encode_features(features)
        assert encode_features(decode_features(text)) == text

"""Drawn feature model, registry, cluster index and GeoJSON codec."""

from mapdraw.features.cluster import Cluster, ClusterIndex
from mapdraw.features.exporters.geojson import encode_features, export_geojson
from mapdraw.features.feature import Bounds, DrawnFeature, GeometryKind, Style
from mapdraw.features.parsers.geojson import decode_features
from mapdraw.features.registry import FeatureRegistry

__all__ = [
    "Bounds",
    "Cluster",
    "ClusterIndex",
    "DrawnFeature",
    "FeatureRegistry",
    "GeometryKind",
    "Style",
    "decode_features",
    "encode_features",
    "export_geojson",
]

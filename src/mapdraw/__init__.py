"""mapdraw -- drawn map features that survive reloads.

Draw, style, encode to GeoJSON, persist, decode, restore.
"""

from mapdraw.draw import DrawLifecycle, DrawState
from mapdraw.errors import CorruptionError, DrawStateError, MapDrawError, ValidationError
from mapdraw.features import (
    Bounds,
    ClusterIndex,
    DrawnFeature,
    FeatureRegistry,
    GeometryKind,
    Style,
    decode_features,
    encode_features,
)
from mapdraw.session import DrawSession, ExportDocument
from mapdraw.storage import JsonFileStore, MemoryStore, PersistenceStore, StorageKey
from mapdraw.style import StyleSelector

__version__ = "0.1.0"

__all__ = [
    "Bounds",
    "ClusterIndex",
    "CorruptionError",
    "DrawLifecycle",
    "DrawSession",
    "DrawState",
    "DrawStateError",
    "DrawnFeature",
    "ExportDocument",
    "FeatureRegistry",
    "GeometryKind",
    "JsonFileStore",
    "MapDrawError",
    "MemoryStore",
    "PersistenceStore",
    "StorageKey",
    "Style",
    "StyleSelector",
    "ValidationError",
    "decode_features",
    "encode_features",
]

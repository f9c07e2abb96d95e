"""Error taxonomy for the drawing pipeline.

CorruptionError is recovered locally (restore skipped, import rejected).
ValidationError is surfaced to the coordinate input and never reaches the
registry. DrawStateError means a gesture arrived in the wrong state.
"""

from __future__ import annotations


class MapDrawError(Exception):
    """Base class for all mapdraw errors."""


class CorruptionError(MapDrawError):
    """Persisted or imported text is not a valid drawing document."""


class ValidationError(MapDrawError):
    """User-entered coordinate text failed the expected pattern.

    Attributes:
        field: Name of the offending input ("latitude" or "longitude").
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class DrawStateError(MapDrawError):
    """A gesture was reported while the lifecycle was in another state."""

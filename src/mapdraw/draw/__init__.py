"""Draw gesture state machine."""

from mapdraw.draw.lifecycle import DrawLifecycle, DrawState

__all__ = ["DrawLifecycle", "DrawState"]

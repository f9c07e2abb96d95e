"""StyleSelector -- the currently chosen drawing style.

New features copy ``current()`` at creation time and never look at the
selector again, so changing the selection only affects shapes drawn
afterwards. Subscribers (the draw toolbar preview) are told about every
change so the toolbar's shape options can be restyled live.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from loguru import logger

from mapdraw.features.feature import Style


@dataclass(frozen=True)
class MarkerColor:
    """A named entry in the colour palette."""
    name: str
    value: str


DEFAULT_PALETTE: tuple[MarkerColor, ...] = (
    MarkerColor("red", "#f70202"),
    MarkerColor("green", "#019421"),
    MarkerColor("blue", "#012394"),
    MarkerColor("yellow", "#f5ec42"),
)


class StyleSelector:
    """Holds the style applied to newly created features."""

    def __init__(
        self,
        initial: Style | None = None,
        palette: tuple[MarkerColor, ...] = DEFAULT_PALETTE,
    ) -> None:
        self.palette = palette
        self._current = initial or Style(color=palette[0].value)
        self._listeners: list[Callable[[Style], None]] = []

    def current(self) -> Style:
        return self._current

    def select(self, value: Style | str) -> Style:
        """Change the current style.

        Args:
            value: A full Style, a palette name ("red"), or any colour
                string ("#00ff00"). Strings keep the current weight and
                opacity.

        Returns:
            The new current style.
        """
        if isinstance(value, Style):
            style = value
        else:
            color = value
            for entry in self.palette:
                if entry.name == value:
                    color = entry.value
                    break
            if not color:
                raise ValueError("colour must not be empty")
            style = replace(self._current, color=color)

        self._current = style
        logger.debug(f"Draw style selected: {style.color}")
        for listener in list(self._listeners):
            listener(style)
        return style

    def subscribe(self, listener: Callable[[Style], None]) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def shape_options(self) -> dict:
        """Draw-toolbar shape options for the current style."""
        return {
            "color": self._current.color,
            "weight": self._current.weight,
            "opacity": self._current.opacity,
        }

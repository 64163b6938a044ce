"""Typed input events delivered to the observer session."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class DragStart:
    pointer_id: int


@dataclass(frozen=True)
class DragMove:
    """Screen-space pointer delta in pixels; y grows downward."""
    pointer_id: int
    delta_x: float
    delta_y: float


@dataclass(frozen=True)
class DragEnd:
    pointer_id: int


@dataclass(frozen=True)
class DragCancel:
    """The pointer was lost (left the widget, focus change) mid-gesture."""
    pointer_id: int


@dataclass(frozen=True)
class Zoom:
    """Signed scroll magnitude; negative zooms in."""
    delta: float


@dataclass(frozen=True)
class Resize:
    width: int
    height: int

    @property
    def aspect(self) -> float:
        return self.width / self.height if self.height else 0.0


InputEvent = Union[DragStart, DragMove, DragEnd, DragCancel, Zoom, Resize]

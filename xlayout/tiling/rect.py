"""
xlayout.tiling.rect - Immutable screen rectangle.

A Rect describes the destination of a window placement: the column a
window is snapped into, expressed in root-window pixel coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rect:
    """
    Immutable rectangle defined by position (x, y) and size (w, h).

    All coordinates are in pixels. The origin (0, 0) is the top-left
    corner of the root window.

    Attributes:
        x: Horizontal coordinate of the top-left corner.
        y: Vertical coordinate of the top-left corner.
        w: Width in pixels.
        h: Height in pixels.
    """

    x: int
    y: int
    w: int
    h: int

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------
    @property
    def right(self) -> int:
        return self.x + self.w

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------
    def to_xywh(self) -> tuple[int, int, int, int]:
        """Return (x, y, width, height), the argument order of a move/resize."""
        return (self.x, self.y, self.w, self.h)

    # ------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------
    def __str__(self) -> str:
        return f"Rect({self.w}x{self.h}+{self.x}+{self.y})"

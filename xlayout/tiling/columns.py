"""
xlayout.tiling.columns - Weighted column layout.

Splits the screen width into K side-by-side columns whose widths are
proportional to integer weights, and maps a hotkey index to one of them.

    geometry = ColumnLayoutEngine.build([1, 2, 1], screen_width=1920)
    geometry.geometry_for(1)        # Column(offset=480, width=960)
    geometry.rect_for(1, 700)       # Rect(960x700+480+0)

Equal-width columns are simply the case where every weight is 1 (see
equal_weights()).

Offsets and widths use truncating integer division, so the columns may
leave up to K-1 pixels unallocated at the right edge of the screen.
That slack is reported by ColumnGeometry.slack and never corrected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from xlayout.tiling.rect import Rect

log = logging.getLogger(__name__)


# Function keys F1..F12 are the only bindable columns.
MAX_COLUMNS = 12


# ============================================================================
# Errors
# ============================================================================
class LayoutError(ValueError):
    """Base class for invalid column layout requests."""


class InvalidWeight(LayoutError):
    """A column weight is not a positive integer."""


class InvalidColumnCount(LayoutError):
    """The number of columns is outside [1, MAX_COLUMNS]."""


class InvalidScreenWidth(LayoutError):
    """The screen width is not a positive integer."""


class IndexOutOfRange(LayoutError, IndexError):
    """A column index outside [0, K) was requested."""


# ============================================================================
# Column / ColumnGeometry
# ============================================================================
@dataclass(frozen=True, slots=True)
class Column:
    """Absolute horizontal placement of one column, in pixels."""

    offset: int
    width: int

    @property
    def end(self) -> int:
        return self.offset + self.width


@dataclass(frozen=True)
class ColumnGeometry:
    """
    Immutable index -> Column mapping for one screen width.

    Built once at startup by ColumnLayoutEngine.build() and shared
    read-only for the whole process lifetime.
    """

    weights: tuple[int, ...]
    screen_width: int
    columns: tuple[Column, ...]

    @property
    def count(self) -> int:
        """Number of columns (K)."""
        return len(self.columns)

    @property
    def slack(self) -> int:
        """Pixels left unallocated at the right edge by integer truncation."""
        return self.screen_width - self.columns[-1].end

    def geometry_for(self, index: int) -> Column:
        """
        Return the column bound to *index*.

        Raises:
            IndexOutOfRange: If index is not in [0, count).
        """
        if not 0 <= index < len(self.columns):
            raise IndexOutOfRange(
                f"Column index {index} out of range [0, {len(self.columns)})"
            )
        return self.columns[index]

    def rect_for(self, index: int, height: int) -> Rect:
        """Target rectangle for a window of *height* snapped into column *index*."""
        column = self.geometry_for(index)
        return Rect(column.offset, 0, column.width, height)

    def dump_state(self) -> str:
        """Return a formatted table of every column."""
        lines = [
            f"=== ColumnGeometry: {self.count} columns, "
            f"{self.screen_width}px wide, slack={self.slack}px ===",
            "",
        ]
        for i, (weight, column) in enumerate(zip(self.weights, self.columns)):
            lines.append(
                f"  F{i + 1:<3d} weight={weight:<3d} "
                f"offset={column.offset:<5d} width={column.width}"
            )
        return "\n".join(lines)


# ============================================================================
# ColumnLayoutEngine
# ============================================================================
class ColumnLayoutEngine:
    """Turns a sequence of column weights into a ColumnGeometry."""

    @staticmethod
    def validate(weights: Sequence[int]) -> tuple[int, ...]:
        """
        Check a weight sequence without building anything.

        Returns:
            The weights as an immutable tuple.

        Raises:
            InvalidColumnCount: If the sequence is empty or longer than 12.
            InvalidWeight: If any weight is not a positive integer.
        """
        weights = tuple(weights)
        if not 1 <= len(weights) <= MAX_COLUMNS:
            raise InvalidColumnCount(
                f"Expected 1 to {MAX_COLUMNS} columns, got {len(weights)}"
            )
        for i, weight in enumerate(weights):
            # bool is an int subclass but never a meaningful weight
            if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
                raise InvalidWeight(
                    f"Column {i} weight must be a positive integer, got {weight!r}"
                )
        return weights

    @classmethod
    def build(cls, weights: Sequence[int], screen_width: int) -> ColumnGeometry:
        """
        Compute the absolute offset and width of every column.

        For column i with prefix sum P_i and total S:
            offset_i = screen_width * P_i // S
            width_i  = screen_width * weights[i] // S

        Args:
            weights:      Ordered positive integer weights, 1 to 12 of them.
            screen_width: Width of the screen in pixels.

        Raises:
            InvalidColumnCount, InvalidWeight, InvalidScreenWidth
        """
        weights = cls.validate(weights)
        if isinstance(screen_width, bool) or not isinstance(screen_width, int) or screen_width <= 0:
            raise InvalidScreenWidth(
                f"Screen width must be a positive integer, got {screen_width!r}"
            )

        total = sum(weights)
        columns: list[Column] = []
        prefix = 0

        for weight in weights:
            columns.append(
                Column(
                    offset=screen_width * prefix // total,
                    width=screen_width * weight // total,
                )
            )
            prefix += weight

        geometry = ColumnGeometry(
            weights=weights,
            screen_width=screen_width,
            columns=tuple(columns),
        )
        log.debug(
            "Built %d columns for %dpx (slack=%dpx)",
            geometry.count,
            screen_width,
            geometry.slack,
        )
        return geometry


def equal_weights(count: int) -> tuple[int, ...]:
    """Weights for *count* equal-width columns."""
    return (1,) * count


def parse_weights(values: Iterable[str]) -> tuple[int, ...]:
    """
    Convert command-line strings into a validated weight tuple.

    Raises:
        InvalidWeight: If a value is not an integer or not positive.
        InvalidColumnCount: If there are no values or more than 12.
    """
    weights: list[int] = []
    for i, value in enumerate(values):
        # Plain decimal digits only: no sign, whitespace or underscores
        if not (isinstance(value, str) and value.isascii() and value.isdigit()):
            raise InvalidWeight(
                f"Column {i} weight must be a positive integer, got {value!r}"
            )
        weights.append(int(value))
    return ColumnLayoutEngine.validate(weights)

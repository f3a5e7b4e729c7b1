"""
xlayout.tiling - Column geometry.

This package contains:
    - rect    : Immutable Rect for placement targets
    - columns : ColumnLayoutEngine - weights + screen width -> columns
"""

from xlayout.tiling.rect import Rect
from xlayout.tiling.columns import (
    MAX_COLUMNS,
    Column,
    ColumnGeometry,
    ColumnLayoutEngine,
    IndexOutOfRange,
    InvalidColumnCount,
    InvalidScreenWidth,
    InvalidWeight,
    LayoutError,
    equal_weights,
    parse_weights,
)

__all__ = [
    "Rect",
    "MAX_COLUMNS",
    "Column",
    "ColumnGeometry",
    "ColumnLayoutEngine",
    "IndexOutOfRange",
    "InvalidColumnCount",
    "InvalidScreenWidth",
    "InvalidWeight",
    "LayoutError",
    "equal_weights",
    "parse_weights",
]

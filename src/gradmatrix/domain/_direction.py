"""
Reduction direction selector.
"""

from enum import Enum


class Direction(Enum):
    """
    Axis selector for reductions.

    Members
    -------
    ROW
        Reduce over rows; the result has a single row.
    COLUMN
        Reduce over columns; the result has a single column.
    DEPTH
        Reduce over depth; the result has depth one.
    ALL
        Reduce over every cell; the result is a scalar.
    """

    ROW = 1
    COLUMN = 2
    DEPTH = 3
    ALL = 0

    @property
    def axis(self):
        """Return the numpy axis for an effective ``(R, C, D)`` array."""
        return {
            Direction.ROW: 0,
            Direction.COLUMN: 1,
            Direction.DEPTH: 2,
            Direction.ALL: None,
        }[self]

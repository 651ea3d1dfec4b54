"""
Matrix interface definitions.

This module defines the domain-level interface for matrix-like objects using
structural typing. The protocol captures the geometry queries, element access
and recorder attachment every consumer relies on, so that higher layers
(network layers, losses, optimizers) and the recorder can type against the
matrix without importing the concrete dense/sparse implementations.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Union, runtime_checkable

import numpy as np

Number = Union[int, float]


@runtime_checkable
class IMatrix(Protocol):
    """
    Matrix interface.

    An `IMatrix` is a rank ≤ 3 numeric container with row/column/depth
    geometry that optionally records the operations applied to it.

    Notes
    -----
    - Geometry getters return *effective* dimensions, i.e. transpose and
      slice window composed.
    - `procedure_factory` is a borrowed reference; the matrix never owns its
      recorder.
    """

    # ---------------------------------------------------------------------
    # Geometry
    # ---------------------------------------------------------------------
    @property
    def rows(self) -> int:
        """Effective number of rows."""
        ...

    @property
    def columns(self) -> int:
        """Effective number of columns."""
        ...

    @property
    def depth(self) -> int:
        """Effective depth."""
        ...

    @property
    def shape(self) -> tuple[int, int, int]:
        """Effective ``(rows, columns, depth)``."""
        ...

    @property
    def is_scalar(self) -> bool:
        """Whether the effective geometry is 1×1×1."""
        ...

    @property
    def is_transposed(self) -> bool:
        """Whether row and column interpretation is swapped."""
        ...

    def size(self) -> int:
        """Number of cells in the effective view."""
        ...

    # ---------------------------------------------------------------------
    # Element access
    # ---------------------------------------------------------------------
    def get_value(self, row: int, column: int, depth: int = 0) -> float:
        """Return the value at a logical coordinate."""
        ...

    def set_value(self, row: int, column: int, depth: int, value: float) -> None:
        """Write the value at a logical coordinate."""
        ...

    def to_numpy(self) -> np.ndarray:
        """Return the effective view as a ``(rows, columns, depth)`` array."""
        ...

    def copy_from_numpy(self, array: np.ndarray) -> None:
        """Overwrite the effective view from an array of equal shape."""
        ...

    # ---------------------------------------------------------------------
    # Aliasing
    # ---------------------------------------------------------------------
    def reference(self) -> "IMatrix":
        """Return a shallow alias sharing storage and mask."""
        ...

    def copy(self) -> "IMatrix":
        """Return an independent deep copy including the mask."""
        ...

    # ---------------------------------------------------------------------
    # Recording
    # ---------------------------------------------------------------------
    @property
    def procedure_factory(self) -> Optional[Any]:
        """The recorder attached to this matrix, or None."""
        ...

    @procedure_factory.setter
    def procedure_factory(self, value: Optional[Any]) -> None: ...

    @property
    def name(self) -> Optional[str]:
        """Optional debug label used in recorded expressions."""
        ...

"""
Mask attachment and stacking for matrices.

A matrix optionally carries a `Mask` whose geometry equals the matrix's
effective geometry and whose storage variant matches the matrix's storage
variant. `reference()` aliases share the mask object; `copy()` copies it.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ....domain._errors import DimensionError, StateError, TypeMismatchError
from ...mask._base import Mask


class MatrixMixinMasking:
    """
    Mask get/set/stack surface.

    Notes
    -----
    Host classes define the class attribute ``MASK`` (the mask variant paired
    with their storage) and the instance attribute ``_mask``.
    """

    MASK: type = Mask

    @property
    def mask(self) -> Optional[Mask]:
        return self._mask

    def set_mask(self, mask: Optional[Mask] = None) -> Mask:
        """
        Attach a mask, creating an empty one if `mask` is None.

        Raises
        ------
        TypeMismatchError
            If the mask variant does not match the storage variant.
        DimensionError
            If the mask geometry differs from the effective geometry.
        """
        if mask is None:
            mask = self.MASK(self.rows, self.columns, self.depth, rng=self._rng)
        if not isinstance(mask, self.MASK):
            raise TypeMismatchError("set_mask", self.MASK.__name__, type(mask).__name__)
        if mask.shape != self.shape:
            raise DimensionError(
                "set_mask", "mask geometry mismatch", expected=self.shape, actual=mask.shape
            )
        self._mask = mask
        return mask

    def unset_mask(self) -> None:
        self._mask = None

    def _require_mask(self) -> Mask:
        if self._mask is None:
            raise StateError("Matrix has no mask.")
        return self._mask

    def has_mask_at(self, row: int, column: int, depth: int = 0) -> bool:
        """Whether the cell is masked by its row, column or element flag."""
        if self._mask is None:
            return False
        return self._mask.is_masked(row, column, depth)

    def mask_array(self) -> np.ndarray:
        """
        Return the combined mask as a boolean array of the effective shape.

        Raises
        ------
        DimensionError
            If the attached mask no longer matches the effective geometry,
            for example after re-slicing.
        """
        if self._mask is None:
            return np.zeros(self.shape, dtype=bool)
        if self._mask.shape != self.shape:
            raise DimensionError(
                "mask", "mask geometry mismatch", expected=self.shape, actual=self._mask.shape
            )
        return self._mask.to_numpy()

    # ------------------------------------------------------------------
    # Stacking
    # ------------------------------------------------------------------
    def stack_mask(self, reset: bool = True) -> None:
        """Push the element mask, creating a mask first if none is attached."""
        if self._mask is None:
            self.set_mask()
        self._mask.stack_mask(reset)

    def unstack_mask(self) -> None:
        self._require_mask().unstack_mask()

    def stack_row_mask(self, reset: bool = True) -> None:
        if self._mask is None:
            self.set_mask()
        self._mask.stack_row_mask(reset)

    def unstack_row_mask(self) -> None:
        self._require_mask().unstack_row_mask()

    def stack_column_mask(self, reset: bool = True) -> None:
        if self._mask is None:
            self.set_mask()
        self._mask.stack_column_mask(reset)

    def unstack_column_mask(self) -> None:
        self._require_mask().unstack_column_mask()

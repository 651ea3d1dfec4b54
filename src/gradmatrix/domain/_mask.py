"""
Mask interface definitions.

A mask is a boolean exclusion map co-indexed with a matrix. It combines an
element mask, a row mask and a column mask; each of the three is independently
stackable so that nested operation scopes (for example dropout inside a
convolution) can temporarily replace a mask and restore it afterwards.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class IMask(Protocol):
    """
    Mask interface.

    Notes
    -----
    - `is_masked(row, column, depth)` is the logical OR of the row mask, the
      column mask and the element mask at that coordinate.
    - `probability` is the keep probability used by the probabilistic
      masking methods.
    """

    @property
    def rows(self) -> int: ...

    @property
    def columns(self) -> int: ...

    @property
    def depth(self) -> int: ...

    @property
    def probability(self) -> float: ...

    def set_probability(self, probability: float) -> None: ...

    def is_masked(self, row: int, column: int, depth: int = 0) -> bool: ...

    def set_mask(self, row: int, column: int, depth: int, value: bool) -> None: ...

    def set_row_mask(self, row: int, value: bool) -> None: ...

    def set_column_mask(self, column: int, value: bool) -> None: ...

    def mask_by_probability(self) -> None: ...

    def mask_row_by_probability(self) -> None: ...

    def mask_column_by_probability(self) -> None: ...

    def stack_mask(self, reset: bool = True) -> None: ...

    def unstack_mask(self) -> None: ...

    def to_numpy(self) -> np.ndarray: ...

    def copy(self) -> "IMask": ...

    def transpose(self) -> "IMask": ...

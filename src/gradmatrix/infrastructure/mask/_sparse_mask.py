"""
Sparse mask: sets of masked coordinates.

Only masked coordinates are stored, which suits sparse matrices where most
cells are implicit zeros and masks are typically small.
"""

from __future__ import annotations

from typing import Set, Tuple

import numpy as np

from ._base import Mask


class SMask(Mask):
    """
    Mask paired with sparse matrices.
    """

    variant = "sparse"

    def _new_element_state(self) -> Set[Tuple[int, int, int]]:
        return set()

    def _get_element(self, state, row: int, column: int, depth: int) -> bool:
        return (row, column, depth) in state

    def _set_element(self, state, row: int, column: int, depth: int, value: bool) -> None:
        if value:
            state.add((row, column, depth))
        else:
            state.discard((row, column, depth))

    def _element_array(self, state) -> np.ndarray:
        out = np.zeros(self.shape, dtype=bool)
        for row, column, depth in state:
            out[row, column, depth] = True
        return out

    def _element_state_from_array(self, array: np.ndarray):
        return {tuple(int(v) for v in idx) for idx in np.argwhere(array)}

    def _new_line_state(self, length: int) -> Set[int]:
        return set()

    def _get_line(self, state, index: int) -> bool:
        return index in state

    def _set_line(self, state, index: int, value: bool) -> None:
        if value:
            state.add(index)
        else:
            state.discard(index)

    def _line_array(self, state, length: int) -> np.ndarray:
        out = np.zeros(length, dtype=bool)
        if state:
            out[list(state)] = True
        return out

    def _line_state_from_array(self, array: np.ndarray):
        return {int(i) for i in np.flatnonzero(array)}

    def _copy_state(self, state):
        return set(state)

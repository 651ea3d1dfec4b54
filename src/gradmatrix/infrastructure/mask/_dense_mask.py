"""
Dense mask: boolean NumPy arrays for element, row and column flags.
"""

from __future__ import annotations

import numpy as np

from ._base import Mask


class DMask(Mask):
    """
    Mask paired with dense matrices.
    """

    variant = "dense"

    def _new_element_state(self) -> np.ndarray:
        return np.zeros(self.shape, dtype=bool)

    def _get_element(self, state: np.ndarray, row: int, column: int, depth: int) -> bool:
        return bool(state[row, column, depth])

    def _set_element(
        self, state: np.ndarray, row: int, column: int, depth: int, value: bool
    ) -> None:
        state[row, column, depth] = value

    def _element_array(self, state: np.ndarray) -> np.ndarray:
        return state.copy()

    def _element_state_from_array(self, array: np.ndarray) -> np.ndarray:
        return np.array(array, dtype=bool)

    def _new_line_state(self, length: int) -> np.ndarray:
        return np.zeros(length, dtype=bool)

    def _get_line(self, state: np.ndarray, index: int) -> bool:
        return bool(state[index])

    def _set_line(self, state: np.ndarray, index: int, value: bool) -> None:
        state[index] = value

    def _line_array(self, state: np.ndarray, length: int) -> np.ndarray:
        return state.copy()

    def _line_state_from_array(self, array: np.ndarray) -> np.ndarray:
        return np.array(array, dtype=bool)

    def _copy_state(self, state: np.ndarray) -> np.ndarray:
        return state.copy()

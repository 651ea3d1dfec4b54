"""
Mask base implementation shared by the dense and sparse variants.

A mask combines three independent exclusion maps over a matrix's effective
``(rows, columns, depth)`` geometry:

- an element mask (one flag per cell),
- a row mask (one flag per row, applied across columns and depth),
- a column mask (one flag per column, applied across rows and depth).

Each map follows the same small state machine: unset, set, stacked. Stacking
pushes the current state (optionally replacing it with a fresh, empty one)
and unstacking restores the most recently pushed state.

Design notes
------------
- Variant-specific state handling is delegated to a handful of abstract hooks
  (`_new_element_state`, `_element_array`, ...). Everything else, including
  probabilistic masking and stacking, lives here once.
- Probability is the *keep* probability: a Bernoulli draw masks a cell when
  ``u > probability``.
- Randomness comes from an injected ``numpy.random.Generator`` so tests can be
  made deterministic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional

import numpy as np
from typing_extensions import Self

from ...domain._errors import DimensionError, ParameterError, StateError
from ...domain._mask import IMask


class Mask(IMask, ABC):
    """
    Abstract element/row/column mask.

    Parameters
    ----------
    rows, columns : int
        Geometry of the masked matrix view.
    depth : int, optional
        Depth of the masked matrix view. Defaults to 1.
    probability : float, optional
        Keep probability for probabilistic masking. Defaults to 1.0.
    rng : Optional[np.random.Generator], optional
        Random generator used by the probabilistic methods.
    """

    variant: str = "abstract"

    def __init__(
        self,
        rows: int,
        columns: int,
        depth: int = 1,
        probability: float = 1.0,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if rows < 1 or columns < 1 or depth < 1:
            raise DimensionError(
                "Mask", "mask dimensions must be positive", actual=(rows, columns, depth)
            )
        self._rows = int(rows)
        self._columns = int(columns)
        self._depth = int(depth)
        self._probability = 1.0
        self.set_probability(probability)
        self._rng = rng if rng is not None else np.random.default_rng()

        self._element_state = self._new_element_state()
        self._row_state = self._new_line_state(self._rows)
        self._column_state = self._new_line_state(self._columns)

        self._element_stack: List[Any] = []
        self._row_stack: List[Any] = []
        self._column_stack: List[Any] = []

    # ------------------------------------------------------------------
    # Variant hooks
    # ------------------------------------------------------------------
    @abstractmethod
    def _new_element_state(self) -> Any: ...

    @abstractmethod
    def _get_element(self, state: Any, row: int, column: int, depth: int) -> bool: ...

    @abstractmethod
    def _set_element(
        self, state: Any, row: int, column: int, depth: int, value: bool
    ) -> None: ...

    @abstractmethod
    def _element_array(self, state: Any) -> np.ndarray: ...

    @abstractmethod
    def _element_state_from_array(self, array: np.ndarray) -> Any: ...

    @abstractmethod
    def _new_line_state(self, length: int) -> Any: ...

    @abstractmethod
    def _get_line(self, state: Any, index: int) -> bool: ...

    @abstractmethod
    def _set_line(self, state: Any, index: int, value: bool) -> None: ...

    @abstractmethod
    def _line_array(self, state: Any, length: int) -> np.ndarray: ...

    @abstractmethod
    def _line_state_from_array(self, array: np.ndarray) -> Any: ...

    @abstractmethod
    def _copy_state(self, state: Any) -> Any: ...

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self._rows, self._columns, self._depth)

    def size(self) -> int:
        return self._rows * self._columns * self._depth

    # ------------------------------------------------------------------
    # Probability
    # ------------------------------------------------------------------
    @property
    def probability(self) -> float:
        """Keep probability used by probabilistic masking."""
        return self._probability

    def set_probability(self, probability: float) -> None:
        """
        Set the keep probability.

        Raises
        ------
        ParameterError
            If `probability` lies outside ``[0, 1]``.
        """
        if not 0.0 <= probability <= 1.0:
            raise ParameterError("probability", probability, "must lie in [0, 1]")
        self._probability = float(probability)

    def is_masked_by_probability(self) -> bool:
        """Draw one Bernoulli trial; True means the draw masks."""
        return bool(self._rng.random() > self._probability)

    def mask_by_probability(self) -> None:
        """Redraw the element mask, one trial per cell."""
        draws = self._rng.random(self.shape) > self._probability
        self._element_state = self._element_state_from_array(draws)

    def mask_row_by_probability(self) -> None:
        """Redraw the row mask, one trial per row."""
        draws = self._rng.random(self._rows) > self._probability
        self._row_state = self._line_state_from_array(draws)

    def mask_column_by_probability(self) -> None:
        """Redraw the column mask, one trial per column."""
        draws = self._rng.random(self._columns) > self._probability
        self._column_state = self._line_state_from_array(draws)

    # ------------------------------------------------------------------
    # Element / row / column access
    # ------------------------------------------------------------------
    def _check_cell(self, row: int, column: int, depth: int) -> None:
        if not (
            0 <= row < self._rows
            and 0 <= column < self._columns
            and 0 <= depth < self._depth
        ):
            raise DimensionError(
                "Mask",
                "coordinate out of range",
                expected=self.shape,
                actual=(row, column, depth),
            )

    def set_mask(self, row: int, column: int, depth: int, value: bool) -> None:
        """Set or clear the element mask at a coordinate."""
        self._check_cell(row, column, depth)
        self._set_element(self._element_state, row, column, depth, bool(value))

    def get_mask(self, row: int, column: int, depth: int = 0) -> bool:
        """Return the element mask (only) at a coordinate."""
        self._check_cell(row, column, depth)
        return self._get_element(self._element_state, row, column, depth)

    def set_row_mask(self, row: int, value: bool) -> None:
        self._check_cell(row, 0, 0)
        self._set_line(self._row_state, row, bool(value))

    def get_row_mask(self, row: int) -> bool:
        self._check_cell(row, 0, 0)
        return self._get_line(self._row_state, row)

    def set_column_mask(self, column: int, value: bool) -> None:
        self._check_cell(0, column, 0)
        self._set_line(self._column_state, column, bool(value))

    def get_column_mask(self, column: int) -> bool:
        self._check_cell(0, column, 0)
        return self._get_line(self._column_state, column)

    def is_masked(self, row: int, column: int, depth: int = 0) -> bool:
        """Logical OR of row mask, column mask and element mask."""
        self._check_cell(row, column, depth)
        return (
            self._get_line(self._row_state, row)
            or self._get_line(self._column_state, column)
            or self._get_element(self._element_state, row, column, depth)
        )

    def to_numpy(self) -> np.ndarray:
        """
        Return the combined mask as a boolean ``(rows, columns, depth)`` array.
        """
        element = self._element_array(self._element_state)
        row = self._line_array(self._row_state, self._rows)
        column = self._line_array(self._column_state, self._columns)
        return element | row[:, None, None] | column[None, :, None]

    def any(self) -> bool:
        """Whether at least one cell is masked."""
        return bool(self.to_numpy().any())

    def clear(self) -> None:
        """Clear element, row and column masks (stacks are kept)."""
        self._element_state = self._new_element_state()
        self._row_state = self._new_line_state(self._rows)
        self._column_state = self._new_line_state(self._columns)

    # ------------------------------------------------------------------
    # Stacking
    # ------------------------------------------------------------------
    def stack_mask(self, reset: bool = True) -> None:
        """
        Push the element mask.

        Parameters
        ----------
        reset : bool, optional
            If True (default) the current element mask becomes empty,
            otherwise it keeps a copy of the pushed state.
        """
        self._element_stack.append(self._element_state)
        self._element_state = (
            self._new_element_state() if reset else self._copy_state(self._element_state)
        )

    def unstack_mask(self) -> None:
        """
        Restore the most recently pushed element mask.

        Raises
        ------
        StateError
            If the element mask stack is empty.
        """
        if not self._element_stack:
            raise StateError("Element mask stack is empty.")
        self._element_state = self._element_stack.pop()

    def stack_row_mask(self, reset: bool = True) -> None:
        self._row_stack.append(self._row_state)
        self._row_state = (
            self._new_line_state(self._rows) if reset else self._copy_state(self._row_state)
        )

    def unstack_row_mask(self) -> None:
        if not self._row_stack:
            raise StateError("Row mask stack is empty.")
        self._row_state = self._row_stack.pop()

    def stack_column_mask(self, reset: bool = True) -> None:
        self._column_stack.append(self._column_state)
        self._column_state = (
            self._new_line_state(self._columns)
            if reset
            else self._copy_state(self._column_state)
        )

    def unstack_column_mask(self) -> None:
        if not self._column_stack:
            raise StateError("Column mask stack is empty.")
        self._column_state = self._column_stack.pop()

    def stack_depth(self) -> tuple[int, int, int]:
        """Return the ``(element, row, column)`` stack sizes."""
        return (len(self._element_stack), len(self._row_stack), len(self._column_stack))

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------
    def _blank(self, rows: int, columns: int, depth: int) -> Self:
        return self.__class__(
            rows, columns, depth, probability=self._probability, rng=self._rng
        )

    def copy(self) -> Self:
        """
        Return an independent copy of the current masks.

        Stacks are not copied; the copy starts with empty stacks.
        """
        out = self._blank(self._rows, self._columns, self._depth)
        out._element_state = self._copy_state(self._element_state)
        out._row_state = self._copy_state(self._row_state)
        out._column_state = self._copy_state(self._column_state)
        return out

    def transpose(self) -> Self:
        """
        Return a new mask with rows and columns swapped.
        """
        out = self._blank(self._columns, self._rows, self._depth)
        element = self._element_array(self._element_state)
        out._element_state = out._element_state_from_array(
            np.transpose(element, (1, 0, 2))
        )
        out._row_state = out._line_state_from_array(
            self._line_array(self._column_state, self._columns)
        )
        out._column_state = out._line_state_from_array(
            self._line_array(self._row_state, self._rows)
        )
        return out

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(rows={self._rows}, columns={self._columns}, "
            f"depth={self._depth}, probability={self._probability})"
        )

"""
Binary function catalogue: value and partial derivative of every
`BinaryFunctionType`.
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

from ...domain._errors import ParameterError
from ...domain._function_types import BinaryFunctionType

ArrayFn2 = Callable[[np.ndarray, np.ndarray], np.ndarray]


def _pow_derivative(x: np.ndarray, c: np.ndarray) -> np.ndarray:
    return c * np.power(x, c - 1.0)


_DEFINITIONS: dict = {
    BinaryFunctionType.POW: (np.power, _pow_derivative),
    BinaryFunctionType.MAX: (np.maximum, lambda x, y: (x >= y).astype(np.float64)),
    BinaryFunctionType.MIN: (np.minimum, lambda x, y: (x <= y).astype(np.float64)),
}


class BinaryFunction:
    """
    A binary function ``f(x, y)`` with its derivative with respect to ``x``.

    Parameters
    ----------
    function_type : BinaryFunctionType
        Catalogue entry, or ``CUSTOM`` with explicit callables.
    function, derivative : Optional[Callable], optional
        Vectorized callables required for ``CUSTOM``.

    Raises
    ------
    ParameterError
        If ``CUSTOM`` is requested without both callables.
    """

    def __init__(
        self,
        function_type: BinaryFunctionType,
        *,
        function: Optional[ArrayFn2] = None,
        derivative: Optional[ArrayFn2] = None,
    ) -> None:
        self.function_type = function_type
        if function_type is BinaryFunctionType.CUSTOM:
            if function is None or derivative is None:
                raise ParameterError(
                    "function", function, "CUSTOM requires a function and a derivative"
                )
            self._function, self._derivative = function, derivative
        else:
            self._function, self._derivative = _DEFINITIONS[function_type]

    def __repr__(self) -> str:
        return f"BinaryFunction({self.function_type.name})"

    def function(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        return self._function(x, y)

    def derivative(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Partial derivative with respect to the first argument."""
        return self._derivative(x, y)

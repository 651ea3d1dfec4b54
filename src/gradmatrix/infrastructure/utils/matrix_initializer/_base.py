"""
Matrix initializer registry and dispatch utilities.

This module defines the concrete `MatrixInitializer` used to apply registered
initialization schemes (constants, identity, Xavier, He, LeCun) to matrices.

Design
------
- Initializers are registered by string name via a decorator-based registry;
  the values of the `Initialization` enum are the registry keys.
- Each initializer is a callable ``(matrix, inputs, outputs) -> matrix`` that
  mutates the matrix in-place and returns it.
- The dispatcher resolves an initializer at construction time and invokes it
  via `__call__`.

Usage example
-------------
Registering an initializer:

    @MatrixInitializer.register_initializer("uniform_xavier")
    def uniform_xavier(matrix, inputs=None, outputs=None):
        ...

Applying an initializer:

    MatrixInitializer(Initialization.UNIFORM_XAVIER)(matrix)
"""

from __future__ import annotations

from typing import Callable, ClassVar, Dict, Optional, TypeVar, Union

import numpy as np

from ....domain._errors import ParameterError
from ....domain.utils._matrix_initialization import Initialization, _MatrixInitializer
from ...matrix._matrix import Matrix

T = TypeVar("T", bound=Callable[..., Matrix])


class MatrixInitializer(_MatrixInitializer):
    """
    Registry-backed matrix initializer dispatcher.

    Raises
    ------
    ParameterError
        If the requested scheme is not registered.
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[..., Matrix]]] = {}

    def __init__(self, initialization: Union[Initialization, str]) -> None:
        name = (
            initialization.value
            if isinstance(initialization, Initialization)
            else initialization
        )
        try:
            self._initializer: Callable[..., Matrix] = self.INITIALIZERS[name]
        except KeyError as e:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise ParameterError(
                "initialization", initialization, f"unsupported; available: {available}"
            ) from e

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Decorator to register a matrix initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ValueError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    @classmethod
    def get(cls, name: str) -> Callable[..., Matrix]:
        """Get a registered initializer callable by name."""
        return cls.INITIALIZERS[name]

    def __call__(
        self,
        matrix: Matrix,
        inputs: Optional[int] = None,
        outputs: Optional[int] = None,
    ) -> Matrix:
        return self._initializer(matrix, inputs, outputs)


def _require_fan(name: str, value: Optional[int]) -> int:
    if value is None or int(value) < 1:
        raise ParameterError(name, value, "convolution initialization requires a positive count")
    return int(value)


def fill_normal(matrix: Matrix, sd: float) -> Matrix:
    """Fill with ``gauss * sd`` draws from the matrix RNG."""
    matrix.copy_from_numpy(matrix.rng.standard_normal(matrix.shape) * sd)
    return matrix


def fill_uniform(matrix: Matrix, bound: float) -> Matrix:
    """Fill with ``(2u - 1) * bound`` draws from the matrix RNG."""
    matrix.copy_from_numpy((2.0 * matrix.rng.random(matrix.shape) - 1.0) * bound)
    return matrix


def conv_fans(inputs: Optional[int], outputs: Optional[int]) -> tuple[int, int]:
    return _require_fan("inputs", inputs), _require_fan("outputs", outputs)


def fill_constant(matrix: Matrix, value: float) -> Matrix:
    matrix.copy_from_numpy(np.full(matrix.shape, float(value)))
    return matrix

"""
Abstract interfaces and helpers for matrix initialization.

This module defines the `Initialization` scheme enum, the abstract base class
for initializer dispatchers, and the shared helpers that compute the scale of
the Xavier/He/LeCun families. The concrete registry lives in the
infrastructure layer.
"""

import math
from abc import ABC
from enum import Enum
from typing import Callable, Dict, Optional, TypeVar

from .._matrix import IMatrix

T = TypeVar("T", bound=Callable[..., IMatrix])


class Initialization(Enum):
    """
    Named initialization schemes.

    The enum value is the registry key of the infrastructure initializer
    implementing the scheme. ``*_CONV`` variants derive their scale from the
    caller-provided ``inputs``/``outputs`` (fan-in/fan-out of a convolution)
    instead of from the matrix geometry.
    """

    ZERO = "zero"
    ONE = "one"
    RANDOM = "random"
    IDENTITY = "identity"
    NORMAL_XAVIER = "normal_xavier"
    UNIFORM_XAVIER = "uniform_xavier"
    NORMAL_XAVIER_CONV = "normal_xavier_conv"
    UNIFORM_XAVIER_CONV = "uniform_xavier_conv"
    NORMAL_HE = "normal_he"
    UNIFORM_HE = "uniform_he"
    NORMAL_HE_CONV = "normal_he_conv"
    UNIFORM_HE_CONV = "uniform_he_conv"
    NORMAL_LECUN = "normal_lecun"
    UNIFORM_LECUN = "uniform_lecun"
    NORMAL_LECUN_CONV = "normal_lecun_conv"
    UNIFORM_LECUN_CONV = "uniform_lecun_conv"


class _MatrixInitializer(ABC):
    """
    Abstract base class for initializer dispatchers.

    Design notes
    ------------
    - Initializers are identified by string names (see `Initialization`).
    - Each initializer is a callable that mutates a matrix in-place and
      returns it.
    """

    INITIALIZERS: Dict[str, Callable] = {}

    def __init__(self, initialization: "Initialization | str") -> None:
        """
        Construct an initializer dispatcher.

        Parameters
        ----------
        initialization:
            Scheme enum member or registry key.
        """
        ...

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Register an initializer under a given name.

        Returns
        -------
        Callable
            A decorator that registers the initializer function.
        """
        ...

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return the names of all registered initializers."""
        ...

    def __call__(
        self,
        matrix: IMatrix,
        inputs: Optional[int] = None,
        outputs: Optional[int] = None,
    ) -> IMatrix:
        """
        Apply the initializer to a matrix.

        Parameters
        ----------
        matrix:
            Matrix to initialize in-place.
        inputs, outputs:
            Fan-in/fan-out used by the ``*_CONV`` schemes.
        """
        ...


def _xavier_scale(fan_in: int, fan_out: int, uniform: bool) -> float:
    """
    Return the Xavier standard deviation (normal) or range (uniform).

    ``sqrt(2 / (fan_in + fan_out))`` for normal draws and
    ``sqrt(6 / (fan_in + fan_out))`` for uniform draws.
    """
    return math.sqrt((6.0 if uniform else 2.0) / float(fan_in + fan_out))


def _he_scale(fan_in: int, uniform: bool) -> float:
    """Return ``sqrt(2 / fan_in)`` (normal) or ``sqrt(6 / fan_in)`` (uniform)."""
    return math.sqrt((6.0 if uniform else 2.0) / float(fan_in))


def _lecun_scale(fan_in: int, uniform: bool) -> float:
    """Return ``sqrt(1 / fan_in)`` (normal) or ``sqrt(3 / fan_in)`` (uniform)."""
    return math.sqrt((3.0 if uniform else 1.0) / float(fan_in))

from typing import Any, Mapping, Optional
from dataclasses import dataclass, field

from ...domain._matrix import IMatrix


@dataclass(frozen=True, eq=False)
class Expression:
    """
    One recorded operation of a computation graph.

    An `Expression` is created by the `ProcedureFactory` when a matrix
    operation completes under an open expression scope. It captures everything
    an external replay engine needs to reconstruct the forward graph and
    differentiate it.

    Attributes
    ----------
    expression_id : int
        Sequence number, unique within one factory.
    name : str
        Operator type (e.g. ``"ADD"``, ``"MAX_POOL"``).
    signature : str
        Human-readable ``NAME(arguments) -> result`` description.
    argument1 : IMatrix
        First (or only) input matrix.
    argument2 : Optional[IMatrix]
        Second input matrix for binary operators, otherwise None.
    result : Any
        The matrix produced by the operation.
    params : Mapping[str, Any]
        Operator-specific parameters (direction, p, stride, position map, ...).

    Notes
    -----
    Expressions are write-once: the dataclass is frozen and equality is
    identity, so two recordings of the same operator are always distinct.
    """

    expression_id: int
    name: str
    signature: str
    argument1: IMatrix
    argument2: Optional[IMatrix]
    result: Any
    params: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_binary(self) -> bool:
        """Whether the expression has two input matrices."""
        return self.argument2 is not None

    @property
    def arguments(self) -> tuple:
        """Input matrices, in order."""
        if self.argument2 is None:
            return (self.argument1,)
        return (self.argument1, self.argument2)

"""
Expression recorder ("procedure factory") for matrix computation graphs.

The factory is attached by reference to every matrix of one graph. Matrix
operations talk to it through a scope protocol:

1. ``lock = factory.start_expression(matrix)`` opens a scope. If a scope is
   already open (the operation is nested inside another recorded operation)
   the returned lock is ``0``.
2. The operation executes.
3. ``factory.create_<family>_expression(lock, ...)`` registers the typed
   expression and closes the scope. Calls carrying a lock that does not match
   the open scope are ignored, so only the outermost operation of a composite
   is recorded.
4. If the operation fails, ``factory.abort_expression(lock)`` closes the scope
   without recording anything.

Design notes
------------
- The factory never owns matrices beyond the expressions it records; matrices
  hold a borrowed reference to the factory.
- Synchronization is an explicit identity check: operands either share one
  factory, or at most one of them carries a factory and the others adopt it.
- Replay/differentiation of the recorded expressions is out of scope here.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from ...domain._errors import GraphConflictError
from ...domain._matrix import IMatrix
from ...domain._procedure_factory import IProcedureFactory
from ._expression import Expression

logger = logging.getLogger(__name__)


def resolve_procedure_factory(*matrices: Any) -> Optional["ProcedureFactory"]:
    """
    Return the single recorder shared by `matrices`, or None.

    Parameters
    ----------
    *matrices : IMatrix
        Operands of one operation. ``None`` entries are ignored.

    Returns
    -------
    Optional[ProcedureFactory]
        The non-null recorder carried by the operands, or None when none of
        them carries one.

    Raises
    ------
    GraphConflictError
        If two operands carry different non-null recorders.
    """
    found = None
    for matrix in matrices:
        if matrix is None:
            continue
        factory = matrix.procedure_factory
        if factory is None:
            continue
        if found is None:
            found = factory
        elif factory is not found:
            raise GraphConflictError(found, factory)
    return found


def _label(matrix: Any) -> str:
    if matrix is None:
        return "-"
    name = getattr(matrix, "name", None)
    if name:
        return str(name)
    shape = getattr(matrix, "shape", None)
    return f"M{shape}" if shape is not None else type(matrix).__name__


class ProcedureFactory(IProcedureFactory):
    """
    Records matrix operations as a list of `Expression` objects.

    Attributes
    ----------
    expressions : tuple[Expression, ...]
        Expressions recorded so far, in execution order.

    Notes
    -----
    The factory is not thread-safe. Graph construction is assumed to be
    single-threaded per training step.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name
        self._expressions: List[Expression] = []
        self._lock: int = 0
        self._lock_counter: int = 0
        self._scope_matrix: Optional[IMatrix] = None

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<ProcedureFactory{label} expressions={len(self._expressions)}>"

    # ------------------------------------------------------------------
    # Scope protocol
    # ------------------------------------------------------------------
    @property
    def expressions(self) -> tuple:
        return tuple(self._expressions)

    @property
    def is_locked(self) -> bool:
        """Whether an expression scope is currently open."""
        return self._lock != 0

    def start_expression(self, matrix: IMatrix) -> int:
        """
        Open an expression scope for an operation invoked on `matrix`.

        Returns
        -------
        int
            A positive lock token, or ``0`` if a scope is already open.
        """
        if self._lock != 0:
            return 0
        self._lock_counter += 1
        self._lock = self._lock_counter
        self._scope_matrix = matrix
        return self._lock

    def abort_expression(self, lock: int) -> None:
        """Close the scope opened with `lock` without recording."""
        if lock != 0 and lock == self._lock:
            self._lock = 0
            self._scope_matrix = None

    def create_expression(
        self,
        lock: int,
        name: str,
        argument1: IMatrix,
        argument2: Optional[IMatrix],
        result: Any,
        **params: Any,
    ) -> Optional[Expression]:
        """
        Register an expression and close the scope.

        Parameters
        ----------
        lock : int
            Token returned by `start_expression`.
        name : str
            Operator type.
        argument1, argument2 : IMatrix
            Input matrices (`argument2` is None for unary operators).
        result : Any
            Output of the operation.
        **params : Any
            Operator-specific parameters.

        Returns
        -------
        Optional[Expression]
            The recorded expression, or None when `lock` does not own the
            open scope.
        """
        if lock == 0 or lock != self._lock:
            return None
        arguments = ", ".join(
            _label(m) for m in (argument1, argument2) if m is not None
        )
        expression = Expression(
            expression_id=len(self._expressions),
            name=name,
            signature=f"{name}({arguments}) -> {_label(result)}",
            argument1=argument1,
            argument2=argument2,
            result=result,
            params=dict(params),
        )
        self._expressions.append(expression)
        self._lock = 0
        self._scope_matrix = None
        logger.debug("recorded expression %d: %s", expression.expression_id, expression.signature)
        return expression

    def synchronize(self, *matrices: IMatrix) -> None:
        """
        Attach this factory to every matrix in `matrices`.

        Raises
        ------
        GraphConflictError
            If one of the matrices already carries a different factory.
        """
        for matrix in matrices:
            current = matrix.procedure_factory
            if current is not None and current is not self:
                raise GraphConflictError(self, current)
        for matrix in matrices:
            matrix.procedure_factory = self

    def clear(self) -> None:
        """Forget every recorded expression."""
        self._expressions.clear()
        self._lock = 0
        self._scope_matrix = None

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------
    def create_add_expression(self, lock, argument1, argument2, result):
        return self.create_expression(lock, "ADD", argument1, argument2, result)

    def create_subtract_expression(self, lock, argument1, argument2, result):
        return self.create_expression(lock, "SUBTRACT", argument1, argument2, result)

    def create_multiply_expression(self, lock, argument1, argument2, result):
        return self.create_expression(lock, "MULTIPLY", argument1, argument2, result)

    def create_divide_expression(self, lock, argument1, argument2, result):
        return self.create_expression(lock, "DIVIDE", argument1, argument2, result)

    def create_dot_expression(self, lock, argument1, argument2, result):
        return self.create_expression(lock, "DOT", argument1, argument2, result)

    def create_unary_function_expression(self, lock, argument1, result, unary_function):
        return self.create_expression(
            lock, "UNARY_FUNCTION", argument1, None, result, unary_function=unary_function
        )

    def create_binary_function_expression(
        self, lock, argument1, argument2, result, binary_function
    ):
        return self.create_expression(
            lock,
            "BINARY_FUNCTION",
            argument1,
            argument2,
            result,
            binary_function=binary_function,
        )

    # ------------------------------------------------------------------
    # Reductions and statistics
    # ------------------------------------------------------------------
    def create_sum_expression(self, lock, argument1, result, direction):
        return self.create_expression(lock, "SUM", argument1, None, result, direction=direction)

    def create_mean_expression(self, lock, argument1, result, direction):
        return self.create_expression(lock, "MEAN", argument1, None, result, direction=direction)

    def create_variance_expression(self, lock, argument1, result, direction):
        return self.create_expression(
            lock, "VARIANCE", argument1, None, result, direction=direction
        )

    def create_standard_deviation_expression(self, lock, argument1, result, direction):
        return self.create_expression(
            lock, "STANDARD_DEVIATION", argument1, None, result, direction=direction
        )

    def create_min_expression(self, lock, argument1, result, direction):
        return self.create_expression(lock, "MIN", argument1, None, result, direction=direction)

    def create_max_expression(self, lock, argument1, result, direction):
        return self.create_expression(lock, "MAX", argument1, None, result, direction=direction)

    def create_norm_expression(self, lock, argument1, result, p):
        return self.create_expression(lock, "NORM", argument1, None, result, p=p)

    def create_entropy_expression(self, lock, argument1, result):
        return self.create_expression(lock, "ENTROPY", argument1, None, result)

    def create_softmax_expression(self, lock, argument1, result, tau, gumbel):
        return self.create_expression(
            lock, "SOFTMAX", argument1, None, result, tau=tau, gumbel=gumbel
        )

    def create_dropout_expression(self, lock, argument1, result, probability, monte_carlo):
        return self.create_expression(
            lock,
            "DROPOUT",
            argument1,
            None,
            result,
            probability=probability,
            monte_carlo=monte_carlo,
        )

    def create_gradient_clipping_expression(self, lock, argument1, result, threshold):
        return self.create_expression(
            lock, "GRADIENT_CLIPPING", argument1, None, result, threshold=threshold
        )

    # ------------------------------------------------------------------
    # Spatial operators
    # ------------------------------------------------------------------
    def create_convolve_expression(self, lock, argument1, argument2, result, **params):
        return self.create_expression(lock, "CONVOLVE", argument1, argument2, result, **params)

    def create_crosscorrelate_expression(self, lock, argument1, argument2, result, **params):
        return self.create_expression(
            lock, "CROSSCORRELATE", argument1, argument2, result, **params
        )

    def create_winograd_convolve_expression(
        self, lock, argument1, argument2, result, **params
    ):
        return self.create_expression(
            lock, "WINOGRAD_CONVOLVE", argument1, argument2, result, **params
        )

    def create_max_pool_expression(self, lock, argument1, result, **params):
        return self.create_expression(lock, "MAX_POOL", argument1, None, result, **params)

    def create_random_pool_expression(self, lock, argument1, result, **params):
        return self.create_expression(lock, "RANDOM_POOL", argument1, None, result, **params)

    def create_cyclic_pool_expression(self, lock, argument1, result, **params):
        return self.create_expression(lock, "CYCLIC_POOL", argument1, None, result, **params)

    def create_average_pool_expression(self, lock, argument1, result, **params):
        return self.create_expression(lock, "AVERAGE_POOL", argument1, None, result, **params)

    # ------------------------------------------------------------------
    # Structural operators
    # ------------------------------------------------------------------
    def create_transpose_expression(self, lock, argument1, result):
        return self.create_expression(lock, "TRANSPOSE", argument1, None, result)

    def create_join_expression(self, lock, argument1, argument2, result, joined_vertically):
        return self.create_expression(
            lock,
            "JOIN",
            argument1,
            argument2,
            result,
            joined_vertically=joined_vertically,
        )

    def create_unjoin_expression(self, lock, argument1, result, **params):
        return self.create_expression(lock, "UNJOIN", argument1, None, result, **params)

    def create_split_expression(self, lock, argument1, result, split_at, split_vertically):
        return self.create_expression(
            lock,
            "SPLIT",
            argument1,
            None,
            result,
            split_at=split_at,
            split_vertically=split_vertically,
        )

    def create_flatten_expression(self, lock, argument1, result):
        return self.create_expression(lock, "FLATTEN", argument1, None, result)

    def create_unflatten_expression(self, lock, argument1, result, rows, columns, depth):
        return self.create_expression(
            lock, "UNFLATTEN", argument1, None, result, rows=rows, columns=columns, depth=depth
        )

"""
Recorder (procedure factory) interface.

The matrix core talks to the gradient recorder only through this contract:
open an expression scope, register a typed expression when the operation
completed, release the scope when it failed, and attach one recorder to a
group of matrices. Replay and differentiation of the recorded expressions are
the business of an external engine and are not part of this contract.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from ._matrix import IMatrix


@runtime_checkable
class IProcedureFactory(Protocol):
    """
    Recorder interface consumed by the matrix core.

    Notes
    -----
    - `start_expression` returns a lock token. While a scope is open, nested
      calls receive the token ``0`` and their `create_*` calls are ignored,
      so only the outermost operation of a composite is recorded.
    - `create_expression` returns the recorded expression, or None when the
      lock does not match the open scope.
    """

    def start_expression(self, matrix: IMatrix) -> int: ...

    def abort_expression(self, lock: int) -> None: ...

    def create_expression(
        self,
        lock: int,
        name: str,
        argument1: IMatrix,
        argument2: Optional[IMatrix],
        result: Any,
        **params: Any,
    ) -> Optional[Any]: ...

    def synchronize(self, *matrices: IMatrix) -> None: ...

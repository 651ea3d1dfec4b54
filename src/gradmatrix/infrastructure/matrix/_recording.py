"""
Gradient-recording hooks shared by every differentiable matrix operation.

Every recorded operation goes through `MatrixRecordingMixin._record`, which
implements the recording protocol once:

- no recorder on any operand: execute directly;
- otherwise: synchronize the recorder across operands, open an expression
  scope, execute, attach the recorder to the result and register a typed
  expression through ``create_<family>_expression``.

A failing operation closes its scope without recording and re-raises.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from ..procedure._procedure_factory import ProcedureFactory, resolve_procedure_factory


class MatrixRecordingMixin:
    """
    Recorder attachment and the shared recording wrapper.
    """

    @property
    def procedure_factory(self) -> Optional[ProcedureFactory]:
        return self._procedure_factory

    @procedure_factory.setter
    def procedure_factory(self, value: Optional[ProcedureFactory]) -> None:
        self._procedure_factory = value

    def remove_procedure_factory(self) -> None:
        self._procedure_factory = None

    def synchronize_procedure_factory(self, *others: Any) -> Optional[ProcedureFactory]:
        """
        Make `self` and `others` share one recorder.

        Returns
        -------
        Optional[ProcedureFactory]
            The shared recorder, or None if none of the matrices has one.

        Raises
        ------
        GraphConflictError
            If two matrices carry different recorders.
        """
        factory = resolve_procedure_factory(self, *others)
        if factory is not None:
            factory.synchronize(self, *others)
        return factory

    def _record(
        self,
        family: str,
        operands: Sequence[Any],
        execute: Callable[[], Any],
        *,
        out: Any = None,
        result_params: Optional[Callable[[Any], dict]] = None,
        **params: Any,
    ) -> Any:
        """
        Run `execute` under the recording protocol.

        Parameters
        ----------
        family : str
            Expression family; selects ``create_<family>_expression``.
        operands : Sequence
            Matrix operands other than `self`, passed to the expression in
            order.
        execute : Callable[[], Any]
            Performs the operation and returns a matrix, or a tuple. For a
            tuple, the recorded result is its first element unless every
            element is a matrix (as for `split`), in which case the whole
            tuple is recorded.
        out : optional
            Caller-provided output matrix, included in synchronization.
        result_params : Optional[Callable], optional
            Derives extra expression parameters from the execution result.
        **params : Any
            Expression parameters.
        """
        participants = [m for m in (*operands, out) if m is not None]
        factory = resolve_procedure_factory(self, *participants)
        if factory is None:
            return execute()

        factory.synchronize(self, *participants)
        lock = factory.start_expression(self)
        try:
            outcome = execute()
        except Exception:
            factory.abort_expression(lock)
            raise

        produced = outcome if isinstance(outcome, tuple) else (outcome,)
        for matrix in produced:
            for part in _matrices_in(matrix):
                part.procedure_factory = factory
        if all(_is_matrix(item) for item in produced):
            result = outcome
        else:
            result = produced[0]
        if result_params is not None:
            params.update(result_params(outcome))
        create = getattr(factory, f"create_{family}_expression")
        create(lock, self, *operands, result, **params)
        return outcome


def _is_matrix(item: Any) -> bool:
    return hasattr(item, "procedure_factory")


def _matrices_in(result: Any) -> list:
    if not _is_matrix(result):
        return []
    return [result, *getattr(result, "sub_matrices", ())]

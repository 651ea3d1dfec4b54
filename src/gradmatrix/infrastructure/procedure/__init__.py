"""
Computation-graph recording.

Public API
----------
- ``ProcedureFactory``           expression recorder attached to matrices
- ``Expression``                 one recorded operation
- ``resolve_procedure_factory``  recorder synchronization check
"""

from ._expression import Expression
from ._procedure_factory import ProcedureFactory, resolve_procedure_factory

__all__ = [
    Expression.__name__,
    ProcedureFactory.__name__,
    resolve_procedure_factory.__name__,
]

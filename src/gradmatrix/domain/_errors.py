"""
Matrix-related exceptions for gradmatrix.

This module defines the error taxonomy raised by the matrix core. Every error
is raised synchronously at the point of failure and is never swallowed by the
library; callers decide whether to abort a training step or propagate.

All errors derive from :class:`MatrixError`, itself a ``RuntimeError``, so
callers may catch the whole family at once or branch on a specific kind
without inspecting message strings.
"""

from typing import Any, Optional


class MatrixError(RuntimeError):
    """
    Base class of all errors raised by the matrix core.
    """


class DimensionError(MatrixError):
    """
    Raised when operand or result geometries are incompatible.

    Typical causes are binary operations between non-scalar matrices of
    different size, a dot product whose inner dimensions disagree, a slice
    window that exceeds the underlying storage, join/split/flatten size
    mismatches, or a mask whose geometry does not match its matrix.

    Attributes
    ----------
    op : str
        The name of the operation that failed.
    expected : Optional[tuple]
        The geometry the operation required, when known.
    actual : Optional[tuple]
        The geometry the operation received, when known.
    """

    def __init__(
        self,
        op: str,
        message: str,
        expected: Optional[tuple] = None,
        actual: Optional[tuple] = None,
    ) -> None:
        """
        Initialize the DimensionError.

        Parameters
        ----------
        op : str
            The operation name (e.g., "add", "dot", "slice_at").
        message : str
            Human-readable description of the mismatch.
        expected : Optional[tuple], optional
            Required geometry, if applicable.
        actual : Optional[tuple], optional
            Received geometry, if applicable.
        """
        detail = ""
        if expected is not None or actual is not None:
            detail = f" (expected {expected}, got {actual})"
        super().__init__(f"{op}: {message}{detail}")
        self.op = op
        self.expected = expected
        self.actual = actual


class TypeMismatchError(MatrixError):
    """
    Raised when a storage variant is not supported for an operation.

    This covers masks whose dense/sparse variant differs from the owning
    matrix's storage variant and structural operators (such as split)
    invoked on a composite matrix.

    Attributes
    ----------
    op : str
        The operation that was attempted.
    expected : str
        Name of the accepted variant(s).
    actual : str
        Name of the variant that was received.
    """

    def __init__(self, op: str, expected: str, actual: str) -> None:
        """
        Initialize the TypeMismatchError.

        Parameters
        ----------
        op : str
            The operation name.
        expected : str
            Accepted variant description.
        actual : str
            Received variant description.
        """
        super().__init__(f"{op}: expected {expected}, got {actual}.")
        self.op = op
        self.expected = expected
        self.actual = actual


class GraphConflictError(MatrixError):
    """
    Raised when two operands are attached to different recorders.

    Two independent computation graphs cannot be merged implicitly; the
    caller must detach one of the operands first.

    Attributes
    ----------
    first : Any
        Recorder of the first operand.
    second : Any
        Recorder of the conflicting operand.
    """

    def __init__(self, first: Any, second: Any) -> None:
        """
        Initialize the GraphConflictError.

        Parameters
        ----------
        first : Any
            Recorder attached to the first operand.
        second : Any
            Recorder attached to the other operand.
        """
        super().__init__(
            "Operands are attached to different procedure factories "
            f"({first!r} vs {second!r})."
        )
        self.first = first
        self.second = second


class StateError(MatrixError):
    """
    Raised when an operation is invalid for the current object state.

    Examples are popping an empty mask stack or slicing a matrix that was
    constructed as non-sliceable.
    """


class ParameterError(MatrixError):
    """
    Raised for an invalid configuration value.

    Attributes
    ----------
    name : str
        Parameter name.
    value : Any
        Rejected value.
    """

    def __init__(self, name: str, value: Any, reason: str) -> None:
        """
        Initialize the ParameterError.

        Parameters
        ----------
        name : str
            Name of the offending parameter.
        value : Any
            The rejected value.
        reason : str
            Short description of the accepted range.
        """
        super().__init__(f"Invalid {name}={value!r}: {reason}.")
        self.name = name
        self.value = value

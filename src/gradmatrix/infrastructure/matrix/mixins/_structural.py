"""
Structural operators: transpose, join, unjoin, split, flatten and unflatten.
"""

from __future__ import annotations

from typing import Optional

from ....domain._errors import DimensionError, TypeMismatchError
from ...ops.structural_cpu import flatten_cpu, split_cpu, unflatten_cpu


class MatrixMixinStructural:
    """
    Shape-changing operators.

    Notes
    -----
    `transpose` and `join` produce views that share storage with their
    inputs; the other operators copy.
    """

    def transpose(self):
        """
        Return a transposed view sharing storage with this matrix.

        An attached mask is carried over in transposed form.
        """

        def execute():
            view = self.reference()
            view._transposed = not self._transposed
            view._mask = self._mask.transpose() if self._mask is not None else None
            return view

        return self._record("transpose", (), execute)

    @property
    def T(self):
        return self.transpose()

    def join(self, other, joined_vertically: bool = True):
        """
        Concatenate with `other` into a composite `JMatrix` view.

        Parameters
        ----------
        other : Matrix
            Matrix appended below (vertical) or to the right (horizontal).
        joined_vertically : bool, optional
            Join along rows if True, along columns otherwise.

        Raises
        ------
        DimensionError
            If the non-joined axes differ.
        """
        aligned = (
            self.columns == other.columns if joined_vertically else self.rows == other.rows
        )
        if not aligned or self.depth != other.depth:
            raise DimensionError(
                "join",
                "joined matrices must agree on the non-joined axes",
                expected=self.shape,
                actual=other.shape,
            )
        from .._jmatrix import JMatrix

        def execute():
            return JMatrix((self, other), joined_vertically=joined_vertically, rng=self._rng)

        return self._record(
            "join", (other,), execute, joined_vertically=joined_vertically
        )

    def unjoin(
        self,
        start_row: int,
        start_column: int,
        rows: int,
        columns: int,
        start_depth: int = 0,
        depth: Optional[int] = None,
        out=None,
    ):
        """
        Copy the ``rows x columns x depth`` block at the given offset.

        Raises
        ------
        DimensionError
            If the block exceeds this matrix.
        """
        depth = self.depth - start_depth if depth is None else depth
        if not (
            0 <= start_row and 0 <= start_column and 0 <= start_depth
            and rows >= 1 and columns >= 1 and depth >= 1
            and start_row + rows <= self.rows
            and start_column + columns <= self.columns
            and start_depth + depth <= self.depth
        ):
            raise DimensionError(
                "unjoin",
                "block exceeds matrix",
                expected=self.shape,
                actual=(start_row, start_column, start_depth, rows, columns, depth),
            )
        result = self._prepare_out("unjoin", out, (rows, columns, depth))

        def execute():
            block = self.to_numpy()[
                start_row : start_row + rows,
                start_column : start_column + columns,
                start_depth : start_depth + depth,
            ]
            return self._write(result, block)

        return self._record(
            "unjoin",
            (),
            execute,
            out=out,
            unjoin_at_row=start_row,
            unjoin_at_column=start_column,
            unjoin_at_depth=start_depth,
        )

    def split(self, split_at: int, split_vertically: bool = True):
        """
        Split before row (vertical) or column (horizontal) `split_at`.

        Returns
        -------
        tuple[Matrix, Matrix]
            The two halves as new matrices.

        Raises
        ------
        TypeMismatchError
            If called on a composite (joined) matrix.
        DimensionError
            If `split_at` is not in ``[1, n - 1]``.
        """
        if self.sub_matrices:
            raise TypeMismatchError("split", "DMatrix or SMatrix", type(self).__name__)
        extent = self.rows if split_vertically else self.columns
        if not 1 <= split_at <= extent - 1:
            raise DimensionError(
                "split", "split position out of range", expected=(1, extent - 1), actual=split_at
            )

        def execute():
            first, second = split_cpu(self.to_numpy(), split_at, split_vertically)
            return (
                self._write(self.get_new_matrix(*first.shape), first),
                self._write(self.get_new_matrix(*second.shape), second),
            )

        return self._record(
            "split",
            (),
            execute,
            split_at=split_at,
            split_vertically=split_vertically,
        )

    def flatten(self, out=None):
        """Linearize into an ``(R*C*D) x 1 x 1`` column in storage order."""
        result = self._prepare_out("flatten", out, (self.size(), 1, 1))

        def execute():
            return self._write(result, flatten_cpu(self.to_numpy()))

        return self._record("flatten", (), execute, out=out)

    def unflatten(self, rows: int, columns: int, depth: int = 1, out=None):
        """
        Inverse of `flatten` for the target geometry.

        Raises
        ------
        DimensionError
            If ``rows * columns * depth`` differs from this matrix's size.
        """
        if rows * columns * depth != self.size():
            raise DimensionError(
                "unflatten",
                "target size differs from matrix size",
                expected=self.size(),
                actual=(rows, columns, depth),
            )
        result = self._prepare_out("unflatten", out, (rows, columns, depth))

        def execute():
            values = unflatten_cpu(flatten_cpu(self.to_numpy()), rows, columns, depth)
            return self._write(result, values)

        return self._record(
            "unflatten", (), execute, out=out, rows=rows, columns=columns, depth=depth
        )

"""
Xavier/Glorot initializers.

Implemented variants
--------------------
- ``normal_xavier`` / ``uniform_xavier``:
    Scale from the matrix geometry, ``fan = rows + columns``.
- ``normal_xavier_conv`` / ``uniform_xavier_conv``:
    Scale from the caller's convolution fans, ``fan = inputs + outputs``.

Normal variants draw ``gauss * sqrt(2 / fan)``; uniform variants draw
``(2u - 1) * sqrt(6 / fan)``.
"""

from ._base import MatrixInitializer, conv_fans, fill_normal, fill_uniform
from ...matrix._matrix import Matrix
from ....domain.utils._matrix_initialization import _xavier_scale


@MatrixInitializer.register_initializer("normal_xavier")
def normal_xavier(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    return fill_normal(matrix, _xavier_scale(matrix.rows, matrix.columns, uniform=False))


@MatrixInitializer.register_initializer("uniform_xavier")
def uniform_xavier(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    return fill_uniform(matrix, _xavier_scale(matrix.rows, matrix.columns, uniform=True))


@MatrixInitializer.register_initializer("normal_xavier_conv")
def normal_xavier_conv(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    """
    Xavier normal from convolution fans.

    Raises
    ------
    ParameterError
        If `inputs` or `outputs` is missing.
    """
    fan_in, fan_out = conv_fans(inputs, outputs)
    return fill_normal(matrix, _xavier_scale(fan_in, fan_out, uniform=False))


@MatrixInitializer.register_initializer("uniform_xavier_conv")
def uniform_xavier_conv(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    fan_in, fan_out = conv_fans(inputs, outputs)
    return fill_uniform(matrix, _xavier_scale(fan_in, fan_out, uniform=True))

"""
Operation mixins composed into the concrete matrix classes.

Each mixin groups one operator family and relies on the host class for
element access (`to_numpy`, `mask_array`), result allocation
(`_prepare_out`, `_write`, `get_new_matrix`) and recording (`_record`).

- ``MatrixMixinMasking``     mask get/set/stack surface
- ``MatrixMixinArithmetic``  binary arithmetic, dot product, operators
- ``MatrixMixinUnary``       unary functions and softmax
- ``MatrixMixinReduction``   masked reductions
- ``MatrixMixinStatistics``  dropout, clipping, rescaling, sampling
- ``MatrixMixinSpatial``     convolution family and pooling family
- ``MatrixMixinStructural``  transpose, join, unjoin, split, flatten
"""

from ._masking import MatrixMixinMasking
from ._arithmetic import MatrixMixinArithmetic
from ._unary import MatrixMixinUnary
from ._reduction import MatrixMixinReduction
from ._statistics import MatrixMixinStatistics
from ._spatial import MatrixMixinSpatial
from ._structural import MatrixMixinStructural

__all__ = [
    MatrixMixinMasking.__name__,
    MatrixMixinArithmetic.__name__,
    MatrixMixinUnary.__name__,
    MatrixMixinReduction.__name__,
    MatrixMixinStatistics.__name__,
    MatrixMixinSpatial.__name__,
    MatrixMixinStructural.__name__,
]

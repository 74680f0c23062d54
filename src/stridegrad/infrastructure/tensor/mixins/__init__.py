from ._activation import TensorMixinActivation
from ._arithmetic import TensorMixinArithmetic
from ._blas import TensorMixinBlas
from ._comparison import TensorMixinComparison
from ._reduction import TensorMixinReduction
from ._transform import TensorMixinTransform

__all__ = [
    TensorMixinActivation.__name__,
    TensorMixinArithmetic.__name__,
    TensorMixinBlas.__name__,
    TensorMixinComparison.__name__,
    TensorMixinReduction.__name__,
    TensorMixinTransform.__name__,
]

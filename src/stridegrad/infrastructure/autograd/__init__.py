from . import _functional as functional
from ._activation import (
    BinaryStepGrad,
    EluGrad,
    LeakyReluGrad,
    ParametricReluGrad,
    ReluGrad,
    SigmoidGrad,
    SoftmaxGrad,
    SwishGrad,
    TanhGrad,
)
from ._arithmetic import (
    AbsGrad,
    AddGrad,
    AddScalarGrad,
    DivGrad,
    DivScalarGrad,
    ExpGrad,
    LogGrad,
    MulGrad,
    MulScalarGrad,
    NegGrad,
    PowScalarGrad,
    RDivScalarGrad,
    RSubScalarGrad,
    SqrtGrad,
    SubGrad,
    SubScalarGrad,
)
from ._backward import run_backward, topological_order
from ._blas import MatMulGrad
from ._node import BinaryNode, Node, UnaryNode
from ._reduction import MeanGrad, ProductGrad, SumAxisGrad, SumGrad
from ._transform import BroadcastGrad, PermuteGrad, ReshapeGrad

__all__ = [
    "functional",
    run_backward.__name__,
    topological_order.__name__,
    Node.__name__,
    UnaryNode.__name__,
    BinaryNode.__name__,
    AddGrad.__name__,
    SubGrad.__name__,
    MulGrad.__name__,
    DivGrad.__name__,
    AddScalarGrad.__name__,
    SubScalarGrad.__name__,
    RSubScalarGrad.__name__,
    MulScalarGrad.__name__,
    DivScalarGrad.__name__,
    RDivScalarGrad.__name__,
    PowScalarGrad.__name__,
    NegGrad.__name__,
    AbsGrad.__name__,
    ExpGrad.__name__,
    LogGrad.__name__,
    SqrtGrad.__name__,
    SumGrad.__name__,
    MeanGrad.__name__,
    ProductGrad.__name__,
    SumAxisGrad.__name__,
    PermuteGrad.__name__,
    ReshapeGrad.__name__,
    BroadcastGrad.__name__,
    MatMulGrad.__name__,
    BinaryStepGrad.__name__,
    SigmoidGrad.__name__,
    TanhGrad.__name__,
    ReluGrad.__name__,
    LeakyReluGrad.__name__,
    ParametricReluGrad.__name__,
    EluGrad.__name__,
    SoftmaxGrad.__name__,
    SwishGrad.__name__,
]

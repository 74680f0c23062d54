"""
Explicit forward API that wires operations into the autograd graph.

Every function computes its result on the operands' storages and returns a
pair ``(out, node)``. When no operand requires gradients the output carries no
accumulator and ``node`` is ``None`` (inference fast path). Otherwise the
output gets a zero-initialised accumulator and a node capturing the operand
and output handles, and ``node`` is that node.

The Tensor operator methods are thin wrappers over these functions that drop
the node.
"""

from __future__ import annotations

import numbers
from typing import TYPE_CHECKING, Callable, Optional, Sequence, Tuple

from ...domain._function import GradientFunction
from ..storage._shape import normalize_axis
from . import _activation as act
from . import _arithmetic as arith
from . import _blas as blas
from . import _reduction as red
from . import _transform as tr

if TYPE_CHECKING:
    from ..storage._storage import Storage
    from ..tensor._tensor import Tensor

Result = Tuple["Tensor", Optional[GradientFunction]]


# ---------------------------------------------------------------------------
# Wiring helpers
# ---------------------------------------------------------------------------
def _check_tensor(x, op: str) -> None:
    if not hasattr(x, "storage") or not hasattr(x, "grad_storage"):
        raise TypeError(f"{op} expects a Tensor operand, got {type(x).__name__}")


def _check_scalar(c, op: str) -> float:
    if isinstance(c, bool) or not isinstance(c, numbers.Real):
        raise TypeError(f"{op} expects a real scalar, got {type(c).__name__}")
    return float(c)


def _finish(
    like: "Tensor",
    storage: "Storage",
    requires_grad: bool,
    make_node: Callable[["Tensor"], GradientFunction],
) -> Result:
    out = type(like)._from_storage(storage, requires_grad=requires_grad)
    if not requires_grad:
        return out, None
    node = make_node(out)
    out._set_grad_fn(node)
    return out, node


def _unary(a: "Tensor", op: str, storage_fn, node_cls, *node_args) -> Result:
    _check_tensor(a, op)
    storage = storage_fn(a.storage)
    return _finish(
        a, storage, a.requires_grad, lambda out: node_cls(a, *node_args, out)
    )


def _binary(a: "Tensor", b: "Tensor", op: str, node_cls) -> Result:
    _check_tensor(a, op)
    _check_tensor(b, op)
    storage = getattr(a.storage, op)(b.storage)
    return _finish(
        a,
        storage,
        a.requires_grad or b.requires_grad,
        lambda out: node_cls(a, b, out),
    )


def _scalar(a: "Tensor", c, op: str, node_cls) -> Result:
    _check_tensor(a, op)
    c = _check_scalar(c, op)
    storage = getattr(a.storage, op)(c)
    return _finish(a, storage, a.requires_grad, lambda out: node_cls(a, c, out))


def _constant(like: "Tensor", storage: "Storage") -> "Tensor":
    return type(like)._from_storage(storage, requires_grad=False)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------
def add(a: "Tensor", b: "Tensor") -> Result:
    """Broadcasting ``a + b``."""
    return _binary(a, b, "add", arith.AddGrad)


def sub(a: "Tensor", b: "Tensor") -> Result:
    return _binary(a, b, "sub", arith.SubGrad)


def mul(a: "Tensor", b: "Tensor") -> Result:
    return _binary(a, b, "mul", arith.MulGrad)


def div(a: "Tensor", b: "Tensor") -> Result:
    return _binary(a, b, "div", arith.DivGrad)


def add_scalar(a: "Tensor", c: float) -> Result:
    return _scalar(a, c, "add_scalar", arith.AddScalarGrad)


def sub_scalar(a: "Tensor", c: float) -> Result:
    return _scalar(a, c, "sub_scalar", arith.SubScalarGrad)


def rsub_scalar(a: "Tensor", c: float) -> Result:
    """``c - a``."""
    return _scalar(a, c, "rsub_scalar", arith.RSubScalarGrad)


def mul_scalar(a: "Tensor", c: float) -> Result:
    return _scalar(a, c, "mul_scalar", arith.MulScalarGrad)


def div_scalar(a: "Tensor", c: float) -> Result:
    return _scalar(a, c, "div_scalar", arith.DivScalarGrad)


def rdiv_scalar(a: "Tensor", c: float) -> Result:
    """``c / a``."""
    return _scalar(a, c, "rdiv_scalar", arith.RDivScalarGrad)


def pow_scalar(a: "Tensor", p: float) -> Result:
    return _scalar(a, p, "pow_scalar", arith.PowScalarGrad)


def neg(a: "Tensor") -> Result:
    return _unary(a, "neg", lambda s: s.neg(), arith.NegGrad)


def abs(a: "Tensor") -> Result:
    return _unary(a, "abs", lambda s: s.abs(), arith.AbsGrad)


def exp(a: "Tensor") -> Result:
    return _unary(a, "exp", lambda s: s.exp(), arith.ExpGrad)


def log(a: "Tensor") -> Result:
    return _unary(a, "log", lambda s: s.log(), arith.LogGrad)


def sqrt(a: "Tensor") -> Result:
    return _unary(a, "sqrt", lambda s: s.sqrt(), arith.SqrtGrad)


# ---------------------------------------------------------------------------
# Non-differentiable
# ---------------------------------------------------------------------------
def sign(a: "Tensor") -> Result:
    _check_tensor(a, "sign")
    return _constant(a, a.storage.sign()), None


def greater_than(a: "Tensor", b, make_binary: bool = True) -> Result:
    """
    Mask of ``a > b`` (``b`` a tensor or a scalar); never tracks gradients.
    """
    _check_tensor(a, "greater_than")
    if isinstance(b, numbers.Real) and not isinstance(b, bool):
        storage = a.storage.greater_than_scalar(float(b), make_binary)
    else:
        _check_tensor(b, "greater_than")
        storage = a.storage.greater_than(b.storage, make_binary)
    return _constant(a, storage), None


def less_than(a: "Tensor", b, make_binary: bool = True) -> Result:
    _check_tensor(a, "less_than")
    if isinstance(b, numbers.Real) and not isinstance(b, bool):
        storage = a.storage.less_than_scalar(float(b), make_binary)
    else:
        _check_tensor(b, "less_than")
        storage = a.storage.less_than(b.storage, make_binary)
    return _constant(a, storage), None


# ---------------------------------------------------------------------------
# Reductions
# ---------------------------------------------------------------------------
def sum(a: "Tensor") -> Result:
    return _unary(a, "sum", lambda s: s.sum(), red.SumGrad)


def mean(a: "Tensor") -> Result:
    return _unary(a, "mean", lambda s: s.mean(), red.MeanGrad)


def product(a: "Tensor") -> Result:
    return _unary(a, "product", lambda s: s.product(), red.ProductGrad)


def sum_axis(a: "Tensor", axis: int, keepdims: bool = True) -> Result:
    _check_tensor(a, "sum_axis")
    axis = normalize_axis(axis, len(a.shape))
    return _unary(
        a,
        "sum_axis",
        lambda s: s.sum_axis(axis, keepdims),
        red.SumAxisGrad,
        axis,
        keepdims,
    )


# ---------------------------------------------------------------------------
# Shape transforms
# ---------------------------------------------------------------------------
def permute(a: "Tensor", dims: Sequence[int]) -> Result:
    dims = tuple(dims)
    return _unary(a, "permute", lambda s: s.permute(dims), tr.PermuteGrad, dims)


def transpose(a: "Tensor") -> Result:
    return _unary(a, "transpose", lambda s: s.transpose(), tr.PermuteGrad, (1, 0))


def reshape(a: "Tensor", shape: Sequence[int]) -> Result:
    shape = tuple(shape)
    return _unary(a, "reshape", lambda s: s.reshape(shape), tr.ReshapeGrad)


def flatten(a: "Tensor") -> Result:
    return _unary(a, "flatten", lambda s: s.flatten(), tr.ReshapeGrad)


def squeeze(a: "Tensor") -> Result:
    return _unary(a, "squeeze", lambda s: s.squeeze(), tr.ReshapeGrad)


def unsqueeze(a: "Tensor", dim: int) -> Result:
    return _unary(a, "unsqueeze", lambda s: s.unsqueeze(dim), tr.ReshapeGrad)


def broadcast_to(a: "Tensor", shape: Sequence[int]) -> Result:
    shape = tuple(shape)
    return _unary(a, "broadcast_to", lambda s: s.broadcast(shape), tr.BroadcastGrad)


# ---------------------------------------------------------------------------
# BLAS
# ---------------------------------------------------------------------------
def matmul(
    a: "Tensor", b: "Tensor", trans_a: bool = False, trans_b: bool = False
) -> Result:
    """
    ``op(a) @ op(b)`` for rank-2 tensors, ``op`` transposing when the
    matching flag is set.
    """
    _check_tensor(a, "matmul")
    _check_tensor(b, "matmul")
    storage = a.storage.matmul(b.storage, trans_a, trans_b)
    return _finish(
        a,
        storage,
        a.requires_grad or b.requires_grad,
        lambda out: blas.MatMulGrad(a, b, trans_a, trans_b, out),
    )


# ---------------------------------------------------------------------------
# Activations
# ---------------------------------------------------------------------------
def binary_step(a: "Tensor") -> Result:
    return _unary(a, "binary_step", lambda s: s.binary_step(), act.BinaryStepGrad)


def sigmoid(a: "Tensor") -> Result:
    return _unary(a, "sigmoid", lambda s: s.sigmoid(), act.SigmoidGrad)


def tanh(a: "Tensor") -> Result:
    return _unary(a, "tanh", lambda s: s.tanh(), act.TanhGrad)


def relu(a: "Tensor") -> Result:
    return _unary(a, "relu", lambda s: s.relu(), act.ReluGrad)


def leaky_relu(a: "Tensor", slope: float = 0.1) -> Result:
    slope = _check_scalar(slope, "leaky_relu")
    return _unary(
        a, "leaky_relu", lambda s: s.leaky_relu(slope), act.LeakyReluGrad, slope
    )


def parametric_relu(a: "Tensor", coeff: float) -> Result:
    coeff = _check_scalar(coeff, "parametric_relu")
    return _unary(
        a,
        "parametric_relu",
        lambda s: s.parametric_relu(coeff),
        act.ParametricReluGrad,
        coeff,
    )


def elu(a: "Tensor", alpha: float = 1.0) -> Result:
    alpha = _check_scalar(alpha, "elu")
    return _unary(a, "elu", lambda s: s.elu(alpha), act.EluGrad, alpha)


def softmax(a: "Tensor", axis: int = -1) -> Result:
    _check_tensor(a, "softmax")
    axis = normalize_axis(axis, len(a.shape))
    return _unary(a, "softmax", lambda s: s.softmax(axis), act.SoftmaxGrad, axis)


def swish(a: "Tensor") -> Result:
    return _unary(a, "swish", lambda s: s.swish(), act.SwishGrad)

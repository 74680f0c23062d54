"""
Backward rules for reductions.

Full reductions produce a ``(1,)`` output, so their gradient is a single value
broadcast back over the operand.
"""

from __future__ import annotations

from ._node import UnaryNode


class SumGrad(UnaryNode):
    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out.broadcast(self.a.shape))


class MeanGrad(UnaryNode):
    def backward(self) -> None:
        n = max(self.a.storage.numel, 1)
        g = self.grad_out.div_scalar(float(n))
        self.accumulate(self.a, g.broadcast(self.a.shape))


class ProductGrad(UnaryNode):
    """
    ``d(prod a)/da_i = prod_{j != i} a_j``.

    The exclusive products are computed exactly, so zero factors yield the
    correct gradient instead of ``nan``.
    """

    def backward(self) -> None:
        local = self.a.storage.exclusive_product()
        self.accumulate(self.a, local.mul(self.grad_out))


class SumAxisGrad(UnaryNode):
    def __init__(self, a, axis: int, keepdims: bool, output) -> None:
        super().__init__(a, output)
        self.axis = axis
        self.keepdims = keepdims

    def backward(self) -> None:
        g = self.grad_out
        if not self.keepdims and g.ndim < self.a.ndim:
            g = g.unsqueeze(self.axis)
        self.accumulate(self.a, g.broadcast(self.a.shape))

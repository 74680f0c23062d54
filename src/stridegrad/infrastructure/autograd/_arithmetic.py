"""
Backward rules for elementwise arithmetic.

Notation: ``g`` is the output gradient, ``a``/``b`` the operands, ``c`` a
Python scalar captured at forward time. Every contribution is reduced to the
operand's shape before accumulation, so broadcast operands receive the sum
over the dimensions they were stretched along.
"""

from __future__ import annotations

from ._node import BinaryNode, UnaryNode


class AddGrad(BinaryNode):
    def backward(self) -> None:
        g = self.grad_out
        self.accumulate(self.a, g)
        self.accumulate(self.b, g)


class SubGrad(BinaryNode):
    def backward(self) -> None:
        g = self.grad_out
        self.accumulate(self.a, g)
        if self.wants(self.b):
            self.accumulate(self.b, g.neg())


class MulGrad(BinaryNode):
    """``d(a*b)/da = b``, ``d(a*b)/db = a``."""

    def backward(self) -> None:
        g = self.grad_out
        if self.wants(self.a):
            self.accumulate(self.a, g.mul(self.b.storage))
        if self.wants(self.b):
            self.accumulate(self.b, g.mul(self.a.storage))


class DivGrad(BinaryNode):
    """``d(a/b)/da = 1/b``, ``d(a/b)/db = -a/b^2``."""

    def backward(self) -> None:
        g = self.grad_out
        a, b = self.a.storage, self.b.storage
        if self.wants(self.a):
            self.accumulate(self.a, g.div(b))
        if self.wants(self.b):
            self.accumulate(self.b, g.mul(a).div(b.mul(b)).neg())


class _ScalarNode(UnaryNode):
    def __init__(self, a, c: float, output) -> None:
        super().__init__(a, output)
        self.c = float(c)


class AddScalarGrad(_ScalarNode):
    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out)


class SubScalarGrad(_ScalarNode):
    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out)


class RSubScalarGrad(_ScalarNode):
    """``c - a``."""

    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out.neg())


class MulScalarGrad(_ScalarNode):
    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out.mul_scalar(self.c))


class DivScalarGrad(_ScalarNode):
    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out.div_scalar(self.c))


class RDivScalarGrad(_ScalarNode):
    """``c / a``: ``-c / a^2``."""

    def backward(self) -> None:
        a = self.a.storage
        local = a.mul(a).rdiv_scalar(self.c).neg()
        self.accumulate(self.a, self.grad_out.mul(local))


class PowScalarGrad(_ScalarNode):
    """``a ** p``: ``p * a ** (p - 1)``; ``c`` holds the exponent ``p``."""

    def backward(self) -> None:
        local = self.a.storage.pow_scalar(self.c - 1.0).mul_scalar(self.c)
        self.accumulate(self.a, self.grad_out.mul(local))


class NegGrad(UnaryNode):
    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out.neg())


class AbsGrad(UnaryNode):
    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out.mul(self.a.storage.sign()))


class ExpGrad(UnaryNode):
    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out.mul(self.output.storage))


class LogGrad(UnaryNode):
    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out.div(self.a.storage))


class SqrtGrad(UnaryNode):
    """``1 / (2 * sqrt(a))``, reusing the forward output."""

    def backward(self) -> None:
        denom = self.output.storage.mul_scalar(2.0)
        self.accumulate(self.a, self.grad_out.div(denom))

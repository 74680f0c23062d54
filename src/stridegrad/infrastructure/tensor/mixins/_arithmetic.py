"""
Arithmetic mixin defining elementwise Tensor operators.

This module declares :class:`TensorMixinArithmetic`, which maps Python's
arithmetic operators and a few named unary methods onto the explicit
functional API. Tensor/tensor operators broadcast; a Python ``int`` or
``float`` on either side selects the scalar variant of the operation, so no
scalar is ever lifted into a full tensor.

Operators return ``NotImplemented`` for unsupported operand types so Python
raises the usual ``TypeError``.
"""

from __future__ import annotations

import numbers
from typing import Union

from ...autograd import _functional as F

Number = Union[int, float]


def _is_number(x) -> bool:
    return isinstance(x, numbers.Real) and not isinstance(x, bool)


def _is_tensor(x) -> bool:
    return hasattr(x, "storage") and hasattr(x, "grad_storage")


class TensorMixinArithmetic:
    """
    Elementwise arithmetic operators for tensors.

    Notes
    -----
    Backward rules live on the corresponding gradient-function nodes; each
    operator here records one node when any operand requires gradients.
    """

    def __add__(self, other: Union["TensorMixinArithmetic", Number]):
        if _is_number(other):
            return F.add_scalar(self, other)[0]
        if _is_tensor(other):
            return F.add(self, other)[0]
        return NotImplemented

    def __radd__(self, other: Number):
        if _is_number(other):
            return F.add_scalar(self, other)[0]
        return NotImplemented

    def __sub__(self, other: Union["TensorMixinArithmetic", Number]):
        if _is_number(other):
            return F.sub_scalar(self, other)[0]
        if _is_tensor(other):
            return F.sub(self, other)[0]
        return NotImplemented

    def __rsub__(self, other: Number):
        """``scalar - tensor``."""
        if _is_number(other):
            return F.rsub_scalar(self, other)[0]
        return NotImplemented

    def __mul__(self, other: Union["TensorMixinArithmetic", Number]):
        if _is_number(other):
            return F.mul_scalar(self, other)[0]
        if _is_tensor(other):
            return F.mul(self, other)[0]
        return NotImplemented

    def __rmul__(self, other: Number):
        if _is_number(other):
            return F.mul_scalar(self, other)[0]
        return NotImplemented

    def __truediv__(self, other: Union["TensorMixinArithmetic", Number]):
        """
        Elementwise true division.

        Division by zero yields ``inf``/``nan`` without raising.
        """
        if _is_number(other):
            return F.div_scalar(self, other)[0]
        if _is_tensor(other):
            return F.div(self, other)[0]
        return NotImplemented

    def __rtruediv__(self, other: Number):
        if _is_number(other):
            return F.rdiv_scalar(self, other)[0]
        return NotImplemented

    def __pow__(self, exponent: Number):
        """Raise every element to a scalar power."""
        if _is_number(exponent):
            return F.pow_scalar(self, exponent)[0]
        return NotImplemented

    def __neg__(self):
        return F.neg(self)[0]

    def __abs__(self):
        return F.abs(self)[0]

    def abs(self):
        return F.abs(self)[0]

    def exp(self):
        return F.exp(self)[0]

    def log(self):
        """Natural logarithm; non-positive inputs give ``nan``/``-inf``."""
        return F.log(self)[0]

    def sqrt(self):
        return F.sqrt(self)[0]

    def sign(self):
        """Elementwise sign (-1, 0 or 1); not differentiable."""
        return F.sign(self)[0]

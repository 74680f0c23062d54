"""
Elementwise arithmetic and comparison kernels for the CPU backend.

Binary tensor/tensor operations broadcast both operands to their common shape
first (zero-copy views) and then run one strided elementwise kernel. Scalar
variants take a Python number as the second operand. Division by zero and the
logarithm of non-positive values produce ``inf``/``nan`` silently.
"""

from __future__ import annotations

import numpy as np


class CpuArithmeticMixin:
    """Arithmetic kernels; mixed into `CpuStorage`."""

    def _broadcast_binary(self, other, f):
        a, b = self.broadcast_tensors(self, other)
        return a.elementwise_op(b, f)

    # ----------------------------
    # tensor / tensor
    # ----------------------------
    def add(self, other):
        return self._broadcast_binary(other, np.add)

    def sub(self, other):
        return self._broadcast_binary(other, np.subtract)

    def mul(self, other):
        return self._broadcast_binary(other, np.multiply)

    def div(self, other):
        return self._broadcast_binary(other, np.divide)

    # ----------------------------
    # tensor / scalar
    # ----------------------------
    def add_scalar(self, scalar: float):
        return self.scalar_op(scalar, np.add)

    def sub_scalar(self, scalar: float):
        return self.scalar_op(scalar, np.subtract)

    def rsub_scalar(self, scalar: float):
        """``scalar - self``."""
        return self.scalar_op(scalar, lambda x, c: c - x)

    def mul_scalar(self, scalar: float):
        return self.scalar_op(scalar, np.multiply)

    def div_scalar(self, scalar: float):
        return self.scalar_op(scalar, np.divide)

    def rdiv_scalar(self, scalar: float):
        """``scalar / self``."""
        return self.scalar_op(scalar, lambda x, c: c / x)

    def pow_scalar(self, exponent: float):
        return self.scalar_op(exponent, np.power)

    # ----------------------------
    # unary
    # ----------------------------
    def neg(self):
        return self.apply(np.negative)

    def abs(self):
        return self.apply(np.abs)

    def sign(self):
        return self.apply(np.sign)

    def exp(self):
        return self.apply(np.exp)

    def log(self):
        return self.apply(np.log)

    def sqrt(self):
        return self.apply(np.sqrt)

    # ----------------------------
    # comparisons
    # ----------------------------
    @staticmethod
    def _mask(cond: np.ndarray, make_binary: bool) -> np.ndarray:
        return np.where(cond, 1.0, 0.0 if make_binary else -1.0)

    def greater_than(self, other, make_binary: bool = True):
        """
        ``1`` where ``self > other``, else ``0`` (or ``-1`` when
        `make_binary` is False).
        """
        return self._broadcast_binary(
            other, lambda x, y: self._mask(x > y, make_binary)
        )

    def less_than(self, other, make_binary: bool = True):
        return self._broadcast_binary(
            other, lambda x, y: self._mask(x < y, make_binary)
        )

    def greater_than_scalar(self, scalar: float, make_binary: bool = True):
        return self.scalar_op(scalar, lambda x, c: self._mask(x > c, make_binary))

    def less_than_scalar(self, scalar: float, make_binary: bool = True):
        return self.scalar_op(scalar, lambda x, c: self._mask(x < c, make_binary))

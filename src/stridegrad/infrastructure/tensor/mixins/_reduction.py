"""
Reduction mixin for tensors.

Full reductions return a tensor of shape ``(1,)`` which can seed
`backward()` directly.
"""

from __future__ import annotations

from ...autograd import _functional as F


class TensorMixinReduction:
    def sum(self):
        """Sum of all elements, shape ``(1,)``."""
        return F.sum(self)[0]

    def mean(self):
        return F.mean(self)[0]

    def product(self):
        """
        Product of all elements, shape ``(1,)``.

        The gradient with respect to each element is the product of all the
        others, computed exactly even when some factors are zero.
        """
        return F.product(self)[0]

    def sum_axis(self, axis: int, keepdims: bool = True):
        return F.sum_axis(self, axis, keepdims)[0]

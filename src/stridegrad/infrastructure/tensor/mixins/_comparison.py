"""
Comparison mixin for tensors.

Comparisons produce ``float32`` masks and never participate in autograd.
"""

from __future__ import annotations

from ...autograd import _functional as F


class TensorMixinComparison:
    def greater_than(self, other, make_binary: bool = True):
        """
        Mask with ``1`` where ``self > other``.

        Parameters
        ----------
        other : Tensor or Number
            Right-hand operand; tensors broadcast.
        make_binary : bool
            When False, non-matching positions hold ``-1`` instead of ``0``.
        """
        return F.greater_than(self, other, make_binary)[0]

    def less_than(self, other, make_binary: bool = True):
        return F.less_than(self, other, make_binary)[0]

    def __gt__(self, other):
        return F.greater_than(self, other)[0]

    def __lt__(self, other):
        return F.less_than(self, other)[0]

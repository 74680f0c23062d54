from __future__ import annotations

from ...autograd import _functional as F


class TensorMixinBlas:
    def matmul(self, other, trans_a: bool = False, trans_b: bool = False):
        """
        Matrix product of two rank-2 tensors.

        Parameters
        ----------
        other : Tensor
            Right operand.
        trans_a, trans_b : bool
            Transpose ``self`` / `other` before multiplying, without copying.
        """
        return F.matmul(self, other, trans_a, trans_b)[0]

    def __matmul__(self, other):
        if not (hasattr(other, "storage") and hasattr(other, "grad_storage")):
            return NotImplemented
        return F.matmul(self, other)[0]

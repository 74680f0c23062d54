"""
Shape-transform mixin for tensors.

Results share the source buffer (except `reshape` of a non-contiguous
tensor), so writes through one handle are visible through the other.
"""

from __future__ import annotations

from typing import Sequence

from ...autograd import _functional as F


class TensorMixinTransform:
    def permute(self, *dims):
        """
        Reorder dimensions.

        Accepts either ``t.permute(1, 0, 2)`` or ``t.permute((1, 0, 2))``.
        """
        if len(dims) == 1 and isinstance(dims[0], (tuple, list)):
            dims = tuple(dims[0])
        return F.permute(self, dims)[0]

    def transpose(self):
        """Swap the axes of a rank-2 tensor."""
        return F.transpose(self)[0]

    @property
    def T(self):
        return self.transpose()

    def reshape(self, shape: Sequence[int]):
        return F.reshape(self, shape)[0]

    def view(self, shape: Sequence[int]):
        return F.reshape(self, shape)[0]

    def flatten(self):
        return F.flatten(self)[0]

    def squeeze(self):
        return F.squeeze(self)[0]

    def unsqueeze(self, dim: int):
        return F.unsqueeze(self, dim)[0]

    def broadcast_to(self, shape: Sequence[int]):
        """
        Zero-copy broadcast view; the gradient sums over stretched dims.
        """
        return F.broadcast_to(self, shape)[0]

"""
Backward rules for shape transforms.

Transforms only move elements around, so the gradient is the upstream
gradient moved back: permuted by the inverse permutation, reshaped to the
operand's shape, or summed over broadcast dimensions.
"""

from __future__ import annotations

from typing import Sequence

from ..storage._shape import inverse_permutation
from ._node import UnaryNode


class PermuteGrad(UnaryNode):
    def __init__(self, a, dims: Sequence[int], output) -> None:
        super().__init__(a, output)
        self.dims = tuple(dims)

    def backward(self) -> None:
        g = self.grad_out.permute(inverse_permutation(self.dims))
        self.accumulate(self.a, g)


class ReshapeGrad(UnaryNode):
    """Shared by reshape, flatten, squeeze and unsqueeze."""

    def backward(self) -> None:
        self.accumulate(self.a, self.grad_out.reshape(self.a.shape))


class BroadcastGrad(UnaryNode):
    def backward(self) -> None:
        # accumulate() sums the stretched dimensions away
        self.accumulate(self.a, self.grad_out)

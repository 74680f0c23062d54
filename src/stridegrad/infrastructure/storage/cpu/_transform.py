"""
Shape-transform kernels for the CPU backend.

Every transform here only rewrites (shape, stride, offset) metadata and
returns a view sharing the source buffer. The one exception is `reshape` on a
non-contiguous source, which first materialises a row-major copy.
"""

from __future__ import annotations

from typing import Sequence

from ....domain._errors import RankMismatchError, ShapeMismatchError
from .._shape import compute_strides, normalize_shape, numel, validate_permutation
from ..._logging import get_logger

logger = get_logger(__name__)


class CpuTransformMixin:
    """Shape-transform kernels; mixed into `CpuStorage`."""

    def reshape(self, shape: Sequence[int]):
        """
        View the data with a new shape of equal element count.

        Raises
        ------
        ShapeMismatchError
            If the element counts differ.
        """
        shape = normalize_shape(shape)
        if numel(shape) != self.numel:
            raise ShapeMismatchError(
                f"cannot reshape {self.shape} ({self.numel} elements) "
                f"to {shape} ({numel(shape)} elements)"
            )
        src = self
        if not src.is_contiguous():
            logger.debug("reshape: materialising non-contiguous %s", self.shape)
            src = src.make_contiguous()
        return src._view(shape, compute_strides(shape))

    def view(self, shape: Sequence[int]):
        return self.reshape(shape)

    def permute(self, dims: Sequence[int]):
        dims = validate_permutation(dims, self.ndim)
        return self._view(
            tuple(self.shape[d] for d in dims),
            tuple(self.stride[d] for d in dims),
        )

    def transpose(self):
        """Swap the two axes of a matrix."""
        if self.ndim != 2:
            raise RankMismatchError(
                f"transpose expects a rank-2 storage, got rank {self.ndim}"
            )
        return self.permute((1, 0))

    def flatten(self):
        return self.reshape((self.numel,))

    def squeeze(self):
        """Drop every size-1 dimension; an all-ones shape becomes ``(1,)``."""
        kept = [(d, s) for d, s in zip(self.shape, self.stride) if d != 1]
        if not kept:
            return self._view((1,), (1,))
        return self._view(tuple(d for d, _ in kept), tuple(s for _, s in kept))

    def unsqueeze(self, dim: int):
        """
        Insert a size-1 dimension at position `dim` (``0 <= dim <= ndim``).
        """
        if not 0 <= dim <= self.ndim:
            raise RankMismatchError(
                f"unsqueeze dim {dim} out of range for rank {self.ndim}"
            )
        shape = list(self.shape)
        stride = list(self.stride)
        inner = stride[dim] * shape[dim] if dim < self.ndim else 1
        shape.insert(dim, 1)
        stride.insert(dim, inner)
        return self._view(tuple(shape), tuple(stride))

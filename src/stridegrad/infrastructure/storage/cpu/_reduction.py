"""
Reduction kernels for the CPU backend.

Full reductions (`sum`, `mean`, `product`) return a storage of shape ``(1,)``.
Axis reductions keep the reduced dimension by default so their results
broadcast back against the input.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ....domain._errors import RankMismatchError
from .._shape import normalize_axis, normalize_shape, sum_to_shape_axes


class CpuReductionMixin:
    """Reduction kernels; mixed into `CpuStorage`."""

    def _scalar_result(self, value):
        return self._from_array(np.asarray([value], dtype=np.float32))

    def sum(self):
        return self._scalar_result(np.sum(self.as_strided_array()))

    def mean(self):
        """
        Arithmetic mean of all elements.

        An empty storage yields ``nan``.
        """
        with np.errstate(all="ignore"):
            return self._scalar_result(np.mean(self.as_strided_array()))

    def product(self):
        return self._scalar_result(np.prod(self.as_strided_array()))

    def exclusive_product(self):
        """
        For every element, the product of all *other* elements.

        Computed from exclusive prefix and suffix products, so zeros are
        handled exactly (no division by the element itself).
        """
        flat = self.to_numpy().reshape(-1)
        prefix = np.ones_like(flat)
        suffix = np.ones_like(flat)
        if flat.size > 1:
            prefix[1:] = np.cumprod(flat[:-1])
            suffix[:-1] = np.cumprod(flat[::-1][:-1])[::-1]
        return self._from_array((prefix * suffix).reshape(self.shape))

    def _axis_result(self, out: np.ndarray):
        # dropping the only axis of a vector leaves one element
        if np.ndim(out) == 0:
            out = np.asarray(out).reshape(1)
        return self._from_array(out)

    def sum_axis(self, axis: int, keepdims: bool = True):
        axis = normalize_axis(axis, self.ndim)
        return self._axis_result(
            np.sum(self.as_strided_array(), axis=axis, keepdims=keepdims)
        )

    def max_axis(self, axis: int, keepdims: bool = True):
        axis = normalize_axis(axis, self.ndim)
        return self._axis_result(
            np.max(self.as_strided_array(), axis=axis, keepdims=keepdims)
        )

    def sum_dim(self, mask: Sequence[bool]):
        """
        Sum over every dimension flagged ``True`` in `mask`.

        Collapsed dimensions are removed; collapsing all of them yields
        shape ``(1,)``.

        Raises
        ------
        RankMismatchError
            If ``len(mask) != ndim``.
        """
        mask = tuple(bool(m) for m in mask)
        if len(mask) != self.ndim:
            raise RankMismatchError(
                f"sum_dim mask has {len(mask)} entries, storage has rank {self.ndim}"
            )
        axes = tuple(i for i, m in enumerate(mask) if m)
        return self._axis_result(np.sum(self.as_strided_array(), axis=axes))

    def sum_to_shape(self, target_shape: Sequence[int]):
        """
        Reduce a broadcast result back to `target_shape`.

        Leading axes added by left-padding are summed away, then every axis
        where the target has size 1 and this storage does not is summed with
        the dimension kept.

        Raises
        ------
        ShapeMismatchError
            If `target_shape` could not have been broadcast to ``self.shape``.
        """
        target = normalize_shape(target_shape)
        if target == self.shape:
            return self
        axes, _ = sum_to_shape_axes(self.shape, target)
        arr = self.as_strided_array()
        if axes:
            arr = np.sum(arr, axis=axes, keepdims=True)
        return self._from_array(arr.reshape(target))

"""
Core of the CPU strided storage backend.

`CpuStorageBase` owns the metadata of one N-dimensional view (shape, stride,
offset) over a shared, flat ``float32`` NumPy buffer. Several storages may
reference the same buffer object: broadcast, permute, transpose and reshape
produce such views, and in-place operations write through them so every alias
observes the change.

Kernels never loop in Python. A strided view is realised as a NumPy array with
`numpy.lib.stride_tricks.as_strided` (byte strides = element strides times the
item size) and the elementwise/reduction work is delegated to NumPy ufuncs,
which walk both operands' strides natively. Freshly computed results are
always contiguous row-major storages that own a new buffer.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import numpy as np
from numpy.lib.stride_tricks import as_strided

from ....domain._errors import (
    IndexOutOfBoundsError,
    RankMismatchError,
    ShapeMismatchError,
)
from .._shape import (
    broadcast_shape,
    broadcast_strides,
    compute_strides,
    normalize_shape,
    numel,
)
from ..._logging import get_logger

logger = get_logger(__name__)

DTYPE = np.float32
_ITEMSIZE = np.dtype(DTYPE).itemsize

BinaryKernel = Callable[[np.ndarray, np.ndarray], np.ndarray]
ScalarKernel = Callable[[np.ndarray, float], np.ndarray]
UnaryKernel = Callable[[np.ndarray], np.ndarray]


class CpuStorageBase:
    """
    Strided view over a shared 1-D ``float32`` buffer.

    Parameters
    ----------
    buffer : np.ndarray
        Flat ``float32`` array holding the elements. It is referenced, never
        copied.
    shape : Sequence[int]
        Logical dimension sizes.
    stride : Optional[Sequence[int]]
        Per-dimension element steps. Defaults to the row-major strides of
        `shape`.
    offset : int
        Element offset of the first logical element.

    Notes
    -----
    Use the class-method factories (`zeros`, `from_numpy`, ...) to allocate;
    the constructor exists for building views.
    """

    def __init__(
        self,
        buffer: np.ndarray,
        shape: Sequence[int],
        stride: Optional[Sequence[int]] = None,
        offset: int = 0,
    ) -> None:
        if buffer.ndim != 1 or buffer.dtype != DTYPE:
            raise TypeError(
                f"storage buffer must be a 1-D float32 array, got "
                f"ndim={buffer.ndim} dtype={buffer.dtype}"
            )
        self._buffer = buffer
        self._shape = normalize_shape(shape)
        self._stride = (
            compute_strides(self._shape)
            if stride is None
            else tuple(int(s) for s in stride)
        )
        if len(self._stride) != len(self._shape):
            raise RankMismatchError(
                f"stride {self._stride} does not match rank of shape {self._shape}"
            )
        self._offset = int(offset)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    @classmethod
    def _from_array(cls, arr: np.ndarray):
        """Wrap a freshly computed array as a new contiguous storage."""
        arr = np.ascontiguousarray(arr, dtype=DTYPE)
        return cls(arr.reshape(-1), arr.shape)

    @classmethod
    def zeros(cls, shape: Sequence[int]):
        shape = normalize_shape(shape)
        return cls(np.zeros(numel(shape), dtype=DTYPE), shape)

    @classmethod
    def ones(cls, shape: Sequence[int]):
        shape = normalize_shape(shape)
        return cls(np.ones(numel(shape), dtype=DTYPE), shape)

    @classmethod
    def full(cls, shape: Sequence[int], value: float):
        shape = normalize_shape(shape)
        return cls(np.full(numel(shape), value, dtype=DTYPE), shape)

    @classmethod
    def from_numpy(cls, array) -> "CpuStorageBase":
        """
        Copy any numeric array-like into a new contiguous ``float32`` storage.

        A 0-d input becomes shape ``(1,)``.
        """
        arr = np.array(array, dtype=DTYPE, order="C", copy=True)
        if arr.ndim == 0:
            arr = arr.reshape(1)
        return cls(arr.reshape(-1), arr.shape)

    @classmethod
    def uniform(
        cls,
        shape: Sequence[int],
        low: float = 0.0,
        high: float = 1.0,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Sample i.i.d. values from ``U[low, high)``.

        Parameters
        ----------
        rng : Optional[np.random.Generator]
            Generator to draw from; a fresh unseeded one when omitted.
        """
        shape = normalize_shape(shape)
        rng = rng if rng is not None else np.random.default_rng()
        data = rng.uniform(low, high, size=numel(shape)).astype(DTYPE)
        return cls(data, shape)

    @classmethod
    def from_buffer(
        cls,
        buffer: np.ndarray,
        shape: Sequence[int],
        stride: Optional[Sequence[int]] = None,
        offset: int = 0,
    ):
        """Build a view that aliases `buffer`."""
        return cls(buffer, shape, stride, offset)

    def _view(self, shape, stride, offset=None):
        return type(self)(
            self._buffer, shape, stride, self._offset if offset is None else offset
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def stride(self) -> tuple[int, ...]:
        return self._stride

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def buffer(self) -> np.ndarray:
        """The shared flat buffer (not a copy)."""
        return self._buffer

    @property
    def numel(self) -> int:
        return numel(self._shape)

    @property
    def ndim(self) -> int:
        return len(self._shape)

    def is_contiguous(self) -> bool:
        """
        Whether the view is row-major dense.

        Size-1 dimensions are ignored since their stride is never used.
        """
        if self.numel == 0:
            return True
        expected = compute_strides(self._shape)
        return all(
            d == 1 or s == e
            for d, s, e in zip(self._shape, self._stride, expected)
        )

    def shares_buffer_with(self, other: "CpuStorageBase") -> bool:
        return self._buffer is other._buffer

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------
    def _flat_index(self, indices: Sequence[int]) -> int:
        indices = tuple(indices)
        if len(indices) != self.ndim:
            raise RankMismatchError(
                f"index {indices} has {len(indices)} dims, storage has {self.ndim}"
            )
        flat = self._offset
        for axis, (i, d, s) in enumerate(zip(indices, self._shape, self._stride)):
            i = int(i)
            if i < 0 or i >= d:
                raise IndexOutOfBoundsError(
                    f"index {i} out of bounds for axis {axis} with size {d}"
                )
            flat += i * s
        return flat

    def get(self, indices: Sequence[int]) -> float:
        return float(self._buffer[self._flat_index(indices)])

    def set(self, indices: Sequence[int], value: float) -> None:
        self._buffer[self._flat_index(indices)] = value

    # ------------------------------------------------------------------
    # NumPy views
    # ------------------------------------------------------------------
    def as_strided_array(self, writeable: bool = False) -> np.ndarray:
        """
        Return a NumPy view of the logical data over the shared buffer.

        Contiguous storages get a plain slice+reshape; everything else goes
        through `as_strided`. The view is read-only unless `writeable`.
        """
        if self.is_contiguous():
            n = self.numel
            arr = self._buffer[self._offset : self._offset + n].reshape(self._shape)
            if not writeable:
                arr = arr.view()
                arr.flags.writeable = False
            return arr
        byte_strides = tuple(s * _ITEMSIZE for s in self._stride)
        return as_strided(
            self._buffer[self._offset :],
            shape=self._shape,
            strides=byte_strides,
            writeable=writeable,
        )

    def to_numpy(self) -> np.ndarray:
        """Contiguous host copy in logical order."""
        return np.array(self.as_strided_array(), dtype=DTYPE, order="C", copy=True)

    def make_contiguous(self):
        """Row-major copy of the logical data into a new buffer."""
        return self._from_array(self.as_strided_array())

    # ------------------------------------------------------------------
    # Kernel drivers
    # ------------------------------------------------------------------
    def elementwise_op(self, other: "CpuStorageBase", f: BinaryKernel):
        """
        Apply a binary kernel to two storages of identical shape.

        Raises
        ------
        ShapeMismatchError
            If the shapes differ; broadcasting must happen beforehand.
        """
        if self._shape != other._shape:
            raise ShapeMismatchError(
                f"elementwise_op requires equal shapes, got {self._shape} "
                f"and {other._shape}"
            )
        with np.errstate(all="ignore"):
            out = f(self.as_strided_array(), other.as_strided_array())
        return self._from_array(out)

    def scalar_op(self, scalar: float, f: ScalarKernel):
        with np.errstate(all="ignore"):
            out = f(self.as_strided_array(), DTYPE(scalar))
        return self._from_array(out)

    def apply(self, f: UnaryKernel):
        with np.errstate(all="ignore"):
            out = f(self.as_strided_array())
        return self._from_array(out)

    # ------------------------------------------------------------------
    # Broadcasting
    # ------------------------------------------------------------------
    def broadcast(self, target_shape: Sequence[int]):
        """
        Zero-copy view of this storage stretched to `target_shape`.

        Raises
        ------
        ShapeMismatchError
            If the shape is not broadcast-compatible with the target.
        """
        target = normalize_shape(target_shape)
        if target == self._shape:
            return self
        stride = broadcast_strides(self._shape, self._stride, target)
        return self._view(target, stride)

    @staticmethod
    def broadcast_tensors(a: "CpuStorageBase", b: "CpuStorageBase"):
        """Broadcast two storages to their common shape (views)."""
        target = broadcast_shape(a.shape, b.shape)
        return a.broadcast(target), b.broadcast(target)

    # ------------------------------------------------------------------
    # In-place updates
    # ------------------------------------------------------------------
    def _inplace(self, other: "CpuStorageBase", ufunc) -> None:
        src = other.broadcast(self._shape).as_strided_array()
        dst = self.as_strided_array(writeable=True)
        with np.errstate(all="ignore"):
            ufunc(dst, src, out=dst)

    def _inplace_scalar(self, scalar: float, ufunc) -> None:
        dst = self.as_strided_array(writeable=True)
        with np.errstate(all="ignore"):
            ufunc(dst, DTYPE(scalar), out=dst)

    def add_assign(self, other: "CpuStorageBase") -> None:
        """
        ``self += other`` through the view.

        `other` is broadcast to ``self.shape``; `self` never changes shape.
        """
        self._inplace(other, np.add)

    def sub_assign(self, other: "CpuStorageBase") -> None:
        self._inplace(other, np.subtract)

    def mul_assign(self, other: "CpuStorageBase") -> None:
        self._inplace(other, np.multiply)

    def div_assign(self, other: "CpuStorageBase") -> None:
        self._inplace(other, np.divide)

    def add_scalar_assign(self, scalar: float) -> None:
        self._inplace_scalar(scalar, np.add)

    def sub_scalar_assign(self, scalar: float) -> None:
        self._inplace_scalar(scalar, np.subtract)

    def mul_scalar_assign(self, scalar: float) -> None:
        self._inplace_scalar(scalar, np.multiply)

    def div_scalar_assign(self, scalar: float) -> None:
        self._inplace_scalar(scalar, np.divide)

    def fill(self, value: float) -> None:
        self.as_strided_array(writeable=True)[...] = value

    def copy_(self, other: "CpuStorageBase") -> None:
        """Overwrite the logical contents with `other` (broadcast to self)."""
        src = other.broadcast(self._shape).as_strided_array()
        # copy first, src may alias dst
        self.as_strided_array(writeable=True)[...] = np.array(src, copy=True)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(shape={self._shape}, stride={self._stride}, "
            f"offset={self._offset})"
        )

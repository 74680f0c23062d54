"""
Concrete Tensor implementation.

A `Tensor` is a cheap handle: it references a device-tagged `Storage` and a
small shared state record holding the gradient accumulator and the node that
produced it. Cloning a tensor creates another handle on the same record, so
clones share data, gradient and graph position and compare equal under
`same_as`.

Design notes
------------
- The gradient accumulator is allocated eagerly (zero-filled) whenever
  `requires_grad` is enabled, so nodes can always add into it in place.
- Operations are implemented by the functional layer
  (`stridegrad.infrastructure.autograd._functional`); the mixins only provide
  operator and method sugar.
- Factories default to the device configured through
  ``STRIDEGRAD_DEFAULT_DEVICE``.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

from ...domain._tensor import ITensor
from ...domain._function import GradientFunction
from ...domain.device._device import Device
from ..autograd._backward import run_backward
from ..storage._storage import DeviceArg, Storage
from .mixins import (
    TensorMixinActivation,
    TensorMixinArithmetic,
    TensorMixinBlas,
    TensorMixinComparison,
    TensorMixinReduction,
    TensorMixinTransform,
)

Number = Union[int, float]


class _TensorState:
    """State shared by every clone of a tensor handle."""

    __slots__ = ("grad", "grad_fn", "released")

    def __init__(self) -> None:
        self.grad: Optional[Storage] = None
        self.grad_fn: Optional[GradientFunction] = None
        self.released = False


class Tensor(
    TensorMixinArithmetic,
    TensorMixinComparison,
    TensorMixinReduction,
    TensorMixinTransform,
    TensorMixinBlas,
    TensorMixinActivation,
    ITensor,
):
    """
    Strided ``float32`` tensor with reverse-mode autograd.

    Parameters
    ----------
    shape : Sequence[int]
        Tensor shape; the tensor is zero-initialised.
    device : Optional[Union[Device, str]]
        Device placement. Defaults to the configured default device.
    requires_grad : bool, optional
        Whether to attach a gradient accumulator. Defaults to False.

    Raises
    ------
    DeviceNotSupportedError
        If the device has no registered storage backend.
    """

    def __init__(
        self,
        shape: Sequence[int],
        device: DeviceArg = None,
        *,
        requires_grad: bool = False,
    ) -> None:
        self._storage = Storage.zeros(shape, device)
        self._state = _TensorState()
        self.requires_grad = requires_grad

    @classmethod
    def _from_storage(cls, storage: Storage, *, requires_grad: bool = False) -> "Tensor":
        """Wrap an existing storage in a fresh handle (no data copy)."""
        out = cls.__new__(cls)
        out._storage = storage
        out._state = _TensorState()
        out.requires_grad = requires_grad
        return out

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def zeros(
        cls, shape: Sequence[int], *, device: DeviceArg = None, requires_grad: bool = False
    ) -> "Tensor":
        return cls._from_storage(Storage.zeros(shape, device), requires_grad=requires_grad)

    @classmethod
    def ones(
        cls, shape: Sequence[int], *, device: DeviceArg = None, requires_grad: bool = False
    ) -> "Tensor":
        return cls._from_storage(Storage.ones(shape, device), requires_grad=requires_grad)

    @classmethod
    def full(
        cls,
        shape: Sequence[int],
        value: float,
        *,
        device: DeviceArg = None,
        requires_grad: bool = False,
    ) -> "Tensor":
        return cls._from_storage(
            Storage.full(shape, value, device), requires_grad=requires_grad
        )

    @classmethod
    def uniform(
        cls,
        shape: Sequence[int],
        low: float = 0.0,
        high: float = 1.0,
        *,
        device: DeviceArg = None,
        requires_grad: bool = False,
        rng: Optional[np.random.Generator] = None,
    ) -> "Tensor":
        """
        Sample i.i.d. values from ``U[low, high)``.

        Uses the shared generator (seeded by ``STRIDEGRAD_SEED`` or
        `set_seed`) unless `rng` is given.
        """
        return cls._from_storage(
            Storage.uniform(shape, low, high, device, rng), requires_grad=requires_grad
        )

    @classmethod
    def from_numpy(
        cls, array, *, device: DeviceArg = None, requires_grad: bool = False
    ) -> "Tensor":
        """
        Copy a NumPy array (or nested sequence) into a new tensor.

        The data is cast to ``float32``; a 0-d input becomes shape ``(1,)``.
        """
        return cls._from_storage(
            Storage.from_numpy(array, device), requires_grad=requires_grad
        )

    @classmethod
    def scalar(
        cls, value: Number, *, device: DeviceArg = None, requires_grad: bool = False
    ) -> "Tensor":
        """Single-element tensor of shape ``(1,)``."""
        return cls.full((1,), value, device=device, requires_grad=requires_grad)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the tensor shape.

        Returns
        -------
        tuple[int, ...]
            The tensor's shape.
        """
        return self._storage.shape

    @property
    def stride(self) -> tuple[int, ...]:
        return self._storage.stride

    @property
    def device(self) -> Device:
        """
        Return the device on which this tensor resides.

        Returns
        -------
        Device
            The tensor's device placement descriptor.
        """
        return self._storage.device

    @property
    def ndim(self) -> int:
        return self._storage.ndim

    def numel(self) -> int:
        """
        Return the number of elements in the tensor.

        Returns
        -------
        int
            Product of the shape dimensions.
        """
        return self._storage.numel

    def is_contiguous(self) -> bool:
        return self._storage.is_contiguous()

    # ------------------------------------------------------------------
    # Autograd state
    # ------------------------------------------------------------------
    @property
    def requires_grad(self) -> bool:
        """
        Indicate whether this tensor accumulates gradients.

        Returns
        -------
        bool
            True if a gradient accumulator is attached, False otherwise.
        """
        return self._state.grad is not None

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None:
        """
        Enable or disable gradient accumulation.

        Enabling allocates a zero accumulator of the tensor's shape on its
        device (if none exists); disabling drops it.
        """
        if value and self._state.grad is None:
            self._state.grad = Storage.zeros(self.shape, self.device)
        elif not value:
            self._state.grad = None

    @property
    def grad(self) -> Optional["Tensor"]:
        """
        Return the accumulated gradient as a tensor, or None.

        Returns
        -------
        Optional[Tensor]
            A node-free tensor viewing the accumulator buffer; writes through
            it modify the accumulator.
        """
        if self._state.grad is None:
            return None
        return Tensor._from_storage(self._state.grad)

    @property
    def grad_storage(self) -> Optional[Storage]:
        return self._state.grad

    @property
    def grad_fn(self) -> Optional[GradientFunction]:
        return self._state.grad_fn

    @property
    def is_leaf(self) -> bool:
        return self._state.grad_fn is None

    @property
    def graph_released(self) -> bool:
        """Whether a backward pass already consumed this tensor's node."""
        return self._state.released

    def _set_grad_fn(self, node: Optional[GradientFunction]) -> None:
        """
        Attach the node that produced this tensor.

        Notes
        -----
        Internal hook for the functional layer.
        """
        self._state.grad_fn = node
        self._state.released = False

    def _release_graph(self) -> None:
        """Internal hook for the backward driver."""
        self._state.grad_fn = None
        self._state.released = True

    def zero_grad(self) -> None:
        """
        Reset the accumulated gradient to zeros in place.

        Notes
        -----
        Gradients accumulate across backward passes; call this between
        passes to start from zero.
        """
        if self._state.grad is not None:
            self._state.grad.fill(0.0)

    def backward(self) -> None:
        """
        Backpropagate from this tensor.

        Raises
        ------
        AutogradContractError
            If the tensor is not of shape ``(1,)`` or does not require
            gradients.
        """
        run_backward(self)

    # ------------------------------------------------------------------
    # Handles
    # ------------------------------------------------------------------
    def clone(self) -> "Tensor":
        """
        Return another handle on the same tensor.

        No data is copied: the clone shares the storage, the accumulator and
        the graph node, and `same_as` holds between the two.
        """
        out = Tensor.__new__(type(self))
        out._storage = self._storage
        out._state = self._state
        return out

    def same_as(self, other: "Tensor") -> bool:
        return isinstance(other, Tensor) and self._state is other._state

    def detach(self) -> "Tensor":
        """New handle on the same data with no gradient and no history."""
        return type(self)._from_storage(self._storage)

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Convert the tensor to a NumPy array.

        Returns
        -------
        np.ndarray
            A contiguous ``float32`` copy of the logical data.
        """
        return self._storage.to_numpy()

    def item(self) -> float:
        """
        Return the value of a single-element tensor as a Python float.

        Raises
        ------
        ValueError
            If the tensor has more than one element.
        """
        if self.numel() != 1:
            raise ValueError(
                f"item() requires a single-element tensor, got shape {self.shape}"
            )
        return float(self.to_numpy().reshape(-1)[0])

    def get(self, indices: Sequence[int]) -> float:
        return self._storage.get(indices)

    def set(self, indices: Sequence[int], value: float) -> None:
        """Write one element in place (visible through every alias)."""
        self._storage.set(indices, value)

    def fill(self, value: float) -> None:
        self._storage.fill(value)

    def __repr__(self) -> str:
        """
        Return a human-readable string representation of the tensor.

        Returns
        -------
        str
            The tensor's shape, device and autograd status.
        """
        extra = ""
        if self.grad_fn is not None:
            extra = f", grad_fn={self.grad_fn.name}"
        elif self.requires_grad:
            extra = ", requires_grad=True"
        return f"Tensor(shape={self.shape}, device={self.device}{extra})"

    def __str__(self) -> str:
        return np.array2string(
            self.to_numpy(), precision=4, separator=", ", suppress_small=True
        )

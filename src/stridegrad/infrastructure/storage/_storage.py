"""
Device-dispatching storage wrapper.

`Storage` is the tagged handle the tensor layer works with. It pairs one
backend storage instance with the `Device` it lives on and forwards every
operation to that backend, re-wrapping backend results so callers never see a
raw backend object.

Backends are looked up in a closed registry keyed by `DeviceType`. Only the
CPU backend is registered; asking for any other device raises
`DeviceNotSupportedError`. Binary operations require both operands to be on
the same device and raise `DeviceMismatchError` otherwise; data is never
copied between devices implicitly.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

import numpy as np

from ...domain._errors import DeviceMismatchError, DeviceNotSupportedError
from ...domain.device._device import Device, DeviceType
from .._config import default_device, default_rng
from .cpu import CpuStorage
from .._logging import get_logger

logger = get_logger(__name__)

DeviceArg = Optional[Union[Device, str]]

_BACKENDS: dict[DeviceType, type] = {DeviceType.CPU: CpuStorage}


def register_backend(device_type: DeviceType, backend_cls: type) -> None:
    """
    Register (or replace) the storage backend class for a device type.

    Parameters
    ----------
    device_type : DeviceType
        The device category served by the backend.
    backend_cls : type
        A class exposing the same creation factories and kernel methods as
        `CpuStorage`.
    """
    logger.debug("registering %s backend: %s", device_type.value, backend_cls.__name__)
    _BACKENDS[device_type] = backend_cls


def unregister_backend(device_type: DeviceType) -> None:
    _BACKENDS.pop(device_type, None)


def _resolve_device(device: DeviceArg) -> Device:
    if device is None:
        return default_device()
    if isinstance(device, Device):
        return device
    return Device(device)


def _backend_for(device: Device, op: str) -> type:
    try:
        return _BACKENDS[device.type]
    except KeyError:
        raise DeviceNotSupportedError(op, str(device)) from None


class Storage:
    """
    Device-tagged wrapper around a backend storage.

    Parameters
    ----------
    backend : Any
        Backend storage instance (e.g., `CpuStorage`).
    device : Device
        Device the backend lives on.
    """

    __slots__ = ("_backend", "_device")

    def __init__(self, backend: Any, device: Device) -> None:
        self._backend = backend
        self._device = device

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    @classmethod
    def _create(cls, op: str, device: DeviceArg, *args, **kwargs) -> "Storage":
        dev = _resolve_device(device)
        backend_cls = _backend_for(dev, op)
        return cls(getattr(backend_cls, op)(*args, **kwargs), dev)

    @classmethod
    def zeros(cls, shape: Sequence[int], device: DeviceArg = None) -> "Storage":
        return cls._create("zeros", device, shape)

    @classmethod
    def ones(cls, shape: Sequence[int], device: DeviceArg = None) -> "Storage":
        return cls._create("ones", device, shape)

    @classmethod
    def full(
        cls, shape: Sequence[int], value: float, device: DeviceArg = None
    ) -> "Storage":
        return cls._create("full", device, shape, value)

    @classmethod
    def from_numpy(cls, array, device: DeviceArg = None) -> "Storage":
        return cls._create("from_numpy", device, array)

    @classmethod
    def uniform(
        cls,
        shape: Sequence[int],
        low: float = 0.0,
        high: float = 1.0,
        device: DeviceArg = None,
        rng: Optional[np.random.Generator] = None,
    ) -> "Storage":
        """
        Sample ``U[low, high)``; uses the configured shared generator unless
        `rng` is given.
        """
        rng = rng if rng is not None else default_rng()
        return cls._create("uniform", device, shape, low, high, rng)

    # ------------------------------------------------------------------
    # Dispatch helpers
    # ------------------------------------------------------------------
    def _check_device(self, other: "Storage") -> None:
        if other._device != self._device:
            raise DeviceMismatchError(str(self._device), str(other._device))

    def _wrap(self, result):
        return Storage(result, self._device)

    def _unary(self, op: str, *args, **kwargs) -> "Storage":
        return self._wrap(getattr(self._backend, op)(*args, **kwargs))

    def _binary(self, op: str, other: "Storage", *args, **kwargs) -> "Storage":
        if not isinstance(other, Storage):
            raise TypeError(f"{op} expects a Storage operand, got {type(other).__name__}")
        self._check_device(other)
        return self._wrap(getattr(self._backend, op)(other._backend, *args, **kwargs))

    def _inplace(self, op: str, other: "Storage") -> None:
        self._check_device(other)
        getattr(self._backend, op)(other._backend)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def backend(self) -> Any:
        return self._backend

    @property
    def device(self) -> Device:
        return self._device

    @property
    def shape(self) -> tuple[int, ...]:
        return self._backend.shape

    @property
    def stride(self) -> tuple[int, ...]:
        return self._backend.stride

    @property
    def offset(self) -> int:
        return self._backend.offset

    @property
    def numel(self) -> int:
        return self._backend.numel

    @property
    def ndim(self) -> int:
        return self._backend.ndim

    def is_contiguous(self) -> bool:
        return self._backend.is_contiguous()

    def shares_buffer_with(self, other: "Storage") -> bool:
        return (
            self._device == other._device
            and self._backend.shares_buffer_with(other._backend)
        )

    def get(self, indices: Sequence[int]) -> float:
        return self._backend.get(indices)

    def set(self, indices: Sequence[int], value: float) -> None:
        self._backend.set(indices, value)

    def to_numpy(self) -> np.ndarray:
        return self._backend.to_numpy()

    def as_strided_array(self) -> np.ndarray:
        return self._backend.as_strided_array()

    def make_contiguous(self) -> "Storage":
        return self._unary("make_contiguous")

    # ------------------------------------------------------------------
    # In-place
    # ------------------------------------------------------------------
    def add_assign(self, other: "Storage") -> None:
        self._inplace("add_assign", other)

    def sub_assign(self, other: "Storage") -> None:
        self._inplace("sub_assign", other)

    def mul_assign(self, other: "Storage") -> None:
        self._inplace("mul_assign", other)

    def div_assign(self, other: "Storage") -> None:
        self._inplace("div_assign", other)

    def add_scalar_assign(self, scalar: float) -> None:
        self._backend.add_scalar_assign(scalar)

    def sub_scalar_assign(self, scalar: float) -> None:
        self._backend.sub_scalar_assign(scalar)

    def mul_scalar_assign(self, scalar: float) -> None:
        self._backend.mul_scalar_assign(scalar)

    def div_scalar_assign(self, scalar: float) -> None:
        self._backend.div_scalar_assign(scalar)

    def fill(self, value: float) -> None:
        self._backend.fill(value)

    def copy_(self, other: "Storage") -> None:
        self._inplace("copy_", other)

    # ------------------------------------------------------------------
    # Broadcasting
    # ------------------------------------------------------------------
    def broadcast(self, target_shape: Sequence[int]) -> "Storage":
        return self._unary("broadcast", target_shape)

    @staticmethod
    def broadcast_tensors(a: "Storage", b: "Storage") -> tuple["Storage", "Storage"]:
        a._check_device(b)
        ra, rb = a._backend.broadcast_tensors(a._backend, b._backend)
        return a._wrap(ra), b._wrap(rb)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------
    def add(self, other: "Storage") -> "Storage":
        return self._binary("add", other)

    def sub(self, other: "Storage") -> "Storage":
        return self._binary("sub", other)

    def mul(self, other: "Storage") -> "Storage":
        return self._binary("mul", other)

    def div(self, other: "Storage") -> "Storage":
        return self._binary("div", other)

    def add_scalar(self, scalar: float) -> "Storage":
        return self._unary("add_scalar", scalar)

    def sub_scalar(self, scalar: float) -> "Storage":
        return self._unary("sub_scalar", scalar)

    def rsub_scalar(self, scalar: float) -> "Storage":
        return self._unary("rsub_scalar", scalar)

    def mul_scalar(self, scalar: float) -> "Storage":
        return self._unary("mul_scalar", scalar)

    def div_scalar(self, scalar: float) -> "Storage":
        return self._unary("div_scalar", scalar)

    def rdiv_scalar(self, scalar: float) -> "Storage":
        return self._unary("rdiv_scalar", scalar)

    def pow_scalar(self, exponent: float) -> "Storage":
        return self._unary("pow_scalar", exponent)

    def neg(self) -> "Storage":
        return self._unary("neg")

    def abs(self) -> "Storage":
        return self._unary("abs")

    def sign(self) -> "Storage":
        return self._unary("sign")

    def exp(self) -> "Storage":
        return self._unary("exp")

    def log(self) -> "Storage":
        return self._unary("log")

    def sqrt(self) -> "Storage":
        return self._unary("sqrt")

    def greater_than(self, other: "Storage", make_binary: bool = True) -> "Storage":
        return self._binary("greater_than", other, make_binary)

    def less_than(self, other: "Storage", make_binary: bool = True) -> "Storage":
        return self._binary("less_than", other, make_binary)

    def greater_than_scalar(self, scalar: float, make_binary: bool = True) -> "Storage":
        return self._unary("greater_than_scalar", scalar, make_binary)

    def less_than_scalar(self, scalar: float, make_binary: bool = True) -> "Storage":
        return self._unary("less_than_scalar", scalar, make_binary)

    # ------------------------------------------------------------------
    # Reductions
    # ------------------------------------------------------------------
    def sum(self) -> "Storage":
        return self._unary("sum")

    def mean(self) -> "Storage":
        return self._unary("mean")

    def product(self) -> "Storage":
        return self._unary("product")

    def exclusive_product(self) -> "Storage":
        return self._unary("exclusive_product")

    def sum_axis(self, axis: int, keepdims: bool = True) -> "Storage":
        return self._unary("sum_axis", axis, keepdims)

    def max_axis(self, axis: int, keepdims: bool = True) -> "Storage":
        return self._unary("max_axis", axis, keepdims)

    def sum_dim(self, mask: Sequence[bool]) -> "Storage":
        return self._unary("sum_dim", mask)

    def sum_to_shape(self, target_shape: Sequence[int]) -> "Storage":
        return self._unary("sum_to_shape", target_shape)

    # ------------------------------------------------------------------
    # BLAS
    # ------------------------------------------------------------------
    def matmul(
        self, other: "Storage", trans_a: bool = False, trans_b: bool = False
    ) -> "Storage":
        return self._binary("matmul", other, trans_a, trans_b)

    # ------------------------------------------------------------------
    # Shape transforms
    # ------------------------------------------------------------------
    def reshape(self, shape: Sequence[int]) -> "Storage":
        return self._unary("reshape", shape)

    def view(self, shape: Sequence[int]) -> "Storage":
        return self._unary("view", shape)

    def permute(self, dims: Sequence[int]) -> "Storage":
        return self._unary("permute", dims)

    def transpose(self) -> "Storage":
        return self._unary("transpose")

    def flatten(self) -> "Storage":
        return self._unary("flatten")

    def squeeze(self) -> "Storage":
        return self._unary("squeeze")

    def unsqueeze(self, dim: int) -> "Storage":
        return self._unary("unsqueeze", dim)

    # ------------------------------------------------------------------
    # Activations
    # ------------------------------------------------------------------
    def binary_step(self) -> "Storage":
        return self._unary("binary_step")

    def sigmoid(self) -> "Storage":
        return self._unary("sigmoid")

    def tanh(self) -> "Storage":
        return self._unary("tanh")

    def relu(self) -> "Storage":
        return self._unary("relu")

    def leaky_relu(self, slope: float = 0.1) -> "Storage":
        return self._unary("leaky_relu", slope)

    def parametric_relu(self, a: float) -> "Storage":
        return self._unary("parametric_relu", a)

    def elu(self, alpha: float = 1.0) -> "Storage":
        return self._unary("elu", alpha)

    def softmax(self, axis: int = -1) -> "Storage":
        return self._unary("softmax", axis)

    def swish(self) -> "Storage":
        return self._unary("swish")

    def __repr__(self) -> str:
        return f"Storage(device={self._device}, backend={self._backend!r})"

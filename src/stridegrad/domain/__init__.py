"""
Backend-agnostic contracts: devices, storage/tensor protocols, the autograd
node base class and the exception taxonomy.
"""

from ._errors import (
    AutogradContractError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    IndexOutOfBoundsError,
    RankMismatchError,
    ShapeMismatchError,
)
from ._function import GradientFunction
from ._storage import IStorage
from ._tensor import ITensor
from .device import Device, DeviceLike, DeviceType

__all__ = [
    AutogradContractError.__name__,
    DeviceMismatchError.__name__,
    DeviceNotSupportedError.__name__,
    IndexOutOfBoundsError.__name__,
    RankMismatchError.__name__,
    ShapeMismatchError.__name__,
    GradientFunction.__name__,
    IStorage.__name__,
    ITensor.__name__,
    Device.__name__,
    DeviceLike.__name__,
    DeviceType.__name__,
]

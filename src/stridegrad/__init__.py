"""
stridegrad: strided float32 tensors with broadcasting and reverse-mode
autograd.
"""

from .domain import (
    AutogradContractError,
    Device,
    DeviceMismatchError,
    DeviceNotSupportedError,
    DeviceType,
    GradientFunction,
    IndexOutOfBoundsError,
    RankMismatchError,
    ShapeMismatchError,
)
from .infrastructure._config import set_seed
from .infrastructure._logging import get_logger
from .infrastructure.autograd import functional
from .infrastructure.scalar import ScalarGraph, Value
from .infrastructure.storage import Storage, register_backend
from .infrastructure.tensor import Tensor

__version__ = "0.1.0a0"

__all__ = [
    Tensor.__name__,
    Storage.__name__,
    Device.__name__,
    DeviceType.__name__,
    GradientFunction.__name__,
    ScalarGraph.__name__,
    Value.__name__,
    "functional",
    register_backend.__name__,
    set_seed.__name__,
    get_logger.__name__,
    AutogradContractError.__name__,
    DeviceMismatchError.__name__,
    DeviceNotSupportedError.__name__,
    IndexOutOfBoundsError.__name__,
    RankMismatchError.__name__,
    ShapeMismatchError.__name__,
]

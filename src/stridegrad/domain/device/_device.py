"""
Device abstraction utilities.

This module defines lightweight abstractions for representing computation
devices in a framework-agnostic way. It provides:

- `DeviceType`: an enumeration of device categories
- `Device`: a concrete device descriptor that validates and normalizes
  user-facing device strings such as "cpu" or "cuda:0"

Only the CPU has a storage backend. The CUDA descriptor exists so that the
dispatch layer can name the device it refuses; it does not allocate anything.
"""

from enum import Enum
import re


class DeviceType(Enum):
    """
    Enumeration of device categories.

    Attributes
    ----------
    CPU : DeviceType
        Central Processing Unit.
    CUDA : DeviceType
        NVIDIA CUDA-enabled Graphics Processing Unit (descriptor only).
    """

    CPU = "cpu"
    CUDA = "cuda"


class Device:
    """
    Concrete computation device descriptor.

    Parameters
    ----------
    device : str
        Device identifier string. Must be either:
        - "cpu"
        - "cuda:<index>", where <index> is a non-negative integer

    Raises
    ------
    ValueError
        If the provided device string does not match the supported formats.

    Notes
    -----
    `__slots__` is used to prevent dynamic attribute creation; instances are
    hashable and compare by (type, index), so they can key backend registries.
    """

    __slots__ = ("type", "index")

    _CUDA_PATTERN = re.compile(r"^cuda:(\d+)$")

    def __init__(self, device: str):
        if device == "cpu":
            self.type = DeviceType.CPU
            self.index = None
        else:
            m = self._CUDA_PATTERN.match(device)
            if not m:
                raise ValueError(
                    f"Invalid device '{device}'. Expected 'cpu' or 'cuda:<index>'"
                )
            self.type = DeviceType.CUDA
            self.index = int(m.group(1))

    def __str__(self) -> str:
        return "cpu" if self.type is DeviceType.CPU else f"cuda:{self.index}"

    def __repr__(self) -> str:
        return f"Device('{self}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Device):
            return NotImplemented
        return (self.type, self.index) == (other.type, other.index)

    def __hash__(self) -> int:
        return hash((self.type, self.index))

    def is_cpu(self) -> bool:
        """
        Check whether this device represents a CPU.

        Returns
        -------
        bool
            True if the device type is CPU, False otherwise.
        """
        return self.type is DeviceType.CPU

    def is_cuda(self) -> bool:
        """
        Check whether this device represents a CUDA GPU.

        Returns
        -------
        bool
            True if the device type is CUDA, False otherwise.
        """
        return self.type is DeviceType.CUDA

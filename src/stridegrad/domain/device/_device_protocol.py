"""
Device abstraction contracts.

Defines a duck-typed `DeviceLike` protocol describing a computation device
descriptor without coupling to the concrete `Device` class. Storage and tensor
protocols type their `device` members against it.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class DeviceLike(Protocol):
    """
    Duck-typed device contract.

    Any object that provides these members can be used as a device descriptor
    within the framework, regardless of its concrete class identity.
    """

    type: object
    index: Optional[int]

    def is_cpu(self) -> bool: ...
    def is_cuda(self) -> bool: ...
    def __str__(self) -> str: ...

"""
Exception taxonomy for stridegrad.

This module defines the runtime errors raised by the storage engine, the
device dispatch layer and the autograd graph. Every error is raised at the
point of detection and is expected to unwind the whole computation; the
library never catches its own errors to retry or recover.

Categories
----------
- Device errors: an operation was requested on a backend that is not
  implemented, or operands live on different devices.
- Shape errors: incompatible broadcast, wrong matmul dimensions, invalid
  permutations, mismatched element counts, wrong rank, out-of-bounds index.
- Autograd contract errors: `backward()` invoked on a non-scalar tensor or on
  a tensor that does not track gradients.
"""


class DeviceNotSupportedError(RuntimeError):
    """
    Raised when an operation is requested on a device backend that is not
    implemented.

    Attributes
    ----------
    op : str
        The name of the operation that was attempted (e.g., "zeros", "add").
    device : str
        String representation of the device on which the operation
        was attempted.
    """

    def __init__(self, op: str, device: str) -> None:
        super().__init__(f"{op} is not implemented for device '{device}'.")
        self.op = op
        self.device = device


class DeviceMismatchError(RuntimeError):
    """
    Raised when an operation is attempted between storages on different devices.

    Cross-device expressions are rejected rather than resolved by an implicit
    copy.
    """

    def __init__(self, device_a: str, device_b: str) -> None:
        super().__init__(f"Device mismatch: '{device_a}' vs '{device_b}'.")
        self.device_a = device_a
        self.device_b = device_b


class ShapeMismatchError(ValueError):
    """
    Raised when operand shapes are incompatible for the requested operation.

    Examples include non-broadcastable shapes, a matmul whose contracted
    dimensions differ, a reshape that changes the element count, or an
    invalid permutation.
    """


class RankMismatchError(ValueError):
    """
    Raised when an operand has the wrong number of dimensions
    (e.g., matmul or transpose on a non-matrix, an index tuple whose length
    differs from the rank).
    """


class IndexOutOfBoundsError(IndexError):
    """Raised when an element index exceeds the size of its dimension."""


class AutogradContractError(RuntimeError):
    """
    Raised when the autograd contract is violated.

    `backward()` is only defined for single-element tensors of shape ``(1,)``
    that require gradients and therefore own a gradient accumulator.
    """

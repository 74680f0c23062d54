"""
Tensor interface definitions.

This module defines the domain-level interface for tensor-like objects using
structural typing. The interface captures the backend-agnostic members that
gradient-function nodes, the backward driver and external consumers (e.g., a
module/parameter layer) rely on.

Notes
-----
- The protocol includes autograd-facing hooks (`backward`, `grad`,
  `requires_grad`, `grad_fn`) because nodes and the driver operate on them.
- Tensors are cheap handles: cloning shares the buffer, the gradient
  accumulator and the graph node. `same_as` compares handle identity.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Union, runtime_checkable

from .device._device_protocol import DeviceLike

Number = Union[int, float]


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` pairs a strided storage with an optional gradient
    accumulator and an optional reference to the graph node that produced it.
    """

    # ---------------------------------------------------------------------
    # Core identity / placement
    # ---------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.

        Returns
        -------
        tuple[int, ...]
            The tensor's shape.
        """
        ...

    @property
    def device(self) -> DeviceLike:
        """
        Return the device on which this tensor resides.

        Returns
        -------
        DeviceLike
            The tensor's device placement descriptor.
        """
        ...

    @property
    def storage(self) -> Any:
        """Return the storage (dispatch wrapper) holding the tensor data."""
        ...

    # ---------------------------------------------------------------------
    # Autograd flags and gradient storage
    # ---------------------------------------------------------------------
    @property
    def requires_grad(self) -> bool:
        """
        Indicate whether this tensor accumulates gradients.

        Returns
        -------
        bool
            True if a gradient accumulator is attached, False otherwise.
        """
        ...

    @property
    def grad(self) -> Optional["ITensor"]:
        """
        Return a view of the gradient accumulator, or None.

        Returns
        -------
        Optional[ITensor]
            A node-free tensor sharing the accumulator buffer.
        """
        ...

    @property
    def grad_storage(self) -> Any:
        """Return the shared accumulator storage itself, or None."""
        ...

    @property
    def grad_fn(self) -> Any:
        """Return the node that produced this tensor, or None for leaves."""
        ...

    def backward(self) -> None:
        """
        Run reverse-mode differentiation from this single-element tensor.

        Raises
        ------
        AutogradContractError
            If the tensor is not of shape ``(1,)`` or does not require grad.
        """
        ...

    def zero_grad(self) -> None:
        """Reset the gradient accumulator to zeros in place."""
        ...

    # ---------------------------------------------------------------------
    # Handles
    # ---------------------------------------------------------------------
    def clone(self) -> "ITensor":
        """Return a new handle sharing data, accumulator and node."""
        ...

    def same_as(self, other: "ITensor") -> bool:
        """Whether both handles refer to the same logical tensor."""
        ...

    def to_numpy(self) -> Any:
        """
        Convert the tensor to a host NumPy array (contiguous copy).

        Returns
        -------
        Any
            Backend-native array (``np.ndarray``).
        """
        ...

"""
Storage interface definitions.

This module defines the domain-level contract for strided storage backends
using structural typing. A storage is one N-dimensional view over a shared,
flat buffer of 32-bit floats: a shape, a per-dimension stride (in elements,
``0`` for broadcast dimensions) and an offset into the buffer.

Notes
-----
The protocol captures the metadata and element-access surface shared by every
backend. Kernel operations (arithmetic, reductions, matmul, activations) are
forwarded by name through the dispatch layer and are documented on the
concrete CPU backend.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable


@runtime_checkable
class IStorage(Protocol):
    """
    Strided storage interface.

    Implementations must keep the invariant that a freshly allocated storage
    owns exactly ``prod(shape)`` elements, while views (broadcast, permute,
    transpose) may alias another storage's buffer with non-standard strides.
    """

    @property
    def shape(self) -> tuple[int, ...]:
        """Logical dimension sizes."""
        ...

    @property
    def stride(self) -> tuple[int, ...]:
        """Per-dimension step counts in elements; ``0`` marks a broadcast dim."""
        ...

    @property
    def offset(self) -> int:
        """Element offset of the first logical element inside the buffer."""
        ...

    @property
    def numel(self) -> int:
        """Number of logical elements."""
        ...

    def get(self, indices: Sequence[int]) -> float:
        """Read one element by multi-dimensional index."""
        ...

    def set(self, indices: Sequence[int], value: float) -> None:
        """Write one element by multi-dimensional index (visible to aliases)."""
        ...

    def is_contiguous(self) -> bool:
        """Whether the strides equal the row-major strides of the shape."""
        ...

    def to_numpy(self) -> Any:
        """Return a contiguous host copy of the logical data."""
        ...

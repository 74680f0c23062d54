"""
Gradient-function node interface.

This module defines the abstract base class for the nodes of the autograd
graph. Each differentiable operation has one concrete `GradientFunction`
subclass; an instance is created by the forward path whenever at least one
operand requires gradients, and it captures handles to every operand and to
the output tensor it produced.

The node set is open-ended, so nodes are dispatched polymorphically: the
backward driver only relies on `backward()` and `prev()`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ._tensor import ITensor


class GradientFunction(ABC):
    """
    Abstract base class for autograd graph nodes.

    A node represents one executed operation. Its outgoing edges are the
    operand tensors returned by `prev()`; the single incoming edge is the
    output tensor's reference to the node.

    Notes
    -----
    - `backward()` has no inputs or outputs: it reads the output tensor's
      accumulated gradient and adds contributions into the gradient
      accumulators of its operands.
    - An operand that does not own a gradient accumulator (it does not
      require gradients) is skipped, which prunes frozen subtrees.
    - `backward()` must be called at most once per backward pass; the driver
      guarantees this by deduplicating nodes by identity.
    """

    @property
    def name(self) -> str:
        """Human-readable node name, used in logs and reprs."""
        return type(self).__name__

    @abstractmethod
    def backward(self) -> None:
        """
        Propagate the output gradient into the operands' accumulators.
        """
        ...

    @abstractmethod
    def prev(self) -> Sequence["ITensor"]:
        """
        Return the operand tensors of this node (the graph edges).

        Returns
        -------
        Sequence[ITensor]
            Operands in forward-argument order.
        """
        ...

    def __repr__(self) -> str:
        return f"<{self.name}>"

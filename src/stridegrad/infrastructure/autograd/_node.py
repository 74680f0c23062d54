"""
Shared base for concrete autograd nodes.

`Node` stores the operand tensors and the output tensor of one executed
operation and provides the accumulation helper every backward rule uses:
the local gradient (shaped like the output) is reduced to the operand's
shape with `sum_to_shape` and added into the operand's accumulator in place.
Operands without an accumulator are skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ...domain._function import GradientFunction

if TYPE_CHECKING:
    from ..storage._storage import Storage
    from ..tensor._tensor import Tensor


class Node(GradientFunction):
    """
    Base class for nodes that capture operands and their output.

    Parameters
    ----------
    *operands : Tensor
        Operand handles in forward-argument order.
    output : Tensor
        The tensor this node produced.
    """

    def __init__(self, *operands: "Tensor", output: "Tensor") -> None:
        self.operands = tuple(operands)
        self.output = output

    def prev(self) -> Sequence["Tensor"]:
        return self.operands

    @property
    def grad_out(self) -> "Storage":
        """The output's accumulated gradient."""
        return self.output.grad_storage

    @staticmethod
    def wants(operand: "Tensor") -> bool:
        return operand.grad_storage is not None

    @staticmethod
    def accumulate(operand: "Tensor", grad: "Storage") -> None:
        """
        Add `grad` into `operand`'s accumulator after undoing broadcasting.
        """
        acc = operand.grad_storage
        if acc is None:
            return
        acc.add_assign(grad.sum_to_shape(operand.shape))


class UnaryNode(Node):
    """Node with a single operand, available as ``self.a``."""

    def __init__(self, a: "Tensor", output: "Tensor") -> None:
        super().__init__(a, output=output)

    @property
    def a(self) -> "Tensor":
        return self.operands[0]


class BinaryNode(Node):
    """Node with two operands, available as ``self.a`` and ``self.b``."""

    def __init__(self, a: "Tensor", b: "Tensor", output: "Tensor") -> None:
        super().__init__(a, b, output=output)

    @property
    def a(self) -> "Tensor":
        return self.operands[0]

    @property
    def b(self) -> "Tensor":
        return self.operands[1]

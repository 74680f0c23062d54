"""
Reverse-mode driver.

The driver seeds the root's gradient accumulator with ``1.0``, orders every
node reachable from the root so that a node runs only after all nodes that
consume its output, and invokes each node's `backward()` exactly once.
Contributions from several consumers of the same tensor therefore add up in
that tensor's accumulator before its producer reads it.

Nodes are single-use: after a pass, every visited output tensor drops its
node reference so the graph can be garbage-collected.
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING

from ...domain._errors import AutogradContractError
from ...domain._function import GradientFunction
from .._logging import get_logger

if TYPE_CHECKING:
    from ..tensor._tensor import Tensor

logger = get_logger(__name__)


def topological_order(root: GradientFunction) -> list[GradientFunction]:
    """
    Return the nodes reachable from `root` in depth-first post-order.

    Children (producers of a node's operands) appear before the node itself,
    so iterating the result in reverse visits consumers before producers.
    Nodes are deduplicated by identity; the traversal is iterative so deep
    graphs do not hit the recursion limit.
    """
    order: list[GradientFunction] = []
    visited: set[int] = set()
    stack: list[tuple[GradientFunction, bool]] = [(root, False)]

    while stack:
        node, expanded = stack.pop()
        if expanded:
            order.append(node)
            continue
        if id(node) in visited:
            continue
        visited.add(id(node))
        stack.append((node, True))
        for operand in reversed(tuple(node.prev())):
            child = operand.grad_fn
            if child is not None and id(child) not in visited:
                stack.append((child, False))

    return order


def run_backward(root: "Tensor") -> None:
    """
    Backpropagate from a single-element tensor.

    Parameters
    ----------
    root : Tensor
        Tensor of shape ``(1,)`` that requires gradients.

    Raises
    ------
    AutogradContractError
        If `root` does not have shape ``(1,)`` or does not require gradients.
    """
    if root.shape != (1,):
        raise AutogradContractError(
            f"backward() can only be called on tensors of shape (1,), "
            f"got {root.shape}"
        )
    if root.grad_storage is None:
        raise AutogradContractError(
            "backward() called on a tensor that does not require gradients"
        )

    node = root.grad_fn
    if node is None and root.graph_released:
        warnings.warn(
            "backward() called on a tensor whose graph was already released; "
            "no gradient function will run.",
            RuntimeWarning,
            stacklevel=3,
        )

    root.grad_storage.fill(1.0)
    if node is None:
        return

    order = topological_order(node)
    logger.debug("backward: executing %d nodes from %s", len(order), node.name)

    for fn in reversed(order):
        logger.debug("backward: %s", fn.name)
        fn.backward()

    for fn in order:
        output = getattr(fn, "output", None)
        if output is not None:
            output._release_graph()

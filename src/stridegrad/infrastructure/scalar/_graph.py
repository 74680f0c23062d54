"""
Arena-based scalar autograd.

A `ScalarGraph` owns every scalar node in a flat list (the arena). Nodes refer
to their operands by index, never by reference, so the graph is a plain list
of records that can be inspected or cleared in one go. A `Value` is a
lightweight ``(idx, graph)`` handle with operator sugar.

Backward seeds the chosen node's gradient with ``1.0``, sorts the nodes
reachable from it topologically, and accumulates each local derivative into
``arena[idx].grad``.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Union

from .._logging import get_logger

logger = get_logger(__name__)


@dataclass
class ScalarNode:
    """
    One arena record.

    Attributes
    ----------
    data : float
        Forward value.
    grad : float
        Accumulated gradient.
    prev : tuple[int, ...]
        Arena indices of the operands.
    op : str
        Operation tag (``""`` for leaves).
    requires_grad : bool
        Whether gradients are accumulated into and propagated through this node.
    """

    data: float
    grad: float = 0.0
    prev: tuple[int, ...] = ()
    op: str = ""
    requires_grad: bool = True


class ScalarGraph:
    """Arena of scalar nodes plus the reverse-mode driver over it."""

    def __init__(self) -> None:
        self.arena: list[ScalarNode] = []

    def __len__(self) -> int:
        return len(self.arena)

    def _push(self, node: ScalarNode) -> "Value":
        self.arena.append(node)
        return Value(len(self.arena) - 1, self)

    def scalar(self, data: float, requires_grad: bool = True) -> "Value":
        """Create a leaf value."""
        return self._push(ScalarNode(float(data), requires_grad=requires_grad))

    def constant(self, data: float) -> "Value":
        return self.scalar(data, requires_grad=False)

    def _lift(self, x: Union["Value", float]) -> "Value":
        if isinstance(x, Value):
            if x.graph is not self:
                raise ValueError("cannot combine values from different graphs")
            return x
        if isinstance(x, numbers.Real) and not isinstance(x, bool):
            return self.constant(float(x))
        raise TypeError(f"expected Value or real number, got {type(x).__name__}")

    def _op(self, op: str, data: float, *operands: "Value") -> "Value":
        req = any(self.arena[v.idx].requires_grad for v in operands)
        return self._push(
            ScalarNode(data, prev=tuple(v.idx for v in operands), op=op, requires_grad=req)
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def add(self, a, b) -> "Value":
        a, b = self._lift(a), self._lift(b)
        return self._op("+", a.data + b.data, a, b)

    def sub(self, a, b) -> "Value":
        a, b = self._lift(a), self._lift(b)
        return self._op("-", a.data - b.data, a, b)

    def mul(self, a, b) -> "Value":
        a, b = self._lift(a), self._lift(b)
        return self._op("*", a.data * b.data, a, b)

    def div(self, a, b) -> "Value":
        """
        ``a / b``. Division by zero follows IEEE semantics (``inf``/``nan``).
        """
        a, b = self._lift(a), self._lift(b)
        return self._op("/", _ieee_div(a.data, b.data), a, b)

    def pow(self, a, b) -> "Value":
        a, b = self._lift(a), self._lift(b)
        return self._op("**", _pow(a.data, b.data), a, b)

    def exp(self, a) -> "Value":
        a = self._lift(a)
        return self._op("exp", _exp(a.data), a)

    def sin(self, a) -> "Value":
        a = self._lift(a)
        return self._op("sin", math.sin(a.data), a)

    def cos(self, a) -> "Value":
        a = self._lift(a)
        return self._op("cos", math.cos(a.data), a)

    # ------------------------------------------------------------------
    # Reverse mode
    # ------------------------------------------------------------------
    def topological_order(self, idx: int) -> list[int]:
        """Indices reachable from `idx`, operands before their consumers."""
        order: list[int] = []
        visited: set[int] = set()
        stack: list[tuple[int, bool]] = [(idx, False)]
        while stack:
            i, expanded = stack.pop()
            if expanded:
                order.append(i)
                continue
            if i in visited:
                continue
            visited.add(i)
            stack.append((i, True))
            for p in reversed(self.arena[i].prev):
                if p not in visited:
                    stack.append((p, False))
        return order

    def backward(self, value: "Value") -> None:
        """Accumulate d(value)/d(node) into every reachable node's grad."""
        self.arena[value.idx].grad = 1.0
        order = self.topological_order(value.idx)
        logger.debug("scalar backward over %d nodes", len(order))
        for i in reversed(order):
            self._backward_node(i)

    def zero_grad(self) -> None:
        for node in self.arena:
            node.grad = 0.0

    def _accumulate(self, idx: int, g: float) -> None:
        node = self.arena[idx]
        if node.requires_grad:
            node.grad += g

    def _backward_node(self, idx: int) -> None:
        node = self.arena[idx]
        if not node.requires_grad or not node.prev:
            return
        g = node.grad
        op = node.op

        if op == "exp":
            (a,) = node.prev
            self._accumulate(a, g * node.data)
            return
        if op == "sin":
            (a,) = node.prev
            self._accumulate(a, g * math.cos(self.arena[a].data))
            return
        if op == "cos":
            (a,) = node.prev
            self._accumulate(a, -g * math.sin(self.arena[a].data))
            return

        a, b = node.prev
        x, y = self.arena[a].data, self.arena[b].data
        if op == "+":
            self._accumulate(a, g)
            self._accumulate(b, g)
        elif op == "-":
            self._accumulate(a, g)
            self._accumulate(b, -g)
        elif op == "*":
            self._accumulate(a, g * y)
            self._accumulate(b, g * x)
        elif op == "/":
            self._accumulate(a, _ieee_div(g, y))
            if self.arena[b].requires_grad:
                self._accumulate(b, -g * _ieee_div(x, y * y))
        elif op == "**":
            self._accumulate(a, g * y * _pow(x, y - 1.0))
            if self.arena[b].requires_grad:
                ln_x = math.log(x) if x > 0 else math.nan
                self._accumulate(b, g * node.data * ln_x)
        else:
            raise ValueError(f"unknown scalar op {op!r}")


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _pow(x: float, y: float) -> float:
    """`x ** y` with IEEE results instead of exceptions or complex numbers."""
    if x < 0 and not float(y).is_integer():
        return math.nan
    if x == 0 and y < 0:
        return math.inf
    try:
        return math.pow(x, y)
    except OverflowError:
        if x < 0 and float(y) % 2 == 1:
            return -math.inf
        return math.inf


def _ieee_div(x: float, y: float) -> float:
    if y == 0.0:
        if x == 0.0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)
    return x / y


class Value:
    """
    Handle on one node of a `ScalarGraph`.

    Parameters
    ----------
    idx : int
        Arena index of the node.
    graph : ScalarGraph
        Owning graph.
    """

    __slots__ = ("idx", "graph")

    def __init__(self, idx: int, graph: ScalarGraph) -> None:
        self.idx = idx
        self.graph = graph

    @property
    def node(self) -> ScalarNode:
        return self.graph.arena[self.idx]

    @property
    def data(self) -> float:
        return self.node.data

    @property
    def grad(self) -> float:
        return self.node.grad

    @property
    def op(self) -> str:
        return self.node.op

    def backward(self) -> None:
        self.graph.backward(self)

    def exp(self) -> "Value":
        return self.graph.exp(self)

    def sin(self) -> "Value":
        return self.graph.sin(self)

    def cos(self) -> "Value":
        return self.graph.cos(self)

    def __add__(self, other):
        return self.graph.add(self, other)

    def __radd__(self, other):
        return self.graph.add(other, self)

    def __sub__(self, other):
        return self.graph.sub(self, other)

    def __rsub__(self, other):
        return self.graph.sub(other, self)

    def __mul__(self, other):
        return self.graph.mul(self, other)

    def __rmul__(self, other):
        return self.graph.mul(other, self)

    def __truediv__(self, other):
        return self.graph.div(self, other)

    def __rtruediv__(self, other):
        return self.graph.div(other, self)

    def __pow__(self, other):
        return self.graph.pow(self, other)

    def __rpow__(self, other):
        return self.graph.pow(other, self)

    def __neg__(self):
        return self.graph.mul(self, -1.0)

    def __repr__(self) -> str:
        return f"Value(data={self.data}, grad={self.grad})"

"""
Backward rules for activation functions.

Where the derivative is a function of the forward output (sigmoid, tanh,
softmax, elu) the node reads the output tensor's storage instead of
recomputing the activation.
"""

from __future__ import annotations

from ._node import UnaryNode


class BinaryStepGrad(UnaryNode):
    """The step function has zero derivative almost everywhere."""

    def backward(self) -> None:
        return None


class SigmoidGrad(UnaryNode):
    def backward(self) -> None:
        s = self.output.storage
        local = s.mul(s.rsub_scalar(1.0))
        self.accumulate(self.a, self.grad_out.mul(local))


class TanhGrad(UnaryNode):
    """``1 - tanh(a)^2``."""

    def backward(self) -> None:
        t = self.output.storage
        local = t.mul(t).rsub_scalar(1.0)
        self.accumulate(self.a, self.grad_out.mul(local))


class ReluGrad(UnaryNode):
    def backward(self) -> None:
        mask = self.a.storage.greater_than_scalar(0.0)
        self.accumulate(self.a, self.grad_out.mul(mask))


class LeakyReluGrad(UnaryNode):
    def __init__(self, a, slope: float, output) -> None:
        super().__init__(a, output)
        self.slope = float(slope)

    def backward(self) -> None:
        # mask * (1 - slope) + slope is 1 for x > 0 and slope elsewhere
        mask = self.a.storage.greater_than_scalar(0.0)
        local = mask.mul_scalar(1.0 - self.slope).add_scalar(self.slope)
        self.accumulate(self.a, self.grad_out.mul(local))


class ParametricReluGrad(LeakyReluGrad):
    """Same rule as leaky ReLU with a caller-chosen coefficient."""


class EluGrad(UnaryNode):
    """
    ``1`` for positive inputs, ``alpha * exp(x)`` otherwise.

    On the negative branch ``alpha * exp(x) == elu(x) + alpha``, so the
    forward output is reused and large positive inputs never overflow.
    """

    def __init__(self, a, alpha: float, output) -> None:
        super().__init__(a, output)
        self.alpha = float(alpha)

    def backward(self) -> None:
        pos = self.a.storage.greater_than_scalar(0.0)
        neg_branch = self.output.storage.add_scalar(self.alpha)
        local = pos.add(pos.rsub_scalar(1.0).mul(neg_branch))
        self.accumulate(self.a, self.grad_out.mul(local))


class SoftmaxGrad(UnaryNode):
    """``s * (g - sum_axis(s * g))`` with ``s`` the softmax output."""

    def __init__(self, a, axis: int, output) -> None:
        super().__init__(a, output)
        self.axis = axis

    def backward(self) -> None:
        s = self.output.storage
        g = self.grad_out
        dot = s.mul(g).sum_axis(self.axis, keepdims=True)
        self.accumulate(self.a, s.mul(g.sub(dot)))


class SwishGrad(UnaryNode):
    """``sigmoid(x) + x * sigmoid(x) * (1 - sigmoid(x))``."""

    def backward(self) -> None:
        x = self.a.storage
        s = x.sigmoid()
        local = s.add(x.mul(s).mul(s.rsub_scalar(1.0)))
        self.accumulate(self.a, self.grad_out.mul(local))

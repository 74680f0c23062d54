"""
Activation mixin for tensors.
"""

from __future__ import annotations

from ...autograd import _functional as F


class TensorMixinActivation:
    def binary_step(self):
        """``0`` for negative inputs, ``1`` otherwise; zero gradient."""
        return F.binary_step(self)[0]

    def sigmoid(self):
        return F.sigmoid(self)[0]

    def tanh(self):
        return F.tanh(self)[0]

    def relu(self):
        return F.relu(self)[0]

    def leaky_relu(self, slope: float = 0.1):
        return F.leaky_relu(self, slope)[0]

    def parametric_relu(self, a: float):
        """``x`` for positive inputs, ``a * x`` otherwise."""
        return F.parametric_relu(self, a)[0]

    def elu(self, alpha: float = 1.0):
        return F.elu(self, alpha)[0]

    def softmax(self, axis: int = -1):
        """
        Softmax along `axis`, shifted by the per-slice maximum.
        """
        return F.softmax(self, axis)[0]

    def swish(self):
        return F.swish(self)[0]

"""
Activation kernels for the CPU backend.
"""

from __future__ import annotations

import numpy as np

from .._shape import normalize_axis


def _sigmoid(x: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-x))


class CpuActivationMixin:
    """Activation kernels; mixed into `CpuStorage`."""

    def binary_step(self):
        """``0`` for negative inputs, ``1`` otherwise."""
        return self.apply(lambda x: np.where(x < 0, 0.0, 1.0))

    def sigmoid(self):
        return self.apply(_sigmoid)

    def tanh(self):
        return self.apply(np.tanh)

    def relu(self):
        return self.apply(lambda x: np.maximum(x, 0.0))

    def leaky_relu(self, slope: float = 0.1):
        return self.apply(lambda x: np.where(x > 0, x, slope * x))

    def parametric_relu(self, a: float):
        """``x`` for positive inputs, ``a * x`` otherwise."""
        return self.apply(lambda x: np.where(x > 0, x, a * x))

    def elu(self, alpha: float = 1.0):
        return self.apply(lambda x: np.where(x >= 0, x, alpha * (np.exp(x) - 1.0)))

    def softmax(self, axis: int = -1):
        """
        Softmax along `axis`, shifted by the per-slice maximum so large
        inputs do not overflow.
        """
        axis = normalize_axis(axis, self.ndim)

        def kernel(x: np.ndarray) -> np.ndarray:
            e = np.exp(x - np.max(x, axis=axis, keepdims=True))
            return e / np.sum(e, axis=axis, keepdims=True)

        return self.apply(kernel)

    def swish(self):
        return self.apply(lambda x: x * _sigmoid(x))

from unittest import TestCase
import unittest

import numpy as np

from stridegrad.domain._errors import AutogradContractError
from stridegrad.infrastructure.autograd import _functional as F
from stridegrad.infrastructure.autograd._backward import topological_order
from stridegrad.infrastructure.tensor._tensor import Tensor


class _TensorFactoryMixin:
    def _t(self, arr, requires_grad: bool = True) -> Tensor:
        return Tensor.from_numpy(
            np.asarray(arr, dtype=np.float32), requires_grad=requires_grad
        )


class TestEndToEnd(TestCase, _TensorFactoryMixin):
    def test_broadcast_product_example(self):
        x = self._t([[1, 2, 3], [4, 5, 6]])
        y = self._t([[1, 1, 1]])
        z = x * y
        f = z.sum()
        f.backward()

        np.testing.assert_array_equal(x.grad.to_numpy(), np.ones((2, 3)))
        self.assertEqual(y.grad.shape, (1, 3))
        np.testing.assert_array_equal(y.grad.to_numpy(), [[5, 7, 9]])

    def test_small_network_matches_finite_differences(self):
        rng = np.random.default_rng(0)
        x_np = rng.standard_normal((4, 3)).astype(np.float32)
        w_np = rng.standard_normal((3, 2)).astype(np.float32)
        b_np = rng.standard_normal((2,)).astype(np.float32)

        def loss_np(w):
            h = np.tanh(x_np @ w + b_np)
            return float(np.mean(h * h))

        x = self._t(x_np, False)
        w = self._t(w_np)
        b = self._t(b_np)
        h = (x @ w + b).tanh()
        loss = (h * h).mean()
        loss.backward()

        eps = 1e-3
        numeric = np.zeros_like(w_np, dtype=np.float64)
        for i in range(w_np.shape[0]):
            for j in range(w_np.shape[1]):
                wp = w_np.astype(np.float64).copy()
                wm = wp.copy()
                wp[i, j] += eps
                wm[i, j] -= eps
                numeric[i, j] = (loss_np(wp) - loss_np(wm)) / (2 * eps)
        np.testing.assert_allclose(w.grad.to_numpy(), numeric, rtol=1e-2, atol=1e-3)
        self.assertEqual(b.grad.shape, (2,))


class TestBroadcastReduction(TestCase, _TensorFactoryMixin):
    def _check(self, a_shape, b_shape):
        a = self._t(np.ones(a_shape))
        b = self._t(np.ones(b_shape))
        c = a + b
        out_shape = np.broadcast_shapes(a_shape, b_shape)
        g = np.arange(1, np.prod(out_shape) + 1, dtype=np.float32).reshape(out_shape)
        (c * self._t(g, False)).sum().backward()
        return a.grad.to_numpy(), b.grad.to_numpy(), g

    def test_size_one_axis(self):
        ga, gb, g = self._check((2, 3), (1, 3))
        np.testing.assert_array_equal(ga, g)
        self.assertEqual(gb.shape, (1, 3))
        np.testing.assert_array_equal(gb, g.sum(axis=0, keepdims=True))

    def test_rank_mismatch_leading_axes(self):
        ga, gb, g = self._check((2, 3), (3,))
        np.testing.assert_array_equal(ga, g)
        self.assertEqual(gb.shape, (3,))
        np.testing.assert_array_equal(gb, g.sum(axis=0))

    def test_rank_mismatch_with_stretched_inner_axis(self):
        ga, gb, g = self._check((4, 2, 3), (2, 1))
        np.testing.assert_array_equal(ga, g)
        self.assertEqual(gb.shape, (2, 1))
        np.testing.assert_array_equal(gb, g.sum(axis=(0, 2)).reshape(2, 1))

    def test_both_sides_stretched(self):
        ga, gb, g = self._check((2, 1), (1, 3))
        np.testing.assert_array_equal(ga, g.sum(axis=1, keepdims=True))
        np.testing.assert_array_equal(gb, g.sum(axis=0, keepdims=True))


class TestFanOut(TestCase, _TensorFactoryMixin):
    def test_each_node_runs_once_and_paths_add_up(self):
        x_np = np.array([1.0, -2.0, 3.0], dtype=np.float32)
        x = self._t(x_np)
        y, node = F.mul_scalar(x, 2.0)

        calls = []
        original = node.backward

        def counting_backward():
            calls.append(node.name)
            original()

        node.backward = counting_backward

        z = y * y + y
        z.sum().backward()

        self.assertEqual(calls, ["MulScalarGrad"])
        # z = 4x^2 + 2x
        np.testing.assert_allclose(x.grad.to_numpy(), 8 * x_np + 2, rtol=1e-6)

    def test_same_tensor_used_twice_in_one_op(self):
        x = self._t([3.0])
        (x * x).backward()
        np.testing.assert_allclose(x.grad.to_numpy(), [6.0])

    def test_topological_order_deduplicates(self):
        x = self._t([1.0, 2.0])
        y = x.exp()
        z = (y + y * y).sum()
        order = topological_order(z.grad_fn)
        self.assertEqual(len(order), len({id(n) for n in order}))
        self.assertIs(order[-1], z.grad_fn)
        self.assertIs(order[0], y.grad_fn)
        self.assertEqual(len(order), 4)

    def test_deep_chain_does_not_recurse(self):
        x = self._t([1.0])
        y = x
        for _ in range(3000):
            y = y + 1.0
        y.backward()
        np.testing.assert_array_equal(x.grad.to_numpy(), [1.0])


class TestBackwardContract(TestCase, _TensorFactoryMixin):
    def test_non_scalar_root_faults(self):
        x = self._t(np.ones((2, 2)))
        with self.assertRaises(AutogradContractError):
            (x * 2.0).backward()
        with self.assertRaises(AutogradContractError):
            self._t([[1.0]]).backward()

    def test_root_without_grad_faults(self):
        with self.assertRaises(AutogradContractError):
            self._t([1.0], requires_grad=False).backward()

    def test_leaf_backward_seeds_one(self):
        x = Tensor.scalar(3.0, requires_grad=True)
        x.backward()
        self.assertEqual(x.grad.item(), 1.0)

    def test_graph_is_released_after_backward(self):
        x = self._t([1.0, 2.0])
        y = x * 2.0
        f = y.sum()
        f.backward()
        self.assertIsNone(f.grad_fn)
        self.assertIsNone(y.grad_fn)
        self.assertTrue(f.graph_released)

        with self.assertWarns(RuntimeWarning):
            f.backward()
        np.testing.assert_array_equal(x.grad.to_numpy(), [2.0, 2.0])

    def test_gradients_accumulate_across_passes(self):
        x = self._t([1.0, 2.0])
        (x * 3.0).sum().backward()
        (x * 3.0).sum().backward()
        np.testing.assert_array_equal(x.grad.to_numpy(), [6.0, 6.0])
        x.zero_grad()
        np.testing.assert_array_equal(x.grad.to_numpy(), [0.0, 0.0])

    def test_clone_shares_accumulator_and_node(self):
        x = self._t([1.0, 2.0])
        y = x * 2.0
        y2 = y.clone()
        self.assertTrue(y2.same_as(y))
        self.assertIs(y2.grad_fn, y.grad_fn)
        self.assertFalse(y2.same_as(x))

        x2 = x.clone()
        y2.sum().backward()
        np.testing.assert_array_equal(x2.grad.to_numpy(), [2.0, 2.0])
        self.assertIsNone(y.grad_fn)


if __name__ == "__main__":
    unittest.main()

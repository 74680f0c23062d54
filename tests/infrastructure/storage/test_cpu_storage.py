from unittest import TestCase
import unittest

import numpy as np

from stridegrad.domain._errors import (
    IndexOutOfBoundsError,
    RankMismatchError,
    ShapeMismatchError,
)
from stridegrad.infrastructure.storage.cpu import CpuStorage


def _s(arr) -> CpuStorage:
    return CpuStorage.from_numpy(np.asarray(arr, dtype=np.float32))


def _naive_matmul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    out = np.zeros((a.shape[0], b.shape[1]), dtype=np.float64)
    for i in range(a.shape[0]):
        for j in range(b.shape[1]):
            acc = 0.0
            for k in range(a.shape[1]):
                acc += float(a[i, k]) * float(b[k, j])
            out[i, j] = acc
    return out


class TestCreation(TestCase):
    def test_fresh_storage_owns_exactly_numel_elements(self):
        for factory in (CpuStorage.zeros, CpuStorage.ones):
            s = factory((2, 3, 4))
            self.assertEqual(s.buffer.size, 24)
            self.assertEqual(s.stride, (12, 4, 1))
            self.assertEqual(s.offset, 0)
            self.assertTrue(s.is_contiguous())

    def test_full_and_values(self):
        s = CpuStorage.full((2, 2), 3.5)
        np.testing.assert_array_equal(s.to_numpy(), np.full((2, 2), 3.5, np.float32))
        np.testing.assert_array_equal(CpuStorage.ones((3,)).to_numpy(), np.ones(3))

    def test_from_numpy_casts_and_copies(self):
        src = np.arange(6, dtype=np.int64).reshape(2, 3)
        s = CpuStorage.from_numpy(src)
        self.assertEqual(s.buffer.dtype, np.float32)
        src[0, 0] = 100
        self.assertEqual(s.get((0, 0)), 0.0)

    def test_from_numpy_zero_dim_becomes_length_one(self):
        self.assertEqual(CpuStorage.from_numpy(np.float32(2.0)).shape, (1,))

    def test_uniform_is_reproducible_and_in_range(self):
        a = CpuStorage.uniform((100,), -2.0, 3.0, rng=np.random.default_rng(7))
        b = CpuStorage.uniform((100,), -2.0, 3.0, rng=np.random.default_rng(7))
        np.testing.assert_array_equal(a.to_numpy(), b.to_numpy())
        self.assertTrue(np.all(a.to_numpy() >= -2.0))
        self.assertTrue(np.all(a.to_numpy() < 3.0))


class TestElementAccess(TestCase):
    def test_get_set(self):
        s = _s(np.arange(6).reshape(2, 3))
        self.assertEqual(s.get((1, 2)), 5.0)
        s.set((0, 1), -1.0)
        self.assertEqual(s.to_numpy()[0, 1], -1.0)

    def test_rank_and_bounds_are_checked(self):
        s = CpuStorage.zeros((2, 3))
        with self.assertRaises(RankMismatchError):
            s.get((0,))
        with self.assertRaises(IndexOutOfBoundsError):
            s.get((2, 0))
        with self.assertRaises(IndexOutOfBoundsError):
            s.set((0, -1), 1.0)

    def test_get_respects_strides_and_offset(self):
        buf = np.arange(10, dtype=np.float32)
        s = CpuStorage.from_buffer(buf, (2, 2), (3, 1), offset=2)
        np.testing.assert_array_equal(s.to_numpy(), [[2, 3], [5, 6]])
        self.assertEqual(s.get((1, 1)), 6.0)


class TestViewsAndAliasing(TestCase):
    def test_broadcast_view_shares_buffer(self):
        a = _s([[1.0, 2.0, 3.0]])
        v = a.broadcast((4, 3))
        self.assertTrue(v.shares_buffer_with(a))
        self.assertEqual(v.stride, (0, 1))
        np.testing.assert_array_equal(v.to_numpy(), np.tile([[1, 2, 3]], (4, 1)))

        a.set((0, 1), 20.0)
        self.assertEqual(v.get((3, 1)), 20.0)

    def test_permute_view_aliases_writes(self):
        a = _s(np.arange(24).reshape(2, 3, 4))
        p = a.permute((2, 0, 1))
        self.assertEqual(p.shape, (4, 2, 3))
        self.assertTrue(p.shares_buffer_with(a))
        self.assertFalse(p.is_contiguous())
        np.testing.assert_array_equal(
            p.to_numpy(), np.transpose(np.arange(24).reshape(2, 3, 4), (2, 0, 1))
        )
        p.set((3, 1, 2), -5.0)
        self.assertEqual(a.get((1, 2, 3)), -5.0)

    def test_transpose_requires_rank_two(self):
        with self.assertRaises(RankMismatchError):
            CpuStorage.zeros((2, 3, 4)).transpose()
        t = _s([[1, 2, 3], [4, 5, 6]]).transpose()
        np.testing.assert_array_equal(t.to_numpy(), [[1, 4], [2, 5], [3, 6]])

    def test_reshape_contiguous_is_view(self):
        a = _s(np.arange(6))
        r = a.reshape((2, 3))
        self.assertTrue(r.shares_buffer_with(a))
        r.set((1, 0), 42.0)
        self.assertEqual(a.get((3,)), 42.0)

    def test_reshape_non_contiguous_materialises(self):
        a = _s(np.arange(6).reshape(2, 3))
        t = a.transpose()
        r = t.reshape((6,))
        self.assertFalse(r.shares_buffer_with(a))
        np.testing.assert_array_equal(r.to_numpy(), [0, 3, 1, 4, 2, 5])

    def test_reshape_numel_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            CpuStorage.zeros((2, 3)).reshape((4,))

    def test_flatten_squeeze_unsqueeze(self):
        a = _s(np.arange(6).reshape(1, 2, 1, 3))
        self.assertEqual(a.flatten().shape, (6,))
        self.assertEqual(a.squeeze().shape, (2, 3))
        self.assertEqual(CpuStorage.zeros((1, 1)).squeeze().shape, (1,))
        u = _s(np.arange(6).reshape(2, 3)).unsqueeze(1)
        self.assertEqual(u.shape, (2, 1, 3))
        np.testing.assert_array_equal(u.to_numpy()[:, 0, :], np.arange(6).reshape(2, 3))
        self.assertEqual(_s([1, 2]).unsqueeze(1).shape, (2, 1))
        with self.assertRaises(RankMismatchError):
            _s([1, 2]).unsqueeze(2)

    def test_permute_then_inverse_is_identity(self):
        data = np.random.default_rng(0).standard_normal((2, 3, 4)).astype(np.float32)
        a = _s(data)
        back = a.permute((1, 2, 0)).permute((2, 0, 1))
        self.assertEqual(back.shape, a.shape)
        self.assertEqual(back.stride, a.stride)
        np.testing.assert_array_equal(back.to_numpy(), data)

    def test_make_contiguous_copies(self):
        a = _s(np.arange(6).reshape(2, 3)).transpose()
        c = a.make_contiguous()
        self.assertTrue(c.is_contiguous())
        self.assertFalse(c.shares_buffer_with(a))
        np.testing.assert_array_equal(c.to_numpy(), a.to_numpy())


class TestArithmetic(TestCase):
    def test_broadcasting_binary_ops_match_numpy(self):
        rng = np.random.default_rng(1)
        x = rng.standard_normal((4, 2, 3)).astype(np.float32)
        y = rng.standard_normal((2, 1)).astype(np.float32) + 3.0
        a, b = _s(x), _s(y)
        for name, ref in [
            ("add", np.add),
            ("sub", np.subtract),
            ("mul", np.multiply),
            ("div", np.divide),
        ]:
            out = getattr(a, name)(b)
            self.assertEqual(out.shape, (4, 2, 3))
            np.testing.assert_allclose(out.to_numpy(), ref(x, y), rtol=1e-6)

    def test_incompatible_shapes_raise(self):
        with self.assertRaises(ShapeMismatchError):
            CpuStorage.zeros((2, 3)).add(CpuStorage.zeros((4, 3)))

    def test_elementwise_op_requires_equal_shapes(self):
        with self.assertRaises(ShapeMismatchError):
            CpuStorage.zeros((2, 3)).elementwise_op(CpuStorage.zeros((1, 3)), np.add)

    def test_elementwise_on_strided_operands(self):
        x = np.arange(6, dtype=np.float32).reshape(2, 3)
        a = _s(x).transpose()
        b = _s(x.T.copy())
        np.testing.assert_array_equal(a.add(b).to_numpy(), 2 * x.T)

    def test_scalar_ops(self):
        x = np.array([1.0, 2.0, 4.0], dtype=np.float32)
        a = _s(x)
        np.testing.assert_allclose(a.add_scalar(1).to_numpy(), x + 1)
        np.testing.assert_allclose(a.sub_scalar(1).to_numpy(), x - 1)
        np.testing.assert_allclose(a.rsub_scalar(1).to_numpy(), 1 - x)
        np.testing.assert_allclose(a.mul_scalar(3).to_numpy(), x * 3)
        np.testing.assert_allclose(a.div_scalar(2).to_numpy(), x / 2)
        np.testing.assert_allclose(a.rdiv_scalar(2).to_numpy(), 2 / x)
        np.testing.assert_allclose(a.pow_scalar(2).to_numpy(), x**2)

    def test_unary_ops(self):
        x = np.array([-2.0, 0.5, 3.0], dtype=np.float32)
        a = _s(x)
        np.testing.assert_allclose(a.neg().to_numpy(), -x)
        np.testing.assert_allclose(a.abs().to_numpy(), np.abs(x))
        np.testing.assert_allclose(a.sign().to_numpy(), np.sign(x))
        np.testing.assert_allclose(a.exp().to_numpy(), np.exp(x), rtol=1e-6)

    def test_division_by_zero_and_log_do_not_raise(self):
        a = _s([1.0, 0.0, -1.0])
        out = a.div(_s([0.0, 0.0, 0.0])).to_numpy()
        self.assertTrue(np.isinf(out[0]))
        self.assertTrue(np.isnan(out[1]))
        logs = a.log().to_numpy()
        self.assertTrue(np.isneginf(logs[1]))
        self.assertTrue(np.isnan(logs[2]))
        self.assertTrue(np.isnan(a.sqrt().to_numpy()[2]))

    def test_comparisons(self):
        a = _s([1.0, 2.0, 3.0])
        b = _s([2.0, 2.0, 2.0])
        np.testing.assert_array_equal(a.greater_than(b).to_numpy(), [0, 0, 1])
        np.testing.assert_array_equal(a.less_than(b).to_numpy(), [1, 0, 0])
        np.testing.assert_array_equal(
            a.greater_than(b, make_binary=False).to_numpy(), [-1, -1, 1]
        )
        np.testing.assert_array_equal(a.greater_than_scalar(1.5).to_numpy(), [0, 1, 1])
        np.testing.assert_array_equal(
            a.less_than_scalar(2.5, make_binary=False).to_numpy(), [1, 1, -1]
        )


class TestInPlace(TestCase):
    def test_add_assign_broadcasts_other(self):
        acc = CpuStorage.zeros((2, 3))
        acc.add_assign(_s([[1.0, 2.0, 3.0]]))
        acc.add_assign(_s([[1.0, 2.0, 3.0]]))
        np.testing.assert_array_equal(acc.to_numpy(), np.tile([[2, 4, 6]], (2, 1)))

    def test_add_assign_never_grows_self(self):
        acc = CpuStorage.zeros((1, 3))
        with self.assertRaises(ShapeMismatchError):
            acc.add_assign(CpuStorage.ones((2, 3)))

    def test_in_place_through_view_is_visible_to_aliases(self):
        base = _s(np.arange(6).reshape(2, 3))
        t = base.transpose()
        t.mul_scalar_assign(10.0)
        np.testing.assert_array_equal(base.to_numpy(), np.arange(6).reshape(2, 3) * 10)

    def test_other_in_place_ops(self):
        a = _s([2.0, 4.0])
        a.sub_assign(_s([1.0, 1.0]))
        a.mul_assign(_s([3.0, 3.0]))
        a.div_assign(_s([3.0, 1.0]))
        np.testing.assert_array_equal(a.to_numpy(), [1.0, 9.0])
        a.add_scalar_assign(1.0)
        a.sub_scalar_assign(2.0)
        a.div_scalar_assign(2.0)
        np.testing.assert_array_equal(a.to_numpy(), [0.0, 4.0])

    def test_fill_and_copy(self):
        a = CpuStorage.zeros((2, 2))
        a.fill(7.0)
        np.testing.assert_array_equal(a.to_numpy(), np.full((2, 2), 7.0))
        a.copy_(_s([1.0, 2.0]))
        np.testing.assert_array_equal(a.to_numpy(), [[1, 2], [1, 2]])


class TestReductions(TestCase):
    def setUp(self):
        self.x = np.arange(1, 7, dtype=np.float32).reshape(2, 3)
        self.a = _s(self.x)

    def test_full_reductions_return_shape_one(self):
        self.assertEqual(self.a.sum().shape, (1,))
        self.assertEqual(self.a.sum().get((0,)), 21.0)
        self.assertAlmostEqual(self.a.mean().get((0,)), 3.5)
        self.assertEqual(self.a.product().get((0,)), 720.0)

    def test_sum_axis(self):
        np.testing.assert_array_equal(self.a.sum_axis(0).to_numpy(), [[5, 7, 9]])
        np.testing.assert_array_equal(
            self.a.sum_axis(1, keepdims=False).to_numpy(), [6, 15]
        )
        np.testing.assert_array_equal(self.a.sum_axis(-1).to_numpy(), [[6], [15]])

    def test_sum_dim(self):
        x = np.arange(24, dtype=np.float32).reshape(2, 3, 4)
        a = _s(x)
        np.testing.assert_array_equal(
            a.sum_dim([True, False, True]).to_numpy(), x.sum(axis=(0, 2))
        )
        self.assertEqual(a.sum_dim([True, True, True]).shape, (1,))
        self.assertEqual(a.sum_dim([True, True, True]).get((0,)), x.sum())
        with self.assertRaises(RankMismatchError):
            a.sum_dim([True])

    def test_sum_to_shape(self):
        g = CpuStorage.ones((4, 2, 3))
        np.testing.assert_array_equal(
            g.sum_to_shape((2, 1)).to_numpy(), np.full((2, 1), 12.0)
        )
        np.testing.assert_array_equal(g.sum_to_shape((3,)).to_numpy(), [8, 8, 8])
        np.testing.assert_array_equal(
            g.sum_to_shape((1, 2, 3)).to_numpy(), np.full((1, 2, 3), 4.0)
        )

    def test_max_axis(self):
        np.testing.assert_array_equal(self.a.max_axis(1).to_numpy(), [[3], [6]])

    def test_exclusive_product_handles_zero(self):
        a = _s([2.0, 0.0, 3.0])
        np.testing.assert_array_equal(a.exclusive_product().to_numpy(), [0.0, 6.0, 0.0])
        b = _s([[1.0, 2.0], [3.0, 4.0]])
        np.testing.assert_array_equal(
            b.exclusive_product().to_numpy(), [[24.0, 12.0], [8.0, 6.0]]
        )


class TestMatmul(TestCase):
    def test_matches_naive_triple_loop(self):
        rng = np.random.default_rng(3)
        for m, k, n in [(1, 1, 1), (3, 4, 2), (7, 5, 6), (16, 9, 3)]:
            x = rng.standard_normal((m, k)).astype(np.float32)
            y = rng.standard_normal((k, n)).astype(np.float32)
            out = _s(x).matmul(_s(y))
            self.assertEqual(out.shape, (m, n))
            np.testing.assert_allclose(
                out.to_numpy(), _naive_matmul(x, y), rtol=1e-4, atol=1e-5
            )

    def test_transpose_flags(self):
        rng = np.random.default_rng(4)
        x = rng.standard_normal((4, 3)).astype(np.float32)
        y = rng.standard_normal((5, 4)).astype(np.float32)
        out = _s(x).matmul(_s(y), trans_a=True, trans_b=True)
        self.assertEqual(out.shape, (3, 5))
        np.testing.assert_allclose(out.to_numpy(), _naive_matmul(x.T, y.T), rtol=1e-4, atol=1e-5)

    def test_non_contiguous_operand(self):
        x = np.arange(6, dtype=np.float32).reshape(3, 2)
        a = _s(x.T.copy()).transpose()
        np.testing.assert_allclose(a.matmul(_s(np.eye(2))).to_numpy(), x)

    def test_rank_and_shape_errors(self):
        with self.assertRaises(RankMismatchError):
            CpuStorage.zeros((2, 3, 4)).matmul(CpuStorage.zeros((4, 2)))
        with self.assertRaises(ShapeMismatchError):
            CpuStorage.zeros((3, 4)).matmul(CpuStorage.zeros((5, 2)))
        with self.assertRaises(ShapeMismatchError):
            CpuStorage.zeros((3, 4)).matmul(CpuStorage.zeros((4, 2)), trans_a=True)


class TestActivations(TestCase):
    def setUp(self):
        self.x = np.array([-2.0, -0.5, 0.0, 0.5, 2.0], dtype=np.float32)
        self.a = _s(self.x)

    def test_pointwise(self):
        x = self.x
        sig = 1.0 / (1.0 + np.exp(-x))
        np.testing.assert_array_equal(self.a.binary_step().to_numpy(), [0, 0, 1, 1, 1])
        np.testing.assert_allclose(self.a.sigmoid().to_numpy(), sig, rtol=1e-6)
        np.testing.assert_allclose(self.a.tanh().to_numpy(), np.tanh(x), rtol=1e-6)
        np.testing.assert_array_equal(self.a.relu().to_numpy(), np.maximum(x, 0))
        np.testing.assert_allclose(
            self.a.leaky_relu().to_numpy(), np.where(x > 0, x, 0.1 * x), rtol=1e-6
        )
        np.testing.assert_allclose(
            self.a.parametric_relu(0.25).to_numpy(), np.where(x > 0, x, 0.25 * x)
        )
        np.testing.assert_allclose(
            self.a.elu(1.5).to_numpy(),
            np.where(x >= 0, x, 1.5 * (np.exp(x) - 1)),
            rtol=1e-6,
        )
        np.testing.assert_allclose(self.a.swish().to_numpy(), x * sig, rtol=1e-6)

    def test_softmax_rows_sum_to_one_and_is_stable(self):
        x = np.array([[1.0, 2.0, 3.0], [1000.0, 1000.0, 1000.0]], dtype=np.float32)
        out = _s(x).softmax(axis=-1).to_numpy()
        self.assertTrue(np.all(np.isfinite(out)))
        np.testing.assert_allclose(out.sum(axis=1), [1.0, 1.0], rtol=1e-6)
        np.testing.assert_allclose(out[1], [1 / 3] * 3, rtol=1e-6)
        e = np.exp(x[0] - x[0].max())
        np.testing.assert_allclose(out[0], e / e.sum(), rtol=1e-6)


if __name__ == "__main__":
    unittest.main()

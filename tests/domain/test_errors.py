from unittest import TestCase
import unittest

from stridegrad.domain._errors import (
    AutogradContractError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    IndexOutOfBoundsError,
    RankMismatchError,
    ShapeMismatchError,
)


class TestErrorTaxonomy(TestCase):
    def test_device_not_supported_carries_op_and_device(self):
        err = DeviceNotSupportedError("zeros", "cuda:0")
        self.assertIsInstance(err, RuntimeError)
        self.assertEqual(err.op, "zeros")
        self.assertEqual(err.device, "cuda:0")
        self.assertIn("zeros", str(err))
        self.assertIn("cuda:0", str(err))

    def test_device_mismatch_carries_both_devices(self):
        err = DeviceMismatchError("cpu", "cuda:1")
        self.assertIsInstance(err, RuntimeError)
        self.assertEqual((err.device_a, err.device_b), ("cpu", "cuda:1"))

    def test_shape_errors_are_value_errors(self):
        self.assertTrue(issubclass(ShapeMismatchError, ValueError))
        self.assertTrue(issubclass(RankMismatchError, ValueError))

    def test_index_error_is_index_error(self):
        self.assertTrue(issubclass(IndexOutOfBoundsError, IndexError))

    def test_autograd_contract_is_runtime_error(self):
        self.assertTrue(issubclass(AutogradContractError, RuntimeError))


if __name__ == "__main__":
    unittest.main()

from unittest import TestCase
import unittest

from stridegrad.domain.device._device import Device, DeviceType
from stridegrad.domain.device._device_protocol import DeviceLike


class TestDevice(TestCase):
    def test_cpu_parses(self):
        d = Device("cpu")
        self.assertIs(d.type, DeviceType.CPU)
        self.assertIsNone(d.index)
        self.assertTrue(d.is_cpu())
        self.assertFalse(d.is_cuda())
        self.assertEqual(str(d), "cpu")

    def test_cuda_parses_index(self):
        d = Device("cuda:3")
        self.assertIs(d.type, DeviceType.CUDA)
        self.assertEqual(d.index, 3)
        self.assertTrue(d.is_cuda())
        self.assertEqual(str(d), "cuda:3")
        self.assertEqual(repr(d), "Device('cuda:3')")

    def test_invalid_strings_raise(self):
        for s in ("gpu", "cuda", "cuda:-1", "cuda:x", "CPU", ""):
            with self.assertRaises(ValueError):
                Device(s)

    def test_equality_and_hash(self):
        self.assertEqual(Device("cpu"), Device("cpu"))
        self.assertNotEqual(Device("cpu"), Device("cuda:0"))
        self.assertNotEqual(Device("cuda:0"), Device("cuda:1"))
        self.assertEqual(len({Device("cuda:1"), Device("cuda:1"), Device("cpu")}), 2)

    def test_slots_prevent_new_attributes(self):
        d = Device("cpu")
        with self.assertRaises(AttributeError):
            d.foo = 1

    def test_device_satisfies_protocol(self):
        self.assertIsInstance(Device("cpu"), DeviceLike)


if __name__ == "__main__":
    unittest.main()

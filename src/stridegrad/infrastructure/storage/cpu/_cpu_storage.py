from ._activation import CpuActivationMixin
from ._arithmetic import CpuArithmeticMixin
from ._base import CpuStorageBase
from ._blas import CpuBlasMixin
from ._reduction import CpuReductionMixin
from ._transform import CpuTransformMixin


class CpuStorage(
    CpuArithmeticMixin,
    CpuReductionMixin,
    CpuTransformMixin,
    CpuBlasMixin,
    CpuActivationMixin,
    CpuStorageBase,
):
    """
    NumPy-backed strided ``float32`` storage for the CPU device.

    The kernel families live in separate mixins; `CpuStorageBase` provides the
    metadata, element access, kernel drivers and in-place updates they share.
    """

from ._cpu_storage import CpuStorage

__all__ = [CpuStorage.__name__]

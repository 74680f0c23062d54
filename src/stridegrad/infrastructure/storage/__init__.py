from ._storage import Storage, register_backend, unregister_backend
from .cpu import CpuStorage

__all__ = [
    Storage.__name__,
    CpuStorage.__name__,
    register_backend.__name__,
    unregister_backend.__name__,
]

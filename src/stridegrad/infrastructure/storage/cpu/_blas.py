"""
Matrix multiplication for the CPU backend.

The product is delegated to `numpy.matmul`, which calls the single-precision
GEMM of the BLAS linked into NumPy. Transposition is expressed as a transposed
NumPy view, which reaches GEMM as a transposition flag rather than a copy.
"""

from __future__ import annotations

import numpy as np

from ....domain._errors import RankMismatchError, ShapeMismatchError
from ..._logging import get_logger

logger = get_logger(__name__)


class CpuBlasMixin:
    """GEMM kernel; mixed into `CpuStorage`."""

    def _gemm_operand(self, trans: bool) -> np.ndarray:
        src = self
        if not src.is_contiguous():
            logger.debug("matmul: materialising non-contiguous %s", self.shape)
            src = src.make_contiguous()
        arr = src.as_strided_array()
        return arr.T if trans else arr

    def matmul(self, other, trans_a: bool = False, trans_b: bool = False):
        """
        Compute ``op(A) @ op(B)`` where ``op`` optionally transposes.

        Parameters
        ----------
        other : CpuStorage
            Right operand ``B``.
        trans_a, trans_b : bool
            Whether to transpose ``A`` (self) or ``B`` before multiplying.

        Returns
        -------
        CpuStorage
            Contiguous result of shape ``(rows(op(A)), cols(op(B)))``.

        Raises
        ------
        RankMismatchError
            If either operand is not rank 2.
        ShapeMismatchError
            If the contracted dimensions differ after transposition.
        """
        if self.ndim != 2 or other.ndim != 2:
            raise RankMismatchError(
                f"matmul expects rank-2 operands, got {self.shape} and {other.shape}"
            )
        a = self._gemm_operand(trans_a)
        b = other._gemm_operand(trans_b)
        if a.shape[1] != b.shape[0]:
            raise ShapeMismatchError(
                f"matmul inner dimensions differ: op(A)={a.shape}, op(B)={b.shape}"
            )
        return self._from_array(np.matmul(a, b))

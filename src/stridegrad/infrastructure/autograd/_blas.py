"""
Backward rule for matrix multiplication.

For ``C = op_a(A) @ op_b(B)`` with output gradient ``G``:

- ``dA = G @ op_b(B)^T`` when A was not transposed, otherwise
  ``dA = op_b(B) @ G^T`` (the transpose of the former);
- ``dB = op_a(A)^T @ G`` when B was not transposed, otherwise
  ``dB = G^T @ op_a(A)``.

Every transpose is expressed through the GEMM transposition flags.
"""

from __future__ import annotations

from ._node import BinaryNode


class MatMulGrad(BinaryNode):
    def __init__(self, a, b, trans_a: bool, trans_b: bool, output) -> None:
        super().__init__(a, b, output)
        self.trans_a = bool(trans_a)
        self.trans_b = bool(trans_b)

    def backward(self) -> None:
        g = self.grad_out
        a, b = self.a.storage, self.b.storage
        ta, tb = self.trans_a, self.trans_b

        if self.wants(self.a):
            if not ta:
                da = g.matmul(b, trans_a=False, trans_b=not tb)
            else:
                da = b.matmul(g, trans_a=tb, trans_b=True)
            self.accumulate(self.a, da)

        if self.wants(self.b):
            if not tb:
                db = a.matmul(g, trans_a=not ta, trans_b=False)
            else:
                db = g.matmul(a, trans_a=True, trans_b=ta)
            self.accumulate(self.b, db)

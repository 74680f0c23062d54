"""
Shape and stride arithmetic for strided storages.

All helpers are pure functions over tuples of Python ints. They implement the
row-major stride model, the broadcasting rules (left-pad with ones, then each
dimension must match or be 1) and the inverse of broadcasting used when
gradients flow back into a smaller operand.

Strides are expressed in elements, never bytes. A stride of ``0`` means every
logical index along that dimension maps to the same buffer element.
"""

from __future__ import annotations

from typing import Sequence

from ...domain._errors import RankMismatchError, ShapeMismatchError


def normalize_shape(shape: Sequence[int]) -> tuple[int, ...]:
    """
    Convert a shape-like sequence to a tuple of non-negative ints.

    Raises
    ------
    ShapeMismatchError
        If a dimension is negative.
    TypeError
        If a dimension is not an integer.
    """
    out = []
    for d in shape:
        if isinstance(d, bool) or not isinstance(d, int) and not hasattr(d, "__index__"):
            raise TypeError(f"shape entries must be integers, got {d!r}")
        d = int(d)
        if d < 0:
            raise ShapeMismatchError(f"negative dimension in shape {tuple(shape)}")
        out.append(d)
    return tuple(out)


def numel(shape: Sequence[int]) -> int:
    n = 1
    for d in shape:
        n *= int(d)
    return n


def compute_strides(shape: Sequence[int]) -> tuple[int, ...]:
    """
    Compute row-major strides, rightmost dimension fastest-varying.

    ``stride[-1] == 1`` and ``stride[d] == stride[d + 1] * shape[d + 1]``.
    An empty shape yields an empty stride tuple.
    """
    stride = [1] * len(shape)
    for i in range(len(shape) - 2, -1, -1):
        stride[i] = stride[i + 1] * int(shape[i + 1])
    return tuple(stride)


def pad_shape(shape: Sequence[int], rank: int) -> tuple[int, ...]:
    """Left-pad `shape` with ones up to `rank` dimensions."""
    shape = tuple(int(d) for d in shape)
    if len(shape) > rank:
        raise RankMismatchError(f"cannot pad shape {shape} down to rank {rank}")
    return (1,) * (rank - len(shape)) + shape


def broadcast_shape(s1: Sequence[int], s2: Sequence[int]) -> tuple[int, ...]:
    """
    Compute the broadcast of two shapes.

    The smaller shape is left-padded with ones; then every dimension pair
    must be equal or contain a 1. The result rank is ``max(len(s1), len(s2))``
    and the operation is commutative.

    Raises
    ------
    ShapeMismatchError
        If some dimension pair is incompatible.
    """
    rank = max(len(s1), len(s2))
    a = pad_shape(s1, rank)
    b = pad_shape(s2, rank)

    out = []
    for i, (da, db) in enumerate(zip(a, b)):
        if da == db or db == 1:
            out.append(da)
        elif da == 1:
            out.append(db)
        else:
            raise ShapeMismatchError(
                f"Incompatible broadcast dimensions at axis {i}: "
                f"{tuple(s1)} vs {tuple(s2)}"
            )
    return tuple(out)


def broadcast_strides(
    shape: Sequence[int], stride: Sequence[int], target: Sequence[int]
) -> tuple[int, ...]:
    """
    Compute the strides of a zero-copy broadcast view.

    Parameters
    ----------
    shape, stride:
        Metadata of the source view.
    target:
        The broadcast shape; must have rank >= ``len(shape)``.

    Returns
    -------
    tuple[int, ...]
        ``0`` for padded dimensions and for size-1 dimensions stretched to a
        larger size, the source stride otherwise.

    Raises
    ------
    ShapeMismatchError
        If `shape` cannot be broadcast to `target`.
    """
    if len(target) < len(shape):
        raise ShapeMismatchError(
            f"cannot broadcast shape {tuple(shape)} to lower-rank {tuple(target)}"
        )
    diff = len(target) - len(shape)
    out = [0] * len(target)
    for i, (d, s) in enumerate(zip(shape, stride)):
        t = int(target[i + diff])
        if d == t:
            out[i + diff] = int(s)
        elif d == 1:
            out[i + diff] = 0
        else:
            raise ShapeMismatchError(
                f"Invalid broadcast of shape {tuple(shape)} to {tuple(target)}"
            )
    return tuple(out)


def sum_to_shape_axes(
    src_shape: Sequence[int], target_shape: Sequence[int]
) -> tuple[tuple[int, ...], int]:
    """
    Compute the reduction axes that undo a broadcast.

    Given the broadcast result shape `src_shape` and an operand's original
    `target_shape`, return the axes of `src_shape` that must be summed
    (keeping dimensions) and the number of leading axes that were added by
    left-padding and must be dropped afterwards.

    An axis is reduced when it is a padded leading axis, or when the padded
    target dimension is 1 while the source dimension is not.

    Raises
    ------
    ShapeMismatchError
        If `target_shape` has higher rank than `src_shape`, or could not have
        been broadcast to it.
    """
    src = tuple(int(d) for d in src_shape)
    tgt = tuple(int(d) for d in target_shape)

    if len(tgt) > len(src):
        raise ShapeMismatchError(
            f"target_shape rank {len(tgt)} > source rank {len(src)}"
        )

    pad = len(src) - len(tgt)
    padded_tgt = (1,) * pad + tgt

    for i, (sd, td) in enumerate(zip(src, padded_tgt)):
        if td not in (1, sd):
            raise ShapeMismatchError(
                f"Cannot sum_to_shape from {src} to {tgt}: "
                f"dim mismatch at axis {i}: src={sd}, target={td}"
            )

    axes = tuple(
        i
        for i, (sd, td) in enumerate(zip(src, padded_tgt))
        if i < pad or (td == 1 and sd != 1)
    )
    return axes, pad


def normalize_axis(axis: int, rank: int) -> int:
    """Resolve a possibly negative axis against `rank`."""
    if not -rank <= axis < rank:
        raise RankMismatchError(f"axis {axis} out of range for rank {rank}")
    return axis % rank


def validate_permutation(dims: Sequence[int], rank: int) -> tuple[int, ...]:
    """
    Check that `dims` is a permutation of ``range(rank)``.

    Raises
    ------
    ShapeMismatchError
        If `dims` has the wrong length or is not a permutation.
    """
    dims = tuple(int(d) for d in dims)
    if len(dims) != rank or sorted(dims) != list(range(rank)):
        raise ShapeMismatchError(
            f"permute dims {dims} is not a permutation of range({rank})"
        )
    return dims


def inverse_permutation(dims: Sequence[int]) -> tuple[int, ...]:
    inv = [0] * len(dims)
    for i, p in enumerate(dims):
        inv[int(p)] = i
    return tuple(inv)

"""Multi-scalar multiplication sum_i s_i * P_i.

Bucket (Pippenger) method built on the curve's add/double. The point list is
split into ranges with the fork-join executor; each range produces a partial
sum and the partial sums are added by the caller.
"""

import math
from typing import List, Optional, Sequence

from ptau_verify.primitives.curve import Curve
from ptau_verify.primitives.parallel import execute


def _window_size(n: int) -> int:
    """Bucket window width in bits for n points."""
    if n < 32:
        return 3
    return max(4, int(math.log2(n)) - 2)


def _bucket_msm(curve: Curve, points: Sequence, scalars: List[int], zero):
    """Single-threaded bucket method over one slice of the input."""
    max_bits = max((s.bit_length() for s in scalars), default=0)
    if max_bits == 0:
        return zero

    c = _window_size(len(points))
    mask = (1 << c) - 1
    n_windows = (max_bits + c - 1) // c

    result = zero
    for w in range(n_windows - 1, -1, -1):
        if not curve.is_inf(result):
            for _ in range(c):
                result = curve.double(result)

        shift = w * c
        buckets = [None] * mask
        for p, s in zip(points, scalars):
            digit = (s >> shift) & mask
            if digit:
                b = buckets[digit - 1]
                buckets[digit - 1] = p if b is None else curve.add(b, p)

        # sum_d d * B_d via running suffix sums
        running = zero
        window_sum = zero
        for b in reversed(buckets):
            if b is not None:
                running = curve.add(running, b)
            window_sum = curve.add(window_sum, running)

        result = curve.add(result, window_sum)
    return result


def multi_exp(
    curve: Curve,
    points: Sequence,
    scalars: Sequence[int],
    n_tasks: Optional[int] = None,
):
    """Compute sum_i scalars[i] * points[i].

    Works for G1 and G2 points alike; the identity is taken from the point type.
    Scalars are reduced modulo the group order.

    Args:
        curve: Curve providing the group operations
        points: Group elements
        scalars: Integers or scalar field elements, same length as points
        n_tasks: Degree of parallelism (defaults to the CPU count)
    """
    if len(points) != len(scalars):
        raise ValueError(f"MSM length mismatch: {len(points)} points, {len(scalars)} scalars")
    if len(points) == 0:
        return curve.g1_zero

    order = curve.curve_order
    reduced = [int(s) % order for s in scalars]
    p0 = points[0]
    zero = (p0[0].one(), p0[0].one(), p0[0].zero())

    partials = execute(
        len(points),
        lambda start, end: _bucket_msm(curve, points[start:end], reduced[start:end], zero),
        max_workers=n_tasks,
    )

    acc = zero
    for part in partials:
        acc = curve.add(acc, part)
    return acc

"""Pairing-based powers-of-tau consistency checks.

same_ratio(a1, b1, a2, b2) holds iff e(a1, a2) == e(b1, b2), evaluated as the
single multi-pairing e(a1, -a2) * e(b1, b2) == 1.

Intra-chunk check: with random r_0..r_{n-2},
    L1 = sum r_i * A_i,   L2 = sum r_i * A_{i+1}
and A_{i+1} = tau * A_i for all i implies e(L1, tau*G2) == e(L2, G2). A single
bad point makes the check pass with probability at most (n-1)/|Fr| when r is
sampled independently of the points.

Cross-round check: round t's secret must extend round t-1's,
    e(cur.tau_g1[1], prev.tau_g2[1]) == e(prev.tau_g1[1], cur.tau_g2[1]).
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Type

import galois

from ptau_verify.primitives.curve import Curve, G1Point, G2Operand, G2Point
from ptau_verify.primitives.field import random_scalars, scalar_field, to_ints
from ptau_verify.primitives.msm import multi_exp
from ptau_verify.primitives.parallel import default_workers
from ptau_verify.protocol.chunk import Chunk
from ptau_verify.protocol.errors import RatioCheckError

logger = logging.getLogger(__name__)


def same_ratio(curve: Curve, a1: G1Point, b1: G1Point, a2: G2Operand, b2: G2Operand) -> bool:
    """e(a1, a2) == e(b1, b2), checked with one batched pairing."""
    a2 = curve.prepare_g2(a2)
    neg_a2 = curve.prepare_g2(curve.neg(a2.point))
    return curve.pairing_check([(a1, neg_a2), (b1, b2)])


# --- Challenges ---

@dataclass(frozen=True)
class ChallengeVector:
    """Random scalars r_0..r_{size-1} for the randomized linear combination."""
    values: Tuple[int, ...]

    @classmethod
    def sample(cls, field: Type[galois.FieldArray], size: int) -> "ChallengeVector":
        return cls(values=tuple(to_ints(random_scalars(field, size))))

    def __len__(self) -> int:
        return len(self.values)


class SharedChallenges:
    """One challenge vector reused across every check of a run.

    All checks sharing the vector form a single joint statement: a failure
    shows that some checked chunk is inconsistent, and the soundness bound
    applies to the batch as a whole rather than to each chunk independently.
    The vector is sampled on first use; concurrent first uses sample once.
    """

    def __init__(self, field: Type[galois.FieldArray]) -> None:
        self.field = field
        self._vector: Optional[ChallengeVector] = None
        self._lock = threading.Lock()

    def get(self, size: int) -> ChallengeVector:
        with self._lock:
            if self._vector is None:
                self._vector = ChallengeVector.sample(self.field, size)
        if len(self._vector) != size:
            raise ValueError(
                f"Shared challenge vector has length {len(self._vector)}, requested {size}"
            )
        return self._vector


def linear_combination_g1(
    curve: Curve,
    points: Sequence[G1Point],
    challenges: ChallengeVector,
    n_tasks: Optional[int] = None,
) -> Tuple[G1Point, G1Point]:
    """L1 = sum r_i * A_i and L2 = sum r_i * A_{i+1}, computed concurrently."""
    n = len(points)
    if len(challenges) != n - 1:
        raise ValueError(f"Expected {n - 1} challenges for {n} points, got {len(challenges)}")
    half = max(1, (n_tasks or default_workers()) // 2)
    r = list(challenges.values)

    with ThreadPoolExecutor(max_workers=1) as pool:
        l1_future = pool.submit(multi_exp, curve, points[:n - 1], r, half)
        l2 = multi_exp(curve, points[1:], r, half)
        l1 = l1_future.result()
    return l1, l2


# --- Verifier ---

class RatioVerifier:
    """Intra-chunk powers-of-tau check and cross-round continuity check.

    By default every call samples a fresh challenge vector, so each check is an
    independent proof. Passing a SharedChallenges turns all checks made through
    this verifier into one joint statement.
    """

    def __init__(
        self,
        curve: Curve,
        g2_generator: G2Point,
        challenges: Optional[SharedChallenges] = None,
        n_tasks: Optional[int] = None,
    ) -> None:
        self.curve = curve
        self.field = scalar_field(curve)
        self.g2_generator = curve.prepare_g2(g2_generator)
        self.challenges = challenges
        self.n_tasks = n_tasks

    def _challenge_vector(self, size: int) -> ChallengeVector:
        if self.challenges is not None:
            return self.challenges.get(size)
        return ChallengeVector.sample(self.field, size)

    def is_powers_of_tau(self, tau_g1: Sequence[G1Point], tau_g2_1: G2Operand) -> bool:
        """True iff tau_g1[i+1] = tau * tau_g1[i] for all i (probabilistically).

        Args:
            tau_g1: Consecutive powers of tau in G1
            tau_g2_1: tau * G2 of the same contribution (from its first chunk)
        """
        if len(tau_g1) < 2:
            raise ValueError("Need at least two points for a ratio check")
        if self.curve.is_inf(self.curve.prepare_g2(tau_g2_1).point):
            # tau = 0 makes both sides the identity
            return False
        r = self._challenge_vector(len(tau_g1) - 1)
        l1, l2 = linear_combination_g1(self.curve, tau_g1, r, self.n_tasks)
        return same_ratio(self.curve, l1, l2, tau_g2_1, self.g2_generator)

    def check_powers_of_tau(self, tau_g1: Sequence[G1Point], tau_g2_1: G2Operand, chunk_index: int) -> None:
        if not self.is_powers_of_tau(tau_g1, tau_g2_1):
            raise RatioCheckError(f"chunk {chunk_index}: tau_g1 points are not successive powers of tau")

    def follows(self, current: Chunk, previous: Chunk) -> bool:
        """Cross-round continuity on chunks carrying G2 anchor data."""
        for name, chunk in (("current", current), ("previous", previous)):
            if len(chunk.tau_g2) < 2:
                raise ValueError(f"{name} chunk carries no tau_g2 anchor data")
        operands = (current.tau_g1[1], previous.tau_g1[1], previous.tau_g2[1], current.tau_g2[1])
        # An identity on either side makes the pairing equation trivially hold
        if any(self.curve.is_inf(p) for p in operands):
            return False
        return same_ratio(self.curve, *operands)

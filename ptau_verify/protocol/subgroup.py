"""Parallel prime-order subgroup membership checks for decoded chunks."""

import logging
from typing import Callable, List, Optional, Sequence

from ptau_verify.primitives.curve import Curve, G1Point, G2Point
from ptau_verify.primitives.parallel import execute
from ptau_verify.protocol.chunk import Chunk
from ptau_verify.protocol.errors import AnchorError, SubgroupError

logger = logging.getLogger(__name__)


class SubgroupVerifier:
    """Checks that every point of a chunk is a non-identity element of the
    prime-order subgroup.

    Failures are aggregated: every offending index of a category is reported,
    not just the first one, so a ceremony with several bad contributions can be
    diagnosed in one pass.
    """

    def __init__(
        self,
        curve: Curve,
        g1_generator: G1Point,
        g2_generator: G2Point,
        max_workers: Optional[int] = None,
    ) -> None:
        self.curve = curve
        self.g1_generator = g1_generator
        self.g2_generator = g2_generator
        self.max_workers = max_workers

    def find_invalid(self, points: Sequence, predicate: Callable[[object], bool]) -> List[int]:
        """Indices of points failing predicate, checked over parallel ranges."""

        def check_range(start: int, end: int) -> List[int]:
            return [i for i in range(start, end) if not predicate(points[i])]

        failures: List[int] = []
        for part in execute(len(points), check_range, self.max_workers):
            failures.extend(part)
        return sorted(failures)

    # Ceremony points are tau^i or alpha * tau^i with nonzero secrets, never the
    # identity. An identity entry means a zero secret.

    def valid_g1(self, p: G1Point) -> bool:
        return not self.curve.is_inf(p) and self.curve.in_subgroup_g1(p)

    def valid_g2(self, p: G2Point) -> bool:
        return not self.curve.is_inf(p) and self.curve.in_subgroup_g2(p)

    def verify(self, chunk: Chunk) -> None:
        """Raise SubgroupError / AnchorError if any point is invalid."""
        c = self.curve

        bad = self.find_invalid(chunk.tau_g1, self.valid_g1)
        if bad:
            raise SubgroupError("tau_g1", bad)

        if not chunk.is_first:
            return

        if not c.eq(chunk.tau_g1[0], self.g1_generator):
            raise AnchorError("tau_g1[0] is not the prime subgroup generator")
        if not c.eq(chunk.tau_g2[0], self.g2_generator):
            raise AnchorError("tau_g2[0] is not the prime subgroup generator")

        bad = self.find_invalid(chunk.tau_g2, self.valid_g2)
        if bad:
            raise SubgroupError("tau_g2", bad)

        bad = self.find_invalid(chunk.alpha_g1, self.valid_g1)
        if bad:
            raise SubgroupError("alpha_g1", bad)

        logger.debug(
            "first chunk: %d tau_g1, %d tau_g2, %d alpha_g1 points in subgroup",
            len(chunk.tau_g1), len(chunk.tau_g2), len(chunk.alpha_g1),
        )

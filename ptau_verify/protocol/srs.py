"""Streaming assembly of a KZG SRS from verified chunks, and its self-check."""

import logging
from typing import List, Optional

from ptau_verify.primitives.curve import Curve, G1Point, G2Point, PreparedG2
from ptau_verify.primitives.field import random_scalars, scalar_field
from ptau_verify.primitives.kzg import (
    SRS,
    CommitmentScheme,
    ProvingKey,
    VerificationError,
    new_verifying_key,
)
from ptau_verify.protocol.chunk import Chunk
from ptau_verify.protocol.errors import SelfCheckError

logger = logging.getLogger(__name__)

DEFAULT_SELF_CHECK_SIZE = 60
DEFAULT_SELF_CHECK_POINT = 4321


class SRSAssembler:
    """Accumulates chunk points into a proving key of nb_chunks * nb_tau_g1 points.

    The proving-key buffer is sized up front and filled in chunk order. The
    anchor chunk supplies tau * G2 for the verifying key.
    """

    def __init__(
        self,
        curve: Curve,
        g1_generator: G1Point,
        g2_generator: G2Point,
        nb_chunks: int,
        nb_tau_g1: int,
    ) -> None:
        self.curve = curve
        self.g1_generator = g1_generator
        self.g2_generator = g2_generator
        self.capacity = nb_chunks * nb_tau_g1
        self._g1: List[Optional[G1Point]] = [None] * self.capacity
        self._filled = 0
        self._anchor_lines: Optional[PreparedG2] = None
        self._srs: Optional[SRS] = None

    @property
    def filled(self) -> int:
        return self._filled

    @property
    def anchor_lines(self) -> Optional[PreparedG2]:
        """Prepared tau * G2, available once the anchor chunk is accumulated."""
        return self._anchor_lines

    def accumulate(self, chunk: Chunk) -> None:
        """Append chunk.tau_g1 to the proving key."""
        if self._srs is not None:
            raise RuntimeError("SRS already finalized")
        n = len(chunk.tau_g1)
        if self._filled + n > self.capacity:
            raise ValueError(
                f"Chunk of {n} points overflows proving key ({self._filled}/{self.capacity} filled)"
            )
        if chunk.is_first:
            if self._filled != 0:
                raise ValueError("Anchor chunk must be accumulated first")
            self._anchor_lines = self.curve.prepare_g2(chunk.tau_g2[1])

        self._g1[self._filled:self._filled + n] = chunk.tau_g1
        self._filled += n

    def finalize(self) -> SRS:
        """Freeze the accumulated points into an SRS."""
        if self._srs is not None:
            return self._srs
        if self._filled != self.capacity:
            raise ValueError(f"SRS incomplete: {self._filled}/{self.capacity} points accumulated")
        if self._anchor_lines is None:
            raise ValueError("SRS has no tau * G2: anchor chunk was never accumulated")

        self._srs = SRS(
            pk=ProvingKey(g1=list(self._g1)),
            vk=new_verifying_key(self.curve, self.g1_generator, self.g2_generator, self._anchor_lines),
        )
        self._g1 = []
        return self._srs


def self_check(
    scheme: CommitmentScheme,
    srs: SRS,
    curve: Curve,
    size: int = DEFAULT_SELF_CHECK_SIZE,
    point: Optional[int] = DEFAULT_SELF_CHECK_POINT,
) -> None:
    """Commit to a random polynomial, open it, and verify the opening.

    Guards against pipeline bugs; inputs already passed the ratio checks.

    Args:
        scheme: Commitment scheme providing commit/open/verify/evaluate
        srs: Assembled SRS
        curve: Curve of the SRS (selects the scalar field)
        size: Number of coefficients, clamped to the proving key size
        point: Opening point; None samples a random one
    """
    fr = scalar_field(curve)
    size = min(size, len(srs.pk.g1))
    if size < 1:
        raise SelfCheckError("SRS proving key is empty")
    poly = random_scalars(fr, size)
    z = int(random_scalars(fr, 1)[0]) if point is None else point

    try:
        digest = scheme.commit(poly, srs.pk)
        proof = scheme.open(poly, z, srs.pk)
    except ValueError as exc:
        raise SelfCheckError(f"failed to commit/open polynomial: {exc}") from exc

    expected = scheme.evaluate(poly, z)
    if int(proof.claimed_value) != int(expected):
        raise SelfCheckError("inconsistent claimed value")

    try:
        scheme.verify(digest, proof, z, srs.vk)
    except VerificationError as exc:
        raise SelfCheckError(f"failed to verify proof: {exc}") from exc

    logger.info("SRS self-check passed (degree %d, point %d)", size - 1, z)

"""Continuity between consecutive ceremony rounds and contributions.

Round-level: chunk i of round t must build on chunk i of round t-1. The check
needs tau in G2 from both rounds, so it applies to chunks that carry G2 anchor
data (in the current layout, chunk 0).

Contribution-level: ceremonies published as a flat list of participant
contributions chain each contribution to its predecessor with the same
pairing relation.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from ptau_verify.primitives.curve import Curve, G1Point, G2Point
from ptau_verify.protocol.chunk import Chunk, ChunkDecoder
from ptau_verify.protocol.errors import ContinuityError
from ptau_verify.protocol.ratio import RatioVerifier, same_ratio

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_PATH_TEMPLATE = "chunk_{index}/contribution_0.verified"


# --- Rounds ---

class CeremonyRound:
    """Chunk files of one round, decoded on demand.

    Keeps only the most recently decoded chunk; tau * G2 from the anchor chunk
    is retained once chunk 0 has been decoded.
    """

    def __init__(
        self,
        name: str,
        root: Path,
        decoder: ChunkDecoder,
        path_template: str = DEFAULT_CHUNK_PATH_TEMPLATE,
    ) -> None:
        self.name = name
        self.root = Path(root)
        self.decoder = decoder
        self.path_template = path_template
        self.anchor_tau_g2: Optional[G2Point] = None
        self._cached_index: Optional[int] = None
        self._cached: Optional[Chunk] = None

    def chunk_path(self, index: int) -> Path:
        return self.root / self.path_template.format(index=index)

    def load(self, index: int) -> Chunk:
        if self._cached_index == index and self._cached is not None:
            return self._cached
        chunk = self.decoder.decode(self.chunk_path(index), is_first=(index == 0))
        if chunk.is_first:
            self.anchor_tau_g2 = chunk.tau_g2[1]
        self._cached_index, self._cached = index, chunk
        return chunk

    def __repr__(self) -> str:
        return f"CeremonyRound({self.name!r}, {str(self.root)!r})"


class ContinuityChecker:
    """Cross-round check at an aligned chunk index."""

    def __init__(self, ratio: RatioVerifier) -> None:
        self.ratio = ratio

    def compare(self, current_round: CeremonyRound, previous_round: CeremonyRound, chunk_index: int) -> bool:
        current = current_round.load(chunk_index)
        previous = previous_round.load(chunk_index)
        if not (current.tau_g2 and previous.tau_g2):
            raise ValueError(f"chunk {chunk_index} carries no G2 anchor data")
        ok = self.ratio.follows(current, previous)
        logger.debug(
            "continuity %s -> %s at chunk %d: %s",
            previous_round.name, current_round.name, chunk_index, ok,
        )
        return ok

    def check(self, current_round: CeremonyRound, previous_round: CeremonyRound, chunk_index: int) -> None:
        if not self.compare(current_round, previous_round, chunk_index):
            raise ContinuityError(
                f"tau_g1[1] of chunk {chunk_index} in {current_round.name} "
                f"does not follow {previous_round.name}"
            )


# --- Contributions ---

@dataclass
class Contribution:
    """One participant's published powers.

    Attributes:
        curve: Curve the points live on
        g1: [tau * G1, tau^2 * G1, ...]
        g2: [tau * G2, ...]
    """
    curve: Curve
    g1: List[G1Point] = field(default_factory=list)
    g2: List[G2Point] = field(default_factory=list)

    def follows(self, previous: "Contribution") -> bool:
        """e(self.g1[0], previous.g2[0]) == e(previous.g1[0], self.g2[0])."""
        operands = (self.g1[0], previous.g1[0], previous.g2[0], self.g2[0])
        if any(self.curve.is_inf(p) for p in operands):
            return False
        return same_ratio(self.curve, *operands)


def verify_contribution_chain(contributions: Iterable[Contribution]) -> Contribution:
    """Check each contribution follows its predecessor; return the last one."""
    previous: Optional[Contribution] = None
    count = 0
    for i, contribution in enumerate(contributions):
        if previous is not None:
            logger.info("processing contribution %d", i)
            if not contribution.follows(previous):
                raise ContinuityError(f"contribution {i} does not follow contribution {i - 1}")
        previous = contribution
        count += 1
    if previous is None:
        raise ValueError("No contributions to verify")
    logger.info("all %d contributions are valid", count)
    return previous


def contribution_from_chunk(chunk: Chunk, curve: Curve) -> Contribution:
    """View an anchor chunk as a contribution (dropping the generator entries)."""
    if not chunk.tau_g2:
        raise ValueError("chunk carries no G2 anchor data")
    return Contribution(curve=curve, g1=list(chunk.tau_g1[1:]), g2=list(chunk.tau_g2[1:]))

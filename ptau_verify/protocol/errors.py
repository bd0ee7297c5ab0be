"""Ceremony verification errors.

Every error is terminal for a run: the verifier either certifies the ceremony
or refuses to.
"""

from typing import List, Optional


class CeremonyError(Exception):
    """Base class for all verification failures."""


class DecodeError(CeremonyError, ValueError):
    """Truncated, oversized or non-canonical contribution file."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class SubgroupError(CeremonyError):
    """Points outside the prime-order subgroup.

    Attributes:
        category: Point sequence the failures belong to ("tau_g1", "tau_g2", "alpha_g1")
        indices: Every failing index, sorted
    """

    def __init__(self, category: str, indices: List[int]) -> None:
        self.category = category
        self.indices = sorted(indices)
        shown = ", ".join(f"{category}[{i}]" for i in self.indices[:16])
        more = f" (+{len(self.indices) - 16} more)" if len(self.indices) > 16 else ""
        super().__init__(f"{len(self.indices)} point(s) not in subgroup: {shown}{more}")


class AnchorError(CeremonyError):
    """First chunk does not start with the expected group generators."""


class RatioCheckError(CeremonyError):
    """Chunk points are not successive powers of the same tau."""


class ContinuityError(CeremonyError):
    """A round does not build on the previous round's contribution."""


class SelfCheckError(CeremonyError):
    """The assembled SRS failed its commit/open/verify smoke test."""

"""Protocol - per-chunk ceremony verification steps."""

from ptau_verify.protocol.chunk import Chunk, ChunkDecoder, ChunkLayout, encode_chunk
from ptau_verify.protocol.continuity import (
    CeremonyRound,
    ContinuityChecker,
    Contribution,
    verify_contribution_chain,
)
from ptau_verify.protocol.errors import (
    AnchorError,
    CeremonyError,
    ContinuityError,
    DecodeError,
    RatioCheckError,
    SelfCheckError,
    SubgroupError,
)
from ptau_verify.protocol.ratio import ChallengeVector, RatioVerifier, SharedChallenges, same_ratio
from ptau_verify.protocol.srs import SRSAssembler, self_check
from ptau_verify.protocol.subgroup import SubgroupVerifier

__all__ = [
    # Chunks
    "Chunk",
    "ChunkLayout",
    "ChunkDecoder",
    "encode_chunk",
    # Checks
    "SubgroupVerifier",
    "RatioVerifier",
    "ChallengeVector",
    "SharedChallenges",
    "same_ratio",
    "CeremonyRound",
    "ContinuityChecker",
    "Contribution",
    "verify_contribution_chain",
    # SRS
    "SRSAssembler",
    "self_check",
    # Errors
    "CeremonyError",
    "DecodeError",
    "SubgroupError",
    "AnchorError",
    "RatioCheckError",
    "ContinuityError",
    "SelfCheckError",
]

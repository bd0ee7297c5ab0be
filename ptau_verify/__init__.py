"""
Powers-of-Tau Ceremony Verifier

Verifies a chunked, multi-round powers-of-tau trusted setup and assembles a
KZG structured reference string from its last round.

This package provides:
- Binary decoding of contribution chunks
- Parallel prime-order subgroup checks
- Randomized pairing checks that chunk points are successive powers of tau
- Cross-round continuity checks
- Streaming SRS assembly with a commit/open/verify self-check

Usage:
    from ptau_verify import CeremonyConfig, verify_ceremony

    config = CeremonyConfig.from_json("ceremony.json")
    srs = verify_ceremony(config)
"""

from ptau_verify.ceremony import verify_ceremony
from ptau_verify.config import CeremonyConfig
from ptau_verify.prepare import prepare_srs

__version__ = "0.1.0"
__all__ = [
    "CeremonyConfig",
    "verify_ceremony",
    "prepare_srs",
]

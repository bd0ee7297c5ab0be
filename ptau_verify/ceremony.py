"""Top-level ceremony verification.

Verifies the last two rounds of a chunked powers-of-tau ceremony and builds a
KZG SRS from the last one. Chunk by chunk:

    1. Decode chunk i of the current and the previous round
    2. Check subgroup membership of both (and the generators on chunk 0)
    3. On chunk 0, check the current round builds on the previous one
    4. Check the current chunk's points are successive powers of tau
    5. Append the current chunk's points to the SRS

After the last chunk the SRS is finalized, self-checked and written out.
Any failure raises a CeremonyError and ends the run.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

from ptau_verify.config import CeremonyConfig
from ptau_verify.primitives.field import scalar_field
from ptau_verify.primitives.kzg import KZG, SRS, write_srs
from ptau_verify.protocol.chunk import Chunk, ChunkDecoder
from ptau_verify.protocol.continuity import CeremonyRound, ContinuityChecker
from ptau_verify.protocol.ratio import RatioVerifier, SharedChallenges
from ptau_verify.protocol.srs import SRSAssembler, self_check
from ptau_verify.protocol.subgroup import SubgroupVerifier

logger = logging.getLogger(__name__)


def _load_pair(current: CeremonyRound, previous: CeremonyRound, index: int) -> Tuple[Chunk, Chunk]:
    """Decode chunk index of both rounds concurrently."""
    with ThreadPoolExecutor(max_workers=1) as pool:
        prev_future = pool.submit(previous.load, index)
        curr = current.load(index)
        prev = prev_future.result()
    return curr, prev


def verify_ceremony(config: CeremonyConfig) -> Optional[SRS]:
    """Verify the configured rounds.

    Returns:
        The assembled SRS when config.output_srs is set, None otherwise.
    """
    curve = config.get_curve()
    g1_gen, g2_gen = config.generators()
    layout = config.layout

    decoder = ChunkDecoder(curve, layout)
    current_round = CeremonyRound(
        config.current_round, config.round_dir(config.current_round), decoder, config.chunk_path_template
    )
    previous_round = CeremonyRound(
        config.previous_round, config.round_dir(config.previous_round), decoder, config.chunk_path_template
    )

    subgroup = SubgroupVerifier(curve, g1_gen, g2_gen, config.max_workers)
    shared = SharedChallenges(scalar_field(curve)) if config.reuse_challenges else None
    if shared is not None:
        logger.info("reusing one challenge vector: ratio checks form a single joint statement")
    ratio = RatioVerifier(curve, g2_gen, challenges=shared, n_tasks=config.max_workers)
    continuity = ContinuityChecker(ratio)

    assembler = None
    if config.output_srs:
        assembler = SRSAssembler(curve, g1_gen, g2_gen, config.nb_chunks, layout.nb_tau_g1)

    logger.info(
        "verifying %s against %s: %d chunks of %d points on %s",
        current_round.name, previous_round.name, config.nb_chunks, layout.nb_tau_g1, curve.name,
    )

    for i in range(config.nb_chunks):
        logger.info("verifying chunk %d", i)

        curr, prev = _load_pair(current_round, previous_round, i)

        if config.subgroup_checks:
            subgroup.verify(curr)
            subgroup.verify(prev)

        if i == 0:
            continuity.check(current_round, previous_round, i)

        ratio.check_powers_of_tau(curr.tau_g1, current_round.anchor_tau_g2, i)

        if assembler is not None:
            assembler.accumulate(curr)

    logger.info("all %d chunks of %s are valid", config.nb_chunks, current_round.name)

    if assembler is None:
        return None

    srs = assembler.finalize()
    logger.info("running sanity check on SRS")
    self_check(KZG(curve, config.max_workers), srs, curve, size=config.self_check_size)

    logger.info("writing SRS to file %s", config.output_srs)
    n_bytes = write_srs(srs, config.output_srs, curve)
    logger.info("wrote %d bytes", n_bytes)
    return srs

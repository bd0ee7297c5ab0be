"""Tests for round loading and cross-round / cross-contribution continuity."""

import pytest

from ptau_verify.primitives.curve import BN254
from ptau_verify.protocol.chunk import ChunkDecoder
from ptau_verify.protocol.continuity import (
    CeremonyRound,
    ContinuityChecker,
    Contribution,
    contribution_from_chunk,
    verify_contribution_chain,
)
from ptau_verify.protocol.errors import ContinuityError, DecodeError
from ptau_verify.protocol.ratio import RatioVerifier
from tests.synthetic import (
    CURRENT_ROUND,
    CURRENT_TAU,
    PREVIOUS_ROUND,
    SMALL_LAYOUT,
    make_chunk,
    write_ceremony,
)

C = BN254


def load_rounds(root):
    decoder = ChunkDecoder(C, SMALL_LAYOUT)
    return (
        CeremonyRound(CURRENT_ROUND, root / CURRENT_ROUND, decoder),
        CeremonyRound(PREVIOUS_ROUND, root / PREVIOUS_ROUND, decoder),
    )


class TestCeremonyRound:

    def test_chunk_path(self, rounds_dir) -> None:
        current, _ = load_rounds(rounds_dir)
        assert current.chunk_path(3) == rounds_dir / CURRENT_ROUND / "chunk_3" / "contribution_0.verified"

    def test_custom_path_template(self, tmp_path) -> None:
        decoder = ChunkDecoder(C, SMALL_LAYOUT)
        r = CeremonyRound("r", tmp_path, decoder, path_template="{index:04d}.bin")
        assert r.chunk_path(7) == tmp_path / "0007.bin"

    def test_anchor_recorded_from_first_chunk(self, rounds_dir) -> None:
        current, _ = load_rounds(rounds_dir)
        assert current.anchor_tau_g2 is None

        chunk = current.load(0)
        assert chunk.is_first
        assert C.eq(current.anchor_tau_g2, C.multiply(C.g2, CURRENT_TAU))

        assert not current.load(1).is_first
        assert current.anchor_tau_g2 is not None

    def test_single_slot_cache(self, rounds_dir) -> None:
        current, _ = load_rounds(rounds_dir)
        first = current.load(1)
        assert current.load(1) is first
        current.load(0)
        assert current.load(1) is not first

    def test_missing_chunk(self, tmp_path) -> None:
        current, _ = load_rounds(tmp_path)
        with pytest.raises(DecodeError):
            current.load(0)


class TestContinuityChecker:

    def test_consistent_rounds(self, rounds_dir) -> None:
        current, previous = load_rounds(rounds_dir)
        checker = ContinuityChecker(RatioVerifier(C, C.g2))
        assert checker.compare(current, previous, 0)
        checker.check(current, previous, 0)

    def test_broken_round(self, tmp_path) -> None:
        root = write_ceremony(tmp_path, C, g2_tau=CURRENT_TAU + 1)
        current, previous = load_rounds(root)
        checker = ContinuityChecker(RatioVerifier(C, C.g2))

        assert not checker.compare(current, previous, 0)
        with pytest.raises(ContinuityError, match=f"chunk 0 in {CURRENT_ROUND}"):
            checker.check(current, previous, 0)

    def test_chunks_without_anchor_data(self, rounds_dir) -> None:
        current, previous = load_rounds(rounds_dir)
        checker = ContinuityChecker(RatioVerifier(C, C.g2))
        with pytest.raises(ValueError, match="no G2 anchor data"):
            checker.compare(current, previous, 1)


def chain(taus, g2_taus=None):
    g2_taus = taus if g2_taus is None else g2_taus
    return [
        Contribution(
            curve=C,
            g1=[C.multiply(C.g1, t), C.multiply(C.g1, t * t)],
            g2=[C.multiply(C.g2, s)],
        )
        for t, s in zip(taus, g2_taus)
    ]


class TestContributionChain:

    def test_valid_chain_returns_last(self) -> None:
        contributions = chain([2, 2 * 3, 2 * 3 * 5])
        assert verify_contribution_chain(iter(contributions)) is contributions[-1]

    def test_single_contribution(self) -> None:
        contributions = chain([7])
        assert verify_contribution_chain(contributions) is contributions[0]

    def test_broken_link_names_position(self) -> None:
        contributions = chain([2, 6, 30], g2_taus=[2, 6, 31])
        with pytest.raises(ContinuityError, match="contribution 2 does not follow contribution 1"):
            verify_contribution_chain(contributions)

    def test_zero_tau_link_rejected(self) -> None:
        contributions = chain([2, 0])
        with pytest.raises(ContinuityError, match="contribution 1 does not follow contribution 0"):
            verify_contribution_chain(contributions)

    def test_empty_chain(self) -> None:
        with pytest.raises(ValueError, match="No contributions"):
            verify_contribution_chain([])

    def test_contribution_from_anchor_chunk(self) -> None:
        previous = contribution_from_chunk(make_chunk(C, SMALL_LAYOUT, 5, 0), C)
        current = contribution_from_chunk(make_chunk(C, SMALL_LAYOUT, 55, 0), C)
        assert C.eq(current.g1[0], C.multiply(C.g1, 55))
        assert current.follows(previous)

    def test_contribution_requires_anchor_chunk(self) -> None:
        with pytest.raises(ValueError):
            contribution_from_chunk(make_chunk(C, SMALL_LAYOUT, 5, 1), C)

"""Tests for prime-order subgroup checks.

Run on BLS12-381, whose G1 has a non-trivial cofactor.
"""

from dataclasses import replace

import pytest

from ptau_verify.primitives.curve import BLS12_381
from ptau_verify.protocol.errors import AnchorError, SubgroupError
from ptau_verify.protocol.subgroup import SubgroupVerifier
from tests.synthetic import SMALL_LAYOUT, make_chunk, replace_point

C = BLS12_381
ORDER3_POINT = C.g1_from_affine(0, 2)   # on the curve, outside the subgroup
OFF_CURVE_G1 = C.g1_from_affine(1, 1)
OFF_CURVE_G2 = C.g2_from_affine((1, 0), (1, 0))


@pytest.fixture(scope="module")
def first_chunk():
    return make_chunk(C, SMALL_LAYOUT, 7, 0)


@pytest.fixture(scope="module")
def later_chunk():
    return make_chunk(C, SMALL_LAYOUT, 7, 1)


@pytest.fixture
def verifier() -> SubgroupVerifier:
    return SubgroupVerifier(C, C.g1, C.g2, max_workers=3)


class TestSubgroupVerifier:

    def test_valid_chunks(self, verifier, first_chunk, later_chunk) -> None:
        verifier.verify(first_chunk)
        verifier.verify(later_chunk)

    def test_all_failing_indices_reported(self, verifier, later_chunk) -> None:
        tau_g1 = replace_point(later_chunk.tau_g1, 3, OFF_CURVE_G1)
        tau_g1 = replace_point(tau_g1, 1, ORDER3_POINT)

        with pytest.raises(SubgroupError) as excinfo:
            verifier.verify(replace(later_chunk, tau_g1=tau_g1))
        assert excinfo.value.category == "tau_g1"
        assert excinfo.value.indices == [1, 3]
        assert "tau_g1[1], tau_g1[3]" in str(excinfo.value)

    def test_anchor_g1(self, verifier, first_chunk) -> None:
        tau_g1 = replace_point(first_chunk.tau_g1, 0, C.double(C.g1))
        with pytest.raises(AnchorError, match="tau_g1"):
            verifier.verify(replace(first_chunk, tau_g1=tau_g1))

    def test_anchor_g2(self, verifier, first_chunk) -> None:
        tau_g2 = replace_point(first_chunk.tau_g2, 0, C.double(C.g2))
        with pytest.raises(AnchorError, match="tau_g2"):
            verifier.verify(replace(first_chunk, tau_g2=tau_g2))

    def test_anchor_only_checked_on_first_chunk(self, verifier, later_chunk) -> None:
        # Chunk 1 starts at tau^n, not at the generator
        assert not C.eq(later_chunk.tau_g1[0], C.g1)
        verifier.verify(later_chunk)

    def test_bad_tau_g2(self, verifier, first_chunk) -> None:
        tau_g2 = replace_point(first_chunk.tau_g2, 1, OFF_CURVE_G2)
        with pytest.raises(SubgroupError) as excinfo:
            verifier.verify(replace(first_chunk, tau_g2=tau_g2))
        assert excinfo.value.category == "tau_g2"
        assert excinfo.value.indices == [1]

    def test_bad_alpha_g1(self, verifier, first_chunk) -> None:
        alpha_g1 = replace_point(first_chunk.alpha_g1, 0, ORDER3_POINT)
        with pytest.raises(SubgroupError) as excinfo:
            verifier.verify(replace(first_chunk, alpha_g1=alpha_g1))
        assert excinfo.value.category == "alpha_g1"
        assert excinfo.value.indices == [0]

    def test_tau_g1_checked_before_anchor(self, verifier, first_chunk) -> None:
        tau_g1 = replace_point(first_chunk.tau_g1, 0, ORDER3_POINT)
        with pytest.raises(SubgroupError):
            verifier.verify(replace(first_chunk, tau_g1=tau_g1))

    @pytest.mark.parametrize("category, index", [("tau_g1", 2), ("tau_g2", 1), ("alpha_g1", 0)])
    def test_identity_rejected(self, verifier, first_chunk, category: str, index: int) -> None:
        zero = C.g2_zero if category == "tau_g2" else C.g1_zero
        points = replace_point(getattr(first_chunk, category), index, zero)
        with pytest.raises(SubgroupError) as excinfo:
            verifier.verify(replace(first_chunk, **{category: points}))
        assert excinfo.value.category == category
        assert excinfo.value.indices == [index]

    def test_zero_tau_chunk_rejected(self, verifier) -> None:
        """tau = 0 leaves only the generator at index 0."""
        with pytest.raises(SubgroupError) as excinfo:
            verifier.verify(make_chunk(C, SMALL_LAYOUT, 0, 0))
        assert excinfo.value.category == "tau_g1"
        assert excinfo.value.indices == [1, 2, 3]

    @pytest.mark.parametrize("max_workers", [1, 2, 5])
    def test_find_invalid_sorted(self, max_workers: int) -> None:
        verifier = SubgroupVerifier(C, C.g1, C.g2, max_workers=max_workers)
        points = [C.g1, ORDER3_POINT, C.g1, OFF_CURVE_G1, ORDER3_POINT]
        assert verifier.find_invalid(points, C.in_subgroup_g1) == [1, 3, 4]


class TestSubgroupError:

    def test_indices_sorted(self) -> None:
        err = SubgroupError("alpha_g1", [5, 2, 9])
        assert err.indices == [2, 5, 9]
        assert str(err).startswith("3 point(s) not in subgroup")

    def test_long_lists_truncated_in_message(self) -> None:
        err = SubgroupError("tau_g1", list(range(20)))
        assert len(err.indices) == 20
        assert "tau_g1[15]" in str(err)
        assert "tau_g1[16]" not in str(err)
        assert "(+4 more)" in str(err)

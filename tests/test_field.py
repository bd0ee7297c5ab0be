"""Tests for scalar field helpers."""

import pytest

from ptau_verify.primitives.curve import BLS12_381, BN254
from ptau_verify.primitives.field import (
    divide_by_linear,
    horner_eval,
    powers,
    random_scalars,
    root_of_unity,
    scalar_field,
)


class TestScalarField:

    @pytest.mark.parametrize("curve", [BLS12_381, BN254], ids=lambda c: c.name)
    def test_field_order_is_group_order(self, curve) -> None:
        fr = scalar_field(curve)
        assert fr.order == curve.curve_order
        assert scalar_field(curve) is fr

    def test_random_scalars(self) -> None:
        fr = scalar_field(BN254)
        values = random_scalars(fr, 16)
        assert len(values) == 16
        assert all(0 <= int(v) < fr.order for v in values)
        assert len(random_scalars(fr, 0)) == 0

    @pytest.mark.parametrize("curve,n", [(BLS12_381, 8), (BN254, 16), (BN254, 1)])
    def test_root_of_unity_has_exact_order(self, curve, n: int) -> None:
        fr = scalar_field(curve)
        w = int(root_of_unity(fr, n))
        assert pow(w, n, fr.order) == 1
        if n > 1:
            assert pow(w, n // 2, fr.order) != 1


class TestPolynomials:

    def test_horner_matches_naive_evaluation(self) -> None:
        fr = scalar_field(BN254)
        coeffs = fr([3, 0, 5, 7])
        x = 11
        expected = (3 + 5 * x ** 2 + 7 * x ** 3) % fr.order
        assert int(horner_eval(coeffs, x)) == expected

    def test_horner_empty_polynomial(self) -> None:
        fr = scalar_field(BN254)
        assert int(horner_eval(fr.Zeros(0), 5)) == 0

    def test_divide_by_linear(self) -> None:
        """p(X) = q(X) (X - z) + p(z)."""
        fr = scalar_field(BN254)
        p = random_scalars(fr, 9)
        z = 4321
        q, rem = divide_by_linear(p, z)

        assert len(q) == 8
        assert int(rem) == int(horner_eval(p, z))

        x = fr(987654321)
        lhs = horner_eval(p, x)
        rhs = horner_eval(q, x) * (x - fr(z)) + rem
        assert int(lhs) == int(rhs)

    def test_divide_constant(self) -> None:
        fr = scalar_field(BN254)
        q, rem = divide_by_linear(fr([42]), 9)
        assert len(q) == 0
        assert int(rem) == 42

    def test_powers(self) -> None:
        fr = scalar_field(BN254)
        assert [int(v) for v in powers(fr(3), 4)] == [1, 3, 9, 27]

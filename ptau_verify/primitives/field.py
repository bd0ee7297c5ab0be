"""Scalar field GF(r) of a pairing-friendly curve.

Uses the galois library for all scalar arithmetic. The field class is built
once per curve; the multiplicative generator is supplied by the curve so galois
does not have to factor r - 1.
"""

import secrets
from functools import lru_cache
from typing import List, Sequence, Tuple, Type

import galois

from ptau_verify.primitives.curve import Curve

# --- Field Construction ---


@lru_cache(maxsize=None)
def scalar_field(curve: Curve) -> Type[galois.FieldArray]:
    """Return the galois prime field GF(r) for the curve's group order."""
    return galois.GF(curve.curve_order, primitive_element=curve.scalar_generator, verify=False)


# --- Sampling ---

def random_scalars(field: Type[galois.FieldArray], n: int) -> galois.FieldArray:
    """Sample n field elements from the operating system CSPRNG."""
    if n == 0:
        return field.Zeros(0)
    return field([secrets.randbelow(field.order) for _ in range(n)])


def to_ints(values: Sequence) -> List[int]:
    """Convert a galois array (or any int-like sequence) to plain Python ints."""
    return [int(v) for v in values]


# --- Polynomial Helpers ---
# Polynomials are coefficient arrays in ascending order: p[0] + p[1] X + ...


def horner_eval(coeffs: galois.FieldArray, point) -> galois.FieldArray:
    """Evaluate sum_i coeffs[i] X^i at point using Horner's method."""
    field = type(coeffs)
    if len(coeffs) == 0:
        return field(0)
    x = field(int(point))
    res = coeffs[-1]
    for i in range(len(coeffs) - 2, -1, -1):
        res = res * x + coeffs[i]
    return res


def divide_by_linear(coeffs: galois.FieldArray, point) -> Tuple[galois.FieldArray, galois.FieldArray]:
    """Synthetic division of p(X) by (X - point).

    Returns:
        (quotient, remainder) with p(X) = quotient(X) * (X - point) + remainder.
        The remainder equals p(point).
    """
    field = type(coeffs)
    n = len(coeffs)
    if n == 0:
        return field.Zeros(0), field(0)
    z = field(int(point))
    quotient = field.Zeros(n - 1)
    rem = coeffs[n - 1]
    for i in range(n - 2, -1, -1):
        quotient[i] = rem
        rem = coeffs[i] + rem * z
    return quotient, rem


# --- Roots of Unity ---

def root_of_unity(field: Type[galois.FieldArray], n: int) -> galois.FieldArray:
    """Primitive n-th root of unity for a power-of-two n dividing r - 1."""
    assert n > 0 and (n & (n - 1)) == 0, "n must be a power of 2"
    if (field.order - 1) % n != 0:
        raise ValueError(f"Scalar field has no subgroup of order {n}")
    g = int(field.primitive_element)
    return field(pow(g, (field.order - 1) // n, field.order))


def powers(base, n: int) -> galois.FieldArray:
    """[1, base, base^2, ..., base^(n-1)] as a field array."""
    field = type(base)
    out = field.Zeros(n)
    if n == 0:
        return out
    out[0] = 1
    for i in range(1, n):
        out[i] = out[i - 1] * base
    return out

"""Pairing-friendly curve backends.

Thin adapter over py_ecc's optimized curve modules. Points are kept in py_ecc's
projective (x, y, z) form; affine integer coordinates are only used at the
binary I/O boundary.

Two curves are available:
    bls12_381 - 48-byte base field elements (default)
    bn254     - 32-byte base field elements (py_ecc's bn128)
"""

from dataclasses import dataclass
from types import ModuleType
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from py_ecc import optimized_bls12_381, optimized_bn128
from py_ecc.optimized_bls12_381 import optimized_pairing as bls12_381_pairing
from py_ecc.optimized_bn128 import optimized_pairing as bn128_pairing

# --- Type Aliases ---

G1Point = Tuple[Any, Any, Any]  # (x, y, z) over FQ
G2Point = Tuple[Any, Any, Any]  # (x, y, z) over FQ2
G1Affine = Tuple[int, int]
G2Affine = Tuple[Tuple[int, int], Tuple[int, int]]  # ((x.c0, x.c1), (y.c0, y.c1))


def _as_int(c: Any, modulus: int) -> int:
    """Coefficient of an optimized py_ecc field element as a reduced int.

    Extension field coefficients are stored as raw ints that may be negative
    or unreduced.
    """
    return (c if isinstance(c, int) else int(c.n)) % modulus


# --- Prepared G2 ---

@dataclass(frozen=True)
class PreparedG2:
    """G2 point together with its twisted image used by the Miller loop.

    Pairing repeatedly against the same G2 element (verifying key, generator)
    skips the on-curve assertion and the twist on every call.
    """
    point: G2Point
    twisted: Optional[Tuple[Any, Any, Any]]  # None for the point at infinity


G2Operand = Union[G2Point, PreparedG2]


# --- Curve ---

@dataclass(frozen=True)
class Curve:
    """Group and pairing operations of one pairing-friendly curve.

    Attributes:
        name: Curve identifier used in configuration and file headers
        ec: py_ecc optimized curve module (group ops, field classes)
        pairing_module: py_ecc optimized pairing module (Miller loop)
        fe_size: Bytes per base field element in the wire format
        scalar_generator: Multiplicative generator of the scalar field
    """
    name: str
    ec: ModuleType
    pairing_module: ModuleType
    fe_size: int
    scalar_generator: int

    # --- Constants ---

    @property
    def field_modulus(self) -> int:
        return self.ec.field_modulus

    @property
    def curve_order(self) -> int:
        return self.ec.curve_order

    @property
    def g1(self) -> G1Point:
        return self.ec.G1

    @property
    def g2(self) -> G2Point:
        return self.ec.G2

    @property
    def g1_zero(self) -> G1Point:
        return self.ec.Z1

    @property
    def g2_zero(self) -> G2Point:
        return self.ec.Z2

    # --- Group operations ---

    def add(self, p, q):
        return self.ec.add(p, q)

    def double(self, p):
        return self.ec.double(p)

    def neg(self, p):
        return self.ec.neg(p)

    def multiply(self, p, n: int):
        """Scalar multiplication without reducing n modulo the group order."""
        return self.ec.multiply(p, n)

    def eq(self, p, q) -> bool:
        return self.ec.eq(p, q)

    def is_inf(self, p) -> bool:
        return self.ec.is_inf(p)

    def is_on_curve_g1(self, p: G1Point) -> bool:
        return self.ec.is_on_curve(p, self.ec.b)

    def is_on_curve_g2(self, p: G2Point) -> bool:
        return self.ec.is_on_curve(p, self.ec.b2)

    def in_subgroup_g1(self, p: G1Point) -> bool:
        """On the curve and annihilated by the prime group order."""
        return self.is_on_curve_g1(p) and self.is_inf(self.multiply(p, self.curve_order))

    def in_subgroup_g2(self, p: G2Point) -> bool:
        return self.is_on_curve_g2(p) and self.is_inf(self.multiply(p, self.curve_order))

    # --- Affine conversion ---

    def g1_from_affine(self, x: int, y: int) -> G1Point:
        """Build a G1 point; (0, 0) is the point at infinity."""
        if x == 0 and y == 0:
            return self.g1_zero
        FQ = self.ec.FQ
        return (FQ(x), FQ(y), FQ.one())

    def g2_from_affine(self, x: Tuple[int, int], y: Tuple[int, int]) -> G2Point:
        if x == (0, 0) and y == (0, 0):
            return self.g2_zero
        FQ2 = self.ec.FQ2
        return (FQ2(list(x)), FQ2(list(y)), FQ2.one())

    def g1_to_affine(self, p: G1Point) -> G1Affine:
        if self.is_inf(p):
            return (0, 0)
        x, y = self.ec.normalize(p)
        q = self.field_modulus
        return (_as_int(x, q), _as_int(y, q))

    def g2_to_affine(self, p: G2Point) -> G2Affine:
        if self.is_inf(p):
            return ((0, 0), (0, 0))
        x, y = self.ec.normalize(p)
        q = self.field_modulus
        return (
            (_as_int(x.coeffs[0], q), _as_int(x.coeffs[1], q)),
            (_as_int(y.coeffs[0], q), _as_int(y.coeffs[1], q)),
        )

    # --- Field element encoding ---

    def fe_from_bytes(self, buf: bytes) -> int:
        """Decode a little-endian field element, rejecting values >= p."""
        value = int.from_bytes(buf, "little")
        if value >= self.field_modulus:
            raise ValueError("non-canonical field element: value exceeds field modulus")
        return value

    def fe_to_bytes(self, value: int) -> bytes:
        return value.to_bytes(self.fe_size, "little")

    # --- Pairing ---

    def prepare_g2(self, q: G2Operand) -> PreparedG2:
        if isinstance(q, PreparedG2):
            return q
        if self.is_inf(q):
            return PreparedG2(point=q, twisted=None)
        if not self.is_on_curve_g2(q):
            raise ValueError("G2 point is not on the curve")
        return PreparedG2(point=q, twisted=self.pairing_module.twist(q))

    def pairing_check(self, pairs: Iterable[Tuple[G1Point, G2Operand]]) -> bool:
        """Check prod_i e(P_i, Q_i) == 1 with a single final exponentiation."""
        FQ12 = self.ec.FQ12
        acc = FQ12.one()
        for p, q in pairs:
            prepared = self.prepare_g2(q)
            if self.is_inf(p) or prepared.twisted is None:
                continue
            if not self.is_on_curve_g1(p):
                raise ValueError("G1 point is not on the curve")
            acc = acc * self.pairing_module.miller_loop(
                prepared.twisted,
                self.pairing_module.cast_point_to_fq12(p),
                final_exponentiate=False,
            )
        return self.pairing_module.final_exponentiate(acc) == FQ12.one()

    # --- Prepared line (de)serialization ---

    def prepared_to_ints(self, prepared: PreparedG2) -> Sequence[int]:
        """Flatten a prepared point's twisted FQ12 coordinates (36 integers)."""
        if prepared.twisted is None:
            return [0] * 36
        return [_as_int(c, self.field_modulus) for coord in prepared.twisted for c in coord.coeffs]


# --- Registry ---

BLS12_381 = Curve(
    name="bls12_381",
    ec=optimized_bls12_381,
    pairing_module=bls12_381_pairing,
    fe_size=48,
    scalar_generator=7,
)

BN254 = Curve(
    name="bn254",
    ec=optimized_bn128,
    pairing_module=bn128_pairing,
    fe_size=32,
    scalar_generator=5,
)

CURVES = {c.name: c for c in (BLS12_381, BN254)}


def get_curve(name: str) -> Curve:
    """Look up a curve by name ("bls12_381", "bn254")."""
    try:
        return CURVES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown curve '{name}', expected one of {sorted(CURVES)}") from None

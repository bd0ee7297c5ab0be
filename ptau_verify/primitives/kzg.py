"""KZG polynomial commitments over a pairing-friendly curve.

Commit/open/verify for polynomials in coefficient form, an inverse FFT over G1
for Lagrange-basis conversion, and the binary SRS container.

Opening check for a proof (H, v) of p at z against digest C:
    e(C - v*G1 + z*H, G2) * e(-H, tau*G2) == 1
"""

import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Tuple

import galois

from ptau_verify.primitives.curve import Curve, G1Point, G2Operand, G2Point, PreparedG2, get_curve
from ptau_verify.primitives.field import (
    divide_by_linear,
    horner_eval,
    powers,
    root_of_unity,
    scalar_field,
    to_ints,
)
from ptau_verify.primitives.msm import multi_exp

# --- Type Aliases ---

Digest = G1Point


class VerificationError(Exception):
    """Raised when a KZG opening proof does not verify."""


# --- Keys ---

@dataclass
class ProvingKey:
    """Powers of tau in G1: [G1, tau*G1, tau^2*G1, ...]."""
    g1: List[G1Point] = field(default_factory=list)


@dataclass
class VerifyingKey:
    """G1 generator, [G2, tau*G2] and the prepared form of both G2 elements."""
    g1: G1Point
    g2: Tuple[G2Point, G2Point]
    lines: Tuple[PreparedG2, PreparedG2]


@dataclass
class SRS:
    pk: ProvingKey
    vk: VerifyingKey


@dataclass
class OpeningProof:
    h: G1Point
    claimed_value: galois.FieldArray


# --- Commitment Scheme ---

class CommitmentScheme(Protocol):
    """Capabilities the SRS self-check needs from a commitment scheme."""

    def commit(self, poly: galois.FieldArray, pk: ProvingKey) -> Digest: ...

    def open(self, poly: galois.FieldArray, point, pk: ProvingKey) -> OpeningProof: ...

    def verify(self, digest: Digest, proof: OpeningProof, point, vk: VerifyingKey) -> None: ...

    def evaluate(self, poly: galois.FieldArray, point) -> galois.FieldArray: ...


class KZG:
    """KZG commitment scheme instantiated for one curve."""

    def __init__(self, curve: Curve, n_tasks: Optional[int] = None) -> None:
        self.curve = curve
        self.field = scalar_field(curve)
        self.n_tasks = n_tasks

    def commit(self, poly: galois.FieldArray, pk: ProvingKey) -> Digest:
        if len(poly) > len(pk.g1):
            raise ValueError(
                f"Polynomial of size {len(poly)} exceeds proving key size {len(pk.g1)}"
            )
        return multi_exp(self.curve, pk.g1[:len(poly)], to_ints(poly), self.n_tasks)

    def open(self, poly: galois.FieldArray, point, pk: ProvingKey) -> OpeningProof:
        """Opening proof: commitment to (p(X) - p(z)) / (X - z)."""
        if len(poly) > len(pk.g1):
            raise ValueError(
                f"Polynomial of size {len(poly)} exceeds proving key size {len(pk.g1)}"
            )
        quotient, value = divide_by_linear(poly, point)
        h = self.commit(quotient, pk) if len(quotient) else self.curve.g1_zero
        return OpeningProof(h=h, claimed_value=value)

    def verify(self, digest: Digest, proof: OpeningProof, point, vk: VerifyingKey) -> None:
        c = self.curve
        order = c.curve_order
        value = int(proof.claimed_value) % order
        z = int(point) % order

        # C - v*G1 + z*H
        lhs = c.add(c.add(digest, c.neg(c.multiply(vk.g1, value))), c.multiply(proof.h, z))
        if not c.pairing_check([(lhs, vk.lines[0]), (c.neg(proof.h), vk.lines[1])]):
            raise VerificationError("KZG opening proof does not verify")

    def evaluate(self, poly: galois.FieldArray, point) -> galois.FieldArray:
        return horner_eval(poly, point)


def new_verifying_key(curve: Curve, g1: G1Point, g2: G2Point, tau_g2: G2Operand) -> VerifyingKey:
    """tau_g2 may already be prepared; its lines are then reused."""
    tau_lines = curve.prepare_g2(tau_g2)
    return VerifyingKey(
        g1=g1,
        g2=(g2, tau_lines.point),
        lines=(curve.prepare_g2(g2), tau_lines),
    )


# --- Lagrange Basis ---

def _group_fft(curve: Curve, points: List[G1Point], roots: List[int]) -> List[G1Point]:
    """Radix-2 FFT over G1: out[i] = sum_j roots[i*j mod n] * points[j]."""
    n = len(points)
    if n == 1:
        return list(points)
    even = _group_fft(curve, points[0::2], roots[0::2])
    odd = _group_fft(curve, points[1::2], roots[0::2])
    out = [None] * n
    half = n // 2
    for i in range(half):
        t = curve.multiply(odd[i], roots[i]) if roots[i] != 1 else odd[i]
        out[i] = curve.add(even[i], t)
        out[i + half] = curve.add(even[i], curve.neg(t))
    return out


def to_lagrange_g1(points: List[G1Point], curve: Curve) -> List[G1Point]:
    """Convert [tau^i * G1] to the Lagrange basis [L_i(tau) * G1] over <omega>.

    L_i(tau) = (1/n) sum_j omega^(-ij) tau^j, i.e. an inverse FFT applied to
    the group elements.
    """
    n = len(points)
    if n == 0 or (n & (n - 1)) != 0:
        raise ValueError(f"Lagrange conversion needs a power-of-2 size, got {n}")
    fr = scalar_field(curve)
    order = fr.order
    roots = to_ints(powers(root_of_unity(fr, n) ** -1, n))

    transformed = _group_fft(curve, list(points), roots)
    n_inv = pow(n, order - 2, order)
    return [curve.multiply(p, n_inv) for p in transformed]


# --- SRS Container ---
#
# [magic "ptau"] [version u32] [n_sections u32]
# per section: [id u32] [size u64] [payload]

SRS_MAGIC = b"ptau"
SRS_VERSION = 1

SECTION_HEADER = 1
SECTION_PK_G1 = 2
SECTION_VK_G1 = 3
SECTION_VK_G2 = 4
SECTION_LINES = 5


def _encode_g1(curve: Curve, p: G1Point) -> bytes:
    x, y = curve.g1_to_affine(p)
    return curve.fe_to_bytes(x) + curve.fe_to_bytes(y)


def _encode_g2(curve: Curve, p: G2Point) -> bytes:
    (x0, x1), (y0, y1) = curve.g2_to_affine(p)
    return b"".join(curve.fe_to_bytes(v) for v in (x0, x1, y0, y1))


def srs_to_bytes(srs: SRS, curve: Curve) -> bytes:
    name = curve.name.encode("utf-8")
    header = struct.pack("<I", len(name)) + name + struct.pack("<IQ", curve.fe_size, len(srs.pk.g1))
    sections = [
        (SECTION_HEADER, header),
        (SECTION_PK_G1, b"".join(_encode_g1(curve, p) for p in srs.pk.g1)),
        (SECTION_VK_G1, _encode_g1(curve, srs.vk.g1)),
        (SECTION_VK_G2, b"".join(_encode_g2(curve, q) for q in srs.vk.g2)),
        (SECTION_LINES, b"".join(
            curve.fe_to_bytes(v) for line in srs.vk.lines for v in curve.prepared_to_ints(line)
        )),
    ]
    out = [SRS_MAGIC, struct.pack("<II", SRS_VERSION, len(sections))]
    for section_id, payload in sections:
        out.append(struct.pack("<IQ", section_id, len(payload)))
        out.append(payload)
    return b"".join(out)


def write_srs(srs: SRS, path, curve: Curve) -> int:
    """Write the SRS container to path; returns the number of bytes written."""
    data = srs_to_bytes(srs, curve)
    Path(path).write_bytes(data)
    return len(data)


class _SectionReader:
    """Cursor over one section payload."""

    def __init__(self, data: bytes, curve: Optional[Curve] = None) -> None:
        self.data = data
        self.pos = 0
        self.curve = curve

    def read(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise ValueError("Section truncated")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def read_fe(self) -> int:
        return self.curve.fe_from_bytes(self.read(self.curve.fe_size))

    def read_g1(self) -> G1Point:
        x = self.read_fe()
        y = self.read_fe()
        return self.curve.g1_from_affine(x, y)

    def read_g2(self) -> G2Point:
        x0, x1, y0, y1 = (self.read_fe() for _ in range(4))
        return self.curve.g2_from_affine((x0, x1), (y0, y1))

    def end(self) -> None:
        if self.pos != len(self.data):
            raise ValueError(
                f"Section size mismatch: read {self.pos} bytes, expected {len(self.data)}"
            )


def srs_from_bytes(data: bytes) -> Tuple[Curve, SRS]:
    if data[0:4] != SRS_MAGIC:
        raise ValueError(f"Invalid magic: expected {SRS_MAGIC!r}, got {data[0:4]!r}")
    if len(data) < 12:
        raise ValueError("SRS file truncated")
    version, n_sections = struct.unpack("<II", data[4:12])
    if version > SRS_VERSION:
        raise ValueError(f"Unsupported version: expected <={SRS_VERSION}, got {version}")

    sections = {}
    pos = 12
    for _ in range(n_sections):
        if pos + 12 > len(data):
            raise ValueError("SRS section table truncated")
        section_id, size = struct.unpack("<IQ", data[pos:pos + 12])
        pos += 12
        if pos + size > len(data):
            raise ValueError(f"Section {section_id} truncated")
        sections[section_id] = data[pos:pos + size]
        pos += size
    if pos != len(data):
        raise ValueError(f"Trailing {len(data) - pos} bytes after last section")

    for section_id in (SECTION_HEADER, SECTION_PK_G1, SECTION_VK_G1, SECTION_VK_G2, SECTION_LINES):
        if section_id not in sections:
            raise ValueError(f"Section {section_id} does not exist")

    r = _SectionReader(sections[SECTION_HEADER])
    (name_len,) = struct.unpack("<I", r.read(4))
    curve = get_curve(r.read(name_len).decode("utf-8"))
    fe_size, n_points = struct.unpack("<IQ", r.read(12))
    r.end()
    if fe_size != curve.fe_size:
        raise ValueError(f"Field element size {fe_size} does not match curve {curve.name}")

    r = _SectionReader(sections[SECTION_PK_G1], curve)
    pk = ProvingKey(g1=[r.read_g1() for _ in range(n_points)])
    r.end()

    r = _SectionReader(sections[SECTION_VK_G1], curve)
    vk_g1 = r.read_g1()
    r.end()

    r = _SectionReader(sections[SECTION_VK_G2], curve)
    vk_g2 = (r.read_g2(), r.read_g2())
    r.end()

    # Stored lines must be the ones derived from the stored G2 points
    r = _SectionReader(sections[SECTION_LINES], curve)
    lines = []
    for i, q in enumerate(vk_g2):
        stored = [r.read_fe() for _ in range(36)]
        prepared = curve.prepare_g2(q)
        if list(curve.prepared_to_ints(prepared)) != stored:
            raise ValueError(f"Pairing lines {i} do not match verifying key G2 point {i}")
        lines.append(prepared)
    r.end()

    return curve, SRS(pk=pk, vk=VerifyingKey(g1=vk_g1, g2=vk_g2, lines=(lines[0], lines[1])))


def read_srs(path) -> Tuple[Curve, SRS]:
    return srs_from_bytes(Path(path).read_bytes())

"""Contribution chunk data structure and binary codec.

Chunk file layout (little-endian canonical field elements, FE bytes each):

    [64 bytes]                hash
    [nb_tau_g1 x 2 x FE]      tau_g1   (X, Y)
    -- first chunk only --
    [nb_tau_g2 x 4 x FE]      tau_g2   (X.c0, X.c1, Y.c0, Y.c1)
    [nb_alpha_g1 x 2 x FE]    alpha_g1 (X, Y)

The file length must match exactly. Decoding performs no curve or subgroup
validation; that is the SubgroupVerifier's job. (0, 0) encodes infinity.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Tuple

from ptau_verify.primitives.curve import Curve, G1Point, G2Point
from ptau_verify.protocol.errors import DecodeError

logger = logging.getLogger(__name__)

HASH_SIZE = 64

# Aleo ceremony chunk dimensions
NB_TAU_G1 = 65536
NB_TAU_G2 = 30
NB_ALPHA_G1 = 87


# --- Data Structures ---

@dataclass(frozen=True)
class ChunkLayout:
    """Number of points of each kind in a chunk."""
    nb_tau_g1: int = NB_TAU_G1
    nb_tau_g2: int = NB_TAU_G2
    nb_alpha_g1: int = NB_ALPHA_G1

    def __post_init__(self) -> None:
        if self.nb_tau_g1 < 2:
            raise ValueError(f"nb_tau_g1 must be >= 2, got {self.nb_tau_g1}")
        if self.nb_tau_g2 < 2:
            raise ValueError(f"nb_tau_g2 must be >= 2, got {self.nb_tau_g2}")
        if self.nb_alpha_g1 < 0:
            raise ValueError(f"nb_alpha_g1 must be >= 0, got {self.nb_alpha_g1}")

    def size(self, fe_size: int, is_first: bool) -> int:
        """Exact byte length of a chunk file."""
        n = HASH_SIZE + self.nb_tau_g1 * 2 * fe_size
        if is_first:
            n += self.nb_tau_g2 * 4 * fe_size + self.nb_alpha_g1 * 2 * fe_size
        return n


@dataclass(frozen=True)
class Chunk:
    """One slice of a ceremony contribution.

    Attributes:
        hash: 64-byte integrity tag of the contribution file (opaque here)
        tau_g1: [tau^(k*n) * G1, ..., tau^(k*n + n - 1) * G1] for chunk k
        tau_g2: [G2, tau * G2, ...], only on the first chunk
        alpha_g1: [alpha * tau^i * G1], only on the first chunk
        is_first: Whether the chunk carries the tau_g2 / alpha_g1 anchor data
    """
    hash: bytes
    tau_g1: Tuple[G1Point, ...]
    tau_g2: Tuple[G2Point, ...] = ()
    alpha_g1: Tuple[G1Point, ...] = ()
    is_first: bool = False


# --- Decoding ---

class _FieldReader:
    """Parses consecutive field elements out of one buffer."""

    def __init__(self, curve: Curve, buf: bytes, base_offset: int, path: str) -> None:
        self.curve = curve
        self.buf = memoryview(buf)
        self.pos = 0
        self.base_offset = base_offset
        self.path = path

    def element(self) -> int:
        fe = self.curve.fe_size
        raw = self.buf[self.pos:self.pos + fe]
        try:
            value = self.curve.fe_from_bytes(bytes(raw))
        except ValueError as exc:
            raise DecodeError(f"{exc} at offset {self.base_offset + self.pos}", self.path) from exc
        self.pos += fe
        return value

    def g1(self) -> G1Point:
        x = self.element()
        y = self.element()
        return self.curve.g1_from_affine(x, y)

    def g2(self) -> G2Point:
        x0 = self.element()
        x1 = self.element()
        y0 = self.element()
        y1 = self.element()
        return self.curve.g2_from_affine((x0, x1), (y0, y1))


class ChunkDecoder:
    """Streaming parser producing a fresh Chunk per call."""

    def __init__(self, curve: Curve, layout: ChunkLayout = ChunkLayout()) -> None:
        self.curve = curve
        self.layout = layout

    def decode(self, path, is_first: bool) -> Chunk:
        """Decode the chunk file at path."""
        path = str(path)
        try:
            f = open(path, "rb")
        except OSError as exc:
            raise DecodeError(f"cannot open chunk file: {exc.strerror}", path) from exc
        with f:
            return self.decode_stream(f, is_first, path)

    def decode_bytes(self, data: bytes, is_first: bool) -> Chunk:
        return self.decode_stream(io.BytesIO(data), is_first, "<bytes>")

    def decode_stream(self, f: BinaryIO, is_first: bool, path: str = "<stream>") -> Chunk:
        layout = self.layout
        fe = self.curve.fe_size
        offset = 0

        def read_exact(n: int, what: str) -> bytes:
            nonlocal offset
            buf = f.read(n)
            if len(buf) != n:
                raise DecodeError(
                    f"unexpected end of stream reading {what}: "
                    f"got {len(buf)} of {n} bytes at offset {offset}",
                    path,
                )
            offset += n
            return buf

        digest = read_exact(HASH_SIZE, "hash")

        start = offset
        r = _FieldReader(self.curve, read_exact(layout.nb_tau_g1 * 2 * fe, "tau_g1"), start, path)
        tau_g1 = tuple(r.g1() for _ in range(layout.nb_tau_g1))

        tau_g2: Tuple[G2Point, ...] = ()
        alpha_g1: Tuple[G1Point, ...] = ()
        if is_first:
            start = offset
            r = _FieldReader(self.curve, read_exact(layout.nb_tau_g2 * 4 * fe, "tau_g2"), start, path)
            tau_g2 = tuple(r.g2() for _ in range(layout.nb_tau_g2))

            start = offset
            r = _FieldReader(
                self.curve, read_exact(layout.nb_alpha_g1 * 2 * fe, "alpha_g1"), start, path
            )
            alpha_g1 = tuple(r.g1() for _ in range(layout.nb_alpha_g1))

        if f.read(1):
            raise DecodeError(f"trailing bytes after offset {offset}", path)

        logger.debug("decoded %s (%d bytes, first=%s)", path, offset, is_first)
        return Chunk(hash=digest, tau_g1=tau_g1, tau_g2=tau_g2, alpha_g1=alpha_g1, is_first=is_first)


# --- Encoding ---

def encode_chunk(chunk: Chunk, curve: Curve) -> bytes:
    """Serialize a chunk in the contribution file format."""
    if len(chunk.hash) != HASH_SIZE:
        raise ValueError(f"hash must be {HASH_SIZE} bytes, got {len(chunk.hash)}")
    out = [bytes(chunk.hash)]
    for p in chunk.tau_g1:
        x, y = curve.g1_to_affine(p)
        out += [curve.fe_to_bytes(x), curve.fe_to_bytes(y)]
    if chunk.is_first:
        for q in chunk.tau_g2:
            (x0, x1), (y0, y1) = curve.g2_to_affine(q)
            out += [curve.fe_to_bytes(v) for v in (x0, x1, y0, y1)]
        for p in chunk.alpha_g1:
            x, y = curve.g1_to_affine(p)
            out += [curve.fe_to_bytes(x), curve.fe_to_bytes(y)]
    return b"".join(out)


def write_chunk(chunk: Chunk, path, curve: Curve) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_chunk(chunk, curve))

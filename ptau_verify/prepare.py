"""Split a full SRS into per-size canonical and Lagrange SRS files.

For every power of two between min_size and the proving key length (capped at
max_size) this writes:

    kzg_srs_canonical_{size}_{curve}   first `size` powers of tau
    kzg_srs_lagrange_{size}_{curve}    the same SRS in the Lagrange basis
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import List

from ptau_verify.primitives.kzg import ProvingKey, read_srs, to_lagrange_g1, write_srs

logger = logging.getLogger(__name__)

MIN_SIZE = 1 << 8
MAX_SIZE = 1 << 27


def prepare_srs(srs_path, out_dir, min_size: int = MIN_SIZE, max_size: int = MAX_SIZE) -> List[Path]:
    """Write truncated canonical and Lagrange SRS files; returns the paths written."""
    if min_size < 1 or (min_size & (min_size - 1)) != 0:
        raise ValueError(f"min_size must be a power of 2, got {min_size}")

    curve, full = read_srs(srs_path)
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    max_size = min(max_size, len(full.pk.g1))
    written: List[Path] = []

    size = min_size
    while size <= max_size:
        truncated = replace(full, pk=ProvingKey(g1=full.pk.g1[:size]))

        canonical = out_dir / f"kzg_srs_canonical_{size}_{curve.name}"
        write_srs(truncated, canonical, curve)
        written.append(canonical)
        logger.info("wrote %s", canonical)

        # convert to lagrange and be patient
        lagrange_srs = replace(truncated, pk=ProvingKey(g1=to_lagrange_g1(truncated.pk.g1, curve)))
        lagrange = out_dir / f"kzg_srs_lagrange_{size}_{curve.name}"
        write_srs(lagrange_srs, lagrange, curve)
        written.append(lagrange)
        logger.info("wrote %s", lagrange)

        size <<= 1

    if not written:
        logger.warning("SRS has %d points, fewer than min_size %d: nothing written", len(full.pk.g1), min_size)
    return written

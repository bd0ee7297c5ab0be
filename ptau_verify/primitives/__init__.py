"""Primitives - curve, scalar field, MSM, parallel execution and KZG building blocks."""

from ptau_verify.primitives.curve import (
    BLS12_381,
    BN254,
    CURVES,
    Curve,
    PreparedG2,
    get_curve,
)
from ptau_verify.primitives.field import (
    divide_by_linear,
    horner_eval,
    random_scalars,
    root_of_unity,
    scalar_field,
)
from ptau_verify.primitives.kzg import (
    KZG,
    SRS,
    CommitmentScheme,
    OpeningProof,
    ProvingKey,
    VerificationError,
    VerifyingKey,
    read_srs,
    to_lagrange_g1,
    write_srs,
)
from ptau_verify.primitives.msm import multi_exp
from ptau_verify.primitives.parallel import execute, split_ranges

__all__ = [
    # Curve
    "Curve",
    "PreparedG2",
    "BLS12_381",
    "BN254",
    "CURVES",
    "get_curve",
    # Field
    "scalar_field",
    "random_scalars",
    "horner_eval",
    "divide_by_linear",
    "root_of_unity",
    # MSM / parallel
    "multi_exp",
    "execute",
    "split_ranges",
    # KZG
    "KZG",
    "SRS",
    "CommitmentScheme",
    "OpeningProof",
    "ProvingKey",
    "VerifyingKey",
    "VerificationError",
    "read_srs",
    "write_srs",
    "to_lagrange_g1",
]

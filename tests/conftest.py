"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Make the repository root importable when the package is not installed
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from ptau_verify.primitives.curve import BN254  # noqa: E402
from tests.synthetic import CURRENT_TAU, make_config, make_srs, write_ceremony  # noqa: E402


@pytest.fixture
def curve():
    """BN254: smallest field, fastest pairings."""
    return BN254


@pytest.fixture(scope="session")
def rounds_dir(tmp_path_factory) -> Path:
    """Two consistent rounds (read-only; tests that corrupt data write their own)."""
    return write_ceremony(tmp_path_factory.mktemp("rounds"), BN254)


@pytest.fixture
def config(rounds_dir: Path):
    return make_config(rounds_dir)


@pytest.fixture(scope="session")
def small_srs():
    """Eight powers of CURRENT_TAU on BN254."""
    return make_srs(BN254, CURRENT_TAU, 8)

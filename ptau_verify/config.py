"""Ceremony verification configuration.

Loaded from a JSON file with camelCase keys, e.g.:

    {
      "curve": "bls12_381",
      "nbTauG1": 65536,
      "nbTauG2": 30,
      "nbAlphaG1": 87,
      "nbChunks": 4096,
      "roundsDir": "./rounds/",
      "currentRound": "round_139",
      "previousRound": "round_138",
      "chunkPathTemplate": "chunk_{index}/contribution_0.verified",
      "outputSrs": "srs.bin",
      "subgroupChecks": true,
      "maxWorkers": null,
      "reuseChallenges": false,
      "selfCheckSize": 60,
      "g1Generator": ["<x>", "<y>"],
      "g2Generator": [["<x.c0>", "<x.c1>"], ["<y.c0>", "<y.c1>"]]
    }

Every key is optional. Generators default to the curve's standard ones.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ptau_verify.primitives.curve import Curve, G1Point, G2Point, get_curve
from ptau_verify.protocol.chunk import ChunkLayout
from ptau_verify.protocol.continuity import DEFAULT_CHUNK_PATH_TEMPLATE
from ptau_verify.protocol.srs import DEFAULT_SELF_CHECK_SIZE

NB_CHUNKS = 4096


@dataclass
class CeremonyConfig:
    """Parameters of one verification run.

    Attributes:
        curve: Curve name ("bls12_381" or "bn254")
        layout: Points per chunk
        nb_chunks: Number of chunks per round
        rounds_dir: Directory holding one subdirectory per round
        current_round: Round whose contribution becomes the SRS
        previous_round: Round the current one must build on
        chunk_path_template: Chunk file path relative to a round directory
        output_srs: Where to write the SRS (None: verify only)
        subgroup_checks: Run subgroup membership checks
        max_workers: Parallelism for range-split work (None: CPU count)
        reuse_challenges: Share one challenge vector across all ratio checks
        self_check_size: Coefficients of the self-check polynomial
        g1_generator: Affine G1 generator override
        g2_generator: Affine G2 generator override
    """
    curve: str = "bls12_381"
    layout: ChunkLayout = field(default_factory=ChunkLayout)
    nb_chunks: int = NB_CHUNKS
    rounds_dir: str = "./rounds/"
    current_round: str = "round_139"
    previous_round: str = "round_138"
    chunk_path_template: str = DEFAULT_CHUNK_PATH_TEMPLATE
    output_srs: Optional[str] = None
    subgroup_checks: bool = True
    max_workers: Optional[int] = None
    reuse_challenges: bool = False
    self_check_size: int = DEFAULT_SELF_CHECK_SIZE
    g1_generator: Optional[Tuple[int, int]] = None
    g2_generator: Optional[Tuple[Tuple[int, int], Tuple[int, int]]] = None

    def __post_init__(self) -> None:
        if self.nb_chunks < 1:
            raise ValueError(f"nb_chunks must be >= 1, got {self.nb_chunks}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        get_curve(self.curve)

    # --- Derived values ---

    def get_curve(self) -> Curve:
        return get_curve(self.curve)

    def generators(self) -> Tuple[G1Point, G2Point]:
        """G1 and G2 generators, from the overrides or the curve defaults."""
        c = self.get_curve()
        g1 = c.g1 if self.g1_generator is None else c.g1_from_affine(*self.g1_generator)
        g2 = c.g2 if self.g2_generator is None else c.g2_from_affine(*self.g2_generator)
        if not c.is_on_curve_g1(g1):
            raise ValueError("configured G1 generator is not on the curve")
        if not c.is_on_curve_g2(g2):
            raise ValueError("configured G2 generator is not on the curve")
        return g1, g2

    def round_dir(self, name: str) -> Path:
        return Path(self.rounds_dir) / name

    # --- Loading ---

    @classmethod
    def from_dict(cls, data: dict) -> 'CeremonyConfig':
        default = cls.default()
        layout = ChunkLayout(
            nb_tau_g1=data.get('nbTauG1', default.layout.nb_tau_g1),
            nb_tau_g2=data.get('nbTauG2', default.layout.nb_tau_g2),
            nb_alpha_g1=data.get('nbAlphaG1', default.layout.nb_alpha_g1),
        )
        return cls(
            curve=data.get('curve', default.curve),
            layout=layout,
            nb_chunks=data.get('nbChunks', default.nb_chunks),
            rounds_dir=data.get('roundsDir', default.rounds_dir),
            current_round=data.get('currentRound', default.current_round),
            previous_round=data.get('previousRound', default.previous_round),
            chunk_path_template=data.get('chunkPathTemplate', default.chunk_path_template),
            output_srs=data.get('outputSrs'),
            subgroup_checks=data.get('subgroupChecks', default.subgroup_checks),
            max_workers=data.get('maxWorkers'),
            reuse_challenges=data.get('reuseChallenges', default.reuse_challenges),
            self_check_size=data.get('selfCheckSize', default.self_check_size),
            g1_generator=_parse_g1(data.get('g1Generator')),
            g2_generator=_parse_g2(data.get('g2Generator')),
        )

    @classmethod
    def from_json(cls, path: str) -> 'CeremonyConfig':
        """Load from a JSON configuration file."""
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def default(cls) -> 'CeremonyConfig':
        """Aleo ceremony dimensions, last two rounds, verify only."""
        return cls()


# --- Generator parsing ---
# Coordinates may be given as decimal strings or integers.

def _parse_g1(value: Optional[List[Any]]) -> Optional[Tuple[int, int]]:
    if value is None:
        return None
    if len(value) != 2:
        raise ValueError(f"g1Generator must have 2 coordinates, got {len(value)}")
    return int(value[0]), int(value[1])


def _parse_g2(value: Optional[List[Any]]) -> Optional[Tuple[Tuple[int, int], Tuple[int, int]]]:
    if value is None:
        return None
    if len(value) != 2 or any(len(v) != 2 for v in value):
        raise ValueError("g2Generator must be [[x.c0, x.c1], [y.c0, y.c1]]")
    (x0, x1), (y0, y1) = value
    return (int(x0), int(x1)), (int(y0), int(y1))

"""Command-line entry point.

    ptau-verify verify  [--config cfg.json] [--srs out.bin] [--no-subgroup-checks] ...
    ptau-verify prepare --input srs.bin --out-dir srs/
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from ptau_verify.ceremony import verify_ceremony
from ptau_verify.config import CeremonyConfig
from ptau_verify.prepare import MAX_SIZE, MIN_SIZE, prepare_srs
from ptau_verify.primitives.curve import CURVES
from ptau_verify.protocol.errors import CeremonyError

logger = logging.getLogger("ptau_verify")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ptau-verify",
        description="Verify a chunked powers-of-tau ceremony and build a KZG SRS.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    verify = sub.add_parser("verify", help="verify the last two rounds of a ceremony")
    verify.add_argument("--config", help="JSON configuration file")
    verify.add_argument("--srs", help="output SRS file (optional)")
    verify.add_argument("--no-subgroup-checks", action="store_true", help="disable subgroup checks")
    verify.add_argument("--rounds-dir", help="directory holding the round directories")
    verify.add_argument("--current-round", help="name of the round to turn into an SRS")
    verify.add_argument("--previous-round", help="name of the round it must follow")
    verify.add_argument("--chunks", type=int, help="number of chunks per round")
    verify.add_argument("--curve", choices=sorted(CURVES), help="curve of the ceremony")
    verify.add_argument("--workers", type=int, help="parallel workers (default: CPU count)")
    verify.add_argument(
        "--reuse-challenges",
        action="store_true",
        help="share one challenge vector across all chunks (one joint check)",
    )

    prepare = sub.add_parser("prepare", help="split an SRS into canonical and Lagrange SRS files")
    prepare.add_argument("--input", required=True, help="path to the full SRS")
    prepare.add_argument("--out-dir", default=".", help="output directory")
    prepare.add_argument("--min-size", type=int, default=MIN_SIZE)
    prepare.add_argument("--max-size", type=int, default=MAX_SIZE)
    return parser


def _config_from_args(args: argparse.Namespace) -> CeremonyConfig:
    config = CeremonyConfig.from_json(args.config) if args.config else CeremonyConfig.default()
    overrides = {
        "output_srs": args.srs,
        "rounds_dir": args.rounds_dir,
        "current_round": args.current_round,
        "previous_round": args.previous_round,
        "nb_chunks": args.chunks,
        "curve": args.curve,
        "max_workers": args.workers,
    }
    if args.no_subgroup_checks:
        overrides["subgroup_checks"] = False
    if args.reuse_challenges:
        overrides["reuse_challenges"] = True
    # replace() re-runs validation
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "verify":
            verify_ceremony(_config_from_args(args))
        else:
            prepare_srs(args.input, args.out_dir, args.min_size, args.max_size)
    except CeremonyError as exc:
        logger.error("verification failed: %s", exc)
        return 1
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    logger.info("done")
    return 0


if __name__ == "__main__":
    sys.exit(main())

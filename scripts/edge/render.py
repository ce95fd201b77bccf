#!/usr/bin/env python3
"""Render the FRR configuration for an intent file without touching the node."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

REPO_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from evpn_edge.errors import EdgeError  # noqa: E402
from evpn_edge.frr import FRRConfigRenderer, VRFStanzaMode  # noqa: E402
from evpn_edge.reload import FRR_RELOAD, FRRReloader  # noqa: E402
from evpn_edge.validation import find_problems  # noqa: E402
from evpn_edge_agent.intent import load_intent  # noqa: E402


LOG = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--intent",
        type=Path,
        default=REPO_ROOT / "deploy/evpn-edge/intent.yaml",
        help="Path to the intent YAML definition",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory where frr.conf and vtysh.conf are written (stdout if omitted)",
    )
    parser.add_argument(
        "--vrf-mode",
        choices=[m.value for m in VRFStanzaMode],
        default=VRFStanzaMode.STATIC_ROUTES.value,
        help="How vrf stanzas are rendered",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Run frr-reload.py --test on the written file (requires --output-dir)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)
    if args.check and args.output_dir is None:
        parser.error("--check requires --output-dir")
    return args


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    intent = load_intent(args.intent)
    problems = find_problems(intent)
    for problem in problems:
        LOG.error("%s", problem)
    if problems:
        return 1

    renderer = FRRConfigRenderer(vrf_mode=VRFStanzaMode(args.vrf_mode))
    if args.output_dir is None:
        sys.stdout.write(renderer.render(intent))
        return 0

    result = renderer.write(intent, args.output_dir / "frr.conf", args.output_dir / "vtysh.conf")
    LOG.info("Rendered config written to %s", result.output_path)

    if args.check:
        try:
            FRRReloader(FRR_RELOAD).validate(result.output_path)
        except EdgeError as exc:
            LOG.error("frr-reload.py rejected the configuration: %s", exc)
            return 1
        LOG.info("frr-reload.py accepted the configuration")
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Ensure linux VRFs exist for the VRFs declared in an intent file."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from evpn_edge.allocator import TableAllocator  # noqa: E402
from evpn_edge.errors import ReconcileError  # noqa: E402
from evpn_edge.links import build_backend  # noqa: E402
from evpn_edge.reconciler import VRFReconciler  # noqa: E402
from evpn_edge.validation import validate_intent  # noqa: E402
from evpn_edge_agent.intent import load_intent  # noqa: E402


LOG = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--intent",
        type=Path,
        default=REPO_ROOT / "deploy/evpn-edge/intent.yaml",
        help="Path to the intent YAML definition",
    )
    parser.add_argument(
        "--tables",
        type=Path,
        default=Path("/var/lib/evpn-edge/tables.json"),
        help="Table allocation state file",
    )
    parser.add_argument(
        "--backend",
        choices=["iproute2", "netlink"],
        default="iproute2",
        help="How links are programmed",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    intent = load_intent(args.intent)
    validate_intent(intent)

    reconciler = VRFReconciler(build_backend(args.backend), TableAllocator(args.tables))
    try:
        report = reconciler.reconcile(intent)
    except ReconcileError as exc:
        LOG.error("%s", exc)
        return 1

    LOG.info(
        "Reconciled %d VRF(s): created=%s added=%s removed=%s",
        len(report.reconciled),
        report.created,
        report.addresses_added,
        report.addresses_removed,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

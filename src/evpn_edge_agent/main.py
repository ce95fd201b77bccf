"""Entry point for the evpn-edge agent."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from threading import Event

from evpn_edge.allocator import TableAllocator
from evpn_edge.driver import EdgeDriver
from evpn_edge.frr import FRRConfigRenderer
from evpn_edge.links import build_backend
from evpn_edge.reconciler import VRFReconciler
from evpn_edge.reload import FRRReloader

from .config import AgentConfig, load_config
from .loop import ControlLoop
from .sources import FileIntentSource

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def build_driver(config: AgentConfig) -> EdgeDriver:
    allocator = TableAllocator(
        state_file=config.tables.state_file,
        base=config.tables.base,
        size=config.tables.size,
    )
    reconciler = VRFReconciler(
        build_backend(config.os.backend, timeout=config.os.command_timeout),
        allocator,
        prefix_len=config.os.address_prefix_len,
    )
    return EdgeDriver(
        reconciler=reconciler,
        renderer=FRRConfigRenderer(vrf_mode=config.frr.vrf_mode),
        reloader=FRRReloader(config.frr.reload_tool, timeout=config.frr.reload_timeout),
        config_path=config.frr.config_path,
        companion_path=config.frr.vtysh_path,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the evpn-edge agent")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/evpn-edge/agent.yaml"),
        help="Path to the agent configuration file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single pass and exit",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    config = load_config(args.config)
    stop_event = Event()
    loop = ControlLoop(
        build_driver(config),
        FileIntentSource(config.intent_file),
        interval=config.interval,
        stop_event=stop_event,
    )

    if args.once:
        result = loop.run_once()
        return 0 if result is not None and result.ok else 1

    def _shutdown(signum, frame):  # pragma: no cover - signal handler
        LOG.info("received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    loop.run()
    LOG.info("evpn-edge agent stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

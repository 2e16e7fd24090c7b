"""vSphere collector service main entry point.

Each cycle opens a session, walks the inventory, collects realtime counters
per entity and ships InfluxDB line protocol either to the configured write
endpoint or to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pydantic import ValidationError

from collector.errors import CollectorError
from collector.runner import CollectionRunner
from collector.snapshot import SnapshotCounters, SnapshotInventory, SnapshotSessionFactory
from collector.transport import build_transport
from core.config import Config, load_config
from core.logging import setup_console_logging, setup_json_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(description="vSphere realtime counter collector")
    parser.add_argument(
        "--config-root",
        default=".",
        help="Directory containing config/ (defaults to current working directory)",
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Inventory snapshot to collect from (overrides inventory.snapshot_path)",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Write line protocol to stdout even if a write URL is configured",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Seconds between cycles; 0 runs a single cycle (default: collector.interval_s)",
    )
    return parser


def build_runner(
    config: Config, snapshot: Path | None = None, force_stdout: bool = False
) -> CollectionRunner:
    snapshot_path = snapshot or config.inventory.snapshot_path
    return CollectionRunner(
        session_factory=SnapshotSessionFactory(snapshot_path),
        inventory=SnapshotInventory(),
        counters=SnapshotCounters(),
        transport=build_transport(config.influx, force_stream=force_stdout),
        trust_threshold=config.collector.trust_threshold,
        sentinel_value=config.collector.sentinel_value,
    )


def run_collector(
    config: Config,
    snapshot: Path | None = None,
    force_stdout: bool = False,
    interval_s: int = 0,
    max_cycles: int | None = None,
) -> int:
    """Run collection cycles until interrupted (or once when interval is 0).

    Args:
        config: Loaded configuration
        snapshot: Snapshot path override
        force_stdout: Bypass the HTTP transport
        interval_s: Pause between cycle starts
        max_cycles: Stop after this many cycles (None = unbounded)

    Returns:
        Exit code
    """
    runner = build_runner(config, snapshot, force_stdout)
    cycles = 0
    try:
        while True:
            started = time.monotonic()
            runner.run_cycle()
            cycles += 1
            if interval_s <= 0 or (max_cycles is not None and cycles >= max_cycles):
                return 0
            time.sleep(max(0.0, interval_s - (time.monotonic() - started)))
    except CollectorError:
        # Already logged by the runner.
        return 1
    finally:
        runner.transport.close()


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Command line arguments

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config_root)
    except (FileNotFoundError, ValidationError) as exc:
        print(f"vmware_collector: invalid configuration: {exc}", file=sys.stderr)
        return 2

    if config.logging.json:
        setup_json_logging(str(config.logging.log_dir), config.logging.level)
    else:
        setup_console_logging(config.logging.level)

    snapshot = args.snapshot
    if snapshot is None and not config.inventory.snapshot_path.is_absolute():
        snapshot = Path(args.config_root) / config.inventory.snapshot_path

    interval = config.collector.interval_s if args.interval is None else args.interval
    logger.info(
        "vmware_collector_starting",
        extra={"env": config.app.env, "interval_s": interval},
    )

    try:
        return run_collector(
            config,
            snapshot=snapshot,
            force_stdout=args.stdout,
            interval_s=interval,
        )
    except KeyboardInterrupt:
        logger.info("vmware_collector_shutdown")
        return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

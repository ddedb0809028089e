import asyncio
import sys

import structlog
from prometheus_client import CollectorRegistry

from burnmeter.aggregator import Aggregator
from burnmeter.cli import parse_args
from burnmeter.errors import BurnmeterError, HookInputError
from burnmeter.formatting import format_snapshot
from burnmeter.hook import parse_hook_input
from burnmeter.loader import LogLoader
from burnmeter.logging import setup_logging
from burnmeter.metrics import SnapshotMetrics
from burnmeter.paths import discover_base_dirs

logger = structlog.get_logger()


def _read_input(path: "str") -> "str":
    if not path:
        return sys.stdin.read()
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except OSError as exc:
        raise HookInputError(f"Failed to read input file: {path}") from exc


def main(argv: "list[str] | None" = None) -> "None":
    config = parse_args(argv)
    setup_logging(config.log_level)

    metrics: "SnapshotMetrics | None" = None
    if config.metrics_enabled:
        metrics = SnapshotMetrics(registry=CollectorRegistry())

    try:
        hook = parse_hook_input(_read_input(config.input_path))
        base_dirs = discover_base_dirs(config.config_dirs)
        logger.debug("base_dirs_discovered", count=len(base_dirs))

        aggregator = Aggregator(
            base_dirs,
            loader=LogLoader(max_workers=config.workers),
            metrics=metrics,
            context_window=config.context_window,
        )
        snapshot = asyncio.run(aggregator.run(hook))
    except BurnmeterError as exc:
        raise SystemExit(f"❌ {exc}") from exc

    print(format_snapshot(snapshot))

    if metrics is not None:
        try:
            metrics.write_textfile(config.metrics_textfile)
        except OSError as exc:
            logger.warning(
                "metrics_write_failed", path=config.metrics_textfile, error=str(exc)
            )
        else:
            logger.debug("metrics_written", path=config.metrics_textfile)


if __name__ == "__main__":
    main()

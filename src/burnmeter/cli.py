import argparse

from burnmeter.config import Config


def parse_args(argv: "list[str] | None" = None) -> "Config":
    parser = argparse.ArgumentParser(
        prog="burnmeter",
        description="Cost and burn-rate status line for Claude Code usage logs",
    )
    parser.add_argument(
        "-i",
        "--input",
        dest="input_path",
        default="",
        help="Path to the hook input JSON (default: read stdin)",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: warning)",
    )
    parser.add_argument(
        "--metrics.textfile",
        dest="metrics_textfile",
        default="",
        help="Write the snapshot as Prometheus metrics to this file",
    )
    parser.add_argument(
        "--workers",
        dest="workers",
        type=int,
        default=None,
        help="Threads used to parse log files (default: executor default)",
    )

    args = parser.parse_args(argv)
    config = Config.from_env()
    config.input_path = args.input_path
    config.log_level = args.log_level
    config.metrics_textfile = args.metrics_textfile
    if args.workers is not None:
        config.workers = args.workers
    return config

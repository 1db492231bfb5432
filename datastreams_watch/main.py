"""Entry point for watching a Data Streams feed from the terminal."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from datastreams_watch.app import run_once, run_watch
from datastreams_watch.data.datastreams_client import StreamClientError
from datastreams_watch.infra.config import load_config
from datastreams_watch.infra.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="datastreams-watch",
        description="Stream Data Streams reports and print decoded summaries",
    )
    parser.add_argument("--config", default=None, help="YAML settings file (defaults to $CONFIG_PATH or config/settings.yaml)")
    parser.add_argument("--once", action="store_true", help="Fetch the latest report over REST, print it and exit")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Missing credentials raise ConfigError here, before any connection attempt.
    config = load_config(args.config)
    configure_logging(default_level=config.logging.level, default_format=config.logging.format)

    logger = logging.getLogger("datastreams")
    if args.once:
        try:
            summary = asyncio.run(run_once(config))
        except StreamClientError as exc:
            logger.error("%s", exc, extra={"event": "rest_failed"})
            return 1
        return 0 if summary is not None else 1

    try:
        asyncio.run(run_watch(config))
    except StreamClientError as exc:
        logger.error("%s", exc, extra={"event": "connect_failed"})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

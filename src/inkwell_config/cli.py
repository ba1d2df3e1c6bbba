"""Command-line entry point for checking an Inkwell configuration.

Runs the same load-once-with-fallback routine the API uses at startup and
prints what it found, with secrets masked.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from inkwell_config.config import load_config, load_settings
from inkwell_config.exceptions import ConfigError
from inkwell_config.models import APIConfig

logger = logging.getLogger(__name__)


def _summary(config: APIConfig) -> str:
    ctx = config.context
    return (
        f"context={ctx.host}:{ctx.port}{ctx.path} mode={ctx.mode or '-'} "
        f"db={config.db.server or '-'}@{config.db.host}:{config.db.port} "
        f"page_size={config.pagination.page_size}"
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the inkwell-config command."""
    parser = argparse.ArgumentParser(
        prog="inkwell-config",
        description="Load the Inkwell XML configuration and print it.",
    )
    parser.add_argument("path", nargs="?", help="configuration file (default: $CONFIG_PATH or config.xml)")
    parser.add_argument("--json", action="store_true", help="print the full record as JSON with secrets masked")
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    try:
        config = load_config(args.path, settings=settings)
    except ConfigError as exc:
        logger.debug("Load failed: %s", exc.details)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(config.redacted(), indent=2))
    else:
        print(_summary(config))
    return 0

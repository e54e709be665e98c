"""Force one rate refresh; meant to be run from cron or another scheduler."""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from exchange_proxy.core.config import Settings, get_settings
from exchange_proxy.core.logging import init_logging
from exchange_proxy.services.factory import build_services
from exchange_proxy.services.rates import RateSource, RefreshFailure

logger = logging.getLogger("exchange_proxy.refresh")

__all__ = ["parse_args", "run_refresh", "main"]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="SQLite database path (defaults to the DB_PATH / DATA_DIR settings)",
    )
    parser.add_argument(
        "--source",
        dest="rate_source",
        choices=("exchangerate-api", "static"),
        default=None,
        help="Override the configured rate source",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def run_refresh(settings: Settings, rate_source: Optional[RateSource] = None) -> int:
    """Run a forced refresh and return a process exit code."""
    services = build_services(settings, rate_source)
    result = services.refresher.force_refresh()
    if isinstance(result, RefreshFailure):
        logger.error("scheduled refresh failed: %s %s", result.kind.value, result.detail)
        return 1
    logger.info(
        "scheduled refresh stored %d rates (provider time %s)",
        len(result.table),
        result.fetched_at_utc,
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    overrides = {}
    if args.db_path:
        overrides["db_path"] = args.db_path
    if args.rate_source:
        overrides["rate_source"] = args.rate_source
    if args.debug:
        overrides["debug"] = True
    settings = get_settings().model_copy(update=overrides) if overrides else get_settings()
    settings.init_post_load()
    init_logging(debug=settings.debug)
    return run_refresh(settings)


if __name__ == "__main__":  # pragma: no cover - thin wrapper
    raise SystemExit(main())

"""Wire settings into the store, refresher and ticker services.

Shared by the HTTP app factory and the scheduled refresh command so both
write to the same store the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from exchange_proxy.core.config import Settings
from exchange_proxy.db.dal import KeyValueStore
from exchange_proxy.db.migrate import apply_migrations
from exchange_proxy.services.rates import RateRefresher, RateSource, RateStore, make_rate_source
from exchange_proxy.services.ticker import TickerService


@dataclass
class Services:
    kv: KeyValueStore
    rate_store: RateStore
    refresher: RateRefresher
    ticker: TickerService


def build_services(settings: Settings, rate_source: Optional[RateSource] = None) -> Services:
    if settings.db_path is None:
        settings.init_post_load()
    apply_migrations(settings.db_path)  # type: ignore[arg-type]
    kv = KeyValueStore(settings.db_path, timeout=settings.store_timeout_seconds)  # type: ignore[arg-type]
    rate_store = RateStore(kv)
    refresher = RateRefresher(
        rate_store,
        rate_source or make_rate_source(settings),
        single_flight=settings.refresh_single_flight,
    )
    ticker = TickerService(
        kv,
        base_url=settings.ticker_base_url,
        ttl_seconds=settings.ticker_cache_ttl_seconds,
        timeout=settings.http_timeout_seconds,
    )
    return Services(kv=kv, rate_store=rate_store, refresher=refresher, ticker=ticker)

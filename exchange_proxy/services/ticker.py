"""Crypto ticker price passthrough.

Fetches ``{symbol, price}`` from the ticker endpoint and keeps it in the
key/value store for a short TTL. No rate math happens here.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, Mapping
from urllib.parse import urlencode

from exchange_proxy.core.errors import UpstreamRejectedError, UpstreamUnreachableError
from exchange_proxy.db.dal import KeyValueStore
from exchange_proxy.services.http_client import HttpError, get_json

logger = logging.getLogger(__name__)


def _cache_key(symbol: str) -> str:
    return f"ticker:{symbol}"


class TickerService:
    def __init__(self, kv: KeyValueStore, base_url: str, ttl_seconds: int = 300, timeout: float = 10.0):
        self._kv = kv
        self._base_url = base_url
        self._ttl = ttl_seconds
        self._timeout = timeout

    def get_price(self, symbol: str) -> Dict[str, str]:
        symbol = symbol.upper()
        cached = self._kv.get(_cache_key(symbol))
        if cached is not None:
            try:
                data = json.loads(cached)
            except ValueError:
                logger.warning("discarding unreadable ticker cache entry for %s", symbol)
            else:
                logger.debug("ticker cache hit for %s", symbol)
                return data

        url = f"{self._base_url}?{urlencode({'symbol': symbol})}"
        try:
            payload = get_json(url, timeout=self._timeout)
        except HttpError as e:
            if isinstance(e.payload, Mapping) and "code" in e.payload:
                payload = e.payload
            else:
                raise UpstreamUnreachableError(str(e)) from e

        if not isinstance(payload, Mapping):
            raise UpstreamUnreachableError("ticker response is not a JSON object")
        if "code" in payload:
            raise UpstreamRejectedError(str(payload.get("msg") or payload["code"]))
        try:
            data = {"symbol": str(payload["symbol"]), "price": str(payload["price"])}
        except KeyError as e:
            raise UpstreamUnreachableError(f"ticker response missing {e}") from e

        self._kv.purge_expired()
        self._kv.put(_cache_key(symbol), json.dumps(data), ttl_seconds=self._ttl)
        return data

from __future__ import annotations

"""Durable home of the latest USD-based rate table.

One logical key holds the JSON-serialized table. No TTL is stored or enforced
here; freshness is the refresher's (and ultimately the scheduler's) concern.
"""
import json
import logging
from typing import Optional

from exchange_proxy.core.errors import StorageError
from exchange_proxy.db.dal import KeyValueStore

from .base import RateTable

RATES_KEY = "last"

logger = logging.getLogger(__name__)


class RateStore:
    def __init__(self, kv: KeyValueStore, key: str = RATES_KEY):
        self._kv = kv
        self._key = key

    def read(self) -> Optional[RateTable]:
        raw = self._kv.get(self._key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return {str(code): float(rate) for code, rate in data.items()}
        except (AttributeError, TypeError, ValueError) as e:
            raise StorageError(f"stored rate table is unreadable: {e}") from e

    def write(self, table: RateTable) -> None:
        self._kv.put(self._key, json.dumps(table, separators=(",", ":")))
        logger.info("stored rate table with %d currencies", len(table))

from __future__ import annotations

"""Cache-aside refresh of the USD-based rate table.

Read path: the store is checked first and the upstream source is only called
on a miss. A table in the store is returned as-is however old it is; the
periodic trigger calling ``force_refresh`` is what keeps it fresh.

Writes happen only after a successful fetch and replace the whole table, so a
failed refresh never clears or corrupts what is already cached.

Without single-flight, concurrent misses may each fetch and write; every
snapshot is internally consistent, so the store simply keeps the last one.
"""
import logging
import threading
from concurrent.futures import Future
from typing import Callable, Optional, Union

from exchange_proxy.core.errors import StorageError

from .base import (
    ErrorKind,
    RateSource,
    RateTable,
    RefreshFailure,
    RefreshResult,
    RefreshSuccess,
)
from .store import RateStore

logger = logging.getLogger(__name__)


class SingleFlight:
    """Collapse overlapping calls into one; late joiners wait for the leader's result."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._inflight: Optional[Future] = None

    def run(self, fn: Callable[[], RefreshResult]) -> RefreshResult:
        with self._lock:
            joined = self._inflight
            if joined is None:
                fut: Future = Future()
                self._inflight = fut
        if joined is not None:
            logger.debug("joining in-flight refresh")
            return joined.result()
        try:
            result = fn()
        except BaseException as e:
            fut.set_exception(e)
            raise
        else:
            fut.set_result(result)
            return result
        finally:
            with self._lock:
                self._inflight = None


class RateRefresher:
    def __init__(self, store: RateStore, source: RateSource, single_flight: bool = False):
        self._store = store
        self._source = source
        self._flight = SingleFlight() if single_flight else None

    def get_or_refresh(self) -> Union[RateTable, RefreshFailure]:
        try:
            table = self._store.read()
        except StorageError as e:
            logger.error("rate store read failed: %s", e.message)
            return RefreshFailure(ErrorKind.STORAGE_ERROR, e.message)
        if table is not None:
            logger.debug("rate cache hit")
            return table
        logger.info("rate cache miss, refreshing from upstream")
        result = self.force_refresh()
        if isinstance(result, RefreshSuccess):
            return result.table
        return result

    def force_refresh(self) -> RefreshResult:
        if self._flight is not None:
            return self._flight.run(self._refresh_once)
        return self._refresh_once()

    def _refresh_once(self) -> RefreshResult:
        result = self._source.fetch_latest()
        if isinstance(result, RefreshFailure):
            return result
        try:
            self._store.write(result.table)
        except StorageError as e:
            logger.error("rate store write failed: %s", e.message)
            return RefreshFailure(ErrorKind.STORAGE_ERROR, e.message)
        return result

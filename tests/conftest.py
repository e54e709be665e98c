from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from exchange_proxy.core.config import Settings
from exchange_proxy.db.dal import KeyValueStore
from exchange_proxy.db.migrate import apply_migrations
from exchange_proxy.services.rates import (
    ErrorKind,
    RateSource,
    RefreshFailure,
    RefreshResult,
    RefreshSuccess,
    RateStore,
)


class FakeRateSource(RateSource):
    """Returns queued results in order, repeating the last one; counts calls."""

    def __init__(self, *results: RefreshResult):
        self.results: List[RefreshResult] = list(results)
        self.calls = 0

    def fetch_latest(self, base_currency: Optional[str] = None) -> RefreshResult:
        self.calls += 1
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


def success(table: Dict[str, float]) -> RefreshSuccess:
    return RefreshSuccess(
        table=dict(table),
        fetched_at_unix=1_700_000_000,
        fetched_at_utc="Tue, 14 Nov 2023 22:13:20 +0000",
        base_code="USD",
    )


def failure(kind: ErrorKind = ErrorKind.QUOTA_REACHED) -> RefreshFailure:
    return RefreshFailure(kind, f"provider reported {kind.value}")


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "rates.sqlite3"
    apply_migrations(path)
    return path


@pytest.fixture()
def kv(db_path: Path) -> KeyValueStore:
    return KeyValueStore(db_path, timeout=1.0)


@pytest.fixture()
def rate_store(kv: KeyValueStore) -> RateStore:
    return RateStore(kv)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        db_path=tmp_path / "app.sqlite3",
        api_key="test-key",
        update_password="s3cret",
        rate_source="static",
    )

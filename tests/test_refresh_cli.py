from __future__ import annotations

from pathlib import Path

from conftest import FakeRateSource, failure, success

from exchange_proxy import refresh as refresh_module
from exchange_proxy.core.config import Settings
from exchange_proxy.db.dal import KeyValueStore
from exchange_proxy.refresh import parse_args, run_refresh
from exchange_proxy.services.rates import ErrorKind, RateStore


def test_run_refresh_stores_table(settings: Settings) -> None:
    settings.init_post_load()
    code = run_refresh(settings, FakeRateSource(success({"USD": 1.0, "EUR": 0.9})))
    assert code == 0
    assert RateStore(KeyValueStore(settings.db_path)).read() == {"USD": 1.0, "EUR": 0.9}


def test_run_refresh_failure_exit_code_and_no_write(settings: Settings) -> None:
    settings.init_post_load()
    store = RateStore(KeyValueStore(settings.db_path))
    run_refresh(settings, FakeRateSource(success({"USD": 1.0, "EUR": 0.9})))

    code = run_refresh(settings, FakeRateSource(failure(ErrorKind.INACTIVE_ACCOUNT)))

    assert code == 1
    assert store.read() == {"USD": 1.0, "EUR": 0.9}


def test_parse_args_defaults() -> None:
    args = parse_args([])
    assert args.db_path is None
    assert args.rate_source is None
    assert args.debug is False


def test_main_with_static_source(tmp_path: Path, monkeypatch) -> None:
    db = tmp_path / "cron.sqlite3"
    monkeypatch.setattr(refresh_module, "init_logging", lambda debug=False: None)

    code = refresh_module.main(["--db", str(db), "--source", "static"])

    assert code == 0
    table = RateStore(KeyValueStore(db)).read()
    assert table is not None
    assert table["USD"] == 1.0

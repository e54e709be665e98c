from __future__ import annotations

"""Concrete rate sources and factory.

'exchangerate-api' talks to ExchangeRate-API v6; 'static' serves a fixed table
so the proxy can run offline (local development, demos).
"""
import logging
import math
import time
from email.utils import formatdate
from typing import Any, Dict, Mapping, Optional, Type

from exchange_proxy.core.config import Settings
from exchange_proxy.models.constants import is_valid_currency_code
from exchange_proxy.services.http_client import HttpError, get_json

from .base import (
    ErrorKind,
    RateSource,
    RateTable,
    RefreshFailure,
    RefreshResult,
    RefreshSuccess,
)

logger = logging.getLogger(__name__)

_STATIC_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 151.4,
    "CNY": 7.24,
    "INR": 83.3,
    "SGD": 1.35,
    "AUD": 1.53,
    "CAD": 1.37,
    "CHF": 0.9,
}

_PROVIDER_ERROR_KINDS = {k.value: k for k in ErrorKind if k.is_upstream_rejection}


class MalformedEnvelope(ValueError):
    pass


def normalize_table(raw: Any, base: str) -> RateTable:
    """Validate a provider ``conversion_rates`` mapping and express it relative to ``base``.

    Entries with a non-ISO key or a non-positive / non-finite value are dropped.
    If the base entry is present but not exactly 1.0 every rate is divided by it.
    """
    if not isinstance(raw, Mapping) or not raw:
        raise MalformedEnvelope("conversion_rates must be a non-empty mapping")
    table: RateTable = {}
    dropped = []
    for code, value in raw.items():
        code_u = str(code).upper()
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            dropped.append(code)
            continue
        rate = float(value)
        if not is_valid_currency_code(code_u) or not math.isfinite(rate) or rate <= 0:
            dropped.append(code)
            continue
        table[code_u] = rate
    if dropped:
        logger.info("dropped %d invalid rate entries: %s", len(dropped), sorted(map(str, dropped)))
    base_rate = table.get(base)
    if base_rate is None:
        raise MalformedEnvelope(f"base currency {base} missing from conversion_rates")
    if base_rate != 1.0:
        logger.warning("base %s quoted at %r, normalizing table", base, base_rate)
        table = {code: rate / base_rate for code, rate in table.items()}
        table[base] = 1.0
    return table


def parse_envelope(payload: Any, base: str) -> RefreshResult:
    """Turn a provider JSON envelope into a RefreshResult."""
    if not isinstance(payload, Mapping):
        return RefreshFailure(ErrorKind.UPSTREAM_UNREACHABLE, "response is not a JSON object")
    result = payload.get("result")
    if result == "error":
        error_type = payload.get("error-type")
        kind = _PROVIDER_ERROR_KINDS.get(error_type) if isinstance(error_type, str) else None
        if kind is None:
            return RefreshFailure(
                ErrorKind.UPSTREAM_UNREACHABLE, f"unknown error-type {error_type!r}"
            )
        return RefreshFailure(kind, f"provider reported {error_type}")
    if result != "success":
        return RefreshFailure(ErrorKind.UPSTREAM_UNREACHABLE, f"unexpected result {result!r}")

    base_code = str(payload.get("base_code") or "").upper()
    if base_code != base:
        return RefreshFailure(
            ErrorKind.UPSTREAM_UNREACHABLE, f"base_code {base_code!r} does not match {base}"
        )
    try:
        table = normalize_table(payload.get("conversion_rates"), base)
        fetched_at_unix = int(payload["time_last_updated_unix"])
        fetched_at_utc = str(payload["time_last_updated_utc"])
    except (MalformedEnvelope, KeyError, TypeError, ValueError) as e:
        return RefreshFailure(ErrorKind.UPSTREAM_UNREACHABLE, f"malformed success envelope: {e}")
    return RefreshSuccess(
        table=table,
        fetched_at_unix=fetched_at_unix,
        fetched_at_utc=fetched_at_utc,
        base_code=base_code,
    )


class ExchangeRateApiSource(RateSource):
    """ExchangeRate-API v6 ``/latest`` endpoint. One GET per call, no retries."""

    def __init__(self, api_key: str, base_url: str, timeout: float = 10.0, base_currency: str = "USD"):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self.base_currency = base_currency

    def _url(self, base: str) -> str:
        return f"{self._base_url}/{self._api_key}/latest/{base}"

    def _redacted_url(self, base: str) -> str:
        return f"{self._base_url}/***/latest/{base}"

    def fetch_latest(self, base_currency: Optional[str] = None) -> RefreshResult:
        base = (base_currency or self.base_currency).upper()
        shown = self._redacted_url(base)
        logger.info("fetching latest rates from %s", shown)
        try:
            payload = get_json(self._url(base), timeout=self._timeout, label=shown)
        except HttpError as e:
            # Provider error envelopes arrive with 4xx statuses
            if isinstance(e.payload, Mapping) and e.payload.get("result") in ("success", "error"):
                payload = e.payload
            else:
                logger.warning("upstream unreachable: %s", e)
                return RefreshFailure(ErrorKind.UPSTREAM_UNREACHABLE, str(e))
        result = parse_envelope(payload, base)
        if isinstance(result, RefreshFailure):
            logger.warning("upstream refresh failed: %s (%s)", result.kind.value, result.detail)
        else:
            logger.info(
                "fetched %d rates (provider time %s)", len(result.table), result.fetched_at_utc
            )
        return result


class StaticRateSource(RateSource):
    def __init__(self, rates: Optional[Mapping[str, float]] = None, base_currency: str = "USD"):
        self._rates = dict(rates or _STATIC_RATES)
        self.base_currency = base_currency

    def fetch_latest(self, base_currency: Optional[str] = None) -> RefreshResult:
        base = (base_currency or self.base_currency).upper()
        try:
            table = normalize_table(self._rates, base)
        except MalformedEnvelope as e:
            return RefreshFailure(ErrorKind.UNSUPPORTED_CODE, str(e))
        now = time.time()
        return RefreshSuccess(
            table=table,
            fetched_at_unix=int(now),
            fetched_at_utc=formatdate(now, usegmt=True),
            base_code=base,
        )


_PROVIDER_REGISTRY: Dict[str, Type[RateSource]] = {
    "exchangerate-api": ExchangeRateApiSource,
    "static": StaticRateSource,
}


def make_rate_source(settings: Settings) -> RateSource:
    kind = settings.rate_source
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate source kind '{kind}'")
    if cls is ExchangeRateApiSource:
        if not settings.api_key:
            logger.warning("API_KEY is empty; upstream will reject requests")
        return ExchangeRateApiSource(
            api_key=settings.api_key,
            base_url=settings.upstream_base_url,
            timeout=settings.http_timeout_seconds,
            base_currency=settings.base_currency,
        )
    return cls(base_currency=settings.base_currency)

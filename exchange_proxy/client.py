"""Python client for the exchange rate proxy HTTP API.

Example::

    client = ExchangeRateClient("http://localhost:8000")
    client.get_exchange_rate("USD", "EUR")["data"]
    client.convert_currency("USD", "EUR", 100)["data"]
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from exchange_proxy.models.constants import COMMON_CURRENCIES, CURRENCY_CODE_RE
from exchange_proxy.services.http_client import HttpError, get_json

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 10.0
USER_AGENT = "exchange-proxy-client/0.1.0"

logger = logging.getLogger(__name__)


class ExchangeRateAPIError(Exception):
    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.code = code


class ExchangeRateClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Optional[Mapping[str, str]] = None,
        max_workers: int = 8,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers: Dict[str, str] = {"Accept": "application/json", "User-Agent": USER_AGENT}
        self.headers.update(headers or {})
        self._max_workers = max_workers

    # Transport -------------------------------------------------
    def _get(self, path: str) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            return get_json(url, timeout=self.timeout, headers=self.headers)
        except HttpError as e:
            if e.timeout:
                raise ExchangeRateAPIError(
                    f"Request timeout after {self.timeout}s", 408, "TIMEOUT"
                ) from e
            if e.status is not None:
                message = f"HTTP {e.status}"
                if isinstance(e.payload, Mapping) and e.payload.get("error"):
                    message = str(e.payload["error"])
                raise ExchangeRateAPIError(message, e.status, str(e.status)) from e
            raise ExchangeRateAPIError(f"Network error: {e}", 0, "NETWORK_ERROR") from e

    # API -------------------------------------------------------
    def get_currency_rates(self, currency: str) -> Dict[str, Any]:
        """All rates expressed relative to ``currency``."""
        return self._get(f"/last/{self.format_currency(currency)}")

    def get_exchange_rate(self, base: str, target: str) -> Dict[str, Any]:
        return self._get(f"/{self.format_currency(base)}/{self.format_currency(target)}")

    def convert_currency(self, base: str, target: str, amount: float) -> Dict[str, Any]:
        if amount <= 0:
            raise ValueError("Amount must be greater than 0")
        return self._get(
            f"/{self.format_currency(base)}/{self.format_currency(target)}/{amount}"
        )

    def update_rates(self, password: str) -> Dict[str, Any]:
        if not password:
            raise ValueError("Password is required for updating rates")
        return self._get(f"/update/{password}")

    def get_batch_rates(self, pairs: Iterable[Tuple[str, str]]) -> List[Dict[str, Any]]:
        pairs = list(pairs)
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            return list(pool.map(lambda p: self.get_exchange_rate(*p), pairs))

    def batch_convert(self, conversions: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """``conversions`` items look like ``{"from": "USD", "to": "EUR", "amount": 100}``."""
        for c in conversions:
            if c["amount"] <= 0:
                raise ValueError("Amount must be greater than 0")
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            return list(
                pool.map(
                    lambda c: self.convert_currency(c["from"], c["to"], c["amount"]),
                    conversions,
                )
            )

    # Helpers ---------------------------------------------------
    @staticmethod
    def common_currencies() -> List[str]:
        return list(COMMON_CURRENCIES)

    @staticmethod
    def is_valid_currency_format(currency: str) -> bool:
        return bool(CURRENCY_CODE_RE.match(currency))

    @staticmethod
    def format_currency(currency: str) -> str:
        return currency.strip().upper()

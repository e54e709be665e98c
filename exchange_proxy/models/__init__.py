"""Pydantic API models and currency constants for the exchange rate proxy."""

from .constants import (
    COMMON_CURRENCIES,
    ISO_CURRENCY_CODES,
    is_valid_currency_code,
)  # re-export
from .rates import (
    ConversionOut,
    CurrencyCode,
    CurrencyRatesOut,
    HealthOut,
    PairRateOut,
    TickerOut,
    TickerPrice,
    TickerSymbol,
    UpdateOut,
    UpstreamSnapshot,
)

__all__ = [
    "COMMON_CURRENCIES",
    "ISO_CURRENCY_CODES",
    "is_valid_currency_code",
    "ConversionOut",
    "CurrencyCode",
    "CurrencyRatesOut",
    "HealthOut",
    "PairRateOut",
    "TickerOut",
    "TickerPrice",
    "TickerSymbol",
    "UpdateOut",
    "UpstreamSnapshot",
]

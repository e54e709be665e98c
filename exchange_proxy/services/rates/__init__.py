from .base import (
    ErrorKind,
    RateSource,
    RateTable,
    RefreshFailure,
    RefreshResult,
    RefreshSuccess,
)
from .conversion import ConversionResult, convert, pair_rate, rebase
from .providers import ExchangeRateApiSource, StaticRateSource, make_rate_source
from .refresher import RateRefresher
from .store import RateStore

__all__ = [
    "ErrorKind",
    "RateSource",
    "RateTable",
    "RefreshFailure",
    "RefreshResult",
    "RefreshSuccess",
    "ConversionResult",
    "convert",
    "pair_rate",
    "rebase",
    "ExchangeRateApiSource",
    "StaticRateSource",
    "make_rate_source",
    "RateRefresher",
    "RateStore",
]

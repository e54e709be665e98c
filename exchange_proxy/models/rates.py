from __future__ import annotations

from typing import Annotated, Dict, Optional

from pydantic import AfterValidator, BaseModel, Field

from .constants import TICKER_SYMBOL_RE, is_valid_currency_code


def _currency_code(v: str) -> str:
    code = v.strip().upper()
    if len(code) != 3:
        raise ValueError("currency code must be exactly 3 letters")
    if not is_valid_currency_code(code):
        raise ValueError("Invalid currency code")
    return code


def _ticker_symbol(v: str) -> str:
    if not TICKER_SYMBOL_RE.match(v):
        raise ValueError("Invalid symbol")
    return v.upper()


CurrencyCode = Annotated[str, AfterValidator(_currency_code)]
TickerSymbol = Annotated[str, AfterValidator(_ticker_symbol)]


class CurrencyRatesOut(BaseModel):
    message: str = "Success"
    data: Dict[str, float] = Field(..., description="Units of each currency per 1 unit of base")


class PairRateOut(BaseModel):
    message: str = "Success"
    data: float = Field(..., description="Units of target per 1 unit of base")
    base_code: str
    target_code: str


class ConversionOut(BaseModel):
    message: str = "Success"
    data: float = Field(..., description="Converted amount in target currency")
    rate: float
    base_code: str
    target_code: str


class UpstreamSnapshot(BaseModel):
    result: str = "success"
    conversion_rates: Dict[str, float]
    time_last_updated_unix: int
    time_last_updated_utc: str
    base_code: str


class UpdateOut(BaseModel):
    message: str = "Update success"
    data: UpstreamSnapshot


class TickerPrice(BaseModel):
    symbol: str
    price: str


class TickerOut(BaseModel):
    message: str = "Success"
    data: TickerPrice


class HealthOut(BaseModel):
    status: str = "ok"
    version: str
    rates_cached: Optional[bool] = None

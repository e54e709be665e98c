from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from exchange_proxy.core.errors import (
    CurrencyNotFoundError,
    ProxyError,
    StorageError,
    UpstreamRejectedError,
    UpstreamUnreachableError,
)
from exchange_proxy.models import ConversionOut, CurrencyCode, CurrencyRatesOut, PairRateOut
from exchange_proxy.routers.deps import get_refresher
from exchange_proxy.services.rates import (
    ErrorKind,
    RateRefresher,
    RateTable,
    RefreshFailure,
    convert,
    pair_rate,
    rebase,
)

"""Rate lookup routes.

Endpoints:
    - GET /last/{currency}               -> whole table re-based to currency
    - GET /{base}/{target}               -> pair rate
    - GET /{base}/{target}/{amount}      -> amount converted from base to target

Handlers are plain ``def`` so FastAPI runs them in its threadpool; the store
and upstream calls block.
"""

router = APIRouter(tags=["rates"])


def failure_to_error(failure: RefreshFailure) -> ProxyError:
    if failure.kind.is_upstream_rejection:
        return UpstreamRejectedError(failure.kind.value, failure.detail or None)
    if failure.kind is ErrorKind.STORAGE_ERROR:
        return StorageError(failure.detail or None)
    return UpstreamUnreachableError(failure.detail or None)


def load_table(refresher: RateRefresher) -> RateTable:
    result = refresher.get_or_refresh()
    if isinstance(result, RefreshFailure):
        raise failure_to_error(result)
    return result


@router.get("/last/{currency}", response_model=CurrencyRatesOut, summary="All rates re-based to a currency")
def currency_rates(
    currency: CurrencyCode,
    refresher: RateRefresher = Depends(get_refresher),
):
    table = load_table(refresher)
    rebased = rebase(table, currency)
    if rebased is None:
        raise CurrencyNotFoundError(currency)
    return CurrencyRatesOut(data=rebased)


@router.get("/{base}/{target}", response_model=PairRateOut, summary="Exchange rate between two currencies")
def exchange_rate(
    base: CurrencyCode,
    target: CurrencyCode,
    refresher: RateRefresher = Depends(get_refresher),
):
    table = load_table(refresher)
    rate = pair_rate(table, base, target)
    return PairRateOut(data=rate, base_code=base, target_code=target)


@router.get("/{base}/{target}/{amount}", response_model=ConversionOut, summary="Convert an amount")
def convert_amount(
    base: CurrencyCode,
    target: CurrencyCode,
    amount: Annotated[float, Path(gt=0, allow_inf_nan=False, description="Amount of base currency")],
    refresher: RateRefresher = Depends(get_refresher),
):
    table = load_table(refresher)
    result = convert(table, base, target, amount)
    return ConversionOut(
        data=result.converted_amount,
        rate=result.rate,
        base_code=result.base,
        target_code=result.target,
    )

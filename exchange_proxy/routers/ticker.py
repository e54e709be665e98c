from fastapi import APIRouter, Depends

from exchange_proxy.models import TickerOut, TickerPrice, TickerSymbol
from exchange_proxy.services.ticker import TickerService

from .deps import get_ticker_service

router = APIRouter(tags=["ticker"])


@router.get("/encrypt/{symbol}", response_model=TickerOut, summary="Latest crypto ticker price")
def ticker_price(
    symbol: TickerSymbol,
    svc: TickerService = Depends(get_ticker_service),
):
    return TickerOut(data=TickerPrice(**svc.get_price(symbol)))

"""FastAPI dependencies resolving the services built by ``create_app``."""

from fastapi import Request

from exchange_proxy.core.config import Settings
from exchange_proxy.services.rates import RateRefresher, RateStore
from exchange_proxy.services.ticker import TickerService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_store(request: Request) -> RateStore:
    return request.app.state.rate_store


def get_refresher(request: Request) -> RateRefresher:
    return request.app.state.refresher


def get_ticker_service(request: Request) -> TickerService:
    return request.app.state.ticker

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import errors
from .core.config import Settings, get_settings
from .core.logging import init_logging, request_context_middleware
from .routers import health, rates, ticker, update
from .services.factory import build_services
from .services.rates import RateSource


def create_app(
    settings_override: Settings | None = None,
    rate_source: RateSource | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    rate_source: replaces the configured upstream (tests, offline runs).
    """
    settings = settings_override or get_settings()
    settings.init_post_load()
    init_logging(debug=settings.debug)

    try:
        services = build_services(settings, rate_source)
    except Exception:
        # Failing to open the store is fatal; re-raise after logging
        logging.getLogger("exchange_proxy").exception("failed to initialise rate store on startup")
        raise

    app = FastAPI(title=settings.app_name, debug=settings.debug, version=settings.version)
    app.state.settings = settings
    app.state.rate_store = services.rate_store
    app.state.refresher = services.refresher
    app.state.ticker = services.ticker

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(errors.ProxyError, errors.proxy_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Fixed-prefix routers first: /{base}/{target} would otherwise swallow them
    app.include_router(health.router)
    app.include_router(update.router)
    app.include_router(ticker.router)
    app.include_router(rates.router)

    @app.get("/")
    async def root():
        return {"message": "Exchange Rate Proxy", "version": settings.version}

    return app


app = create_app()

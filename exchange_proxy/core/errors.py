"""Error taxonomy and the FastAPI handlers that render it.

Core refresh operations hand back ``RefreshFailure`` values; routers turn
those into the exceptions below so a single set of handlers owns the
mapping from failure to HTTP status.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("exchange_proxy.errors")


class ProxyError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "internal_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.error)
        self.message = message or self.error

    def to_content(self) -> dict:
        return {"error": self.error, "detail": self.message}


class UpstreamUnreachableError(ProxyError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "upstream-unreachable"


class UpstreamRejectedError(ProxyError):
    """Provider answered with an error envelope (quota, bad key, ...)."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, kind: str, message: str | None = None):
        self.error = kind
        super().__init__(message or kind)
        self.kind = kind


class StorageError(ProxyError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "storage-error"

    def __init__(self, message: str | None = None, *, timeout: bool = False):
        super().__init__(message)
        self.timeout = timeout


class CurrencyNotFoundError(ProxyError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, code: str, side: str | None = None):
        self.code = code
        self.side = side
        if side:
            message = f"{side.capitalize()} currency {code} not found"
        else:
            message = "Currency not found"
        self.error = message
        super().__init__(message)

    def to_content(self) -> dict:
        return {"error": self.message, "detail": {"code": self.code, "side": self.side}}


class InvalidInputError(ProxyError, ValueError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error = "invalid_input"


class UnauthorizedError(ProxyError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Invalid password"


def proxy_error_handler(request: Request, exc: ProxyError):  # type: ignore
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


def not_found_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code, content={"error": "http_error", "detail": exc.detail}
        )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Not Found",
            "detail": f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold raw exception objects which JSONResponse cannot encode
    return [
        {k: v for k, v in err.items() if k != "ctx"} | {"msg": str(err.get("msg", ""))}
        for err in exc.errors()
    ]


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )

from __future__ import annotations

"""Rate source abstraction and refresh result types.

A refresh either yields a full provider snapshot or a failure tagged with an
ErrorKind. Callers branch on ``isinstance(result, RefreshSuccess)``; there is
no nullable "maybe a table" shape.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

RateTable = Dict[str, float]


class ErrorKind(str, Enum):
    # Reported by the provider in its error envelope
    UNSUPPORTED_CODE = "unsupported-code"
    MALFORMED_REQUEST = "malformed-request"
    INVALID_KEY = "invalid-key"
    INACTIVE_ACCOUNT = "inactive-account"
    QUOTA_REACHED = "quota-reached"
    # Local classifications
    UPSTREAM_UNREACHABLE = "upstream-unreachable"
    STORAGE_ERROR = "storage-error"

    @property
    def is_upstream_rejection(self) -> bool:
        return self in _REJECTION_KINDS


_REJECTION_KINDS = frozenset(
    {
        ErrorKind.UNSUPPORTED_CODE,
        ErrorKind.MALFORMED_REQUEST,
        ErrorKind.INVALID_KEY,
        ErrorKind.INACTIVE_ACCOUNT,
        ErrorKind.QUOTA_REACHED,
    }
)


@dataclass(frozen=True)
class RefreshSuccess:
    table: RateTable
    fetched_at_unix: int
    fetched_at_utc: str
    base_code: str = "USD"

    def as_envelope(self) -> Dict[str, object]:
        """Provider-shaped snapshot, as returned by the manual update endpoint."""
        return {
            "result": "success",
            "conversion_rates": dict(self.table),
            "time_last_updated_unix": self.fetched_at_unix,
            "time_last_updated_utc": self.fetched_at_utc,
            "base_code": self.base_code,
        }


@dataclass(frozen=True)
class RefreshFailure:
    kind: ErrorKind
    detail: str = ""


RefreshResult = Union[RefreshSuccess, RefreshFailure]


class RateSource(ABC):
    """Something that can produce a complete USD-based rate snapshot."""

    base_currency: str = "USD"

    @abstractmethod
    def fetch_latest(self, base_currency: str | None = None) -> RefreshResult:
        """Fetch the latest table once. Must not raise for upstream faults."""
        raise NotImplementedError

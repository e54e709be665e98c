from __future__ import annotations

"""Lightweight HTTP client util.

Uses stdlib urllib. Focus: GET JSON with a hard timeout and optional retries.
Upstream error bodies are kept on the raised HttpError so callers can read a
provider's error envelope from a non-2xx response.
"""
import http.client
import json
import socket
import time
import urllib.error
import urllib.request
from typing import Any, Dict, Optional


class HttpError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        payload: Any = None,
        timeout: bool = False,
    ):
        super().__init__(message)
        self.status = status
        self.payload = payload
        self.timeout = timeout


def _decode_json(raw: bytes) -> Any:
    return json.loads(raw.decode("utf-8"))


def _error_payload(err: urllib.error.HTTPError) -> Any:
    try:
        return _decode_json(err.read())
    except (ValueError, OSError):
        return None


def get_json(
    url: str,
    *,
    timeout: float = 5.0,
    retries: int = 0,
    backoff: float = 0.5,
    headers: Optional[Dict[str, str]] = None,
    label: Optional[str] = None,
) -> Any:
    """GET ``url`` and decode its JSON body.

    ``label`` replaces the URL in error messages, for URLs that embed secrets.
    """
    shown = label or url
    request = urllib.request.Request(url, headers=headers or {})
    attempt = 0
    while True:
        try:
            with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
                return _decode_json(resp.read())
        except urllib.error.HTTPError as e:
            err = HttpError(
                f"HTTP {e.code} for {shown}", status=e.code, payload=_error_payload(e)
            )
        except (socket.timeout, TimeoutError):
            err = HttpError(f"Timed out after {timeout}s fetching {shown}", timeout=True)
        except urllib.error.URLError as e:
            is_timeout = isinstance(e.reason, (socket.timeout, TimeoutError))
            err = HttpError(f"Failed to fetch {shown}: {e.reason}", timeout=is_timeout)
        except (OSError, http.client.HTTPException) as e:  # resets while reading the body
            err = HttpError(f"Connection error fetching {shown}: {e}")
        except ValueError as e:  # JSON decode
            err = HttpError(f"Malformed JSON from {shown}: {e}")
        if attempt >= retries:
            raise err
        time.sleep(backoff * (2**attempt))
        attempt += 1

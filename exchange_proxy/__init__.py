"""Exchange rate lookup and conversion proxy with a cached USD rate table."""

from importlib import metadata as importlib_metadata

try:
    __version__ = importlib_metadata.version("exchange-proxy")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"

__all__ = ["__version__"]

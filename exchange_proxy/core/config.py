from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_RATE_SOURCES = {"exchangerate-api", "static"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., API_KEY, UPDATE_PASSWORD,
    DATA_DIR, HTTP_TIMEOUT_SECONDS, REFRESH_SINGLE_FLIGHT).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Exchange Rate Proxy"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "rates.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    store_timeout_seconds: float = 5.0

    # Upstream provider (ExchangeRate-API v6)
    api_key: str = ""
    upstream_base_url: str = "https://v6.exchangerate-api.com/v6"
    base_currency: str = "USD"
    rate_source: str = "exchangerate-api"
    http_timeout_seconds: float = 10.0

    # Shared secret guarding the manual update endpoint
    update_password: str = ""

    # Collapse concurrent cache-miss refreshes into one upstream call
    refresh_single_flight: bool = False

    # Crypto ticker passthrough
    ticker_base_url: str = "https://api.binance.com/api/v3/ticker/price"
    ticker_cache_ttl_seconds: int = 300

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path = Path(self.db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.base_currency = self.base_currency.upper()
        if self.rate_source not in ALLOWED_RATE_SOURCES:
            raise ValueError(
                f"Unsupported rate_source '{self.rate_source}'. Allowed: {ALLOWED_RATE_SOURCES}"
            )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings

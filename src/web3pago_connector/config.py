"""Configuration management for the Web3Pago connector."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    web3pago_api_url: str | None
    connector_base_url: str
    payment_app_name: str
    http_timeout_seconds: float
    host: str
    port: int
    debug: bool
    log_level: str

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./web3pago_connector.db",
            ),
            web3pago_api_url=os.getenv("WEB3PAGO_API_URL") or None,
            connector_base_url=os.getenv("CONNECTOR_BASE_URL", "http://localhost:8000"),
            payment_app_name=os.getenv("PAYMENT_APP_NAME", "web3pago.payment-app"),
            http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()

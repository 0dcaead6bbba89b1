"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Folio"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: Literal["local", "development", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # Ledger
    # "close": a sell past the held quantity closes the position silently.
    # "reject": oversells and sells against unknown holdings raise.
    OVERSELL_POLICY: Literal["close", "reject"] = "close"
    RECENT_TRANSACTIONS_LIMIT: int = 5
    SEED_SAMPLE_DATA: bool = True

    # Market Data Provider
    MARKET_DATA_PROVIDER: Literal["static", "yfinance", "alpha_vantage"] = "static"
    ALPHA_VANTAGE_API_KEY: str = "demo"
    ALPHA_VANTAGE_BASE_URL: str = "https://www.alphavantage.co/query"
    HTTP_TIMEOUT_SECONDS: float = 10.0
    QUOTE_FRESHNESS_SECONDS: int = 300  # 5 minutes
    FX_FRESHNESS_SECONDS: int = 3600  # 1 hour

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]


# Global settings instance
settings = Settings()

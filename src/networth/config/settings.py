"""Application settings and configuration."""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory based on platform."""
    return Path.home() / "Documents" / "Net Worth Data"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Net Worth Tracker"
    app_version: str = "0.1.0"

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    # Overrides for the static conversion factors, e.g. {"JPY": "0.2"}
    currency_rates: dict[str, Decimal] = {}

    # Quote feed
    quote_provider: str = "yahoo"  # "yahoo" or "stub"
    quote_base_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    quote_timeout_seconds: float = 10.0
    quote_max_attempts: int = 3
    quote_retry_delay_seconds: float = 2.0
    fx_symbol: str = "TWD=X"
    fx_refresh_interval_seconds: float = 300.0

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "networth.db"
        return f"sqlite:///{db_path}"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Replace the current settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None

"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External Services
    ledger_api_base: str = "https://stats.dev.finance.test"

    # Service
    service_name: str = "interest-account"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Interest settlement
    payout_interval_days: int = 3
    days_per_year: int = 365


settings = Settings()

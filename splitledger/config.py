"""Configuration management using Pydantic Settings"""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./splitledger.db"

    # Service
    service_name: str = "splitledger"
    log_level: str = "INFO"

    # Ledger
    itemized_tolerance: Decimal = Decimal("0.1")  # Allowed gap between item sum and expense total

    # Settlement notifications (disabled when unset)
    notify_webhook_url: Optional[str] = None

    # HTTP Client
    http_timeout_seconds: float = 5.0
    webhook_max_retries: int = 5
    webhook_backoff_base: float = 1.0  # Exponential backoff base in seconds


settings = Settings()

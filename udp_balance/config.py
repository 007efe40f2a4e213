"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External Services
    ledger_api_base: str = "http://localhost:8080/api"

    # Service
    service_name: str = "udp-balance-analytics"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Analytics
    default_time_range: str = "30d"
    dashboard_cache_size: int = 128

    # CSV export
    csv_escape_policy: str = "none"  # none | double_quotes
    csv_date_format: str = "%d/%m/%Y %H:%M"


settings = Settings()

"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Report service configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_prefix="REPORT_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External Services
    payment_service_url: str = "http://localhost:8000"

    # Service
    service_name: str = "report-service"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0


settings = Settings()

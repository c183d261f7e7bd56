"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Supplier Payment Reports"
    debug: bool = False
    log_level: str = "INFO"

    api_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the debts/payments REST API",
    )
    api_token: Optional[str] = None
    request_timeout: float = 30.0

    report_path: str = "/reports/payments"
    report_page_size: int = Field(default=10, gt=0)
    cashier_page_size: int = Field(default=20, gt=0)
    cashier_max_pages: int = Field(default=50, gt=0)

    timezone: str = "America/Caracas"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()

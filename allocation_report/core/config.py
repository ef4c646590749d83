"""Application configuration."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "Resource Allocation Report Service"
    app_env: str = "development"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    default_sheet_name: str = "Resource Allocation (Monthly)"

    pdf_page_format: str = "A4"
    # Upper bound for page load and graphics settling inside the browser.
    pdf_render_timeout_ms: int = Field(default=30000, ge=1000)
    pdf_settle_ms: int = Field(default=500, ge=0)
    # Keep .env support for comma-separated values (non-JSON).
    chromium_args: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("allowed_origins", "chromium_args", mode="before")
    @classmethod
    def parse_csv_list(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""

    return Settings()

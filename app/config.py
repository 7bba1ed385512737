"""
Application configuration using Pydantic Settings.
Loads environment variables and provides type-safe configuration.
"""

from typing import List, Optional
from decimal import Decimal
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from pathlib import Path

# Get the base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO")

    # API Configuration
    api_title: str = Field(default="Invoice Settlement Engine")
    api_version: str = Field(default="1.0.0")
    api_prefix: str = Field(default="/api/v1")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default=f"sqlite:///{BASE_DIR / 'settlement.db'}",
        description="SQLAlchemy database URL"
    )
    auto_create_tables: bool = Field(default=True, description="Create tables on startup")

    # CORS
    cors_origins: str | List[str] = Field(
        default="http://localhost:3000,http://localhost:5173"
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(default=["*"])
    cors_allow_headers: List[str] = Field(default=["*"])

    # Exchange rates
    exchange_rate_api_url: str = Field(
        default="https://api.exchangerate-api.com/v4/latest",
        description="Base URL of the INR-based rate feed"
    )
    exchange_rate_timeout_seconds: float = Field(default=10.0)
    exchange_rate_cache_seconds: int = Field(
        default=60,
        description="How long a fetched rate table is reused; 0 disables caching"
    )
    pivot_currency: str = Field(default="INR")

    # Settlement
    settlement_max_write_attempts: int = Field(default=3, ge=1)
    paid_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Client-currency slack below which an invoice counts as paid"
    )

    # Sentry (Optional)
    sentry_dsn: Optional[str] = Field(default=None)
    sentry_traces_sample_rate: float = Field(default=0.1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            if not v.strip():
                return ["http://localhost:3000", "http://localhost:5173"]
            return [origin.strip() for origin in v.split(",")]
        elif v is None:
            return ["http://localhost:3000", "http://localhost:5173"]
        return v

    @field_validator("pivot_currency")
    @classmethod
    def check_pivot_currency(cls, v):
        """The ledger stores INR totals; the pivot cannot be reconfigured."""
        if v.upper() != "INR":
            raise ValueError("Only INR is supported as pivot currency")
        return v.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment.lower() == "testing"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def validate_environment(self) -> None:
        """Validate that all required environment variables are set."""
        if self.is_sqlite:
            raise ValueError("DATABASE_URL must point to a server database in production")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the application.
    """
    settings = Settings()

    # Validate environment in production
    if settings.is_production:
        settings.validate_environment()

    return settings


# Create a global settings instance
settings = get_settings()

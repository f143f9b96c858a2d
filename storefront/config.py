"""
Application configuration using pydantic-settings.
Loads from environment variables / .env file.

Gateway credentials are not part of this object; they live in the
site_settings table and are read per request (see services.settings_provider).
"""

from functools import lru_cache
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "storefront"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # API Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Hosted Postgres (backend-as-a-service)
    database_url: str = ""

    # Hosted auth API
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Admin
    admin_api_key: str = ""

    # Checkout
    default_currency: str = "BDT"
    public_site_url: str = "http://localhost:8080"
    public_api_url: str = "http://localhost:8000"
    gateway_timeout_seconds: float = 30.0

    # CORS
    cors_origins: List[str] = ["*"]

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

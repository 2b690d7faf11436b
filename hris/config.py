"""
HRIS Console - Configuration Settings

This module handles all application configuration using Pydantic Settings.
Environment variables are loaded from .env file.
"""

import logging
from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===========================================
    # APPLICATION CONFIGURATION
    # ===========================================
    app_name: str = "HRIS Console"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"  # Ignored while debug is on

    # ===========================================
    # HRIS BACKEND (REST API of record)
    # ===========================================
    backend_api_url: str = "http://localhost:3000/api/v1"
    backend_api_token: Optional[str] = None  # Service token, used when caller sends none
    backend_timeout_seconds: float = 30.0

    # ===========================================
    # PAYROLL DEFAULTS
    # ===========================================
    default_payroll_cutoff_day: int = 20

    # ===========================================
    # LEAVE DEFAULTS
    # ===========================================
    probation_months: int = 3
    annual_leave_code: str = "AL"

    # ===========================================
    # BULK OPERATIONS
    # Allocation jobs are throttled so the backend is not flooded
    # ===========================================
    bulk_concurrency: int = 5
    bulk_batch_delay_seconds: float = 0.5
    bulk_backoff_seconds: float = 1.0
    bulk_max_backoff_seconds: float = 8.0
    employee_fetch_limit: int = 1000

    # ===========================================
    # CORS SETTINGS
    # ===========================================
    cors_origins: str = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_value(self) -> int:
        """Numeric logging level; DEBUG in debug mode, INFO for unknown names."""
        if self.debug:
            return logging.DEBUG
        level = logging.getLevelName(self.log_level.strip().upper())
        return level if isinstance(level, int) else logging.INFO

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every call.
    """
    return Settings()


# Export settings instance
settings = get_settings()

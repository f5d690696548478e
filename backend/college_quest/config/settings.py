"""
Application Settings for College Quest

Centralized configuration using Pydantic Settings with .env support.
All environment variables are validated at startup.
"""

from functools import lru_cache
from typing import Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Row limits mirror the hosted Postgres REST layer: a single read never
    returns more than MAX_ROWS_PER_REQUEST rows, larger listings are
    assembled from several range-bounded reads.
    """

    # Supabase Configuration
    supabase_url: str
    supabase_anon_key: Optional[str] = None
    supabase_service_role_key: str
    supabase_jwt_secret: Optional[str] = None

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # CORS Configuration
    frontend_url: str = "http://localhost:3000"
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Admin password accepted as a bearer credential on /api/admin routes
    admin_password: Optional[str] = None

    # Listing limits
    max_rows_per_request: int = 1000
    max_listing_limit: int = 5000
    default_listing_limit: int = 12
    relevance_max_rows: int = 10000

    # Similar colleges
    similar_candidate_pool: int = 200
    similar_max_results: int = 60
    similar_default_results: int = 6

    # Favorites
    max_folders_per_user: int = 20

    # Database Configuration (SQLModel/SQLAlchemy)
    supabase_password: Optional[str] = None
    database_url: Optional[str] = None
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_echo: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Row caps must be positive and consistent with each other."""
        if self.max_rows_per_request < 1:
            raise ValueError("MAX_ROWS_PER_REQUEST must be at least 1")
        if self.max_listing_limit < 1:
            raise ValueError("MAX_LISTING_LIMIT must be at least 1")
        if self.default_listing_limit > self.max_listing_limit:
            raise ValueError(
                "DEFAULT_LISTING_LIMIT cannot exceed MAX_LISTING_LIMIT"
            )
        if self.similar_default_results > self.similar_max_results:
            raise ValueError(
                "SIMILAR_DEFAULT_RESULTS cannot exceed SIMILAR_MAX_RESULTS"
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export for direct import
settings = get_settings()

import logging
from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
from typing import Union

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Database
    # A single authoritative file; every entry point shares the one store built from it.
    DATABASE_URL: str = "sqlite:///./accounts.db"
    SQL_ECHO: bool = False

    # Environment
    ENVIRONMENT: str = "development"
    SERVICE_NAME: str = "Account Registry"
    SERVICE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Server bind address (account_registry.main:run)
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Admin API key for protected endpoints
    # Generate with: openssl rand -hex 32
    ADMIN_API_KEY: str = ""

    @field_validator("ADMIN_API_KEY")
    @classmethod
    def validate_admin_api_key(cls, v, info):
        """Admin API key validation - required in production"""
        env = (
            info.data.get("ENVIRONMENT", "development") if info.data else "development"
        )
        if env == "production" and (not v or len(v) < 32):
            raise ValueError(
                "ADMIN_API_KEY must be at least 32 characters in production"
            )
        return v

    # Pagination for history / operation log reads
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 1000

    @field_validator("DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE")
    @classmethod
    def validate_page_size(cls, v):
        if v < 1:
            raise ValueError("Page sizes must be positive")
        return v

    # Rate limiting (slowapi)
    RATE_LIMIT_ENABLED: bool = True

    # CORS
    # Use comma-separated list: "https://app.example.com,https://admin.example.com"
    ALLOWED_ORIGINS: Union[str, list[str]] = "http://localhost:3000"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse ALLOWED_ORIGINS from string or list"""
        if isinstance(v, str):
            if v == "*":
                logger.warning(
                    "CORS wildcard '*' enabled. Consider restricting for web apps."
                )
                return ["*"]
            # Comma-separated list (a single URL is a one-element list)
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()

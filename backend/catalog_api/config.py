"""
Configuration settings for the Catalog API.

Loads environment variables from .env file and provides typed configuration.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Security Configuration
    SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Secret key used to sign access tokens",
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=24 * 60, description="Access token expiration time in minutes"
    )
    BCRYPT_ROUNDS: int = Field(default=12, description="bcrypt cost factor")
    REGISTRATION_ENABLED: bool = Field(
        default=False, description="Expose POST /auth/register"
    )
    REQUIRE_AUTH_FOR_WRITES: bool = Field(
        default=False,
        description="Require a bearer token on mutating catalog routes",
    )
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable slowapi limits")
    LOGIN_RATE_LIMIT: str = Field(
        default="5/minute", description="Rate limit applied to login attempts"
    )

    # Database Configuration
    DATABASE_URL: str = Field(
        default="sqlite:///./data/catalog.db", description="SQLAlchemy database URL"
    )
    DATABASE_ECHO: bool = Field(
        default=False, description="Echo SQL queries (for debugging)"
    )
    DATABASE_TIMEOUT: int = Field(
        default=10, description="Database connect/lock/pool timeout in seconds"
    )

    # File Upload Configuration
    UPLOAD_DIR: str = Field(
        default="./uploads", description="Root directory for stored images"
    )
    MAX_UPLOAD_SIZE: int = Field(
        default=5 * 1024 * 1024,  # 5 MiB
        description="Maximum image size in bytes",
    )
    MAX_UPLOAD_FILES: int = Field(
        default=10, description="Maximum number of images per product request"
    )
    ALLOWED_EXTENSIONS: List[str] = Field(
        default=[".jpeg", ".jpg", ".png", ".webp"],
        description="Allowed image file extensions",
    )
    ALLOWED_MIME_TYPES: List[str] = Field(
        default=["image/jpeg", "image/jpg", "image/png", "image/webp"],
        description="Allowed image MIME types",
    )

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    ENABLE_FILE_LOGGING: bool = Field(
        default=False, description="Enable logging to file"
    )
    LOG_FILE: Optional[str] = Field(
        default="./logs/catalog_api.log", description="Log file path"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()

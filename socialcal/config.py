"""
Application configuration using environment variables.
"""
import os
import secrets
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "SocialCal API"
    debug: bool = False
    environment: str = "development"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./socialcal.db")

    # Backend-as-a-service (auth + object storage)
    supabase_url: str = "http://localhost:54321"
    supabase_service_key: str = ""
    supabase_jwt_secret: str = os.getenv("SUPABASE_JWT_SECRET", secrets.token_urlsafe(32))
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"
    storage_bucket: str = "post-media"

    # Platform posting routes (black-box collaborators)
    platform_api_base_url: str = "http://localhost:3001"
    media_proxy_base_url: str = "https://www.socialcal.app"
    platform_request_timeout: int = 120  # seconds per platform call

    # Publish safety timeouts
    dispatch_timeout_seconds: int = 60
    instagram_video_timeout_seconds: int = 300

    # Scheduled posts
    cron_secret: str = os.getenv("CRON_SECRET", secrets.token_urlsafe(32))
    scheduled_batch_size: int = 10
    stuck_post_minutes: int = 15
    orphan_media_max_age_hours: int = 24

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "https://www.socialcal.app",
    ]

    # Rate limiting
    upload_rate_limit: str = "30/minute"
    publish_rate_limit: str = "10/minute"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class TokenConfig(BaseModel):
    """Everything the token issuer needs. Passed in at construction."""

    secret_key: str
    algorithm: str = "HS256"
    expire_minutes: int | None = None  # None = tokens never expire


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 7777
    cors_origins: str = "http://localhost:5173"

    # Frontend base URL used in verification / reset links
    client_domain: str = "http://localhost:5173"

    posts_per_page: int = 4

    # ==========================================================================
    # Authentication
    # ==========================================================================

    jwt_secret_key: str = "dev-jwt-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int | None = None

    # ==========================================================================
    # Uploads / Blob Storage
    # ==========================================================================

    upload_dir: str = "./data/uploads"
    blob_backend: str = "local"  # local, s3
    blob_local_path: str = "./data/images"

    # ==========================================================================
    # AWS
    # ==========================================================================

    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_s3_bucket: str = "blogapi-images"
    aws_ses_from_email: str = ""

    # ==========================================================================
    # Consistency
    # ==========================================================================

    # Off: comments by other users on a deleted user's posts are left behind.
    cascade_foreign_comments_on_user_delete: bool = False

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_aws(self) -> bool:
        """Whether AWS services should be used."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)

    def token_config(self) -> TokenConfig:
        return TokenConfig(
            secret_key=self.jwt_secret_key,
            algorithm=self.jwt_algorithm,
            expire_minutes=self.jwt_expire_minutes,
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Document store
    # "sql" persists documents through SQLAlchemy, "memory" keeps them in-process
    store_backend: str = "sql"
    database_url: str = "sqlite:///./menu_admin.db"
    database_echo: bool = False

    # Redis change feed (lets several API processes share live subscriptions)
    redis_url: str = "redis://localhost:6379"
    redis_socket_timeout: int = 5
    change_feed_enabled: bool = False
    change_feed_channel: str = "docstore:changes"

    # JWT Configuration
    jwt_secret: str = "dev-secret-change-me-in-production"
    jwt_issuer: str = "menu-admin"
    jwt_audience: str = "menu-admin-users"
    jwt_access_token_expire_minutes: int = 60

    # ImageKit media uploads
    imagekit_public_key: str = ""
    imagekit_private_key: str = ""
    imagekit_url_endpoint: str = ""
    imagekit_upload_url: str = "https://upload.imagekit.io/api/v1/files/upload"
    imagekit_api_url: str = "https://api.imagekit.io/v1"
    imagekit_timeout: float = 30.0
    max_image_bytes: int = 5 * 1024 * 1024

    # Tenant defaults
    default_restaurant_name: str = "My Restaurant"

    # Comma-separated list of allowed origins (empty uses default localhost list)
    allowed_origins: str = ""

    # Rate limiting (slowapi)
    rate_limit_enabled: bool = True

    # Server
    api_port: int = 8000

    # Environment
    environment: str = "development"
    debug: bool = True

    @property
    def imagekit_configured(self) -> bool:
        return bool(
            self.imagekit_public_key
            and self.imagekit_private_key
            and self.imagekit_url_endpoint
        )

    def validate_production_secrets(self) -> list[str]:
        """
        Validate that secrets are properly configured for production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        weak_secrets = {
            "dev-secret-change-me-in-production",
            "secret",
            "password",
            "changeme",
            "default",
        }

        if self.environment == "production":
            if self.jwt_secret in weak_secrets or len(self.jwt_secret) < 32:
                errors.append(
                    "JWT_SECRET must be at least 32 characters and not a default value in production"
                )

            if self.debug:
                errors.append("DEBUG must be False in production")

            if self.store_backend == "memory":
                errors.append("STORE_BACKEND=memory loses all data on restart")

            if self.imagekit_public_key and not self.imagekit_private_key:
                errors.append(
                    "IMAGEKIT_PRIVATE_KEY must be set when IMAGEKIT_PUBLIC_KEY is configured"
                )

            if not self.allowed_origins:
                errors.append(
                    "ALLOWED_ORIGINS must be set in production (comma-separated list of allowed domains)"
                )

        if self.store_backend not in ("sql", "memory"):
            errors.append(f"STORE_BACKEND must be 'sql' or 'memory', got '{self.store_backend}'")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

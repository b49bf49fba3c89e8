"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here — no scattered magic strings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_admin: Rate limit for admin endpoints.
        rate_limit_enabled: Turn rate limiting off (local runs, tests).
        permission_table: Table holding one permission row per user.
        profiles_table: Table holding user profiles and their manager.
        fallback_cache_size: Max users kept in memory while the permission
            table is absent.
        jwt_secret: HS256 secret used to verify bearer tokens.
        jwt_audience: Expected ``aud`` claim of user tokens.
        jwt_algorithm: Signature algorithm of bearer tokens.
        admin_roles: Roles accepted on admin endpoints.
        root_admin_roles: Admin roles that manage every user.

    Database settings follow the same pattern as the rest of the
    application: an explicit DSN wins over the postgres_* parts.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "TradeGate"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"
    rate_limit_admin: str = "30/minute"
    rate_limit_enabled: bool = True

    database_url: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "tradegate"

    permission_table: str = "trade_permissions"
    profiles_table: str = "profiles"
    fallback_cache_size: int = 10_000

    jwt_secret: str = "change-me"
    jwt_audience: str = "authenticated"
    jwt_algorithm: str = "HS256"
    admin_roles: frozenset[str] = frozenset(
        {"admin", "superadmin", "sub-admin", "subadmin"}
    )
    root_admin_roles: frozenset[str] = frozenset({"admin", "superadmin"})

    def get_database_dsn(self) -> str:
        """Return the effective Postgres DSN.

        Priority:
        1. Explicit `DATABASE_URL`
        2. Build DSN from postgres_* values (useful for Docker Compose or local setups)
        """
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}@"
            f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()

"""Configuration settings for Corkscrew."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Supabase
    supabase_url: str | None = None
    # New key system (preferred)
    supabase_publishable_key: str | None = None
    # Legacy key (deprecated, will be removed)
    supabase_anon_key: str | None = None
    # Optional - lets us verify access tokens without a round-trip
    supabase_jwt_secret: str | None = None
    supabase_jwt_audience: str = "authenticated"

    # Session cookies
    cookie_secure: bool = True
    cookie_max_age: int = 7 * 24 * 60 * 60  # 7 days

    # App
    app_url: str = "http://localhost:8000"
    debug: bool = False
    log_level: str = "INFO"
    # Rate limiting. Peers in these networks may set X-Forwarded-For.
    trusted_proxy_cidrs: str = "10.0.0.0/8,172.16.0.0/12,192.168.0.0/16,127.0.0.0/8,::1/128"
    sign_in_rate_limit: str = "10/minute"
    sign_up_rate_limit: str = "5/minute"
    callback_rate_limit: str = "30/minute"

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def supabase_key(self) -> str | None:
        """Public API key, preferring the new key system."""
        return self.supabase_publishable_key or self.supabase_anon_key

    @property
    def backend_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""
Application Configuration
"""
from typing import List, Tuple
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Inbound Knowledge Base"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:3000"]

    # Authentication
    secret_key: str
    access_token_expire_minutes: int = 60 * 24
    algorithm: str = "HS256"
    allowed_email_domain: str = "@inbound.no"

    # Database
    database_url: str = "sqlite:///./data/app.db"

    # Rate limits ("<max requests>/<window seconds>")
    rate_limit_search: str = "30/60"
    rate_limit_mutations: str = "10/60"
    rate_limit_auth: str = "5/900"

    class Config:
        env_file = ".env"
        case_sensitive = False


def parse_rate_limit(value: str) -> Tuple[int, int]:
    """
    Parse a "<count>/<seconds>" rate limit string

    Raises:
        ValueError: If the value is malformed or not positive
    """
    count, _, window = value.partition("/")
    limit, seconds = int(count), int(window)
    if limit <= 0 or seconds <= 0:
        raise ValueError(f"Rate limit must be positive: {value!r}")
    return limit, seconds


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()

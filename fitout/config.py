"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    # App
    app_name: str = "Fitout Hub"
    app_env: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./fitout.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def fix_db_url(cls, v: str) -> str:
        # Heroku-style URLs need the asyncpg driver prefix for SQLAlchemy async
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Startup
    seed_on_startup: bool = True
    scheduler_enabled: bool = True

    # Pattern snapshot
    pattern_refresh_minutes: int = 5

    # Matching limits
    max_input_length: int = 500
    max_pattern_length: int = 200
    regex_timeout_seconds: float = 0.05

    model_config = {"env_file": None}


@lru_cache
def get_settings() -> Settings:
    return Settings()

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = False

    # Application
    app_name: str = "URL Shortener"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Storage
    storage_backend: str = "sql"  # Options: "sql", "memory"
    database_url: str = "sqlite:///./storage/url_shortener.db"
    database_timeout: float = 5.0  # Seconds an SQLite writer waits on a locked database

    # Aliases
    domain: str = "http://127.0.0.1:8000/"  # Prepended to the alias in save responses
    alias_length: int = Field(default=8, ge=1)  # Length of generated aliases

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Settings loaded once per process"""
    return Settings()

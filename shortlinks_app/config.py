from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Link store settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below

    No module-level instance exists: build one at startup and hand it to
    the store, the monitor and the factories.
    """

    # Application
    app_name: str = "URL Shortener"
    short_link_domain: str = "localhost"

    # Link lifecycle defaults
    default_ttl_hours: int = Field(24, gt=0)
    default_max_clicks: int = Field(10, gt=0)
    cleanup_interval_minutes: int = Field(5, gt=0)
    url_max_length: int = Field(2048, gt=0)

    # Short code generation
    short_code_strategy: str = "digest"  # Options: "digest", "random"
    short_code_length: int = Field(8, gt=0)
    digest_algorithm: str = "md5"
    max_retries: int = Field(100, gt=0)  # Collision retries before giving up

    # Storage
    storage_backend: str = "file"  # Options: "file", "memory"
    storage_file: str = "url_shortener_links.txt"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

"""
Configuration management for the StockPick gateway.

Uses pydantic-settings for type-safe environment variable handling.
The upstream API key is loaded from the environment only - never from files in repo.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SOURCE_FILES = [
    "companylist-nasdaq.csv",
    "companylist-nyse.csv",
    "companylist-amex.csv",
]


class AppEnvironment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Sensitive values use SecretStr to prevent accidental logging.
    """

    model_config = SettingsConfigDict(
        env_prefix="STOCKPICK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: AppEnvironment = Field(
        default=AppEnvironment.DEVELOPMENT,
        description="Application environment",
    )

    # Server configuration
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=3000, ge=1024, le=65535, description="Server port")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:4200"],
        description="Origins allowed to call the API from a browser",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit one JSON object per log line",
    )

    # Ticker sources
    tickers_dir: Path = Field(
        default=Path("./tickers"),
        description="Directory holding the per-exchange ticker lists",
    )
    source_files: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_FILES),
        description="Ticker list files, in catalog order (relative to tickers_dir)",
    )
    source_read_timeout_s: float = Field(
        default=30.0,
        description="Maximum time to parse a single ticker list",
        gt=0,
        le=600,
    )
    source_chunk_size: int = Field(
        default=1000,
        description="Rows parsed per chunk when streaming a ticker list",
        ge=1,
        le=100000,
    )
    warm_catalog_on_startup: bool = Field(
        default=False,
        description="Build the catalog during startup instead of on first request",
    )

    # Catalog views
    unknown_sector: str = Field(
        default="n/a",
        description="Sector label meaning 'unknown', excluded from the sector index",
    )
    default_page_start: int = Field(default=0, ge=0, description="Default ticker offset")
    default_page_size: int = Field(default=25, ge=1, description="Default ticker page size")

    # Upstream market data provider
    upstream_base_url: str = Field(
        default="https://query1.finance.yahoo.com",
        description="Upstream market data API base URL",
    )
    upstream_api_key: SecretStr | None = Field(
        default=None,
        description="Upstream API key (sent as a header when set)",
    )
    upstream_timeout_s: float = Field(
        default=15.0,
        description="Upstream request timeout in seconds",
        ge=1,
        le=120,
    )
    upstream_max_retries: int = Field(
        default=2,
        description="Maximum retry attempts for upstream requests",
        ge=0,
        le=10,
    )
    upstream_rate_limit_rps: float = Field(
        default=5.0,
        description="Upstream rate limit (requests per second)",
        gt=0,
        le=100,
    )
    upstream_rate_limit_burst: int = Field(
        default=10,
        description="Upstream rate limit burst allowance",
        ge=1,
        le=100,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator("source_files")
    @classmethod
    def validate_source_files(cls, v: list[str]) -> list[str]:
        """Reject blank entries in the source list."""
        cleaned = [name.strip() for name in v]
        if any(not name for name in cleaned):
            raise ValueError("source_files must not contain blank entries")
        return cleaned

    @property
    def source_paths(self) -> list[Path]:
        """Ticker list paths in catalog order."""
        return [self.tickers_dir / name for name in self.source_files]

    @property
    def has_upstream_key(self) -> bool:
        """Check if an upstream API key is configured."""
        return self.upstream_api_key is not None

    def get_redacted_config(self) -> dict[str, str | int | bool]:
        """
        Get configuration dict with sensitive values redacted.
        Safe for logging and API responses.
        """
        return {
            "env": self.env.value,
            "host": self.host,
            "port": self.port,
            "log_level": self.log_level,
            "log_json": self.log_json,
            "tickers_dir": str(self.tickers_dir),
            "sources": len(self.source_files),
            "upstream_base_url": self.upstream_base_url,
            "upstream_key_configured": self.has_upstream_key,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure single instance throughout application.
    """
    return Settings()


def get_settings_dep() -> Settings:
    """
    Dependency for FastAPI routes to get settings.
    Allows for easy dependency override in tests.
    """
    return get_settings()

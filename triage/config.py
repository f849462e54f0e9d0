"""
Configuration management with environment variable support and validation.

Design principles:
- Validation at startup (fail fast)
- Type safety with Pydantic
- Secure defaults (no API keys in code)
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ClinicalApiConfig(BaseModel):
    """Connection settings for the clinical assessment API."""

    api_key: str = Field(..., description="Assessment API key")
    base_url: str = Field(
        default="https://assessment.ksensetech.com/api", description="API base URL"
    )
    api_key_header: str = Field(default="x-api-key", description="Header name for API key")
    timeout_seconds: float = Field(default=30.0, gt=0.0, description="Per-request timeout")

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        v = v.strip()
        if not v or v == "your-api-key-here":
            raise ValueError("Assessment API key must be set in environment or .env file")
        if not v.startswith("ak_"):
            raise ValueError("Assessment API key must start with 'ak_'")
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class FetchConfig(BaseModel):
    """Paginated fetch tuning. Defaults match the API's documented behaviour."""

    page_size: int = Field(default=20, ge=1, le=100, description="Records per page")
    max_attempts: int = Field(
        default=5, ge=1, description="Total attempts per page before giving up"
    )
    backoff_seconds: float = Field(
        default=1.0, ge=0.0, description="Fixed wait between attempts on one page"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Logging level")
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    api: ClinicalApiConfig
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> LogLevel:
        v = val.strip().upper()
        return cast(
            LogLevel,
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    api_config = ClinicalApiConfig(
        api_key=os.getenv("ASSESSMENT_API_KEY", ""),
        base_url=os.getenv("ASSESSMENT_BASE_URL", "https://assessment.ksensetech.com/api"),
        timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30.0")),
    )

    fetch_config = FetchConfig(
        page_size=int(os.getenv("PAGE_SIZE", "20")),
        max_attempts=int(os.getenv("FETCH_MAX_ATTEMPTS", "5")),
        backoff_seconds=float(os.getenv("FETCH_BACKOFF_SECONDS", "1.0")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        api=api_config,
        fetch=fetch_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def reset_config_cache() -> None:
    """Forget the cached configuration so the next get_config() re-reads the environment."""
    get_config.cache_clear()

"""
Configuration management using Pydantic

This module provides application-wide configuration using Pydantic BaseSettings
with support for environment variables and type validation.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from orderbook_matcher.core.matching_policy import MatchingPolicy


class Settings(BaseSettings):
    """
    Application configuration settings.

    All settings can be overridden using environment variables with the
    MATCHER_ prefix. For example, MATCHER_DEFAULT_POLICY overrides
    default_policy.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Matching
    default_policy: MatchingPolicy = Field(
        default=MatchingPolicy.PRICE_TIME,
        description="Policy used when a request does not name one"
    )
    max_batch_size: Optional[int] = Field(
        default=100_000,
        description="Maximum number of orders accepted in one batch (None for unbounded)"
    )
    min_notional: Decimal = Field(
        default=Decimal("0.00000001"),
        description="Minimum acceptable notional"
    )
    max_notional: Decimal = Field(
        default=Decimal("10000000"),
        description="Maximum acceptable notional"
    )
    audit_results: bool = Field(
        default=True,
        description="Check conservation and fill symmetry after every run"
    )
    log_fills: bool = Field(
        default=False,
        description="Write one log line per fill"
    )

    # API Configuration
    api_host: str = Field(default="localhost", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    allowed_origins: List[str] = Field(
        default=["*"],
        description="CORS allowed origins"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_dir: Optional[str] = Field(
        default=None,
        description="Directory for log files (console only when unset)"
    )
    use_json_logs: bool = Field(
        default=False,
        description="Emit structured JSON log lines"
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings instance
    """
    return settings

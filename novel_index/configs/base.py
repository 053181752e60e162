"""
Shared settings base for the aggregated Settings class.

Reads the project .env once and normalizes the log level so it can be
handed straight to configure_logging.

Dependencies: pydantic, pydantic_settings
System role: Foundation for the aggregated settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class BaseSettings(PydanticBaseSettings):
    """Process-wide options shared by every indexer deployment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development", description="Deployment name used in log context")
    debug: bool = Field(default=False, description="Force DEBUG logging regardless of log_level")
    log_level: LogLevel = Field(default="INFO", description="Root log level passed to configure_logging")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def effective_log_level(self) -> str:
        """Level to configure logging with; debug wins over log_level."""
        return "DEBUG" if self.debug else self.log_level

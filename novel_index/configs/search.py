"""
Search configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Result count limits for RAG search
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchSettings(BaseSettings):
    """Result count defaults and limits."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCH_",
        case_sensitive=False,
        extra="ignore",
    )

    default_k: int = Field(default=10, ge=1, description="Results returned when k is not given")
    max_k: int = Field(default=50, ge=1, description="Upper bound applied to any requested k")

    @model_validator(mode="after")
    def check_limits(self) -> "SearchSettings":
        """Ensure the default never exceeds the cap."""
        if self.default_k > self.max_k:
            raise ValueError(
                f"default_k ({self.default_k}) must not exceed max_k ({self.max_k})"
            )
        return self

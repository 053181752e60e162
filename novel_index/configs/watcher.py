"""
File watcher configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Filesystem watch tuning for incremental re-indexing
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WatcherSettings(BaseSettings):
    """Filesystem watch configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WATCHER_",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Start watching when the manager starts")
    debounce_ms: int = Field(default=500, ge=0, description="Quiet period before an event is emitted")
    watched_extensions: list[str] = Field(
        default=["md", "txt"],
        description="File extensions (without dot) that trigger re-indexing",
    )
    ignore_patterns: list[str] = Field(
        default=[
            "*/node_modules/*",
            "*/.git/*",
            "*/.DS_Store",
            "*.tmp",
            "*.swp",
            "*~",
        ],
        description="Glob patterns excluded from watching",
    )

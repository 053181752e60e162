"""
Chunking configuration settings.

Token budget and overlap used when splitting manuscripts into chunks.

Dependencies: pydantic, pydantic_settings
System role: ChunkSplitter parameters
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkSettings(BaseSettings):
    """Chunk size configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHUNK_",
        case_sensitive=False,
        extra="ignore",
    )

    max_tokens: int = Field(
        default=400,
        ge=1,
        description="Approximate token budget per chunk",
    )
    overlap: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Share of the previous chunk repeated at the start of the next one (0.0-1.0)",
    )

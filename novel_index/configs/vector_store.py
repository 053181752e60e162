"""
Vector store configuration settings.

Manages the Qdrant connection and collection used by the vector backend.
Either a server URL or an embedded location (":memory:" or a directory) is used.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for semantic retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Qdrant vector store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(default="http://localhost:6333", description="Qdrant server URL")
    api_key: str | None = Field(default=None, description="Qdrant API key")
    location: str | None = Field(
        default=None,
        description="Embedded Qdrant location (':memory:' or a path); overrides url when set",
    )
    timeout: int = Field(default=5, ge=1, description="Request timeout in seconds")
    collection_name: str = Field(default="novel-chunks", description="Collection holding chunk vectors")
    score_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum similarity score kept in results (0.0-1.0)",
    )
    vector_dimensions: int = Field(default=768, ge=1, description="Collection vector size")
    snippet_length: int = Field(default=120, ge=1, description="Snippet window in characters")

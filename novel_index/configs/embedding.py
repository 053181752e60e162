"""
Embedding configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Embedding model selection for the vector backend
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """Embedding generation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Allow the vector backend to embed content")
    model: str = Field(
        default="models/gemini-embedding-001",
        description="Google embedding model ID",
    )
    dimensions: int = Field(default=768, ge=1, description="Output dimension requested from the model")
    batch_size: int = Field(default=32, ge=1, description="Texts per embedding request")

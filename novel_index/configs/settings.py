"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the indexer
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field

from novel_index.configs.base import BaseSettings
from novel_index.configs.chunk import ChunkSettings
from novel_index.configs.embedding import EmbeddingSettings
from novel_index.configs.keyword import KeywordSettings
from novel_index.configs.search import SearchSettings
from novel_index.configs.vector_store import VectorStoreSettings
from novel_index.configs.watcher import WatcherSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    project_root: str = Field(default="./novels", description="Directory holding one folder per project")
    search_backend: Literal["keyword", "vector"] = Field(
        default="keyword",
        description="Retrieval backend: 'keyword' (lexical) or 'vector' (semantic)",
    )
    settings_directories: list[str] = Field(
        default=["settings"],
        description="Directory names treated as settings when a project has no novel.json",
    )

    # Aggregated settings
    chunk: ChunkSettings = ChunkSettings()
    search: SearchSettings = SearchSettings()
    keyword: KeywordSettings = KeywordSettings()
    embedding: EmbeddingSettings = EmbeddingSettings()
    vector_store: VectorStoreSettings = VectorStoreSettings()
    watcher: WatcherSettings = WatcherSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables and .env are read once and cached.

    Returns:
        Settings: Application settings instance

    Usage:
        from novel_index.configs import get_settings
        settings = get_settings()
    """
    return Settings()

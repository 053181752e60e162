"""
Core domain module.

Contains the exception hierarchy, chunk models, the chunk splitter,
the diff engine and snippet generation. No I/O beyond project metadata.
"""

from novel_index.core.exceptions import (
    NovelIndexException,
    ValidationError,
    InvalidPatternError,
    ConfigurationError,
    DimensionMismatchError,
    IndexNotInitializedError,
    IndexingError,
    UnsupportedIndexVersionError,
    SearchError,
    FileOperationError,
    VectorStoreError,
    EmbeddingError,
)
from novel_index.core.models import (
    BackendStats,
    Chunk,
    ChunkUpdateResult,
    FileType,
    SearchPayload,
    SearchResult,
)

__all__ = [
    # Exceptions
    "NovelIndexException",
    "ValidationError",
    "InvalidPatternError",
    "ConfigurationError",
    "DimensionMismatchError",
    "IndexNotInitializedError",
    "IndexingError",
    "UnsupportedIndexVersionError",
    "SearchError",
    "FileOperationError",
    "VectorStoreError",
    "EmbeddingError",
    # Models
    "BackendStats",
    "Chunk",
    "ChunkUpdateResult",
    "FileType",
    "SearchPayload",
    "SearchResult",
]

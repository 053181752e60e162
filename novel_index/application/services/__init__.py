"""Service orchestrators."""

from .indexer import Indexer, IndexingReport
from .indexer_manager import IndexerManager, IndexerStats
from .search_service import FileSearchResult, SearchService, create_search_service

__all__ = [
    "FileSearchResult",
    "Indexer",
    "IndexerManager",
    "IndexerStats",
    "IndexingReport",
    "SearchService",
    "create_search_service",
]

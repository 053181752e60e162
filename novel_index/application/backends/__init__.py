"""Retrieval backends."""

from .backend_factory import create_backend
from .keyword_backend import KeywordSearchBackend
from .search_backend import SearchBackend
from .vector_backend import VectorSearchBackend

__all__ = [
    "KeywordSearchBackend",
    "SearchBackend",
    "VectorSearchBackend",
    "create_backend",
]

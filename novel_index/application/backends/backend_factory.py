"""
Backend factory.

Selects and wires the retrieval backend named by settings.

Dependencies: novel_index.application.backends, novel_index.boundary, novel_index.configs
System role: Backend instantiation and selection
"""

import logging

from langchain_core.embeddings import Embeddings

from novel_index.application.backends.keyword_backend import KeywordSearchBackend
from novel_index.application.backends.search_backend import SearchBackend
from novel_index.application.backends.vector_backend import VectorSearchBackend
from novel_index.boundary.analyzer.morph_analyzer import (
    JanomeAnalyzer,
    KeywordTokenizer,
    MorphAnalyzer,
)
from novel_index.boundary.vdb.qdrant_store import QdrantVectorStore
from novel_index.boundary.vdb.vector_store_factory import get_embeddings, get_vector_store
from novel_index.configs import Settings, get_settings
from novel_index.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def create_backend(
    settings: Settings | None = None,
    analyzer: MorphAnalyzer | None = None,
    store: QdrantVectorStore | None = None,
    embeddings: Embeddings | None = None,
) -> SearchBackend:
    """
    Build the configured backend.

    Collaborators not passed in are built from settings.

    Args:
        settings: Application settings
        analyzer: Morphological analyzer for the keyword backend
        store: Qdrant store for the vector backend
        embeddings: Embedding model for the vector backend

    Returns:
        SearchBackend: Uninitialized backend

    Raises:
        ConfigurationError: If the backend name is unknown or its wiring is invalid
    """
    settings = settings or get_settings()
    backend_type = str(settings.search_backend).lower()

    if backend_type == "keyword":
        logger.info(f"{__name__}:create_backend - Creating keyword backend")
        tokenizer = KeywordTokenizer(
            analyzer or JanomeAnalyzer(),
            min_word_length=settings.keyword.min_word_length,
        )
        return KeywordSearchBackend(tokenizer, settings.keyword)

    if backend_type == "vector":
        logger.info(f"{__name__}:create_backend - Creating vector backend")
        if embeddings is None:
            embeddings = get_embeddings(settings)
        elif not settings.embedding.enabled:
            raise ConfigurationError(
                "Vector backend requires embeddings but they are disabled",
                setting="embedding.enabled",
            )
        return VectorSearchBackend(
            store or get_vector_store(settings),
            embeddings,
            settings.vector_store,
            batch_size=settings.embedding.batch_size,
        )

    raise ConfigurationError(
        f"Invalid search backend: {backend_type}. Must be 'keyword' or 'vector'.",
        setting="search_backend",
    )

"""
Vector store and embedding factories.

Builds the Qdrant store and the embedding model from settings, checking
that both agree on the vector dimension.

Dependencies: novel_index.boundary.vdb, novel_index.configs
System role: Vector store instantiation
"""

import logging

from langchain_core.embeddings import Embeddings

from novel_index.boundary.vdb.embeddings_wrapper import FixedDimensionEmbeddings
from novel_index.boundary.vdb.qdrant_store import QdrantVectorStore
from novel_index.configs import Settings, get_settings
from novel_index.core.exceptions import ConfigurationError, DimensionMismatchError

logger = logging.getLogger(__name__)


def get_vector_store(settings: Settings | None = None) -> QdrantVectorStore:
    """
    Build the Qdrant store described by settings.

    Returns:
        QdrantVectorStore: Unconnected store instance
    """
    settings = settings or get_settings()
    config = settings.vector_store
    logger.info(
        f"{__name__}:get_vector_store - Creating Qdrant store "
        f"collection={config.collection_name}, location={config.location or config.url}"
    )
    return QdrantVectorStore(
        collection_name=config.collection_name,
        url=config.url,
        api_key=config.api_key,
        location=config.location,
        timeout=config.timeout,
    )


def get_embeddings(settings: Settings | None = None) -> Embeddings:
    """
    Build the default embedding model.

    Raises:
        ConfigurationError: If embeddings are disabled
        DimensionMismatchError: If the model and collection dimensions differ
    """
    settings = settings or get_settings()
    if not settings.embedding.enabled:
        raise ConfigurationError(
            "Vector backend requires embeddings but they are disabled",
            setting="embedding.enabled",
        )
    if settings.embedding.dimensions != settings.vector_store.vector_dimensions:
        raise DimensionMismatchError(
            settings.vector_store.vector_dimensions,
            settings.embedding.dimensions,
            source="embedding settings",
        )
    return FixedDimensionEmbeddings(
        model=settings.embedding.model,
        output_dimensionality=settings.embedding.dimensions,
    )

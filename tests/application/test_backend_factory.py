"""Tests for backend selection."""

import pytest

from novel_index.application.backends.backend_factory import create_backend
from novel_index.application.backends.keyword_backend import KeywordSearchBackend
from novel_index.application.backends.vector_backend import VectorSearchBackend
from novel_index.boundary.vdb.qdrant_store import QdrantVectorStore
from novel_index.configs import Settings
from novel_index.configs.embedding import EmbeddingSettings
from novel_index.configs.vector_store import VectorStoreSettings
from novel_index.core.exceptions import ConfigurationError


class TestCreateBackend:
    """search_backend selects the implementation."""

    def test_keyword_backend(self, word_analyzer) -> None:
        backend = create_backend(Settings(search_backend="keyword"), analyzer=word_analyzer)

        assert isinstance(backend, KeywordSearchBackend)
        assert backend.name == "keyword"

    def test_vector_backend(self, recording_embeddings) -> None:
        settings = Settings(
            search_backend="vector",
            vector_store=VectorStoreSettings(location=":memory:", vector_dimensions=32),
        )
        store = QdrantVectorStore(collection_name="x", location=":memory:")

        backend = create_backend(settings, store=store, embeddings=recording_embeddings)

        assert isinstance(backend, VectorSearchBackend)
        assert backend.dimensions == 32

    def test_vector_backend_with_embeddings_disabled(self, recording_embeddings) -> None:
        settings = Settings(search_backend="vector", embedding=EmbeddingSettings(enabled=False))

        with pytest.raises(ConfigurationError):
            create_backend(settings, embeddings=recording_embeddings)

    def test_unknown_backend(self) -> None:
        settings = Settings().model_copy(update={"search_backend": "bogus"})

        with pytest.raises(ConfigurationError) as exc_info:
            create_backend(settings)

        assert exc_info.value.details["setting"] == "search_backend"

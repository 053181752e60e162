"""Tests for the vector store and embedding factories."""

from unittest.mock import patch

import pytest

from novel_index.boundary.vdb.vector_store_factory import get_embeddings, get_vector_store
from novel_index.configs import Settings
from novel_index.configs.embedding import EmbeddingSettings
from novel_index.configs.vector_store import VectorStoreSettings
from novel_index.core.exceptions import ConfigurationError, DimensionMismatchError


class TestGetVectorStore:
    def test_store_uses_settings(self) -> None:
        settings = Settings(
            vector_store=VectorStoreSettings(location=":memory:", collection_name="chunks-test"),
        )

        store = get_vector_store(settings)

        assert store.collection_name == "chunks-test"
        assert store.is_connected is False


class TestGetEmbeddings:
    """Embedding model wiring."""

    def test_disabled_embeddings(self) -> None:
        settings = Settings(embedding=EmbeddingSettings(enabled=False))

        with pytest.raises(ConfigurationError) as exc_info:
            get_embeddings(settings)

        assert exc_info.value.details["setting"] == "embedding.enabled"

    def test_dimension_disagreement(self) -> None:
        settings = Settings(
            embedding=EmbeddingSettings(dimensions=384),
            vector_store=VectorStoreSettings(vector_dimensions=768),
        )

        with pytest.raises(DimensionMismatchError):
            get_embeddings(settings)

    def test_builds_fixed_dimension_model(self) -> None:
        settings = Settings(embedding=EmbeddingSettings(model="models/test-embed", dimensions=768))

        with patch("novel_index.boundary.vdb.vector_store_factory.FixedDimensionEmbeddings") as model_cls:
            embeddings = get_embeddings(settings)

        model_cls.assert_called_once_with(model="models/test-embed", output_dimensionality=768)
        assert embeddings is model_cls.return_value

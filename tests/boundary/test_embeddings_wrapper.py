"""Tests for the fixed-dimension Gemini embeddings."""

from unittest.mock import patch

import pytest
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from novel_index.boundary.vdb.embeddings_wrapper import (
    DOCUMENT_TASK_TYPE,
    QUERY_TASK_TYPE,
    FixedDimensionEmbeddings,
)


@pytest.fixture
def embeddings() -> FixedDimensionEmbeddings:
    """Instance built without contacting the API."""
    instance = FixedDimensionEmbeddings.model_construct()
    instance._output_dimensionality = 64
    return instance


class TestFixedDimensionEmbeddings:
    """Dimension and task type injection."""

    def test_documents_use_collection_dimension(self, embeddings: FixedDimensionEmbeddings) -> None:
        with patch.object(GoogleGenerativeAIEmbeddings, "embed_documents", return_value=[[0.0] * 64]) as base:
            embeddings.embed_documents(["Chapter 1\nThe dragon sleeps."])

        assert base.call_args.kwargs == {
            "task_type": DOCUMENT_TASK_TYPE,
            "output_dimensionality": 64,
        }

    def test_query_task_type(self, embeddings: FixedDimensionEmbeddings) -> None:
        with patch.object(GoogleGenerativeAIEmbeddings, "embed_query", return_value=[0.0] * 64) as base:
            embeddings.embed_query("dragon")

        assert base.call_args.kwargs["task_type"] == QUERY_TASK_TYPE
        assert base.call_args.kwargs["output_dimensionality"] == 64

    def test_explicit_options_win(self, embeddings: FixedDimensionEmbeddings) -> None:
        with patch.object(GoogleGenerativeAIEmbeddings, "embed_query", return_value=[0.0] * 8) as base:
            embeddings.embed_query("dragon", task_type="SEMANTIC_SIMILARITY", output_dimensionality=8)

        assert base.call_args.kwargs == {"task_type": "SEMANTIC_SIMILARITY", "output_dimensionality": 8}

    @pytest.mark.asyncio
    async def test_async_entry_points(self, embeddings: FixedDimensionEmbeddings) -> None:
        with patch.object(GoogleGenerativeAIEmbeddings, "embed_documents", return_value=[[1.0] * 64]) as base:
            vectors = await embeddings.aembed_documents(["text"])

        assert vectors == [[1.0] * 64]
        assert base.call_args.kwargs["output_dimensionality"] == 64

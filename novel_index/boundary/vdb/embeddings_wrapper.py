"""
Gemini embeddings pinned to the collection dimension.

Every call, sync or async, requests the vector size the Qdrant collection
was created with, and tags chunk text and queries with the matching
retrieval task types.

Dependencies: langchain_google_genai, langchain_core
System role: Embedding model for the vector backend
"""

import logging
from typing import Any

from dotenv import load_dotenv
from langchain_core.runnables.config import run_in_executor
from langchain_google_genai import GoogleGenerativeAIEmbeddings

logger = logging.getLogger(__name__)
load_dotenv()

DOCUMENT_TASK_TYPE = "RETRIEVAL_DOCUMENT"
QUERY_TASK_TYPE = "RETRIEVAL_QUERY"


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    Google embeddings that always return output_dimensionality floats.

    The constructor argument of the base class is not forwarded to the
    API, so the dimension is injected into each call instead.
    """

    _output_dimensionality: int = 768

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 768,
        **kwargs,
    ) -> None:
        """
        Args:
            model: Google embedding model ID
            output_dimensionality: Collection vector size
            **kwargs: Passed to GoogleGenerativeAIEmbeddings (api key, transport)
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Embedding chunks with {model} at {output_dimensionality} dimensions"
        )

    @property
    def output_dimensionality(self) -> int:
        return self._output_dimensionality

    def _call_options(self, options: dict[str, Any], task_type: str) -> dict[str, Any]:
        options.setdefault("task_type", task_type)
        if not options.get("output_dimensionality"):
            options["output_dimensionality"] = self._output_dimensionality
        return options

    def embed_documents(self, texts: list[str], **options: Any) -> list[list[float]]:
        """Embed chunk texts ("title\\ncontent") as retrieval documents."""
        return super().embed_documents(texts, **self._call_options(options, DOCUMENT_TASK_TYPE))

    def embed_query(self, text: str, **options: Any) -> list[float]:
        """Embed a search query."""
        return super().embed_query(text, **self._call_options(options, QUERY_TASK_TYPE))

    async def aembed_documents(self, texts: list[str], **options: Any) -> list[list[float]]:
        return await run_in_executor(None, self.embed_documents, texts, **options)

    async def aembed_query(self, text: str, **options: Any) -> list[float]:
        return await run_in_executor(None, self.embed_query, text, **options)

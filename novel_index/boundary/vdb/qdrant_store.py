"""
Qdrant vector store adapter.

Async wrapper over AsyncQdrantClient exposing the operations the vector
backend needs: collection management, upsert, id and filter deletes,
filtered nearest-neighbour queries and payload scrolling. Transport errors
are retried with exponential backoff; every other failure surfaces as
VectorStoreError.

Dependencies: qdrant_client, tenacity, novel_index.boundary.vdb.vector_schemas
System role: Vector store for semantic retrieval
"""

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from qdrant_client import AsyncQdrantClient, models
from qdrant_client.http.exceptions import ResponseHandlingException
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from novel_index.boundary.vdb.vector_schemas import (
    ChunkPayload,
    CollectionStats,
    VectorHit,
    VectorPoint,
    point_id_for,
)
from novel_index.core.exceptions import (
    DimensionMismatchError,
    NovelIndexException,
    VectorStoreError,
)

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
SCROLL_PAGE_SIZE = 256
INDEXED_PAYLOAD_FIELDS = ("project_id", "relative_file_path", "file_type")

T = TypeVar("T")


def _store_operation(operation: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Retry transport failures, then translate anything unexpected into VectorStoreError."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        retrying = retry(
            retry=retry_if_exception_type(ResponseHandlingException),
            stop=stop_after_attempt(MAX_ATTEMPTS),
            wait=wait_exponential_jitter(initial=1, max=30, jitter=5),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:{operation} - Retry {retry_state.attempt_number}/{MAX_ATTEMPTS} "
                f"after transport error"
            ),
            reraise=True,
        )(func)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                return await retrying(*args, **kwargs)
            except NovelIndexException:
                raise
            except Exception as e:
                logger.error(f"{__name__}:{operation} - FAILED: {type(e).__name__}: {e}")
                raise VectorStoreError(
                    f"Vector store {operation} failed: {e}",
                    operation=operation,
                    details={"error_type": type(e).__name__},
                ) from e

        return wrapper

    return decorator


def match_filter(**conditions: str) -> models.Filter:
    """Build a Filter requiring every keyword condition to match."""
    return models.Filter(
        must=[
            models.FieldCondition(key=key, match=models.MatchValue(value=value))
            for key, value in conditions.items()
        ]
    )


class QdrantVectorStore:
    """
    Qdrant collection holding one point per chunk.

    Point ids are UUIDs derived from chunk ids; the chunk id itself lives
    in the payload.
    """

    def __init__(
        self,
        collection_name: str,
        url: str | None = "http://localhost:6333",
        api_key: str | None = None,
        location: str | None = None,
        timeout: int = 5,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """
        Initialize the store. No connection is made until connect().

        Args:
            collection_name: Collection holding chunk vectors
            url: Qdrant server URL
            api_key: Optional API key
            location: Embedded location (":memory:" or a path); wins over url
            timeout: Request timeout in seconds
            client: Pre-built client (tests)
        """
        self.collection_name = collection_name
        self._url = url
        self._api_key = api_key
        self._location = location
        self._timeout = timeout
        self._client = client

    @property
    def client(self) -> AsyncQdrantClient:
        if self._client is None:
            raise VectorStoreError("Qdrant client not connected", operation="connect")
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create the client if needed."""
        if self._client is not None:
            return
        if self._location:
            logger.info(f"{__name__}:connect - Using embedded Qdrant at {self._location}")
            self._client = AsyncQdrantClient(location=self._location)
        else:
            logger.info(f"{__name__}:connect - Connecting to Qdrant at {self._url}")
            self._client = AsyncQdrantClient(url=self._url, api_key=self._api_key, timeout=self._timeout)

    @_store_operation("ensure_collection")
    async def ensure_collection(self, vector_size: int) -> bool:
        """
        Create the collection if missing, otherwise validate its vector size.

        Args:
            vector_size: Expected vector dimension

        Returns:
            bool: True when the collection was created

        Raises:
            DimensionMismatchError: If the existing collection uses another size
        """
        if await self.client.collection_exists(self.collection_name):
            info = await self.client.get_collection(self.collection_name)
            params = info.config.params.vectors
            size = params.size if isinstance(params, models.VectorParams) else None
            if size is not None and size != vector_size:
                raise DimensionMismatchError(vector_size, size, source="collection")
            logger.info(f"{__name__}:ensure_collection - Reusing {self.collection_name} (size={size})")
            return False

        await self.client.create_collection(
            collection_name=self.collection_name,
            vectors_config=models.VectorParams(size=vector_size, distance=models.Distance.COSINE),
        )
        for field_name in INDEXED_PAYLOAD_FIELDS:
            await self.client.create_payload_index(
                collection_name=self.collection_name,
                field_name=field_name,
                field_schema=models.PayloadSchemaType.KEYWORD,
            )
        logger.info(f"{__name__}:ensure_collection - Created {self.collection_name} (size={vector_size})")
        return True

    @_store_operation("upsert")
    async def upsert(self, points: list[VectorPoint]) -> None:
        if not points:
            return
        await self.client.upsert(
            collection_name=self.collection_name,
            points=[
                models.PointStruct(
                    id=point.point_id,
                    vector=point.vector,
                    payload=point.payload.model_dump(mode="json"),
                )
                for point in points
            ],
            wait=True,
        )

    @_store_operation("delete_ids")
    async def delete_ids(self, chunk_ids: list[str]) -> None:
        if not chunk_ids:
            return
        await self.client.delete(
            collection_name=self.collection_name,
            points_selector=models.PointIdsList(points=[point_id_for(cid) for cid in chunk_ids]),
            wait=True,
        )

    @_store_operation("delete_by_filter")
    async def delete_by_filter(self, query_filter: models.Filter) -> None:
        await self.client.delete(
            collection_name=self.collection_name,
            points_selector=models.FilterSelector(filter=query_filter),
            wait=True,
        )

    @_store_operation("query")
    async def query(
        self,
        vector: list[float],
        limit: int,
        query_filter: models.Filter | None = None,
        score_threshold: float | None = None,
    ) -> list[VectorHit]:
        """
        Nearest-neighbour query.

        Args:
            vector: Query embedding
            limit: Maximum hits
            query_filter: Payload filter
            score_threshold: Hits scoring below this are dropped by the store

        Returns:
            list[VectorHit]: Hits by descending score
        """
        response = await self.client.query_points(
            collection_name=self.collection_name,
            query=vector,
            limit=limit,
            query_filter=query_filter,
            score_threshold=score_threshold,
            with_payload=True,
        )
        return [
            VectorHit(
                chunk_id=point.payload["chunk_id"],
                score=point.score,
                payload=ChunkPayload.model_validate(point.payload),
            )
            for point in response.points
        ]

    @_store_operation("scroll")
    async def scroll(self, query_filter: models.Filter) -> list[ChunkPayload]:
        """Return the payloads of every point matching the filter."""
        payloads: list[ChunkPayload] = []
        offset: Any = None
        while True:
            points, offset = await self.client.scroll(
                collection_name=self.collection_name,
                scroll_filter=query_filter,
                limit=SCROLL_PAGE_SIZE,
                offset=offset,
                with_payload=True,
                with_vectors=False,
            )
            payloads.extend(ChunkPayload.model_validate(point.payload) for point in points)
            if offset is None:
                return payloads

    @_store_operation("delete_collection")
    async def delete_collection(self) -> None:
        await self.client.delete_collection(collection_name=self.collection_name)

    @_store_operation("collection_info")
    async def collection_info(self) -> CollectionStats:
        info = await self.client.get_collection(self.collection_name)
        params = info.config.params.vectors
        return CollectionStats(
            name=self.collection_name,
            points_count=info.points_count or 0,
            vector_size=params.size if isinstance(params, models.VectorParams) else None,
            extra={"status": str(info.status)},
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

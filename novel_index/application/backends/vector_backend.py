"""
Vector retrieval backend.

Embeds "title\\ncontent" of each chunk through a LangChain Embeddings model
and keeps one Qdrant point per chunk. Project and file removals are payload
filter deletes. Incremental updates scroll the file's existing points and
embed only chunks whose content changed.

Dependencies: langchain_core, novel_index.boundary.vdb, novel_index.core
System role: Semantic RAG retrieval
"""

import logging
from datetime import datetime, timezone

from langchain_core.embeddings import Embeddings

from novel_index.application.backends.search_backend import SearchBackend, group_by_file
from novel_index.boundary.vdb.qdrant_store import QdrantVectorStore, match_filter
from novel_index.boundary.vdb.vector_schemas import ChunkPayload, VectorPoint
from novel_index.configs.vector_store import VectorStoreSettings
from novel_index.core.diff import IndexedChunkRef, diff_chunks
from novel_index.core.exceptions import (
    DimensionMismatchError,
    EmbeddingError,
    IndexingError,
    IndexNotInitializedError,
    SearchError,
    VectorStoreError,
)
from novel_index.core.models import (
    BackendStats,
    Chunk,
    ChunkUpdateResult,
    SearchPayload,
    SearchResult,
)
from novel_index.core.snippet import build_snippet

logger = logging.getLogger(__name__)


def embedding_text(chunk: Chunk) -> str:
    return f"{chunk.title}\n{chunk.content}"


class VectorSearchBackend(SearchBackend):
    """
    Qdrant-backed semantic index.

    initialize() must be awaited before any other operation; it connects
    and creates or validates the collection.
    """

    name = "vector"

    def __init__(
        self,
        store: QdrantVectorStore,
        embeddings: Embeddings,
        settings: VectorStoreSettings | None = None,
        batch_size: int = 32,
    ) -> None:
        """
        Initialize the backend.

        Args:
            store: Qdrant store adapter
            embeddings: Embedding model producing settings.vector_dimensions vectors
            settings: Collection, threshold and snippet configuration
            batch_size: Texts per embedding call
        """
        self._store = store
        self._embeddings = embeddings
        self._settings = settings or VectorStoreSettings()
        self._batch_size = max(1, batch_size)
        self._initialized = False
        self._known_chunks = 0
        self._last_updated: datetime | None = None

    @property
    def dimensions(self) -> int:
        return self._settings.vector_dimensions

    async def initialize(self) -> None:
        if self._initialized:
            return
        await self._store.connect()
        created = await self._store.ensure_collection(self.dimensions)
        self._initialized = True
        logger.info(
            f"{__name__}:initialize - Vector index ready",
            extra={"collection": self._store.collection_name, "created": created},
        )

    def is_ready(self) -> bool:
        return self._initialized

    def _require_ready(self) -> None:
        if not self._initialized:
            raise IndexNotInitializedError(self.name)

    def _check_dimension(self, vector: list[float]) -> None:
        if len(vector) != self.dimensions:
            raise DimensionMismatchError(self.dimensions, len(vector), source="embedding")

    async def _embed(self, chunks: list[Chunk]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for start in range(0, len(chunks), self._batch_size):
            batch = [embedding_text(chunk) for chunk in chunks[start:start + self._batch_size]]
            try:
                embedded = await self._embeddings.aembed_documents(batch)
            except Exception as e:
                raise EmbeddingError(
                    f"Embedding failed: {e}",
                    details={"batch_start": start, "batch_size": len(batch)},
                ) from e
            for vector in embedded:
                self._check_dimension(vector)
            vectors.extend(embedded)
        return vectors

    async def _write(self, chunks: list[Chunk]) -> None:
        if not chunks:
            return
        vectors = await self._embed(chunks)
        await self._store.upsert(
            [
                VectorPoint(chunk_id=chunk.id, vector=vector, payload=ChunkPayload.from_chunk(chunk))
                for chunk, vector in zip(chunks, vectors)
            ]
        )
        self._last_updated = datetime.now(timezone.utc)

    async def add(self, chunks: list[Chunk]) -> None:
        self._require_ready()
        try:
            await self._write(chunks)
        except (VectorStoreError, EmbeddingError) as e:
            raise IndexingError(f"Vector add failed: {e.message}", details=e.details) from e
        self._known_chunks += len(chunks)
        logger.debug(f"{__name__}:add - Upserted {len(chunks)} chunks")

    async def remove(self, ids: list[str]) -> None:
        self._require_ready()
        try:
            await self._store.delete_ids(ids)
        except VectorStoreError as e:
            raise IndexingError(f"Vector remove failed: {e.message}", details=e.details) from e
        self._last_updated = datetime.now(timezone.utc)

    async def remove_by_file(self, relative_file_path: str) -> None:
        self._require_ready()
        try:
            await self._store.delete_by_filter(match_filter(relative_file_path=relative_file_path))
        except VectorStoreError as e:
            raise IndexingError(
                f"Vector remove_by_file failed: {e.message}",
                file_path=relative_file_path,
                details=e.details,
            ) from e
        self._last_updated = datetime.now(timezone.utc)
        logger.info(f"{__name__}:remove_by_file - Removed points of {relative_file_path}")

    async def remove_by_novel(self, project_id: str) -> None:
        self._require_ready()
        try:
            await self._store.delete_by_filter(match_filter(project_id=project_id))
        except VectorStoreError as e:
            raise IndexingError(
                f"Vector remove_by_novel failed: {e.message}",
                project_id=project_id,
                details=e.details,
            ) from e
        self._last_updated = datetime.now(timezone.utc)
        logger.info(f"{__name__}:remove_by_novel - Removed points of project {project_id}")

    async def update_chunks(self, chunks: list[Chunk]) -> ChunkUpdateResult:
        self._require_ready()
        result = ChunkUpdateResult()
        for file_path, file_chunks in group_by_file(chunks).items():
            try:
                payloads = await self._store.scroll(match_filter(relative_file_path=file_path))
                diff = diff_chunks(
                    file_chunks,
                    [IndexedChunkRef(p.chunk_id, p.base_id, p.hash) for p in payloads],
                )
                # New ids never collide with superseded ones; write before deleting.
                await self._write(diff.to_write)
                await self._store.delete_ids(diff.to_delete)
            except (VectorStoreError, EmbeddingError) as e:
                raise IndexingError(
                    f"Vector update failed: {e.message}",
                    project_id=file_chunks[0].project_id,
                    file_path=file_path,
                    details=e.details,
                ) from e
            result.added += len(diff.added)
            result.updated += len(diff.updated)
            result.unchanged += len(diff.unchanged)
            result.removed += len(diff.removed_ids)
        logger.info(
            f"{__name__}:update_chunks - added={result.added}, updated={result.updated}, "
            f"unchanged={result.unchanged}, removed={result.removed}"
        )
        return result

    async def search(self, query: str, k: int, project_id: str) -> list[SearchResult]:
        self._require_ready()
        if not query.strip() or k <= 0:
            return []
        try:
            vector = await self._embeddings.aembed_query(query)
        except Exception as e:
            raise SearchError(f"Query embedding failed: {e}", backend=self.name, query=query) from e
        self._check_dimension(vector)

        try:
            hits = await self._store.query(
                vector,
                limit=k,
                query_filter=match_filter(project_id=project_id),
                score_threshold=self._settings.score_threshold,
            )
        except VectorStoreError as e:
            raise SearchError(f"Vector query failed: {e.message}", backend=self.name, query=query) from e

        results = []
        for hit in hits:
            score = min(1.0, max(0.0, hit.score))
            if score < self._settings.score_threshold:
                continue
            payload = hit.payload
            results.append(
                SearchResult(
                    id=hit.chunk_id,
                    score=score,
                    snippet=build_snippet(payload.content, query, self._settings.snippet_length),
                    payload=SearchPayload(
                        file=payload.relative_file_path,
                        start=payload.start_line,
                        end=payload.end_line,
                        tags=payload.tags,
                    ),
                )
            )
        results.sort(key=lambda r: -r.score)
        logger.info(
            f"{__name__}:search - {len(results)} results",
            extra={"project_id": project_id, "k": k},
        )
        return results[:k]

    async def clear(self) -> None:
        self._require_ready()
        await self._store.delete_collection()
        await self._store.ensure_collection(self.dimensions)
        self._known_chunks = 0
        self._last_updated = datetime.now(timezone.utc)
        logger.info(f"{__name__}:clear - Collection {self._store.collection_name} recreated")

    async def get_stats(self) -> BackendStats:
        self._require_ready()
        total = self._known_chunks
        try:
            total = (await self._store.collection_info()).points_count
        except VectorStoreError as e:
            logger.warning(f"{__name__}:get_stats - Falling back to local counters: {e.message}")
        return BackendStats(total_chunks=total, last_updated=self._last_updated)

    async def dispose(self) -> None:
        await self._store.close()
        self._initialized = False

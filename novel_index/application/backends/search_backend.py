"""
Retrieval backend contract.

Indexer and search service depend only on this interface; the keyword and
vector backends implement it over very different storage.

Dependencies: novel_index.core
System role: Storage-agnostic retrieval boundary
"""

from abc import ABC, abstractmethod
from typing import Iterable

from novel_index.core.models import BackendStats, Chunk, ChunkUpdateResult, SearchResult


def group_by_file(chunks: Iterable[Chunk]) -> dict[str, list[Chunk]]:
    """Group chunks by relative file path, keeping input order."""
    grouped: dict[str, list[Chunk]] = {}
    for chunk in chunks:
        grouped.setdefault(chunk.relative_file_path, []).append(chunk)
    return grouped


class SearchBackend(ABC):
    """
    Retrieval backend.

    Each instance exclusively owns its index state. Operations are
    coroutines so backends can suspend on analyzer, embedding or store calls.
    """

    name: str = "backend"

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare index state. Idempotent."""

    @abstractmethod
    def is_ready(self) -> bool:
        """Whether initialize() has completed."""

    @abstractmethod
    async def add(self, chunks: list[Chunk]) -> None:
        """
        Upsert chunks by id.

        Superseded ids of the same base id are not removed; pair with
        remove() or use update_chunks().
        """

    @abstractmethod
    async def remove(self, ids: list[str]) -> None:
        """Remove chunks by id. Unknown ids are ignored."""

    @abstractmethod
    async def remove_by_file(self, relative_file_path: str) -> None:
        """Remove every chunk of one file, in any project."""

    @abstractmethod
    async def remove_by_novel(self, project_id: str) -> None:
        """Remove every chunk in one project namespace."""

    @abstractmethod
    async def update_chunks(self, chunks: list[Chunk]) -> ChunkUpdateResult:
        """
        Incrementally replace the chunk set of the files in chunks.

        Per base id: same hash -> unchanged, other hash -> updated (old id
        removed), unknown base id -> added. Indexed chunks of those files
        whose base id is absent from chunks are removed.

        Returns:
            ChunkUpdateResult: added/updated/unchanged counts
        """

    @abstractmethod
    async def search(self, query: str, k: int, project_id: str) -> list[SearchResult]:
        """
        Rank chunks of one project against a query.

        Returns:
            list[SearchResult]: At most k results by descending score; empty for an empty query
        """

    @abstractmethod
    async def clear(self) -> None:
        """Remove all indexed state."""

    @abstractmethod
    async def get_stats(self) -> BackendStats:
        """Best-effort, non-authoritative introspection."""

    @abstractmethod
    async def dispose(self) -> None:
        """Release resources. The backend may be initialized again afterwards."""

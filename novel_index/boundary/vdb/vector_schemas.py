"""
Vector database schemas.

Pydantic models for points written to and read from the vector store.
The payload carries everything needed to rebuild a Chunk, so search
results never go back to the filesystem.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from novel_index.core.models import Chunk, FileType


def point_id_for(chunk_id: str) -> str:
    """Deterministic UUID used as the Qdrant point id for a chunk id."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, chunk_id))


class ChunkPayload(BaseModel):
    """
    Metadata stored with each vector.

    project_id, relative_file_path and file_type are indexed for filtering.
    """

    chunk_id: str = Field(description="Full chunk id (base_id@hash)")
    base_id: str = Field(description="Positional identity")
    hash: str = Field(description="Content hash segment")
    title: str = Field(description="Section title")
    content: str = Field(description="Chunk text")
    relative_file_path: str = Field(description="Project-root-relative path")
    start_line: int = Field(description="First line (1-based)")
    end_line: int = Field(description="Last line (1-based)")
    chunk_index: int = Field(description="Sequence number within the file")
    project_id: str = Field(description="Namespace key")
    file_type: FileType | None = Field(default=None, description="content or settings")
    tags: list[str] = Field(default_factory=list, description="Chunk tags")

    @classmethod
    def from_chunk(cls, chunk: Chunk) -> "ChunkPayload":
        return cls(
            chunk_id=chunk.id,
            base_id=chunk.base_id,
            hash=chunk.hash,
            title=chunk.title,
            content=chunk.content,
            relative_file_path=chunk.relative_file_path,
            start_line=chunk.start_line,
            end_line=chunk.end_line,
            chunk_index=chunk.chunk_index,
            project_id=chunk.project_id,
            file_type=chunk.file_type,
            tags=list(chunk.tags),
        )


class VectorPoint(BaseModel):
    """Point to upsert."""

    chunk_id: str = Field(description="Chunk identifier")
    vector: list[float] = Field(description="Embedding vector")
    payload: ChunkPayload

    @property
    def point_id(self) -> str:
        return point_id_for(self.chunk_id)


class VectorHit(BaseModel):
    """Single result from a nearest-neighbour query."""

    chunk_id: str = Field(description="Chunk identifier")
    score: float = Field(description="Similarity score reported by the store")
    payload: ChunkPayload


class CollectionStats(BaseModel):
    """Collection introspection."""

    name: str
    points_count: int = 0
    vector_size: int | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

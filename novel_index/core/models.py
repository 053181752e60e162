"""
Chunk domain models.

Represents indexed chunks with positional (base id) and content (hash)
identity, plus the query-time and bookkeeping projections built from them.

Dependencies: pydantic
System role: Data structures shared by the splitter, diff engine and backends
"""

import hashlib
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

HASH_LENGTH = 8


class FileType(str, Enum):
    """Kind of project file a chunk was cut from."""

    CONTENT = "content"
    SETTINGS = "settings"


def content_hash(title: str, content: str) -> str:
    """Return the first 8 hex characters of md5 over title and content."""
    digest = hashlib.md5(f"{title}\n{content}".encode("utf-8")).hexdigest()
    return digest[:HASH_LENGTH]


class Chunk(BaseModel):
    """Indexed unit of document text."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Heading of the section the chunk belongs to")
    content: str = Field(description="Chunk text, a contiguous slice of the source")
    relative_file_path: str = Field(description="Path relative to the project root")
    start_line: int = Field(ge=1, description="First source line (1-based, inclusive)")
    end_line: int = Field(ge=1, description="Last source line (1-based, inclusive)")
    chunk_index: int = Field(ge=0, description="Sequence number within the file")
    project_id: str = Field(default="", description="Namespace key")
    file_type: FileType | None = Field(default=None, description="content or settings")
    tags: list[str] = Field(default_factory=list, description="Ordered, de-duplicated tags")

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, tags: list[str]) -> list[str]:
        return list(dict.fromkeys(tags))

    @property
    def base_id(self) -> str:
        return f"{self.relative_file_path}::{self.start_line}-{self.end_line}::chunk-{self.chunk_index}"

    @property
    def hash(self) -> str:
        return content_hash(self.title, self.content)

    @property
    def id(self) -> str:
        return f"{self.base_id}@{self.hash}"

    @staticmethod
    def parse_id(chunk_id: str) -> tuple[str, str]:
        """
        Split a chunk id into (base_id, hash).

        Raises:
            ValueError: If the id carries no hash segment
        """
        base_id, sep, digest = chunk_id.rpartition("@")
        if not sep or not base_id:
            raise ValueError(f"Malformed chunk id: {chunk_id}")
        return base_id, digest


class SearchPayload(BaseModel):
    """Location metadata returned with each result."""

    file: str = Field(description="Relative file path")
    start: int = Field(description="Start line")
    end: int = Field(description="End line")
    tags: list[str] = Field(default_factory=list, description="Chunk tags")


class SearchResult(BaseModel):
    """Single ranked search hit."""

    id: str = Field(description="Chunk id")
    score: float = Field(ge=0.0, le=1.0, description="Normalized relevance (0.0-1.0)")
    snippet: str = Field(description="Bounded excerpt around the first query term")
    payload: SearchPayload


class ChunkUpdateResult(BaseModel):
    """Outcome of an incremental update."""

    added: int = 0
    updated: int = 0
    unchanged: int = 0
    removed: int = Field(default=0, description="Implicitly cleaned up chunks (informational)")


class BackendStats(BaseModel):
    """Best-effort backend introspection."""

    total_chunks: int = 0
    memory_usage: int | None = None
    last_updated: datetime | None = None

"""
Chunk diff engine.

Classifies an incoming chunk set against the chunk references already
indexed for the same file. Positional identity (base id) pairs chunks up;
the content hash decides whether a pair changed.

Dependencies: novel_index.core.models
System role: Keeps backend writes (and re-embedding) to the chunks that changed
"""

from dataclasses import dataclass, field
from typing import Iterable

from novel_index.core.models import Chunk


@dataclass(frozen=True)
class IndexedChunkRef:
    """Identity of a chunk already held by a backend."""

    id: str
    base_id: str
    hash: str

    @classmethod
    def from_id(cls, chunk_id: str) -> "IndexedChunkRef":
        base_id, digest = Chunk.parse_id(chunk_id)
        return cls(id=chunk_id, base_id=base_id, hash=digest)


@dataclass
class ChunkDiff:
    """Result of comparing incoming chunks with indexed ones."""

    added: list[Chunk] = field(default_factory=list)
    updated: list[Chunk] = field(default_factory=list)
    unchanged: list[Chunk] = field(default_factory=list)
    superseded_ids: list[str] = field(default_factory=list)
    removed_ids: list[str] = field(default_factory=list)

    @property
    def to_write(self) -> list[Chunk]:
        return self.added + self.updated

    @property
    def to_delete(self) -> list[str]:
        return self.superseded_ids + self.removed_ids


def diff_chunks(incoming: Iterable[Chunk], existing: Iterable[IndexedChunkRef]) -> ChunkDiff:
    """
    Compare incoming chunks with existing references.

    Args:
        incoming: Freshly split chunks for one file
        existing: References currently indexed for that file

    Returns:
        ChunkDiff: added/updated/unchanged chunks plus ids to delete
    """
    by_base: dict[str, list[IndexedChunkRef]] = {}
    for ref in existing:
        by_base.setdefault(ref.base_id, []).append(ref)

    # A base id repeated in one batch keeps only its last chunk.
    latest: dict[str, Chunk] = {}
    for chunk in incoming:
        latest[chunk.base_id] = chunk

    diff = ChunkDiff()
    for base_id, chunk in latest.items():
        refs = by_base.get(base_id)
        if not refs:
            diff.added.append(chunk)
            continue

        digest = chunk.hash
        if any(ref.hash == digest for ref in refs):
            diff.unchanged.append(chunk)
        else:
            diff.updated.append(chunk)
        diff.superseded_ids.extend(ref.id for ref in refs if ref.hash != digest)

    for base_id, refs in by_base.items():
        if base_id not in latest:
            diff.removed_ids.extend(ref.id for ref in refs)
    return diff

"""
Vector database boundary layer.

- QdrantVectorStore: async Qdrant client wrapper
- FixedDimensionEmbeddings: Google embeddings pinned to the collection dimension

Dependencies: qdrant_client, langchain_google_genai
System role: Vector store adapter for semantic retrieval
"""

from novel_index.boundary.vdb.vector_schemas import (
    ChunkPayload,
    CollectionStats,
    VectorHit,
    VectorPoint,
    point_id_for,
)

__all__ = [
    "ChunkPayload",
    "CollectionStats",
    "VectorHit",
    "VectorPoint",
    "point_id_for",
]

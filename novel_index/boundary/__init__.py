"""
Boundary layer for external capabilities.

Adapters for the morphological analyzer, the embedding model, the Qdrant
vector store and filesystem watching.
"""

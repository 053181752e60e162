"""
Incremental keyword and vector retrieval over novel projects.

Layers: configs (settings), core (domain), boundary (analyzer, vector
store, filesystem), application (backends, services), observability.
"""

__version__ = "0.1.0"

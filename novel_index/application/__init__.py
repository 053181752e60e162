"""
Application layer.

Retrieval backends behind a common contract, and the services that keep
them in sync with the project directories and answer searches.
"""

"""
Exception hierarchy for the novel indexer.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class NovelIndexException(Exception):
    """Base exception for all indexer errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(NovelIndexException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class InvalidPatternError(ValidationError):
    """Raised when a raw search pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["pattern"] = pattern
        super().__init__(f"Invalid regular expression: {reason}", "keyword", details)


class ConfigurationError(NovelIndexException):
    """Raised when backend wiring or configuration is invalid."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize configuration error.

        Args:
            message: Error message
            setting: Name of the offending setting
            details: Additional context
        """
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)


class DimensionMismatchError(ConfigurationError):
    """Raised when a vector length differs from the configured collection dimension."""

    def __init__(
        self,
        expected: int,
        actual: int,
        source: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize dimension mismatch error.

        Args:
            expected: Configured vector dimension
            actual: Dimension that was observed
            source: Where the dimension came from (collection, embedding)
            details: Additional context
        """
        details = details or {}
        details.update({"expected": expected, "actual": actual, "source": source})
        super().__init__(
            f"Vector dimension mismatch from {source}: expected {expected}, got {actual}",
            "vector_store.vector_dimensions",
            details,
        )


class IndexNotInitializedError(NovelIndexException):
    """Raised when a backend operation runs before initialization."""

    def __init__(self, backend: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["backend"] = backend
        super().__init__(f"Index not initialized: {backend}", details)


class IndexingError(NovelIndexException):
    """Raised when building chunks or writing them to a backend fails."""

    def __init__(
        self,
        message: str,
        project_id: str | None = None,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize indexing error.

        Args:
            message: Error message
            project_id: Project namespace being indexed
            file_path: File whose indexing failed
            details: Additional context
        """
        details = details or {}
        if project_id:
            details["project_id"] = project_id
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, details)


class UnsupportedIndexVersionError(IndexingError):
    """Raised when a persisted index file carries an unknown format version."""

    def __init__(self, version: Any, supported: int, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details.update({"version": version, "supported": supported})
        super().__init__(f"Unsupported index format version: {version}", details=details)


class SearchError(NovelIndexException):
    """Raised when a search cannot be answered."""

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        query: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize search error.

        Args:
            message: Error message
            backend: Backend that failed (keyword, vector)
            query: Query text that triggered the failure
            details: Additional context
        """
        details = details or {}
        if backend:
            details["backend"] = backend
        if query is not None:
            details["query"] = query
        super().__init__(message, details)


class FileOperationError(NovelIndexException):
    """Raised when reading a project file fails."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class VectorStoreError(NovelIndexException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, query, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class EmbeddingError(NovelIndexException):
    """Raised when embedding generation fails."""

    pass

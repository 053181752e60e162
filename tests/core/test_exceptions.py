"""Tests for the exception hierarchy."""

from novel_index.core.exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    IndexingError,
    InvalidPatternError,
    NovelIndexException,
    SearchError,
    UnsupportedIndexVersionError,
    ValidationError,
)


class TestExceptions:
    """Context details and inheritance."""

    def test_str_includes_details(self) -> None:
        error = SearchError("Search failed", backend="vector", query="dragon")

        assert error.details == {"backend": "vector", "query": "dragon"}
        assert str(error) == "Search failed | Details: {'backend': 'vector', 'query': 'dragon'}"

    def test_str_without_details(self) -> None:
        assert str(NovelIndexException("plain")) == "plain"

    def test_dimension_mismatch_is_configuration_error(self) -> None:
        error = DimensionMismatchError(384, 768, source="collection")

        assert isinstance(error, ConfigurationError)
        assert error.details["expected"] == 384
        assert error.details["actual"] == 768
        assert error.details["setting"] == "vector_store.vector_dimensions"

    def test_invalid_pattern_is_validation_error(self) -> None:
        error = InvalidPatternError("[", "unterminated character set")

        assert isinstance(error, ValidationError)
        assert error.details == {"pattern": "[", "field": "keyword"}

    def test_unsupported_version_is_indexing_error(self) -> None:
        error = UnsupportedIndexVersionError(9, 1)

        assert isinstance(error, IndexingError)
        assert error.details == {"version": 9, "supported": 1}

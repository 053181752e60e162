"""Tests for chunk identity and result models."""

import hashlib

import pytest
from pydantic import ValidationError

from novel_index.core.models import (
    Chunk,
    ChunkUpdateResult,
    SearchPayload,
    SearchResult,
    content_hash,
)


class TestChunkIdentity:
    """base_id / hash / id scheme."""

    def test_id_format(self, chunk_factory) -> None:
        """Id is file::start-end::chunk-N@hash."""
        chunk = chunk_factory("The dragon sleeps.", file="novel-a/test.md", start=3, end=7, index=2)

        assert chunk.base_id == "novel-a/test.md::3-7::chunk-2"
        assert chunk.id == f"novel-a/test.md::3-7::chunk-2@{chunk.hash}"

    def test_hash_is_truncated_md5_of_title_and_content(self, chunk_factory) -> None:
        """Hash is the first 8 hex chars of md5(title + newline + content)."""
        chunk = chunk_factory("body", title="Title")
        expected = hashlib.md5("Title\nbody".encode("utf-8")).hexdigest()[:8]

        assert chunk.hash == expected
        assert content_hash("Title", "body") == expected

    def test_identical_title_and_content_share_hash(self, chunk_factory) -> None:
        """Location does not influence the hash."""
        first = chunk_factory("same", file="a/x.md", start=1, end=1)
        second = chunk_factory("same", file="b/y.md", start=9, end=12, index=4)

        assert first.hash == second.hash
        assert first.id != second.id

    def test_content_change_keeps_base_id(self, chunk_factory) -> None:
        """Editing content changes hash and id but not base_id."""
        before = chunk_factory("The knight rides.")
        after = chunk_factory("The knight rides at dawn.")

        assert before.base_id == after.base_id
        assert before.hash != after.hash
        assert before.id != after.id

    def test_parse_id(self, chunk_factory) -> None:
        """parse_id splits at the last @."""
        chunk = chunk_factory("text", file="novel@home/a.md")

        assert Chunk.parse_id(chunk.id) == (chunk.base_id, chunk.hash)

    def test_parse_id_rejects_missing_hash(self) -> None:
        with pytest.raises(ValueError):
            Chunk.parse_id("no-hash-here")

    def test_tags_are_deduplicated_in_order(self, chunk_factory) -> None:
        chunk = chunk_factory("text", tags=["magic", "wizard", "magic"])

        assert chunk.tags == ["magic", "wizard"]

    def test_chunk_is_frozen(self, chunk_factory) -> None:
        chunk = chunk_factory("text")

        with pytest.raises(ValidationError):
            chunk.content = "changed"

    def test_line_numbers_are_one_based(self) -> None:
        with pytest.raises(ValidationError):
            Chunk(
                title="t",
                content="c",
                relative_file_path="a.md",
                start_line=0,
                end_line=1,
                chunk_index=0,
            )


class TestResultModels:
    """Query-time projections."""

    def test_score_must_be_normalized(self) -> None:
        """Scores outside [0, 1] are rejected."""
        payload = SearchPayload(file="a.md", start=1, end=2)

        with pytest.raises(ValidationError):
            SearchResult(id="x", score=1.5, snippet="", payload=payload)

    def test_update_result_defaults(self) -> None:
        result = ChunkUpdateResult()

        assert (result.added, result.updated, result.unchanged, result.removed) == (0, 0, 0, 0)

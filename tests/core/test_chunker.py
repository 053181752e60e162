"""Tests for the markdown chunk splitter.

Covers token counting, sequential slicing, heading sections, paragraph
packing with overlap, line spans and argument validation.
"""

import pytest

from novel_index.core.chunker import (
    DEFAULT_TITLE,
    MarkdownChunker,
    SimpleTokenCounter,
    sequential_slices,
)
from novel_index.core.models import FileType

P1 = "a" * 40
P2 = "b" * 40
P3 = "c" * 40
THREE_PARAGRAPHS = f"# T\n\n{P1}\n\n{P2}\n\n{P3}"


@pytest.fixture
def chunker() -> MarkdownChunker:
    return MarkdownChunker()


class TestSimpleTokenCounter:
    """Character-length token approximation."""

    def test_counts_two_and_a_half_chars_per_token(self) -> None:
        """Should round up len / 2.5."""
        counter = SimpleTokenCounter()

        assert counter.count("") == 0
        assert counter.count("a") == 1
        assert counter.count("abcde") == 2
        assert counter.count("abcdef") == 3

    def test_monotonic(self) -> None:
        """More characters never yield fewer tokens."""
        counter = SimpleTokenCounter()
        counts = [counter.count("x" * n) for n in range(50)]

        assert counts == sorted(counts)


class TestSequentialSlices:
    """Binary-search prefix slicing."""

    def test_slices_fit_budget_and_rejoin(self) -> None:
        """Every slice fits and the slices concatenate to the input."""
        counter = SimpleTokenCounter()
        text = "z" * 253

        slices = sequential_slices(text, 10, counter)

        assert "".join(slices) == text
        assert all(counter.count(s) <= 10 for s in slices)
        assert [len(s) for s in slices[:-1]] == [25] * (len(slices) - 1)

    def test_always_advances(self) -> None:
        """A budget too small for one character still consumes one per slice."""

        class Strict:
            def count(self, text: str) -> int:
                return len(text) * 10

        assert sequential_slices("abc", 1, Strict()) == ["a", "b", "c"]


class TestSections:
    """Structural pass."""

    def test_empty_input_yields_one_empty_chunk(self, chunker: MarkdownChunker) -> None:
        """Empty text produces exactly one chunk with empty content."""
        chunks = chunker.split("", "p/empty.md", 400, 0.2, project_id="p")

        assert len(chunks) == 1
        assert chunks[0].content == ""
        assert chunks[0].title == DEFAULT_TITLE
        assert (chunks[0].start_line, chunks[0].end_line) == (1, 1)
        assert chunks[0].chunk_index == 0

    def test_heading_only_yields_one_chunk(self, chunker: MarkdownChunker) -> None:
        """A lone heading becomes a single chunk titled by the heading."""
        chunks = chunker.split("# Prologue", "p/a.md", 400, 0.2)

        assert len(chunks) == 1
        assert chunks[0].title == "Prologue"
        assert chunks[0].content == "# Prologue"

    def test_headingless_text_uses_default_title(self, chunker: MarkdownChunker) -> None:
        """Text without headings is one Document section."""
        chunks = chunker.split("line one\nline two", "p/a.txt", 400, 0.0)

        assert len(chunks) == 1
        assert chunks[0].title == DEFAULT_TITLE
        assert chunks[0].end_line == 2

    def test_one_chunk_per_heading_with_line_spans(self, chunker: MarkdownChunker) -> None:
        """Each heading opens a section; surrounding blank lines are not part of it."""
        text = "# Chapter 1\nThe dragon sleeps.\n\n# Chapter 2\nThe knight rides.\n"

        chunks = chunker.split(text, "p/ch.md", 400, 0.2, project_id="p")

        assert [c.title for c in chunks] == ["Chapter 1", "Chapter 2"]
        assert [(c.start_line, c.end_line) for c in chunks] == [(1, 2), (4, 5)]
        assert [c.chunk_index for c in chunks] == [0, 1]
        assert chunks[1].content == "# Chapter 2\nThe knight rides."

    def test_blank_preamble_is_dropped(self, chunker: MarkdownChunker) -> None:
        """Whitespace before the first heading does not produce a chunk."""
        chunks = chunker.split("\n\n# Only\nbody", "p/a.md", 400, 0.0)

        assert [c.title for c in chunks] == ["Only"]
        assert chunks[0].start_line == 3

    def test_metadata_is_recorded(self, chunker: MarkdownChunker) -> None:
        """Project id, path and file type are carried onto every chunk."""
        chunks = chunker.split(
            "# A\nbody", "p/settings/a.md", 400, 0.0, project_id="p", file_type=FileType.SETTINGS
        )

        assert chunks[0].project_id == "p"
        assert chunks[0].relative_file_path == "p/settings/a.md"
        assert chunks[0].file_type == FileType.SETTINGS

    def test_split_is_idempotent(self, chunker: MarkdownChunker) -> None:
        """Same input and parameters give the same ids."""
        text = THREE_PARAGRAPHS + "\n\n# Next\n" + "d" * 300

        first = [c.id for c in chunker.split(text, "p/a.md", 40, 0.2)]
        second = [c.id for c in chunker.split(text, "p/a.md", 40, 0.2)]

        assert first == second


class TestSizePass:
    """Paragraph packing, slicing and overlap."""

    def test_paragraph_packing_without_overlap(self, chunker: MarkdownChunker) -> None:
        """Chunks end on paragraph boundaries and span exactly their lines."""
        lines = THREE_PARAGRAPHS.split("\n")

        chunks = chunker.split(THREE_PARAGRAPHS, "p/a.md", 40, 0.0)

        assert len(chunks) == 2
        assert chunks[0].content == f"# T\n\n{P1}\n\n{P2}"
        assert chunks[1].content == P3
        for chunk in chunks:
            assert chunk.content == "\n".join(lines[chunk.start_line - 1:chunk.end_line])
            assert SimpleTokenCounter().count(chunk.content) <= 40

    def test_overlap_repeats_tail_of_previous_chunk(self, chunker: MarkdownChunker) -> None:
        """The next chunk starts with floor(len * ratio) trailing characters of the previous one."""
        chunks = chunker.split(THREE_PARAGRAPHS, "p/a.md", 40, 0.2)

        assert len(chunks) == 2
        overlap = int(len(chunks[0].content) * 0.2)
        assert chunks[1].content.startswith(chunks[0].content[-overlap:])
        assert chunks[1].content.endswith(P3)
        assert chunks[1].start_line == chunks[0].end_line
        assert chunks[1].end_line == 7

    def test_full_overlap_terminates(self, chunker: MarkdownChunker) -> None:
        """Ratio 1.0 cannot loop: overlap that does not fit is dropped."""
        chunks = chunker.split(THREE_PARAGRAPHS, "p/a.md", 40, 1.0)

        assert len(chunks) == 2
        assert chunks[1].content == P3

    def test_oversized_paragraph_is_sliced(self, chunker: MarkdownChunker) -> None:
        """A single long line is cut into budget-sized slices on the same line."""
        text = "z" * 500

        chunks = chunker.split(text, "p/long.txt", 40, 0.0)

        assert len(chunks) == 5
        assert "".join(c.content for c in chunks) == text
        assert all((c.start_line, c.end_line) == (1, 1) for c in chunks)
        assert len({c.id for c in chunks}) == 5

    def test_chunks_stay_within_budget_with_overlap(self, chunker: MarkdownChunker) -> None:
        """Sliced paragraphs leave room for overlap so no chunk exceeds the budget."""
        text = "# Long\n" + "\n\n".join("w" * n for n in (30, 260, 45, 120))
        counter = SimpleTokenCounter()

        chunks = chunker.split(text, "p/a.md", 30, 0.3)

        assert all(counter.count(c.content) <= 30 for c in chunks)
        assert all(c.content in text for c in chunks)
        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))


class TestValidation:
    """Argument checks."""

    @pytest.mark.parametrize("max_tokens,ratio", [(0, 0.2), (10, -0.1), (10, 1.5)])
    def test_invalid_arguments(self, chunker: MarkdownChunker, max_tokens: int, ratio: float) -> None:
        """Should raise ValueError for a non-positive budget or ratio outside [0, 1]."""
        with pytest.raises(ValueError):
            chunker.split("text", "p/a.md", max_tokens, ratio)

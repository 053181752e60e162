"""
Markdown-aware chunk splitter.

Splits a document into token-budgeted chunks: one section per ATX heading,
oversized sections packed paragraph by paragraph, oversized paragraphs cut
into sequential character slices. Every chunk is a contiguous slice of the
source text, so line spans are derived from character offsets.

Dependencies: novel_index.core.models
System role: Document text -> ordered chunk list
"""

import bisect
import math
import re
from dataclasses import dataclass
from typing import Protocol

from novel_index.core.models import Chunk, FileType

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
DEFAULT_TITLE = "Document"

# Slices of an oversized paragraph keep at least this share of the budget free
# for the overlap prefix of the following chunk.
MAX_OVERLAP_RESERVE = 0.5


class TokenCounter(Protocol):
    """Approximate token counting."""

    def count(self, text: str) -> int: ...


class SimpleTokenCounter:
    """Character-length approximation: one token per 2.5 characters."""

    def count(self, text: str) -> int:
        return math.ceil(len(text) / 2.5)


@dataclass
class _Section:
    title: str
    first_line: int
    last_line: int


def sequential_slices(text: str, max_tokens: int, counter: TokenCounter) -> list[str]:
    """
    Cut text into consecutive slices that each fit the token budget.

    Each slice is the longest prefix of the remainder that fits, found by
    binary search; a slice always holds at least one character.

    Args:
        text: Text to cut
        max_tokens: Budget per slice
        counter: Token counter

    Returns:
        list[str]: Slices whose concatenation equals text
    """
    slices: list[str] = []
    remaining = text
    while remaining:
        if counter.count(remaining) <= max_tokens:
            slices.append(remaining)
            break
        low, high = 0, len(remaining)
        while low < high:
            mid = (low + high + 1) // 2
            if counter.count(remaining[:mid]) <= max_tokens:
                low = mid
            else:
                high = mid - 1
        split_at = max(low, 1)
        slices.append(remaining[:split_at])
        remaining = remaining[split_at:]
    return slices


class MarkdownChunker:
    """
    Heading-aware splitter producing Chunk models.

    Stateless apart from the injected token counter; safe to share.
    """

    def __init__(self, token_counter: TokenCounter | None = None) -> None:
        self._counter = token_counter or SimpleTokenCounter()

    def split(
        self,
        text: str,
        file_path: str,
        max_tokens: int,
        overlap_ratio: float,
        project_id: str = "",
        file_type: FileType | None = None,
    ) -> list[Chunk]:
        """
        Split document text into ordered chunks.

        Args:
            text: Full document text
            file_path: Project-root-relative path recorded on each chunk
            max_tokens: Token budget per chunk
            overlap_ratio: Share of the previous chunk repeated as prefix (0.0-1.0)
            project_id: Namespace key recorded on each chunk
            file_type: Optional content/settings classification

        Returns:
            list[Chunk]: Chunks in document order, chunk_index counting from 0

        Raises:
            ValueError: If max_tokens < 1 or overlap_ratio is outside [0, 1]
        """
        if max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {max_tokens}")
        if not 0.0 <= overlap_ratio <= 1.0:
            raise ValueError(f"overlap_ratio must be within [0, 1], got {overlap_ratio}")

        lines = text.split("\n")
        line_starts = [0]
        for line in lines[:-1]:
            line_starts.append(line_starts[-1] + len(line) + 1)

        sections = self._extract_sections(lines)
        non_blank = [s for s in sections if not self._is_blank(lines, s)]
        sections = non_blank or sections[:1]

        chunks: list[Chunk] = []
        for section in sections:
            start = line_starts[section.first_line]
            end = line_starts[section.last_line] + len(lines[section.last_line])
            for span_start, span_end in self._section_spans(
                text, lines, line_starts, section, start, end, max_tokens, overlap_ratio
            ):
                first = bisect.bisect_right(line_starts, span_start) - 1
                last = bisect.bisect_right(line_starts, max(span_start, span_end - 1)) - 1
                chunks.append(
                    Chunk(
                        title=section.title,
                        content=text[span_start:span_end],
                        relative_file_path=file_path,
                        start_line=first + 1,
                        end_line=last + 1,
                        chunk_index=len(chunks),
                        project_id=project_id,
                        file_type=file_type,
                    )
                )
        return chunks

    @staticmethod
    def _is_blank(lines: list[str], section: _Section) -> bool:
        return all(not lines[i].strip() for i in range(section.first_line, section.last_line + 1))

    @staticmethod
    def _extract_sections(lines: list[str]) -> list[_Section]:
        sections: list[_Section] = []
        current: _Section | None = None
        for index, line in enumerate(lines):
            match = HEADING_PATTERN.match(line)
            if match:
                if current:
                    sections.append(current)
                current = _Section(match.group(2).strip(), index, index)
            elif current:
                current.last_line = index
            else:
                current = _Section(DEFAULT_TITLE, index, index)
        if current:
            sections.append(current)

        # Surrounding blank lines belong to no chunk.
        for section in sections:
            while section.first_line < section.last_line and not lines[section.first_line].strip():
                section.first_line += 1
            while section.last_line > section.first_line and not lines[section.last_line].strip():
                section.last_line -= 1
        return sections

    def _section_spans(
        self,
        text: str,
        lines: list[str],
        line_starts: list[int],
        section: _Section,
        start: int,
        end: int,
        max_tokens: int,
        overlap_ratio: float,
    ) -> list[tuple[int, int]]:
        if self._counter.count(text[start:end]) <= max_tokens:
            return [(start, end)]

        slice_budget = max(1, int(max_tokens * (1 - min(overlap_ratio, MAX_OVERLAP_RESERVE))))
        units: list[tuple[int, int]] = []
        for para_start, para_end in self._paragraphs(lines, line_starts, section):
            if self._counter.count(text[para_start:para_end]) <= max_tokens:
                units.append((para_start, para_end))
                continue
            offset = para_start
            for piece in sequential_slices(text[para_start:para_end], slice_budget, self._counter):
                units.append((offset, offset + len(piece)))
                offset += len(piece)
        return self._pack(text, units, max_tokens, overlap_ratio)

    @staticmethod
    def _paragraphs(
        lines: list[str], line_starts: list[int], section: _Section
    ) -> list[tuple[int, int]]:
        spans: list[tuple[int, int]] = []
        run_start: int | None = None
        for index in range(section.first_line, section.last_line + 1):
            if lines[index].strip():
                if run_start is None:
                    run_start = index
                continue
            if run_start is not None:
                spans.append((line_starts[run_start], line_starts[index - 1] + len(lines[index - 1])))
                run_start = None
        if run_start is not None:
            last = section.last_line
            spans.append((line_starts[run_start], line_starts[last] + len(lines[last])))
        return spans

    def _pack(
        self,
        text: str,
        units: list[tuple[int, int]],
        max_tokens: int,
        overlap_ratio: float,
    ) -> list[tuple[int, int]]:
        """Greedily merge units into spans, seeding each new span with overlap."""
        spans: list[tuple[int, int]] = []
        current: tuple[int, int] | None = None
        for unit_start, unit_end in units:
            if current is None:
                current = (unit_start, unit_end)
                continue
            if self._counter.count(text[current[0]:unit_end]) <= max_tokens:
                current = (current[0], unit_end)
                continue
            spans.append(current)
            overlap = math.floor((current[1] - current[0]) * overlap_ratio)
            next_start = unit_start
            if overlap:
                candidate = current[1] - overlap
                # Overlap is dropped when it would push the span over budget.
                if self._counter.count(text[candidate:unit_end]) <= max_tokens:
                    next_start = candidate
            current = (next_start, unit_end)
        if current is not None:
            spans.append(current)
        return spans

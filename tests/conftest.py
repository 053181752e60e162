"""
Shared test fixtures and configuration for entire test suite.

Provides: temp project trees, a deterministic analyzer, chunk factories,
settings bound to a temp root, keyword backend and embedded Qdrant fixtures
Dependencies: pytest, langchain_core, qdrant_client
System role: Test infrastructure and fixture management
"""

import re
import shutil
import tempfile
from pathlib import Path

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings

from novel_index.application.backends.keyword_backend import KeywordSearchBackend
from novel_index.boundary.analyzer.morph_analyzer import AnalyzedToken, KeywordTokenizer
from novel_index.configs import Settings
from novel_index.configs.chunk import ChunkSettings
from novel_index.configs.keyword import KeywordSettings
from novel_index.configs.watcher import WatcherSettings
from novel_index.core.models import Chunk


class WordAnalyzer:
    """Analyzer double: every word is a noun; can be told to fail."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = 0

    def tokenize(self, text: str) -> list[AnalyzedToken]:
        self.calls += 1
        if self.fail:
            raise RuntimeError("analyzer unavailable")
        return [
            AnalyzedToken(m.group(0), m.group(0), "名詞", m.start())
            for m in re.finditer(r"\w+", text)
        ]


class RecordingEmbeddings(Embeddings):
    """Deterministic embeddings that remember every embedded document."""

    def __init__(self, size: int = 32) -> None:
        self._inner = DeterministicFakeEmbedding(size=size)
        self.embedded: list[str] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.embedded.extend(texts)
        return self._inner.embed_documents(texts)

    def embed_query(self, text: str) -> list[float]:
        return self._inner.embed_query(text)


def make_chunk(
    content: str,
    title: str = "Chapter 1",
    file: str = "novel-a/test.md",
    start: int = 1,
    end: int = 3,
    index: int = 0,
    project_id: str = "novel-a",
    tags: list[str] | None = None,
) -> Chunk:
    """Build a chunk with sensible defaults."""
    return Chunk(
        title=title,
        content=content,
        relative_file_path=file,
        start_line=start,
        end_line=end,
        chunk_index=index,
        project_id=project_id,
        tags=tags or [],
    )


@pytest.fixture
def temp_dir():
    """
    Create temporary directory for file operations.

    Yields:
        Path: Temporary directory path (cleaned up after test)
    """
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def project_root(temp_dir: Path) -> Path:
    """
    Project root with one project "novel-a".

    Layout:
        novel-a/novel.json          settingsDirectories=["settings"]
        novel-a/contents/ch1.md     two chapters
        novel-a/settings/world.md   setting notes
        novel-a/.drafts/hidden.md   hidden, never indexed
        novel-a/notes.json          unwatched extension
    """
    project = temp_dir / "novel-a"
    (project / "contents").mkdir(parents=True)
    (project / "settings").mkdir()
    (project / ".drafts").mkdir()
    (project / "novel.json").write_text(
        '{"title": "A", "settingsDirectories": ["settings"], "contentDirectories": ["contents"]}',
        encoding="utf-8",
    )
    (project / "contents" / "ch1.md").write_text(
        "# Chapter 1\nThe dragon sleeps in the mountain.\n\n# Chapter 2\nThe knight rides at dawn.\n",
        encoding="utf-8",
    )
    (project / "settings" / "world.md").write_text(
        "# World\nThe kingdom of Aster lies beyond the mountain.\n",
        encoding="utf-8",
    )
    (project / ".drafts" / "hidden.md").write_text("# Hidden\nsecret dragon\n", encoding="utf-8")
    (project / "notes.json").write_text('{"dragon": true}', encoding="utf-8")
    return temp_dir


@pytest.fixture
def settings(project_root: Path) -> Settings:
    """Keyword-backend settings rooted at the temp project root."""
    return Settings(
        project_root=str(project_root),
        search_backend="keyword",
        chunk=ChunkSettings(max_tokens=400, overlap=0.0),
        watcher=WatcherSettings(debounce_ms=20),
    )


@pytest.fixture
def word_analyzer() -> WordAnalyzer:
    return WordAnalyzer()


@pytest.fixture
def keyword_backend(word_analyzer: WordAnalyzer) -> KeywordSearchBackend:
    """Keyword backend over the word analyzer."""
    return KeywordSearchBackend(KeywordTokenizer(word_analyzer, min_word_length=2), KeywordSettings())


@pytest.fixture
def recording_embeddings() -> RecordingEmbeddings:
    return RecordingEmbeddings(size=32)


@pytest.fixture
def chunk_factory():
    """Factory building chunks (see make_chunk)."""
    return make_chunk


@pytest.fixture
def failing_analyzer() -> WordAnalyzer:
    return WordAnalyzer(fail=True)


@pytest.fixture
def embeddings_factory():
    """Factory building RecordingEmbeddings of a given size."""
    return RecordingEmbeddings

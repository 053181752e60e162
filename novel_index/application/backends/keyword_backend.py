"""
Keyword retrieval backend.

Multi-field lexical index over title, content and tags. Content and titles
go through morphological analysis; tags are indexed as whole terms. Scores
come from BM25+ models built lazily per project and per field, so corpus
statistics never mix namespaces, and are cached until that project changes.

Dependencies: rank_bm25, novel_index.boundary.analyzer, novel_index.core
System role: Lexical RAG retrieval
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from rank_bm25 import BM25Plus

from novel_index.application.backends.search_backend import SearchBackend, group_by_file
from novel_index.boundary.analyzer.morph_analyzer import KeywordTokenizer
from novel_index.configs.keyword import KeywordSettings
from novel_index.core.diff import IndexedChunkRef, diff_chunks
from novel_index.core.exceptions import IndexingError, UnsupportedIndexVersionError
from novel_index.core.models import (
    BackendStats,
    Chunk,
    ChunkUpdateResult,
    SearchPayload,
    SearchResult,
)
from novel_index.core.snippet import build_snippet

logger = logging.getLogger(__name__)

INDEX_FORMAT_VERSION = 1


@dataclass
class _IndexedChunk:
    chunk: Chunk
    title_terms: list[str]
    content_terms: list[str]
    tag_terms: list[str]
    term_set: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        self.term_set = frozenset(self.title_terms + self.content_terms + self.tag_terms)


@dataclass
class _ProjectModel:
    ids: list[str]
    title: BM25Plus | None
    content: BM25Plus | None
    tags: BM25Plus | None


class KeywordSearchBackend(SearchBackend):
    """
    In-memory keyword index.

    Initialization is implicit: every operation initializes on first use.
    """

    name = "keyword"

    def __init__(self, tokenizer: KeywordTokenizer, settings: KeywordSettings | None = None) -> None:
        """
        Initialize the backend.

        Args:
            tokenizer: Keyword extraction over an injected analyzer
            settings: Scoring and snippet configuration
        """
        self._tokenizer = tokenizer
        self._settings = settings or KeywordSettings()
        self._initialized = False
        self._records: dict[str, _IndexedChunk] = {}
        self._by_file: dict[str, set[str]] = {}
        self._by_project: dict[str, set[str]] = {}
        self._models: dict[str, _ProjectModel] = {}
        self._last_updated: datetime | None = None

    async def initialize(self) -> None:
        if self._initialized:
            return
        self._records.clear()
        self._by_file.clear()
        self._by_project.clear()
        self._models.clear()
        self._initialized = True
        logger.info(
            f"{__name__}:initialize - Keyword index ready",
            extra={"profile": self._settings.profile},
        )

    def is_ready(self) -> bool:
        return self._initialized

    # Mutation helpers

    def _analyze(self, chunk: Chunk) -> _IndexedChunk:
        content = self._tokenizer.analyze(chunk.content)
        title = self._tokenizer.analyze(chunk.title)
        if content.fallback_used or title.fallback_used:
            logger.debug(f"{__name__}:_analyze - Fallback tokenization for {chunk.id}")
        return _IndexedChunk(
            chunk=chunk,
            title_terms=title.terms(),
            content_terms=content.terms(),
            tag_terms=[tag.lower() for tag in chunk.tags],
        )

    def _store(self, record: _IndexedChunk) -> None:
        chunk = record.chunk
        self._drop(chunk.id)
        self._records[chunk.id] = record
        self._by_file.setdefault(chunk.relative_file_path, set()).add(chunk.id)
        self._by_project.setdefault(chunk.project_id, set()).add(chunk.id)
        self._models.pop(chunk.project_id, None)

    def _drop(self, chunk_id: str) -> bool:
        record = self._records.pop(chunk_id, None)
        if record is None:
            return False
        chunk = record.chunk
        for index, key in ((self._by_file, chunk.relative_file_path), (self._by_project, chunk.project_id)):
            ids = index.get(key)
            if ids is not None:
                ids.discard(chunk_id)
                if not ids:
                    del index[key]
        self._models.pop(chunk.project_id, None)
        return True

    def _touch(self) -> None:
        self._last_updated = datetime.now(timezone.utc)

    # Contract

    async def add(self, chunks: list[Chunk]) -> None:
        await self.initialize()
        for chunk in chunks:
            self._store(self._analyze(chunk))
        if chunks:
            self._touch()
        logger.debug(f"{__name__}:add - Indexed {len(chunks)} chunks")

    async def remove(self, ids: list[str]) -> None:
        await self.initialize()
        removed = sum(1 for chunk_id in ids if self._drop(chunk_id))
        if removed:
            self._touch()

    async def remove_by_file(self, relative_file_path: str) -> None:
        await self.initialize()
        ids = list(self._by_file.get(relative_file_path, ()))
        await self.remove(ids)
        logger.info(f"{__name__}:remove_by_file - Removed {len(ids)} chunks of {relative_file_path}")

    async def remove_by_novel(self, project_id: str) -> None:
        await self.initialize()
        ids = list(self._by_project.get(project_id, ()))
        await self.remove(ids)
        logger.info(f"{__name__}:remove_by_novel - Removed {len(ids)} chunks of project {project_id}")

    async def update_chunks(self, chunks: list[Chunk]) -> ChunkUpdateResult:
        await self.initialize()
        result = ChunkUpdateResult()
        for file_path, file_chunks in group_by_file(chunks).items():
            existing = [
                IndexedChunkRef.from_id(chunk_id) for chunk_id in self._by_file.get(file_path, ())
            ]
            diff = diff_chunks(file_chunks, existing)
            for chunk_id in diff.to_delete:
                self._drop(chunk_id)
            for chunk in diff.to_write:
                self._store(self._analyze(chunk))
            result.added += len(diff.added)
            result.updated += len(diff.updated)
            result.unchanged += len(diff.unchanged)
            result.removed += len(diff.removed_ids)
        if result.added or result.updated or result.removed:
            self._touch()
        logger.info(
            f"{__name__}:update_chunks - added={result.added}, updated={result.updated}, "
            f"unchanged={result.unchanged}, removed={result.removed}"
        )
        return result

    def _model_for(self, project_id: str) -> _ProjectModel | None:
        model = self._models.get(project_id)
        if model is not None:
            return model
        ids = sorted(self._by_project.get(project_id, ()))
        if not ids:
            return None
        k1, b, delta = self._settings.bm25_parameters

        def build(corpus: list[list[str]]) -> BM25Plus | None:
            # BM25 averages document length; an all-empty field has nothing to score.
            if not any(corpus):
                return None
            return BM25Plus(corpus, k1=k1, b=b, delta=delta)

        records = [self._records[chunk_id] for chunk_id in ids]
        model = _ProjectModel(
            ids=ids,
            title=build([r.title_terms for r in records]),
            content=build([r.content_terms for r in records]),
            tags=build([r.tag_terms for r in records]),
        )
        self._models[project_id] = model
        return model

    def _query_terms(self, query: str) -> list[str]:
        terms = self._tokenizer.analyze(query).terms()
        terms.extend(
            word.lower() for word in query.split() if len(word) >= self._tokenizer.min_word_length
        )
        return list(dict.fromkeys(terms))

    async def search(self, query: str, k: int, project_id: str) -> list[SearchResult]:
        await self.initialize()
        if not query.strip() or k <= 0:
            return []
        model = self._model_for(project_id)
        if model is None:
            return []
        terms = self._query_terms(query)
        if not terms:
            return []

        def scores(bm25: BM25Plus | None) -> list[float]:
            if bm25 is None:
                return [0.0] * len(model.ids)
            return [float(s) for s in bm25.get_scores(terms)]

        content_scores = scores(model.content)
        title_scores = scores(model.title)
        tag_scores = scores(model.tags)
        query_set = set(terms)

        ranked: list[tuple[float, str]] = []
        for i, chunk_id in enumerate(model.ids):
            if self._records[chunk_id].term_set.isdisjoint(query_set):
                continue
            raw = (
                content_scores[i]
                + self._settings.title_weight * title_scores[i]
                + self._settings.tag_weight * tag_scores[i]
            )
            score = min(1.0, max(0.0, raw / (raw + 1.0))) if raw > 0 else 0.0
            ranked.append((score, chunk_id))
        ranked.sort(key=lambda item: (-item[0], item[1]))

        results = []
        for score, chunk_id in ranked[:k]:
            chunk = self._records[chunk_id].chunk
            results.append(
                SearchResult(
                    id=chunk.id,
                    score=score,
                    snippet=build_snippet(chunk.content, query, self._settings.snippet_length, terms),
                    payload=SearchPayload(
                        file=chunk.relative_file_path,
                        start=chunk.start_line,
                        end=chunk.end_line,
                        tags=list(chunk.tags),
                    ),
                )
            )
        logger.info(
            f"{__name__}:search - {len(results)} results",
            extra={"project_id": project_id, "k": k, "candidates": len(ranked)},
        )
        return results

    async def clear(self) -> None:
        self._initialized = False
        await self.initialize()
        self._touch()

    async def get_stats(self) -> BackendStats:
        await self.initialize()
        memory = 0
        for record in self._records.values():
            memory += len(record.chunk.content.encode("utf-8")) + len(record.chunk.title.encode("utf-8"))
            memory += sum(len(term.encode("utf-8")) for term in record.term_set)
        return BackendStats(
            total_chunks=len(self._records),
            memory_usage=memory,
            last_updated=self._last_updated,
        )

    async def dispose(self) -> None:
        self._records.clear()
        self._by_file.clear()
        self._by_project.clear()
        self._models.clear()
        self._initialized = False

    # Persistence

    async def export_index(self, path: str | Path) -> None:
        """
        Write all indexed chunks to a JSON file.

        Terms are not stored; import re-analyzes content.

        Args:
            path: Destination file
        """
        await self.initialize()
        document = {
            "format_version": INDEX_FORMAT_VERSION,
            "backend": self.name,
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "chunks": [record.chunk.model_dump(mode="json") for record in self._records.values()],
        }
        target = Path(path)
        await asyncio.to_thread(
            target.write_text, json.dumps(document, ensure_ascii=False), encoding="utf-8"
        )
        logger.info(f"{__name__}:export_index - Exported {len(self._records)} chunks to {target}")

    async def import_index(self, path: str | Path) -> None:
        """
        Replace the index with the chunks of an exported file.

        Raises:
            UnsupportedIndexVersionError: If the file has another format version
            IndexingError: If the file cannot be read or parsed
        """
        source = Path(path)
        try:
            document = json.loads(await asyncio.to_thread(source.read_text, encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise IndexingError(f"Cannot read index file: {e}", file_path=str(source)) from e

        version = document.get("format_version") if isinstance(document, dict) else None
        if version != INDEX_FORMAT_VERSION:
            raise UnsupportedIndexVersionError(version, INDEX_FORMAT_VERSION)

        try:
            chunks = [Chunk.model_validate(item) for item in document.get("chunks", [])]
        except ValueError as e:
            raise IndexingError(f"Malformed index file: {e}", file_path=str(source)) from e
        await self.clear()
        await self.add(chunks)
        logger.info(f"{__name__}:import_index - Imported {len(chunks)} chunks from {source}")

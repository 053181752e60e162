"""
Project indexer.

Turns project files into chunks and pushes them through the retrieval
backend contract. Writes for one file are serialized; a failing file is
reported and skipped during bulk indexing.

Dependencies: novel_index.application.backends, novel_index.core
System role: Filesystem -> ChunkSplitter -> backend pipeline
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

from novel_index.application.backends.search_backend import SearchBackend
from novel_index.configs import Settings
from novel_index.core.chunker import MarkdownChunker
from novel_index.core.exceptions import (
    FileOperationError,
    IndexingError,
    NovelIndexException,
)
from novel_index.core.models import Chunk, ChunkUpdateResult, SearchResult
from novel_index.core.project import ProjectLayout
from novel_index.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


@dataclass
class IndexingReport:
    """Outcome of indexing every file of a project."""

    project_id: str
    files_indexed: int = 0
    chunks_indexed: int = 0
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failures


class Indexer:
    """Indexes project directories under settings.project_root."""

    def __init__(
        self,
        settings: Settings,
        backend: SearchBackend,
        chunker: MarkdownChunker | None = None,
    ) -> None:
        self._settings = settings
        self._backend = backend
        self._chunker = chunker or MarkdownChunker()
        self.project_root = Path(settings.project_root).resolve()
        self._extensions = {
            f".{ext.lower().lstrip('.')}" for ext in settings.watcher.watched_extensions
        }
        self._layouts: dict[str, ProjectLayout] = {}
        self._file_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @property
    def backend(self) -> SearchBackend:
        return self._backend

    def project_dir(self, project_id: str) -> Path:
        return self.project_root / project_id

    def layout(self, project_id: str) -> ProjectLayout:
        """Project layout, loaded from novel.json on first use."""
        layout = self._layouts.get(project_id)
        if layout is None:
            layout = ProjectLayout.load(self.project_dir(project_id), self._settings.settings_directories)
            self._layouts[project_id] = layout
        return layout

    def relative_path(self, path: str | Path) -> str:
        """
        POSIX path relative to the project root (starts with the project id).

        Raises:
            FileOperationError: If the path lies outside the project root
        """
        absolute = Path(path)
        if not absolute.is_absolute():
            absolute = self.project_root / absolute
        try:
            return absolute.resolve().relative_to(self.project_root).as_posix()
        except ValueError as e:
            raise FileOperationError(
                f"Path is outside the project root: {path}",
                file_path=str(path),
                operation="resolve",
            ) from e

    def find_target_files(self, project_id: str) -> list[Path]:
        """Indexable files of a project, hidden entries skipped, sorted."""
        project_dir = self.project_dir(project_id)
        if not project_dir.is_dir():
            return []
        files = []
        for path in project_dir.rglob("*"):
            if path.suffix.lower() not in self._extensions or not path.is_file():
                continue
            if any(part.startswith(".") for part in path.relative_to(project_dir).parts):
                continue
            files.append(path)
        return sorted(files)

    @asynccontextmanager
    async def _lock_for(self, relative_path: str) -> AsyncIterator[None]:
        """Serialize work on one file; the lock is dropped once nobody holds or awaits it."""
        lock = self._file_locks.setdefault(relative_path, asyncio.Lock())
        self._lock_users[relative_path] = self._lock_users.get(relative_path, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[relative_path] -= 1
            if not self._lock_users[relative_path]:
                del self._lock_users[relative_path]
                del self._file_locks[relative_path]

    async def process_file(self, path: Path, project_id: str) -> list[Chunk]:
        """
        Read and chunk one file.

        Raises:
            FileOperationError: If the file cannot be read as UTF-8
        """
        relative = self.relative_path(path)
        try:
            text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileOperationError(
                f"Cannot read file: {e}",
                file_path=relative,
                operation="read",
            ) from e

        path_in_project = relative.split("/", 1)[1] if "/" in relative else relative
        chunk_settings = self._settings.chunk
        return self._chunker.split(
            text,
            relative,
            chunk_settings.max_tokens,
            chunk_settings.overlap,
            project_id=project_id,
            file_type=self.layout(project_id).file_type(path_in_project),
        )

    async def update_file(self, path: str | Path, project_id: str) -> ChunkUpdateResult:
        """
        Re-chunk a file and apply the incremental update.

        Raises:
            FileOperationError: If the file cannot be read
            IndexingError: If chunking or the backend write fails
        """
        await self._backend.initialize()
        relative = self.relative_path(path)
        async with self._lock_for(relative):
            chunks = await self.process_file(Path(path), project_id)
            try:
                result = await self._backend.update_chunks(chunks)
            except NovelIndexException:
                raise
            except Exception as e:
                raise IndexingError(
                    f"Backend update failed: {e}",
                    project_id=project_id,
                    file_path=relative,
                ) from e
        logger.debug(f"{__name__}:update_file - {relative}: {result.model_dump()}")
        return result

    async def remove_file(self, path: str | Path) -> None:
        """Drop every chunk of a file."""
        await self._backend.initialize()
        relative = self.relative_path(path)
        async with self._lock_for(relative):
            await self._backend.remove_by_file(relative)

    async def index_novel(self, project_id: str) -> IndexingReport:
        """
        Index every target file of a project.

        One failing file is logged and recorded; the others still index.

        Returns:
            IndexingReport: Counts and per-file failures
        """
        await self._backend.initialize()
        self._layouts.pop(project_id, None)
        report = IndexingReport(project_id=project_id)
        files = self.find_target_files(project_id)
        logger.info(f"{__name__}:index_novel - START: {project_id} ({len(files)} files)")

        for path in files:
            try:
                result = await self.update_file(path, project_id)
            except NovelIndexException as e:
                relative = path.relative_to(self.project_root).as_posix()
                report.failures[relative] = str(e)
                log_exception_with_context(
                    logger,
                    f"{__name__}:index_novel - Failed to index {relative}",
                    e,
                    project_id=project_id,
                )
                continue
            report.files_indexed += 1
            report.chunks_indexed += result.added + result.updated + result.unchanged

        logger.info(
            f"{__name__}:index_novel - DONE: {project_id}",
            extra={
                "files_indexed": report.files_indexed,
                "chunks_indexed": report.chunks_indexed,
                "failures": len(report.failures),
            },
        )
        return report

    async def search(self, query: str, k: int, project_id: str) -> list[SearchResult]:
        await self._backend.initialize()
        return await self._backend.search(query, k, project_id)

    async def remove_novel_from_index(self, project_id: str) -> None:
        await self._backend.initialize()
        await self._backend.remove_by_novel(project_id)
        self._layouts.pop(project_id, None)

    async def cleanup(self) -> None:
        await self._backend.dispose()
        self._layouts.clear()

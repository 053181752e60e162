"""
Indexer manager.

Owns the Indexer and the file watcher. Projects are indexed lazily on
first use, once, even when several requests for the same project arrive
together.

Dependencies: novel_index.application.services.indexer, novel_index.boundary.fs
System role: Lifecycle orchestration for indexing and watching
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from novel_index.application.services.indexer import Indexer, IndexingReport
from novel_index.boundary.fs.file_watcher import (
    FileChangeEvent,
    FileEventType,
    FileWatchCoordinator,
)
from novel_index.configs import Settings
from novel_index.core.exceptions import NovelIndexException
from novel_index.core.models import ChunkUpdateResult, SearchResult
from novel_index.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class IndexerStats(BaseModel):
    """Snapshot of manager and backend state."""

    backend: str = Field(description="Backend name")
    initialized_projects: list[str] = Field(default_factory=list)
    watching: bool = False
    total_chunks: int = 0
    memory_usage: int | None = None
    last_updated: datetime | None = None


class IndexerManager:
    """Lazy per-project indexing plus file watching."""

    def __init__(
        self,
        settings: Settings,
        indexer: Indexer,
        watcher: FileWatchCoordinator | None = None,
    ) -> None:
        """
        Initialize the manager.

        Args:
            settings: Application settings
            indexer: Indexer bound to a backend
            watcher: Optional pre-built watcher; one is created on first start otherwise
        """
        self._settings = settings
        self._indexer = indexer
        self._watcher = watcher
        self._initialized: set[str] = set()
        self._init_locks: dict[str, asyncio.Lock] = {}

    @property
    def indexer(self) -> Indexer:
        return self._indexer

    def is_initialized(self, project_id: str) -> bool:
        return project_id in self._initialized

    async def ensure_novel_initialized(self, project_id: str) -> IndexingReport | None:
        """
        Index a project the first time it is touched.

        Returns:
            IndexingReport | None: Report of the initial indexing, None if already done
        """
        if project_id in self._initialized:
            return None
        lock = self._init_locks.setdefault(project_id, asyncio.Lock())
        async with lock:
            if project_id in self._initialized:
                return None
            report = await self._indexer.index_novel(project_id)
            self._initialized.add(project_id)
            return report

    async def search(self, project_id: str, query: str, k: int) -> list[SearchResult]:
        await self.ensure_novel_initialized(project_id)
        return await self._indexer.search(query, k, project_id)

    async def update_file(self, project_id: str, path: str | Path) -> ChunkUpdateResult | None:
        """
        Re-index one file.

        Returns None when the file was covered by the project's initial indexing.
        """
        if await self.ensure_novel_initialized(project_id) is not None:
            return None
        return await self._indexer.update_file(path, project_id)

    async def remove_file(self, project_id: str, path: str | Path) -> None:
        if project_id not in self._initialized:
            # Nothing of this project is indexed yet.
            return
        await self._indexer.remove_file(path)

    async def clear_novel_index(self, project_id: str) -> None:
        await self._indexer.remove_novel_from_index(project_id)
        self._initialized.discard(project_id)
        logger.info(f"{__name__}:clear_novel_index - Cleared {project_id}")

    async def rebuild_index(self, project_id: str) -> IndexingReport:
        """Drop and re-index a whole project."""
        lock = self._init_locks.setdefault(project_id, asyncio.Lock())
        async with lock:
            await self.clear_novel_index(project_id)
            report = await self._indexer.index_novel(project_id)
            self._initialized.add(project_id)
        logger.info(
            f"{__name__}:rebuild_index - Rebuilt {project_id}",
            extra={"files_indexed": report.files_indexed, "failures": len(report.failures)},
        )
        return report

    async def get_stats(self) -> IndexerStats:
        backend = self._indexer.backend
        await backend.initialize()
        stats = await backend.get_stats()
        return IndexerStats(
            backend=backend.name,
            initialized_projects=sorted(self._initialized),
            watching=self.is_file_watching(),
            total_chunks=stats.total_chunks,
            memory_usage=stats.memory_usage,
            last_updated=stats.last_updated,
        )

    async def handle_file_change(self, event: FileChangeEvent) -> None:
        """Apply one debounced filesystem event. Failures are logged, not raised."""
        logger.info(f"{__name__}:handle_file_change - {event.type.value} {event.relative_path}")
        try:
            if event.type == FileEventType.UNLINK:
                await self.remove_file(event.project_id, event.path)
            else:
                await self.update_file(event.project_id, event.path)
        except NovelIndexException as e:
            log_exception_with_context(
                logger,
                f"{__name__}:handle_file_change - Failed to apply {event.type.value}",
                e,
                project_id=event.project_id,
                file_path=event.relative_path,
            )

    async def start_file_watching(self) -> None:
        if not self._settings.watcher.enabled:
            logger.info(f"{__name__}:start_file_watching - Watching disabled by settings, not starting")
            return
        if self._watcher is None:
            self._watcher = FileWatchCoordinator(
                self._indexer.project_root,
                self.handle_file_change,
                self._settings.watcher,
            )
        await self._watcher.start()

    async def stop_file_watching(self) -> None:
        if self._watcher is not None:
            await self._watcher.stop()

    def is_file_watching(self) -> bool:
        return self._watcher is not None and self._watcher.is_watching

    async def cleanup(self) -> None:
        await self.stop_file_watching()
        await self._indexer.cleanup()
        self._initialized.clear()
        self._init_locks.clear()
        logger.info(f"{__name__}:cleanup - Released indexer resources")

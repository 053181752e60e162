"""
Search service.

Entry point for callers: ranked RAG search through the configured backend
and raw line search over settings or manuscript files.

Dependencies: novel_index.application.services.indexer_manager, novel_index.core
System role: Query orchestration
"""

import asyncio
import logging
import re

from pydantic import BaseModel, Field

from novel_index.application.backends.backend_factory import create_backend
from novel_index.application.services.indexer import Indexer
from novel_index.application.services.indexer_manager import IndexerManager
from novel_index.configs import Settings, get_settings
from novel_index.core.exceptions import (
    IndexNotInitializedError,
    InvalidPatternError,
    NovelIndexException,
    SearchError,
    ValidationError,
)
from novel_index.core.models import FileType, SearchResult
from novel_index.observability.logger import configure_logging

logger = logging.getLogger(__name__)


class FileSearchResult(BaseModel):
    """Lines of one file matching a keyword, each with one line of context."""

    filename: str = Field(description="Path relative to the project directory")
    matching_lines: list[str] = Field(default_factory=list)


def compile_keyword(keyword: str, use_regex: bool) -> re.Pattern[str]:
    """
    Compile a case-insensitive search pattern.

    Raises:
        ValidationError: If the keyword is empty
        InvalidPatternError: If use_regex is set and the keyword is not a valid regex
    """
    if not keyword:
        raise ValidationError("Search keyword must not be empty", field="keyword")
    if not use_regex:
        return re.compile(re.escape(keyword), re.IGNORECASE)
    try:
        return re.compile(keyword, re.IGNORECASE)
    except re.error as e:
        raise InvalidPatternError(keyword, str(e)) from e


class SearchService:
    """Search facade over the indexer manager."""

    def __init__(self, settings: Settings, manager: IndexerManager) -> None:
        self._settings = settings
        self._manager = manager

    def clamp_k(self, k: int | None) -> int:
        """Requested result count bounded to [1, max_k]; None means default_k."""
        search = self._settings.search
        if k is None:
            return search.default_k
        return max(1, min(k, search.max_k))

    async def search_rag(self, project_id: str, query: str, k: int | None = None) -> list[SearchResult]:
        """
        Ranked search within one project.

        Raises:
            SearchError: If the backend fails, with the backend name attached
        """
        backend_name = self._manager.indexer.backend.name
        limit = self.clamp_k(k)
        try:
            results = await self._manager.search(project_id, query, limit)
        except (SearchError, IndexNotInitializedError):
            raise
        except NovelIndexException as e:
            raise SearchError(
                f"Search failed: {e.message}",
                backend=backend_name,
                query=query,
                details=dict(e.details),
            ) from e
        except Exception as e:
            raise SearchError(f"Search failed: {e}", backend=backend_name, query=query) from e
        logger.info(
            f"{__name__}:search_rag - {len(results)} results",
            extra={"project_id": project_id, "k": limit, "backend": backend_name},
        )
        return results

    async def search_settings_files(
        self, project_id: str, keyword: str, use_regex: bool = False
    ) -> list[FileSearchResult]:
        return await self._search_files(project_id, keyword, use_regex, FileType.SETTINGS)

    async def search_content_files(
        self, project_id: str, keyword: str, use_regex: bool = False
    ) -> list[FileSearchResult]:
        return await self._search_files(project_id, keyword, use_regex, FileType.CONTENT)

    async def _search_files(
        self,
        project_id: str,
        keyword: str,
        use_regex: bool,
        file_type: FileType,
    ) -> list[FileSearchResult]:
        pattern = compile_keyword(keyword, use_regex)
        indexer = self._manager.indexer
        layout = indexer.layout(project_id)
        project_dir = indexer.project_dir(project_id)

        results: list[FileSearchResult] = []
        for path in indexer.find_target_files(project_id):
            filename = path.relative_to(project_dir).as_posix()
            if not layout.contains(filename, file_type):
                continue
            try:
                text = await asyncio.to_thread(path.read_text, encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"{__name__}:_search_files - Skipping unreadable {filename}: {e}")
                continue

            lines = text.split("\n")
            matching = [
                f"line {i + 1}: " + "\n".join(lines[max(0, i - 1):i + 2])
                for i, line in enumerate(lines)
                if pattern.search(line)
            ]
            if matching:
                results.append(FileSearchResult(filename=filename, matching_lines=matching))
        return results

    async def start_file_watching(self) -> None:
        await self._manager.start_file_watching()

    async def stop_file_watching(self) -> None:
        await self._manager.stop_file_watching()

    def is_file_watching(self) -> bool:
        return self._manager.is_file_watching()


def create_search_service(settings: Settings | None = None, setup_logging: bool = False) -> SearchService:
    """
    Wire backend, indexer, manager and service from settings.

    Args:
        settings: Defaults to the cached process settings
        setup_logging: Install the root handler at settings.effective_log_level

    Raises:
        ConfigurationError: If the backend wiring is invalid
    """
    settings = settings or get_settings()
    if setup_logging:
        configure_logging(settings.effective_log_level)
    indexer = Indexer(settings, create_backend(settings))
    return SearchService(settings, IndexerManager(settings, indexer))

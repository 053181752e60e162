"""
Filesystem watch coordinator.

Bridges watchdog observer threads into the asyncio loop, debounces bursts
of events per path, resolves the project a path belongs to and dispatches
one logical event per quiet period. Dispatches for the same path run one
at a time, in emission order.

Dependencies: watchdog, novel_index.configs
System role: Drives incremental re-indexing from on-disk changes
"""

import asyncio
import fnmatch
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable

from watchdog.events import FileSystemEvent, PatternMatchingEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from novel_index.configs.watcher import WatcherSettings
from novel_index.core.exceptions import FileOperationError
from novel_index.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

OBSERVER_JOIN_TIMEOUT = 5.0


class FileEventType(str, Enum):
    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"


class WatcherState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    WATCHING = "watching"
    STOPPING = "stopping"


@dataclass(frozen=True)
class FileChangeEvent:
    """Debounced change of one file inside a project."""

    type: FileEventType
    path: Path
    project_id: str
    relative_path: str


FileChangeHandler = Callable[[FileChangeEvent], Awaitable[None]]


@dataclass
class _Pending:
    event: FileChangeEvent
    timer: asyncio.TimerHandle


class _WatchdogBridge(PatternMatchingEventHandler):
    """Forwards watchdog callbacks (observer thread) to the coordinator (loop thread)."""

    def __init__(
        self,
        coordinator: "FileWatchCoordinator",
        loop: asyncio.AbstractEventLoop,
        patterns: list[str],
        ignore_patterns: list[str],
    ) -> None:
        super().__init__(
            patterns=patterns,
            ignore_patterns=ignore_patterns,
            ignore_directories=True,
            case_sensitive=False,
        )
        self._coordinator = coordinator
        self._loop = loop

    def _emit(self, event_type: FileEventType, path: str | bytes) -> None:
        self._loop.call_soon_threadsafe(
            self._coordinator.handle_raw_event, event_type, os.fsdecode(path)
        )

    def on_created(self, event: FileSystemEvent) -> None:
        self._emit(FileEventType.ADD, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._emit(FileEventType.CHANGE, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._emit(FileEventType.UNLINK, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._emit(FileEventType.UNLINK, event.src_path)
        self._emit(FileEventType.ADD, event.dest_path)


class FileWatchCoordinator:
    """
    Watches a project root and emits debounced FileChangeEvents.

    State machine: stopped -> starting -> watching -> stopping -> stopped.
    Handler failures are logged; they never stop the watcher.
    """

    def __init__(
        self,
        root: str | Path,
        handler: FileChangeHandler,
        settings: WatcherSettings | None = None,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        """
        Initialize the coordinator. Nothing is watched until start().

        Args:
            root: Project root; each first-level directory is a project
            handler: Coroutine called once per debounced event
            settings: Debounce, extension and ignore configuration
            observer_factory: Builds the watchdog observer
        """
        self.root = Path(root).resolve()
        self._handler = handler
        self._settings = settings or WatcherSettings()
        self._observer_factory = observer_factory
        self._extensions = {f".{ext.lower().lstrip('.')}" for ext in self._settings.watched_extensions}
        self._state = WatcherState.STOPPED
        self._observer: BaseObserver | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: dict[str, _Pending] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def is_watching(self) -> bool:
        return self._state == WatcherState.WATCHING

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def resolve_project(self, path: str | Path) -> tuple[str, str] | None:
        """
        Map an absolute path to (project_id, root-relative POSIX path).

        Returns None for paths outside the root, directly under it, under a
        hidden segment, matching an ignore pattern or with an unwatched extension.
        """
        absolute = Path(path)
        if not absolute.is_absolute():
            absolute = self.root / absolute
        try:
            relative = absolute.resolve().relative_to(self.root)
        except ValueError:
            return None

        parts = relative.parts
        if len(parts) < 2 or any(part.startswith(".") for part in parts):
            return None
        if relative.suffix.lower() not in self._extensions:
            return None
        posix = relative.as_posix()
        if any(
            fnmatch.fnmatch(posix, pattern) or fnmatch.fnmatch(f"/{posix}", pattern)
            for pattern in self._settings.ignore_patterns
        ):
            return None
        return parts[0], posix

    async def start(self) -> None:
        """
        Start watching the root.

        Raises:
            FileOperationError: If the root directory does not exist
        """
        if self._state in (WatcherState.STARTING, WatcherState.WATCHING):
            logger.warning(f"{__name__}:start - Already {self._state.value}, ignoring start")
            return
        if self._state == WatcherState.STOPPING:
            logger.warning(f"{__name__}:start - Stop in progress, ignoring start")
            return
        if not self.root.is_dir():
            raise FileOperationError(
                f"Project root does not exist: {self.root}",
                file_path=str(self.root),
                operation="watch",
            )

        self._state = WatcherState.STARTING
        self._loop = asyncio.get_running_loop()
        try:
            observer = self._observer_factory()
            observer.schedule(
                _WatchdogBridge(
                    self,
                    self._loop,
                    patterns=sorted(f"*{ext}" for ext in self._extensions),
                    ignore_patterns=list(self._settings.ignore_patterns),
                ),
                str(self.root),
                recursive=True,
            )
            observer.start()
        except Exception:
            self._state = WatcherState.STOPPED
            raise
        self._observer = observer
        self._state = WatcherState.WATCHING
        logger.info(
            f"{__name__}:start - Watching {self.root}",
            extra={"debounce_ms": self._settings.debounce_ms, "extensions": sorted(self._extensions)},
        )

    def handle_raw_event(self, event_type: FileEventType, path: str) -> None:
        """Record an event and (re)start its path's debounce timer. Loop thread only."""
        if self._state != WatcherState.WATCHING or self._loop is None:
            return
        resolved = self.resolve_project(path)
        if resolved is None:
            return
        project_id, relative_path = resolved
        event = FileChangeEvent(event_type, Path(path), project_id, relative_path)

        previous = self._pending.get(relative_path)
        if previous is not None:
            previous.timer.cancel()
        timer = self._loop.call_later(
            self._settings.debounce_ms / 1000, self._emit, relative_path
        )
        self._pending[relative_path] = _Pending(event, timer)

    def _emit(self, key: str) -> None:
        pending = self._pending.pop(key, None)
        if pending is None or self._loop is None:
            return
        logger.debug(f"{__name__}:_emit - {pending.event.type.value} {key}")
        task = self._loop.create_task(self._dispatch(key, pending.event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _dispatch(self, key: str, event: FileChangeEvent) -> None:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                try:
                    await self._handler(event)
                except Exception as e:
                    log_exception_with_context(
                        logger,
                        f"{__name__}:_dispatch - Handler failed for {key}",
                        e,
                        event_type=event.type.value,
                        project_id=event.project_id,
                    )
        finally:
            # Forget the lock once no dispatch for this path holds or awaits it.
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def stop(self) -> None:
        """Stop the observer, flush pending timers and wait for in-flight dispatches."""
        if self._state in (WatcherState.STOPPED, WatcherState.STOPPING):
            return
        self._state = WatcherState.STOPPING

        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            await asyncio.to_thread(observer.join, OBSERVER_JOIN_TIMEOUT)

        for key in list(self._pending):
            self._pending[key].timer.cancel()
            self._emit(key)
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

        self._state = WatcherState.STOPPED
        logger.info(f"{__name__}:stop - Stopped watching {self.root}")

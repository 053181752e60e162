"""Filesystem adapters."""

from novel_index.boundary.fs.file_watcher import (
    FileChangeEvent,
    FileEventType,
    FileWatchCoordinator,
    WatcherState,
)

__all__ = ["FileChangeEvent", "FileEventType", "FileWatchCoordinator", "WatcherState"]

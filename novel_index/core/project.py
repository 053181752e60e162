"""
Project layout model.

Reads the optional novel.json of a project directory to learn which
directories hold settings and which hold manuscript content.

Dependencies: pydantic
System role: File type classification for indexed files
"""

import json
import logging
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from novel_index.core.models import FileType

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE = "novel.json"


class ProjectConfig(BaseModel):
    """Subset of novel.json relevant to indexing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str | None = None
    settings_directories: list[str] = Field(default_factory=list, alias="settingsDirectories")
    content_directories: list[str] = Field(default_factory=list, alias="contentDirectories")


class ProjectLayout:
    """Classifies project-relative paths as settings or content."""

    def __init__(self, project_id: str, config: ProjectConfig, default_settings_dirs: list[str]) -> None:
        self.project_id = project_id
        self.config = config
        self._content_dirs = [PurePosixPath(d.strip("/")) for d in config.content_directories]
        self._settings_dirs = [
            PurePosixPath(d.strip("/")) for d in (config.settings_directories or default_settings_dirs)
        ]

    @classmethod
    def load(cls, project_dir: Path, default_settings_dirs: list[str]) -> "ProjectLayout":
        """Read novel.json when present; a missing or broken file yields defaults."""
        config = ProjectConfig()
        config_path = project_dir / PROJECT_CONFIG_FILE
        if config_path.is_file():
            try:
                config = ProjectConfig.model_validate(json.loads(config_path.read_text(encoding="utf-8")))
            except (OSError, ValueError, PydanticValidationError) as e:
                logger.warning(
                    f"{__name__}:load - Ignoring unreadable {config_path}: {type(e).__name__}: {e}"
                )
        return cls(project_dir.name, config, default_settings_dirs)

    def file_type(self, path_in_project: str) -> FileType:
        """
        Classify a path relative to the project directory.

        Args:
            path_in_project: POSIX path without the project id segment

        Returns:
            FileType: SETTINGS when under a settings directory, else CONTENT
        """
        if self._under(path_in_project, self._settings_dirs):
            return FileType.SETTINGS
        return FileType.CONTENT

    def contains(self, path_in_project: str, file_type: FileType) -> bool:
        """
        Whether a path belongs to the directories of the given file type.

        Content is restricted to contentDirectories when novel.json lists them.
        """
        if file_type == FileType.SETTINGS:
            return self._under(path_in_project, self._settings_dirs)
        if self._content_dirs:
            return self._under(path_in_project, self._content_dirs)
        return self.file_type(path_in_project) == FileType.CONTENT

    @staticmethod
    def _under(path_in_project: str, directories: list[PurePosixPath]) -> bool:
        parts = PurePosixPath(path_in_project).parts
        return any(parts[: len(d.parts)] == d.parts for d in directories if d.parts)

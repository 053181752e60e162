"""Tests for project layout classification."""

from pathlib import Path

from novel_index.core.models import FileType
from novel_index.core.project import ProjectLayout


class TestProjectLayout:
    """novel.json driven settings/content classification."""

    def test_reads_novel_json(self, project_root: Path) -> None:
        layout = ProjectLayout.load(project_root / "novel-a", ["settings"])

        assert layout.config.title == "A"
        assert layout.file_type("settings/world.md") == FileType.SETTINGS
        assert layout.file_type("contents/ch1.md") == FileType.CONTENT

    def test_content_restricted_to_content_directories(self, project_root: Path) -> None:
        layout = ProjectLayout.load(project_root / "novel-a", ["settings"])

        assert layout.contains("contents/ch1.md", FileType.CONTENT)
        assert not layout.contains("notes/todo.md", FileType.CONTENT)
        assert layout.contains("settings/world.md", FileType.SETTINGS)

    def test_defaults_without_novel_json(self, temp_dir: Path) -> None:
        project = temp_dir / "plain"
        project.mkdir()

        layout = ProjectLayout.load(project, ["settings"])

        assert layout.file_type("settings/cast.md") == FileType.SETTINGS
        assert layout.file_type("chapter.md") == FileType.CONTENT
        assert layout.contains("anything/else.md", FileType.CONTENT)

    def test_broken_novel_json_falls_back_to_defaults(self, temp_dir: Path) -> None:
        project = temp_dir / "broken"
        project.mkdir()
        (project / "novel.json").write_text("{not json", encoding="utf-8")

        layout = ProjectLayout.load(project, ["lore"])

        assert layout.file_type("lore/gods.md") == FileType.SETTINGS

    def test_directory_prefix_must_match_whole_segments(self, temp_dir: Path) -> None:
        layout = ProjectLayout.load(temp_dir, ["settings"])

        assert layout.file_type("settings-old/a.md") == FileType.CONTENT

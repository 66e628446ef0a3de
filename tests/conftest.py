"""Pytest configuration and fixtures."""
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from quillkit.config import get_settings
from quillkit.models import Project
from quillkit.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path: Path):
    """Send log output to the test's temp dir instead of ~/.quillkit/logs."""
    setup_logging(log_file=tmp_path / "logs" / "test.log", level="DEBUG")
    yield


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def clean_settings(monkeypatch, temp_dir: Path):
    """Point settings at the temp dir and clear the cached instance."""
    monkeypatch.setenv("QUILLKIT_PROJECTS_DIR", str(temp_dir / "manuscripts"))
    monkeypatch.setenv("QUILLKIT_LOG_DIR", str(temp_dir / "logs"))
    monkeypatch.chdir(temp_dir)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def project(temp_dir: Path) -> Project:
    """Create an empty project."""
    return Project.create(temp_dir, "Test Book", "Test Author")


@pytest.fixture
def project_with_chapters(project: Project) -> Project:
    """Create a project with three chapters attached to the root, in order One, Two, Three."""
    for title, content in (
        ("One", "First chapter text."),
        ("Two", "Second chapter has *five* words."),
        ("Three", "# Heading\n\nThird."),
    ):
        chapter = project.add_chapter(title)
        project.update_chapter(chapter.id, content)
    return project

"""Exceptions raised by the manuscript data model."""

from pathlib import Path
from typing import Optional


class ProjectError(RuntimeError):
    """Base error for project and manuscript operations."""


class ProjectIOError(ProjectError):
    """Raised when reading, writing, creating or removing a file fails."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class PartialSaveError(ProjectIOError):
    """Raised when the structure document was written but the metadata document was not."""


class StructureParseError(ProjectError):
    """Raised when manuscript.json cannot be deserialized."""


class MetadataParseError(ProjectError):
    """Raised when the metadata document cannot be deserialized."""


class ProjectNotFoundError(ProjectError):
    """Raised when a directory has no structure document."""


class ChapterNotFoundError(ProjectError):
    """Raised when a chapter id is absent from the tree or from disk."""

    def __init__(self, chapter_id: str):
        super().__init__(f"Chapter not found: {chapter_id}")
        self.chapter_id = chapter_id

"""Shared exporter plumbing: chapter collection and output writing."""

from pathlib import Path
from typing import List, Optional, Union

from ..models import Chapter, Project, ProjectIOError
from ..utils.logging import get_logger


def collect_chapters(project: Project) -> List[Chapter]:
    """
    Load chapters in depth-first tree order starting at the root.

    The flat ``order`` list is not consulted. Chapter nodes without a
    backing file are skipped; a file that exists but cannot be read aborts
    the collection.

    Raises:
        ProjectIOError: If a chapter file cannot be read
    """
    logger = get_logger("export")
    chapters = []
    for chapter_id in project.structure.chapter_ids():
        path = project.chapter_path(chapter_id)
        if not path.exists():
            logger.warning(f"Chapter {chapter_id} has no file; skipped in export")
            continue
        try:
            chapters.append(Chapter.from_file(path))
        except (OSError, UnicodeDecodeError) as e:
            raise ProjectIOError(f"Failed to read chapter {path}: {e}", path) from e
    return chapters


class BaseExporter:
    """
    Export a project to a single output file.

    Subclasses set ``format_name`` and ``extension`` and implement ``build``.
    """

    format_name: str = ""
    extension: str = ""

    def __init__(self, project: Project):
        """
        Initialize exporter.

        Args:
            project: Project to export
        """
        self.project = project
        self.metadata = project.metadata

    def build(self, chapters: List[Chapter]) -> Union[str, bytes]:
        """Build the complete document from chapters in tree order."""
        raise NotImplementedError

    def export(self, output_path: Optional[Path] = None) -> Path:
        """
        Export project to a file.

        Args:
            output_path: Optional custom output path (defaults to exports/<title>.<ext>)

        Returns:
            Path to the generated file

        Raises:
            ProjectIOError: If a chapter cannot be read or the output cannot be written
        """
        logger = get_logger("export")

        if output_path is None:
            output_path = self.project.get_export_path(self.extension)
        output_path = Path(output_path)

        chapters = collect_chapters(self.project)
        logger.info(f"Exporting {len(chapters)} chapters to {self.format_name}: {output_path}")

        document = self.build(chapters)

        try:
            if isinstance(document, bytes):
                output_path.write_bytes(document)
            else:
                output_path.write_text(document, encoding='utf-8')
        except OSError as e:
            raise ProjectIOError(f"Failed to write export {output_path}: {e}", output_path) from e

        return output_path

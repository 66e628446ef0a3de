"""Export functionality for manuscript projects."""
from pathlib import Path
from typing import Dict, Optional, Type

from .base import BaseExporter, collect_chapters
from .md_exporter import MarkdownExporter
from .text_exporter import TextExporter
from .html_exporter import HTMLExporter
from .latex_exporter import LaTeXExporter
from .epub_exporter import EPUBExporter
from ..models import Project

EXPORTERS: Dict[str, Type[BaseExporter]] = {
    exporter.format_name: exporter
    for exporter in (MarkdownExporter, TextExporter, HTMLExporter, LaTeXExporter, EPUBExporter)
}


def get_exporter(fmt: str, project: Project) -> BaseExporter:
    """
    Get the exporter for a format name.

    Raises:
        ValueError: If the format is not supported
    """
    exporter_cls = EXPORTERS.get(fmt.lower())
    if exporter_cls is None:
        raise ValueError(f"Unsupported export format: {fmt} (choose from {', '.join(EXPORTERS)})")
    return exporter_cls(project)


def export_project(project_path: Path, fmt: str, output_path: Optional[Path] = None) -> Path:
    """Open a project and export it in one step."""
    # Validate the format before touching the project directory
    if fmt.lower() not in EXPORTERS:
        raise ValueError(f"Unsupported export format: {fmt} (choose from {', '.join(EXPORTERS)})")
    project = Project.open(project_path)
    return get_exporter(fmt, project).export(output_path)


__all__ = [
    'BaseExporter', 'collect_chapters',
    'MarkdownExporter', 'TextExporter', 'HTMLExporter', 'LaTeXExporter', 'EPUBExporter',
    'EXPORTERS', 'get_exporter', 'export_project'
]

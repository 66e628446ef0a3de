"""Markdown exporter for manuscript projects."""

from typing import List

from .base import BaseExporter
from ..models import Chapter


class MarkdownExporter(BaseExporter):
    """Export project to one combined markdown file; chapter bodies pass through verbatim."""

    format_name = "markdown"
    extension = "md"

    def build(self, chapters: List[Chapter]) -> str:
        """Build complete markdown document."""
        parts = []

        # Title page
        parts.append(f"# {self.metadata.title}\n\n")
        if self.metadata.author:
            parts.append(f"*By {self.metadata.author}*\n\n")
        parts.append("---\n\n")

        for chapter in chapters:
            parts.append(f"## {chapter.title}\n\n")
            parts.append(chapter.content)
            parts.append("\n\n---\n\n")

        return ''.join(parts)

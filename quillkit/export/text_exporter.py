"""Plain text exporter for manuscript projects."""

from typing import List

from .base import BaseExporter
from .renderers import strip_markdown
from ..models import Chapter


class TextExporter(BaseExporter):
    """Export project to plain text with markdown markers stripped."""

    format_name = "text"
    extension = "txt"

    def build(self, chapters: List[Chapter]) -> str:
        """Build complete plain text document."""
        parts = [self.metadata.title.upper(), "\n"]
        if self.metadata.author:
            parts.append(f"by {self.metadata.author}")
        parts.append("\n\n")

        for chapter in chapters:
            parts.append(chapter.title.upper())
            parts.append("\n\n")
            parts.append(strip_markdown(chapter.content))
            parts.append("\n\n")

        return ''.join(parts)

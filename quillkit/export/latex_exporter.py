"""LaTeX exporter for manuscript projects."""

from typing import List

from .base import BaseExporter
from .renderers import LatexRenderer, latex_escape
from .templates import LATEX_PREAMBLE
from ..models import Chapter


class LaTeXExporter(BaseExporter):
    """Export project to a LaTeX ``book`` document, one ``\\chapter`` per chapter."""

    format_name = "latex"
    extension = "tex"

    def __init__(self, project):
        super().__init__(project)
        self.renderer = LatexRenderer()

    def build(self, chapters: List[Chapter]) -> str:
        """Build complete LaTeX source."""
        parts = [LATEX_PREAMBLE]

        parts.append(f"\\title{{{latex_escape(self.metadata.title)}}}\n")
        parts.append(f"\\author{{{latex_escape(self.metadata.author)}}}\n")
        parts.append("\\date{}\n\n")

        parts.append("\\begin{document}\n\n")
        parts.append("\\maketitle\n")
        parts.append("\\tableofcontents\n")
        parts.append("\\newpage\n\n")

        for chapter in chapters:
            parts.append(f"\\chapter{{{latex_escape(chapter.title)}}}\n\n")
            parts.append(self.renderer.render(chapter.content))
            parts.append("\n")

        parts.append("\\end{document}\n")
        return ''.join(parts)

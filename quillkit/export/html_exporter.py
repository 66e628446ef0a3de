"""HTML exporter for manuscript projects."""

from typing import List

from .base import BaseExporter
from .markdown_parser import split_lines
from .renderers import HtmlRenderer, html_escape
from .templates import HTML_STYLESHEET, render_template
from ..config.constants import DOCUMENT_LANGUAGE
from ..models import Chapter


class HTMLExporter(BaseExporter):
    """Export project to a single self-contained HTML page."""

    format_name = "html"
    extension = "html"

    def __init__(self, project):
        super().__init__(project)
        self.renderer = HtmlRenderer()

    def build(self, chapters: List[Chapter]) -> str:
        """Build complete HTML document with embedded stylesheet."""
        rendered = [
            {
                'title': html_escape(chapter.title),
                'lines': split_lines(self.renderer.render(chapter.content)),
            }
            for chapter in chapters
        ]

        return render_template(
            "book.html",
            language=DOCUMENT_LANGUAGE,
            title=html_escape(self.metadata.title),
            author=html_escape(self.metadata.author),
            stylesheet=HTML_STYLESHEET,
            chapters=rendered,
        )

"""EPUB 3 exporter for manuscript projects."""

import io
import uuid
import zipfile
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from .base import BaseExporter
from .renderers import XhtmlRenderer, xml_escape
from .templates import CONTAINER_XML, EPUB_STYLESHEET, render_template
from ..config.constants import (
    CSS_MEDIA_TYPE,
    DOCUMENT_LANGUAGE,
    EPUB_MIMETYPE,
    EPUB_UID_PREFIX,
    NCX_MEDIA_TYPE,
    XHTML_MEDIA_TYPE,
)
from ..models import Chapter
from ..utils.logging import get_logger


class EPUBExporter(BaseExporter):
    """
    Export project to an EPUB 3 container.

    Archive layout, in this order:

    - ``mimetype`` (stored, never deflated, always the first entry)
    - ``META-INF/container.xml``
    - ``OEBPS/style.css``
    - ``OEBPS/title.xhtml``
    - ``OEBPS/chapter-N.xhtml`` for N = 1..len(chapters), in tree order
    - ``OEBPS/nav.xhtml``
    - ``OEBPS/toc.ncx``
    - ``OEBPS/content.opf``

    The NCX uid and the package identifier are fresh random UUIDs on every
    export.
    """

    format_name = "epub"
    extension = "epub"

    def __init__(self, project):
        super().__init__(project)
        self.renderer = XhtmlRenderer()

    def build(self, chapters: List[Chapter]) -> bytes:
        """Build the EPUB archive bytes."""
        logger = get_logger("export.epub")
        buffer = io.BytesIO()

        with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("mimetype", EPUB_MIMETYPE, compress_type=zipfile.ZIP_STORED)
            for name, content in self.package_entries(chapters):
                zf.writestr(name, content, compress_type=zipfile.ZIP_DEFLATED)
                logger.debug(f"EPUB entry written: {name}")

        return buffer.getvalue()

    def package_entries(self, chapters: List[Chapter]) -> List[Tuple[str, str]]:
        """All archive entries after ``mimetype``, in archive order."""
        title = xml_escape(self.metadata.title)
        author = xml_escape(self.metadata.author)
        toc = self._toc_entries(chapters)

        entries = [
            ("META-INF/container.xml", CONTAINER_XML),
            ("OEBPS/style.css", EPUB_STYLESHEET),
            ("OEBPS/title.xhtml", render_template(
                "title.xhtml",
                language=DOCUMENT_LANGUAGE,
                page_title=title,
                title=title,
                author=author,
            )),
        ]

        for entry, chapter in zip(toc, chapters):
            entries.append((f"OEBPS/{entry['href']}", render_template(
                "chapter.xhtml",
                language=DOCUMENT_LANGUAGE,
                page_title=entry['title'],
                body=self.renderer.render(chapter.content),
            )))

        entries.append(("OEBPS/nav.xhtml", render_template(
            "nav.xhtml",
            language=DOCUMENT_LANGUAGE,
            page_title="Table of Contents",
            chapters=toc,
        )))
        entries.append(("OEBPS/toc.ncx", render_template(
            "toc.ncx",
            uid=f"{EPUB_UID_PREFIX}-{uuid.uuid4()}",
            title=title,
            chapters=toc,
        )))
        entries.append(("OEBPS/content.opf", self._package_document(title, author, toc)))
        return entries

    def _toc_entries(self, chapters: List[Chapter]) -> List[Dict[str, object]]:
        """Per-chapter ids, file names and play order (title page is playOrder 1)."""
        return [
            {
                'id': f"chapter-{number}",
                'href': f"chapter-{number}.xhtml",
                'title': xml_escape(chapter.title),
                'play_order': number + 1,
            }
            for number, chapter in enumerate(chapters, start=1)
        ]

    def _package_document(self, title: str, author: str, toc: List[Dict[str, object]]) -> str:
        manifest = [
            {'id': 'style', 'href': 'style.css', 'media_type': CSS_MEDIA_TYPE},
            {'id': 'nav', 'href': 'nav.xhtml', 'media_type': XHTML_MEDIA_TYPE, 'properties': 'nav'},
            {'id': 'ncx', 'href': 'toc.ncx', 'media_type': NCX_MEDIA_TYPE},
            {'id': 'title-page', 'href': 'title.xhtml', 'media_type': XHTML_MEDIA_TYPE},
        ]
        manifest.extend(
            {'id': entry['id'], 'href': entry['href'], 'media_type': XHTML_MEDIA_TYPE}
            for entry in toc
        )
        spine = ['title-page'] + [entry['id'] for entry in toc]

        return render_template(
            "content.opf",
            uid=uuid.uuid4(),
            title=title,
            author=author,
            language=DOCUMENT_LANGUAGE,
            modified=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            manifest=manifest,
            spine=spine,
        )

"""Target-syntax renderers for the block events of markdown_parser."""

from typing import Callable, Dict, Tuple

from .markdown_parser import BlockEvent, BlockKind, MarkdownBlockParser, apply_delimiters, split_lines

_HTML_ESCAPES = str.maketrans({
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
})

_XML_ESCAPES = str.maketrans({
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    "'": '&apos;',
})

# One character at a time, so replacement text is never escaped again
_LATEX_ESCAPES = str.maketrans({
    '\\': r'\textbackslash{}',
    '&': r'\&',
    '%': r'\%',
    '$': r'\$',
    '#': r'\#',
    '_': r'\_',
    '{': r'\{',
    '}': r'\}',
    '~': r'\textasciitilde{}',
    '^': r'\textasciicircum{}',
})

HTML_DELIMITERS: Tuple[Tuple[str, str, str], ...] = (
    ('**', '<strong>', '</strong>'),
    ('__', '<strong>', '</strong>'),
    ('*', '<em>', '</em>'),
    ('_', '<em>', '</em>'),
    ('`', '<code>', '</code>'),
)

# Underscores are already escaped when these run, so match the escaped form
LATEX_DELIMITERS: Tuple[Tuple[str, str, str], ...] = (
    ('**', r'\textbf{', '}'),
    (r'\_\_', r'\textbf{', '}'),
    ('*', r'\emph{', '}'),
    (r'\_', r'\emph{', '}'),
    ('`', r'\texttt{', '}'),
)


def html_escape(text: str) -> str:
    """Escape ``& < >``."""
    return text.translate(_HTML_ESCAPES)


def xml_escape(text: str) -> str:
    """Escape ``& < > " '`` for XML documents."""
    return text.translate(_XML_ESCAPES)


def latex_escape(text: str) -> str:
    """Escape the ten LaTeX special characters."""
    return text.translate(_LATEX_ESCAPES)


def strip_markdown(text: str) -> str:
    """
    Reduce markdown to plain text line by line.

    Heading markers are dropped and bold/italic delimiter characters are
    removed literally. Every output line ends with a newline.
    """
    lines = []
    for line in split_lines(text):
        line = line.strip()
        if line.startswith('#'):
            line = line.lstrip('#').strip()
        line = line.replace('**', '').replace('__', '')
        line = line.replace('*', '').replace('_', '')
        lines.append(line + '\n')
    return ''.join(lines)


class BlockRenderer:
    """
    Base class: runs the shared parser and maps each event to target syntax.

    Subclasses set ``delimiters``, implement ``escape`` and one method per
    BlockKind (named after the kind's value).
    """

    delimiters: Tuple[Tuple[str, str, str], ...] = ()

    def escape(self, text: str) -> str:
        raise NotImplementedError

    def inline(self, text: str) -> str:
        """Escape, then turn delimiter pairs into spans."""
        return apply_delimiters(self.escape(text), self.delimiters)

    def render(self, markdown: str) -> str:
        """Render a chapter body."""
        handlers: Dict[BlockKind, Callable[[BlockEvent], str]] = {
            kind: getattr(self, kind.value) for kind in BlockKind
        }
        return ''.join(
            handlers[event.kind](event)
            for event in MarkdownBlockParser().parse(markdown)
        )


class HtmlRenderer(BlockRenderer):
    """HTML fragments for the standalone HTML export."""

    delimiters = HTML_DELIMITERS

    def escape(self, text: str) -> str:
        return html_escape(text)

    def rule(self, event: BlockEvent) -> str:
        return "<hr />\n"

    def heading(self, event: BlockEvent) -> str:
        return f"<h{event.level}>{self.inline(event.text)}</h{event.level}>\n"

    def quote_start(self, event: BlockEvent) -> str:
        return "<blockquote>\n"

    def quote_line(self, event: BlockEvent) -> str:
        return f"<p>{self.inline(event.text)}</p>\n"

    def quote_end(self, event: BlockEvent) -> str:
        return "</blockquote>\n"

    def list_start(self, event: BlockEvent) -> str:
        return "<ol>\n" if event.ordered else "<ul>\n"

    def list_item(self, event: BlockEvent) -> str:
        return f"<li>{self.inline(event.text)}</li>\n"

    def list_end(self, event: BlockEvent) -> str:
        return "</ol>\n" if event.ordered else "</ul>\n"

    def paragraph(self, event: BlockEvent) -> str:
        return f"<p>{self.inline(event.text)}</p>\n"

    def blank(self, event: BlockEvent) -> str:
        return ""


class XhtmlRenderer(HtmlRenderer):
    """XHTML fragments for EPUB content documents (XML escaping, void elements self-closed)."""

    def escape(self, text: str) -> str:
        return xml_escape(text)


class LatexRenderer(BlockRenderer):
    """
    LaTeX body text.

    Every list item gets its own itemize/enumerate environment; a blank
    line right after a quote therefore shows up as an empty line following
    ``\\end{quote}``.
    """

    delimiters = LATEX_DELIMITERS

    SECTION_COMMANDS = {1: 'section', 2: 'subsection', 3: 'subsubsection'}

    def escape(self, text: str) -> str:
        return latex_escape(text)

    def rule(self, event: BlockEvent) -> str:
        return "\\bigskip\\noindent\\rule{\\textwidth}{0.4pt}\\bigskip\n\n"

    def heading(self, event: BlockEvent) -> str:
        command = self.SECTION_COMMANDS.get(event.level, 'paragraph')
        return f"\\{command}{{{self.inline(event.text)}}}\n\n"

    def quote_start(self, event: BlockEvent) -> str:
        return "\\begin{quote}\n"

    def quote_line(self, event: BlockEvent) -> str:
        return f"{self.inline(event.text)}\n"

    def quote_end(self, event: BlockEvent) -> str:
        return "\\end{quote}\n"

    def list_start(self, event: BlockEvent) -> str:
        return ""

    def list_item(self, event: BlockEvent) -> str:
        environment = 'enumerate' if event.ordered else 'itemize'
        return f"\\begin{{{environment}}}\n\\item {self.inline(event.text)}\n\\end{{{environment}}}\n"

    def list_end(self, event: BlockEvent) -> str:
        return ""

    def paragraph(self, event: BlockEvent) -> str:
        return f"{self.inline(event.text)}\n"

    def blank(self, event: BlockEvent) -> str:
        return "\n"

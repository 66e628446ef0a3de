"""
Line-oriented markdown block parser shared by the HTML, XHTML and LaTeX renderers.

Only a fixed subset of markdown is recognized: ATX headings, blockquotes,
``-``/``*`` and ``1.`` list items, horizontal rules and paragraphs, plus
``**``/``__``/``*``/``_``/`` ` `` inline spans. The parser turns chapter
text into a flat stream of BlockEvent objects; renderers only decide how
each event is spelled in their target syntax.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

RULE_MARKERS = ('---', '***', '___')
MAX_HEADING_LEVEL = 6


class BlockKind(str, Enum):
    """Kinds of block events emitted by the parser."""
    RULE = "rule"
    HEADING = "heading"
    QUOTE_START = "quote_start"
    QUOTE_LINE = "quote_line"
    QUOTE_END = "quote_end"
    LIST_START = "list_start"
    LIST_ITEM = "list_item"
    LIST_END = "list_end"
    PARAGRAPH = "paragraph"
    BLANK = "blank"


@dataclass(frozen=True)
class BlockEvent:
    """One structural unit of a chapter body."""
    kind: BlockKind
    text: str = ""
    level: int = 0
    ordered: bool = False


def parse_ordered_item(line: str) -> Optional[str]:
    """
    Return the item text of a ``<digits>. <rest>`` line, or None.

    The first ``". "`` in the line must be preceded by one or more ASCII digits
    and nothing else.
    """
    dot_pos = line.find('. ')
    if dot_pos <= 0:
        return None
    prefix = line[:dot_pos]
    if all(c in '0123456789' for c in prefix):
        return line[dot_pos + 2:].strip()
    return None


def split_lines(text: str) -> List[str]:
    """
    Split text on LF only, dropping one trailing CR per line.

    Form feeds, vertical tabs and Unicode separators stay inside the line.
    A trailing newline does not produce an extra empty line.
    """
    lines = text.split('\n')
    if lines[-1] == '':
        lines.pop()
    return [line[:-1] if line.endswith('\r') else line for line in lines]


def replace_delimited(text: str, delimiter: str, open_tag: str, close_tag: str) -> str:
    """
    Replace successive occurrences of ``delimiter`` with alternating open and close tags.

    An odd number of delimiters leaves the last span open.
    """
    pieces = text.split(delimiter)
    if len(pieces) == 1:
        return text

    result = [pieces[0]]
    inside = False
    for piece in pieces[1:]:
        result.append(close_tag if inside else open_tag)
        result.append(piece)
        inside = not inside
    return ''.join(result)


def apply_delimiters(text: str, delimiters: Iterable[Tuple[str, str, str]]) -> str:
    """Apply ``replace_delimited`` for each (delimiter, open, close) in order."""
    for delimiter, open_tag, close_tag in delimiters:
        text = replace_delimited(text, delimiter, open_tag, close_tag)
    return text


class MarkdownBlockParser:
    """
    Single-pass block state machine.

    Each trimmed line is classified in priority order: horizontal rule,
    heading, blockquote, unordered item, ordered item, blank, paragraph
    text. Paragraph lines are buffered until something flushes them.
    """

    def __init__(self):
        self._reset()

    def _reset(self):
        self.in_unordered_list = False
        self.in_ordered_list = False
        self.in_blockquote = False
        self.paragraph_buffer: List[str] = []

    def parse(self, text: str) -> Iterator[BlockEvent]:
        """Yield block events for ``text``."""
        self._reset()
        for line in split_lines(text):
            yield from self._feed(line.strip())

        yield from self._flush_paragraph()
        yield from self._close_all()

    def _feed(self, trimmed: str) -> Iterator[BlockEvent]:
        if trimmed in RULE_MARKERS:
            yield from self._flush_paragraph()
            yield from self._close_all()
            yield BlockEvent(BlockKind.RULE)
            return

        if trimmed.startswith('#'):
            yield from self._flush_paragraph()
            yield from self._close_all()
            hashes = len(trimmed) - len(trimmed.lstrip('#'))
            level = min(hashes, MAX_HEADING_LEVEL)
            yield BlockEvent(BlockKind.HEADING, trimmed[level:].strip(), level=level)
            return

        if trimmed.startswith('> ') or trimmed == '>':
            yield from self._flush_paragraph()
            yield from self._close_unordered()
            yield from self._close_ordered()
            if not self.in_blockquote:
                self.in_blockquote = True
                yield BlockEvent(BlockKind.QUOTE_START)
            quote_text = '' if trimmed == '>' else trimmed[2:].strip()
            yield BlockEvent(BlockKind.QUOTE_LINE, quote_text)
            return
        # Any other line, blank included, ends the quote
        yield from self._close_quote()

        if trimmed.startswith(('- ', '* ')):
            yield from self._flush_paragraph()
            yield from self._close_ordered()
            if not self.in_unordered_list:
                self.in_unordered_list = True
                yield BlockEvent(BlockKind.LIST_START, ordered=False)
            yield BlockEvent(BlockKind.LIST_ITEM, trimmed[2:].strip(), ordered=False)
            return
        if trimmed:
            yield from self._close_unordered()

        item_text = parse_ordered_item(trimmed)
        if item_text is not None:
            yield from self._flush_paragraph()
            yield from self._close_unordered()
            if not self.in_ordered_list:
                self.in_ordered_list = True
                yield BlockEvent(BlockKind.LIST_START, ordered=True)
            yield BlockEvent(BlockKind.LIST_ITEM, item_text, ordered=True)
            return
        if trimmed:
            yield from self._close_ordered()

        if not trimmed:
            yield from self._flush_paragraph()
            yield from self._close_unordered()
            yield from self._close_ordered()
            yield BlockEvent(BlockKind.BLANK)
            return

        self.paragraph_buffer.append(trimmed)

    def _flush_paragraph(self) -> Iterator[BlockEvent]:
        if self.paragraph_buffer:
            joined = '\n'.join(self.paragraph_buffer)
            self.paragraph_buffer = []
            yield BlockEvent(BlockKind.PARAGRAPH, joined)

    def _close_unordered(self) -> Iterator[BlockEvent]:
        if self.in_unordered_list:
            self.in_unordered_list = False
            yield BlockEvent(BlockKind.LIST_END, ordered=False)

    def _close_ordered(self) -> Iterator[BlockEvent]:
        if self.in_ordered_list:
            self.in_ordered_list = False
            yield BlockEvent(BlockKind.LIST_END, ordered=True)

    def _close_quote(self) -> Iterator[BlockEvent]:
        if self.in_blockquote:
            self.in_blockquote = False
            yield BlockEvent(BlockKind.QUOTE_END)

    def _close_all(self) -> Iterator[BlockEvent]:
        yield from self._close_unordered()
        yield from self._close_ordered()
        yield from self._close_quote()


def parse_blocks(text: str) -> List[BlockEvent]:
    """Parse ``text`` into a list of block events."""
    return list(MarkdownBlockParser().parse(text))

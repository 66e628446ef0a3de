"""Chapter model and its frontmatter file format."""
import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, computed_field

from ..config.constants import (
    DEFAULT_CHAPTER_TITLE,
    FRONTMATTER_DELIMITER,
)


# Opening delimiter line, metadata block, closing delimiter line, body
_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*\r?$\n?(.*)\Z",
    re.DOTALL | re.MULTILINE
)


class ChapterStatus(str, Enum):
    """Editorial status shared by chapters and tree nodes."""
    DRAFT = "draft"
    REVISED = "revised"
    FINAL = "final"
    TRASH = "trash"


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens."""
    return len(text.split())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an RFC-3339 timestamp, returning None when it is not one."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class _QuotedStr(str):
    """String value written in double quotes."""


class _QuotedDumper(yaml.SafeDumper):
    """YAML dumper that double-quotes _QuotedStr values and leaves keys plain."""


def _represent_quoted_str(dumper: yaml.SafeDumper, value: str):
    return dumper.represent_scalar('tag:yaml.org,2002:str', str(value), style='"')


_QuotedDumper.add_representer(_QuotedStr, _represent_quoted_str)


class _PlainLoader(yaml.SafeLoader):
    """YAML loader that keeps unquoted scalars as text, except null."""


_PlainLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag == 'tag:yaml.org,2002:null']
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class Chapter(BaseModel):
    """One chapter: its body text plus frontmatter metadata."""

    id: str = Field(description="Stable identifier, equal to the file name stem")
    title: str = DEFAULT_CHAPTER_TITLE
    content: str = ""
    status: ChapterStatus = ChapterStatus.DRAFT
    mood: Optional[str] = None
    pov: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)

    @computed_field
    @property
    def word_count(self) -> int:
        """Whitespace token count of the body."""
        return count_words(self.content)

    @classmethod
    def new(cls, title: str) -> "Chapter":
        """Create an empty draft chapter with a fresh id."""
        now = _utcnow()
        return cls(id=str(uuid.uuid4()), title=title, created_at=now, modified_at=now)

    def update_content(self, new_content: str) -> None:
        """Replace the body and refresh the modification time."""
        self.content = new_content
        self.modified_at = _utcnow()

    def update(
        self,
        title: Optional[str] = None,
        status: Optional[ChapterStatus] = None,
        mood: Optional[str] = None,
        pov: Optional[str] = None,
    ) -> None:
        """Update metadata fields that are given and refresh the modification time."""
        if title is not None:
            self.title = title
        if status is not None:
            self.status = ChapterStatus(status)
        if mood is not None:
            self.mood = mood
        if pov is not None:
            self.pov = pov
        self.modified_at = _utcnow()

    def frontmatter(self) -> Dict[str, Any]:
        """Metadata block in serialization order."""
        data: Dict[str, Any] = {
            'id': self.id,
            'title': self.title,
            'status': self.status.value,
        }
        if self.mood is not None:
            data['mood'] = self.mood
        if self.pov is not None:
            data['pov'] = self.pov
        data['word_count'] = self.word_count
        data['created_at'] = self.created_at.isoformat()
        data['modified_at'] = self.modified_at.isoformat()
        return data

    def to_markdown(self) -> str:
        """Serialize to a frontmatter block, a blank line and the raw body."""
        data = {
            key: _QuotedStr(value) if isinstance(value, str) else value
            for key, value in self.frontmatter().items()
        }
        block = yaml.dump(
            data,
            Dumper=_QuotedDumper,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            width=float('inf'),
        )
        return f"{FRONTMATTER_DELIMITER}\n{block}{FRONTMATTER_DELIMITER}\n\n{self.content}"

    @classmethod
    def from_markdown(cls, raw: str, fallback_id: str) -> "Chapter":
        """
        Parse a chapter file's text.

        Never raises on malformed content: missing or broken frontmatter
        degrades to default metadata with the whole text as body.

        Args:
            raw: File contents
            fallback_id: Identifier to use (the file name stem); an ``id`` key
                in the frontmatter is ignored

        Returns:
            Parsed chapter
        """
        if not raw.startswith(FRONTMATTER_DELIMITER):
            return cls(id=fallback_id, title=fallback_id, content=raw)

        match = _FRONTMATTER_RE.match(raw)
        if match is None:
            # Opening delimiter without a closing one
            return cls(id=fallback_id, title=DEFAULT_CHAPTER_TITLE, content=raw)

        block, body = match.group(1), match.group(2)
        if body.startswith('\r\n'):
            body = body[2:]
        elif body.startswith('\n'):
            body = body[1:]

        fields = _parse_frontmatter_block(block)

        chapter = cls(id=fallback_id, content=body)
        if fields.get('title') is not None:
            chapter.title = str(fields['title'])
        if fields.get('status') is not None:
            try:
                chapter.status = ChapterStatus(str(fields['status']).strip().lower())
            except ValueError:
                chapter.status = ChapterStatus.DRAFT
        if fields.get('mood') is not None:
            chapter.mood = str(fields['mood'])
        if fields.get('pov') is not None:
            chapter.pov = str(fields['pov'])
        for key in ('created_at', 'modified_at'):
            parsed = parse_timestamp(fields.get(key))
            if parsed is not None:
                setattr(chapter, key, parsed)
        return chapter

    @classmethod
    def from_file(cls, path: Path) -> "Chapter":
        """Load a chapter file; the file stem becomes the id."""
        path = Path(path)
        raw = path.read_text(encoding='utf-8')
        return cls.from_markdown(raw, path.stem)


def _parse_frontmatter_block(block: str) -> Dict[str, Any]:
    """
    Parse the metadata block between the delimiters.

    Tries YAML first, then falls back to splitting each line on the first
    colon and stripping surrounding quotes.
    """
    try:
        data = yaml.load(block, Loader=_PlainLoader)
    except yaml.YAMLError:
        data = None

    if isinstance(data, dict):
        return {str(k): v for k, v in data.items()}

    fields: Dict[str, Any] = {}
    for line in block.splitlines():
        key, sep, value = line.strip().partition(':')
        if not sep:
            continue
        fields[key.strip()] = value.strip().strip('"')
    return fields

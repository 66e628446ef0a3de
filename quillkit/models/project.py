"""Project data models."""
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .chapter import Chapter, ChapterStatus
from .errors import (
    ChapterNotFoundError,
    MetadataParseError,
    PartialSaveError,
    ProjectIOError,
    ProjectNotFoundError,
    StructureParseError,
)
from .manuscript import ManuscriptNode, ManuscriptStructure, NodeType
from ..config.constants import (
    CHAPTER_EXTENSION,
    CHAPTERS_DIR,
    DEFAULT_PROJECT_TITLE,
    DEFAULT_SNAPSHOT_NAME,
    EXPORTS_DIR,
    METADATA_FILE,
    PROJECT_DIR_SUFFIX,
    PROJECT_SUBDIRS,
    SNAPSHOT_TIMESTAMP_FORMAT,
    SNAPSHOTS_DIR,
    STRUCTURE_FILE,
)
from ..utils.logging import get_logger


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sanitize_filename(name: str) -> str:
    """Replace characters outside [alnum - _ space] with underscores and trim."""
    cleaned = "".join(
        c if c.isalnum() or c in ('-', '_', ' ') else '_'
        for c in name
    )
    return cleaned.strip()


class ProjectMetadata(BaseModel):
    """Author-facing description of the book, stored apart from the tree."""

    title: str = DEFAULT_PROJECT_TITLE
    author: str = ""
    genre: str = ""
    word_count_target: Optional[int] = Field(None, ge=0)
    deadline: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)

    def update_timestamp(self):
        """Update the last modified timestamp."""
        self.modified_at = _utcnow()


class ProjectState(BaseModel):
    """Read-only view of an opened project."""

    path: str
    metadata: ProjectMetadata
    structure: ManuscriptStructure
    total_word_count: int


class Project:
    """
    A manuscript project directory.

    Owns the in-memory structure and metadata for one open. Nothing
    coordinates two Project instances over the same directory; the last
    save wins.
    """

    def __init__(self, path: Path, structure: ManuscriptStructure, metadata: ProjectMetadata):
        self.path = Path(path)
        self.structure = structure
        self.metadata = metadata

    @property
    def structure_file(self) -> Path:
        """Get path to manuscript.json."""
        return self.path / STRUCTURE_FILE

    @property
    def metadata_file(self) -> Path:
        """Get path to metadata.yaml."""
        return self.path / METADATA_FILE

    @property
    def chapters_dir(self) -> Path:
        return self.path / CHAPTERS_DIR

    @property
    def snapshots_dir(self) -> Path:
        return self.path / SNAPSHOTS_DIR

    @property
    def exports_dir(self) -> Path:
        return self.path / EXPORTS_DIR

    def chapter_path(self, chapter_id: str) -> Path:
        """Path of the backing file for a chapter id."""
        return self.chapters_dir / f"{chapter_id}{CHAPTER_EXTENSION}"

    @classmethod
    def create(cls, root_dir: Path, title: str, author: str = "") -> "Project":
        """
        Create a new project under ``root_dir``.

        The directory name is derived from the sanitized title, so creating
        the same title twice reuses the directory and overwrites its documents.

        Args:
            root_dir: Parent directory
            title: Book title
            author: Author name

        Returns:
            New Project instance

        Raises:
            ProjectIOError: If a directory cannot be created or a document cannot be written
        """
        logger = get_logger("project")
        project_dir = Path(root_dir) / f"{sanitize_filename(title)}{PROJECT_DIR_SUFFIX}"

        try:
            project_dir.mkdir(parents=True, exist_ok=True)
            for sub in PROJECT_SUBDIRS:
                (project_dir / sub).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProjectIOError(f"Failed to create project directory {project_dir}: {e}", project_dir) from e

        now = _utcnow()
        metadata = ProjectMetadata(title=title, author=author, created_at=now, modified_at=now)
        structure = ManuscriptStructure.with_book(title)

        project = cls(project_dir, structure, metadata)
        project.save()
        logger.info(f"Created project '{title}' at {project_dir}")
        return project

    @classmethod
    def open(cls, project_dir: Path) -> "Project":
        """
        Open an existing project.

        The metadata document is optional; a missing one yields defaults.
        The tree is not validated beyond deserialization.

        Raises:
            ProjectNotFoundError: If manuscript.json is missing
            StructureParseError: If manuscript.json is malformed or not UTF-8
            MetadataParseError: If the metadata document is malformed
            ProjectIOError: If a document cannot be read
        """
        project_dir = Path(project_dir)
        structure_file = project_dir / STRUCTURE_FILE
        metadata_file = project_dir / METADATA_FILE

        if not structure_file.exists():
            raise ProjectNotFoundError(f"Project not found: {structure_file}")

        try:
            structure = ManuscriptStructure.model_validate_json(
                structure_file.read_text(encoding='utf-8')
            )
        except OSError as e:
            raise ProjectIOError(f"Failed to read {structure_file}: {e}", structure_file) from e
        except UnicodeDecodeError as e:
            raise StructureParseError(f"Invalid {STRUCTURE_FILE}: not UTF-8 ({e})") from e
        except ValidationError as e:
            raise StructureParseError(f"Invalid {STRUCTURE_FILE}: {e}") from e

        if metadata_file.exists():
            metadata = cls._load_metadata(metadata_file)
        else:
            metadata = ProjectMetadata()

        return cls(project_dir, structure, metadata)

    @staticmethod
    def _load_metadata(metadata_file: Path) -> ProjectMetadata:
        """Load and validate the metadata document."""
        try:
            with open(metadata_file, encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ProjectIOError(f"Failed to read {metadata_file}: {e}", metadata_file) from e
        except UnicodeDecodeError as e:
            raise MetadataParseError(f"Invalid {METADATA_FILE}: not UTF-8 ({e})") from e
        except yaml.YAMLError as e:
            raise MetadataParseError(f"Invalid {METADATA_FILE}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise MetadataParseError(f"Invalid {METADATA_FILE}: expected a mapping")

        try:
            return ProjectMetadata.model_validate(data)
        except ValidationError as e:
            raise MetadataParseError(f"Invalid {METADATA_FILE}: {e}") from e

    @staticmethod
    def _write_document(path: Path, text: str) -> None:
        """Write through a temporary sibling file and an atomic rename."""
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(text, encoding='utf-8')
        os.replace(tmp_path, path)

    def save(self):
        """
        Write manuscript.json, then the metadata document.

        The two writes are independent. If the second fails the first is
        already on disk and PartialSaveError reports the gap.

        Raises:
            ProjectIOError: If manuscript.json cannot be written
            PartialSaveError: If only manuscript.json was written
        """
        structure_json = self.structure.model_dump_json(indent=2)
        try:
            self._write_document(self.structure_file, structure_json)
        except OSError as e:
            raise ProjectIOError(f"Failed to write {self.structure_file}: {e}", self.structure_file) from e

        metadata_yaml = yaml.dump(
            self.metadata.model_dump(mode='json'),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True
        )
        try:
            self._write_document(self.metadata_file, metadata_yaml)
        except OSError as e:
            raise PartialSaveError(
                f"{STRUCTURE_FILE} was saved but {self.metadata_file} could not be written: {e}",
                self.metadata_file
            ) from e

    def _touch_and_save(self):
        self.metadata.update_timestamp()
        self.save()

    def _write_chapter(self, chapter: Chapter) -> None:
        path = self.chapter_path(chapter.id)
        try:
            self.chapters_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(chapter.to_markdown(), encoding='utf-8')
        except OSError as e:
            raise ProjectIOError(f"Failed to write chapter {path}: {e}", path) from e

    def _read_chapter(self, path: Path) -> Chapter:
        try:
            return Chapter.from_file(path)
        except (OSError, UnicodeDecodeError) as e:
            raise ProjectIOError(f"Failed to read chapter {path}: {e}", path) from e

    def get_chapter(self, chapter_id: str) -> Chapter:
        """
        Load a chapter from its file.

        Raises:
            ChapterNotFoundError: If the chapter file does not exist
        """
        path = self.chapter_path(chapter_id)
        if not path.exists():
            raise ChapterNotFoundError(chapter_id)
        return self._read_chapter(path)

    def add_chapter(self, title: str, parent_id: Optional[str] = None) -> Chapter:
        """
        Add a new empty chapter.

        Args:
            title: Chapter title
            parent_id: Node to append the chapter to (defaults to the root).
                An unknown parent leaves the new node unreferenced.

        Returns:
            The new chapter
        """
        logger = get_logger("project")
        chapter = Chapter.new(title)

        node = ManuscriptNode(id=chapter.id, title=title, node_type=NodeType.CHAPTER)
        self.structure.nodes[chapter.id] = node
        self.structure.order.append(chapter.id)

        parent = parent_id if parent_id is not None else self.structure.root
        parent_node = self.structure.nodes.get(parent)
        if parent_node is not None:
            parent_node.children.append(chapter.id)
        else:
            logger.warning(f"Parent {parent} not found; chapter {chapter.id} is not attached to the tree")

        self._write_chapter(chapter)
        self._touch_and_save()

        logger.info(f"Added chapter '{title}' ({chapter.id})")
        return chapter

    def update_chapter(self, chapter_id: str, content: str) -> int:
        """
        Replace a chapter's body and refresh its cached word count.

        Returns:
            New word count

        Raises:
            ChapterNotFoundError: If the chapter file does not exist
        """
        chapter = self.get_chapter(chapter_id)
        chapter.update_content(content)
        self._write_chapter(chapter)

        node = self.structure.nodes.get(chapter_id)
        if node is not None:
            node.word_count = chapter.word_count
        self._touch_and_save()

        get_logger("project").debug(f"Updated chapter {chapter_id}: {chapter.word_count} words")
        return chapter.word_count

    def update_chapter_metadata(
        self,
        chapter_id: str,
        status: Optional[ChapterStatus] = None,
        mood: Optional[str] = None,
        pov: Optional[str] = None,
    ) -> ManuscriptNode:
        """
        Update status, mood or point of view on the node and in the chapter file.

        Raises:
            ChapterNotFoundError: If the node is absent from the tree
        """
        node = self.structure.nodes.get(chapter_id)
        if node is None:
            raise ChapterNotFoundError(chapter_id)

        if status is not None:
            node.status = ChapterStatus(status)
        if mood is not None:
            node.mood = mood
        if pov is not None:
            node.pov = pov

        path = self.chapter_path(chapter_id)
        if path.exists():
            chapter = self._read_chapter(path)
            chapter.update(status=status, mood=mood, pov=pov)
            self._write_chapter(chapter)

        self._touch_and_save()
        return node

    def delete_chapter(self, chapter_id: str):
        """
        Delete a chapter node and its file.

        The id is removed from every children list and from the flat order
        even if the node itself is unknown; deleting an unknown id is not an
        error. The file is removed before the structure is saved, so a crash
        in between leaves an orphan file.
        """
        logger = get_logger("project")
        self.structure.detach(chapter_id)

        if chapter_id in self.structure.nodes:
            path = self.chapter_path(chapter_id)
            if path.exists():
                try:
                    path.unlink()
                except OSError as e:
                    raise ProjectIOError(f"Failed to delete chapter {path}: {e}", path) from e

        removed = self.structure.nodes.pop(chapter_id, None)
        self._touch_and_save()

        if removed is not None:
            logger.info(f"Deleted chapter '{removed.title}' ({chapter_id})")
        else:
            logger.info(f"Delete requested for unknown chapter {chapter_id}")

    def rename_chapter(self, chapter_id: str, new_title: str):
        """
        Rename a chapter node and, if present, its file's frontmatter title.

        Raises:
            ChapterNotFoundError: If the node is absent from the tree
        """
        node = self.structure.nodes.get(chapter_id)
        if node is None:
            raise ChapterNotFoundError(chapter_id)
        node.title = new_title

        path = self.chapter_path(chapter_id)
        if path.exists():
            chapter = self._read_chapter(path)
            chapter.title = new_title
            self._write_chapter(chapter)

        self._touch_and_save()

    def reorder_chapters(self, new_order: List[str], parent_id: Optional[str] = None):
        """
        Replace the parent's children and the flat order with ``new_order``.

        The sequence is taken as given; it is not checked against the old one.
        """
        parent = parent_id if parent_id is not None else self.structure.root
        parent_node = self.structure.nodes.get(parent)
        if parent_node is not None:
            parent_node.children = list(new_order)
        self.structure.order = list(new_order)
        self._touch_and_save()

    def create_snapshot(self, name: Optional[str] = None) -> str:
        """
        Write a timestamped copy of the structure and metadata.

        Returns:
            Snapshot file name (inside snapshots/)
        """
        now = _utcnow()
        snapshot_name = name or DEFAULT_SNAPSHOT_NAME
        filename = f"{now.strftime(SNAPSHOT_TIMESTAMP_FORMAT)}-{sanitize_filename(snapshot_name)}.json"

        snapshot = {
            'timestamp': now.isoformat(),
            'name': snapshot_name,
            'structure': self.structure.model_dump(mode='json'),
            'metadata': self.metadata.model_dump(mode='json'),
        }

        path = self.snapshots_dir / filename
        try:
            self.snapshots_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False), encoding='utf-8')
        except OSError as e:
            raise ProjectIOError(f"Failed to write snapshot {path}: {e}", path) from e

        get_logger("project").info(f"Created snapshot {filename}")
        return filename

    def total_word_count(self) -> int:
        """Sum of every node's cached word count."""
        return sum(node.word_count for node in self.structure.nodes.values())

    def state(self) -> ProjectState:
        """Snapshot of the open project for display."""
        return ProjectState(
            path=str(self.path),
            metadata=self.metadata.model_copy(deep=True),
            structure=self.structure.model_copy(deep=True),
            total_word_count=self.total_word_count(),
        )

    def get_export_path(self, extension: str) -> Path:
        """
        Get default export file path for an extension.

        Args:
            extension: File extension without the dot (md, html, ...)

        Returns:
            Path inside the exports/ directory
        """
        self.exports_dir.mkdir(parents=True, exist_ok=True)
        safe_title = "".join(c for c in self.metadata.title if c.isalnum() or c in (' ', '-', '_'))
        safe_title = safe_title.strip().replace(' ', '-').lower()
        if not safe_title:
            safe_title = self.path.stem
        return self.exports_dir / f"{safe_title}.{extension}"

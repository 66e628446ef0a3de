"""Unit tests for the project model and its persistence."""
import json
import logging
import os

import pytest
import yaml

from quillkit.config.constants import PROJECT_SUBDIRS
from quillkit.models import (
    ChapterNotFoundError,
    ChapterStatus,
    ManuscriptNode,
    MetadataParseError,
    NodeType,
    PartialSaveError,
    Project,
    ProjectIOError,
    ProjectNotFoundError,
    StructureParseError,
    sanitize_filename,
)


class TestProjectCreate:
    """Test creating projects."""

    def test_create_project(self, temp_dir):
        """Test creating a new project."""
        project = Project.create(temp_dir, "Test Book", "Test Author")

        assert project.path == temp_dir / "Test Book.quill"
        assert project.metadata.title == "Test Book"
        assert project.metadata.author == "Test Author"
        assert project.structure_file.exists()
        assert project.metadata_file.exists()
        for sub in PROJECT_SUBDIRS:
            assert (project.path / sub).is_dir()

    def test_root_is_book(self, project):
        """Test the initial tree."""
        root = project.structure.root_node
        assert root.node_type == NodeType.BOOK
        assert root.title == "Test Book"
        assert project.structure.order == []

    def test_title_sanitized_for_directory(self, temp_dir):
        """Test that unsafe characters in the title are replaced."""
        project = Project.create(temp_dir, "What/If: A Tale?")
        assert project.path.name == "What_If_ A Tale_.quill"
        assert project.metadata.title == "What/If: A Tale?"

    def test_create_failure_raises_io_error(self, temp_dir):
        """Test that an unusable root directory is reported."""
        blocker = temp_dir / "file"
        blocker.write_text("not a directory", encoding='utf-8')

        with pytest.raises(ProjectIOError):
            Project.create(blocker, "Book")

    def test_sanitize_filename(self):
        """Test the sanitizer."""
        assert sanitize_filename("  Plain Title ") == "Plain Title"
        assert sanitize_filename("a.b/c") == "a_b_c"
        assert sanitize_filename("keep-this_one") == "keep-this_one"


class TestProjectOpen:
    """Test opening projects and loading errors."""

    def test_open_round_trip(self, project_with_chapters):
        """Test that structure and metadata survive save and open."""
        reopened = Project.open(project_with_chapters.path)

        assert reopened.structure == project_with_chapters.structure
        assert reopened.metadata.title == "Test Book"
        assert reopened.metadata.author == "Test Author"
        assert reopened.metadata.modified_at == project_with_chapters.metadata.modified_at

    def test_open_missing_structure(self, temp_dir):
        """Test that a directory without manuscript.json is not a project."""
        with pytest.raises(ProjectNotFoundError):
            Project.open(temp_dir)

    def test_open_missing_structure_even_with_metadata(self, project):
        """Test that the structure is mandatory while metadata is not."""
        project.structure_file.unlink()
        assert project.metadata_file.exists()

        with pytest.raises(ProjectNotFoundError):
            Project.open(project.path)

    def test_open_malformed_structure(self, project):
        """Test malformed JSON."""
        project.structure_file.write_text("{not json", encoding='utf-8')

        with pytest.raises(StructureParseError):
            Project.open(project.path)

    def test_open_structure_not_utf8(self, project):
        """Test undecodable bytes in manuscript.json."""
        project.structure_file.write_bytes(b"\xff\xfe")

        with pytest.raises(StructureParseError):
            Project.open(project.path)

    def test_open_structure_schema_mismatch(self, project):
        """Test valid JSON with the wrong shape."""
        project.structure_file.write_text(json.dumps({"nodes": []}), encoding='utf-8')

        with pytest.raises(StructureParseError):
            Project.open(project.path)

    def test_open_without_metadata_uses_defaults(self, project):
        """Test that a missing metadata document falls back to defaults."""
        project.metadata_file.unlink()

        reopened = Project.open(project.path)
        assert reopened.metadata.title == "Untitled"
        assert reopened.metadata.author == ""

    def test_open_malformed_metadata(self, project):
        """Test invalid YAML in the metadata document."""
        project.metadata_file.write_text("title: [unclosed\n", encoding='utf-8')

        with pytest.raises(MetadataParseError):
            Project.open(project.path)

    def test_open_metadata_not_utf8(self, project):
        """Test undecodable bytes in the metadata document."""
        project.metadata_file.write_bytes(b"\xff\xfe")

        with pytest.raises(MetadataParseError):
            Project.open(project.path)

    def test_open_metadata_not_a_mapping(self, project):
        """Test a metadata document that is a list."""
        project.metadata_file.write_text("- a\n- b\n", encoding='utf-8')

        with pytest.raises(MetadataParseError):
            Project.open(project.path)

    def test_metadata_is_yaml(self, project):
        """Test the metadata document format."""
        data = yaml.safe_load(project.metadata_file.read_text(encoding='utf-8'))
        assert data['title'] == "Test Book"
        assert data['author'] == "Test Author"
        assert 'modified_at' in data


class TestProjectSave:
    """Test the two-step save."""

    def test_no_temp_files_left(self, project):
        """Test that atomic writes leave no temporary files."""
        project.save()
        assert not list(project.path.glob("*.tmp"))

    def test_structure_failure(self, project, monkeypatch):
        """Test that a structure write failure is an I/O error, not partial."""
        def fail(path, text):
            raise OSError("disk full")

        monkeypatch.setattr(Project, "_write_document", staticmethod(fail))

        with pytest.raises(ProjectIOError) as exc_info:
            project.save()
        assert not isinstance(exc_info.value, PartialSaveError)

    def test_partial_save(self, project, monkeypatch):
        """Test that a metadata failure after the structure write is reported."""
        original = Project._write_document

        def fail_metadata(path, text):
            if path.name == "metadata.yaml":
                raise OSError("read-only")
            original(path, text)

        monkeypatch.setattr(Project, "_write_document", staticmethod(fail_metadata))
        project.structure.nodes[project.structure.root].title = "Changed"

        with pytest.raises(PartialSaveError) as exc_info:
            project.save()

        assert "metadata.yaml" in str(exc_info.value)
        on_disk = json.loads(project.structure_file.read_text(encoding='utf-8'))
        assert on_disk['nodes'][project.structure.root]['title'] == "Changed"


class TestChapterOperations:
    """Test chapter mutations."""

    def test_add_chapter(self, project):
        """Test adding a chapter under the root."""
        before = project.metadata.modified_at
        chapter = project.add_chapter("Opening")

        node = project.structure.nodes[chapter.id]
        assert node.node_type == NodeType.CHAPTER
        assert node.title == "Opening"
        assert project.structure.root_node.children == [chapter.id]
        assert project.structure.order == [chapter.id]
        assert project.chapter_path(chapter.id).exists()
        assert project.chapter_path(chapter.id).name == f"{chapter.id}.md"
        assert project.metadata.modified_at >= before

        reopened = Project.open(project.path)
        assert chapter.id in reopened.structure.nodes

    def test_add_chapter_under_part(self, project):
        """Test adding a chapter to an explicit parent."""
        part = ManuscriptNode(id="part-1", title="Part One", node_type=NodeType.PART)
        project.structure.nodes[part.id] = part
        project.structure.root_node.children.append(part.id)

        chapter = project.add_chapter("Inside", parent_id="part-1")

        assert project.structure.nodes["part-1"].children == [chapter.id]
        assert chapter.id not in project.structure.root_node.children
        assert project.structure.chapter_ids() == [chapter.id]

    def test_add_chapter_unknown_parent(self, project, caplog):
        """Test that an unknown parent leaves the chapter unattached."""
        with caplog.at_level(logging.WARNING, logger="quillkit"):
            chapter = project.add_chapter("Orphan", parent_id="missing")

        assert chapter.id in project.structure.nodes
        assert chapter.id in project.structure.order
        assert project.structure.root_node.children == []
        assert project.structure.chapter_ids() == []
        assert "missing" in caplog.text

    def test_get_chapter(self, project_with_chapters):
        """Test loading a chapter from disk."""
        chapter_id = project_with_chapters.structure.chapter_ids()[0]
        chapter = project_with_chapters.get_chapter(chapter_id)

        assert chapter.title == "One"
        assert chapter.content == "First chapter text."

    def test_get_chapter_not_utf8(self, project_with_chapters):
        """Test that undecodable chapter bytes raise a project I/O error."""
        project = project_with_chapters
        chapter_id = project.structure.chapter_ids()[0]
        project.chapter_path(chapter_id).write_bytes(b'---\ntitle: "x"\n---\n\n\xff\xfe bad')

        with pytest.raises(ProjectIOError):
            project.get_chapter(chapter_id)

    def test_get_missing_chapter(self, project):
        """Test loading an unknown chapter."""
        with pytest.raises(ChapterNotFoundError) as exc_info:
            project.get_chapter("nope")
        assert exc_info.value.chapter_id == "nope"
        assert "nope" in str(exc_info.value)

    def test_update_chapter(self, project):
        """Test writing content refreshes file and cached count."""
        chapter = project.add_chapter("Opening")

        words = project.update_chapter(chapter.id, "Three little words")

        assert words == 3
        assert project.structure.nodes[chapter.id].word_count == 3
        assert project.get_chapter(chapter.id).content == "Three little words"
        assert Project.open(project.path).structure.nodes[chapter.id].word_count == 3

    def test_update_missing_chapter(self, project):
        """Test updating an unknown chapter."""
        with pytest.raises(ChapterNotFoundError):
            project.update_chapter("nope", "text")

    def test_update_chapter_metadata(self, project):
        """Test status, mood and pov reach both node and file."""
        chapter = project.add_chapter("Opening")

        node = project.update_chapter_metadata(chapter.id, status=ChapterStatus.FINAL, mood="calm", pov="Ines")

        assert node.status == ChapterStatus.FINAL
        assert node.mood == "calm"
        stored = project.get_chapter(chapter.id)
        assert stored.status == ChapterStatus.FINAL
        assert stored.pov == "Ines"

    def test_update_metadata_missing_node(self, project):
        """Test updating metadata of an unknown chapter."""
        with pytest.raises(ChapterNotFoundError):
            project.update_chapter_metadata("nope", mood="x")

    def test_update_metadata_without_file(self, project):
        """Test that the node is updated and returned when the file is gone."""
        chapter = project.add_chapter("Opening")
        project.chapter_path(chapter.id).unlink()

        node = project.update_chapter_metadata(chapter.id, status=ChapterStatus.REVISED)

        assert isinstance(node, ManuscriptNode)
        assert node.id == chapter.id
        assert Project.open(project.path).structure.nodes[chapter.id].status == ChapterStatus.REVISED

    def test_rename_chapter(self, project):
        """Test renaming updates node and frontmatter."""
        chapter = project.add_chapter("Draft Title")

        project.rename_chapter(chapter.id, "Final Title")

        assert project.structure.nodes[chapter.id].title == "Final Title"
        assert project.get_chapter(chapter.id).title == "Final Title"

    def test_rename_without_file(self, project):
        """Test renaming a node whose file is gone."""
        chapter = project.add_chapter("Draft Title")
        project.chapter_path(chapter.id).unlink()

        project.rename_chapter(chapter.id, "Still Renamed")
        assert project.structure.nodes[chapter.id].title == "Still Renamed"

    def test_rename_missing_chapter(self, project):
        """Test renaming an unknown chapter."""
        with pytest.raises(ChapterNotFoundError):
            project.rename_chapter("nope", "x")

    def test_delete_chapter(self, project_with_chapters):
        """Test deletion removes node, references and file."""
        project = project_with_chapters
        doomed = project.structure.chapter_ids()[1]
        path = project.chapter_path(doomed)

        project.delete_chapter(doomed)

        assert doomed not in project.structure.nodes
        assert doomed not in project.structure.order
        for node in project.structure.nodes.values():
            assert doomed not in node.children
        assert not path.exists()
        assert doomed not in Project.open(project.path).structure.nodes

    def test_delete_removes_references_under_every_parent(self, project):
        """Test that a node listed twice is removed from both parents."""
        chapter = project.add_chapter("Shared")
        part = ManuscriptNode(id="part-1", title="Part", node_type=NodeType.PART, children=[chapter.id])
        project.structure.nodes[part.id] = part

        project.delete_chapter(chapter.id)

        assert project.structure.nodes["part-1"].children == []
        assert project.structure.root_node.children == []

    def test_delete_unknown_is_noop(self, project_with_chapters):
        """Test deleting an unknown id leaves the tree intact."""
        before = list(project_with_chapters.structure.chapter_ids())

        project_with_chapters.delete_chapter("nope")

        assert project_with_chapters.structure.chapter_ids() == before

    def test_delete_leaves_unknown_file_alone(self, project):
        """Test that a file without a node is not removed."""
        stray = project.chapter_path("stray")
        stray.write_text("orphan", encoding='utf-8')

        project.delete_chapter("stray")
        assert stray.exists()

    def test_reorder_chapters(self, project_with_chapters):
        """Test replacing the root's children and the order."""
        project = project_with_chapters
        ids = project.structure.chapter_ids()
        new_order = list(reversed(ids))

        project.reorder_chapters(new_order)

        assert project.structure.root_node.children == new_order
        assert project.structure.order == new_order
        assert project.structure.chapter_ids() == new_order

    def test_reorder_is_not_checked(self, project_with_chapters):
        """Test that the new sequence is taken as given."""
        project = project_with_chapters
        first = project.structure.chapter_ids()[0]

        project.reorder_chapters([first, "ghost"])

        assert project.structure.order == [first, "ghost"]
        assert project.structure.chapter_ids() == [first]

    def test_reorder_unknown_parent(self, project_with_chapters):
        """Test that only the order list changes when the parent is unknown."""
        project = project_with_chapters
        children = list(project.structure.root_node.children)

        project.reorder_chapters(["x"], parent_id="missing")

        assert project.structure.root_node.children == children
        assert project.structure.order == ["x"]


class TestSnapshotsAndState:
    """Test snapshots, word counts and the state view."""

    def test_create_snapshot(self, project_with_chapters):
        """Test snapshot file name and content."""
        project = project_with_chapters
        filename = project.create_snapshot("before edit")

        assert filename.endswith("-before edit.json")
        data = json.loads((project.snapshots_dir / filename).read_text(encoding='utf-8'))
        assert set(data) == {'timestamp', 'name', 'structure', 'metadata'}
        assert data['name'] == "before edit"
        assert data['structure']['root'] == project.structure.root
        assert data['metadata']['title'] == "Test Book"

    def test_default_snapshot_name(self, project):
        """Test the default snapshot name."""
        assert project.create_snapshot().endswith("-manual.json")

    def test_snapshot_leaves_live_state(self, project_with_chapters):
        """Test that taking a snapshot does not modify the project."""
        before = project_with_chapters.structure.model_copy(deep=True)
        project_with_chapters.create_snapshot()
        assert project_with_chapters.structure == before

    def test_total_word_count_uses_cache(self, project_with_chapters):
        """Test that the total sums cached node counts."""
        project = project_with_chapters
        assert project.total_word_count() == 3 + 5 + 3

        project.structure.root_node.word_count = 100
        assert project.total_word_count() == 111

    def test_state(self, project_with_chapters):
        """Test the display snapshot."""
        state = project_with_chapters.state()

        assert state.path == str(project_with_chapters.path)
        assert state.metadata.title == "Test Book"
        assert state.total_word_count == 11

        state.structure.order.clear()
        assert project_with_chapters.structure.order

    def test_get_export_path(self, project):
        """Test the default export location."""
        path = project.get_export_path("epub")
        assert path == project.path / "exports" / "test-book.epub"
        assert path.parent.is_dir()

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_write_chapter_failure(self, project):
        """Test that unwritable chapter storage raises ProjectIOError."""
        if os.geteuid() == 0:
            pytest.skip("root ignores directory permissions")
        project.chapters_dir.chmod(0o500)
        try:
            with pytest.raises(ProjectIOError):
                project.add_chapter("Nope")
        finally:
            project.chapters_dir.chmod(0o700)

"""Unit tests for the manuscript tree."""
import logging

from quillkit.models import ManuscriptNode, ManuscriptStructure, NodeType


def _node(node_id, node_type=NodeType.CHAPTER, children=None):
    return ManuscriptNode(id=node_id, title=node_id.upper(), node_type=node_type, children=children or [])


def _structure(*nodes, root="book", order=None):
    return ManuscriptStructure(root=root, nodes={n.id: n for n in nodes}, order=order or [])


class TestManuscriptStructure:
    """Test tree construction and traversal."""

    def test_with_book(self):
        """Test a fresh structure has a single book root."""
        structure = ManuscriptStructure.with_book("My Novel")

        root = structure.root_node
        assert root is not None
        assert root.node_type == NodeType.BOOK
        assert root.title == "My Novel"
        assert root.children == []
        assert structure.order == []
        assert list(structure.nodes) == [structure.root]

    def test_walk_is_depth_first_preorder(self):
        """Test traversal order book, part, its chapters, then the next sibling."""
        structure = _structure(
            _node("book", NodeType.BOOK, ["p1", "c3"]),
            _node("p1", NodeType.PART, ["c1", "c2"]),
            _node("c1"),
            _node("c2", children=["s1"]),
            _node("s1", NodeType.SCENE),
            _node("c3"),
        )

        assert [n.id for n in structure.walk()] == ["book", "p1", "c1", "c2", "s1", "c3"]
        assert structure.chapter_ids() == ["c1", "c2", "c3"]

    def test_chapter_ids_ignore_order_list(self):
        """Test that the flat order list does not affect traversal."""
        structure = _structure(
            _node("book", NodeType.BOOK, ["a", "b"]),
            _node("a"),
            _node("b"),
            order=["b", "a"],
        )
        assert structure.chapter_ids() == ["a", "b"]

    def test_walk_from_subtree(self):
        """Test walking from a non-root node."""
        structure = _structure(
            _node("book", NodeType.BOOK, ["p1"]),
            _node("p1", NodeType.PART, ["c1"]),
            _node("c1"),
        )
        assert [n.id for n in structure.walk("p1")] == ["p1", "c1"]

    def test_dangling_child_skipped(self, caplog):
        """Test that missing child ids are skipped with a warning."""
        structure = _structure(
            _node("book", NodeType.BOOK, ["ghost", "c1"]),
            _node("c1"),
        )

        with caplog.at_level(logging.WARNING, logger="quillkit"):
            assert structure.chapter_ids() == ["c1"]
        assert "ghost" in caplog.text

    def test_cycle_terminates(self, caplog):
        """Test that a hand-edited cycle does not loop forever."""
        structure = _structure(
            _node("book", NodeType.BOOK, ["p1"]),
            _node("p1", NodeType.PART, ["c1", "book"]),
            _node("c1", children=["p1"]),
        )

        with caplog.at_level(logging.WARNING, logger="quillkit"):
            ids = [n.id for n in structure.walk()]
        assert ids == ["book", "p1", "c1"]
        assert "more than once" in caplog.text

    def test_missing_root(self):
        """Test a root id with no node yields nothing."""
        structure = ManuscriptStructure(root="nowhere")
        assert structure.root_node is None
        assert list(structure.walk()) == []

    def test_parent_of(self):
        """Test parent lookup."""
        structure = _structure(
            _node("book", NodeType.BOOK, ["p1"]),
            _node("p1", NodeType.PART, ["c1"]),
            _node("c1"),
        )
        assert structure.parent_of("c1") == "p1"
        assert structure.parent_of("p1") == "book"
        assert structure.parent_of("book") is None

    def test_detach(self):
        """Test removing an id from every children list and from order."""
        structure = _structure(
            _node("book", NodeType.BOOK, ["c1", "c2"]),
            _node("p1", NodeType.PART, ["c1"]),
            _node("c1"),
            _node("c2"),
            order=["c1", "c2"],
        )

        structure.detach("c1")

        assert structure.nodes["book"].children == ["c2"]
        assert structure.nodes["p1"].children == []
        assert structure.order == ["c2"]
        assert "c1" in structure.nodes

    def test_json_round_trip(self):
        """Test the persisted JSON form."""
        structure = _structure(
            _node("book", NodeType.BOOK, ["c1"]),
            _node("c1"),
            order=["c1"],
        )

        restored = ManuscriptStructure.model_validate_json(structure.model_dump_json(indent=2))

        assert restored == structure
        assert restored.nodes["c1"].node_type == NodeType.CHAPTER

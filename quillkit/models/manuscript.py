"""Manuscript tree: nodes indexed by id, linked through child id lists."""
import uuid
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set

from pydantic import BaseModel, Field

from .chapter import ChapterStatus
from ..utils.logging import get_logger


class NodeType(str, Enum):
    """Kind of a manuscript tree node."""
    BOOK = "book"
    PART = "part"
    CHAPTER = "chapter"
    SCENE = "scene"


class ManuscriptNode(BaseModel):
    """One entry in the manuscript tree."""

    id: str
    title: str
    node_type: NodeType
    children: List[str] = Field(default_factory=list)
    status: ChapterStatus = ChapterStatus.DRAFT
    mood: Optional[str] = None
    pov: Optional[str] = None
    # Cached count; only chapter nodes are refreshed on content updates
    word_count: int = Field(default=0, ge=0)


class ManuscriptStructure(BaseModel):
    """
    The whole tree.

    ``order`` is a flat list of top-level ids maintained independently of
    each node's ``children``; traversal for export always follows
    ``children`` starting at ``root``.
    """

    root: str
    nodes: Dict[str, ManuscriptNode] = Field(default_factory=dict)
    order: List[str] = Field(default_factory=list)

    @classmethod
    def with_book(cls, title: str) -> "ManuscriptStructure":
        """Create a structure holding a single Book root node."""
        root_id = str(uuid.uuid4())
        root = ManuscriptNode(id=root_id, title=title, node_type=NodeType.BOOK)
        return cls(root=root_id, nodes={root_id: root}, order=[])

    @property
    def root_node(self) -> Optional[ManuscriptNode]:
        return self.nodes.get(self.root)

    def walk(self, start_id: Optional[str] = None) -> Iterator[ManuscriptNode]:
        """
        Yield nodes depth-first (pre-order) from ``start_id`` (default: root).

        Dangling child ids are skipped. A node reachable twice (a cycle or a
        node listed under two parents) is only yielded the first time.
        """
        logger = get_logger("manuscript")
        visited: Set[str] = set()
        stack = [start_id or self.root]

        while stack:
            node_id = stack.pop()
            if node_id in visited:
                logger.warning(f"Node {node_id} reached more than once; skipping repeat")
                continue
            node = self.nodes.get(node_id)
            if node is None:
                logger.warning(f"Dangling child reference {node_id}; skipping")
                continue
            visited.add(node_id)
            yield node
            stack.extend(reversed(node.children))

    def chapter_ids(self) -> List[str]:
        """Ids of chapter nodes in depth-first tree order."""
        return [node.id for node in self.walk() if node.node_type == NodeType.CHAPTER]

    def parent_of(self, node_id: str) -> Optional[str]:
        """Id of the first node listing ``node_id`` as a child."""
        for candidate in self.nodes.values():
            if node_id in candidate.children:
                return candidate.id
        return None

    def detach(self, node_id: str) -> None:
        """Remove ``node_id`` from every children list and from ``order``."""
        for node in self.nodes.values():
            node.children = [c for c in node.children if c != node_id]
        self.order = [c for c in self.order if c != node_id]

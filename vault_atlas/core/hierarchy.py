"""
Tree model of a scanned vault.

Nodes are immutable. A rescan builds a new TreeSnapshot instead of editing
the old one, and everything else in the atlas refers to nodes by id.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

GROUP_MIN_WEIGHT = 1000
DOCUMENT_MIN_WEIGHT = 500


class NodeKind(str, Enum):
    """Node variants. Group kinds are named by folder depth."""

    GROUP_DEPTH_1 = "country"
    GROUP_DEPTH_2 = "city"
    GROUP_DEPTH_3 = "town"
    DOCUMENT = "home"


def kind_for_depth(depth: int) -> NodeKind:
    """Group kind for a folder at ``depth`` (1-based)."""
    if depth < 1:
        raise ValueError(f"Folder depth starts at 1, got {depth}")
    if depth == 1:
        return NodeKind.GROUP_DEPTH_1
    if depth == 2:
        return NodeKind.GROUP_DEPTH_2
    return NodeKind.GROUP_DEPTH_3


def _unique(items: Iterable[str]) -> Tuple[str, ...]:
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return tuple(ordered)


@dataclass(frozen=True)
class GroupNode:
    """A folder: can hold children and be drilled into."""

    id: str
    name: str
    kind: NodeKind
    children: Tuple["TreeNode", ...] = ()
    weight: float = GROUP_MIN_WEIGHT
    color: Optional[str] = None
    links: Tuple[str, ...] = ()
    absolute_path: str = ""
    relative_path: str = ""

    def __post_init__(self):
        if self.kind is NodeKind.DOCUMENT:
            raise ValueError("GroupNode cannot have the document kind")
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "links", tuple(self.links))

    @property
    def is_empty(self) -> bool:
        return len(self.children) == 0

    @property
    def is_document(self) -> bool:
        return False

    @classmethod
    def from_children(cls, id: str, name: str, depth: int, children: Iterable["TreeNode"],
                      absolute_path: str = "", color: Optional[str] = None) -> "GroupNode":
        """
        Build a group whose weight and links derive from its children.

        Weight is the sum of child weights with a floor of GROUP_MIN_WEIGHT;
        links are the de-duplicated union of child links in first-seen order.
        """
        children = tuple(children)
        weight = sum(child.weight for child in children)
        links = _unique(link for child in children for link in child.links)
        return cls(
            id=id,
            name=name,
            kind=kind_for_depth(depth),
            children=children,
            weight=max(GROUP_MIN_WEIGHT, weight),
            color=color,
            links=links,
            absolute_path=absolute_path,
            relative_path=id,
        )


@dataclass(frozen=True)
class DocumentNode:
    """A Markdown note: an activation target, never a navigable region."""

    id: str
    name: str
    weight: float = DOCUMENT_MIN_WEIGHT
    color: Optional[str] = None
    links: Tuple[str, ...] = ()
    absolute_path: str = ""
    relative_path: str = ""
    preview: str = ""

    def __post_init__(self):
        object.__setattr__(self, "links", tuple(self.links))

    @property
    def kind(self) -> NodeKind:
        return NodeKind.DOCUMENT

    @property
    def children(self) -> Tuple["TreeNode", ...]:
        return ()

    @property
    def is_empty(self) -> bool:
        return True

    @property
    def is_document(self) -> bool:
        return True


TreeNode = Union[GroupNode, DocumentNode]


def iter_tree(roots: Iterable[TreeNode]) -> Iterator[TreeNode]:
    """Depth-first pre-order walk over a forest."""
    stack = list(reversed(tuple(roots)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


@dataclass(frozen=True)
class TreeSnapshot:
    """One complete scan of a vault."""

    vault_path: str
    vault_name: str
    scanned_at: int
    roots: Tuple[TreeNode, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "roots", tuple(self.roots))

    def iter_nodes(self) -> Iterator[TreeNode]:
        return iter_tree(self.roots)


@dataclass
class NodeIndex:
    """
    Id-keyed lookup tables for one snapshot.

    ``by_name`` maps both names and ids to nodes; when two nodes share a name
    the later one in walk order wins. ``top_level_of`` maps every node id to
    the id of its top-level ancestor (a top-level node maps to itself).
    """

    by_id: Dict[str, TreeNode] = field(default_factory=dict)
    parent_of: Dict[str, Optional[str]] = field(default_factory=dict)
    top_level_of: Dict[str, str] = field(default_factory=dict)
    by_name: Dict[str, TreeNode] = field(default_factory=dict)

    @classmethod
    def from_roots(cls, roots: Iterable[TreeNode]) -> "NodeIndex":
        index = cls()
        for root in roots:
            stack: List[Tuple[TreeNode, Optional[str]]] = [(root, None)]
            while stack:
                node, parent_id = stack.pop()
                index.by_id.setdefault(node.id, node)
                index.parent_of.setdefault(node.id, parent_id)
                index.top_level_of.setdefault(node.id, root.id)
                index.by_name[node.name] = node
                if node.id:
                    index.by_name[node.id] = node
                stack.extend((child, node.id) for child in reversed(node.children))
        return index

    def get(self, node_id: str) -> Optional[TreeNode]:
        return self.by_id.get(node_id)

    def resolve(self, reference: str) -> Optional[TreeNode]:
        """Look a raw link target up by name or id."""
        return self.by_name.get(reference)

    def top_level(self, node_id: str) -> Optional[TreeNode]:
        root_id = self.top_level_of.get(node_id)
        return self.by_id.get(root_id) if root_id is not None else None

    def ancestry(self, node_id: str) -> List[TreeNode]:
        """Nodes from the top-level ancestor down to ``node_id`` inclusive."""
        chain: List[TreeNode] = []
        current: Optional[str] = node_id
        while current is not None and current in self.by_id:
            chain.append(self.by_id[current])
            current = self.parent_of.get(current)
        chain.reverse()
        return chain

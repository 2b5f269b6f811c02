"""Name search across the whole vault."""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .hierarchy import TreeNode

MAX_RESULTS = 50


@dataclass(frozen=True)
class SearchResult:
    node: TreeNode
    path_descriptor: str  # e.g. "Earth / Europe"
    match_score: int
    is_folder: bool


def flatten_with_paths(roots: Sequence[TreeNode]) -> List[Tuple[TreeNode, str]]:
    """Every node paired with the names of its ancestors joined by " / "."""
    results: List[Tuple[TreeNode, str]] = []

    def traverse(node: TreeNode, prefix: str) -> None:
        results.append((node, prefix))
        child_prefix = f"{prefix} / {node.name}" if prefix else node.name
        for child in node.children:
            traverse(child, child_prefix)

    for root in roots:
        traverse(root, "")
    return results


def score_match(name: str, path: str, query: str) -> int:
    lower_q = query.lower()
    name_l = name.lower()
    score = 0
    if name_l == lower_q:
        score = 100
    elif name_l.startswith(lower_q):
        score = 50
    elif lower_q in name_l:
        score = 10

    if lower_q in path.lower():
        score += 5
    return score


def search_nodes(roots: Sequence[TreeNode], query: str, limit: int = MAX_RESULTS) -> List[SearchResult]:
    """
    Case-insensitive search by name, with a bonus when the query matches
    an ancestor name. Results are sorted by score, ties keep tree order.
    """
    if not query.strip():
        return []

    scored = []
    for node, path in flatten_with_paths(roots):
        score = score_match(node.name, path, query)
        if score > 0:
            scored.append(SearchResult(node, path, score, not node.is_document))

    scored.sort(key=lambda r: r.match_score, reverse=True)
    return scored[:limit]

"""
Navigation over the vault tree.

The navigation path is an immutable tuple of nodes from a top-level group
down to the region currently on screen; the empty path is the solar system
view. Every operation returns a new path and leaves its input untouched.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

import structlog

from .hierarchy import TreeNode

logger = structlog.get_logger()

NavigationPath = Tuple[TreeNode, ...]

ROOT_INDEX = -1


def drill_down(path: NavigationPath, node: TreeNode) -> NavigationPath:
    """Enter ``node``. Nodes without children are not regions, so the path is returned unchanged."""
    if node.is_empty:
        return path
    return tuple(path) + (node,)


def go_back(path: NavigationPath) -> NavigationPath:
    """Leave the current region. The empty path stays empty."""
    return tuple(path[:-1])


def navigate_to_index(path: NavigationPath, index: int) -> NavigationPath:
    """
    Breadcrumb navigation.

    Args:
        path: Current path
        index: ``-1`` for the root, otherwise the position of the breadcrumb
            to land on; indices past the end keep the whole path

    Raises:
        ValueError: If ``index`` is below -1
    """
    if index < ROOT_INDEX:
        raise ValueError(f"Breadcrumb index must be >= -1, got {index}")
    if index == ROOT_INDEX:
        return ()
    return tuple(path[:index + 1])


def find_path_to(target_id: str, roots: Iterable[TreeNode]) -> Optional[List[TreeNode]]:
    """
    Depth-first search for the chain of nodes from a root to ``target_id``.

    Returns:
        The chain including the target, or None if it is not in the forest
    """
    for root in roots:
        stack: List[Tuple[TreeNode, int]] = [(root, 0)]
        chain: List[TreeNode] = []
        while stack:
            node, depth = stack.pop()
            del chain[depth:]
            chain.append(node)
            if node.id == target_id:
                return chain
            stack.extend((child, depth + 1) for child in reversed(node.children))
    return None


def find_node_by_id(roots: Iterable[TreeNode], node_id: str) -> Optional[TreeNode]:
    path = find_path_to(node_id, roots)
    return path[-1] if path else None


def jump_to(path: NavigationPath, target: TreeNode, roots: Sequence[TreeNode]) -> NavigationPath:
    """
    Navigate straight to ``target``, wherever it lives in the forest.

    A leaf target lands on the region that contains it, which is the root
    view for a leaf at the top of the vault. When the target is not found
    (it may belong to an older scan) the path is unchanged.
    """
    found = find_path_to(target.id, roots)
    if found is None:
        logger.debug("Jump target not found", target=target.id)
        return path

    if len(found[-1].children) == 0:
        found = found[:-1]
    return tuple(found)


def reresolve_after_rescan(path: NavigationPath, new_roots: Sequence[TreeNode]) -> NavigationPath:
    """
    Swap every node of ``path`` for its counterpart in a fresh scan.

    The walk stops at the first id that no longer exists, so a deleted or
    renamed folder truncates the path there instead of resetting it.
    """
    fresh: List[TreeNode] = []
    for old_node in path:
        node = find_node_by_id(new_roots, old_node.id)
        if node is None:
            logger.info("Navigation path truncated after rescan",
                        missing=old_node.id, kept=len(fresh))
            break
        fresh.append(node)
    return tuple(fresh)


def path_from_ids(node_ids: Iterable[str], roots: Sequence[TreeNode]) -> NavigationPath:
    """Rebuild a path from stored ids, truncating at the first unknown id."""
    fresh: List[TreeNode] = []
    for node_id in node_ids:
        node = find_node_by_id(roots, node_id)
        if node is None:
            break
        fresh.append(node)
    return tuple(fresh)


def current_node(path: NavigationPath) -> Optional[TreeNode]:
    return path[-1] if path else None

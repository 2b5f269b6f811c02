"""
Cross-reference overlays.

Documents carry raw ``[[link]]`` targets. This module resolves them against
a NodeIndex and turns them into line segments for the current view:
connectors between cells of the same region, connectors that leave the
region (clamped to its rim), and counted links between planets.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .hierarchy import NodeIndex, TreeNode, iter_tree
from .voronoi_cells import VoronoiCell

DEFAULT_FOREIGN_FRACTION = 0.95


@dataclass(frozen=True)
class LinkEndpoint:
    x: float
    y: float
    id: str
    index: int  # cell index in the current tessellation, -1 when off-region


@dataclass(frozen=True)
class LinkSegment:
    """One connector in a planet view."""

    source: LinkEndpoint
    target: LinkEndpoint
    is_foreign: bool


@dataclass(frozen=True)
class PlanetLink:
    """Links counted between two top-level groups, in both directions."""

    source: int
    target: int
    count: int


def clamp_to_rim(point: Sequence[float], center: Sequence[float], radius: float,
                 fraction: float = DEFAULT_FOREIGN_FRACTION) -> Tuple[float, float]:
    """Project ``point`` from ``center`` onto the circle of ``radius * fraction``."""
    dx = point[0] - center[0]
    dy = point[1] - center[1]
    dist = math.hypot(dx, dy) or 1.0
    reach = radius * fraction
    return (center[0] + dx / dist * reach, center[1] + dy / dist * reach)


def _containing_cell(target: TreeNode, cell_lookup: Dict[str, Tuple[np.ndarray, int]],
                     index: NodeIndex) -> Optional[Tuple[np.ndarray, int]]:
    local = cell_lookup.get(target.name)
    if local is not None:
        return local
    for ancestor in reversed(index.ancestry(target.id)):
        local = cell_lookup.get(ancestor.id)
        if local is not None:
            return local
    return None


def resolve_local_links(cells: Sequence[VoronoiCell], index: NodeIndex,
                        center: Sequence[float], radius: float,
                        foreign_fraction: float = DEFAULT_FOREIGN_FRACTION) -> List[LinkSegment]:
    """
    Connectors for the cells of one planet view.

    A target that owns a cell in ``cells``, or sits somewhere below one,
    gets a centroid-to-centroid connector (none when that cell is the
    source itself). A target outside the region's subtree gets a foreign
    connector that ends on the rim of the region, in the direction of the
    source cell. Targets that match no node are dropped.
    """
    cell_lookup: Dict[str, Tuple[np.ndarray, int]] = {}
    for i, cell in enumerate(cells):
        cell_lookup[cell.node.name] = (cell.centroid, i)
        if cell.node.id:
            cell_lookup[cell.node.id] = (cell.centroid, i)

    segments: List[LinkSegment] = []
    for i, cell in enumerate(cells):
        node = cell.node
        source = LinkEndpoint(float(cell.centroid[0]), float(cell.centroid[1]), node.id, i)
        for reference in node.links:
            target_node = index.resolve(reference)
            if target_node is None:
                continue

            local = _containing_cell(target_node, cell_lookup, index)
            if local is not None:
                centroid, target_index = local
                if target_index == i:
                    continue
                segments.append(LinkSegment(
                    source=source,
                    target=LinkEndpoint(float(centroid[0]), float(centroid[1]), target_node.id, target_index),
                    is_foreign=False,
                ))
            elif target_node.id in index.top_level_of:
                edge_x, edge_y = clamp_to_rim(cell.centroid, center, radius, foreign_fraction)
                segments.append(LinkSegment(
                    source=source,
                    target=LinkEndpoint(edge_x, edge_y, target_node.id, -1),
                    is_foreign=True,
                ))
    return segments


def _count_links(planet: TreeNode, other: TreeNode, index: NodeIndex) -> int:
    count = 0
    for node in iter_tree([planet]):
        for reference in node.links:
            target = index.resolve(reference)
            if target is not None and index.top_level_of.get(target.id) == other.id:
                count += 1
    return count


def resolve_global_links(planets: Sequence[TreeNode], index: NodeIndex) -> List[PlanetLink]:
    """
    Link counts between every pair of top-level groups.

    Note that a group's own ``links`` field repeats its children's links, so
    every reference is counted once per ancestor level that carries it.
    """
    links: List[PlanetLink] = []
    n = len(planets)
    for i in range(n):
        for j in range(i + 1, n):
            count = (_count_links(planets[i], planets[j], index)
                     + _count_links(planets[j], planets[i], index))
            if count > 0:
                links.append(PlanetLink(source=i, target=j, count=count))
    return links


def link_targets(node: TreeNode, index: NodeIndex) -> List[TreeNode]:
    """Resolved targets of a node's links, unresolved ones skipped."""
    resolved: List[Optional[TreeNode]] = [index.resolve(ref) for ref in node.links]
    return [target for target in resolved if target is not None]

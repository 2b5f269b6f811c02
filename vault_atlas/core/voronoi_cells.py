"""Voronoi tessellation of a region into one cell per child node."""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import structlog
from scipy.spatial import Voronoi

from .geometry import (
    DEFAULT_EPSILON, Bounds, clip_convex, point_in_polygon, polygon_area, polygon_bounds,
    polygon_centroid, validate_convex_polygon,
)
from .hierarchy import TreeNode
from .palette import pick_color
from .seed_points import DEFAULT_ATTEMPTS, generate_seed_points

logger = structlog.get_logger()

DEFAULT_MIN_CELL_AREA = 1.0
DEFAULT_AREA_EPSILON = 1e-6

# Sentinel distance, in multiples of the region span, that keeps every seed
# region finite without letting a sentinel own any point of the region
SENTINEL_SPAN_FACTOR = 4.0


@dataclass
class VoronoiCell:
    """A clipped sub-region of the current region, owned by one child."""

    node: TreeNode
    polygon: np.ndarray
    centroid: np.ndarray
    area: float
    color: str

    @property
    def node_id(self) -> str:
        return self.node.id


def resolve_color(node: TreeNode, depth: int) -> str:
    """Explicit node color, else the depth palette pick."""
    return node.color or pick_color(node.name, depth)


def get_boundary_points(bounds: Bounds) -> np.ndarray:
    """
    Four far-away sentinel sites around ``bounds``.

    Adding them to the diagram makes every real site interior to the convex
    hull, so no real region is unbounded. They sit further than the region
    diagonal from any point of the region and so never own any of it.
    """
    span = max(bounds.width, bounds.height, 1.0)
    cx = (bounds.min_x + bounds.max_x) / 2
    cy = (bounds.min_y + bounds.max_y) / 2
    offset = span * SENTINEL_SPAN_FACTOR
    return np.array([
        [cx - offset, cy - offset],
        [cx + offset, cy - offset],
        [cx + offset, cy + offset],
        [cx - offset, cy + offset],
    ])


def _unique_site_indices(points: np.ndarray) -> List[int]:
    """Indices of the first occurrence of each distinct point."""
    seen = set()
    keep = []
    for i, (x, y) in enumerate(points):
        key = (float(x), float(y))
        if key in seen:
            continue
        seen.add(key)
        keep.append(i)
    return keep


def _ordered_region(vertices: np.ndarray, site: np.ndarray) -> np.ndarray:
    """Drop a repeated closing vertex and order counter-clockwise around the site."""
    if len(vertices) > 1 and np.array_equal(vertices[0], vertices[-1]):
        vertices = vertices[:-1]
    angles = np.arctan2(vertices[:, 1] - site[1], vertices[:, 0] - site[0])
    return vertices[np.argsort(angles, kind="stable")]


def compute_voronoi_cells(parent_polygon, children: Sequence[TreeNode], depth: int = 0,
                          min_cell_area: float = DEFAULT_MIN_CELL_AREA,
                          max_attempts: int = DEFAULT_ATTEMPTS,
                          epsilon: float = DEFAULT_EPSILON,
                          area_epsilon: float = DEFAULT_AREA_EPSILON) -> List[VoronoiCell]:
    """
    Partition ``parent_polygon`` into one cell per child.

    Cells come back in child order. A cell whose clipped polygon has fewer
    than three vertices or an area below ``min_cell_area`` is dropped, as is
    the cell of a child whose seed point coincides with an earlier sibling's.

    Args:
        parent_polygon: Convex region polygon (at least 3 vertices)
        children: Ordered child nodes
        depth: Nesting depth of the region, selects the color palette
        min_cell_area: Area threshold in squared coordinate units
        max_attempts: Rejection-sampling attempts per seed point
        epsilon: Determinant threshold for parallel edges while clipping
        area_epsilon: Relative tolerance of the coverage check

    Returns:
        List of VoronoiCell

    Raises:
        InvalidPolygonError: If ``parent_polygon`` is not a convex polygon
    """
    parent = validate_convex_polygon(parent_polygon)
    children = list(children)

    if not children:
        return []

    if len(children) == 1:
        child = children[0]
        return [VoronoiCell(
            node=child,
            polygon=parent.copy(),
            centroid=polygon_centroid(parent),
            area=abs(polygon_area(parent)),
            color=resolve_color(child, depth),
        )]

    points = generate_seed_points(parent, children, max_attempts)
    site_indices = _unique_site_indices(points)
    if len(site_indices) < len(children):
        logger.debug("Coincident seed points dropped",
                     children=len(children), sites=len(site_indices))

    sites = points[site_indices]
    bounds = polygon_bounds(parent)
    all_points = np.vstack([sites, get_boundary_points(bounds)])
    vor = Voronoi(all_points)

    cells = []
    for site_number, child_index in enumerate(site_indices):
        child = children[child_index]
        region_idx = vor.point_region[site_number]
        if region_idx == -1:
            continue
        region = vor.regions[region_idx]
        if -1 in region or len(region) < 3:
            logger.debug("Unbounded or degenerate region skipped", node=child.id)
            continue

        raw = _ordered_region(vor.vertices[region], sites[site_number])
        clipped = clip_convex(raw, parent, epsilon)
        if len(clipped) < 3:
            continue
        area = abs(polygon_area(clipped))
        if area < min_cell_area:
            logger.debug("Sub-threshold cell dropped", node=child.id, area=area)
            continue

        cells.append(VoronoiCell(
            node=child,
            polygon=clipped,
            centroid=polygon_centroid(clipped),
            area=area,
            color=resolve_color(child, depth),
        ))

    parent_area = abs(polygon_area(parent))
    uncovered = parent_area - total_cell_area(cells)
    if abs(uncovered) > area_epsilon * parent_area:
        # Expected when cells were dropped above
        logger.debug("Cells do not cover the region", uncovered=uncovered, region=parent_area)

    logger.debug("Voronoi cells computed", children=len(children), cells=len(cells), depth=depth)
    return cells


def total_cell_area(cells: Sequence[VoronoiCell]) -> float:
    return float(sum(cell.area for cell in cells))


def find_cell_at(cells: Sequence[VoronoiCell], x: float, y: float) -> Optional[int]:
    """
    Find the cell containing a point.

    Returns:
        Index into ``cells``, or None when the point is outside every cell
    """
    for i, cell in enumerate(cells):
        if point_in_polygon(cell.polygon, (x, y)):
            return i
    return None


def compute_label_size(area: float, total_area: float, planet_radius: float) -> float:
    """Font size for a cell label, proportional to the cell's share of the region."""
    if total_area <= 0:
        return 7.0
    base = math.sqrt(area / total_area) * planet_radius * 0.18
    return max(7.0, min(22.0, base))

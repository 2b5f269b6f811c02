"""
Seed point placement for Voronoi sites.

Each child of a region gets one interior point whose position depends only
on the region polygon, the child's name and id, and its index among its
siblings.
"""

from typing import Sequence

import numpy as np
import structlog

from .geometry import as_polygon, point_in_polygon, polygon_bounds, polygon_centroid
from .hierarchy import TreeNode
from .seeded_random import LcgPRNG, hash_str

logger = structlog.get_logger()

# Prime stride that decorrelates the seeds of adjacent siblings
INDEX_SEED_STRIDE = 7919
DEFAULT_ATTEMPTS = 500


def child_seed(node: TreeNode, index: int) -> int:
    """Seed integer for the child at ``index``."""
    return hash_str(node.name + node.id) + index * INDEX_SEED_STRIDE


def random_point_in_polygon(poly, seed: int, max_attempts: int = DEFAULT_ATTEMPTS) -> np.ndarray:
    """
    Rejection-sample a point inside ``poly``.

    Samples the bounding box with an LCG seeded by ``seed``. Falls back to
    the polygon centroid when no sample lands inside within ``max_attempts``
    (sliver or degenerate polygons).

    Args:
        poly: Region polygon
        seed: Integer seed
        max_attempts: Number of samples before giving up

    Returns:
        [x, y] point
    """
    vertices = as_polygon(poly)
    bounds = polygon_bounds(vertices)
    prng = LcgPRNG(seed)

    for _ in range(max_attempts):
        x = bounds.min_x + prng.random() * bounds.width
        y = bounds.min_y + prng.random() * bounds.height
        if point_in_polygon(vertices, (x, y)):
            return np.array([x, y])

    logger.debug("Seed sampling exhausted, using centroid", seed=seed, attempts=max_attempts)
    return polygon_centroid(vertices)


def generate_seed_points(parent_polygon, children: Sequence[TreeNode],
                         max_attempts: int = DEFAULT_ATTEMPTS) -> np.ndarray:
    """
    One seed point per child, in child order.

    Returns:
        ``(len(children), 2)`` array of points
    """
    vertices = as_polygon(parent_polygon)
    points = [
        random_point_in_polygon(vertices, child_seed(child, i), max_attempts)
        for i, child in enumerate(children)
    ]
    if not points:
        return np.zeros((0, 2), dtype=float)
    return np.array(points)

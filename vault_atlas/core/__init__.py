"""
Core tessellation and navigation functionality.
"""

from .hierarchy import DocumentNode, GroupNode, NodeIndex, NodeKind, TreeSnapshot
from .geometry import InvalidPolygonError, circle_to_polygon, clip_convex
from .voronoi_cells import VoronoiCell, compute_voronoi_cells, find_cell_at
from .seeded_random import hash_str

__all__ = ['DocumentNode', 'GroupNode', 'NodeIndex', 'NodeKind', 'TreeSnapshot',
           'InvalidPolygonError', 'circle_to_polygon', 'clip_convex',
           'VoronoiCell', 'compute_voronoi_cells', 'find_cell_at', 'hash_str']

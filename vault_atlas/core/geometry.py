"""
Polygon primitives for the tessellator.

Polygons are ``(n, 2)`` float arrays of vertices without a repeated closing
vertex. Signed areas follow the usual shoelace convention: positive for
counter-clockwise order in a y-up frame. Clipping only supports convex
boundaries.
"""

import math
from typing import NamedTuple, Optional, Sequence

import numpy as np

DEFAULT_EPSILON = 1e-10


class InvalidPolygonError(ValueError):
    """Raised when a caller passes a polygon that breaks a precondition."""


class Bounds(NamedTuple):
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def as_polygon(points) -> np.ndarray:
    """Convert any sequence of [x, y] pairs to a float ``(n, 2)`` array."""
    poly = np.asarray(points, dtype=float)
    if poly.size == 0:
        return np.zeros((0, 2), dtype=float)
    if poly.ndim != 2 or poly.shape[1] != 2:
        raise InvalidPolygonError(f"Expected (n, 2) vertices, got shape {poly.shape}")
    return poly


def polygon_bounds(poly) -> Bounds:
    """
    Bounding box of a polygon.

    An empty polygon yields degenerate bounds (``inf``/``-inf``); callers
    must guard against that themselves.
    """
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for x, y in as_polygon(poly):
        if x < min_x:
            min_x = x
        if y < min_y:
            min_y = y
        if x > max_x:
            max_x = x
        if y > max_y:
            max_y = y
    return Bounds(float(min_x), float(min_y), float(max_x), float(max_y))


def polygon_area(poly) -> float:
    """Signed polygon area via the shoelace formula."""
    vertices = as_polygon(poly)
    if len(vertices) < 3:
        return 0.0
    x = vertices[:, 0]
    y = vertices[:, 1]
    return float(0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)))


def polygon_centroid(poly) -> np.ndarray:
    """
    Area-weighted centroid of a polygon.

    Degenerate input (fewer than three vertices or zero area) falls back to
    the vertex mean; an empty polygon gives ``[nan, nan]``.
    """
    vertices = as_polygon(poly)
    if len(vertices) == 0:
        return np.array([math.nan, math.nan])
    if len(vertices) < 3:
        return np.mean(vertices, axis=0)

    x = vertices[:, 0]
    y = vertices[:, 1]
    x_next = np.roll(x, -1)
    y_next = np.roll(y, -1)
    cross = x * y_next - x_next * y
    doubled_area = cross.sum()
    if abs(doubled_area) < DEFAULT_EPSILON:
        return np.mean(vertices, axis=0)

    cx = np.dot(x + x_next, cross) / (3.0 * doubled_area)
    cy = np.dot(y + y_next, cross) / (3.0 * doubled_area)
    return np.array([float(cx), float(cy)])


def point_in_polygon(poly, point: Sequence[float]) -> bool:
    """Ray-casting containment test (even-odd rule)."""
    vertices = as_polygon(poly)
    n = len(vertices)
    if n < 3:
        return False

    x, y = float(point[0]), float(point[1])
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def line_intersection(p1, p2, p3, p4, epsilon: float = DEFAULT_EPSILON) -> Optional[np.ndarray]:
    """
    Intersection of line p1-p2 with line p3-p4.

    Returns:
        Point on p1-p2, or None when the lines are (nearly) parallel
    """
    x1, y1 = p1
    x2, y2 = p2
    x3, y3 = p3
    x4, y4 = p4
    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < epsilon:
        return None
    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    return np.array([x1 + t * (x2 - x1), y1 + t * (y2 - y1)])


def _is_inside(point, edge_start, edge_end) -> bool:
    return ((edge_end[0] - edge_start[0]) * (point[1] - edge_start[1])
            - (edge_end[1] - edge_start[1]) * (point[0] - edge_start[0])) >= 0


def is_convex(poly, epsilon: float = DEFAULT_EPSILON) -> bool:
    """True when every turn of the polygon goes the same way (collinear runs allowed)."""
    vertices = as_polygon(poly)
    n = len(vertices)
    if n < 3:
        return False

    sign = 0
    for i in range(n):
        a = vertices[i]
        b = vertices[(i + 1) % n]
        c = vertices[(i + 2) % n]
        cross = (b[0] - a[0]) * (c[1] - b[1]) - (b[1] - a[1]) * (c[0] - b[0])
        if abs(cross) <= epsilon:
            continue
        current = 1 if cross > 0 else -1
        if sign == 0:
            sign = current
        elif current != sign:
            return False
    return sign != 0


def validate_convex_polygon(poly) -> np.ndarray:
    """Return ``poly`` as an array, raising InvalidPolygonError if it is not a convex polygon."""
    vertices = as_polygon(poly)
    if len(vertices) < 3:
        raise InvalidPolygonError(f"Polygon needs at least 3 vertices, got {len(vertices)}")
    if not is_convex(vertices):
        raise InvalidPolygonError("Polygon is not convex")
    return vertices


def clip_convex(subject, clip, epsilon: float = DEFAULT_EPSILON) -> np.ndarray:
    """
    Sutherland-Hodgman clipping of ``subject`` against a convex ``clip`` polygon.

    A clockwise clip boundary is reversed first so the half-plane test
    ``cross(edge, point - edge_start) >= 0`` always keeps the interior.

    Args:
        subject: Polygon to clip (any simple polygon)
        clip: Convex clipping boundary with at least 3 vertices
        epsilon: Determinant threshold for parallel edges

    Returns:
        Clipped polygon; an empty array when nothing survives
    """
    output = as_polygon(subject)
    boundary = as_polygon(clip)
    if len(boundary) < 3:
        raise InvalidPolygonError(f"Clip boundary needs at least 3 vertices, got {len(boundary)}")
    if len(output) == 0:
        return np.zeros((0, 2), dtype=float)
    if polygon_area(boundary) < 0:
        boundary = boundary[::-1]

    points = [tuple(p) for p in output]
    n_edges = len(boundary)
    for i in range(n_edges):
        if not points:
            break
        edge_start = boundary[i]
        edge_end = boundary[(i + 1) % n_edges]
        source = points
        points = []
        for j, current in enumerate(source):
            previous = source[j - 1]
            curr_inside = _is_inside(current, edge_start, edge_end)
            prev_inside = _is_inside(previous, edge_start, edge_end)
            if curr_inside:
                if not prev_inside:
                    inter = line_intersection(previous, current, edge_start, edge_end, epsilon)
                    if inter is not None:
                        points.append((inter[0], inter[1]))
                points.append(current)
            elif prev_inside:
                inter = line_intersection(previous, current, edge_start, edge_end, epsilon)
                if inter is not None:
                    points.append((inter[0], inter[1]))

    if not points:
        return np.zeros((0, 2), dtype=float)
    return np.array(points, dtype=float)


def circle_to_polygon(center: Sequence[float], radius: float, segment_count: int = 64) -> np.ndarray:
    """
    Regular polygon approximation of a disk.

    The first vertex sits at angle -pi/2 and the rest follow counter-clockwise.
    """
    if radius < 0:
        raise InvalidPolygonError(f"Radius must be non-negative, got {radius}")
    if segment_count < 3:
        raise InvalidPolygonError(f"Need at least 3 segments, got {segment_count}")

    cx, cy = float(center[0]), float(center[1])
    angles = 2 * np.pi * np.arange(segment_count) / segment_count - np.pi / 2
    return np.column_stack([cx + radius * np.cos(angles), cy + radius * np.sin(angles)])

"""
Root view layout and planet view geometry.

At the root every top-level group is drawn as a planet placed on a
golden-angle spiral. Drilling into a group switches to a single planet that
fills the viewport and is tessellated by voronoi_cells.
"""

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from .geometry import circle_to_polygon
from .hierarchy import TreeNode
from .palette import PlanetColors, pick_planet_colors
from .seeded_random import hash_str

GOLDEN_ANGLE = 2.39996
BASE_RADIUS_FRACTION = 0.14
SPREAD_FACTOR = 4.5
CHILD_COUNT_SATURATION = 15


@dataclass(frozen=True)
class PlanetPlacement:
    """A top-level group drawn as a planet."""

    node: TreeNode
    cx: float
    cy: float
    radius: float
    colors: PlanetColors


class PlanetGeometry(NamedTuple):
    """The circular region of a planet view."""
    cx: float
    cy: float
    radius: float

    @property
    def center(self):
        return (self.cx, self.cy)

    def polygon(self, segment_count: int = 64) -> np.ndarray:
        return circle_to_polygon(self.center, self.radius, segment_count)


def planet_geometry(width: float, height: float, radius_fraction: float = 0.42) -> PlanetGeometry:
    """Planet view circle centred in a ``width`` x ``height`` viewport."""
    return PlanetGeometry(width / 2, height / 2, min(width, height) * radius_fraction)


def layout_planets(roots: Sequence[TreeNode], width: float, height: float) -> List[PlanetPlacement]:
    """
    Place one planet per top-level group.

    The first planet sits in the middle of the viewport and the rest spiral
    outwards at the golden angle. Each distance is stretched by up to 20%
    using the name hash, so the spiral looks scattered but is stable.
    Planets with more children are drawn larger.
    """
    base_radius = min(width, height) * BASE_RADIUS_FRACTION
    spread = base_radius * SPREAD_FACTOR

    placements = []
    for i, node in enumerate(roots):
        child_count = len(node.children)
        radius = base_radius * (0.7 + 0.5 * min(child_count / CHILD_COUNT_SATURATION, 1))

        angle = i * GOLDEN_ANGLE
        distance = 0.0 if i == 0 else math.sqrt(i) * spread
        jitter = (hash_str(node.name) % 100) / 100 * distance * 0.2
        final_distance = distance + jitter

        placements.append(PlanetPlacement(
            node=node,
            cx=width / 2 + math.cos(angle) * final_distance,
            cy=height / 2 + math.sin(angle) * final_distance,
            radius=radius,
            colors=pick_planet_colors(node.name),
        ))
    return placements


def find_planet_at(planets: Sequence[PlanetPlacement], x: float, y: float) -> Optional[int]:
    """Index of the planet whose disk contains the point; the closest centre wins on overlap."""
    best: Optional[int] = None
    best_distance = math.inf
    for i, planet in enumerate(planets):
        distance = math.hypot(x - planet.cx, y - planet.cy)
        if distance <= planet.radius and distance < best_distance:
            best = i
            best_distance = distance
    return best

"""
Deterministic color selection for planets and cells.

The hex values are presentation data; what matters to the tessellator is
that ``pick_color`` depends only on the node name and nesting depth.
"""

from typing import Dict, List, NamedTuple

from .seeded_random import hash_str


class PlanetColors(NamedTuple):
    """Color set for one planet in the solar system view."""
    base: str
    glow: str
    accent: str


PLANET_COLORS: List[PlanetColors] = [
    PlanetColors('#1a5276', 'rgba(40,120,200,0.3)', '#2980b9'),
    PlanetColors('#1e6f5c', 'rgba(40,180,130,0.3)', '#27ae60'),
    PlanetColors('#6d4c41', 'rgba(160,100,60,0.3)', '#a0522d'),
    PlanetColors('#5b2c6f', 'rgba(120,60,160,0.3)', '#8e44ad'),
    PlanetColors('#7b241c', 'rgba(180,60,50,0.3)', '#c0392b'),
    PlanetColors('#6e5c10', 'rgba(180,160,40,0.3)', '#d4ac0d'),
    PlanetColors('#1a4d6e', 'rgba(40,100,160,0.3)', '#2471a3'),
    PlanetColors('#145a32', 'rgba(30,140,70,0.3)', '#1e8449'),
    PlanetColors('#6c3461', 'rgba(150,70,130,0.3)', '#a93296'),
    PlanetColors('#4a4a5a', 'rgba(100,100,140,0.3)', '#7f8c8d'),
]

# One palette per nesting depth; deeper levels reuse the last one
DEPTH_PALETTES: List[List[str]] = [
    ['#1a4d6e', '#2d6a4f', '#5c3d2e', '#6d5c10', '#4a3060', '#8b3a3a', '#2e5065', '#4a6741', '#6e4b35', '#3a4a5c',
     '#1e6f5c', '#7a5038', '#553a6a', '#887520', '#944040', '#0d3b66', '#355e3b', '#634530', '#756215', '#48305c'],
    ['#2d6a4f', '#3a5a2c', '#4a6741', '#1a5276', '#355e3b', '#2e5339', '#3d6b4f', '#1e6f5c', '#186a5e', '#4d7045',
     '#2b5233', '#436a3d', '#385e35', '#0f4c5c', '#145a5e', '#14506a', '#1b5e7a', '#1a4d6e', '#0d3b66', '#0e4460'],
    ['#5c3d2e', '#6b4433', '#7a5038', '#634530', '#6e4b35', '#7d5540', '#5a3b2b', '#74503a', '#684838', '#7f5842',
     '#8b5a40', '#925e45', '#553020', '#6a3d28', '#7e5035', '#8a5a3d', '#4d3020', '#704535', '#855840', '#604030'],
    ['#6d5c10', '#7a6a18', '#887520', '#756215', '#836f1d', '#917c25', '#6b5a0e', '#7f6d1a', '#736018', '#8a7722',
     '#9a8530', '#5d5008', '#6a5a12', '#8c7820', '#a09028', '#544808', '#786818', '#968028', '#604e0a', '#847220'],
    ['#3a4a5c', '#44566a', '#4e6078', '#3e5060', '#485a6e', '#52647c', '#384858', '#4c5e72', '#425468', '#566880',
     '#606e80', '#364050', '#505e70', '#5a6878', '#3c4e60', '#465a6c', '#546474', '#384a5a', '#4a5c6e', '#586878'],
    ['#4a3060', '#553a6a', '#604478', '#4e345e', '#5a3e68', '#644876', '#48305c', '#5c4070', '#523864', '#66507a',
     '#704880', '#3e2850', '#583868', '#6a4c7c', '#462c58', '#523a66', '#604474', '#3c2a52', '#564070', '#684e80'],
]


# Tag -> color fallback used by the scanner when a note has no color field
TAG_COLORS: Dict[str, str] = {
    '#red': '#f44336',
    '#blue': '#2196f3',
    '#green': '#4caf50',
    '#yellow': '#ffeb3b',
    '#purple': '#9c27b0',
    '#orange': '#ff9800',
    '#pink': '#e91e63',
    '#important': '#d32f2f',
    '#todo': '#ffb300',
}


def get_depth_palette(depth: int) -> List[str]:
    return DEPTH_PALETTES[max(0, min(depth, len(DEPTH_PALETTES) - 1))]


def palette_index(name: str, palette_size: int) -> int:
    """Index into a palette of ``palette_size`` colors for ``name``."""
    return hash_str(name) % palette_size


def pick_color(name: str, depth: int) -> str:
    """Cell color for a node without an explicit override."""
    palette = get_depth_palette(depth)
    return palette[palette_index(name, len(palette))]


def pick_planet_colors(name: str) -> PlanetColors:
    return PLANET_COLORS[palette_index(name, len(PLANET_COLORS))]

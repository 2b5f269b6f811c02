"""Tests for link overlays."""

import math

import numpy as np
import pytest

from vault_atlas.core.links import (
    PlanetLink, clamp_to_rim, link_targets, resolve_global_links, resolve_local_links,
)
from vault_atlas.core.voronoi_cells import VoronoiCell

CENTER = (0.0, 0.0)
RADIUS = 100.0


def make_cell(node, x, y):
    """A small square cell around (x, y)."""
    polygon = np.array([[x - 5, y - 5], [x + 5, y - 5], [x + 5, y + 5], [x - 5, y + 5]], dtype=float)
    return VoronoiCell(node=node, polygon=polygon, centroid=np.array([x, y]), area=100.0, color="#000")


class TestClampToRim:
    """Test foreign endpoint placement."""

    def test_projects_onto_rim(self):
        x, y = clamp_to_rim((10, 0), CENTER, RADIUS, 0.95)
        assert x == pytest.approx(95.0)
        assert y == pytest.approx(0.0)

    def test_direction_kept(self):
        x, y = clamp_to_rim((3, 4), CENTER, RADIUS, 1.0)
        assert math.hypot(x, y) == pytest.approx(100.0)
        assert y / x == pytest.approx(4 / 3)

    def test_center_point(self):
        assert clamp_to_rim(CENTER, CENTER, RADIUS) == (0.0, 0.0)


class TestLocalLinks:
    """Test connectors inside one planet view."""

    def test_local_and_foreign(self, forest, index):
        europe = forest[0].children[0]
        paris, berlin = europe.children
        cells = [make_cell(paris, -30, 0), make_cell(berlin, 30, 0)]
        segments = resolve_local_links(cells, index, CENTER, RADIUS, 0.95)

        local = [s for s in segments if not s.is_foreign]
        foreign = [s for s in segments if s.is_foreign]
        assert len(local) == 2
        assert {(s.source.id, s.target.id) for s in local} == {
            ("Earth/Europe/Paris.md", "Earth/Europe/Berlin.md"),
            ("Earth/Europe/Berlin.md", "Earth/Europe/Paris.md"),
        }
        assert len(foreign) == 1
        segment = foreign[0]
        assert segment.source.id == "Earth/Europe/Paris.md"
        assert segment.target.id == "Mars/Rover.md"
        assert segment.target.index == -1
        assert (segment.target.x, segment.target.y) == pytest.approx((-95.0, 0.0))

    def test_local_endpoints_are_centroids(self, forest, index):
        paris, berlin = forest[0].children[0].children
        cells = [make_cell(paris, -30, 0), make_cell(berlin, 30, 0)]
        segment = next(s for s in resolve_local_links(cells, index, CENTER, RADIUS) if not s.is_foreign)
        assert (segment.source.x, segment.source.y) == (-30.0, 0.0)
        assert (segment.target.x, segment.target.y) == (30.0, 0.0)
        assert segment.target.index == 1

    def test_target_below_cell_connects_to_cell(self, forest, index):
        """Links to notes nested inside a cell resolve to that cell."""
        earth = forest[0]
        europe, asia, notes = earth.children
        cells = [make_cell(europe, -40, 0), make_cell(asia, 0, 40), make_cell(notes, 40, 0)]
        segments = resolve_local_links(cells, index, CENTER, RADIUS)
        # Europe's links are Berlin and Paris (both inside itself) and Rover (Mars)
        assert len(segments) == 1
        assert segments[0].is_foreign
        assert segments[0].source.id == "Earth/Europe"

    def test_unresolved_dropped(self, forest, index):
        rover = forest[1].children[0]
        segments = resolve_local_links([make_cell(rover, 0, 0)], index, CENTER, RADIUS)
        assert [s.target.id for s in segments] == ["Earth/Europe/Paris.md"]
        assert segments[0].is_foreign

    def test_no_cells(self, index):
        assert resolve_local_links([], index, CENTER, RADIUS) == []


class TestGlobalLinks:
    """Test planet-to-planet counts."""

    def test_counts(self, forest, index):
        links = resolve_global_links(list(forest), index)
        # Earth -> Mars: Rover via Earth, Europe and Paris; Mars -> Earth: Paris via Mars and Rover
        assert links == [PlanetLink(source=0, target=1, count=5)]

    def test_single_planet(self, forest, index):
        assert resolve_global_links([forest[0]], index) == []

    def test_link_targets(self, forest, index):
        rover = forest[1].children[0]
        assert [t.id for t in link_targets(rover, index)] == ["Earth/Europe/Paris.md"]

"""
Application state for one open vault.

MapSession holds the only mutable state in the atlas: the current snapshot,
the navigation path, the camera, the cargo hold and the drag gesture. Each
field is replaced by a new value rather than edited in place, so readers
never see a half-updated tree.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import structlog

from ..config import settings
from ..vault.file_ops import OperationResult
from ..vault.obsidian import build_obsidian_url
from . import navigation
from .camera import CameraState, PanGesture
from .hierarchy import NodeIndex, TreeNode, TreeSnapshot
from .links import LinkSegment, PlanetLink, resolve_global_links, resolve_local_links
from .solar_system import PlanetGeometry, PlanetPlacement, layout_planets, planet_geometry
from .voronoi_cells import VoronoiCell, compute_voronoi_cells

logger = structlog.get_logger()

MOVE_FAILED_MESSAGE = "Failed to move node"

Mover = Callable[[str, str], OperationResult]
Rescanner = Callable[[], Optional[TreeSnapshot]]


class DragPhase(str, Enum):
    IDLE = "idle"
    PENDING = "pending"      # pointer down on a node, not picked up yet
    DRAGGING = "dragging"    # node picked up, following the pointer


@dataclass(frozen=True)
class DropIntent:
    source: TreeNode
    target: Optional[TreeNode]
    from_stash: bool


class DragController:
    """
    Press-and-hold drag gesture.

    A node is picked up when the pointer stays down for ``hold_delay_ms`` or
    moves further than ``distance_px`` from where it went down. Only the
    visual state changes until ``release``; the caller commits the drop.
    """

    def __init__(self, hold_delay_ms: Optional[int] = None, distance_px: Optional[float] = None):
        self.hold_delay_ms = settings.drag_hold_delay_ms if hold_delay_ms is None else hold_delay_ms
        self.distance_px = settings.drag_distance_px if distance_px is None else distance_px
        self._reset()

    def _reset(self) -> None:
        self.phase = DragPhase.IDLE
        self.node: Optional[TreeNode] = None
        self.from_stash = False
        self.drop_target: Optional[TreeNode] = None
        self.down_at: Tuple[float, float] = (0.0, 0.0)
        self.down_time_ms = 0.0
        self.position: Tuple[float, float] = (0.0, 0.0)

    @property
    def is_dragging(self) -> bool:
        return self.phase is DragPhase.DRAGGING

    def press(self, node: TreeNode, x: float, y: float, now_ms: float) -> None:
        self._reset()
        self.phase = DragPhase.PENDING
        self.node = node
        self.down_at = (x, y)
        self.down_time_ms = now_ms
        self.position = (x, y)

    def pick_from_stash(self, node: TreeNode, x: float = 0.0, y: float = 0.0) -> None:
        """Start dragging a node taken out of the cargo hold."""
        self._reset()
        self.phase = DragPhase.DRAGGING
        self.node = node
        self.from_stash = True
        self.position = (x, y)

    def poll(self, now_ms: float) -> bool:
        """Pick the pending node up once the hold delay has elapsed."""
        if self.phase is DragPhase.PENDING and now_ms - self.down_time_ms >= self.hold_delay_ms:
            self.phase = DragPhase.DRAGGING
        return self.is_dragging

    def move(self, x: float, y: float, now_ms: float) -> bool:
        """
        Track the pointer.

        Returns:
            True when the movement belongs to a drag (the caller should not pan)
        """
        self.poll(now_ms)
        if self.phase is DragPhase.PENDING:
            dx = x - self.down_at[0]
            dy = y - self.down_at[1]
            if abs(dx) > self.distance_px or abs(dy) > self.distance_px:
                self.phase = DragPhase.DRAGGING
        if self.is_dragging:
            self.position = (x, y)
            return True
        return False

    def enter(self, node: TreeNode) -> None:
        """Pointer entered ``node`` while dragging; groups other than the dragged node become the target."""
        if self.is_dragging and self.node is not None and node.id != self.node.id and not node.is_document:
            self.drop_target = node

    def leave(self) -> None:
        if self.is_dragging:
            self.drop_target = None

    def release(self) -> Optional[DropIntent]:
        """End the gesture. Returns what to commit, or None for a plain click."""
        intent = None
        if self.is_dragging and self.node is not None:
            intent = DropIntent(self.node, self.drop_target, self.from_stash)
        self._reset()
        return intent


@dataclass
class MapView:
    """Everything the renderer needs for one frame."""

    depth: int
    breadcrumbs: List[Tuple[str, int]]
    planets: List[PlanetPlacement] = field(default_factory=list)
    planet_links: List[PlanetLink] = field(default_factory=list)
    geometry: Optional[PlanetGeometry] = None
    cells: List[VoronoiCell] = field(default_factory=list)
    links: List[LinkSegment] = field(default_factory=list)

    @property
    def is_solar_system(self) -> bool:
        return self.depth == 0


class MapSession:
    """State of the map for one vault."""

    def __init__(self, snapshot: Optional[TreeSnapshot] = None, language: str = "en"):
        self.snapshot: Optional[TreeSnapshot] = None
        self.index = NodeIndex()
        self.path: navigation.NavigationPath = ()
        self.camera = CameraState()
        self.language = language
        self.error: Optional[str] = None
        self.stash: Tuple[TreeNode, ...] = ()
        self.drag = DragController()
        self.pan: Optional[PanGesture] = None
        if snapshot is not None:
            self.set_snapshot(snapshot)

    # --- Snapshot -----------------------------------------------------------

    @property
    def vault_path(self) -> Optional[str]:
        return self.snapshot.vault_path if self.snapshot else None

    @property
    def roots(self) -> Tuple[TreeNode, ...]:
        return self.snapshot.roots if self.snapshot else ()

    def set_snapshot(self, snapshot: TreeSnapshot) -> None:
        """
        Swap in a new scan.

        A different vault resets navigation; a rescan of the same vault
        re-resolves the path and the cargo hold against the new nodes.
        """
        same_vault = self.snapshot is not None and self.snapshot.vault_path == snapshot.vault_path
        if same_vault:
            path = navigation.reresolve_after_rescan(self.path, snapshot.roots)
            index = NodeIndex.from_roots(snapshot.roots)
            stash = tuple(index.get(n.id) for n in self.stash if index.get(n.id) is not None)
        else:
            path = ()
            index = NodeIndex.from_roots(snapshot.roots)
            stash = ()

        self.snapshot, self.index, self.path, self.stash = snapshot, index, path, stash
        logger.info("Snapshot applied", vault=snapshot.vault_name,
                    same_vault=same_vault, depth=len(path))

    # --- Navigation ---------------------------------------------------------

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def current_node(self) -> Optional[TreeNode]:
        return navigation.current_node(self.path)

    def node(self, node_id: str) -> Optional[TreeNode]:
        return self.index.get(node_id)

    def drill_down(self, node: TreeNode) -> bool:
        before = self.path
        self.path = navigation.drill_down(self.path, node)
        return self.path != before

    def go_back(self) -> None:
        self.path = navigation.go_back(self.path)

    def navigate_to_index(self, index: int) -> None:
        self.path = navigation.navigate_to_index(self.path, index)

    def jump_to(self, node: TreeNode) -> None:
        self.path = navigation.jump_to(self.path, node, self.roots)

    def restore_path(self, node_ids: Sequence[str]) -> None:
        self.path = navigation.path_from_ids(node_ids, self.roots)

    def breadcrumbs(self) -> List[Tuple[str, int]]:
        """``(label, index)`` pairs; index -1 is the vault root."""
        root_label = self.snapshot.vault_name if self.snapshot else ""
        crumbs = [(root_label, navigation.ROOT_INDEX)]
        crumbs.extend((node.name, i) for i, node in enumerate(self.path))
        return crumbs

    def activate(self, node: TreeNode) -> Optional[str]:
        """
        Click on a node: groups are entered, documents are handed off.

        Returns:
            The Obsidian URL to open for a document, else None
        """
        if node.is_empty:
            if node.is_document and node.relative_path and self.snapshot:
                return build_obsidian_url(self.snapshot.vault_name, node.relative_path)
            return None
        self.drill_down(node)
        return None

    # --- Camera -------------------------------------------------------------

    def zoom(self, delta: float) -> CameraState:
        self.camera = self.camera.zoomed(delta, settings.min_zoom, settings.max_zoom)
        return self.camera

    def begin_pan(self, x: float, y: float) -> None:
        self.pan = PanGesture(self.camera, x, y, settings.pan_threshold_px)

    def pan_to(self, x: float, y: float) -> CameraState:
        if self.pan is not None:
            self.camera = self.pan.move(self.camera, x, y)
        return self.camera

    def end_pan(self) -> bool:
        """Finish the pan. Returns True when the pointer moved far enough to swallow the click."""
        did_pan = self.pan is not None and self.pan.did_pan
        self.pan = None
        return did_pan

    # --- Cargo hold ---------------------------------------------------------

    def stash_node(self, node: TreeNode) -> None:
        if any(n.id == node.id for n in self.stash):
            return
        self.stash = self.stash + (node,)

    def unstash_node(self, node_id: str) -> None:
        self.stash = tuple(n for n in self.stash if n.id != node_id)

    def clear_stash(self) -> None:
        self.stash = ()

    # --- Drag and drop ------------------------------------------------------

    def finish_drag(self, mover: Mover, rescan: Rescanner) -> Optional[OperationResult]:
        """
        Commit the current drag gesture.

        Dropping on a group moves the file through ``mover`` and rescans on
        success; a failure only sets ``error``. Dropping on empty space puts
        a map node in the cargo hold. The tree itself is never edited here.
        """
        intent = self.drag.release()
        if intent is None:
            return None

        if intent.target is None:
            if not intent.from_stash:
                self.stash_node(intent.source)
            return None

        result = mover(intent.source.absolute_path, intent.target.absolute_path)
        if result.success:
            if intent.from_stash:
                self.unstash_node(intent.source.id)
            snapshot = rescan()
            if snapshot is not None:
                self.set_snapshot(snapshot)
        else:
            self.error = result.error or MOVE_FAILED_MESSAGE
        return result

    # --- Rendering ----------------------------------------------------------

    def view(self, width: float, height: float) -> MapView:
        """Compute the planets or cells, and their links, for the current path."""
        view = MapView(depth=self.depth, breadcrumbs=self.breadcrumbs())
        if width <= 0 or height <= 0:
            return view

        node = self.current_node
        if node is None:
            view.planets = layout_planets(self.roots, width, height)
            view.planet_links = resolve_global_links([p.node for p in view.planets], self.index)
            return view

        view.geometry = planet_geometry(width, height, settings.planet_radius_fraction)
        polygon = view.geometry.polygon(settings.circle_segments)
        view.cells = compute_voronoi_cells(
            polygon, node.children, self.depth,
            min_cell_area=settings.min_cell_area,
            max_attempts=settings.seed_attempts,
            epsilon=settings.intersection_epsilon,
            area_epsilon=settings.area_epsilon,
        )
        view.links = resolve_local_links(
            view.cells, self.index, view.geometry.center, view.geometry.radius,
            settings.foreign_link_fraction,
        )
        return view

    # --- Persistence --------------------------------------------------------

    def to_preferences(self) -> Dict[str, Any]:
        return {
            "vault_path": self.vault_path,
            "camera": {"x": self.camera.x, "y": self.camera.y, "scale": self.camera.scale},
            "language": self.language,
            "navigation": [n.id for n in self.path],
        }

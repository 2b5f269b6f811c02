"""Request/response models for the atlas API."""

from dataclasses import asdict
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from ..core.hierarchy import TreeNode
from ..core.links import LinkSegment, PlanetLink
from ..core.session import MapView
from ..core.solar_system import PlanetPlacement
from ..core.voronoi_cells import VoronoiCell, compute_label_size, total_cell_area


class OpenVaultRequest(BaseModel):
    """Request to open (scan) a vault folder."""

    path: str = Field(..., min_length=1, description="Absolute path of the vault folder")


class NodeRequest(BaseModel):
    node_id: str = Field(..., description="Id (relative path) of the node")


class BreadcrumbRequest(BaseModel):
    index: int = Field(..., ge=-1, description="Breadcrumb index, -1 for the vault root")


class ZoomRequest(BaseModel):
    delta: float = Field(..., gt=0, description="Multiplicative zoom factor")


class PointerRequest(BaseModel):
    x: float
    y: float


class RenameRequest(BaseModel):
    node_id: str
    new_name: str = Field(..., min_length=1)


class CreateNoteRequest(BaseModel):
    folder_id: Optional[str] = Field(None, description="Target folder id; defaults to the current region")
    name: str = Field(..., min_length=1)


class MoveRequest(BaseModel):
    source_id: str
    target_id: str


class NodeSummary(BaseModel):
    """A tree node without its children."""

    id: str
    name: str
    kind: str
    is_empty: bool
    child_count: int
    weight: float
    color: Optional[str] = None
    links: List[str] = []
    relative_path: str = ""
    preview: str = ""

    @classmethod
    def from_node(cls, node: TreeNode) -> "NodeSummary":
        return cls(
            id=node.id,
            name=node.name,
            kind=node.kind.value,
            is_empty=node.is_empty,
            child_count=len(node.children),
            weight=node.weight,
            color=node.color,
            links=list(node.links),
            relative_path=node.relative_path,
            preview=getattr(node, "preview", ""),
        )


class CellModel(BaseModel):
    node: NodeSummary
    polygon: List[Tuple[float, float]]
    centroid: Tuple[float, float]
    area: float
    color: str
    label_size: float


class PlanetModel(BaseModel):
    node: NodeSummary
    cx: float
    cy: float
    radius: float
    base: str
    glow: str
    accent: str


class EndpointModel(BaseModel):
    x: float
    y: float
    id: str
    index: int


class LinkModel(BaseModel):
    source: EndpointModel
    target: EndpointModel
    is_foreign: bool


class PlanetLinkModel(BaseModel):
    source: int
    target: int
    count: int


class Breadcrumb(BaseModel):
    label: str
    index: int


class RegionModel(BaseModel):
    cx: float
    cy: float
    radius: float


class NavigationResponse(BaseModel):
    depth: int
    path: List[NodeSummary]
    breadcrumbs: List[Breadcrumb]


class MapViewResponse(BaseModel):
    """Everything needed to draw the current view."""

    vault_name: Optional[str]
    depth: int
    breadcrumbs: List[Breadcrumb]
    planets: List[PlanetModel] = []
    planet_links: List[PlanetLinkModel] = []
    region: Optional[RegionModel] = None
    cells: List[CellModel] = []
    links: List[LinkModel] = []
    error: Optional[str] = None


class ActivateResponse(BaseModel):
    action: str  # "open", "drill" or "none"
    url: Optional[str] = None
    navigation: Optional[NavigationResponse] = None


class SearchResultModel(BaseModel):
    node: NodeSummary
    path_descriptor: str
    match_score: int
    is_folder: bool


class OperationResponse(BaseModel):
    success: bool
    error: Optional[str] = None


def _cell_model(cell: VoronoiCell, total_area: float, radius: float) -> CellModel:
    return CellModel(
        node=NodeSummary.from_node(cell.node),
        polygon=[(float(x), float(y)) for x, y in cell.polygon],
        centroid=(float(cell.centroid[0]), float(cell.centroid[1])),
        area=cell.area,
        color=cell.color,
        label_size=compute_label_size(cell.area, total_area, radius),
    )


def _planet_model(planet: PlanetPlacement) -> PlanetModel:
    return PlanetModel(
        node=NodeSummary.from_node(planet.node),
        cx=planet.cx,
        cy=planet.cy,
        radius=planet.radius,
        base=planet.colors.base,
        glow=planet.colors.glow,
        accent=planet.colors.accent,
    )


def _link_model(link: LinkSegment) -> LinkModel:
    return LinkModel(
        source=EndpointModel(**asdict(link.source)),
        target=EndpointModel(**asdict(link.target)),
        is_foreign=link.is_foreign,
    )


def _planet_link_model(link: PlanetLink) -> PlanetLinkModel:
    return PlanetLinkModel(source=link.source, target=link.target, count=link.count)


def map_view_response(view: MapView, vault_name: Optional[str], error: Optional[str]) -> MapViewResponse:
    total_area = total_cell_area(view.cells)
    radius = view.geometry.radius if view.geometry else 0.0
    return MapViewResponse(
        vault_name=vault_name,
        depth=view.depth,
        breadcrumbs=[Breadcrumb(label=label, index=i) for label, i in view.breadcrumbs],
        planets=[_planet_model(p) for p in view.planets],
        planet_links=[_planet_link_model(link) for link in view.planet_links],
        region=RegionModel(cx=view.geometry.cx, cy=view.geometry.cy, radius=radius) if view.geometry else None,
        cells=[_cell_model(c, total_area, radius) for c in view.cells],
        links=[_link_model(link) for link in view.links],
        error=error,
    )

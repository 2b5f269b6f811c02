"""GeoJSON export of the current tessellation."""

from typing import Any, Dict, Sequence

from shapely.geometry import Point, Polygon, mapping

from ..core.voronoi_cells import VoronoiCell


def cell_to_feature(cell: VoronoiCell, index: int) -> Dict[str, Any]:
    """One cell as a GeoJSON Feature; the centroid goes in the properties."""
    polygon = Polygon([(float(x), float(y)) for x, y in cell.polygon])
    return {
        "type": "Feature",
        "geometry": mapping(polygon),
        "properties": {
            "index": index,
            "id": cell.node.id,
            "name": cell.node.name,
            "kind": cell.node.kind.value,
            "color": cell.color,
            "area": cell.area,
            "centroid": mapping(Point(float(cell.centroid[0]), float(cell.centroid[1])))["coordinates"],
        },
    }


def cells_to_feature_collection(cells: Sequence[VoronoiCell]) -> Dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [cell_to_feature(cell, i) for i, cell in enumerate(cells)],
    }

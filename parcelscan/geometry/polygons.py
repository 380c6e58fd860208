"""
Polygon parsing and ring utilities

Common geometry handling for lot, zoning and footprint shapes
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple

from shapely import wkt
from shapely.errors import ShapelyError
from shapely.geometry import MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import LinearRing, orient

from ..errors import DegenerateGeometryError, ParseError


def parse_polygon(source: str) -> MultiPolygon:
    """
    Parse a WKT geometry into a MultiPolygon

    Single POLYGONs are promoted to one-part multipolygons; any other
    geometry type is rejected.

    Raises:
        ParseError: malformed WKT, wrong geometry type, or a ring with
            fewer than 3 distinct vertices
    """
    if not source or not source.strip():
        raise ParseError("Empty geometry")

    try:
        geometry = wkt.loads(source)
    except (ShapelyError, ValueError) as e:
        raise ParseError(f"Could not parse WKT: {e}") from e

    if isinstance(geometry, Polygon):
        geometry = MultiPolygon([geometry])
    elif not isinstance(geometry, MultiPolygon):
        raise ParseError(f"Expected MULTIPOLYGON, got {geometry.geom_type}")

    if geometry.is_empty:
        raise ParseError("Multipolygon has no polygons")

    for polygon in geometry.geoms:
        _validate_ring(polygon.exterior)
        for interior in polygon.interiors:
            _validate_ring(interior)

    return geometry


def _validate_ring(ring: LinearRing) -> None:
    distinct = set(ring.coords)
    if len(distinct) < 3:
        raise ParseError(f"Ring has {len(distinct)} distinct vertices, need at least 3")


def ccw_exterior(polygon: Polygon) -> List[Tuple[float, float]]:
    """Exterior ring vertices, counter-clockwise, without the closing vertex"""
    oriented = orient(polygon, sign=1.0)
    coords = list(oriented.exterior.coords)
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords = coords[:-1]
    return [(x, y) for x, y, *_ in coords]


def exterior_points(multi_polygon: MultiPolygon) -> Iterator[Tuple[float, float]]:
    """Every exterior-ring vertex of every polygon part"""
    for polygon in multi_polygon.geoms:
        for x, y, *_ in polygon.exterior.coords:
            yield (x, y)


def centroid(geometry: BaseGeometry) -> Point:
    """
    Centroid of a geometry

    Raises:
        DegenerateGeometryError: the geometry has no vertices
    """
    if geometry.is_empty:
        raise DegenerateGeometryError("Geometry has no vertices, centroid undefined")
    point = geometry.centroid
    if point.is_empty:
        raise DegenerateGeometryError("Centroid computation failed")
    return point


def to_geojson(multi_polygon: MultiPolygon) -> Dict[str, Any]:
    """GeoJSON MultiPolygon geometry with exterior rings only"""
    return {
        "type": "MultiPolygon",
        "coordinates": [
            [[[x, y] for x, y, *_ in polygon.exterior.coords]]
            for polygon in multi_polygon.geoms
        ]
    }


def feature(geometry: Dict[str, Any], name: str, properties: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Wrap a GeoJSON geometry into a named Feature"""
    return {
        "type": "Feature",
        "geometry": geometry,
        "properties": {"name": name, **(properties or {})}
    }


def point_geojson(point: Point) -> Dict[str, Any]:
    return {"type": "Point", "coordinates": [point.x, point.y]}

"""
Geometry handling: WKT parsing, ring utilities and planar projection
"""

from .polygons import parse_polygon, ccw_exterior, exterior_points, centroid
from .projection import CoordinateProjector

__all__ = [
    "parse_polygon",
    "ccw_exterior",
    "exterior_points",
    "centroid",
    "CoordinateProjector",
]

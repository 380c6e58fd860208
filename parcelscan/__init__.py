"""
parcelscan: spatial joins between building footprints, lots and zoning

Implements the lot analysis engine:
- SpatialIndex: read-only R-tree over polygon records
- EdgeClassifier: front / side / rear lot edges from lot adjacency
- SetbackComputer: footprint clearance to each classified lot edge
- NeighborhoodQuery: lots within a radius of a site
- ZoningLookup: zoning district covering a footprint
"""

from .errors import ParcelScanError, ParseError, ProjectionError, DegenerateGeometryError
from .geometry import CoordinateProjector, parse_polygon
from .index import BoundingEnvelope, IndexedRecord, SpatialIndex
from .analysis import (
    Edge, EdgeClassification, EdgeClassifier, SetbackComputer, SetbackMeasurement,
    NeighborhoodQuery, ZoningLookup
)

__version__ = "0.1.0"

__all__ = [
    "ParcelScanError",
    "ParseError",
    "ProjectionError",
    "DegenerateGeometryError",
    "CoordinateProjector",
    "parse_polygon",
    "BoundingEnvelope",
    "IndexedRecord",
    "SpatialIndex",
    "Edge",
    "EdgeClassification",
    "EdgeClassifier",
    "SetbackComputer",
    "SetbackMeasurement",
    "NeighborhoodQuery",
    "ZoningLookup",
]

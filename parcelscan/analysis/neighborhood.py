"""
Radius-bounded neighbor query over an indexed dataset
"""

from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, Tuple, TypeVar

from loguru import logger
from shapely.geometry import MultiPolygon, Point

from ..geometry.polygons import centroid
from ..geometry.projection import CoordinateProjector
from ..index.spatial_index import BoundingEnvelope, SpatialIndex

P = TypeVar("P")


@dataclass(frozen=True)
class NeighborhoodSummary:
    """Density statistics over a set of neighboring lots"""
    count: int
    residential_units: int
    building_sqft: float
    mean_unit_size_sqft: Optional[float]


class NeighborhoodQuery(Generic[P]):
    """
    Finds indexed records whose centroid lies within a radius of a shape

    Two-phase filter: a square box of half-width `radius_ft` (reverse
    projected to degrees) selects candidates by envelope, then the planar
    centroid-to-centroid distance decides. Records overlapping the query
    shape's centroid, or whose centroid falls inside the shape, are
    treated as the shape itself and excluded.
    """

    def __init__(self, index: SpatialIndex[P], projector: CoordinateProjector):
        self.index = index
        self.projector = projector

    def query(self, shape: MultiPolygon, radius_ft: float) -> List[P]:
        """
        Payloads of neighbors within radius_ft of the shape's centroid

        Args:
            shape: Query multipolygon in degrees
            radius_ft: Search radius in feet (exclusive)

        Raises:
            ProjectionError: shape or candidate could not be projected
            DegenerateGeometryError: shape has no vertices
        """
        center_ft = centroid(self.projector.project_geometry(shape))
        center = Point(self.projector.inverse((center_ft.x, center_ft.y)))

        envelope = self.search_envelope((center_ft.x, center_ft.y), radius_ft)

        neighbors = []
        candidates = 0
        for record in self.index.locate_in_envelope_intersecting(envelope):
            candidates += 1
            other_ft = centroid(self.projector.project_geometry(record.geometry))
            other = Point(self.projector.inverse((other_ft.x, other_ft.y)))

            # Skip the query shape's own record
            if shape.contains(other) or record.geometry.contains(center):
                continue
            if center_ft.distance(other_ft) < radius_ft:
                neighbors.append(record.payload)

        logger.debug(f"Neighbor query r={radius_ft}ft: {candidates} candidates, {len(neighbors)} within radius")
        return neighbors

    def search_envelope(self, center_ft: Tuple[float, float], radius_ft: float) -> BoundingEnvelope:
        """
        Degree-space bounds of the square of half-width radius_ft around a
        point in feet

        All four corners are reverse projected; away from the reference
        meridian the square is not axis-aligned in degrees.
        """
        x, y = center_ft
        corners = [
            (x - radius_ft, y - radius_ft),
            (x + radius_ft, y - radius_ft),
            (x + radius_ft, y + radius_ft),
            (x - radius_ft, y + radius_ft),
        ]
        return BoundingEnvelope.from_points(self.projector.inverse(corner) for corner in corners)

    @staticmethod
    def summarize(neighbors: Sequence[P]) -> NeighborhoodSummary:
        """Sum residential units and building area over neighbor lots"""
        units = sum(getattr(n, "resunits", 0) or 0 for n in neighbors)
        sqft = float(sum(getattr(n, "bldgsqft", 0) or 0 for n in neighbors))
        return NeighborhoodSummary(
            count=len(neighbors),
            residential_units=units,
            building_sqft=sqft,
            mean_unit_size_sqft=sqft / units if units > 0 else None
        )

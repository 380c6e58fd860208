"""
Zoning district lookup by footprint centroid
"""

from typing import Generic, Optional, TypeVar

from loguru import logger
from shapely.geometry import MultiPolygon

from ..geometry.projection import CoordinateProjector
from ..index.spatial_index import SpatialIndex

Z = TypeVar("Z")


class ZoningLookup(Generic[Z]):
    """Point-in-polygon lookup of the zoning district covering a shape"""

    def __init__(self, index: SpatialIndex[Z], projector: CoordinateProjector):
        self.index = index
        self.projector = projector

    def lookup(self, shape: MultiPolygon) -> Optional[Z]:
        """
        Zoning district containing the shape's centroid, or None

        The centroid is taken in feet, since degree-space centroids drift
        by tens of feet. Unzoned gaps and shapes without vertices are misses.

        Raises:
            ProjectionError: the shape could not be projected
        """
        if shape.is_empty:
            return None
        center_ft = self.projector.project_geometry(shape).centroid
        if center_ft.is_empty:
            return None

        record = self.index.locate_at_point(self.projector.inverse((center_ft.x, center_ft.y)))
        if record is None:
            logger.debug(f"No zoning district at ({center_ft.x:.1f}, {center_ft.y:.1f})ft")
            return None
        return record.payload

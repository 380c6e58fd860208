"""
Lot edge classifier

Classifies each exterior edge of a lot into front, side or rear using only
the adjacency of other indexed lots. No street centerline data is used.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from loguru import logger
from shapely.geometry import MultiPolygon

from ..config import ClassifierConfig
from ..geometry.polygons import ccw_exterior
from ..geometry.projection import CoordinateProjector
from ..index.spatial_index import SpatialIndex
from .geometry_utils import GeometryUtils


class EdgeClassification(Enum):
    """Lot edge types"""
    FRONT = "front"
    SIDE = "side"
    REAR = "rear"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class Edge:
    """One exterior-ring edge of a lot, in feet"""
    start: Tuple[float, float]
    end: Tuple[float, float]
    classification: EdgeClassification
    polygon_index: int = 0
    edge_index: int = 0

    @property
    def length_ft(self) -> float:
        return GeometryUtils.length(GeometryUtils.subtract(self.end, self.start))


class EdgeClassifier:
    """
    Labels lot edges by street adjacency

    Algorithm, per polygon part with its exterior ring wound CCW:
    1. Project edge start, end and the following vertex to feet
    2. Take the component of (next - end) perpendicular to (end - start);
       its unit vector is the inward normal when the edge ends on a convex
       vertex
    3. Place a probe at the edge midpoint minus normal * probe distance,
       i.e. just outside the lot for such edges
    4. Reverse project the probe and look it up in the lot index; the edge
       faces the street when no lot is found there
    5. FRONT if the edge faces the street, SIDE if either cyclic neighbour
       does, REAR otherwise

    This is a heuristic: any unindexed space next to a lot is treated as
    public right-of-way, which is wrong next to undeveloped land, easements
    or gaps in the data. Edges whose turn component has no length
    (collinear consecutive edges) cannot be oriented and are INDETERMINATE.

    An edge that ends on a reflex vertex gets an outward normal, so its
    probe lands inside the lot and the edge never reads as FRONT. In an
    L-shaped lot the edge leading into the inner corner comes out SIDE (or
    REAR) even when it faces open space.
    """

    def __init__(self, projector: CoordinateProjector, config: ClassifierConfig = None):
        self.projector = projector
        self.config = config or ClassifierConfig()

    def classify(self, lot: MultiPolygon, index: SpatialIndex[Any]) -> List[Edge]:
        """
        Classify every exterior edge of every polygon of the lot

        Args:
            lot: Lot multipolygon in degrees
            index: Spatial index holding all lots (including this one)

        Returns:
            One Edge per exterior edge, in ring order

        Raises:
            ProjectionError: a vertex or probe point could not be projected
        """
        edges: List[Edge] = []
        for polygon_index, polygon in enumerate(lot.geoms):
            ring_ft = [self.projector.forward(pt) for pt in ccw_exterior(polygon)]
            faces_street = self._edges_facing_street(ring_ft, index)
            edges.extend(
                self._annotate(ring_ft, faces_street, polygon_index)
            )

        logger.debug(f"Classified {len(edges)} lot edges: {[edge.classification.value for edge in edges]}")
        return edges

    def _edges_facing_street(
        self,
        ring_ft: List[Tuple[float, float]],
        index: SpatialIndex[Any]
    ) -> List[Optional[bool]]:
        """Per edge: True/False for street adjacency, None when orientation is indeterminate"""
        n = len(ring_ft)
        faces_street: List[Optional[bool]] = []

        for i in range(n):
            start_ft = ring_ft[i]
            end_ft = ring_ft[(i + 1) % n]
            next_ft = ring_ft[(i + 2) % n]

            vector = GeometryUtils.subtract(end_ft, start_ft)
            next_vector = GeometryUtils.subtract(next_ft, end_ft)
            if GeometryUtils.length(vector) <= self.config.degenerate_tolerance_ft:
                logger.debug(f"Edge {i} has zero length; orientation indeterminate")
                faces_street.append(None)
                continue

            perpendicular = GeometryUtils.perpendicular_component(next_vector, vector)
            normal = GeometryUtils.unit_vector(perpendicular, self.config.degenerate_tolerance_ft)
            if normal is None:
                logger.debug(f"Edge {i} is collinear with the next edge; orientation indeterminate")
                faces_street.append(None)
                continue

            # CCW winding: the turn points inward, so subtracting moves outside
            mid_x, mid_y = GeometryUtils.midpoint(start_ft, end_ft)
            probe_ft = (
                mid_x - normal[0] * self.config.probe_distance_ft,
                mid_y - normal[1] * self.config.probe_distance_ft
            )
            probe = self.projector.inverse(probe_ft)
            faces_street.append(index.locate_at_point(probe) is None)

        return faces_street

    @staticmethod
    def _annotate(
        ring_ft: List[Tuple[float, float]],
        faces_street: List[Optional[bool]],
        polygon_index: int
    ) -> List[Edge]:
        n = len(faces_street)
        edges = []
        for i in range(n):
            if faces_street[i] is None:
                classification = EdgeClassification.INDETERMINATE
            elif faces_street[i]:
                classification = EdgeClassification.FRONT
            elif faces_street[(i + 1) % n] or faces_street[(i - 1) % n]:
                classification = EdgeClassification.SIDE
            else:
                classification = EdgeClassification.REAR
            edges.append(Edge(
                start=ring_ft[i],
                end=ring_ft[(i + 1) % n],
                classification=classification,
                polygon_index=polygon_index,
                edge_index=i
            ))
        return edges

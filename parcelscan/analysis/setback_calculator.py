"""
Setback calculator

Measures the clearance between a building footprint and each classified
lot edge. All distances are in feet.
"""

from dataclasses import dataclass
from typing import List, Sequence

from shapely.geometry import LineString, MultiPolygon, Point

from ..config import SETBACK_METHODS, SetbackConfig
from ..errors import DegenerateGeometryError
from ..geometry.polygons import exterior_points
from .edge_classifier import Edge, EdgeClassification
from .geometry_utils import GeometryUtils


@dataclass(frozen=True)
class SetbackMeasurement:
    """Clearance from a footprint to one lot edge"""
    classification: EdgeClassification
    distance_ft: float


class SetbackComputer:
    """
    Computes per-edge setbacks of a building footprint

    The default "vertex" method takes, for each lot edge, the minimum
    distance from the edge segment to every exterior vertex of the
    footprint. It can overstate clearance when a footprint edge bows toward
    the lot line between two vertices. The "segment" method measures the
    edge against the footprint exterior rings themselves.
    """

    def __init__(self, config: SetbackConfig = None):
        self.config = config or SetbackConfig()
        if self.config.method not in SETBACK_METHODS:
            raise ValueError(f"Unknown setback method {self.config.method!r}")

    def compute(self, edges: Sequence[Edge], footprint_ft: MultiPolygon) -> List[SetbackMeasurement]:
        """
        Setback per lot edge, in edge order

        Args:
            edges: Classified lot edges (feet)
            footprint_ft: Building footprint projected to feet

        Raises:
            DegenerateGeometryError: the footprint has no exterior vertices
        """
        vertices = list(exterior_points(footprint_ft))
        if not vertices:
            raise DegenerateGeometryError("Footprint has no vertices; cannot measure setbacks")

        if self.config.method == "segment":
            rings = [polygon.exterior for polygon in footprint_ft.geoms]
            return [
                SetbackMeasurement(edge.classification, self._segment_distance(edge, rings))
                for edge in edges
            ]

        return [
            SetbackMeasurement(
                edge.classification,
                min(GeometryUtils.distance_point_to_line(v, edge.start, edge.end) for v in vertices)
            )
            for edge in edges
        ]

    @staticmethod
    def _segment_distance(edge: Edge, rings) -> float:
        line = Point(edge.start) if edge.start == edge.end else LineString([edge.start, edge.end])
        return min(line.distance(ring) for ring in rings)

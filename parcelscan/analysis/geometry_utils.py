"""
Planar vector utilities for edge and distance calculations

All inputs are (x, y) tuples in feet.
"""

import math
from typing import Optional, Tuple

Vec = Tuple[float, float]


class GeometryUtils:
    """Utility functions for planar geometric operations"""

    @staticmethod
    def subtract(a: Vec, b: Vec) -> Vec:
        return (a[0] - b[0], a[1] - b[1])

    @staticmethod
    def dot(a: Vec, b: Vec) -> float:
        return a[0] * b[0] + a[1] * b[1]

    @staticmethod
    def length(v: Vec) -> float:
        return math.hypot(v[0], v[1])

    @staticmethod
    def midpoint(start: Vec, end: Vec) -> Vec:
        return ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)

    @staticmethod
    def perpendicular_component(vector: Vec, reference: Vec) -> Vec:
        """
        Part of `vector` perpendicular to `reference`

        vector - reference * (vector . reference) / |reference|^2
        """
        ref_len_sq = reference[0] * reference[0] + reference[1] * reference[1]
        if ref_len_sq == 0:
            return vector
        scale = GeometryUtils.dot(vector, reference) / ref_len_sq
        return (vector[0] - reference[0] * scale, vector[1] - reference[1] * scale)

    @staticmethod
    def unit_vector(v: Vec, tolerance: float = 0.0) -> Optional[Vec]:
        """Normalised vector, or None when its length is within tolerance of zero"""
        length = math.hypot(v[0], v[1])
        if length <= tolerance or not math.isfinite(length):
            return None
        return (v[0] / length, v[1] / length)

    @staticmethod
    def distance_point_to_line(
        point: Vec,
        line_start: Vec,
        line_end: Vec
    ) -> float:
        """Calculate perpendicular distance from point to line segment"""
        px, py = point
        x1, y1 = line_start
        x2, y2 = line_end

        dx = x2 - x1
        dy = y2 - y1

        if dx == 0 and dy == 0:
            # Line is a point
            return math.hypot(px - x1, py - y1)

        # Parameter t for closest point on line
        t = max(0.0, min(1.0, ((px - x1) * dx + (py - y1) * dy) / (dx * dx + dy * dy)))

        closest_x = x1 + t * dx
        closest_y = y1 + t * dy

        return math.hypot(px - closest_x, py - closest_y)


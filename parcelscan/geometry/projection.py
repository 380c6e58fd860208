"""
Coordinate projection between geodetic degrees and local planar feet

All distance and area math in the engine happens in the planar (feet) space.
"""

import math
import threading
from typing import Tuple

import numpy as np
from loguru import logger
from pyproj import Transformer
from pyproj.enums import TransformDirection
from pyproj.exceptions import ProjError
import shapely
from shapely.geometry.base import BaseGeometry

from ..config import ProjectionConfig
from ..errors import ProjectionError

Point2D = Tuple[float, float]


class CoordinateProjector:
    """
    Projects [lon, lat] degrees to [x, y] US survey feet and back

    Uses an azimuthal equidistant projection centred on a fixed reference
    point. The projector is an immutable value: pass the same instance to
    every component that needs it. pyproj transformers are not thread-safe,
    so each thread lazily builds its own from the shared pipeline string.
    """

    def __init__(self, config: ProjectionConfig = None):
        self.config = config or ProjectionConfig()
        self._pipeline = self.config.pipeline()
        self._local = threading.local()
        # Fail at construction time rather than on the first record
        self._transformer()
        logger.debug(f"Created projection {self._pipeline}")

    def __repr__(self) -> str:
        return f"CoordinateProjector(lat_0={self.config.lat_0}, lon_0={self.config.lon_0})"

    def _transformer(self) -> Transformer:
        transformer = getattr(self._local, "transformer", None)
        if transformer is None:
            try:
                transformer = Transformer.from_pipeline(self._pipeline)
            except ProjError as e:
                raise ProjectionError(f"Invalid projection pipeline: {e}") from e
            self._local.transformer = transformer
        return transformer

    def _transform(self, x, y, direction: TransformDirection):
        try:
            out_x, out_y = self._transformer().transform(x, y, direction=direction, errcheck=True)
        except ProjError as e:
            raise ProjectionError(f"Projection failed on ({x}, {y}): {e}") from e
        if not (np.all(np.isfinite(out_x)) and np.all(np.isfinite(out_y))):
            raise ProjectionError(f"Projection produced non-finite coordinates for ({x}, {y})")
        return out_x, out_y

    def forward(self, point: Point2D) -> Point2D:
        """Project a (lon, lat) point in degrees to (x, y) feet"""
        lon, lat = point
        if not (math.isfinite(lon) and math.isfinite(lat)) or abs(lat) > 90.0 or abs(lon) > 180.0:
            raise ProjectionError(f"Coordinate out of domain: ({lon}, {lat})")
        x, y = self._transform(lon, lat, TransformDirection.FORWARD)
        return (float(x), float(y))

    def inverse(self, point: Point2D) -> Point2D:
        """Reverse project an (x, y) point in feet to (lon, lat) degrees"""
        x, y = point
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ProjectionError(f"Coordinate out of domain: ({x}, {y})")
        lon, lat = self._transform(x, y, TransformDirection.INVERSE)
        return (float(lon), float(lat))

    def _transform_coords(self, coords: np.ndarray, direction: TransformDirection) -> np.ndarray:
        """Transform an (N, 2) coordinate array in one pyproj call"""
        if len(coords) == 0:
            return coords
        out_x, out_y = self._transform(coords[:, 0], coords[:, 1], direction)
        return np.column_stack([out_x, out_y])

    def project_geometry(self, geometry: BaseGeometry) -> BaseGeometry:
        """Project every coordinate of a degree-space geometry to feet"""
        return shapely.transform(geometry, lambda coords: self._transform_coords(coords, TransformDirection.FORWARD))

    def unproject_geometry(self, geometry: BaseGeometry) -> BaseGeometry:
        """Reverse project every coordinate of a feet-space geometry to degrees"""
        return shapely.transform(geometry, lambda coords: self._transform_coords(coords, TransformDirection.INVERSE))

"""
Read-only R-tree over polygon records

Bulk-loaded once per dataset (Sort-Tile-Recursive packing via shapely's
STRtree), then shared between worker threads for concurrent queries.
"""

from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
from loguru import logger
from shapely.geometry import MultiPolygon, Point, box
from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

P = TypeVar("P")


@dataclass(frozen=True)
class BoundingEnvelope:
    """Axis-aligned bounding box in the coordinate space of its index"""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_geometry(cls, geometry: BaseGeometry) -> "BoundingEnvelope":
        min_x, min_y, max_x, max_y = geometry.bounds
        return cls(min_x, min_y, max_x, max_y)

    @classmethod
    def from_corners(cls, a: Tuple[float, float], b: Tuple[float, float]) -> "BoundingEnvelope":
        """Envelope spanned by any two opposite corners"""
        return cls(min(a[0], b[0]), min(a[1], b[1]), max(a[0], b[0]), max(a[1], b[1]))

    @classmethod
    def from_points(cls, points: Iterable[Tuple[float, float]]) -> "BoundingEnvelope":
        """Smallest envelope holding every point"""
        xs, ys = zip(*points)
        return cls(min(xs), min(ys), max(xs), max(ys))

    def intersects(self, other: "BoundingEnvelope") -> bool:
        return (
            self.min_x <= other.max_x and other.min_x <= self.max_x
            and self.min_y <= other.max_y and other.min_y <= self.max_y
        )

    def contains_point(self, point: Tuple[float, float]) -> bool:
        x, y = point
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def to_box(self):
        return box(self.min_x, self.min_y, self.max_x, self.max_y)


@dataclass(frozen=True)
class IndexedRecord(Generic[P]):
    """A multipolygon, its bounding envelope and an opaque payload"""
    geometry: MultiPolygon
    envelope: BoundingEnvelope
    payload: P

    @classmethod
    def wrap(cls, geometry: MultiPolygon, payload: P) -> "IndexedRecord[P]":
        return cls(geometry, BoundingEnvelope.from_geometry(geometry), payload)


class SpatialIndex(Generic[P]):
    """
    Immutable spatial index over IndexedRecords

    Usage:
        index = SpatialIndex.build(records)
        record = index.locate_at_point((lon, lat))
        for record in index.locate_in_envelope_intersecting(envelope):
            ...
    """

    def __init__(self, records: Sequence[IndexedRecord[P]], name: str = "records"):
        self.name = name
        self._records: Tuple[IndexedRecord[P], ...] = tuple(records)
        self._tree: Optional[STRtree] = None
        if self._records:
            self._tree = STRtree([record.geometry for record in self._records])

    @classmethod
    def build(cls, records: Iterable[IndexedRecord[P]], name: str = "records") -> "SpatialIndex[P]":
        """Bulk-load an index; it cannot be modified afterwards"""
        records = list(records)
        logger.info(f"Bulk loading {len(records)} {name} into spatial index")
        return cls(records, name=name)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[IndexedRecord[P]]:
        return iter(self._records)

    def _query(self, geometry: BaseGeometry, predicate: Optional[str] = None) -> List[int]:
        if self._tree is None:
            return []
        # STRtree returns tree positions in arbitrary order
        return sorted(int(i) for i in np.atleast_1d(self._tree.query(geometry, predicate=predicate)))

    def locate_at_point(self, point: Tuple[float, float]) -> Optional[IndexedRecord[P]]:
        """
        Record whose polygon contains the point, or None

        Points on a polygon boundary do not match. If several polygons
        contain the point, the one loaded first is returned and the overlap
        is reported as a data-quality warning.
        """
        hits = self._query(Point(point), predicate="within")
        if not hits:
            return None
        if len(hits) > 1:
            logger.warning(
                f"Overlapping {self.name}: {len(hits)} polygons contain point "
                f"({point[0]:.7f}, {point[1]:.7f}); using the first loaded"
            )
        return self._records[hits[0]]

    def locate_in_envelope_intersecting(self, envelope: BoundingEnvelope) -> Iterator[IndexedRecord[P]]:
        """
        Records whose envelope intersects the query box

        This is a coarse pre-filter, not an exact geometric intersection.
        """
        for i in self._query(envelope.to_box()):
            yield self._records[i]

    def nearest(self, point: Tuple[float, float]) -> Optional[IndexedRecord[P]]:
        """Record geometrically nearest to the point (distance 0 when inside)"""
        if self._tree is None:
            return None
        return self._records[int(self._tree.nearest(Point(point)))]

    @staticmethod
    def distance_to(record: IndexedRecord[P], point: Tuple[float, float]) -> float:
        """Distance from the point to the record polygon in index units, 0 when contained"""
        return record.geometry.distance(Point(point))

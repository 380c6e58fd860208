"""
Spatial indexing of polygon records
"""

from .spatial_index import BoundingEnvelope, IndexedRecord, SpatialIndex

__all__ = [
    "BoundingEnvelope",
    "IndexedRecord",
    "SpatialIndex",
]

"""
Error types raised by the parcelscan engine

A spatial lookup that finds nothing is not an error; lookups return None.
"""

from typing import Optional


class ParcelScanError(Exception):
    """Base class for per-record data errors"""


class ParseError(ParcelScanError):
    """Malformed geometry or dataset row"""

    def __init__(self, message: str, row: Optional[int] = None):
        self.row = row
        if row is not None:
            message = f"row {row}: {message}"
        super().__init__(message)


class ProjectionError(ParcelScanError):
    """Coordinate rejected by the projection pipeline"""


class DegenerateGeometryError(ParcelScanError):
    """Geometry with no vertices, or a zero-length edge where one is required"""

"""
Dataset readers

Loads the land use (lots), zoning district and building footprint CSV
exports into validated records and spatial indices.
"""

from .reader import iter_rows, parse_row, read_records, record_geometry, load_index

__all__ = [
    "iter_rows",
    "parse_row",
    "read_records",
    "record_geometry",
    "load_index",
]

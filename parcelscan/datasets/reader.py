"""
CSV dataset readers

Each dataset is a CSV export with one WKT geometry column per row.
"""

import csv
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple, Type, TypeVar, Union

from loguru import logger
from pydantic import BaseModel, ValidationError
from shapely.geometry import MultiPolygon

from ..errors import ParseError
from ..geometry.polygons import parse_polygon
from ..index.spatial_index import IndexedRecord, SpatialIndex

M = TypeVar("M", bound=BaseModel)

# WKT for large lots easily exceeds the csv module's default field limit
csv.field_size_limit(2 ** 31 - 1)


def iter_rows(path: Union[str, Path]) -> Iterator[Tuple[int, Dict[str, Any]]]:
    """Yield (row number, raw row) for every data row, counting from 1"""
    with open(path, "r", newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        for row_number, row in enumerate(reader, 1):
            yield row_number, row


def parse_row(row: Dict[str, Any], model: Type[M], row_number: Optional[int] = None) -> M:
    """
    Validate a raw row into a record

    Raises:
        ParseError: the row does not match the model
    """
    try:
        return model.model_validate(row)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ParseError(f"invalid {model.__name__} field {field!r}: {first['msg']}", row=row_number) from e


def read_records(path: Union[str, Path], model: Type[M]) -> Iterator[Tuple[int, M]]:
    """
    Yield (row number, record) for every data row

    Raises:
        ParseError: a row does not match the model
    """
    for row_number, row in iter_rows(path):
        yield row_number, parse_row(row, model, row_number)


def record_geometry(record: BaseModel, geometry_field: str, row_number: Optional[int] = None) -> MultiPolygon:
    """
    Parse the WKT geometry column of a record

    Raises:
        ParseError: malformed or non-polygonal geometry
    """
    try:
        return parse_polygon(getattr(record, geometry_field))
    except ParseError as e:
        raise ParseError(str(e), row=row_number) from e


def load_index(
    path: Union[str, Path],
    model: Type[M],
    geometry_field: str = "the_geom",
    name: Optional[str] = None
) -> SpatialIndex[M]:
    """
    Read a dataset and bulk-load it into a spatial index

    Rows with invalid attributes or geometry are skipped with a warning
    and do not stop the build.
    """
    name = name or model.__name__
    logger.info(f"Scanning {name} table: {path}")

    records = []
    skipped = 0
    for row_number, row in iter_rows(path):
        try:
            record = parse_row(row, model, row_number)
            geometry = record_geometry(record, geometry_field, row_number)
        except ParseError as e:
            skipped += 1
            logger.warning(f"Skipping {name} {e}")
            continue
        records.append(IndexedRecord.wrap(geometry, record))

    if skipped:
        logger.warning(f"Skipped {skipped} invalid {name} rows")
    return SpatialIndex.build(records, name=name)

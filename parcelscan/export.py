"""
GeoJSON export of analysis rows
"""

from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Union

from .errors import ParseError
from .geometry.polygons import parse_polygon, to_geojson
from .models import FootprintAnalysis


def read_analysis_rows(path: Union[str, Path]) -> Iterator[FootprintAnalysis]:
    """Read a JSON lines file written by the coverage command"""
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                yield FootprintAnalysis.model_validate_json(line)
            except ValueError as e:
                raise ParseError(f"invalid analysis row: {e}", row=line_number) from e


def to_feature(row: FootprintAnalysis) -> Dict[str, Any]:
    """One Feature per row: lot and building as a GeometryCollection"""
    geometries = []
    if row.lot_wkt:
        geometries.append(to_geojson(parse_polygon(row.lot_wkt)))
    geometries.append(to_geojson(parse_polygon(row.building_wkt)))

    properties = row.model_dump(mode="json", exclude={"building_wkt", "lot_wkt", "geojson"})
    return {
        "type": "Feature",
        "geometry": {"type": "GeometryCollection", "geometries": geometries},
        "properties": properties
    }


def to_feature_collection(rows: Iterable[FootprintAnalysis]) -> Dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [to_feature(row) for row in rows]
    }

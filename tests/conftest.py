"""
Shared fixtures: a small synthetic block laid out in feet around the
projection reference point and reverse-projected to degrees.
"""

import csv

import pytest
from shapely.geometry import MultiPolygon, Polygon

from parcelscan.config import PipelineConfig, ProjectionConfig
from parcelscan.geometry.projection import CoordinateProjector
from parcelscan.index import IndexedRecord, SpatialIndex
from parcelscan.models import LandUseRecord, ZoningDistrict


def rect_ft(x0, y0, x1, y1):
    """Counter-clockwise rectangle ring in feet"""
    return [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]


def to_degrees(projector, ring_ft):
    """MultiPolygon in degrees from a ring in feet"""
    return MultiPolygon([Polygon([projector.inverse(pt) for pt in ring_ft])])


@pytest.fixture(scope="session")
def projector():
    return CoordinateProjector(ProjectionConfig())


@pytest.fixture
def square_block(projector):
    """
    100ft square lot with neighbors west, east and south; open to the north

        +-------+   (street)
        |  lot  |
    +---+-------+---+
    | W |   S   | E |   W/E share the lot's side edges, S its rear edge
    """
    lots = {
        "lot": rect_ft(0, 0, 100, 100),
        "west": rect_ft(-100, 0, 0, 100),
        "east": rect_ft(100, 0, 200, 100),
        "south": rect_ft(0, -100, 100, 0),
    }
    geometries = {name: to_degrees(projector, ring) for name, ring in lots.items()}
    index = SpatialIndex.build(
        [IndexedRecord.wrap(geometry, name) for name, geometry in geometries.items()],
        name="lots"
    )
    return index, geometries


def land_use(blklot, geometry, **kwargs):
    fields = dict(blklot=blklot, the_geom=geometry.wkt, street="MAIN", st_type="ST")
    fields.update(kwargs)
    return LandUseRecord(**fields)


@pytest.fixture
def coverage_block(projector):
    """
    30ft x 83ft lot (2490 sq ft) fronting north, flanked by lots on the
    west, east and south, all in one RH-2 zoning district
    """
    layout = {
        "0001001": rect_ft(0, 0, 30, 83),
        "0001002": rect_ft(-30, 0, 0, 83),
        "0001003": rect_ft(30, 0, 60, 83),
        "0001004": rect_ft(0, -83, 30, 0),
    }
    lots = []
    for blklot, ring in layout.items():
        geometry = to_degrees(projector, ring)
        record = land_use(blklot, geometry, from_st=100, to_st=110, resunits=2, bldgsqft=2400, yrbuilt=1925)
        lots.append(IndexedRecord.wrap(geometry, record))

    district_geometry = to_degrees(projector, rect_ft(-500, -500, 500, 500))
    district = ZoningDistrict(the_geom=district_geometry.wkt, zoning="RH-2", zoning_sim="RH-2")

    lot_index = SpatialIndex.build(lots, name="lots")
    zoning_index = SpatialIndex.build([IndexedRecord.wrap(district_geometry, district)], name="zoning districts")
    return lot_index, zoning_index


@pytest.fixture
def pipeline_config():
    return PipelineConfig(max_workers=2)


@pytest.fixture
def write_csv(tmp_path):
    """Write rows to a CSV file under tmp_path and return its path"""
    def _write(name, rows):
        path = tmp_path / name
        fieldnames = list(rows[0].keys())
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)
        return path
    return _write

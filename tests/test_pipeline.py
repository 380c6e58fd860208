import io
import json

import pytest

from parcelscan.config import PipelineConfig
from parcelscan.errors import ParseError
from parcelscan.models import BuildingFootprintRecord, FootprintAnalysis
from parcelscan.pipeline import BatchSummary, JsonLinesSink, LotCoveragePipeline

from .conftest import rect_ft, to_degrees


def footprint(projector, ring, mblr, **kwargs):
    return BuildingFootprintRecord(mblr=mblr, shape=to_degrees(projector, ring).wkt, **kwargs)


@pytest.fixture
def pipeline(coverage_block, pipeline_config, projector):
    lots, zoning = coverage_block
    return LotCoveragePipeline(lots, zoning, config=pipeline_config, projector=projector)


@pytest.fixture
def batch(projector):
    """Footprint inside lot 0001001, one outside every lot, one unparsable"""
    return [
        footprint(projector, rect_ft(5, 15, 25, 75), "0001001", sf16_bldgid="201006.1"),
        footprint(projector, rect_ft(2000, 2000, 2020, 2020), "9999001"),
        BuildingFootprintRecord(mblr="0001001B", shape="POINT (1 2)"),
    ]


def test_analyze_footprint_in_lot(pipeline, projector):
    record = footprint(projector, rect_ft(5, 15, 25, 75), "0001001", sf16_bldgid="201006.1", hgt_maxcm=914.4)
    analysis = pipeline.analyze(record)

    assert analysis.building_id == "201006.1"
    assert analysis.building_area == pytest.approx(1200.0, rel=1e-6)
    assert analysis.height == pytest.approx(30.0)
    assert analysis.lot_blklot == "0001001"
    assert analysis.addr == "100-110 MAIN ST"
    assert analysis.lot_area == pytest.approx(2490.0, rel=1e-6)
    assert analysis.lot_coverage == pytest.approx(1200.0 / 2490.0, rel=1e-6)
    assert analysis.yrbuilt == 1925
    assert analysis.resunits == 2
    assert analysis.zoning_district_name == "RH-2"
    assert analysis.neighborhood is None

    assert len(analysis.side_setbacks) == 4
    assert analysis.min_setback("front") == pytest.approx(8.0, abs=0.1)
    assert analysis.min_setback("side") == pytest.approx(5.0, abs=0.1)
    assert analysis.min_setback("rear") == pytest.approx(15.0, abs=0.1)

    names = [f["properties"]["name"] for f in analysis.geojson["features"]]
    assert names == ["footprint", "footprint centroid", "lot", "lot centroid"]


def test_analyze_footprint_outside_lots(pipeline, projector):
    analysis = pipeline.analyze(footprint(projector, rect_ft(2000, 2000, 2020, 2020), "9999001"))

    assert analysis.building_area == pytest.approx(400.0, rel=1e-6)
    assert analysis.lot_blklot is None
    assert analysis.lot_coverage is None
    assert analysis.side_setbacks is None
    assert analysis.zoning_district_name is None
    assert len(analysis.geojson["features"]) == 2


def test_analyze_bad_geometry_raises(pipeline):
    with pytest.raises(ParseError):
        pipeline.analyze(BuildingFootprintRecord(mblr="x", shape="POINT (1 2)"))


def test_neighborhood_stats(coverage_block, projector):
    lots, zoning = coverage_block
    config = PipelineConfig(max_workers=1, include_neighbors=True)
    pipeline = LotCoveragePipeline(lots, zoning, config=config, projector=projector)

    analysis = pipeline.analyze(footprint(projector, rect_ft(5, 15, 25, 75), "0001001"))
    assert analysis.neighborhood.radius_ft == 300.0
    assert analysis.neighborhood.num_neighbors == 3
    assert analysis.neighborhood.num_neighbor_units == 6
    assert analysis.neighborhood.neighbor_mean_unit_size == pytest.approx(1200.0)


def test_run_skips_failed_records(pipeline, batch):
    out = io.StringIO()
    summary = pipeline.run(batch, JsonLinesSink(out))

    assert summary.processed == 2
    assert summary.skipped == 0
    assert summary.failed == 1
    assert summary.total == 3
    assert summary.failures[0][0] == "0001001B"

    lines = out.getvalue().splitlines()
    assert len(lines) == 2
    rows = [FootprintAnalysis.model_validate_json(line) for line in lines]
    assert sorted(r.mblr for r in rows) == ["0001001", "9999001"]


def test_run_abort_policy_raises(coverage_block, projector, batch):
    lots, zoning = coverage_block
    config = PipelineConfig(max_workers=2, error_policy="abort")
    pipeline = LotCoveragePipeline(lots, zoning, config=config, projector=projector)

    with pytest.raises(ParseError):
        pipeline.run(batch)


@pytest.mark.parametrize("min_coverage,zoning_filter,processed,skipped", [
    (0.4, None, 1, 1),
    (0.5, None, 0, 2),
    (0.0, ["RH-2"], 1, 1),
    (0.0, ["NC-3"], 0, 2),
])
def test_run_output_selection(coverage_block, projector, batch, min_coverage, zoning_filter, processed, skipped):
    lots, zoning = coverage_block
    config = PipelineConfig(max_workers=2, min_coverage=min_coverage, zoning_filter=zoning_filter)
    pipeline = LotCoveragePipeline(lots, zoning, config=config, projector=projector)

    summary = pipeline.run(batch)
    assert (summary.processed, summary.skipped, summary.failed) == (processed, skipped, 1)


def test_run_file_counts_bad_rows(pipeline, projector, write_csv, tmp_path):
    good = to_degrees(projector, rect_ft(5, 15, 25, 75)).wkt
    path = write_csv("footprints.csv", [
        {"sf16_bldgid": "201006.1", "mblr": "0001001", "shape": good, "hgt_maxcm": "1,000.0"},
        {"sf16_bldgid": "201006.2", "mblr": "0001002", "shape": good, "hgt_maxcm": "tall"},
        {"sf16_bldgid": "201006.3", "mblr": "0001003", "shape": "MULTIPOLYGON (((", "hgt_maxcm": ""},
    ])

    out_path = tmp_path / "coverage.jsonl"
    with JsonLinesSink(out_path) as sink:
        summary = pipeline.run_file(path, sink)

    assert summary.processed == 1
    assert summary.failed == 2
    assert sorted(key for key, _ in summary.failures) == ["0001003", "row 2"]

    rows = [json.loads(line) for line in out_path.read_text().splitlines()]
    assert len(rows) == 1
    assert rows[0]["height"] == pytest.approx(1000.0 / 2.54 / 12.0)


def test_invalid_config_rejected(coverage_block):
    lots, zoning = coverage_block
    with pytest.raises(ValueError):
        LotCoveragePipeline(lots, zoning, config=PipelineConfig(max_workers=0))


def test_batch_summary_total():
    assert BatchSummary(processed=3, skipped=2, failed=1).total == 6

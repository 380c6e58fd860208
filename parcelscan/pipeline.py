"""
Lot coverage pipeline

Joins building footprints to the lots and zoning districts they sit in:

  1. Locate the covering lot by the footprint's planar centroid
  2. Classify the lot's edges as front / side / rear
  3. Measure the footprint's setback from every lot edge
  4. Look up the zoning district
  5. Optionally gather neighboring lots for density context
  6. Compute lot coverage (building area / lot area)

Spatial indices are built once, single-threaded, then shared read-only by
the worker threads that analyse footprints.
"""

import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Dict, Iterable, List, Optional, Tuple, Union

from loguru import logger
from shapely.geometry import MultiPolygon, Point

from .analysis import EdgeClassifier, NeighborhoodQuery, SetbackComputer, ZoningLookup
from .config import PipelineConfig, get_config, validate_config
from .datasets import iter_rows, load_index, parse_row
from .errors import ParcelScanError
from .geometry.polygons import centroid, feature, parse_polygon, point_geojson, to_geojson
from .geometry.projection import CoordinateProjector
from .index import SpatialIndex
from .models import (
    BuildingFootprintRecord, FootprintAnalysis, LandUseRecord, NeighborhoodStats,
    SetbackAndAnnotation, ZoningDistrict
)

FootprintInput = Union[BuildingFootprintRecord, Tuple[int, Dict[str, Any]]]


@dataclass
class BatchSummary:
    """Counts reported at the end of a batch"""
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.processed + self.skipped + self.failed


@dataclass
class _Outcome:
    key: str
    analysis: Optional[FootprintAnalysis] = None
    error: Optional[ParcelScanError] = None


class JsonLinesSink:
    """Thread-safe JSON lines writer; one line per analysed footprint"""

    def __init__(self, target: Union[str, Path, IO[str]]):
        if isinstance(target, (str, Path)):
            logger.info(f"Opening output file {target}")
            self._file = open(target, "w", encoding="utf-8")
            self._owned = True
        else:
            self._file = target
            self._owned = False
        self._lock = threading.Lock()
        self.count = 0

    def write(self, analysis: FootprintAnalysis) -> None:
        line = analysis.model_dump_json()
        with self._lock:
            self._file.write(line + "\n")
            self.count += 1

    def close(self) -> None:
        if self._owned:
            self._file.close()

    def __enter__(self) -> "JsonLinesSink":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class LotCoveragePipeline:
    """
    Footprint-to-lot analysis over prebuilt lot and zoning indices

    Usage:
        pipeline = LotCoveragePipeline.from_files("LandUse2016.csv", "Zoning_Districts.csv")
        with JsonLinesSink("coverage.jsonl") as sink:
            summary = pipeline.run_file("Building_Footprints.csv", sink)
    """

    def __init__(
        self,
        lots: SpatialIndex[LandUseRecord],
        zoning_districts: SpatialIndex[ZoningDistrict],
        config: Optional[PipelineConfig] = None,
        projector: Optional[CoordinateProjector] = None
    ):
        self.config = config or get_config()
        validate_config(self.config)
        self.projector = projector or CoordinateProjector(self.config.projection)

        self.lots = lots
        self.zoning_districts = zoning_districts

        self.edge_classifier = EdgeClassifier(self.projector, self.config.classifier)
        self.setback_computer = SetbackComputer(self.config.setback)
        self.zoning_lookup = ZoningLookup(zoning_districts, self.projector)
        self.neighborhood_query = NeighborhoodQuery(lots, self.projector)

    @classmethod
    def from_files(
        cls,
        land_use_path: Union[str, Path],
        zoning_districts_path: Union[str, Path],
        config: Optional[PipelineConfig] = None
    ) -> "LotCoveragePipeline":
        """Build the lot and zoning indices from CSV exports"""
        lots = load_index(land_use_path, LandUseRecord, "the_geom", name="lots")
        zoning = load_index(zoning_districts_path, ZoningDistrict, "the_geom", name="zoning districts")
        return cls(lots, zoning, config=config)

    # ============================================================
    # Single Footprint
    # ============================================================

    def analyze(self, record: BuildingFootprintRecord) -> FootprintAnalysis:
        """
        Analyse one footprint

        A footprint outside every lot still yields a row, with lot fields None.

        Raises:
            ParseError, ProjectionError, DegenerateGeometryError
        """
        shape = parse_polygon(record.shape)
        shape_ft = self.projector.project_geometry(shape)
        building_area = abs(shape_ft.area)

        # Degree-space centroids are off by tens of feet; use the planar one
        center_ft = centroid(shape_ft)
        center = Point(self.projector.inverse((center_ft.x, center_ft.y)))

        features = [
            feature(to_geojson(shape), "footprint"),
            feature(point_geojson(center), "footprint centroid"),
        ]

        lot_record = self.lots.locate_at_point((center.x, center.y))
        zoning = self.zoning_lookup.lookup(shape)

        analysis = FootprintAnalysis(
            mblr=record.mblr,
            building_id=record.sf16_bldgid,
            building_area=building_area,
            height=record.height_ft,
            zoning_district_name=zoning.zoning if zoning else None,
            building_wkt=record.shape,
        )

        if lot_record is None:
            logger.debug(f"Footprint {record.mblr}: no covering lot")
            neighborhood_shape = shape
        else:
            lot = lot_record.payload
            lot_ft = self.projector.project_geometry(lot_record.geometry)
            lot_area = abs(lot_ft.area)

            edges = self.edge_classifier.classify(lot_record.geometry, self.lots)
            setbacks = self.setback_computer.compute(edges, shape_ft)

            features.append(feature(to_geojson(lot_record.geometry), "lot"))
            features.append(feature(point_geojson(centroid(lot_record.geometry)), "lot centroid"))

            analysis.lot_blklot = lot.blklot
            analysis.addr = lot.address
            analysis.lot_area = lot_area
            analysis.yrbuilt = lot.yrbuilt
            analysis.resunits = lot.resunits
            analysis.lot_coverage = building_area / lot_area if lot_area > 0 else None
            analysis.side_setbacks = [
                SetbackAndAnnotation(side_type=s.classification.value, setback=s.distance_ft)
                for s in setbacks
            ]
            analysis.lot_wkt = lot.the_geom
            neighborhood_shape = lot_record.geometry

        if self.config.include_neighbors:
            analysis.neighborhood = self._neighborhood(neighborhood_shape)

        analysis.geojson = {"type": "FeatureCollection", "features": features}
        return analysis

    def _neighborhood(self, shape: MultiPolygon) -> NeighborhoodStats:
        radius = self.config.neighborhood.radius_ft
        summary = NeighborhoodQuery.summarize(self.neighborhood_query.query(shape, radius))
        return NeighborhoodStats(
            radius_ft=radius,
            num_neighbors=summary.count,
            num_neighbor_units=summary.residential_units,
            neighbor_bldgsqft=summary.building_sqft,
            neighbor_mean_unit_size=summary.mean_unit_size_sqft
        )

    def select(self, analysis: FootprintAnalysis) -> bool:
        """Output filter: minimum lot coverage and optional zoning whitelist"""
        if self.config.min_coverage > 0:
            if analysis.lot_coverage is None or analysis.lot_coverage < self.config.min_coverage:
                return False
        if self.config.zoning_filter:
            if analysis.zoning_district_name not in self.config.zoning_filter:
                return False
        return True

    # ============================================================
    # Batch
    # ============================================================

    def run_file(self, footprints_path: Union[str, Path], sink: Optional[JsonLinesSink] = None) -> BatchSummary:
        """Analyse every row of a footprints CSV; row parse errors count as failures"""
        logger.info(f"Scanning footprints: {footprints_path}")
        return self.run(iter_rows(footprints_path), sink)

    def run(self, footprints: Iterable[FootprintInput], sink: Optional[JsonLinesSink] = None) -> BatchSummary:
        """
        Analyse footprints concurrently

        Accepts parsed records or raw (row number, row) pairs. Output order
        is not guaranteed to follow input order.

        Raises:
            ParcelScanError: first per-record failure, under error_policy "abort"
        """
        summary = BatchSummary()
        window = self.config.max_workers * 64
        executor = ThreadPoolExecutor(max_workers=self.config.max_workers)
        try:
            pending = set()
            for item in footprints:
                pending.add(executor.submit(self._process, item))
                if len(pending) >= window:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        self._collect(future, summary, sink)
            for future in wait(pending).done:
                self._collect(future, summary, sink)
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        logger.info(
            f"Footprints processed: {summary.processed}, skipped: {summary.skipped}, failed: {summary.failed}"
        )
        return summary

    def _process(self, item: FootprintInput) -> _Outcome:
        if isinstance(item, BuildingFootprintRecord):
            key, record = item.mblr, item
        else:
            row_number, row = item
            key = f"row {row_number}"
            try:
                record = parse_row(row, BuildingFootprintRecord, row_number)
            except ParcelScanError as e:
                return _Outcome(key, error=e)
            key = record.mblr

        try:
            return _Outcome(key, analysis=self.analyze(record))
        except ParcelScanError as e:
            return _Outcome(key, error=e)

    def _collect(self, future: "Future[_Outcome]", summary: BatchSummary, sink: Optional[JsonLinesSink]) -> None:
        outcome = future.result()
        if outcome.error is not None:
            if self.config.error_policy == "abort":
                logger.error(f"Footprint {outcome.key} failed, aborting batch: {outcome.error}")
                raise outcome.error
            summary.failed += 1
            summary.failures.append((outcome.key, str(outcome.error)))
            logger.warning(f"Footprint {outcome.key} failed: {outcome.error}")
            return

        if not self.select(outcome.analysis):
            summary.skipped += 1
            return

        summary.processed += 1
        if sink is not None:
            sink.write(outcome.analysis)

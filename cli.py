#!/usr/bin/env python
"""
Command-line interface for parcelscan

Usage:
    python cli.py coverage --land-use LandUse2016.csv --zoning-districts Zoning_Districts.csv \
        --footprints Building_Footprints.csv --out coverage.jsonl
    python cli.py geojson --file coverage.jsonl > coverage.geojson
"""

import sys
import json
import argparse

from loguru import logger

from parcelscan.config import PipelineConfig, validate_config
from parcelscan.errors import ParcelScanError
from parcelscan.export import read_analysis_rows, to_feature_collection
from parcelscan.pipeline import JsonLinesSink, LotCoveragePipeline


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def build_config(args) -> PipelineConfig:
    """Pipeline configuration from command-line options"""
    config = PipelineConfig(
        max_workers=args.workers,
        error_policy="abort" if args.fail_fast else "skip",
        min_coverage=args.min_coverage,
        zoning_filter=args.zoning or None,
        include_neighbors=args.neighbors,
    )
    config.classifier.probe_distance_ft = args.probe_distance
    config.setback.method = args.setback_method
    config.neighborhood.radius_ft = args.radius
    validate_config(config)
    return config


def cmd_coverage(args):
    """Join footprints to lots and report coverage and setbacks"""
    setup_logging(args.verbose)

    try:
        config = build_config(args)
    except ValueError as e:
        logger.error(str(e))
        return 1

    try:
        pipeline = LotCoveragePipeline.from_files(args.land_use, args.zoning_districts, config)
        sink = JsonLinesSink(args.out) if args.out else JsonLinesSink(sys.stdout)
        with sink:
            summary = pipeline.run_file(args.footprints, sink)
    except (OSError, ParcelScanError) as e:
        logger.error(f"Coverage run failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    logger.info(f"Complete: {summary.processed} processed, {summary.skipped} skipped, {summary.failed} failed")
    return 0


def cmd_geojson(args):
    """Convert coverage JSON lines into a GeoJSON FeatureCollection"""
    setup_logging(args.verbose)

    try:
        collection = to_feature_collection(read_analysis_rows(args.file))
    except (OSError, ParcelScanError) as e:
        logger.error(f"Failed to convert {args.file}: {e}")
        return 1

    print(json.dumps(collection))
    logger.info(f"Wrote {len(collection['features'])} features")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Lot coverage, setback and zoning analysis of building footprints",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Coverage of every footprint, written as JSON lines:
    python cli.py coverage --land-use LandUse2016.csv \\
        --zoning-districts Zoning_Map_-_Zoning_Districts_data.csv \\
        --footprints Building_Footprints.csv --out coverage.jsonl

  Only RH-2 lots covered above 85%, with neighborhood density:
    python cli.py coverage ... --min-coverage 0.85 --zoning RH-2 --neighbors

  GeoJSON of a coverage run:
    python cli.py geojson --file coverage.jsonl > coverage.geojson
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Coverage command
    cov_parser = subparsers.add_parser("coverage", help="Analyse building footprints against lots")
    cov_parser.add_argument("--land-use", required=True, help="Lots CSV (LandUse2016.csv)")
    cov_parser.add_argument("--zoning-districts", required=True, help="Zoning districts CSV")
    cov_parser.add_argument("--footprints", required=True, help="Building footprints CSV")
    cov_parser.add_argument("--out", "-o", help="JSON lines output file (stdout if not specified)")
    cov_parser.add_argument("--min-coverage", type=float, default=0.0, help="Minimum lot coverage (0-1)")
    cov_parser.add_argument("--zoning", action="append", help="Only report these zoning districts (repeatable)")
    cov_parser.add_argument("--neighbors", action="store_true", help="Include neighborhood density statistics")
    cov_parser.add_argument("--radius", type=float, default=300.0, help="Neighborhood radius in feet")
    cov_parser.add_argument("--probe-distance", type=float, default=10.0,
                            help="Street probe distance outside lot edges in feet")
    cov_parser.add_argument("--setback-method", choices=["vertex", "segment"], default="vertex",
                            help="Measure from footprint vertices (default) or footprint edges")
    cov_parser.add_argument("--workers", type=int, default=4, help="Worker threads")
    cov_parser.add_argument("--fail-fast", action="store_true", help="Abort on the first bad footprint")
    cov_parser.set_defaults(func=cmd_coverage)

    # GeoJSON command
    geo_parser = subparsers.add_parser("geojson", help="Convert coverage output to GeoJSON")
    geo_parser.add_argument("--file", "-f", required=True, help="JSON lines file written by coverage")
    geo_parser.set_defaults(func=cmd_geojson)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

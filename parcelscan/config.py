"""
Configuration settings for parcelscan
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ProjectionConfig:
    """Local planar projection (azimuthal equidistant, US survey feet)"""
    # Reference point the projection is centred on (Market & Van Ness, SF)
    lat_0: float = 37.773972
    lon_0: float = -122.431297

    def pipeline(self) -> str:
        """PROJ pipeline string: degrees -> radians -> aeqd metres -> US feet"""
        return (
            "+proj=pipeline "
            "+step +proj=unitconvert +xy_in=deg +xy_out=rad "
            f"+step +proj=aeqd +lat_0={self.lat_0} +lon_0={self.lon_0} "
            "+step +proj=unitconvert +xy_in=m +xy_out=us-ft"
        )


@dataclass
class ClassifierConfig:
    """Lot edge classification settings"""
    # Distance (ft) outside an edge midpoint where the street probe is placed
    probe_distance_ft: float = 10.0

    # Turn components (ft) shorter than this mark the edge indeterminate
    degenerate_tolerance_ft: float = 1e-6


@dataclass
class SetbackConfig:
    """Setback measurement settings"""
    # "vertex": footprint vertices to lot edge (default)
    # "segment": footprint exterior rings to lot edge
    method: str = "vertex"


@dataclass
class NeighborhoodConfig:
    """Neighbor query settings"""
    radius_ft: float = 300.0


@dataclass
class PipelineConfig:
    """Pipeline configuration"""
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    setback: SetbackConfig = field(default_factory=SetbackConfig)
    neighborhood: NeighborhoodConfig = field(default_factory=NeighborhoodConfig)

    # Worker threads for batch analysis
    max_workers: int = 4

    # "skip": count and log failed records, "abort": first failure stops the batch
    error_policy: str = "skip"

    # Output selection
    min_coverage: float = 0.0
    zoning_filter: Optional[List[str]] = None
    include_neighbors: bool = False


SETBACK_METHODS = ("vertex", "segment")
ERROR_POLICIES = ("skip", "abort")

# Global config instance
config = PipelineConfig()


def get_config() -> PipelineConfig:
    """Get global configuration"""
    return config


def validate_config(config: PipelineConfig) -> None:
    """
    Validate that all configuration values are usable.
    Raises ValueError listing every invalid value.
    """
    errors = []

    if not -90.0 <= config.projection.lat_0 <= 90.0:
        errors.append(f"projection.lat_0 must be within [-90, 90], got {config.projection.lat_0}")
    if not -180.0 <= config.projection.lon_0 <= 180.0:
        errors.append(f"projection.lon_0 must be within [-180, 180], got {config.projection.lon_0}")

    if config.classifier.probe_distance_ft <= 0:
        errors.append(f"classifier.probe_distance_ft must be positive, got {config.classifier.probe_distance_ft}")
    if config.classifier.degenerate_tolerance_ft < 0:
        errors.append(
            f"classifier.degenerate_tolerance_ft must not be negative, got {config.classifier.degenerate_tolerance_ft}"
        )

    if config.setback.method not in SETBACK_METHODS:
        errors.append(f"setback.method must be one of {SETBACK_METHODS}, got {config.setback.method!r}")

    if config.neighborhood.radius_ft <= 0:
        errors.append(f"neighborhood.radius_ft must be positive, got {config.neighborhood.radius_ft}")

    if config.max_workers < 1:
        errors.append(f"max_workers must be at least 1, got {config.max_workers}")
    if config.error_policy not in ERROR_POLICIES:
        errors.append(f"error_policy must be one of {ERROR_POLICIES}, got {config.error_policy!r}")
    if config.min_coverage < 0:
        errors.append(f"min_coverage must not be negative, got {config.min_coverage}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)

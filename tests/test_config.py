import pytest

from parcelscan.config import (
    ClassifierConfig,
    NeighborhoodConfig,
    PipelineConfig,
    ProjectionConfig,
    SetbackConfig,
    get_config,
    validate_config,
)


def test_default_config_is_valid():
    validate_config(get_config())
    assert get_config().projection.lat_0 == 37.773972
    assert get_config().classifier.probe_distance_ft == 10.0
    assert get_config().neighborhood.radius_ft == 300.0


def test_projection_pipeline_string():
    pipeline = ProjectionConfig(lat_0=40.0, lon_0=-100.0).pipeline()
    assert "+proj=aeqd +lat_0=40.0 +lon_0=-100.0" in pipeline
    assert pipeline.endswith("+xy_out=us-ft")


def test_validate_lists_every_problem():
    config = PipelineConfig(
        projection=ProjectionConfig(lat_0=120.0),
        classifier=ClassifierConfig(probe_distance_ft=0.0),
        setback=SetbackConfig(method="raster"),
        neighborhood=NeighborhoodConfig(radius_ft=-1.0),
        max_workers=0,
        error_policy="retry",
        min_coverage=-0.5,
    )
    with pytest.raises(ValueError) as excinfo:
        validate_config(config)

    message = str(excinfo.value)
    for name in [
        "projection.lat_0",
        "classifier.probe_distance_ft",
        "setback.method",
        "neighborhood.radius_ft",
        "max_workers",
        "error_policy",
        "min_coverage",
    ]:
        assert name in message


def test_projection_config_is_frozen():
    with pytest.raises(AttributeError):
        ProjectionConfig().lat_0 = 0.0

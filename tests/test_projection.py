import math
import warnings

import pytest
from shapely.geometry import MultiPolygon, Polygon

from parcelscan.config import ProjectionConfig
from parcelscan.errors import ProjectionError
from parcelscan.geometry.projection import CoordinateProjector


def test_reference_point_projects_to_origin(projector):
    x, y = projector.forward((-122.431297, 37.773972))
    assert abs(x) < 1e-6
    assert abs(y) < 1e-6


def test_forward_is_in_us_feet(projector):
    # 0.001 degrees of latitude is roughly 364 feet
    _, y = projector.forward((-122.431297, 37.774972))
    assert 360.0 < y < 368.0


@pytest.mark.parametrize("point", [
    (-122.431297, 37.773972),
    (-122.4194, 37.7749),
    (-122.5107, 37.7081),
    (-122.3574, 37.8324),
    (-121.8863, 37.3382),
])
def test_round_trip(projector, point):
    lon, lat = projector.inverse(projector.forward(point))
    assert abs(lon - point[0]) < 1e-6
    assert abs(lat - point[1]) < 1e-6


def test_inverse_then_forward_preserves_feet(projector):
    x, y = projector.forward(projector.inverse((1234.5, -678.9)))
    assert math.isclose(x, 1234.5, abs_tol=1e-6)
    assert math.isclose(y, -678.9, abs_tol=1e-6)


@pytest.mark.parametrize("point", [
    (200.0, 37.0),
    (-122.4, 95.0),
    (float("nan"), 37.0),
])
def test_forward_rejects_out_of_domain(projector, point):
    with pytest.raises(ProjectionError):
        projector.forward(point)


def test_inverse_rejects_non_finite(projector):
    with pytest.raises(ProjectionError):
        projector.inverse((float("inf"), 0.0))


def test_project_geometry_area_in_square_feet(projector):
    ring_ft = [(0, 0), (30, 0), (30, 83), (0, 83)]
    shape = MultiPolygon([Polygon([projector.inverse(pt) for pt in ring_ft])])

    shape_ft = projector.project_geometry(shape)
    assert shape_ft.geom_type == "MultiPolygon"
    assert math.isclose(shape_ft.area, 2490.0, rel_tol=1e-6)

    back = projector.unproject_geometry(shape_ft)
    assert back.equals_exact(shape, 1e-9)


def test_project_geometry_is_vectorised_without_deprecation(projector):
    ring_ft = [(0, 0), (30, 0), (30, 83), (0, 83)]
    shape = MultiPolygon([Polygon([projector.inverse(pt) for pt in ring_ft])])

    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        shape_ft = projector.project_geometry(shape)
        back = projector.unproject_geometry(shape_ft)

    coords = list(shape_ft.geoms[0].exterior.coords)
    assert len(coords) == 5
    assert coords[2] == pytest.approx((30.0, 83.0), abs=1e-6)
    assert back.equals_exact(shape, 1e-9)


def test_project_empty_geometry(projector):
    assert projector.project_geometry(MultiPolygon()).is_empty


def test_projector_is_centred_on_config():
    projector = CoordinateProjector(ProjectionConfig(lat_0=41.8781, lon_0=-87.6298))
    x, y = projector.forward((-87.6298, 41.8781))
    assert abs(x) < 1e-6 and abs(y) < 1e-6

"""Tests for WGS84 <-> UTM projection."""

import pytest
from shapely.geometry import Point, Polygon

from siteplan.geo.projection import UtmProjection, representative_coordinate, utm_crs, utm_zone
from tests.conftest import GEO_RECT


def _geo_plot() -> Polygon:
    return Polygon([(p["lng"], p["lat"]) for p in GEO_RECT])


@pytest.mark.parametrize(
    "lon,zone",
    [(-180.0, 1), (-177.0, 1), (0.0, 31), (49.12, 39), (179.9, 60), (180.0, 60)],
)
def test_utm_zone(lon, zone):
    assert utm_zone(lon) == zone


def test_utm_crs_hemispheres():
    assert utm_crs(49.12, 55.79).to_epsg() == 32639
    assert utm_crs(-43.2, -22.9).to_epsg() == 32723


def test_representative_coordinate():
    assert representative_coordinate(Point(3, 4)) == (3, 4)
    assert representative_coordinate(_geo_plot()) == (49.12, 55.79)


def test_to_metric_area():
    metric, crs = UtmProjection().to_metric(_geo_plot())
    assert crs.to_epsg() == 32639
    # about 219 m x 167 m
    assert 33000 < metric.area < 40000
    assert metric.bounds[0] > 100000


def test_round_trip():
    projection = UtmProjection()
    plot = _geo_plot()
    metric, crs = projection.to_metric(plot)
    back = projection.to_geographic(metric, crs)
    for (x0, y0), (x1, y1) in zip(plot.exterior.coords, back.exterior.coords):
        assert x1 == pytest.approx(x0, abs=1e-8)
        assert y1 == pytest.approx(y0, abs=1e-8)

"""Tests for boundary entry point generation."""

import math

import pytest
from shapely.geometry import Point, Polygon

from siteplan.engine.config import GenerationConfig
from siteplan.planning.entry_points import (
    concave_corners,
    generate_entry_points,
    interior_angle,
    merge_collinear_edges,
    splice_points,
)


def _xy(points):
    return [(round(p.x, 6), round(p.y, 6)) for p in points]


class TestEntryPoints:
    def test_rectangle_midpoints(self, rect_plot):
        points = generate_entry_points(rect_plot)
        assert _xy(points) == [(100.0, 0.0), (200.0, 75.0), (100.0, 150.0), (0.0, 75.0)]

    def test_all_points_on_boundary(self, l_plot):
        for p in generate_entry_points(l_plot, density=1.4):
            assert l_plot.exterior.distance(p) < 1e-9

    def test_l_shape_concave_corner_first(self, l_plot):
        points = _xy(generate_entry_points(l_plot))
        assert points[0] == (120.0, 120.0)
        assert set(points) == {(120.0, 120.0), (120.0, 0.0), (0.0, 120.0)}

    def test_density_controls_spacing(self, rect_plot):
        sparse = generate_entry_points(rect_plot, density=0.6)
        dense = generate_entry_points(rect_plot, density=1.4)
        assert len(sparse) < len(dense)
        # 200 / (120 / 0.6) rounds up to a single segment: no interior points
        assert sparse == []

    def test_short_edges_never_make_corners(self):
        small_l = Polygon([(0, 0), (60, 0), (60, 30), (30, 30), (30, 60), (0, 60)])
        verts = list(small_l.exterior.coords)[:-1]
        assert concave_corners(verts, GenerationConfig()) == []


class TestRingHelpers:
    def test_interior_angle_convex_and_concave(self):
        assert math.degrees(interior_angle((0, 0), (240, 0), (240, 120), False)) == pytest.approx(90)
        assert math.degrees(interior_angle((240, 120), (120, 120), (120, 240), False)) == pytest.approx(270)

    def test_interior_angle_clockwise_ring(self):
        # Same concave corner walked in the opposite direction
        assert math.degrees(interior_angle((120, 240), (120, 120), (240, 120), True)) == pytest.approx(270)

    def test_merge_collinear_edges_joins_gentle_turns(self):
        verts = [(0, 0), (50, 0), (100, 5), (100, 100), (0, 100)]
        paths = merge_collinear_edges(verts, 30.0)
        assert len(paths) == 4
        assert [(0, 0), (50, 0), (100, 5)] in paths

    def test_merge_collinear_edges_wraps_around(self):
        verts = [(50, 0), (100, 0), (100, 100), (0, 100), (0, 0)]
        paths = merge_collinear_edges(verts, 30.0)
        assert [(0, 0), (50, 0), (100, 0)] in paths

    def test_splice_points_inserts_vertices(self, rect_plot):
        spliced = splice_points(rect_plot, [Point(100, 0), Point(0, 0)])
        coords = list(spliced.exterior.coords)
        assert (100.0, 0.0) in coords
        assert len(coords) == 6
        assert spliced.area == pytest.approx(rect_plot.area)

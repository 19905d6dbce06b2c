"""Tests for the greedy street network builder."""

import math

import pytest
from shapely.geometry import LineString, Point, Polygon
from shapely.prepared import prep

from siteplan.engine.config import GenerationConfig
from siteplan.planning.entry_points import generate_entry_points, splice_points
from siteplan.planning.streets import (
    build_streets,
    compute_crosses,
    enumerate_candidates,
    is_too_close_to_cross,
    min_crossing_angle,
    split_street_at,
)
from siteplan.utils.geometry import ring_edges


def _network(plot: Polygon, density: float = 1.0):
    points = generate_entry_points(plot, density=density)
    return build_streets(splice_points(plot, points), points)


class TestBuildStreets:
    def test_rectangle_gets_a_cross(self, rect_plot):
        network = _network(rect_plot)
        assert len(network.streets) == 2
        assert network.remaining == []
        assert network.crosses == [(100.0, 75.0)]
        assert network.moves == ["pair", "pair"]

    def test_streets_stay_inside_plot(self, l_plot):
        network = _network(l_plot, density=1.4)
        assert network.streets
        for street in network.streets:
            assert l_plot.buffer(1e-6).covers(street)

    @pytest.mark.parametrize("density", [0.6, 1.0, 1.4])
    def test_entry_points_connected_or_stuck(self, l_plot, density):
        points = generate_entry_points(l_plot, density=density)
        plot = splice_points(l_plot, points)
        config = GenerationConfig()
        network = build_streets(plot, points, config)
        assert network.iterations < config.max_street_iterations

        ends = {c for s in network.streets for c in (s.coords[0], s.coords[-1])}
        for p in network.entry_points:
            if not any(p is r for r in network.remaining):
                assert (p.x, p.y) in ends
        if network.remaining:
            leftovers = enumerate_candidates(
                prep(plot),
                ring_edges(plot),
                network.streets,
                network.crosses,
                network.remaining,
                network.entry_points,
                config,
            )
            assert leftovers == []

    @pytest.mark.parametrize("density", [0.6, 1.0, 1.4])
    def test_no_near_miss_junctions(self, l_plot, density):
        points = generate_entry_points(l_plot, density=density)
        plot = splice_points(l_plot, points)
        config = GenerationConfig()
        network = build_streets(plot, points, config)

        before: list[LineString] = []
        for k, kind in enumerate(network.moves, start=1):
            after = build_streets(plot, points, GenerationConfig(max_street_iterations=k)).streets
            new_street = after[-1]
            if kind != "cross":
                for cross in compute_crosses(before):
                    d = new_street.distance(Point(cross))
                    assert d <= config.cross_tolerance or d >= config.min_cross_distance
            before = after

    def test_no_entry_points_no_streets(self, rect_plot):
        network = build_streets(rect_plot, [])
        assert network.streets == []
        assert network.iterations == 0

    def test_single_point_has_no_partner(self, rect_plot):
        p = Point(100, 0)
        network = build_streets(splice_points(rect_plot, [p]), [p])
        assert network.streets == []
        assert network.remaining == [p]

    def test_iteration_cap(self, rect_plot):
        points = generate_entry_points(rect_plot)
        network = build_streets(
            splice_points(rect_plot, points),
            points,
            GenerationConfig(max_street_iterations=1),
        )
        assert network.iterations == 1
        assert len(network.streets) == 1
        assert len(network.remaining) == 2

    def test_concave_plot_rejects_outside_shortcut(self, l_plot):
        a, b = Point(240, 60), Point(60, 240)
        network = build_streets(splice_points(l_plot, [a, b]), [a, b])
        # The straight line between them leaves the plot through the notch
        assert network.streets == []


class TestStreetHelpers:
    def test_compute_crosses(self):
        streets = [LineString([(0, 0), (10, 10)]), LineString([(0, 10), (10, 0)])]
        assert compute_crosses(streets) == [(5.0, 5.0)]

    def test_compute_crosses_ignores_parallel(self):
        streets = [LineString([(0, 0), (10, 0)]), LineString([(0, 5), (10, 5)])]
        assert compute_crosses(streets) == []

    def test_near_miss_is_too_close(self):
        config = GenerationConfig()
        line = LineString([(0, 10), (100, 10)])
        assert is_too_close_to_cross(line, [(50.0, 0.0)], config)
        # Ending on (or passing through) the cross is allowed
        assert not is_too_close_to_cross(line, [(50.0, 10.0)], config)
        assert not is_too_close_to_cross(line, [(50.0, 60.0)], config)

    def test_min_crossing_angle(self):
        streets = [LineString([(50, -10), (50, 10)])]
        perpendicular = LineString([(0, 0), (100, 0)])
        assert min_crossing_angle(streets, perpendicular, 0.01) == pytest.approx(math.pi / 2)
        touching = LineString([(0, 0), (50, 0)])
        assert min_crossing_angle(streets, touching, 0.01) == math.inf

    def test_split_street_at(self):
        streets = [LineString([(0, 0), (100, 0)])]
        assert split_street_at(streets, (40.0, 0.0))
        assert sorted(s.length for s in streets) == [40.0, 60.0]

    def test_split_at_endpoint_is_noop(self):
        streets = [LineString([(0, 0), (100, 0)])]
        assert not split_street_at(streets, (100.0, 0.0))
        assert len(streets) == 1

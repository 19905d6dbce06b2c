"""Tests for the spatial availability grid."""

import pytest
from shapely.geometry import LineString, box

from siteplan.planning.grid import SpatialGrid


@pytest.fixture
def open_grid() -> SpatialGrid:
    grid = SpatialGrid(box(0, 0, 100, 50), cell_size=10)
    grid.mark_available_area(box(0, 0, 100, 50))
    return grid


class TestAvailability:
    def test_dimensions(self):
        grid = SpatialGrid(box(0, 0, 95, 41), cell_size=10)
        assert (grid.x_cells, grid.y_cells) == (10, 5)
        assert grid.available_count == 0

    def test_rejects_bad_cell_size(self):
        with pytest.raises(ValueError):
            SpatialGrid(box(0, 0, 10, 10), cell_size=0)

    def test_mark_full_cover(self, open_grid):
        assert open_grid.available_count == 50

    def test_half_cover_not_opened(self):
        grid = SpatialGrid(box(0, 0, 100, 50), cell_size=10)
        # Second column is exactly half covered
        assert grid.mark_available_area(box(0, 0, 15, 10)) == 1
        assert grid.is_cell_available(0, 0)
        assert not grid.is_cell_available(1, 0)

    def test_restriction_closes_any_touched_cell(self, open_grid):
        assert open_grid.subtract_restrictions([box(15, 15, 16, 16)]) == 1
        assert not open_grid.is_cell_available(1, 1)
        # Edge contact is enough to close a cell
        closed = open_grid.subtract_restrictions([box(30, 20, 40, 30)])
        assert closed == 9
        assert open_grid.available_count == 40

    def test_line_restriction(self, open_grid):
        open_grid.subtract_restrictions([LineString([(55, 0), (55, 50)])])
        assert open_grid.available_count == 45

    def test_out_of_range_cell(self, open_grid):
        assert not open_grid.is_cell_available(-1, 0)
        assert not open_grid.is_cell_available(10, 0)

    def test_can_place_polygon(self, open_grid):
        open_grid.subtract_restrictions([box(41, 21, 49, 29)])
        assert open_grid.can_place_polygon(box(11, 11, 29, 29))
        assert not open_grid.can_place_polygon(box(31, 21, 45, 29))
        # Clear of the closed cell, but not with the buffer
        assert open_grid.can_place_polygon(box(21, 21, 39.5, 29))
        assert not open_grid.can_place_polygon(box(21, 21, 39.5, 29), buffer=1.0)

    def test_world_to_grid(self, open_grid):
        assert open_grid.world_to_grid(25, 5) == (2, 0)
        assert open_grid.world_to_grid(99.9, 49.9) == (9, 4)


class TestClusters:
    def test_clusters_partition_available_cells(self, open_grid):
        open_grid.subtract_restrictions([LineString([(55, 0), (55, 50)])])
        clusters = open_grid.clusterize_4_directional()
        assert len(clusters) == 2
        cells = [c for cluster in clusters for c in cluster]
        assert len(cells) == len(set(cells)) == open_grid.available_count

    def test_diagonal_cells_are_separate(self):
        grid = SpatialGrid(box(0, 0, 20, 20), cell_size=10)
        grid.mark_available_area(box(0, 0, 10, 10))
        grid.mark_available_area(box(10, 10, 20, 20))
        assert len(grid.clusterize_4_directional()) == 2

    def test_empty_grid(self):
        grid = SpatialGrid(box(0, 0, 20, 20), cell_size=10)
        assert grid.clusterize_4_directional() == []


class TestTracing:
    def test_rectangle_cluster(self, open_grid):
        poly = open_grid.cluster_to_precise_polygon([(c, r) for c in range(3) for r in range(2)])
        assert poly.area == pytest.approx(600)
        assert poly.bounds == (0.0, 0.0, 30.0, 20.0)

    def test_l_cluster(self, open_grid):
        poly = open_grid.cluster_to_precise_polygon([(0, 0), (1, 0), (0, 1)])
        assert poly.is_valid
        assert poly.area == pytest.approx(300)

    def test_offset_origin(self):
        grid = SpatialGrid(box(1000, 2000, 1100, 2100), cell_size=10)
        poly = grid.cluster_to_precise_polygon([(0, 0)])
        assert poly.bounds == (1000.0, 2000.0, 1010.0, 2010.0)

    def test_empty_cluster(self, open_grid):
        assert open_grid.cluster_to_precise_polygon([]) is None

    def test_cluster_polygon_matches_cells(self, open_grid):
        open_grid.subtract_restrictions([box(0, 0, 15, 15)])
        clusters = open_grid.clusterize_4_directional()
        assert len(clusters) == 1
        poly = open_grid.cluster_to_precise_polygon(clusters[0])
        assert poly.area == pytest.approx(100 * len(clusters[0]))

"""Tests for building placement on the secondary grid."""

import random

import pytest
from shapely.geometry import box

from siteplan.engine.config import GenerationConfig
from siteplan.planning.grid import SpatialGrid
from siteplan.planning.placement import (
    PlacedBuilding,
    build_secondary_grid,
    floor_range,
    place_buildings,
    section_for,
)
from siteplan.planning.templates import get_template


@pytest.fixture
def open_grid() -> SpatialGrid:
    grid = SpatialGrid(box(0, 0, 200, 200), cell_size=10)
    grid.mark_available_area(box(0, 0, 200, 200))
    return grid


class TestPlaceBuildings:
    def test_footprints_inside_block(self, open_grid, rng):
        block = box(10, 10, 130, 110)
        placed = place_buildings(block, open_grid, rng)
        assert placed
        for b in placed:
            assert block.contains(b.polygon)

    def test_footprints_do_not_overlap(self, open_grid, rng):
        placed = place_buildings(box(10, 10, 190, 190), open_grid, rng)
        for i, a in enumerate(placed):
            for b in placed[i + 1:]:
                assert a.polygon.intersection(b.polygon).area == pytest.approx(0)

    def test_narrow_block_gets_single_square(self, open_grid, rng):
        placed = place_buildings(box(10, 10, 35, 70), open_grid, rng)
        assert len(placed) == 1
        assert placed[0].fallback
        minx, miny, maxx, maxy = placed[0].polygon.bounds
        assert maxx - minx == pytest.approx(21)
        assert ((minx + maxx) / 2, (miny + maxy) / 2) == pytest.approx((22.5, 40))

    def test_restricted_block_gets_nothing(self, rng):
        grid = SpatialGrid(box(0, 0, 200, 200), cell_size=10)
        assert place_buildings(box(10, 10, 130, 110), grid, rng) == []

    def test_same_seed_same_placement(self, open_grid):
        block = box(10, 10, 190, 190)
        a = place_buildings(block, open_grid, random.Random(7))
        b = place_buildings(block, open_grid, random.Random(7))
        assert [(p.template.id, p.col, p.row) for p in a] == [(p.template.id, p.col, p.row) for p in b]


class TestSecondaryGrid:
    def test_centered_layout(self, open_grid):
        secondary = build_secondary_grid(box(0, 0, 100, 100), open_grid, 24.0, GenerationConfig())
        assert (secondary.cols, secondary.rows) == (3, 3)
        assert secondary.pitch == 28.0
        assert (secondary.start_x, secondary.start_y) == (8.0, 8.0)
        assert all(all(col) for col in secondary.available)

    def test_block_smaller_than_pitch(self, open_grid):
        secondary = build_secondary_grid(box(0, 0, 20, 100), open_grid, 24.0, GenerationConfig())
        assert secondary.cols == 0

    def test_claim_is_exclusive(self, open_grid):
        secondary = build_secondary_grid(box(0, 0, 100, 100), open_grid, 24.0, GenerationConfig())
        secondary.claim(get_template("line2_h"), 0, 0, 0)
        assert secondary.free_mask()[0][0] is False
        with pytest.raises(ValueError):
            secondary.claim(get_template("single"), 1, 0, 1)


class TestFloorRange:
    def test_template_range(self):
        assert floor_range(PlacedBuilding(get_template("t4"))) == (3, 10)

    def test_capped_by_request(self):
        assert floor_range(PlacedBuilding(get_template("t4")), max_floors=6) == (3, 6)
        assert floor_range(PlacedBuilding(get_template("t4")), max_floors=2) == (2, 2)

    def test_fallback_square(self):
        square = PlacedBuilding(get_template("single"), fallback=True)
        assert floor_range(square) == (3, 9)
        assert floor_range(square, max_floors=12) == (4, 12)
        assert floor_range(square, max_floors=2) == (1, 2)

    def test_section_for(self):
        config = GenerationConfig()
        building = PlacedBuilding(get_template("l5"), polygon=box(0, 0, 20, 20))
        section = section_for(building, None, config)
        assert (section.min_floors, section.max_floors) == (2, 8)
        assert section.template_id == "l5"
        assert section.height == pytest.approx(2 * 3.2)

    def test_section_for_requires_footprint(self):
        with pytest.raises(ValueError):
            section_for(PlacedBuilding(get_template("single")), None, GenerationConfig())

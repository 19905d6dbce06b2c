"""Tests for floor assignment and reconciliation."""

import random

import pytest
from shapely.geometry import box

from siteplan.planning.floors import (
    AdjustmentStatus,
    adjust_floors,
    assign_random_floors,
    total_floor_area,
)
from siteplan.planning.sections import Section


def _sections(n: int = 4) -> list[Section]:
    return [
        Section(polygon=box(i * 20, 0, i * 20 + 10, 10), min_floors=1, max_floors=5)
        for i in range(n)
    ]


def test_random_floors_within_range():
    sections = _sections(10)
    assign_random_floors(sections, random.Random(3))
    assert all(1 <= s.floors <= 5 for s in sections)
    assert all(s.height == pytest.approx(s.floors * 3.2) for s in sections)


def test_random_floors_reproducible():
    a, b = _sections(10), _sections(10)
    assign_random_floors(a, random.Random(5))
    assign_random_floors(b, random.Random(5))
    assert [(s.floors, s.commercial) for s in a] == [(s.floors, s.commercial) for s in b]


def test_no_target():
    result = adjust_floors(_sections(), None, random.Random(1))
    assert result.status == AdjustmentStatus.NO_TARGET
    assert result.reached
    assert result.iterations == 0


@pytest.mark.parametrize("target", [500.0, 1200.0, 1900.0])
def test_converges_to_reachable_target(target):
    sections = _sections()
    rng = random.Random(2)
    assign_random_floors(sections, rng)
    result = adjust_floors(sections, target, rng)
    assert result.status == AdjustmentStatus.CONVERGED
    assert abs(total_floor_area(sections) - target) / target <= 0.05
    assert result.total_floor_area == pytest.approx(total_floor_area(sections))


def test_unreachable_target_exhausts_pool():
    sections = _sections()
    result = adjust_floors(sections, 10000.0, random.Random(1))
    assert result.status == AdjustmentStatus.POOL_EXHAUSTED
    assert not result.reached
    assert all(s.floors == 5 for s in sections)
    assert result.deviation == pytest.approx(0.8)


def test_iteration_cap():
    sections = _sections()
    result = adjust_floors(sections, 2000.0, random.Random(1), max_iterations=1)
    assert result.status == AdjustmentStatus.ITERATION_CAP
    assert result.iterations == 1
    assert total_floor_area(sections) == pytest.approx(500)


def test_keeps_moving_until_bound():
    # 1000 m² footprint: every step jumps past a 3400 target
    section = Section(polygon=box(0, 0, 40, 25), min_floors=1, max_floors=9, floors=3)
    result = adjust_floors([section], 3400.0, random.Random(1))
    assert result.status == AdjustmentStatus.POOL_EXHAUSTED
    assert section.floors == section.max_floors
    assert result.total_floor_area == pytest.approx(9000)


def test_direction_fixed_from_start():
    sections = _sections()
    for s in sections:
        s.set_floors(3)
    result = adjust_floors(sections, 1240.0, random.Random(1), tolerance=0.01)
    assert result.status == AdjustmentStatus.POOL_EXHAUSTED
    assert all(s.floors == 5 for s in sections)


@pytest.mark.parametrize("seed", range(6))
@pytest.mark.parametrize("target", [450.0, 1030.0, 1675.0, 3000.0, 100.0])
def test_within_tolerance_or_pinned(seed, target):
    rng = random.Random(seed)
    sections = [
        Section(polygon=box(0, i * 30, 10 + 3 * i, i * 30 + 10), min_floors=1, max_floors=6)
        for i in range(5)
    ]
    assign_random_floors(sections, rng)
    start = total_floor_area(sections)
    result = adjust_floors(sections, target, rng)

    total = total_floor_area(sections)
    if abs(total - target) / target <= 0.05:
        assert result.status == AdjustmentStatus.CONVERGED
    else:
        assert result.status == AdjustmentStatus.POOL_EXHAUSTED
        if start < target:
            assert all(s.floors == s.max_floors for s in sections)
        else:
            assert all(s.floors == s.min_floors for s in sections)

"""Floor assignment — random first pass, then one-floor nudges toward a target gross floor area."""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass

from siteplan.planning.sections import Section

logger = logging.getLogger(__name__)


class AdjustmentStatus(str, enum.Enum):
    NO_TARGET = "no_target"
    CONVERGED = "converged"
    POOL_EXHAUSTED = "pool_exhausted"
    ITERATION_CAP = "iteration_cap"


@dataclass(frozen=True)
class FloorAdjustment:
    """Outcome of a reconciliation run. ``reached`` is False when the loop gave up."""

    status: AdjustmentStatus
    iterations: int
    total_floor_area: float
    target: float | None

    @property
    def reached(self) -> bool:
        return self.status in (AdjustmentStatus.CONVERGED, AdjustmentStatus.NO_TARGET)

    @property
    def deviation(self) -> float:
        if not self.target:
            return 0.0
        return abs(self.total_floor_area - self.target) / self.target


def total_floor_area(sections: list[Section]) -> float:
    return sum(s.gross_floor_area for s in sections)


def assign_random_floors(sections: list[Section], rng: random.Random) -> None:
    """Uniform floors in each section's range and a fair-coin commercial flag."""
    for section in sections:
        section.floors = rng.randint(section.min_floors, section.max_floors)
        section.update_metrics(commercial=rng.random() < 0.5)


def adjust_floors(
    sections: list[Section],
    target: float | None,
    rng: random.Random,
    tolerance: float = 0.05,
    max_iterations: int = 10000,
) -> FloorAdjustment:
    """Shift single floors on random sections until the total is within ``tolerance`` of ``target``.

    The direction is fixed from the starting total. The pool holds every
    section that can still move that way; a section leaves the pool once it
    reaches its bound. Ends on convergence, an empty pool or the iteration cap.
    """
    total = total_floor_area(sections)
    if not target or target <= 0:
        return FloorAdjustment(AdjustmentStatus.NO_TARGET, 0, total, target)

    increase = total < target
    step = 1 if increase else -1
    pool = [s for s in sections if (s.can_add_floor() if increase else s.can_remove_floor())]

    iterations = 0
    status = AdjustmentStatus.ITERATION_CAP
    while iterations < max_iterations:
        if abs(target - total) / target <= tolerance:
            status = AdjustmentStatus.CONVERGED
            break
        if not pool:
            status = AdjustmentStatus.POOL_EXHAUSTED
            break

        section = rng.choice(pool)
        section.set_floors(section.floors + step)
        total += step * section.area
        if not (section.can_add_floor() if increase else section.can_remove_floor()):
            pool = [s for s in pool if s is not section]
        iterations += 1

    logger.debug(
        "Floor adjustment %s after %d steps: %.0f of %.0f",
        status.value,
        iterations,
        total,
        target,
    )
    return FloorAdjustment(status, iterations, total, target)

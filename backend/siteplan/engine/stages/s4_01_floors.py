"""P4.01 — Floors.

Random floors within each section's range, then one-floor nudges toward
the requested gross floor area.
"""

from __future__ import annotations

from siteplan.engine.context import PassContext
from siteplan.engine.registry import Layer, stage
from siteplan.planning.floors import adjust_floors, assign_random_floors


@stage(
    id="P4.01",
    layer=Layer.ASSEMBLY,
    dependencies=["P3.01"],
    description="Assign floors and reconcile toward the target floor area",
)
def floors(ctx: PassContext) -> None:
    assign_random_floors(ctx.sections, ctx.rng)
    ctx.floor_adjustment = adjust_floors(
        ctx.sections,
        ctx.gross_floor_area,
        ctx.rng,
        tolerance=ctx.config.floor_tolerance,
        max_iterations=ctx.config.max_floor_iterations,
    )

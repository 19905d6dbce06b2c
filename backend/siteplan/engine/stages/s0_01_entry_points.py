"""P0.01 — Entry Points.

Seed the street network from the plot ring: concave corners plus evenly
spaced points along macro-edges. Spacing shrinks as the pass's street
density grows. Every point is spliced into the ring as a vertex.
"""

from __future__ import annotations

from siteplan.engine.context import PassContext
from siteplan.engine.registry import Layer, stage
from siteplan.engine.visuals import render_entry_points
from siteplan.planning.entry_points import generate_entry_points, splice_points


@stage(
    id="P0.01",
    layer=Layer.STREETS,
    description="Generate boundary entry points and splice them into the ring",
)
def entry_points(ctx: PassContext) -> None:
    ctx.entry_points = generate_entry_points(ctx.plot, ctx.config, ctx.street_density)
    ctx.plot_with_entries = splice_points(ctx.plot, ctx.entry_points, ctx.config.ring_snap_tolerance)
    if ctx.config.capture_visuals:
        ctx.visuals["P0.01"] = render_entry_points(ctx.plot, ctx.entry_points)

"""P0.03 — Blocks.

Node the plot ring with the streets and polygonize the arrangement. With
no streets the plot is a single block.
"""

from __future__ import annotations

from siteplan.engine.context import PassContext
from siteplan.engine.registry import Layer, stage
from siteplan.engine.visuals import render_streets
from siteplan.planning.decompose import decompose_plot


@stage(
    id="P0.03",
    layer=Layer.STREETS,
    dependencies=["P0.02"],
    description="Decompose the plot into blocks bounded by streets",
)
def blocks(ctx: PassContext) -> None:
    plot = ctx.plot_with_entries if ctx.plot_with_entries is not None else ctx.plot
    ctx.blocks = decompose_plot(plot, ctx.streets, ctx.config.noding_grid_size)
    if ctx.config.capture_visuals:
        ctx.visuals["P0.03"] = render_streets(ctx.plot, ctx.streets, ctx.blocks)

"""P4.02 — Layout.

Package the pass into a scored Layout. A pass with no sections yields none.
"""

from __future__ import annotations

from siteplan.engine.context import PassContext
from siteplan.engine.registry import Layer, stage
from siteplan.engine.visuals import render_layout
from siteplan.planning.layout import assemble_layout


@stage(
    id="P4.02",
    layer=Layer.ASSEMBLY,
    dependencies=["P4.01"],
    description="Assemble the layout and its summary metrics",
)
def layout(ctx: PassContext) -> None:
    if not ctx.sections:
        return
    ctx.layout = assemble_layout(
        name=ctx.name,
        plot=ctx.plot,
        sections=ctx.sections,
        streets=ctx.streets,
        parks=ctx.parks,
        blocks=ctx.blocks,
        entry_points=ctx.entry_points,
        street_density=ctx.street_density,
        floor_adjustment=ctx.floor_adjustment,
    )
    if ctx.config.capture_visuals:
        ctx.visuals["P4.02"] = render_layout(ctx.layout)

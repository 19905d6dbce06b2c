"""Plot decomposition — polygonize plot ring + streets into block faces."""

from __future__ import annotations

import logging

import shapely
from shapely.geometry import LineString, Polygon
from shapely.ops import polygonize, unary_union

from siteplan.utils.geometry import ring_edges

logger = logging.getLogger(__name__)


def decompose_plot(
    plot: Polygon,
    streets: list[LineString],
    grid_size: float = 1e-9,
) -> list[Polygon]:
    """Node boundary edges and streets on a shared precision grid, then polygonize.

    With no streets the plot itself is the single block.
    """
    if not streets:
        return [plot]

    lines = ring_edges(plot) + list(streets)
    snapped = [shapely.set_precision(line, grid_size) for line in lines]
    noded = unary_union([line for line in snapped if not line.is_empty])

    blocks = [
        face
        for face in polygonize(getattr(noded, "geoms", [noded]))
        if face.area > 0 and plot.covers(face.representative_point())
    ]
    if not blocks:
        logger.debug("Decomposition produced no faces; falling back to the whole plot")
        return [plot]
    logger.debug("Decomposed plot into %d blocks", len(blocks))
    return blocks

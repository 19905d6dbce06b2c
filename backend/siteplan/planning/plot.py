"""Plot validation — the only terminal input error of a generation run."""

from __future__ import annotations

from collections.abc import Sequence

from shapely.geometry import Polygon
from shapely.validation import explain_validity


class InvalidPlotError(ValueError):
    """The plot polygon is degenerate or self-intersecting."""


def validate_plot(plot: Polygon | Sequence[tuple[float, float]]) -> Polygon:
    """Return a clean single-ring plot polygon or raise InvalidPlotError.

    Accepts a polygon or an open/closed coordinate sequence. Consecutive
    duplicate vertices are dropped and the ring is closed.
    """
    coords = list(plot.exterior.coords) if isinstance(plot, Polygon) else list(plot)

    distinct: list[tuple[float, float]] = []
    for x, y in coords:
        pt = (float(x), float(y))
        if not distinct or distinct[-1] != pt:
            distinct.append(pt)
    if len(distinct) > 1 and distinct[0] == distinct[-1]:
        distinct.pop()

    if len(set(distinct)) < 3:
        raise InvalidPlotError(f"Plot needs at least 3 distinct points, got {len(set(distinct))}")

    polygon = Polygon(distinct)
    if not polygon.is_valid:
        raise InvalidPlotError(f"Plot ring is invalid: {explain_validity(polygon)}")
    if polygon.area <= 0:
        raise InvalidPlotError("Plot has zero area")
    return polygon

"""Per-stage SVG previews for a generation pass.

Converts the shapely geometry held on a ``PassContext`` into standalone SVG
documents. No new dependencies — uses only Shapely coords and string
formatting. World y points up, so every document flips its content group.
"""

from __future__ import annotations

from shapely.geometry import LineString, Point, Polygon

from siteplan.planning.grid import Cluster, SpatialGrid
from siteplan.planning.layout import Layout

# 12 distinct colors for coloring individual blocks / clusters
_PALETTE = [
    "#e6194b", "#3cb44b", "#4363d8", "#f58231",
    "#911eb4", "#42d4f4", "#f032e6", "#bfef45",
    "#fabed4", "#469990", "#dcbeff", "#9A6324",
]

_PLOT_STROKE = "#e0e0e0"
_STREET_COLOR = "#f5f5f5"
_PARK_COLOR = "#3cb44b"
_SECTION_COLOR = "#4363d8"
_COMMERCIAL_COLOR = "#f58231"
_RESTRICTED_COLOR = "#e6194b"


def _polygon_to_svg_paths(
    geom,
    fill: str = "#888888",
    opacity: float = 0.7,
    stroke_width: float = 0.5,
) -> str:
    """Convert a Shapely geometry to SVG <path> elements (holes use evenodd)."""
    if geom is None or geom.is_empty:
        return ""

    def _ring(coords) -> str:
        coords = list(coords)
        d = f"M {coords[0][0]:.2f},{coords[0][1]:.2f}"
        for x, y in coords[1:]:
            d += f" L {x:.2f},{y:.2f}"
        return d + " Z"

    def _render_polygon(poly: Polygon) -> str:
        if poly.is_empty or len(poly.exterior.coords) < 4:
            return ""
        d = " ".join([_ring(poly.exterior.coords)] + [_ring(r.coords) for r in poly.interiors])
        return (
            f'<path d="{d}" fill="{fill}" fill-opacity="{opacity}" fill-rule="evenodd" '
            f'stroke="{fill}" stroke-width="{stroke_width:.2f}" stroke-opacity="0.9"/>'
        )

    polys = list(geom.geoms) if hasattr(geom, "geoms") else [geom]
    return "\n".join(
        p for p in (_render_polygon(g) for g in polys if isinstance(g, Polygon)) if p
    )


def _line_to_svg_path(line: LineString, color: str, stroke_width: float) -> str:
    coords = list(line.coords)
    if len(coords) < 2:
        return ""
    d = f"M {coords[0][0]:.2f},{coords[0][1]:.2f}"
    for x, y in coords[1:]:
        d += f" L {x:.2f},{y:.2f}"
    return (
        f'<path d="{d}" fill="none" stroke="{color}" '
        f'stroke-width="{stroke_width:.2f}" stroke-linecap="round"/>'
    )


def _point_marker(pt: Point, color: str, radius: float) -> str:
    return f'<circle cx="{pt.x:.2f}" cy="{pt.y:.2f}" r="{radius:.2f}" fill="{color}"/>'


def _stroke_for(plot: Polygon) -> float:
    min_x, min_y, max_x, max_y = plot.bounds
    return max(max_x - min_x, max_y - min_y, 1.0) / 300


def _svg_wrap(content: str, bounds: tuple[float, float, float, float], pad: float = 5.0) -> str:
    """Wrap SVG content in a standalone document whose viewBox fits ``bounds``."""
    min_x, min_y, max_x, max_y = bounds
    w = max_x - min_x + 2 * pad
    h = max_y - min_y + 2 * pad
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{min_x - pad:.2f} {-max_y - pad:.2f} {w:.2f} {h:.2f}"'
        ' style="background:#1a1a2e">'
        f'\n<g transform="scale(1,-1)">\n{content}\n</g>\n</svg>'
    )


def _plot_outline(plot: Polygon, stroke_width: float) -> str:
    return _line_to_svg_path(LineString(plot.exterior.coords), _PLOT_STROKE, stroke_width)


def render_entry_points(plot: Polygon, entry_points: list[Point]) -> str:
    """P0.01: Plot ring with its entry points."""
    sw = _stroke_for(plot)
    parts = [_plot_outline(plot, sw)]
    parts.extend(_point_marker(p, _PALETTE[3], sw * 3) for p in entry_points)
    return _svg_wrap("\n".join(p for p in parts if p), plot.bounds)


def render_streets(plot: Polygon, streets: list[LineString], blocks: list[Polygon]) -> str:
    """P0.03: Block faces, each a palette color, with the streets on top."""
    sw = _stroke_for(plot)
    parts = [
        _polygon_to_svg_paths(b, fill=_PALETTE[i % len(_PALETTE)], opacity=0.35, stroke_width=sw)
        for i, b in enumerate(blocks)
    ]
    parts.append(_plot_outline(plot, sw))
    parts.extend(_line_to_svg_path(s, _STREET_COLOR, sw * 2) for s in streets)
    return _svg_wrap("\n".join(p for p in parts if p), plot.bounds)


def render_grid(plot: Polygon, grid: SpatialGrid) -> str:
    """P1.01: Available cells in grey, restricted cells in red."""
    sw = _stroke_for(plot) / 2
    parts = [_polygon_to_svg_paths(c, fill="#888888", opacity=0.5, stroke_width=sw) for c in grid.available_cells()]
    parts.extend(
        _polygon_to_svg_paths(c, fill=_RESTRICTED_COLOR, opacity=0.25, stroke_width=sw)
        for c in grid.restricted_cells()
    )
    parts.append(_plot_outline(plot, _stroke_for(plot)))
    return _svg_wrap("\n".join(p for p in parts if p), plot.bounds)


def render_clusters(plot: Polygon, grid: SpatialGrid, clusters: list[Cluster]) -> str:
    """P1.02: Every cell of a cluster shares the cluster's color."""
    sw = _stroke_for(plot) / 2
    parts: list[str] = []
    for i, cluster in enumerate(clusters):
        color = _PALETTE[i % len(_PALETTE)]
        parts.extend(
            _polygon_to_svg_paths(grid.cell_polygon(c, r), fill=color, opacity=0.6, stroke_width=sw)
            for c, r in cluster
        )
    parts.append(_plot_outline(plot, _stroke_for(plot)))
    return _svg_wrap("\n".join(p for p in parts if p), plot.bounds)


def render_sub_blocks(plot: Polygon, sub_blocks: list[Polygon]) -> str:
    """P2.01: Traced sub-block polygons."""
    sw = _stroke_for(plot)
    parts = [
        _polygon_to_svg_paths(b, fill=_PALETTE[i % len(_PALETTE)], opacity=0.55, stroke_width=sw)
        for i, b in enumerate(sub_blocks)
    ]
    parts.append(_plot_outline(plot, sw))
    return _svg_wrap("\n".join(p for p in parts if p), plot.bounds)


def render_layout(layout: Layout) -> str:
    """P4.02: Final composite: parks, streets, then sections (commercial in orange)."""
    plot = layout.plot
    sw = _stroke_for(plot)
    parts = [_polygon_to_svg_paths(p, fill=_PARK_COLOR, opacity=0.4, stroke_width=sw) for p in layout.parks]
    parts.extend(_line_to_svg_path(s, _STREET_COLOR, sw * 2) for s in layout.streets)
    for section in layout.sections:
        color = _COMMERCIAL_COLOR if section.commercial else _SECTION_COLOR
        # Taller sections render more opaque
        opacity = min(0.3 + 0.07 * section.floors, 0.95)
        parts.append(_polygon_to_svg_paths(section.polygon, fill=color, opacity=opacity, stroke_width=sw))
    parts.append(_plot_outline(plot, sw))
    return _svg_wrap("\n".join(p for p in parts if p), plot.bounds)

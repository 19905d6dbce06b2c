"""Tests for per-stage SVG previews."""

from shapely.geometry import LineString, Point, Polygon, box

from siteplan.engine.visuals import (
    _polygon_to_svg_paths,
    render_clusters,
    render_entry_points,
    render_grid,
    render_layout,
    render_streets,
    render_sub_blocks,
)
from siteplan.planning.grid import SpatialGrid
from siteplan.planning.layout import assemble_layout
from siteplan.planning.sections import Section


def _is_svg(doc: str) -> bool:
    return doc.startswith("<svg") and doc.endswith("</svg>")


def test_polygon_paths_skip_empty():
    assert _polygon_to_svg_paths(None) == ""
    assert _polygon_to_svg_paths(Polygon()) == ""


def test_polygon_with_hole_uses_evenodd():
    poly = box(0, 0, 10, 10).difference(box(4, 4, 6, 6))
    path = _polygon_to_svg_paths(poly, fill="#ffffff")
    assert path.count(" Z") == 2
    assert 'fill-rule="evenodd"' in path


def test_multipolygon_renders_each_part():
    geom = box(0, 0, 1, 1).union(box(5, 5, 6, 6))
    assert _polygon_to_svg_paths(geom).count("<path") == 2


def test_entry_points(rect_plot):
    doc = render_entry_points(rect_plot, [Point(100, 0), Point(0, 75)])
    assert _is_svg(doc)
    assert doc.count("<circle") == 2
    assert 'transform="scale(1,-1)"' in doc


def test_streets_and_blocks(rect_plot):
    streets = [LineString([(100, 0), (100, 150)])]
    blocks = [box(0, 0, 100, 150), box(100, 0, 200, 150)]
    doc = render_streets(rect_plot, streets, blocks)
    assert _is_svg(doc)
    # two blocks, the plot outline and one street
    assert doc.count("<path") == 4


def test_grid_and_clusters(rect_plot):
    grid = SpatialGrid(rect_plot, cell_size=50)
    grid.mark_available_area(box(0, 0, 100, 150))
    assert _is_svg(render_grid(rect_plot, grid))
    clusters = grid.clusterize_4_directional()
    doc = render_clusters(rect_plot, grid, clusters)
    assert doc.count("<path") == 6 + 1


def test_sub_blocks_and_layout(rect_plot):
    assert _is_svg(render_sub_blocks(rect_plot, [box(10, 10, 90, 70)]))
    section = Section(polygon=box(20, 20, 40, 40), min_floors=1, max_floors=5, floors=3)
    section.update_metrics(commercial=True)
    layout = assemble_layout("Layout 1", rect_plot, [section], [LineString([(100, 0), (100, 150)])], [box(120, 20, 180, 60)])
    doc = render_layout(layout)
    assert _is_svg(doc)
    assert "#f58231" in doc

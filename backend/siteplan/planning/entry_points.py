"""Boundary entry points — street seeds on the plot ring.

Two sources:
- concave corners (interior angle over 180° + collinear tolerance) between
  two long edges,
- evenly spaced points along macro-edges (runs of nearly collinear edges).

Every point is spliced into the ring as an exact vertex so that noding and
polygonization downstream see it.
"""

from __future__ import annotations

import logging
import math

from shapely.geometry import LineString, Point, Polygon

from siteplan.engine.config import GenerationConfig
from siteplan.utils.geometry import angle_between, direction, distance, is_clockwise

logger = logging.getLogger(__name__)

Coord = tuple[float, float]


def generate_entry_points(
    plot: Polygon,
    config: GenerationConfig | None = None,
    density: float = 1.0,
) -> list[Point]:
    """Concave corners first, then interior points of every macro-edge.

    ``density`` scales the spacing: higher density, shorter spacing, more
    entry points.
    """
    config = config or GenerationConfig()
    verts = _ring_vertices(plot)
    if len(verts) < 3:
        return []

    points: list[Point] = [Point(c) for c in concave_corners(verts, config)]

    max_len = config.max_segment_length / max(density, 1e-6)
    for path in merge_collinear_edges(verts, config.collinear_tolerance_deg):
        line = LineString(path)
        segments = math.ceil(line.length / max_len)
        for s in range(1, segments):
            points.append(line.interpolate(s / segments, normalized=True))

    logger.debug("Entry points: %d (spacing %.1f)", len(points), max_len)
    return points


def concave_corners(verts: list[Coord], config: GenerationConfig) -> list[Coord]:
    """Vertices whose interior angle exceeds 180° + collinear tolerance."""
    threshold = 180.0 + config.collinear_tolerance_deg
    clockwise = is_clockwise(verts + [verts[0]])
    n = len(verts)
    result: list[Coord] = []
    for i in range(n):
        prev, cur, nxt = verts[i - 1], verts[i], verts[(i + 1) % n]
        if (
            distance(prev, cur) <= config.min_corner_edge_length
            or distance(cur, nxt) <= config.min_corner_edge_length
        ):
            continue
        if math.degrees(interior_angle(prev, cur, nxt, clockwise)) > threshold:
            result.append(cur)
    return result


def interior_angle(prev: Coord, cur: Coord, nxt: Coord, clockwise: bool) -> float:
    """Interior polygon angle at ``cur`` in radians, range [0, 2pi)."""
    v1 = direction(cur, prev)
    v2 = direction(cur, nxt)
    cross = v1[0] * v2[1] - v1[1] * v2[0]
    angle = angle_between(v1, v2)
    concave = cross < 0 if clockwise else cross > 0
    return 2 * math.pi - angle if concave else angle


def merge_collinear_edges(verts: list[Coord], max_angle_deg: float) -> list[list[Coord]]:
    """Split the ring at every vertex turning more than ``max_angle_deg``.

    Returns each macro-edge as a vertex path. A ring with no sharp turn is
    one closed macro-edge.
    """
    n = len(verts)
    limit = math.radians(max_angle_deg)
    corners = [
        i
        for i in range(n)
        if angle_between(direction(verts[i - 1], verts[i]), direction(verts[i], verts[(i + 1) % n])) > limit
    ]
    if not corners:
        return [verts + [verts[0]]]

    paths: list[list[Coord]] = []
    for k, start in enumerate(corners):
        end = corners[(k + 1) % len(corners)]
        path = [verts[start]]
        i = start
        while True:
            i = (i + 1) % n
            path.append(verts[i])
            if i == end:
                break
        paths.append(path)
    return paths


def splice_points(plot: Polygon, points: list[Point], tolerance: float = 1e-8) -> Polygon:
    """Insert each point into the ring segment it lies on, unless it is already a vertex."""
    ring = list(plot.exterior.coords)
    for pt in points:
        ring = _insert_on_ring(ring, (pt.x, pt.y), tolerance)
    return Polygon(ring)


def _insert_on_ring(ring: list[Coord], pt: Coord, tolerance: float) -> list[Coord]:
    result: list[Coord] = []
    for i in range(len(ring) - 1):
        c0, c1 = ring[i], ring[i + 1]
        result.append(c0)
        if (
            _segment_distance(c0, c1, pt) < tolerance
            and not _same(c0, pt)
            and not _same(c1, pt)
        ):
            result.append(pt)
    result.append(result[0])
    return result


def _segment_distance(a: Coord, b: Coord, p: Coord) -> float:
    dx, dy = b[0] - a[0], b[1] - a[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(a, p)
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return distance((a[0] + t * dx, a[1] + t * dy), p)


def _same(a: Coord, b: Coord) -> bool:
    return a[0] == b[0] and a[1] == b[1]


def _ring_vertices(plot: Polygon) -> list[Coord]:
    coords = [(float(x), float(y)) for x, y in plot.exterior.coords]
    return coords[:-1]

"""Street network builder — greedy, angle-scored connection of entry points.

Each iteration enumerates single-segment moves from every unconnected entry
point:
    pair        → another entry point
    cross       → an existing street intersection
    projection  → the closest point on a committed street
and commits the move whose worst junction angle is the largest (closest to
90°). Projection moves split the target street at the projection point.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from shapely.geometry import LineString, MultiPoint, Point, Polygon
from shapely.prepared import prep

from siteplan.engine.config import GenerationConfig
from siteplan.utils.geometry import closest_point_on, direction, distance, line_angle, ring_edges

logger = logging.getLogger(__name__)

Coord = tuple[float, float]


@dataclass
class Candidate:
    kind: str  # "pair" | "cross" | "projection"
    score: float
    line: LineString
    start: Point
    end_point: Point | None = None
    split_at: Coord | None = None


@dataclass
class StreetNetwork:
    """Result of a street build: committed streets and unconnected leftovers."""

    streets: list[LineString] = field(default_factory=list)
    entry_points: list[Point] = field(default_factory=list)
    remaining: list[Point] = field(default_factory=list)
    iterations: int = 0
    # Kind of each committed move, in commit order
    moves: list[str] = field(default_factory=list)

    @property
    def crosses(self) -> list[Coord]:
        return compute_crosses(self.streets)


def build_streets(
    plot: Polygon,
    entry_points: list[Point],
    config: GenerationConfig | None = None,
) -> StreetNetwork:
    """Connect ``entry_points`` inside ``plot`` (whose ring already contains them)."""
    config = config or GenerationConfig()
    prepared = prep(plot)
    boundary = ring_edges(plot)

    remaining = list(entry_points)
    streets: list[LineString] = []
    moves: list[str] = []
    iterations = 0

    while remaining and iterations < config.max_street_iterations:
        iterations += 1
        crosses = compute_crosses(streets)
        candidates = enumerate_candidates(prepared, boundary, streets, crosses, remaining, entry_points, config)
        if not candidates:
            logger.debug("Street builder: no valid candidate, %d entry points left", len(remaining))
            break

        best = max(candidates, key=lambda c: c.score)
        if best.kind == "projection" and best.split_at is not None:
            split_street_at(streets, best.split_at, config.split_tolerance)
        streets.append(best.line)
        moves.append(best.kind)

        remaining = [p for p in remaining if p is not best.start and p is not best.end_point]

    logger.debug(
        "Street builder: %d streets after %d iterations (%d unconnected)",
        len(streets),
        iterations,
        len(remaining),
    )
    return StreetNetwork(
        streets=streets,
        entry_points=list(entry_points),
        remaining=remaining,
        iterations=iterations,
        moves=moves,
    )


def enumerate_candidates(
    prepared,
    boundary: list[LineString],
    streets: list[LineString],
    crosses: list[Coord],
    remaining: list[Point],
    entry_points: list[Point],
    config: GenerationConfig,
) -> list[Candidate]:
    candidates: list[Candidate] = []

    def consider(kind: str, a: Point, to: Coord, b: Point | None, check_crosses: bool) -> None:
        start = (a.x, a.y)
        if distance(start, to) <= config.split_tolerance:
            return
        line = LineString([start, to])
        if not prepared.covers(line):
            return
        if check_crosses and is_too_close_to_cross(line, crosses, config):
            return
        score = score_candidate(boundary, streets, start, to, line, config)
        split_at = to if kind == "projection" else None
        candidates.append(Candidate(kind, score, line, a, b, split_at))

    for a in remaining:
        for b in entry_points:
            if a is b:
                continue
            consider("pair", a, (b.x, b.y), b, check_crosses=True)
        for cross in crosses:
            consider("cross", a, cross, None, check_crosses=False)

    for a in remaining:
        for street in streets:
            closest = closest_point_on(street, a)
            consider("projection", a, (closest.x, closest.y), None, check_crosses=True)

    return candidates


def compute_crosses(streets: list[LineString]) -> list[Coord]:
    """Pairwise point intersections of committed streets. Overlaps are ignored."""
    crosses: list[Coord] = []
    for i in range(len(streets)):
        for j in range(i + 1, len(streets)):
            inter = streets[i].intersection(streets[j])
            if inter.is_empty:
                continue
            if isinstance(inter, Point):
                crosses.append((inter.x, inter.y))
            elif isinstance(inter, MultiPoint):
                crosses.extend((p.x, p.y) for p in inter.geoms)
    return crosses


def is_too_close_to_cross(line: LineString, crosses: list[Coord], config: GenerationConfig) -> bool:
    """True if ``line`` passes a cross closer than the clearance without ending on it."""
    for cross in crosses:
        d = line.distance(Point(cross))
        if config.cross_tolerance < d < config.min_cross_distance:
            return True
    return False


def score_candidate(
    boundary: list[LineString],
    streets: list[LineString],
    start: Coord,
    end: Coord,
    line: LineString,
    config: GenerationConfig,
) -> float:
    """Worst junction angle of a candidate, radians in [0, pi/2]; +inf if unconstrained."""
    incident = streets + boundary
    return min(
        min_crossing_angle(streets, line, config.crossing_end_tolerance),
        min_incident_angle(incident, start, end, config.incidence_tolerance),
        min_incident_angle(incident, end, start, config.incidence_tolerance),
    )


def min_crossing_angle(streets: list[LineString], line: LineString, end_tolerance: float) -> float:
    """Smallest angle to a street segment that ``line`` crosses away from its own ends."""
    coords = list(line.coords)
    start, end = coords[0], coords[-1]
    cand_dir = direction(start, end)
    best = math.inf
    for street in streets:
        s = list(street.coords)
        for i in range(len(s) - 1):
            seg = LineString([s[i], s[i + 1]])
            inter = seg.intersection(line)
            if inter.is_empty:
                continue
            if any(
                distance(p, start) > end_tolerance and distance(p, end) > end_tolerance
                for p in _coords_of(inter)
            ):
                best = min(best, line_angle(cand_dir, direction(s[i], s[i + 1])))
    return best


def min_incident_angle(lines: list[LineString], at: Coord, toward: Coord, tolerance: float) -> float:
    """Smallest angle between the candidate leaving ``at`` and any line segment ending there."""
    cand_dir = direction(at, toward)
    best = math.inf
    for line in lines:
        c = list(line.coords)
        for i in range(len(c) - 1):
            a, b = c[i], c[i + 1]
            if distance(a, at) < tolerance:
                best = min(best, line_angle(cand_dir, direction(a, b)))
            elif distance(b, at) < tolerance:
                best = min(best, line_angle(cand_dir, direction(b, a)))
    return best


def split_street_at(streets: list[LineString], point: Coord, tolerance: float = 1e-6) -> bool:
    """Replace the street passing through ``point`` by its two halves.

    No split happens when the point is one of that street's endpoints.
    """
    target = Point(point)
    for i, street in enumerate(streets):
        coords = list(street.coords)
        start, end = coords[0], coords[-1]
        if LineString([start, end]).distance(target) > tolerance:
            continue
        if distance(start, point) <= tolerance or distance(end, point) <= tolerance:
            return False
        streets.pop(i)
        streets.append(LineString([start, point]))
        streets.append(LineString([point, end]))
        return True
    return False


def _coords_of(geom) -> list[Coord]:
    if hasattr(geom, "geoms"):
        return [c for g in geom.geoms for c in _coords_of(g)]
    return [(float(x), float(y)) for x, y in geom.coords]

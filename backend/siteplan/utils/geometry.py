"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import LineString, Point, Polygon


def signed_area(points: NDArray[np.float64]) -> float:
    """Shoelace formula for signed area. Positive = CCW, Negative = CW."""
    x = points[:, 0]
    y = points[:, 1]
    return float(0.5 * np.sum(x[:-1] * y[1:] - x[1:] * y[:-1]))


def is_clockwise(coords) -> bool:
    """True if a closed coordinate ring winds clockwise."""
    return signed_area(np.asarray(coords, dtype=np.float64)) < 0


def angle_between(v1: tuple[float, float], v2: tuple[float, float]) -> float:
    """Unsigned angle between two vectors in radians, range [0, pi]."""
    cross = v1[0] * v2[1] - v1[1] * v2[0]
    dot = v1[0] * v2[0] + v1[1] * v2[1]
    return math.atan2(abs(cross), dot)


def line_angle(v1: tuple[float, float], v2: tuple[float, float]) -> float:
    """Angle between two undirected lines, folded into [0, pi/2]."""
    a = angle_between(v1, v2)
    return min(a, math.pi - a)


def direction(p: tuple[float, float], q: tuple[float, float]) -> tuple[float, float]:
    return (q[0] - p[0], q[1] - p[1])


def distance(p: tuple[float, float], q: tuple[float, float]) -> float:
    return math.hypot(q[0] - p[0], q[1] - p[1])


def ring_edges(polygon: Polygon) -> list[LineString]:
    """Exterior ring as a list of two-point segments."""
    coords = list(polygon.exterior.coords)
    return [LineString([coords[i], coords[i + 1]]) for i in range(len(coords) - 1)]


def line_segments(line: LineString) -> list[tuple[tuple[float, float], tuple[float, float]]]:
    coords = list(line.coords)
    return [(coords[i], coords[i + 1]) for i in range(len(coords) - 1)]


def closest_point_on(line: LineString, point: Point) -> Point:
    """Orthogonal projection of ``point`` onto ``line`` (clamped to the line)."""
    return line.interpolate(line.project(point))


def pca_orientation(points: NDArray[np.float64], snap_deg: float = 5.0) -> float:
    """Principal axis angle in radians, folded into (-pi/4, pi/4].

    Rectangles aligned to either axis report 0. Angles within ``snap_deg``
    of zero snap to 0.
    """
    if len(points) < 3:
        return 0.0
    centered = points - np.mean(points, axis=0)
    cov_xx = float(np.mean(centered[:, 0] ** 2))
    cov_yy = float(np.mean(centered[:, 1] ** 2))
    cov_xy = float(np.mean(centered[:, 0] * centered[:, 1]))

    angle = 0.5 * math.atan2(2.0 * cov_xy, cov_xx - cov_yy)
    if angle < 0:
        angle += math.pi
    angle = angle % (math.pi / 2)
    if angle > math.pi / 4:
        angle -= math.pi / 2
    if abs(angle) < math.radians(snap_deg):
        angle = 0.0
    return angle


def rotate_points(
    points: NDArray[np.float64],
    angle: float,
    origin: tuple[float, float],
) -> NDArray[np.float64]:
    """Rotate an Nx2 array by ``angle`` radians around ``origin``."""
    c, s = math.cos(angle), math.sin(angle)
    shifted = points - np.asarray(origin, dtype=np.float64)
    rotated = np.empty_like(shifted)
    rotated[:, 0] = shifted[:, 0] * c - shifted[:, 1] * s
    rotated[:, 1] = shifted[:, 0] * s + shifted[:, 1] * c
    return rotated + np.asarray(origin, dtype=np.float64)


def aspect_ratio(width: float, height: float) -> float:
    """max(w/h, h/w); infinite for degenerate extents."""
    if width <= 0 or height <= 0:
        return float("inf")
    return max(width / height, height / width)

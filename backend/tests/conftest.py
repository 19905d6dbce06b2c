"""Shared test fixtures."""

from __future__ import annotations

import random

import pytest
from shapely.geometry import Polygon, box

from siteplan.engine.config import GenerationConfig


# Metric plots (metres)

RECT_200x150 = [(0.0, 0.0), (200.0, 0.0), (200.0, 150.0), (0.0, 150.0)]

SQUARE_100 = [(0.0, 0.0), (100.0, 0.0), (100.0, 100.0), (0.0, 100.0)]

# Concave corner at (120, 120), interior angle 270°
L_SHAPE = [
    (0.0, 0.0),
    (240.0, 0.0),
    (240.0, 120.0),
    (120.0, 120.0),
    (120.0, 240.0),
    (0.0, 240.0),
]

BOWTIE = [(0.0, 0.0), (10.0, 10.0), (10.0, 0.0), (0.0, 10.0)]

# Small WGS84 parcel (about 220 m x 170 m) near Kazan
GEO_RECT = [
    {"lat": 55.7900, "lng": 49.1200},
    {"lat": 55.7900, "lng": 49.1235},
    {"lat": 55.7915, "lng": 49.1235},
    {"lat": 55.7915, "lng": 49.1200},
]


@pytest.fixture
def rect_plot() -> Polygon:
    return Polygon(RECT_200x150)


@pytest.fixture
def l_plot() -> Polygon:
    return Polygon(L_SHAPE)


@pytest.fixture
def block_300() -> Polygon:
    return box(0, 0, 300, 300)


@pytest.fixture
def config() -> GenerationConfig:
    return GenerationConfig()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1)

"""Site layout generation engine."""

from siteplan.engine.config import GenerationConfig
from siteplan.engine.registry import Layer, get_registry, stage

__all__ = [
    "GenerationConfig",
    "Layer",
    "get_registry",
    "stage",
]

"""Configuration loading utilities for Arbor."""

from .schema import (
    ArcShapeConfig,
    ScenarioConfig,
    TriangleShapeConfig,
    load_config,
)

__all__ = ["ArcShapeConfig", "ScenarioConfig", "TriangleShapeConfig", "load_config"]

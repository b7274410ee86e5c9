"""Rendering sinks for generated trees."""

from .sinks import (
    GraphicsSink,
    LineStyle,
    MarkerStyle,
    MatplotlibSink,
    RecordingSink,
    render,
    render_png,
    render_shapes,
)

__all__ = [
    "GraphicsSink",
    "LineStyle",
    "MarkerStyle",
    "MatplotlibSink",
    "RecordingSink",
    "render",
    "render_png",
    "render_shapes",
]

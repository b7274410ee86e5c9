"""Arbor – binary fractal tree generator.

This package contains:
- Point / Segment geometry and bearing projection (core.geometry)
- The branch generator and Tree result (core.generator)
- Decoration palettes for branch-tip markers (core.decoration)
- NPZ, PLY and LAS/LAZ writers (core.exporter)
- Graphics sinks, including a matplotlib preview renderer (render)
- YAML scenario configs, an SDK entry point and a typer CLI
"""

from .core.geometry import (Point, Segment, point_at_angle, make_triangle,
                            circular_arc, lonlat_to_web_mercator)
from .core.generator import (
    Branch, BranchGenerator, Tree, TreeParameterError, MAX_DEPTH,
    generate, grow, iter_branches, segment_count, validate_parameters,
)
from .core.decoration import DecorationPalette, RandomPalette, FixedPalette
from .core.exporter import LasWriter, PlyWriter, NpzWriter
from .render.sinks import GraphicsSink, LineStyle, MarkerStyle, RecordingSink, MatplotlibSink

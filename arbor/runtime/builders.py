from __future__ import annotations

import math
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from ..config import ArcShapeConfig, ScenarioConfig, TriangleShapeConfig
from ..core.decoration import DecorationPalette, FixedPalette, RandomPalette
from ..core.exporter import LasWriter, NpzWriter, PlyWriter
from ..core.geometry import Point, circular_arc, lonlat_to_web_mercator, make_triangle
from ..core.generator import Tree
from ..render.sinks import render_png

OUTPUT_EXTENSIONS = {".npz", ".ply", ".las", ".laz", ".png"}


def build_origin(cfg: ScenarioConfig) -> Point:
    tree_cfg = cfg.tree
    if tree_cfg.origin_lonlat is not None:
        lon, lat = tree_cfg.origin_lonlat
        return lonlat_to_web_mercator(lon, lat)
    return Point(*tree_cfg.origin)


def build_palette(cfg: ScenarioConfig) -> DecorationPalette:
    deco = cfg.decoration
    if deco.palette == "random":
        return RandomPalette()
    if deco.palette == "fixed":
        return FixedPalette(deco.color)
    raise ValueError(f"Unsupported palette: {deco.palette}")


def build_shapes(cfg: ScenarioConfig) -> List[np.ndarray]:
    """Polylines for the configured shapes; triangles come back closed."""
    shapes: List[np.ndarray] = []
    for shape in cfg.shapes:
        if isinstance(shape, TriangleShapeConfig):
            corners = make_triangle(Point(*shape.start), shape.size, shape.angle_deg)
            shapes.append(np.array([p.as_tuple() for p in corners + corners[:1]], dtype=np.float64))
        elif isinstance(shape, ArcShapeConfig):
            if shape.center_lonlat is not None:
                center = lonlat_to_web_mercator(*shape.center_lonlat)
            else:
                center = Point(*shape.center)
            shapes.append(
                circular_arc(
                    center,
                    shape.radius,
                    math.radians(shape.start_deg),
                    math.radians(shape.sweep_deg),
                    shape.num_points,
                )
            )
        else:
            raise ValueError(f"Unsupported shape: {shape!r}")
    return shapes


class PngWriter:
    """Adapts the matplotlib preview to the writer interface (one tree per file)."""

    def __init__(self, path: str, shapes: Optional[Sequence[np.ndarray]] = None) -> None:
        self.path = path
        self.shapes = list(shapes or [])
        self._tree: Optional[Tree] = None

    def write_tree(self, tree: Tree) -> None:
        self._tree = tree

    def close(self) -> None:
        if self._tree is None:
            return
        render_png(self._tree, self.path, title=Path(self.path).stem.replace("_", " "), shapes=self.shapes)
        self._tree = None


def build_writer(cfg: ScenarioConfig):
    out_cfg = cfg.output
    format_lower = out_cfg.format.lower()
    if format_lower in {"las", "laz"}:
        compress = out_cfg.compress
        if compress is None:
            compress = format_lower == "laz"
        return LasWriter(str(out_cfg.path), compress=compress)
    if format_lower == "npz":
        return NpzWriter(str(out_cfg.path))
    if format_lower == "ply":
        return PlyWriter(str(out_cfg.path))
    if format_lower == "png":
        return PngWriter(str(out_cfg.path), shapes=build_shapes(cfg))
    raise ValueError(f"Unsupported output format: {out_cfg.format}")


def apply_output_override(cfg: ScenarioConfig, output: Path) -> None:
    out = Path(output).resolve()
    ext = out.suffix.lower()
    if ext not in OUTPUT_EXTENSIONS:
        raise ValueError(f"Unsupported output extension '{ext}'")
    cfg.output.path = out
    cfg.output.format = ext.lstrip(".")
    if ext == ".las":
        cfg.output.compress = False
    elif ext == ".laz":
        cfg.output.compress = True

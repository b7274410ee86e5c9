from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence, Tuple, Union

import matplotlib
import matplotlib.pyplot as plt
import numpy as np

from ..core.decoration import LINE_GREEN
from ..core.generator import Tree
from ..core.geometry import Point, Segment
from ..core.utils import get_logger

matplotlib.use("Agg")

_log = get_logger()

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class LineStyle:
    color: RGB = LINE_GREEN
    width: float = 5.0


@dataclass(frozen=True)
class MarkerStyle:
    color: RGB
    size: float = 15.0


class GraphicsSink(Protocol):
    def draw_line(self, segment: Segment, style: LineStyle) -> None: ...

    def draw_point(self, point: Point, style: MarkerStyle) -> None: ...


def render(
    tree: Tree,
    sink: GraphicsSink,
    line_style: Optional[LineStyle] = None,
    marker_size: float = 15.0,
) -> int:
    """Feed every branch of ``tree`` to ``sink``.

    Each branch produces one ``draw_line`` followed by one ``draw_point`` at
    its tip, coloured with the tree's decoration colour for that branch.
    Returns the number of sink calls made.
    """
    line_style = line_style or LineStyle()
    calls = 0
    for seg, rgb in zip(tree.segments, tree.rgb):
        sink.draw_line(seg, line_style)
        sink.draw_point(seg.end, MarkerStyle(color=(int(rgb[0]), int(rgb[1]), int(rgb[2])), size=marker_size))
        calls += 2
    return calls


@dataclass
class RecordingSink:
    """Keeps every draw call as ``("line" | "point", geometry, style)``."""

    calls: List[Tuple[str, Any, Any]] = field(default_factory=list)

    def draw_line(self, segment: Segment, style: LineStyle) -> None:
        self.calls.append(("line", segment, style))

    def draw_point(self, point: Point, style: MarkerStyle) -> None:
        self.calls.append(("point", point, style))

    @property
    def lines(self) -> List[Segment]:
        return [geom for kind, geom, _ in self.calls if kind == "line"]

    @property
    def points(self) -> List[Point]:
        return [geom for kind, geom, _ in self.calls if kind == "point"]


class MatplotlibSink:
    """Draws onto an offscreen matplotlib figure."""

    def __init__(self, title: Optional[str] = None, figsize: Tuple[float, float] = (8, 7), dpi: int = 100) -> None:
        self.fig = plt.figure(figsize=figsize, dpi=dpi)
        self.ax = self.fig.add_subplot(1, 1, 1)
        self.ax.set_aspect("equal", adjustable="datalim")
        self.ax.set_axis_off()
        if title:
            self.ax.set_title(title)
        self._points: List[Tuple[float, float]] = []

    @staticmethod
    def _color(rgb: RGB) -> np.ndarray:
        return np.asarray(rgb, dtype=np.float64) / 255.0

    def draw_line(self, segment: Segment, style: LineStyle) -> None:
        self.ax.plot(
            [segment.start.x, segment.end.x],
            [segment.start.y, segment.end.y],
            color=self._color(style.color),
            linewidth=style.width,
            solid_capstyle="round",
            zorder=1,
        )

    def draw_point(self, point: Point, style: MarkerStyle) -> None:
        # scatter sizes are areas in points^2
        self.ax.scatter([point.x], [point.y], s=style.size ** 2 / 4.0, color=[self._color(style.color)], zorder=2)
        self._points.append(point.as_tuple())

    def save(self, path: Union[str, Path]) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        self.ax.autoscale_view()
        self.fig.tight_layout()
        self.fig.savefig(out)
        plt.close(self.fig)
        _log.info("Saved %s (%d markers)", out.name, len(self._points))
        return out


def render_shapes(
    shapes: Sequence[np.ndarray],
    sink: GraphicsSink,
    style: Optional[LineStyle] = None,
) -> int:
    """Draw each ``(N, 2)`` polyline as consecutive ``draw_line`` calls."""
    style = style or LineStyle(width=2.0)
    calls = 0
    for poly in shapes:
        pts = [Point(float(x), float(y)) for x, y in np.asarray(poly, dtype=np.float64)]
        for a, b in zip(pts[:-1], pts[1:]):
            sink.draw_line(Segment(a, b), style)
            calls += 1
    return calls


def render_png(
    tree: Tree,
    path: Union[str, Path],
    title: Optional[str] = None,
    shapes: Optional[Sequence[np.ndarray]] = None,
) -> Path:
    # marker and line sizes shrink for dense trees
    n = max(len(tree), 1)
    width = float(np.clip(40.0 / np.sqrt(n), 0.5, 5.0))
    marker = float(np.clip(120.0 / np.sqrt(n), 2.0, 15.0))
    sink = MatplotlibSink(title=title)
    if shapes:
        render_shapes(shapes, sink)
    render(tree, sink, LineStyle(width=width), marker_size=marker)
    return sink.save(path)

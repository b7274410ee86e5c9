import numpy as np

from arbor.core.decoration import LINE_GREEN, FixedPalette
from arbor.core.generator import grow
from arbor.core.geometry import Point, Segment, circular_arc
from arbor.render import LineStyle, MarkerStyle, MatplotlibSink, RecordingSink, render, render_png, render_shapes


def test_render_emits_line_then_point_per_branch() -> None:
    tree = grow(Point(0.0, 0.0), 100.0, 2, seed=4)
    sink = RecordingSink()
    calls = render(tree, sink)

    assert calls == 2 * len(tree)
    kinds = [kind for kind, _, _ in sink.calls]
    assert kinds == ["line", "point"] * len(tree)
    assert sink.lines == tree.segments
    assert sink.points == tree.markers


def test_render_uses_branch_colors_and_line_style() -> None:
    tree = grow(Point(0.0, 0.0), 10.0, 1, palette=FixedPalette((9, 8, 7)))
    sink = RecordingSink()
    render(tree, sink, LineStyle(width=2.0), marker_size=4.0)

    line_styles = [style for kind, _, style in sink.calls if kind == "line"]
    marker_styles = [style for kind, _, style in sink.calls if kind == "point"]
    assert all(style == LineStyle(color=LINE_GREEN, width=2.0) for style in line_styles)
    assert all(style == MarkerStyle(color=(9, 8, 7), size=4.0) for style in marker_styles)


def test_matplotlib_sink_writes_png(tmp_path) -> None:
    tree = grow(Point(0.0, 0.0), 100.0, 3, seed=1)
    sink = MatplotlibSink(title="test")
    render(tree, sink)
    out = sink.save(tmp_path / "tree.png")
    with open(out, "rb") as f:
        assert f.read(8) == b"\x89PNG\r\n\x1a\n"


def test_render_png_helper(tmp_path) -> None:
    tree = grow(Point(0.0, 0.0), 1000.0, 6, seed=2)
    out = render_png(tree, tmp_path / "nested" / "preview.png")
    assert out.exists()


def test_render_shapes_draws_consecutive_edges() -> None:
    square = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]])
    line = np.array([[5.0, 5.0], [6.0, 7.0]])
    sink = RecordingSink()

    calls = render_shapes([square, line], sink)

    assert calls == 4
    assert sink.lines[0] == Segment(Point(0.0, 0.0), Point(1.0, 0.0))
    assert sink.lines[-1] == Segment(Point(5.0, 5.0), Point(6.0, 7.0))
    assert sink.points == []
    assert all(style == LineStyle(width=2.0) for _, _, style in sink.calls)


def test_render_png_with_shapes(tmp_path) -> None:
    tree = grow(Point(0.0, 0.0), 100.0, 2, seed=2)
    arc = circular_arc(Point(0.0, 100.0), 50.0, 0.0, 3.0, num_points=8)
    out = render_png(tree, tmp_path / "shapes.png", shapes=[arc])
    with open(out, "rb") as f:
        assert f.read(4) == b"\x89PNG"

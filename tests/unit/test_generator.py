import math

import numpy as np
import pytest

from arbor.core.decoration import FixedPalette
from arbor.core.generator import (
    MAX_DEPTH,
    BranchGenerator,
    TreeParameterError,
    generate,
    grow,
    iter_branches,
    segment_count,
)
from arbor.core.geometry import Point, point_at_angle


@pytest.mark.parametrize("max_depth", [0, 1, 2, 5, 8])
def test_segment_count_matches_binary_tree(max_depth: int) -> None:
    segments = generate(Point(0.0, 0.0), 100.0, max_depth, 0.0, 0.75)
    assert len(segments) == segment_count(max_depth) == 2 ** (max_depth + 1) - 1


def test_depth_zero_is_trunk_only() -> None:
    origin = Point(3.0, 4.0)
    segments = generate(origin, 50.0, 0, 30.0, 0.5)
    assert len(segments) == 1
    assert segments[0].start == origin
    assert segments[0].end == point_at_angle(origin, 50.0, 30.0)


def test_depth_one_scenario() -> None:
    trunk, left, right = generate(Point(0.0, 0.0), 1000.0, 1, 0.0, 0.75)

    assert trunk.start == Point(0.0, 0.0)
    assert trunk.end.x == pytest.approx(0.0, abs=1e-9)
    assert trunk.end.y == pytest.approx(1000.0, rel=1e-6)

    half = 750.0 * math.sqrt(0.5)
    assert left.start == trunk.end
    assert left.end.x == pytest.approx(-half, rel=1e-6)
    assert left.end.y == pytest.approx(1000.0 + half, rel=1e-6)

    assert right.start == trunk.end
    assert right.end.x == pytest.approx(750.0 * math.sin(math.radians(35.0)), rel=1e-6)
    assert right.end.y == pytest.approx(1000.0 + 750.0 * math.cos(math.radians(35.0)), rel=1e-6)
    assert right.end.x == pytest.approx(430.18, abs=0.01)
    assert right.end.y == pytest.approx(1614.36, abs=0.01)


def test_turns_are_asymmetric() -> None:
    branches = list(iter_branches(Point(0.0, 0.0), 10.0, 1, 0.0, 0.75))
    assert [b.angle_deg for b in branches] == [0.0, -45.0, 35.0]


def test_connectivity_every_start_is_origin_or_earlier_end() -> None:
    origin = Point(-12.5, 40.0)
    segments = generate(origin, 200.0, 6, 17.0, 0.7)
    seen_ends = set()
    for seg in segments:
        assert seg.start == origin or seg.start in seen_ends
        seen_ends.add(seg.end)


def test_length_decays_by_coefficient_per_depth() -> None:
    coefficient = 0.6
    branches = list(iter_branches(Point(0.0, 0.0), 100.0, 4, 0.0, coefficient))
    by_depth = {}
    for b in branches:
        by_depth.setdefault(b.depth, set()).add(round(b.length, 9))
        assert b.segment.length == pytest.approx(b.length)
    for depth in range(4):
        (parent,) = by_depth[depth]
        (child,) = by_depth[depth + 1]
        assert child == pytest.approx(parent * coefficient)


def test_preorder_traversal_left_before_right() -> None:
    branches = list(iter_branches(Point(0.0, 0.0), 8.0, 2, 0.0, 0.5))
    assert [b.depth for b in branches] == [0, 1, 2, 2, 1, 2, 2]
    assert [b.angle_deg for b in branches] == [0.0, -45.0, -90.0, -10.0, 35.0, -10.0, 70.0]


def test_geometry_is_deterministic() -> None:
    a = grow(Point(1.0, 1.0), 300.0, 5, 10.0, 0.8, seed=1)
    b = grow(Point(1.0, 1.0), 300.0, 5, 10.0, 0.8, seed=2)
    assert a.segments == b.segments
    np.testing.assert_array_equal(a.depths, b.depths)


def test_decoration_colors_reproducible_with_seed() -> None:
    a = grow(Point(0.0, 0.0), 10.0, 4, seed=42)
    b = grow(Point(0.0, 0.0), 10.0, 4, seed=42)
    assert a.rgb.shape == (len(a), 3)
    np.testing.assert_array_equal(a.rgb, b.rgb)


def test_grow_accepts_explicit_generator_and_palette() -> None:
    rng = np.random.default_rng(5)
    tree = grow(Point(0.0, 0.0), 10.0, 2, palette=FixedPalette((1, 2, 3)), rng=rng)
    assert np.all(tree.rgb == np.array([1, 2, 3], dtype=np.uint8))
    assert tree.max_depth == 2
    assert tree.branch_coefficient == pytest.approx(0.75)


def test_deep_tree_does_not_recurse() -> None:
    segments = BranchGenerator(0.9).generate(Point(0.0, 0.0), 1.0, 14)
    assert len(segments) == segment_count(14)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_depth": -1},
        {"branch_coefficient": 0.0},
        {"branch_coefficient": -0.5},
        {"branch_coefficient": 1.0},
        {"branch_coefficient": float("nan")},
        {"trunk_length": 0.0},
        {"trunk_length": -5.0},
        {"trunk_length": float("inf")},
        {"base_angle": float("nan")},
        {"origin": Point(float("inf"), 0.0)},
        {"max_depth": MAX_DEPTH + 1},
        {"max_depth": 2.5},
        {"max_depth": True},
    ],
)
def test_invalid_arguments_rejected_before_any_output(kwargs) -> None:
    args = {
        "origin": Point(0.0, 0.0),
        "trunk_length": 100.0,
        "max_depth": 3,
        "base_angle": 0.0,
        "branch_coefficient": 0.75,
    }
    args.update(kwargs)
    emitted = []
    with pytest.raises(TreeParameterError):
        for b in iter_branches(**args):
            emitted.append(b)
    assert emitted == []


def test_parameter_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        generate(Point(0.0, 0.0), 1.0, -1)


def test_iter_branches_validates_eagerly() -> None:
    with pytest.raises(TreeParameterError):
        iter_branches(Point(0.0, 0.0), 1.0, 2, 0.0, 0.0)

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, List, Optional
import numbers
import numpy as np

from .decoration import DecorationPalette, RandomPalette
from .geometry import Point, Segment, point_at_angle
from .utils import get_logger, is_finite

_log = get_logger()

# 2 ** 21 - 1 segments at the cap
MAX_DEPTH = 20
DEFAULT_BRANCH_COEFFICIENT = 0.75


class TreeParameterError(ValueError):
    """Raised when tree generation arguments are out of range."""


@dataclass(frozen=True)
class Branch:
    segment: Segment
    depth: int
    length: float
    angle_deg: float


@dataclass(eq=False)
class Tree:
    """Result of one generation run.

    ``segments`` are in generation order (trunk, then left subtree, then
    right subtree). ``markers`` holds one decoration point per branch tip,
    i.e. ``markers[i] == segments[i].end``; ``rgb`` is (N, 3) uint8.
    """
    segments: List[Segment]
    depths: np.ndarray
    angles_deg: np.ndarray
    rgb: np.ndarray
    origin: Point
    trunk_length: float
    max_depth: int
    base_angle_deg: float
    branch_coefficient: float
    markers: List[Point] = field(init=False)

    def __post_init__(self) -> None:
        n = len(self.segments)
        self.depths = np.asarray(self.depths, dtype=np.int32)
        self.angles_deg = np.asarray(self.angles_deg, dtype=np.float64)
        self.rgb = np.asarray(self.rgb, dtype=np.uint8).reshape(-1, 3)
        for name, arr in (("depths", self.depths), ("angles_deg", self.angles_deg), ("rgb", self.rgb)):
            if len(arr) != n:
                raise ValueError(f"'{name}' length {len(arr)} != {n}")
        self.markers = [s.end for s in self.segments]

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def starts(self) -> np.ndarray:
        return np.array([s.start.as_tuple() for s in self.segments], dtype=np.float64).reshape(-1, 2)

    @property
    def ends(self) -> np.ndarray:
        return np.array([s.end.as_tuple() for s in self.segments], dtype=np.float64).reshape(-1, 2)


def segment_count(max_depth: int) -> int:
    return 2 ** (max_depth + 1) - 1


def validate_parameters(
    origin: Point,
    trunk_length: float,
    max_depth: int,
    base_angle: float,
    branch_coefficient: float,
) -> None:
    if isinstance(max_depth, bool) or not isinstance(max_depth, numbers.Integral):
        raise TreeParameterError(f"max_depth must be an integer, got {max_depth!r}.")
    if max_depth < 0:
        raise TreeParameterError(f"max_depth must be non-negative, got {max_depth}.")
    if max_depth > MAX_DEPTH:
        raise TreeParameterError(
            f"max_depth {max_depth} exceeds the limit of {MAX_DEPTH} "
            f"({segment_count(MAX_DEPTH)} segments)."
        )
    if not is_finite(origin.x, origin.y):
        raise TreeParameterError(f"origin must be finite, got ({origin.x}, {origin.y}).")
    if not is_finite(trunk_length) or trunk_length <= 0.0:
        raise TreeParameterError(f"trunk_length must be positive and finite, got {trunk_length}.")
    if not is_finite(base_angle):
        raise TreeParameterError(f"base_angle must be finite, got {base_angle}.")
    if not is_finite(branch_coefficient) or not (0.0 < branch_coefficient < 1.0):
        raise TreeParameterError(f"branch_coefficient must lie in (0, 1), got {branch_coefficient}.")


class BranchGenerator:
    """Binary fractal tree walker.

    Each tip spawns a left child turned ``left_turn_deg`` anticlockwise and a
    right child turned ``right_turn_deg`` clockwise, both shortened by
    ``branch_coefficient``. The turns are deliberately unequal (45 vs 35).
    """

    def __init__(
        self,
        branch_coefficient: float = DEFAULT_BRANCH_COEFFICIENT,
        left_turn_deg: float = 45.0,
        right_turn_deg: float = 35.0,
        palette: Optional[DecorationPalette] = None,
    ) -> None:
        self.branch_coefficient = float(branch_coefficient)
        self.left_turn_deg = float(left_turn_deg)
        self.right_turn_deg = float(right_turn_deg)
        self.palette = palette or RandomPalette()

    def iter_branches(self, origin: Point, trunk_length: float, max_depth: int, base_angle: float = 0.0) -> Iterator[Branch]:
        validate_parameters(origin, trunk_length, max_depth, base_angle, self.branch_coefficient)
        return self._walk(origin, float(trunk_length), int(max_depth), float(base_angle))

    def _walk(self, origin: Point, trunk_length: float, max_depth: int, base_angle: float) -> Iterator[Branch]:
        stack = [(origin, trunk_length, base_angle, 0)]
        while stack:
            pt, length, angle, depth = stack.pop()
            end = point_at_angle(pt, length, angle)
            yield Branch(Segment(pt, end), depth, length, angle)
            if depth < max_depth:
                child = length * self.branch_coefficient
                # right pushed first so the left subtree is walked first
                stack.append((end, child, angle + self.right_turn_deg, depth + 1))
                stack.append((end, child, angle - self.left_turn_deg, depth + 1))

    def generate(self, origin: Point, trunk_length: float, max_depth: int, base_angle: float = 0.0) -> List[Segment]:
        return [b.segment for b in self.iter_branches(origin, trunk_length, max_depth, base_angle)]

    def grow(
        self,
        origin: Point,
        trunk_length: float,
        max_depth: int,
        base_angle: float = 0.0,
        *,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ) -> Tree:
        branches = list(self.iter_branches(origin, trunk_length, max_depth, base_angle))
        if rng is None:
            rng = np.random.default_rng(seed)
        rgb = self.palette.colors(len(branches), rng)
        _log.debug("Grew tree with %d segments (max_depth=%d)", len(branches), max_depth)
        return Tree(
            segments=[b.segment for b in branches],
            depths=np.array([b.depth for b in branches], dtype=np.int32),
            angles_deg=np.array([b.angle_deg for b in branches], dtype=np.float64),
            rgb=rgb,
            origin=origin,
            trunk_length=float(trunk_length),
            max_depth=int(max_depth),
            base_angle_deg=float(base_angle),
            branch_coefficient=self.branch_coefficient,
        )


def iter_branches(
    origin: Point,
    trunk_length: float,
    max_depth: int,
    base_angle: float = 0.0,
    branch_coefficient: float = DEFAULT_BRANCH_COEFFICIENT,
) -> Iterator[Branch]:
    return BranchGenerator(branch_coefficient).iter_branches(origin, trunk_length, max_depth, base_angle)


def generate(
    origin: Point,
    trunk_length: float,
    max_depth: int,
    base_angle: float = 0.0,
    branch_coefficient: float = DEFAULT_BRANCH_COEFFICIENT,
) -> List[Segment]:
    """Eagerly compute every branch segment of a fractal tree."""
    return BranchGenerator(branch_coefficient).generate(origin, trunk_length, max_depth, base_angle)


def grow(
    origin: Point,
    trunk_length: float,
    max_depth: int,
    base_angle: float = 0.0,
    branch_coefficient: float = DEFAULT_BRANCH_COEFFICIENT,
    *,
    palette: Optional[DecorationPalette] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> Tree:
    gen = BranchGenerator(branch_coefficient, palette=palette)
    return gen.grow(origin, trunk_length, max_depth, base_angle, rng=rng, seed=seed)

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

LINE_GREEN = (0, 255, 0)
MARKER_RED = (255, 0, 0)


@dataclass
class DecorationPalette:
    """Base class for branch-tip marker colours."""

    def colors(self, n: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        raise NotImplementedError


class RandomPalette(DecorationPalette):
    """Independent uniform RGB per marker, each channel in [0, 255)."""

    def colors(self, n: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        if n < 0:
            raise ValueError("n must be non-negative.")
        gen = rng if rng is not None else np.random.default_rng()
        return gen.integers(0, 255, size=(n, 3)).astype(np.uint8)


class FixedPalette(DecorationPalette):
    """Every marker gets the same colour."""

    def __init__(self, color: tuple[int, int, int] = MARKER_RED) -> None:
        if len(color) != 3 or any(c < 0 or c > 255 for c in color):
            raise ValueError("color must be three channels within [0, 255].")
        self.color = tuple(int(c) for c in color)

    def colors(self, n: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        if n < 0:
            raise ValueError("n must be non-negative.")
        return np.tile(np.asarray(self.color, dtype=np.uint8), (n, 1))

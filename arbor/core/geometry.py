from __future__ import annotations
from dataclasses import dataclass
from typing import List
import math
import numpy as np

from .utils import is_finite

# Spherical Web Mercator (EPSG:3857)
EARTH_RADIUS_M = 6378137.0
MAX_MERCATOR_LAT = 85.0511287798066


@dataclass(frozen=True)
class Point:
    """Planar (x, y) coordinate."""
    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Segment:
    start: Point
    end: Point

    @property
    def length(self) -> float:
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)


def point_at_angle(start: Point, length: float, angle_deg: float) -> Point:
    """Project ``length`` units from ``start`` along a bearing.

    Bearings are measured in degrees clockwise from +y, so 0 points "up"
    and 90 points along +x.
    """
    rad = math.radians(angle_deg)
    return Point(start.x + length * math.sin(rad), start.y + length * math.cos(rad))


def make_triangle(start: Point, size: float, angle_deg: float) -> List[Point]:
    """Equilateral triangle whose first edge leaves ``start`` at ``angle_deg``."""
    p2 = point_at_angle(start, size, angle_deg)
    p3 = point_at_angle(p2, size, angle_deg + 120.0)
    return [start, p2, p3]


def circular_arc(
    center: Point,
    radius: float,
    start_rad: float,
    sweep_rad: float,
    num_points: int = 64,
) -> np.ndarray:
    """Sample a circular arc as an (N, 2) array.

    Angles follow the mathematical convention (counter-clockwise from +x);
    a negative sweep walks clockwise.
    """
    if radius <= 0.0:
        raise ValueError("radius must be positive.")
    if num_points < 2:
        raise ValueError("num_points must be at least 2.")
    theta = start_rad + np.linspace(0.0, sweep_rad, num_points, dtype=np.float64)
    return np.column_stack([center.x + radius * np.cos(theta), center.y + radius * np.sin(theta)])


def lonlat_to_web_mercator(lon: float, lat: float) -> Point:
    if not is_finite(lon, lat):
        raise ValueError("Longitude/latitude must be finite.")
    if abs(lat) > MAX_MERCATOR_LAT:
        raise ValueError(f"Latitude {lat} is outside the Web Mercator range (+/-{MAX_MERCATOR_LAT}).")
    x = EARTH_RADIUS_M * math.radians(lon)
    y = EARTH_RADIUS_M * math.log(math.tan(math.pi / 4.0 + math.radians(lat) / 2.0))
    return Point(x, y)

"""
Queries over an assembled map.
"""

from __future__ import annotations

from itertools import combinations
from typing import Collection, Iterable

from ..geometry.vectors import Point, manhattan_distance


def point_count(points: Collection[Point]) -> int:
    """Number of unique points in the map."""
    return len(set(points))


def max_sensor_distance(positions: Iterable[Point]) -> int:
    """
    Largest Manhattan distance over all unordered pairs of sensor positions.

    A single sensor has nothing to be apart from, so the result is 0.
    """
    pts = list(positions)
    return max((manhattan_distance(a, b) for a, b in combinations(pts, 2)), default=0)

"""
Integer 3-vector helpers.

Points are plain tuples of Python ints so they hash, compare and order by
coordinate tuple and can live in sets without any rounding.
"""

from __future__ import annotations

from typing import Iterable, Tuple

Point = Tuple[int, int, int]

ORIGIN: Point = (0, 0, 0)


def as_point(values: Iterable) -> Point:
    """Coerce an iterable of three integers into a Point.

    Raises:
        ValueError: If there are not exactly three components or a component
            is not an integer (bools and floats are rejected).
    """
    coords = tuple(values)
    if len(coords) != 3:
        raise ValueError(f"Expected 3 coordinates, got {len(coords)}: {coords!r}")
    for c in coords:
        # numpy integer scalars expose __index__ as well
        if isinstance(c, bool) or not hasattr(c, "__index__"):
            raise ValueError(f"Coordinates must be integers, got {coords!r}")
    return (int(coords[0]), int(coords[1]), int(coords[2]))


def add(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def subtract(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def manhattan_distance(a: Point, b: Point) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) + abs(a[2] - b[2])
